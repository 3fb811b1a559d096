# invisibrain/cli.py - ACTIVELY USED
# Command-line shell around the assistant service

"""
Command Line Interface for the Invisibrain assistant.

This module provides a CLI for analyzing screenshots, asking questions and
generating notes, emails and insights from the conversation.
"""

import os
import sys
import json
import time
import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, Optional

import click
import colorama
import yaml
from colorama import Fore, Style
from tqdm import tqdm

from .exceptions import (
    AssistantError,
    BackendError,
    NoContentError,
    QuotaExceededError,
    ServiceNotConfiguredError,
    TransientBackendError,
)
from .service import AssistantService
from .speech import TranscriptFeed
from .utils import get_api_key, load_config, load_image, setup_logging

# Logger for CLI
logger = logging.getLogger(__name__)


class Context:
    def __init__(self):
        self.service: Optional[AssistantService] = None
        self.config_path = "config.yaml"
        self.api_key: Optional[str] = None
        self.session_file: Optional[str] = None
        self.verbose = False
        self.output_format = "text"
        self.feed: Optional[TranscriptFeed] = None
        self.loop: Optional[asyncio.AbstractEventLoop] = None


pass_context = click.make_pass_decorator(Context, ensure=True)


def build_service(config: Dict[str, Any], api_key: Optional[str]) -> AssistantService:
    return AssistantService.from_config(config, api_key)


def describe_error(error: Exception) -> str:
    """Turn a failure into a message for the user."""
    message = str(error)
    if isinstance(error, (NoContentError, ServiceNotConfiguredError)):
        return message
    if isinstance(error, QuotaExceededError):
        return "API quota exceeded. Please try again later."
    if isinstance(error, BackendError) and error.status_code in (401, 403):
        return "Invalid API key. Please check your GEMINI_API_KEY."
    if "API_KEY" in message:
        return "Invalid API key. Please check your GEMINI_API_KEY."
    if isinstance(error, TransientBackendError):
        return f"The AI service is busy ({error.status_code or 'rate limited'}). Please try again later."
    if "network" in message.lower() or "fetch" in message.lower():
        return "Network error. Please check your internet connection."
    if "model" in message.lower():
        return "AI model error. Please try a different model."
    return f"Request failed: {message}"


@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--api-key', help='Gemini API key (or set GEMINI_API_KEY environment variable)')
@click.option('--session', '-s', help='Session file to load history from and save it to')
@click.option('--output-format', '-o', type=click.Choice(['text', 'json', 'yaml']),
              default='text', help='Output format')
@click.version_option(package_name='invisibrain')
@pass_context
def cli(ctx, config, verbose, api_key, session, output_format):
    """Invisibrain - screenshot analysis and meeting assistance powered by Gemini."""
    colorama.init()

    ctx.config_path = config or ctx.config_path
    ctx.verbose = verbose
    ctx.api_key = api_key
    ctx.session_file = session
    ctx.output_format = output_format

    setup_logging(verbose)


@cli.command()
@click.argument('images', nargs=-1, type=click.Path())
@click.option('--context', '-x', 'extra_context', default='', help='Additional context for the analysis')
@pass_context
def analyze(ctx, images, extra_context):
    """Analyze one or more screenshots."""
    try:
        parts = [load_image(path) for path in images]
    except OSError as e:
        _fail(str(e))
        return
    _run(ctx, "analysis", lambda service: service.analyze_visual(parts, extra_context))


@cli.command()
@click.option('--question', '-q', required=True, help='Question to answer')
@pass_context
def ask(ctx, question):
    """Ask a question, using the conversation as context."""
    _run(ctx, "answer", lambda service: service.answer(question))


@cli.command()
@click.option('--context', '-x', 'situation', required=True, help='Describe the current situation')
@pass_context
def suggest(ctx, situation):
    """Suggest what to say next."""
    _run(ctx, "suggestions", lambda service: service.suggest_reply(situation))


@cli.command()
@pass_context
def notes(ctx):
    """Generate meeting notes from the conversation."""
    _run(ctx, "notes", lambda service: service.summarize_as_notes())


@cli.command()
@pass_context
def email(ctx):
    """Draft a follow-up email from the conversation."""
    _run(ctx, "email", lambda service: service.draft_follow_up())


@cli.command()
@pass_context
def insights(ctx):
    """Get insights about the conversation."""
    _run(ctx, "insights", lambda service: service.get_insights())


@cli.command()
@click.argument('text')
@pass_context
def transcript(ctx, text):
    """Record an utterance in the conversation history."""
    service = _ensure_service(ctx)
    if service is None:
        return
    if ctx.feed.on_final_text(text):
        _save_session(ctx)
        click.echo(f"{Fore.GREEN}Transcript added.{Style.RESET_ALL}")
    else:
        click.echo(f"{Fore.YELLOW}Nothing to add.{Style.RESET_ALL}")


@cli.command()
@pass_context
def quota(ctx):
    """Show the daily token quota and queue status."""
    service = _ensure_service(ctx)
    if service is None:
        return
    _echo_data(ctx, service.get_quota_status())


@cli.command()
@pass_context
def history(ctx):
    """Show the conversation history."""
    service = _ensure_service(ctx)
    if service is None:
        return
    entries = service.get_history()
    if ctx.output_format != 'text':
        _echo_data(ctx, entries)
        return
    if not entries:
        click.echo("No conversation history.")
    for entry in entries:
        colour = Fore.YELLOW if entry["role"] == "user" else Fore.GREEN
        click.echo(f"{colour}{entry['role']}:{Style.RESET_ALL} {entry['text']}")


@cli.command()
@pass_context
def reset(ctx):
    """Clear the conversation history."""
    service = _ensure_service(ctx)
    if service is None:
        return
    service.clear_history()
    _save_session(ctx)
    click.echo(f"{Fore.GREEN}Conversation history reset.{Style.RESET_ALL}")


@cli.command()
@pass_context
def interactive(ctx):
    """Start interactive mode."""
    service = _ensure_service(ctx)
    if service is None:
        return

    click.echo(f"{Fore.CYAN}Starting interactive mode. Type 'exit' to quit.{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}Commands: reset, notes, email, insights, quota, "
               f"suggest <situation>, analyze <image>..., say <text>{Style.RESET_ALL}")

    # One event loop for the whole session; the SDK's async client is bound to it
    ctx.loop = asyncio.new_event_loop()
    try:
        _interactive_loop(ctx, service)
    finally:
        ctx.loop.run_until_complete(service.aclose())
        ctx.loop.close()
        ctx.loop = None


def _interactive_loop(ctx, service: AssistantService) -> None:
    while True:
        try:
            line = input(f"{Fore.YELLOW}> {Style.RESET_ALL}").strip()
        except (EOFError, KeyboardInterrupt):
            click.echo()
            break
        command, _, rest = line.partition(' ')
        command = command.lower()

        if command in ('exit', 'quit'):
            break
        if not line:
            continue

        if command == 'reset':
            service.clear_history()
            _save_session(ctx)
            click.echo(f"{Fore.GREEN}Conversation history reset.{Style.RESET_ALL}")
        elif command == 'quota':
            _echo_data(ctx, service.get_quota_status())
        elif command == 'notes':
            _run(ctx, "notes", lambda s: s.summarize_as_notes())
        elif command == 'email':
            _run(ctx, "email", lambda s: s.draft_follow_up())
        elif command == 'insights':
            _run(ctx, "insights", lambda s: s.get_insights())
        elif command == 'suggest':
            _run(ctx, "suggestions", lambda s: s.suggest_reply(rest))
        elif command == 'say':
            if ctx.feed.on_final_text(rest):
                _save_session(ctx)
        elif command == 'analyze':
            try:
                parts = [load_image(path) for path in rest.split()]
            except OSError as e:
                _fail(str(e))
                continue
            _run(ctx, "analysis", lambda s: s.analyze_visual(parts))
        else:
            _run(ctx, "answer", lambda s: s.answer(line))


def _ensure_service(ctx) -> Optional[AssistantService]:
    """Initialize the service if needed."""
    if ctx.service is not None:
        return ctx.service

    config = load_config(ctx.config_path)
    try:
        ctx.service = build_service(config, get_api_key(ctx.api_key))
    except ServiceNotConfiguredError as e:
        _fail(str(e))
        return None
    ctx.feed = TranscriptFeed(ctx.service)

    if ctx.session_file:
        if os.path.exists(ctx.session_file):
            ctx.service.import_session(ctx.session_file)
        else:
            logger.info(f"Session file {ctx.session_file} not found, starting fresh")

    return ctx.service


def _save_session(ctx) -> None:
    if ctx.session_file and ctx.service is not None:
        ctx.service.export_session(ctx.session_file)


def _run_coroutine(ctx, coroutine: Coroutine[Any, Any, str]) -> str:
    # Interactive mode keeps one loop open across commands
    if ctx.loop is not None:
        return ctx.loop.run_until_complete(coroutine)
    return asyncio.run(coroutine)


def _run(ctx, label: str, operation: Callable[[AssistantService], Coroutine[Any, Any, str]]) -> None:
    """Run one service operation and display its result."""
    service = _ensure_service(ctx)
    if service is None:
        return

    start_time = time.time()
    with tqdm(total=0, desc="Processing", bar_format="{desc}: {elapsed}s", disable=not sys.stdout.isatty()) as pbar:
        try:
            text = _run_coroutine(ctx, operation(service))
        except AssistantError as e:
            logger.debug(f"{label} failed", exc_info=True)
            _fail(describe_error(e))
            return
        except Exception as e:
            logger.error(f"Unexpected error during {label}: {e}")
            _fail(describe_error(e))
            return
        pbar.set_description(f"Processed in {time.time() - start_time:.2f}s")

    _save_session(ctx)

    if ctx.output_format == 'text':
        click.echo(f"{Fore.GREEN}{label.capitalize()}:{Style.RESET_ALL}")
        click.echo(text)
    else:
        _echo_data(ctx, {label: text, "response_time": time.time() - start_time})


def _echo_data(ctx, data: Any) -> None:
    if ctx.output_format == 'yaml':
        click.echo(yaml.dump(data, sort_keys=False))
    else:
        click.echo(json.dumps(data, indent=2))


def _fail(message: str) -> None:
    click.echo(f"{Fore.RED}{message}{Style.RESET_ALL}", err=True)


if __name__ == '__main__':
    cli()
