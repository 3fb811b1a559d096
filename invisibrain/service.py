# invisibrain/service.py - ACTIVELY USED
# Public facade: every assistant feature goes through here

"""
Assistant Service module.

Coordinates the conversation history, prompt construction and the request
queue. Each feature reads the history, builds a prompt, submits it through
the queue and, for some features, records the result back into history.
Backend errors reach the caller unchanged.
"""

import json
import time
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .backend import Backend, GeminiBackend
from .exceptions import NoContentError, ServiceNotConfiguredError
from .history import ConversationHistory
from .prompts import build_prompt
from .rate_limiter import RateGate
from .request_queue import ImagePart, RequestQueue
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

NO_NOTES_MESSAGE = "No conversation history to summarize."
NO_EMAIL_MESSAGE = "No conversation history to create email from."
NO_INSIGHTS_MESSAGE = "Not enough conversation data for insights."


class AssistantService:
    """
    Main entry point for assistant features.

    Owns the rate gate, the request queue and the conversation history.
    Construct one per process and share it with every caller.
    """

    def __init__(
        self,
        backend: Backend,
        config: Optional[Dict[str, Any]] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the assistant service.

        Args:
            backend: Object exposing an async invoke(payload) -> str
            config: Configuration with optional "api", "rate_limit", "retry"
                and "history" sections
            sleep: Coroutine used for rate-limit waits and backoff delays
        """
        config = config or {}
        rate_config = config.get("rate_limit", {})
        retry_config = config.get("retry", {})
        history_config = config.get("history", {})
        api_config = config.get("api", {})

        self.backend = backend
        self.rate_gate = RateGate(
            min_interval_ms=rate_config.get("min_interval_ms", 6000),
            max_daily_tokens=rate_config.get("max_daily_tokens", 4000000),
            sleep=sleep,
        )
        self.retry_policy = RetryPolicy(
            max_retries=retry_config.get("max_retries", 3),
            base_delay_ms=retry_config.get("base_delay_ms", 2000),
        )
        self.queue = RequestQueue(
            backend.invoke,
            rate_gate=self.rate_gate,
            retry_policy=self.retry_policy,
            request_timeout=api_config.get("request_timeout"),
            sleep=sleep,
        )
        self.history = ConversationHistory(max_length=history_config.get("max_history_length", 20))

    @classmethod
    def from_config(cls, config: Dict[str, Any], api_key: Optional[str]) -> "AssistantService":
        """
        Build a service backed by the Gemini API.

        Raises:
            ServiceNotConfiguredError: If no API key is available
        """
        if not api_key:
            raise ServiceNotConfiguredError(
                "No API key configured. Please add GEMINI_API_KEY to your .env file."
            )
        return cls(GeminiBackend(api_key=api_key, config=config.get("api", {})), config=config)

    async def analyze_visual(self, images: List[ImagePart], extra_context: str = "") -> str:
        """
        Analyze one or more screenshots with the conversation as context.

        Args:
            images: Captured images, in the order they should be shown
            extra_context: Optional situational text

        Returns:
            The analysis text

        Raises:
            NoContentError: If no images are given
        """
        if not images:
            raise NoContentError("No screenshots to analyze. Take a screenshot first.")

        prompt = build_prompt(
            "screenshot_analysis",
            self.history.as_context_string(),
            additional_context=extra_context,
        )
        logger.info(f"Analyzing {len(images)} screenshot(s)")
        result = await self.queue.submit_multimodal([prompt, *images])
        self.history.append("assistant", f"Screenshot analysis: {result}")
        return result

    async def suggest_reply(self, situation_context: str) -> str:
        """Suggest what to say next in the given situation."""
        prompt = build_prompt("suggest_response", self.history.as_context_string(), situation=situation_context)
        return await self.queue.submit_text(prompt)

    async def summarize_as_notes(self) -> str:
        """Turn the conversation into meeting notes."""
        if not self.history:
            return NO_NOTES_MESSAGE
        return await self.queue.submit_text(build_prompt("meeting_notes", self.history.as_context_string()))

    async def draft_follow_up(self) -> str:
        """Draft a follow-up email from the conversation."""
        if not self.history:
            return NO_EMAIL_MESSAGE
        return await self.queue.submit_text(build_prompt("follow_up_email", self.history.as_context_string()))

    async def get_insights(self) -> str:
        if not self.history:
            return NO_INSIGHTS_MESSAGE
        return await self.queue.submit_text(build_prompt("insights", self.history.as_context_string()))

    async def answer(self, question: str) -> str:
        """
        Answer a question using the prior conversation as context.

        The question and the answer are both recorded once the backend call
        succeeds; a failed call leaves the history untouched.

        Args:
            question: The question to answer

        Returns:
            The answer text
        """
        prompt = build_prompt("answer_question", self.history.as_context_string(), question=question)
        result = await self.queue.submit_text(prompt)
        self.history.append("user", question)
        self.history.append("assistant", result)
        return result

    def add_transcript(self, text: str) -> bool:
        """
        Record a finished utterance from speech input.

        Returns:
            True if the text was recorded, False if it was blank
        """
        text = text.strip()
        if not text:
            return False
        self.history.append("user", text)
        return True

    def clear_history(self) -> None:
        logger.info("Clearing conversation history")
        self.history.clear()

    def get_history(self) -> List[Dict[str, Any]]:
        return self.history.to_list()

    def get_quota_status(self) -> Dict[str, Any]:
        """
        Get the current quota and queue status.

        Returns:
            Dictionary with quota information
        """
        status = self.rate_gate.get_quota_status()
        status["queue"] = {
            "state": self.queue.state.value,
            "pending": len(self.queue),
        }
        status["model"] = getattr(self.backend, "model_name", None)
        return status

    def get_stats(self) -> Dict[str, Any]:
        return {
            "api_calls": self.queue.api_calls,
            "retries": self.queue.retries,
            "completed_requests": self.queue.completed_requests,
            "failed_requests": self.queue.failed_requests,
            "history_length": len(self.history),
            "daily_tokens_used": self.rate_gate.daily_tokens_used,
        }

    def export_session(self, file_path: str) -> bool:
        """
        Export the conversation history to a JSON file.

        Args:
            file_path: Path to save the session

        Returns:
            bool: Success status
        """
        try:
            session_data = {
                "history": self.history.to_list(),
                "metadata": {
                    "entries": len(self.history),
                    "exported_at": time.time(),
                },
            }
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(session_data, f, indent=2)
            logger.info(f"Session exported to {file_path}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Failed to export session: {e}")
            return False

    def import_session(self, file_path: str) -> bool:
        """
        Import a previously exported conversation history.

        Args:
            file_path: Path to the session file

        Returns:
            bool: Success status
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                session_data = json.load(f)
            self.history.load(session_data["history"])
            logger.info(f"Session imported from {file_path} ({len(self.history)} entries)")
            return True
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to import session: {e}")
            return False

    async def aclose(self) -> None:
        await self.queue.aclose()
