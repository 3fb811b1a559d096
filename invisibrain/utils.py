# invisibrain/utils.py - ACTIVELY USED
# Utility functions used across the CLI and the service

"""
Utilities module with helper functions.

This module provides logging setup, configuration loading and image
loading helpers used across the system.
"""

import os
import copy
import base64
import logging
import mimetypes
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .request_queue import ImagePart

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "model": "gemini-2.5-flash-lite",
        "temperature": 0.2,
        "max_output_tokens": 2048,
        "request_timeout": None,
    },
    "rate_limit": {
        "min_interval_ms": 6000,
        "max_daily_tokens": 4000000,
    },
    "retry": {
        "max_retries": 3,
        "base_delay_ms": 2000,
    },
    "history": {
        "max_history_length": 20,
    },
}


def setup_logging(verbose: bool = False) -> None:
    """
    Setup logging configuration.

    Args:
        verbose: Enable verbose logging
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Reduce verbosity of some loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('grpc').setLevel(logging.WARNING)
    logging.getLogger('google').setLevel(logging.WARNING)


def deep_merge(dict1: Dict, dict2: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        dict1: First dictionary
        dict2: Second dictionary

    Returns:
        Merged dictionary
    """
    result = dict1.copy()

    for key, value in dict2.items():
        if isinstance(value, dict) and key in result and isinstance(result[key], dict):
            # If both values are dictionaries, merge them recursively
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Missing or unreadable files fall back to the defaults. The model can
    also be chosen with the GEMINI_MODEL environment variable.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
            if not isinstance(file_config, dict):
                raise ValueError("top level must be a mapping")
            config = deep_merge(config, file_config)
        except (OSError, yaml.YAMLError, ValueError) as e:
            logging.warning(f"Failed to load configuration file: {e}")
            logging.info("Using default configuration")

    model = os.environ.get("GEMINI_MODEL")
    if model:
        config["api"]["model"] = model

    return config


def get_api_key(explicit: Optional[str] = None) -> Optional[str]:
    """
    Resolve the API key from the argument, .env file or environment.

    Args:
        explicit: Key given on the command line, takes precedence

    Returns:
        The API key, or None if none is configured
    """
    if explicit:
        return explicit
    load_dotenv()
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")


def load_image(path: str) -> ImagePart:
    """
    Read an image file into a base64 image part.

    Args:
        path: Path to a captured screenshot

    Returns:
        ImagePart with the MIME type guessed from the extension (PNG by default)
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Screenshot file not found: {path}")

    with open(path, 'rb') as f:
        data = f.read()

    mime_type, _ = mimetypes.guess_type(path)
    if not mime_type or not mime_type.startswith("image/"):
        mime_type = "image/png"

    logging.getLogger(__name__).debug(f"Loaded {path} ({len(data)} bytes, {mime_type})")
    return ImagePart(data=base64.b64encode(data).decode("ascii"), mime_type=mime_type)
