# invisibrain/backend.py - ACTIVELY USED
# Gemini API adapter: sends one payload, returns text, classifies failures

"""
Backend module for communicating with Google's Gemini API.

This module turns queue payloads into SDK requests and SDK failures into
the package's backend error types, keeping the HTTP status code in both
the exception attributes and the message.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Protocol

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .exceptions import FatalBackendError, TransientBackendError
from .request_queue import ImagePart, Payload
from .retry import RETRYABLE_STATUS_CODES

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-lite"


class Backend(Protocol):
    async def invoke(self, payload: Payload) -> str:
        ...


def to_contents(payload: Payload) -> Any:
    """
    Convert a queue payload into SDK contents.

    Text payloads pass through unchanged; image parts become inline blobs
    of decoded bytes.
    """
    if isinstance(payload, str):
        return payload

    contents: List[Any] = []
    for part in payload:
        if isinstance(part, ImagePart):
            contents.append({"mime_type": part.mime_type, "data": base64.b64decode(part.data)})
        else:
            contents.append(part)
    return contents


def translate_error(error: Exception) -> Exception:
    """
    Map an SDK exception onto the backend error taxonomy.

    Args:
        error: Exception raised by the SDK

    Returns:
        TransientBackendError for 429/500/503, FatalBackendError for any
        other API error, or the original exception if it is not an API error
    """
    if not isinstance(error, google_exceptions.GoogleAPICallError):
        return error

    code = int(error.code) if isinstance(error.code, int) else None
    message = f"Gemini API error {code}: {error.message}" if code else f"Gemini API error: {error}"
    if code in RETRYABLE_STATUS_CODES:
        return TransientBackendError(message, status_code=code)
    return FatalBackendError(message, status_code=code)


class GeminiBackend:
    """
    Client for Google's Gemini API.

    Exposes a single coroutine, invoke(), which the request queue calls for
    every attempt.
    """

    def __init__(self, api_key: Optional[str] = None, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the Gemini backend.

        Args:
            api_key: Gemini API key
            config: The "api" configuration section
        """
        self.config = config or {}

        if not api_key:
            logger.warning("No API key provided. Set the GEMINI_API_KEY environment variable.")
        genai.configure(api_key=api_key)

        self.model_name = self.config.get("model") or DEFAULT_MODEL
        self.generation_config = {
            "temperature": self.config.get("temperature", 0.2),
            "max_output_tokens": self.config.get("max_output_tokens", 2048),
        }
        self.model = self._initialize_model()

    def _initialize_model(self):
        try:
            logger.info(f"Initializing Gemini model: {self.model_name}")
            return genai.GenerativeModel(model_name=self.model_name, generation_config=self.generation_config)
        except Exception as e:
            logger.warning(f"Primary model failed, using fallback {DEFAULT_MODEL}: {e}")
            self.model_name = DEFAULT_MODEL
            return genai.GenerativeModel(model_name=DEFAULT_MODEL, generation_config=self.generation_config)

    async def invoke(self, payload: Payload) -> str:
        """
        Send one payload to the model.

        Args:
            payload: Prompt string or ordered list of text and image parts

        Returns:
            The response text

        Raises:
            TransientBackendError: For 429/500/503 responses
            FatalBackendError: For any other API error or an empty response
        """
        try:
            response = await self.model.generate_content_async(to_contents(payload))
        except google_exceptions.GoogleAPICallError as e:
            raise translate_error(e) from e

        if not getattr(response, "candidates", None):
            raise FatalBackendError("Gemini API returned an empty response (no candidates)")

        try:
            return response.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or has no text parts
            raise FatalBackendError(f"Could not extract response text: {e}") from e
