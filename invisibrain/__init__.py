# invisibrain/__init__.py - PACKAGE DEFINITION
# Package initialization and exports

"""
Invisibrain Assistant
=====================

Rate-limited, queued access to Google's Gemini API for screenshot
analysis, meeting notes, suggested replies and question answering.
"""

from .exceptions import (
    AssistantError,
    QuotaExceededError,
    NoContentError,
    TransientBackendError,
    FatalBackendError,
)
from .history import ConversationHistory
from .request_queue import ImagePart, RequestQueue
from .service import AssistantService
from .speech import TranscriptFeed
from .version import __version__

__all__ = [
    "AssistantService",
    "ConversationHistory",
    "RequestQueue",
    "ImagePart",
    "TranscriptFeed",
    "AssistantError",
    "QuotaExceededError",
    "NoContentError",
    "TransientBackendError",
    "FatalBackendError",
    "__version__",
]
