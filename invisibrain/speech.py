# invisibrain/speech.py
# Narrow interface between any speech-to-text source and the assistant

"""
Transcript feed for speech input.

Speech recognition itself lives outside this package. Whatever recognizer
the shell uses only needs to call on_partial_text() while the user is
speaking and on_final_text() once an utterance is complete.
"""

import logging
from typing import Callable, List, Optional

from .service import AssistantService

logger = logging.getLogger(__name__)


class TranscriptFeed:
    """Routes recognizer output into the conversation history."""

    def __init__(self, service: AssistantService, on_update: Optional[Callable[[str, bool], None]] = None):
        """
        Args:
            service: Service whose history receives final utterances
            on_update: Optional display callback, called with (text, is_final)
        """
        self.service = service
        self.on_update = on_update
        self.latest_partial = ""
        self.final_texts: List[str] = []

    def on_partial_text(self, text: str) -> None:
        # Partial results are display-only; they never reach the history
        self.latest_partial = text
        if self.on_update:
            self.on_update(text, False)

    def on_final_text(self, text: str) -> bool:
        """
        Record a finished utterance.

        Returns:
            True if the utterance was recorded, False if it was blank
        """
        self.latest_partial = ""
        if not self.service.add_transcript(text):
            return False
        self.final_texts.append(text.strip())
        logger.debug(f"Recorded utterance ({len(text)} chars)")
        if self.on_update:
            self.on_update(text.strip(), True)
        return True

    @property
    def transcript(self) -> str:
        return " ".join(self.final_texts)
