# invisibrain/history.py - ACTIVELY USED
# Bounded conversation transcript used to build prompt context

"""
Conversation History module.

Keeps the most recent role-tagged utterances in insertion order and renders
them as the "previous conversation" block of outbound prompts.
"""

import time
import logging
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

ROLES = ("user", "assistant")


class HistoryEntry:
    """One turn in the conversation."""

    def __init__(self, role: str, text: str, timestamp: Optional[float] = None):
        """
        Initialize a history entry.

        Args:
            role: Either "user" or "assistant"
            text: The utterance content
            timestamp: When the entry was recorded (defaults to now)
        """
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        self.role = role
        self.text = text
        self.timestamp = timestamp if timestamp is not None else time.time()

    def __repr__(self) -> str:
        return f"HistoryEntry(role={self.role!r}, text={self.text[:40]!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "role": self.role,
            "text": self.text,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """Create from dictionary representation."""
        return cls(
            role=data["role"],
            text=data["text"],
            timestamp=data.get("timestamp"),
        )


class ConversationHistory:
    """
    Ordered transcript trimmed to the most recent entries.

    Whenever an append pushes the length past max_length, the oldest
    entries are dropped until exactly max_length remain.
    """

    def __init__(self, max_length: int = 20):
        if max_length < 1:
            raise ValueError("max_length must be at least 1")
        self.max_length = max_length
        self._entries: List[HistoryEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def append(self, role: str, text: str) -> HistoryEntry:
        """
        Append an utterance at the tail, trimming from the head if needed.

        Args:
            role: "user" or "assistant"
            text: The utterance content

        Returns:
            The new entry
        """
        entry = HistoryEntry(role, text)
        self._entries.append(entry)
        if len(self._entries) > self.max_length:
            dropped = len(self._entries) - self.max_length
            self._entries = self._entries[-self.max_length:]
            logger.debug(f"Trimmed {dropped} oldest history entries")
        return entry

    def as_context_string(self) -> str:
        """Render entries oldest first as "<role>: <text>" separated by blank lines."""
        return "\n\n".join(f"{entry.role}: {entry.text}" for entry in self._entries)

    def clear(self) -> None:
        self._entries = []

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]

    def load(self, items: List[Dict[str, Any]]) -> None:
        """
        Replace the transcript with previously exported entries.

        Only the most recent max_length entries are kept.

        Args:
            items: Entries as produced by to_list()
        """
        entries = [HistoryEntry.from_dict(item) for item in items]
        self._entries = entries[-self.max_length:]
