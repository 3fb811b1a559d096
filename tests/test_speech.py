"""Tests for routing recognizer output into the conversation."""

import pytest

from invisibrain.service import AssistantService
from invisibrain.speech import TranscriptFeed


@pytest.fixture
def feed(backend):
    updates = []
    feed = TranscriptFeed(AssistantService(backend), on_update=lambda text, final: updates.append((text, final)))
    feed.updates = updates
    return feed


def test_partial_text_is_display_only(feed):
    feed.on_partial_text("how do I")

    assert feed.latest_partial == "how do I"
    assert feed.service.get_history() == []
    assert feed.updates == [("how do I", False)]


def test_final_text_enters_history(feed):
    feed.on_partial_text("how do I")
    assert feed.on_final_text(" how do I sort a dict? ") is True

    assert feed.latest_partial == ""
    assert feed.service.get_history()[0]["role"] == "user"
    assert feed.service.get_history()[0]["text"] == "how do I sort a dict?"
    assert feed.updates[-1] == ("how do I sort a dict?", True)


def test_blank_final_text_is_ignored(feed):
    assert feed.on_final_text("  ") is False

    assert feed.service.get_history() == []
    assert feed.transcript == ""


def test_transcript_joins_final_texts(feed):
    feed.on_final_text("first")
    feed.on_final_text("second")
    assert feed.transcript == "first second"
