from __future__ import annotations

from typing import Optional

import pytest
from telethon.tl.types import MessageEntityMentionName, MessageEntitySpoiler

from adapters.notification_formatting import build_preview, format_notification
from adapters.telegram_mapper import MessageBody, build_message_body
from core.models import Participant
from core.processor import RangeProcessor


class DummyResolver:
    def resolve(self, participant_id: str) -> Optional[Participant]:
        if participant_id == "42":
            return Participant(id="42", display_title="Ann")
        return None


def test_build_preview_masks_spoilers_and_restores_text() -> None:
    # The emoji arrives as a surrogate pair, two code units long.
    body = MessageBody(
        text="\ud83d\ude00 \ufffc secret",
        raw_ranges=[
            {"start": 3, "length": 1, "mention_id": "42"},
            {"start": 5, "length": 6, "style": 5, "spoiler_id": 0},
        ],
        links=[],
    )

    preview = build_preview(RangeProcessor(DummyResolver()), body)

    assert preview == "😀 @Ann ■■■■"


def test_format_notification_modes() -> None:
    assert format_notification("Ann", "hi <there>", "plain") == "Ann: hi <there>"
    assert format_notification("Ann", "a & <b>", "html") == "<b>Ann</b>\na &amp; &lt;b&gt;"
    assert format_notification("A*n", "x_y", "markdown") == "**A\\*n**\nx\\_y"


def test_format_notification_falls_back_to_default_title() -> None:
    assert format_notification(None, "hello", "plain") == "New message: hello"


def test_format_notification_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        format_notification("Ann", "hello", "pdf")


class DummyMessage:
    def __init__(self, text: str, entities) -> None:
        self.raw_text = text
        self.entities = entities


def test_build_preview_masks_spoiler_over_mention_tail() -> None:
    message = DummyMessage(
        "hi John Smith",
        [
            MessageEntityMentionName(offset=3, length=10, user_id=42),
            MessageEntitySpoiler(offset=8, length=5),
        ],
    )

    preview = build_preview(RangeProcessor(DummyResolver()), build_message_body(message))

    assert preview == "hi ■■■■"


def test_build_preview_spells_out_telegram_mentions() -> None:
    message = DummyMessage(
        "hi John Smith, see spoiler",
        [
            MessageEntityMentionName(offset=3, length=10, user_id=42),
            MessageEntitySpoiler(offset=19, length=7),
        ],
    )

    preview = build_preview(RangeProcessor(DummyResolver()), build_message_body(message))

    assert preview == "hi @Ann, see ■■■■"
