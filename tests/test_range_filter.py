from __future__ import annotations

import logging
from typing import Optional

from core.config import FilterConfig
from core.models import BodyRange, Formatting, HydratedMention, Mention, Participant, Style
from core.range_filter import filter_and_clean, hydrate_ranges


class DummyResolver:
    def __init__(self, participants: dict[str, str]) -> None:
        self._participants = participants

    def resolve(self, participant_id: str) -> Optional[Participant]:
        title = self._participants.get(participant_id)
        if title is None:
            return None
        return Participant(id=f"conv-{participant_id}", display_title=title)


def test_caps_each_category_first_come_first_kept() -> None:
    raw = []
    for index in range(300):
        raw.append({"start": index, "length": 1, "mention_id": "abc"})
        raw.append({"start": index, "length": 1, "style": Style.BOLD})

    cleaned = filter_and_clean(raw)

    mentions = [item for item in cleaned if item.is_mention()]
    bold = [item for item in cleaned if item.is_formatting()]
    assert len(mentions) == 250
    assert len(bold) == 250
    assert [item.start for item in mentions] == list(range(250))
    assert [item.start for item in bold] == list(range(250))


def test_cap_is_per_style() -> None:
    raw = [{"start": 0, "length": 1, "style": Style.BOLD} for _ in range(3)]
    raw += [{"start": 0, "length": 1, "style": Style.ITALIC} for _ in range(3)]

    cleaned = filter_and_clean(raw, FilterConfig(max_per_type=2))

    styles = [item.kind.style for item in cleaned]
    assert styles == [Style.BOLD, Style.BOLD, Style.ITALIC, Style.ITALIC]


def test_drops_invalid_offsets_with_warning(caplog) -> None:
    raw = [
        {"start": None, "length": 1, "style": 1},
        {"start": -1, "length": 1, "style": 1},
        {"start": "3", "length": 1, "style": 1},
        {"start": True, "length": 1, "style": 1},
        {"start": 0, "length": 1.5, "style": 1},
        {"length": 2, "style": 1},
        {"start": 2, "length": 3, "style": 1},
    ]

    with caplog.at_level(logging.WARNING):
        cleaned = filter_and_clean(raw)

    assert cleaned == [BodyRange(start=2, length=3, kind=Formatting(style=Style.BOLD))]
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 6


def test_keeps_none_style_and_drops_unknown(caplog) -> None:
    raw = [
        {"start": 0, "length": 2, "style": 0},
        {"start": 0, "length": 2},
        {"start": 0, "length": 2, "style": 42},
        {"start": 0, "length": 2, "mention_id": ""},
    ]

    with caplog.at_level(logging.WARNING):
        cleaned = filter_and_clean(raw)

    assert cleaned == [BodyRange(start=0, length=2, kind=Formatting(style=Style.NONE))]
    assert "unknown" in caplog.text


def test_output_drops_extraneous_fields() -> None:
    raw = [
        {"start": 1, "length": 2, "style": 5, "spoiler_id": 7, "extra": "x"},
        {"start": 4, "length": 1, "mention_id": "u1", "style": 1},
    ]

    cleaned = filter_and_clean(raw)

    assert cleaned == [
        BodyRange(start=1, length=2, kind=Formatting(style=Style.SPOILER, spoiler_id=7)),
        BodyRange(start=4, length=1, kind=Mention(participant_id="u1")),
    ]


def test_absent_ranges_stay_absent() -> None:
    assert filter_and_clean(None) is None
    assert filter_and_clean([]) == []


def test_hydrate_resolves_mentions_and_omits_unknown() -> None:
    raw = [
        {"start": 0, "length": 1, "mention_id": "u1"},
        {"start": 2, "length": 1, "mention_id": "missing"},
        {"start": 0, "length": 3, "style": 2},
    ]

    hydrated = hydrate_ranges(raw, DummyResolver({"u1": "Bob"}))

    assert hydrated == [
        BodyRange(
            start=0,
            length=1,
            kind=HydratedMention(participant_id="u1", display_name="Bob", conversation_id="conv-u1"),
        ),
        BodyRange(start=0, length=3, kind=Formatting(style=Style.ITALIC)),
    ]
