"""Telegram-to-core range mapping adapter.

This keeps Telethon-specific details out of the core engine. Telegram entity
offsets count UTF-16 code units, so message text is converted with
``add_surrogate`` before it reaches the core and converted back with
``del_surrogate`` before it is shown. Mention names are folded into one
placeholder character each, the shape the core expects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from telethon.helpers import add_surrogate, del_surrogate
from telethon.tl.custom import Message
from telethon.tl.types import (
    InputMessageEntityMentionName,
    MessageEntityBold,
    MessageEntityCode,
    MessageEntityItalic,
    MessageEntityMentionName,
    MessageEntityPre,
    MessageEntitySpoiler,
    MessageEntityStrike,
    MessageEntityTextUrl,
    MessageEntityUrl,
)

from core.models import BodyRange, Link, Participant, Style

LOGGER = logging.getLogger(__name__)

MENTION_PLACEHOLDER = "\ufffc"

_STYLE_BY_ENTITY = {
    MessageEntityBold: Style.BOLD,
    MessageEntityItalic: Style.ITALIC,
    MessageEntityStrike: Style.STRIKETHROUGH,
    MessageEntityCode: Style.MONOSPACE,
    MessageEntityPre: Style.MONOSPACE,
    MessageEntitySpoiler: Style.SPOILER,
}


@dataclass(frozen=True)
class MessageBody:
    """Message text in UTF-16 indexing plus the ranges found on it.

    Each mention occupies a single placeholder character in ``text``;
    ``mention_titles`` keeps the name Telegram showed for it.
    """

    text: str
    raw_ranges: List[dict]
    links: List[BodyRange]
    mention_titles: Dict[str, str] = field(default_factory=dict)


def _mention_id(entity: Any) -> Optional[str]:
    if isinstance(entity, MessageEntityMentionName):
        return str(entity.user_id)
    if isinstance(entity, InputMessageEntityMentionName):
        user_id = getattr(entity.user_id, "user_id", None)
        return str(user_id) if user_id is not None else None
    return None


def raw_ranges_from_entities(entities: Optional[Iterable[Any]]) -> List[dict]:
    """Translate Telegram entities into wire-shaped range dicts.

    Each spoiler entity gets its own spoiler id (its position in the entity
    list) so pieces of one spoiler regroup after splitting, while separate
    spoilers stay separate.
    """

    raw_ranges: List[dict] = []
    for index, entity in enumerate(entities or []):
        raw = {"start": getattr(entity, "offset", None), "length": getattr(entity, "length", None)}
        mention_id = _mention_id(entity)
        if mention_id is not None:
            raw["mention_id"] = mention_id
            raw_ranges.append(raw)
            continue
        style = _STYLE_BY_ENTITY.get(type(entity))
        if style is None:
            # Links are render-only; everything else has no display style.
            continue
        raw["style"] = int(style)
        if style == Style.SPOILER:
            raw["spoiler_id"] = index
        raw_ranges.append(raw)
    return raw_ranges


def link_ranges_from_entities(text: str, entities: Optional[Iterable[Any]]) -> List[BodyRange]:
    """Build render-only link ranges from URL entities.

    ``text`` must already be in UTF-16 indexing.
    """

    links: List[BodyRange] = []
    for entity in entities or []:
        if isinstance(entity, MessageEntityTextUrl):
            url = entity.url
        elif isinstance(entity, MessageEntityUrl):
            url = del_surrogate(text[entity.offset : entity.offset + entity.length])
        else:
            continue
        if entity.offset + entity.length > len(text):
            LOGGER.warning("Skipping link entity past the end of the text")
            continue
        links.append(BodyRange(start=entity.offset, length=entity.length, kind=Link(url=url)))
    return links


def _mention_spans(raw_ranges: Iterable[dict], text_length: int) -> List[Tuple[int, int]]:
    spans: List[Tuple[int, int]] = []
    candidates = [
        raw
        for raw in raw_ranges
        if raw.get("mention_id") and isinstance(raw["start"], int) and isinstance(raw["length"], int)
    ]
    for raw in sorted(candidates, key=lambda raw: raw["start"]):
        start, end = raw["start"], raw["start"] + raw["length"]
        if raw["length"] < 1 or end > text_length or (spans and start < spans[-1][1]):
            continue
        spans.append((start, end))
    return spans


def _remap(position: int, spans: List[Tuple[int, int]], closing: bool) -> int:
    # A boundary inside a span snaps outward so the placeholder stays covered.
    removed = 0
    for start, end in spans:
        if position >= end:
            removed += end - start - 1
            continue
        if position > start:
            return start - removed + (1 if closing else 0)
        break
    return position - removed


def collapse_mentions(text: str, raw_ranges: List[dict], links: List[BodyRange]) -> MessageBody:
    """Replace each mention's name with one placeholder and remap offsets.

    Telegram mention entities span the whole visible name, while the core
    expects every mention to be exactly one character long.
    """

    spans = _mention_spans(raw_ranges, len(text))
    span_starts = {start for start, _ in spans}

    pieces: List[str] = []
    titles: Dict[str, str] = {}
    cursor = 0
    for start, end in spans:
        pieces.append(text[cursor:start])
        pieces.append(MENTION_PLACEHOLDER)
        cursor = end
    pieces.append(text[cursor:])

    remapped: List[dict] = []
    for raw in raw_ranges:
        start, length = raw["start"], raw["length"]
        if not isinstance(start, int) or not isinstance(length, int):
            remapped.append(raw)
            continue
        if raw.get("mention_id"):
            if start not in span_starts:
                LOGGER.warning("Skipping mention entity that overlaps another mention or runs past the text")
                continue
            titles.setdefault(raw["mention_id"], del_surrogate(text[start : start + length]))
        new_start = _remap(start, spans, closing=False)
        new_end = _remap(start + length, spans, closing=True)
        remapped.append({**raw, "start": new_start, "length": new_end - new_start})

    moved_links = []
    for link in links:
        new_start = _remap(link.start, spans, closing=False)
        moved_links.append(link.moved(new_start, _remap(link.end, spans, closing=True) - new_start))

    return MessageBody(text="".join(pieces), raw_ranges=remapped, links=moved_links, mention_titles=titles)


def build_message_body(message: Message) -> MessageBody:
    """Build a core-ready MessageBody from a Telethon Message."""

    text = add_surrogate(message.raw_text or "")
    entities = getattr(message, "entities", None) or []
    return collapse_mentions(
        text,
        raw_ranges_from_entities(entities),
        link_ranges_from_entities(text, entities),
    )


def display_text(text: str) -> str:
    """Convert UTF-16 indexed text back to a normal string."""

    return del_surrogate(text)


def mention_ids(raw_ranges: Iterable[dict]) -> set[str]:
    return {raw["mention_id"] for raw in raw_ranges if raw.get("mention_id")}


def entity_title(entity: Any) -> str:
    title = getattr(entity, "title", None)
    if title:
        return str(title)
    first = getattr(entity, "first_name", None)
    last = getattr(entity, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    username = getattr(entity, "username", None)
    if username:
        return str(username)
    return str(getattr(entity, "id", None) or "unknown")


class EntityCacheResolver:
    """Resolve participant ids to display names, with an id cache.

    ``resolve`` is synchronous as the core requires, so lookups go through
    ``prefetch`` first. An id that fails to resolve falls back to the title
    shown in the message, if any, and otherwise stays unresolved.
    """

    def __init__(self, client) -> None:
        self._client = client
        self._cache: dict[str, Optional[Participant]] = {}

    async def prefetch(
        self,
        participant_ids: Iterable[str],
        fallback_titles: Optional[Dict[str, str]] = None,
    ) -> None:
        for participant_id in participant_ids:
            if participant_id in self._cache:
                continue
            try:
                entity = await self._client.get_entity(int(participant_id))
            except Exception:
                LOGGER.warning("Failed to resolve participant %s", participant_id)
                title = (fallback_titles or {}).get(participant_id)
                self._cache[participant_id] = Participant(id=participant_id, display_title=title) if title else None
                continue
            self._cache[participant_id] = Participant(
                id=str(getattr(entity, "id", participant_id)),
                display_title=entity_title(entity),
            )

    def resolve(self, participant_id: str) -> Optional[Participant]:
        return self._cache.get(participant_id)
