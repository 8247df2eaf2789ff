"""Validation and capping of untrusted wire ranges (core domain)."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Union

from core.config import FilterConfig
from core.models import BodyRange, Formatting, HydratedMention, Mention, Style
from core.ports import MentionResolverPort

LOGGER = logging.getLogger(__name__)

MENTION_CATEGORY = "mention"


def _is_offset(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _parse_style(value: Any) -> Optional[Style]:
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    try:
        return Style(value)
    except ValueError:
        return None


def filter_and_clean(
    raw_ranges: Optional[Iterable[Mapping[str, Any]]],
    config: FilterConfig = FilterConfig(),
) -> Optional[List[BodyRange]]:
    """Drop malformed and unknown ranges and cap each category.

    Items are examined in input order. Each category (one per style, one for
    mentions) keeps its first ``config.max_per_type`` items; later items of a
    full category are dropped silently. The output holds fresh ``BodyRange``
    copies, so extra wire fields never leak past this point.

    Returns None when there were no ranges at all, mirroring the wire field
    being absent.
    """

    if raw_ranges is None:
        return None

    counts: Counter[Union[str, Style]] = Counter()
    cleaned: List[BodyRange] = []
    for raw in raw_ranges:
        start = raw.get("start")
        length = raw.get("length")
        if not _is_offset(start):
            LOGGER.warning("filter_and_clean: Dropping range with invalid start %r", start)
            continue
        if not _is_offset(length):
            LOGGER.warning("filter_and_clean: Dropping range with invalid length %r", length)
            continue

        mention_id = raw.get("mention_id")
        if mention_id:
            counts[MENTION_CATEGORY] += 1
            if counts[MENTION_CATEGORY] > config.max_per_type:
                continue
            cleaned.append(BodyRange(start=start, length=length, kind=Mention(str(mention_id))))
            continue

        raw_style = raw.get("style")
        if raw_style is not None:
            style = _parse_style(raw_style)
            if style is None:
                LOGGER.warning("filter_and_clean: Dropping range with unknown style %r", raw_style)
                continue
            counts[style] += 1
            if counts[style] > config.max_per_type:
                continue
            spoiler_id = raw.get("spoiler_id")
            if not isinstance(spoiler_id, int) or isinstance(spoiler_id, bool):
                spoiler_id = None
            cleaned.append(
                BodyRange(start=start, length=length, kind=Formatting(style=style, spoiler_id=spoiler_id))
            )
            continue

        LOGGER.warning("filter_and_clean: Dropping unknown range")

    return cleaned


def hydrate_ranges(
    raw_ranges: Optional[Iterable[Mapping[str, Any]]],
    resolver: MentionResolverPort,
    config: FilterConfig = FilterConfig(),
) -> Optional[List[BodyRange]]:
    """Filter wire ranges and attach display names to mentions.

    Mentions whose participant cannot be resolved are omitted.
    """

    cleaned = filter_and_clean(raw_ranges, config)
    if cleaned is None:
        return None

    hydrated: List[BodyRange] = []
    for body_range in cleaned:
        kind = body_range.kind
        if not isinstance(kind, Mention):
            hydrated.append(body_range)
            continue
        participant = resolver.resolve(kind.participant_id)
        if participant is None:
            LOGGER.warning("hydrate_ranges: Dropping mention of unknown participant %s", kind.participant_id)
            continue
        hydrated.append(
            BodyRange(
                start=body_range.start,
                length=body_range.length,
                kind=HydratedMention(
                    participant_id=kind.participant_id,
                    display_name=participant.display_title,
                    conversation_id=participant.id,
                ),
            )
        )
    return hydrated
