"""Degradation of annotated text to a plain string (core domain).

Used where range-aware rendering is unavailable, such as notification
previews: spoilers are masked and mentions are expanded to ``@name``.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from core.config import SPOILER_REPLACEMENT
from core.models import BodyRange, HydratedMention


def apply_ranges_for_text(
    text: Optional[str],
    mentions: Iterable[BodyRange],
    spoilers: Iterable[BodyRange],
    replacement: str = SPOILER_REPLACEMENT,
) -> Optional[str]:
    """Return ``text`` with spoilers replaced and mentions spelled out.

    Mentions are hydrated ranges of length 1. Spoilers are applied from the
    last one backwards so earlier offsets stay valid; mentions hidden by a
    spoiler disappear and mentions after it are shifted by the change in
    length.
    """

    if not text:
        return text

    updated = text
    remaining: List[BodyRange] = list(mentions)

    for spoiler in sorted(spoilers, key=lambda item: item.start, reverse=True):
        start = spoiler.start
        end = spoiler.end
        updated = f"{updated[:start]}{replacement}{updated[end:]}"

        # Mentions always have length 1, so checking the start is enough.
        shift = spoiler.length - len(replacement)
        remaining = [
            mention.moved(mention.start - shift) if mention.start >= end else mention
            for mention in remaining
            if mention.start < start or mention.start >= end
        ]

    for mention in sorted(remaining, key=lambda item: item.start, reverse=True):
        kind = mention.kind
        if not isinstance(kind, HydratedMention):
            continue
        updated = f"{updated[: mention.start]}@{kind.display_name}{updated[mention.end :]}"

    return updated
