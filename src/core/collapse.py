"""Flattening of a range tree into display segments (core domain)."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from core.errors import RangeInvariantError
from core.models import (
    BodyRange,
    DisplaySegment,
    Formatting,
    Highlight,
    Link,
    Mention,
    RangeKind,
    RangeNode,
    SegmentFormatting,
    Style,
)

LOGGER = logging.getLogger(__name__)


def _style_contribution(kind: Formatting) -> Dict[str, Any]:
    style = kind.style
    if style == Style.BOLD:
        return {"bold": True}
    if style == Style.ITALIC:
        return {"italic": True}
    if style == Style.MONOSPACE:
        return {"monospace": True}
    if style == Style.SPOILER:
        return {"spoiler": True, "spoiler_id": kind.spoiler_id}
    if style == Style.STRIKETHROUGH:
        return {"strikethrough": True}
    if style == Style.NONE:
        return {}
    LOGGER.error("collapse_range_tree: unmapped style %r", style)
    raise RangeInvariantError(f"Unmapped style {style!r}")


def _contribution(kind: RangeKind) -> Dict[str, Any]:
    if isinstance(kind, Formatting):
        return _style_contribution(kind)
    if isinstance(kind, Link):
        return {"url": kind.url}
    if isinstance(kind, Highlight):
        return {"highlighted": True}
    LOGGER.error("collapse_range_tree: unmapped range kind %r", kind)
    raise RangeInvariantError(f"Unmapped range kind {kind!r}")


def collapse_range_tree(
    text: str,
    tree: Iterable[RangeNode],
    inherited: Optional[SegmentFormatting] = None,
    origin_offset: int = 0,
) -> List[DisplaySegment]:
    """Turn a range tree into a flat list of segments covering ``text``.

    ``text`` is the slice owned by the enclosing node (the whole body at the
    top level) and ``origin_offset`` is where that slice starts in the body.
    Mentions never produce a segment of their own: they ride on the next
    segment emitted at the same level, with offsets relative to it.
    """

    formatting = inherited or SegmentFormatting()
    collapsed: List[DisplaySegment] = []
    mentions: List[BodyRange] = []
    offset = 0

    for node in tree:
        if isinstance(node.kind, Mention):
            mentions.append(BodyRange(start=node.start - offset, length=node.length, kind=node.kind))
            continue

        # Unformatted gap before this node
        if node.start > offset:
            collapsed.append(
                DisplaySegment(
                    text=text[offset : node.start],
                    start=offset + origin_offset,
                    length=node.start - offset,
                    formatting=formatting,
                    mentions=tuple(mentions),
                )
            )
            mentions = []

        collapsed.extend(
            collapse_range_tree(
                text[node.start : node.end],
                node.children,
                replace(formatting, **_contribution(node.kind)),
                node.start + origin_offset,
            )
        )
        offset = node.end

    if len(text) > offset:
        collapsed.append(
            DisplaySegment(
                text=text[offset:],
                start=offset + origin_offset,
                length=len(text) - offset,
                formatting=formatting,
                mentions=tuple(mentions),
            )
        )

    return collapsed
