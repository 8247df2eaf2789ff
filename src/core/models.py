"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types. Offsets are code-unit offsets
into the text they were computed for; nothing here re-indexes strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Optional, Tuple, Union


class Style(IntEnum):
    """Formatting styles, numbered as they arrive on the wire."""

    NONE = 0
    BOLD = 1
    ITALIC = 2
    STRIKETHROUGH = 3
    MONOSPACE = 4
    SPOILER = 5


@dataclass(frozen=True)
class Mention:
    """A reference to a participant that has not been resolved yet."""

    participant_id: str


@dataclass(frozen=True)
class HydratedMention(Mention):
    """A mention with the participant's display name attached."""

    display_name: str
    conversation_id: str


@dataclass(frozen=True)
class Formatting:
    style: Style
    spoiler_id: Optional[int] = None


@dataclass(frozen=True)
class Link:
    """Render-only link range. Never produced from wire input."""

    url: str


@dataclass(frozen=True)
class Highlight:
    """Search keyword highlight, synthesized for search snippets only."""


RangeKind = Union[Mention, HydratedMention, Formatting, Link, Highlight]


@dataclass(frozen=True)
class BodyRange:
    """Half-open interval ``[start, start + length)`` with a semantic kind."""

    start: int
    length: int
    kind: RangeKind

    @property
    def end(self) -> int:
        return self.start + self.length

    def moved(self, start: int, length: Optional[int] = None) -> "BodyRange":
        """Return a copy at a new position, keeping the kind."""

        return replace(self, start=start, length=self.length if length is None else length)

    def is_mention(self) -> bool:
        return isinstance(self.kind, Mention)

    def is_formatting(self) -> bool:
        return isinstance(self.kind, Formatting)

    def is_link(self) -> bool:
        return isinstance(self.kind, Link)

    def is_highlight(self) -> bool:
        return isinstance(self.kind, Highlight)

    def is_raw(self) -> bool:
        """Return True for kinds that may arrive from the wire."""

        return self.is_mention() or self.is_formatting()


@dataclass(frozen=True)
class RangeNode:
    """A range that owns nested, non-overlapping child ranges.

    Child offsets are relative to this node's own start.
    """

    start: int
    length: int
    kind: RangeKind
    children: Tuple["RangeNode", ...] = ()

    @property
    def end(self) -> int:
        return self.start + self.length

    @classmethod
    def leaf(cls, body_range: BodyRange) -> "RangeNode":
        return cls(start=body_range.start, length=body_range.length, kind=body_range.kind)

    def with_children(self, children: Tuple["RangeNode", ...]) -> "RangeNode":
        return replace(self, children=children)


@dataclass(frozen=True)
class SegmentFormatting:
    """Display attributes accumulated from every enclosing range."""

    bold: bool = False
    italic: bool = False
    monospace: bool = False
    spoiler: bool = False
    strikethrough: bool = False
    spoiler_id: Optional[int] = None
    url: Optional[str] = None
    highlighted: bool = False


@dataclass(frozen=True)
class DisplaySegment:
    """A flattened, non-overlapping run of text ready for rendering.

    ``start`` is in the coordinates of the full text that was collapsed;
    mention offsets are relative to the segment itself.
    """

    text: str
    start: int
    length: int
    formatting: SegmentFormatting = field(default_factory=SegmentFormatting)
    mentions: Tuple[BodyRange, ...] = ()
    spoiler_children: Tuple["DisplaySegment", ...] = ()

    @property
    def is_spoiler(self) -> bool:
        return self.formatting.spoiler

    @property
    def spoiler_id(self) -> Optional[int]:
        return self.formatting.spoiler_id


@dataclass(frozen=True)
class Participant:
    """Resolved participant returned by a mention resolver."""

    id: str
    display_title: str


@dataclass(frozen=True)
class SnippetResult:
    """Search snippet ready for display plus ranges in snippet coordinates."""

    snippet: str
    ranges: Tuple[BodyRange, ...]
