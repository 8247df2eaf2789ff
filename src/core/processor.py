"""Core range processing pipeline.

This module is integration-agnostic. It only relies on the mention resolver
port, enabling different messaging backends without changes here. It wires
the engine stages in a fixed order:

1) Filter and cap untrusted wire ranges
2) Hydrate mentions through the resolver
3) Build a range tree (from body ranges or remapped snippet ranges)
4) Collapse the tree into display segments
5) Group contiguous spoilers

and, separately, degrades hydrated ranges to a plain preview string.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from core.collapse import collapse_range_tree
from core.config import FilterConfig, PreviewConfig, SnippetConfig
from core.models import BodyRange, DisplaySegment, Formatting, Style
from core.ports import MentionResolverPort
from core.range_filter import hydrate_ranges
from core.range_tree import build_range_tree
from core.snippets import process_ranges_for_search_result
from core.spoilers import group_contiguous_spoilers
from core.text_ranges import apply_ranges_for_text

LOGGER = logging.getLogger(__name__)

RawRanges = Optional[Iterable[Mapping[str, Any]]]


class RangeProcessor:
    """Orchestrates filtering, hydration, tree building, and flattening."""

    def __init__(
        self,
        resolver: MentionResolverPort,
        filter_config: FilterConfig = FilterConfig(),
        snippet_config: SnippetConfig = SnippetConfig(),
        preview_config: PreviewConfig = PreviewConfig(),
    ) -> None:
        self._resolver = resolver
        self._filter = filter_config
        self._snippet = snippet_config
        self._preview = preview_config

    def hydrate(self, text: str, raw_ranges: RawRanges) -> List[BodyRange]:
        """Return validated, hydrated ranges that fit inside ``text``."""

        hydrated = hydrate_ranges(raw_ranges, self._resolver, self._filter) or []
        fitting = [body_range for body_range in hydrated if body_range.end <= len(text)]
        if len(fitting) != len(hydrated):
            LOGGER.warning("Dropped %s ranges extending past the text", len(hydrated) - len(fitting))
        return fitting

    def segments(
        self,
        text: str,
        raw_ranges: RawRanges,
        extra_ranges: Sequence[BodyRange] = (),
    ) -> List[DisplaySegment]:
        """Return render-ready segments for a message body.

        ``extra_ranges`` carries render-only ranges such as links, which are
        inserted after the wire ranges.
        """

        ranges = self.hydrate(text, raw_ranges) + list(extra_ranges)
        return self.segments_for_ranges(text, ranges)

    def segments_for_ranges(self, text: str, ranges: Iterable[BodyRange]) -> List[DisplaySegment]:
        """Build, collapse, and group already validated ranges.

        Mentions are inserted last so they always nest innermost; a mention
        node's children are never rendered.
        """

        ordered = sorted(ranges, key=lambda body_range: body_range.is_mention())
        tree = build_range_tree(ordered)
        return group_contiguous_spoilers(collapse_range_tree(text, tree))

    def search_result(
        self,
        snippet: str,
        body: str,
        raw_ranges: RawRanges,
    ) -> tuple[str, List[DisplaySegment]]:
        """Return the display snippet and its segments for a search hit."""

        result = process_ranges_for_search_result(
            snippet, body, self.hydrate(body, raw_ranges), self._snippet
        )
        return result.snippet, self.segments_for_ranges(result.snippet, result.ranges)

    def preview(self, text: str, raw_ranges: RawRanges) -> Optional[str]:
        """Return a plain-text rendition with spoilers masked."""

        ranges = self.hydrate(text, raw_ranges)
        mentions = [body_range for body_range in ranges if body_range.is_mention()]
        spoilers = [
            body_range
            for body_range in ranges
            if isinstance(body_range.kind, Formatting) and body_range.kind.style == Style.SPOILER
        ]
        return apply_ranges_for_text(text, mentions, spoilers, self._preview.spoiler_replacement)
