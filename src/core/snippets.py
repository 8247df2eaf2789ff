"""Range remapping for search result snippets (core domain).

Ranges are computed against the full message body, but search returns only a
window of it, decorated with highlight and truncation markers. This module
finds where the window sits in the body, moves the relevant ranges into
snippet coordinates and adds highlight ranges for the matched keywords.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from core.config import SnippetConfig
from core.errors import soft_assert
from core.models import BodyRange, Highlight, SnippetResult

LOGGER = logging.getLogger(__name__)


def process_ranges_for_search_result(
    snippet: str,
    body: str,
    ranges: Iterable[BodyRange],
    config: SnippetConfig = SnippetConfig(),
) -> SnippetResult:
    """Return the display snippet and its ranges.

    Leading and trailing truncation markers are rendered as ``config.ellipsis``.
    The leading adjustment and the trailing clip are computed independently,
    so a snippet truncated on both sides gets both.
    """

    highlight_start = re.escape(config.highlight_start)
    highlight_end = re.escape(config.highlight_end)
    truncation_start = re.compile(rf"\A{re.escape(config.truncation)}")
    truncation_end = re.compile(rf"{re.escape(config.truncation)}\Z")

    cleaned = re.sub(highlight_end, "", re.sub(highlight_start, "", snippet))
    without_start = truncation_start.sub("", cleaned, count=1)
    without_end = truncation_end.sub("", without_start, count=1)

    def render_ellipsis(_match: re.Match) -> str:
        return config.ellipsis

    display_snippet = truncation_end.sub(
        render_ellipsis, truncation_start.sub(render_ellipsis, cleaned, count=1), count=1
    )
    left_truncated = len(without_start) != len(cleaned)
    truncation_delta = len(config.ellipsis) if left_truncated else 0

    match = re.search(re.escape(without_end), body)
    soft_assert(match is not None, f"No match found for {snippet!r} inside {body!r}", strict=config.strict)
    snippet_start = match.start() if match else 0
    snippet_end = snippet_start + len(without_end)

    adjusted: List[BodyRange] = []
    for body_range in ranges:
        if body_range.end <= snippet_start or body_range.start >= snippet_end:
            continue
        normalized_start = body_range.start - snippet_start + truncation_delta
        start = max(normalized_start, truncation_delta)
        end = min(normalized_start + body_range.length, len(without_end) + truncation_delta)
        adjusted.append(body_range.moved(start, end - start))

    # Highlight positions are found in the marker-laden snippet; every marker
    # pair before a match inflates its offset.
    marker_correction = len(config.ellipsis) - len(config.truncation) if left_truncated else 0
    markers_skipped = 0
    for highlight in re.finditer(f"{highlight_start}(.*?){highlight_end}", snippet):
        adjusted.append(
            BodyRange(
                start=highlight.start() - markers_skipped + marker_correction,
                length=highlight.end(1) - highlight.start(1),
                kind=Highlight(),
            )
        )
        markers_skipped += len(config.highlight_start) + len(config.highlight_end)

    LOGGER.debug("Mapped %s ranges onto snippet at body offset %s", len(adjusted), snippet_start)
    return SnippetResult(snippet=display_snippet, ranges=tuple(adjusted))
