"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_PER_TYPE = 250

SNIPPET_LEFT_PLACEHOLDER = "<<left>>"
SNIPPET_RIGHT_PLACEHOLDER = "<<right>>"
SNIPPET_TRUNCATION_PLACEHOLDER = "<<truncation>>"
TRUNCATION_CHAR = "..."

SPOILER_REPLACEMENT = "■■■■"


@dataclass(frozen=True)
class FilterConfig:
    """Limits applied to untrusted wire ranges."""

    max_per_type: int = MAX_PER_TYPE


@dataclass(frozen=True)
class SnippetConfig:
    """Sentinel markers emitted by the full-text search component.

    Callers guarantee the markers never occur in ordinary message text.
    """

    highlight_start: str = SNIPPET_LEFT_PLACEHOLDER
    highlight_end: str = SNIPPET_RIGHT_PLACEHOLDER
    truncation: str = SNIPPET_TRUNCATION_PLACEHOLDER
    ellipsis: str = TRUNCATION_CHAR
    strict: bool = False


@dataclass(frozen=True)
class PreviewConfig:
    """Plain-text degradation settings used for notification previews."""

    spoiler_replacement: str = SPOILER_REPLACEMENT
