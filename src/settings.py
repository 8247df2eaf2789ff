"""Static configuration for textranges.

User-editable settings (range caps, snippet markers, preview output, logging)
live in an optional JSON file; every key has a default so the engine also
runs without one.
"""

import json
import os

from dotenv import load_dotenv

from core.config import (
    MAX_PER_TYPE,
    SNIPPET_LEFT_PLACEHOLDER,
    SNIPPET_RIGHT_PLACEHOLDER,
    SNIPPET_TRUNCATION_PLACEHOLDER,
    SPOILER_REPLACEMENT,
    TRUNCATION_CHAR,
    FilterConfig,
    PreviewConfig,
    SnippetConfig,
)

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# The config path can be overridden per environment, e.g. for tests.
CONFIG_PATH = os.getenv("TEXTRANGES_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json if present, otherwise fall back to defaults."""

    if not os.path.exists(CONFIG_PATH):
        return {}

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Development mode turns soft assertions into hard failures.
DEVELOPMENT = bool(_CONFIG.get("development", False)) or os.getenv("TEXTRANGES_DEV") == "1"

# Per-category cap on untrusted wire ranges.
_filter = _CONFIG.get("filter", {})
MAX_RANGES_PER_TYPE = int(_filter.get("max_per_type", MAX_PER_TYPE))

# Sentinel markers must match whatever the search index emits.
_snippet = _CONFIG.get("snippet", {})
HIGHLIGHT_START = _snippet.get("highlight_start", SNIPPET_LEFT_PLACEHOLDER)
HIGHLIGHT_END = _snippet.get("highlight_end", SNIPPET_RIGHT_PLACEHOLDER)
TRUNCATION = _snippet.get("truncation", SNIPPET_TRUNCATION_PLACEHOLDER)
ELLIPSIS = _snippet.get("ellipsis", TRUNCATION_CHAR)

# Preview output used by the plain-text commands and the watcher.
_preview = _CONFIG.get("preview", {})
SPOILER_PLACEHOLDER = _preview.get("spoiler_replacement", SPOILER_REPLACEMENT)
PREVIEW_MODE = _preview.get("mode", "plain")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})

FILTER_CONFIG = FilterConfig(max_per_type=MAX_RANGES_PER_TYPE)
SNIPPET_CONFIG = SnippetConfig(
    highlight_start=HIGHLIGHT_START,
    highlight_end=HIGHLIGHT_END,
    truncation=TRUNCATION,
    ellipsis=ELLIPSIS,
    strict=DEVELOPMENT,
)
PREVIEW_CONFIG = PreviewConfig(spoiler_replacement=SPOILER_PLACEHOLDER)
