"""Shared notification preview formatting helpers.

Notifications cannot render ranges, so the message is degraded to plain text
first and only then escaped for the delivery channel. Keeping this here
prevents drift between channels.
"""

from __future__ import annotations

import html
from typing import Optional

from adapters.telegram_mapper import MessageBody, display_text
from core.processor import RangeProcessor

FALLBACK_TITLE = "New message"


def _escape_md(value: str) -> str:
    for ch in r"*[`_":
        value = value.replace(ch, f"\\{ch}")
    return value


def build_preview(processor: RangeProcessor, body: MessageBody) -> str:
    """Return the plain-text preview for a mapped Telegram message."""

    preview = processor.preview(body.text, body.raw_ranges)
    return display_text(preview or "")


def format_notification(sender_title: Optional[str], preview: str, mode: str) -> str:
    """Return the preview formatted for the requested mode."""

    title = sender_title or FALLBACK_TITLE
    if mode == "plain":
        return f"{title}: {preview}"
    if mode == "markdown":
        return f"**{_escape_md(title)}**\n{_escape_md(preview)}"
    if mode == "html":
        return f"<b>{html.escape(title, quote=False)}</b>\n{html.escape(preview, quote=False)}"
    raise ValueError(f"Unsupported notification format: {mode}")
