"""Application entry point for textranges."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Iterable, Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.notification_formatting import build_preview, format_notification
from adapters.telegram_mapper import EntityCacheResolver, build_message_body, entity_title, mention_ids
from client import build_client
from core.models import DisplaySegment, Participant
from core.processor import RangeProcessor

NAME = "TEXTRANGES"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str) -> None:
        super().__init__(fmt=fmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _redaction_values() -> list[str]:
    # Only the watch credentials are secret.
    values = {os.getenv(name) for name in ("API_ID", "API_HASH")}
    return sorted((value for value in values if value), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}

    load_dotenv()
    level = getattr(logging, str(config.get("level", "WARNING")).upper(), logging.WARNING)
    formatter = _RedactingFormatter(_redaction_values(), fmt="%(asctime)s %(levelname)s %(name)s: %(message)s")

    # stdout carries command output, so logs go to stderr.
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    file_path = config.get("file")
    if file_path:
        if not os.path.isabs(file_path):
            file_path = os.path.join(settings.PROJECT_ROOT, file_path)
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        handlers.append(RotatingFileHandler(file_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


class _StaticResolver:
    """Resolve mentions from the participants map of a JSON payload."""

    def __init__(self, participants: dict[str, str]) -> None:
        self._participants = participants

    def resolve(self, participant_id: str) -> Optional[Participant]:
        title = self._participants.get(participant_id)
        if title is None:
            return None
        return Participant(id=participant_id, display_title=title)


def _build_processor(resolver) -> RangeProcessor:
    return RangeProcessor(
        resolver,
        filter_config=settings.FILTER_CONFIG,
        snippet_config=settings.SNIPPET_CONFIG,
        preview_config=settings.PREVIEW_CONFIG,
    )


def _read_payload(path: Optional[str]) -> dict[str, Any]:
    if not path or path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _describe(segment: DisplaySegment) -> str:
    formatting = segment.formatting
    flags = [
        name
        for name in ("bold", "italic", "monospace", "spoiler", "strikethrough", "highlighted")
        if getattr(formatting, name)
    ]
    parts = [f"[{segment.start}:{segment.start + segment.length}]", json.dumps(segment.text, ensure_ascii=False)]
    if flags:
        parts.append(",".join(flags))
    if formatting.spoiler_id is not None:
        parts.append(f"spoiler_id={formatting.spoiler_id}")
    if formatting.url:
        parts.append(f"url={formatting.url}")
    for mention in segment.mentions:
        parts.append(f"@{getattr(mention.kind, 'display_name', '?')}+{mention.start}")
    return " ".join(parts)


def _print_segments(segments: Iterable[DisplaySegment]) -> None:
    for segment in segments:
        if segment.spoiler_children:
            print(f"spoiler group ({len(segment.spoiler_children)} segments)")
            for child in segment.spoiler_children:
                print(f"  {_describe(child)}")
            continue
        print(_describe(segment))


def _render(path: Optional[str]) -> None:
    payload = _read_payload(path)
    processor = _build_processor(_StaticResolver(payload.get("participants", {})))
    _print_segments(processor.segments(payload.get("text", ""), payload.get("ranges", [])))


def _preview(path: Optional[str]) -> None:
    payload = _read_payload(path)
    processor = _build_processor(_StaticResolver(payload.get("participants", {})))
    preview = processor.preview(payload.get("text", ""), payload.get("ranges", [])) or ""
    print(format_notification(payload.get("sender"), preview, settings.PREVIEW_MODE))


def _search(path: Optional[str]) -> None:
    payload = _read_payload(path)
    processor = _build_processor(_StaticResolver(payload.get("participants", {})))
    snippet, segments = processor.search_result(
        payload.get("snippet", ""),
        payload.get("body", ""),
        payload.get("ranges", []),
    )
    print(snippet)
    _print_segments(segments)


def _watch() -> None:
    _print_banner()
    logger = logging.getLogger(__name__)
    logger.info("Starting textranges watcher")

    client = build_client()
    resolver = EntityCacheResolver(client)
    processor = _build_processor(resolver)

    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            body = build_message_body(event.message)
            await resolver.prefetch(mention_ids(body.raw_ranges), body.mention_titles)
            sender = await event.get_sender()
            title = entity_title(sender) if sender else None
            print(format_notification(title, build_preview(processor, body), settings.PREVIEW_MODE))
        except Exception:
            logger.exception("Error while processing message")

    # Explicit lifecycle management makes start/shutdown behavior obvious.
    client.start()
    logger.info("Client connected. Listening for incoming messages...")
    client.run_until_disconnected()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="textranges")
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("render", "Print display segments for a JSON message payload"),
        ("preview", "Print the plain-text notification preview for a JSON message payload"),
        ("search", "Print the snippet and segments for a JSON search result payload"),
    ):
        command = subparsers.add_parser(name, help=help_text)
        command.add_argument("path", nargs="?", default="-", help="JSON file, or - for stdin")
    subparsers.add_parser("watch", help="Print previews of incoming Telegram messages")

    args = parser.parse_args(argv)
    _configure_logging()
    if args.command == "render":
        _render(args.path)
        return
    if args.command == "preview":
        _preview(args.path)
        return
    if args.command == "search":
        _search(args.path)
        return
    if args.command == "watch":
        _watch()
        return
    parser.print_help()


if __name__ == "__main__":
    main()
