"""Telegram client for the ``watch`` command.

``render``, ``preview`` and ``search`` read JSON payloads and never connect;
only ``watch`` needs a live session to receive messages and resolve the
participants they mention.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient


def build_client() -> TelegramClient:
    """Return a client for ``watch`` built from API_ID, API_HASH and SESSION_NAME."""

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    if not api_id or not api_hash:
        raise RuntimeError("watch needs API_ID and API_HASH in the environment or .env")

    logging.getLogger(__name__).info("Connecting watch client")
    return TelegramClient(os.getenv("SESSION_NAME", "textranges"), int(api_id), api_hash)
