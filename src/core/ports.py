"""Ports (interfaces) used by the core engine.

Ports define the minimal contracts for the lookups the engine cannot do on
its own, so the core can be reused with different messaging backends.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import Participant


class MentionResolverPort(Protocol):
    """Participant lookup required to hydrate mentions."""

    def resolve(self, participant_id: str) -> Optional[Participant]:
        ...
