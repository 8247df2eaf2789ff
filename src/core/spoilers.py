"""Grouping of contiguous spoiler segments (core domain)."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List

from core.models import DisplaySegment


def _container(run: List[DisplaySegment]) -> DisplaySegment:
    return replace(run[0], spoiler_children=tuple(run))


def _extends_run(run: List[DisplaySegment], segment: DisplaySegment) -> bool:
    if not run or not segment.is_spoiler:
        return False
    spoiler_id = run[0].spoiler_id
    return spoiler_id is not None and spoiler_id == segment.spoiler_id


def group_contiguous_spoilers(segments: Iterable[DisplaySegment]) -> List[DisplaySegment]:
    """Merge runs of spoiler segments that share a spoiler id.

    Each run becomes one container segment carrying the attributes of its
    first member and the ordered members as ``spoiler_children``. A spoiler
    without an id always starts a run of its own. Other segments pass
    through unchanged.
    """

    result: List[DisplaySegment] = []
    run: List[DisplaySegment] = []

    for segment in segments:
        if _extends_run(run, segment):
            run.append(segment)
            continue

        if run:
            result.append(_container(run))
            run = []

        if segment.is_spoiler:
            run = [segment]
        else:
            result.append(segment)

    if run:
        result.append(_container(run))
    return result
