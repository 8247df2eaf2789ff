from __future__ import annotations

from typing import Optional

from core.models import DisplaySegment, SegmentFormatting
from core.spoilers import group_contiguous_spoilers


def _segment(text: str, start: int, spoiler_id: Optional[int] = None, spoiler: bool = True) -> DisplaySegment:
    return DisplaySegment(
        text=text,
        start=start,
        length=len(text),
        formatting=SegmentFormatting(spoiler=spoiler, spoiler_id=spoiler_id if spoiler else None),
    )


def test_contiguous_same_id_spoilers_share_a_container() -> None:
    first = _segment("a", 0, 5)
    second = _segment("b", 1, 5)
    third = _segment("c", 2, 5)
    fourth = _segment("d", 3, 6)

    grouped = group_contiguous_spoilers([first, second, third, fourth])

    assert len(grouped) == 2
    assert grouped[0].text == "a"
    assert grouped[0].spoiler_id == 5
    assert grouped[0].spoiler_children == (first, second, third)
    assert grouped[1].spoiler_id == 6
    assert grouped[1].spoiler_children == (fourth,)


def test_plain_segment_breaks_a_run() -> None:
    segments = [_segment("a", 0, 5), _segment(" ", 1, spoiler=False), _segment("b", 2, 5)]

    grouped = group_contiguous_spoilers(segments)

    assert len(grouped) == 3
    assert grouped[0].spoiler_children == (segments[0],)
    assert grouped[1] == segments[1]
    assert grouped[2].spoiler_children == (segments[2],)


def test_spoilers_without_id_are_never_merged() -> None:
    segments = [_segment("a", 0), _segment("b", 1)]

    grouped = group_contiguous_spoilers(segments)

    assert [g.spoiler_children for g in grouped] == [(segments[0],), (segments[1],)]


def test_non_spoilers_pass_through_unchanged() -> None:
    segments = [_segment("a", 0, spoiler=False), _segment("b", 1, spoiler=False)]
    assert group_contiguous_spoilers(segments) == segments


def test_empty_input() -> None:
    assert group_contiguous_spoilers([]) == []
