"""Range tree construction (core domain).

A forest is a tuple of ``RangeNode`` sorted by start, with siblings that never
overlap and children that lie fully inside their parent. Insertion keeps
those properties by splitting the incoming range wherever it partially
overlaps an existing node; existing nodes are never split. Touching
boundaries do not count as overlap.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from core.errors import RangeInvariantError
from core.models import BodyRange, RangeNode

LOGGER = logging.getLogger(__name__)

Forest = Tuple[RangeNode, ...]


def _nest(current: RangeNode, body_range: BodyRange) -> RangeNode:
    # body_range is already relative to current.start
    return current.with_children(insert_range(body_range, current.children))


def insert_range(body_range: BodyRange, forest: Iterable[RangeNode]) -> Forest:
    """Return a new forest with ``body_range`` inserted.

    The input forest is left untouched. Siblings are walked left to right;
    any piece of the range that extends past the node being compared is
    carried on to the following siblings.
    """

    nodes = tuple(forest)
    result: List[RangeNode] = []
    remaining: Optional[BodyRange] = body_range
    index = 0

    while remaining is not None and index < len(nodes):
        current = nodes[index]
        start = remaining.start
        end = remaining.end

        # Ends before current starts.
        if end <= current.start:
            result.append(RangeNode.leaf(remaining))
            remaining = None
            break

        # Starts after current ends.
        if start >= current.end:
            result.append(current)
            index += 1
            continue

        # Contains current: prefix leaf, middle nested, suffix carried on.
        if start < current.start and end > current.end:
            result.append(RangeNode.leaf(remaining.moved(start, current.start - start)))
            result.append(_nest(current, remaining.moved(0, current.length)))
            remaining = remaining.moved(current.end, end - current.end)
            index += 1
            continue

        # Contained by current.
        if start >= current.start and end <= current.end:
            result.append(_nest(current, remaining.moved(start - current.start)))
            remaining = None
            index += 1
            break

        # Overlaps the beginning of current.
        if start < current.start and end <= current.end:
            result.append(RangeNode.leaf(remaining.moved(start, current.start - start)))
            result.append(_nest(current, remaining.moved(0, end - current.start)))
            remaining = None
            index += 1
            break

        # Overlaps the end of current.
        if start >= current.start and end > current.end:
            result.append(_nest(current, remaining.moved(start - current.start, current.end - start)))
            remaining = remaining.moved(current.end, end - current.end)
            index += 1
            continue

        LOGGER.error("insert_range: unhandled range %r against %r", remaining, current)
        raise RangeInvariantError(f"Unhandled range {remaining!r}")

    if remaining is not None:
        result.append(RangeNode.leaf(remaining))
    result.extend(nodes[index:])
    return tuple(result)


def build_range_tree(ranges: Iterable[BodyRange], forest: Iterable[RangeNode] = ()) -> Forest:
    """Insert ranges one at a time, in the order given."""

    tree = tuple(forest)
    for body_range in ranges:
        tree = insert_range(body_range, tree)
    return tree
