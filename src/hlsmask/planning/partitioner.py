"""
Interval partitioner: blackout intervals + total duration -> SegmentSequence.

Pure logic. No probing, no I/O. The output covers [0, total_duration) exactly
once and does not depend on the order the intervals were supplied in.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from hlsmask.domain.segments import MIN_SEGMENT_DURATION, BlackoutInterval, Segment, SegmentSequence
from hlsmask.infra.exceptions import PartitionError

logger = logging.getLogger(__name__)


def _clip(intervals: Iterable[BlackoutInterval], total_duration: float) -> list[BlackoutInterval]:
    """Drop intervals starting at/after the end, clamp ends past it."""
    clipped: list[BlackoutInterval] = []
    for interval in intervals:
        if not isinstance(interval, BlackoutInterval):
            raise PartitionError("expected a BlackoutInterval", interval)
        if interval.start >= total_duration:
            logger.debug("Dropping blackout %s: starts at/after end %.6f", interval, total_duration)
            continue
        if interval.end > total_duration:
            logger.debug("Clamping blackout %s to end %.6f", interval, total_duration)
            interval = BlackoutInterval(interval.start, total_duration)
        clipped.append(interval)
    return clipped


def partition(
    total_duration: float,
    intervals: Iterable[BlackoutInterval] = (),
) -> SegmentSequence:
    """
    Partition [0, total_duration) into pass-through and blackout segments.

    Args:
        total_duration: Source duration in seconds; must be positive and finite
        intervals: Blackout intervals in any order; may overlap or touch

    Returns:
        SegmentSequence with indices 0..N-1 in timeline order

    Raises:
        PartitionError: If total_duration is not a positive finite number,
            or a resulting segment is shorter than MIN_SEGMENT_DURATION

    Overlapping intervals are merged into the blackout segment already open
    at the cursor; exactly adjacent intervals stay separate segments.

    Example:
        >>> [(s.start, s.end, s.is_blackout) for s in partition(10.0, [BlackoutInterval(3, 5)])]
        [(0, 3, False), (3, 5, True), (5, 10.0, False)]
    """
    if not isinstance(total_duration, (int, float)) or isinstance(total_duration, bool):
        raise PartitionError(f"total duration must be a number, got {total_duration!r}")
    if not math.isfinite(total_duration) or total_duration <= 0:
        raise PartitionError(f"total duration must be positive and finite, got {total_duration!r}")

    ordered = sorted(_clip(intervals, total_duration), key=lambda iv: (iv.start, iv.end))

    # (start, end, is_blackout) ranges; indices are assigned at the end
    ranges: list[list] = []
    cursor: float = 0
    for interval in ordered:
        start, end = interval.start, interval.end
        if end <= cursor:
            # Fully inside coverage already emitted
            continue
        if start < cursor:
            # Partial overlap with the blackout that moved the cursor
            ranges[-1][1] = end
        else:
            if start > cursor:
                ranges.append([cursor, start, False])
            ranges.append([start, end, True])
        cursor = end

    if cursor < total_duration:
        ranges.append([cursor, total_duration, False])

    for start, end, is_blackout in ranges:
        if end - start < MIN_SEGMENT_DURATION:
            kind = "blackout" if is_blackout else "pass-through"
            raise PartitionError(
                f"{kind} segment [{start:g}, {end:g}) is shorter than {MIN_SEGMENT_DURATION:g}s and cannot be encoded"
            )

    segments = [
        Segment(start=start, end=end, is_blackout=is_blackout, index=index)
        for index, (start, end, is_blackout) in enumerate(ranges)
    ]
    return SegmentSequence(segments)
