"""
Timeline model: blackout intervals, segments, segment sequences and chunks.

A Segment's ``index`` is the correlation key for everything downstream: the
chunk file(s) the materializer writes and the reference line the playlist
builder emits are both derived from it through ``Segment.chunk_name``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from hlsmask.infra.exceptions import PartitionError

CHUNK_EXTENSION = ".ts"
INDEX_WIDTH = 3
# Shortest segment a chunk command can express; durations are rendered to the microsecond
MIN_SEGMENT_DURATION = 1e-6

# Matches every file name produced by Segment.chunk_name
CHUNK_NAME_RE = re.compile(r"^(segment|blackout)_(\d{3,})\.ts$")


class ChunkVariant(str, Enum):
    """Which rendition of a segment a chunk holds."""

    PASSTHROUGH = "segment"
    BLACKOUT = "blackout"


def chunk_filename(index: int, variant: ChunkVariant) -> str:
    """Return the deterministic chunk file name for (index, variant)."""
    if index < 0:
        raise ValueError(f"chunk index must be non-negative, got {index}")
    return f"{variant.value}_{index:0{INDEX_WIDTH}d}{CHUNK_EXTENSION}"


def parse_chunk_filename(name: str) -> tuple[int, ChunkVariant] | None:
    """Inverse of chunk_filename; None when ``name`` is not a chunk file name."""
    match = CHUNK_NAME_RE.match(name.strip())
    if match is None:
        return None
    return int(match.group(2)), ChunkVariant(match.group(1))


@dataclass(frozen=True)
class BlackoutInterval:
    """Caller-supplied time range (seconds) whose playback must be masked."""

    start: float
    end: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise PartitionError("blackout interval bounds must be finite", self)
        if self.start < 0:
            raise PartitionError("blackout interval starts before 0", self)
        if self.start >= self.end:
            raise PartitionError("blackout interval must have start < end", self)

    def __str__(self) -> str:
        return f"[{self.start:g}, {self.end:g})"


@dataclass(frozen=True)
class Segment:
    """
    Half-open time range [start, end) of the source, tagged pass-through or blackout.
    Immutable once emitted by the partitioner.
    """

    start: float
    end: float
    is_blackout: bool
    index: int

    @property
    def duration(self) -> float:
        return self.end - self.start

    def chunk_name(self, variant: ChunkVariant) -> str:
        return chunk_filename(self.index, variant)

    @property
    def passthrough_name(self) -> str:
        return self.chunk_name(ChunkVariant.PASSTHROUGH)

    @property
    def blackout_name(self) -> str:
        return self.chunk_name(ChunkVariant.BLACKOUT)

    @property
    def variants(self) -> tuple[ChunkVariant, ...]:
        """Chunk variants this segment is materialized in.

        Blackout segments need both: the normal playlist still plays the
        original content at that position.
        """
        if self.is_blackout:
            return (ChunkVariant.PASSTHROUGH, ChunkVariant.BLACKOUT)
        return (ChunkVariant.PASSTHROUGH,)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "is_blackout": self.is_blackout,
        }


class SegmentSequence(Sequence[Segment]):
    """
    Ordered, contiguous, gap-free segments covering [0, total_duration).

    Construction validates the invariants; instances are read-only.
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: Sequence[Segment]) -> None:
        segments = tuple(segments)
        if not segments:
            raise PartitionError("segment sequence must contain at least one segment")
        if segments[0].start != 0:
            raise PartitionError("segment sequence must start at 0", segments[0])
        for position, seg in enumerate(segments):
            if seg.index != position:
                raise PartitionError(f"segment at position {position} has index {seg.index}", seg)
            if not seg.start < seg.end:
                raise PartitionError("zero-length or inverted segment", seg)
            if position and segments[position - 1].end != seg.start:
                raise PartitionError("segments are not contiguous", seg)
        self._segments = segments

    def __getitem__(self, item):  # type: ignore[override]
        return self._segments[item]

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SegmentSequence):
            return self._segments == other._segments
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._segments)

    def __repr__(self) -> str:
        return f"SegmentSequence({list(self._segments)!r})"

    @property
    def total_duration(self) -> float:
        return self._segments[-1].end

    @property
    def max_duration(self) -> float:
        return max(seg.duration for seg in self._segments)

    @property
    def blackout_count(self) -> int:
        return sum(1 for seg in self._segments if seg.is_blackout)

    def chunk_names(self) -> list[str]:
        """Every chunk file name this sequence materializes, in index order."""
        return [seg.chunk_name(variant) for seg in self._segments for variant in seg.variants]


@dataclass(frozen=True)
class Chunk:
    """A materialized, independently playable chunk file."""

    index: int
    variant: ChunkVariant
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class SourceInfo:
    """Probed facts about a source video."""

    path: Path
    duration: float
    width: int
    height: int
    has_audio: bool = True

    @property
    def resolution(self) -> tuple[int, int]:
        return (self.width, self.height)
