"""
Domain model - blackout intervals, segments and chunk naming.
"""

from .segments import (
    CHUNK_NAME_RE,
    BlackoutInterval,
    Chunk,
    ChunkVariant,
    Segment,
    SegmentSequence,
    SourceInfo,
    chunk_filename,
    parse_chunk_filename,
)

__all__ = [
    "CHUNK_NAME_RE",
    "BlackoutInterval",
    "Chunk",
    "ChunkVariant",
    "Segment",
    "SegmentSequence",
    "SourceInfo",
    "chunk_filename",
    "parse_chunk_filename",
]
