"""
HLS VOD playlist builder for a SegmentSequence.

Renders the normal and the masked playlist from the same sequence. Both share
the header (one target duration for both) and put segment ``index`` on the
same line number, so a player can switch between them at any segment
boundary.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from hlsmask.domain.segments import ChunkVariant, Segment, SegmentSequence

logger = logging.getLogger(__name__)

HLS_VERSION = 3
EXTINF_PRECISION = 6

CONTENT_TYPES = {
    ".m3u8": "application/vnd.apple.mpegurl",
    ".ts": "video/MP2T",
}


class PlaylistVariant(str, Enum):
    NORMAL = "normal"
    MASKED = "masked"


@dataclass(frozen=True)
class Playlists:
    """The two playlist texts rendered from one sequence."""

    normal: str
    masked: str

    def get(self, variant: PlaylistVariant) -> str:
        return self.normal if variant is PlaylistVariant.NORMAL else self.masked


def content_type_for(filename: str | Path) -> str:
    """MIME type used when publishing a generated file."""
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def target_duration(sequence: SegmentSequence) -> int:
    """#EXT-X-TARGETDURATION: ceiling of the longest segment."""
    return math.ceil(sequence.max_duration)


def reference_for(segment: Segment, variant: PlaylistVariant) -> str:
    """Chunk file name a playlist variant references at ``segment``."""
    if variant is PlaylistVariant.MASKED and segment.is_blackout:
        return segment.chunk_name(ChunkVariant.BLACKOUT)
    return segment.chunk_name(ChunkVariant.PASSTHROUGH)


def build_playlist(sequence: SegmentSequence, variant: PlaylistVariant) -> str:
    """Generate the m3u8 text of one playlist variant."""
    lines = [
        "#EXTM3U",
        f"#EXT-X-VERSION:{HLS_VERSION}",
        f"#EXT-X-TARGETDURATION:{target_duration(sequence)}",
        "#EXT-X-MEDIA-SEQUENCE:0",
        "#EXT-X-PLAYLIST-TYPE:VOD",
    ]
    for segment in sequence:
        lines.append(f"#EXTINF:{segment.duration:.{EXTINF_PRECISION}f},")
        lines.append(reference_for(segment, variant))
    lines.append("#EXT-X-ENDLIST")
    return "\n".join(lines)


def build_playlists(sequence: SegmentSequence) -> Playlists:
    """Generate both playlist variants for ``sequence``."""
    return Playlists(
        normal=build_playlist(sequence, PlaylistVariant.NORMAL),
        masked=build_playlist(sequence, PlaylistVariant.MASKED),
    )


def write_playlists(
    playlists: Playlists,
    work_dir: Path,
    normal_name: str = "output.m3u8",
    masked_name: str = "blackout.m3u8",
) -> tuple[Path, Path]:
    """Persist both playlists into ``work_dir``; returns (normal_path, masked_path)."""
    if normal_name == masked_name:
        raise ValueError(f"normal and masked playlists need distinct names, got {normal_name!r}")
    work_dir.mkdir(parents=True, exist_ok=True)
    normal_path = work_dir / normal_name
    masked_path = work_dir / masked_name
    normal_path.write_text(playlists.normal, encoding="utf-8")
    masked_path.write_text(playlists.masked, encoding="utf-8")
    logger.debug("Wrote playlists %s and %s", normal_path, masked_path)
    return normal_path, masked_path
