"""
Build use case: source video + blackout intervals -> chunks + two playlists.

Probe -> partition -> render playlists in memory -> materialize chunks ->
write playlists. Playlists reach disk only after every chunk they reference
exists. Each call works in its own directory.
"""

from __future__ import annotations

import tempfile
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from hlsmask.adapters.transcoders.base import Transcoder
from hlsmask.adapters.transcoders.ffmpeg_transcoder import FFmpegTranscoder
from hlsmask.domain.segments import BlackoutInterval, Chunk, SegmentSequence, SourceInfo
from hlsmask.infra.logging import get_logger
from hlsmask.infra.settings import Settings
from hlsmask.infra.settings import settings as default_settings
from hlsmask.planning.partitioner import partition
from hlsmask.runtime.materializer import SegmentMaterializer
from hlsmask.runtime.probe import probe_source
from hlsmask.streaming.playlist import build_playlists as render_playlists
from hlsmask.streaming.playlist import content_type_for, write_playlists

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuildResult:
    """Everything one build produced."""

    source: SourceInfo
    sequence: SegmentSequence
    work_dir: Path
    chunks: tuple[Chunk, ...]
    normal_playlist: str
    masked_playlist: str
    normal_playlist_path: Path
    masked_playlist_path: Path

    @property
    def chunk_paths(self) -> list[Path]:
        return [chunk.path for chunk in self.chunks]

    def artifacts(self) -> list[tuple[Path, str]]:
        """(path, content type) of every file to publish, chunks first."""
        paths = self.chunk_paths + [self.normal_playlist_path, self.masked_playlist_path]
        return [(path, content_type_for(path)) for path in paths]

    def to_dict(self) -> dict:
        return {
            "source": str(self.source.path),
            "duration": self.source.duration,
            "resolution": f"{self.source.width}x{self.source.height}",
            "has_audio": self.source.has_audio,
            "work_dir": str(self.work_dir),
            "segments": [segment.to_dict() for segment in self.sequence],
            "chunks": [str(path) for path in self.chunk_paths],
            "normal_playlist": str(self.normal_playlist_path),
            "masked_playlist": str(self.masked_playlist_path),
        }


def make_work_dir(work_root: str | Path | None = None) -> Path:
    """Create a fresh per-build directory under ``work_root`` (or the system temp dir)."""
    if work_root is not None:
        Path(work_root).mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix="hlsmask-", dir=work_root))


def remove_artifacts(paths: Iterable[Path]) -> int:
    """Delete build artifacts (e.g. partial chunks after a failure); returns the count removed."""
    removed = 0
    for path in paths:
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            continue
    logger.info("artifacts_removed", count=removed)
    return removed


def build_playlists(
    source_path: str | Path,
    intervals: Iterable[BlackoutInterval] = (),
    work_dir: Path | None = None,
    transcoder: Transcoder | None = None,
    settings: Settings | None = None,
    cancel_event: threading.Event | None = None,
    max_workers: int | None = None,
    segment_timeout: float | None = None,
) -> BuildResult:
    """
    Build the normal and masked playlists for a source video.

    Args:
        source_path: Source media file
        intervals: Blackout intervals (any order)
        work_dir: Output directory; a fresh one is created when omitted
        transcoder: Transcoder to use; FFmpegTranscoder from settings by default
        settings: Settings override (defaults to the module-level settings)
        cancel_event: Set to abort materialization
        max_workers: Override settings.max_workers
        segment_timeout: Override settings.segment_timeout

    Returns:
        BuildResult with both playlist texts, their paths and the chunk paths

    Raises:
        ProbeError: Source unreadable; nothing is written
        PartitionError: Degenerate intervals/duration; nothing is written
        MaterializationError: A chunk job failed; partial chunks are left in place
    """
    cfg = settings or default_settings
    source = Path(source_path)
    transcoder = transcoder or FFmpegTranscoder.from_settings(cfg)
    intervals = list(intervals)

    info = probe_source(source, transcoder)
    sequence = partition(info.duration, intervals)
    playlists = render_playlists(sequence)
    logger.info(
        "timeline_partitioned",
        source=str(source),
        intervals=len(intervals),
        segments=len(sequence),
        blackouts=sequence.blackout_count,
    )

    if work_dir is None:
        work_dir = make_work_dir(cfg.work_root)

    materializer = SegmentMaterializer(
        transcoder,
        max_workers=max_workers or cfg.max_workers,
        segment_timeout=segment_timeout or cfg.segment_timeout,
    )
    chunks = materializer.materialize(info, sequence, work_dir, cancel_event=cancel_event)

    normal_path, masked_path = write_playlists(
        playlists,
        work_dir,
        normal_name=cfg.normal_playlist_name,
        masked_name=cfg.masked_playlist_name,
    )
    logger.info(
        "build_finished",
        work_dir=str(work_dir),
        chunks=len(chunks),
        normal_playlist=str(normal_path),
        masked_playlist=str(masked_path),
    )

    return BuildResult(
        source=info,
        sequence=sequence,
        work_dir=work_dir,
        chunks=tuple(chunks),
        normal_playlist=playlists.normal,
        masked_playlist=playlists.masked,
        normal_playlist_path=normal_path,
        masked_playlist_path=masked_path,
    )
