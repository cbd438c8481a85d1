"""
Segment materializer: renders every chunk a SegmentSequence needs.

Each (segment, variant) pair is an independent ffmpeg job writing its own file,
so jobs run on a thread pool. The first failure stops the build: queued jobs
are cancelled, running ones are terminated through the shared abort event,
and the error reports which segments were fully written.
"""

from __future__ import annotations

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from hlsmask.adapters.transcoders.base import Transcoder
from hlsmask.domain.segments import Chunk, ChunkVariant, Segment, SegmentSequence, SourceInfo
from hlsmask.infra.exceptions import (
    MaterializationCancelled,
    MaterializationError,
    TranscoderCancelled,
)
from hlsmask.infra.logging import get_logger

logger = get_logger(__name__)

# How often the coordinator checks the caller's cancel event
WAIT_INTERVAL_SEC = 0.2


@dataclass(frozen=True)
class ChunkJob:
    """One transcoder invocation."""

    segment: Segment
    variant: ChunkVariant
    output_path: Path


def plan_jobs(sequence: SegmentSequence, work_dir: Path) -> list[ChunkJob]:
    """Every job needed for ``sequence``, in index order."""
    return [
        ChunkJob(segment=segment, variant=variant, output_path=work_dir / segment.chunk_name(variant))
        for segment in sequence
        for variant in segment.variants
    ]


def _completed_indices(sequence: SegmentSequence, chunks: list[Chunk]) -> list[int]:
    written = {(chunk.index, chunk.variant) for chunk in chunks}
    return [
        segment.index
        for segment in sequence
        if all((segment.index, variant) in written for variant in segment.variants)
    ]


class SegmentMaterializer:
    """Runs chunk jobs for a sequence through a Transcoder."""

    def __init__(
        self,
        transcoder: Transcoder,
        max_workers: int = 4,
        segment_timeout: float | None = 600.0,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.transcoder = transcoder
        self.max_workers = max_workers
        self.segment_timeout = segment_timeout

    def _run_job(self, job: ChunkJob, source: SourceInfo, abort: threading.Event) -> Chunk:
        segment = job.segment
        if job.variant is ChunkVariant.BLACKOUT:
            self.transcoder.synthesize_blank(
                segment.duration,
                source.width,
                source.height,
                job.output_path,
                ts_offset=segment.start,
                timeout=self.segment_timeout,
                cancel_event=abort,
            )
        else:
            self.transcoder.extract_range(
                source.path,
                segment.start,
                segment.end,
                job.output_path,
                timeout=self.segment_timeout,
                cancel_event=abort,
                has_audio=source.has_audio,
            )
        logger.debug("chunk_written", index=segment.index, variant=job.variant.value, path=str(job.output_path))
        return Chunk(index=segment.index, variant=job.variant, path=job.output_path)

    def materialize(
        self,
        source: SourceInfo,
        sequence: SegmentSequence,
        work_dir: Path,
        cancel_event: threading.Event | None = None,
    ) -> list[Chunk]:
        """
        Render all chunks of ``sequence`` into ``work_dir``.

        Args:
            source: Probed source (path and resolution)
            sequence: Partitioned timeline
            work_dir: Output directory for this build; created if missing
            cancel_event: Set by the caller to abort the remaining jobs

        Returns:
            Chunks sorted by (index, variant)

        Raises:
            MaterializationError: On the first failed job; carries the failed
                index, the fully written segment indices and the written paths
            MaterializationCancelled: If ``cancel_event`` was set before all jobs finished
        """
        work_dir.mkdir(parents=True, exist_ok=True)
        jobs = plan_jobs(sequence, work_dir)
        abort = threading.Event()
        chunks: list[Chunk] = []
        failure: tuple[ChunkJob, BaseException] | None = None
        cancelled = False

        logger.info(
            "materialization_started",
            source=str(source.path),
            segments=len(sequence),
            jobs=len(jobs),
            workers=self.max_workers,
            work_dir=str(work_dir),
        )

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="hlsmask-chunk") as pool:
            futures: dict[Future, ChunkJob] = {
                pool.submit(self._run_job, job, source, abort): job for job in jobs
            }
            pending = set(futures)

            def _stop() -> None:
                abort.set()
                for fut in pending:
                    fut.cancel()

            while pending:
                if not abort.is_set() and cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    _stop()
                done, pending = wait(pending, timeout=WAIT_INTERVAL_SEC, return_when=FIRST_COMPLETED)
                for fut in done:
                    if fut.cancelled():
                        continue
                    exc = fut.exception()
                    if exc is None:
                        chunks.append(fut.result())
                    elif isinstance(exc, TranscoderCancelled) and abort.is_set():
                        continue
                    elif failure is None:
                        failure = (futures[fut], exc)
                        _stop()

        chunks.sort(key=lambda c: (c.index, c.variant is ChunkVariant.BLACKOUT))
        completed = _completed_indices(sequence, chunks)
        partial = [chunk.path for chunk in chunks]

        if failure is not None:
            job, exc = failure
            logger.error(
                "materialization_failed",
                index=job.segment.index,
                variant=job.variant.value,
                error=str(exc),
                completed=len(completed),
            )
            raise MaterializationError(
                job.segment.index,
                f"{job.variant.value} chunk {job.output_path.name} failed: {exc}",
                completed=completed,
                partial_paths=partial,
            ) from exc

        # A cancel that stopped nothing is not a cancellation
        if cancelled and len(chunks) < len(jobs):
            logger.warning("materialization_cancelled", completed=len(completed), written=len(partial))
            raise MaterializationCancelled(
                None,
                f"Cancelled after {len(completed)} of {len(sequence)} segments",
                completed=completed,
                partial_paths=partial,
            )

        logger.info("materialization_finished", chunks=len(chunks))
        return chunks
