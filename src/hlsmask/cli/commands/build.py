"""
Build command: render chunks and both playlists for a source video.
"""

from __future__ import annotations

import signal
import threading
from pathlib import Path

import typer

from hlsmask.infra.exceptions import HlsMaskError, MaterializationError
from hlsmask.usecases.build_playlists import build_playlists, remove_artifacts

from . import _common


def build(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Source video file"),
    blackout: list[str] | None = typer.Option(
        None, "--blackout", "-b", help="Blackout interval START:END in seconds (repeatable)"
    ),
    intervals_file: Path | None = typer.Option(
        None, "--intervals", help="JSON/YAML file with blackout intervals"
    ),
    work_dir: Path | None = typer.Option(
        None, "--work-dir", help="Output directory (default: fresh temporary directory)"
    ),
    workers: int | None = typer.Option(None, "--workers", min=1, help="Parallel ffmpeg jobs"),
    segment_timeout: float | None = typer.Option(
        None, "--segment-timeout", min=1.0, help="Per-chunk ffmpeg timeout in seconds"
    ),
    keep_partial: bool = typer.Option(
        False, "--keep-partial", help="Keep chunks already written when the build fails"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Partition SOURCE around the blackout intervals, render every chunk and write
    the normal and masked playlists.
    """
    as_json = _common.wants_json(ctx, json_output)
    cancel_event = threading.Event()

    def _on_interrupt(signum, frame):
        typer.echo("\nCancelling remaining ffmpeg jobs...", err=True)
        cancel_event.set()

    previous_handler = signal.signal(signal.SIGINT, _on_interrupt)
    try:
        intervals = _common.collect_intervals(blackout, intervals_file)
        result = build_playlists(
            source,
            intervals,
            work_dir=work_dir,
            transcoder=_common.make_transcoder(),
            cancel_event=cancel_event,
            max_workers=workers,
            segment_timeout=segment_timeout,
        )
    except MaterializationError as e:
        if not keep_partial and e.partial_paths:
            remove_artifacts(e.partial_paths)
        raise _common.fail(e, as_json)
    except HlsMaskError as e:
        raise _common.fail(e, as_json)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    payload = {"status": "ok", **result.to_dict()}
    _common.emit(
        payload,
        as_json,
        [
            f"Built {len(result.sequence)} segment(s), {len(result.chunks)} chunk(s) in {result.work_dir}",
            *_common.segment_table(result.sequence),
            f"Normal playlist: {result.normal_playlist_path}",
            f"Masked playlist: {result.masked_playlist_path}",
        ],
    )
