"""
Plan command: dry-run partition and playlist rendering, no transcoding.
"""

from __future__ import annotations

from pathlib import Path

import typer

from hlsmask.infra.exceptions import ConfigurationError, HlsMaskError
from hlsmask.planning.partitioner import partition
from hlsmask.runtime.probe import duration as probe_duration
from hlsmask.streaming.playlist import build_playlists, target_duration

from . import _common


def plan(
    ctx: typer.Context,
    source: Path | None = typer.Argument(None, help="Source video (probed for its duration)"),
    total_duration: float | None = typer.Option(
        None, "--duration", "-d", help="Total duration in seconds (skips probing)"
    ),
    blackout: list[str] | None = typer.Option(
        None, "--blackout", "-b", help="Blackout interval START:END in seconds (repeatable)"
    ),
    intervals_file: Path | None = typer.Option(
        None, "--intervals", help="JSON/YAML file with blackout intervals"
    ),
    show_playlists: bool = typer.Option(
        False, "--show-playlists", help="Print both playlists after the segment table"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Show the segment timeline and the playlists a build would produce.
    """
    as_json = _common.wants_json(ctx, json_output)
    try:
        intervals = _common.collect_intervals(blackout, intervals_file)
        if total_duration is None:
            if source is None:
                raise ConfigurationError("Provide SOURCE or --duration")
            total_duration = probe_duration(source, _common.make_transcoder())
        sequence = partition(total_duration, intervals)
    except HlsMaskError as e:
        raise _common.fail(e, as_json)

    playlists = build_playlists(sequence)
    payload = {
        "status": "ok",
        "duration": total_duration,
        "target_duration": target_duration(sequence),
        "segments": [segment.to_dict() for segment in sequence],
        "chunks": sequence.chunk_names(),
        "normal_playlist": playlists.normal,
        "masked_playlist": playlists.masked,
    }
    lines = _common.segment_table(sequence)
    if show_playlists:
        lines += ["", "# normal", playlists.normal, "", "# masked", playlists.masked]
    _common.emit(payload, as_json, lines)
