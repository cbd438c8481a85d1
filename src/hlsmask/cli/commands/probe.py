"""
Probe and tool-check commands.
"""

from __future__ import annotations

from pathlib import Path

import typer

from hlsmask.adapters.transcoders.ffmpeg_transcoder import FFmpegTranscoder
from hlsmask.infra.exceptions import HlsMaskError
from hlsmask.infra.settings import settings
from hlsmask.runtime.probe import probe_source

from . import _common


def probe(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Source video file"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Print the duration and resolution of SOURCE.
    """
    as_json = _common.wants_json(ctx, json_output)
    try:
        info = probe_source(source, _common.make_transcoder())
    except HlsMaskError as e:
        raise _common.fail(e, as_json)

    _common.emit(
        {
            "status": "ok",
            "source": str(info.path),
            "duration": info.duration,
            "width": info.width,
            "height": info.height,
            "has_audio": info.has_audio,
        },
        as_json,
        [
            f"{info.path}: {info.duration:.6f}s, {info.width}x{info.height}, "
            f"{'audio' if info.has_audio else 'no audio'}"
        ],
    )


def check(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Check that the configured ffmpeg and ffprobe executables run.
    """
    as_json = _common.wants_json(ctx, json_output)
    tools = FFmpegTranscoder.from_settings(settings).check_available()
    ok = all(tools.values())
    _common.emit(
        {"status": "ok" if ok else "error", "tools": tools},
        as_json,
        [f"{'✓' if available else '✗'} {name}" for name, available in tools.items()],
    )
    if not ok:
        raise typer.Exit(1)
