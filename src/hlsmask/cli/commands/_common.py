"""
Shared helpers for CLI commands: output formatting, error reporting and input
collection. All stdout/stderr writes of the CLI go through here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer

from hlsmask.adapters.transcoders.base import Transcoder
from hlsmask.adapters.transcoders.ffmpeg_transcoder import FFmpegTranscoder
from hlsmask.domain.segments import BlackoutInterval, SegmentSequence
from hlsmask.infra.exceptions import (
    HlsMaskError,
    MaterializationError,
    ProbeError,
    RewriteError,
)
from hlsmask.infra.settings import settings
from hlsmask.providers.files import load_intervals, parse_interval_spec


def make_transcoder() -> Transcoder:
    """Transcoder used by every command (patched in tests)."""
    return FFmpegTranscoder.from_settings(settings)


def wants_json(ctx: typer.Context | None, json_output: bool) -> bool:
    """Per-command --json wins; otherwise honour the global --json flag."""
    if json_output:
        return True
    if ctx is not None and isinstance(ctx.obj, dict):
        return bool(ctx.obj.get("json"))
    return False


def format_json_output(result: dict) -> str:
    return json.dumps(result, indent=2, default=str)


def emit(result: dict, as_json: bool, human_lines: list[str]) -> None:
    if as_json:
        typer.echo(format_json_output(result))
    else:
        for line in human_lines:
            typer.echo(line)


def error_payload(error: HlsMaskError) -> dict[str, Any]:
    """JSON shape of a failure: kind, message and the offending inputs."""
    payload: dict[str, Any] = {"status": "error", "kind": error.kind, "error": str(error)}
    if isinstance(error, ProbeError):
        payload["source"] = error.source
    elif isinstance(error, MaterializationError):
        payload["index"] = error.index
        payload["completed"] = list(error.completed)
        payload["partial_paths"] = [str(p) for p in error.partial_paths]
    elif isinstance(error, RewriteError):
        payload["missing"] = [{"line": line_no, "filename": name} for line_no, name in error.missing]
    return payload


def fail(error: HlsMaskError, as_json: bool) -> typer.Exit:
    """Report ``error`` and return the Exit to raise."""
    if as_json:
        typer.echo(format_json_output(error_payload(error)))
    else:
        typer.echo(f"Error [{error.kind}]: {error}", err=True)
    return typer.Exit(1)


def collect_intervals(specs: list[str] | None, intervals_file: Path | None) -> list[BlackoutInterval]:
    """Merge --blackout values and an --intervals file into one list."""
    intervals = [parse_interval_spec(spec) for spec in specs or []]
    if intervals_file is not None:
        intervals.extend(load_intervals(intervals_file))
    return intervals


def segment_table(sequence: SegmentSequence) -> list[str]:
    """Human-readable segment listing."""
    lines = [f"{'#':>4}  {'start':>12}  {'end':>12}  {'duration':>12}  kind"]
    for segment in sequence:
        kind = "blackout" if segment.is_blackout else "pass-through"
        lines.append(
            f"{segment.index:>4}  {segment.start:>12.6f}  {segment.end:>12.6f}  "
            f"{segment.duration:>12.6f}  {kind}"
        )
    return lines
