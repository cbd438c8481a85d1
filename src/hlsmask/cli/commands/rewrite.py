"""
Rewrite and verify commands: post-processing of generated playlists.
"""

from __future__ import annotations

from pathlib import Path

import typer

from hlsmask.infra.exceptions import ConfigurationError, HlsMaskError
from hlsmask.providers.files import load_locator_map
from hlsmask.streaming.rewriter import rewrite_playlist_file, verify_chunks

from . import _common


def rewrite(
    ctx: typer.Context,
    playlist: Path = typer.Argument(..., help="Playlist to rewrite"),
    map_file: Path = typer.Option(..., "--map", "-m", help="JSON/YAML mapping of chunk file name to locator"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write here instead of in place"),
    allow_unresolved: bool = typer.Option(
        False,
        "--allow-unresolved",
        help="Leave chunk names without a locator untouched instead of failing",
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Replace local chunk file names in PLAYLIST with their locators.
    """
    as_json = _common.wants_json(ctx, json_output)
    try:
        if not playlist.is_file():
            raise ConfigurationError(f"Playlist not found: {playlist}")
        locators = load_locator_map(map_file)
        target = rewrite_playlist_file(playlist, locators, strict=not allow_unresolved, output=output)
    except HlsMaskError as e:
        raise _common.fail(e, as_json)

    _common.emit(
        {"status": "ok", "playlist": str(playlist), "output": str(target)},
        as_json,
        [f"Rewrote {playlist} -> {target}"],
    )


def verify(
    ctx: typer.Context,
    playlist: Path = typer.Argument(..., help="Playlist to check"),
    work_dir: Path | None = typer.Option(
        None, "--work-dir", help="Directory holding the chunks (default: the playlist's directory)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Check that every chunk PLAYLIST references exists and is non-empty.
    """
    as_json = _common.wants_json(ctx, json_output)
    if not playlist.is_file():
        raise _common.fail(ConfigurationError(f"Playlist not found: {playlist}"), as_json)

    check = verify_chunks(playlist.read_text(encoding="utf-8"), work_dir or playlist.parent)
    payload = {"status": "ok" if check.valid else "error", **check.to_dict()}
    lines = [f"{'✓' if check.valid else '✗'} {playlist}: {len(check.found)} chunk(s) present"]
    lines += [f"  Missing: {name}" for name in check.missing]
    lines += [f"  Empty: {name}" for name in check.empty]
    _common.emit(payload, as_json, lines)
    if not check.valid:
        raise typer.Exit(1)
