"""
Main CLI application using Typer.

This module provides the command-line interface for hlsmask, calling the
build use case and the playlist tools and outputting JSON when requested.
"""

from __future__ import annotations

import typer

from hlsmask.infra.logging import configure_logging

from .commands import build, plan, probe, rewrite

app = typer.Typer(help="hlsmask - blackout-aware HLS playlist builder", no_args_is_help=True)

app.command("build")(build.build)
app.command("plan")(plan.plan)
app.command("rewrite")(rewrite.rewrite)
app.command("verify")(rewrite.verify)
app.command("probe")(probe.probe)
app.command("check")(probe.check)


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", help="Output in JSON format"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
):
    """hlsmask - build synchronized normal and blackout HLS playlists."""
    configure_logging(level=log_level)
    # Store JSON flag in context for subcommands to use
    ctx.ensure_object(dict)
    ctx.obj["json"] = json


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
