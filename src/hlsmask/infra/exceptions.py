"""
Custom exceptions for hlsmask operations.

Every failure the build pipeline can surface is a subclass of HlsMaskError and
carries the offending input (source path, segment index, chunk file name) so
callers never have to parse messages to find out what went wrong.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class HlsMaskError(Exception):
    """Base exception for all hlsmask errors."""

    kind = "error"


class ConfigurationError(HlsMaskError):
    """Raised when settings, interval files or locator maps are invalid."""

    kind = "configuration"


class ProbeError(HlsMaskError):
    """Raised when a source cannot be probed for duration or resolution."""

    kind = "probe"

    def __init__(self, source: str | Path, message: str) -> None:
        self.source = str(source)
        super().__init__(f"{message} (source: {self.source})")


class PartitionError(HlsMaskError):
    """Raised on degenerate partitioner input (bad duration, inverted interval)."""

    kind = "partition"

    def __init__(self, message: str, interval: object | None = None) -> None:
        self.interval = interval
        if interval is not None:
            message = f"{message}: {interval}"
        super().__init__(message)


class TranscoderError(HlsMaskError):
    """Raised when an ffmpeg/ffprobe invocation fails, times out or produces nothing."""

    kind = "transcoder"

    def __init__(
        self,
        message: str,
        cmd: Sequence[str] | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ) -> None:
        self.cmd = list(cmd or [])
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = message
        if returncode is not None:
            detail += f" (exit {returncode})"
        if self.stderr:
            detail += f": {self.stderr.splitlines()[-1]}"
        super().__init__(detail)


class TranscoderCancelled(TranscoderError):
    """Raised when a running transcoder process is terminated on request."""

    kind = "cancelled"


class MaterializationError(HlsMaskError):
    """
    Raised when a chunk for a segment could not be produced.

    Attributes:
        index: Segment index whose job failed (None when the build was cancelled
            before any job failed)
        completed: Segment indices whose chunks were all written
        partial_paths: Every chunk file written before the build stopped
    """

    kind = "materialization"

    def __init__(
        self,
        index: int | None,
        message: str,
        completed: Sequence[int] = (),
        partial_paths: Sequence[Path] = (),
    ) -> None:
        self.index = index
        self.completed = tuple(completed)
        self.partial_paths = tuple(partial_paths)
        prefix = f"segment {index}: " if index is not None else ""
        super().__init__(f"{prefix}{message}")


class MaterializationCancelled(MaterializationError):
    """Raised when materialization stops because cancellation was requested."""

    kind = "cancelled"


class RewriteError(HlsMaskError):
    """Raised when playlist references have no locator in the supplied map."""

    kind = "rewrite"

    def __init__(self, missing: Sequence[tuple[int, str]]) -> None:
        self.missing = tuple(missing)
        listed = ", ".join(f"{name} (line {line_no})" for line_no, name in self.missing)
        super().__init__(f"No locator for {len(self.missing)} chunk reference(s): {listed}")

    @property
    def filenames(self) -> list[str]:
        return [name for _, name in self.missing]
