"""
Transcoder capability contract.

The materializer and the probe talk to the transcoding tool only through this
protocol, so concurrency, timeouts and error mapping do not depend on which
tool backs it.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol


class Transcoder(Protocol):
    """
    Contract for all transcoders.

    Rules:
    - Must raise TranscoderError (or subclass) instead of exiting the process.
    - extract_range/synthesize_blank must leave a non-empty file at output_path
      on success; anything else is a failure.
    - Must honour ``timeout`` and stop promptly once ``cancel_event`` is set,
      raising TranscoderCancelled.
    """

    name: str
    """Unique type identifier, e.g. 'ffmpeg'"""

    def probe_duration(self, source: Path) -> float:
        """Return the container duration of ``source`` in seconds."""
        ...

    def probe_resolution(self, source: Path) -> tuple[int, int]:
        """Return (width, height) of the first video stream of ``source``."""
        ...

    def probe_has_audio(self, source: Path) -> bool:
        """Return True when ``source`` has at least one audio stream."""
        ...

    def extract_range(
        self,
        source: Path,
        start: float,
        end: float,
        output_path: Path,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        has_audio: bool = True,
    ) -> Path:
        """
        Re-encode [start, end) of ``source`` into a standalone chunk.

        With ``has_audio`` False the chunk gets a silent stereo track so its
        streams match a blank chunk.
        """
        ...

    def synthesize_blank(
        self,
        duration: float,
        width: int,
        height: int,
        output_path: Path,
        ts_offset: float = 0.0,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Path:
        """Render a black/silent chunk of ``duration`` seconds at width x height."""
        ...
