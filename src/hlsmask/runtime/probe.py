"""
Source probing: duration and resolution, reported as ProbeError on failure.
"""

from __future__ import annotations

from pathlib import Path

from hlsmask.adapters.transcoders.base import Transcoder
from hlsmask.domain.segments import SourceInfo
from hlsmask.infra.exceptions import ProbeError, TranscoderError
from hlsmask.infra.logging import get_logger

logger = get_logger(__name__)


def _check_source(source: Path) -> None:
    if not source.exists():
        raise ProbeError(source, "Source does not exist")
    if not source.is_file():
        raise ProbeError(source, "Source is not a regular file")


def duration(source: Path, transcoder: Transcoder) -> float:
    """Exact media duration of ``source`` in seconds."""
    _check_source(source)
    try:
        return transcoder.probe_duration(source)
    except TranscoderError as e:
        raise ProbeError(source, f"Cannot read duration: {e}") from e


def resolution(source: Path, transcoder: Transcoder) -> tuple[int, int]:
    """Pixel dimensions (width, height) of the first video stream."""
    _check_source(source)
    try:
        return transcoder.probe_resolution(source)
    except TranscoderError as e:
        raise ProbeError(source, f"Cannot read resolution: {e}") from e


def has_audio(source: Path, transcoder: Transcoder) -> bool:
    """Whether ``source`` carries an audio stream."""
    _check_source(source)
    try:
        return transcoder.probe_has_audio(source)
    except TranscoderError as e:
        raise ProbeError(source, f"Cannot read audio streams: {e}") from e


def probe_source(source: Path, transcoder: Transcoder) -> SourceInfo:
    """Probe everything the build needs from ``source``."""
    total = duration(source, transcoder)
    width, height = resolution(source, transcoder)
    audio = has_audio(source, transcoder)
    logger.info(
        "source_probed", source=str(source), duration=total, width=width, height=height, has_audio=audio
    )
    return SourceInfo(path=source, duration=total, width=width, height=height, has_audio=audio)
