"""
Global test configuration for hlsmask.

This module provides global pytest configuration and fixtures. Nothing in the
suite needs a real ffmpeg: transcoding goes through FakeTranscoder.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from hlsmask.infra.exceptions import TranscoderCancelled, TranscoderError  # noqa: E402


class FakeTranscoder:
    """
    In-memory Transcoder: writes small placeholder chunk files and records calls.

    ``fail_on`` holds output file names whose job raises TranscoderError.
    ``block_on`` holds file names whose job waits until cancelled.
    """

    name = "fake"

    def __init__(
        self,
        duration: float = 10.0,
        resolution: tuple[int, int] = (1280, 720),
        fail_on: set[str] | None = None,
        block_on: set[str] | None = None,
        probe_error: str | None = None,
        has_audio: bool = True,
    ) -> None:
        self.duration = duration
        self.resolution = resolution
        self.fail_on = fail_on or set()
        self.block_on = block_on or set()
        self.probe_error = probe_error
        self.has_audio = has_audio
        self.extract_calls: list[tuple[float, float, str]] = []
        self.blank_calls: list[tuple[float, int, int, str, float]] = []
        self.extract_audio: list[bool] = []
        self.started = threading.Event()
        self._lock = threading.Lock()

    def probe_duration(self, source: Path) -> float:
        if self.probe_error:
            raise TranscoderError(self.probe_error, ["ffprobe", str(source)], 1, "Invalid data found")
        return self.duration

    def probe_resolution(self, source: Path) -> tuple[int, int]:
        if self.probe_error:
            raise TranscoderError(self.probe_error, ["ffprobe", str(source)], 1, "Invalid data found")
        return self.resolution

    def probe_has_audio(self, source: Path) -> bool:
        if self.probe_error:
            raise TranscoderError(self.probe_error, ["ffprobe", str(source)], 1, "Invalid data found")
        return self.has_audio

    def _finish(self, output_path: Path, cancel_event: threading.Event | None) -> Path:
        name = output_path.name
        if name in self.block_on:
            self.started.set()
            while cancel_event is not None and not cancel_event.wait(0.01):
                pass
            raise TranscoderCancelled("Cancelled while running", ["ffmpeg", name])
        if name in self.fail_on:
            raise TranscoderError("FFmpeg failed", ["ffmpeg", name], 1, "Conversion failed!")
        output_path.write_bytes(b"\x47" * 188)
        return output_path

    def extract_range(self, source, start, end, output_path, timeout=None, cancel_event=None, has_audio=True):
        with self._lock:
            self.extract_calls.append((start, end, output_path.name))
            self.extract_audio.append(has_audio)
        return self._finish(output_path, cancel_event)

    def synthesize_blank(
        self, duration, width, height, output_path, ts_offset=0.0, timeout=None, cancel_event=None
    ):
        with self._lock:
            self.blank_calls.append((duration, width, height, output_path.name, ts_offset))
        return self._finish(output_path, cancel_event)


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """A placeholder source file (the fake transcoder never decodes it)."""
    path = tmp_path / "source.mp4"
    path.write_bytes(b"\x00" * 64)
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    return tmp_path / "work"


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers():
    """configure_logging installs a stderr handler on the root logger; drop it after each test."""
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in before and type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)
