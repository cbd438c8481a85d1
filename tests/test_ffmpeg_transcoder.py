"""
FFmpegTranscoder tests with subprocess patched out.
"""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from types import SimpleNamespace

import pytest

from hlsmask.adapters.transcoders import ffmpeg_transcoder as ft
from hlsmask.adapters.transcoders.ffmpeg_transcoder import FFmpegTranscoder
from hlsmask.infra.exceptions import TranscoderCancelled, TranscoderError
from hlsmask.infra.settings import Settings


def _completed(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return SimpleNamespace(stdout=stdout, stderr=stderr, returncode=returncode)


class FakePopen:
    """Stands in for subprocess.Popen; behaviour is set per test via class attributes."""

    write_output = True
    returncode_on_exit = 0
    stderr_text = ""
    hang = False
    instances: list[FakePopen] = []

    def __init__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs
        self.pid = 4242
        self.returncode = None
        self.terminated = False
        FakePopen.instances.append(self)

    def communicate(self, timeout=None):
        if self.hang and not self.terminated:
            raise subprocess.TimeoutExpired(self.cmd, timeout)
        if not self.terminated and self.write_output:
            Path(self.cmd[-1]).write_bytes(b"\x47" * 188)
        self.returncode = -15 if self.terminated else self.returncode_on_exit
        return None, self.stderr_text

    def terminate(self):
        self.terminated = True

    def kill(self):
        self.terminated = True


@pytest.fixture
def fake_popen(monkeypatch):
    FakePopen.write_output = True
    FakePopen.returncode_on_exit = 0
    FakePopen.stderr_text = ""
    FakePopen.hang = False
    FakePopen.instances = []
    monkeypatch.setattr(ft.subprocess, "Popen", FakePopen)
    monkeypatch.setattr(ft, "POLL_INTERVAL_SEC", 0.01)
    return FakePopen


def test_probe_duration_parses_output(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return _completed("12.480000\n")

    monkeypatch.setattr(ft.subprocess, "run", fake_run)
    transcoder = FFmpegTranscoder(ffprobe_path="/usr/bin/ffprobe", probe_timeout=7)
    assert transcoder.probe_duration(Path("in.mp4")) == pytest.approx(12.48)
    cmd, kwargs = calls[0]
    assert cmd[0] == "/usr/bin/ffprobe"
    assert kwargs["timeout"] == 7


def test_probe_resolution_parses_output(monkeypatch):
    monkeypatch.setattr(ft.subprocess, "run", lambda cmd, **kw: _completed("1920x1080\n"))
    assert FFmpegTranscoder().probe_resolution(Path("in.mp4")) == (1920, 1080)


@pytest.mark.parametrize(
    "result",
    [
        _completed("", returncode=1, stderr="in.mp4: Invalid data found when processing input"),
        _completed(""),
        _completed("N/A\n"),
        _completed("-3.0\n"),
    ],
)
def test_probe_duration_failures(monkeypatch, result):
    monkeypatch.setattr(ft.subprocess, "run", lambda cmd, **kw: result)
    with pytest.raises(TranscoderError):
        FFmpegTranscoder().probe_duration(Path("in.mp4"))


def test_probe_resolution_without_video_stream(monkeypatch):
    monkeypatch.setattr(ft.subprocess, "run", lambda cmd, **kw: _completed("\n"))
    with pytest.raises(TranscoderError):
        FFmpegTranscoder().probe_resolution(Path("audio_only.m4a"))


def test_probe_timeout_and_missing_binary(monkeypatch):
    def timeout_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(ft.subprocess, "run", timeout_run)
    with pytest.raises(TranscoderError, match="timed out"):
        FFmpegTranscoder().probe_duration(Path("in.mp4"))

    def missing_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(ft.subprocess, "run", missing_run)
    with pytest.raises(TranscoderError, match="not found"):
        FFmpegTranscoder().probe_resolution(Path("in.mp4"))


def test_extract_range_success(tmp_path, fake_popen):
    out = tmp_path / "segment_000.ts"
    assert FFmpegTranscoder().extract_range(Path("in.mp4"), 0, 3, out) == out
    assert out.stat().st_size > 0
    assert fake_popen.instances[0].cmd[-1] == str(out)
    assert fake_popen.instances[0].kwargs["stdin"] is subprocess.DEVNULL


def test_nonzero_exit_is_failure(tmp_path, fake_popen):
    fake_popen.returncode_on_exit = 1
    fake_popen.stderr_text = "Conversion failed!\n"
    with pytest.raises(TranscoderError) as excinfo:
        FFmpegTranscoder().extract_range(Path("in.mp4"), 0, 3, tmp_path / "segment_000.ts")
    assert excinfo.value.returncode == 1
    assert "Conversion failed!" in str(excinfo.value)


def test_missing_output_is_failure(tmp_path, fake_popen):
    fake_popen.write_output = False
    with pytest.raises(TranscoderError, match="no output"):
        FFmpegTranscoder().synthesize_blank(2.0, 640, 360, tmp_path / "blackout_001.ts")


def test_job_timeout_terminates_process(tmp_path, fake_popen):
    fake_popen.hang = True
    with pytest.raises(TranscoderError, match="timed out"):
        FFmpegTranscoder().extract_range(Path("in.mp4"), 0, 3, tmp_path / "segment_000.ts", timeout=0.05)
    assert fake_popen.instances[0].terminated


def test_cancel_event_terminates_process(tmp_path, fake_popen):
    fake_popen.hang = True
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(TranscoderCancelled):
        FFmpegTranscoder().extract_range(
            Path("in.mp4"), 0, 3, tmp_path / "segment_000.ts", cancel_event=cancel
        )
    # Cancelled before the process was started
    assert fake_popen.instances == []

    running_cancel = threading.Event()
    timer = threading.Timer(0.05, running_cancel.set)
    timer.start()
    try:
        with pytest.raises(TranscoderCancelled):
            FFmpegTranscoder().extract_range(
                Path("in.mp4"), 0, 3, tmp_path / "segment_000.ts", cancel_event=running_cancel
            )
    finally:
        timer.cancel()
    assert fake_popen.instances[0].terminated


def test_from_settings_carries_profile():
    settings = Settings(FFMPEG_PATH="/opt/ffmpeg", AUDIO_BITRATE="96k", BLACKOUT_FRAME_RATE=25)
    transcoder = FFmpegTranscoder.from_settings(settings)
    assert transcoder.ffmpeg_path == "/opt/ffmpeg"
    assert transcoder.encode["audio_bitrate"] == "96k"
    assert transcoder.frame_rate == 25


def test_check_available(monkeypatch):
    monkeypatch.setattr(ft.shutil, "which", lambda path: None if path == "ffprobe" else path)
    monkeypatch.setattr(ft.subprocess, "run", lambda cmd, **kw: _completed("ffmpeg version 7"))
    assert FFmpegTranscoder().check_available() == {"ffmpeg": True, "ffprobe": False}


@pytest.mark.parametrize("stdout,expected", [("1\n", True), ("", False), ("\n", False)])
def test_audio_stream_detection(monkeypatch, stdout, expected):
    monkeypatch.setattr(ft.subprocess, "run", lambda cmd, **kw: _completed(stdout))
    assert FFmpegTranscoder().probe_has_audio(Path("in.mp4")) is expected


def test_audio_stream_detection_failure(monkeypatch):
    monkeypatch.setattr(ft.subprocess, "run", lambda cmd, **kw: _completed("", returncode=1, stderr="No such file"))
    with pytest.raises(TranscoderError):
        FFmpegTranscoder().probe_has_audio(Path("in.mp4"))


def test_extract_range_without_audio_adds_silence(tmp_path, fake_popen):
    out = tmp_path / "segment_000.ts"
    FFmpegTranscoder().extract_range(Path("in.mp4"), 0, 3, out, has_audio=False)
    assert any(arg.startswith("anullsrc=") for arg in fake_popen.instances[0].cmd)
