"""
FFmpeg-backed transcoder.

Runs ffprobe for duration/resolution queries and ffmpeg for chunk rendering.
Chunk jobs run under Popen so a per-job timeout and a cancellation event can
terminate the process mid-encode.
"""

from __future__ import annotations

import logging
import math
import shutil
import subprocess
import threading
import time
from pathlib import Path
from typing import Any

from hlsmask.infra.exceptions import TranscoderCancelled, TranscoderError
from hlsmask.infra.settings import Settings
from hlsmask.streaming.ffmpeg_cmd import (
    build_blank_cmd,
    build_extract_cmd,
    build_probe_audio_cmd,
    build_probe_duration_cmd,
    build_probe_resolution_cmd,
    get_cmd_summary,
)

logger = logging.getLogger(__name__)

# How often a running job checks its deadline and the cancel event
POLL_INTERVAL_SEC = 0.25
# Grace period between terminate() and kill()
TERMINATE_GRACE_SEC = 5.0
# Availability self-check timeout (-version only)
CHECK_TIMEOUT_SEC = 5.0


class FFmpegTranscoder:
    """
    Transcoder that shells out to ffmpeg and ffprobe.

    Both chunk kinds are encoded with the same codec profile, so a blackout
    chunk can replace the pass-through chunk at the same index.
    """

    name = "ffmpeg"

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        probe_timeout: float = 30.0,
        video_codec: str = "libx264",
        video_preset: str = "veryfast",
        audio_codec: str = "aac",
        audio_bitrate: str = "128k",
        audio_rate: int = 48000,
        frame_rate: int = 30,
        debug: bool = False,
    ) -> None:
        """
        Initialize the transcoder.

        Args:
            ffmpeg_path: Path to the ffmpeg executable
            ffprobe_path: Path to the ffprobe executable
            probe_timeout: Timeout in seconds for each ffprobe query
            video_codec: Video encoder shared by every chunk
            video_preset: Encoder preset
            audio_codec: Audio encoder shared by every chunk
            audio_bitrate: Audio bitrate (e.g. "128k")
            audio_rate: Audio sample rate in Hz
            frame_rate: Frame rate of synthesized blackout video
            debug: If True, run ffmpeg with verbose logging
        """
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.probe_timeout = probe_timeout
        self.frame_rate = frame_rate
        self.debug = debug
        self.encode: dict[str, Any] = {
            "video_codec": video_codec,
            "video_preset": video_preset,
            "audio_codec": audio_codec,
            "audio_bitrate": audio_bitrate,
            "audio_rate": audio_rate,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> FFmpegTranscoder:
        return cls(
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
            probe_timeout=settings.probe_timeout,
            video_codec=settings.video_codec,
            video_preset=settings.video_preset,
            audio_codec=settings.audio_codec,
            audio_bitrate=settings.audio_bitrate,
            audio_rate=settings.audio_rate,
            frame_rate=settings.blackout_frame_rate,
        )

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def check_available(self, timeout: float = CHECK_TIMEOUT_SEC) -> dict[str, bool]:
        """Run ``-version`` on ffmpeg and ffprobe; no media is touched."""
        return {
            "ffmpeg": self._tool_ok(self.ffmpeg_path, timeout),
            "ffprobe": self._tool_ok(self.ffprobe_path, timeout),
        }

    @staticmethod
    def _tool_ok(path: str, timeout: float) -> bool:
        if not shutil.which(path):
            logger.info("%s not found on PATH", path)
            return False
        try:
            result = subprocess.run([path, "-version"], capture_output=True, timeout=timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.info("%s self-check failed: %s", path, e)
            return False
        if result.returncode != 0:
            logger.info("%s self-check failed: returncode=%s", path, result.returncode)
        return result.returncode == 0

    # ------------------------------------------------------------------
    # Probing
    # ------------------------------------------------------------------

    def _run_probe(self, cmd: list[str], allow_empty: bool = False) -> str:
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.probe_timeout)
        except FileNotFoundError:
            raise TranscoderError(
                "FFprobe executable not found. Install ffprobe and ensure it is on PATH, "
                "or set FFPROBE_PATH.",
                cmd,
            ) from None
        except subprocess.TimeoutExpired:
            raise TranscoderError(f"FFprobe timed out after {self.probe_timeout}s", cmd) from None

        if result.returncode != 0:
            raise TranscoderError("FFprobe failed", cmd, result.returncode, result.stderr)

        lines = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
        if not lines:
            if allow_empty:
                return ""
            raise TranscoderError("FFprobe returned no output", cmd, result.returncode, result.stderr)
        return lines[0]

    def probe_duration(self, source: Path) -> float:
        cmd = build_probe_duration_cmd(source, self.ffprobe_path)
        raw = self._run_probe(cmd)
        try:
            duration = float(raw)
        except ValueError:
            raise TranscoderError(f"Unparseable duration {raw!r}", cmd) from None
        if not math.isfinite(duration) or duration <= 0:
            raise TranscoderError(f"Implausible duration {raw!r}", cmd)
        return duration

    def probe_resolution(self, source: Path) -> tuple[int, int]:
        cmd = build_probe_resolution_cmd(source, self.ffprobe_path)
        raw = self._run_probe(cmd)
        parts = [p for p in raw.split("x") if p]
        try:
            width, height = int(parts[0]), int(parts[1])
        except (IndexError, ValueError):
            raise TranscoderError(f"Unparseable resolution {raw!r}", cmd) from None
        if width <= 0 or height <= 0:
            raise TranscoderError(f"Implausible resolution {raw!r}", cmd)
        return width, height

    def probe_has_audio(self, source: Path) -> bool:
        cmd = build_probe_audio_cmd(source, self.ffprobe_path)
        return bool(self._run_probe(cmd, allow_empty=True))

    # ------------------------------------------------------------------
    # Chunk rendering
    # ------------------------------------------------------------------

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
        cmd = build_extract_cmd(
            source,
            start,
            end,
            output_path,
            ffmpeg_path=self.ffmpeg_path,
            debug=self.debug,
            has_audio=has_audio,
            **self.encode,
        )
        return self._run_job(cmd, output_path, timeout, cancel_event)

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
        cmd = build_blank_cmd(
            duration,
            width,
            height,
            output_path,
            ts_offset=ts_offset,
            frame_rate=self.frame_rate,
            ffmpeg_path=self.ffmpeg_path,
            debug=self.debug,
            **self.encode,
        )
        return self._run_job(cmd, output_path, timeout, cancel_event)

    def _run_job(
        self,
        cmd: list[str],
        output_path: Path,
        timeout: float | None,
        cancel_event: threading.Event | None,
    ) -> Path:
        """Run one ffmpeg job; success means exit 0 and a non-empty output file."""
        logger.debug(get_cmd_summary(cmd))
        if cancel_event is not None and cancel_event.is_set():
            raise TranscoderCancelled("Cancelled before start", cmd)

        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError:
            raise TranscoderError(
                "FFmpeg executable not found. Install ffmpeg and ensure it is on PATH, "
                "or set FFMPEG_PATH.",
                cmd,
            ) from None

        deadline = time.monotonic() + timeout if timeout is not None else None
        stderr = ""
        while True:
            try:
                _, stderr = proc.communicate(timeout=POLL_INTERVAL_SEC)
                break
            except subprocess.TimeoutExpired:
                pass
            if cancel_event is not None and cancel_event.is_set():
                self._terminate(proc)
                raise TranscoderCancelled("Cancelled while running", cmd)
            if deadline is not None and time.monotonic() >= deadline:
                self._terminate(proc)
                raise TranscoderError(f"FFmpeg timed out after {timeout}s", cmd)

        if proc.returncode != 0:
            raise TranscoderError("FFmpeg failed", cmd, proc.returncode, stderr)
        if not output_path.is_file() or output_path.stat().st_size == 0:
            raise TranscoderError(f"FFmpeg produced no output at {output_path}", cmd, proc.returncode, stderr)
        return output_path

    @staticmethod
    def _terminate(proc: subprocess.Popen) -> None:
        try:
            proc.terminate()
            proc.communicate(timeout=TERMINATE_GRACE_SEC)
        except subprocess.TimeoutExpired:
            logger.warning("FFmpeg pid=%s ignored SIGTERM, killing", proc.pid)
            proc.kill()
            proc.communicate()
