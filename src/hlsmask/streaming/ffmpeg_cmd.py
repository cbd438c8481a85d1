"""
FFmpeg/FFprobe command builders for chunk materialization.

This module builds the argument lists used to probe a source and to render
MPEG-TS chunks. Pass-through and blackout chunks share one encoding block so
either kind can sit at any position of a playlist.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_GOP = 60
DEFAULT_FRAME_RATE = 30
DEFAULT_AUDIO_RATE = 48000


def _fmt_seconds(value: float) -> str:
    """Render seconds for ffmpeg with microsecond precision and no exponent."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text or "0"


def _global_flags(ffmpeg_path: str, debug: bool = False) -> list[str]:
    log_level = "debug" if debug else "error"
    return [
        ffmpeg_path,
        "-nostdin",
        "-hide_banner",
        "-nostats",
        "-loglevel",
        log_level,
        "-y",
    ]


def _encode_args(
    video_codec: str = "libx264",
    video_preset: str = "veryfast",
    audio_codec: str = "aac",
    audio_bitrate: str = "128k",
    audio_rate: int = DEFAULT_AUDIO_RATE,
    gop: int = DEFAULT_GOP,
) -> list[str]:
    """Shared codec profile for every chunk."""
    return [
        # Video encoding
        "-c:v",
        video_codec,
        "-preset",
        video_preset,
        "-profile:v",
        "main",
        "-pix_fmt",
        "yuv420p",
        "-g",
        str(gop),
        "-keyint_min",
        str(gop),
        "-sc_threshold",
        "0",
        # Audio encoding
        "-c:a",
        audio_codec,
        "-b:a",
        audio_bitrate,
        "-ac",
        "2",
        "-ar",
        str(audio_rate),
    ]


def _ts_mux_args(output_path: Path, ts_offset: float) -> list[str]:
    return [
        "-output_ts_offset",
        _fmt_seconds(ts_offset),
        "-muxpreload",
        "0",
        "-muxdelay",
        "0",
        "-f",
        "mpegts",
        str(output_path),
    ]


def build_probe_duration_cmd(source: Path | str, ffprobe_path: str = "ffprobe") -> list[str]:
    """ffprobe command printing the container duration in seconds."""
    return [
        ffprobe_path,
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        str(source),
    ]


def build_probe_resolution_cmd(source: Path | str, ffprobe_path: str = "ffprobe") -> list[str]:
    """ffprobe command printing ``WIDTHxHEIGHT`` of the first video stream."""
    return [
        ffprobe_path,
        "-v",
        "error",
        "-select_streams",
        "v:0",
        "-show_entries",
        "stream=width,height",
        "-of",
        "csv=s=x:p=0",
        str(source),
    ]


def build_probe_audio_cmd(source: Path | str, ffprobe_path: str = "ffprobe") -> list[str]:
    """ffprobe command printing the index of the first audio stream (empty when there is none)."""
    return [
        ffprobe_path,
        "-v",
        "error",
        "-select_streams",
        "a:0",
        "-show_entries",
        "stream=index",
        "-of",
        "csv=p=0",
        str(source),
    ]


def _silence_source(audio_rate: object) -> str:
    return f"anullsrc=channel_layout=stereo:sample_rate={audio_rate}"


def build_extract_cmd(
    source: Path | str,
    start: float,
    end: float,
    output_path: Path,
    ffmpeg_path: str = "ffmpeg",
    debug: bool = False,
    has_audio: bool = True,
    **encode: object,
) -> list[str]:
    """
    Build the command that re-encodes [start, end) of ``source`` into a TS chunk.

    Args:
        source: Source media path
        start: Range start in seconds
        end: Range end in seconds (exclusive)
        output_path: Chunk file to write
        ffmpeg_path: ffmpeg executable
        debug: If True, use verbose logging level for debugging
        has_audio: False when the source has no audio stream; a silent stereo
            track is muxed in instead
        **encode: Overrides for the shared codec profile (video_codec, audio_bitrate, ...)

    Returns:
        List of FFmpeg command arguments

    Example:
        >>> cmd = build_extract_cmd("in.mp4", 3.0, 5.0, Path("segment_001.ts"))
        >>> cmd[cmd.index("-ss") + 1], cmd[cmd.index("-t") + 1]
        ('3', '2')
    """
    if end <= start:
        raise ValueError(f"extract range must have start < end, got [{start}, {end})")
    length = _fmt_seconds(end - start)
    if length == "0":
        raise ValueError(f"extract range [{start}, {end}) is shorter than one microsecond")

    cmd = _global_flags(ffmpeg_path, debug)
    # Input seek (accurate when re-encoding) then exact output duration
    cmd.extend(["-ss", _fmt_seconds(start), "-i", str(source)])
    if has_audio:
        cmd.extend(["-t", length, "-map", "0:v:0", "-map", "0:a:0"])
    else:
        # Silent track so the chunk has the same streams as a blackout chunk
        audio_rate = encode.get("audio_rate", DEFAULT_AUDIO_RATE)
        cmd.extend(["-f", "lavfi", "-i", _silence_source(audio_rate)])
        cmd.extend(["-t", length, "-map", "0:v:0", "-map", "1:a:0"])
    cmd.extend(["-sn", "-dn"])
    cmd.extend(_encode_args(**encode))  # type: ignore[arg-type]
    if not has_audio:
        cmd.append("-shortest")
    cmd.extend(_ts_mux_args(output_path, start))
    return cmd


def build_blank_cmd(
    duration: float,
    width: int,
    height: int,
    output_path: Path,
    ts_offset: float = 0.0,
    frame_rate: int = DEFAULT_FRAME_RATE,
    ffmpeg_path: str = "ffmpeg",
    debug: bool = False,
    **encode: object,
) -> list[str]:
    """
    Build the command that synthesizes a black-video, silent-audio TS chunk.

    Args:
        duration: Chunk duration in seconds
        width: Frame width in pixels
        height: Frame height in pixels
        output_path: Chunk file to write
        ts_offset: Timeline position of the chunk, keeps timestamps aligned
            with the pass-through chunk at the same index
        frame_rate: Video frame rate
        ffmpeg_path: ffmpeg executable
        debug: If True, use verbose logging level for debugging
        **encode: Overrides for the shared codec profile

    Returns:
        List of FFmpeg command arguments
    """
    if duration <= 0:
        raise ValueError(f"blank chunk duration must be positive, got {duration}")
    if width <= 0 or height <= 0:
        raise ValueError(f"blank chunk resolution must be positive, got {width}x{height}")

    audio_rate = encode.get("audio_rate", DEFAULT_AUDIO_RATE)
    length = _fmt_seconds(duration)
    if length == "0":
        raise ValueError(f"blank chunk duration {duration} is shorter than one microsecond")
    cmd = _global_flags(ffmpeg_path, debug)
    cmd.extend(
        [
            "-f",
            "lavfi",
            "-i",
            f"color=c=black:s={width}x{height}:r={frame_rate}:d={length}",
            "-f",
            "lavfi",
            "-i",
            _silence_source(audio_rate),
            "-t",
            length,
            "-map",
            "0:v:0",
            "-map",
            "1:a:0",
        ]
    )
    cmd.extend(_encode_args(**encode))  # type: ignore[arg-type]
    cmd.append("-shortest")
    cmd.extend(_ts_mux_args(output_path, ts_offset))
    return cmd


def get_cmd_summary(cmd: list[str]) -> str:
    """
    Get a human-readable summary of a chunk command.

    Args:
        cmd: List of FFmpeg command arguments

    Returns:
        Formatted string summary of the command
    """
    if not cmd:
        return "Invalid FFmpeg command"

    inputs: list[str] = []
    video_codec = "unknown"
    audio_codec = "unknown"

    for i, arg in enumerate(cmd):
        if arg == "-i" and i + 1 < len(cmd):
            inputs.append(cmd[i + 1])
        elif arg == "-c:v":
            video_codec = cmd[i + 1] if i + 1 < len(cmd) else "unknown"
        elif arg == "-c:a":
            audio_codec = cmd[i + 1] if i + 1 < len(cmd) else "unknown"

    kind = "blank" if any(src.startswith("color=") for src in inputs) else "extract"
    output = cmd[-1]
    return f"FFmpeg {kind} command: {video_codec} video, {audio_codec} audio, output: {output}"
