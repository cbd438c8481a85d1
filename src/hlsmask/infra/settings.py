"""
Application settings for hlsmask.

This module defines all configuration settings for hlsmask using Pydantic BaseSettings.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # External tools
    ffmpeg_path: str = Field(default="ffmpeg", alias="FFMPEG_PATH")
    ffprobe_path: str = Field(default="ffprobe", alias="FFPROBE_PATH")
    probe_timeout: float = Field(default=30.0, gt=0, alias="PROBE_TIMEOUT")
    segment_timeout: float = Field(default=600.0, gt=0, alias="SEGMENT_TIMEOUT")
    max_workers: int = Field(default=4, ge=1, alias="MAX_WORKERS")

    # Chunk encoding profile (shared by pass-through and blackout chunks)
    video_codec: str = Field(default="libx264", alias="VIDEO_CODEC")
    video_preset: str = Field(default="veryfast", alias="VIDEO_PRESET")
    audio_codec: str = Field(default="aac", alias="AUDIO_CODEC")
    audio_bitrate: str = Field(default="128k", alias="AUDIO_BITRATE")
    audio_rate: int = Field(default=48000, gt=0, alias="AUDIO_RATE")
    blackout_frame_rate: int = Field(default=30, gt=0, alias="BLACKOUT_FRAME_RATE")

    # Output layout
    normal_playlist_name: str = Field(default="output.m3u8", alias="NORMAL_PLAYLIST_NAME")
    masked_playlist_name: str = Field(default="blackout.m3u8", alias="MASKED_PLAYLIST_NAME")
    work_root: str | None = Field(default=None, alias="WORK_ROOT")  # parent of per-build dirs

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("HLSMASK_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


def load_settings() -> Settings:
    """Build a Settings instance using best-effort .env discovery."""
    env_file = _resolve_env_file()
    return Settings(_env_file=env_file) if env_file else Settings()  # type: ignore[call-arg]


# Global settings instance
settings = load_settings()
