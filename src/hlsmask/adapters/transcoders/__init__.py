"""
Transcoder adapters.
"""

from .base import Transcoder
from .ffmpeg_transcoder import FFmpegTranscoder

__all__ = ["Transcoder", "FFmpegTranscoder"]
