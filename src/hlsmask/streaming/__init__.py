"""
Streaming module for hlsmask.

Provides ffmpeg command building, HLS playlist generation and rewriting.
"""

from .playlist import PlaylistVariant, Playlists, build_playlist, build_playlists
from .rewriter import rewrite_playlist

__all__ = [
    "PlaylistVariant",
    "Playlists",
    "build_playlist",
    "build_playlists",
    "rewrite_playlist",
]
