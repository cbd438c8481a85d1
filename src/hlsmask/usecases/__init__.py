"""
Use cases - orchestration entry points callable from the CLI or as a library.
"""

from .build_playlists import BuildResult, build_playlists

__all__ = ["BuildResult", "build_playlists"]
