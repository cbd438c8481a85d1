"""
hlsmask - blackout-aware HLS playlist builder.

Partitions a source video's timeline around blackout intervals, renders one
MPEG-TS chunk per segment with ffmpeg, and emits a normal and a masked VOD
playlist that stay line-for-line synchronized.
"""

__version__ = "0.1.0"
