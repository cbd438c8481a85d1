"""
Planning - turns blackout intervals into a segment timeline.
"""

from .partitioner import partition

__all__ = ["partition"]
