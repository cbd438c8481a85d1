"""
Providers - load build inputs (intervals, locator maps) from files.
"""

from .files import load_intervals, load_locator_map, parse_interval_spec

__all__ = ["load_intervals", "load_locator_map", "parse_interval_spec"]
