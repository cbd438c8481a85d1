"""
Command-line interface for hlsmask.
"""
