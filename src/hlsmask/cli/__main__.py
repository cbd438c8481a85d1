#!/usr/bin/env python3
"""
CLI entry point for hlsmask.cli module.

This allows running: python -m hlsmask.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
