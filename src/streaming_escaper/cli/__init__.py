"""Command-line interface module for Streaming Escaper.

This module provides the streaming-escaper command for escaping files and
standard input with configurable escape characters and presets.
"""

from .main import main

__all__ = ["main"]
