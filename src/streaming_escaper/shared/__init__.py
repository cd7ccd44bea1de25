"""Shared utilities for streaming escaping.

This module provides configuration objects, result types and logging helpers
used across the package.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EscapeMetrics,
    EscapeResult,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    EscaperConfig,
    StreamConfig,
    parse_char_set_definition,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "EscapeMetrics",
    "EscapeResult",
    "ConfigError",
    "ConfigValidationError",
    "EscaperConfig",
    "StreamConfig",
    "parse_char_set_definition",
    "CorrelationLogger",
    "get_logger",
]
