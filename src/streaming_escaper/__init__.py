"""Streaming Escaper.

Inserts an escape character before every special character of a text as it
is streamed to a writer, without buffering the whole input.

Progressive API Disclosure:
- Level 1: Simple functions - escape(), escape_to()
- Level 2: Escaper with any character set, installed on a writer
- Level 3: Chunked stream processing - EscapeStreamProcessor
"""

from typing import Any

__version__ = "0.1.0"
__author__ = "Streaming Escaper Team"

# Character layer first; shared.config builds on it
from .character import (
    CharacterSet,
    CharRange,
    Escaper,
    EscapeStreamProcessor,
    Predicate,
    StringWriter,
    Writer,
    as_char_set,
    union,
)
from .shared.config import EscaperConfig, StreamConfig
from .shared.result import EscapeResult


def escape(text: str, escape_char: str, special_chars: Any) -> str:
    """Escape ``text`` in memory.

    Args:
        text: Input text
        escape_char: Character inserted before special characters
        special_chars: Any value accepted by :func:`as_char_set`

    Returns:
        Escaped text
    """
    return Escaper(escape_char, special_chars).escape_str(text)


def escape_to(writer: Writer, text: str, escape_char: str, special_chars: Any) -> None:
    """Stream escaped ``text`` into ``writer``; writer errors propagate."""
    Escaper(escape_char, special_chars).write_to(writer, text)


def escaper_from_config(config: EscaperConfig) -> Escaper:
    return config.build_escaper()


__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "escape",
    "escape_to",
    "escaper_from_config",

    # Level 2: Character sets and the escaping transform
    "CharacterSet",
    "CharRange",
    "Escaper",
    "Predicate",
    "StringWriter",
    "Writer",
    "as_char_set",
    "union",

    # Level 3: Stream processing and configuration
    "EscapeStreamProcessor",
    "EscapeResult",
    "EscaperConfig",
    "StreamConfig",
]
