"""Configuration classes for streaming escaping.

Configurations are frozen dataclasses validated on construction. Special
character sets are described by a compact definition string:

* ``x-y`` is the inclusive range from ``x`` to ``y``
* ``\\x`` is a literal ``x`` (use ``\\-`` and ``\\\\`` for ``-`` and ``\\``)
* any other character stands for itself
"""

import json
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional

from streaming_escaper.character.charset import (
    CharCollection,
    CharRange,
    CharRangeFrom,
    CharSequence,
    CharacterSet,
    union,
)
from streaming_escaper.character.transformation import (
    SURROGATE_RANGE_END,
    SURROGATE_RANGE_START,
    Escaper,
)

DEFAULT_ESCAPE_CHAR = "\\"

DEFAULT_BUFFER_SIZE = 8192
MIN_BUFFER_SIZE = 1024  # 1KB
MAX_BUFFER_SIZE = 1024 * 1024  # 1MB

MAX_CODE_POINT = 0x10FFFF

# Definition strings for the bundled presets
PRESET_DEFINITIONS: Dict[str, str] = {
    "shell": '$`"\\\\',
    "regex": ".^$*+?()[]{}|\\\\",
    "markdown": "\\\\`*_{}[]()#+\\-.!|<>",
    "csv": ',"\\\\',
}


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def parse_char_set_definition(definition: str) -> CharacterSet:
    """Build a character set from a definition string.

    Args:
        definition: Set definition such as ``"a-z$\\-"``

    Returns:
        CharacterSet matching every listed character and range; an empty
        definition yields a set that matches nothing

    Raises:
        ConfigValidationError: On a dangling backslash or a reversed range
    """
    singles: List[str] = []
    ranges: List[CharacterSet] = []
    pos = 0
    while pos < len(definition):
        char = definition[pos]
        if char == "\\":
            if pos + 1 >= len(definition):
                raise ConfigValidationError(
                    "Dangling escape at end of character set definition",
                    field_name="special_chars",
                    suggestions=["Write '\\\\' for a literal backslash"],
                )
            singles.append(definition[pos + 1])
            pos += 2
        elif pos + 2 < len(definition) and definition[pos + 1] == "-":
            ranges.append(_inclusive_range(char, definition[pos + 2]))
            pos += 3
        else:
            singles.append(char)
            pos += 1

    parts: List[CharacterSet] = []
    if singles:
        parts.append(CharCollection(singles))
    parts.extend(ranges)

    if not parts:
        return CharSequence(())
    if len(parts) == 1:
        return parts[0]
    return union(*parts)


def _inclusive_range(first: str, last: str) -> CharacterSet:
    if last < first:
        raise ConfigValidationError(
            f"Reversed range {first}-{last} in character set definition",
            field_name="special_chars",
            suggestions=[f"Write {last}-{first}"],
        )
    if ord(last) == MAX_CODE_POINT:
        return CharRangeFrom(first)
    return CharRange(first, chr(ord(last) + 1))


@dataclass(frozen=True)
class EscaperConfig:
    """Immutable description of an escaper.

    Attributes:
        escape_char: Character inserted before special characters
        special_chars: Definition string of the special character set
        name: Optional label, set by presets
    """

    escape_char: str = DEFAULT_ESCAPE_CHAR
    special_chars: str = ""
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate escape character and set definition."""
        if not isinstance(self.escape_char, str) or len(self.escape_char) != 1:
            raise ConfigValidationError(
                f"escape_char must be a single character, got {self.escape_char!r}",
                field_name="escape_char",
            )
        if SURROGATE_RANGE_START <= ord(self.escape_char) <= SURROGATE_RANGE_END:
            raise ConfigValidationError(
                "escape_char cannot be a surrogate code point",
                field_name="escape_char",
            )
        if not isinstance(self.special_chars, str):
            raise ConfigValidationError(
                "special_chars must be a definition string",
                field_name="special_chars",
            )
        parse_char_set_definition(self.special_chars)

    def build_char_set(self) -> CharacterSet:
        """Parse ``special_chars`` into a character set."""
        return parse_char_set_definition(self.special_chars)

    def build_escaper(self) -> Escaper:
        """Create the escaper this configuration describes."""
        return Escaper(self.escape_char, self.build_char_set())

    def override(self, **kwargs: Any) -> "EscaperConfig":
        """Create a new configuration with specific fields replaced."""
        try:
            return replace(self, **kwargs)
        except TypeError as e:
            raise ConfigValidationError(
                str(e), suggestions=[f.name for f in fields(self)]
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EscaperConfig":
        """Create configuration from dictionary.

        A ``preset`` key selects a preset whose fields the remaining keys
        override.

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        data = dict(data)
        known = {f.name for f in fields(cls)}
        preset_name = data.pop("preset", None)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                suggestions=sorted(known | {"preset"}),
            )
        base = cls.preset(preset_name) if preset_name else cls()
        return base.override(**data) if data else base

    @classmethod
    def from_json(cls, json_str: str) -> "EscaperConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("JSON configuration must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def shell(cls) -> "EscaperConfig":
        """Characters special inside POSIX shell double quotes."""
        return cls(special_chars=PRESET_DEFINITIONS["shell"], name="shell")

    @classmethod
    def regex(cls) -> "EscaperConfig":
        """Regular expression metacharacters."""
        return cls(special_chars=PRESET_DEFINITIONS["regex"], name="regex")

    @classmethod
    def markdown(cls) -> "EscaperConfig":
        """Markdown punctuation that can trigger formatting."""
        return cls(special_chars=PRESET_DEFINITIONS["markdown"], name="markdown")

    @classmethod
    def csv(cls) -> "EscaperConfig":
        """Separators and quotes in backslash-escaped CSV dialects."""
        return cls(special_chars=PRESET_DEFINITIONS["csv"], name="csv")

    @classmethod
    def preset(cls, name: str) -> "EscaperConfig":
        """Create a preset configuration by name.

        Raises:
            ConfigValidationError: If no preset has that name
        """
        factories = {
            "shell": cls.shell,
            "regex": cls.regex,
            "markdown": cls.markdown,
            "csv": cls.csv,
        }
        if name not in factories:
            raise ConfigValidationError(
                f"Unknown preset: {name}",
                field_name="preset",
                suggestions=sorted(factories),
            )
        return factories[name]()


@dataclass(frozen=True)
class StreamConfig:
    """Configuration for chunked stream processing.

    Attributes:
        buffer_size: Maximum number of input characters per chunk
        correlation_id: Optional ID attached to log records
        collect_metrics: Whether to measure sizes and timings
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    correlation_id: Optional[str] = None
    collect_metrics: bool = True

    def __post_init__(self) -> None:
        if not MIN_BUFFER_SIZE <= self.buffer_size <= MAX_BUFFER_SIZE:
            raise ConfigValidationError(
                f"buffer_size must be between {MIN_BUFFER_SIZE} and {MAX_BUFFER_SIZE}, "
                f"got {self.buffer_size}",
                field_name="buffer_size",
            )
