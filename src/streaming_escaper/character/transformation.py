"""Per-character escaping transform.

An :class:`Escaper` pairs an escape character with a set of special
characters. Driven by a writer, it emits the escape character immediately
before every special character and passes every character through exactly
once. The escape character is not escaped unless it is itself in the set;
there is no unescaping counterpart.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Iterator

from .charset import CharacterSet, as_char_set
from .writer import StringWriter, Writer

# Surrogate code points cannot be encoded and are not Unicode scalar values
SURROGATE_RANGE_START = 0xD800
SURROGATE_RANGE_END = 0xDFFF


class Transform(ABC):
    """Plug-in protocol for writer transform stages."""

    @abstractmethod
    def transform_char(self, writer: Writer, c: str) -> None:
        """Write the transformed form of ``c`` to ``writer``.

        Exceptions raised by ``writer`` must propagate unchanged.
        """

    @abstractmethod
    def transform_size_hint(self, byte_count: int) -> int:
        """Estimate output bytes for ``byte_count`` input bytes."""


class Escaper(Transform):
    """Stateless escaping policy.

    Args:
        escape_char: Character inserted before each special character
        special_chars: Anything accepted by
            :func:`~streaming_escaper.character.charset.as_char_set`

    Raises:
        TypeError: If ``escape_char`` is not a str or the set cannot be built
        ValueError: If ``escape_char`` is not a single Unicode scalar value
    """

    def __init__(self, escape_char: str, special_chars: Any) -> None:
        if not isinstance(escape_char, str):
            raise TypeError(f"escape_char must be a str, got {type(escape_char).__name__}")
        if len(escape_char) != 1:
            raise ValueError(f"escape_char must be a single character, got {escape_char!r}")
        if SURROGATE_RANGE_START <= ord(escape_char) <= SURROGATE_RANGE_END:
            raise ValueError(f"escape_char cannot be a surrogate: U+{ord(escape_char):04X}")

        self._escape = escape_char
        self._chars = as_char_set(special_chars)
        self._escape_width = len(escape_char.encode("utf-8"))

    @property
    def escape_char(self) -> str:
        return self._escape

    @property
    def chars(self) -> CharacterSet:
        return self._chars

    def __repr__(self) -> str:
        return f"Escaper(escape_char={self._escape!r}, special_chars={self._chars!r})"

    def transform_char(self, writer: Writer, c: str) -> None:
        if self._chars.contains_char(c):
            writer.write_char(self._escape)
        writer.write_char(c)

    def transform_size_hint(self, byte_count: int) -> int:
        """Return ``byte_count`` times the UTF-8 width of the escape character.

        This is a sizing hint for buffer reservation, not an exact bound.
        """
        return byte_count * self._escape_width

    def iter_escaped(self, chars: Iterable[str]) -> Iterator[str]:
        """Lazily yield output characters for an iterable of input characters."""
        for c in chars:
            if self._chars.contains_char(c):
                yield self._escape
            yield c

    def escape_str(self, text: str) -> str:
        """Escape a complete string in memory."""
        sink = StringWriter()
        self.write_to(sink, text)
        return sink.getvalue()

    def write_to(self, writer: Writer, text: str) -> None:
        """Stream ``text`` through this escaper into ``writer``."""
        for c in text:
            self.transform_char(writer, c)

    def count_escapes(self, text: str) -> int:
        """Count the characters of ``text`` that would be escaped."""
        return sum(1 for c in text if self._chars.contains_char(c))
