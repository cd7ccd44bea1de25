"""Character sinks and the transform stage that escapers plug into.

A :class:`Writer` accepts text one character at a time. Any writer can be
wrapped with a transform (such as an :class:`~streaming_escaper.character.
transformation.Escaper`) so that every character passes through the
transform on its way to the underlying sink:

    >>> sink = StringWriter()
    >>> sink.transform(Escaper("^", "$")).write_str("a$b")
    >>> sink.getvalue()
    'a^$b'

Errors raised by a sink propagate unchanged through every transform stage.
"""

import re
import string
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, TextIO

if TYPE_CHECKING:
    from .transformation import Transform

_FORMATTER = string.Formatter()


class _FieldNumbering:
    """Automatic or manual positional field numbering, as ``str.format`` enforces it."""

    def __init__(self) -> None:
        self.next_index = 0
        self.automatic = False
        self.manual = False

    def resolve(self, field_name: str) -> str:
        head = re.split(r"[.\[]", field_name, maxsplit=1)[0]
        if head == "":
            if self.manual:
                raise ValueError(
                    "cannot switch from manual field specification to automatic field numbering"
                )
            self.automatic = True
            field_name = f"{self.next_index}{field_name}"
            self.next_index += 1
        elif head.isdigit():
            if self.automatic:
                raise ValueError(
                    "cannot switch from automatic field numbering to manual field specification"
                )
            self.manual = True
        return field_name


class WriterError(Exception):
    """Base exception for failures raised by bundled sinks."""


class CapacityExceededError(WriterError):
    """Raised when a bounded sink has no room left for a write."""

    def __init__(self, capacity: int, used: int, requested: int) -> None:
        super().__init__(
            f"Writer capacity of {capacity} bytes exceeded: "
            f"{used} bytes used, {requested} more requested"
        )
        self.capacity = capacity
        self.used = used
        self.requested = requested


class Writer(ABC):
    """Destination for streamed characters."""

    @abstractmethod
    def write_char(self, c: str) -> None:
        """Write a single character."""

    def write_str(self, s: str) -> None:
        """Write a string, one character at a time."""
        for c in s:
            self.write_char(c)

    def size_hint(self, byte_count: int) -> None:
        """Announce that roughly ``byte_count`` more bytes are coming.

        The default ignores the hint; sinks that can reserve space may use it.
        """

    def write_fmt(self, template: str, *args: Any, **kwargs: Any) -> None:
        """Write a ``str.format`` template without building the whole output.

        Literal pieces and each formatted field are written separately, so a
        transform stage sees exactly the characters of the final text. Format
        specs may contain nested fields (``"{:>{width}}"``).

        Raises:
            ValueError: If automatic and manual field numbering are mixed
        """
        numbering = _FieldNumbering()

        def lookup(field_name: str) -> Any:
            value, _ = _FORMATTER.get_field(numbering.resolve(field_name), args, kwargs)
            return value

        def expand(format_spec: str) -> str:
            parts = []
            for literal, field_name, nested_spec, conversion in _FORMATTER.parse(format_spec):
                parts.append(literal)
                if field_name is not None:
                    value = _FORMATTER.convert_field(lookup(field_name), conversion)
                    parts.append(_FORMATTER.format_field(value, nested_spec or ""))
            return "".join(parts)

        for literal, field_name, format_spec, conversion in _FORMATTER.parse(template):
            if literal:
                self.write_str(literal)
            if field_name is None:
                continue
            value = _FORMATTER.convert_field(lookup(field_name), conversion)
            self.write_str(_FORMATTER.format_field(value, expand(format_spec or "")))

    def transform(self, transform: "Transform") -> "TransformWriter":
        """Return a writer that feeds every character through ``transform``."""
        return TransformWriter(self, transform)


class StringWriter(Writer):
    """Accumulates written text in memory."""

    def __init__(self) -> None:
        self._parts: List[str] = []

    def write_char(self, c: str) -> None:
        self._parts.append(c)

    def write_str(self, s: str) -> None:
        self._parts.append(s)

    def getvalue(self) -> str:
        """Return everything written so far."""
        return "".join(self._parts)

    def clear(self) -> None:
        self._parts.clear()


class TextIOWriter(Writer):
    """Forwards writes to a text file object."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def write_char(self, c: str) -> None:
        self.stream.write(c)

    def write_str(self, s: str) -> None:
        self.stream.write(s)

    def flush(self) -> None:
        self.stream.flush()


class BoundedWriter(Writer):
    """In-memory sink with a fixed capacity measured in UTF-8 bytes.

    A write that does not fit raises :class:`CapacityExceededError` and leaves
    the content written before it untouched.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self.capacity = capacity
        self._used = 0
        self._parts: List[str] = []

    @property
    def used(self) -> int:
        return self._used

    @property
    def remaining(self) -> int:
        return self.capacity - self._used

    def write_char(self, c: str) -> None:
        self._append(c)

    def write_str(self, s: str) -> None:
        self._append(s)

    def _append(self, s: str) -> None:
        size = len(s.encode("utf-8"))
        if size > self.remaining:
            raise CapacityExceededError(self.capacity, self._used, size)
        self._parts.append(s)
        self._used += size

    def getvalue(self) -> str:
        return "".join(self._parts)


class TransformWriter(Writer):
    """Writer stage that routes each character through a transform.

    Args:
        inner: Writer receiving the transformed characters
        transform: Transform invoked once per written character
    """

    def __init__(self, inner: Writer, transform: "Transform") -> None:
        self.inner = inner
        self.transform_stage = transform

    def write_char(self, c: str) -> None:
        self.transform_stage.transform_char(self.inner, c)

    def size_hint(self, byte_count: int) -> None:
        self.inner.size_hint(self.transform_stage.transform_size_hint(byte_count))
