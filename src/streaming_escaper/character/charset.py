"""Character-set membership tests used to decide which characters get escaped.

Every set exposes a single pure operation, :meth:`CharacterSet.contains_char`.
Plain Python values can stand in for a set wherever one is expected; they are
converted by :func:`as_char_set`:

    >>> as_char_set("$").contains_char("$")
    True
    >>> as_char_set(slice("a", "c")).contains_char("c")
    False
    >>> ("$" | CharRange("a", "c")).contains_char("b")
    True

Sets are immutable once built. Characters are compared by code point.
"""

import bisect
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Iterable, Tuple

CharPredicate = Callable[[str], Any]


def _require_char(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, got {type(value).__name__}")
    if len(value) != 1:
        raise ValueError(f"{name} must be a single character, got {value!r}")
    return value


class CharacterSet(ABC):
    """Abstract membership test over single characters."""

    @abstractmethod
    def contains_char(self, c: str) -> bool:
        """Return True if ``c`` belongs to this set.

        Implementations must be side-effect free and deterministic: the same
        character always yields the same answer.
        """

    def __contains__(self, c: object) -> bool:
        return isinstance(c, str) and len(c) == 1 and self.contains_char(c)

    def union(self, other: Any) -> "CharUnion":
        """Combine this set with ``other`` into a set matching either.

        ``other`` may be any value accepted by :func:`as_char_set`. The result
        owns both operands; nothing is deduplicated or simplified.
        """
        return CharUnion(self, as_char_set(other))

    def __or__(self, other: Any) -> "CharUnion":
        return self.union(other)

    def __ror__(self, other: Any) -> "CharUnion":
        return CharUnion(as_char_set(other), self)

    def borrow(self) -> "CharSetRef":
        """Return a reference that delegates to this set without copying it."""
        return CharSetRef(self)


@dataclass(frozen=True)
class SingleChar(CharacterSet):
    """Exactly one character."""

    char: str

    def __post_init__(self) -> None:
        _require_char(self.char, "char")

    def contains_char(self, c: str) -> bool:
        return c == self.char


@dataclass(frozen=True)
class CharSequence(CharacterSet):
    """An ordered list of characters, searched linearly."""

    chars: Tuple[str, ...]

    def __init__(self, chars: Iterable[str]) -> None:
        items = tuple(chars)
        for item in items:
            _require_char(item, "chars element")
        object.__setattr__(self, "chars", items)

    def contains_char(self, c: str) -> bool:
        return c in self.chars


@dataclass(frozen=True)
class CharRange(CharacterSet):
    """Half-open range ``[start, end)``."""

    start: str
    end: str

    def __post_init__(self) -> None:
        _require_char(self.start, "start")
        _require_char(self.end, "end")

    def contains_char(self, c: str) -> bool:
        return self.start <= c < self.end


@dataclass(frozen=True)
class CharRangeFrom(CharacterSet):
    """Every character at or above ``start``."""

    start: str

    def __post_init__(self) -> None:
        _require_char(self.start, "start")

    def contains_char(self, c: str) -> bool:
        return c >= self.start


@dataclass(frozen=True)
class CharRangeTo(CharacterSet):
    """Every character strictly below ``end``."""

    end: str

    def __post_init__(self) -> None:
        _require_char(self.end, "end")

    def contains_char(self, c: str) -> bool:
        return c < self.end


@dataclass(frozen=True)
class CharRangeFull(CharacterSet):
    """Every character."""

    def contains_char(self, c: str) -> bool:
        return True


@dataclass(frozen=True)
class CharCollection(CharacterSet):
    """Hash-based set of characters."""

    chars: FrozenSet[str]

    def __init__(self, chars: Iterable[str]) -> None:
        items = frozenset(chars)
        for item in items:
            _require_char(item, "chars element")
        object.__setattr__(self, "chars", items)

    def contains_char(self, c: str) -> bool:
        return c in self.chars


@dataclass(frozen=True)
class SortedCharCollection(CharacterSet):
    """Ordered set of characters, searched by bisection."""

    chars: Tuple[str, ...]

    def __init__(self, chars: Iterable[str]) -> None:
        items = tuple(sorted(set(chars)))
        for item in items:
            _require_char(item, "chars element")
        object.__setattr__(self, "chars", items)

    def contains_char(self, c: str) -> bool:
        index = bisect.bisect_left(self.chars, c)
        return index < len(self.chars) and self.chars[index] == c


@dataclass(frozen=True)
class Predicate(CharacterSet):
    """Arbitrary single-argument test wrapped as a set.

    The wrapped function must be pure; escapers may call it many times for
    the same character.
    """

    func: CharPredicate

    def __post_init__(self) -> None:
        if not callable(self.func):
            raise TypeError(f"Predicate requires a callable, got {type(self.func).__name__}")

    def contains_char(self, c: str) -> bool:
        return bool(self.func(c))


@dataclass(frozen=True)
class CharSetRef(CharacterSet):
    """Borrowed reference to another set; membership is delegated unchanged."""

    target: CharacterSet

    def __post_init__(self) -> None:
        if not isinstance(self.target, CharacterSet):
            raise TypeError(
                f"CharSetRef target must be a CharacterSet, got {type(self.target).__name__}"
            )

    def contains_char(self, c: str) -> bool:
        return self.target.contains_char(c)


@dataclass(frozen=True)
class CharUnion(CharacterSet):
    """Union of two sets; ``first`` is tested before ``second``."""

    first: CharacterSet
    second: CharacterSet

    def contains_char(self, c: str) -> bool:
        return self.first.contains_char(c) or self.second.contains_char(c)


def as_char_set(value: Any) -> CharacterSet:
    """Convert a plain Python value to a :class:`CharacterSet`.

    Args:
        value: A CharacterSet, a character, a string or list/tuple of
            characters, a set/frozenset of characters, a ``slice`` of
            characters (``slice("a", "c")`` is ``[a, c)``), a ``range`` of code
            points with step 1, or a callable taking one character

    Returns:
        CharacterSet instance; CharacterSet inputs are returned unchanged

    Raises:
        TypeError: If the value has no set interpretation
        ValueError: If the value is an empty string or a stepped slice/range
    """
    if isinstance(value, CharacterSet):
        return value
    if isinstance(value, str):
        if not value:
            raise ValueError("Cannot build a character set from an empty string")
        if len(value) == 1:
            return SingleChar(value)
        return CharSequence(value)
    if isinstance(value, (list, tuple)):
        return CharSequence(value)
    if isinstance(value, (set, frozenset)):
        return CharCollection(value)
    if isinstance(value, slice):
        return _slice_to_range(value)
    if isinstance(value, range):
        if value.step != 1:
            raise ValueError(f"Code point ranges must have step 1, got {value.step}")
        if value.stop > sys.maxunicode:
            return CharRangeFrom(chr(value.start))
        return CharRange(chr(value.start), chr(value.stop))
    if callable(value):
        return Predicate(value)
    raise TypeError(f"Cannot interpret {type(value).__name__} as a character set")


def _slice_to_range(value: slice) -> CharacterSet:
    if value.step is not None:
        raise ValueError("Character slices do not support a step")
    if value.start is None and value.stop is None:
        return CharRangeFull()
    if value.start is None:
        return CharRangeTo(value.stop)
    if value.stop is None:
        return CharRangeFrom(value.start)
    return CharRange(value.start, value.stop)


def union(*sets: Any) -> CharacterSet:
    """Fold two or more sets into nested unions, left to right.

    >>> union("$", slice("a", "c"), {"x"}).contains_char("x")
    True
    """
    if len(sets) < 2:
        raise ValueError("union() needs at least two sets")
    result: CharacterSet = as_char_set(sets[0])
    for other in sets[1:]:
        result = result.union(other)
    return result
