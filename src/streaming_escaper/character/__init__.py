"""Character processing layer for streaming escaping.

This package provides character-set membership tests, the escaping
transform, the writer stages it plugs into, and chunked stream processing.
"""

from .charset import (
    CharacterSet,
    CharCollection,
    CharRange,
    CharRangeFrom,
    CharRangeFull,
    CharRangeTo,
    CharSequence,
    CharSetRef,
    CharUnion,
    Predicate,
    SingleChar,
    SortedCharCollection,
    as_char_set,
    union,
)
from .transformation import Escaper, Transform
from .writer import (
    BoundedWriter,
    CapacityExceededError,
    StringWriter,
    TextIOWriter,
    TransformWriter,
    Writer,
    WriterError,
)
from .stream import (
    EscapeStreamProcessor,
    ProgressCallback,
    StreamingProgress,
    StreamingResult,
)

__all__ = [
    # Character sets
    "CharacterSet",
    "CharCollection",
    "CharRange",
    "CharRangeFrom",
    "CharRangeFull",
    "CharRangeTo",
    "CharSequence",
    "CharSetRef",
    "CharUnion",
    "Predicate",
    "SingleChar",
    "SortedCharCollection",
    "as_char_set",
    "union",
    # Transform
    "Escaper",
    "Transform",
    # Writers
    "BoundedWriter",
    "CapacityExceededError",
    "StringWriter",
    "TextIOWriter",
    "TransformWriter",
    "Writer",
    "WriterError",
    # Stream processing
    "EscapeStreamProcessor",
    "ProgressCallback",
    "StreamingProgress",
    "StreamingResult",
]
