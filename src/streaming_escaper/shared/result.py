"""Result objects and diagnostic types for escaping operations."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class EscapeMetrics:
    """Counters collected while escaping a stream.

    Attributes:
        processing_time_ms: Wall-clock time spent escaping
        characters_processed: Input characters consumed
        characters_escaped: Input characters that received an escape prefix
        input_bytes: UTF-8 size of the consumed input
        output_bytes: UTF-8 size of the produced output
        size_hint_bytes: Upper bound reported by the transform for ``input_bytes``
        chunks_processed: Number of chunks pushed through the transform
    """

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    characters_escaped: int = 0
    input_bytes: int = 0
    output_bytes: int = 0
    size_hint_bytes: int = 0
    chunks_processed: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def escape_rate(self) -> float:
        """Fraction of input characters that were escaped."""
        if self.characters_processed == 0:
            return 0.0
        return self.characters_escaped / self.characters_processed

    @property
    def expansion_ratio(self) -> float:
        """Output size relative to input size, in bytes."""
        if self.input_bytes == 0:
            return 1.0
        return self.output_bytes / self.input_bytes

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary representation."""
        return {
            "processing_time_ms": self.processing_time_ms,
            "characters_processed": self.characters_processed,
            "characters_escaped": self.characters_escaped,
            "input_bytes": self.input_bytes,
            "output_bytes": self.output_bytes,
            "size_hint_bytes": self.size_hint_bytes,
            "chunks_processed": self.chunks_processed,
            "characters_per_second": self.characters_per_second,
            "escape_rate": self.escape_rate,
        }


@dataclass
class EscapeResult:
    """Result of escaping a complete input.

    Attributes:
        text: Escaped output
        metrics: Counters collected while escaping
        diagnostics: Diagnostic entries produced by the processor
    """

    text: str
    metrics: EscapeMetrics = field(default_factory=EscapeMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def escaped_count(self) -> int:
        """Number of escape characters inserted."""
        return self.metrics.characters_escaped
