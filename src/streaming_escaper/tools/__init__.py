"""Developer tools for Streaming Escaper.

Provides benchmarking utilities for comparing character-set representations
and tracking escaping performance across releases.
"""

from .benchmarks import (
    BenchmarkResult,
    BenchmarkSuite,
    EscapeBenchmark,
    default_char_sets,
)

__all__ = [
    "BenchmarkResult",
    "BenchmarkSuite",
    "EscapeBenchmark",
    "default_char_sets",
]
