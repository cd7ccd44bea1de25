"""Performance benchmarking for escaping with different character sets.

Compares the per-character escaper across set representations, and against
regular-expression substitution as a whole-string baseline, so regressions in
throughput or memory show up between releases.
"""

import gc
import re
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import psutil

from streaming_escaper.character.charset import (
    CharCollection,
    CharRange,
    CharSequence,
    CharacterSet,
    Predicate,
    SingleChar,
    SortedCharCollection,
    union,
)
from streaming_escaper.character.transformation import Escaper
from streaming_escaper.shared.logging import get_logger

REGEX_BASELINE = "re.sub"

# 5% change threshold for improvements and regressions
CHANGE_THRESHOLD = 0.05

# Punctuation covered by every default set and by the regular-expression baseline
DEFAULT_SPECIALS = "$&<>"


@dataclass
class BenchmarkResult:
    """Result of a single benchmark run."""

    set_name: str
    test_case: str
    processing_time_ms: float
    memory_used_mb: float
    characters_processed: int
    characters_escaped: int
    success: bool
    error_message: Optional[str] = None

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def memory_per_character(self) -> float:
        """Calculate memory usage per character in bytes."""
        if self.characters_processed <= 0:
            return 0.0
        return (self.memory_used_mb * 1024 * 1024) / self.characters_processed


@dataclass
class BenchmarkSuite:
    """Collection of benchmark results with statistical analysis."""

    results: List[BenchmarkResult] = field(default_factory=list)
    suite_name: str = "Escaping Benchmark"
    timestamp: float = field(default_factory=time.time)

    def add_result(self, result: BenchmarkResult) -> None:
        self.results.append(result)

    def get_results_by_set(self, set_name: str) -> List[BenchmarkResult]:
        return [r for r in self.results if r.set_name == set_name]

    def get_results_by_test_case(self, test_case: str) -> List[BenchmarkResult]:
        return [r for r in self.results if r.test_case == test_case]

    def get_statistics(self, set_name: str, metric: str) -> Dict[str, float]:
        """Get min/max/mean/median/stdev of ``metric`` for one set."""
        values = [
            getattr(result, metric)
            for result in self.get_results_by_set(set_name)
            if hasattr(result, metric)
        ]
        if not values:
            return {}

        return {
            "min": min(values),
            "max": max(values),
            "mean": statistics.mean(values),
            "median": statistics.median(values),
            "stdev": statistics.stdev(values) if len(values) > 1 else 0.0,
            "count": len(values)
        }

    def generate_report(self) -> Dict[str, Any]:
        """Generate a summary per set name and per test case."""
        set_names = sorted(set(r.set_name for r in self.results))
        test_cases = sorted(set(r.test_case for r in self.results))

        report: Dict[str, Any] = {
            "suite_name": self.suite_name,
            "timestamp": self.timestamp,
            "total_results": len(self.results),
            "sets": set_names,
            "test_cases": test_cases,
            "summary": {},
            "detailed_results": {}
        }

        for set_name in set_names:
            set_results = self.get_results_by_set(set_name)
            successful = [r for r in set_results if r.success]
            report["summary"][set_name] = {
                "total_runs": len(set_results),
                "successful_runs": len(successful),
                "success_rate": len(successful) / len(set_results),
                "performance": self.get_statistics(set_name, "characters_per_second"),
                "memory": self.get_statistics(set_name, "memory_used_mb")
            }

        for test_case in test_cases:
            report["detailed_results"][test_case] = {
                r.set_name: {
                    "processing_time_ms": r.processing_time_ms,
                    "memory_used_mb": r.memory_used_mb,
                    "characters_per_second": r.characters_per_second,
                    "characters_escaped": r.characters_escaped,
                    "success": r.success,
                    "error": r.error_message
                }
                for r in self.get_results_by_test_case(test_case)
            }

        return report


def default_char_sets() -> Dict[str, CharacterSet]:
    """Sets over the punctuation ``$ & < >`` in each representation; ranges also cover ``=``."""
    specials = DEFAULT_SPECIALS
    return {
        "single_char": SingleChar("$"),
        "sequence": CharSequence(specials),
        "collection": CharCollection(specials),
        "sorted_collection": SortedCharCollection(specials),
        "range": CharRange("<", "?"),
        "union": union("$", "&", CharRange("<", "?")),
        "predicate": Predicate(lambda c: c in specials),
    }


class EscapeBenchmark:
    """Throughput and memory benchmark for escapers."""

    def __init__(
        self,
        correlation_id: Optional[str] = None,
        warmup_runs: int = 3,
        benchmark_runs: int = 10,
        escape_char: str = "\\",
        char_sets: Optional[Dict[str, CharacterSet]] = None,
    ) -> None:
        """Initialize benchmark.

        Args:
            correlation_id: Optional correlation ID for tracking
            warmup_runs: Number of warmup runs before benchmarking
            benchmark_runs: Number of benchmark runs to average
            escape_char: Escape character used by every escaper
            char_sets: Named sets to compare (defaults to :func:`default_char_sets`);
                custom sets are not compared against the ``re.sub`` baseline
        """
        self.correlation_id = correlation_id
        self.warmup_runs = warmup_runs
        self.benchmark_runs = benchmark_runs
        self.logger = get_logger(__name__, correlation_id, "benchmark")
        self.uses_default_sets = char_sets is None
        self.escapers = {
            name: Escaper(escape_char, char_set)
            for name, char_set in (char_sets or default_char_sets()).items()
        }
        self.test_cases = self._create_test_cases()

    def _create_test_cases(self) -> Dict[str, str]:
        return {
            "no_specials": "plain text without anything to escape " * 50,
            "sparse_specials": "price: $5 & tax <included> " * 200,
            "dense_specials": "$&<>" * 1000,
            "non_ascii": "café ☃ $ \U0001F600 & " * 300,
        }

    def _measure_memory_usage(self) -> float:
        """Get current resident memory usage in MB."""
        process = psutil.Process()
        return process.memory_info().rss / 1024 / 1024

    def _run_once(
        self, set_name: str, test_case: str, text: str, func: Callable[[str], str]
    ) -> BenchmarkResult:
        gc.collect()
        memory_before = self._measure_memory_usage()
        start_time = time.perf_counter()

        try:
            output = func(text)
            success = True
            error_message = None
            escaped = len(output) - len(text)
        except Exception as e:
            success = False
            error_message = str(e)
            escaped = 0

        processing_time = (time.perf_counter() - start_time) * 1000
        memory_used = max(0.0, self._measure_memory_usage() - memory_before)

        return BenchmarkResult(
            set_name=set_name,
            test_case=test_case,
            processing_time_ms=processing_time,
            memory_used_mb=memory_used,
            characters_processed=len(text),
            characters_escaped=escaped,
            success=success,
            error_message=error_message
        )

    def _regex_baseline(self, escape_char: str) -> Callable[[str], str]:
        pattern = re.compile(f"[{re.escape(DEFAULT_SPECIALS)}]")
        replacement = escape_char.replace("\\", "\\\\") + r"\g<0>"
        return lambda text: pattern.sub(replacement, text)

    def run_benchmark(self, include_regex_baseline: bool = True) -> BenchmarkSuite:
        """Run every set against every test case.

        Args:
            include_regex_baseline: Whether to include ``re.sub`` for comparison;
                ignored for custom sets, whose members the baseline cannot match

        Returns:
            BenchmarkSuite with one averaged result per set and test case
        """
        suite = BenchmarkSuite()
        candidates: Dict[str, Callable[[str], str]] = {
            name: escaper.escape_str for name, escaper in self.escapers.items()
        }
        if include_regex_baseline and not self.uses_default_sets:
            self.logger.debug("Skipping re.sub baseline for custom character sets")
        elif include_regex_baseline:
            any_escaper = next(iter(self.escapers.values()))
            candidates[REGEX_BASELINE] = self._regex_baseline(any_escaper.escape_char)

        self.logger.info(
            "Starting benchmark suite",
            extra={
                "test_cases": len(self.test_cases),
                "sets": list(candidates),
                "warmup_runs": self.warmup_runs,
                "benchmark_runs": self.benchmark_runs
            }
        )

        for test_case, text in self.test_cases.items():
            for set_name, func in candidates.items():
                for _ in range(self.warmup_runs):
                    func(text)

                runs = [
                    self._run_once(set_name, test_case, text, func)
                    for _ in range(self.benchmark_runs)
                ]
                successful = [r for r in runs if r.success]
                if successful:
                    suite.add_result(BenchmarkResult(
                        set_name=set_name,
                        test_case=test_case,
                        processing_time_ms=statistics.mean(r.processing_time_ms for r in successful),
                        memory_used_mb=statistics.mean(r.memory_used_mb for r in successful),
                        characters_processed=len(text),
                        characters_escaped=successful[0].characters_escaped,
                        success=True
                    ))
                elif runs:
                    suite.add_result(runs[0])

        self.logger.info("Benchmark suite completed", extra={"total_results": len(suite.results)})
        return suite

    def compare_performance(
        self,
        baseline_suite: BenchmarkSuite,
        current_suite: BenchmarkSuite
    ) -> Dict[str, Any]:
        """Compare processing time between two suites.

        Returns:
            Report with ``improvements``, ``regressions`` and a ``summary``
        """
        comparison: Dict[str, Any] = {
            "baseline_timestamp": baseline_suite.timestamp,
            "current_timestamp": current_suite.timestamp,
            "improvements": {},
            "regressions": {},
        }

        for baseline in baseline_suite.results:
            current = next(
                (
                    r for r in current_suite.get_results_by_test_case(baseline.test_case)
                    if r.set_name == baseline.set_name
                ),
                None,
            )
            if not (current and baseline.success and current.success):
                continue
            if baseline.processing_time_ms <= 0:
                continue

            time_change = (
                (current.processing_time_ms - baseline.processing_time_ms)
                / baseline.processing_time_ms
            )
            key = f"{baseline.set_name}_{baseline.test_case}"
            entry = {
                "change_percent": time_change * 100,
                "baseline_time_ms": baseline.processing_time_ms,
                "current_time_ms": current.processing_time_ms
            }
            if time_change < -CHANGE_THRESHOLD:
                comparison["improvements"][key] = entry
            elif time_change > CHANGE_THRESHOLD:
                comparison["regressions"][key] = entry

        comparison["summary"] = {
            "total_improvements": len(comparison["improvements"]),
            "total_regressions": len(comparison["regressions"]),
            "has_regressions": len(comparison["regressions"]) > 0
        }
        return comparison
