"""Tests for escaping performance benchmarking."""

from unittest.mock import Mock, patch

import pytest

from streaming_escaper.character.charset import Predicate, SingleChar
from streaming_escaper.tools.benchmarks import (
    REGEX_BASELINE,
    BenchmarkResult,
    BenchmarkSuite,
    EscapeBenchmark,
    default_char_sets,
)


def make_result(set_name="collection", test_case="dense", time_ms=10.0, success=True):
    return BenchmarkResult(
        set_name=set_name,
        test_case=test_case,
        processing_time_ms=time_ms,
        memory_used_mb=1.0,
        characters_processed=1000,
        characters_escaped=100,
        success=success,
    )


@pytest.fixture
def fake_psutil():
    process = Mock()
    process.memory_info.return_value = Mock(rss=50 * 1024 * 1024)
    with patch("streaming_escaper.tools.benchmarks.psutil") as mock_psutil:
        mock_psutil.Process.return_value = process
        yield mock_psutil


class TestBenchmarkResult:
    """Test benchmark result data structure."""

    def test_derived_metrics(self):
        result = make_result(time_ms=100.0)
        # 1000 chars / 0.1 seconds
        assert result.characters_per_second == 10000.0
        assert result.memory_per_character == 1024 * 1024 / 1000

    def test_zero_time(self):
        assert make_result(time_ms=0.0).characters_per_second == 0.0


class TestBenchmarkSuite:
    """Test result aggregation."""

    def test_statistics(self):
        suite = BenchmarkSuite()
        suite.add_result(make_result(time_ms=10.0))
        suite.add_result(make_result(time_ms=20.0))

        stats = suite.get_statistics("collection", "processing_time_ms")

        assert stats["min"] == 10.0
        assert stats["max"] == 20.0
        assert stats["mean"] == 15.0
        assert stats["count"] == 2

    def test_statistics_unknown_set(self):
        assert BenchmarkSuite().get_statistics("missing", "processing_time_ms") == {}

    def test_report(self):
        suite = BenchmarkSuite()
        suite.add_result(make_result("collection", "dense"))
        suite.add_result(make_result("range", "dense", success=False))

        report = suite.generate_report()

        assert report["sets"] == ["collection", "range"]
        assert report["summary"]["range"]["success_rate"] == 0.0
        assert report["detailed_results"]["dense"]["collection"]["characters_escaped"] == 100


class TestEscapeBenchmark:
    """Test benchmark execution."""

    def test_default_sets_share_punctuation(self):
        char_sets = default_char_sets()
        assert char_sets.pop("single_char").contains_char("$")
        for name, char_set in char_sets.items():
            assert char_set.contains_char(">"), name
            assert not char_set.contains_char("a"), name

    def test_run_benchmark(self, fake_psutil):
        benchmark = EscapeBenchmark(warmup_runs=0, benchmark_runs=1)
        suite = benchmark.run_benchmark()

        expected = len(benchmark.test_cases) * (len(default_char_sets()) + 1)
        assert len(suite.results) == expected
        assert all(r.success for r in suite.results)
        fake_psutil.Process.assert_called()

    def test_sets_agree_with_regex_baseline(self, fake_psutil):
        benchmark = EscapeBenchmark(warmup_runs=0, benchmark_runs=1)
        suite = benchmark.run_benchmark()

        for test_case in benchmark.test_cases:
            results = {r.set_name: r for r in suite.get_results_by_test_case(test_case)}
            baseline = results[REGEX_BASELINE].characters_escaped
            for name in ("sequence", "collection", "sorted_collection", "predicate"):
                assert results[name].characters_escaped == baseline

    def test_custom_sets_without_baseline(self, fake_psutil):
        benchmark = EscapeBenchmark(
            warmup_runs=0, benchmark_runs=2, char_sets={"dollar": SingleChar("$")}
        )
        suite = benchmark.run_benchmark(include_regex_baseline=False)
        assert {r.set_name for r in suite.results} == {"dollar"}

    def test_custom_sets_skip_regex_baseline(self, fake_psutil):
        benchmark = EscapeBenchmark(
            warmup_runs=0, benchmark_runs=1, char_sets={"digits": Predicate(str.isdigit)}
        )
        suite = benchmark.run_benchmark(include_regex_baseline=True)
        assert REGEX_BASELINE not in {r.set_name for r in suite.results}

    def test_compare_performance(self):
        baseline = BenchmarkSuite(results=[
            make_result("collection", "dense", 10.0),
            make_result("range", "dense", 10.0),
            make_result("predicate", "dense", 10.0),
        ])
        current = BenchmarkSuite(results=[
            make_result("collection", "dense", 5.0),
            make_result("range", "dense", 20.0),
            make_result("predicate", "dense", 10.2),
        ])

        comparison = EscapeBenchmark(warmup_runs=0, benchmark_runs=0).compare_performance(
            baseline, current
        )

        assert list(comparison["improvements"]) == ["collection_dense"]
        assert list(comparison["regressions"]) == ["range_dense"]
        assert comparison["summary"]["has_regressions"] is True
