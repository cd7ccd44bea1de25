"""Tests for result and diagnostic types."""

import pytest

from streaming_escaper.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EscapeMetrics,
    EscapeResult,
)


class TestEscapeMetrics:
    """Tests for derived metrics."""

    def test_defaults(self):
        metrics = EscapeMetrics()
        assert metrics.characters_per_second == 0.0
        assert metrics.escape_rate == 0.0
        assert metrics.expansion_ratio == 1.0

    def test_derived_values(self):
        metrics = EscapeMetrics(
            processing_time_ms=500.0,
            characters_processed=100,
            characters_escaped=25,
            input_bytes=100,
            output_bytes=125,
        )
        assert metrics.characters_per_second == 200.0
        assert metrics.escape_rate == 0.25
        assert metrics.expansion_ratio == 1.25

    def test_to_dict(self):
        data = EscapeMetrics(characters_processed=4, characters_escaped=1).to_dict()
        assert data["characters_processed"] == 4
        assert data["escape_rate"] == 0.25


class TestEscapeResult:
    def test_escaped_count(self):
        result = EscapeResult(text="\\$", metrics=EscapeMetrics(characters_escaped=1))
        assert result.escaped_count == 1
        assert result.diagnostics == []


class TestDiagnosticEntry:
    def test_requires_message_and_component(self):
        with pytest.raises(ValueError):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "stream")
        with pytest.raises(ValueError):
            DiagnosticEntry(DiagnosticSeverity.INFO, "message", "")
