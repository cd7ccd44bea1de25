"""Test module for streaming_escaper package initialization."""

import pytest


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import streaming_escaper

    # Assert
    assert streaming_escaper.__version__ == "0.1.0"
    assert streaming_escaper.__author__ == "Streaming Escaper Team"


def test_package_all_exports() -> None:
    """Test that every name in __all__ is importable."""
    import streaming_escaper

    for name in streaming_escaper.__all__:
        assert hasattr(streaming_escaper, name), name


def test_escape() -> None:
    """Test the level 1 escape function with the reference scenarios."""
    from streaming_escaper import CharRange, escape

    assert escape("abcd$efgh", "\\", "$") == "abcd\\$efgh"
    assert escape("abcd$efgh", "\\", CharRange("a", "c")) == "\\a\\bcd$efgh"
    assert escape("abcd$efgh", "\\", CharRange("a", "c") | CharRange("e", "g")) == (
        "\\a\\bcd$\\e\\fgh"
    )


def test_escape_to() -> None:
    """Test streaming into a caller-supplied writer."""
    from streaming_escaper import StringWriter, escape_to

    sink = StringWriter()
    escape_to(sink, "1$2", "^", {"$"})
    assert sink.getvalue() == "1^$2"


def test_escaper_from_config() -> None:
    """Test building an escaper from a preset."""
    from streaming_escaper import EscaperConfig, escaper_from_config

    escaper = escaper_from_config(EscaperConfig.regex())
    assert escaper.escape_str("1+1") == "1\\+1"


def test_escape_rejects_bad_escape_char() -> None:
    from streaming_escaper import escape

    with pytest.raises(ValueError):
        escape("text", "", "$")
