"""Tests for the CLI main module."""

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from streaming_escaper.cli.main import (
    build_config,
    cmd_presets,
    create_argument_parser,
    main,
)
from streaming_escaper.shared.config import PRESET_DEFINITIONS, ConfigValidationError


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    path = tmp_path / "input.txt"
    path.write_text("abcd$efgh", encoding="utf-8")
    return path


class TestArgumentParser:
    """Test argument parsing."""

    def test_escape_defaults(self):
        args = create_argument_parser().parse_args(["escape"])
        assert args.command == "escape"
        assert args.paths == []
        assert args.escape_char is None
        assert args.chars is None
        assert args.buffer_size == 8192

    def test_size_hint_arguments(self):
        args = create_argument_parser().parse_args(["size-hint", "10", "-e", "☃"])
        assert args.bytes == 10
        assert args.escape_char == "☃"

    def test_unknown_preset_rejected(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["escape", "--preset", "yaml"])


class TestBuildConfig:
    """Test configuration resolution."""

    def parse(self, *argv):
        return create_argument_parser().parse_args(["escape", *argv])

    def test_flags(self):
        config = build_config(self.parse("-e", "^", "-s", "a-c"))
        assert config.escape_char == "^"
        assert config.special_chars == "a-c"

    def test_preset_then_flags(self):
        config = build_config(self.parse("--preset", "regex", "-e", "%"))
        assert config.special_chars == PRESET_DEFINITIONS["regex"]
        assert config.escape_char == "%"

    def test_config_file(self, tmp_path: Path):
        config_path = tmp_path / "escaper.json"
        config_path.write_text(json.dumps({"escape_char": "!", "special_chars": "$"}))
        config = build_config(self.parse("--config", str(config_path), "-s", "#"))
        assert config.escape_char == "!"
        assert config.special_chars == "#"

    def test_invalid_flags(self):
        with pytest.raises(ConfigValidationError):
            build_config(self.parse("-e", "ab"))


class TestEscapeCommand:
    """Test the escape command end to end."""

    def test_escape_file_to_stdout(self, input_file: Path, capsys):
        assert main(["escape", "--chars", "$", str(input_file)]) == 0
        assert capsys.readouterr().out == "abcd\\$efgh"

    def test_escape_union_of_ranges(self, input_file: Path, capsys):
        assert main(["escape", "--chars", "a-be-f", str(input_file)]) == 0
        assert capsys.readouterr().out == "\\a\\bcd$\\e\\fgh"

    def test_multiple_files_concatenated(self, input_file: Path, tmp_path: Path, capsys):
        second = tmp_path / "second.txt"
        second.write_text("$$", encoding="utf-8")
        assert main(["escape", "-s", "$", "-e", "^", str(input_file), str(second)]) == 0
        assert capsys.readouterr().out == "abcd^$efgh^$^$"

    def test_stdin(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"1$2"), encoding="utf-8"))
        assert main(["escape", "-s", "$"]) == 0
        assert capsys.readouterr().out == "1\\$2"

    def test_invalid_utf8_replaced(self, tmp_path: Path, capsys):
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"caf\xe9 $")
        assert main(["escape", "-s", "$", str(path)]) == 0
        assert capsys.readouterr().out == "caf\ufffd \\$"

    def test_output_file(self, input_file: Path, tmp_path: Path):
        output = tmp_path / "out.txt"
        assert main(["escape", "-s", "a-b", "-o", str(output), str(input_file)]) == 0
        assert output.read_text(encoding="utf-8") == "\\a\\bcd$efgh"

    def test_stats(self, input_file: Path, capsys):
        assert main(["escape", "-s", "$", "--stats", str(input_file)]) == 0
        stats = json.loads(capsys.readouterr().err)
        assert stats["characters_processed"] == 9
        assert stats["characters_escaped"] == 1

    def test_missing_file(self, tmp_path: Path, capsys):
        assert main(["escape", "-s", "$", str(tmp_path / "missing.txt")]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_definition(self, input_file: Path, capsys):
        assert main(["escape", "-s", "z-a", str(input_file)]) == 1
        assert "Reversed range" in capsys.readouterr().err

    def test_invalid_buffer_size(self, input_file: Path, capsys):
        assert main(["escape", "-s", "$", "-b", "10", str(input_file)]) == 1
        assert "buffer_size" in capsys.readouterr().err


class TestOtherCommands:
    """Test size-hint, presets and dispatch."""

    def test_size_hint(self, capsys):
        assert main(["size-hint", "10", "--escape-char", "☃"]) == 0
        assert capsys.readouterr().out.strip() == "30"

    def test_size_hint_default_escape(self, capsys):
        assert main(["size-hint", "7"]) == 0
        assert capsys.readouterr().out.strip() == "7"

    def test_size_hint_negative(self, capsys):
        assert main(["size-hint", "-1"]) == 1

    def test_size_hint_invalid_escape(self, capsys):
        assert main(["size-hint", "3", "-e", "ab"]) == 1

    def test_presets(self, capsys):
        assert cmd_presets(None) == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split("\t")[0] for line in lines] == sorted(PRESET_DEFINITIONS)

    def test_no_command(self, capsys):
        assert main([]) == 1

    @patch("streaming_escaper.cli.main.cmd_escape", side_effect=KeyboardInterrupt)
    def test_keyboard_interrupt(self, mock_escape, capsys):
        assert main(["escape"]) == 130
        assert "interrupted" in capsys.readouterr().err
