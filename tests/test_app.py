"""Tests for input loading and command line handling."""

import pytest

from jvt.app import _load_data, build_parser, main, read_input
from jvt.splitter import load_records


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.file == ""
        assert args.record == 1
        assert args.collapse_depth is None

    def test_options(self):
        args = build_parser().parse_args(["data.json", "-r", "3", "-d", "1"])
        assert args.file == "data.json"
        assert args.record == 3
        assert args.collapse_depth == 1


class TestReadInput:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "in.json"
        path.write_text('{"a": 1}', encoding="utf-8")
        assert read_input(str(path)) == '{"a": 1}'

    def test_help_data_is_one_record(self):
        records = load_records(_load_data("help.json"))
        assert len(records) == 1
        assert "browse" in records[0].value.to_python()


class TestMainErrors:
    def test_malformed_input_exits_1(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text('{"a": 1}{"b":', encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert f"jvt: {path}: byte 8: unterminated value" in err

    def test_missing_file_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("jvt: ")

    def test_invalid_utf8_exits_1(self, tmp_path, capsys):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"a": "\xff"}')
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        assert "not UTF-8" in capsys.readouterr().err

    def test_record_must_be_positive(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["-r", "0", str(tmp_path / "x.json")])
        assert exc_info.value.code == 2

    def test_collapse_depth_not_negative(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["-d", "-1", str(tmp_path / "x.json")])
        assert exc_info.value.code == 2
