import io

import pytest

from ddlsync.model import GeneratorError
from ddlsync.runner import Options, format_dry_run, parse_files, read_file, show_ddls


def test_parse_single_file():
    assert parse_files(["schema.sql"]) == ("schema.sql", "")


def test_parse_two_files_orders_current_first():
    assert parse_files(["current.sql", "desired.sql"]) == ("desired.sql", "current.sql")


def test_parse_too_many_files_fails():
    with pytest.raises(ValueError, match="Expected only one or two --file options"):
        parse_files(["a", "b", "c"])


def test_parse_no_files_fails():
    with pytest.raises(ValueError):
        parse_files([])


def test_options_defaults():
    options = Options()
    assert options.desired_file == "-"
    assert (options.current_file, options.dry_run, options.export, options.skip_drop) == ("", False, False, False)


def test_read_file_from_path(tmp_path):
    path = tmp_path / "schema.sql"
    content = "CREATE TABLE users (id int);\n"
    path.write_text(content, encoding="utf-8")
    assert read_file(str(path)) == content


def test_read_missing_file_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(str(tmp_path / "missing.sql"))


def test_read_piped_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("CREATE TABLE t (id int);"))
    assert read_file("-") == "CREATE TABLE t (id int);"


class _Terminal(io.StringIO):
    def isatty(self):
        return True


def test_read_terminal_stdin_fails(monkeypatch):
    monkeypatch.setattr("sys.stdin", _Terminal(""))
    with pytest.raises(GeneratorError, match="stdin is not piped"):
        read_file("-")


def test_format_dry_run_lists_statements():
    ddls = ["ALTER TABLE t ADD COLUMN c int", "DROP TABLE u"]
    text = format_dry_run(ddls, False)
    assert text.splitlines() == ["-- dry run --", "ALTER TABLE t ADD COLUMN c int;", "DROP TABLE u;"]


def test_format_dry_run_skips_drops():
    ddls = ["ALTER TABLE t ADD COLUMN c int", "DROP TABLE u"]
    text = format_dry_run(ddls, True)
    assert text.splitlines() == ["-- dry run --", "ALTER TABLE t ADD COLUMN c int;", "-- Skipped: DROP TABLE u;"]
    assert text.endswith("\n")


def test_show_ddls_prints_listing(capsys):
    ddls = ["DROP VIEW v"]
    show_ddls(ddls, True)
    assert capsys.readouterr().out == format_dry_run(ddls, True)