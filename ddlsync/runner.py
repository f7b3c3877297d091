"""Command-side helpers: file options, input reading and dry-run output."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .model import GeneratorError


@dataclass
class Options:
    """How a schema run should behave."""

    desired_file: str = "-"
    current_file: str = ""
    dry_run: bool = False
    export: bool = False
    skip_drop: bool = False


def parse_files(files: Sequence[str]) -> Tuple[str, str]:
    """Split ``--file`` values into (desired file, current file).

    With two files the first is the current schema and the second the desired one.
    """
    files = list(files)
    if not files:
        raise ValueError("parse_files got empty files")
    if len(files) > 2:
        raise ValueError(f"Expected only one or two --file options, but got: {files}")
    if len(files) == 2:
        return files[1], files[0]
    return files[0], ""


def read_file(path: str) -> str:
    """Read a schema file; ``-`` reads standard input, which must be piped."""
    if path == "-":
        if sys.stdin.isatty():
            raise GeneratorError("stdin is not piped")
        return sys.stdin.read()
    with open(path, encoding="utf-8") as handle:
        return handle.read()


def format_dry_run(ddls: Iterable[str], skip_drop: bool) -> str:
    """The dry-run listing of ``ddls``, one statement per line."""
    lines: List[str] = ["-- dry run --"]
    for ddl in ddls:
        if skip_drop and "DROP" in ddl:
            lines.append(f"-- Skipped: {ddl};")
        else:
            lines.append(f"{ddl};")
    return "\n".join(lines) + "\n"


def show_ddls(ddls: Iterable[str], skip_drop: bool) -> None:
    """Print the dry-run listing of ``ddls`` to standard output."""
    sys.stdout.write(format_dry_run(ddls, skip_drop))