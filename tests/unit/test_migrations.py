"""Tests for the migration runner."""

import sys
from pathlib import Path

import pytest

from formwork.core.errors import MigrationError
from formwork.migrations import run_migrations


def python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_success_captures_output(tmp_path: Path):
    result = run_migrations(tmp_path, python("print('upgraded')"))

    assert result.returncode == 0
    assert result.output.strip() == "upgraded"
    assert result.command[0] == sys.executable


def test_runs_in_workdir(tmp_path: Path):
    result = run_migrations(tmp_path, python("import os; print(os.getcwd())"))
    assert Path(result.output.strip()).resolve() == tmp_path.resolve()


def test_stderr_is_captured(tmp_path: Path):
    result = run_migrations(tmp_path, python("import sys; sys.stderr.write('note\\n')"))
    assert "note" in result.output


def test_nonzero_exit(tmp_path: Path):
    with pytest.raises(MigrationError) as exc_info:
        run_migrations(tmp_path, python("import sys; print('bad revision'); sys.exit(3)"))

    error = exc_info.value
    assert error.returncode == 3
    assert "exit code 3" in str(error)
    assert "bad revision" in error.output


def test_timeout_kills_process(tmp_path: Path):
    with pytest.raises(MigrationError, match="timed out after 0.5s"):
        run_migrations(tmp_path, python("import time; time.sleep(30)"), timeout=0.5, grace=0.5)


def test_missing_command(tmp_path: Path):
    with pytest.raises(MigrationError, match="Migration command not found: no-such-migrator"):
        run_migrations(tmp_path, ["no-such-migrator", "upgrade"])
