"""Unit tests for utility functions (devsetup.utils).

Tests cover:
- run_command (success, failure, missing executable, timeout, env vars)
- ensure_dir / display_path
- format_duration
- Rich output helpers
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from devsetup.utils import (
    create_progress,
    display_path,
    ensure_dir,
    format_duration,
    print_banner,
    print_error,
    print_header,
    print_info,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
)


def _py(code: str) -> list[str]:
    return [sys.executable, "-c", code]


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    def test_successful_command(self):
        returncode, stdout, stderr = run_command(_py("print('hello')"))
        assert returncode == 0
        assert stdout == "hello"
        assert stderr == ""

    @pytest.mark.unit
    def test_failing_command(self):
        returncode, _, stderr = run_command(
            _py("import sys; sys.stderr.write('bad thing'); sys.exit(3)")
        )
        assert returncode == 3
        assert stderr == "bad thing"

    @pytest.mark.unit
    def test_command_not_found(self):
        returncode, stdout, stderr = run_command(["definitely-not-a-command-xyz"])
        assert returncode == 127
        assert stdout == ""
        assert "Command not found" in stderr

    @pytest.mark.unit
    def test_timeout(self):
        returncode, _, stderr = run_command(_py("import time; time.sleep(5)"), timeout=1)
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    def test_cwd(self, tmp_path: Path):
        _, stdout, _ = run_command(_py("import os; print(os.getcwd())"), cwd=tmp_path)
        assert Path(stdout).resolve() == tmp_path.resolve()

    @pytest.mark.unit
    def test_env_is_merged(self):
        _, stdout, _ = run_command(
            _py("import os; print(os.environ['DB_NAME'], 'PATH' in os.environ)"),
            env={"DB_NAME": "shop"},
        )
        assert stdout == "shop True"

    @pytest.mark.unit
    def test_output_is_stripped(self):
        _, stdout, _ = run_command(_py("print('  padded  \\n')"))
        assert stdout == "padded"


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


class TestEnsureDir:
    @pytest.mark.unit
    def test_creates_nested(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "c"
        assert ensure_dir(target) == target
        assert target.is_dir()

    @pytest.mark.unit
    def test_existing_is_fine(self, tmp_path: Path):
        assert ensure_dir(tmp_path) == tmp_path


class TestDisplayPath:
    @pytest.mark.unit
    def test_relative_inside_root(self, tmp_path: Path):
        assert display_path(tmp_path / "scripts" / "migrate.js", tmp_path) == "scripts/migrate.js"

    @pytest.mark.unit
    def test_absolute_outside_root(self, tmp_path: Path):
        outside = Path("/etc/hosts")
        assert display_path(outside, tmp_path) == str(outside)


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "0.0s"),
            (3.7, "3.7s"),
            (59.9, "59.9s"),
            (65.2, "1m 5s"),
            (3600, "60m 0s"),
            (-4, "0.0s"),
        ],
    )
    def test_formats(self, seconds, expected):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_status_lines(self, capsys):
        print_success("done")
        print_error("broken")
        print_warning("careful")
        print_info("note")

        out = capsys.readouterr().out
        assert "✔ done" in out
        assert "✘ broken" in out
        assert "! careful" in out
        assert "i note" in out

    @pytest.mark.unit
    def test_banner_and_header(self, capsys):
        print_banner("LOCAL SETUP", "React + PostgreSQL")
        print_header("RUNNING COMPLETE SETUP")

        out = capsys.readouterr().out
        assert "LOCAL SETUP" in out
        assert "React + PostgreSQL" in out
        assert "RUNNING COMPLETE SETUP" in out

    @pytest.mark.unit
    def test_summary_table(self, capsys):
        print_summary_table({"Create README": "succeeded"}, title="Setup Summary")

        out = capsys.readouterr().out
        assert "Setup Summary" in out
        assert "Create README" in out
        assert "succeeded" in out

    @pytest.mark.unit
    def test_create_progress(self):
        with create_progress() as progress:
            task = progress.add_task("Installing...", total=None)
            assert task is not None
