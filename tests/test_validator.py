from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

from litcheck.models import ValidationResult, ValidationStatus
from litcheck.validator import Checker, ToolchainValidator, validate


def test_valid_content_passes(bracket_tool, tmp_path: Path):
    result = validate("fn f() void {}\n", bracket_tool, name="ok.zig", workdir=tmp_path)

    assert result == ValidationResult(name="ok.zig", status=ValidationStatus.PASS)
    assert result.diagnostics == ()


def test_invalid_content_fails_with_diagnostics(bracket_tool, tmp_path: Path):
    result = validate("fn f( {\n", bracket_tool, name="broken.zig", workdir=tmp_path)

    assert result.status is ValidationStatus.FAIL
    assert result.diagnostics
    assert result.diagnostics[0].startswith("broken.zig:1: error: unclosed")


def test_transient_file_is_removed(bracket_tool, tmp_path: Path):
    validate("fn f( {\n", bracket_tool, name="broken.zig", workdir=tmp_path)
    validate("fn f() {}\n", bracket_tool, name="fine.zig", workdir=tmp_path)

    assert list(tmp_path.iterdir()) == []


def test_transient_file_keeps_listing_suffix(tmp_path: Path):
    tool = (sys.executable, "-c", "import sys; sys.exit(0 if sys.argv[1].endswith('.zig') else 3)")

    assert validate("", tool, name="dir/x.zig", workdir=tmp_path).passed
    assert not validate("", tool, name="x.txt", workdir=tmp_path).passed


def test_missing_tool_fails_without_raising(tmp_path: Path):
    result = validate(
        "fn f() void {}\n", ("litcheck-no-such-tool-7f3a",), name="a.zig", workdir=tmp_path
    )

    assert result.status is ValidationStatus.FAIL
    assert result.diagnostics[0].startswith("could not run litcheck-no-such-tool-7f3a")
    assert list(tmp_path.iterdir()) == []


def test_timeout_fails_with_diagnostic(tmp_path: Path):
    tool = (sys.executable, "-c", "import time; time.sleep(10)")

    result = validate("", tool, name="slow.zig", timeout=0.5, workdir=tmp_path)

    assert result.status is ValidationStatus.FAIL
    assert "timed out after 0.5s" in result.diagnostics[0]
    assert list(tmp_path.iterdir()) == []


def test_silent_failure_reports_exit_status(tmp_path: Path):
    tool = (sys.executable, "-c", "import sys; sys.exit(4)")

    result = validate("", tool, name="a.zig", workdir=tmp_path)

    assert result.diagnostics == (f"{sys.executable} exited with status 4",)


def test_stdout_used_when_stderr_is_empty(tmp_path: Path):
    tool = (sys.executable, "-c", "import sys; print('bad token'); sys.exit(1)")

    result = validate("", tool, name="a.zig", workdir=tmp_path)

    assert result.diagnostics == ("bad token",)


def test_unwritable_workdir_fails(tmp_path: Path):
    missing = tmp_path / "missing"

    result = validate("", ("true",), name="a.zig", workdir=missing)

    assert result.status is ValidationStatus.FAIL
    assert result.diagnostics[0].startswith("could not write transient file")


def test_toolchain_validator_implements_checker(bracket_tool, tmp_path: Path):
    checker: Checker = ToolchainValidator(command=bracket_tool, timeout=30.0, workdir=tmp_path)

    assert checker.check("ok.zig", "{}\n").passed
    assert not checker.check("bad.zig", "{\n").passed


@pytest.mark.skipif(shutil.which("zig") is None, reason="zig toolchain is not installed")
def test_zig_ast_check(tmp_path: Path):
    tool = ("zig", "fmt", "--ast-check")

    assert validate("fn isFive(x: u8) bool {\n    return x == 5;\n}\n", tool, name="is_five.zig").passed
    broken = validate("fn f( {\n", tool, name="broken.zig")
    assert broken.status is ValidationStatus.FAIL
    assert broken.diagnostics
