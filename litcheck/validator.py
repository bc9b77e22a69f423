"""Run an external toolchain checker over extracted listings."""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .constants import DEFAULT_TOOL, TRANSIENT_PREFIX
from .exceptions import ToolInvocationError
from .models import ValidationResult, ValidationStatus

logger = logging.getLogger(__name__)


class Checker(Protocol):
    """Anything that can judge the source text of one listing."""

    def check(self, name: str, content: str) -> ValidationResult: ...


@dataclass(frozen=True)
class ToolchainValidator:
    """`Checker` backed by an external command such as ``zig fmt --ast-check``.

    Attributes:
        command: Program and arguments; the transient file path is appended.
        timeout: Seconds allowed per invocation, or None for no limit.
        workdir: Directory for transient files, or None for the system default.
    """

    command: tuple[str, ...] = DEFAULT_TOOL
    timeout: float | None = None
    workdir: Path | None = None

    def check(self, name: str, content: str) -> ValidationResult:
        return validate(
            content, self.command, name=name, timeout=self.timeout, workdir=self.workdir
        )


def validate(
    content: str,
    tool: Sequence[str],
    *,
    name: str = "listing",
    timeout: float | None = None,
    workdir: Path | None = None,
) -> ValidationResult:
    """Check `content` with an external tool.

    Writes the content to a uniquely named transient file whose suffix matches
    `name`, runs ``tool + [path]`` and maps its exit status onto a result: exit
    0 passes with no diagnostics, anything else fails with the tool's error
    output. A tool that cannot be started or exceeds `timeout` also fails. The
    transient file is removed on every path.

    Args:
        content: Source text to check.
        tool: Checker command and fixed arguments.
        name: Listing name, used for the transient file suffix and in place of
            the transient path inside diagnostics.
        timeout: Seconds allowed for the tool, or None for no limit.
        workdir: Directory for the transient file.

    Returns:
        ValidationResult: Outcome for this listing.

    Examples:
        validate("const x = 5;\\n", ["zig", "fmt", "--ast-check"], name="x.zig")
    """
    temp_path: Path | None = None
    try:
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="UTF-8",
                prefix=TRANSIENT_PREFIX,
                suffix=Path(name).suffix,
                delete=False,
                dir=workdir,
            ) as tmp_file:
                temp_path = Path(tmp_file.name)
                tmp_file.write(content)
        except OSError as error:
            return _failure(name, f"could not write transient file: {error}")

        command = [*tool, str(temp_path)]
        logger.debug("Running %s for `%s`", " ".join(command), name)

        try:
            completed = _run_tool(command, timeout)
        except ToolInvocationError as error:
            return _failure(name, str(error))
        except subprocess.TimeoutExpired:
            return _failure(name, f"{tool[0]} timed out after {timeout:g}s")

        if completed.returncode == 0:
            return ValidationResult(name=name, status=ValidationStatus.PASS)

        diagnostics = _collect_diagnostics(completed, temp_path, name)
        if not diagnostics:
            diagnostics = (f"{tool[0]} exited with status {completed.returncode}",)
        return ValidationResult(name=name, status=ValidationStatus.FAIL, diagnostics=diagnostics)
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError as error:
                logger.warning("Could not remove transient file %s: %s", temp_path, error)


def _run_tool(command: list[str], timeout: float | None) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            command,
            capture_output=True,
            text=True,
            encoding="UTF-8",
            errors="replace",
            timeout=timeout,
            check=False,
            stdin=subprocess.DEVNULL,
        )
    except OSError as error:
        raise ToolInvocationError(f"could not run {command[0]}: {error}") from error


def _collect_diagnostics(
    completed: subprocess.CompletedProcess[str], temp_path: Path, name: str
) -> tuple[str, ...]:
    text = completed.stderr if completed.stderr.strip() else completed.stdout
    text = text.replace(str(temp_path), name).replace(os.path.basename(temp_path), name)
    return tuple(line for line in text.splitlines() if line.strip())


def _failure(name: str, message: str) -> ValidationResult:
    return ValidationResult(name=name, status=ValidationStatus.FAIL, diagnostics=(message,))
