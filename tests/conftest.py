from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

# Stand-in for `zig fmt --ast-check`: fails on unbalanced brackets and reports
# the offending line on stderr, prefixed with the checked path.
BRACKET_CHECKER = """
import sys

pairs = {")": "(", "]": "[", "}": "{"}
path = sys.argv[1]
stack = []
with open(path, encoding="utf-8") as handle:
    for line_number, line in enumerate(handle, start=1):
        for character in line:
            if character in "([{":
                stack.append((character, line_number))
            elif character in pairs:
                if not stack or stack[-1][0] != pairs[character]:
                    sys.stderr.write(f"{path}:{line_number}: error: unexpected '{character}'\\n")
                    sys.exit(1)
                stack.pop()
if stack:
    character, line_number = stack[-1]
    sys.stderr.write(f"{path}:{line_number}: error: unclosed '{character}'\\n")
    sys.exit(1)
"""


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def bracket_tool(tmp_path_factory) -> tuple[str, ...]:
    """Checker command that validates bracket balance of the given file."""
    script = tmp_path_factory.mktemp("tools") / "bracket_check.py"
    script.write_text(textwrap.dedent(BRACKET_CHECKER), encoding="utf-8")
    return (sys.executable, str(script))


@pytest.fixture()
def write_doc(tmp_path: Path):
    """Write a Markdown document below `tmp_path` and return its path."""

    def _write(content: str, filename: str = "doc.md") -> Path:
        path = tmp_path / filename
        path.write_text(content, encoding="utf-8")
        return path

    return _write
