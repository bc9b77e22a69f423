"""Text rendering of verification results."""

from __future__ import annotations

from .models import RunReport, ValidationResult

DIAGNOSTIC_INDENT = "    "


def render_result(result: ValidationResult) -> list[str]:
    """Render one result as a status line followed by indented diagnostics.

    Examples:
        render_result(ValidationResult("a.zig", ValidationStatus.PASS))
        # ["PASS a.zig\\n"]
    """
    lines = [f"{result.status.name} {result.name}\n"]
    if not result.passed:
        lines.extend(f"{DIAGNOSTIC_INDENT}{diagnostic}\n" for diagnostic in result.diagnostics)
    return lines


def render_summary(report: RunReport) -> str:
    """Render the closing summary line of a run.

    Examples:
        render_summary(report)  # "3 listings: 2 passed, 1 failed, 1 excluded\\n"
    """
    total = len(report.results)
    noun = "listing" if total == 1 else "listings"
    return (
        f"{total} {noun}: {report.passed} passed, {report.failed} failed, "
        f"{len(report.excluded)} excluded\n"
    )


def render_report(report: RunReport) -> list[str]:
    """Render every result of `report` followed by the summary line."""
    lines: list[str] = []
    for result in report.results:
        lines.extend(render_result(result))
    lines.append(render_summary(report))
    return lines
