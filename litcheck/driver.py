"""Verification run: index a document, then extract and check each listing."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from fnmatch import fnmatchcase
from pathlib import Path

from .config import CheckConfig, normalize_config, validate_config
from .exceptions import ExtractError
from .extractor import extract
from .index import ListingIndex
from .models import RunReport, ValidationResult, ValidationStatus
from .parser import read_document
from .validator import Checker

logger = logging.getLogger(__name__)


def build_exclusion_predicate(patterns: Iterable[str]) -> Callable[[str], bool]:
    """Return a predicate matching names against any of the glob `patterns`.

    Examples:
        excluded = build_exclusion_predicate(["*.prf"])
        excluded("x.prf")  # True
    """
    patterns = tuple(patterns)

    def excluded(name: str) -> bool:
        return any(fnmatchcase(name, pattern) for pattern in patterns)

    return excluded


def load_index(
    document_path: Path, config: CheckConfig | None = None, max_line_length: int | None = None
) -> ListingIndex:
    """Read a document and index its listings.

    Raises:
        DocumentError: If the document cannot be read.
        ParseError: If the listings are malformed or duplicated.
    """
    content = read_document(document_path)
    return ListingIndex.build(content, config, max_line_length)


def check_listing(index: ListingIndex, name: str, checker: Checker) -> ValidationResult:
    """Extract and check one listing; extraction errors become failures."""
    try:
        content = extract(index, name)
    except ExtractError as error:
        logger.debug("Extraction of `%s` failed: %s", name, error)
        return ValidationResult(
            name=name, status=ValidationStatus.FAIL, diagnostics=(str(error),)
        )

    result = checker.check(name, content)
    logger.debug("Checked `%s`: %s", name, result.status.value)
    return result


def run(
    document_path: Path,
    checker: Checker,
    excluded: Callable[[str], bool] | None = None,
    *,
    config: CheckConfig | None = None,
    jobs: int | None = None,
    max_line_length: int | None = None,
) -> RunReport:
    """Verify every selected listing of a document.

    Builds the index (any `ParseError` aborts the run before validation),
    drops names matched by `excluded`, then extracts and checks the rest. A
    failing listing never stops the run. With more than one job the checks run
    on a thread pool; results are reported in document order either way.

    Args:
        document_path: Markdown document to verify.
        checker: Validator applied to each extracted listing.
        excluded: Predicate selecting names to skip; defaults to the
            configured `exclude` patterns.
        config: Run configuration; defaults to `CheckConfig()`.
        jobs: Worker count override; defaults to `config.jobs`.
        max_line_length: Optional override for the maximum line length.

    Returns:
        RunReport: One result per checked listing.

    Raises:
        DocumentError: If the document cannot be read.
        ParseError: If the document's listings cannot be indexed.

    Examples:
        report = run(Path("proposal.md"), ToolchainValidator())
    """
    config = normalize_config(config or CheckConfig())
    validate_config(config)
    if excluded is None:
        excluded = build_exclusion_predicate(config.exclude)
    workers = config.jobs if jobs is None else jobs

    index = load_index(document_path, config, max_line_length)

    candidates = index.list_names(lambda name: not excluded(name))
    skipped = tuple(name for name in index.list_names() if excluded(name))
    logger.info(
        "%s: %d listings to check, %d excluded", document_path, len(candidates), len(skipped)
    )

    if workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                name: executor.submit(check_listing, index, name, checker) for name in candidates
            }
            results = tuple(futures[name].result() for name in candidates)
    else:
        results = tuple(check_listing(index, name, checker) for name in candidates)

    report = RunReport(document=document_path, results=results, excluded=skipped)
    logger.info("%s: %d passed, %d failed", document_path, report.passed, report.failed)
    return report
