"""Data models for litcheck."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path


class ParserState(Enum):
    """Parser states used while scanning Markdown content.

    Attributes:
        NORMAL: Default state for prose.
        IN_FENCED_CODE: Inside a fenced code block.
        IN_INDENTED_CODE: Inside an indented code block.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()
    IN_INDENTED_CODE = auto()


@dataclass
class ParserContext:
    """Encapsulate parser state while walking Markdown text.

    Attributes:
        state: Current parser state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
        fence_indent_columns: Indentation width preceding the opening fence.
    """

    state: ParserState = ParserState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0
    fence_indent_columns: int = 0


class ListingKind(Enum):
    """How a listing is addressed.

    Attributes:
        FILE: A standalone unit named by a ``file:`` key.
        FRAGMENT: A reusable piece named by a ``tag:`` key and spliced into
            other listings through placeholders.
    """

    FILE = auto()
    FRAGMENT = auto()


class EscapeMode(Enum):
    """Whether placeholders inside a listing body are expanded.

    Attributes:
        NONE: The body is returned verbatim.
        DELIMITED: ``<open>tag<close>`` placeholders are replaced by fragments.
    """

    NONE = auto()
    DELIMITED = auto()


@dataclass(frozen=True)
class ListingHeader:
    """Parsed header line of a listing.

    Attributes:
        name: Value of the ``file`` key, or the ``tag`` key without its ``#``.
        kind: `ListingKind.FILE` for ``file:`` headers, otherwise
            `ListingKind.FRAGMENT`.
        language_tag: Value of the ``lang`` key.
        escape_mode: Mode selected by the ``esc`` key.
        delimiters: Placeholder delimiters when `escape_mode` is delimited.
    """

    name: str
    kind: ListingKind
    language_tag: str
    escape_mode: EscapeMode
    delimiters: tuple[str, str] | None = None


@dataclass(frozen=True)
class BlockLine:
    """One line of a Markdown code block with its block indentation removed.

    Attributes:
        number: One-based line number in the document.
        start: Offset of the raw line in the document.
        end: Offset one past the raw line, including its line ending.
        text: Line content after removing the code block indentation.
    """

    number: int
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class SourceSpan:
    """Location of a listing inside its document.

    Attributes:
        start: Offset of the first character of the header line.
        end: Offset one past the last character of the listing body.
        line: One-based line number of the header.
    """

    start: int
    end: int
    line: int


@dataclass(frozen=True)
class Listing:
    """A named, tagged code listing embedded in a document.

    Attributes:
        name: File name or fragment tag used as the lookup key.
        kind: Whether the listing is a file or a fragment.
        language_tag: Value of the ``lang`` key.
        escape_mode: Placeholder handling for the body.
        delimiters: Opening and closing placeholder delimiters, or None when
            `escape_mode` is `EscapeMode.NONE`.
        body: Raw listing content, ending with a newline unless empty.
        source_span: Where the listing appears in the document.
    """

    name: str
    kind: ListingKind
    language_tag: str
    escape_mode: EscapeMode
    delimiters: tuple[str, str] | None
    body: str
    source_span: SourceSpan


class ValidationStatus(Enum):
    """Outcome of checking one listing."""

    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating a single listing.

    Attributes:
        name: Listing name.
        status: Pass or fail.
        diagnostics: Message lines reported for the listing; empty on pass.
    """

    name: str
    status: ValidationStatus
    diagnostics: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        """True when the listing was accepted by the checker."""
        return self.status is ValidationStatus.PASS


@dataclass(frozen=True)
class RunReport:
    """Aggregate outcome of one verification run.

    Attributes:
        document: Path of the verified document.
        results: One result per checked listing, in document order.
        excluded: Names skipped by the exclusion predicate, in document order.
    """

    document: Path
    results: tuple[ValidationResult, ...] = ()
    excluded: tuple[str, ...] = ()

    @property
    def overall_status(self) -> ValidationStatus:
        """PASS when every result passed, including when there are none."""
        if all(result.passed for result in self.results):
            return ValidationStatus.PASS
        return ValidationStatus.FAIL

    @property
    def passed(self) -> int:
        """Number of listings that passed."""
        return sum(1 for result in self.results if result.passed)

    @property
    def failed(self) -> int:
        """Number of listings that failed."""
        return len(self.results) - self.passed
