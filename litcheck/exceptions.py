"""Package-specific exception types."""

from __future__ import annotations


class ParseError(ValueError):
    """Base class for parsing-related errors.

    Represents errors encountered while locating or indexing listings. A
    `ParseError` aborts the whole run.
    """


class ListingHeaderError(ParseError):
    """Raised when a listing header is malformed.

    Args:
        line_number: One-based index of the offending header line.
        reason: Human-readable description of the problem.
    """

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Line {self.line_number}: {self.reason}")


class DuplicateListingError(ParseError):
    """Raised when two file listings share the same name.

    Args:
        name: The duplicated listing name.
        first_line: One-based header line of the first listing.
        second_line: One-based header line of the repeated listing.
    """

    def __init__(self, name: str, first_line: int, second_line: int):
        self.name = name
        self.first_line = first_line
        self.second_line = second_line
        super().__init__(
            f"Duplicate listing `{self.name}` at line {self.second_line} "
            f"(first defined at line {self.first_line})"
        )


class LineTooLongError(ParseError):
    """Raised when a line exceeds the configured maximum length.

    Args:
        line_number: One-based index of the offending line.
        max_line_length: Maximum allowed line length in characters.
    """

    def __init__(self, line_number: int, max_line_length: int):
        self.line_number = line_number
        self.max_line_length = max_line_length
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return (
            f"Line {self.line_number} exceeds maximum allowed length "
            f"of {self.max_line_length} characters"
        )


class TooManyListingsError(ParseError):
    """Raised when a document contains more listings than allowed.

    Args:
        limit: Maximum number of listings permitted.
    """

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Too many listings (limit: {self.limit})")


class ExtractError(LookupError):
    """Base class for errors raised while materializing a listing."""


class ListingNotFoundError(ExtractError):
    """Raised when a listing or fragment name is absent from the index.

    Args:
        name: The requested name.
        kind: ``"listing"`` or ``"fragment"``.
    """

    def __init__(self, name: str, kind: str = "listing"):
        self.name = name
        self.kind = kind
        super().__init__(name)

    def __str__(self) -> str:
        return f"No {self.kind} named `{self.name}`"


class FragmentCycleError(ExtractError):
    """Raised when a fragment transitively includes itself.

    Args:
        chain: Fragment names from the outermost reference to the repeated one.
    """

    def __init__(self, chain: tuple[str, ...]):
        self.chain = chain
        super().__init__(chain)

    def __str__(self) -> str:
        return f"Fragment cycle: {' -> '.join(self.chain)}"


class ToolInvocationError(OSError):
    """Raised when the external checker cannot be started."""
