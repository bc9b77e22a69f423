"""
litcheck: verifier for code listings embedded in Markdown documents.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    litcheck check proposal.md --exclude "*.prf"

Library Usage:
    from pathlib import Path
    from litcheck import ToolchainValidator, run

    report = run(Path("proposal.md"), ToolchainValidator(("zig", "fmt", "--ast-check")))
    print(report.overall_status)
"""

from .driver import build_exclusion_predicate, run
from .exceptions import (
    DuplicateListingError,
    ExtractError,
    FragmentCycleError,
    LineTooLongError,
    ListingHeaderError,
    ListingNotFoundError,
    ParseError,
    ToolInvocationError,
    TooManyListingsError,
)
from .extractor import extract
from .index import ListingIndex
from .models import (
    EscapeMode,
    Listing,
    ListingKind,
    RunReport,
    SourceSpan,
    ValidationResult,
    ValidationStatus,
)
from .parser import locate_listings
from .validator import Checker, ToolchainValidator, validate

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "locate_listings",
    "ListingIndex",
    "extract",
    "validate",
    "run",
    # Validators
    "Checker",
    "ToolchainValidator",
    # Data models
    "EscapeMode",
    "Listing",
    "ListingKind",
    "RunReport",
    "SourceSpan",
    "ValidationResult",
    "ValidationStatus",
    # Utilities
    "build_exclusion_predicate",
    # Exceptions
    "DuplicateListingError",
    "ExtractError",
    "FragmentCycleError",
    "LineTooLongError",
    "ListingHeaderError",
    "ListingNotFoundError",
    "ParseError",
    "ToolInvocationError",
    "TooManyListingsError",
    # Version
    "__version__",
]
