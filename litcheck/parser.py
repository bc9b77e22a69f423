"""Listing discovery in Markdown documents.

A listing is a Markdown code block whose first non-blank line is a header made
of ``key: value`` pairs (one of them ``lang``) and whose second line is a
separator of dashes::

        lang: zig esc: none file: is_five.zig
        -------------------------------------

        fn isFive(x: u8) bool {
            return x == 5;
        }

Both indented and fenced code blocks are recognised. Everything else in the
document is prose and is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from .config import CheckConfig, normalize_config, validate_config
from .constants import (
    CLOSING_FENCE_MAX_INDENT,
    CODE_FENCE_PATTERN,
    ESCAPE_NONE,
    HEADER_KEYS,
    HEADER_LINE_PATTERN,
    HEADER_MARKER_KEY,
    HEADER_PAIR_PATTERN,
    INDENTED_CODE_COLUMNS,
    SEPARATOR_PATTERN,
)
from .exceptions import LineTooLongError, ListingHeaderError, TooManyListingsError
from .models import (
    BlockLine,
    EscapeMode,
    Listing,
    ListingHeader,
    ListingKind,
    ParserContext,
    ParserState,
    SourceSpan,
)

logger = logging.getLogger(__name__)


def _leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        _leading_whitespace_columns("    text")  # 4
        _leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
            continue
        if character == "\t":
            columns += 4 - (columns % 4)
            continue
        break
    return columns


def _strip_indent_columns(line: str, columns: int) -> str:
    """Remove up to `columns` columns of leading whitespace from `line`.

    A tab that straddles the boundary is replaced by the spaces it still
    covers past `columns`.

    Examples:
        _strip_indent_columns("      code", 4)  # "  code"
        _strip_indent_columns("\\tcode", 2)  # "  code"
    """
    consumed = 0
    index = 0
    while index < len(line) and consumed < columns:
        character = line[index]
        if character == " ":
            consumed += 1
        elif character == "\t":
            width = 4 - (consumed % 4)
            if consumed + width > columns:
                return " " * (consumed + width - columns) + line[index + 1 :]
            consumed += width
        else:
            break
        index += 1
    return line[index:]


def _try_open_fence(ctx: ParserContext, line: str) -> bool:
    """Detect the start of a fenced code block.

    Examples:
        _try_open_fence(ParserContext(), "```zig\\n")  # True
    """
    if ctx.state is not ParserState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_prefix = fence_match.group("indent") or ""
    indent_columns = _leading_whitespace_columns(indent_prefix)
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    # Backtick fences cannot carry backticks in their info string
    if fence_sequence[0] == "`" and "`" in fence_match.group("info"):
        return False

    ctx.state = ParserState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    ctx.fence_indent_columns = indent_columns
    return True


def _try_close_fence(ctx: ParserContext, line: str) -> bool:
    """Attempt to close the active fenced code block.

    The closing fence uses the opening character, is at least as long as the
    opening run, carries no info string, and is indented by at most three
    columns.
    """
    if ctx.state is not ParserState.IN_FENCED_CODE or ctx.fence_char is None:
        return False

    indent_columns = _leading_whitespace_columns(line)
    stripped_line = line.lstrip(" \t")
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False

    if stripped_line[fence_run_length:].strip():
        return False

    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = ParserState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    ctx.fence_indent_columns = 0
    return True


def _try_enter_indented_code(ctx: ParserContext, line: str) -> bool:
    """Detect entry into an indented code block.

    Whitespace-only lines never open a block.
    """
    if ctx.state is not ParserState.NORMAL:
        return False

    if line.strip() and _leading_whitespace_columns(line) >= INDENTED_CODE_COLUMNS:
        ctx.state = ParserState.IN_INDENTED_CODE
        return True

    return False


def _try_exit_indented_code(ctx: ParserContext, line: str) -> bool:
    """Determine whether to stay inside an indented code block.

    Returns:
        bool: True when the line still belongs to the block (blank or still
            indented); False when the block ended and the parser resumed
            normal processing.
    """
    if ctx.state is not ParserState.IN_INDENTED_CODE:
        return False

    if line.strip() == "":
        return True

    if _leading_whitespace_columns(line) >= INDENTED_CODE_COLUMNS:
        return True

    ctx.state = ParserState.NORMAL
    return False


def _enforce_line_length(line: str, line_number: int, max_line_length: int) -> None:
    line_len = len(line)
    if line.endswith("\n"):
        line_len -= 1
        if line_len > 0 and line[line_len - 1] == "\r":
            line_len -= 1
    if line_len > max_line_length:
        raise LineTooLongError(line_number, max_line_length)


def iter_code_blocks(content: str, max_line_length: int) -> Iterator[list[BlockLine]]:
    """Yield the code blocks of a Markdown document in document order.

    Each block is the list of its lines with the block indentation removed:
    four columns for indented blocks, the opening fence's indentation for
    fenced blocks. Fence lines themselves are not part of a block. An
    unterminated fenced block runs to the end of the document.

    Args:
        content: Markdown text.
        max_line_length: Maximum allowed line length (excluding line endings).

    Raises:
        LineTooLongError: If any line exceeds `max_line_length`.
    """
    ctx = ParserContext()
    block: list[BlockLine] = []
    offset = 0

    for line_number, line in enumerate(content.splitlines(keepends=True), start=1):
        line_start = offset
        offset += len(line)
        _enforce_line_length(line, line_number, max_line_length)

        if ctx.state is ParserState.IN_FENCED_CODE:
            if _try_close_fence(ctx, line):
                yield block
                block = []
            else:
                text = _strip_indent_columns(line, ctx.fence_indent_columns)
                block.append(BlockLine(line_number, line_start, offset, text))
            continue

        if ctx.state is ParserState.IN_INDENTED_CODE:
            if _try_exit_indented_code(ctx, line):
                text = _strip_indent_columns(line, INDENTED_CODE_COLUMNS)
                block.append(BlockLine(line_number, line_start, offset, text))
                continue
            yield block
            block = []

        if _try_open_fence(ctx, line):
            continue

        if _try_enter_indented_code(ctx, line):
            text = _strip_indent_columns(line, INDENTED_CODE_COLUMNS)
            block.append(BlockLine(line_number, line_start, offset, text))

    if ctx.state is not ParserState.NORMAL:
        yield block


def is_header_line(text: str) -> bool:
    """Return True when `text` looks like a listing header.

    Examples:
        is_header_line("lang: zig esc: none file: main.zig")  # True
        is_header_line("const x = 5;")  # False
    """
    stripped = text.strip()
    if not HEADER_LINE_PATTERN.match(stripped):
        return False
    return any(
        match.group("key") == HEADER_MARKER_KEY for match in HEADER_PAIR_PATTERN.finditer(stripped)
    )


def _parse_escape(value: str, line_number: int) -> tuple[EscapeMode, tuple[str, str] | None]:
    if value.lower() == ESCAPE_NONE:
        return EscapeMode.NONE, None
    if len(value) % 2:
        raise ListingHeaderError(
            line_number,
            f"`esc` must be `{ESCAPE_NONE}` or an opening and closing delimiter "
            f"of equal length, got `{value}`",
        )
    half = len(value) // 2
    return EscapeMode.DELIMITED, (value[:half], value[half:])


def parse_header(text: str, line_number: int) -> ListingHeader:
    """Parse a listing header line.

    Args:
        text: Header line, with or without surrounding whitespace.
        line_number: One-based line number used in error messages.

    Returns:
        ListingHeader: The parsed header.

    Raises:
        ListingHeaderError: If a key is unknown or repeated, `lang` or `esc` is
            missing, neither or both of `file` and `tag` are given, or the
            `esc` value is invalid.

    Examples:
        parse_header("lang: zig esc: [[]] tag: #imports", 12)
    """
    pairs: dict[str, str] = {}
    for match in HEADER_PAIR_PATTERN.finditer(text.strip()):
        key = match.group("key")
        if key not in HEADER_KEYS:
            raise ListingHeaderError(line_number, f"unknown header key `{key}`")
        if key in pairs:
            raise ListingHeaderError(line_number, f"header key `{key}` given more than once")
        pairs[key] = match.group("value")

    for required in ("lang", "esc"):
        if required not in pairs:
            raise ListingHeaderError(line_number, f"header is missing the `{required}` key")

    if "file" in pairs and "tag" in pairs:
        raise ListingHeaderError(line_number, "header cannot have both `file` and `tag` keys")
    if "file" not in pairs and "tag" not in pairs:
        raise ListingHeaderError(line_number, "header is missing the `file` key")

    escape_mode, delimiters = _parse_escape(pairs["esc"], line_number)

    if "file" in pairs:
        name = pairs["file"]
        kind = ListingKind.FILE
    else:
        name = pairs["tag"].lstrip("#")
        kind = ListingKind.FRAGMENT
        if not name:
            raise ListingHeaderError(line_number, "`tag` value must not be empty")

    return ListingHeader(
        name=name,
        kind=kind,
        language_tag=pairs["lang"],
        escape_mode=escape_mode,
        delimiters=delimiters,
    )


def _is_separator(block: list[BlockLine], index: int) -> bool:
    return index < len(block) and bool(SEPARATOR_PATTERN.match(block[index].text.strip()))


def _split_listings(block: list[BlockLine]) -> list[list[BlockLine]]:
    """Split a code block into listing segments, each starting at its header.

    A block is a listing block only when its first non-blank line is a header
    and the line after it is a separator; any other block is ordinary code
    and yields no segments. Inside a listing block, a header followed by a
    separator and preceded by a blank line starts the next listing, so
    listings separated only by blank lines stay distinct.
    """
    first = 0
    while first < len(block) and not block[first].text.strip():
        first += 1
    if (
        first == len(block)
        or not is_header_line(block[first].text)
        or not _is_separator(block, first + 1)
    ):
        return []

    starts = [first]
    for index in range(first + 2, len(block)):
        if (
            not block[index - 1].text.strip()
            and is_header_line(block[index].text)
            and _is_separator(block, index + 1)
        ):
            starts.append(index)

    bounds = zip(starts, [*starts[1:], len(block)])
    return [block[start:end] for start, end in bounds]


def _build_listing(segment: list[BlockLine]) -> Listing:
    """Turn a segment starting at a header and separator into a listing.

    Raises:
        ListingHeaderError: If the header is malformed.
    """
    header_line = segment[0]
    header = parse_header(header_line.text, header_line.number)

    body_lines = segment[2:]
    while body_lines and not body_lines[0].text.strip():
        body_lines = body_lines[1:]
    while body_lines and not body_lines[-1].text.strip():
        body_lines = body_lines[:-1]

    body = "".join(line.text for line in body_lines)
    if body and not body.endswith("\n"):
        body += "\n"

    last_line = body_lines[-1] if body_lines else segment[1]
    return Listing(
        name=header.name,
        kind=header.kind,
        language_tag=header.language_tag,
        escape_mode=header.escape_mode,
        delimiters=header.delimiters,
        body=body,
        source_span=SourceSpan(start=header_line.start, end=last_line.end, line=header_line.number),
    )


def locate_listings(
    content: str, config: CheckConfig | None = None, max_line_length: int | None = None
) -> Iterator[Listing]:
    """Lazily yield the listings of a Markdown document in document order.

    Calling the function again on the same content yields the same listings.

    Args:
        content: The Markdown content to scan.
        config: Configuration controlling strictness and limits. Defaults to a
            new `CheckConfig` when omitted.
        max_line_length: Optional override for the maximum allowed line length
            (excluding line endings).

    Yields:
        Listing: Each file or fragment listing found in the document.

    Raises:
        ConfigError: If the configuration fails validation.
        ListingHeaderError: If a header is malformed and `config.strict` is set.
        LineTooLongError: If a line exceeds the maximum length.
        TooManyListingsError: If the document holds more than
            `config.max_listings` listings.

    Examples:
        names = [listing.name for listing in locate_listings(text)]
    """
    config = normalize_config(config or CheckConfig())
    validate_config(config)
    effective_max_line_length = (
        config.max_line_length if max_line_length is None else max_line_length
    )

    listing_count = 0
    for block in iter_code_blocks(content, effective_max_line_length):
        for segment in _split_listings(block):
            try:
                listing = _build_listing(segment)
            except ListingHeaderError as error:
                if config.strict:
                    raise
                logger.warning("Skipping malformed listing: %s", error)
                continue

            listing_count += 1
            if listing_count > config.max_listings:
                raise TooManyListingsError(config.max_listings)

            logger.debug(
                "Found %s listing `%s` at line %d",
                listing.kind.name.lower(),
                listing.name,
                listing.source_span.line,
            )
            yield listing


class DocumentError(Exception):
    """Raised when a document cannot be read or decoded."""


def read_document(filepath: Path) -> str:
    """Read a Markdown document as UTF-8 text.

    Args:
        filepath: Path to the document.

    Returns:
        str: The document content.

    Raises:
        DocumentError: If the file cannot be read or is not valid UTF-8.

    Examples:
        content = read_document(Path("proposal.md"))
    """
    try:
        return filepath.read_text(encoding="UTF-8")
    except UnicodeDecodeError as error:
        raise DocumentError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
    except OSError as error:
        raise DocumentError(f"Error accessing {filepath}: {error}") from error
