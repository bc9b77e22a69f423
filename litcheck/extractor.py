"""Materialize listings as standalone source text."""

from __future__ import annotations

import re

from .exceptions import FragmentCycleError
from .index import ListingIndex
from .models import EscapeMode, Listing


def extract(index: ListingIndex, name: str) -> str:
    """Return the source text of the file listing called `name`.

    Listings with `EscapeMode.NONE` are returned verbatim. Delimited listings
    have each ``<open>tag<close>`` placeholder replaced by the expanded bodies
    of all fragments carrying that tag, joined in document order. The first
    fragment line continues the text before the placeholder, later lines are
    prefixed with the leading whitespace of the placeholder's line, and any
    text after the placeholder is appended to the last fragment line.

    The function has no side effects; calling it twice returns the same text.

    Args:
        index: Index built from the document.
        name: File listing name.

    Returns:
        str: The materialized source.

    Raises:
        ListingNotFoundError: If `name` or a referenced fragment is unknown.
        FragmentCycleError: If a fragment includes itself, directly or not.

    Examples:
        source = extract(index, "is_five.zig")
    """
    return _expand_listing(index, index.lookup(name), ())


def _expand_listing(index: ListingIndex, listing: Listing, stack: tuple[str, ...]) -> str:
    if listing.escape_mode is EscapeMode.NONE or listing.delimiters is None:
        return listing.body

    pattern = _placeholder_pattern(*listing.delimiters)
    lines: list[str] = []
    for line in listing.body.splitlines(keepends=True):
        lines.extend(_expand_line(index, line, pattern, stack))
    return "".join(lines)


def _expand_fragment(index: ListingIndex, tag: str, stack: tuple[str, ...]) -> str:
    if tag in stack:
        raise FragmentCycleError((*stack, tag))
    return "".join(
        _expand_listing(index, fragment, (*stack, tag)) for fragment in index.fragments(tag)
    )


def _expand_line(
    index: ListingIndex, line: str, pattern: re.Pattern[str], stack: tuple[str, ...]
) -> list[str]:
    match = pattern.search(line)
    if match is None:
        return [line]

    prefix = line[: match.start()]
    suffix = line[match.end() :]
    indent = prefix[: len(prefix) - len(prefix.lstrip(" \t"))]

    fragment_lines = _expand_fragment(index, match.group("tag"), stack).splitlines()
    if not fragment_lines:
        fragment_lines = [""]

    expanded = [prefix + fragment_lines[0]]
    expanded.extend(indent + text if text else text for text in fragment_lines[1:])
    expanded = [text + "\n" for text in expanded]

    # Text after the placeholder joins the last fragment line
    rest = _expand_line(index, suffix, pattern, stack)
    expanded[-1] = expanded[-1][:-1] + rest[0]
    expanded.extend(rest[1:])
    return expanded


def _placeholder_pattern(opening: str, closing: str) -> re.Pattern[str]:
    tag = rf"(?P<tag>[^\s{re.escape(closing[0])}]+?)"
    return re.compile(rf"{re.escape(opening)}[ \t]*#?{tag}[ \t]*{re.escape(closing)}")
