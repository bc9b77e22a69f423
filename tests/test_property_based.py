from __future__ import annotations

import string

from hypothesis import assume, given
from hypothesis import strategies as st

from litcheck.config import CheckConfig
from litcheck.constants import CLOSING_FENCE_MAX_INDENT
from litcheck.extractor import extract
from litcheck.index import ListingIndex
from litcheck.models import ParserContext, ParserState
from litcheck.parser import (
    _strip_indent_columns,
    _try_close_fence,
    _try_exit_indented_code,
    _try_open_fence,
    locate_listings,
)

LENIENT = CheckConfig(strict=False)

# No whitespace, colons or fence characters: generated lines are never
# mistaken for headers, fences, or blank lines.
code_line_strategy = st.text(
    alphabet=string.ascii_letters + string.digits + ";(){}=_.,+*",
    min_size=1,
    max_size=40,
)
name_strategy = st.from_regex(r"[a-z][a-z0-9_]{0,8}\.zig", fullmatch=True)


def _document(listings: list[tuple[str, list[str]]]) -> str:
    parts = []
    for name, body in listings:
        header = f"lang: zig esc: none file: {name}"
        lines = [f"    {header}", f"    {'-' * len(header)}", ""]
        lines.extend(f"    {line}" for line in body)
        parts.append("\n".join(lines) + "\n\nSome prose.\n\n")
    return "".join(parts)


@given(st.text(max_size=300))
def test_locate_listings_is_deterministic(content: str):
    first = list(locate_listings(content, LENIENT))
    second = list(locate_listings(content, LENIENT))

    assert first == second


@given(st.text(max_size=300))
def test_spans_point_inside_the_document(content: str):
    for listing in locate_listings(content, LENIENT):
        span = listing.source_span
        assert 0 <= span.start < span.end <= len(content)
        assert span.line >= 1


@given(st.lists(code_line_strategy, min_size=1, max_size=10))
def test_verbatim_body_is_extracted_unchanged(body: list[str]):
    index = ListingIndex.build(_document([("a.zig", body)]))

    assert extract(index, "a.zig") == "\n".join(body) + "\n"


@given(
    st.lists(name_strategy, min_size=1, max_size=8, unique=True),
    st.lists(code_line_strategy, min_size=1, max_size=3),
)
def test_names_are_listed_in_document_order(names: list[str], body: list[str]):
    index = ListingIndex.build(_document([(name, body) for name in names]))

    assert index.list_names() == names


@given(
    st.lists(name_strategy, min_size=2, max_size=6, unique=True),
    st.lists(code_line_strategy, min_size=1, max_size=3),
)
def test_extract_is_idempotent(names: list[str], body: list[str]):
    index = ListingIndex.build(_document([(name, body) for name in names]))

    for name in names:
        assert extract(index, name) == extract(index, name)


@given(
    st.integers(min_value=0, max_value=3),
    st.sampled_from(["`", "~"]),
    st.integers(min_value=3, max_value=10),
    st.integers(min_value=0, max_value=3),
)
def test_parser_context_resets_after_fence_cycle(
    indent_columns: int, fence_char: str, fence_length: int, additional_indent: int
):
    ctx = ParserContext()

    open_line = f"{' ' * indent_columns}{fence_char * fence_length}"
    close_line = f"{' ' * (indent_columns + additional_indent)}{fence_char * (fence_length + 1)}"
    assume(indent_columns + additional_indent <= CLOSING_FENCE_MAX_INDENT)

    assert _try_open_fence(ctx, open_line) is True
    assert ctx.state is ParserState.IN_FENCED_CODE

    assert _try_close_fence(ctx, close_line) is True
    assert ctx.state is ParserState.NORMAL
    assert ctx.fence_char is None
    assert ctx.fence_length == 0
    assert ctx.fence_indent_columns == 0


@given(
    st.integers(min_value=0, max_value=3),
    st.text(alphabet=string.ascii_letters, min_size=1, max_size=20),
)
def test_indented_code_exits_on_dedent(indent_columns: int, content: str):
    ctx = ParserContext(state=ParserState.IN_INDENTED_CODE)
    line = f"{' ' * indent_columns}{content}"

    assert _try_exit_indented_code(ctx, line) is False
    assert ctx.state is ParserState.NORMAL


@given(
    st.integers(min_value=0, max_value=8),
    st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=20),
)
def test_strip_indent_columns_removes_exact_indent(columns: int, content: str):
    assert _strip_indent_columns(" " * columns + content, columns) == content
