from litcheck.models import ParserContext, ParserState
from litcheck.parser import (
    _leading_whitespace_columns,
    _strip_indent_columns,
    _try_close_fence,
    _try_enter_indented_code,
    _try_exit_indented_code,
    _try_open_fence,
)


def test_try_open_fence_sets_context_fields():
    ctx = ParserContext()

    opened = _try_open_fence(ctx, "   ```zig\n")

    assert opened is True
    assert ctx.state is ParserState.IN_FENCED_CODE
    assert ctx.fence_char == "`"
    assert ctx.fence_length == 3
    assert ctx.fence_indent_columns == 3


def test_try_open_fence_ignored_when_already_in_code():
    ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="~", fence_length=3)

    assert _try_open_fence(ctx, "```") is False
    assert ctx.fence_char == "~"
    assert ctx.fence_length == 3


def test_try_open_fence_rejects_backtick_in_info_string():
    ctx = ParserContext()

    assert _try_open_fence(ctx, "``` not `a` fence\n") is False
    assert ctx.state is ParserState.NORMAL


def test_try_close_fence_respects_indent_limit():
    ctx = ParserContext(
        state=ParserState.IN_FENCED_CODE,
        fence_char="`",
        fence_length=3,
        fence_indent_columns=0,
    )

    assert _try_close_fence(ctx, "    ```\n") is False

    assert _try_close_fence(ctx, "```") is True
    assert ctx.state is ParserState.NORMAL
    assert ctx.fence_char is None
    assert ctx.fence_length == 0
    assert ctx.fence_indent_columns == 0


def test_try_close_fence_requires_matching_character_and_length():
    ctx = ParserContext(state=ParserState.IN_FENCED_CODE, fence_char="`", fence_length=4)

    assert _try_close_fence(ctx, "~~~~\n") is False
    assert _try_close_fence(ctx, "```\n") is False
    assert _try_close_fence(ctx, "```` zig\n") is False
    assert _try_close_fence(ctx, "`````\n") is True


def test_try_enter_indented_code_switches_state():
    ctx = ParserContext()

    assert _try_enter_indented_code(ctx, "   text") is False
    assert _try_enter_indented_code(ctx, "        \n") is False
    assert _try_enter_indented_code(ctx, "    code block") is True
    assert ctx.state is ParserState.IN_INDENTED_CODE


def test_try_exit_indented_code_handles_transitions():
    ctx = ParserContext(state=ParserState.IN_INDENTED_CODE)

    assert _try_exit_indented_code(ctx, "    still indented") is True
    assert ctx.state is ParserState.IN_INDENTED_CODE

    assert _try_exit_indented_code(ctx, "\n") is True
    assert ctx.state is ParserState.IN_INDENTED_CODE

    assert _try_exit_indented_code(ctx, "no longer indented") is False
    assert ctx.state is ParserState.NORMAL


def test_leading_whitespace_columns_expands_tabs():
    assert _leading_whitespace_columns("    text") == 4
    assert _leading_whitespace_columns("\ttext") == 4
    assert _leading_whitespace_columns("  \ttext") == 4
    assert _leading_whitespace_columns("text") == 0


def test_strip_indent_columns():
    assert _strip_indent_columns("      code\n", 4) == "  code\n"
    assert _strip_indent_columns("\t\tnested\n", 4) == "\tnested\n"
    assert _strip_indent_columns("\tcode", 2) == "  code"
    assert _strip_indent_columns("  code", 4) == "code"
    assert _strip_indent_columns("    \n", 4) == "\n"
