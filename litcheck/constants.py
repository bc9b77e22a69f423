"""Constants used across the litcheck package."""

from __future__ import annotations

import re

from .config import CheckConfig

DEFAULT_CONFIG = CheckConfig()

# Markdown patterns
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>\s{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSING_FENCE_MAX_INDENT = 3
INDENTED_CODE_COLUMNS = 4

# Listing header: whitespace-separated `key: value` pairs, one of them `lang`
HEADER_KEY = r"[A-Za-z_][\w-]*"
HEADER_LINE_PATTERN = re.compile(
    rf"^{HEADER_KEY}:[ \t]*\S+(?:[ \t]+{HEADER_KEY}:[ \t]*\S+)*[ \t]*$"
)
HEADER_PAIR_PATTERN = re.compile(rf"(?P<key>{HEADER_KEY}):[ \t]*(?P<value>\S+)")
HEADER_MARKER_KEY = "lang"
HEADER_KEYS = ("lang", "esc", "file", "tag")
SEPARATOR_PATTERN = re.compile(r"^-{3,}[ \t]*$")
ESCAPE_NONE = "none"

# Defaults
DEFAULT_TOOL = DEFAULT_CONFIG.tool
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size
DEFAULT_MAX_LINE_LENGTH = DEFAULT_CONFIG.max_line_length

DOCUMENT_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn")
TRANSIENT_PREFIX = "litcheck-"
