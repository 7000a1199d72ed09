"""Constants used across the md-editor package."""

from __future__ import annotations

import re

from .config import EditorConfig

DEFAULT_CONFIG = EditorConfig()

# Block syntax
HEADING_PATTERN = re.compile(r"^(#{1,6})\s*(.*)$")
ORDERED_ITEM_PATTERN = re.compile(r"^([0-9]+)\. (.*)$")
BULLET_MARKERS = ("- ", "* ")
CODE_FENCE = "```"
QUOTE_PREFIX = "> "

# Inline syntax, tried left to right; code spans win over emphasis.
INLINE_PATTERN = re.compile(
    r"(?P<code>`[^`\n]+`)"
    r"|(?P<bold>\*\*[^\n]+?\*\*)"
    r"|(?P<strikethrough>~~[^\n]+?~~)"
    r"|(?P<italic>\*[^*\n]+\*|_[^_\n]+_)"
)

BLOCK_SEPARATOR = "\n\n"

# Session defaults
DEFAULT_HISTORY_SIZE = DEFAULT_CONFIG.history_size
DEFAULT_TAB_WIDTH = DEFAULT_CONFIG.tab_width
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size

MARKDOWN_EXTENSIONS = (".md", ".markdown")
