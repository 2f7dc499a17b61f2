"""Marker format constants for comments embedded in Markdown.

A comment is stored as an HTML comment block so that Markdown renderers
hide it::

    <!--comment:line-3
    author: You
    date: 2025-01-15T10:30:00.000Z
    id: 6f1c...
    The comment body, possibly
    over several lines.
    -->

Used by markers/codec.py (encode/decode/validate), markers/sectionizer.py
and markers/mutations.py.
"""

from __future__ import annotations

import re

OPEN_TOKEN = "<!--comment"
CLOSE_TOKEN = "-->"
HTML_COMMENT_OPEN = "<!--"

# Format: <!--comment or <!--comment:{section_id} on the first line
OPEN_TEMPLATE = OPEN_TOKEN + "{}"
FIELD_TEMPLATE = "{}: {}"
FIELD_NAMES = ("author", "date", "id")

# Full structural match of one marker block. Fields must appear in order,
# each on its own line, before the close token.
MARKER_PATTERN = re.compile(
    r"\A<!--comment(?::(?P<section>[^\s>]*))?[ \t]*\r?\n"
    r"author:[ \t]*(?P<author>[^\r\n]*)\r?\n"
    r"date:[ \t]*(?P<date>[^\r\n]*)\r?\n"
    r"id:[ \t]*(?P<id>[^\r\n]*)\r?\n"
    r"(?P<body>.*?)-->",
    re.DOTALL,
)

# Header check used by validation: open token plus the three fields in order.
MARKER_HEADER_PATTERN = re.compile(
    r"\A<!--comment(?::[^\s>]*)?[ \t]*\r?\n"
    r"author:[^\r\n]*\r?\n"
    r"date:[^\r\n]*\r?\n"
    r"id:[^\r\n]*\r?\n"
)

# Section ids may not contain whitespace or '>' (they sit on the open token)
SECTION_ID_PATTERN = re.compile(r"[^\s>]+")

DEFAULT_AUTHOR = "You"

# Open line carrying a position-derived section tag, e.g. "<!--comment:line-12"
LINE_TAG_PATTERN = re.compile(
    r"\A(?P<prefix><!--comment:line-)(?P<number>\d+)(?P<rest>[ \t]*\r?)\Z"
)
