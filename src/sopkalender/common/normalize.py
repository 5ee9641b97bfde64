from __future__ import annotations

import re
import unicodedata

COMBINING_MARKS = re.compile("[\u0300-\u036f]")
WHITESPACE = re.compile(r"\s+")
UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")
LINE_BREAK = re.compile(r"\r\n|\r|\n")


def to_file_safe_slug(name: str) -> str:
    decomposed = unicodedata.normalize("NFD", name)
    stripped = COMBINING_MARKS.sub("", decomposed)
    dashed = WHITESPACE.sub("-", stripped)
    return UNSAFE_CHARS.sub("", dashed).lower()


def escape_text(text: str) -> str:
    # Only line breaks are escaped; commas and semicolons pass through.
    return LINE_BREAK.sub(r"\\n", text)
