"""Character classification shared by the cursor and the aligner."""

from typing import Optional

# Typographic substitutions some renderers perform.
_COMPARABLE_CHARS = {
    "\r": "\n",
    "\u00a0": " ",
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
}

WHITESPACE_CHARS = frozenset(" \t\n\r\u00a0")


def normalize_char(char: str) -> str:
    """Map a character to the form used for stream comparison."""
    return _COMPARABLE_CHARS.get(char, char)


def is_whitespace(char: Optional[str]) -> bool:
    """Check a single character against the fixed whitespace set."""
    return char is not None and char in WHITESPACE_CHARS


def chars_match(rendered: str, source: Optional[str]) -> bool:
    """Compare a rendered character with a stream character."""
    if source is None:
        return False
    return normalize_char(rendered) == normalize_char(source)
