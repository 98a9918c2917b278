"""Alignment of reconciled segment streams onto rendered answer trees.

The tree aligner walks the render tree and uses a SegmentCursor plus the
markdown skipper to find, for every visible character, the stream character
it was rendered from.
"""

from .cursor import CursorPosition, SegmentCursor
from .markdown_skipper import MarkdownSkipper
from .normalization import chars_match, is_whitespace, normalize_char
from .span_splitter import SpanSplitter, SplitOutcome
from .tree_aligner import TreeAligner

__all__ = [
    "CursorPosition",
    "SegmentCursor",
    "MarkdownSkipper",
    "SpanSplitter",
    "SplitOutcome",
    "TreeAligner",
    "chars_match",
    "is_whitespace",
    "normalize_char",
]
