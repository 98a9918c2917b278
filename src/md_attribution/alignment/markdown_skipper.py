"""Cursor advancement over markdown syntax the renderer consumed.

The segment stream still contains the raw markdown (``**``, ``](url)``,
``# `` ...) while the render tree only holds visible text. The skipper moves
a SegmentCursor past such noise until it rests on the character that was
actually rendered.
"""

from ..config.models import DEFAULT_MAX_SKIP_STEPS
from .cursor import SegmentCursor
from .normalization import is_whitespace, normalize_char

INLINE_NOISE_CHARS = frozenset("*_`~<>")
RESIDUAL_PUNCTUATION = frozenset("[]()!")
BULLET_MARKERS = frozenset("-*+")
FENCE_MARKERS = ("```", "~~~")
ASCII_DIGITS = frozenset("0123456789")


class MarkdownSkipper:
    """
    Aligns a cursor to a rendered character under formatting noise.

    Each try_skip_* method inspects the cursor, consumes one recognised
    piece of syntax and returns True, or leaves the cursor untouched and
    returns False.
    """

    def __init__(self, max_skip_steps: int = DEFAULT_MAX_SKIP_STEPS):
        """
        Initialize the skipper.

        Args:
            max_skip_steps: Maximum number of skips while looking for one
                character, also used to bound scans for closing brackets.
        """
        if max_skip_steps < 1:
            raise ValueError("max_skip_steps must be at least 1")
        self.max_skip_steps = max_skip_steps

    def align_to(self, cursor: SegmentCursor, char: str) -> bool:
        """
        Move the cursor onto a stream character matching ``char``.

        Skipped noise stays consumed when the search fails.

        Args:
            cursor: Cursor into the reconciled stream.
            char: Rendered character to find.

        Returns:
            True if the cursor now rests on a matching character.
        """
        if cursor.at_end():
            return False
        target = normalize_char(char)
        if is_whitespace(target):
            return True

        steps = 0
        while steps < self.max_skip_steps:
            current = cursor.peek()
            if current is None:
                return False

            normalized = normalize_char(current)
            if normalized == target:
                return True

            if (
                self.try_skip_link_target(cursor)
                or self.try_skip_image(cursor)
                or self.try_skip_line_prefix(cursor)
                or self.try_skip_inline_noise(cursor)
            ):
                steps += 1
                continue

            if is_whitespace(normalized) or normalized in RESIDUAL_PUNCTUATION:
                cursor.advance()
                steps += 1
                continue

            return False

        return False

    def try_skip_link_target(self, cursor: SegmentCursor) -> bool:
        """Consume ``](target)`` or ``][ref]`` following link text."""
        opener = cursor.peek_n(2)
        if opener == "](":
            closer = ")"
        elif opener == "][":
            closer = "]"
        else:
            return False
        cursor.advance_by(2)
        if cursor.skip_until(closer, self.max_skip_steps):
            cursor.advance()
        return True

    def try_skip_image(self, cursor: SegmentCursor) -> bool:
        """Consume ``![alt]`` and an optional ``(url)``."""
        if cursor.peek_n(2) != "![":
            return False
        cursor.advance_by(2)
        if cursor.skip_until("]", self.max_skip_steps):
            cursor.advance()
        if cursor.peek() == "(":
            cursor.advance()
            if cursor.skip_until(")", self.max_skip_steps):
                cursor.advance()
        return True

    def try_skip_line_prefix(self, cursor: SegmentCursor) -> bool:
        """
        Consume a block marker at the start of a line.

        Handles code fences (through the end of the fence line), headings,
        blockquotes, bullets and ordered-list numbers.
        """
        if not cursor.at_line_start():
            return False

        if cursor.peek_n(3) in FENCE_MARKERS:
            cursor.advance_by(3)
            if cursor.skip_until("\n", self.max_skip_steps):
                cursor.advance()
            return True

        current = cursor.peek()
        if current is None:
            return False

        if current == "#":
            while cursor.peek() == "#":
                cursor.advance()
            if cursor.peek() == " ":
                cursor.advance()
            return True

        if current == ">":
            cursor.advance()
            if cursor.peek() == " ":
                cursor.advance()
            return True

        if current in BULLET_MARKERS:
            snapshot = cursor.snapshot()
            cursor.advance()
            if cursor.peek() == " ":
                cursor.advance()
                return True
            cursor.restore(snapshot)
            return False

        if current in ASCII_DIGITS:
            snapshot = cursor.snapshot()
            while cursor.peek() in ASCII_DIGITS:
                cursor.advance()
            if cursor.peek() in (".", ")"):
                cursor.advance()
                if cursor.peek() == " ":
                    cursor.advance()
                return True
            cursor.restore(snapshot)

        return False

    def try_skip_inline_noise(self, cursor: SegmentCursor) -> bool:
        """Consume a single emphasis, code, strike or angle-bracket char."""
        if cursor.peek() in INLINE_NOISE_CHARS:
            cursor.advance()
            return True
        return False
