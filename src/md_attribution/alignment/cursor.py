"""Read cursor over a reconciled SegmentStream."""

from dataclasses import dataclass
from typing import List, Optional

from ..models.segments import SegmentStream, TextSegment


@dataclass(frozen=True)
class CursorPosition:
    """Snapshot of a cursor, used for bounded lookahead."""
    segment_index: int
    char_offset: int


class SegmentCursor:
    """
    Current read position (segment index + character offset) in a stream.

    The cursor only moves forward, except through restore() of a snapshot
    taken during lookahead. It always rests on a readable character or at
    the end of the stream: exhausted and empty segments are stepped over
    eagerly.
    """

    def __init__(self, stream: SegmentStream):
        self._segments = stream.segments
        self._starts: List[int] = []
        total = 0
        for segment in self._segments:
            self._starts.append(total)
            total += len(segment.text)
        self._length = total
        self.segment_index = 0
        self.char_offset = 0
        self._settle()

    def _settle(self) -> None:
        while (
            self.segment_index < len(self._segments)
            and self.char_offset >= len(self._segments[self.segment_index].text)
        ):
            self.segment_index += 1
            self.char_offset = 0

    @property
    def position(self) -> int:
        """Absolute character offset into the stream text."""
        if self.segment_index >= len(self._segments):
            return self._length
        return self._starts[self.segment_index] + self.char_offset

    def at_end(self) -> bool:
        return self.segment_index >= len(self._segments)

    def current_segment(self) -> Optional[TextSegment]:
        """The segment the next character belongs to, or None at the end."""
        if self.at_end():
            return None
        return self._segments[self.segment_index]

    def peek(self) -> Optional[str]:
        if self.at_end():
            return None
        return self._segments[self.segment_index].text[self.char_offset]

    def peek_n(self, count: int) -> str:
        """Return up to ``count`` upcoming characters, crossing segments."""
        parts: List[str] = []
        remaining = count
        index = self.segment_index
        offset = self.char_offset
        while remaining > 0 and index < len(self._segments):
            piece = self._segments[index].text[offset:offset + remaining]
            parts.append(piece)
            remaining -= len(piece)
            index += 1
            offset = 0
        return "".join(parts)

    def previous(self) -> Optional[str]:
        """The character just behind the cursor, or None at the start."""
        if self.char_offset > 0:
            return self._segments[self.segment_index].text[self.char_offset - 1]
        index = self.segment_index - 1
        while index >= 0:
            text = self._segments[index].text
            if text:
                return text[-1]
            index -= 1
        return None

    def at_line_start(self) -> bool:
        prev = self.previous()
        return prev is None or prev in ("\n", "\r")

    def advance(self) -> None:
        if self.at_end():
            return
        self.char_offset += 1
        self._settle()

    def advance_by(self, count: int) -> None:
        for _ in range(count):
            if self.at_end():
                break
            self.advance()

    def skip_until(self, target: str, max_steps: int) -> bool:
        """
        Advance until the cursor rests on ``target``.

        Returns:
            True if found within max_steps; the cursor is left on it.
        """
        steps = 0
        while steps < max_steps:
            current = self.peek()
            if current is None:
                return False
            if current == target:
                return True
            self.advance()
            steps += 1
        return False

    def snapshot(self) -> CursorPosition:
        return CursorPosition(self.segment_index, self.char_offset)

    def restore(self, snapshot: CursorPosition) -> None:
        self.segment_index = snapshot.segment_index
        self.char_offset = snapshot.char_offset
