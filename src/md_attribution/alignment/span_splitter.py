"""Splitting of rendered text leaves into annotated spans."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..models.render import SPAN_TAG, RenderNode, Text, make_annotated_span
from ..models.segments import TextSegment
from .cursor import SegmentCursor
from .markdown_skipper import MarkdownSkipper
from .normalization import is_whitespace

_NO_RUN = object()


@dataclass
class SplitOutcome:
    """
    Result of splitting or consuming one text leaf.

    Attributes:
        nodes: Replacement nodes for the leaf (empty in silent mode).
        failed_at: Index of the first character that could not be
            aligned, or None when the whole leaf was processed.
        matched: Whether any non-whitespace character was aligned.
    """
    nodes: List[RenderNode] = field(default_factory=list)
    failed_at: Optional[int] = None
    matched: bool = False

    @property
    def desynced(self) -> bool:
        return self.failed_at is not None


def _run_key(segment: Optional[TextSegment]) -> object:
    return None if segment is None else segment.attribution_key


class SpanSplitter:
    """
    Assigns each character of a text leaf to a stream segment.

    Adjacent characters resolving to the same attribution are buffered and
    emitted as one annotated span, so the number of spans is bounded by the
    number of attribution transitions rather than by segment boundaries.
    """

    def __init__(self, skipper: MarkdownSkipper, span_tag: str = SPAN_TAG):
        self._skipper = skipper
        self._span_tag = span_tag

    def split(
        self,
        value: str,
        cursor: SegmentCursor,
        hold_leading_whitespace: bool = False,
    ) -> SplitOutcome:
        """
        Replace a text leaf with annotated spans.

        Args:
            value: Literal text of the leaf.
            cursor: Cursor into the reconciled stream, advanced in place.
            hold_leading_whitespace: Keep characters as plain text until the
                first non-whitespace character aligns. Held characters join
                the first span on a match and stay plain Text otherwise.

        Returns:
            SplitOutcome with the replacement nodes. On alignment failure
            the unprocessed remainder is emitted as a single plain Text.
        """
        outcome = SplitOutcome()
        buffer: List[str] = []
        held: List[str] = []
        holding = hold_leading_whitespace
        run_key: object = _NO_RUN
        run_segment: Optional[TextSegment] = None

        def flush() -> None:
            if buffer:
                outcome.nodes.append(
                    make_annotated_span("".join(buffer), run_segment, self._span_tag)
                )
                buffer.clear()

        for i, char in enumerate(value):
            active_segment = cursor.current_segment()

            if not cursor.at_end():
                if is_whitespace(char):
                    if is_whitespace(cursor.peek()):
                        cursor.advance()
                else:
                    if not self._skipper.align_to(cursor, char):
                        flush()
                        outcome.nodes.append(Text("".join(held) + value[i:]))
                        outcome.failed_at = i
                        return outcome
                    active_segment = cursor.current_segment()
                    cursor.advance()
                    outcome.matched = True
                    if holding:
                        holding = False
                        run_key = _run_key(active_segment)
                        run_segment = active_segment
                        buffer.extend(held)
                        held.clear()

            if holding:
                held.append(char)
                continue

            key = _run_key(active_segment)
            if key != run_key:
                flush()
                run_key = key
                run_segment = active_segment
            buffer.append(char)

        flush()
        if held:
            outcome.nodes.append(Text("".join(held)))
        return outcome

    def consume(self, value: str, cursor: SegmentCursor) -> SplitOutcome:
        """
        Advance the cursor over a verbatim leaf without emitting spans.

        Args:
            value: Literal text of the leaf.
            cursor: Cursor into the reconciled stream, advanced in place.

        Returns:
            SplitOutcome with no nodes; failed_at is set on desync.
        """
        outcome = SplitOutcome()
        for i, char in enumerate(value):
            if cursor.at_end():
                break
            if is_whitespace(char):
                if is_whitespace(cursor.peek()):
                    cursor.advance()
                continue
            if not self._skipper.align_to(cursor, char):
                outcome.failed_at = i
                break
            cursor.advance()
            outcome.matched = True
        return outcome
