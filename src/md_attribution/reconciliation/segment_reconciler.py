"""Segment Reconciler implementation for the Markdown Attribution Alignment Engine.

Turns the analyzer's sparse, untrusted segment list into a SegmentStream that
covers every character of the answer text exactly once.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from ..errors import AlignmentDiagnostics, DroppedSegment
from ..interfaces.reconciler import ISegmentReconciler
from ..models.segments import RawSegment, SegmentStream, TextSegment

logger = logging.getLogger(__name__)


def _clean_label(value: Any) -> Optional[str]:
    """Trim a source field; blanks and non-strings become None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def merge_adjacent(segments: Iterable[TextSegment]) -> List[TextSegment]:
    """
    Merge neighbouring segments that share a source.

    Empty segments are dropped. Both-None pairs count as the same source.

    Args:
        segments: Segments in text order.

    Returns:
        New list with no two adjacent segments sharing an attribution.
    """
    merged: List[TextSegment] = []
    for segment in segments:
        if not segment.text:
            continue
        if merged and merged[-1].same_source(segment):
            previous = merged[-1]
            merged[-1] = TextSegment(
                text=previous.text + segment.text,
                source_id=previous.source_id,
                source_title=previous.source_title,
            )
            continue
        merged.append(segment)
    return merged


class SegmentReconciler(ISegmentReconciler):
    """
    Reconciler from analyzer segments to a gapless SegmentStream.

    Each analyzer segment is located at its first occurrence at or after the
    end of the previous match. Text between matches becomes unattributed
    gap segments; segments that cannot be found are dropped.
    """

    def normalize_segments(self, raw_segments: Optional[Iterable[Any]]) -> List[TextSegment]:
        """
        Filter and normalize analyzer records.

        Accepts RawSegment, TextSegment, or mappings with a ``segment_text``
        (or ``text``) key. Records with empty text or an unknown shape are
        dropped; source fields are trimmed and blanks become None.

        Args:
            raw_segments: Analyzer records in their original order.

        Returns:
            List of TextSegment with non-empty text.
        """
        normalized: List[TextSegment] = []
        for record in raw_segments or ():
            if isinstance(record, RawSegment):
                text, source_id, source_title = (
                    record.segment_text, record.source_id, record.source_title
                )
            elif isinstance(record, TextSegment):
                text, source_id, source_title = (
                    record.text, record.source_id, record.source_title
                )
            elif isinstance(record, Mapping):
                text = record.get("segment_text", record.get("text"))
                source_id = record.get("source_id")
                source_title = record.get("source_title")
            else:
                continue

            if not isinstance(text, str) or not text:
                continue
            normalized.append(
                TextSegment(
                    text=text,
                    source_id=_clean_label(source_id),
                    source_title=_clean_label(source_title),
                )
            )
        return normalized

    def reconcile(
        self,
        full_text: str,
        raw_segments: Iterable[Any],
        diagnostics: Optional[AlignmentDiagnostics] = None,
    ) -> SegmentStream:
        """
        Build a SegmentStream covering ``full_text``.

        Args:
            full_text: The answer text exactly as the model produced it.
            raw_segments: Analyzer records in the order they were returned.
            diagnostics: Optional collector for dropped segments.

        Returns:
            SegmentStream whose concatenated text equals full_text. Empty
            when full_text is empty.
        """
        if not isinstance(full_text, str) or not full_text:
            return SegmentStream.empty()

        stitched: List[TextSegment] = []
        cursor = 0

        for segment in self.normalize_segments(raw_segments):
            match = full_text.find(segment.text, cursor)
            if match == -1:
                logger.warning(
                    f"Dropping analyzer segment not found in answer after offset {cursor}: "
                    f"{segment.text[:60]!r} (source_id={segment.source_id})"
                )
                if diagnostics is not None:
                    diagnostics.add_dropped_segment(
                        DroppedSegment(
                            segment_text=segment.text,
                            source_id=segment.source_id,
                            search_from=cursor,
                        )
                    )
                continue

            if match > cursor:
                stitched.append(TextSegment(text=full_text[cursor:match]))
            stitched.append(segment)
            cursor = match + len(segment.text)

        if cursor < len(full_text):
            stitched.append(TextSegment(text=full_text[cursor:]))

        return SegmentStream(merge_adjacent(stitched))
