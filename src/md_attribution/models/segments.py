"""Attribution segment models for the Markdown Attribution Alignment Engine."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple


@dataclass(frozen=True)
class RawSegment:
    """
    A single record as returned by the upstream knowledge-base analyzer.

    Untrusted: the text may not occur in the answer at all, records may be
    out of order, and the source fields may be blank.
    """
    segment_text: str
    source_id: Optional[str] = None
    source_title: Optional[str] = None


@dataclass(frozen=True)
class TextSegment:
    """
    Exact substring of an answer tagged with the knowledge source it came from.

    Unattributed runs carry ``None`` for both source fields.
    """
    text: str
    source_id: Optional[str] = None
    source_title: Optional[str] = None

    @property
    def attribution_key(self) -> Tuple[Optional[str], Optional[str]]:
        """The ``(source_id, source_title)`` pair used for merging runs."""
        return (self.source_id, self.source_title)

    @property
    def is_attributed(self) -> bool:
        """Check if the segment carries a source id or a source title."""
        return self.source_id is not None or self.source_title is not None

    def same_source(self, other: "TextSegment") -> bool:
        return self.attribution_key == other.attribution_key


class SegmentStream:
    """
    Ordered, immutable sequence of TextSegments covering a whole answer.

    Built once per answer by the reconciler and read by the tree aligner
    through a SegmentCursor. Concatenating the segment texts reproduces the
    answer, and no two neighbours share the same attribution.
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: Iterable[TextSegment] = ()):
        self._segments: Tuple[TextSegment, ...] = tuple(segments)

    @classmethod
    def empty(cls) -> "SegmentStream":
        return cls(())

    @property
    def segments(self) -> Tuple[TextSegment, ...]:
        return self._segments

    @property
    def text(self) -> str:
        """The answer text reassembled from every segment."""
        return "".join(segment.text for segment in self._segments)

    @property
    def is_empty(self) -> bool:
        return not self._segments

    @property
    def has_attribution(self) -> bool:
        """
        Check if any segment carries a source.

        A stream made only of unattributed text has nothing for the aligner
        to annotate.
        """
        return any(segment.is_attributed for segment in self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[TextSegment]:
        return iter(self._segments)

    def __getitem__(self, index: int) -> TextSegment:
        return self._segments[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SegmentStream):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __repr__(self) -> str:
        return f"SegmentStream({list(self._segments)!r})"
