"""Source highlighting for annotated answers."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.render import (
    PROP_SOURCE_ID,
    PROP_SOURCE_TITLE,
    RenderNode,
    Text,
    is_annotated_span,
    visible_text,
)


@dataclass(frozen=True)
class SpanLocation:
    """Where an annotated span sits in the visible text of an answer."""
    start: int
    end: int
    text: str
    source_id: Optional[str]
    source_title: Optional[str]


class SourceHighlightManager:
    """
    Indexes annotated spans by knowledge source.

    Lets the UI highlight every run that came from the same article when
    one of them is hovered, and report how much of an answer is attributed.
    """

    def __init__(self):
        """Initialize the highlight manager."""
        self.spans: List[SpanLocation] = []
        self.source_to_spans: Dict[str, List[SpanLocation]] = {}
        self.source_titles: Dict[str, Optional[str]] = {}
        self.visible_length = 0

    def build_index(self, tree: RenderNode) -> None:
        """
        Rebuild the index from an annotated tree.

        Args:
            tree: Tree previously passed through the TreeAligner.
        """
        self.spans.clear()
        self.source_to_spans.clear()
        self.source_titles.clear()
        self.visible_length = self._walk(tree, 0)

    def _walk(self, node: RenderNode, offset: int) -> int:
        if isinstance(node, Text):
            return offset + len(node.value)

        if is_annotated_span(node):
            text = visible_text(node)
            end = offset + len(text)
            source_id = node.properties.get(PROP_SOURCE_ID)
            source_title = node.properties.get(PROP_SOURCE_TITLE)
            location = SpanLocation(offset, end, text, source_id, source_title)
            self.spans.append(location)
            if source_id:
                self.source_to_spans.setdefault(source_id, []).append(location)
                self.source_titles.setdefault(source_id, source_title)
            return end

        for child in getattr(node, "children", ()):
            offset = self._walk(child, offset)
        return offset

    def get_source_ids(self) -> List[str]:
        """Source ids in order of first appearance."""
        return list(self.source_to_spans.keys())

    def get_spans_for_source(self, source_id: str) -> List[SpanLocation]:
        return list(self.source_to_spans.get(source_id, []))

    def get_source_title(self, source_id: str) -> Optional[str]:
        return self.source_titles.get(source_id)

    def get_highlight_data(self, source_id: str) -> Dict:
        """
        Get highlighting data for a knowledge source.

        Args:
            source_id: The source identifier.

        Returns:
            Dictionary with the spans to highlight and their positions.
        """
        spans = self.get_spans_for_source(source_id)
        return {
            'source_id': source_id,
            'source_title': self.get_source_title(source_id),
            'span_count': len(spans),
            'positions': [(s.start, s.end) for s in spans],
            'texts': [s.text for s in spans],
            'has_spans': bool(spans),
        }

    def get_coverage_summary(self) -> Dict:
        """
        Summarize how much of the visible answer is attributed.

        Returns:
            Dictionary with attributed/unattributed character counts and the
            attributed ratio of the visible text.
        """
        attributed = sum(s.end - s.start for s in self.spans if s.source_id)
        return {
            'visible_chars': self.visible_length,
            'attributed_chars': attributed,
            'unattributed_chars': self.visible_length - attributed,
            'attributed_ratio': (
                attributed / self.visible_length if self.visible_length else 0.0
            ),
            'source_count': len(self.source_to_spans),
        }
