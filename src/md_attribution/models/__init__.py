"""Data models and enums for the Markdown Attribution Alignment Engine."""

from .enums import NodeType, SourceOpenMode
from .segments import RawSegment, SegmentStream, TextSegment
from .render import (
    PROP_IS_ATTRIBUTED,
    PROP_SOURCE_ID,
    PROP_SOURCE_TITLE,
    SPAN_TAG,
    Element,
    RenderNode,
    Root,
    Text,
    annotated_spans,
    is_annotated_span,
    iter_nodes,
    make_annotated_span,
    visible_text,
)

__all__ = [
    # Enums
    "NodeType",
    "SourceOpenMode",
    # Segment models
    "RawSegment",
    "SegmentStream",
    "TextSegment",
    # Render tree models
    "RenderNode",
    "Root",
    "Element",
    "Text",
    "SPAN_TAG",
    "PROP_IS_ATTRIBUTED",
    "PROP_SOURCE_ID",
    "PROP_SOURCE_TITLE",
    "make_annotated_span",
    "is_annotated_span",
    "iter_nodes",
    "visible_text",
    "annotated_spans",
]
