"""
Markdown Attribution Alignment Engine

Maps knowledge-base source attributions computed on an answer's raw text
onto the rendered markdown tree of the same answer.
"""

__version__ = "0.1.0"

# Export main components
from .models.enums import NodeType, SourceOpenMode
from .models.segments import RawSegment, SegmentStream, TextSegment
from .models.render import Element, RenderNode, Root, Text
from .reconciliation import SegmentReconciler, segments_from_analyzer_text
from .alignment import MarkdownSkipper, SegmentCursor, TreeAligner
from .errors import (
    AlignmentDiagnostics,
    AnalyzerPayloadError,
    AttributionError,
    NoAttributionSegmentsError,
    TreeFormatError,
)
from .config import (
    AlignmentConfig,
    ConfigurationError,
    ConfigurationManager,
    ValidationResult,
)
from .pipeline import AttributionPipeline, AttributionResult
from .serialization import StreamSerializer, TreeSerializer

__all__ = [
    "NodeType",
    "SourceOpenMode",
    "RawSegment",
    "SegmentStream",
    "TextSegment",
    "Element",
    "RenderNode",
    "Root",
    "Text",
    "SegmentReconciler",
    "segments_from_analyzer_text",
    "MarkdownSkipper",
    "SegmentCursor",
    "TreeAligner",
    "AlignmentDiagnostics",
    "AnalyzerPayloadError",
    "AttributionError",
    "NoAttributionSegmentsError",
    "TreeFormatError",
    "AlignmentConfig",
    "ConfigurationError",
    "ConfigurationManager",
    "ValidationResult",
    "AttributionPipeline",
    "AttributionResult",
    "StreamSerializer",
    "TreeSerializer",
]
