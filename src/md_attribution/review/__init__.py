"""Review module for annotated answers."""

from .source_actions import CREATE_LABEL, SourceOpenRequest, resolve_open_request
from .highlight_manager import SourceHighlightManager, SpanLocation
from .view_renderer import AnnotatedViewRenderer

__all__ = [
    "CREATE_LABEL",
    "SourceOpenRequest",
    "resolve_open_request",
    "SourceHighlightManager",
    "SpanLocation",
    "AnnotatedViewRenderer",
]
