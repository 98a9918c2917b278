"""Render tree models for the Markdown Attribution Alignment Engine.

The tree is produced by an external formatter (markdown to HTML-like
nodes) and annotated in place by the TreeAligner.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .enums import NodeType
from .segments import TextSegment

SPAN_TAG = "span"
PROP_IS_ATTRIBUTED = "is_attributed_segment"
PROP_SOURCE_ID = "source_id"
PROP_SOURCE_TITLE = "source_title"


class RenderNode:
    """Base class for the Root, Element and Text node variants."""
    node_type: NodeType


@dataclass
class Text(RenderNode):
    """Literal text leaf."""
    value: str
    node_type: NodeType = field(default=NodeType.TEXT, init=False, repr=False)


@dataclass
class Element(RenderNode):
    """
    Tagged element with a property map and ordered children.

    Tag names follow HTML (``p``, ``strong``, ``code``, ``pre`` ...).
    """
    tag_name: str
    properties: Dict[str, Any] = field(default_factory=dict)
    children: List[RenderNode] = field(default_factory=list)
    node_type: NodeType = field(default=NodeType.ELEMENT, init=False, repr=False)

    def __post_init__(self):
        if self.properties is None:
            self.properties = {}
        if self.children is None:
            self.children = []


@dataclass
class Root(RenderNode):
    """Document root."""
    children: List[RenderNode] = field(default_factory=list)
    node_type: NodeType = field(default=NodeType.ROOT, init=False, repr=False)

    def __post_init__(self):
        if self.children is None:
            self.children = []


def make_annotated_span(
    value: str,
    segment: Optional[TextSegment],
    tag_name: str = SPAN_TAG,
) -> Element:
    """
    Wrap a run of characters in an annotated span.

    Args:
        value: The literal characters of the run.
        segment: Segment the run was aligned to, or None when the stream
            was exhausted.
        tag_name: Tag used for the span element.

    Returns:
        Element with exactly one Text child.
    """
    properties: Dict[str, Any] = {PROP_IS_ATTRIBUTED: True}
    if segment is not None and segment.source_id:
        properties[PROP_SOURCE_ID] = segment.source_id
    if segment is not None and segment.source_title:
        properties[PROP_SOURCE_TITLE] = segment.source_title
    return Element(tag_name=tag_name, properties=properties, children=[Text(value)])


def is_annotated_span(node: RenderNode) -> bool:
    """Check if a node is a span produced by the aligner."""
    return isinstance(node, Element) and bool(node.properties.get(PROP_IS_ATTRIBUTED))


def iter_nodes(node: RenderNode) -> Iterator[RenderNode]:
    """Yield a node and all of its descendants in document order."""
    yield node
    for child in getattr(node, "children", ()):
        yield from iter_nodes(child)


def visible_text(node: RenderNode) -> str:
    """Concatenate every Text leaf under a node."""
    return "".join(n.value for n in iter_nodes(node) if isinstance(n, Text))


def annotated_spans(node: RenderNode) -> List[Element]:
    """Collect every annotated span under a node in document order."""
    return [n for n in iter_nodes(node) if is_annotated_span(n)]
