"""HTML rendering of annotated answers."""

import os
import re
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models.render import (
    PROP_IS_ATTRIBUTED,
    PROP_SOURCE_ID,
    PROP_SOURCE_TITLE,
    Element,
    RenderNode,
    Root,
    Text,
    is_annotated_span,
)
from .source_actions import resolve_open_request

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})
_SAFE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9:_-]*$")
_RESERVED_PROPS = {PROP_IS_ATTRIBUTED, PROP_SOURCE_ID, PROP_SOURCE_TITLE}


class AnnotatedViewRenderer:
    """
    Renders annotated answer trees to HTML.

    Uses a Jinja2 template; annotated spans become clickable regions
    carrying ``data-attrib-seg``, ``data-source-id`` and
    ``data-source-title`` attributes for the chat UI.
    """

    def __init__(self, template_dir: Optional[str] = None):
        """
        Initialize the view renderer.

        Args:
            template_dir: Directory containing Jinja2 templates.
                         If not provided, uses the package templates.
        """
        if template_dir is None:
            template_dir = os.path.join(
                os.path.dirname(os.path.dirname(__file__)),
                "templates"
            )

        self.template_dir = template_dir
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(['html', 'xml'])
        )

    def render(self, tree: RenderNode, container_class: str = "attributed-answer") -> str:
        """
        Render an annotated tree.

        Args:
            tree: Tree previously passed through the TreeAligner.
            container_class: CSS class of the wrapping element.

        Returns:
            HTML string.
        """
        template = self.env.get_template('annotated_answer.html')
        return template.render(
            nodes=self._prepare_children(tree),
            container_class=container_class,
        )

    def _prepare_children(self, node: RenderNode) -> List[Dict]:
        if isinstance(node, Root):
            return [self._prepare_node(c) for c in node.children]
        return [self._prepare_node(node)]

    def _prepare_node(self, node: RenderNode) -> Dict:
        """Convert a render node to template-friendly format."""
        if isinstance(node, Text):
            return {'kind': 'text', 'value': node.value}

        if isinstance(node, Root):
            # Nested roots render as their children only.
            return {
                'kind': 'fragment',
                'children': [self._prepare_node(c) for c in node.children],
            }

        tag = node.tag_name.lower() if _SAFE_NAME.match(node.tag_name or "") else "span"
        if is_annotated_span(node):
            attrs = self._span_attributes(node)
        else:
            attrs = self._element_attributes(node.properties)
        return {
            'kind': 'element',
            'tag': tag,
            'attrs': attrs,
            'void': tag in VOID_TAGS,
            'children': [self._prepare_node(c) for c in node.children],
        }

    def _span_attributes(self, span: Element) -> List[Tuple[str, str]]:
        attrs: List[Tuple[str, str]] = [('data-attrib-seg', '1')]
        source_id = span.properties.get(PROP_SOURCE_ID)
        source_title = span.properties.get(PROP_SOURCE_TITLE)
        if source_id:
            attrs.append(('data-source-id', str(source_id)))
        if source_title:
            attrs.append(('data-source-title', str(source_title)))

        request = resolve_open_request(span)
        if request is not None:
            attrs.extend([
                ('class', 'attrib-segment'),
                ('role', 'button'),
                ('tabindex', '0'),
                ('data-open-mode', request.mode.value),
                ('title', request.label),
            ])
        return attrs

    def _element_attributes(self, properties: Dict[str, Any]) -> List[Tuple[str, str]]:
        attrs: List[Tuple[str, str]] = []
        for name, value in properties.items():
            if name in _RESERVED_PROPS or value is None or value is False:
                continue
            if name == 'className':
                name = 'class'
            if not _SAFE_NAME.match(name):
                continue
            if value is True:
                value = ''
            elif isinstance(value, (list, tuple)):
                value = ' '.join(str(v) for v in value)
            attrs.append((name, str(value)))
        return attrs
