"""Click actions for annotated spans.

An attributed span with a source opens that knowledge-base article for
editing; an attributed span without one offers to create a new article
seeded with the span text.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models.enums import SourceOpenMode
from ..models.render import (
    PROP_IS_ATTRIBUTED,
    PROP_SOURCE_ID,
    PROP_SOURCE_TITLE,
    Element,
    RenderNode,
    visible_text,
)

CREATE_LABEL = "Add New Article"


@dataclass(frozen=True)
class SourceOpenRequest:
    """
    Request for the knowledge-base UI raised by clicking a span.

    EDIT requests carry ``source_id`` (and maybe ``source_title``); CREATE
    requests carry ``seed_text``.
    """
    mode: SourceOpenMode
    source_id: Optional[str] = None
    source_title: Optional[str] = None
    seed_text: Optional[str] = None

    @property
    def label(self) -> str:
        """Tooltip text shown on hover."""
        if self.mode == SourceOpenMode.EDIT:
            return f"Source: {self.source_title or self.source_id or ''}"
        return CREATE_LABEL

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"mode": self.mode.value}
        if self.mode == SourceOpenMode.EDIT:
            data["source_id"] = self.source_id
            data["source_title"] = self.source_title
        else:
            data["seed_text"] = self.seed_text
        return data


def _clean(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def resolve_open_request(node: RenderNode) -> Optional[SourceOpenRequest]:
    """
    Decide what clicking a span should do.

    Args:
        node: A node from an annotated tree, normally an annotated span.

    Returns:
        SourceOpenRequest, or None when the span is not actionable (not an
        element, or an unattributed run of blank text).
    """
    if not isinstance(node, Element):
        return None

    source_id = _clean(node.properties.get(PROP_SOURCE_ID))
    source_title = _clean(node.properties.get(PROP_SOURCE_TITLE))
    if source_id:
        return SourceOpenRequest(
            mode=SourceOpenMode.EDIT,
            source_id=source_id,
            source_title=source_title,
        )

    seed_text = visible_text(node)
    if node.properties.get(PROP_IS_ATTRIBUTED) and seed_text.strip():
        return SourceOpenRequest(mode=SourceOpenMode.CREATE, seed_text=seed_text)
    return None
