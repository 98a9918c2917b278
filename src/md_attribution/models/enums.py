"""Enumerations for the Markdown Attribution Alignment Engine."""

from enum import Enum


class NodeType(Enum):
    """Variants of nodes in a rendered answer tree."""
    ROOT = "root"
    ELEMENT = "element"
    TEXT = "text"


class SourceOpenMode(Enum):
    """What clicking an annotated span asks the knowledge-base UI to do."""
    EDIT = "edit"
    CREATE = "create"
