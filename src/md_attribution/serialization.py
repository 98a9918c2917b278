"""Serialization and deserialization of render trees and segment streams.

Trees use the hast-like JSON shape produced by markdown-to-HTML renderers:
``{"type": "element", "tagName": "p", "properties": {}, "children": [...]}``
and ``{"type": "text", "value": "..."}`` under a ``{"type": "root"}`` node.
"""

import json
from typing import Any, Dict

from .errors import TreeFormatError
from .models.enums import NodeType
from .models.render import Element, RenderNode, Root, Text
from .models.segments import SegmentStream, TextSegment


class TreeSerializer:
    """
    Handles conversion of render trees to and from JSON-compatible dicts.

    Ensures round-trip consistency: from_dict(to_dict(tree)) == tree.
    """

    @staticmethod
    def serialize(node: RenderNode) -> str:
        """
        Serialize a render tree to a JSON string.

        Args:
            node: Root of the tree.

        Returns:
            JSON string representation of the tree.
        """
        return json.dumps(TreeSerializer.to_dict(node), ensure_ascii=False)

    @staticmethod
    def deserialize(json_str: str) -> RenderNode:
        """
        Deserialize a JSON string to a render tree.

        Raises:
            TreeFormatError: If the JSON is invalid or malformed.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise TreeFormatError(f"Invalid JSON: {str(e)}")

        return TreeSerializer.from_dict(data)

    @staticmethod
    def to_dict(node: RenderNode) -> Dict[str, Any]:
        """Convert a RenderNode (and its subtree) to a dictionary."""
        if isinstance(node, Text):
            return {"type": NodeType.TEXT.value, "value": node.value}
        if isinstance(node, Element):
            return {
                "type": NodeType.ELEMENT.value,
                "tagName": node.tag_name,
                "properties": dict(node.properties),
                "children": [TreeSerializer.to_dict(c) for c in node.children],
            }
        if isinstance(node, Root):
            return {
                "type": NodeType.ROOT.value,
                "children": [TreeSerializer.to_dict(c) for c in node.children],
            }
        raise TreeFormatError(f"Unsupported node: {type(node).__name__}")

    @staticmethod
    def from_dict(data: Any, path: str = "root") -> RenderNode:
        """
        Convert a dictionary to a RenderNode.

        Args:
            data: hast-like node dictionary.
            path: Location used in error messages.

        Raises:
            TreeFormatError: If a node is malformed.
        """
        if not isinstance(data, dict):
            raise TreeFormatError("Expected dictionary for render node", path=path)

        node_type = data.get("type")
        if node_type == NodeType.TEXT.value:
            value = data.get("value", "")
            if not isinstance(value, str):
                raise TreeFormatError("Text node 'value' must be a string", path=path)
            return Text(value)

        children_data = data.get("children", [])
        if not isinstance(children_data, list):
            raise TreeFormatError("'children' must be a list", path=path)
        children = [
            TreeSerializer.from_dict(child, f"{path}.children[{i}]")
            for i, child in enumerate(children_data)
        ]

        if node_type == NodeType.ELEMENT.value:
            tag_name = data.get("tagName")
            if not isinstance(tag_name, str) or not tag_name:
                raise TreeFormatError("Element node requires 'tagName'", path=path)
            properties = data.get("properties") or {}
            if not isinstance(properties, dict):
                raise TreeFormatError("'properties' must be an object", path=path)
            return Element(tag_name=tag_name, properties=dict(properties), children=children)

        if node_type == NodeType.ROOT.value:
            return Root(children=children)

        raise TreeFormatError(f"Unknown node type: {node_type!r}", path=path)


class StreamSerializer:
    """Handles conversion of SegmentStreams to and from lists of dicts."""

    @staticmethod
    def to_list(stream: SegmentStream) -> list:
        return [
            {
                "text": segment.text,
                "source_id": segment.source_id,
                "source_title": segment.source_title,
            }
            for segment in stream
        ]

    @staticmethod
    def from_list(data: Any) -> SegmentStream:
        """
        Rebuild a stream from ``to_list`` output.

        Raises:
            ValueError: If an entry is malformed.
        """
        if not isinstance(data, list):
            raise ValueError("Expected list for SegmentStream")
        segments = []
        for i, entry in enumerate(data):
            if not isinstance(entry, dict) or not isinstance(entry.get("text"), str):
                raise ValueError(f"Missing required field 'text' in segment {i}")
            segments.append(
                TextSegment(
                    text=entry["text"],
                    source_id=entry.get("source_id"),
                    source_title=entry.get("source_title"),
                )
            )
        return SegmentStream(segments)


def serialize_tree(node: RenderNode) -> str:
    """Convenience function to serialize a render tree."""
    return TreeSerializer.serialize(node)


def deserialize_tree(json_str: str) -> RenderNode:
    """Convenience function to deserialize a render tree."""
    return TreeSerializer.deserialize(json_str)
