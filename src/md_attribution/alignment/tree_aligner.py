"""Tree Aligner implementation for the Markdown Attribution Alignment Engine.

Walks a rendered answer tree in document order and annotates every visible
character with the attribution of the stream character it was rendered
from, skipping markdown syntax the renderer consumed.
"""

import logging
from typing import List, Optional

from ..config.models import AlignmentConfig
from ..errors import AlignmentDiagnostics, DesyncedLeaf
from ..interfaces.aligner import ITreeAligner
from ..models.render import Element, RenderNode, Text
from ..models.segments import SegmentStream
from .cursor import SegmentCursor
from .markdown_skipper import MarkdownSkipper
from .span_splitter import SpanSplitter

logger = logging.getLogger(__name__)


class _AlignmentPass:
    """State of one walk: a fresh cursor, the anchor flag and the desync latch."""

    def __init__(
        self,
        stream: SegmentStream,
        splitter: SpanSplitter,
        config: AlignmentConfig,
        diagnostics: Optional[AlignmentDiagnostics],
    ):
        self.cursor = SegmentCursor(stream)
        self.splitter = splitter
        self.config = config
        self.diagnostics = diagnostics
        self.desynced = False
        self.anchored = False

    def transform(self, node: RenderNode, inside_verbatim: bool) -> None:
        children = getattr(node, "children", None)
        if not children:
            return

        next_children: List[RenderNode] = []
        for child in children:
            if child is None:
                continue
            if isinstance(child, Text):
                next_children.extend(self._transform_text(child, inside_verbatim))
                continue
            if isinstance(child, Element):
                self.transform(
                    child,
                    inside_verbatim or self.config.is_verbatim_tag(child.tag_name),
                )
            else:
                self.transform(child, inside_verbatim)
            next_children.append(child)

        children[:] = next_children

    def _transform_text(self, leaf: Text, inside_verbatim: bool) -> List[RenderNode]:
        # Once the cursor is lost the rest of the answer stays unattributed.
        if self.desynced or not leaf.value:
            return [leaf]

        if inside_verbatim:
            outcome = self.splitter.consume(leaf.value, self.cursor)
            nodes: List[RenderNode] = [leaf]
        else:
            outcome = self.splitter.split(
                leaf.value, self.cursor, hold_leading_whitespace=not self.anchored
            )
            nodes = outcome.nodes

        if outcome.matched:
            self.anchored = True

        if outcome.desynced:
            self.desynced = True
            logger.debug(
                f"Attribution desynced at char {outcome.failed_at} of leaf "
                f"{leaf.value[:40]!r} (stream position {self.cursor.position})"
            )
            if self.diagnostics is not None:
                self.diagnostics.add_desynced_leaf(
                    DesyncedLeaf(
                        leaf_text=leaf.value,
                        failed_at=outcome.failed_at,
                        verbatim=inside_verbatim,
                    )
                )
        return nodes


class TreeAligner(ITreeAligner):
    """
    Aligner from a reconciled SegmentStream onto a render tree.

    Text leaves outside code regions become annotated spans; text under
    ``code``/``pre`` is consumed silently so the cursor stays in step.
    Desynchronization never raises: the affected leaf tail and every later
    leaf are left unattributed.
    """

    def __init__(self, config: Optional[AlignmentConfig] = None):
        """
        Initialize the tree aligner.

        Args:
            config: Alignment configuration; defaults are used if omitted.
        """
        self._config = config or AlignmentConfig()
        self._splitter = SpanSplitter(
            MarkdownSkipper(max_skip_steps=self._config.max_skip_steps),
            span_tag=self._config.span_tag,
        )

    @property
    def config(self) -> AlignmentConfig:
        return self._config

    def align(
        self,
        tree: RenderNode,
        stream: SegmentStream,
        diagnostics: Optional[AlignmentDiagnostics] = None,
    ) -> RenderNode:
        """
        Annotate a render tree in place.

        Args:
            tree: Root (or Element) of the rendered answer.
            stream: Reconciled segment stream of the same answer.
            diagnostics: Optional collector for desynchronized leaves.

        Returns:
            The same tree object. It is returned untouched when the stream
            is empty or carries no attribution at all.
        """
        if tree is None or stream.is_empty or not stream.has_attribution:
            return tree

        alignment_pass = _AlignmentPass(stream, self._splitter, self._config, diagnostics)
        inside_verbatim = isinstance(tree, Element) and self._config.is_verbatim_tag(tree.tag_name)
        alignment_pass.transform(tree, inside_verbatim)
        return tree
