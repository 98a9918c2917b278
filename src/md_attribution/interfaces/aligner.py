"""Tree aligner interface for the Markdown Attribution Alignment Engine."""

from abc import ABC, abstractmethod
from typing import Optional

from ..errors import AlignmentDiagnostics
from ..models.render import RenderNode
from ..models.segments import SegmentStream


class ITreeAligner(ABC):
    """
    Abstract interface for render tree alignment.

    Implementations annotate the text leaves of a rendered answer with the
    attribution of the stream characters they were rendered from.
    """

    @abstractmethod
    def align(
        self,
        tree: RenderNode,
        stream: SegmentStream,
        diagnostics: Optional[AlignmentDiagnostics] = None,
    ) -> RenderNode:
        """
        Annotate a render tree in place.

        Args:
            tree: Root of the rendered answer.
            stream: Reconciled segment stream of the same answer.
            diagnostics: Optional collector for desynchronized leaves.

        Returns:
            The same tree, with text leaves replaced by annotated spans.
        """
        pass
