"""Segment reconciler interface for the Markdown Attribution Alignment Engine."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from ..errors import AlignmentDiagnostics
from ..models.segments import SegmentStream


class ISegmentReconciler(ABC):
    """
    Abstract interface for segment reconciliation.

    Implementations turn sparse analyzer output into a gapless SegmentStream
    covering every character of the answer text.
    """

    @abstractmethod
    def reconcile(
        self,
        full_text: str,
        raw_segments: Iterable[Any],
        diagnostics: Optional[AlignmentDiagnostics] = None,
    ) -> SegmentStream:
        """
        Build a SegmentStream for an answer.

        Args:
            full_text: The answer text exactly as the model produced it.
            raw_segments: Analyzer records in the order they were returned.
            diagnostics: Optional collector for dropped segments.

        Returns:
            SegmentStream whose concatenated text equals full_text.
        """
        pass
