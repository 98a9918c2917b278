"""Abstract interfaces for the Markdown Attribution Alignment Engine."""

from .reconciler import ISegmentReconciler
from .aligner import ITreeAligner

__all__ = [
    "ISegmentReconciler",
    "ITreeAligner",
]
