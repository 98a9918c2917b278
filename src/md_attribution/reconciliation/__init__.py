"""Reconciliation of analyzer segments into gapless segment streams."""

from .payload import extract_raw_segments, parse_json_from_text, segments_from_analyzer_text
from .segment_reconciler import SegmentReconciler, merge_adjacent

__all__ = [
    "SegmentReconciler",
    "merge_adjacent",
    "extract_raw_segments",
    "parse_json_from_text",
    "segments_from_analyzer_text",
]
