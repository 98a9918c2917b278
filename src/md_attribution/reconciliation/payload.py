"""Parsing of knowledge-base analyzer responses.

The analyzer is a chat agent asked to answer with JSON of the form
``{"segments": [{"segment_text": ..., "source_id": ..., "source_title": ...}]}``.
Its reply text may be wrapped in a markdown code fence and is otherwise
untrusted.
"""

import json
import logging
import re
from typing import Any, List, Mapping, Optional

from ..errors import AlignmentDiagnostics, AnalyzerPayloadError, NoAttributionSegmentsError
from ..interfaces.reconciler import ISegmentReconciler
from ..models.segments import RawSegment, SegmentStream
from .segment_reconciler import SegmentReconciler

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)
_PREVIEW_CHARS = 200


def parse_json_from_text(raw: Optional[str]) -> Optional[Any]:
    """
    Parse JSON out of an analyzer reply.

    A single code fence around the whole reply (```` ``` ```` or
    ```` ```json ````) is unwrapped first.

    Returns:
        The decoded value, or None for blank or invalid input.
    """
    trimmed = str(raw if raw is not None else "").strip()
    if not trimmed:
        return None

    fenced = _CODE_FENCE.fullmatch(trimmed)
    candidate = (fenced.group(1) if fenced else trimmed).strip()
    if not candidate:
        return None

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        return None


def extract_raw_segments(payload: Any) -> List[RawSegment]:
    """
    Read the ``segments`` list of a decoded analyzer payload.

    Non-object entries are skipped. ``segment_text`` must be a string
    (anything else becomes empty); ``source_id`` and ``source_title`` are
    kept only when they are strings.
    """
    if not isinstance(payload, Mapping):
        return []
    entries = payload.get("segments")
    if not isinstance(entries, list):
        return []

    segments: List[RawSegment] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        text = entry.get("segment_text")
        source_id = entry.get("source_id")
        source_title = entry.get("source_title")
        segments.append(
            RawSegment(
                segment_text=text if isinstance(text, str) else "",
                source_id=source_id if isinstance(source_id, str) else None,
                source_title=source_title if isinstance(source_title, str) else None,
            )
        )
    return segments


def segments_from_analyzer_text(
    full_text: str,
    raw_text: str,
    reconciler: Optional[ISegmentReconciler] = None,
    diagnostics: Optional[AlignmentDiagnostics] = None,
) -> SegmentStream:
    """
    Turn an analyzer reply into a reconciled SegmentStream.

    Args:
        full_text: The answer the analyzer was asked about.
        raw_text: The analyzer's reply text.
        reconciler: Reconciler to use; a SegmentReconciler by default.
        diagnostics: Optional collector for dropped segments.

    Returns:
        Non-empty SegmentStream covering full_text.

    Raises:
        AnalyzerPayloadError: If the reply is not a JSON object.
        NoAttributionSegmentsError: If nothing usable came out of it.
    """
    parsed = parse_json_from_text(raw_text)
    if not isinstance(parsed, Mapping):
        preview = str(raw_text or "")[:_PREVIEW_CHARS]
        logger.warning(f"KB analyzer did not return valid JSON: {preview!r}")
        raise AnalyzerPayloadError(
            "KB analyzer did not return valid JSON.",
            details={"raw_preview": preview},
        )

    raw_segments = extract_raw_segments(parsed)
    reconciler = reconciler or SegmentReconciler()
    stream = reconciler.reconcile(full_text, raw_segments, diagnostics)
    if stream.is_empty:
        raise NoAttributionSegmentsError(
            "KB analyzer returned no segments to attribute.",
            details={"raw_segment_count": len(raw_segments)},
        )
    return stream
