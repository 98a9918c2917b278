"""Exceptions and diagnostics for the Markdown Attribution Alignment Engine.

The core reconcile/align pass never raises for bad analyzer output or
formatting noise; it records what it had to give up on in an
AlignmentDiagnostics instance. The exceptions below belong to the layers
around it (payload parsing, tree deserialization, configuration).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class AttributionError(Exception):
    """
    Base exception for attribution errors.

    Attributes:
        message: Human-readable error description.
        details: Additional error details.
    """
    message: str
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(str(self))

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class AnalyzerPayloadError(AttributionError):
    """
    Raised when the analyzer response is not a JSON object.

    The raw text is kept in ``details["raw_preview"]`` (truncated).
    """


@dataclass
class NoAttributionSegmentsError(AttributionError):
    """Raised when an analyzer payload yields no usable segments."""


@dataclass
class TreeFormatError(AttributionError):
    """
    Raised when a serialized render tree cannot be decoded.

    ``path`` points at the offending node, e.g. ``root.children[2]``.
    """
    path: Optional[str] = None

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} | Path: {self.path}"
        return self.message


@dataclass
class DroppedSegment:
    """An analyzer segment whose text was not found in the answer."""
    segment_text: str
    source_id: Optional[str]
    search_from: int


@dataclass
class DesyncedLeaf:
    """A text leaf whose tail could not be aligned with the stream."""
    leaf_text: str
    failed_at: int
    verbatim: bool = False

    @property
    def unattributed_tail(self) -> str:
        return self.leaf_text[self.failed_at:]


class AlignmentDiagnostics:
    """
    Collects non-fatal conditions met during one attribution pass.

    Supports graceful degradation: the pass keeps going and the caller
    decides whether the loss of attribution fidelity matters.
    """

    def __init__(self):
        self.dropped_segments: List[DroppedSegment] = []
        self.desynced_leaves: List[DesyncedLeaf] = []
        self.warnings: List[str] = []

    def add_dropped_segment(self, segment: DroppedSegment) -> None:
        """Record an analyzer segment that did not match the answer."""
        self.dropped_segments.append(segment)

    def add_desynced_leaf(self, leaf: DesyncedLeaf) -> None:
        """Record a text leaf that fell back to unattributed rendering."""
        self.desynced_leaves.append(leaf)

    def add_warning(self, message: str, location: Optional[str] = None) -> None:
        """Add a warning message."""
        warning = f"{message}"
        if location:
            warning += f" (at {location})"
        self.warnings.append(warning)

    def has_desync(self) -> bool:
        return len(self.desynced_leaves) > 0

    def is_clean(self) -> bool:
        """Check if the pass completed without giving anything up."""
        return not (self.dropped_segments or self.desynced_leaves or self.warnings)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all recorded conditions."""
        return {
            "dropped_segment_count": len(self.dropped_segments),
            "desynced_leaf_count": len(self.desynced_leaves),
            "warning_count": len(self.warnings),
            "dropped_segments": [
                {
                    "segment_text": d.segment_text,
                    "source_id": d.source_id,
                    "search_from": d.search_from,
                }
                for d in self.dropped_segments
            ],
            "desynced_leaves": [
                {
                    "failed_at": d.failed_at,
                    "unattributed_tail": d.unattributed_tail,
                    "verbatim": d.verbatim,
                }
                for d in self.desynced_leaves
            ],
            "warnings": list(self.warnings),
        }
