"""End-to-end attribution pipeline for the Markdown Attribution Alignment Engine.

Wires the Segment Reconciler and the Tree Aligner together for one answer:
raw answer text + analyzer segments -> SegmentStream -> annotated tree.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .alignment.tree_aligner import TreeAligner
from .config.models import AlignmentConfig
from .errors import AlignmentDiagnostics, AttributionError
from .interfaces.aligner import ITreeAligner
from .interfaces.reconciler import ISegmentReconciler
from .models.render import PROP_SOURCE_ID, RenderNode, annotated_spans
from .models.segments import SegmentStream
from .performance import PerformanceMonitor
from .reconciliation.payload import segments_from_analyzer_text
from .reconciliation.segment_reconciler import SegmentReconciler

logger = logging.getLogger(__name__)


@dataclass
class AttributionResult:
    """Result of attributing one answer."""

    success: bool
    tree: Optional[RenderNode] = None
    stream: SegmentStream = field(default_factory=SegmentStream.empty)
    diagnostics: AlignmentDiagnostics = field(default_factory=AlignmentDiagnostics)
    span_count: int = 0
    attributed_span_count: int = 0
    short_circuited: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    processing_time: float = 0.0

    def to_summary(self) -> Dict[str, Any]:
        """Summarize the result for logging or API responses."""
        return {
            "success": self.success,
            "segment_count": len(self.stream),
            "span_count": self.span_count,
            "attributed_span_count": self.attributed_span_count,
            "short_circuited": self.short_circuited,
            "processing_time": self.processing_time,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "diagnostics": self.diagnostics.get_summary(),
        }


@dataclass
class PipelineStats:
    """Statistics about pipeline execution."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    short_circuited_executions: int = 0
    desynced_executions: int = 0
    average_processing_time: float = 0.0
    total_processing_time: float = 0.0


class AttributionPipeline:
    """
    Attribution pipeline for rendered answers.

    Each run builds a fresh SegmentStream and cursor, so one pipeline can
    serve many answers; the only state kept across runs is statistics.
    """

    def __init__(
        self,
        config: Optional[AlignmentConfig] = None,
        reconciler: Optional[ISegmentReconciler] = None,
        aligner: Optional[ITreeAligner] = None,
        performance_monitor: Optional[PerformanceMonitor] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Alignment configuration (defaults if omitted).
            reconciler: Optional reconciler (created if not provided).
            aligner: Optional tree aligner (created if not provided).
            performance_monitor: Optional monitor for phase timings.
        """
        self.config = config or AlignmentConfig()
        self._reconciler = reconciler or SegmentReconciler()
        self._aligner = aligner or TreeAligner(self.config)
        self.performance_monitor = performance_monitor or PerformanceMonitor()
        self.stats = PipelineStats()

    def reconcile(
        self,
        full_text: str,
        raw_segments: Iterable[Any],
        diagnostics: Optional[AlignmentDiagnostics] = None,
    ) -> SegmentStream:
        """Run only the reconciliation phase."""
        metric = self.performance_monitor.start_operation("reconcile")
        stream = self._reconciler.reconcile(full_text, raw_segments, diagnostics)
        self.performance_monitor.end_operation(metric)
        return stream

    def run(
        self,
        full_text: str,
        raw_segments: Iterable[Any],
        tree: Optional[RenderNode],
    ) -> AttributionResult:
        """
        Attribute one answer.

        Args:
            full_text: The answer text.
            raw_segments: Analyzer records in the order they were returned.
            tree: Render tree of the same answer, annotated in place.

        Returns:
            AttributionResult with the annotated tree and diagnostics.
        """
        start_time = time.perf_counter()
        result = AttributionResult(success=False, tree=tree)
        try:
            stream = self.reconcile(full_text, raw_segments, result.diagnostics)
            self._align(result, stream)
        finally:
            result.processing_time = time.perf_counter() - start_time
            self._update_stats(result)
        return result

    def run_from_analyzer_text(
        self,
        full_text: str,
        analyzer_text: str,
        tree: Optional[RenderNode],
    ) -> AttributionResult:
        """
        Attribute one answer from the analyzer's raw reply text.

        A reply that cannot be parsed, or that yields nothing to attribute,
        produces an unsuccessful result with the tree left untouched.
        """
        start_time = time.perf_counter()
        result = AttributionResult(success=False, tree=tree)
        try:
            metric = self.performance_monitor.start_operation("reconcile")
            try:
                stream = segments_from_analyzer_text(
                    full_text, analyzer_text, self._reconciler, result.diagnostics
                )
            except AttributionError as e:
                self.performance_monitor.end_operation(metric, success=False, error=e.message)
                raise
            self.performance_monitor.end_operation(metric)
            self._align(result, stream)
        except AttributionError as e:
            error_msg = f"Analyzer payload rejected: {e.message}"
            result.errors.append(error_msg)
            logger.warning(error_msg)
        finally:
            result.processing_time = time.perf_counter() - start_time
            self._update_stats(result)
        return result

    def _align(self, result: AttributionResult, stream: SegmentStream) -> None:
        """Run the alignment phase and fill in the result."""
        result.stream = stream
        dropped = len(result.diagnostics.dropped_segments)
        if dropped:
            result.warnings.append(
                f"{dropped} analyzer segment(s) did not match the answer and were dropped"
            )
        if result.tree is None or not stream.has_attribution:
            result.short_circuited = True
            result.success = True
            logger.debug("Nothing to attribute; render tree left unchanged")
            return

        metric = self.performance_monitor.start_operation("align", segments=len(stream))
        self._aligner.align(result.tree, stream, result.diagnostics)
        self.performance_monitor.end_operation(metric)

        spans = annotated_spans(result.tree)
        result.span_count = len(spans)
        result.attributed_span_count = sum(1 for s in spans if s.properties.get(PROP_SOURCE_ID))
        logger.info(
            f"Attributed answer: {result.attributed_span_count} sourced span(s) "
            f"of {result.span_count} across {len(stream)} segment(s)"
        )
        if result.diagnostics.has_desync():
            result.warnings.append(
                "Rendered text diverged from the answer; the remainder is unattributed"
            )
        result.success = True

    def _update_stats(self, result: AttributionResult) -> None:
        """Update pipeline statistics."""
        self.stats.total_executions += 1

        if result.success:
            self.stats.successful_executions += 1
        else:
            self.stats.failed_executions += 1
        if result.short_circuited:
            self.stats.short_circuited_executions += 1
        if result.diagnostics.has_desync():
            self.stats.desynced_executions += 1

        self.stats.total_processing_time += result.processing_time
        self.stats.average_processing_time = (
            self.stats.total_processing_time / self.stats.total_executions
        )

    def get_stats(self) -> PipelineStats:
        """Get pipeline execution statistics."""
        return self.stats

    def get_performance_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get timing statistics for the reconcile and align phases."""
        return self.performance_monitor.get_all_stats()
