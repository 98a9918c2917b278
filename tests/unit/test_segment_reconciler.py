"""Unit tests for the Segment Reconciler."""

import pytest

from md_attribution.errors import AlignmentDiagnostics
from md_attribution.models.segments import RawSegment, SegmentStream, TextSegment
from md_attribution.reconciliation import SegmentReconciler, merge_adjacent


def _keys(stream):
    return [(s.text, s.source_id, s.source_title) for s in stream]


class TestReconcileCoverage:
    """Tests for gap filling and full coverage of the answer text."""

    def test_single_segment_in_middle(self):
        """Test that text around a matched segment becomes unattributed gaps."""
        reconciler = SegmentReconciler()
        stream = reconciler.reconcile(
            "Alpha beta gamma",
            [RawSegment("beta", "S1", "Source One")],
        )

        assert _keys(stream) == [
            ("Alpha ", None, None),
            ("beta", "S1", "Source One"),
            (" gamma", None, None),
        ]

    def test_concatenation_equals_full_text(self):
        """Test that the stream always reproduces the answer."""
        text = "The **cap** is 20%.\n\n- item one\n- item two"
        stream = SegmentReconciler().reconcile(
            text,
            [
                {"segment_text": "cap", "source_id": "kb-1", "source_title": "Caps"},
                {"segment_text": "item two", "source_id": "kb-2"},
            ],
        )

        assert stream.text == text

    def test_no_adjacent_segments_share_attribution(self):
        """Test that neighbouring runs always differ in source."""
        text = "one two three four"
        stream = SegmentReconciler().reconcile(
            text,
            [
                RawSegment("one", "A", "Doc A"),
                RawSegment(" two", "A", "Doc A"),
                RawSegment("three", "B", "Doc B"),
                RawSegment(" four", "B", "Doc B"),
            ],
        )

        assert _keys(stream) == [
            ("one two", "A", "Doc A"),
            (" ", None, None),
            ("three four", "B", "Doc B"),
        ]
        for left, right in zip(stream.segments, stream.segments[1:]):
            assert left.attribution_key != right.attribution_key

    def test_empty_text_gives_empty_stream(self):
        """Test that an empty answer produces no segments at all."""
        stream = SegmentReconciler().reconcile("", [RawSegment("anything", "A")])

        assert stream.is_empty
        assert len(stream) == 0

    def test_no_segments_gives_single_unattributed_run(self):
        """Test that an answer with no analyzer records is one gap segment."""
        stream = SegmentReconciler().reconcile("Plain answer.", [])

        assert _keys(stream) == [("Plain answer.", None, None)]
        assert not stream.has_attribution

    def test_none_segments_accepted(self):
        """Test that a missing segment list is treated as empty."""
        stream = SegmentReconciler().reconcile("Plain answer.", None)

        assert stream.text == "Plain answer."


class TestReconcileOrdering:
    """Tests for the forward-only search over analyzer segments."""

    def test_out_of_order_segment_is_dropped(self):
        """Test that a segment found only before the cursor is dropped."""
        diagnostics = AlignmentDiagnostics()
        stream = SegmentReconciler().reconcile(
            "one two three",
            [RawSegment("three", "A"), RawSegment("one", "B")],
            diagnostics,
        )

        assert _keys(stream) == [
            ("one two ", None, None),
            ("three", "A", None),
        ]
        assert len(diagnostics.dropped_segments) == 1
        dropped = diagnostics.dropped_segments[0]
        assert dropped.segment_text == "one"
        assert dropped.source_id == "B"
        assert dropped.search_from == 13

    def test_segment_not_in_text_is_dropped(self):
        """Test that hallucinated segments do not affect the stream."""
        diagnostics = AlignmentDiagnostics()
        stream = SegmentReconciler().reconcile(
            "Real answer text",
            [RawSegment("invented", "X"), RawSegment("answer", "Y")],
            diagnostics,
        )

        assert _keys(stream) == [
            ("Real ", None, None),
            ("answer", "Y", None),
            (" text", None, None),
        ]
        assert [d.segment_text for d in diagnostics.dropped_segments] == ["invented"]

    def test_duplicate_text_uses_first_occurrence_after_cursor(self):
        """Test that repeated phrases are matched in order."""
        stream = SegmentReconciler().reconcile(
            "a b a",
            [RawSegment("a", "X"), RawSegment("a", "Y")],
        )

        assert _keys(stream) == [
            ("a", "X", None),
            (" b ", None, None),
            ("a", "Y", None),
        ]

    def test_segment_at_very_start_and_end(self):
        """Test that no empty gap segments are produced at the edges."""
        stream = SegmentReconciler().reconcile(
            "start end",
            [RawSegment("start", "A"), RawSegment("end", "B")],
        )

        assert _keys(stream) == [
            ("start", "A", None),
            (" ", None, None),
            ("end", "B", None),
        ]


class TestSegmentNormalization:
    """Tests for filtering of untrusted analyzer records."""

    def test_blank_source_fields_become_unattributed(self):
        """Test that whitespace-only ids and titles are treated as absent."""
        stream = SegmentReconciler().reconcile(
            "x y",
            [{"segment_text": "x", "source_id": "  ", "source_title": ""}],
        )

        assert _keys(stream) == [("x y", None, None)]
        assert not stream.has_attribution

    def test_source_fields_are_trimmed(self):
        """Test that surrounding whitespace is stripped from source fields."""
        segments = SegmentReconciler().normalize_segments(
            [{"segment_text": "x", "source_id": " kb-7 ", "source_title": " Title "}]
        )

        assert segments == [TextSegment("x", "kb-7", "Title")]

    def test_malformed_records_are_skipped(self):
        """Test that records without usable text are ignored."""
        segments = SegmentReconciler().normalize_segments(
            [
                {"segment_text": ""},
                {"segment_text": 42, "source_id": "A"},
                "not a record",
                None,
                {"text": "kept", "source_id": "B"},
            ]
        )

        assert segments == [TextSegment("kept", "B", None)]

    def test_non_string_source_id_is_dropped(self):
        """Test that a numeric source id does not count as attribution."""
        segments = SegmentReconciler().normalize_segments(
            [{"segment_text": "x", "source_id": 12}]
        )

        assert segments[0].source_id is None


class TestReconcileIdempotence:
    """Tests for feeding a stream back through the reconciler."""

    @pytest.mark.parametrize(
        "text,raw",
        [
            ("Alpha beta gamma", [RawSegment("beta", "S1", "One")]),
            ("a b a", [RawSegment("a", "X"), RawSegment("a", "Y")]),
            ("no attribution here", []),
        ],
    )
    def test_reconcile_is_idempotent(self, text, raw):
        """Test that reconciling a stream's own segments returns the same stream."""
        reconciler = SegmentReconciler()
        first = reconciler.reconcile(text, raw)
        second = reconciler.reconcile(text, first.segments)

        assert second == first


class TestMergeAdjacent:
    """Tests for merging neighbouring runs."""

    def test_merges_same_source_and_drops_empty(self):
        """Test merging of equal keys and removal of empty segments."""
        merged = merge_adjacent(
            [
                TextSegment("a", "S", "T"),
                TextSegment("", None, None),
                TextSegment("b", "S", "T"),
                TextSegment("c"),
                TextSegment("d"),
            ]
        )

        assert merged == [TextSegment("ab", "S", "T"), TextSegment("cd")]

    def test_same_id_different_title_not_merged(self):
        """Test that the title is part of the merge key."""
        merged = merge_adjacent([TextSegment("a", "S", "T1"), TextSegment("b", "S", "T2")])

        assert len(merged) == 2

    def test_stream_equality(self):
        """Test SegmentStream value equality."""
        assert SegmentStream([TextSegment("a")]) == SegmentStream([TextSegment("a")])
        assert SegmentStream([TextSegment("a")]) != SegmentStream([TextSegment("a", "S")])

    def test_title_only_segment_is_attributed(self):
        """Test that a title alone marks a segment and its stream as attributed."""
        titled = TextSegment("a", None, "Loose title")

        assert titled.is_attributed
        assert not TextSegment("a").is_attributed
        assert SegmentStream([TextSegment("b"), titled]).has_attribution
        assert not SegmentStream([TextSegment("b")]).has_attribution
