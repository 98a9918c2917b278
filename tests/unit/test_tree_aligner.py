"""Unit tests for the Tree Aligner."""

import copy

from md_attribution.alignment import TreeAligner
from md_attribution.config import AlignmentConfig
from md_attribution.errors import AlignmentDiagnostics
from md_attribution.models.render import (
    PROP_IS_ATTRIBUTED,
    PROP_SOURCE_ID,
    PROP_SOURCE_TITLE,
    Element,
    Root,
    Text,
    annotated_spans,
    is_annotated_span,
    visible_text,
)
from md_attribution.models.segments import SegmentStream, TextSegment
from md_attribution.reconciliation import SegmentReconciler


def _stream(text, *segments):
    return SegmentReconciler().reconcile(text, list(segments))


def _seg(text, source_id=None, source_title=None):
    return {"segment_text": text, "source_id": source_id, "source_title": source_title}


def _span_summary(node):
    return [
        (visible_text(s), s.properties.get(PROP_SOURCE_ID))
        for s in annotated_spans(node)
    ]


class TestInlineFormatting:
    """Tests for alignment under inline markdown."""

    def test_bold_text_is_attributed(self):
        """Test that a bold segment is aligned past the asterisks."""
        stream = _stream("Hello **world** foo", _seg("world", "A", "Doc A"))
        strong = Element("strong", children=[Text("world")])
        paragraph = Element("p", children=[Text("Hello "), strong, Text(" foo")])
        tree = Root(children=[paragraph])

        TreeAligner().align(tree, stream)

        assert _span_summary(tree) == [("Hello ", None), ("world", "A"), (" foo", None)]
        span = strong.children[0]
        assert is_annotated_span(span)
        assert span.tag_name == "span"
        assert span.properties == {
            PROP_IS_ATTRIBUTED: True,
            PROP_SOURCE_ID: "A",
            PROP_SOURCE_TITLE: "Doc A",
        }
        assert span.children == [Text("world")]

    def test_unattributed_span_has_no_source_properties(self):
        """Test that gap spans only carry the attributed flag."""
        stream = _stream("Hello **world**", _seg("world", "A"))
        tree = Root(children=[Element("p", children=[Text("Hello "), Element("strong", children=[Text("world")])])])

        TreeAligner().align(tree, stream)

        first = annotated_spans(tree)[0]
        assert first.properties == {PROP_IS_ATTRIBUTED: True}

    def test_link_text_attributed_and_target_skipped(self):
        """Test that link URLs in the stream do not break alignment."""
        stream = _stream(
            "Read [the docs](https://x.io) now",
            _seg("the docs", "L"),
            _seg("now", "N"),
        )
        link = Element("a", {"href": "https://x.io"}, [Text("the docs")])
        tree = Root(children=[Element("p", children=[Text("Read "), link, Text(" now")])])

        diagnostics = AlignmentDiagnostics()
        TreeAligner().align(tree, stream, diagnostics)

        assert _span_summary(link) == [("the docs", "L")]
        assert _span_summary(tree)[-1] == ("now", "N")
        assert diagnostics.is_clean()

    def test_one_leaf_split_across_sources(self):
        """Test that a single text leaf can yield several spans."""
        stream = _stream("first second", _seg("first", "A"), _seg("second", "B"))
        paragraph = Element("p", children=[Text("first second")])
        tree = Root(children=[paragraph])

        TreeAligner().align(tree, stream)

        assert _span_summary(paragraph) == [("first", "A"), (" ", None), ("second", "B")]
        assert all(is_annotated_span(c) for c in paragraph.children)

    def test_typographic_quotes_keep_rendered_characters(self):
        """Test that smart quotes align and keep their rendered form."""
        text = "It's \"fine\""
        rendered = "It\u2019s \u201cfine\u201d"
        stream = _stream(text, _seg(text, "Q"))
        paragraph = Element("p", children=[Text(rendered)])
        tree = Root(children=[paragraph])

        TreeAligner().align(tree, stream)

        assert _span_summary(tree) == [(rendered, "Q")]

    def test_same_source_runs_split_by_markup_merge(self):
        """Test that one source on both sides of skipped markup gives one span."""
        stream = _stream("ab*cd", _seg("ab", "kb-1"), _seg("cd", "kb-1"))
        paragraph = Element("p", children=[Text("abcd")])
        tree = Root(children=[paragraph])

        TreeAligner().align(tree, stream)

        assert len(stream) == 3
        assert _span_summary(paragraph) == [("abcd", "kb-1")]


class TestBlockFormatting:
    """Tests for alignment under block markdown."""

    def test_heading_and_paragraph(self):
        """Test that heading markers and blank lines are skipped."""
        stream = _stream("# Title\n\nBody text", _seg("Title", "D"), _seg("Body text", "C"))
        heading = Element("h1", children=[Text("Title")])
        paragraph = Element("p", children=[Text("Body text")])
        tree = Root(children=[heading, Text("\n"), paragraph])

        TreeAligner().align(tree, stream)

        assert _span_summary(heading) == [("Title", "D")]
        assert _span_summary(paragraph) == [("Body text", "C")]

    def test_list_items(self):
        """Test that bullets are skipped on every line."""
        stream = _stream("- apple\n- banana", _seg("banana", "S"))
        first = Element("li", children=[Text("apple")])
        second = Element("li", children=[Text("banana")])
        tree = Root(children=[Element("ul", children=[first, Text("\n"), second])])

        TreeAligner().align(tree, stream)

        assert _span_summary(first) == [("apple", None)]
        assert _span_summary(second) == [("banana", "S")]

    def test_code_block_consumed_silently(self):
        """Test that code text is never split but keeps the cursor in step."""
        text = "See:\n```python\nx = 1\n```\nDone."
        stream = _stream(text, _seg("Done.", "B"))
        code = Element("code", {"className": ["language-python"]}, [Text("x = 1\n")])
        pre = Element("pre", children=[code])
        closing = Element("p", children=[Text("Done.")])
        tree = Root(children=[
            Element("p", children=[Text("See:")]),
            Text("\n"),
            pre,
            Text("\n"),
            closing,
        ])

        diagnostics = AlignmentDiagnostics()
        TreeAligner().align(tree, stream, diagnostics)

        assert code.children == [Text("x = 1\n")]
        assert annotated_spans(pre) == []
        assert _span_summary(closing) == [("Done.", "B")]
        assert not diagnostics.has_desync()

    def test_inline_code_consumed_silently(self):
        """Test that inline code keeps its text and the rest still aligns."""
        stream = _stream("Run `make` now", _seg("now", "N"))
        code = Element("code", children=[Text("make")])
        tree = Root(children=[Element("p", children=[Text("Run "), code, Text(" now")])])

        TreeAligner().align(tree, stream)

        assert code.children == [Text("make")]
        assert _span_summary(tree)[-1] == ("now", "N")

    def test_verbatim_tags_are_case_insensitive(self):
        """Test that uppercase CODE is treated as verbatim."""
        stream = _stream("a `b` c", _seg("c", "C"))
        code = Element("CODE", children=[Text("b")])
        tree = Root(children=[Element("p", children=[Text("a "), code, Text(" c")])])

        TreeAligner().align(tree, stream)

        assert code.children == [Text("b")]


class TestDegradation:
    """Tests for graceful degradation when the tree diverges from the stream."""

    def test_unrelated_text_left_plain(self):
        """Test that a leaf that cannot be aligned keeps its remainder as text."""
        stream = _stream("Alpha beta", _seg("beta", "X"))
        paragraph = Element("p", children=[Text("Alpha gamma zeta")])
        later = Element("p", children=[Text("beta")])
        tree = Root(children=[paragraph, later])

        diagnostics = AlignmentDiagnostics()
        TreeAligner().align(tree, stream, diagnostics)

        assert is_annotated_span(paragraph.children[0])
        assert visible_text(paragraph.children[0]) == "Alpha "
        assert paragraph.children[1] == Text("gamma zeta")
        assert later.children == [Text("beta")]
        assert diagnostics.has_desync()
        leaf = diagnostics.desynced_leaves[0]
        assert leaf.failed_at == 6
        assert leaf.unattributed_tail == "gamma zeta"

    def test_visible_text_is_conserved(self):
        """Test that alignment never changes what the reader sees."""
        stream = _stream(
            "Intro **bold** and [link](u).\n\n- one\n- two",
            _seg("bold", "A"),
            _seg("two", "B"),
        )
        tree = Root(children=[
            Element("p", children=[
                Text("Intro "),
                Element("strong", children=[Text("bold")]),
                Text(" and "),
                Element("a", {"href": "u"}, [Text("link")]),
                Text(".  unexpected tail"),
            ]),
            Element("ul", children=[
                Element("li", children=[Text("one")]),
                Element("li", children=[Text("two")]),
            ]),
        ])
        before = visible_text(tree)

        TreeAligner().align(tree, stream)

        assert visible_text(tree) == before

    def test_stream_exhausted_mid_leaf(self):
        """Test that text past the end of the stream gets a sourceless span."""
        stream = _stream("Hi", _seg("Hi", "A"))
        paragraph = Element("p", children=[Text("Hi there")])
        tree = Root(children=[paragraph])

        TreeAligner().align(tree, stream)

        assert len(paragraph.children) == 2
        assert _span_summary(paragraph) == [("Hi", "A"), (" there", None)]
        assert paragraph.children[1].properties == {PROP_IS_ATTRIBUTED: True}

    def test_unalignable_answer_gets_no_spans(self):
        """Test that whitespace before a failed leaf is not attributed."""
        stream = _stream("Paris is the capital.", _seg("Paris", "kb-1"))
        paragraph = Element("p", children=[Text(" zzz qqq")])
        tree = Root(children=[Text("\n"), paragraph])
        before = visible_text(tree)

        diagnostics = AlignmentDiagnostics()
        TreeAligner().align(tree, stream, diagnostics)

        assert annotated_spans(tree) == []
        assert tree.children[0] == Text("\n")
        assert paragraph.children == [Text(" zzz qqq")]
        assert visible_text(tree) == before
        assert diagnostics.has_desync()

    def test_leading_whitespace_joins_first_span(self):
        """Test that whitespace before the first match goes with that match."""
        stream = _stream("Paris is", _seg("Paris", "kb-1"))
        paragraph = Element("p", children=[Text(" Paris is")])
        tree = Root(children=[Text("\n"), paragraph])

        TreeAligner().align(tree, stream)

        assert tree.children[0] == Text("\n")
        assert _span_summary(paragraph) == [(" Paris", "kb-1"), (" is", None)]


class TestShortCircuit:
    """Tests for inputs that leave the tree untouched."""

    def test_empty_stream(self):
        """Test that an empty stream leaves the tree unchanged."""
        tree = Root(children=[Element("p", children=[Text("anything")])])
        snapshot = copy.deepcopy(tree)

        result = TreeAligner().align(tree, SegmentStream.empty())

        assert result is tree
        assert tree == snapshot

    def test_stream_without_attribution(self):
        """Test that an all-unattributed stream leaves the tree unchanged."""
        tree = Root(children=[Element("p", children=[Text("Plain answer.")])])
        snapshot = copy.deepcopy(tree)

        TreeAligner().align(tree, _stream("Plain answer."))

        assert tree == snapshot

    def test_title_only_counts_as_attribution(self):
        """Test that a segment with only a title is still attributed."""
        stream = SegmentStream([TextSegment("x", None, "Loose title")])
        tree = Root(children=[Text("x")])

        TreeAligner().align(tree, stream)

        assert tree.children[0].properties[PROP_SOURCE_TITLE] == "Loose title"


class TestAlignerConfiguration:
    """Tests for configuration of the aligner."""

    def test_custom_span_tag(self):
        """Test that the span tag is configurable."""
        stream = _stream("word", _seg("word", "W"))
        tree = Root(children=[Text("word")])

        TreeAligner(AlignmentConfig(span_tag="mark")).align(tree, stream)

        assert tree.children[0].tag_name == "mark"

    def test_custom_verbatim_tags(self):
        """Test that additional verbatim tags are honoured."""
        stream = _stream("_x_ then y", _seg("y", "Y"))
        math = Element("math", children=[Text("x")])
        tree = Root(children=[Element("p", children=[math, Text(" then y")])])

        config = AlignmentConfig(verbatim_tags=["code", "pre", "math"])
        TreeAligner(config).align(tree, stream)

        assert math.children == [Text("x")]
        assert _span_summary(tree)[-1] == ("y", "Y")
