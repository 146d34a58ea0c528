import pytest

from odtx.errors import InvalidArgumentError
from odtx.text import Paragraph, Run
from odtx.utils.odf import NAMESPACES, find_child, get_attribute, iter_children, qn


def _body_paragraph_count(doc):
    return len(list(iter_children(doc.paragraphs().parent, "text:p")))


class TestRun:
    def test_runs_iterate_in_order(self, doc):
        run = doc.paragraphs().runs()
        texts = []
        while run.has_next():
            texts.append(run.get_text())
            run.next()
        assert texts == ["Hello", " World"]

    def test_next_past_the_end_stays_empty(self, doc):
        run = doc.paragraphs().runs()
        run.next().next()
        assert not run.has_next()
        run.next()
        assert run.current is None
        assert run.get_text() == ""

    def test_set_text_on_empty_cursor_fails(self):
        assert Run().set_text("nothing") is False

    def test_set_text_overwrites(self, doc):
        run = doc.paragraphs().runs()
        assert run.set_text("Goodbye") is True
        assert doc.paragraphs().runs().get_text() == "Goodbye"

    def test_iteration_yields_independent_views(self, doc):
        run = doc.paragraphs().runs()
        views = list(run)
        assert [v.get_text() for v in views] == ["Hello", " World"]
        assert views[0].get_style() == "T1"
        # Iterating does not move the cursor
        assert run.get_text() == "Hello"


class TestParagraph:
    def test_walks_body_paragraphs_only(self, doc):
        paragraph = doc.paragraphs()
        texts = []
        while paragraph.has_next():
            texts.append(paragraph.get_text())
            paragraph.next()
        # Paragraphs inside table cells are not siblings of body paragraphs
        assert texts == ["Hello World", "Plain paragraph", "Closing  words"]

    def test_has_next_turns_false_exactly_once(self, doc):
        paragraph = doc.paragraphs()
        states = []
        for _ in range(5):
            states.append(paragraph.has_next())
            paragraph.next()
        assert states == [True, True, True, False, False]

    def test_runs_is_idempotent(self, doc):
        paragraph = doc.paragraphs()
        first = paragraph.runs().current
        second = paragraph.runs().current
        assert first is not None
        assert first is second

    def test_run_view_follows_paragraph_cursor(self, doc):
        paragraph = doc.paragraphs()
        paragraph.next()
        # Second paragraph has only direct text, no spans
        assert paragraph.run.parent is paragraph.current
        assert not paragraph.runs().has_next()

    def test_add_run_to_empty_paragraph(self, blank_doc):
        paragraph = blank_doc.add_paragraph("P1")
        run = paragraph.add_run("Hello")

        assert run.get_text() == "Hello"
        assert run.get_style() == "RegText"
        assert paragraph.runs().get_text() == "Hello"
        assert run.parent is paragraph.current

    def test_add_run_custom_style(self, blank_doc):
        run = blank_doc.add_paragraph("P1").add_run("Bold", "T1")
        assert run.get_style() == "T1"

    def test_add_run_rejects_unstorable_text(self, blank_doc):
        paragraph = blank_doc.add_paragraph("P1")
        with pytest.raises(InvalidArgumentError):
            paragraph.add_run("bad\x01text")
        # No half-built span is left behind
        assert not paragraph.runs().has_next()

    def test_add_run_requires_current(self):
        with pytest.raises(InvalidArgumentError):
            Paragraph().add_run("orphan")

    def test_insert_paragraph_after(self, doc):
        first = doc.paragraphs()
        inserted = first.insert_paragraph_after("Inserted", "T1")

        assert inserted.parent is first.parent
        assert first.current.getnext() is inserted.current
        # The paragraph itself stays unstyled; the style name goes on its run
        assert get_attribute(inserted.current, "text:style-name", None) is None
        assert inserted.runs().get_style() == "T1"
        assert inserted.get_text() == "Inserted"

        # Parent is bound, so the new view iterates on from its position
        inserted.next()
        assert inserted.get_text() == "Plain paragraph"

    def test_insert_paragraph_after_default_run_style(self, doc):
        inserted = doc.paragraphs().insert_paragraph_after("Inserted")
        assert inserted.runs().get_style() == "P1"

    def test_insert_empty_paragraph_has_no_runs(self, doc):
        inserted = doc.paragraphs().insert_paragraph_after("")
        assert inserted.get_style() == ""
        assert not inserted.runs().has_next()

    def test_insert_paragraph_after_rejects_unstorable_text(self, doc):
        before = _body_paragraph_count(doc)
        with pytest.raises(InvalidArgumentError):
            doc.paragraphs().insert_paragraph_after("bad\x01text")
        assert _body_paragraph_count(doc) == before

    def test_add_image_default_size(self, blank_doc):
        paragraph = blank_doc.add_paragraph("P1")
        paragraph.add_image("image1.png")

        frame = find_child(paragraph.current, "draw:frame")
        image = find_child(frame, "draw:image")
        assert get_attribute(frame, "text:anchor-type") == "as-char"
        assert get_attribute(frame, "svg:width") == "2.70833in"
        assert get_attribute(frame, "svg:height") == "1.35833in"
        assert get_attribute(frame, "style:rel-width") == "scale"
        assert get_attribute(frame, "style:rel-height") == "scale"
        assert image.get(f"{{{NAMESPACES['xlink']}}}href") == "media/image1.png"

    def test_add_image_width_only_is_square(self, blank_doc):
        paragraph = blank_doc.add_paragraph("P1")
        paragraph.add_image("a.png", "2in")
        frame = find_child(paragraph.current, "draw:frame")
        assert get_attribute(frame, "svg:width") == "2in"
        assert get_attribute(frame, "svg:height") == "2in"

    def test_add_image_explicit_size(self, blank_doc):
        paragraph = blank_doc.add_paragraph("P1")
        paragraph.add_image("a.png", "2in", "1in")
        frame = find_child(paragraph.current, "draw:frame")
        assert get_attribute(frame, "svg:height") == "1in"

    def test_add_image_requires_name(self, blank_doc):
        with pytest.raises(InvalidArgumentError):
            blank_doc.add_paragraph("P1").add_image("")

    def test_set_style_creates_missing_attribute(self, doc):
        cell_paragraph = doc.tables().rows().cells().paragraphs()
        assert cell_paragraph.get_style() == ""
        cell_paragraph.set_style("P9")
        assert cell_paragraph.get_style() == "P9"
        cell_paragraph.set_style("P10")
        assert cell_paragraph.current.get(qn("text:style-name")) == "P10"

    def test_delete_par_removes_exactly_one(self, doc):
        before = _body_paragraph_count(doc)
        paragraph = doc.paragraphs()
        paragraph.next()
        paragraph.delete_par()

        assert _body_paragraph_count(doc) == before - 1
        assert paragraph.current is None
        assert [p.get_text() for p in doc.paragraphs()] == ["Hello World", "Closing  words"]

    def test_delete_par_on_empty_cursor_is_noop(self, blank_doc):
        paragraph = blank_doc.paragraphs()
        paragraph.delete_par()
        assert paragraph.current is None
