"""Tests for the fpdf2-backed drawing surface."""

import pytest

from flow.services.canvas import CanvasClosedError, DocumentCanvas, clean_text


@pytest.fixture
def canvas():
    c = DocumentCanvas()
    c.add_page()
    return c


class TestDrawing:
    def test_a4_portrait_and_landscape(self):
        assert DocumentCanvas().page_width == pytest.approx(210, abs=0.1)
        landscape = DocumentCanvas(orientation="landscape")
        assert landscape.page_width == pytest.approx(297, abs=0.1)
        assert landscape.page_height == pytest.approx(210, abs=0.1)

    def test_draws_are_recorded_on_current_page(self, canvas):
        canvas.draw_rect(10, 10, 50, 20)
        canvas.add_page()
        canvas.draw_text("Hello", 20, 30)
        kinds = [(op.page, op.kind) for op in canvas.operations]
        assert kinds == [(1, "rect"), (2, "text")]

    def test_text_alignment_offsets_x(self, canvas):
        canvas.set_font("bold", 12)
        width = canvas.text_width("Centered")
        canvas.draw_text("Centered", 100, 50, align="center")
        canvas.draw_text("Right", 100, 60, align="right")
        centered, right = canvas.texts()
        assert centered.x == pytest.approx(100 - width / 2)
        assert right.x + right.w == pytest.approx(100)

    def test_chrome_tagging(self, canvas):
        canvas.draw_text("content", 10, 10)
        with canvas.chrome():
            canvas.draw_text("footer", 10, 290)
        assert [op.text for op in canvas.texts(include_chrome=False)] == ["content"]
        assert [op.chrome for op in canvas.texts()] == [False, True]

    def test_off_page_coordinates_are_not_rejected(self, canvas):
        canvas.draw_rect(-50, 400, 10, 10)
        canvas.draw_text("off page", 500, 500)
        assert len(canvas.operations) == 2

    def test_shapes(self, canvas):
        canvas.set_fill_color((59, 130, 246))
        canvas.draw_rounded_rect(10, 10, 40, 20, 3)
        canvas.draw_circle(50, 50, 5)
        canvas.draw_ellipse(80, 50, 10, 4, mode="FD")
        canvas.set_draw_color((0, 0, 0))
        canvas.draw_line(0, 0, 10, 10)
        assert [op.kind for op in canvas.operations] == ["rounded_rect", "circle", "ellipse", "line"]


class TestWrapping:
    def test_lines_fit_width(self, canvas):
        canvas.set_font("normal", 10)
        text = "Southeast Asia represents a combined economy with many consumers " * 4
        lines = canvas.wrap_text(text, 60)
        assert len(lines) > 1
        for line in lines:
            assert canvas.text_width(line) <= 60

    def test_words_are_preserved(self, canvas):
        text = "one two three four five six seven eight nine ten"
        assert " ".join(canvas.wrap_text(text, 30)) == text

    def test_long_word_is_split(self, canvas):
        lines = canvas.wrap_text("x" * 200, 20)
        assert "".join(lines) == "x" * 200
        assert all(canvas.text_width(line) <= 20 for line in lines)

    def test_empty(self, canvas):
        assert canvas.wrap_text("   ", 50) == []

    def test_clean_text_maps_to_latin1(self):
        assert clean_text("€5 – “quoted” • item") == 'EUR5 - "quoted" - item'
        assert clean_text(None) == ""
        assert clean_text("© 2025") == "© 2025"


class TestPages:
    def test_set_page_retargets(self, canvas):
        canvas.add_page()
        canvas.set_page(1)
        canvas.draw_text("back on one", 10, 10)
        assert canvas.operations[-1].page == 1
        assert canvas.page_count == 2

    def test_set_page_out_of_range(self, canvas):
        with pytest.raises(ValueError):
            canvas.set_page(3)

    def test_outline(self, canvas):
        canvas.mark_section("Overview")
        canvas.mark_section("Indonesia", level=1)
        assert [(e.page, e.title, e.level) for e in canvas.outline] == [
            (1, "Overview", 0), (1, "Indonesia", 1)]


class TestSave:
    def test_save_returns_pdf_bytes(self, canvas):
        canvas.draw_text("Hello", 20, 20)
        artifact = canvas.save("test.pdf")
        assert artifact.filename == "test.pdf"
        assert artifact.media_type == "application/pdf"
        assert artifact.content.startswith(b"%PDF")
        assert artifact.as_stream().read() == artifact.content

    def test_save_is_terminal(self, canvas):
        canvas.save("test.pdf")
        assert canvas.closed
        with pytest.raises(CanvasClosedError):
            canvas.draw_text("late", 10, 10)
        with pytest.raises(CanvasClosedError):
            canvas.add_page()
        with pytest.raises(CanvasClosedError):
            canvas.save("again.pdf")

    def test_save_without_pages_is_still_a_document(self):
        artifact = DocumentCanvas().save("empty.pdf")
        assert artifact.content.startswith(b"%PDF")
