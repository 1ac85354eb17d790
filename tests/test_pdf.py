import re

import pytest
from PIL import Image

from invoiceling.pdf import Align, PdfCanvas


@pytest.fixture
def canvas():
    c = PdfCanvas(margin=40)
    c.set_font("Helvetica", 10)
    return c


def test_document_framing(canvas):
    data = canvas.to_bytes()
    assert data.startswith(b"%PDF-")
    assert data.rstrip().endswith(b"%%EOF")


def test_startxref_points_at_xref_table(canvas):
    canvas.cell(100, "Hello")
    data = canvas.to_bytes()
    offset = int(re.search(rb"startxref\n(\d+)\n", data).group(1))
    assert data[offset:offset + 4] == b"xref"


def test_xref_entries_point_at_objects(canvas):
    canvas.cell(100, "Hello")
    data = canvas.to_bytes()
    entries = re.findall(rb"(\d{10}) 00000 n ", data)
    for number, entry in enumerate(entries, start=1):
        offset = int(entry)
        assert data[offset:].startswith(f"{number} 0 obj".encode())


def test_cell_writes_text(canvas):
    canvas.cell(100, "Hello")
    assert b"(Hello) Tj" in canvas.to_bytes()


def test_cell_escapes_parentheses(canvas):
    canvas.cell(100, "a(b)")
    assert b"(a\\(b\\)) Tj" in canvas.to_bytes()


def test_cell_encodes_euro_as_winansi(canvas):
    canvas.cell(100, "5€")
    assert b"(5\\200) Tj" in canvas.to_bytes()


def test_cell_advances_x_by_width(canvas):
    start = canvas.x
    canvas.cell(75, "abc", Align.RIGHT)
    assert canvas.x == pytest.approx(start + 75)


def test_cell_without_width_advances_by_text_width(canvas):
    start = canvas.x
    width = canvas.text_width("Hello")
    canvas.cell(None, "Hello")
    assert canvas.x == pytest.approx(start + width)


def test_cell_without_font_raises():
    c = PdfCanvas()
    with pytest.raises(RuntimeError):
        c.cell(10, "x")


def test_text_width_is_additive(canvas):
    assert canvas.text_width("0000") == pytest.approx(4 * canvas.text_width("0"))
    assert canvas.text_width("") == 0


def test_text_width_scales_with_size(canvas):
    small = canvas.text_width("Invoice")
    canvas.set_font("Helvetica", 20)
    assert canvas.text_width("Invoice") == pytest.approx(2 * small)


def test_bold_is_wider(canvas):
    regular = canvas.text_width("mmm")
    canvas.set_font("Helvetica-Bold", 10)
    assert canvas.text_width("mmm") > regular


def test_unknown_font_raises(canvas):
    with pytest.raises(ValueError):
        canvas.set_font("Comic", 10)


def test_bad_color_raises(canvas):
    with pytest.raises(ValueError):
        canvas.set_text_color(0, 256, 0)


def test_bad_rectangle_style_raises(canvas):
    with pytest.raises(ValueError):
        canvas.rectangle(0, 0, 10, 10, "X")


def test_rectangle_fill_and_stroke(canvas):
    canvas.rectangle(40, 100, 300, 160, "DF")
    assert b"re B" in canvas.to_bytes()


def test_br_resets_x_and_moves_down(canvas):
    canvas.cell(100, "x")
    start_y = canvas.y
    canvas.br(20)
    assert canvas.x == canvas.margin
    assert canvas.y == pytest.approx(start_y + 20)


def test_multi_cell_wraps_and_restores_x(canvas):
    canvas.x = 60
    start_y = canvas.y
    canvas.multi_cell(50, 100, "one two three four five six")
    assert canvas.x == 60
    assert canvas.y - start_y > 10


def test_multi_cell_stops_at_height(canvas):
    start_y = canvas.y
    canvas.multi_cell(50, 10, "one two three four five six")
    assert canvas.y == pytest.approx(start_y + 10)


def test_alpha_adds_graphics_state(canvas):
    canvas.cell(None, "DRAFT", alpha=0.65)
    data = canvas.to_bytes()
    assert b"/ca 0.65" in data
    assert b"/GS1 gs" in data


def test_alpha_out_of_range_raises(canvas):
    with pytest.raises(ValueError):
        canvas.cell(None, "x", alpha=2)


def test_image_is_embedded(canvas, tmp_path):
    path = tmp_path / "logo.png"
    Image.new("RGBA", (4, 2), (255, 0, 0, 128)).save(path)
    canvas.image(path, 400, 40, 200, 100)
    data = canvas.to_bytes()
    assert b"/Subtype /Image" in data
    assert b"/Width 4" in data
    assert b"/Im1 Do" in data


def test_missing_image_raises(canvas, tmp_path):
    with pytest.raises(OSError):
        canvas.image(tmp_path / "none.png", 0, 0, 10, 10)


def test_save_matches_to_bytes(canvas, tmp_path):
    canvas.cell(100, "Saved")
    path = tmp_path / "out.pdf"
    canvas.save(path)
    assert path.read_bytes() == canvas.to_bytes()