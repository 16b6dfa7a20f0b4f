"""Test SVG serialization of primitives."""

from PIL import Image as PILImage

from genpinout.page import resolve_canvas
from genpinout.primitives import ImageRef, Line, Rect, TextRun
from genpinout.renderer import SvgRenderer, _escape_xml, _fmt
from genpinout.theme import StyleAttributes, flatten

STYLE = flatten([StyleAttributes(fill_color="yellow", border_color="blue", border_width=0.5)])
CANVAS = resolve_canvas("A4-L", 100)


def _render(*prims, font_links=()) -> str:
    return SvgRenderer(CANVAS, prims, font_links).render_svg()


def test_header_uses_canvas():
    svg = _render()
    assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg"')
    assert 'width="297mm" height="210mm"' in svg
    assert 'viewBox="0 0 1169 827"' in svg
    assert svg.endswith("</svg>")


def test_rect_line_text():
    svg = _render(
        Rect(10, 20, 30, 40, style=STYLE, rx=2, ry=2),
        Line(0, 0, 10, 0, style=STYLE),
        TextRun(5, 6, "A<B", style=STYLE, anchor="start", rotation=-90),
    )
    assert '<rect x="10" y="20" width="30" height="40" rx="2" ry="2" fill="yellow"' in svg
    assert 'stroke="blue" stroke-width="0.5"' in svg
    assert '<line x1="0" y1="0" x2="10" y2="0"' in svg
    assert 'text-anchor="start"' in svg
    assert 'transform="rotate(-90 5 6)"' in svg
    assert ">A&lt;B</text>" in svg


def test_primitives_keep_paint_order():
    svg = _render(
        TextRun(0, 0, "under", style=STYLE),
        Rect(0, 0, 5, 5, style=STYLE),
        TextRun(0, 0, "over", style=STYLE),
    )
    assert svg.index("under") < svg.index("<rect") < svg.index("over")


def test_skewed_rect_pivots_on_offset_center():
    svg = _render(Rect(0, 0, 20, 10, style=STYLE, skew=15, skew_offset=5))
    assert 'transform="translate(10 10) skewX(15) translate(-10 -10)"' in svg


def test_font_links_become_imports():
    svg = _render(font_links=["https://fonts.googleapis.com/css?family=Roboto&display=swap"])
    assert "@import url('https://fonts.googleapis.com/css?family=Roboto&amp;display=swap');" in svg


def test_text_edge_color_and_weight():
    bold = flatten([StyleAttributes(font_weight="bold")])
    svg = _render(TextRun(0, 0, "x", style=bold, edge_color="white"))
    assert 'font-weight="bold"' in svg
    assert 'stroke="white"' in svg


def test_images_are_embedded(tmp_path):
    path = tmp_path / "chip.png"
    PILImage.new("RGB", (4, 2)).save(path)
    svg = _render(
        ImageRef(str(path), 0, 0, 8, 4, 4, 2),
        ImageRef(str(path), 0, 0, 2, 2, 4, 2, crop=(1, 0, 2, 2), rotation=45),
    )
    assert svg.count("data:image/png;base64,") == 2
    assert 'viewBox="1 0 2 2"' in svg
    assert 'rotate(45 1 1)' in svg


def test_number_formatting():
    assert _fmt(10.0) == "10"
    assert _fmt(0.5) == "0.5"
    assert _fmt(1 / 3) == "0.333"
    assert _fmt(-0.0001) == "0"


def test_escape_xml():
    assert _escape_xml('a & "b" <c>') == "a &amp; &quot;b&quot; &lt;c&gt;"


def test_colors_are_escaped_in_attributes():
    style = flatten([StyleAttributes(fill_color='red" onload="x', border_color="a&b", font_color="<c>")])
    svg = _render(Rect(0, 0, 1, 1, style=style), TextRun(0, 0, "t", style=style, anchor="start"))
    assert 'fill="red&quot; onload=&quot;x"' in svg
    assert 'stroke="a&amp;b"' in svg
    assert 'fill="&lt;c&gt;"' in svg
    assert 'onload="x"' not in svg
