"""Test draw-command assembly into primitives."""

import pytest
from PIL import Image as PILImage

from genpinout.assembler import Assembler, assemble
from genpinout.commands import (
    Anchor,
    BoxThemeDecl,
    DrawBox,
    DrawMarker,
    EndMessage,
    Icon,
    Image,
    Labels,
    Message,
    Pin,
    PinSet,
    Size,
    Text,
    TypeDecl,
)
from genpinout.document import Document
from genpinout.errors import LayoutError, ResourceError, UnresolvedReferenceError
from genpinout.primitives import IconRef, ImageRef, Line, Rect, TextRun
from genpinout.resources import PillowImageLoader, SvgIconLoader
from genpinout.types import JustifyX, JustifyY, Packing, Side


def _size(value: float) -> Size:
    return Size.absolute(value)


def _anchor(x: float, y: float) -> Anchor:
    return Anchor(x=_size(x), y=_size(y))


def _pinset(**kwargs) -> PinSet:
    fields = dict(side=Side.LEFT, pitch=5.0, box_length=60.0, box_thickness=10.0)
    fields.update(kwargs)
    return PinSet(**fields)


def _build(*draw, setup=()):
    return Document.from_commands([*setup, DrawMarker(), *draw])


def test_end_to_end_two_packed_pins():
    doc = _build(
        _anchor(50, 100),
        _pinset(
            packing=Packing.PACKED, justify_x=JustifyX.CENTER, justify_y=JustifyY.CENTER,
            lead_length=20.0,
        ),
        Pin(pin_type="Output", number="1", label="VCC", functions=("GPIO1",)),
        Pin(pin_type="Output", number="2", label="GND", functions=("GPIO2", "TX")),
        setup=(
            Labels(header=("DEFAULT", "TYPE", "GROUP", "GPIO", "ALT")),
            TypeDecl(name="Output", border_color="blue", border_width=1),
        ),
    )
    prims = assemble(doc)

    rects = [p for p in prims if isinstance(p, Rect)]
    lines = [p for p in prims if isinstance(p, Line)]
    texts = [p for p in prims if isinstance(p, TextRun)]
    assert len(rects) == 2
    assert [r.y for r in rects] == [100, 105]
    assert all(r.style.border_color == "blue" and r.style.border_width == 1 for r in rects)
    assert len(lines) == 2
    assert all(ln.style.border_color == "blue" for ln in lines)
    assert [t.text for t in texts] == ["VCC", "1", "GPIO1", "GND", "2", "GPIO2", "TX"]


def test_output_follows_command_order():
    doc = _build(
        DrawBox(theme="Note", x=_size(10), y=_size(10), text="first"),
        DrawBox(theme="Note", x=_size(20), y=_size(15), width=_size(60)),
        _anchor(300, 300),
        _pinset(),
        Pin(number="1"),
        DrawBox(theme="Note", x=_size(25), y=_size(20), text="last"),
        setup=(BoxThemeDecl(name="Note", fill_color="yellow", width=50, height=20),),
    )
    prims = assemble(doc)

    assert [type(p) for p in prims] == [Rect, TextRun, Rect, Rect, TextRun, Rect, TextRun]
    assert [p.x for p in prims if isinstance(p, Rect)] == [10, 20, 240, 25]
    assert [p.text for p in prims if isinstance(p, TextRun)] == ["first", "1", "last"]
    assert prims[0].style.fill_color == "yellow"
    assert prims[2].width == 60


def test_box_text_justification():
    doc = _build(
        DrawBox(theme="Note", x=_size(10), y=_size(10), text="mid"),
        DrawBox(theme="Note", x=_size(10), y=_size(10), text="tl",
                justify_x=JustifyX.LEFT, justify_y=JustifyY.TOP),
        setup=(BoxThemeDecl(name="Note", width=50, height=20),),
    )
    _, mid, _, top_left = assemble(doc)
    assert (mid.x, mid.anchor) == (35, "middle")
    assert mid.y == pytest.approx(20 + 10 / 3)
    assert (top_left.x, top_left.y, top_left.anchor) == (10, 20, "start")


def test_undeclared_type_halts_document():
    doc = _build(
        _anchor(0, 0),
        _pinset(),
        Pin(pin_type="Output", number="1"),
        Pin(pin_type="Input", number="2"),
        setup=(TypeDecl(name="Output"),),
    )
    assembler = Assembler(doc)
    with pytest.raises(UnresolvedReferenceError) as exc:
        assembler.run()
    assert exc.value.index == 5
    assert exc.value.identifier == "Input"
    assert assembler.layouts == []


def test_consecutive_pinsets_continue_from_cursor():
    doc = _build(
        _anchor(0, 100),
        _pinset(),
        Pin(number="1"),
        Pin(number="2"),
        _pinset(),
        Pin(number="3"),
    )
    rects = [p for p in assemble(doc) if isinstance(p, Rect)]
    assert [r.y for r in rects] == [100, 105, 110]


def test_explicit_anchor_overrides_cursor():
    doc = _build(
        _anchor(0, 100),
        _pinset(),
        Pin(number="1"),
        _anchor(0, 500),
        Pin(number="2"),
    )
    rects = [p for p in assemble(doc) if isinstance(p, Rect)]
    assert [r.y for r in rects] == [100, 500]


def test_percent_anchor_resolves_against_canvas():
    doc = _build(
        Anchor(x=Size(value=50, relative=True), y=Size(value=50, relative=True)),
        _pinset(side=Side.RIGHT, pitch=10.0),
        Pin(number="1"),
    )
    (rect,) = [p for p in assemble(doc) if isinstance(p, Rect)]
    assert (rect.x, rect.y) == (1754, 1240)


def test_pin_without_pinset():
    doc = _build(_anchor(0, 0), Pin(number="1"))
    with pytest.raises(LayoutError) as exc:
        assemble(doc)
    assert exc.value.index == 2


def test_pinset_without_pins():
    doc = _build(_anchor(0, 0), _pinset(), _anchor(10, 10))
    with pytest.raises(LayoutError) as exc:
        assemble(doc)
    assert exc.value.index == 2


def test_message_lines():
    doc = _build(
        Message(x=100, y=200, justify_x=JustifyX.LEFT),
        Text(message="Hello", new_line=True),
        Text(message="World", color="red"),
        EndMessage(),
    )
    first, second = assemble(doc)
    assert (first.text, first.x, first.anchor) == ("Hello", 100, "start")
    assert first.y == pytest.approx(200 + 10 / 3)
    assert second.y == pytest.approx(212 + 10 / 3)
    assert second.style.font_color == "red"


def test_message_centered_on_measured_width():
    doc = _build(Message(x=100, y=50), Text(message="ab"), Text(message="cd"))
    first, second = assemble(doc)
    assert first.x == pytest.approx(88)
    assert second.x == pytest.approx(100)


def test_message_ends_at_next_command():
    doc = _build(
        Message(x=0, y=0),
        Text(message="note"),
        DrawBox(theme="Note", x=_size(0), y=_size(0)),
        setup=(BoxThemeDecl(name="Note", width=5, height=5),),
    )
    assert [type(p) for p in assemble(doc)] == [TextRun, Rect]


def test_text_outside_message():
    doc = _build(Message(x=0, y=0), EndMessage(), Text(message="stray"))
    with pytest.raises(LayoutError):
        assemble(doc)


def test_image_centered_with_aspect_ratio(tmp_path):
    PILImage.new("RGB", (40, 20)).save(tmp_path / "chip.png")
    doc = _build(Image(path="chip.png", x=_size(100), y=_size(100), width=_size(80)))
    (img,) = assemble(doc, images=PillowImageLoader(tmp_path))
    assert isinstance(img, ImageRef)
    assert (img.x, img.y, img.width, img.height) == (60, 80, 80, 40)
    assert (img.intrinsic_width, img.intrinsic_height) == (40, 20)


def test_image_crop_sets_natural_size(tmp_path):
    PILImage.new("RGB", (40, 20)).save(tmp_path / "chip.png")
    doc = _build(Image(path="chip.png", x=_size(50), y=_size(50), crop=(0, 0, 10, 10)))
    (img,) = assemble(doc, images=PillowImageLoader(tmp_path))
    assert (img.width, img.height) == (10, 10)

    bad = _build(Image(path="chip.png", x=_size(50), y=_size(50), crop=(35, 0, 10, 10)))
    with pytest.raises(LayoutError):
        assemble(bad, images=PillowImageLoader(tmp_path))


def test_missing_image(tmp_path):
    doc = _build(Image(path="nope.png", x=_size(0), y=_size(0)))
    with pytest.raises(ResourceError) as exc:
        assemble(doc, images=PillowImageLoader(tmp_path))
    assert exc.value.index == 1


def test_icon(tmp_path):
    (tmp_path / "usb.svg").write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" width="24px" height="12"/>', encoding="utf-8"
    )
    doc = _build(Icon(path="usb.svg", x=_size(12), y=_size(6)))
    (icon,) = assemble(doc, icons=SvgIconLoader(tmp_path))
    assert isinstance(icon, IconRef)
    assert (icon.x, icon.y, icon.width, icon.height) == (0, 0, 24, 12)


@pytest.mark.parametrize(
    "header",
    ['width="24" height="0"', 'viewBox="0 0 10 0"', 'viewBox="0 0 -5 5"'],
)
def test_icon_with_empty_size(tmp_path, header):
    (tmp_path / "flat.svg").write_text(
        f'<svg xmlns="http://www.w3.org/2000/svg" {header}/>', encoding="utf-8"
    )
    doc = _build(Icon(path="flat.svg", x=_size(0), y=_size(0), height=_size(5)))
    with pytest.raises(ResourceError, match="empty size"):
        assemble(doc, icons=SvgIconLoader(tmp_path))
