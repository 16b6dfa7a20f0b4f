"""Row parser: tabular rows → typed commands.

A row is a list of strings whose first cell is the command keyword. Blank
rows and rows starting with ``#`` are skipped by ``read_rows``. Sizes may be
given in device units or as a percentage of the page (``50%``).
"""

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Sequence, TypeVar

from pydantic import ValidationError

from genpinout.commands import (
    Anchor,
    BoxThemeDecl,
    Command,
    Dpi,
    DrawBox,
    DrawMarker,
    EndMessage,
    GoogleFont,
    GroupDecl,
    Icon,
    Image,
    Labels,
    Message,
    PageSize,
    Pin,
    PinSet,
    PinText,
    Size,
    StyleRow,
    Text,
    TextFontDecl,
    TypeDecl,
    WireDecl,
)
from genpinout.errors import ConfigError, PinoutError, ResourceError
from genpinout.theme import StyleAttributes
from genpinout.types import (
    FONT_SLANTS,
    FONT_STRETCHES,
    FONT_WEIGHTS,
    JustifyX,
    JustifyY,
    Packing,
    Phase,
    Side,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

# Style row keyword → StyleAttributes field
STYLE_ROWS = {
    "BORDER COLOR": "border_color",
    "BORDER WIDTH": "border_width",
    "BORDER OPACITY": "border_opacity",
    "FILL COLOR": "fill_color",
    "OPACITY": "opacity",
    "FONT": "font_family",
    "FONT SIZE": "font_size",
    "FONT COLOR": "font_color",
    "FONT SLANT": "font_slant",
    "FONT BOLD": "font_weight",
    "FONT STRETCH": "font_stretch",
    "FONT OUTLINE": "font_outline",
    "FONT OUTLINE THICKNESS": "font_outline_width",
}
NUMERIC_FIELDS = {"border_width", "border_opacity", "opacity", "font_size", "font_outline_width"}
CHOICE_FIELDS = {
    "font_slant": FONT_SLANTS,
    "font_weight": FONT_WEIGHTS,
    "font_stretch": FONT_STRETCHES,
}
OVERRIDE_PREFIX = "@"

# PINSET packing cell
PACKED_WORDS = {"PACKED", "TRUE", "YES", "1"}
UNPACKED_WORDS = {"UNPACKED", "FALSE", "NO", "0"}


def read_numbered_rows(path: str | Path) -> list[tuple[int, list[str]]]:
    """Read a CSV pinout description into (line number, stripped cells) pairs."""
    path = Path(path)
    rows = []
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            for row in reader:
                cells = [cell.strip() for cell in row]
                if not any(cells) or cells[0].startswith("#"):
                    continue
                rows.append((reader.line_num, cells))
    except OSError as exc:
        raise ResourceError(f"cannot read {path}: {exc}", identifier=str(path)) from exc

    log.debug("Read %d rows from %s", len(rows), path)
    return rows


def read_rows(path: str | Path) -> list[list[str]]:
    """Read a CSV pinout description into stripped rows."""
    return [cells for _, cells in read_numbered_rows(path)]


def parse_rows(rows: Iterable[Sequence[str]]) -> Iterator[Command]:
    """Parse rows in order. ``BOX`` means a theme before DRAW and a shape after."""
    phase = Phase.SETUP
    for index, row in enumerate(rows):
        try:
            command = parse_row(row, phase)
        except PinoutError as exc:
            exc.with_index(index)
            raise
        if isinstance(command, DrawMarker):
            phase = Phase.DRAW
        yield command


def parse_row(row: Sequence[str], phase: Phase = Phase.SETUP) -> Command:
    cells = _Cells(row)
    keyword = cells.keyword
    if keyword in STYLE_ROWS:
        return _style_row(cells, STYLE_ROWS[keyword])
    if keyword == "BOX":
        return _box_theme(cells) if phase is Phase.SETUP else _draw_box(cells)

    handler = _HANDLERS.get(keyword)
    if handler is None:
        raise ConfigError(f"unknown command {keyword!r}", identifier=keyword)
    try:
        return handler(cells)
    except ValidationError as exc:
        raise ConfigError(f"malformed {keyword} row: {exc.errors()[0]['msg']}", identifier=keyword) from exc


class _Cells:
    """Typed access to the cells of one row."""

    def __init__(self, row: Sequence[str]):
        self.row = [str(cell).strip() for cell in row]
        self.keyword = self.row[0].upper() if self.row else ""

    def __len__(self) -> int:
        return len(self.row)

    def text(self, i: int, default: Optional[str] = None) -> Optional[str]:
        if i < len(self.row) and self.row[i] != "":
            return self.row[i]
        return default

    def required(self, i: int, what: str) -> str:
        value = self.text(i)
        if value is None:
            raise ConfigError(f"{self.keyword}: missing {what}", identifier=self.keyword)
        return value

    def _convert(self, i: int, what: str, conv: Callable[[str], T], default: Optional[T]) -> Optional[T]:
        value = self.text(i)
        if value is None:
            return default
        try:
            return conv(value)
        except ValueError:
            raise ConfigError(f"{self.keyword}: {what} must be a number, got {value!r}", identifier=value)

    def number(self, i: int, what: str, default: Optional[float] = None) -> Optional[float]:
        value = self.text(i)
        if value is None:
            return default
        return parse_number(value, f"{self.keyword}: {what}")

    def integer(self, i: int, what: str, default: Optional[int] = None) -> Optional[int]:
        return self._convert(i, what, int, default)

    def size(self, i: int, what: str) -> Optional[Size]:
        value = self.text(i)
        if value is None:
            return None
        return parse_size(value, f"{self.keyword}: {what}")

    def required_size(self, i: int, what: str) -> Size:
        size = self.size(i, what)
        if size is None:
            raise ConfigError(f"{self.keyword}: missing {what}", identifier=self.keyword)
        return size

    def choice(self, i: int, what: str, enum, default=None):
        value = self.text(i)
        if value is None:
            return default
        try:
            return enum(value.upper())
        except ValueError:
            valid = ", ".join(m.value for m in enum)
            raise ConfigError(f"{self.keyword}: {what} must be one of {valid}, got {value!r}", identifier=value)

    def tail(self, start: int) -> list[str]:
        """Cells from ``start`` on, trailing blanks dropped."""
        cells = list(self.row[start:])
        while cells and cells[-1] == "":
            cells.pop()
        return cells


def parse_number(value: str, what: str = "value") -> float:
    """A finite decimal; ``nan`` and ``inf`` are rejected."""
    try:
        number = float(value)
    except ValueError:
        raise ConfigError(f"{what} must be a number, got {value!r}", identifier=value)
    if not math.isfinite(number):
        raise ConfigError(f"{what} must be a finite number, got {value!r}", identifier=value)
    return number


def parse_size(value: str, what: str = "size") -> Size:
    """``12.5`` → absolute, ``25%`` → relative to the page extent."""
    text = value.strip()
    relative = text.endswith("%")
    if relative:
        text = text[:-1].strip()
    return Size(value=parse_number(text, what), relative=relative)


def _style_value(field: str, value: Optional[str]):
    if value is None:
        return None
    if field in NUMERIC_FIELDS:
        return parse_number(value, field)
    choices = CHOICE_FIELDS.get(field)
    if choices is not None and value.lower() not in choices:
        raise ConfigError(f"{field} must be one of {', '.join(choices)}, got {value!r}", identifier=value)
    return value.lower() if choices is not None else value


def _style_row(cells: _Cells, field: str) -> StyleRow:
    columns = tuple(_style_value(field, value or None) for value in cells.tail(4))
    return StyleRow(
        attribute=field,
        default=_style_value(field, cells.text(1)),
        type_value=_style_value(field, cells.text(2)),
        group_value=_style_value(field, cells.text(3)),
        columns=columns,
    )


def parse_override(cells: Sequence[str]) -> Optional[StyleAttributes]:
    """``@fill_color=red`` / ``@FILL COLOR=red`` cells → per-pin override."""
    values = {}
    for cell in cells:
        key, sep, value = cell[len(OVERRIDE_PREFIX):].partition("=")
        key = key.strip()
        field = STYLE_ROWS.get(key.upper(), key.lower().replace(" ", "_"))
        if not sep or field not in StyleAttributes.model_fields:
            raise ConfigError(f"malformed style override {cell!r}", identifier=cell)
        values[field] = _style_value(field, value.strip() or None)
    if not values:
        return None
    return StyleAttributes(**values)


def _split_overrides(cells: list[str]) -> tuple[list[str], Optional[StyleAttributes]]:
    plain = [c for c in cells if not c.startswith(OVERRIDE_PREFIX)]
    while plain and plain[-1] == "":
        plain.pop()
    return plain, parse_override([c for c in cells if c.startswith(OVERRIDE_PREFIX)])


# ---------------------------------------------------------------------------
# Setup rows
# ---------------------------------------------------------------------------

def _labels(c: _Cells) -> Labels:
    return Labels(header=tuple(h.upper() if i < 3 else h for i, h in enumerate(c.tail(1))))


def _type_decl(c: _Cells) -> TypeDecl:
    cls = GroupDecl if c.keyword == "GROUP" else TypeDecl
    return cls(
        name=c.required(1, "name"),
        fill_color=c.text(2),
        opacity=c.number(3, "opacity"),
        border_color=c.text(4),
        border_width=c.number(5, "border width"),
        column_fills=tuple(v or None for v in c.tail(6)),
    )


def _wire_decl(c: _Cells) -> WireDecl:
    return WireDecl(
        name=c.required(1, "name"),
        color=c.text(2),
        opacity=c.number(3, "opacity"),
        thickness=c.number(4, "thickness"),
    )


def _box_theme(c: _Cells) -> BoxThemeDecl:
    return BoxThemeDecl(
        name=c.required(1, "name"),
        border_color=c.text(2),
        border_opacity=c.number(3, "border opacity"),
        fill_color=c.text(4),
        fill_opacity=c.number(5, "fill opacity"),
        line_width=c.number(6, "line width"),
        width=c.number(7, "width", 0.0),
        height=c.number(8, "height", 0.0),
        corner_rx=c.number(9, "corner rx", 0.0),
        corner_ry=c.number(10, "corner ry", 0.0),
        skew=c.number(11, "skew", 0.0),
        skew_offset=c.number(12, "skew offset", 0.0),
    )


def _text_font(c: _Cells) -> TextFontDecl:
    return TextFontDecl(
        name=c.required(1, "name"),
        family=c.text(2),
        size=c.number(3, "size"),
        outline_color=c.text(4),
        color=c.text(5),
        slant=_style_value("font_slant", c.text(6)),
        weight=_style_value("font_weight", c.text(7)),
        stretch=_style_value("font_stretch", c.text(8)),
    )


def _page(c: _Cells) -> PageSize:
    return PageSize(page_id=c.required(1, "page size"))


def _dpi(c: _Cells) -> Dpi:
    dpi = c.integer(1, "dpi")
    if dpi is None:
        raise ConfigError("DPI: missing value", identifier="DPI")
    return Dpi(dpi=dpi)


def _google_font(c: _Cells) -> GoogleFont:
    return GoogleFont(link=c.required(1, "link"))


# ---------------------------------------------------------------------------
# Draw rows
# ---------------------------------------------------------------------------

def _image(c: _Cells) -> Image:
    crop_cells = [c.integer(i, "crop") for i in range(6, 10)]
    crop = None
    if any(v is not None for v in crop_cells):
        if not all(v is not None for v in crop_cells):
            raise ConfigError("IMAGE: crop needs all of x, y, width and height", identifier=c.text(1))
        crop = tuple(crop_cells)
    return Image(
        path=c.required(1, "path"),
        x=c.required_size(2, "x"),
        y=c.required_size(3, "y"),
        width=c.size(4, "width"),
        height=c.size(5, "height"),
        crop=crop,
        rotation=c.number(10, "rotation", 0.0),
    )


def _icon(c: _Cells) -> Icon:
    return Icon(
        path=c.required(1, "path"),
        x=c.required_size(2, "x"),
        y=c.required_size(3, "y"),
        width=c.size(4, "width"),
        height=c.size(5, "height"),
        rotation=c.number(6, "rotation", 0.0),
    )


def _anchor(c: _Cells) -> Anchor:
    return Anchor(x=c.required_size(1, "x"), y=c.required_size(2, "y"))


def _packing(c: _Cells) -> tuple[Packing, bool, bool]:
    """Placement, centered spacing and whether blank function cells keep their width.

    Words combine, e.g. ``SPREAD UNPACKED`` or ``CENTERED``.
    """
    value = (c.text(2) or "PACKED").upper()
    words = value.split()
    spread = centered = False
    packed = unpacked = 0
    for word in words:
        if word == "SPREAD":
            spread = True
        elif word == "CENTERED":
            spread = centered = True
        elif word in PACKED_WORDS:
            packed += 1
        elif word in UNPACKED_WORDS:
            unpacked += 1
        else:
            raise ConfigError(f"PINSET: unknown packing {value!r}", identifier=value)
    if len(set(words)) != len(words) or (packed and unpacked):
        raise ConfigError(f"PINSET: conflicting packing {value!r}", identifier=value)
    return (Packing.SPREAD if spread else Packing.PACKED), centered, bool(unpacked)


def _pinset(c: _Cells) -> PinSet:
    packing, centered, keep_empty = _packing(c)

    def required(i: int, what: str) -> float:
        value = c.number(i, what)
        if value is None:
            raise ConfigError(f"PINSET: missing {what}", identifier="PINSET")
        return value

    side = c.choice(1, "side", Side)
    if side is None:
        raise ConfigError("PINSET: missing side", identifier="PINSET")
    return PinSet(
        side=side,
        packing=packing,
        centered=centered,
        keep_empty_columns=keep_empty,
        justify_x=c.choice(3, "justify x", JustifyX, JustifyX.CENTER),
        justify_y=c.choice(4, "justify y", JustifyY, JustifyY.CENTER),
        pitch=required(5, "pitch"),
        box_length=required(6, "box length"),
        box_thickness=required(7, "box thickness"),
        lead_length=c.number(8, "lead length", 0.0),
        column_gap=c.number(9, "column gap", 0.0),
        column_width=c.number(10, "column width", 0.0),
        span=c.number(11, "span", 0.0),
        corner_radius=c.number(12, "corner radius", 0.0),
        number_offset=c.number(13, "number offset", 0.0),
    )


def _pin(c: _Cells) -> Pin:
    functions, override = _split_overrides(c.row[6:])
    return Pin(
        wire=c.text(1),
        pin_type=c.text(2),
        group=c.text(3),
        number=c.text(4, ""),
        label=c.text(5, ""),
        functions=tuple(functions),
        override=override,
    )


def _pin_text(c: _Cells) -> PinText:
    _, override = _split_overrides(c.row[7:])
    return PinText(
        wire=c.text(1),
        pin_type=c.text(2),
        group=c.text(3),
        font=c.text(4),
        label=c.text(5, ""),
        text=c.text(6, ""),
        override=override,
    )


def _draw_box(c: _Cells) -> DrawBox:
    return DrawBox(
        theme=c.required(1, "theme"),
        x=c.required_size(2, "x"),
        y=c.required_size(3, "y"),
        width=c.size(4, "width"),
        height=c.size(5, "height"),
        justify_x=c.choice(6, "justify x", JustifyX, JustifyX.CENTER),
        justify_y=c.choice(7, "justify y", JustifyY, JustifyY.CENTER),
        text=c.text(8, ""),
    )


def _message(c: _Cells) -> Message:
    return Message(
        x=c.number(1, "x"),
        y=c.number(2, "y"),
        line_step=c.number(3, "line step"),
        font=c.text(4),
        font_size=c.number(5, "font size"),
        justify_x=c.choice(6, "justify x", JustifyX, JustifyX.CENTER),
        justify_y=c.choice(7, "justify y", JustifyY, JustifyY.CENTER),
    )


def _text(c: _Cells) -> Text:
    return Text(
        edge_color=c.text(1),
        color=c.text(2),
        message=c.text(3, ""),
        new_line=(c.text(4, "").upper() == "NL"),
    )


_HANDLERS: dict[str, Callable[[_Cells], Command]] = {
    "LABELS": _labels,
    "TYPE": _type_decl,
    "GROUP": _type_decl,
    "WIRE": _wire_decl,
    "TEXT FONT": _text_font,
    "PAGE": _page,
    "DPI": _dpi,
    "DRAW": lambda c: DrawMarker(),
    "GOOGLEFONT": _google_font,
    "IMAGE": _image,
    "ICON": _icon,
    "ANCHOR": _anchor,
    "PINSET": _pinset,
    "PIN": _pin,
    "PINTEXT": _pin_text,
    "MESSAGE": _message,
    "TEXT": _text,
    "END MESSAGE": lambda c: EndMessage(),
}
