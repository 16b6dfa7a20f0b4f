"""Typed command model.

Each row of a pinout description parses into exactly one of the command
classes below. Commands are frozen; each class carries the phase it is
legal in (``phase``) and the keyword it is written with (``keyword``).
"""

from __future__ import annotations

from typing import ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from genpinout.theme import StyleAttributes
from genpinout.types import JustifyX, JustifyY, Packing, PhaseTag, Side


class Size(BaseModel):
    """An absolute length in device units, or a percentage of a canvas extent."""

    model_config = ConfigDict(frozen=True)

    value: float
    relative: bool = False

    def resolve(self, extent: float) -> float:
        if self.relative:
            return self.value / 100 * extent
        return self.value

    @classmethod
    def absolute(cls, value: float) -> Size:
        return cls(value=value)


class Command(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: ClassVar[PhaseTag] = PhaseTag.SETUP
    keyword: ClassVar[str] = ""


# ---------------------------------------------------------------------------
# Setup phase
# ---------------------------------------------------------------------------

class Labels(Command):
    keyword: ClassVar[str] = "LABELS"

    header: tuple[str, ...] = Field(..., description="DEFAULT, TYPE, GROUP, then the function columns")


StyleValue = Union[float, str, None]


class StyleRow(Command):
    """One per-scope style row such as ``FILL COLOR`` or ``FONT SIZE``."""

    keyword: ClassVar[str] = "STYLE"

    attribute: str = Field(..., description="StyleAttributes field name, e.g. 'fill_color'")
    default: StyleValue = None
    type_value: StyleValue = None
    group_value: StyleValue = None
    columns: tuple[StyleValue, ...] = ()


class TypeDecl(Command):
    keyword: ClassVar[str] = "TYPE"

    name: str
    fill_color: Optional[str] = None
    opacity: Optional[float] = None
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    column_fills: tuple[Optional[str], ...] = ()


class GroupDecl(TypeDecl):
    keyword: ClassVar[str] = "GROUP"


class WireDecl(Command):
    keyword: ClassVar[str] = "WIRE"

    name: str
    color: Optional[str] = None
    opacity: Optional[float] = None
    thickness: Optional[float] = None


class BoxThemeDecl(Command):
    keyword: ClassVar[str] = "BOX"

    name: str
    border_color: Optional[str] = None
    border_opacity: Optional[float] = None
    fill_color: Optional[str] = None
    fill_opacity: Optional[float] = None
    line_width: Optional[float] = None
    width: float = 0.0
    height: float = 0.0
    corner_rx: float = 0.0
    corner_ry: float = 0.0
    skew: float = 0.0
    skew_offset: float = 0.0


class TextFontDecl(Command):
    keyword: ClassVar[str] = "TEXT FONT"

    name: str
    family: Optional[str] = None
    size: Optional[float] = None
    outline_color: Optional[str] = None
    color: Optional[str] = None
    slant: Optional[str] = None
    weight: Optional[str] = None
    stretch: Optional[str] = None


class PageSize(Command):
    keyword: ClassVar[str] = "PAGE"

    page_id: str


class Dpi(Command):
    keyword: ClassVar[str] = "DPI"

    dpi: int


class DrawMarker(Command):
    phase: ClassVar[PhaseTag] = PhaseTag.MARKER
    keyword: ClassVar[str] = "DRAW"


class GoogleFont(Command):
    phase: ClassVar[PhaseTag] = PhaseTag.EITHER
    keyword: ClassVar[str] = "GOOGLEFONT"

    link: str


# ---------------------------------------------------------------------------
# Draw phase
# ---------------------------------------------------------------------------

class DrawCommand(Command):
    phase: ClassVar[PhaseTag] = PhaseTag.DRAW


class Image(DrawCommand):
    keyword: ClassVar[str] = "IMAGE"

    path: str
    x: Size = Field(..., description="Center of the image")
    y: Size
    width: Optional[Size] = None
    height: Optional[Size] = None
    crop: Optional[tuple[int, int, int, int]] = Field(
        default=None, description="(x, y, width, height) in source pixels"
    )
    rotation: float = 0.0


class Icon(DrawCommand):
    keyword: ClassVar[str] = "ICON"

    path: str
    x: Size
    y: Size
    width: Optional[Size] = None
    height: Optional[Size] = None
    rotation: float = 0.0


class Anchor(DrawCommand):
    keyword: ClassVar[str] = "ANCHOR"

    x: Size
    y: Size


class PinSet(DrawCommand):
    keyword: ClassVar[str] = "PINSET"

    side: Side
    packing: Packing = Packing.PACKED
    centered: bool = Field(default=False, description="Spread: half-step lead-in at both ends")
    keep_empty_columns: bool = Field(
        default=False, description="UNPACKED: a blank function label still takes its cell"
    )
    justify_x: JustifyX = JustifyX.CENTER
    justify_y: JustifyY = JustifyY.CENTER
    pitch: float
    box_length: float = Field(..., description="Box extent along the lead direction")
    box_thickness: float = Field(..., description="Box extent along the pin row")
    lead_length: float = 0.0
    column_gap: float = 0.0
    column_width: float = Field(default=0.0, description="0 sizes columns from the text")
    span: float = Field(default=0.0, description="Total length for SPREAD placement")
    corner_radius: float = 0.0
    number_offset: float = 0.0


class Pin(DrawCommand):
    keyword: ClassVar[str] = "PIN"

    wire: Optional[str] = None
    pin_type: Optional[str] = None
    group: Optional[str] = None
    number: str = ""
    label: str = ""
    functions: tuple[str, ...] = ()
    override: Optional[StyleAttributes] = None


class PinText(DrawCommand):
    keyword: ClassVar[str] = "PINTEXT"

    wire: Optional[str] = None
    pin_type: Optional[str] = None
    group: Optional[str] = None
    font: Optional[str] = None
    label: str = ""
    text: str = ""
    override: Optional[StyleAttributes] = None


class DrawBox(DrawCommand):
    keyword: ClassVar[str] = "BOX"

    theme: str
    x: Size
    y: Size
    width: Optional[Size] = None
    height: Optional[Size] = None
    justify_x: JustifyX = JustifyX.CENTER
    justify_y: JustifyY = JustifyY.CENTER
    text: str = ""


class Message(DrawCommand):
    keyword: ClassVar[str] = "MESSAGE"

    x: Optional[float] = None
    y: Optional[float] = None
    line_step: Optional[float] = None
    font: Optional[str] = None
    font_size: Optional[float] = None
    justify_x: JustifyX = JustifyX.CENTER
    justify_y: JustifyY = JustifyY.CENTER


class Text(DrawCommand):
    keyword: ClassVar[str] = "TEXT"

    edge_color: Optional[str] = None
    color: Optional[str] = None
    message: str = ""
    new_line: bool = False


class EndMessage(DrawCommand):
    keyword: ClassVar[str] = "END MESSAGE"


PIN_COMMANDS = (Pin, PinText)
