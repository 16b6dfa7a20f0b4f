"""Shared enums and type aliases."""

from enum import Enum


class Phase(str, Enum):
    SETUP = "setup"
    DRAW = "draw"


class PhaseTag(str, Enum):
    """Which phase(s) a command is legal in."""

    SETUP = "setup"
    DRAW = "draw"
    EITHER = "either"
    MARKER = "marker"


class Side(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    TOP = "TOP"
    BOTTOM = "BOTTOM"

    @property
    def vertical(self) -> bool:
        """True when pins run down the side (leads are horizontal)."""
        return self in (Side.LEFT, Side.RIGHT)

    @property
    def outward(self) -> int:
        """Sign of the lead direction along the cross axis."""
        return -1 if self in (Side.LEFT, Side.TOP) else 1


class Packing(str, Enum):
    PACKED = "PACKED"
    SPREAD = "SPREAD"


class JustifyX(str, Enum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"


class JustifyY(str, Enum):
    TOP = "TOP"
    CENTER = "CENTER"
    BOTTOM = "BOTTOM"


class Align(str, Enum):
    """Axis-independent alignment used inside the layout engine."""

    START = "start"
    CENTER = "center"
    END = "end"

    @classmethod
    def from_justify(cls, justify: JustifyX | JustifyY) -> "Align":
        if justify in (JustifyX.LEFT, JustifyY.TOP):
            return cls.START
        if justify in (JustifyX.RIGHT, JustifyY.BOTTOM):
            return cls.END
        return cls.CENTER

    def offset(self, free: float) -> float:
        """Offset of an item inside ``free`` units of slack."""
        if self is Align.START:
            return 0.0
        if self is Align.END:
            return free
        return free / 2


class ScopeKind(str, Enum):
    DEFAULT = "default"
    TYPE = "type"
    GROUP = "group"
    WIRE = "wire"
    BOX = "box"
    FONT = "font"


FONT_SLANTS = ("normal", "italic", "oblique")
FONT_WEIGHTS = (
    "normal", "bold", "bolder", "lighter",
    "100", "200", "300", "400", "500", "600", "700", "800", "900",
)
FONT_STRETCHES = (
    "normal", "wider", "narrower",
    "ultra-condensed", "extra-condensed", "condensed", "semi-condensed",
    "semi-expanded", "expanded", "extra-expanded", "ultra-expanded",
)
