"""Built-in style fallbacks and geometry constants for pinout diagrams."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
DEFAULT_PAGE = "A4-L"
DEFAULT_DPI = 300
MIN_DPI = 50
MAX_DPI = 1200
MM_PER_INCH = 25.4

# Page sizes in mm, portrait orientation (width, height)
PAGE_SIZES_MM = {
    "A5": (148.0, 210.0),
    "A4": (210.0, 297.0),
    "A3": (297.0, 420.0),
    "A2": (420.0, 594.0),
    "A1": (594.0, 841.0),
    "LETTER": (215.9, 279.4),
    "LEGAL": (215.9, 355.6),
    "TABLOID": (279.4, 431.8),
}

# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------
COLOR_BLACK = "#000000"
COLOR_WHITE = "#FFFFFF"
COLOR_NONE = "none"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------
FONT_FAMILY = "sans-serif"
FONT_SIZE = 10.0          # device units
FONT_SLANT = "normal"
FONT_WEIGHT = "normal"
FONT_STRETCH = "normal"
LINE_HEIGHT = 1.2         # multiple of font size for message lines
BASELINE_SHIFT = 1 / 3    # fraction of font size that centers a glyph row

# ---------------------------------------------------------------------------
# Line weights / opacity
# ---------------------------------------------------------------------------
BORDER_WIDTH = 1.0
OPACITY = 1.0

# Fields of the built-in fallback attribute set (see theme.ResolvedStyle)
BUILTIN_STYLE = {
    "border_color": COLOR_BLACK,
    "fill_color": COLOR_WHITE,
    "font_family": FONT_FAMILY,
    "font_size": FONT_SIZE,
    "font_color": COLOR_BLACK,
    "opacity": OPACITY,
    "border_width": BORDER_WIDTH,
    "border_opacity": OPACITY,
    "font_slant": FONT_SLANT,
    "font_weight": FONT_WEIGHT,
    "font_stretch": FONT_STRETCH,
    "font_outline": COLOR_NONE,
    "font_outline_width": 0.0,
}

# ---------------------------------------------------------------------------
# Label columns
# ---------------------------------------------------------------------------
FIXED_LABELS = ("DEFAULT", "TYPE", "GROUP")
BOX_COLUMN = "TYPE"       # style column of the pin box and its primary label
NUMBER_COLUMN = "GROUP"   # style column of the pin-number label

# ---------------------------------------------------------------------------
# Pin text padding
# ---------------------------------------------------------------------------
TEXT_PADDING = 2.0        # device units between a box edge and its label
