"""Resource collaborators: image/icon dimensions and font metrics.

The layout core only needs intrinsic sizes and text advance widths; the
bytes themselves are the emitter's business.
"""

from __future__ import annotations

import logging
import math
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from PIL import Image, ImageFont, UnidentifiedImageError

from genpinout.errors import ResourceError
from genpinout.theme import ResolvedStyle

log = logging.getLogger(__name__)

_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")


class PillowImageLoader:
    """Raster image sizes read with Pillow. Relative paths resolve against ``base_dir``."""

    def __init__(self, base_dir: str | Path = "."):
        self.base_dir = Path(base_dir)

    def resolve(self, path: str) -> Path:
        full = Path(path)
        if not full.is_absolute():
            full = self.base_dir / full
        if not full.is_file():
            raise ResourceError(f"image not found: {path}", identifier=path)
        return full

    def size(self, path: str) -> tuple[int, int]:
        full = self.resolve(path)
        try:
            with Image.open(full) as img:
                return img.size
        except (UnidentifiedImageError, OSError) as exc:
            raise ResourceError(f"cannot read image {path}: {exc}", identifier=path) from exc


class SvgIconLoader:
    """SVG icon sizes from the root element's width/height or viewBox."""

    def __init__(self, base_dir: str | Path = "."):
        self.base_dir = Path(base_dir)

    def resolve(self, path: str) -> Path:
        full = Path(path)
        if not full.is_absolute():
            full = self.base_dir / full
        if full.suffix.lower() != ".svg":
            raise ResourceError(f"icons must be SVG files: {path}", identifier=path)
        if not full.is_file():
            raise ResourceError(f"icon not found: {path}", identifier=path)
        return full

    def size(self, path: str) -> tuple[float, float]:
        full = self.resolve(path)
        try:
            root = ET.parse(full).getroot()
        except ET.ParseError as exc:
            raise ResourceError(f"cannot parse icon {path}: {exc}", identifier=path) from exc

        size = _header_size(root)
        if size is None:
            raise ResourceError(f"icon {path} has no width/height or viewBox", identifier=path)
        width, height = size
        if not all(math.isfinite(v) and v > 0 for v in size):
            raise ResourceError(f"icon {path} has an empty size {width}x{height}", identifier=path)
        return width, height


def _header_size(root: ET.Element) -> Optional[tuple[float, float]]:
    width = _parse_length(root.get("width"))
    height = _parse_length(root.get("height"))
    if width is not None and height is not None:
        return width, height

    view_box = root.get("viewBox")
    if view_box:
        parts = view_box.replace(",", " ").split()
        if len(parts) == 4:
            try:
                return float(parts[2]), float(parts[3])
            except ValueError:
                return None
    return None


def _parse_length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _LENGTH_RE.match(value)
    return float(match.group(1)) if match else None


# ---------------------------------------------------------------------------
# Font metrics
# ---------------------------------------------------------------------------

def heuristic_width(text: str, font_size: float) -> float:
    """Rough advance width of a proportional sans-serif font."""
    width = 0.0
    for ch in text:
        if ch == " ":
            width += font_size * 0.33
        elif ch in "il":
            width += font_size * 0.3
        elif ch in "mwMW@#":
            width += font_size * 0.9
        else:
            width += font_size * 0.6
    return width


class HeuristicMetrics:
    def width(self, text: str, style: ResolvedStyle) -> float:
        return heuristic_width(text, style.font_size)


class PillowMetrics:
    """Advance widths measured with Pillow TrueType fonts.

    ``font_paths`` maps a font family to a .ttf/.otf file. A mapped file that
    cannot be loaded is a ResourceError; families without a mapping are
    looked up by name and measured heuristically when Pillow cannot find them.
    """

    def __init__(self, font_paths: Optional[dict[str, str]] = None):
        self.font_paths = {k.lower(): v for k, v in (font_paths or {}).items()}
        self._cache: dict[tuple[str, int], Optional[ImageFont.FreeTypeFont]] = {}

    def font(self, family: str, size: float) -> Optional[ImageFont.FreeTypeFont]:
        key = (family.lower(), max(1, int(round(size))))
        if key in self._cache:
            return self._cache[key]

        path = self.font_paths.get(key[0])
        font: Optional[ImageFont.FreeTypeFont] = None
        if path is not None:
            try:
                font = ImageFont.truetype(path, key[1])
            except OSError as exc:
                raise ResourceError(f"cannot load font {path} for {family!r}: {exc}", identifier=family) from exc
        else:
            try:
                font = ImageFont.truetype(family, key[1])
            except OSError:
                log.debug("Font %r not found, using heuristic widths", family)

        self._cache[key] = font
        return font

    def width(self, text: str, style: ResolvedStyle) -> float:
        font = self.font(style.font_family, style.font_size)
        if font is None:
            return heuristic_width(text, style.font_size)
        return float(font.getlength(text))
