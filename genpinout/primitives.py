"""Positioned drawing primitives.

Everything here is in device units with a fully resolved style; the
emitter draws them in list order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from genpinout.theme import ResolvedStyle


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    style: ResolvedStyle
    rx: float = 0.0
    ry: float = 0.0
    skew: float = 0.0  # degrees, applied along x
    skew_offset: float = 0.0  # pivot y relative to the rect center


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    style: ResolvedStyle


@dataclass(frozen=True)
class TextRun:
    """A single line of text. ``anchor`` is start, middle or end."""

    x: float
    y: float
    text: str
    style: ResolvedStyle
    anchor: str = "middle"
    rotation: float = 0.0
    edge_color: Optional[str] = None


@dataclass(frozen=True)
class ImageRef:
    """Raster image placed with its top-left corner at (x, y)."""

    path: str
    x: float
    y: float
    width: float
    height: float
    intrinsic_width: int
    intrinsic_height: int
    crop: Optional[tuple[int, int, int, int]] = None
    rotation: float = 0.0


@dataclass(frozen=True)
class IconRef:
    path: str
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0


Primitive = Union[Rect, Line, TextRun, ImageRef, IconRef]
