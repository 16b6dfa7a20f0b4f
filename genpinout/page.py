"""Page size + DPI → canvas dimensions in device units."""

from __future__ import annotations

from dataclasses import dataclass

from genpinout.errors import ConfigError
from genpinout.style import (
    DEFAULT_DPI,
    DEFAULT_PAGE,
    MAX_DPI,
    MIN_DPI,
    MM_PER_INCH,
    PAGE_SIZES_MM,
)

ORIENTATIONS = ("P", "L")


@dataclass(frozen=True)
class CanvasDims:
    """Resolved canvas: physical size in mm and device size in pixels."""

    page_id: str
    dpi: int
    width_mm: float
    height_mm: float
    width: int
    height: int


@dataclass
class PageConfig:
    """Page settings accumulated during the Setup phase."""

    page_id: str = DEFAULT_PAGE
    dpi: int = DEFAULT_DPI

    def set_page(self, page_id: str) -> None:
        page_dimensions_mm(page_id)
        self.page_id = normalize_page_id(page_id)

    def set_dpi(self, dpi: int) -> None:
        check_dpi(dpi)
        self.dpi = dpi

    def resolve(self) -> CanvasDims:
        return resolve_canvas(self.page_id, self.dpi)


def normalize_page_id(page_id: str) -> str:
    return page_id.strip().upper()


def page_dimensions_mm(page_id: str) -> tuple[float, float]:
    """Physical (width, height) of a page id such as ``A4-L``."""
    name, _, orientation = normalize_page_id(page_id).rpartition("-")
    if name not in PAGE_SIZES_MM or orientation not in ORIENTATIONS:
        valid = ", ".join(f"{n}-{o}" for n in PAGE_SIZES_MM for o in ORIENTATIONS)
        raise ConfigError(f"unknown page type {page_id!r} (valid: {valid})", identifier=page_id)
    short, long_ = PAGE_SIZES_MM[name]
    if orientation == "L":
        return long_, short
    return short, long_


def check_dpi(dpi: int) -> None:
    if not MIN_DPI <= dpi <= MAX_DPI:
        raise ConfigError(
            f"DPI {dpi} out of range, must be between {MIN_DPI} and {MAX_DPI}",
            identifier=str(dpi),
        )


def resolve_canvas(page_id: str, dpi: int) -> CanvasDims:
    """Map a named page and DPI to device units."""
    width_mm, height_mm = page_dimensions_mm(page_id)
    check_dpi(dpi)
    return CanvasDims(
        page_id=normalize_page_id(page_id),
        dpi=dpi,
        width_mm=width_mm,
        height_mm=height_mm,
        width=int(round(width_mm * dpi / MM_PER_INCH)),
        height=int(round(height_mm * dpi / MM_PER_INCH)),
    )
