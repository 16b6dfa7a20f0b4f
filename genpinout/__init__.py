"""Pinout diagram generator: two-phase command documents → SVG."""

from genpinout.assembler import assemble
from genpinout.document import Document
from genpinout.errors import (
    ConfigError,
    LayoutError,
    PhaseError,
    PinoutError,
    ResourceError,
    SchemaError,
    UnresolvedReferenceError,
)
from genpinout.page import resolve_canvas
from genpinout.renderer import SvgRenderer

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "Document",
    "LayoutError",
    "PhaseError",
    "PinoutError",
    "ResourceError",
    "SchemaError",
    "SvgRenderer",
    "UnresolvedReferenceError",
    "assemble",
    "resolve_canvas",
]
