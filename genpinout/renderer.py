"""SvgRenderer: primitives → SVG → PNG.

Serializes an assembled primitive list onto a canvas. Images and icons are
embedded as base64 data URIs so the SVG is self-contained. PNG output goes
through CairoSVG.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Optional, Sequence

from genpinout.errors import ResourceError
from genpinout.page import CanvasDims
from genpinout.primitives import IconRef, ImageRef, Line, Primitive, Rect, TextRun
from genpinout.resources import PillowImageLoader, SvgIconLoader
from genpinout.style import COLOR_NONE
from genpinout.theme import ResolvedStyle

log = logging.getLogger(__name__)

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".svg": "image/svg+xml",
}


class SvgRenderer:
    """Renders a primitive list into SVG and PNG."""

    def __init__(
        self,
        canvas: CanvasDims,
        primitives: Sequence[Primitive],
        font_links: Sequence[str] = (),
        images: Optional[PillowImageLoader] = None,
        icons: Optional[SvgIconLoader] = None,
    ):
        self.canvas = canvas
        self.primitives = list(primitives)
        self.font_links = list(font_links)
        self.images = images or PillowImageLoader()
        self.icons = icons or SvgIconLoader()

    def render_svg(self) -> str:
        """Generate the complete SVG document."""
        svg_lines = [self._svg_header()]

        if self.font_links:
            svg_lines.append(self._font_imports())

        for prim in self.primitives:
            if isinstance(prim, Rect):
                svg_lines.append(self._draw_rect(prim))
            elif isinstance(prim, Line):
                svg_lines.append(self._draw_line(prim))
            elif isinstance(prim, TextRun):
                svg_lines.append(self._draw_text(prim))
            elif isinstance(prim, ImageRef):
                svg_lines.append(self._draw_image(prim))
            elif isinstance(prim, IconRef):
                svg_lines.append(self._draw_icon(prim))
            else:
                raise TypeError(f"not a primitive: {prim!r}")

        svg_lines.append("</svg>")
        return "\n".join(svg_lines)

    def render_svg_to_file(self, path: str | Path) -> None:
        svg = self.render_svg()
        Path(path).write_text(svg, encoding="utf-8")
        log.info("SVG written to %s (%d primitives)", path, len(self.primitives))

    def render_png(self) -> bytes:
        """Generate PNG bytes via CairoSVG, one pixel per device unit."""
        try:
            import cairosvg
        except ImportError:
            raise RuntimeError(
                "cairosvg required for PNG output: pip install 'genpinout[png]'"
            )

        return cairosvg.svg2png(
            bytestring=self.render_svg().encode("utf-8"),
            output_width=self.canvas.width,
            output_height=self.canvas.height,
        )

    def render_png_to_file(self, path: str | Path) -> None:
        """Render PNG to a file path."""
        png_bytes = self.render_png()
        with open(path, "wb") as f:
            f.write(png_bytes)
        log.info("PNG written to %s (%d bytes)", path, len(png_bytes))

    # ------------------------------------------------------------------
    # SVG construction helpers
    # ------------------------------------------------------------------

    def _svg_header(self) -> str:
        c = self.canvas
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'xmlns:xlink="http://www.w3.org/1999/xlink" '
            f'width="{_fmt(c.width_mm)}mm" height="{_fmt(c.height_mm)}mm" '
            f'viewBox="0 0 {c.width} {c.height}">'
        )

    def _font_imports(self) -> str:
        imports = "\n".join(f"@import url('{_escape_xml(link)}');" for link in self.font_links)
        return f"<defs><style>\n{imports}\n</style></defs>"

    def _draw_rect(self, r: Rect) -> str:
        s = r.style
        transform = ""
        if r.skew:
            cx, cy = r.x + r.width / 2, r.y + r.height / 2 + r.skew_offset
            transform = (
                f' transform="translate({_fmt(cx)} {_fmt(cy)}) skewX({_fmt(r.skew)}) '
                f'translate({_fmt(-cx)} {_fmt(-cy)})"'
            )
        corners = ""
        if r.rx or r.ry:
            corners = f' rx="{_fmt(r.rx)}" ry="{_fmt(r.ry)}"'
        return (
            f'<rect x="{_fmt(r.x)}" y="{_fmt(r.y)}" width="{_fmt(r.width)}" height="{_fmt(r.height)}"{corners} '
            f'fill="{_escape_xml(s.fill_color)}" fill-opacity="{_fmt(s.opacity)}" '
            f'stroke="{_escape_xml(s.border_color)}" stroke-width="{_fmt(s.border_width)}" '
            f'stroke-opacity="{_fmt(s.border_opacity)}"{transform}/>'
        )

    def _draw_line(self, ln: Line) -> str:
        s = ln.style
        return (
            f'<line x1="{_fmt(ln.x1)}" y1="{_fmt(ln.y1)}" x2="{_fmt(ln.x2)}" y2="{_fmt(ln.y2)}" '
            f'stroke="{_escape_xml(s.border_color)}" stroke-width="{_fmt(s.border_width)}" '
            f'stroke-opacity="{_fmt(s.border_opacity)}"/>'
        )

    def _draw_text(self, t: TextRun) -> str:
        s = t.style
        attrs = [
            f'x="{_fmt(t.x)}" y="{_fmt(t.y)}"',
            f'font-family="{_escape_xml(s.font_family)}" font-size="{_fmt(s.font_size)}"',
            f'fill="{_escape_xml(s.font_color)}"',
            f'text-anchor="{t.anchor}"',
        ]
        attrs.extend(_font_style_attrs(s))
        stroke = t.edge_color or (s.font_outline if s.font_outline != COLOR_NONE else None)
        if stroke:
            width = s.font_outline_width or 1
            attrs.append(f'stroke="{_escape_xml(stroke)}" stroke-width="{_fmt(width)}"')
        if t.rotation:
            attrs.append(f'transform="rotate({_fmt(t.rotation)} {_fmt(t.x)} {_fmt(t.y)})"')
        return f'<text {" ".join(attrs)}>{_escape_xml(t.text)}</text>'

    def _draw_image(self, img: ImageRef) -> str:
        href = _data_uri(self.images.resolve(img.path))
        if img.crop is None:
            body = (
                f'<image x="{_fmt(img.x)}" y="{_fmt(img.y)}" '
                f'width="{_fmt(img.width)}" height="{_fmt(img.height)}" '
                f'preserveAspectRatio="none" xlink:href="{href}"/>'
            )
        else:
            cx, cy, cw, ch = img.crop
            body = (
                f'<svg x="{_fmt(img.x)}" y="{_fmt(img.y)}" '
                f'width="{_fmt(img.width)}" height="{_fmt(img.height)}" '
                f'viewBox="{cx} {cy} {cw} {ch}" preserveAspectRatio="none">'
                f'<image width="{img.intrinsic_width}" height="{img.intrinsic_height}" '
                f'xlink:href="{href}"/></svg>'
            )
        return _rotated(body, img.rotation, img.x + img.width / 2, img.y + img.height / 2)

    def _draw_icon(self, icon: IconRef) -> str:
        href = _data_uri(self.icons.resolve(icon.path))
        body = (
            f'<image x="{_fmt(icon.x)}" y="{_fmt(icon.y)}" '
            f'width="{_fmt(icon.width)}" height="{_fmt(icon.height)}" '
            f'xlink:href="{href}"/>'
        )
        return _rotated(body, icon.rotation, icon.x + icon.width / 2, icon.y + icon.height / 2)


def _font_style_attrs(s: ResolvedStyle) -> list[str]:
    attrs = []
    if s.font_slant != "normal":
        attrs.append(f'font-style="{s.font_slant}"')
    if s.font_weight != "normal":
        attrs.append(f'font-weight="{s.font_weight}"')
    if s.font_stretch != "normal":
        attrs.append(f'font-stretch="{s.font_stretch}"')
    return attrs


def _rotated(body: str, rotation: float, cx: float, cy: float) -> str:
    if not rotation:
        return body
    return f'<g transform="rotate({_fmt(rotation)} {_fmt(cx)} {_fmt(cy)})">{body}</g>'


def _data_uri(path: Path) -> str:
    mime = MIME_TYPES.get(path.suffix.lower())
    if mime is None:
        raise ResourceError(f"unsupported image format: {path.name}", identifier=str(path))
    try:
        data = base64.standard_b64encode(path.read_bytes()).decode()
    except OSError as exc:
        raise ResourceError(f"cannot read {path}: {exc}", identifier=str(path)) from exc
    return f"data:{mime};base64,{data}"


def _fmt(value: float) -> str:
    """Compact decimal for attribute values."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _escape_xml(text: str) -> str:
    """Escape special XML characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )
