"""Primitive assembler: Draw-phase commands → positioned primitives.

Walks a finished Document's draw commands in input order. Pin runs go to
the layout engine; boxes, images, icons and messages are translated
directly. Output order is paint order and always follows command order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from genpinout.commands import (
    Anchor as AnchorCommand,
    DrawBox,
    EndMessage,
    Icon,
    Image,
    Message,
    PIN_COMMANDS,
    PinSet,
    Size,
    Text,
)
from genpinout.cursor import Anchor
from genpinout.document import Document
from genpinout.errors import LayoutError, PinoutError
from genpinout.layout import FontMetrics, PinEntry, PinSetLayout, layout_pinset
from genpinout.page import CanvasDims
from genpinout.primitives import IconRef, ImageRef, Line, Primitive, Rect, TextRun
from genpinout.resources import HeuristicMetrics, PillowImageLoader, SvgIconLoader
from genpinout.style import BASELINE_SHIFT, LINE_HEIGHT
from genpinout.theme import ResolvedStyle
from genpinout.types import JustifyX, JustifyY

log = logging.getLogger(__name__)

_ANCHORS = {JustifyX.LEFT: "start", JustifyX.CENTER: "middle", JustifyX.RIGHT: "end"}


@dataclass
class MessageState:
    """Settings of the current multi-line message. They carry over between messages."""

    x: Optional[float] = None
    y: Optional[float] = None
    line_step: Optional[float] = None
    font: Optional[str] = None
    font_size: Optional[float] = None
    justify_x: JustifyX = JustifyX.CENTER
    justify_y: JustifyY = JustifyY.CENTER
    lines: list[list[tuple[Text, ResolvedStyle]]] = field(default_factory=list)
    open: bool = False


def assemble(
    document: Document,
    images: Optional[PillowImageLoader] = None,
    icons: Optional[SvgIconLoader] = None,
    metrics: Optional[FontMetrics] = None,
) -> list[Primitive]:
    """Lay out ``document`` and return its primitives in paint order."""
    return Assembler(document, images=images, icons=icons, metrics=metrics).run()


class Assembler:
    """One assembly run. Owns the anchor; the document is only read."""

    def __init__(
        self,
        document: Document,
        images: Optional[PillowImageLoader] = None,
        icons: Optional[SvgIconLoader] = None,
        metrics: Optional[FontMetrics] = None,
    ):
        self.document = document
        self.theme = document.theme
        self.images = images or PillowImageLoader()
        self.icons = icons or SvgIconLoader()
        self.metrics = metrics or HeuristicMetrics()
        self.anchor = Anchor()
        self.layouts: list[PinSetLayout] = []
        self._out: list[Primitive] = []
        self._pinset: Optional[PinSet] = None
        self._pinset_index = 0
        self._pending: list[PinEntry] = []
        self._awaiting_pins = False
        self._message = MessageState()

    @property
    def canvas(self) -> CanvasDims:
        if self.document.canvas is None:
            raise LayoutError("canvas not resolved before drawing", identifier="PAGE")
        return self.document.canvas

    def run(self) -> list[Primitive]:
        try:
            for classified in self.document.commands:
                try:
                    self._step(classified.index, classified.command)
                except PinoutError as exc:
                    exc.with_index(classified.index)
                    raise
            self._flush_pins()
            self._close_message()
        except PinoutError as exc:
            self.document.locate(exc)
            raise
        log.info("Assembled %d primitives from %d draw commands", len(self._out), len(self.document.commands))
        return self._out

    def _step(self, index: int, cmd) -> None:
        if isinstance(cmd, PIN_COMMANDS):
            if self._pinset is None:
                raise LayoutError(f"{cmd.keyword} before any PINSET", identifier=cmd.keyword)
            self._close_message()
            self._pending.append(PinEntry(index=index, pin=cmd))
            self._awaiting_pins = False
            return

        self._flush_pins()

        if isinstance(cmd, Text):
            self._add_text(cmd)
            return
        self._close_message()

        if isinstance(cmd, PinSet):
            self._pinset = cmd
            self._pinset_index = index
            self._awaiting_pins = True
        elif isinstance(cmd, AnchorCommand):
            self.anchor.set(cmd.x.resolve(self.canvas.width), cmd.y.resolve(self.canvas.height))
        elif isinstance(cmd, DrawBox):
            self._draw_box(cmd)
        elif isinstance(cmd, Image):
            self._draw_image(cmd)
        elif isinstance(cmd, Icon):
            self._draw_icon(cmd)
        elif isinstance(cmd, Message):
            self._open_message(cmd)
        elif isinstance(cmd, EndMessage):
            pass
        else:
            raise LayoutError(f"cannot draw {cmd.keyword}", identifier=cmd.keyword)

    # ------------------------------------------------------------------
    # Pin-sets
    # ------------------------------------------------------------------

    def _flush_pins(self) -> None:
        if self._awaiting_pins:
            raise LayoutError(
                f"{self._pinset.side.value} pin-set has no pins",
                index=self._pinset_index,
                identifier="PINSET",
            )
        if not self._pending:
            return

        entries, self._pending = self._pending, []
        try:
            result = layout_pinset(self._pinset, entries, self.anchor, self.theme, self.metrics)
        except PinoutError as exc:
            exc.with_index(self._pinset_index)
            raise
        self.layouts.append(result)

        radius = result.spec.corner_radius
        for pp in result.pins:
            if pp.lead is not None:
                self._out.append(Line(*pp.lead, style=pp.lead_style))
            self._out.append(Rect(*pp.box, style=pp.box_style, rx=radius, ry=radius))
            for label in pp.labels:
                self._out.append(TextRun(
                    x=label.x, y=label.y, text=label.text, style=label.style,
                    anchor=label.anchor, rotation=label.rotation,
                ))

    # ------------------------------------------------------------------
    # Standalone shapes
    # ------------------------------------------------------------------

    def _draw_box(self, cmd: DrawBox) -> None:
        geometry = self.theme.box_geometry(cmd.theme)
        style = self.theme.resolve_box(cmd.theme)
        canvas = self.canvas

        x = cmd.x.resolve(canvas.width)
        y = cmd.y.resolve(canvas.height)
        width = cmd.width.resolve(canvas.width) if cmd.width else geometry.width
        height = cmd.height.resolve(canvas.height) if cmd.height else geometry.height
        if width <= 0 or height <= 0:
            raise LayoutError(f"box {cmd.theme!r} needs a positive size, got {width}x{height}", identifier=cmd.theme)

        self._out.append(Rect(
            x, y, width, height, style=style,
            rx=geometry.corner_rx, ry=geometry.corner_ry,
            skew=geometry.skew, skew_offset=geometry.skew_offset,
        ))
        if not cmd.text:
            return

        fs = style.font_size
        tx = {JustifyX.LEFT: x, JustifyX.CENTER: x + width / 2, JustifyX.RIGHT: x + width}[cmd.justify_x]
        ty = {
            JustifyY.TOP: y + fs,
            JustifyY.CENTER: y + height / 2 + fs * BASELINE_SHIFT,
            JustifyY.BOTTOM: y + height - fs / 2,
        }[cmd.justify_y]
        self._out.append(TextRun(tx, ty, cmd.text, style=style, anchor=_ANCHORS[cmd.justify_x]))

    def _place(
        self,
        x: Size,
        y: Size,
        width: Optional[Size],
        height: Optional[Size],
        natural: tuple[float, float],
    ) -> tuple[float, float, float, float]:
        """Top-left and size of an item centered at (x, y).

        A missing width or height follows the natural aspect ratio.
        """
        canvas = self.canvas
        nw, nh = natural
        w = width.resolve(canvas.width) if width else None
        h = height.resolve(canvas.height) if height else None
        if w is None and h is None:
            w, h = nw, nh
        elif w is None:
            w = h * nw / nh
        elif h is None:
            h = w * nh / nw
        if w <= 0 or h <= 0:
            raise LayoutError(f"non-positive size {w}x{h}")
        cx, cy = x.resolve(canvas.width), y.resolve(canvas.height)
        return cx - w / 2, cy - h / 2, w, h

    def _draw_image(self, cmd: Image) -> None:
        iw, ih = self.images.size(cmd.path)
        natural: tuple[float, float] = (iw, ih)
        if cmd.crop is not None:
            cx, cy, cw, ch = cmd.crop
            if cx < 0 or cy < 0 or cw <= 0 or ch <= 0 or cx + cw > iw or cy + ch > ih:
                raise LayoutError(f"crop {cmd.crop} outside {iw}x{ih} image {cmd.path}", identifier=cmd.path)
            natural = (cw, ch)

        x, y, w, h = self._place(cmd.x, cmd.y, cmd.width, cmd.height, natural)
        self._out.append(ImageRef(
            path=cmd.path, x=x, y=y, width=w, height=h,
            intrinsic_width=iw, intrinsic_height=ih,
            crop=cmd.crop, rotation=cmd.rotation,
        ))

    def _draw_icon(self, cmd: Icon) -> None:
        natural = self.icons.size(cmd.path)
        x, y, w, h = self._place(cmd.x, cmd.y, cmd.width, cmd.height, natural)
        self._out.append(IconRef(path=cmd.path, x=x, y=y, width=w, height=h, rotation=cmd.rotation))

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def _open_message(self, cmd: Message) -> None:
        state = self._message
        if cmd.font:
            self.theme.resolve_font(cmd.font)
        for name in ("x", "y", "line_step", "font", "font_size"):
            value = getattr(cmd, name)
            if value is not None:
                setattr(state, name, value)
        state.justify_x = cmd.justify_x
        state.justify_y = cmd.justify_y
        if state.x is None or state.y is None:
            raise LayoutError("MESSAGE needs a position", identifier="MESSAGE")
        state.lines = [[]]
        state.open = True

    def _message_style(self) -> ResolvedStyle:
        style = self.theme.resolve_font(self._message.font)
        if self._message.font_size is not None:
            style = style.model_copy(update={"font_size": self._message.font_size})
        return style

    def _add_text(self, cmd: Text) -> None:
        state = self._message
        if not state.open:
            raise LayoutError("TEXT outside of a MESSAGE", identifier="TEXT")
        style = self._message_style()
        if cmd.color:
            style = style.model_copy(update={"font_color": cmd.color})
        if cmd.message:
            state.lines[-1].append((cmd, style))
        if cmd.new_line:
            state.lines.append([])

    def _close_message(self) -> None:
        state = self._message
        if not state.open:
            return
        state.open = False

        base = self._message_style()
        fs = base.font_size
        step = state.line_step if state.line_step is not None else fs * LINE_HEIGHT
        shift = {
            JustifyY.TOP: fs / 2,
            JustifyY.CENTER: fs * BASELINE_SHIFT,
            JustifyY.BOTTOM: -fs / 2,
        }[state.justify_y]

        for n, segments in enumerate(state.lines):
            if not segments:
                continue
            widths = [self.metrics.width(cmd.message, style) for cmd, style in segments]
            total = sum(widths)
            x = state.x - {JustifyX.LEFT: 0.0, JustifyX.CENTER: total / 2, JustifyX.RIGHT: total}[state.justify_x]
            y = state.y + n * step + shift
            for (cmd, style), width in zip(segments, widths):
                self._out.append(TextRun(
                    x, y, cmd.message, style=style, anchor="start", edge_color=cmd.edge_color,
                ))
                x += width
        state.lines = []
