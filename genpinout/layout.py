"""Layout engine for pin-set placement.

Turns one PINSET declaration plus the pins that follow it into positioned
boxes, leads and label anchors, relative to the current anchor.

Coordinates are split into a primary axis (along the row of pins) and a
cross axis (along the leads):

- LEFT/RIGHT sides: primary is y, leads run along x
- TOP/BOTTOM sides: primary is x, leads run along y and text is rotated -90
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, Union

from genpinout.commands import Pin, PinSet, PinText
from genpinout.cursor import Anchor
from genpinout.errors import LayoutError, SchemaError, UnresolvedReferenceError
from genpinout.style import BASELINE_SHIFT, BOX_COLUMN, NUMBER_COLUMN, TEXT_PADDING
from genpinout.theme import ResolvedStyle, ThemeStore
from genpinout.types import Align, Packing, Side

log = logging.getLogger(__name__)

ROTATED = -90.0


class FontMetrics(Protocol):
    """Advance width of ``text`` drawn in ``style``, in device units."""

    def width(self, text: str, style: ResolvedStyle) -> float: ...


@dataclass
class PinEntry:
    """A PIN or PINTEXT command with its input position."""

    index: int
    pin: Union[Pin, PinText]


@dataclass
class PlacedLabel:
    x: float
    y: float
    text: str
    style: ResolvedStyle
    anchor: str = "middle"
    rotation: float = 0.0


@dataclass
class PlacedPin:
    """One pin with resolved geometry and styles."""

    entry: PinEntry
    offset: float  # primary-axis coordinate of the pin's slot
    box: tuple[float, float, float, float]  # x, y, width, height
    box_style: ResolvedStyle
    lead: Optional[tuple[float, float, float, float]]
    lead_style: ResolvedStyle
    labels: list[PlacedLabel] = field(default_factory=list)


@dataclass
class PinSetLayout:
    """Complete layout of one pin-set run."""

    spec: PinSet
    pins: list[PlacedPin]
    advance: float  # primary-axis distance the anchor moves afterwards
    column_widths: list[float] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def validate_pinset(spec: PinSet, count: int) -> None:
    """Reject empty runs and impossible geometry, including NaN and infinities."""
    if count == 0:
        raise LayoutError(f"{spec.side.value} pin-set has no pins", identifier="PINSET")
    for name in ("pitch", "box_length", "box_thickness"):
        value = getattr(spec, name)
        if not (math.isfinite(value) and value > 0):
            raise LayoutError(f"pin-set {name} must be positive, got {value}", identifier=name)
    if spec.packing is Packing.SPREAD and not (math.isfinite(spec.span) and spec.span > 0):
        raise LayoutError(f"spread pin-set needs a positive span, got {spec.span}", identifier="span")
    for name in ("lead_length", "column_gap", "column_width", "corner_radius"):
        value = getattr(spec, name)
        if not (math.isfinite(value) and value >= 0):
            raise LayoutError(f"pin-set {name} must not be negative, got {value}", identifier=name)
    if not math.isfinite(spec.number_offset):
        raise LayoutError(f"pin-set number_offset must be finite, got {spec.number_offset}", identifier="number_offset")


def primary_align(spec: PinSet) -> Align:
    return Align.from_justify(spec.justify_y if spec.side.vertical else spec.justify_x)


def cross_align(spec: PinSet) -> Align:
    return Align.from_justify(spec.justify_x if spec.side.vertical else spec.justify_y)


def pin_step(spec: PinSet, count: int) -> float:
    """Effective spacing between neighbouring pins."""
    if spec.packing is Packing.PACKED:
        return spec.pitch
    if spec.centered:
        return spec.span / count
    return spec.span / max(count - 1, 1)


def pin_offsets(spec: PinSet, count: int) -> list[float]:
    """Primary-axis offset of each pin from the anchor."""
    step = pin_step(spec, count)
    if spec.packing is Packing.SPREAD and spec.centered:
        return [step / 2 + i * step for i in range(count)]
    if spec.packing is Packing.SPREAD and count == 1:
        return [primary_align(spec).offset(spec.span)]
    return [i * step for i in range(count)]


def footprint(spec: PinSet, count: int) -> float:
    """Primary-axis length a run occupies: one step per pin.

    A following run starting here keeps the same spacing across the seam.
    """
    return count * pin_step(spec, count)


def _point(side: Side, primary: float, cross: float) -> tuple[float, float]:
    if side.vertical:
        return cross, primary
    return primary, cross


def _rect(side: Side, primary: float, cross: float, along: float, across: float) -> tuple[float, float, float, float]:
    if side.vertical:
        return cross, primary, across, along
    return primary, cross, along, across


def _text_anchor(side: Side, align: Align) -> str:
    """SVG text-anchor for ``align`` along the cross axis.

    Rotated text advances towards -y, so its start sits at the bottom.
    """
    order = ("start", "middle", "end")
    i = (Align.START, Align.CENTER, Align.END).index(align)
    return order[i] if side.vertical else order[2 - i]


def _outward_anchor(side: Side) -> str:
    """Anchor for text that starts at a box edge and runs away from it."""
    return "start" if side in (Side.RIGHT, Side.TOP) else "end"


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

def check_references(entries: Sequence[PinEntry], theme: ThemeStore) -> None:
    """Every type, group, wire and font a pin names must be declared."""
    for n, entry in enumerate(entries, start=1):
        pin = entry.pin
        name = getattr(pin, "number", "") or pin.label
        for scope in theme.pin_scopes(pin, lead=True):
            if not theme.is_declared(scope):
                raise UnresolvedReferenceError(
                    f"pin {n} ({pin.keyword} {name!r}): {scope} is not declared",
                    index=entry.index,
                    identifier=scope.name,
                )
        if isinstance(pin, PinText) and pin.font:
            try:
                theme.resolve_font(pin.font)
            except UnresolvedReferenceError as exc:
                exc.with_index(entry.index)
                raise


def column_widths(
    spec: PinSet, entries: Sequence[PinEntry], theme: ThemeStore, metrics: FontMetrics
) -> list[float]:
    """Width of each function-label cell used by this run."""
    used = 0
    for entry in entries:
        if isinstance(entry.pin, Pin):
            functions = entry.pin.functions
            if len(functions) > len(theme.columns):
                raise SchemaError(
                    f"pin has {len(functions)} function labels, schema declares {len(theme.columns)}",
                    index=entry.index,
                    identifier=entry.pin.number or entry.pin.label,
                )
            used = max(used, len(functions))

    if spec.column_width > 0:
        return [spec.column_width] * used

    widths = [0.0] * used
    for entry in entries:
        if not isinstance(entry.pin, Pin):
            continue
        for j, text in enumerate(entry.pin.functions):
            if text:
                style = theme.resolve(entry.pin, theme.column_key(j))
                widths[j] = max(widths[j], metrics.width(text, style) + 2 * TEXT_PADDING)
    return widths


def layout_pinset(
    spec: PinSet,
    entries: Sequence[PinEntry],
    anchor: Anchor,
    theme: ThemeStore,
    metrics: FontMetrics,
) -> PinSetLayout:
    """Place ``entries`` along ``spec.side`` starting at ``anchor``.

    The anchor is advanced by the run's footprint along the primary axis.
    Nothing is placed if any pin fails validation.
    """
    validate_pinset(spec, len(entries))
    check_references(entries, theme)
    widths = column_widths(spec, entries, theme, metrics)

    side = spec.side
    out = side.outward
    ax, ay = anchor.position
    origin, edge = (ay, ax) if side.vertical else (ax, ay)

    rotation = 0.0 if side.vertical else ROTATED
    p_align = primary_align(spec)
    c_align = cross_align(spec)

    thickness = spec.box_thickness
    slot = max(spec.pitch, thickness)
    lead_end = edge + out * spec.lead_length
    box_far = lead_end + out * spec.box_length
    box_lo, box_hi = sorted((lead_end, box_far))
    label_cross = {
        Align.START: box_lo + TEXT_PADDING,
        Align.CENTER: (box_lo + box_hi) / 2,
        Align.END: box_hi - TEXT_PADDING,
    }[c_align]

    offsets = pin_offsets(spec, len(entries))
    placed: list[PlacedPin] = []

    for entry, offset in zip(entries, offsets):
        pin = entry.pin
        primary = origin + offset + p_align.offset(slot - thickness)
        center = primary + thickness / 2

        box_style = theme.resolve(pin, BOX_COLUMN)
        lead_style = theme.resolve(pin, lead=True)
        lead = None
        if spec.lead_length > 0:
            lead = (*_point(side, center, edge), *_point(side, center, lead_end))

        pp = PlacedPin(
            entry=entry,
            offset=origin + offset,
            box=_rect(side, primary, box_lo, thickness, spec.box_length),
            box_style=box_style,
            lead=lead,
            lead_style=lead_style,
        )

        if pin.label:
            x, y = _point(side, center + box_style.font_size * BASELINE_SHIFT, label_cross)
            pp.labels.append(PlacedLabel(x, y, pin.label, box_style, _text_anchor(side, c_align), rotation))

        if isinstance(pin, Pin):
            if pin.number:
                style = theme.resolve(pin, NUMBER_COLUMN)
                shifted = center - spec.number_offset + style.font_size * BASELINE_SHIFT
                x, y = _point(side, shifted, (edge + lead_end) / 2)
                pp.labels.append(PlacedLabel(x, y, pin.number, style, "middle", rotation))

            distance = 0.0
            for j, width in enumerate(widths):
                text = pin.functions[j] if j < len(pin.functions) else ""
                if not text and not spec.keep_empty_columns:
                    continue
                distance += spec.column_gap
                if text:
                    style = theme.resolve(pin, theme.column_key(j))
                    cell_center = box_far + out * (distance + width / 2)
                    x, y = _point(side, center + style.font_size * BASELINE_SHIFT, cell_center)
                    pp.labels.append(PlacedLabel(x, y, text, style, "middle", rotation))
                distance += width

        elif pin.text:
            style = theme.resolve_font(pin.font)
            x, y = _point(
                side,
                center + style.font_size * BASELINE_SHIFT,
                box_far + out * spec.column_gap,
            )
            pp.labels.append(PlacedLabel(x, y, pin.text, style, _outward_anchor(side), rotation))

        placed.append(pp)

    advance = footprint(spec, len(entries))
    anchor.advance(side.vertical, advance)
    log.debug(
        "Pin-set %s/%s: %d pins, anchor advanced %.2f",
        side.value, spec.packing.value, len(placed), advance,
    )
    return PinSetLayout(spec=spec, pins=placed, advance=advance, column_widths=widths)
