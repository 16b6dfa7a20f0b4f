"""Theme store: style attributes keyed by scope and label column.

Every style lookup goes through one cascade, highest precedence first::

    per-pin override > Wire (leads only) > Group > Type > Default > built-in

Inside each scope the entry for the requested label column wins over the
scope's column-independent entry. Fields cascade independently: a level
that sets only ``fill_color`` leaves every other field to the levels below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict

from genpinout.errors import PhaseError, SchemaError, UnresolvedReferenceError
from genpinout.style import BOX_COLUMN, BUILTIN_STYLE, FIXED_LABELS, NUMBER_COLUMN
from genpinout.types import ScopeKind

log = logging.getLogger(__name__)

THEME_CASCADE = (
    "override",
    ScopeKind.WIRE,
    ScopeKind.GROUP,
    ScopeKind.TYPE,
    ScopeKind.DEFAULT,
)


class StyleAttributes(BaseModel):
    """A partially specified attribute set. ``None`` means "not set here"."""

    model_config = ConfigDict(frozen=True)

    border_color: Optional[str] = None
    fill_color: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None
    font_color: Optional[str] = None
    opacity: Optional[float] = None
    border_width: Optional[float] = None
    border_opacity: Optional[float] = None
    font_slant: Optional[str] = None
    font_weight: Optional[str] = None
    font_stretch: Optional[str] = None
    font_outline: Optional[str] = None
    font_outline_width: Optional[float] = None

    def merged(self, other: StyleAttributes) -> StyleAttributes:
        """Field-wise overwrite: set fields of ``other`` win."""
        return self.model_copy(update=other.model_dump(exclude_none=True))

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class ResolvedStyle(BaseModel):
    """A fully populated attribute set, ready for drawing."""

    model_config = ConfigDict(frozen=True)

    border_color: str
    fill_color: str
    font_family: str
    font_size: float
    font_color: str
    opacity: float
    border_width: float
    border_opacity: float
    font_slant: str
    font_weight: str
    font_stretch: str
    font_outline: str
    font_outline_width: float


@dataclass(frozen=True)
class Scope:
    kind: ScopeKind
    name: Optional[str] = None

    def __str__(self) -> str:
        if self.name is None:
            return self.kind.value.upper()
        return f"{self.kind.value.upper()} {self.name!r}"


DEFAULT_SCOPE = Scope(ScopeKind.DEFAULT)


@dataclass(frozen=True)
class BoxGeometry:
    """Shape parameters of a named box theme (device units, skew in degrees)."""

    width: float = 0.0
    height: float = 0.0
    corner_rx: float = 0.0
    corner_ry: float = 0.0
    skew: float = 0.0
    skew_offset: float = 0.0


class StyledPin(Protocol):
    """What the cascade needs to know about a pin."""

    pin_type: Optional[str]
    group: Optional[str]
    wire: Optional[str]
    override: Optional[StyleAttributes]


def flatten(layers: Sequence[StyleAttributes]) -> ResolvedStyle:
    """Collapse layers (highest precedence first) onto the built-in fallbacks."""
    values = dict(BUILTIN_STYLE)
    for layer in reversed(layers):
        values.update(layer.model_dump(exclude_none=True))
    return ResolvedStyle(**values)


class ThemeStore:
    """Style attributes for one document.

    Recording happens during the Setup phase; ``freeze()`` is called at the
    draw marker and every later mutation is rejected.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[Scope, Optional[str]], StyleAttributes] = {}
        self._declared: set[Scope] = {DEFAULT_SCOPE}
        self._columns: Optional[tuple[str, ...]] = None
        self._boxes: dict[str, BoxGeometry] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Label schema
    # ------------------------------------------------------------------

    @property
    def columns(self) -> tuple[str, ...]:
        """Function-label column names (empty until LABELS is declared)."""
        return self._columns or ()

    def declare_labels(self, header: Sequence[str]) -> None:
        """Fix the label schema from a ``DEFAULT, TYPE, GROUP, <cols...>`` header."""
        self._check_mutable("LABELS")
        if self._columns is not None:
            raise SchemaError("label columns can only be declared once", identifier="LABELS")

        fixed = tuple(header[: len(FIXED_LABELS)])
        if fixed != FIXED_LABELS:
            raise SchemaError(
                f"LABELS must start with {', '.join(FIXED_LABELS)}, got {', '.join(fixed) or 'nothing'}",
                identifier="LABELS",
            )
        columns = tuple(header[len(FIXED_LABELS):])
        if not columns:
            raise SchemaError("LABELS needs at least one function column", identifier="LABELS")
        seen: set[str] = set()
        for name in columns:
            if not name or name in FIXED_LABELS or name in seen:
                raise SchemaError(f"invalid or duplicate label column {name!r}", identifier=name)
            seen.add(name)

        self._columns = columns
        log.debug("Label schema: %s", ", ".join(columns))

    def column_key(self, index: int) -> str:
        """Name of function-label column ``index``."""
        if self._columns is None:
            raise SchemaError("label columns used before LABELS was declared", identifier=str(index))
        if index < 0 or index >= len(self._columns):
            raise SchemaError(
                f"label column {index + 1} not declared (schema has {len(self._columns)})",
                identifier=str(index + 1),
            )
        return self._columns[index]

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_style(
        self, scope: Scope, column: Optional[str], attributes: StyleAttributes
    ) -> None:
        """Merge ``attributes`` into the (scope, column) entry, later fields win."""
        self._check_mutable(str(scope))
        if attributes.is_empty():
            return
        self._declared.add(scope)
        key = (scope, column)
        current = self._entries.get(key)
        self._entries[key] = attributes if current is None else current.merged(attributes)

    def record_row(
        self,
        field: str,
        default: object,
        type_value: object,
        group_value: object,
        values: Sequence[object],
    ) -> None:
        """Apply one style row (``FILL COLOR, <default>, <type>, <group>, <cols...>``)."""
        if values and self._columns is None:
            raise SchemaError("per-column style values given before LABELS", identifier=field)
        if len(values) > len(self.columns):
            raise SchemaError(
                f"{len(values)} column values for {len(self.columns)} label columns",
                identifier=field,
            )

        cells: list[tuple[Optional[str], object]] = [
            (None, default),
            (BOX_COLUMN, type_value),
            (NUMBER_COLUMN, group_value),
        ]
        cells.extend((self.column_key(i), value) for i, value in enumerate(values))
        for column, value in cells:
            if value is not None:
                self.record_style(DEFAULT_SCOPE, column, StyleAttributes(**{field: value}))

    def declare(
        self,
        scope: Scope,
        attributes: StyleAttributes,
        columns: Sequence[Optional[StyleAttributes]] = (),
    ) -> None:
        """Declare a named scope, replacing any earlier declaration of the same name."""
        self._check_mutable(str(scope))
        if len(columns) > len(self.columns):
            raise SchemaError(
                f"{scope} carries {len(columns)} column values for {len(self.columns)} label columns",
                identifier=scope.name,
            )
        if scope in self._declared:
            log.info("%s redeclared, replacing previous attributes", scope)
        for key in [k for k in self._entries if k[0] == scope]:
            del self._entries[key]

        self._declared.add(scope)
        if not attributes.is_empty():
            self._entries[(scope, None)] = attributes
        for i, column_attrs in enumerate(columns):
            if column_attrs is not None and not column_attrs.is_empty():
                self._entries[(scope, self.column_key(i))] = column_attrs

    def declare_box(
        self, name: str, attributes: StyleAttributes, geometry: BoxGeometry
    ) -> None:
        """Declare a named box theme (style plus shape)."""
        self.declare(Scope(ScopeKind.BOX, name), attributes)
        self._boxes[name] = geometry

    def box_geometry(self, name: str) -> BoxGeometry:
        self.require(Scope(ScopeKind.BOX, name))
        return self._boxes[name]

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self, what: str) -> None:
        if self._frozen:
            raise PhaseError(f"theme is fixed once drawing starts ({what})", identifier=what)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def is_declared(self, scope: Scope) -> bool:
        return scope in self._declared

    def require(self, scope: Scope) -> None:
        if scope not in self._declared:
            raise UnresolvedReferenceError(f"{scope} is not declared", identifier=scope.name)

    def lookup(self, scope: Scope, column: Optional[str] = None) -> Optional[StyleAttributes]:
        """The raw entry recorded for (scope, column), without cascading."""
        return self._entries.get((scope, column))

    def layers(
        self,
        scopes: Sequence[Scope],
        column: Optional[str] = None,
        override: Optional[StyleAttributes] = None,
    ) -> list[StyleAttributes]:
        """Entries for ``scopes`` (highest first), column entry before scope entry."""
        found: list[StyleAttributes] = []
        if override is not None:
            found.append(override)
        for scope in scopes:
            self.require(scope)
            keys = (column, None) if column is not None else (None,)
            for key in keys:
                entry = self._entries.get((scope, key))
                if entry is not None:
                    found.append(entry)
        return found

    def pin_scopes(self, pin: Optional[StyledPin], lead: bool = False) -> list[Scope]:
        """Scopes consulted for ``pin`` in cascade order, Default last."""
        names: dict[object, Optional[str]] = {}
        if pin is not None:
            names = {
                ScopeKind.WIRE: pin.wire if lead else None,
                ScopeKind.GROUP: pin.group,
                ScopeKind.TYPE: pin.pin_type,
            }
        scopes: list[Scope] = []
        for kind in THEME_CASCADE:
            if kind is ScopeKind.DEFAULT:
                scopes.append(DEFAULT_SCOPE)
            elif names.get(kind):
                scopes.append(Scope(kind, names[kind]))
        return scopes

    def resolve(
        self,
        pin: Optional[StyledPin] = None,
        column: Optional[str] = None,
        lead: bool = False,
    ) -> ResolvedStyle:
        """Fully resolved style for one element of ``pin`` in label ``column``."""
        override = pin.override if pin is not None else None
        return flatten(self.layers(self.pin_scopes(pin, lead=lead), column, override))

    def resolve_box(self, name: str) -> ResolvedStyle:
        """Style of a named box theme, falling back on Default."""
        return flatten(self.layers([Scope(ScopeKind.BOX, name), DEFAULT_SCOPE]))

    def resolve_font(self, name: Optional[str]) -> ResolvedStyle:
        """Style of a named text font theme (or just Default when ``name`` is empty)."""
        scopes = [Scope(ScopeKind.FONT, name)] if name else []
        scopes.append(DEFAULT_SCOPE)
        return flatten(self.layers(scopes))
