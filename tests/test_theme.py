"""Test style recording and cascading resolution."""

import pytest

from genpinout.commands import Pin
from genpinout.errors import PhaseError, SchemaError, UnresolvedReferenceError
from genpinout.theme import DEFAULT_SCOPE, BoxGeometry, Scope, StyleAttributes, ThemeStore
from genpinout.types import ScopeKind

HEADER = ("DEFAULT", "TYPE", "GROUP", "GPIO", "ALT")


def _store() -> ThemeStore:
    theme = ThemeStore()
    theme.declare_labels(HEADER)
    return theme


def test_builtin_fallbacks():
    style = ThemeStore().resolve()
    assert style.border_color == "#000000"
    assert style.fill_color == "#FFFFFF"
    assert style.font_family == "sans-serif"
    assert style.font_size == 10.0
    assert style.opacity == 1.0
    assert style.border_width == 1.0


def test_fieldwise_cascade_fills_from_every_level():
    theme = _store()
    theme.record_style(DEFAULT_SCOPE, None, StyleAttributes(fill_color="yellow"))
    theme.declare(Scope(ScopeKind.TYPE, "Output"), StyleAttributes(border_color="blue"))

    style = theme.resolve(Pin(pin_type="Output"))
    assert style.fill_color == "yellow"
    assert style.border_color == "blue"


def test_group_beats_type():
    theme = _store()
    theme.declare(Scope(ScopeKind.TYPE, "Power"), StyleAttributes(fill_color="red", border_width=2))
    theme.declare(Scope(ScopeKind.GROUP, "Header"), StyleAttributes(fill_color="green"))

    style = theme.resolve(Pin(pin_type="Power", group="Header"))
    assert style.fill_color == "green"
    assert style.border_width == 2


def test_override_beats_everything():
    theme = _store()
    theme.declare(Scope(ScopeKind.GROUP, "Header"), StyleAttributes(fill_color="green"))
    pin = Pin(group="Header", override=StyleAttributes(fill_color="pink"))
    assert theme.resolve(pin).fill_color == "pink"


def test_wire_only_styles_leads():
    theme = _store()
    theme.declare(Scope(ScopeKind.WIRE, "SPI"), StyleAttributes(border_color="orange", border_width=3))
    pin = Pin(wire="SPI")
    assert theme.resolve(pin, lead=True).border_color == "orange"
    assert theme.resolve(pin).border_color == "#000000"


def test_column_entry_before_scope_entry():
    theme = _store()
    theme.record_row("fill_color", "white", None, None, ["#eeeeee", None])
    theme.declare(
        Scope(ScopeKind.TYPE, "IO"),
        StyleAttributes(fill_color="grey"),
        [None, StyleAttributes(fill_color="cyan")],
    )

    assert theme.resolve(None, "GPIO").fill_color == "#eeeeee"
    assert theme.resolve(None, "ALT").fill_color == "white"
    # Type's scope-wide entry still outranks Default's column entry
    assert theme.resolve(Pin(pin_type="IO"), "GPIO").fill_color == "grey"
    assert theme.resolve(Pin(pin_type="IO"), "ALT").fill_color == "cyan"


def test_record_row_fixed_cells():
    theme = _store()
    theme.record_row("font_size", 10.0, 12.0, 8.0, [])
    assert theme.resolve(None, "TYPE").font_size == 12.0
    assert theme.resolve(None, "GROUP").font_size == 8.0
    assert theme.resolve(None, "GPIO").font_size == 10.0


def test_record_style_merges_fields():
    theme = _store()
    theme.record_style(DEFAULT_SCOPE, None, StyleAttributes(fill_color="red"))
    theme.record_style(DEFAULT_SCOPE, None, StyleAttributes(border_color="blue"))
    theme.record_style(DEFAULT_SCOPE, None, StyleAttributes(fill_color="green"))
    entry = theme.lookup(DEFAULT_SCOPE)
    assert entry.fill_color == "green"
    assert entry.border_color == "blue"


def test_declare_replaces_previous():
    theme = _store()
    scope = Scope(ScopeKind.TYPE, "Power")
    theme.declare(scope, StyleAttributes(fill_color="red", border_color="black"))
    theme.declare(scope, StyleAttributes(fill_color="orange"))
    style = theme.resolve(Pin(pin_type="Power"))
    assert style.fill_color == "orange"
    assert style.border_color == "#000000"


def test_undeclared_type_raises():
    theme = _store()
    with pytest.raises(UnresolvedReferenceError) as exc:
        theme.resolve(Pin(pin_type="Missing"))
    assert exc.value.identifier == "Missing"


def test_labels_must_start_with_fixed_cells():
    with pytest.raises(SchemaError):
        ThemeStore().declare_labels(("TYPE", "DEFAULT", "GROUP", "GPIO"))


def test_labels_declared_once():
    theme = _store()
    with pytest.raises(SchemaError):
        theme.declare_labels(HEADER)


def test_too_many_column_values():
    theme = _store()
    with pytest.raises(SchemaError):
        theme.record_row("fill_color", None, None, None, ["a", "b", "c"])
    with pytest.raises(SchemaError):
        theme.declare(Scope(ScopeKind.TYPE, "X"), StyleAttributes(), [None, None, None])


def test_column_values_need_labels():
    with pytest.raises(SchemaError):
        ThemeStore().record_row("fill_color", None, None, None, ["red"])


def test_frozen_store_rejects_recording():
    theme = _store()
    theme.freeze()
    with pytest.raises(PhaseError):
        theme.record_style(DEFAULT_SCOPE, None, StyleAttributes(fill_color="red"))
    with pytest.raises(PhaseError):
        theme.declare(Scope(ScopeKind.TYPE, "Late"), StyleAttributes())


def test_resolution_is_repeatable():
    theme = _store()
    theme.declare(Scope(ScopeKind.TYPE, "Power"), StyleAttributes(fill_color="red"))
    pin = Pin(pin_type="Power", override=StyleAttributes(font_size=14))
    assert theme.resolve(pin, "GPIO") == theme.resolve(pin, "GPIO")


def test_box_and_font_themes():
    theme = _store()
    theme.declare_box("Note", StyleAttributes(fill_color="yellow"), BoxGeometry(width=50, height=20))
    theme.declare(Scope(ScopeKind.FONT, "Title"), StyleAttributes(font_size=24, font_weight="bold"))

    assert theme.resolve_box("Note").fill_color == "yellow"
    assert theme.box_geometry("Note").width == 50
    assert theme.resolve_font("Title").font_size == 24
    assert theme.resolve_font(None).font_size == 10.0
    with pytest.raises(UnresolvedReferenceError):
        theme.resolve_box("Missing")
    with pytest.raises(UnresolvedReferenceError):
        theme.resolve_font("Missing")
