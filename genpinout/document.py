"""Document model: validated commands plus the theme and page they built."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from pydantic import ValidationError

from genpinout.commands import (
    BoxThemeDecl,
    Command,
    Dpi,
    DrawMarker,
    GoogleFont,
    GroupDecl,
    Labels,
    PageSize,
    StyleRow,
    TextFontDecl,
    TypeDecl,
    WireDecl,
)
from genpinout.errors import ConfigError, PinoutError
from genpinout.page import CanvasDims, PageConfig
from genpinout.phase import ClassifiedCommand, PhaseStateMachine
from genpinout.style import DEFAULT_DPI, DEFAULT_PAGE
from genpinout.theme import BoxGeometry, Scope, StyleAttributes, ThemeStore
from genpinout.types import Phase, PhaseTag, ScopeKind

log = logging.getLogger(__name__)


class Document:
    """One pinout document.

    Owns its phase, theme store and page configuration. Commands are fed in
    input order with ``add()``; setup commands are absorbed into the theme
    and page, draw commands are kept in order for the assembler.
    """

    def __init__(
        self,
        page_id: str = DEFAULT_PAGE,
        dpi: int = DEFAULT_DPI,
        source_lines: Sequence[int] = (),
    ):
        self.theme = ThemeStore()
        self.page = PageConfig()
        self.page.set_page(page_id)
        self.page.set_dpi(dpi)
        self.canvas: Optional[CanvasDims] = None
        self.commands: list[ClassifiedCommand] = []
        self.font_links: list[str] = []
        self.source_lines = list(source_lines)
        self._machine = PhaseStateMachine()
        self._count = 0

    @property
    def phase(self) -> Phase:
        return self._machine.phase

    @classmethod
    def from_commands(cls, commands: Iterable[Command], **kwargs) -> Document:
        doc = cls(**kwargs)
        try:
            for command in commands:
                doc.add(command)
        except PinoutError as exc:
            doc.locate(exc)
            raise
        return doc.finish()

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[str]], **kwargs) -> Document:
        from genpinout.parser import parse_rows

        return cls.from_commands(parse_rows(rows), **kwargs)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> Document:
        from genpinout.parser import read_numbered_rows

        numbered = read_numbered_rows(path)
        return cls.from_rows(
            [cells for _, cells in numbered],
            source_lines=[line for line, _ in numbered],
            **kwargs,
        )

    def add(self, command: Command) -> ClassifiedCommand:
        """Validate ``command`` against the phase gate and apply it."""
        index = self._count
        self._count += 1
        try:
            classified = self._machine.advance(command, index)
            self._apply(classified)
        except PinoutError as exc:
            exc.with_index(index)
            raise
        except ValidationError as exc:
            raise ConfigError(
                f"malformed {command.keyword} value: {exc.errors()[0]['msg']}",
                index=index,
                identifier=command.keyword,
            ) from exc
        return classified

    def locate(self, exc: PinoutError) -> PinoutError:
        """Attach the source line of the failing command, when it is known."""
        if exc.line is None and exc.index is not None and exc.index < len(self.source_lines):
            exc.line = self.source_lines[exc.index]
        return exc

    def finish(self) -> Document:
        """Resolve the canvas if the document never reached the draw marker."""
        if self.canvas is None:
            self.canvas = self.page.resolve()
        log.info(
            "Document ready: %d draw commands, canvas %s %dx%d @ %d dpi",
            len(self.commands),
            self.canvas.page_id,
            self.canvas.width,
            self.canvas.height,
            self.canvas.dpi,
        )
        return self

    # ------------------------------------------------------------------
    # Setup command handling
    # ------------------------------------------------------------------

    def _apply(self, classified: ClassifiedCommand) -> None:
        cmd = classified.command

        if isinstance(cmd, DrawMarker):
            self.canvas = self.page.resolve()
            self.theme.freeze()
            log.debug("Draw phase starts at command #%d", classified.index)
        elif isinstance(cmd, GoogleFont):
            self.font_links.append(cmd.link)
        elif cmd.phase is PhaseTag.DRAW:
            self.commands.append(classified)
        else:
            self._apply_setup(cmd)

    def _apply_setup(self, cmd: Command) -> None:
        theme = self.theme

        if isinstance(cmd, Labels):
            theme.declare_labels(cmd.header)
        elif isinstance(cmd, StyleRow):
            theme.record_row(cmd.attribute, cmd.default, cmd.type_value, cmd.group_value, cmd.columns)
        elif isinstance(cmd, TypeDecl):
            kind = ScopeKind.GROUP if isinstance(cmd, GroupDecl) else ScopeKind.TYPE
            theme.declare(
                Scope(kind, cmd.name),
                StyleAttributes(
                    fill_color=cmd.fill_color,
                    opacity=cmd.opacity,
                    border_color=cmd.border_color,
                    border_width=cmd.border_width,
                ),
                [StyleAttributes(fill_color=fill) if fill else None for fill in cmd.column_fills],
            )
        elif isinstance(cmd, WireDecl):
            theme.declare(
                Scope(ScopeKind.WIRE, cmd.name),
                StyleAttributes(
                    border_color=cmd.color,
                    border_opacity=cmd.opacity,
                    border_width=cmd.thickness,
                ),
            )
        elif isinstance(cmd, BoxThemeDecl):
            theme.declare_box(
                cmd.name,
                StyleAttributes(
                    border_color=cmd.border_color,
                    border_opacity=cmd.border_opacity,
                    fill_color=cmd.fill_color,
                    opacity=cmd.fill_opacity,
                    border_width=cmd.line_width,
                ),
                BoxGeometry(
                    width=cmd.width,
                    height=cmd.height,
                    corner_rx=cmd.corner_rx,
                    corner_ry=cmd.corner_ry,
                    skew=cmd.skew,
                    skew_offset=cmd.skew_offset,
                ),
            )
        elif isinstance(cmd, TextFontDecl):
            theme.declare(
                Scope(ScopeKind.FONT, cmd.name),
                StyleAttributes(
                    font_family=cmd.family,
                    font_size=cmd.size,
                    font_outline=cmd.outline_color,
                    font_color=cmd.color,
                    font_slant=cmd.slant,
                    font_weight=cmd.weight,
                    font_stretch=cmd.stretch,
                ),
            )
        elif isinstance(cmd, PageSize):
            self.page.set_page(cmd.page_id)
        elif isinstance(cmd, Dpi):
            self.page.set_dpi(cmd.dpi)
        else:
            raise ConfigError(f"unhandled setup command {cmd.keyword}", identifier=cmd.keyword)
