"""Error hierarchy for document processing.

Every error aborts the whole document. ``index`` is the position of the
offending command in the input (0-based) and ``identifier`` names the
unresolved or invalid thing, when there is one. Documents read from a file
also set ``line``, the 1-based source line of that command.
"""

from __future__ import annotations

from typing import Optional


class PinoutError(Exception):
    """Base class for all document processing errors."""

    def __init__(
        self,
        message: str,
        *,
        index: Optional[int] = None,
        identifier: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.index = index
        self.identifier = identifier
        self.line: Optional[int] = None

    def with_index(self, index: int) -> PinoutError:
        """Attach a command index if the error does not carry one yet."""
        if self.index is None:
            self.index = index
        return self

    def __str__(self) -> str:
        if self.index is None:
            return self.message
        if self.line is None:
            return f"command #{self.index}: {self.message}"
        return f"line {self.line}, command #{self.index}: {self.message}"


class SchemaError(PinoutError):
    """Label schema arity or redeclaration problem."""


class PhaseError(PinoutError):
    """Command used in the wrong phase, or draw marker misuse."""


class UnresolvedReferenceError(PinoutError):
    """A type, group, wire, box or font name that was never declared."""


class LayoutError(PinoutError):
    """Invalid geometry, empty pin-set, or anchor/canvas not established."""


class ConfigError(PinoutError):
    """Unknown page size or malformed option value."""


class ResourceError(PinoutError):
    """Missing or unreadable image, icon or font."""
