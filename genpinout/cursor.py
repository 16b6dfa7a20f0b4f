"""Drawing-origin cursor for one assembly run."""

from __future__ import annotations

import logging
from typing import Optional

from genpinout.errors import LayoutError

log = logging.getLogger(__name__)


class Anchor:
    """Mutable 2-D cursor.

    Set absolutely by ``ANCHOR`` and advanced along the primary axis after
    each pin-set so the next one continues where the last stopped.
    """

    def __init__(self) -> None:
        self._x: Optional[float] = None
        self._y: Optional[float] = None

    @property
    def position(self) -> tuple[float, float]:
        if self._x is None or self._y is None:
            raise LayoutError("no ANCHOR set before geometry was placed", identifier="ANCHOR")
        return self._x, self._y

    def set(self, x: float, y: float) -> None:
        self._x, self._y = x, y
        log.debug("Anchor set to (%.2f, %.2f)", x, y)

    def advance(self, vertical: bool, delta: float) -> None:
        """Move along y when ``vertical`` is true, else along x."""
        x, y = self.position
        if vertical:
            self._y = y + delta
        else:
            self._x = x + delta
