"""Setup/Draw phase gate.

Setup-only commands are legal until the ``DRAW`` marker, draw-only commands
only after it, and the marker itself may appear once.
"""

from __future__ import annotations

from dataclasses import dataclass

from genpinout.commands import Command
from genpinout.errors import PhaseError
from genpinout.types import Phase, PhaseTag


@dataclass(frozen=True)
class ClassifiedCommand:
    """A command accepted by the phase gate, with its input position."""

    index: int
    command: Command
    phase: Phase

    @property
    def is_marker(self) -> bool:
        return self.command.phase is PhaseTag.MARKER


def is_legal(tag: PhaseTag, phase: Phase) -> bool:
    """Whether a command tagged ``tag`` may run in ``phase``."""
    if tag is PhaseTag.EITHER:
        return True
    if tag is PhaseTag.MARKER:
        return phase is Phase.SETUP
    return tag.value == phase.value


class PhaseStateMachine:
    """Tracks the current phase of one document."""

    def __init__(self) -> None:
        self.phase = Phase.SETUP

    def advance(self, command: Command, index: int) -> ClassifiedCommand:
        """Classify ``command`` against the current phase, moving to Draw on the marker."""
        tag = command.phase
        if not is_legal(tag, self.phase):
            if tag is PhaseTag.MARKER:
                raise PhaseError("DRAW may only appear once", index=index, identifier="DRAW")
            raise PhaseError(
                f"{command.keyword} is a {tag.value} command, not allowed in the {self.phase.value} phase",
                index=index,
                identifier=command.keyword,
            )

        classified = ClassifiedCommand(index=index, command=command, phase=self.phase)
        if tag is PhaseTag.MARKER:
            self.phase = Phase.DRAW
        return classified
