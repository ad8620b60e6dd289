"""ActionState DTO for UI control rendering."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ActionState:
    """
    Render state of one action control.

    ``visible`` and ``enabled`` are separate on purpose: some controls are
    drawn but inert (Start Review on a first-time live document).
    """

    visible: bool
    enabled: bool

    @staticmethod
    def hidden() -> "ActionState":
        return ActionState(visible=False, enabled=False)

    @staticmethod
    def active() -> "ActionState":
        return ActionState(visible=True, enabled=True)

    @staticmethod
    def disabled() -> "ActionState":
        return ActionState(visible=True, enabled=False)
