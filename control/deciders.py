"""Deciders turn user input into motor actions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from .actions import Action, Drive, Idle


@dataclass(frozen=True)
class UserInput:
    joystick: Optional[Tuple[float, float]] = None
    pressed: FrozenSet[str] = field(default_factory=frozenset)

    def is_pressed(self, button: str) -> bool:
        return button in self.pressed


class Decider(ABC):
    @abstractmethod
    def decide(self, user_input: UserInput) -> Action:
        """Return the action to perform for this frame."""


class AlwaysIdle(Decider):
    def decide(self, user_input: UserInput) -> Action:
        return Idle()


def _clamp(value: float) -> float:
    return max(-1.0, min(1.0, value))


class FollowJoystick(Decider):
    """Differential drive mixing: ``left = jx + jy``, ``right = jy - jx``."""

    def decide(self, user_input: UserInput) -> Action:
        if user_input.joystick is None:
            return Idle()
        jx, jy = user_input.joystick
        return Drive(left=_clamp(jx + jy), right=_clamp(jy - jx))


__all__ = ["AlwaysIdle", "Decider", "FollowJoystick", "UserInput"]
