"""Motor actions and the controller interface they are sent to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Union

from log_config.logger import get_logger

logger = get_logger(__name__)

LEFT_MOTOR_ID = 0
RIGHT_MOTOR_ID = 2


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"
    BRAKE = "brake"

    @classmethod
    def from_speed(cls, speed: float) -> "Direction":
        return cls.FORWARD if speed >= 0.0 else cls.BACKWARD


@dataclass(frozen=True)
class Idle:
    """Stop both motors."""


@dataclass(frozen=True)
class Drive:
    """Drive with signed per-side speeds in [-1, 1]."""

    left: float
    right: float


Action = Union[Idle, Drive]


class MotorController(ABC):
    """Two-channel motor driver.

    Implementations raise :class:`exceptions.MotorControllerError` when the
    hardware rejects a command.
    """

    @abstractmethod
    def set_speed(self, motor_id: int, speed: float) -> None:
        """Set the speed (0..1) of a motor."""

    @abstractmethod
    def set_direction(self, motor_id: int, direction: Direction) -> None:
        """Set the rotation direction of a motor."""

    def run(self, motor_id: int, direction: Direction, speed: float) -> None:
        self.set_direction(motor_id, direction)
        self.set_speed(motor_id, speed)


class LoggingMotorController(MotorController):
    """Motor controller stand-in that only logs the commands."""

    def set_speed(self, motor_id: int, speed: float) -> None:
        logger.debug(f"motor {motor_id}: speed={speed:.2f}")

    def set_direction(self, motor_id: int, direction: Direction) -> None:
        logger.debug(f"motor {motor_id}: direction={direction.value}")


def perform_action(action: Action, controller: MotorController) -> None:
    """Forward ``action`` to the left (0) and right (2) motors."""
    logger.info(f"Perform the action {action}")

    if isinstance(action, Idle):
        controller.run(LEFT_MOTOR_ID, Direction.BRAKE, 0.0)
        controller.run(RIGHT_MOTOR_ID, Direction.BRAKE, 0.0)
        return

    controller.run(LEFT_MOTOR_ID, Direction.from_speed(action.left), min(abs(action.left), 1.0))
    controller.run(RIGHT_MOTOR_ID, Direction.from_speed(action.right), min(abs(action.right), 1.0))


__all__ = [
    "Action",
    "Direction",
    "Drive",
    "Idle",
    "LoggingMotorController",
    "MotorController",
    "perform_action",
]
