"""Control module: decisions, motor actions and the robot loop."""

from .actions import Action, Direction, Drive, Idle, LoggingMotorController, MotorController, perform_action
from .deciders import AlwaysIdle, Decider, FollowJoystick, UserInput
from .robot import FINISH_BUTTON, Robot

__all__ = [
    "Action",
    "AlwaysIdle",
    "Decider",
    "Direction",
    "Drive",
    "FINISH_BUTTON",
    "FollowJoystick",
    "Idle",
    "LoggingMotorController",
    "MotorController",
    "Robot",
    "UserInput",
    "perform_action",
]
