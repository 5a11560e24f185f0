"""Capture module: fixed-rate sampling and off-thread requests."""

from .corrected_receiver import CorrectedReceiver
from .game_loop import FixedRateLoop
from .requester import AsyncRequester
from .sampler import BackgroundSampler
from .sensor_device import CombinedSensor, CorrectableReceiver, MappedSensor, SensorDevice
from .simulated_sensor import SimulatedCompass, SimulatedFlowSensor, SimulatedReceiver, simulated_corrections
from .velocity import OrientedVelocity

__all__ = [
    "AsyncRequester",
    "BackgroundSampler",
    "CombinedSensor",
    "CorrectableReceiver",
    "CorrectedReceiver",
    "FixedRateLoop",
    "MappedSensor",
    "OrientedVelocity",
    "SensorDevice",
    "SimulatedCompass",
    "SimulatedFlowSensor",
    "SimulatedReceiver",
    "simulated_corrections",
]
