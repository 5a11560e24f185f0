"""Drive the simulated rover around the figure-eight and smooth its track.

Example:
    python -m control.main --frames 200 --output-dir runs/demo --log-level DEBUG
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Callable, Optional

from capture.corrected_receiver import CorrectedReceiver
from capture.sampler import BackgroundSampler
from capture.sensor_device import CombinedSensor, MappedSensor, SensorDevice
from capture.simulated_sensor import (
    SimulatedCompass,
    SimulatedFlowSensor,
    SimulatedReceiver,
    simulated_corrections,
)
from capture.velocity import OrientedVelocity
from configs.settings import DEFAULT_CONFIG_PATH, AppConfig, load_config
from contracts import KinematicState
from exceptions import ConfigError, WorkerShutdownError
from log_config.logger import add_file_handler, get_logger, set_console_level
from track.builders import build_measure_all_track

from .actions import LoggingMotorController
from .deciders import FollowJoystick, UserInput
from .robot import FINISH_BUTTON, Robot

logger = get_logger(__name__)

LOG_FILE = "rover_localization.log"

# Time allowed for the first sensor sample, on top of the control frames
FIRST_SAMPLE_TIMEOUT_S = 5.0


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the rover localization loop against a simulated sensor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Console log level (overrides the configured one)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=200,
        help="Control frames to run before pressing the finish button",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("runs"),
        help="Directory for the exported tracks and the log file",
    )
    parser.add_argument(
        "--skip-calibration",
        action="store_true",
        default=False,
        help="Do not wait for the sensors to settle",
    )
    return parser.parse_args(argv)


def scripted_input(frames: int) -> Callable[[], UserInput]:
    """Steer a gentle curve, then press the finish button after ``frames`` frames."""
    count = 0

    def read() -> UserInput:
        nonlocal count
        count += 1
        if count > frames:
            return UserInput(pressed=frozenset({FINISH_BUTTON}))
        return UserInput(joystick=(0.2, 0.6))

    return read


def build_sensor(
    config: AppConfig,
    receiver: Optional[SimulatedReceiver] = None,
    clock: Callable[[], float] = time.monotonic,
) -> SensorDevice[KinematicState]:
    """Fuse a corrected position fix with compass and optical-flow velocity.

    Closing the returned sensor closes the receiver and stops the
    correction requester.
    """
    if receiver is None:
        receiver = SimulatedReceiver(clock=clock)
    position = CorrectedReceiver(
        receiver,
        simulated_corrections,
        config.sensors.correction_interval_s,
        clock=clock,
        join_timeout_s=config.sensors.join_timeout_s,
    )
    velocity = OrientedVelocity(SimulatedCompass(clock=clock), SimulatedFlowSensor(clock=clock), clock=clock)
    return MappedSensor(CombinedSensor(position, velocity), KinematicState.from_pair)


def build_robot(config: AppConfig, sensor: SensorDevice[KinematicState], frames: int, output_dir: Path) -> Robot:
    sensors = BackgroundSampler(
        config.sensors.sample_rate,
        sensor,
        name="sensor-sampler",
        join_timeout_s=config.sensors.join_timeout_s,
    )
    return Robot(
        sensors=sensors,
        input_source=scripted_input(frames),
        decider=FollowJoystick(),
        controller=LoggingMotorController(),
        track_factory=lambda initial, timestamp: build_measure_all_track(initial, config.model, timestamp),
        fps=config.loop.fps,
        output_dir=output_dir,
    )


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Cannot start: {e}")
        return 2

    set_console_level(args.log_level or config.log_level)
    add_file_handler(args.output_dir / LOG_FILE)

    # One extra frame lets the scripted finish press arrive
    max_frames = args.frames + 1 + int(config.loop.fps * FIRST_SAMPLE_TIMEOUT_S)
    try:
        with build_sensor(config) as sensor:
            robot = build_robot(config, sensor, args.frames, args.output_dir)
            if not args.skip_calibration:
                robot.calibrate(config.sensors.calibration_repetitions, config.sensors.calibration_wait_s)
            track = robot.run(max_frames=max_frames)
    except WorkerShutdownError as e:
        logger.error(f"Sensor worker did not stop: {e}")
        return 1

    if track is None:
        return 1
    logger.info(f"Finished with {len(track)} waypoints, smoothed={track.is_smoothed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
