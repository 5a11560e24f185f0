"""Robot orchestration: sensors in, smoothed track and motor commands out."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Iterator, Optional

from capture.game_loop import FixedRateLoop
from capture.sampler import BackgroundSampler
from contracts import KinematicState
from exceptions import EstimationError, MotorControllerError
from log_config.logger import get_logger
from track.export import write_track_csv
from track.kalman_track import KalmanTrack
from track.trajectory_eval import log_track_summary

from .actions import Action, Idle, MotorController, perform_action
from .deciders import Decider, UserInput

logger = get_logger(__name__)

FINISH_BUTTON = "east"

TrackFactory = Callable[[KinematicState, float], KalmanTrack]


class Robot:
    """Runs the control loop.

    Per frame: read user input, poll the sensor sampler, feed fresh samples
    into the track, then either finish (finish button pressed) or perform
    the decider's action. The control loop is the only writer of the track.

    The sampler is closed and the motors are stopped on every exit path.
    """

    def __init__(
        self,
        sensors: BackgroundSampler[KinematicState],
        input_source: Callable[[], Optional[UserInput]],
        decider: Decider,
        controller: MotorController,
        track_factory: TrackFactory,
        fps: float = 20,
        output_dir: Optional[Path] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sensors = sensors
        self._input_source = input_source
        self._decider = decider
        self._controller = controller
        self._track_factory = track_factory
        self._fps = fps
        self._output_dir = Path(output_dir) if output_dir is not None else None
        self._clock = clock

        self.track: Optional[KalmanTrack] = None
        self._last_sample: Optional[KinematicState] = None
        self.skipped_measurements = 0

    def calibrate(self, repetitions: int, wait_s: float) -> None:
        """Let the sensors settle by pulling and discarding samples."""
        logger.info(f"Sensor calibration: {repetitions} repetitions, {wait_s}s apart")
        for _ in range(repetitions):
            self._sensors.poll()
            time.sleep(wait_s)

    def wait_for_first_measurement(self, max_frames: Optional[int] = None) -> Optional[KinematicState]:
        """Poll on the control-loop rate until the sensors produce a sample."""
        return self._first_sample(self._frames(max_frames, "initialization loop"))

    def run(self, max_frames: Optional[int] = None) -> Optional[KalmanTrack]:
        """Run the control loop until the finish button or ``max_frames``.

        ``max_frames`` bounds the whole run: frames spent waiting for the
        first sample count against it.

        Returns:
            The track, or None if the sensors never produced a sample
        """
        frames = self._frames(max_frames, "control loop")
        try:
            if self.track is None:
                initial = self._first_sample(frames)
                if initial is None:
                    logger.error("No sensor sample arrived; the robot is not drivable")
                    return None
                self._last_sample = initial
                self.track = self._track_factory(initial, self._clock())
                logger.info(f"Track seeded at {initial}; the robot is now drivable")

            for _ in frames:
                user_input = self._input_source() or UserInput()
                self._feed(self._sensors.poll())

                if user_input.is_pressed(FINISH_BUTTON):
                    self._finish()
                    break

                self._act(self._decider.decide(user_input))

            return self.track
        finally:
            try:
                self._act(Idle())
            finally:
                self._sensors.close()

    def _frames(self, max_frames: Optional[int], name: str) -> Iterator[int]:
        # The budget is checked before waiting, so no frame is slept past it
        loop = FixedRateLoop.from_fps(self._fps, name=name)
        frame = 0
        while max_frames is None or frame < max_frames:
            next(loop)
            yield frame
            frame += 1

    def _first_sample(self, frames: Iterator[int]) -> Optional[KinematicState]:
        for _ in frames:
            sample = self._sensors.poll()
            if sample is not None:
                return sample
        return None

    def _feed(self, sample: Optional[KinematicState]) -> None:
        # poll() repeats the previous sample until a fresh one arrives
        if sample is None or sample is self._last_sample:
            return
        self._last_sample = sample

        logger.debug(f"The robot is at {sample.position} with a velocity of {sample.velocity}")
        try:
            self.track.new_measurement(sample, timestamp=self._clock())
        except EstimationError as e:
            self.skipped_measurements += 1
            logger.warning(f"Skipping measurement: {e.__class__.__name__}: {e}")

    def _act(self, action: Action) -> None:
        try:
            perform_action(action, self._controller)
        except MotorControllerError as e:
            logger.error(f"Motor controller rejected {action}: {e}")

    def _finish(self) -> None:
        logger.info("Finish requested, smoothing the track")
        self._export("track.csv")
        try:
            self.track.smooth()
        except EstimationError as e:
            logger.error(f"Smoothing failed: {e}")
            return
        self._export("track_smoothed.csv")
        log_track_summary(self.track)

    def _export(self, filename: str) -> None:
        if self._output_dir is None:
            return
        try:
            write_track_csv(self._output_dir / filename, self.track)
        except OSError as e:
            logger.error(f"Failed to export track to {filename}: {e}")


__all__ = ["FINISH_BUTTON", "Robot"]
