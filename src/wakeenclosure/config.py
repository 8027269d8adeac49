"""
Configuration & Constants
=========================
This module serves as the central registry for the model constants and
the run parameters.

Why is this file needed?
------------------------
1. Abstraction: The bearing model, the state domain and the reference
   fleet are used by the model, the renderer and the CLI. Keeping them
   here prevents magic numbers scattered throughout the code.
2. Validation: ``SimulationConfig.validate`` is the single place where
   run parameters are checked, before any simulation work starts.

Exports:
    BEARING_HALF_ANGLE_DEG (float): Half-angle of a sensor detection cone.
    DETECTION_MARGIN (float): Half-width of a detection-time interval.
    DOMAIN_BOUNDS (tuple): Bounds of the (x, y, v) state space.
    VESSEL_COORDINATES (tuple): Reference fleet, as (x, y, v) triplets.
    SimulationConfig: Run parameters of one CLI invocation.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional, Tuple

from wakeenclosure.exceptions import ConfigurationError

# Detection model
BEARING_HALF_ANGLE_DEG: float = 19.5
DETECTION_MARGIN: float = 0.25

# Margin added around the observed detection times in detection-space plots
DETECTION_WINDOW_INFLATION: float = 2.0

# State space: x, y, speed
DOMAIN_BOUNDS: tuple[tuple[float, float], ...] = ((-25.0, 25.0), (-10.0, 10.0), (-6.0, 6.0))

VESSEL_COORDINATES: tuple[tuple[float, float, float], ...] = (
    (-22.0, 6.0, 5.0),
    (-20.0, -3.0, 3.0),
    (-16.0, -8.0, 2.0),
    (-14.0, 3.0, 4.0),
    (-12.0, -1.0, 2.0),
    (8.0, -4.0, -3.0),
    (14.0, 7.0, -4.0),
    (20.0, -7.0, -2.0),
    (23.0, 0.0, -5.0),
)

SENSOR_COUNT: int = 50

# Output frames
FRAME_PREFIX: str = "Wake"
FRAME_SUFFIX: str = ".svg"


@dataclass
class SimulationConfig:
    """
    Parameters of one simulation run, as given on the command line.
    """
    path: Optional[Path]
    duration: float = 10.0
    step: float = 0.1
    precision: float = 1.0
    verbose: bool = False
    seed: Optional[int] = None
    workers: Optional[int] = None
    sensors: int = SENSOR_COUNT
    log_file: Optional[str] = None
    detection_space: Optional[Tuple[int, int]] = None
    timelines: bool = False

    @property
    def output_dir(self) -> Path:
        """Resolved absolute output directory."""
        return Path(self.path).resolve()

    @property
    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1

    def validate(self) -> None:
        """
        Check the parameters.

        Raises:
            ConfigurationError: With a diagnostic message, on the first
                invalid parameter found.
        """
        if self.path is None or not Path(self.path).is_dir():
            # Missing or not a directory: the CLI exits silently on both
            raise ConfigurationError("")

        if self.duration < 0:
            raise ConfigurationError("Simulation cannot have a negative duration !")

        if self.step < 0:
            raise ConfigurationError("Simulation cannot have a negative time-step !")

        if self.step > self.duration:
            raise ConfigurationError("Simulation cannot have a time-step greater than the time of the simulation !")

        if self.step == 0 and self.duration > 0:
            raise ConfigurationError("Simulation cannot have a null time-step !")

        if self.precision < 0:
            raise ConfigurationError("Projection precision cannot be negative !")

        if self.precision == 0:
            raise ConfigurationError("Projection precision cannot be null !")

        if self.sensors < 0:
            raise ConfigurationError("Simulation cannot have a negative number of sensors !")

        if self.workers is not None and self.workers < 1:
            raise ConfigurationError("Worker pool needs at least one thread !")

        if self.detection_space is not None:
            if any(not 0 <= i < self.sensors for i in self.detection_space):
                raise ConfigurationError(f"Detection space needs two sensor indices in [0, {self.sensors}) !")
