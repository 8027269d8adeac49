"""
Detection Model
===============
Bearing-cone model of an acoustic sensor.

A sensor at (sx, sy) hears a vessel (x, y, v) when the vessel crosses
the sensor's detection cone of half-angle theta. The vessel moves along
x, so the crossing happens at

    t = 1/v * (|y - sy| / tan(theta) - (x - sx))

and the sensor reports the window [t - margin, t + margin].
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Sequence

import codac
from codac import AnalyticFunction, Interval, IntervalVector, VectorVar, vec

from wakeenclosure.config import BEARING_HALF_ANGLE_DEG, DETECTION_MARGIN
from wakeenclosure.exceptions import DegenerateVesselError

if TYPE_CHECKING:
    from wakeenclosure.model.vessel import Vessel


def detection_time(
    sensor_x: float,
    sensor_y: float,
    vessel: Vessel,
    bearing_half_angle: float = BEARING_HALF_ANGLE_DEG,
) -> float:
    """
    Time at which a sensor detects a vessel.

    Args:
        sensor_x: Sensor abscissa.
        sensor_y: Sensor ordinate.
        vessel: Detected vessel.
        bearing_half_angle: Half-angle of the detection cone in degrees.

    Returns:
        Detection time.

    Raises:
        DegenerateVesselError: If the vessel does not move.
    """
    if vessel.v == 0:
        raise DegenerateVesselError(vessel)
    tan_theta = math.tan(math.radians(bearing_half_angle))
    return 1.0 / vessel.v * (abs(vessel.y - sensor_y) / tan_theta - (vessel.x - sensor_x))


def detection_interval(
    sensor_x: float,
    sensor_y: float,
    vessel: Vessel,
    bearing_half_angle: float = BEARING_HALF_ANGLE_DEG,
    margin: float = DETECTION_MARGIN,
) -> Interval:
    """Detection-time window, centred on :func:`detection_time`."""
    t = detection_time(sensor_x, sensor_y, vessel, bearing_half_angle)
    return Interval(t - margin, t + margin)


class DetectionResidual:
    """
    Detection times of a candidate state, as a codac function.

    For a candidate state (x, y, v) observed at ``time``, the function
    returns the times at which every sensor would have detected such a
    vessel, one component per sensor and in sensor order:

        r_i(x, y, v) = 1/v * (|y - sy_i| / tan(theta) - (x - sx_i)) + time
    """

    def __init__(
        self,
        sensor_x: Sequence[float],
        sensor_y: Sequence[float],
        time: float,
        bearing_half_angle: float = BEARING_HALF_ANGLE_DEG,
    ) -> None:
        if len(sensor_x) != len(sensor_y):
            raise ValueError("Sensor abscissas and ordinates must have the same length.")
        if len(sensor_x) == 0:
            raise ValueError("Detection residual needs at least one sensor.")

        self.sensor_x: List[float] = [float(sx) for sx in sensor_x]
        self.sensor_y: List[float] = [float(sy) for sy in sensor_y]
        self.time = float(time)
        self.tan_theta = math.tan(math.radians(bearing_half_angle))

        state = VectorVar(3)
        x, y, v = state[0], state[1], state[2]
        residuals = [
            (codac.abs(y - sy) / self.tan_theta - (x - sx)) / v + self.time
            for sx, sy in zip(self.sensor_x, self.sensor_y)
        ]
        self.function = AnalyticFunction([state], vec(*residuals))

    def __len__(self) -> int:
        return len(self.sensor_x)

    def __call__(self, box: IntervalVector) -> IntervalVector:
        return self.function.eval(box)
