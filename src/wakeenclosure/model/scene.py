"""
Scene
=====
Composition of the sensor network into a single feasibility test.

Why is this file needed?
------------------------
1. Ownership: A scene holds its own copies of the sensors and vessels,
   so scenes built from the same configuration never share state and
   can be solved in parallel.
2. Caching: Detection windows only depend on the sensor and vessel
   sets. They are rebuilt lazily, the first time a query follows a
   change of either set.

Classes:
    DetectionSpace: Result of a sensor-pair query.
    Scene: The composer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable, List, Tuple

from codac import IntervalVector, SepInverse

from wakeenclosure.config import BEARING_HALF_ANGLE_DEG, DETECTION_MARGIN, DETECTION_WINDOW_INFLATION
from wakeenclosure.exceptions import DegenerateVesselError
from wakeenclosure.model.constraints import (
    Paving,
    Separator,
    box,
    box_bounds,
    pave_box,
    product_separator,
    projection_separator,
)
from wakeenclosure.model.detection import DetectionResidual, detection_time
from wakeenclosure.model.sensor import Sensor
from wakeenclosure.model.vessel import Vessel

logger = logging.getLogger(__name__)


@dataclass
class DetectionSpace:
    """
    Joint detection times (t_i, t_j) of a pair of sensors.

    Attributes:
        paving: Paving of the feasible (t_i, t_j) pairs over the window.
        truth: Exact (t_i, t_j) of every vessel with a defined detection time.
    """
    paving: Paving
    truth: List[Tuple[float, float]] = field(default_factory=list)


class Scene:
    def __init__(
        self,
        domain: IntervalVector,
        sensors: Iterable[Sensor],
        vessels: Iterable[Vessel],
        bearing_half_angle: float = BEARING_HALF_ANGLE_DEG,
        margin: float = DETECTION_MARGIN,
    ) -> None:
        """
        Args:
            domain: Box of the (x, y, v) state space.
            sensors: Sensor positions. The scene works on copies.
            vessels: Ground truth used to synthesize the detections.
            bearing_half_angle: Half-angle of the detection cones, in degrees.
            margin: Half-width of the detection windows.
        """
        if domain.size() != 3:
            raise ValueError(f"Scene domain must be a box of (x, y, v), got dimension {domain.size()}.")
        self.domain = IntervalVector(domain)
        self.bearing_half_angle = bearing_half_angle
        self.margin = margin
        self._sensors: List[Sensor] = [s.clone() for s in sensors]
        self._vessels: List[Vessel] = list(vessels)
        self.stale = True

    @property
    def sensors(self) -> List[Sensor]:
        return list(self._sensors)

    @sensors.setter
    def sensors(self, sensors: Iterable[Sensor]) -> None:
        self._sensors = [s.clone() for s in sensors]
        self.stale = True

    @property
    def vessels(self) -> List[Vessel]:
        return list(self._vessels)

    @vessels.setter
    def vessels(self, vessels: Iterable[Vessel]) -> None:
        self._vessels = list(vessels)
        self.stale = True

    @property
    def position_box(self) -> IntervalVector:
        """The (x, y) part of the domain."""
        return box(box_bounds(self.domain)[:2])

    @property
    def speed_box(self) -> IntervalVector:
        """The speed part of the domain, as a one-dimensional box."""
        return box(box_bounds(self.domain)[2:])

    @property
    def rejected_vessels(self) -> List[Vessel]:
        """Vessels left out of the detections, in vessel order."""
        self.ensure_fresh()
        rejected: List[Vessel] = []
        for sensor in self._sensors:
            for error in sensor.rejected:
                if not any(error.vessel is v for v in rejected):
                    rejected.append(error.vessel)
        return rejected

    def ensure_fresh(self) -> None:
        """Rebuild every sensor's detections if the sensors or vessels changed."""
        if not self.stale:
            return

        logger.debug(f"Recomputing detections of {len(self._sensors)} sensors for {len(self._vessels)} vessels.")
        for sensor in self._sensors:
            sensor.recompute(self._vessels, self.bearing_half_angle, self.margin)
        self.stale = False

        rejected = self.rejected_vessels
        if rejected:
            skipped = ", ".join(repr(v) for v in rejected)
            logger.warning(f"Ignoring {len(rejected)} vessel(s) with no detection time: {skipped}")

    def network_predicate(self) -> Separator:
        """
        Cartesian product of every sensor's predicate, in sensor order.

        Raises:
            ValueError: If there is no sensor (no constraint at all) or a
                sensor detected nothing (no feasible state at all). Both
                cases are decided without a separator.
        """
        self.ensure_fresh()
        if not self._sensors:
            raise ValueError("A network without sensors puts no constraint.")
        if any(s.is_blind for s in self._sensors):
            raise ValueError("A sensor without detections makes the network infeasible.")
        return product_separator([s.predicate for s in self._sensors])

    def residual(self, time: float) -> DetectionResidual:
        return DetectionResidual(
            sensor_x=[s.x for s in self._sensors],
            sensor_y=[s.y for s in self._sensors],
            time=time,
            bearing_half_angle=self.bearing_half_angle,
        )

    def state_predicate(self, time: float) -> Separator:
        """Set of states (x, y, v) at ``time`` consistent with every sensor."""
        return SepInverse(self.residual(time).function, self.network_predicate())

    def project_enclosure(self, time: float = 0.0, precision: float = 1.0) -> Paving:
        """
        Enclose every position (x, y) compatible with the detections.

        The state predicate is projected along the speed axis over the
        domain's speed range, then paved over the domain's (x, y) part.

        Args:
            time: Query time.
            precision: Precision of both the projection and the paving.

        Returns:
            Paving of the (x, y) domain. The true position of every vessel
            at ``time`` lies in an inner or boundary box.
        """
        if precision <= 0:
            raise ValueError(f"Projection precision must be positive, got {precision}.")
        self.ensure_fresh()
        area = self.position_box

        if not self._sensors:
            return Paving(box=area, precision=precision, inner=[IntervalVector(area)])
        if any(s.is_blind for s in self._sensors):
            return Paving(box=area, precision=precision, outer=[IntervalVector(area)])

        projection = projection_separator(self.state_predicate(time), [0, 1], self.speed_box, precision)
        paving = pave_box(area, projection, precision)
        logger.debug(
            f"Enclosure at t={time:g}: {len(paving.inner)} inner and {len(paving.boundary)} boundary boxes."
        )
        return paving

    def detection_space(self, i1: int, i2: int, precision: float = 1.0, show_truth: bool = False) -> DetectionSpace:
        """
        Pave the joint detection times of sensors ``i1`` and ``i2``.

        The window is the hull of each sensor's detection windows,
        inflated by ``DETECTION_WINDOW_INFLATION``.
        """
        self.ensure_fresh()
        s1, s2 = self._sensors[i1], self._sensors[i2]

        if s1.is_blind or s2.is_blind:
            result = DetectionSpace(paving=Paving(box=IntervalVector.empty(2), precision=precision))
        else:
            h1, h2 = s1.detection_hull(), s2.detection_hull()
            r = DETECTION_WINDOW_INFLATION
            window = box([(h1.lb() - r, h1.ub() + r), (h2.lb() - r, h2.ub() + r)])
            separator = product_separator([s1.predicate, s2.predicate])
            result = DetectionSpace(paving=pave_box(window, separator, precision))

        if show_truth:
            for vessel in self._vessels:
                try:
                    t1 = detection_time(s1.x, s1.y, vessel, self.bearing_half_angle)
                    t2 = detection_time(s2.x, s2.y, vessel, self.bearing_half_angle)
                except DegenerateVesselError:
                    continue
                result.truth.append((t1, t2))
        return result
