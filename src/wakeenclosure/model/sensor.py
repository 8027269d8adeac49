from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

import numpy as np
from codac import Interval, IntervalVector

from wakeenclosure.config import BEARING_HALF_ANGLE_DEG, DETECTION_MARGIN
from wakeenclosure.exceptions import DegenerateVesselError
from wakeenclosure.model.constraints import Separator, union_separator, window_separator
from wakeenclosure.model.detection import detection_interval

if TYPE_CHECKING:
    from wakeenclosure.model.vessel import Vessel

logger = logging.getLogger(__name__)


class Sensor:
    """
    Fixed acoustic sensor.

    The sensor is identified by its position. ``detections`` and
    ``predicate`` are a cache derived from the vessels last given to
    :meth:`recompute`, and are empty/``None`` until then. A sensor that
    detected nothing keeps ``predicate = None``: no time is feasible.
    """

    def __init__(self, x: float, y: float) -> None:
        """
        Args:
            x: Sensor abscissa.
            y: Sensor ordinate.
        """
        self.x = float(x)
        self.y = float(y)
        self.detections: List[Interval] = []
        self.rejected: List[DegenerateVesselError] = []
        self.predicate: Optional[Separator] = None
        self.computed = False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(x={self.x:g}, y={self.y:g})"

    def clone(self) -> Sensor:
        """A sensor at the same position, with an empty cache."""
        return Sensor(self.x, self.y)

    @property
    def is_blind(self) -> bool:
        """True once computed, if no vessel produced a detection window."""
        return self.computed and not self.detections

    def recompute(
        self,
        vessels: Iterable[Vessel],
        bearing_half_angle: float = BEARING_HALF_ANGLE_DEG,
        margin: float = DETECTION_MARGIN,
    ) -> None:
        """
        Rebuild the detection windows and the feasibility predicate.

        Vessels with no defined detection time are skipped and recorded
        in ``rejected``.
        """
        self.detections = []
        self.rejected = []

        for vessel in vessels:
            try:
                interval = detection_interval(self.x, self.y, vessel, bearing_half_angle, margin)
            except DegenerateVesselError as e:
                logger.debug(f"{self!r}: {e}")
                self.rejected.append(e)
                continue
            self.detections.append(interval)

        if self.detections:
            self.predicate = union_separator([window_separator(i) for i in self.detections])
        else:
            self.predicate = None
        self.computed = True

    def feasible_at(self, time: float) -> bool:
        """
        True if ``time`` lies in at least one detection window.

        Raises:
            RuntimeError: If the detections were never computed.
        """
        if not self.computed:
            raise RuntimeError(f"{self!r} has no detections yet, call recompute() first.")
        return any(i.contains(time) for i in self.detections)

    def detection_hull(self) -> Interval:
        """Smallest interval containing every detection window."""
        if not self.detections:
            return Interval.empty()
        return Interval(min(i.lb() for i in self.detections), max(i.ub() for i in self.detections))


def random_sensors(count: int, domain: IntervalVector, rng: np.random.Generator) -> List[Sensor]:
    """
    Place sensors uniformly over the (x, y) part of a domain.

    Args:
        count: Number of sensors.
        domain: Box whose two first components bound the positions.
        rng: Random source. Pass a seeded generator for reproducible runs.

    Returns:
        The sensors, in drawing order.
    """
    xs = rng.uniform(domain[0].lb(), domain[0].ub(), size=count)
    ys = rng.uniform(domain[1].lb(), domain[1].ub(), size=count)
    return [Sensor(x, y) for x, y in zip(xs, ys)]
