from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class Vessel:
    """
    Ground truth of a simulated boat.

    Attributes:
        x: Position along the track at t = 0.
        y: Across-track position.
        v: Signed speed along x. Positive values head right.
    """
    x: float
    y: float
    v: float

    @property
    def heading(self) -> float:
        """Heading in degrees, 0 when moving right and 180 when moving left."""
        return 0.0 if self.v > 0 else 180.0

    def position_at(self, time: float) -> Tuple[float, float]:
        """Position of the vessel at a given time."""
        return self.x + self.v * time, self.y


def vessels_from_coordinates(coordinates: Iterable[Sequence[float]]) -> List[Vessel]:
    """Build vessels from (x, y, v) triplets."""
    return [Vessel(float(x), float(y), float(v)) for x, y, v in coordinates]
