"""
Exception hierarchy of the package.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wakeenclosure.model.vessel import Vessel


class WakeEnclosureError(Exception):
    """Base class for all errors raised by wakeenclosure."""


class ConfigurationError(WakeEnclosureError):
    """Invalid run parameters, detected before any computation starts."""


class DegenerateVesselError(WakeEnclosureError, ValueError):
    """A vessel whose speed is zero has no defined detection time."""

    def __init__(self, vessel: Vessel) -> None:
        super().__init__(f"Vessel at ({vessel.x:g}, {vessel.y:g}) has zero speed, detection time is undefined.")
        self.vessel = vessel
