"""
The MODEL layer contains the detection model and the scene composer.
It has NO knowledge of the rendering or of the thread pool.
"""
from .vessel import Vessel, vessels_from_coordinates
from .constraints import Inclusion, Paving, box, box_bounds, pave_box
from .sensor import Sensor, random_sensors
from .detection import DetectionResidual, detection_interval, detection_time
from .scene import DetectionSpace, Scene

__all__ = [
    "Vessel",
    "vessels_from_coordinates",
    "Inclusion",
    "Paving",
    "box",
    "box_bounds",
    "pave_box",
    "Sensor",
    "random_sensors",
    "DetectionResidual",
    "detection_interval",
    "detection_time",
    "DetectionSpace",
    "Scene",
]
