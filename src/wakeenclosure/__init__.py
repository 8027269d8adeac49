"""
Wake Enclosure
==============
Guaranteed enclosures of moving vessels, inferred from the detection
times of a network of bearing-only acoustic sensors.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wakeenclosure")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
