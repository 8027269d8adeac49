"""
Application Entry Point
=======================
Video generation of the boats' enclosing state, inferred from sensors.

The CLI validates the run parameters, builds the fixed domain, the
reference fleet and the randomly placed sensors once, then hands them
to the FrameScheduler.

Usage:
    $ wakeenclosure -p frames/ -d 10 -s 0.1 --precision 1 -v
"""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import sys
from typing import List, Optional, Sequence

from codac import IntervalVector
import numpy as np

from wakeenclosure.config import DOMAIN_BOUNDS, SENSOR_COUNT, VESSEL_COORDINATES, SimulationConfig
from wakeenclosure.controller.scheduler import FrameResult, FrameScheduler
from wakeenclosure.exceptions import ConfigurationError
from wakeenclosure.logging_config import setup_logging
from wakeenclosure.model import Scene, Sensor, Vessel, box, random_sensors, vessels_from_coordinates
from wakeenclosure.view.figures import render_detection_space, render_sensor_timeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wakeenclosure",
        description="Video generation of boat's enclosing state using sensors",
    )
    parser.add_argument("-p", "--path", type=Path, default=None, help="Output path (an existing directory)")
    parser.add_argument("-d", "--duration", type=float, default=10.0, help="Duration of the simulation")
    parser.add_argument("-s", "--step", type=float, default=0.1, help="Time step")
    parser.add_argument("--precision", type=float, default=1.0, help="Projection precision")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--seed", type=int, default=None, help="Seed of the sensor placement")
    parser.add_argument("--sensors", type=int, default=SENSOR_COUNT, help="Number of sensors")
    parser.add_argument("--workers", type=int, default=None, help="Size of the worker pool (default: CPU count)")
    parser.add_argument("--log-file", default=None, help="Also write the logs to this file")
    parser.add_argument(
        "--detection-space", type=int, nargs=2, metavar=("I", "J"), default=None,
        help="Also render the joint detection times of sensors I and J",
    )
    parser.add_argument("--timelines", action="store_true", help="Also render the detection windows of every sensor")
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> SimulationConfig:
    """
    Parse and validate the command line.

    Exits with status 2 on a malformed command line and status 1 on an
    invalid value, before any simulation work starts. A missing or
    invalid output path exits with status 1 and no message.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = SimulationConfig(
        path=args.path,
        duration=args.duration,
        step=args.step,
        precision=args.precision,
        verbose=args.verbose,
        seed=args.seed,
        workers=args.workers,
        sensors=args.sensors,
        log_file=args.log_file,
        detection_space=tuple(args.detection_space) if args.detection_space else None,
        timelines=args.timelines,
    )
    try:
        config.validate()
    except ConfigurationError as e:
        message = str(e)
        parser.exit(1, f"{message}\n" if message else None)
    return config


def render_static_figures(
    config: SimulationConfig,
    domain: IntervalVector,
    sensors: List[Sensor],
    vessels: List[Vessel],
) -> None:
    """Figures that do not depend on time: detection space and sensor timelines."""
    if config.detection_space is None and not config.timelines:
        return

    scene = Scene(domain, sensors, vessels)
    if config.detection_space is not None:
        i1, i2 = config.detection_space
        path = render_detection_space(
            scene, i1, i2, config.output_dir / "DetectionSpace.svg", precision=config.precision, show_truth=True
        )
        logger.info(f"Detection space of sensors {i1} and {i2} written to: {path}")

    if config.timelines:
        scene.ensure_fresh()
        width = len(str(max(len(sensors) - 1, 0)))
        for k, sensor in enumerate(scene.sensors):
            if not sensor.detections:
                continue
            render_sensor_timeline(sensor, config.output_dir / f"Sensor_{k:0{width}d}.svg")
        logger.info(f"Sensor timelines written to: {config.output_dir}")


def run(config: SimulationConfig) -> List[FrameResult]:
    """Set the scene up and compute every frame."""
    domain = box(DOMAIN_BOUNDS)
    vessels = vessels_from_coordinates(VESSEL_COORDINATES)

    # Drawn once, before any task starts
    rng = np.random.default_rng(config.seed)
    sensors = random_sensors(config.sensors, domain, rng)
    logger.info(f"Placed {len(sensors)} sensors, tracking {len(vessels)} vessels.")
    render_static_figures(config, domain, sensors, vessels)

    scheduler = FrameScheduler(
        domain=domain,
        sensors=sensors,
        vessels=vessels,
        output_dir=config.output_dir,
        precision=config.precision,
        workers=config.worker_count,
    )
    return scheduler.run(config.duration, config.step)


def main(argv: Optional[Sequence[str]] = None) -> None:
    config = parse_config(argv)
    setup_logging(level=logging.DEBUG if config.verbose else logging.INFO, log_file=config.log_file)

    if config.verbose:
        print(f"{os.cpu_count()} concurrent threads are supported.")

    results = run(config)
    print(" ".join(f"{r.time:g}" for r in results))

    failures = [r for r in results if not r.ok]
    for r in failures:
        print(f"Frame {r.index} (t={r.time:g}) failed: {r.error}", file=sys.stderr)
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
