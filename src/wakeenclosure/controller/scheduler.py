"""
Frame Scheduler (Threading)
===========================
This module turns a simulation horizon into one rendered frame per
time sample.

Why is this file needed?
------------------------
1. Throughput: Frames are independent. Each one is a blocking unit of
   work pushed to a thread pool.
2. Isolation: Every task builds its own Scene from read-only snapshots
   of the sensors and vessels. Tasks share nothing, so no locking is
   needed.
3. Reporting: A failing frame is recorded in its FrameResult and never
   cancels its siblings. Results come back in submission order.

Classes:
    FrameStatus: Life cycle of a frame.
    FrameResult: Outcome of one frame.
    FrameScheduler: Submits the frames and collects their results.
"""
from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
import logging
import math
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from codac import IntervalVector

from wakeenclosure.config import FRAME_PREFIX, FRAME_SUFFIX
from wakeenclosure.model.constraints import Paving
from wakeenclosure.model.scene import Scene
from wakeenclosure.model.sensor import Sensor
from wakeenclosure.model.vessel import Vessel
from wakeenclosure.view.figures import render_wake

logger = logging.getLogger(__name__)

FrameWriter = Callable[[Scene, Paving, float, Path], Path]

# Tolerance on duration / step, so that 0.3 / 0.1 gives 3 frames
_RATIO_TOLERANCE = 1e-9


class FrameStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class FrameResult:
    index: int
    time: float
    path: Path
    status: FrameStatus = FrameStatus.PENDING
    error: Optional[BaseException] = None
    # Vessels left out of the frame, having no detection time
    rejected: int = 0

    @property
    def ok(self) -> bool:
        return self.status is FrameStatus.DONE


def frame_count(duration: float, step: float) -> int:
    """Number of samples ``ceil(duration / step)``, 0 for a zero duration."""
    if duration == 0:
        return 0
    if step <= 0:
        raise ValueError(f"Time step must be positive, got {step}.")
    return math.ceil(duration / step - _RATIO_TOLERANCE)


def frame_times(duration: float, step: float) -> List[float]:
    """Sampled times k * step, for k in [0, frame_count)."""
    return [k * step for k in range(frame_count(duration, step))]


def frame_filename(time: float, duration: float, step: float) -> str:
    """
    Name of the frame at ``time``.

    The index round(time / step) is zero padded to the number of digits
    of round(duration / step).
    """
    width = len(str(round(duration / step)))
    index = round(time / step)
    return f"{FRAME_PREFIX}_{index:0{width}d}{FRAME_SUFFIX}"


def compute_frame(
    domain: IntervalVector,
    sensors: Tuple[Sensor, ...],
    vessels: Tuple[Vessel, ...],
    time: float,
    precision: float,
    path: Path,
    writer: FrameWriter,
) -> Tuple[Path, int]:
    """
    One unit of work: build a private scene, enclose the vessels at
    ``time`` and write the frame.

    Returns:
        The written file and the number of vessels the scene ignored.
    """
    logger.debug(f"Time {time:g}")
    scene = Scene(domain, sensors, vessels)
    paving = scene.project_enclosure(time, precision)
    return writer(scene, paving, time, path), len(scene.rejected_vessels)


class FrameScheduler:
    def __init__(
        self,
        domain: IntervalVector,
        sensors: Iterable[Sensor],
        vessels: Iterable[Vessel],
        output_dir: Path,
        precision: float = 1.0,
        workers: Optional[int] = None,
        writer: FrameWriter = render_wake,
    ) -> None:
        """
        Args:
            domain: Box of the (x, y, v) state space.
            sensors: Sensor positions, copied once into a read-only snapshot.
            vessels: Ground truth, copied once into a read-only snapshot.
            output_dir: Directory receiving the frames.
            precision: Projection and paving precision.
            workers: Size of the thread pool. None lets the executor decide.
            writer: Function rendering and saving one frame.
        """
        self.domain = IntervalVector(domain)
        self.sensors: Tuple[Sensor, ...] = tuple(s.clone() for s in sensors)
        self.vessels: Tuple[Vessel, ...] = tuple(vessels)
        self.output_dir = Path(output_dir).resolve()
        self.precision = precision
        self.workers = workers
        self.writer = writer

    def _run_frame(self, result: FrameResult) -> FrameResult:
        result.status = FrameStatus.RUNNING
        try:
            result.path, result.rejected = compute_frame(
                IntervalVector(self.domain),
                self.sensors,
                self.vessels,
                result.time,
                self.precision,
                result.path,
                self.writer,
            )
        except Exception as e:
            logger.error(f"Frame {result.index} (t={result.time:g}) failed: {e}")
            result.status = FrameStatus.FAILED
            result.error = e
            return result

        result.status = FrameStatus.DONE
        return result

    def run(self, duration: float, step: float) -> List[FrameResult]:
        """
        Compute every frame of the horizon [0, duration).

        Returns:
            One result per sample, in time order, once all tasks ended.
        """
        times = frame_times(duration, step)
        if not times:
            logger.info("Nothing to schedule.")
            return []

        results = [
            FrameResult(
                index=round(t / step),
                time=t,
                path=self.output_dir / frame_filename(t, duration, step),
            )
            for t in times
        ]

        logger.info(f"Scheduling {len(results)} frames on {self.workers or 'default'} worker(s).")
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="frame") as pool:
            futures: List[Future[FrameResult]] = [pool.submit(self._run_frame, r) for r in results]
            collected = [f.result() for f in futures]

        rejected = max((r.rejected for r in collected), default=0)
        if rejected:
            logger.warning(f"{rejected} vessel(s) with no detection time were left out of every frame.")

        failed = sum(1 for r in collected if not r.ok)
        if failed:
            logger.warning(f"{failed} of {len(collected)} frames failed.")
        else:
            logger.info(f"All {len(collected)} frames written to: {self.output_dir}")
        return collected
