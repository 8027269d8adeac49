"""
Figures
=======
Vector renderings of pavings, sensors and vessels.

Why is this file needed?
------------------------
Frames are written from worker threads. The module only uses
matplotlib's object API (``matplotlib.figure.Figure``), which keeps no
global pyplot state, so every thread draws on its own figure.

Classes:
    PavingFigure: Axis-limited figure drawing boxes, points and markers.

Functions:
    render_wake: Per-frame writer of the position enclosure.
    render_detection_space: Joint detection times of two sensors.
    render_sensor_timeline: Detection windows of a single sensor.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence, Tuple, Union

from codac import IntervalVector
from matplotlib.collections import PatchCollection
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle
from matplotlib.ticker import MultipleLocator

from wakeenclosure.model.constraints import Paving, box, box_bounds

if TYPE_CHECKING:
    from wakeenclosure.model.scene import Scene
    from wakeenclosure.model.sensor import Sensor
    from wakeenclosure.model.vessel import Vessel

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

INNER_STYLE = {"facecolor": "#e8473f", "edgecolor": "#7a1f1a"}
BOUNDARY_STYLE = {"facecolor": "#f6d743", "edgecolor": "#7a6a1a"}
OUTER_STYLE = {"facecolor": "#cfe0f3", "edgecolor": "#8aa5c4"}


class PavingFigure:
    """
    Figure with fixed axis limits, sized from the window's aspect ratio.
    """

    def __init__(
        self,
        window: IntervalVector,
        xlabel: str = "x",
        ylabel: str = "y",
        width: float = 8.0,
        graduation: float = 5.0,
    ) -> None:
        """
        Args:
            window: 2-D box of the visible area.
            xlabel: Label of the horizontal axis.
            ylabel: Label of the vertical axis.
            width: Figure width in inches.
            graduation: Spacing of the major ticks.
        """
        if window.size() != 2 or window.is_empty():
            raise ValueError(f"Figure window must be a non-empty 2-D box, got {window!r}.")
        self.window = IntervalVector(window)
        (x_lb, x_ub), (y_lb, y_ub) = box_bounds(window)

        diam = (x_ub - x_lb, y_ub - y_lb)
        height = max(width * diam[1] / diam[0], 1.0)
        self.figure = Figure(figsize=(width, height), constrained_layout=True)
        self.ax = self.figure.add_subplot()

        self.ax.set_xlim(x_lb, x_ub)
        self.ax.set_ylim(y_lb, y_ub)
        self.ax.set_xlabel(xlabel)
        self.ax.set_ylabel(ylabel)
        self.ax.xaxis.set_major_locator(MultipleLocator(graduation, offset=x_lb))
        self.ax.yaxis.set_major_locator(MultipleLocator(graduation, offset=y_lb))
        self.ax.xaxis.set_major_formatter("{x:.1f}")
        self.ax.yaxis.set_major_formatter("{x:.1f}")

    def draw_boxes(self, boxes: Sequence[IntervalVector], facecolor: str, edgecolor: str, lw: float = 0.3) -> None:
        if not boxes:
            return
        rects = [Rectangle((b[0].lb(), b[1].lb()), b[0].diam(), b[1].diam()) for b in boxes]
        self.ax.add_collection(PatchCollection(rects, facecolor=facecolor, edgecolor=edgecolor, lw=lw))

    def draw_paving(self, paving: Paving, show_outer: bool = True) -> None:
        if show_outer:
            self.draw_boxes(paving.outer, **OUTER_STYLE)
        self.draw_boxes(paving.boundary, **BOUNDARY_STYLE)
        self.draw_boxes(paving.inner, **INNER_STYLE)

    def draw_points(self, points: Iterable[Tuple[float, float]], radius: float = 0.15, color: str = "red") -> None:
        for x, y in points:
            self.ax.add_patch(_circle(x, y, radius, color))

    def draw_sensors(self, sensors: Iterable[Sensor], radius: float = 0.2) -> None:
        self.draw_points(((s.x, s.y) for s in sensors), radius=radius)

    def draw_vessels(self, vessels: Iterable[Vessel], time: float = 0.0) -> None:
        """Draw every vessel at its position at ``time``, pointing along its heading."""
        for vessel in vessels:
            x, y = vessel.position_at(time)
            marker = ">" if vessel.heading == 0 else "<"
            self.ax.plot(x, y, marker=marker, markersize=10, markerfacecolor="yellow", markeredgecolor="black", ls="none")

    def set_title(self, title: str) -> None:
        self.ax.set_title(title)

    def save(self, path: PathLike) -> Path:
        """
        Write the figure as a vector image.

        The format follows the file suffix, SVG when there is none.
        """
        path = Path(path)
        if not path.suffix:
            path = path.with_suffix(".svg")
        self.figure.savefig(path)
        logger.debug(f"Saved figure to: {path}")
        return path


def _circle(x: float, y: float, radius: float, color: str) -> Circle:
    return Circle((x, y), radius, facecolor=color, edgecolor="black", lw=0.5, zorder=3)


def render_wake(scene: Scene, paving: Paving, time: float, path: PathLike) -> Path:
    """
    Render one frame: the position enclosure, the sensors and the true
    vessel positions at ``time``.
    """
    fig = PavingFigure(scene.position_box, xlabel="x", ylabel="y")
    fig.draw_paving(paving)
    fig.draw_sensors(scene.sensors)
    fig.draw_vessels(scene.vessels, time)
    fig.set_title(f"t = {time:.2f}")
    return fig.save(path)


def render_detection_space(
    scene: Scene,
    i1: int,
    i2: int,
    path: PathLike,
    precision: float = 1.0,
    show_truth: bool = False,
) -> Path:
    """Render the feasible (t_i1, t_i2) pairs of two sensors."""
    space = scene.detection_space(i1, i2, precision=precision, show_truth=show_truth)
    fig = PavingFigure(space.paving.box, xlabel=f"t{i1}", ylabel=f"t{i2}", graduation=10.0)
    fig.draw_paving(space.paving)
    fig.draw_points(space.truth)
    fig.set_title("Detection Space")
    return fig.save(path)


def render_sensor_timeline(sensor: Sensor, path: PathLike, margin: float = 5.0) -> Path:
    """Render the detection windows of one sensor along the time axis."""
    hull = sensor.detection_hull()
    window = box([(hull.lb() - margin, hull.ub() + margin), (-0.1, 0.1)])
    fig = PavingFigure(window, xlabel="t", ylabel="", width=12.0, graduation=10.0)
    fig.draw_boxes([box([(i.lb(), i.ub()), (-0.1, 0.1)]) for i in sensor.detections], facecolor="red", edgecolor="black")
    fig.ax.yaxis.set_visible(False)
    fig.set_title(f"Sensor ({sensor.x:.1f}, {sensor.y:.1f})")
    return fig.save(path)
