"""
Test Suite: Frame Scheduler
===========================
Frame sampling, naming, ordering of results and isolation of failures.
"""
import logging
import threading

import pytest

from wakeenclosure.controller.scheduler import (
    FrameScheduler,
    FrameStatus,
    frame_count,
    frame_filename,
    frame_times,
)
from wakeenclosure.model import Inclusion, Vessel


class RecordingWriter:
    """Frame writer that keeps what it was given instead of drawing."""

    def __init__(self, fail_at=()):
        self.fail_at = set(fail_at)
        self.calls = []
        self.lock = threading.Lock()

    def __call__(self, scene, paving, time, path):
        with self.lock:
            self.calls.append((scene, paving, time, path))
        if time in self.fail_at:
            raise OSError(f"disk full at t={time}")
        return path


class TestSampling:
    def test_two_frames(self):
        assert frame_count(1.0, 0.5) == 2
        assert frame_times(1.0, 0.5) == [0.0, 0.5]

    def test_zero_duration(self):
        assert frame_count(0.0, 0.0) == 0
        assert frame_times(0.0, 0.1) == []

    def test_step_equal_to_duration(self):
        assert frame_times(2.0, 2.0) == [0.0]

    def test_partial_last_step(self):
        assert frame_count(1.0, 0.3) == 4

    def test_ratio_rounding(self):
        assert frame_count(0.3, 0.1) == 3
        assert frame_count(10.0, 0.1) == 100

    def test_non_positive_step(self):
        with pytest.raises(ValueError):
            frame_count(1.0, 0.0)


class TestFilenames:
    def test_single_digit_width(self):
        assert frame_filename(0.0, 1.0, 0.5) == "Wake_0.svg"
        assert frame_filename(0.5, 1.0, 0.5) == "Wake_1.svg"

    def test_padding(self):
        assert frame_filename(0.0, 10.0, 0.1) == "Wake_000.svg"
        assert frame_filename(0.7, 10.0, 0.1) == "Wake_007.svg"
        assert frame_filename(9.9, 10.0, 0.1) == "Wake_099.svg"


class TestScheduler:
    def test_results_in_submission_order(self, tmp_path, small_domain, small_sensors, small_vessels):
        writer = RecordingWriter()
        scheduler = FrameScheduler(
            small_domain, small_sensors, small_vessels, tmp_path, precision=4.0, workers=3, writer=writer
        )
        results = scheduler.run(duration=2.0, step=0.5)

        assert [r.time for r in results] == [0.0, 0.5, 1.0, 1.5]
        assert [r.index for r in results] == [0, 1, 2, 3]
        assert all(r.status is FrameStatus.DONE for r in results)
        assert [r.path.name for r in results] == ["Wake_0.svg", "Wake_1.svg", "Wake_2.svg", "Wake_3.svg"]
        assert all(r.path.parent == tmp_path.resolve() for r in results)
        assert len(writer.calls) == 4

    def test_zero_duration_schedules_nothing(self, tmp_path, small_domain, small_sensors, small_vessels):
        writer = RecordingWriter()
        scheduler = FrameScheduler(small_domain, small_sensors, small_vessels, tmp_path, writer=writer)
        assert scheduler.run(duration=0.0, step=0.0) == []
        assert writer.calls == []

    def test_each_frame_gets_its_own_scene(self, tmp_path, small_domain, small_sensors, small_vessels):
        writer = RecordingWriter()
        scheduler = FrameScheduler(
            small_domain, small_sensors, small_vessels, tmp_path, precision=4.0, workers=2, writer=writer
        )
        scheduler.run(duration=1.0, step=0.5)

        scenes = [call[0] for call in writer.calls]
        assert scenes[0] is not scenes[1]
        first, second = scenes[0].sensors, scenes[1].sensors
        assert all(a is not b for a, b in zip(first, second))
        assert all(s.predicate is None for s in scheduler.sensors)
        assert all(s.predicate is None for s in small_sensors)

    def test_enclosures_contain_the_vessels(self, tmp_path, small_domain, small_sensors, small_vessels):
        writer = RecordingWriter()
        scheduler = FrameScheduler(
            small_domain, small_sensors, small_vessels, tmp_path, precision=2.0, writer=writer
        )
        scheduler.run(duration=1.0, step=0.5)

        for _, paving, time, _ in writer.calls:
            for vessel in small_vessels:
                assert paving.classify(vessel.position_at(time)) is not Inclusion.OUT

    def test_failure_is_isolated(self, tmp_path, small_domain, small_sensors, small_vessels):
        writer = RecordingWriter(fail_at={0.5})
        scheduler = FrameScheduler(
            small_domain, small_sensors, small_vessels, tmp_path, precision=4.0, workers=2, writer=writer
        )
        results = scheduler.run(duration=1.5, step=0.5)

        assert [r.status for r in results] == [FrameStatus.DONE, FrameStatus.FAILED, FrameStatus.DONE]
        assert isinstance(results[1].error, OSError)
        assert not results[1].ok
        assert results[0].error is None and results[2].error is None
        assert len(writer.calls) == 3

    def test_degenerate_vessel_does_not_fail_frames(self, tmp_path, small_domain, small_sensors, small_vessels):
        writer = RecordingWriter()
        vessels = small_vessels + [Vessel(1.0, 1.0, 0.0)]
        scheduler = FrameScheduler(small_domain, small_sensors, vessels, tmp_path, precision=4.0, writer=writer)
        results = scheduler.run(duration=1.0, step=1.0)

        assert [r.status for r in results] == [FrameStatus.DONE]
        scene = writer.calls[0][0]
        assert all(len(s.rejected) == 1 for s in scene.sensors)
        assert len(scene.rejected_vessels) == 1
        assert results[0].rejected == 1

    def test_rejected_vessels_are_counted_per_frame(self, tmp_path, small_domain, small_sensors, small_vessels, caplog):
        vessels = small_vessels + [Vessel(1.0, 1.0, 0.0), Vessel(-1.0, 2.0, 0.0)]
        scheduler = FrameScheduler(
            small_domain, small_sensors, vessels, tmp_path, precision=4.0, writer=RecordingWriter()
        )
        with caplog.at_level(logging.WARNING, logger="wakeenclosure"):
            results = scheduler.run(duration=1.0, step=0.5)

        assert [r.rejected for r in results] == [2, 2]
        summary = [r for r in caplog.records if r.name == "wakeenclosure.controller.scheduler"]
        assert len(summary) == 1
        assert "2 vessel(s)" in summary[0].getMessage()

    def test_nothing_rejected(self, tmp_path, small_domain, small_sensors, small_vessels):
        scheduler = FrameScheduler(
            small_domain, small_sensors, small_vessels, tmp_path, precision=4.0, writer=RecordingWriter()
        )
        assert [r.rejected for r in scheduler.run(duration=1.0, step=1.0)] == [0]

    def test_renders_vector_frames(self, tmp_path, small_domain, small_sensors, small_vessels):
        scheduler = FrameScheduler(small_domain, small_sensors, small_vessels, tmp_path, precision=4.0, workers=2)
        results = scheduler.run(duration=1.0, step=0.5)

        assert all(r.ok for r in results)
        for r in results:
            assert r.path.exists()
            assert r.path.read_text().lstrip().startswith("<?xml")
