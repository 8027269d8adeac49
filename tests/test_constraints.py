"""
Test Suite: Constraint Building Blocks
======================================
Time-window separators, their unions and products, projections and the
flattened pavings handed to the renderer.
"""
from codac import AnalyticFunction, Interval, IntervalVector, SepInverse, Vector, VectorVar
import pytest

from wakeenclosure.model.constraints import (
    Inclusion,
    Paving,
    box,
    box_bounds,
    pave_box,
    product_separator,
    projection_separator,
    union_separator,
    window_separator,
)


@pytest.fixture
def two_windows():
    return union_separator([window_separator(Interval(0, 1)), window_separator(Interval(4, 5))])


class TestBoxes:
    def test_bounds(self):
        x = box([(-1, 2), (3, 4.5)])
        assert x.size() == 2
        assert box_bounds(x) == [(-1.0, 2.0), (3.0, 4.5)]


class TestSeparators:
    def test_union_of_windows(self, two_windows):
        paving = pave_box(box([(-1, 6)]), two_windows, precision=0.1)

        assert paving.classify([0.5]) is not Inclusion.OUT
        assert paving.classify([4.5]) is not Inclusion.OUT
        assert paving.classify([2.5]) is Inclusion.OUT
        assert paving.classify([-0.5]) is Inclusion.OUT
        assert paving.classify([7.0]) is Inclusion.OUT
        assert paving.inner
        assert paving.outer

    def test_product(self, two_windows):
        product = product_separator([two_windows, window_separator(Interval(-1, 1))])
        paving = pave_box(box([(-1, 6), (-2, 2)]), product, precision=0.1)

        assert paving.classify([0.5, 0.0]) is not Inclusion.OUT
        assert paving.classify([4.5, 0.5]) is not Inclusion.OUT
        assert paving.classify([2.5, 0.0]) is Inclusion.OUT
        assert paving.classify([0.5, 1.5]) is Inclusion.OUT

    def test_single_factor_is_returned_as_is(self, two_windows):
        assert product_separator([two_windows]) is two_windows

    def test_nothing_to_combine(self):
        with pytest.raises(ValueError):
            union_separator([])
        with pytest.raises(ValueError):
            product_separator([])


class TestProjection:
    @pytest.fixture
    def band(self):
        # {(x, y) | x + y in [0, 1]}
        v = VectorVar(2)
        return SepInverse(AnalyticFunction([v], v[0] + v[1]), Interval(0, 1))

    def test_projection_along_trailing_axis(self, band):
        # {x | exists y in [-5, 5], x + y in [0, 1]} = [-5, 6]
        projection = projection_separator(band, [0], box([(-5, 5)]), precision=0.1)
        paving = pave_box(box([(-8, 8)]), projection, precision=0.25)

        assert paving.classify([0.5]) is not Inclusion.OUT
        assert paving.classify([-4.5]) is not Inclusion.OUT
        assert paving.classify([7.5]) is Inclusion.OUT
        assert paving.classify([-7.5]) is Inclusion.OUT

    def test_rejects_bad_precision(self, band):
        with pytest.raises(ValueError):
            projection_separator(band, [0], box([(-5, 5)]), precision=0)


class TestPaving:
    def test_band(self):
        v = VectorVar(2)
        band = SepInverse(AnalyticFunction([v], v[0] + v[1]), Interval(0, 1))
        paving = pave_box(box([(-2, 2), (-2, 2)]), band, precision=0.25)

        assert paving.classify([0.25, 0.25]) is not Inclusion.OUT
        assert paving.classify([0.0, 1.0]) is not Inclusion.OUT
        assert paving.classify([1.5, 1.5]) is Inclusion.OUT
        assert paving.classify([5.0, 5.0]) is Inclusion.OUT
        assert not paving.is_empty

        hull = paving.hull()
        assert hull.is_subset(box([(-2, 2), (-2, 2)]))
        assert hull.contains(Vector([0.5, 0.0]))

    def test_empty_box(self, two_windows):
        paving = pave_box(IntervalVector.empty(1), two_windows, precision=0.25)
        assert paving.is_empty
        assert not paving.outer

    def test_rejects_bad_precision(self, two_windows):
        with pytest.raises(ValueError):
            pave_box(box([(0, 1)]), two_windows, precision=0)

    def test_hull_of_nothing_is_empty(self):
        paving = Paving(box=box([(0, 1), (0, 1)]), precision=1.0, outer=[box([(0, 1), (0, 1)])])
        assert paving.is_empty
        assert paving.hull().is_empty()
