import math
import numpy as np
import pytest

import gridhist as gh
from gridhist import ExplicitEdges, UniformEdges


def test_uniform_binindex_convention():
    e = UniformEdges(0.0, 3.0, 3)
    assert e.binindex(0.0) == 0
    assert e.binindex(0.999) == 0
    assert e.binindex(1.0) == 1
    assert e.binindex(2.5) == 2
    # last bin is closed on the right
    assert e.binindex(3.0) == 2
    assert e.binindex(-0.1) < 0
    assert e.binindex(3.1) >= e.nbins
    assert e.binindex(float("nan")) >= e.nbins


def test_explicit_binindex_convention():
    e = ExplicitEdges([0.0, 1.0, 2.0, 5.0])
    assert e.binindex(0.0) == 0
    assert e.binindex(1.0) == 1
    assert e.binindex(4.9) == 2
    assert e.binindex(5.0) == 2
    assert e.binindex(-1.0) < 0
    assert e.binindex(5.0001) >= e.nbins


def test_binindex_array_returns_int_array():
    e = ExplicitEdges([0, 1, 2])
    b = e.binindex(np.array([0.5, 1.5, 2.0, 7.0]))
    assert b.dtype == np.int64
    np.testing.assert_array_equal(b[:3], [0, 1, 1])
    assert b[3] >= 2


def test_uniform_and_explicit_resolve_identically():
    u = UniformEdges(0.0, 1.0, 10)
    x = ExplicitEdges(np.linspace(0.0, 1.0, 11))
    vals = np.concatenate([np.linspace(-0.05, 1.05, 221), x.values])
    np.testing.assert_array_equal(u.binindex(vals), x.binindex(vals))


@pytest.mark.parametrize(
    "values",
    [[1.0], [0.0, 2.0, 1.0], [0.0, 0.0, 1.0], [0.0, np.inf]],
)
def test_explicit_edges_rejects_bad_input(values):
    with pytest.raises(ValueError):
        ExplicitEdges(values)


def test_uniform_edges_rejects_bad_input():
    with pytest.raises(ValueError):
        UniformEdges(1.0, 0.0, 3)
    with pytest.raises(ValueError):
        UniformEdges(0.0, 1.0, 0)


def test_centers_and_widths():
    e = ExplicitEdges([0, 1, 3])
    np.testing.assert_allclose(e.centers, [0.5, 2.0])
    np.testing.assert_allclose(e.widths, [1.0, 2.0])
    assert len(e) == 3
    assert e.nbins == 2
    assert (e.first, e.last) == (0.0, 3.0)


def test_as_edges_detects_uniform():
    assert isinstance(gh.as_edges([0, 1, 2, 3], detect_uniform=True), UniformEdges)
    assert isinstance(gh.as_edges([0, 1, 3], detect_uniform=True), ExplicitEdges)
    assert isinstance(gh.as_edges([0, 1, 2, 3]), ExplicitEdges)
    e = gh.as_edges({"start": 0, "stop": 2, "nbins": 4})
    np.testing.assert_allclose(e.values, [0, 0.5, 1, 1.5, 2])


def test_take_every_keeps_uniform_representation():
    coarse = ExplicitEdges([0, 1, 3, 4, 6]).take_every(2)
    assert isinstance(coarse, UniformEdges)
    np.testing.assert_allclose(coarse.values, [0, 3, 6])

    coarse = ExplicitEdges([0, 1, 2, 4, 8]).take_every(2)
    assert isinstance(coarse, ExplicitEdges)
    np.testing.assert_allclose(coarse.values, [0, 2, 8])


def test_edges_equality_ignores_representation():
    assert UniformEdges(0, 3, 3) == ExplicitEdges([0, 1, 2, 3])
    assert UniformEdges(0, 3, 3) != ExplicitEdges([0, 1, 2, 4])


def test_sturges():
    assert gh.sturges(1) == 1
    assert gh.sturges(2) == 2
    assert gh.sturges(100) == 8
    assert gh.sturges(1000) == 11
    with pytest.raises(ValueError):
        gh.sturges(0)


def test_histrange_nice_steps():
    e = gh.histrange(0.0, 10.0, 4)
    assert isinstance(e, UniformEdges)
    np.testing.assert_allclose(e.values, [0.0, 5.0, 10.0, 15.0])

    e = gh.histrange(0.0, 1.0, 10)
    assert e.nbins == 11
    assert e.first == 0.0
    assert math.isclose(e.last, 1.1)


def test_histrange_contains_range():
    rng = np.random.default_rng(3)
    for lo, hi in rng.normal(size=(20, 2)) * 50:
        lo, hi = min(lo, hi), max(lo, hi)
        e = gh.histrange(lo, hi, 7)
        assert e.first <= lo
        assert e.last > hi


def test_histrange_degenerate_range():
    e = gh.histrange(2.0, 2.0, 5)
    np.testing.assert_allclose(e.values, [2.0, 3.0])


def test_is_uniform_uses_absolute_tolerance_only():
    # large edges with a small irregularity are not uniform
    assert not gh.is_uniform([0, 1000, 2000, 3000.005])
    assert gh.is_uniform([0, 1000, 2000, 3000 + 1e-10])
    assert gh.is_uniform(np.linspace(0.0, 1.0, 11))


def test_nearly_uniform_edges_stay_explicit():
    values = [0, 1000, 2000, 3000.005]
    e = gh.as_edges(values, detect_uniform=True)
    assert isinstance(e, ExplicitEdges)
    np.testing.assert_array_equal(e.values, values)
    np.testing.assert_array_equal(e.take_every(1).values, values)
