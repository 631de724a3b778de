import numpy as np
import pytest

import gridhist as gh
from gridhist import Hist1D


def test_push_and_lookup():
    h = Hist1D([0, 1, 2, 3])
    h.push(0.5)
    h.push(2.5, 2.0)
    h.push(3.0)
    h.push(7.0)
    np.testing.assert_array_equal(h.counts, [1, 0, 3])
    np.testing.assert_array_equal(h.sumw2, [1, 0, 5])
    assert h.lookup(0.5) == 1
    assert h.lookup(7.0) is None
    assert h.lookup(1.5) == 0


def test_overflow_clamps():
    h = Hist1D(gh.UniformEdges(0, 3, 3), overflow=True)
    h.push(-5.0)
    h.push(9.0, 0.5)
    np.testing.assert_array_equal(h.counts, [1, 0, 0.5])
    np.testing.assert_array_equal(h.sumw2, [1, 0, 0.25])


def test_fill_matches_push():
    rng = np.random.default_rng(7)
    x = rng.normal(1.5, 1.0, 200)
    w = rng.uniform(0, 1, 200)
    hp = Hist1D([0, 1, 2, 3])
    for xi, wi in zip(x, w):
        hp.push(xi, wi)
    hf = Hist1D([0, 1, 2, 3])
    hf.fill(x, weights=w)
    np.testing.assert_allclose(hf.counts, hp.counts)
    np.testing.assert_allclose(hf.sumw2, hp.sumw2)


def test_rebin():
    h = Hist1D([0, 1, 2, 3, 4], counts=[1, 2, 3, 4], sumw2=[1, 1, 1, 1])
    r = h.rebin(2)
    np.testing.assert_array_equal(r.counts, [3, 7])
    np.testing.assert_array_equal(r.sumw2, [2, 2])
    np.testing.assert_allclose(r.binedges(), [0, 2, 4])
    assert h.rebin(1) == h
    with pytest.raises(ValueError):
        h.rebin(3)


def test_default_sumw2_assumes_unit_weights():
    h = Hist1D([0, 1, 2], counts=[4, 9])
    np.testing.assert_allclose(h.binerrors(), [2, 3])


def test_from_samples():
    x = np.array([0.1, 0.2, 0.7, 5.0])
    h = Hist1D.from_samples(x, bins=[0, 0.5, 1.0])
    assert isinstance(h.edges, gh.UniformEdges)
    assert h.counts.dtype == np.int64
    np.testing.assert_array_equal(h.counts, [2, 1])

    h = Hist1D.from_samples(x, nbins=4)
    assert h.integral() == 4

    with pytest.raises(ValueError):
        Hist1D.from_samples(x, weights=[1.0, 2.0])
    with pytest.raises(ValueError):
        Hist1D.from_samples([])


def test_normalize_and_centers():
    h = Hist1D([0, 1, 3], counts=[1.0, 3.0])
    n = h.normalize()
    np.testing.assert_allclose(n.counts, [0.25, 0.75])
    np.testing.assert_allclose(n.sumw2, [1 / 16, 3 / 16])
    np.testing.assert_allclose(h.bincenters(), [0.5, 2.0])
    assert h.nbins == 2


def test_positional_constructor_edges_values_sumw2_overflow():
    h = Hist1D([0, 1, 2], [1.0, 2.0], [1.0, 4.0], True)
    assert h.overflow is True
    np.testing.assert_array_equal(h.counts, [1.0, 2.0])
    np.testing.assert_array_equal(h.sumw2, [1.0, 4.0])
    h.push(9.0)
    assert h.counts[1] == 3.0


def test_integer_storage_push_and_fill_agree():
    hp = Hist1D([0, 1, 2], dtype=int)
    hf = Hist1D([0, 1, 2], dtype=int)
    hp.push(0.5)
    hf.push(0.5)
    hp.push(0.5, -0.5)
    hf.fill([0.5], weights=[-0.5])
    np.testing.assert_array_equal(hp.counts, hf.counts)
    np.testing.assert_array_equal(hp.counts, [1, 0])
    np.testing.assert_allclose(hp.sumw2, hf.sumw2)
