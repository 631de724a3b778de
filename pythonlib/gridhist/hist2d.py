import numbers

import numpy as np

from ._base import HistBase
from .edges import as_edges, histrange, is_uniform, sturges
from .hist1d import Hist1D


def _check_factor(n, size, axis):
    if not isinstance(n, numbers.Integral) or n < 1 or size % n:
        raise ValueError(f"rebin factor {n!r} does not divide {size} {axis}-bins")


def _check_axis(axis):
    if axis not in ("x", "y"):
        raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")


class Hist2D(HistBase):
    """
    Two-dimensional histogram with sumw2 tracking.

    Parameters
    ----------
    x_edges, y_edges : Edges or array-like
        Bin edges per axis, left-closed bins [e[i], e[i+1]) with the last
        bin closed.
    counts, sumw2 : array-like, optional
        Initial content of shape (nx, ny). Both are copied.
    overflow : bool, default False
        Clamp out-of-range values into the edge bins instead of dropping them.
    dtype : numpy dtype-like, default float
        Storage dtype for counts of an empty histogram (keyword only).

    `push` and `fill` are not thread-safe; concurrent writers must go
    through `atomic_push` / `atomic_fill`. Reads take no lock.
    """

    def __init__(
        self, x_edges, y_edges, counts=None, sumw2=None, overflow=False, *, dtype=float
    ):
        axes = (as_edges(x_edges), as_edges(y_edges))
        self._init_storage(axes, counts, sumw2, dtype, overflow)

    @classmethod
    def _from_arrays(cls, axes, counts, sumw2, overflow):
        return cls(axes[0], axes[1], counts, sumw2, overflow=overflow)

    @classmethod
    def from_samples(cls, x, y, weights=None, bins=None, nbins=None, overflow=False):
        """
        Build a histogram from paired samples.

        Parameters
        ----------
        x, y : array-like
            Sample coordinates, same length.
        weights : array-like, optional
            Per-sample weights, same length as `x`. Counts are int64 when
            unweighted and take the weights' dtype otherwise.
        bins : (x_edges, y_edges), optional
            Explicit edges. Equally spaced edges are stored as UniformEdges.
        nbins : (int, int), optional
            Bin counts for automatic edges when `bins` is not given.
            Defaults to Sturges' rule on each axis.
        overflow : bool, default False
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        if x.shape != y.shape:
            raise ValueError(f"x and y differ in shape: {x.shape} vs {y.shape}")
        if weights is not None:
            weights = np.asarray(weights)
            if weights.shape != x.shape:
                raise ValueError(
                    f"weights shape {weights.shape} does not match samples {x.shape}"
                )
        dtype = np.int64 if weights is None else weights.dtype

        if bins is None:
            if x.size == 0:
                raise ValueError("Cannot determine bin edges from empty samples.")
            if nbins is None:
                nbins = (sturges(x.size), sturges(y.size))
            bins = (
                histrange(np.min(x), np.max(x), nbins[0]),
                histrange(np.min(y), np.max(y), nbins[1]),
            )
        else:
            ex, ey = (as_edges(b) for b in bins)
            if is_uniform(ex.values) and is_uniform(ey.values):
                ex = as_edges(ex.values, detect_uniform=True)
                ey = as_edges(ey.values, detect_uniform=True)
            bins = (ex, ey)

        h = cls(bins[0], bins[1], dtype=dtype, overflow=overflow)
        h.fill(x, y, weights=weights)
        return h

    # ---------- accessors ----------
    @property
    def edges(self):
        return self._axes

    @property
    def nbins(self):
        return self._counts.shape

    def binedges(self):
        return tuple(e.values for e in self._axes)

    def bincenters(self):
        return tuple(e.centers for e in self._axes)

    # ---------- filling ----------
    def push(self, x, y, weight=1):
        """
        Add one (x, y) pair. sumw2 accumulates weight**2.

        Out-of-range pairs are clamped into the edge bins when `overflow`
        is set and silently dropped otherwise.
        """
        if np.isnan(x) or np.isnan(y):
            return
        ex, ey = self._axes
        nx, ny = self._counts.shape
        ix = ex.binindex(x)
        iy = ey.binindex(y)
        if self._overflow:
            ix = min(max(ix, 0), nx - 1)
            iy = min(max(iy, 0), ny - 1)
        elif not (0 <= ix < nx and 0 <= iy < ny):
            return
        self._counts[ix, iy] += self._counts.dtype.type(weight)
        self._sumw2[ix, iy] += weight * weight

    def atomic_push(self, x, y, weight=1):
        """Thread-safe `push`."""
        with self._lock:
            self.push(x, y, weight)

    def fill(self, x, y, mask=None, weights=None):
        """
        Incremental fill with arrays of (x, y) values.

        Same overflow semantics as `push`. `weights` may be a scalar or an
        array matching `x`.
        """
        arrs, weights = self._check_samples((x, y), weights, mask)
        self._fill_arrays(arrs, weights)

    # ---------- queries ----------
    def lookup(self, x, y):
        """
        Bin content at (x, y), or None if either value lies outside the edges.

        The overflow policy is not applied.
        """
        ex, ey = self._axes
        if not (ex.first <= x <= ex.last and ey.first <= y <= ey.last):
            return None
        return self._counts[ex.binindex(x), ey.binindex(y)]

    # ---------- transforms ----------
    def rebin(self, nx=1, ny=None):
        """Merge `nx` (`ny`) consecutive bins along x (y) by summing."""
        if ny is None:
            ny = nx
        sx, sy = self.nbins
        _check_factor(nx, sx, "x")
        _check_factor(ny, sy, "y")

        blocks = (sx // nx, nx, sy // ny, ny)
        counts = self._counts.reshape(blocks).sum(axis=(1, 3), dtype=self.dtype)
        sumw2 = self._sumw2.reshape(blocks).sum(axis=(1, 3))
        ex, ey = self._axes
        return Hist2D(
            ex.take_every(nx), ey.take_every(ny), counts, sumw2, overflow=self._overflow
        )

    def project(self, axis="x"):
        """
        Projection onto `axis` ('x' or 'y'), summing over the other axis.
        Returns a Hist1D.
        """
        _check_axis(axis)
        dim = 1 if axis == "x" else 0
        edges = self._axes[0] if axis == "x" else self._axes[1]
        return Hist1D(
            edges,
            self._counts.sum(axis=dim),
            self._sumw2.sum(axis=dim),
            overflow=self._overflow,
        )

    def transpose(self):
        """Swap the x and y axes."""
        ex, ey = self._axes
        return Hist2D(
            ey,
            ex,
            self._counts.T.copy(),
            self._sumw2.T.copy(),
            overflow=self._overflow,
        )

    @property
    def T(self):
        return self.transpose()

    def profile(self, axis="x"):
        """
        Weighted mean of the other axis' bin centers per `axis` bin.

        Returns a Hist1D over the `axis` edges whose sumw2 holds the
        variance of the mean. Empty bins get value and variance 0, as ROOT
        does.
        """
        _check_axis(axis)
        h = self.transpose() if axis == "y" else self

        edges = h._axes[0]
        centers = h._axes[1].centers
        counts = h._counts.astype(float)
        sumw2 = h._sumw2

        num = counts @ centers
        den = counts.sum(axis=1)
        numerr2 = sumw2 @ centers**2
        denerr2 = sumw2.sum(axis=1)
        with np.errstate(divide="ignore", invalid="ignore"):
            val = num / den
            sw2 = numerr2 / den**2 - denerr2 * (num / den**2) ** 2

        # ROOT sets the NaN entries and their error to 0
        val[np.isnan(val)] = 0.0
        sw2[np.isnan(sw2)] = 0.0

        return Hist1D(edges, val, sw2, overflow=self._overflow)

    def __repr__(self):
        return (
            f"Hist2D(nbins={tuple(self.nbins)}, dtype={self.dtype}, "
            f"integral={self.integral()}, overflow={self._overflow})"
        )
