import numbers

import numpy as np

from ._base import HistBase
from .edges import as_edges, histrange, sturges


class Hist1D(HistBase):
    """
    One-dimensional histogram with sumw2 tracking.

    Parameters
    ----------
    edges : Edges or array-like
        Bin edges, left-closed bins [e[i], e[i+1]) with the last bin closed.
    counts, sumw2 : array-like, optional
        Initial content. Both are copied. Missing sumw2 assumes unit weights.
    overflow : bool, default False
        Clamp out-of-range values into the first/last bin instead of
        dropping them.
    dtype : numpy dtype-like, default float
        Storage dtype for counts of an empty histogram (keyword only).
    """

    def __init__(self, edges, counts=None, sumw2=None, overflow=False, *, dtype=float):
        self._init_storage((as_edges(edges),), counts, sumw2, dtype, overflow)

    @classmethod
    def _from_arrays(cls, axes, counts, sumw2, overflow):
        return cls(axes[0], counts, sumw2, overflow=overflow)

    @classmethod
    def from_samples(cls, x, weights=None, bins=None, nbins=None, overflow=False):
        """
        Build a histogram from samples.

        Without `bins`, uniform edges covering the data are chosen with
        `nbins` bins (Sturges' rule by default).
        """
        x = np.asarray(x, dtype=float)
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
                nbins = sturges(x.size)
            edges = histrange(np.min(x), np.max(x), nbins)
        else:
            edges = as_edges(bins, detect_uniform=True)

        h = cls(edges, dtype=dtype, overflow=overflow)
        h.fill(x, weights=weights)
        return h

    @property
    def edges(self):
        return self._axes[0]

    @property
    def nbins(self):
        return self._counts.shape[0]

    def binedges(self):
        return self._axes[0].values

    def bincenters(self):
        return self._axes[0].centers

    def push(self, x, weight=1):
        """Add one value. sumw2 accumulates weight**2."""
        if np.isnan(x):
            return
        e = self._axes[0]
        i = e.binindex(x)
        n = e.nbins
        if self._overflow:
            i = min(max(i, 0), n - 1)
        elif not 0 <= i < n:
            return
        self._counts[i] += self._counts.dtype.type(weight)
        self._sumw2[i] += weight * weight

    def atomic_push(self, x, weight=1):
        """Thread-safe `push`."""
        with self._lock:
            self.push(x, weight)

    def fill(self, x, mask=None, weights=None):
        """Vectorised `push` of an array of values."""
        arrs, weights = self._check_samples((x,), weights, mask)
        self._fill_arrays(arrs, weights)

    def lookup(self, x):
        """Bin content at `x`, or None outside the edges."""
        e = self._axes[0]
        if not e.first <= x <= e.last:
            return None
        return self._counts[e.binindex(x)]

    def rebin(self, n=1):
        """Merge `n` consecutive bins into one by summing."""
        size = self.nbins
        if not isinstance(n, numbers.Integral) or n < 1 or size % n:
            raise ValueError(f"rebin factor {n!r} does not divide {size} bins")
        counts = self._counts.reshape(size // n, n).sum(axis=1, dtype=self.dtype)
        sumw2 = self._sumw2.reshape(size // n, n).sum(axis=1)
        return Hist1D(
            self._axes[0].take_every(n), counts, sumw2, overflow=self._overflow
        )

    def __repr__(self):
        return (
            f"Hist1D(nbins={self.nbins}, dtype={self.dtype}, "
            f"integral={self.integral()}, overflow={self._overflow})"
        )
