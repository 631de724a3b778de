import math
import numbers

import numpy as np


def is_uniform(values, atol=1e-9):
    """True if consecutive differences of `values` agree within absolute tolerance `atol`."""
    d = np.diff(np.asarray(values, dtype=float))
    if d.size == 0:
        return False
    return bool(np.allclose(d, d[0], rtol=0, atol=atol))


class Edges:
    """
    Bin boundaries of one histogram axis.

    Bins are left-closed, right-open [e[i], e[i+1]) except the last one,
    which also contains the last edge. Subclasses differ only in how they
    store the boundaries and how fast they resolve a value to a bin.
    """

    @property
    def values(self):
        return self._values

    @property
    def nbins(self):
        return len(self._values) - 1

    @property
    def first(self):
        return float(self._values[0])

    @property
    def last(self):
        return float(self._values[-1])

    @property
    def centers(self):
        v = self._values
        return 0.5 * (v[:-1] + v[1:])

    @property
    def widths(self):
        return np.diff(self._values)

    def __len__(self):
        return len(self._values)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._values.copy()
        return self._values.astype(dtype)

    def __eq__(self, other):
        if not isinstance(other, Edges):
            return NotImplemented
        return np.array_equal(self._values, other._values)

    __hash__ = None

    def _raw_index(self, x):
        raise NotImplementedError

    def binindex(self, x):
        """
        0-based bin index of `x` (scalar or array).

        Values below the first edge give a negative index, values above the
        last edge (and NaN) give an index >= nbins.
        """
        xa = np.asarray(x, dtype=float)
        idx = self._raw_index(xa)
        n = self.nbins
        # last bin is closed on the right
        idx = np.where(xa == self._values[-1], n - 1, idx)
        idx = np.where(np.isnan(xa), n, idx).astype(np.int64)
        if idx.ndim == 0:
            return int(idx)
        return idx

    def take_every(self, n):
        """Keep every `n`-th boundary starting from the first."""
        return as_edges(self._values[::n], detect_uniform=True)


class ExplicitEdges(Edges):
    def __init__(self, values):
        v = np.array(values, dtype=float, copy=True)
        if v.ndim != 1 or v.size < 2:
            raise ValueError("Bin edges need at least 2 entries.")
        if not np.all(np.isfinite(v)):
            raise ValueError("Bin edges must be finite.")
        if np.any(np.diff(v) <= 0):
            raise ValueError("Bin edges must be strictly increasing.")
        self._values = v

    def _raw_index(self, x):
        return np.searchsorted(self._values, x, side="right") - 1

    def __repr__(self):
        return f"ExplicitEdges({self._values.tolist()!r})"


class UniformEdges(Edges):
    def __init__(self, start, stop, nbins):
        start, stop = float(start), float(stop)
        if not isinstance(nbins, numbers.Integral) or nbins < 1:
            raise ValueError(f"nbins must be a positive integer, got {nbins!r}")
        if not (math.isfinite(start) and math.isfinite(stop)):
            raise ValueError("Bin edges must be finite.")
        if stop <= start:
            raise ValueError("Bin edges must be strictly increasing.")
        self.start = start
        self.stop = stop
        self.width = (stop - start) / nbins
        self._values = np.linspace(start, stop, int(nbins) + 1)

    def _raw_index(self, x):
        n = self.nbins
        v = self._values
        with np.errstate(invalid="ignore"):
            guess = np.floor((x - self.start) / self.width)
        guess = np.nan_to_num(guess, nan=n, posinf=n, neginf=-1)
        j = np.clip(guess, 0, n - 1).astype(np.int64)
        # closed form can be one bin off from the materialised edges
        return j + (x >= v[j + 1]) - (x < v[j])

    def __repr__(self):
        return f"UniformEdges({self.start!r}, {self.stop!r}, {self.nbins})"


def as_edges(obj, detect_uniform=False):
    """
    Convert `obj` to an Edges instance.

    Accepts an Edges (returned as-is), a mapping with start/stop/nbins, or
    an array-like of boundaries. With `detect_uniform`, equally spaced
    boundaries become UniformEdges.
    """
    if isinstance(obj, Edges):
        return obj
    if isinstance(obj, dict):
        return UniformEdges(obj["start"], obj["stop"], obj["nbins"])
    v = np.asarray(obj, dtype=float)
    if detect_uniform and v.ndim == 1 and v.size >= 2 and is_uniform(v):
        return UniformEdges(v[0], v[-1], v.size - 1)
    return ExplicitEdges(v)


def sturges(n):
    """Number of bins for `n` samples by Sturges' rule: ceil(log2(n)) + 1."""
    if n < 1:
        raise ValueError("Sturges' rule needs at least one sample.")
    return int(math.ceil(math.log2(n))) + 1


def histrange(lo, hi, n):
    """
    Uniform edges covering [lo, hi] with about `n` bins of a "nice" width.

    The step is 1, 2 or 5 times a power of ten and `hi` lies strictly inside
    the last bin, so every sample in [lo, hi] is accumulated.
    """
    lo, hi = float(lo), float(hi)
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise ValueError("histrange needs finite limits.")
    if n < 1:
        raise ValueError(f"need at least one bin, got {n}")

    if hi == lo:
        start, step, divisor, length = hi, 1.0, 1.0, 1
    else:
        bw = (hi - lo) / n
        lbw = math.log10(bw)
        if lbw >= 0:
            step = 10.0 ** math.floor(lbw)
            r = bw / step
            if r <= 1.01:
                pass
            elif r <= 2.01:
                step *= 2
            elif r <= 5.01:
                step *= 5
            else:
                step *= 10
            divisor = 1.0
            start = step * math.floor(lo / step)
            length = math.ceil((hi - start) / step)
        else:
            divisor = 10.0 ** -math.floor(lbw)
            r = bw * divisor
            if r <= 1.01:
                pass
            elif r <= 2.01:
                divisor /= 2
            elif r <= 5.01:
                divisor /= 5
            else:
                divisor /= 10
            step = 1.0
            start = math.floor(lo * divisor)
            length = math.ceil(hi * divisor - start)

    while lo < start / divisor:
        start -= step
    while (start + (length - 1) * step) / divisor <= hi:
        length += 1

    return UniformEdges(start / divisor, (start + (length - 1) * step) / divisor, int(length) - 1)
