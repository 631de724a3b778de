import numbers
import threading

import numpy as np


class HistBase:
    """
    Storage shared by Hist1D and Hist2D.

    Holds the per-axis edges, the counts grid, the parallel sum of squared
    weights (sumw2) and the lock used by the atomic fill entry points.
    Subclasses implement `_from_arrays` to build a new instance of their
    own type from edges and arrays.
    """

    def _init_storage(self, axes, counts, sumw2, dtype, overflow):
        self._axes = tuple(axes)
        shape = tuple(e.nbins for e in self._axes)

        if counts is None:
            self._counts = np.zeros(shape, dtype=np.dtype(dtype))
        else:
            self._counts = np.array(counts, copy=True)
            if self._counts.shape != shape:
                raise ValueError(
                    f"counts shape {self._counts.shape} does not match edges {shape}"
                )

        if sumw2 is None:
            # unit weights: sumw2 == counts
            self._sumw2 = np.abs(self._counts).astype(float)
        else:
            self._sumw2 = np.array(sumw2, dtype=float, copy=True)
            if self._sumw2.shape != shape:
                raise ValueError(
                    f"sumw2 shape {self._sumw2.shape} does not match edges {shape}"
                )

        self._overflow = bool(overflow)
        self._lock = threading.Lock()

    @classmethod
    def _from_arrays(cls, axes, counts, sumw2, overflow):
        raise NotImplementedError

    # ---------- accessors ----------
    @property
    def counts(self):
        return self._counts

    @property
    def sumw2(self):
        return self._sumw2

    @property
    def overflow(self):
        return self._overflow

    @property
    def dtype(self):
        return self._counts.dtype

    @property
    def lock(self):
        return self._lock

    def bincounts(self):
        return self._counts

    def binerrors(self, f=np.sqrt):
        """Bin errors from sumw2, Gaussian (sqrt) by default."""
        return f(self._sumw2)

    def integral(self):
        return self._counts.sum()

    def clear(self):
        """Reset counts and sumw2 to zero, keeping the edges."""
        self._counts[...] = 0
        self._sumw2[...] = 0.0
        return self

    # ---------- filling ----------
    def _accumulate(self, idx, weights=None):
        if weights is None:
            np.add.at(self._counts, idx, 1)
            np.add.at(self._sumw2, idx, 1.0)
        else:
            w = np.asarray(weights)
            np.add.at(self._counts, idx, w.astype(self._counts.dtype, copy=False))
            np.add.at(self._sumw2, idx, np.square(w, dtype=float))

    def _check_samples(self, coords, weights, mask):
        arrs = [np.atleast_1d(np.asarray(c, dtype=float)) for c in coords]
        shape = arrs[0].shape
        for a in arrs[1:]:
            if a.shape != shape:
                raise ValueError(
                    f"coordinate arrays differ in shape: {shape} vs {a.shape}"
                )

        if weights is not None:
            w = np.asarray(weights)
            if w.ndim == 0:
                w = np.full(shape, w)
            elif w.shape != shape:
                raise ValueError(
                    f"weights shape {w.shape} does not match samples {shape}"
                )
            weights = w

        if mask is not None:
            m = np.asarray(mask, dtype=bool)
            if m.shape != shape:
                raise ValueError(f"mask shape {m.shape} does not match samples {shape}")
            arrs = [a[m] for a in arrs]
            if weights is not None:
                weights = weights[m]

        return arrs, weights

    def _resolve(self, arrs):
        """Bin indices per axis plus the mask of samples to accumulate."""
        ok = np.ones(arrs[0].shape, dtype=bool)
        idx = []
        for e, a in zip(self._axes, arrs):
            b = e.binindex(a)
            ok &= ~np.isnan(a)
            if self._overflow:
                b = np.clip(b, 0, e.nbins - 1)
            else:
                ok &= (b >= 0) & (b < e.nbins)
            idx.append(b)
        return idx, ok

    def _fill_arrays(self, arrs, weights):
        idx, ok = self._resolve(arrs)
        if not ok.any():
            return
        self._accumulate(
            tuple(b[ok] for b in idx), None if weights is None else weights[ok]
        )

    def atomic_fill(self, *args, **kwargs):
        """Thread-safe `fill`."""
        with self._lock:
            self.fill(*args, **kwargs)

    # ---------- transforms ----------
    def normalize(self):
        """New histogram divided by its integral."""
        with np.errstate(divide="ignore", invalid="ignore"):
            scale = np.float64(1.0) / self.integral()
        return self * scale

    def copy(self):
        """Deep copy with its own lock."""
        return self._from_arrays(
            self._axes, self._counts.copy(), self._sumw2.copy(), self._overflow
        )

    def __deepcopy__(self, memo):
        return self.copy()

    def astype(self, dtype):
        """Return a new histogram with counts cast to `dtype` (sumw2 stays float)."""
        return self._from_arrays(
            self._axes,
            self._counts.astype(np.dtype(dtype)),
            self._sumw2.copy(),
            self._overflow,
        )

    # ---------- arithmetic ----------
    def _check_compat(self, other):
        """Ensure histograms have identical binning."""
        if len(self._axes) != len(other._axes):
            raise ValueError("Histogram dimensionality mismatch.")
        for a, b in zip(self._axes, other._axes):
            if a != b:
                raise ValueError("Histogram edges differ.")

    def __add__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        self._check_compat(other)
        return self._from_arrays(
            self._axes,
            self._counts + other._counts,
            self._sumw2 + other._sumw2,
            self._overflow,
        )

    def __sub__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        self._check_compat(other)
        return self._from_arrays(
            self._axes,
            self._counts - other._counts,
            self._sumw2 + other._sumw2,
            self._overflow,
        )

    def _inplace(self, other, sign):
        self._check_compat(other)
        out_dtype = np.result_type(self._counts.dtype, other._counts.dtype)
        if self._counts.dtype != out_dtype:
            self._counts = self._counts.astype(out_dtype)
        if sign > 0:
            self._counts += other._counts
        else:
            self._counts -= other._counts
        self._sumw2 += other._sumw2
        return self

    def __iadd__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self._inplace(other, +1)

    def __isub__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self._inplace(other, -1)

    def __radd__(self, other):
        # supports sum([hist1, hist2, ...])
        if isinstance(other, numbers.Number) and other == 0:
            return self.copy()
        return NotImplemented

    def __mul__(self, k):
        if not isinstance(k, numbers.Real):
            return NotImplemented
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return self._from_arrays(
                self._axes, self._counts * k, self._sumw2 * (k * k), self._overflow
            )

    __rmul__ = __mul__

    def __truediv__(self, k):
        if not isinstance(k, numbers.Real):
            return NotImplemented
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            k = np.float64(k)
            return self._from_arrays(
                self._axes, self._counts / k, self._sumw2 / (k * k), self._overflow
            )

    def merge_(self, other):
        """In-place merge (same as +=)."""
        return self.__iadd__(other)

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return (
            self._overflow == other._overflow
            and all(a == b for a, b in zip(self._axes, other._axes))
            and np.array_equal(self._counts, other._counts)
            and np.array_equal(self._sumw2, other._sumw2)
        )

    __hash__ = None
