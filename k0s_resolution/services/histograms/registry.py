"""
HistogramRegistry service - Named histograms filled by the event pipeline.

Dense histograms are hist.Hist objects. High-dimensional histograms
(the multidimensional mass histogram) use SparseHistogram, which stores
only populated bins. Fills are serialised with a lock so that events can
be processed from several threads.
"""

import threading
from collections import Counter
from typing import Iterator, Optional, Protocol, Union

import numpy as np
from hist import Hist, axis as hax
from hist import storage


class HistogramSink(Protocol):
    """What the event pipeline needs from a histogram backend."""

    def fill(self, name: str, *values: float) -> None:
        ...


class SparseHistogram:
    """
    Histogram over many axes that stores only non-empty bins.

    Bin lookup uses the hist axis objects, so binning and flow behaviour
    match the dense histograms.
    """

    def __init__(self, *axes: hax.Regular):
        if not axes:
            raise ValueError("SparseHistogram needs at least one axis")
        self.axes = tuple(axes)
        self._bins: Counter = Counter()

    @property
    def ndim(self) -> int:
        return len(self.axes)

    def fill(self, *values: float, weight: float = 1.0) -> "SparseHistogram":
        if len(values) != self.ndim:
            raise ValueError(f"Expected {self.ndim} values, got {len(values)}")
        key = tuple(int(ax.index(value)) for ax, value in zip(self.axes, values))
        self._bins[key] += weight
        return self

    def sum(self) -> float:
        return float(sum(self._bins.values()))

    def bin_count(self) -> int:
        return len(self._bins)

    def items(self) -> Iterator[tuple[tuple[int, ...], float]]:
        return iter(self._bins.items())

    def to_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Populated bin indices (N x ndim) and their contents (N)."""
        if not self._bins:
            return np.zeros((0, self.ndim), dtype=np.int64), np.zeros(0, dtype=np.float64)
        keys, counts = zip(*self._bins.items())
        return np.asarray(keys, dtype=np.int64), np.asarray(counts, dtype=np.float64)

    def __add__(self, other: "SparseHistogram") -> "SparseHistogram":
        if not isinstance(other, SparseHistogram):
            return NotImplemented
        if self.axes != other.axes:
            raise ValueError("Cannot add sparse histograms with different axes")
        result = SparseHistogram(*self.axes)
        result._bins = self._bins + other._bins
        return result


Histogram = Union[Hist, SparseHistogram]


class HistogramRegistry:
    """
    Named collection of histograms.

    Implements HistogramSink. Bin increments commute, so registries filled
    independently can be combined with merge().
    """

    def __init__(self, name: str = "K0sResolution"):
        self.name = name
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()

    def add(self, hist_name: str, *axes: hax.Regular, sparse: bool = False) -> Histogram:
        """
        Book a histogram.

        Args:
            hist_name: Unique histogram name
            axes: Axis definitions
            sparse: Store only populated bins

        Returns:
            The booked histogram
        """
        if hist_name in self._histograms:
            raise ValueError(f"Histogram '{hist_name}' is already booked")
        if sparse:
            histogram = SparseHistogram(*axes)
        else:
            histogram = Hist(*axes, storage=storage.Double())
        self._histograms[hist_name] = histogram
        return histogram

    def fill(self, name: str, *values: float) -> None:
        histogram = self._histograms.get(name)
        if histogram is None:
            raise KeyError(f"Histogram '{name}' is not booked in {self.name}")
        with self._lock:
            histogram.fill(*values)

    def get(self, name: str) -> Optional[Histogram]:
        return self._histograms.get(name)

    def __getitem__(self, name: str) -> Histogram:
        return self._histograms[name]

    def __contains__(self, name: str) -> bool:
        return name in self._histograms

    @property
    def names(self) -> list[str]:
        return list(self._histograms)

    def items(self) -> Iterator[tuple[str, Histogram]]:
        return iter(self._histograms.items())

    def merge(self, other: "HistogramRegistry") -> "HistogramRegistry":
        """Return a new registry with the bin contents of both registries added."""
        if set(self.names) != set(other.names):
            raise ValueError("Cannot merge registries with different histograms")
        merged = HistogramRegistry(self.name)
        for name, histogram in self._histograms.items():
            merged._histograms[name] = histogram + other[name]
        return merged
