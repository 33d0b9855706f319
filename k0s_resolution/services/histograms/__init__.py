"""
Histogram services.

Registry (the accumulator used by the event pipeline), booking of the
analysis histograms, and output writing.
"""

from .registry import HistogramRegistry, HistogramSink, SparseHistogram
from .booking import (
    DAUGHTER_RESOLUTION_HISTOGRAMS,
    EVENTS_BIN_ACCEPTED,
    EVENTS_BIN_CANDIDATES,
    EVENTS_BIN_PROCESSED,
    EVENTS_BIN_TRUTH_MATCHED,
    book_histograms,
)
from .writer import write_registry, write_sparse

__all__ = [
    "HistogramRegistry",
    "HistogramSink",
    "SparseHistogram",
    "DAUGHTER_RESOLUTION_HISTOGRAMS",
    "EVENTS_BIN_ACCEPTED",
    "EVENTS_BIN_CANDIDATES",
    "EVENTS_BIN_PROCESSED",
    "EVENTS_BIN_TRUTH_MATCHED",
    "book_histograms",
    "write_registry",
    "write_sparse",
]
