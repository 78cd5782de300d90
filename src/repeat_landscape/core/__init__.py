"""
Binning and aggregation engine for the repeat landscape.
"""

from . import errors
from . import bins
from . import clipping
from . import aggregation
from . import composition

from .bins import SequenceIndex, BinGrid, build_bins
from .clipping import clip_interval
from .aggregation import normalize_type, aggregate_lengths, aggregate_counts
from .composition import compute_gc, InMemorySequenceAccessor


__all__ = [
    "errors",
    "bins",
    "clipping",
    "aggregation",
    "composition",
    "SequenceIndex",
    "BinGrid",
    "build_bins",
    "clip_interval",
    "normalize_type",
    "aggregate_lengths",
    "aggregate_counts",
    "compute_gc",
    "InMemorySequenceAccessor",
]
