"""
Per-bin aggregation of repeat lengths and counts.

Lengths are assigned to every bin an interval overlaps (after clipping) while
counts are assigned only to the bin holding the interval's start. An interval
straddling a boundary therefore adds length to two bins but is counted once.
"""

from collections import Counter
from functools import reduce
from typing import Dict, Iterable, List, Optional, Set, Tuple
import operator

import pandas as pd

from ..models.landscape import AnnotatedInterval, ClippedInterval, RepeatClass, normalize_type
from .bins import BinGrid
from .clipping import validate_interval

# (sequence, bin index, normalized type)
TotalsKey = Tuple[str, int, str]

BIN_COLUMNS = ["bin_name", "sequence", "bin_index", "bin_start", "bin_end", "width"]
LENGTH_COLUMNS = BIN_COLUMNS + [
    "type", "repeat_class", "total_length", "percentage", "complete"
]
COUNT_COLUMNS = BIN_COLUMNS + ["type", "repeat_class", "count", "complete"]


def length_totals(clipped: Iterable[ClippedInterval]) -> Counter:
    """Sum clipped lengths per (sequence, bin index, normalized type)."""
    totals: Counter = Counter()
    for piece in clipped:
        totals[(piece.bin.sequence, piece.bin.index, normalize_type(piece.type))] += piece.length
    return totals


def count_totals(intervals: Iterable[AnnotatedInterval], grid: BinGrid) -> Counter:
    """Count intervals per (sequence, start bin, normalized type)."""
    totals: Counter = Counter()
    for interval in intervals:
        validate_interval(interval, grid)
        key = (interval.sequence, grid.bin_of(interval.start), normalize_type(interval.type))
        totals[key] += 1
    return totals


def merge_totals(partials: Iterable[Counter]) -> Counter:
    """Merge partial totals by summation."""
    return reduce(operator.add, partials, Counter())


def dense_table(
    grid: BinGrid,
    totals: Dict[TotalsKey, int],
    value_column: str,
    types: Optional[Iterable[str]] = None,
    incomplete: Optional[Set[Tuple[str, str]]] = None
) -> pd.DataFrame:
    """
    Expand sparse totals into a dense bin x type table.

    The full cartesian product of grid bins and the type vocabulary is built
    first; combinations absent from ``totals`` are filled with zero.

    Args:
        grid: Bin grid
        totals: Sparse totals keyed by (sequence, bin index, type)
        value_column: Name of the value column in the result
        types: Type vocabulary; defaults to the types present in ``totals``
        incomplete: (bin name, type) pairs to flag with ``complete=False``

    Returns:
        DataFrame ordered by grid order, then type
    """
    vocabulary = sorted(set(types or ()) | {key[2] for key in totals})
    bins_df = pd.DataFrame(
        [(b.name, b.sequence, b.index, b.start, b.end, b.width) for b in grid],
        columns=BIN_COLUMNS
    )

    full_index = pd.MultiIndex.from_product(
        [bins_df["bin_name"].tolist(), vocabulary],
        names=["bin_name", "type"]
    )
    sparse = pd.Series(
        {(f"{seq}_{idx}", t): value for (seq, idx, t), value in totals.items()},
        dtype="int64"
    )
    if sparse.empty:
        dense = pd.Series(0, index=full_index, dtype="int64")
    else:
        sparse.index.names = ["bin_name", "type"]
        dense = sparse.reindex(full_index, fill_value=0).astype("int64")

    table = dense.rename(value_column).reset_index()
    table = table.merge(bins_df, on="bin_name", how="left", sort=False)
    table["repeat_class"] = [RepeatClass.from_type(t).value for t in table["type"]]

    flagged = incomplete or set()
    table["complete"] = [
        (name, t) not in flagged for name, t in zip(table["bin_name"], table["type"])
    ]
    return table.reset_index(drop=True)


def lengths_table(
    grid: BinGrid,
    totals: Dict[TotalsKey, int],
    types: Optional[Iterable[str]] = None,
    incomplete: Optional[Set[Tuple[str, str]]] = None
) -> pd.DataFrame:
    """Dense length table with the percentage of each bin covered."""
    table = dense_table(grid, totals, "total_length", types, incomplete)
    table["percentage"] = 100.0 * table["total_length"] / table["width"]
    return table[LENGTH_COLUMNS]


def counts_table(
    grid: BinGrid,
    totals: Dict[TotalsKey, int],
    types: Optional[Iterable[str]] = None,
    incomplete: Optional[Set[Tuple[str, str]]] = None
) -> pd.DataFrame:
    """Dense count table."""
    table = dense_table(grid, totals, "count", types, incomplete)
    return table[COUNT_COLUMNS]


def aggregate_lengths(
    clipped: Iterable[ClippedInterval],
    grid: BinGrid,
    types: Optional[Iterable[str]] = None,
    incomplete: Optional[Set[Tuple[str, str]]] = None
) -> pd.DataFrame:
    """
    Sum clipped lengths per (bin, normalized type).

    Args:
        clipped: Bin-confined pieces produced by ``clip_interval``
        grid: Bin grid the pieces were clipped against
        types: Extra type vocabulary to include (zero-filled)
        incomplete: (bin name, type) pairs based on incomplete input

    Returns:
        Dense DataFrame with ``total_length`` and ``percentage`` of the
        true bin width for every bin and type
    """
    return lengths_table(grid, length_totals(clipped), types, incomplete)


def aggregate_counts(
    intervals: Iterable[AnnotatedInterval],
    grid: BinGrid,
    types: Optional[Iterable[str]] = None,
    incomplete: Optional[Set[Tuple[str, str]]] = None
) -> pd.DataFrame:
    """
    Count intervals per (bin of their start coordinate, normalized type).

    Intervals are not clipped: each one is counted exactly once.

    Raises:
        UnknownSequence: If an interval's sequence is not indexed
        MalformedInterval: If an interval's coordinates are invalid
    """
    return counts_table(grid, count_totals(intervals, grid), types, incomplete)


def observed_types(intervals: Iterable[AnnotatedInterval]) -> List[str]:
    """Return the sorted normalized type vocabulary of a set of intervals."""
    return sorted({normalize_type(i.type) for i in intervals})
