"""
Clipping of annotated intervals at bin boundaries.
"""

from typing import List

from ..models.landscape import AnnotatedInterval, Bin, ClippedInterval, normalize_type
from .bins import BinGrid
from .errors import MalformedInterval, UnsupportedSpan

SPLIT_MODES = ("single", "multi")


def validate_interval(interval: AnnotatedInterval, grid: BinGrid) -> None:
    """
    Check an interval against the sequence index.

    Raises:
        UnknownSequence: If the interval's sequence is not indexed
        MalformedInterval: If ``end < start`` or the interval leaves
            ``[1, sequence length]``
    """
    length = grid.index.length_of(interval.sequence)
    if interval.end < interval.start:
        raise MalformedInterval(
            f"Interval {interval.id} ends before it starts "
            f"({interval.start} > {interval.end})",
            sequence=interval.sequence,
            interval_id=interval.id
        )
    if interval.start < 1 or interval.end > length:
        raise MalformedInterval(
            f"Interval {interval.id} [{interval.start}, {interval.end}] "
            f"outside {interval.sequence} [1, {length}]",
            sequence=interval.sequence,
            interval_id=interval.id
        )


def clip_interval(
    interval: AnnotatedInterval,
    grid: BinGrid,
    split_mode: str = "single"
) -> List[ClippedInterval]:
    """
    Split an interval so that every piece lies inside a single bin.

    An interval inside one bin comes back unchanged. An interval crossing one
    boundary is split into a left part ending at the boundary and a right part
    starting right after it. With ``split_mode="single"`` an interval crossing
    more than one boundary raises UnsupportedSpan; ``split_mode="multi"`` cuts
    it at every boundary it crosses.

    Args:
        interval: Annotated interval to clip
        grid: Bin grid of the genome
        split_mode: "single" or "multi"

    Returns:
        Clipped pieces ordered by position; their lengths sum to the
        interval length
    """
    if split_mode not in SPLIT_MODES:
        raise ValueError(f"Unknown split mode: {split_mode}")

    validate_interval(interval, grid)

    first = grid.bin_for(interval.sequence, interval.start)
    if interval.end <= first.end:
        return [_piece(first, interval.start, interval.end, interval)]

    last_index = grid.bin_of(interval.end)
    if split_mode == "single" and last_index > first.index + 1:
        raise UnsupportedSpan(
            f"Interval {interval.id} [{interval.start}, {interval.end}] spans "
            f"{last_index - first.index + 1} bins of size {grid.bin_size}; "
            f"use split_mode='multi' to cut it at every boundary",
            sequence=interval.sequence,
            interval_id=interval.id,
            bins_spanned=last_index - first.index + 1
        )

    bins = grid.bins_for(interval.sequence)
    pieces = []
    for bin in bins[first.index - 1:last_index]:
        pieces.append(_piece(
            bin,
            max(interval.start, bin.start),
            min(interval.end, bin.end),
            interval
        ))
    return pieces


def spanned_bins(interval: AnnotatedInterval, grid: BinGrid) -> List[Bin]:
    """Return the bins an interval overlaps, clamped to its sequence."""
    if interval.sequence not in grid.index:
        return []
    length = grid.index.length_of(interval.sequence)
    lo = max(min(interval.start, interval.end), 1)
    hi = min(max(interval.start, interval.end), length)
    if lo > hi:
        return []
    bins = grid.bins_for(interval.sequence)
    return list(bins[grid.bin_of(lo) - 1:grid.bin_of(hi)])


def _piece(bin: Bin, start: int, end: int, interval: AnnotatedInterval) -> ClippedInterval:
    return ClippedInterval(bin=bin, start=start, end=end, type=normalize_type(interval.type))
