"""
Per-bin nucleotide composition.
"""

from typing import Iterable, List, Mapping, Optional, Protocol, Set, Tuple

import pandas as pd

from ..models.landscape import Bin, NucleotideTally
from .bins import BinGrid
from .errors import MalformedInterval, UndefinedRatio, UnexpectedSymbol, UnknownSequence

GC_COLUMNS = [
    "bin_name", "sequence", "bin_index", "bin_start", "bin_end", "width",
    "gc_count", "at_count", "n_count", "other_count", "gc_percentage", "defined",
    "complete"
]


class SequenceAccessor(Protocol):
    """Anything able to return a 1-based inclusive slice of a sequence."""

    def get_sequence_slice(self, name: str, start: int, end: int) -> str:
        ...


class InMemorySequenceAccessor:
    """Sequence accessor over a mapping of names to nucleotide strings."""

    def __init__(self, sequences: Mapping[str, str]):
        self.sequences = dict(sequences)

    def get_sequence_slice(self, name: str, start: int, end: int) -> str:
        try:
            sequence = self.sequences[name]
        except KeyError:
            raise UnknownSequence(
                f"Sequence '{name}' has no sequence data",
                sequence=name
            ) from None
        return sequence[start - 1:end]


def tally_nucleotides(sequence: str) -> Tuple[int, int, int, int]:
    """
    Count nucleotide classes in a sequence, ignoring case.

    Returns:
        Tuple of (GC count, AT count, N count, other symbols count)
    """
    upper = sequence.upper()
    gc = upper.count("G") + upper.count("C")
    at = upper.count("A") + upper.count("T")
    n = upper.count("N")
    return gc, at, n, len(upper) - gc - at - n


def gc_percentage(gc_count: int, at_count: int, bin_name: Optional[str] = None) -> float:
    """
    Return ``100 * GC / (GC + AT)``.

    Raises:
        UndefinedRatio: If ``gc_count + at_count`` is zero
    """
    denominator = gc_count + at_count
    if denominator == 0:
        raise UndefinedRatio(
            f"GC percentage undefined for bin {bin_name}: no G, C, A or T bases",
            bin_name=bin_name
        )
    return 100.0 * gc_count / denominator


def tally_bin(
    bin: Bin,
    accessor: SequenceAccessor,
    strict: bool = False,
    allow_undefined: bool = False
) -> NucleotideTally:
    """
    Tally the nucleotides of a single bin.

    Args:
        bin: Bin to tally
        accessor: Source of the bin's sequence slice
        strict: Raise UnexpectedSymbol for symbols other than G, C, A, T, N
        allow_undefined: Return a tally without GC percentage instead of
            raising UndefinedRatio when the bin has no G, C, A or T

    Returns:
        NucleotideTally for the bin
    """
    sequence = accessor.get_sequence_slice(bin.sequence, bin.start, bin.end)
    if len(sequence) != bin.width:
        raise MalformedInterval(
            f"Sequence data for bin {bin.name} has {len(sequence)} bases, "
            f"expected {bin.width}",
            sequence=bin.sequence,
            bin_name=bin.name
        )

    gc, at, n, other = tally_nucleotides(sequence)
    if strict and other:
        symbols = sorted(set(sequence.upper()) - set("GCATN"))
        raise UnexpectedSymbol(
            f"Bin {bin.name} contains {other} unexpected symbols: {''.join(symbols)}",
            sequence=bin.sequence,
            bin_name=bin.name
        )

    try:
        percentage = gc_percentage(gc, at, bin.name)
    except UndefinedRatio:
        if not allow_undefined:
            raise
        percentage = None

    return NucleotideTally(
        bin_name=bin.name,
        gc_count=gc,
        at_count=at,
        n_count=n,
        other_count=other,
        gc_percentage=percentage,
    )


def tally_bins(
    bins: Iterable[Bin],
    accessor: SequenceAccessor,
    strict: bool = False,
    allow_undefined: bool = False
) -> List[NucleotideTally]:
    """Tally a run of bins, one slice and one scan per bin."""
    return [tally_bin(b, accessor, strict, allow_undefined) for b in bins]


def gc_table(
    bins: Iterable[Bin],
    tallies: Iterable[NucleotideTally],
    incomplete: Optional[Set[str]] = None
) -> pd.DataFrame:
    """
    Combine bins and their tallies into the per-bin GC table.

    Bins named in ``incomplete`` get ``complete=False``.
    """
    flagged = incomplete or set()
    rows = [
        (
            b.name, b.sequence, b.index, b.start, b.end, b.width,
            t.gc_count, t.at_count, t.n_count, t.other_count,
            t.gc_percentage, t.defined, b.name not in flagged,
        )
        for b, t in zip(bins, tallies)
    ]
    table = pd.DataFrame(rows, columns=GC_COLUMNS)
    table["gc_percentage"] = table["gc_percentage"].astype("float64")
    return table


def compute_gc(
    grid: BinGrid,
    accessor: SequenceAccessor,
    strict: bool = False,
    allow_undefined: bool = False
) -> pd.DataFrame:
    """
    Compute nucleotide class counts and GC percentage for every bin.

    Args:
        grid: Bin grid
        accessor: Source of sequence slices
        strict: Raise UnexpectedSymbol for symbols other than G, C, A, T, N
        allow_undefined: Flag bins without G, C, A or T (``defined=False``,
            empty ``gc_percentage``) instead of raising UndefinedRatio

    Returns:
        DataFrame with one row per bin in grid order
    """
    bins = list(grid)
    return gc_table(bins, tally_bins(bins, accessor, strict, allow_undefined))
