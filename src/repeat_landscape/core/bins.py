"""
Sequence index and fixed-width bin grid.
"""

import numbers
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..models.landscape import Bin, SequenceRecord
from .errors import InvalidConfig, MalformedInterval, UnknownSequence


class SequenceIndex:
    """Ordered lookup of sequence lengths by name."""

    def __init__(self, records: Iterable[SequenceRecord]):
        self._records: Dict[str, SequenceRecord] = {}
        for record in records:
            if record.name in self._records:
                raise InvalidConfig(
                    f"Duplicate sequence name: {record.name}",
                    sequence=record.name
                )
            self._records[record.name] = record

    @classmethod
    def from_records(
        cls,
        records: Iterable[SequenceRecord],
        exclude: Sequence[str] = ()
    ) -> "SequenceIndex":
        """Build an index, dropping sequences named in ``exclude``."""
        excluded = set(exclude)
        return cls(r for r in records if r.name not in excluded)

    def __contains__(self, name: str) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SequenceRecord]:
        return iter(self._records.values())

    @property
    def names(self) -> List[str]:
        return list(self._records)

    def length_of(self, name: str) -> int:
        """Return the length of a sequence, raising UnknownSequence if absent."""
        try:
            return self._records[name].length
        except KeyError:
            raise UnknownSequence(
                f"Sequence '{name}' is not in the sequence index",
                sequence=name
            ) from None


class BinGrid:
    """
    Contiguous fixed-width bins for every sequence of an index.

    Bin ``i`` of a sequence covers ``[(i-1)*bin_size + 1, i*bin_size]``; the
    last bin is clamped to the sequence length, so the bins of a sequence tile
    ``[1, length]`` with no gaps or overlaps.
    """

    def __init__(self, index: SequenceIndex, bin_size: int):
        if (isinstance(bin_size, bool) or not isinstance(bin_size, numbers.Integral)
                or bin_size <= 0):
            raise InvalidConfig(
                f"Bin size must be a positive integer, got {bin_size!r}",
                bin_size=bin_size
            )
        self.index = index
        self.bin_size = int(bin_size)
        self._bins: Dict[str, Tuple[Bin, ...]] = {
            record.name: tuple(self._make_bins(record))
            for record in index
        }

    def _make_bins(self, record: SequenceRecord) -> Iterator[Bin]:
        n_bins = -(-record.length // self.bin_size)
        for i in range(1, n_bins + 1):
            yield Bin(
                sequence=record.name,
                index=i,
                start=(i - 1) * self.bin_size + 1,
                end=min(i * self.bin_size, record.length),
            )

    def __iter__(self) -> Iterator[Bin]:
        for bins in self._bins.values():
            yield from bins

    def __len__(self) -> int:
        return sum(len(bins) for bins in self._bins.values())

    @property
    def sequences(self) -> List[str]:
        return list(self._bins)

    @property
    def bin_names(self) -> List[str]:
        return [b.name for b in self]

    def bin_of(self, position: int) -> int:
        """Return the 1-based bin number containing ``position``."""
        return (position - 1) // self.bin_size + 1

    def bins_for(self, sequence: str) -> Tuple[Bin, ...]:
        """Return the bins of a sequence in order."""
        try:
            return self._bins[sequence]
        except KeyError:
            raise UnknownSequence(
                f"Sequence '{sequence}' is not in the sequence index",
                sequence=sequence
            ) from None

    def bin_for(self, sequence: str, position: int) -> Bin:
        """Return the bin holding ``position`` on ``sequence``."""
        bins = self.bins_for(sequence)
        length = self.index.length_of(sequence)
        if not 1 <= position <= length:
            raise MalformedInterval(
                f"Position {position} outside {sequence} [1, {length}]",
                sequence=sequence,
                position=position
            )
        return bins[self.bin_of(position) - 1]

    def next_bin(self, bin: Bin) -> Optional[Bin]:
        """Return the bin following ``bin`` on the same sequence, if any."""
        bins = self.bins_for(bin.sequence)
        if bin.index < len(bins):
            return bins[bin.index]
        return None


def build_bins(sequences: Iterable[SequenceRecord], bin_size: int) -> BinGrid:
    """
    Partition every sequence into fixed-width bins.

    Args:
        sequences: Sequence records, in the order bins should be reported
        bin_size: Bin width in bases

    Returns:
        BinGrid with ``ceil(length / bin_size)`` bins per sequence

    Raises:
        InvalidConfig: If ``bin_size`` is not a positive integer
    """
    if isinstance(sequences, SequenceIndex):
        index = sequences
    else:
        index = SequenceIndex(sequences)
    return BinGrid(index, bin_size)
