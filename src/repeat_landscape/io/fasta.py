"""
Genome sequence access backed by an indexed FASTA file.
"""

from pathlib import Path
from typing import List, Sequence, Union

import pandas as pd
from pyfaidx import Fasta

from ..core.errors import UnknownSequence
from ..models.landscape import SequenceRecord


class FastaSequenceAccessor:
    """
    Slice sequences from an indexed FASTA without loading the genome.

    pyfaidx builds the ``.fai`` index next to the FASTA on first use.
    """

    def __init__(self, fasta_path: Union[str, Path]):
        fasta_path = Path(fasta_path)
        if not fasta_path.exists():
            raise FileNotFoundError(f"FASTA not found: {fasta_path}")
        self.fasta_path = fasta_path
        self._fasta = Fasta(str(fasta_path), as_raw=True, sequence_always_upper=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._fasta.close()

    def get_sequence_slice(self, name: str, start: int, end: int) -> str:
        """Return bases ``start..end`` (1-based, inclusive) of ``name``."""
        if name not in self._fasta:
            raise UnknownSequence(
                f"Sequence '{name}' not found in {self.fasta_path}",
                sequence=name
            )
        return self._fasta[name][start - 1:end]

    def sequence_records(self, exclude: Sequence[str] = ()) -> List[SequenceRecord]:
        """Return the FASTA's sequences in file order, minus ``exclude``."""
        excluded = set(exclude)
        return [
            SequenceRecord(name=name, length=len(self._fasta[name]))
            for name in self._fasta.keys()
            if name not in excluded
        ]


def read_genome_sizes(path: Union[str, Path], exclude: Sequence[str] = ()) -> List[SequenceRecord]:
    """
    Read a tab-separated sizes file (name, length); ``.fai`` indexes work too.
    """
    df = pd.read_csv(
        path,
        sep="\t",
        header=None,
        usecols=[0, 1],
        names=["name", "length"],
        dtype={"name": str, "length": "int64"},
        comment="#",
    )
    excluded = set(exclude)
    return [
        SequenceRecord(name=row.name, length=int(row.length))
        for row in df.itertuples(index=False)
        if row.name not in excluded
    ]
