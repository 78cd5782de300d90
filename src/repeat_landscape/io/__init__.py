"""
Loaders for annotation and sequence files.
"""

from .repeatmasker import read_repeatmasker_out, read_repeatmasker_table
from .fasta import FastaSequenceAccessor, read_genome_sizes

__all__ = [
    "read_repeatmasker_out",
    "read_repeatmasker_table",
    "FastaSequenceAccessor",
    "read_genome_sizes",
]
