#!/usr/bin/env python3
"""
Tests for annotation and genome loaders.
"""

import pytest

from repeat_landscape.core.errors import UnknownSequence
from repeat_landscape.io import (
    FastaSequenceAccessor,
    read_genome_sizes,
    read_repeatmasker_out,
)
from repeat_landscape.io.repeatmasker import read_repeatmasker_table


def test_read_repeatmasker_table(repeatmasker_out):
    df = read_repeatmasker_table(repeatmasker_out)

    # Header lines are dropped
    assert len(df) == 6
    assert list(df["sequence"]) == ["chr1", "chr1", "chr1", "chr2", "chr2", "chrM"]
    assert list(df["start"]) == [3, 8, 21, 1, 12, 1]
    assert df.loc[1, "overlap"] == "*"
    assert df.loc[1, "strand"] == "C"
    assert df.loc[0, "divergence"] == pytest.approx(1.3)
    assert df["divergence"].isna().sum() == 1


def test_read_repeatmasker_out(repeatmasker_out, logger):
    intervals = read_repeatmasker_out(repeatmasker_out, exclude=["chrM"], logger=logger)

    assert [i.id for i in intervals] == ["1", "2", "3", "4"]
    first = intervals[0]
    assert (first.sequence, first.start, first.end) == ("chr1", 3, 8)
    assert first.type == "SINE/Alu"
    assert first.divergence == pytest.approx(1.3)


def test_read_repeatmasker_out_keeps_missing_divergence(repeatmasker_out):
    intervals = read_repeatmasker_out(repeatmasker_out, require_divergence=False)

    assert len(intervals) == 6
    no_divergence = [i for i in intervals if i.divergence is None]
    assert [i.id for i in no_divergence] == ["5"]


def test_fasta_accessor(genome_fasta):
    with FastaSequenceAccessor(genome_fasta) as accessor:
        assert accessor.get_sequence_slice("chr1", 11, 20) == "GGGGGCCCCC"
        assert accessor.get_sequence_slice("chr2", 21, 25) == "ACGTN"

        records = accessor.sequence_records(exclude=["chrM"])
        assert [(r.name, r.length) for r in records] == [("chr1", 30), ("chr2", 25)]

        with pytest.raises(UnknownSequence):
            accessor.get_sequence_slice("chr9", 1, 10)


def test_fasta_accessor_uppercases(tmp_path):
    path = tmp_path / "soft_masked.fa"
    path.write_text(">chr1\nacgtACGTnn\n")

    with FastaSequenceAccessor(path) as accessor:
        assert accessor.get_sequence_slice("chr1", 1, 10) == "ACGTACGTNN"


def test_fasta_accessor_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FastaSequenceAccessor(tmp_path / "missing.fa")


def test_read_genome_sizes(genome_sizes):
    records = read_genome_sizes(genome_sizes)
    assert [(r.name, r.length) for r in records] == [("chr1", 30), ("chr2", 25), ("chrM", 16)]

    records = read_genome_sizes(genome_sizes, exclude=["chrM"])
    assert [r.name for r in records] == ["chr1", "chr2"]


def test_read_genome_sizes_from_fai(genome_fasta):
    # pyfaidx writes the .fai index on first open
    FastaSequenceAccessor(genome_fasta).close()
    records = read_genome_sizes(str(genome_fasta) + ".fai", exclude=["chrM"])

    assert [(r.name, r.length) for r in records] == [("chr1", 30), ("chr2", 25)]
