"""
Shared fixtures for the repeat landscape tests.
"""

import sys
from pathlib import Path

import pytest
import structlog

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from repeat_landscape.models import AnnotatedInterval, SequenceRecord  # noqa: E402


# Three short sequences binned at 10 bases: chr1 -> 3 bins, chr2 -> 3 bins
# (last one 5 bases wide), chrM is excluded by default.
SEQUENCES = {
    "chr1": "ACGTACGTAC" + "GGGGGCCCCC" + "GGCCAATTNN",
    "chr2": "AAAAATTTTT" + "GCGCATATAT" + "ACGTN",
    "chrM": "ACGTACGTACGTACGT",
}


@pytest.fixture(autouse=True)
def reset_structlog():
    # The CLI configures structlog globally
    yield
    structlog.reset_defaults()


@pytest.fixture
def logger():
    return structlog.get_logger("repeat_landscape.test")


@pytest.fixture
def sequences():
    return dict(SEQUENCES)


@pytest.fixture
def records():
    return [SequenceRecord(name=name, length=len(seq)) for name, seq in SEQUENCES.items()]


@pytest.fixture
def intervals():
    return [
        AnnotatedInterval(sequence="chr1", start=3, end=8, type="SINE/Alu", id="1"),
        AnnotatedInterval(sequence="chr1", start=8, end=14, type="LINE/L1", id="2"),
        AnnotatedInterval(sequence="chr1", start=21, end=30, type="DNA/hAT", id="3"),
        AnnotatedInterval(sequence="chr2", start=1, end=10, type="LTR/ERVL", id="4"),
        AnnotatedInterval(sequence="chr2", start=12, end=18, type="LINE/L2", id="5"),
        AnnotatedInterval(sequence="chrM", start=1, end=5, type="LINE/L1", id="6"),
    ]


@pytest.fixture
def genome_fasta(tmp_path):
    path = tmp_path / "genome.fa"
    with open(path, "w") as f:
        for name, seq in SEQUENCES.items():
            f.write(f">{name}\n{seq}\n")
    return path


@pytest.fixture
def genome_sizes(tmp_path):
    path = tmp_path / "genome.sizes"
    with open(path, "w") as f:
        for name, seq in SEQUENCES.items():
            f.write(f"{name}\t{len(seq)}\n")
    return path


RM_OUT = """\
   SW   perc perc perc  query      position in query           matching       repeat              position in  repeat
score   div. del. ins.  sequence    begin     end    (left)    repeat         class/family         begin  end (left)   ID

  463   1.3  0.6  1.7  chr1             3        8     (22) +  AluY           SINE/Alu                 1    6    (0)      1
 3612  11.4 21.5  1.3  chr1             8       14     (16) C  L1MA9          LINE/L1              (399) 1712     1706    2 *
  500   5.0  0.0  0.0  chr1            21       30      (0) +  Charlie1       DNA/hAT                  1   10    (0)      3
  720   2.2  0.0  0.0  chr2             1       10     (15) +  MLT1           LTR/ERVL                 1   10    (0)      4
  410    NA  0.0  0.0  chr2            12       18      (7) +  L2a            LINE/L2                  1    7    (0)      5
  500   5.0  0.0  0.0  chrM             1        5     (11) +  L1HS           LINE/L1                  1    5    (0)      6
"""


@pytest.fixture
def repeatmasker_out(tmp_path):
    path = tmp_path / "genome.fa.out"
    path.write_text(RM_OUT)
    return path
