"""
RepeatMasker .out annotation loading.
"""

from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
import structlog

from ..models.landscape import AnnotatedInterval

RM_COLUMNS = [
    "score", "divergence", "deletion", "insertion", "sequence",
    "start", "end", "left", "strand", "repeat_name", "class_family",
    "repeat_start", "repeat_end", "repeat_left", "id", "overlap",
]


def read_repeatmasker_table(path: Path) -> pd.DataFrame:
    """
    Read a RepeatMasker .out file into a DataFrame.

    Header lines and blank lines are dropped; the optional trailing ``*``
    (annotation overlapping a higher-scoring one) lands in ``overlap``.
    Gzipped files are read transparently.
    """
    df = pd.read_csv(
        path,
        sep=r"\s+",
        header=None,
        names=RM_COLUMNS,
        dtype=str,
        skip_blank_lines=True,
    )
    # Header rows have no numeric score
    df = df[pd.to_numeric(df["score"], errors="coerce").notna()].copy()
    for column in ("start", "end"):
        df[column] = pd.to_numeric(df[column], errors="raise").astype("int64")
    df["divergence"] = pd.to_numeric(df["divergence"], errors="coerce")
    return df.reset_index(drop=True)


def read_repeatmasker_out(
    path: Path,
    exclude: Sequence[str] = (),
    require_divergence: bool = True,
    logger: Optional[structlog.BoundLogger] = None
) -> List[AnnotatedInterval]:
    """
    Load RepeatMasker annotations as intervals.

    Args:
        path: RepeatMasker .out file
        exclude: Sequence names to drop (e.g. mitochondrial contigs)
        require_divergence: Drop rows without a divergence score
        logger: Logger instance

    Returns:
        Annotated intervals in file order
    """
    logger = logger or structlog.get_logger("repeat_landscape")
    path = Path(path)
    df = read_repeatmasker_table(path)
    total = len(df)

    if exclude:
        df = df[~df["sequence"].isin(list(exclude))]
    excluded = total - len(df)

    missing_divergence = 0
    if require_divergence:
        keep = df["divergence"].notna()
        missing_divergence = int((~keep).sum())
        df = df[keep]

    intervals = [
        AnnotatedInterval(
            sequence=row.sequence,
            start=int(row.start),
            end=int(row.end),
            type=row.class_family if isinstance(row.class_family, str) else "",
            id=row.id if isinstance(row.id, str) else str(row_number),
            divergence=None if pd.isna(row.divergence) else float(row.divergence),
        )
        for row_number, row in enumerate(df.itertuples(index=False), start=1)
    ]

    logger.info(
        "Loaded RepeatMasker annotations",
        file_path=str(path),
        rows=total,
        intervals=len(intervals),
        excluded_sequences=excluded,
        missing_divergence=missing_divergence
    )
    return intervals
