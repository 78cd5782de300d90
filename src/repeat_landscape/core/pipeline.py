"""
Main pipeline class for the repeat landscape.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple
import time

import numpy as np
import pandas as pd
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..config.settings import LandscapeConfig
from ..models.landscape import AnnotatedInterval, Fault, NucleotideTally, SequenceRecord
from ..utils import PerformanceMonitor, PipelineLogger, log_error, log_file_operation
from .aggregation import (
    count_totals,
    counts_table,
    length_totals,
    lengths_table,
    merge_totals,
    normalize_type,
    observed_types,
)
from .bins import BinGrid, SequenceIndex, build_bins
from .clipping import clip_interval, spanned_bins
from .composition import SequenceAccessor, gc_table, tally_bin
from .errors import (
    InvalidConfig,
    LandscapeError,
    RECORD_ERRORS,
    MalformedInterval,
    UnexpectedSymbol,
    UnknownSequence,
)

FAULT_COLUMNS = ["kind", "message", "sequence", "interval_id", "type", "bins"]

# Per-sequence partial result: length totals, count totals, faults,
# flagged (bin, type) pairs of the length table and of the count table
Partial = Tuple[Counter, Counter, List[Fault], Set[Tuple[str, str]], Set[Tuple[str, str]]]


class LandscapeResult(BaseModel):
    """Tables produced by one pipeline run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    bin_size: int = Field(description="Bin width in bases")
    grid: BinGrid = Field(description="Bin grid of the run")
    lengths: pd.DataFrame = Field(description="Dense bin x type length table")
    counts: pd.DataFrame = Field(description="Dense bin x type count table")
    gc: Optional[pd.DataFrame] = Field(default=None, description="Per-bin nucleotide table")
    faults: List[Fault] = Field(default_factory=list, description="Collected record faults")
    processing_time: float = Field(default=0.0, description="Processing time in seconds")
    pipeline_version: str = Field(default=__version__, description="Pipeline version used")

    @property
    def complete(self) -> bool:
        """True when no record was rejected."""
        return not self.faults

    def faults_table(self) -> pd.DataFrame:
        """Return the collected faults as a table."""
        rows = [
            {**fault.model_dump(), "bins": ",".join(fault.bins)}
            for fault in self.faults
        ]
        return pd.DataFrame(rows, columns=FAULT_COLUMNS)

    def joined_table(self) -> pd.DataFrame:
        """
        Join lengths, counts and GC content into one row per bin.

        Length, percentage and count columns are prefixed with ``length_``,
        ``percentage_`` and ``count_`` followed by the repeat type.
        """
        bin_columns = ["bin_name", "sequence", "bin_index", "bin_start", "bin_end", "width"]
        bins = pd.DataFrame(
            [(b.name, b.sequence, b.index, b.start, b.end, b.width) for b in self.grid],
            columns=bin_columns
        ).set_index("bin_name")

        parts = [bins]
        for table, value, prefix in (
            (self.lengths, "total_length", "length_"),
            (self.lengths, "percentage", "percentage_"),
            (self.counts, "count", "count_"),
        ):
            if not table.empty:
                wide = table.pivot(index="bin_name", columns="type", values=value)
                wide.columns = [f"{prefix}{t}" for t in wide.columns]
                parts.append(wide)

        complete = pd.concat([self.lengths, self.counts])
        if not complete.empty:
            parts.append(
                complete.groupby("bin_name", sort=False)["complete"].all().rename("repeats_complete")
            )
        if self.gc is not None:
            parts.append(self.gc.set_index("bin_name")[[
                "gc_count", "at_count", "n_count", "other_count", "gc_percentage", "defined",
                "complete"
            ]].rename(columns={"complete": "gc_complete"}))

        joined = pd.concat(parts, axis=1).reindex(bins.index)
        return joined.reset_index()

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the run."""
        gc_values = (
            self.gc.loc[self.gc["defined"], "gc_percentage"].to_numpy()
            if self.gc is not None else np.array([])
        )
        return {
            "sequences": len(self.grid.sequences),
            "bins": len(self.grid),
            "bin_size": self.bin_size,
            "repeat_types": int(self.lengths["type"].nunique()) if not self.lengths.empty else 0,
            "total_repeat_length": int(self.lengths["total_length"].sum()),
            "total_intervals": int(self.counts["count"].sum()),
            "mean_gc_percentage": float(np.mean(gc_values)) if gc_values.size else None,
            "faults": len(self.faults),
            "complete": self.complete,
        }


class LandscapePipeline:
    """Bin a genome and aggregate repeat annotations and GC content per bin."""

    def __init__(self, config: LandscapeConfig, logger: structlog.BoundLogger):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration
            logger: Structured logger instance
        """
        self.config = config
        self.logger = logger
        self.monitor = PerformanceMonitor(logger)

        self.logger.info("Pipeline initialized successfully",
                         config_summary=self._get_config_summary())

    @property
    def collect_faults(self) -> bool:
        return self.config.error_policy == "collect"

    def run(
        self,
        sequences: Iterable[SequenceRecord],
        intervals: Iterable[AnnotatedInterval],
        accessor: Optional[SequenceAccessor] = None
    ) -> LandscapeResult:
        """
        Run the binning and aggregation engine on in-memory inputs.

        Args:
            sequences: Sequence records; configured exclusions are dropped
            intervals: Repeat annotations
            accessor: Source of sequence slices for GC content; GC is skipped
                when None or when ``compute_gc`` is disabled

        Returns:
            LandscapeResult with the length, count and GC tables
        """
        start_time = time.time()

        with PipelineLogger(self.logger, "landscape") as plog:
            plog.add_context(bin_size=self.config.bin_size,
                             error_policy=self.config.error_policy,
                             split_mode=self.config.split_mode)
            try:
                index = SequenceIndex.from_records(sequences, exclude=self.config.exclude_sequences)
                grid = self.monitor.section("build_bins", build_bins, index, self.config.bin_size)
                plog.log_progress("Bin grid built", sequences=len(index), bins=len(grid))
                plog.count(sequences=len(index), bins=len(grid))

                intervals = self._drop_excluded(list(intervals))
                types = observed_types(intervals)
                groups = self._group_by_sequence(intervals, index)

                partials = self.monitor.section(
                    "aggregate_repeats", self._map,
                    lambda group: self._aggregate_sequence(group[1], grid), groups
                )
                faults = [fault for p in partials for fault in p[2]]
                lengths = lengths_table(
                    grid, merge_totals(p[0] for p in partials), types,
                    set().union(*(p[3] for p in partials))
                )
                counts = counts_table(
                    grid, merge_totals(p[1] for p in partials), types,
                    set().union(*(p[4] for p in partials))
                )
                plog.log_progress("Repeat tables built",
                                  intervals=len(intervals), types=len(types))
                plog.count(intervals=len(intervals), types=len(types))

                gc = None
                if accessor is not None and self.config.compute_gc:
                    gc, gc_faults = self.monitor.section(
                        "compute_gc", self._compute_gc, grid, accessor
                    )
                    faults.extend(gc_faults)
                    plog.log_progress("GC content computed", bins=len(gc))

            except LandscapeError as e:
                log_error(self.logger, e, context=e.to_dict())
                raise

            plog.count(faults=len(faults))
            if faults:
                self.logger.warning(
                    "Records rejected; affected bins are flagged incomplete",
                    faults=len(faults),
                    kinds=dict(Counter(f.kind for f in faults))
                )
            self.monitor.report_peaks()

            return LandscapeResult(
                bin_size=grid.bin_size,
                grid=grid,
                lengths=lengths,
                counts=counts,
                gc=gc,
                faults=faults,
                processing_time=time.time() - start_time,
            )

    def run_files(self) -> LandscapeResult:
        """Load the configured annotation and genome files, then run."""
        from ..io import FastaSequenceAccessor, read_genome_sizes, read_repeatmasker_out

        errors = self.config.validate_setup()
        if errors:
            error_msg = "Pipeline setup validation failed:\n" + \
                "\n".join(f"  - {e}" for e in errors)
            raise InvalidConfig(error_msg)

        self.monitor.log_system_info()

        intervals = read_repeatmasker_out(
            self.config.annotation_file,
            exclude=self.config.exclude_sequences,
            require_divergence=self.config.require_divergence,
            logger=self.logger
        )

        if self.config.genome_fasta is None:
            sequences = read_genome_sizes(self.config.genome_sizes, self.config.exclude_sequences)
            return self.run(sequences, intervals)

        with FastaSequenceAccessor(self.config.genome_fasta) as accessor:
            if self.config.genome_sizes is not None:
                sequences = read_genome_sizes(self.config.genome_sizes, self.config.exclude_sequences)
            else:
                sequences = accessor.sequence_records(self.config.exclude_sequences)
            return self.run(sequences, intervals, accessor)

    def save_results(self, result: LandscapeResult, output_dir: Optional[Path] = None) -> Dict[str, Path]:
        """
        Write the result tables and a summary to ``output_dir``.

        Returns:
            Mapping of table name to written file
        """
        output_dir = Path(output_dir or self.config.output_dir)
        fmt = self.config.output_format

        with PipelineLogger(self.logger, "save_results") as plog:
            plog.add_context(output_dir=str(output_dir), format=fmt)
            try:
                output_dir.mkdir(parents=True, exist_ok=True)

                tables = {
                    "repeat_lengths": result.lengths,
                    "repeat_counts": result.counts,
                    "landscape": result.joined_table(),
                    "faults": result.faults_table(),
                }
                if result.gc is not None:
                    tables["gc_content"] = result.gc

                written = {}
                for name, table in tables.items():
                    path = output_dir / f"{name}.{fmt}"
                    _write_table(table, path, fmt)
                    log_file_operation(self.logger, "written", path, rows=len(table))
                    written[name] = path

                summary_file = output_dir / "summary.txt"
                with open(summary_file, "w") as f:
                    f.write("Repeat Landscape Summary\n")
                    f.write("=" * 40 + "\n\n")
                    for key, value in result.get_summary_stats().items():
                        f.write(f"{key}: {value}\n")
                written["summary"] = summary_file

                plog.count(files=len(written))
                plog.log_progress(f"Results saved to {output_dir}")
                return written

            except OSError as e:
                log_error(self.logger, e, context={"operation": "save_results"})
                raise

    def _aggregate_sequence(self, intervals: Sequence[AnnotatedInterval], grid: BinGrid) -> Partial:
        """
        Fold the intervals of one sequence into length and count totals.

        Counting needs only a valid start coordinate, so an interval the
        clipper rejects (UnsupportedSpan) is still counted. Its length is left
        out and the bins it spans are flagged in the length table only.
        """
        lengths: Counter = Counter()
        counts: Counter = Counter()
        faults: List[Fault] = []
        incomplete_lengths: Set[Tuple[str, str]] = set()
        incomplete_counts: Set[Tuple[str, str]] = set()

        for interval in intervals:
            counted = False
            try:
                counts.update(count_totals([interval], grid))
                counted = True
                lengths.update(length_totals(clip_interval(interval, grid, self.config.split_mode)))
            except RECORD_ERRORS as e:
                if not self.collect_faults:
                    raise
                repeat_type = normalize_type(interval.type)
                touched = [b.name for b in spanned_bins(interval, grid)]
                faults.append(_fault(e, interval.sequence, interval.id, repeat_type, touched))
                flagged = {(name, repeat_type) for name in touched}
                incomplete_lengths |= flagged
                if not counted:
                    incomplete_counts |= flagged

        return lengths, counts, faults, incomplete_lengths, incomplete_counts

    def _compute_gc(self, grid: BinGrid, accessor: SequenceAccessor) -> Tuple[pd.DataFrame, List[Fault]]:
        """Tally every bin, sequence by sequence."""
        results = self._map(
            lambda name: self._tally_sequence(grid.bins_for(name), accessor),
            grid.sequences
        )
        bins = list(grid)
        tallies = [tally for tallies, _, _ in results for tally in tallies]
        faults = [fault for _, faults, _ in results for fault in faults]
        incomplete = set().union(*(flagged for _, _, flagged in results))
        return gc_table(bins, tallies, incomplete), faults

    def _tally_sequence(self, bins, accessor: SequenceAccessor):
        tallies: List[NucleotideTally] = []
        faults: List[Fault] = []
        incomplete: Set[str] = set()
        strict = self.config.strict_nucleotides

        for bin in bins:
            try:
                tally = tally_bin(bin, accessor, strict=strict, allow_undefined=self.collect_faults)
            except (UnexpectedSymbol, MalformedInterval, UnknownSequence) as e:
                if not self.collect_faults:
                    raise
                faults.append(_fault(e, bin.sequence, None, None, [bin.name]))
                incomplete.add(bin.name)
                if not isinstance(e, UnexpectedSymbol):
                    tallies.append(NucleotideTally(bin_name=bin.name, gc_count=0, at_count=0, n_count=0))
                    continue
                tally = tally_bin(bin, accessor, strict=False, allow_undefined=True)

            if not tally.defined:
                faults.append(Fault(
                    kind="UndefinedRatio",
                    message=f"GC percentage undefined for bin {bin.name}: no G, C, A or T bases",
                    sequence=bin.sequence,
                    bins=[bin.name],
                ))
            tallies.append(tally)

        return tallies, faults, incomplete

    def _map(self, func: Callable, items: Sequence) -> List:
        """Apply ``func`` to ``items`` in order, on a thread pool if configured."""
        if self.config.threads > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.config.threads) as executor:
                return list(executor.map(func, items))
        return [func(item) for item in items]

    def _drop_excluded(self, intervals: List[AnnotatedInterval]) -> List[AnnotatedInterval]:
        excluded = set(self.config.exclude_sequences)
        kept = [i for i in intervals if i.sequence not in excluded]
        if len(kept) != len(intervals):
            self.logger.info("Dropped annotations on excluded sequences",
                             dropped=len(intervals) - len(kept))
        return kept

    @staticmethod
    def _group_by_sequence(
        intervals: Iterable[AnnotatedInterval],
        index: SequenceIndex
    ) -> List[Tuple[str, List[AnnotatedInterval]]]:
        """Group intervals by sequence in index order; unknown sequences last."""
        groups: Dict[str, List[AnnotatedInterval]] = {name: [] for name in index.names}
        for interval in intervals:
            groups.setdefault(interval.sequence, []).append(interval)
        return [(name, group) for name, group in groups.items() if group]

    def _get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of the configuration for logging."""
        return {
            "bin_size": self.config.bin_size,
            "error_policy": self.config.error_policy,
            "split_mode": self.config.split_mode,
            "strict_nucleotides": self.config.strict_nucleotides,
            "threads": self.config.threads,
            "output_dir": str(self.config.output_dir),
        }


def _fault(
    error: LandscapeError,
    sequence: Optional[str],
    interval_id: Optional[str],
    repeat_type: Optional[str],
    bins: List[str]
) -> Fault:
    return Fault(
        kind=error.kind,
        message=error.message,
        sequence=sequence,
        interval_id=interval_id,
        type=repeat_type,
        bins=bins,
    )


def _write_table(table: pd.DataFrame, path: Path, fmt: str) -> None:
    if fmt == "json":
        table.to_json(path, orient="records", indent=2)
    else:
        table.to_csv(path, sep="\t" if fmt == "tsv" else ",", index=False)
