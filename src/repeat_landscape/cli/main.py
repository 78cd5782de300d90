"""
Main command-line interface for the repeat landscape pipeline.
"""

import sys
from pathlib import Path
from typing import Optional, List
import click
import configparser
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..config.settings import LandscapeConfig, load_landscape_config
from ..core.bins import SequenceIndex, build_bins
from ..core.errors import LandscapeError
from ..core.pipeline import LandscapePipeline, LandscapeResult
from ..io import FastaSequenceAccessor, read_genome_sizes
from ..utils import setup_logging
from .. import __version__


console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="Repeat Landscape")
def cli():
    """Repeat Landscape - Per-bin repeat and GC content profiles of a genome."""
    pass


@cli.command()
@click.option(
    "--annotation",
    help="RepeatMasker .out annotation file",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--fasta",
    help="Genome FASTA file (required for GC content)",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--sizes",
    help="Two-column sequence sizes file (name, length)",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--bin-size",
    help="Bin width in bases",
    type=int,
)
@click.option(
    "--output-dir",
    help="Output directory for results",
    type=click.Path(path_type=Path),
)
@click.option(
    "--config",
    help="Configuration file path (config.ini)",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--exclude",
    multiple=True,
    help="Sequence to leave out (can be given several times)",
)
@click.option(
    "--error-policy",
    type=click.Choice(["fail_fast", "collect"]),
    help="Halt on the first bad record or collect faults and flag bins",
)
@click.option(
    "--split-mode",
    type=click.Choice(["single", "multi"]),
    help="Split intervals at one bin boundary at most, or at every boundary",
)
@click.option(
    "--strict-nucleotides/--lenient-nucleotides",
    default=None,
    help="Fail on symbols other than G, C, A, T and N",
)
@click.option(
    "--gc/--no-gc",
    default=None,
    help="Compute per-bin GC content",
)
@click.option(
    "--threads",
    help="Number of threads to use",
    type=int,
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["tsv", "csv", "json"]),
    help="Output format for the tables",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.option(
    "--log-file",
    help="Log file path",
    type=click.Path(path_type=Path),
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show the configuration without running the pipeline",
)
def run(
    annotation: Optional[Path],
    fasta: Optional[Path],
    sizes: Optional[Path],
    bin_size: Optional[int],
    output_dir: Optional[Path],
    config: Optional[Path],
    exclude: List[str],
    error_policy: Optional[str],
    split_mode: Optional[str],
    strict_nucleotides: Optional[bool],
    gc: Optional[bool],
    threads: Optional[int],
    output_format: Optional[str],
    log_level: str,
    log_file: Optional[Path],
    dry_run: bool
):
    """Bin the genome and build the repeat and GC tables."""

    overrides = {
        "annotation_file": annotation,
        "genome_fasta": fasta,
        "genome_sizes": sizes,
        "bin_size": bin_size,
        "output_dir": output_dir,
        "exclude_sequences": list(exclude) or None,
        "error_policy": error_policy,
        "split_mode": split_mode,
        "strict_nucleotides": strict_nucleotides,
        "compute_gc": gc,
        "threads": threads,
        "output_format": output_format,
        "log_level": log_level,
        "log_file": log_file,
    }

    # Load configuration
    try:
        landscape_config = build_config(config, overrides)
    except configparser.Error as e:
        console.print(f"[red]Error reading configuration file {config}: {e}[/red]")
        sys.exit(1)
    except (ValidationError, FileNotFoundError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)

    # Setup logging
    logger = setup_logging(
        log_level=landscape_config.log_level,
        log_file=landscape_config.log_file,
        log_format="console"
    )

    console.print(f"[bold blue]Repeat Landscape v{__version__}[/bold blue]")
    display_config_summary(landscape_config)

    if dry_run:
        console.print("[yellow]Dry run mode - no actual processing will occur[/yellow]")
        return

    errors = landscape_config.validate_setup()
    if errors:
        console.print("[red]Configuration validation failed:[/red]")
        for error in errors:
            console.print(f"  [red]• {error}[/red]")
        sys.exit(1)

    pipeline = LandscapePipeline(landscape_config, logger)

    # Run pipeline
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Building repeat landscape...", total=None)
            result = pipeline.run_files()
            progress.update(task, description="Writing tables...")
            written = pipeline.save_results(result)
            progress.update(task, description="Pipeline completed successfully!")

    except LandscapeError as e:
        console.print(f"[red]Pipeline failed ({e.kind}): {e}[/red]")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Pipeline failed: {e}[/red]")
        sys.exit(1)

    display_results(result)
    console.print(f"Results written to {landscape_config.output_dir}")
    for name, path in written.items():
        console.print(f"  {name}: {path}")


@cli.command()
@click.option(
    "--fasta",
    help="Genome FASTA file",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--sizes",
    help="Two-column sequence sizes file (name, length)",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--bin-size",
    default=1_000_000,
    show_default=True,
    help="Bin width in bases",
    type=int,
)
@click.option(
    "--exclude",
    multiple=True,
    help="Sequence to leave out (can be given several times)",
)
def bins(fasta: Optional[Path], sizes: Optional[Path], bin_size: int, exclude: List[str]):
    """Show the bin grid of a genome."""
    if not fasta and not sizes:
        console.print("[red]Error: Must provide either --fasta or --sizes[/red]")
        sys.exit(1)

    try:
        if sizes:
            records = read_genome_sizes(sizes, exclude)
        else:
            with FastaSequenceAccessor(fasta) as accessor:
                records = accessor.sequence_records(exclude)
        grid = build_bins(SequenceIndex(records), bin_size)
    except LandscapeError as e:
        console.print(f"[red]Error ({e.kind}): {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Bin Grid (bin size {bin_size:,})")
    table.add_column("Sequence", style="cyan")
    table.add_column("Length", style="magenta", justify="right")
    table.add_column("Bins", style="magenta", justify="right")
    table.add_column("Last Bin", style="green")

    for record in grid.index:
        seq_bins = grid.bins_for(record.name)
        last = seq_bins[-1]
        table.add_row(
            record.name,
            f"{record.length:,}",
            str(len(seq_bins)),
            f"{last.name} [{last.start:,}, {last.end:,}] width {last.width:,}",
        )

    console.print(table)
    console.print(f"Total bins: {len(grid)}")


@cli.command()
@click.option(
    "--config",
    help="Configuration file path",
    default='./config.ini',
    type=click.Path(exists=True, path_type=Path),
)
def validate(config: Path):
    """Validate the pipeline configuration and inputs."""

    try:
        landscape_config = load_landscape_config(config)
    except (configparser.Error, ValidationError, FileNotFoundError) as e:
        console.print(f"[red]Validation failed: {e}[/red]")
        sys.exit(1)

    console.print("[bold blue]Validating pipeline configuration...[/bold blue]")

    errors = landscape_config.validate_setup()
    if errors:
        console.print("[red]Configuration validation failed:[/red]")
        for error in errors:
            console.print(f"  [red]• {error}[/red]")
        sys.exit(1)

    console.print("[green]✓ Configuration validation passed[/green]")
    display_config_summary(landscape_config)


def build_config(config_file: Optional[Path], overrides: dict) -> LandscapeConfig:
    """Load the configuration file, if any, and apply CLI overrides."""
    values = {k: v for k, v in overrides.items() if v is not None}
    if config_file:
        return load_landscape_config(config_file, **values)
    return LandscapeConfig(**values)


def display_results(result: LandscapeResult):
    """Display pipeline results in a formatted table."""

    console.print("\n[bold green]Pipeline Results[/bold green]")

    summary = result.get_summary_stats()

    table = Table(title="Landscape Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Sequences", str(summary["sequences"]))
    table.add_row("Bins", str(summary["bins"]))
    table.add_row("Bin Size", f"{summary['bin_size']:,}")
    table.add_row("Repeat Types", str(summary["repeat_types"]))
    table.add_row("Annotations Counted", str(summary["total_intervals"]))
    table.add_row("Total Repeat Length", f"{summary['total_repeat_length']:,}")
    if summary["mean_gc_percentage"] is not None:
        table.add_row("Mean GC", f"{summary['mean_gc_percentage']:.2f}%")
    table.add_row("Faults", str(summary["faults"]))

    console.print(table)

    if result.complete:
        console.print("[green]✓ All records aggregated[/green]")
    else:
        console.print(
            f"[yellow]⚠ {len(result.faults)} records rejected; "
            f"affected bins are flagged incomplete (see faults table)[/yellow]"
        )


def display_config_summary(config: LandscapeConfig):
    """Display configuration summary."""

    table = Table(title="Configuration Summary")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Annotation File", str(config.annotation_file) if config.annotation_file else "Not set")
    table.add_row("Genome FASTA", str(config.genome_fasta) if config.genome_fasta else "Not set")
    table.add_row("Genome Sizes", str(config.genome_sizes) if config.genome_sizes else "Not set")
    table.add_row("Output Directory", str(config.output_dir))
    table.add_row("Bin Size", f"{config.bin_size:,}")
    table.add_row("Excluded Sequences", ", ".join(config.exclude_sequences) or "None")
    table.add_row("Error Policy", config.error_policy)
    table.add_row("Split Mode", config.split_mode)
    table.add_row("GC Content", "yes" if config.compute_gc else "no")
    table.add_row("Threads", str(config.threads))

    console.print(table)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
