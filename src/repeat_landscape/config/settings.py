"""
Configuration settings for the repeat landscape pipeline.
"""

from pathlib import Path
from typing import List, Literal, Optional
import configparser

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class LandscapeConfig(BaseSettings):
    """Configuration for the repeat landscape pipeline."""

    # Inputs
    annotation_file: Optional[Path] = Field(
        default=None,
        description="RepeatMasker .out annotation file"
    )
    genome_fasta: Optional[Path] = Field(
        default=None,
        description="Genome FASTA file (indexed with pyfaidx on first use)"
    )
    genome_sizes: Optional[Path] = Field(
        default=None,
        description="Two-column sequence sizes file, used when no FASTA is given"
    )
    output_dir: Path = Field(default=Path("./landscape_output"), description="Output directory")

    # Binning
    bin_size: int = Field(default=1_000_000, description="Bin width in bases")
    exclude_sequences: List[str] = Field(
        default_factory=lambda: ["chrM", "MT", "mito", "mitochondrion"],
        description="Sequences (e.g. mitochondrial contigs) left out of the analysis"
    )
    require_divergence: bool = Field(
        default=True,
        description="Drop annotations lacking a divergence score"
    )

    # Engine behaviour
    error_policy: Literal["fail_fast", "collect"] = Field(
        default="fail_fast",
        description="Halt on the first bad record or collect faults and flag bins"
    )
    split_mode: Literal["single", "multi"] = Field(
        default="single",
        description="Split intervals at one bin boundary at most, or at every boundary"
    )
    strict_nucleotides: bool = Field(
        default=False,
        description="Fail on symbols other than G, C, A, T and N"
    )
    compute_gc: bool = Field(default=True, description="Compute per-bin GC content")
    threads: int = Field(default=1, description="Number of threads to use")

    # Output
    output_format: Literal["tsv", "csv", "json"] = Field(
        default="tsv",
        description="Format of the output tables"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    @field_validator('bin_size')
    @classmethod
    def validate_bin_size(cls, v):
        """Validate bin size is positive."""
        if v <= 0:
            raise ValueError("Bin size must be positive")
        return v

    @field_validator('threads')
    @classmethod
    def validate_threads(cls, v):
        """Validate thread count is positive."""
        if v <= 0:
            raise ValueError("Threads must be positive")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate the logging level name."""
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown logging level: {v}")
        return v

    model_config = {
        "env_prefix": "REPEAT_LANDSCAPE_",
        "case_sensitive": False,
        "env_file": ".env",
        "validate_assignment": True,
    }

    def validate_setup(self) -> List[str]:
        """Validate that the configured inputs are usable."""
        errors = []

        if self.annotation_file is None:
            errors.append("No annotation file configured")
        elif not self.annotation_file.exists():
            errors.append(f"Annotation file not found: {self.annotation_file}")

        if self.genome_fasta is None and self.genome_sizes is None:
            errors.append("Either a genome FASTA or a genome sizes file is required")

        for file_path in (self.genome_fasta, self.genome_sizes):
            if file_path is not None and not file_path.exists():
                errors.append(f"Required file not found: {file_path}")

        if self.compute_gc and self.genome_fasta is None:
            errors.append("GC content requires a genome FASTA (or disable compute_gc)")

        return errors

    def ensure_directories(self) -> None:
        """Ensure the output directory exists."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


def load_landscape_config(config_file_path: Path, **overrides) -> LandscapeConfig:
    """
    Handles loading of pipeline variables from a config.ini file.

    The file may hold a ``[Paths]`` section (ANNOTATION_FILE, GENOME_FASTA,
    GENOME_SIZES, OUTPUT_DIR) and a ``[Parameters]`` section (BIN_SIZE,
    EXCLUDE_SEQUENCES, ERROR_POLICY, SPLIT_MODE, STRICT_NUCLEOTIDES,
    COMPUTE_GC, REQUIRE_DIVERGENCE, THREADS, OUTPUT_FORMAT).
    """
    config_elem = configparser.ConfigParser()
    config_read = config_elem.read(config_file_path)
    # Raise an error if the file was specified but not found/readable
    if not config_read:
        raise FileNotFoundError(
            f"Configuration file not found or empty: {config_file_path}"
        )

    values = {}
    if config_elem.has_section('Paths'):
        paths = config_elem['Paths']
        for key in ('annotation_file', 'genome_fasta', 'genome_sizes', 'output_dir'):
            if key in paths:
                values[key] = Path(paths[key])
    if config_elem.has_section('Parameters'):
        params = config_elem['Parameters']
        if 'bin_size' in params:
            values['bin_size'] = params.getint('bin_size')
        if 'threads' in params:
            values['threads'] = params.getint('threads')
        for key in ('strict_nucleotides', 'compute_gc', 'require_divergence'):
            if key in params:
                values[key] = params.getboolean(key)
        for key in ('error_policy', 'split_mode', 'output_format'):
            if key in params:
                values[key] = params[key].strip()
        if 'exclude_sequences' in params:
            values['exclude_sequences'] = [
                name.strip() for name in params['exclude_sequences'].split(',')
                if name.strip()
            ]

    values.update({k: v for k, v in overrides.items() if v is not None})
    return LandscapeConfig(**values)
