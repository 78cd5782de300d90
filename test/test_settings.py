#!/usr/bin/env python3
"""
Tests for pipeline configuration.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from repeat_landscape.config.settings import LandscapeConfig, load_landscape_config


def test_config_defaults():
    config = LandscapeConfig()

    assert config.bin_size == 1_000_000
    assert config.error_policy == "fail_fast"
    assert config.split_mode == "single"
    assert config.threads == 1
    assert config.output_format == "tsv"
    assert "chrM" in config.exclude_sequences
    assert config.compute_gc
    assert not config.strict_nucleotides


def test_config_validation():
    with pytest.raises(ValidationError, match="Bin size must be positive"):
        LandscapeConfig(bin_size=0)
    with pytest.raises(ValidationError, match="Threads must be positive"):
        LandscapeConfig(threads=0)
    with pytest.raises(ValidationError):
        LandscapeConfig(error_policy="ignore")
    with pytest.raises(ValidationError):
        LandscapeConfig(split_mode="every")
    with pytest.raises(ValidationError):
        LandscapeConfig(log_level="LOUD")


def test_config_validates_assignment():
    config = LandscapeConfig()
    with pytest.raises(ValidationError):
        config.bin_size = -1


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("REPEAT_LANDSCAPE_BIN_SIZE", "50000")
    monkeypatch.setenv("REPEAT_LANDSCAPE_ERROR_POLICY", "collect")

    config = LandscapeConfig()
    assert config.bin_size == 50000
    assert config.error_policy == "collect"


def test_log_level_is_normalized():
    assert LandscapeConfig(log_level="debug").log_level == "DEBUG"


def test_validate_setup(tmp_path):
    config = LandscapeConfig()
    errors = config.validate_setup()
    assert "No annotation file configured" in errors
    assert "Either a genome FASTA or a genome sizes file is required" in errors

    annotation = tmp_path / "genome.fa.out"
    annotation.write_text("")
    config = LandscapeConfig(
        annotation_file=annotation,
        genome_sizes=tmp_path / "missing.sizes",
        compute_gc=False,
    )
    assert config.validate_setup() == [f"Required file not found: {tmp_path / 'missing.sizes'}"]


def test_ensure_directories(tmp_path):
    config = LandscapeConfig(output_dir=tmp_path / "a" / "b")
    config.ensure_directories()
    assert (tmp_path / "a" / "b").is_dir()


def test_load_landscape_config(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text(
        "[Paths]\n"
        "annotation_file = /data/genome.fa.out\n"
        "genome_fasta = /data/genome.fa\n"
        "output_dir = /data/landscape\n"
        "\n"
        "[Parameters]\n"
        "bin_size = 100000\n"
        "exclude_sequences = chrM, chrUn\n"
        "error_policy = collect\n"
        "split_mode = multi\n"
        "compute_gc = no\n"
        "threads = 4\n"
        "output_format = csv\n"
    )

    config = load_landscape_config(config_file)
    assert config.annotation_file == Path("/data/genome.fa.out")
    assert config.genome_fasta == Path("/data/genome.fa")
    assert config.output_dir == Path("/data/landscape")
    assert config.bin_size == 100000
    assert config.exclude_sequences == ["chrM", "chrUn"]
    assert config.error_policy == "collect"
    assert config.split_mode == "multi"
    assert config.compute_gc is False
    assert config.threads == 4
    assert config.output_format == "csv"


def test_load_landscape_config_overrides(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[Parameters]\nbin_size = 100000\nthreads = 2\n")

    config = load_landscape_config(config_file, bin_size=5000, threads=None)
    assert config.bin_size == 5000
    assert config.threads == 2


def test_load_landscape_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_landscape_config(tmp_path / "missing.ini")
