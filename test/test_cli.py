#!/usr/bin/env python3
"""
Tests for the command-line interface.
"""

import pandas as pd
from click.testing import CliRunner

from repeat_landscape.cli.main import cli


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output


def test_bins_from_sizes(genome_sizes):
    result = CliRunner().invoke(cli, ["bins", "--sizes", str(genome_sizes), "--bin-size", "10"])

    assert result.exit_code == 0, result.output
    assert "Total bins: 8" in result.output


def test_bins_with_exclusion(genome_fasta):
    result = CliRunner().invoke(
        cli, ["bins", "--fasta", str(genome_fasta), "--bin-size", "10", "--exclude", "chrM"]
    )

    assert result.exit_code == 0, result.output
    assert "Total bins: 6" in result.output


def test_bins_requires_input():
    result = CliRunner().invoke(cli, ["bins"])
    assert result.exit_code == 1


def test_bins_rejects_bad_bin_size(genome_sizes):
    result = CliRunner().invoke(cli, ["bins", "--sizes", str(genome_sizes), "--bin-size", "0"])

    assert result.exit_code == 1
    assert "InvalidConfig" in result.output


def test_run_dry_run():
    result = CliRunner().invoke(cli, ["run", "--bin-size", "5000", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output


def test_run_invalid_bin_size():
    result = CliRunner().invoke(cli, ["run", "--bin-size", "0", "--dry-run"])
    assert result.exit_code == 1


def test_run_missing_inputs(tmp_path):
    result = CliRunner().invoke(cli, ["run", "--output-dir", str(tmp_path / "out")])
    assert result.exit_code == 1


def test_run(tmp_path, repeatmasker_out, genome_fasta):
    out = tmp_path / "out"
    result = CliRunner().invoke(cli, [
        "run",
        "--annotation", str(repeatmasker_out),
        "--fasta", str(genome_fasta),
        "--bin-size", "10",
        "--output-dir", str(out),
        "--format", "csv",
    ])

    assert result.exit_code == 0, result.output
    for name in ("repeat_lengths", "repeat_counts", "landscape", "faults", "gc_content"):
        assert (out / f"{name}.csv").exists()
    assert (out / "summary.txt").exists()

    counts = pd.read_csv(out / "repeat_counts.csv")
    assert counts["count"].sum() == 4


def test_run_collect_mode(tmp_path, repeatmasker_out, genome_sizes):
    out = tmp_path / "out"
    result = CliRunner().invoke(cli, [
        "run",
        "--annotation", str(repeatmasker_out),
        "--sizes", str(genome_sizes),
        "--bin-size", "4",
        "--no-gc",
        "--error-policy", "collect",
        "--output-dir", str(out),
    ])

    assert result.exit_code == 0, result.output
    faults = pd.read_csv(out / "faults.tsv", sep="\t")
    # At a 4-base bin size only chr1 3-8 stays within two bins
    assert sorted(faults["interval_id"].astype(str)) == ["2", "3", "4"]
    assert set(faults["kind"]) == {"UnsupportedSpan"}


def test_run_fail_fast_exit_code(tmp_path, repeatmasker_out, genome_sizes):
    result = CliRunner().invoke(cli, [
        "run",
        "--annotation", str(repeatmasker_out),
        "--sizes", str(genome_sizes),
        "--bin-size", "4",
        "--no-gc",
        "--output-dir", str(tmp_path / "out"),
    ])

    assert result.exit_code == 1
    assert "UnsupportedSpan" in result.output


def test_validate(tmp_path, repeatmasker_out, genome_fasta):
    config_file = tmp_path / "config.ini"
    config_file.write_text(
        "[Paths]\n"
        f"annotation_file = {repeatmasker_out}\n"
        f"genome_fasta = {genome_fasta}\n"
        "\n"
        "[Parameters]\n"
        "bin_size = 10\n"
    )

    result = CliRunner().invoke(cli, ["validate", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert "Configuration validation passed" in result.output


def test_validate_reports_missing_inputs(tmp_path):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[Parameters]\nbin_size = 10\n")

    result = CliRunner().invoke(cli, ["validate", "--config", str(config_file)])
    assert result.exit_code == 1
    assert "No annotation file configured" in result.output
