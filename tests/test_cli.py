from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner
from pypdf import PdfReader

from pdfcorex.cli import _parse_gids, cli
from pdfcorex.font.truetype import read_tables

from conftest import build_ttf


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_validate(runner: CliRunner, sample_pdf: Path) -> None:
    result = runner.invoke(cli, ["validate", str(sample_pdf), "--mode", "strict"])

    assert result.exit_code == 0, result.output
    assert "Validation Summary" in result.output
    assert "Validation ok" in result.output


def test_validate_lists_links(runner: CliRunner, linked_pdf: Path) -> None:
    result = runner.invoke(cli, ["validate", str(linked_pdf), "--links"])

    assert result.exit_code == 0, result.output
    assert "https://example.com/docs" in result.output


def test_validate_broken_file(runner: CliRunner, tmp_path: Path) -> None:
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"this is not a pdf")

    result = runner.invoke(cli, ["validate", str(broken)])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_info(runner: CliRunner, sample_pdf: Path) -> None:
    result = runner.invoke(cli, ["info", str(sample_pdf)])

    assert result.exit_code == 0, result.output
    assert "Sample" in result.output
    assert "pdfcorex-tests" in result.output


def test_optimize(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "optimized.pdf"

    result = runner.invoke(cli, ["optimize", str(sample_pdf), str(output), "--compress"])

    assert result.exit_code == 0, result.output
    assert "Successfully created" in result.output
    assert len(PdfReader(output).pages) == 3


def test_extract(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "page1.pdf"

    result = runner.invoke(cli, ["extract", str(sample_pdf), str(output), "--page", "1"])

    assert result.exit_code == 0, result.output
    assert len(PdfReader(output).pages) == 1


def test_extract_page_out_of_range(runner: CliRunner, sample_pdf: Path, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["extract", str(sample_pdf), str(tmp_path / "out.pdf"), "-p", "7"])

    assert result.exit_code == 1
    assert "out of range" in result.output


def test_font_install_and_list(runner: CliRunner, ttf_file: Path, tmp_path: Path) -> None:
    font_dir = tmp_path / "fonts"

    installed = runner.invoke(cli, ["font", "install", str(ttf_file), "--font-dir", str(font_dir)])
    listed = runner.invoke(cli, ["font", "list", "-d", str(font_dir)])

    assert installed.exit_code == 0, installed.output
    assert "Installed: PdfcorexTest-Regular" in installed.output
    assert listed.exit_code == 0, listed.output
    assert "PdfcorexTest-Regular" in listed.output
    assert "2048" in listed.output


def test_font_list_empty(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["font", "list", "-d", str(tmp_path)])

    assert result.exit_code == 0
    assert "No fonts installed" in result.output


def test_font_subset(runner: CliRunner, ttf_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "subset.ttf"

    result = runner.invoke(cli, ["font", "subset", str(ttf_file), str(output), "--gids", "65-67,90"])

    assert result.exit_code == 0, result.output
    _, tables = read_tables(output.read_bytes(), strict=True)
    assert tables["glyf"].size == 5 * 20


def test_font_subset_rejects_unknown_glyph(runner: CliRunner, tmp_path: Path) -> None:
    font = tmp_path / "small.ttf"
    font.write_bytes(build_ttf(num_glyphs=10))

    result = runner.invoke(cli, ["font", "subset", str(font), str(tmp_path / "out.ttf"), "-g", "42"])

    assert result.exit_code == 1
    assert "out of range" in result.output


def test_parse_gids() -> None:
    assert _parse_gids("1, 3-5,,9") == {1, 3, 4, 5, 9}
    with pytest.raises(ValueError):
        _parse_gids(" , ")
