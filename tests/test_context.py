"""
End-to-end tests: pypdf generated files through read, validate and write.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from pypdf import PdfReader, PdfWriter

from pdfcorex import Configuration, Context, Version, extract_page, optimize_file, validate_file
from pdfcorex.exceptions import EncryptedDocumentError, PdfCoreError, PdfReadError, ValueRejectedError
from pdfcorex.optimize import OptimizationResult


def test_read_and_validate(sample_pdf: Path) -> None:
    ctx = validate_file(sample_pdf)

    assert ctx.validated
    assert ctx.page_count == 3
    assert ctx.statistics.pages == 3
    assert {"Type", "Pages"} <= ctx.statistics.root_entries
    assert ctx.info is not None
    assert ctx.info.title == "Sample"
    assert ctx.info.producer == "pdfcorex-tests"
    assert ctx.repairs == []


def test_strict_validation_of_writer_output(sample_pdf: Path) -> None:
    ctx = validate_file(sample_pdf, Configuration(validation_mode="strict"))

    assert ctx.version >= Version.V13
    assert ctx.warnings == []


def test_read_from_bytes(sample_pdf: Path) -> None:
    ctx = Context.read(sample_pdf.read_bytes()).validate()

    assert ctx.page_count == 3


def test_write_round_trip(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.pdf"

    written = Context.read(sample_pdf).validate().write(output)

    assert written == output.stat().st_size
    reader = PdfReader(output)
    assert len(reader.pages) == 3
    assert reader.metadata.title == "Sample"
    assert validate_file(output).page_count == 3


def test_write_to_stream(sample_pdf: Path) -> None:
    buffer = io.BytesIO()

    Context.read(sample_pdf).validate().write(buffer)

    assert buffer.getvalue().startswith(b"%PDF-")
    assert buffer.getvalue().rstrip().endswith(b"%%EOF")
    assert len(PdfReader(io.BytesIO(buffer.getvalue())).pages) == 3


def test_link_uris_are_collected(linked_pdf: Path) -> None:
    ctx = validate_file(linked_pdf, Configuration(validate_links=True))

    assert ctx.uris == {1: {"https://example.com/docs": ""}}
    assert ctx.statistics.annotations == {"Link": 1}
    (record,) = ctx.page_annots[1]["Link"].values()
    assert record.page == 1
    assert record.rect == (10.0, 10.0, 90.0, 30.0)


def test_optimize_file(sample_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "optimized.pdf"

    result = optimize_file(sample_pdf, output)

    assert isinstance(result, OptimizationResult)
    assert result.objects_after <= result.objects_before
    assert len(PdfReader(output).pages) == 3


def test_extract_page(sample_pdf: Path, tmp_path: Path) -> None:
    output = extract_page(sample_pdf, tmp_path / "page2.pdf", 2)

    reader = PdfReader(output)
    assert len(reader.pages) == 1
    assert float(reader.pages[0].mediabox.width) == 200
    assert validate_file(output, Configuration(validation_mode="strict")).page_count == 1


def test_extract_page_out_of_range(sample_pdf: Path, tmp_path: Path) -> None:
    with pytest.raises(ValueRejectedError, match="out of range") as excinfo:
        extract_page(sample_pdf, tmp_path / "page9.pdf", 9)
    assert isinstance(excinfo.value, PdfCoreError)
    assert not (tmp_path / "page9.pdf").exists()


def test_reduced_feature_set_drops_annotations(linked_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "reduced.pdf"

    Context.read(linked_pdf, Configuration(reduced_feature_set=True)).validate().write(output)

    reader = PdfReader(output)
    assert len(reader.pages) == 2
    assert "/Annots" not in reader.pages[0]


def test_annotations_survive_default_write(linked_pdf: Path, tmp_path: Path) -> None:
    output = tmp_path / "copy.pdf"

    Context.read(linked_pdf).validate().write(output)

    assert len(PdfReader(output).pages[0]["/Annots"]) == 1


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(PdfReadError):
        Context.read(tmp_path / "missing.pdf")


def test_encrypted_document_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "encrypted.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=100, height=100)
    writer.encrypt("secret")
    with path.open("wb") as stream:
        writer.write(stream)

    with pytest.raises(EncryptedDocumentError):
        Context.read(path)
