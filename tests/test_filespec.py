from __future__ import annotations

import pytest

from pdfcorex.exceptions import (
    CorruptStructureError,
    MissingRequiredError,
    TypeMismatchError,
    ValueRejectedError,
    VersionViolationError,
)
from pdfcorex.objects import Array, Dict, IndirectRef, Name, StreamDict, StringLiteral
from pdfcorex.types import Configuration, Version
from pdfcorex.validate.filespec import (
    is_url,
    validate_file_spec_dict,
    validate_file_specification,
    validate_url_specification,
)
from pdfcorex.xref import XRefTable

from conftest import make_document


def _embedded(xref: XRefTable, obj_nr: int = 20) -> IndirectRef:
    return xref.set_object(obj_nr, StreamDict(Type=Name("EmbeddedFile"), raw=b"hello"))


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_unicode_file_name_alone_is_enough(mode: str) -> None:
    xref = make_document(mode)

    validate_file_spec_dict(xref, Dict(Type=Name("Filespec"), UF=StringLiteral(b"report.pdf")))


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_platform_file_name_is_enough(mode: str) -> None:
    xref = make_document(mode)

    validate_file_spec_dict(xref, Dict(DOS=StringLiteral(b"REPORT.PDF")))


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_file_name_is_required(mode: str) -> None:
    xref = make_document(mode)

    with pytest.raises(MissingRequiredError):
        validate_file_spec_dict(xref, Dict(Type=Name("Filespec"), Desc=StringLiteral(b"no name")))


def test_unicode_file_name_version_gate() -> None:
    xref = XRefTable(Configuration(validation_mode="strict"), header_version=Version.V16)

    with pytest.raises(VersionViolationError):
        validate_file_spec_dict(xref, Dict(UF=StringLiteral(b"report.pdf")))


def test_type_alias_is_relaxed_only() -> None:
    relaxed = make_document("relaxed")
    strict = make_document("strict")

    validate_file_spec_dict(relaxed, Dict(Type=Name("F"), F=StringLiteral(b"a.pdf")))
    with pytest.raises(ValueRejectedError):
        validate_file_spec_dict(strict, Dict(Type=Name("F"), F=StringLiteral(b"a.pdf")))


def test_embedded_file() -> None:
    xref = make_document("strict")
    d = Dict(Type=Name("Filespec"), F=StringLiteral(b"data.txt"), EF=Dict(F=_embedded(xref)))

    validate_file_spec_dict(xref, d)


def test_embedded_file_requires_type() -> None:
    xref = make_document("strict")
    d = Dict(F=StringLiteral(b"data.txt"), EF=Dict(F=_embedded(xref)))

    with pytest.raises(MissingRequiredError):
        validate_file_spec_dict(xref, d)


def test_embedded_file_keys_are_checked() -> None:
    xref = make_document("strict")
    d = Dict(Type=Name("Filespec"), F=StringLiteral(b"data.txt"), EF=Dict(Win=_embedded(xref)))

    with pytest.raises(ValueRejectedError, match="invalid embedded file key Win"):
        validate_file_spec_dict(xref, d)


def test_related_files_need_embedded_counterpart() -> None:
    xref = make_document("strict")
    stream = _embedded(xref)
    d = Dict(
        Type=Name("Filespec"),
        F=StringLiteral(b"data.txt"),
        EF=Dict(F=stream),
        RF=Dict(UF=Array([StringLiteral(b"part1"), stream])),
    )

    with pytest.raises(ValueRejectedError, match="related files entry UF"):
        validate_file_spec_dict(xref, d)


def test_related_files_are_pairs() -> None:
    xref = make_document("strict")
    stream = _embedded(xref)
    good = Dict(
        Type=Name("Filespec"),
        F=StringLiteral(b"data.txt"),
        EF=Dict(F=stream),
        RF=Dict(F=Array([StringLiteral(b"part1"), stream])),
    )
    odd = Dict(
        Type=Name("Filespec"),
        F=StringLiteral(b"data.txt"),
        EF=Dict(F=stream),
        RF=Dict(F=Array([StringLiteral(b"part1"), stream, StringLiteral(b"part2")])),
    )

    validate_file_spec_dict(xref, good)
    with pytest.raises(CorruptStructureError):
        validate_file_spec_dict(xref, odd)


def test_file_specification_string_or_dict() -> None:
    xref = make_document("strict")
    xref.set_object(21, Dict(F=StringLiteral(b"a.pdf")))

    assert validate_file_specification(xref, StringLiteral(b"docs/a.pdf")) == StringLiteral(b"docs/a.pdf")
    assert validate_file_specification(xref, IndirectRef(21)) == Dict(F=StringLiteral(b"a.pdf"))
    with pytest.raises(TypeMismatchError):
        validate_file_specification(xref, 7)


def test_url_specification() -> None:
    xref = make_document("strict")

    d = validate_url_specification(xref, Dict(FS=Name("URL"), F=StringLiteral(b"https://example.com/a.pdf")))

    assert d["FS"] == "URL"
    with pytest.raises(ValueRejectedError):
        validate_url_specification(xref, Dict(FS=Name("URL"), F=StringLiteral(b"not a url")))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("https://example.com/a.pdf", True),
        ("file:///tmp/a.pdf", True),
        ("/tmp/a.pdf", True),
        ("relative.pdf", False),
        ("two words", False),
        ("", False),
    ],
)
def test_is_url(value: str, expected: bool) -> None:
    assert is_url(value) is expected
