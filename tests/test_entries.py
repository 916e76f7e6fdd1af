from __future__ import annotations

import pytest

from pdfcorex.exceptions import MissingRequiredError, TypeMismatchError, ValueRejectedError, VersionViolationError
from pdfcorex.objects import Array, Dict, HexLiteral, IndirectRef, Name, StreamDict, StringLiteral
from pdfcorex.types import Configuration, Version
from pdfcorex.validate.entries import (
    OPTIONAL,
    REQUIRED,
    in_range,
    one_of,
    validate_date_entry,
    validate_entry,
    validate_indref_entry,
    validate_integer,
    validate_integer_entry,
    validate_name,
    validate_name_array,
    validate_name_entry,
    validate_number,
    validate_number_array,
    validate_number_array_entry,
    validate_rectangle_entry,
    validate_stream_dict,
    validate_string,
    validate_string_entry,
)
from pdfcorex.xref import XRefTable

from conftest import make_document


def test_missing_required_entry_carries_location() -> None:
    xref = make_document("strict")
    xref.cur_obj = 12

    with pytest.raises(MissingRequiredError) as excinfo:
        validate_entry(xref, Dict(), "fontDict", "BaseFont", REQUIRED, Version.V10)

    assert excinfo.value.obj_nr == 12
    assert str(excinfo.value) == "required entry missing (obj#12 dict=fontDict entry=BaseFont)"


def test_null_entry_counts_as_absent() -> None:
    xref = make_document("strict")
    d = Dict(Title=None)

    assert validate_string_entry(xref, d, "infoDict", "Title", OPTIONAL, Version.V10) is None
    with pytest.raises(MissingRequiredError):
        validate_string_entry(xref, d, "infoDict", "Title", REQUIRED, Version.V10)


def test_entries_are_dereferenced() -> None:
    xref = make_document("strict")
    xref.set_object(20, 42)

    assert validate_integer_entry(xref, Dict(Count=IndirectRef(20)), "pagesDict", "Count", REQUIRED, Version.V10) == 42


def test_entry_version_gate() -> None:
    d = Dict(Lang=StringLiteral(b"en-US"))
    strict = XRefTable(Configuration(validation_mode="strict"), header_version=Version.V13)
    relaxed = XRefTable(Configuration(validation_mode="relaxed"), header_version=Version.V13)

    with pytest.raises(VersionViolationError):
        validate_string_entry(strict, d, "rootDict", "Lang", OPTIONAL, Version.V14)
    assert validate_string_entry(relaxed, d, "rootDict", "Lang", OPTIONAL, Version.V14) == "en-US"
    assert "requires 1.4" in relaxed.warnings[0]


def test_entry_type_mismatch() -> None:
    xref = make_document("strict")

    with pytest.raises(TypeMismatchError, match="expected name, got integer"):
        validate_name_entry(xref, Dict(Type=3), "pageDict", "Type", REQUIRED, Version.V10)


def test_entry_predicates() -> None:
    xref = make_document("strict")
    d = Dict(PageMode=Name("UseThumbs"), Rotate=45, Q=1)

    assert validate_name_entry(xref, d, "rootDict", "PageMode", OPTIONAL, Version.V10, one_of("UseNone", "UseThumbs"))
    assert validate_integer_entry(xref, d, "annotDict", "Q", OPTIONAL, Version.V10, in_range(0, 2)) == 1
    with pytest.raises(ValueRejectedError):
        validate_integer_entry(xref, d, "pageDict", "Rotate", OPTIONAL, Version.V10, lambda r: r % 90 == 0)


def test_empty_optional_string_skips_predicate() -> None:
    xref = make_document("strict")
    d = Dict(Lang=StringLiteral(b""))

    assert validate_string_entry(xref, d, "rootDict", "Lang", OPTIONAL, Version.V10, lambda s: len(s) == 2) == ""
    with pytest.raises(ValueRejectedError):
        validate_string_entry(xref, d, "rootDict", "Lang", REQUIRED, Version.V10, lambda s: len(s) == 2)


def test_hex_strings_are_strings() -> None:
    xref = make_document("strict")

    assert validate_string_entry(xref, Dict(ID=HexLiteral(b"ab")), "trailer", "ID", REQUIRED, Version.V10) == "ab"


def test_indirect_reference_entries_are_not_followed() -> None:
    xref = make_document("strict")

    assert validate_indref_entry(xref, Dict(P=IndirectRef(99)), "annotDict", "P", REQUIRED, Version.V10) == IndirectRef(99)
    with pytest.raises(TypeMismatchError):
        validate_indref_entry(xref, Dict(P=Dict()), "annotDict", "P", REQUIRED, Version.V10)


def test_rectangles_need_four_numbers() -> None:
    xref = make_document("strict")

    assert validate_rectangle_entry(xref, Dict(Rect=Array([0, 0, 10.5, 20])), "annotDict", "Rect", REQUIRED, Version.V10)
    with pytest.raises(ValueRejectedError):
        validate_rectangle_entry(xref, Dict(Rect=Array([0, 0, 10])), "annotDict", "Rect", REQUIRED, Version.V10)
    with pytest.raises(TypeMismatchError):
        validate_number_array_entry(xref, Dict(Rect=Array([0, Name("x")])), "annotDict", "Rect", REQUIRED, Version.V10)


def test_date_entries() -> None:
    strict = make_document("strict")
    relaxed = make_document("relaxed")
    d = Dict(ModDate=StringLiteral(b"20240102"))

    with pytest.raises(ValueRejectedError):
        validate_date_entry(strict, d, "infoDict", "ModDate", OPTIONAL, Version.V10)
    assert validate_date_entry(relaxed, d, "infoDict", "ModDate", OPTIONAL, Version.V10).day == 2


def test_scalar_validators() -> None:
    xref = make_document("strict")
    xref.set_object(20, Name("Helvetica"))

    assert validate_integer(xref, 7, lambda i: i > 0) == 7
    assert validate_number(xref, 1.5) == 1.5
    assert validate_name(xref, IndirectRef(20)) == "Helvetica"
    assert validate_string(xref, StringLiteral(b"abc"), str.isalpha) == "abc"
    with pytest.raises(TypeMismatchError):
        validate_integer(xref, True)
    with pytest.raises(TypeMismatchError):
        validate_number(xref, Name("one"))
    with pytest.raises(ValueRejectedError):
        validate_name(xref, Name("Courier"), lambda n: n.startswith("Helv"))
    with pytest.raises(MissingRequiredError):
        validate_string(xref, None)


def test_typed_arrays() -> None:
    xref = make_document("strict")

    assert validate_number_array(xref, Array([1, 2.5, None])) == Array([1, 2.5, None])
    assert validate_name_array(xref, Array([Name("a"), Name("b")]))
    assert validate_name_array(xref, None) is None
    with pytest.raises(TypeMismatchError, match="array of names"):
        validate_name_array(xref, Array([Name("a"), 1]))


def test_stream_dict_validator() -> None:
    xref = make_document("strict")
    xref.set_object(20, StreamDict(raw=b""))

    assert isinstance(validate_stream_dict(xref, IndirectRef(20)), StreamDict)
    with pytest.raises(TypeMismatchError):
        validate_stream_dict(xref, Dict())


def test_typed_dereference_helpers() -> None:
    xref = make_document("strict")
    xref.set_object(20, 3)
    xref.set_object(21, True)

    assert xref.dereference_integer(IndirectRef(20)) == 3
    assert xref.dereference_number(IndirectRef(20)) == 3.0
    assert isinstance(xref.dereference_number(2), float)
    assert xref.dereference_boolean(IndirectRef(21)) is True
    assert xref.dereference_boolean(None) is None
    with pytest.raises(TypeMismatchError):
        xref.dereference_integer(IndirectRef(21))
    with pytest.raises(TypeMismatchError):
        xref.dereference_boolean(1)
    with pytest.raises(TypeMismatchError):
        xref.dereference_number(StringLiteral(b"1"))
