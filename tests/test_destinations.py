from __future__ import annotations

import pytest

from pdfcorex.exceptions import TypeMismatchError, ValueRejectedError
from pdfcorex.objects import Array, IndirectRef, Name
from pdfcorex.validate import Destination, decode_destination_array, encode_destination_array
from pdfcorex.validate.destinations import validate_destination, validate_destination_array

from conftest import FIRST_PAGE, make_document

PAGE = IndirectRef(FIRST_PAGE)


@pytest.mark.parametrize(
    "dest",
    [
        Destination(PAGE, "Fit"),
        Destination(PAGE, "FitB"),
        Destination(PAGE, "FitH", top=700),
        Destination(PAGE, "FitBH", top=None),
        Destination(PAGE, "FitV", left=36),
        Destination(PAGE, "FitBV", left=0),
        Destination(PAGE, "XYZ", left=0, top=792, zoom=1.5),
        Destination(PAGE, "FitR", left=10, bottom=20, right=300, top=400),
    ],
)
def test_destination_codec(dest: Destination) -> None:
    assert decode_destination_array(encode_destination_array(dest)) == dest


def test_encode_xyz_keeps_null_zoom() -> None:
    array = encode_destination_array(Destination(PAGE, "XYZ", left=0, top=792))

    assert array == Array([PAGE, Name("XYZ"), 0, 792, None])


def test_decode_rejects_wrong_shape() -> None:
    with pytest.raises(ValueRejectedError):
        decode_destination_array(Array([PAGE, Name("FitR"), 1, 2]))
    with pytest.raises(ValueRejectedError):
        decode_destination_array(Array([PAGE]))
    with pytest.raises(TypeMismatchError):
        decode_destination_array(Array([PAGE, Name("FitH"), Name("top")]))


def test_unknown_fit_type() -> None:
    with pytest.raises(ValueRejectedError):
        Destination(PAGE, "FitAll")


def test_length_four_destination_strict() -> None:
    xref = make_document("strict")

    with pytest.raises(ValueRejectedError):
        validate_destination_array(xref, Array([PAGE, Name("XYZ"), 0, 792]))


def test_length_four_destination_relaxed() -> None:
    xref = make_document("relaxed")

    dest = validate_destination_array(xref, Array([PAGE, Name("XYZ"), 0, 792]))

    assert dest == Destination(PAGE, "XYZ", left=0, top=792, zoom=None)


def test_length_four_requires_xyz() -> None:
    xref = make_document("relaxed")

    with pytest.raises(ValueRejectedError):
        validate_destination_array(xref, Array([PAGE, Name("FitH"), 0, 792]))


def test_destination_to_missing_page_relaxed_is_dropped() -> None:
    xref = make_document("relaxed")

    assert validate_destination_array(xref, Array([IndirectRef(77), Name("Fit")])) is None


def test_destination_must_point_to_a_page() -> None:
    xref = make_document("strict")

    with pytest.raises(ValueRejectedError):
        validate_destination_array(xref, Array([IndirectRef(1), Name("Fit")]))


def test_remote_destination_uses_page_number() -> None:
    xref = make_document("strict")

    dest = validate_destination_array(xref, Array([0, Name("FitH"), 500]))

    assert dest == Destination(0, "FitH", top=500)


def test_named_destinations_are_returned_as_text() -> None:
    xref = make_document("strict")

    assert validate_destination(xref, Name("chapter1")) == "chapter1"


def test_destination_rejects_name_as_page() -> None:
    xref = make_document("strict")

    with pytest.raises(ValueRejectedError, match="got name"):
        validate_destination_array(xref, Array([Name("Foo"), Name("Fit")]))


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_destination_rejects_null_page(mode: str) -> None:
    xref = make_document(mode)

    with pytest.raises(ValueRejectedError, match="got null"):
        validate_destination_array(xref, Array([None, Name("Fit")]))


def test_remote_destination_accepts_null_page() -> None:
    xref = make_document("strict")

    dest = validate_destination(xref, Array([None, Name("Fit")]), for_action=True, remote=True)

    assert dest == Destination(None, "Fit")
