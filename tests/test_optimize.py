from __future__ import annotations

from pdfcorex.objects import Dict, IndirectRef, Name, StreamDict
from pdfcorex.optimize import OptimizationResult, optimize_xref_table, reachable_objects
from pdfcorex.xref import FreeEntry

from conftest import FIRST_PAGE, make_document


def _font(base_font: str = "Helvetica") -> Dict:
    return Dict(Type=Name("Font"), Subtype=Name("Type1"), BaseFont=Name(base_font))


def _image(payload: bytes = b"\x00\xff") -> StreamDict:
    return StreamDict(
        Type=Name("XObject"),
        Subtype=Name("Image"),
        Width=2,
        Height=1,
        BitsPerComponent=8,
        ColorSpace=Name("DeviceGray"),
        raw=payload,
    )


def _document_with_duplicates():
    xref = make_document("relaxed")
    xref.set_object(10, _font())
    xref.set_object(11, _font())
    xref.set_object(12, _font("Courier"))
    xref.set_object(13, _image())
    xref.set_object(14, _image())
    xref.set_object(15, _image(b"\xff\x00"))
    xref.set_object(16, Dict(Orphan=True))
    page = xref.find_object(FIRST_PAGE)
    page["Resources"] = Dict(
        Font=Dict(F1=IndirectRef(10), F2=IndirectRef(11), F3=IndirectRef(12)),
        XObject=Dict(Im1=IndirectRef(13), Im2=IndirectRef(14), Im3=IndirectRef(15)),
    )
    xref.trailer["Size"] = xref.size
    return xref, page


def test_duplicates_are_collapsed() -> None:
    xref, page = _document_with_duplicates()

    result = optimize_xref_table(xref)

    assert result == OptimizationResult(
        objects_before=10,
        objects_after=7,
        duplicate_fonts=1,
        duplicate_images=1,
        freed_objects=1,
    )
    assert result.removed_objects == 3
    assert page["Resources"]["Font"]["F2"] == IndirectRef(10)
    assert page["Resources"]["Font"]["F3"] == IndirectRef(12)
    assert page["Resources"]["XObject"]["Im2"] == IndirectRef(13)
    assert page["Resources"]["XObject"]["Im3"] == IndirectRef(15)


def test_freed_slots_bump_generation() -> None:
    xref, _ = _document_with_duplicates()

    optimize_xref_table(xref)

    for obj_nr in (11, 14, 16):
        assert xref.table[obj_nr] == FreeEntry(1, 0)
    assert xref.stats.objects == 7
    assert xref.stats.free_objects == 4


def test_optimizing_twice_changes_nothing() -> None:
    xref, _ = _document_with_duplicates()
    optimize_xref_table(xref)

    result = optimize_xref_table(xref)

    assert result.removed_objects == 0
    assert result.duplicate_fonts == result.duplicate_images == result.freed_objects == 0


def test_reachable_objects_skip_dangling_refs() -> None:
    xref = make_document("relaxed")
    xref.find_object(FIRST_PAGE)["Thumb"] = IndirectRef(99)

    assert reachable_objects(xref) == {1, 2, 3}
