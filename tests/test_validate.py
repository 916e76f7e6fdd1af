from __future__ import annotations

import pytest

from pdfcorex.exceptions import (
    CorruptStructureError,
    DanglingRefError,
    MissingRequiredError,
    TypeMismatchError,
    ValueRejectedError,
    VersionViolationError,
)
from pdfcorex.objects import Array, Dict, IndirectRef, Name, StringLiteral
from pdfcorex.types import Version
from pdfcorex.validate import validate_xref_table
from pdfcorex.xref import XRefTable

from conftest import CATALOG, FIRST_PAGE, PAGES, make_document


def _catalog(xref: XRefTable) -> Dict:
    return xref.find_object(CATALOG)


def _page(xref: XRefTable, index: int = 0) -> Dict:
    return xref.find_object(FIRST_PAGE + index)


def _rect() -> Array:
    return Array([0, 0, 100, 100])


# -- Catalog and page tree ---------------------------------------------------


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_minimal_catalog(mode: str) -> None:
    xref = make_document(mode, pages=0)

    info = validate_xref_table(xref)

    assert info is None
    assert xref.outlines is None
    assert xref.page_annots == {}
    assert xref.uris == {}
    assert xref.page_count == 0
    assert xref.stats.root_entries == {"Type", "Pages"}


def test_pages_are_counted() -> None:
    xref = make_document("strict", pages=3)

    validate_xref_table(xref)

    assert xref.page_count == 3
    assert xref.stats.pages == 3
    assert xref.stats.objects == 5
    assert xref.cur_page == 0


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_page_tree_count_mismatch(mode: str) -> None:
    xref = make_document(mode, pages=2)
    xref.find_object(PAGES)["Count"] = 3

    with pytest.raises(CorruptStructureError) as excinfo:
        validate_xref_table(xref)

    assert excinfo.value.obj_nr == PAGES
    assert excinfo.value.entry_name == "Count"


def test_nested_page_tree_inherits_attributes() -> None:
    xref = make_document("strict", pages=0)
    xref.set_object(10, Dict(Type=Name("Pages"), Parent=IndirectRef(PAGES), Kids=Array([IndirectRef(11), IndirectRef(12)]), Count=2, Resources=Dict(), MediaBox=_rect()))
    xref.set_object(11, Dict(Type=Name("Page"), Parent=IndirectRef(10)))
    xref.set_object(12, Dict(Type=Name("Page"), Parent=IndirectRef(10), Rotate=90))
    pages = xref.find_object(PAGES)
    pages["Kids"] = Array([IndirectRef(10)])
    pages["Count"] = 2

    validate_xref_table(xref)

    assert xref.page_count == 2


def test_page_without_media_box_strict() -> None:
    xref = make_document("strict")
    del _page(xref)["MediaBox"]

    with pytest.raises(MissingRequiredError):
        validate_xref_table(xref)


def test_page_without_media_box_relaxed_warns() -> None:
    xref = make_document("relaxed")
    del _page(xref)["MediaBox"]

    validate_xref_table(xref)

    assert any("MediaBox" in warning for warning in xref.warnings)


def test_page_tree_kids_must_be_references() -> None:
    xref = make_document("relaxed")
    xref.find_object(PAGES)["Kids"] = Array([_page(xref)])

    with pytest.raises(TypeMismatchError):
        validate_xref_table(xref)


def test_page_tree_cycle_is_corrupt() -> None:
    xref = make_document("relaxed", pages=1)
    pages = xref.find_object(PAGES)
    pages["Kids"] = Array([IndirectRef(FIRST_PAGE), IndirectRef(FIRST_PAGE)])
    pages["Count"] = 2

    with pytest.raises(CorruptStructureError):
        validate_xref_table(xref)


def test_missing_pages_entry() -> None:
    xref = make_document("relaxed")
    del _catalog(xref)["Pages"]

    with pytest.raises(MissingRequiredError):
        validate_xref_table(xref)


def test_catalog_type_required_in_strict_mode() -> None:
    strict = make_document("strict")
    relaxed = make_document("relaxed")
    del _catalog(strict)["Type"]
    del _catalog(relaxed)["Type"]

    with pytest.raises(MissingRequiredError):
        validate_xref_table(strict)
    validate_xref_table(relaxed)


def test_catalog_version_raises_document_version() -> None:
    xref = make_document("strict")
    xref.header_version = Version.V14
    _catalog(xref)["Version"] = Name("1.7")

    validate_xref_table(xref)

    assert xref.version() is Version.V17


def test_version_violation_strict_and_relaxed() -> None:
    strict = make_document("strict")
    relaxed = make_document("relaxed")
    for xref in (strict, relaxed):
        xref.header_version = Version.V14
        _catalog(xref)["NeedsRendering"] = True

    with pytest.raises(VersionViolationError):
        validate_xref_table(strict)
    validate_xref_table(relaxed)

    assert any("NeedsRendering" in warning for warning in relaxed.warnings)


def test_page_layout_is_checked() -> None:
    xref = make_document("strict")
    _catalog(xref)["PageLayout"] = Name("Sideways")

    with pytest.raises(ValueRejectedError):
        validate_xref_table(xref)


# -- Named destinations ------------------------------------------------------


def _with_named_destination(mode: str) -> XRefTable:
    xref = make_document(mode)
    xref.set_object(42, Dict(Type=Name("Page"), Parent=IndirectRef(PAGES), MediaBox=_rect(), Resources=Dict()))
    dest = Array([IndirectRef(42), Name("XYZ"), 0, 792, 0])
    xref.set_object(20, Dict(Names=Array([StringLiteral(b"chapter1"), dest])))
    catalog = _catalog(xref)
    catalog["Names"] = Dict(Dests=IndirectRef(20))
    catalog["OpenAction"] = Dict(S=Name("GoTo"), D=StringLiteral(b"chapter1"))
    return xref


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_destination_lookup(mode: str) -> None:
    xref = _with_named_destination(mode)

    validate_xref_table(xref)

    assert xref.name_ref("Dests")["chapter1"] == Array([IndirectRef(42), Name("XYZ"), 0, 792, 0])
    assert _catalog(xref)["OpenAction"]["D"] == StringLiteral(b"chapter1")
    assert xref.repairs == []


def test_destination_to_deleted_page_strict() -> None:
    xref = _with_named_destination("strict")
    xref.free_object(42)

    with pytest.raises(DanglingRefError):
        validate_xref_table(xref)


def test_destination_to_deleted_page_relaxed() -> None:
    xref = _with_named_destination("relaxed")
    xref.free_object(42)

    validate_xref_table(xref)

    assert "chapter1" not in xref.name_ref("Dests")
    assert xref.find_object(20)["Names"] == Array()
    assert "D" not in _catalog(xref)["OpenAction"]
    assert xref.repairs
    assert any("chapter1" in warning for warning in xref.warnings)


def test_unknown_named_destination_strict() -> None:
    xref = make_document("strict")
    _catalog(xref)["OpenAction"] = Dict(S=Name("GoTo"), D=Name("nowhere"))

    with pytest.raises(ValueRejectedError):
        validate_xref_table(xref)


def test_catalog_dests_dict_resolves_names() -> None:
    xref = make_document("strict")
    catalog = _catalog(xref)
    catalog["Dests"] = Dict(intro=Array([IndirectRef(FIRST_PAGE), Name("Fit")]))
    catalog["OpenAction"] = Dict(S=Name("GoTo"), D=Name("intro"))

    validate_xref_table(xref)

    assert xref.repairs == []


def test_unknown_name_tree_strict() -> None:
    xref = make_document("strict")
    _catalog(xref)["Names"] = Dict(Bogus=Dict(Names=Array()))

    with pytest.raises(CorruptStructureError):
        validate_xref_table(xref)


def test_name_tree_limits_are_checked() -> None:
    xref = make_document("strict")
    xref.set_object(
        21,
        Dict(
            Limits=Array([StringLiteral(b"b"), StringLiteral(b"c")]),
            Names=Array([StringLiteral(b"a"), Array([IndirectRef(FIRST_PAGE), Name("Fit")])]),
        ),
    )
    _catalog(xref)["Names"] = Dict(Dests=Dict(Kids=Array([IndirectRef(21)])))

    with pytest.raises(CorruptStructureError):
        validate_xref_table(xref)


def test_name_tree_limits_cover_unordered_keys() -> None:
    xref = make_document("strict")
    fit = Array([IndirectRef(FIRST_PAGE), Name("Fit")])
    xref.set_object(
        21,
        Dict(
            Limits=Array([StringLiteral(b"b"), StringLiteral(b"d")]),
            Names=Array([StringLiteral(b"b"), fit, StringLiteral(b"a"), fit, StringLiteral(b"d"), fit]),
        ),
    )
    _catalog(xref)["Names"] = Dict(Dests=Dict(Kids=Array([IndirectRef(21)])))

    with pytest.raises(CorruptStructureError, match="'a'..'d' outside limits 'b'..'d'"):
        validate_xref_table(xref)


# -- Page labels -------------------------------------------------------------


def _label(style: str = "D") -> Dict:
    return Dict(Type=Name("PageLabel"), S=Name(style))


def _with_label_leaf(mode: str, nums: list, limits: tuple[int, int] = (0, 5)) -> XRefTable:
    xref = make_document(mode)
    xref.set_object(21, Dict(Limits=Array(list(limits)), Nums=Array(nums)))
    _catalog(xref)["PageLabels"] = Dict(Kids=Array([IndirectRef(21)]))
    return xref


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_page_labels(mode: str) -> None:
    xref = make_document(mode)
    _catalog(xref)["PageLabels"] = Dict(Nums=Array([0, _label("r"), 2, Dict(S=Name("D"), St=1)]))

    validate_xref_table(xref)

    assert not [w for w in xref.warnings if "number tree" in w or "PageLabel" in w]


def test_page_labels_tree_with_kids() -> None:
    xref = _with_label_leaf("strict", [0, _label("r"), 3, _label()])

    validate_xref_table(xref)

    assert xref.warnings == []


def test_page_label_style_is_checked() -> None:
    xref = make_document("strict")
    _catalog(xref)["PageLabels"] = Dict(Nums=Array([0, _label("X")]))

    with pytest.raises(ValueRejectedError):
        validate_xref_table(xref)


def test_odd_nums_array_strict() -> None:
    xref = make_document("strict")
    _catalog(xref)["PageLabels"] = Dict(Nums=Array([0, _label(), 4]))

    with pytest.raises(CorruptStructureError, match="odd length Nums"):
        validate_xref_table(xref)


def test_odd_nums_array_relaxed_is_skipped() -> None:
    xref = make_document("relaxed")
    _catalog(xref)["PageLabels"] = Dict(Nums=Array([0, _label("X"), 4]))

    validate_xref_table(xref)

    assert "number tree PageLabel: odd length Nums array (3), skipped" in xref.warnings


def test_number_tree_limits_strict() -> None:
    xref = _with_label_leaf("strict", [0, _label(), 9, _label(), 3, _label()])

    with pytest.raises(CorruptStructureError, match="0..9 outside limits 0..5"):
        validate_xref_table(xref)


def test_number_tree_limits_relaxed() -> None:
    xref = _with_label_leaf("relaxed", [0, _label(), 9, _label(), 3, _label()])

    validate_xref_table(xref)

    assert [w for w in xref.warnings if "outside limits 0..5" in w] == [
        "numberTreeDict: leaf node corrupted, keys 0..9 outside limits 0..5"
    ]


def test_number_tree_needs_integer_keys() -> None:
    xref = _with_label_leaf("relaxed", [StringLiteral(b"0"), _label()])

    with pytest.raises(TypeMismatchError):
        validate_xref_table(xref)


# -- Outlines ----------------------------------------------------------------


def _with_self_linked_outline(mode: str, count: int | None = 1) -> XRefTable:
    xref = make_document(mode)
    outline = Dict(Type=Name("Outlines"), First=IndirectRef(10), Last=IndirectRef(10))
    if count is not None:
        outline["Count"] = count
    xref.set_object(9, outline)
    xref.set_object(
        10,
        Dict(
            Title=StringLiteral(b"Introduction"),
            Parent=IndirectRef(9),
            Prev=IndirectRef(10),
            Dest=Array([IndirectRef(FIRST_PAGE), Name("Fit")]),
        ),
    )
    _catalog(xref)["Outlines"] = IndirectRef(9)
    return xref


def test_outline_repair_strict() -> None:
    xref = _with_self_linked_outline("strict")

    with pytest.raises(CorruptStructureError):
        validate_xref_table(xref)


@pytest.mark.parametrize(("count", "expected"), [(1, 1), (-1, -1), (None, 1)])
def test_outline_repair_relaxed(count: int | None, expected: int) -> None:
    xref = _with_self_linked_outline("relaxed", count)

    validate_xref_table(xref)

    assert xref.repairs == ["bookmarks"]
    assert "Prev" not in xref.find_object(10)
    assert xref.outlines["Count"] == expected
    assert xref.outlines["First"] == xref.outlines["Last"] == IndirectRef(10)


def test_outline_with_missing_next_item_relaxed() -> None:
    xref = _with_self_linked_outline("relaxed", 2)
    item = xref.find_object(10)
    del item["Prev"]
    item["Next"] = IndirectRef(11)

    validate_xref_table(xref)

    assert "Next" not in item
    assert xref.outlines["Count"] == 1
    assert xref.repairs == ["bookmarks"]


def test_outline_item_with_action_and_dest() -> None:
    xref = _with_self_linked_outline("strict")
    item = xref.find_object(10)
    del item["Prev"]
    item["A"] = Dict(S=Name("GoTo"), D=Array([IndirectRef(FIRST_PAGE), Name("Fit")]))

    with pytest.raises(ValueRejectedError):
        validate_xref_table(xref)


# -- Annotations -------------------------------------------------------------


def _with_annotations(mode: str, *annots: Dict) -> XRefTable:
    xref = make_document(mode)
    refs = Array()
    for index, annot in enumerate(annots):
        refs.append(xref.set_object(30 + index, annot))
    _page(xref)["Annots"] = refs
    return xref


def _trap_net() -> Dict:
    return Dict(Type=Name("Annot"), Subtype=Name("TrapNet"), Rect=_rect(), F=4)


def _text_note() -> Dict:
    return Dict(Type=Name("Annot"), Subtype=Name("Text"), Rect=_rect(), Contents=StringLiteral(b"Check this"))


@pytest.mark.parametrize("mode", ["strict", "relaxed"])
def test_trap_net_must_be_last(mode: str) -> None:
    xref = _with_annotations(mode, _trap_net(), _text_note())

    with pytest.raises(CorruptStructureError, match="TrapNet has to be the last entry"):
        validate_xref_table(xref)


def test_trap_net_last_passes() -> None:
    xref = _with_annotations("strict", _text_note(), _trap_net())

    validate_xref_table(xref)

    records = xref.page_annots[1]
    assert set(records) == {"Text", "TrapNet"}
    assert records["Text"][30].contents == "Check this"
    assert records["Text"][30].rect == (0.0, 0.0, 100.0, 100.0)
    assert xref.stats.annotations == {"Text": 1, "TrapNet": 1}


def test_annotation_needs_rect() -> None:
    annot = _text_note()
    del annot["Rect"]
    xref = _with_annotations("relaxed", annot)

    with pytest.raises(MissingRequiredError):
        validate_xref_table(xref)


def test_unknown_annotation_subtype() -> None:
    xref = _with_annotations("relaxed", Dict(Subtype=Name("Hologram"), Rect=_rect()))

    with pytest.raises(ValueRejectedError):
        validate_xref_table(xref)


def test_annotation_page_back_reference_to_free_slot() -> None:
    strict_annot = _text_note()
    strict_annot["P"] = IndirectRef(60)
    strict = _with_annotations("strict", strict_annot)
    relaxed_annot = _text_note()
    relaxed_annot["P"] = IndirectRef(60)
    relaxed = _with_annotations("relaxed", relaxed_annot)

    with pytest.raises(DanglingRefError):
        validate_xref_table(strict)
    validate_xref_table(relaxed)

    assert "P" not in relaxed_annot
    assert relaxed.repairs == ["annotDict P"]


def test_direct_annotations_get_negative_keys() -> None:
    xref = make_document("strict")
    _page(xref)["Annots"] = Array([_text_note()])

    validate_xref_table(xref)

    record = xref.page_annots[1]["Text"][-1]
    assert record.is_direct
    assert record.page == 1


def test_link_uris_are_collected() -> None:
    link = Dict(
        Type=Name("Annot"),
        Subtype=Name("Link"),
        Rect=_rect(),
        A=Dict(S=Name("URI"), URI=StringLiteral(b"https://example.com/spec")),
    )
    xref = make_document("strict", pages=2, validate_links=True)
    xref.set_object(30, link)
    _page(xref, 1)["Annots"] = Array([IndirectRef(30)])

    validate_xref_table(xref)

    assert xref.uris == {2: {"https://example.com/spec": ""}}


def test_link_uris_ignored_without_option() -> None:
    link = Dict(Subtype=Name("Link"), Rect=_rect(), A=Dict(S=Name("URI"), URI=StringLiteral(b"https://example.com")))
    xref = _with_annotations("strict", link)

    validate_xref_table(xref)

    assert xref.uris == {}


def test_unsupported_action_type() -> None:
    xref = make_document("relaxed")
    _catalog(xref)["OpenAction"] = Dict(S=Name("Teleport"))

    with pytest.raises(ValueRejectedError):
        validate_xref_table(xref)


@pytest.mark.parametrize("corner", [None, IndirectRef(99)], ids=["null", "dangling"])
def test_annotation_rect_with_unresolved_corner(corner: object) -> None:
    annot = _text_note()
    annot["Rect"] = Array([0, 0, corner, 100])
    xref = _with_annotations("relaxed", annot)

    validate_xref_table(xref)

    record = xref.page_annots[1]["Text"][30]
    assert record.rect is None
    assert record.contents == "Check this"


# -- Document info -----------------------------------------------------------


def test_document_info_is_collected() -> None:
    xref = make_document("strict")
    xref.trailer["Info"] = xref.set_object(
        50,
        Dict(
            Title=StringLiteral(b"Annual Report"),
            Author=StringLiteral(b"Finance"),
            Keywords=StringLiteral(b"report, 2024; finance"),
            CreationDate=StringLiteral(b"D:20240102030405+01'00'"),
            Trapped=Name("False"),
        ),
    )

    info = validate_xref_table(xref)

    assert info.title == "Annual Report"
    assert info.author == "Finance"
    assert info.keywords == ["report", "2024", "finance"]
    assert info.creation_date.year == 2024
    assert info.trapped == "False"


def test_document_info_bad_entry() -> None:
    strict = make_document("strict")
    relaxed = make_document("relaxed")
    for xref in (strict, relaxed):
        xref.trailer["Info"] = xref.set_object(50, Dict(Title=42, Producer=StringLiteral(b"pdfcorex")))

    with pytest.raises(TypeMismatchError):
        validate_xref_table(strict)
    info = validate_xref_table(relaxed)

    assert info.producer == "pdfcorex"
    assert "Title" not in relaxed.find_object(50)
    assert relaxed.repairs == ['info dict "Title"']


# -- Idempotence -------------------------------------------------------------


def test_relaxed_validation_is_idempotent() -> None:
    xref = _with_self_linked_outline("relaxed")
    annot = _text_note()
    annot["P"] = IndirectRef(60)
    xref.set_object(30, annot)
    _page(xref)["Annots"] = Array([IndirectRef(30)])

    validate_xref_table(xref)
    first = list(xref.repairs)
    validate_xref_table(xref)

    assert set(first) == {"bookmarks", "annotDict P"}
    assert xref.repairs == []
