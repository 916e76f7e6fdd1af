from __future__ import annotations

import pytest

from pdfcorex.exceptions import DanglingRefError, InvalidEncodingError, TypeMismatchError, VersionViolationError
from pdfcorex.objects import (
    Array,
    Dict,
    HexLiteral,
    IndirectRef,
    Name,
    StreamDict,
    StringLiteral,
    as_string,
    encode_string,
    escape_file_spec_string,
    filter_pipeline,
    type_name,
    unescape_file_spec_string,
)
from pdfcorex.types import Configuration, ValidationMode, Version, parse_version
from pdfcorex.xref import FreeEntry, InUseEntry, XRefTable


def test_dereference_follows_double_indirection() -> None:
    xref = XRefTable()
    target = xref.set_object(5, Dict(Type=Name("Font")))
    xref.set_object(6, target)

    value = xref.dereference(IndirectRef(6))

    assert value == Dict(Type=Name("Font"))
    assert not isinstance(value, IndirectRef)
    assert xref.dereference(42) == 42


def test_dangling_reference_strict_raises() -> None:
    xref = XRefTable(Configuration(validation_mode="strict"))

    with pytest.raises(DanglingRefError):
        xref.dereference(IndirectRef(99))


def test_dangling_reference_relaxed_warns() -> None:
    xref = XRefTable(Configuration(validation_mode="relaxed"))
    xref.set_object(7, Dict())
    xref.free_object(7)

    assert xref.dereference(IndirectRef(7)) is None
    assert xref.is_dangling(IndirectRef(7))
    assert any("7 0 R" in warning for warning in xref.warnings)


def test_generation_mismatch_is_dangling() -> None:
    xref = XRefTable()
    xref.set_object(3, Dict(), generation=2)

    assert xref.is_dangling(IndirectRef(3, 0))
    assert not xref.is_dangling(IndirectRef(3, 2))


def test_free_object_bumps_generation() -> None:
    xref = XRefTable()
    ref = xref.insert_object(Array([1, 2]))
    xref.free_object(ref.obj_nr)

    slot = xref.table[ref.obj_nr]
    assert isinstance(slot, FreeEntry)
    assert slot.generation == 1
    assert ref.obj_nr not in xref.in_use_numbers()


def test_slot_zero_is_head_of_free_list() -> None:
    xref = XRefTable()

    assert xref.table[0] == FreeEntry(65535, 0)


def test_lazy_loader_is_called_once() -> None:
    calls: list[tuple[int, int]] = []

    def loader(obj_nr: int, generation: int) -> Dict:
        calls.append((obj_nr, generation))
        return Dict(N=obj_nr)

    xref = XRefTable(loader=loader)
    xref.table[4] = InUseEntry(0, loaded=False)

    assert xref.find_object(4) == Dict(N=4)
    assert xref.find_object(4) == Dict(N=4)
    assert calls == [(4, 0)]


def test_typed_dereference_mismatch() -> None:
    xref = XRefTable()
    ref = xref.set_object(8, Array())

    with pytest.raises(TypeMismatchError) as excinfo:
        xref.dereference_dict(ref)

    assert excinfo.value.obj_nr == 8
    assert "expected dict, got array" in str(excinfo.value)


def test_equal_follows_references_and_cycles() -> None:
    xref = XRefTable()
    a = xref.set_object(10, Dict(Type=Name("Font"), BaseFont=Name("Helvetica")))
    b = xref.set_object(11, Dict(Type=Name("Font"), BaseFont=Name("Helvetica")))
    left = xref.set_object(12, Dict(Self=IndirectRef(12), F=a))
    right = xref.set_object(13, Dict(Self=IndirectRef(13), F=b))

    assert xref.equal(a, b)
    assert xref.equal(left, right)
    assert not xref.equal(a, Dict(Type=Name("Font")))
    assert not xref.equal(1, 1.0)


def test_stream_equality_compares_payload() -> None:
    xref = XRefTable()
    a = xref.insert_object(StreamDict(Length=3, raw=b"abc"))
    b = xref.insert_object(StreamDict(Length=3, raw=b"abd"))

    assert not xref.equal(a, b)


def test_version_gate_strict_and_relaxed() -> None:
    strict = XRefTable(Configuration(validation_mode="strict"), header_version=Version.V13)
    relaxed = XRefTable(header_version=Version.V13)

    with pytest.raises(VersionViolationError):
        strict.validate_version("Dests name tree", Version.V14)
    relaxed.validate_version("Dests name tree", Version.V14)

    assert relaxed.warnings


def test_root_version_overrides_lower_header() -> None:
    xref = XRefTable(header_version=Version.V14)
    xref.root_version = Version.V17
    assert xref.version() is Version.V17

    xref.root_version = Version.V13
    assert xref.version() is Version.V14


def test_name_ref_creates_tree_once() -> None:
    xref = XRefTable()
    tree = xref.name_ref("Dests")
    tree.add("chapter1", Array([IndirectRef(3), Name("Fit")]))

    assert xref.name_ref("Dests") is tree
    assert "chapter1" in xref.name_ref("Dests")


def test_name_tree_remove_updates_leaf() -> None:
    xref = XRefTable()
    leaf = Dict(Names=Array([StringLiteral(b"a"), 1, StringLiteral(b"b"), 2]))
    tree = xref.name_ref("Dests")
    tree.add("a", 1, leaf)
    tree.add("b", 2, leaf)

    assert tree.remove("a")
    assert leaf["Names"] == Array([StringLiteral(b"b"), 2])
    assert not tree.remove("a")


def test_count_slots_updates_statistics() -> None:
    xref = XRefTable()
    xref.set_object(1, Dict())
    xref.set_object(2, Dict())
    xref.free_object(2)

    xref.count_slots()

    assert xref.stats.objects == 1
    assert xref.stats.free_objects == 2


@pytest.mark.parametrize(
    ("text", "expected"),
    [("1.4", Version.V14), ("%PDF-1.7", Version.V17), ("/1.5", Version.V15), ("2.0", Version.V20)],
)
def test_parse_version(text: str, expected: Version) -> None:
    assert parse_version(text) is expected


@pytest.mark.parametrize("text", ["", "1", "x.y", "1.9"])
def test_parse_version_rejects(text: str) -> None:
    with pytest.raises(ValueError):
        parse_version(text)


def test_version_formats_as_dotted() -> None:
    assert str(Version.V16) == "1.6"
    assert f"{Version.V20}" == "2.0"


def test_configuration_from_mapping() -> None:
    config = Configuration.from_mapping({"validation_mode": "STRICT", "validate_links": True})

    assert config.validation_mode is ValidationMode.STRICT
    assert config.strict
    assert config.validate_links


def test_configuration_rejects_bad_values() -> None:
    with pytest.raises(ValueError):
        Configuration(validation_mode="lenient")
    with pytest.raises(ValueError):
        Configuration(extract_page_nr=0)
    with pytest.raises(ValueError):
        Configuration.from_mapping({"colour": "blue"})


def test_string_encoding_round_trip() -> None:
    assert as_string(encode_string("Plain text")) == "Plain text"
    encoded = encode_string("Grüße ✓")
    assert bytes(encoded).startswith(b"\xfe\xff")
    assert as_string(encoded) == "Grüße ✓"


def test_odd_length_utf16_string_is_rejected() -> None:
    with pytest.raises(InvalidEncodingError):
        as_string(HexLiteral(b"\xfe\xff\x00"))


def test_dict_accessors() -> None:
    d = Dict(Type=Name("Annot"), Subtype=Name("Link"), F=4, P=IndirectRef(3), T=StringLiteral(b"hi"))

    assert d.type() == "Annot"
    assert d.subtype() == "Link"
    assert d.int_entry("F") == 4
    assert d.indirect_ref_entry("P") == IndirectRef(3)
    assert d.string_entry("T") == "hi"
    assert d.name_entry("F") is None


def test_dict_container_accessors() -> None:
    d = Dict(Kids=Array([IndirectRef(4)]), Open=True, Resources=Dict(), Count=Name("x"))

    assert d.array_entry("Kids") == Array([IndirectRef(4)])
    assert d.boolean_entry("Open") is True
    assert d.dict_entry("Resources") == Dict()
    assert d.array_entry("Count") is None
    assert d.boolean_entry("Count") is None
    assert d.dict_entry("Missing") is None


def test_filter_pipeline_pairs_decode_parms() -> None:
    stream = StreamDict(
        Filter=Array([Name("ASCIIHexDecode"), Name("FlateDecode")]),
        DecodeParms=Array([None, Dict(Predictor=12)]),
        raw=b"",
    )

    stages = filter_pipeline(stream)

    assert [stage.name for stage in stages] == ["ASCIIHexDecode", "FlateDecode"]
    assert stages[0].parms is None
    assert stages[1].parms == Dict(Predictor=12)


def test_file_spec_string_escaping() -> None:
    spec = escape_file_spec_string(["dir", "a/b", "file.pdf"])

    assert spec == "dir/a\\/b/file.pdf"
    assert unescape_file_spec_string(spec) == ["dir", "a/b", "file.pdf"]


def test_type_names() -> None:
    assert type_name(None) == "null"
    assert type_name(True) == "boolean"
    assert type_name(Name("X")) == "name"
    assert type_name(StreamDict(raw=b"")) == "stream"
    assert type_name(IndirectRef(1)) == "indirect reference"
