from __future__ import annotations

import struct
from pathlib import Path

import pytest

from pdfcorex.exceptions import CorruptGlyfError, CorruptStructureError, FontCacheError, UnsupportedFontError
from pdfcorex.font import (
    install_true_type_font,
    installed_fonts,
    load_font,
    parse_font_file,
    subset,
    subset_installed_font,
    to_pdf_glyph_space,
)
from pdfcorex.font.subset import GlyfLocation, glyf_and_loca
from pdfcorex.font.truetype import Table, calc_table_checksum, read_tables

from conftest import build_ttc, build_ttf


def _loca_offsets(tables: dict[str, Table]) -> list[int]:
    num_glyphs = tables["maxp"].u16(4)
    if tables["head"].u16(50) == 0:
        return [2 * tables["loca"].u16(2 * gid) for gid in range(num_glyphs + 1)]
    return [tables["loca"].u32(4 * gid) for gid in range(num_glyphs + 1)]


def _kept(tables: dict[str, Table]) -> set[int]:
    offsets = _loca_offsets(tables)
    return {gid for gid in range(len(offsets) - 1) if offsets[gid + 1] > offsets[gid]}


# -- Parsing -----------------------------------------------------------------


def test_parse_true_type_metrics() -> None:
    (font,) = parse_font_file(build_ttf())

    assert font.postscript_name == "PdfcorexTest-Regular"
    assert font.units_per_em == 2048
    assert font.glyph_count == 300
    assert font.hor_metrics_count == 300
    assert (font.llx, font.lly, font.urx, font.ury) == (-48.0, -97.0, 488.0, 439.0)
    assert font.ascent == 878
    assert font.descent == -195
    assert font.first_char == 0x41
    assert font.last_char == 0x5A
    assert not font.fixed_pitch
    assert font.glyph_index("A") == 0x41
    assert font.glyph_index("a") == 0
    assert font.to_unicode[0x5A] == 0x5A
    assert font.planes == {0}


def test_fixed_pitch_flag_is_read_from_post_table() -> None:
    data = build_ttf(fixed_pitch=True)
    _, tables = read_tables(data, strict=True)
    post = tables["post"]

    (font,) = parse_font_file(data)

    assert post.u32(12) == 1
    assert post.u16(16) == 0
    assert font.fixed_pitch


def test_font_file_is_standalone_copy() -> None:
    data = build_ttf()
    (font,) = parse_font_file(data)

    assert font.font_file == data


def test_short_horizontal_metrics_repeat_last_width() -> None:
    (font,) = parse_font_file(build_ttf(num_glyphs=6, hor_metrics=3, units_per_em=1000))

    assert font.glyph_widths == [1024, 1025, 1026, 1026, 1026, 1026]
    assert font.width(5) == 1026
    assert font.width(6) == 0


def test_cmap_format12_preferred_over_format4() -> None:
    data = build_ttf(
        cmap4=[(0x41, 0x5A, 0, None)],
        cmap12=[(0x41, 0x5A, 100), (0x1F600, 0x1F601, 150)],
    )

    (font,) = parse_font_file(data)

    assert font.glyph_index("A") == 100
    assert font.glyph_index(0x1F601) == 151
    assert font.planes == {0, 1}


def test_cmap_format4_glyph_id_array() -> None:
    (font,) = parse_font_file(build_ttf(cmap4=[(0x30, 0x31, 0, [7, 8]), (0x41, 0x5A, -60, None)]))

    assert font.glyph_index("0") == 7
    assert font.glyph_index("1") == 8
    assert font.glyph_index("A") == 5
    assert font.to_unicode[8] == 0x31
    assert 0xFFFF not in font.chars


def test_collection_yields_every_font() -> None:
    data = build_ttc([build_ttf(postscript_name="Family-Regular"), build_ttf(postscript_name="Family-Bold")])

    fonts = parse_font_file(data)

    assert [font.postscript_name for font in fonts] == ["Family-Regular", "Family-Bold"]


def test_cff_fonts_are_rejected() -> None:
    data = b"OTTO" + build_ttf()[4:]

    with pytest.raises(UnsupportedFontError):
        parse_font_file(data)


def test_unknown_font_format() -> None:
    with pytest.raises(UnsupportedFontError):
        parse_font_file(b"wOFF" + b"\x00" * 40)


def test_truncated_font() -> None:
    with pytest.raises(CorruptStructureError):
        parse_font_file(build_ttf()[:40])


def test_zero_units_per_em() -> None:
    with pytest.raises(CorruptStructureError):
        parse_font_file(build_ttf(units_per_em=0))


def _with_bad_post_checksum() -> bytes:
    data = bytearray(build_ttf())
    count = struct.unpack_from(">H", data, 4)[0]
    for index in range(count):
        entry = 12 + 16 * index
        if data[entry : entry + 4] == b"post":
            struct.pack_into(">I", data, entry + 4, 0xDEADBEEF)
    return bytes(data)


def test_checksum_mismatch_strict() -> None:
    with pytest.raises(CorruptStructureError, match="checksum"):
        read_tables(_with_bad_post_checksum(), strict=True)


def test_checksum_mismatch_relaxed_is_fixed() -> None:
    (font,) = parse_font_file(_with_bad_post_checksum())

    _, tables = read_tables(font.font_file, strict=True)
    assert tables["post"].checksum == calc_table_checksum("post", tables["post"].data)


def test_head_checksum_skips_adjustment() -> None:
    head = struct.pack(">III", 1, 2, 0xFFFFFFFF) + struct.pack(">I", 4)

    assert calc_table_checksum("head", head) == 7
    assert calc_table_checksum("glyf", head) == (7 + 0xFFFFFFFF) & 0xFFFFFFFF


@pytest.mark.parametrize(("units", "expected"), [(2048, 1000), (1, 0), (-1, 0), (-3000, -1464), (3000, 1464)])
def test_glyph_space_truncates_toward_zero(units: int, expected: int) -> None:
    assert to_pdf_glyph_space(units, 2048) == expected


# -- Subsetting --------------------------------------------------------------


def test_subset_keeps_compound_closure() -> None:
    font = build_ttf(num_glyphs=800, index_to_loc_format=1, composites={90: (65, 200)})

    result = subset(font, {65, 66, 90})
    _, tables = read_tables(result, strict=True)
    offsets = _loca_offsets(tables)

    assert tables["loca"].size == 801 * 4
    assert offsets[0] == 0
    assert offsets[800] == tables["glyf"].size
    assert _kept(tables) == {0, 65, 66, 90, 200}

    _, original = read_tables(font)
    before = GlyfLocation(original["loca"], original["glyf"], 800, 1)
    after = GlyfLocation(tables["loca"], tables["glyf"], 800, 1)
    for gid in (0, 65, 66, 90, 200):
        assert after.outline(gid) == before.outline(gid)


def test_subset_short_loca_format() -> None:
    font = build_ttf(num_glyphs=300, index_to_loc_format=0, composites={90: (65, 200)})

    _, tables = read_tables(subset(font, [90]), strict=True)

    assert tables["loca"].size == 301 * 2
    assert _loca_offsets(tables)[300] == tables["glyf"].size
    assert _kept(tables) == {0, 65, 90, 200}


def test_subset_is_idempotent_for_closed_sets() -> None:
    font = build_ttf(num_glyphs=400, composites={90: (65, 200)})
    gids = {65, 66, 90, 200}

    once = subset(font, gids)

    assert subset(once, gids) == once


def test_subset_keeps_unrelated_tables() -> None:
    font = build_ttf()

    _, before = read_tables(font)
    _, after = read_tables(subset(font, {66}))

    assert set(after) == set(before)
    for tag in ("head", "hhea", "hmtx", "cmap", "name", "post", "maxp"):
        assert after[tag].data == before[tag].data


def test_repeated_component_is_walked_once() -> None:
    _, tables = read_tables(build_ttf(composites={90: (65, 200), 91: (90, 65)}))

    assert glyf_and_loca(tables, {91}) == {0, 65, 90, 91, 200}


def test_component_cycle_terminates() -> None:
    _, tables = read_tables(build_ttf(composites={92: (93,), 93: (92,)}))

    assert glyf_and_loca(tables, {92}) == {0, 92, 93}


def test_empty_component_is_kept_without_outline() -> None:
    _, tables = read_tables(build_ttf(composites={90: (65, 200)}, empty={200}))

    used = glyf_and_loca(tables, {90})

    assert used == {0, 65, 90, 200}
    assert _kept(tables) == {0, 65, 90}


def test_subset_rejects_unknown_glyph() -> None:
    with pytest.raises(CorruptGlyfError):
        subset(build_ttf(num_glyphs=300), {900})


def test_subset_rejects_inverted_offsets() -> None:
    _, tables = read_tables(build_ttf())
    loca = bytearray(tables["loca"].data)
    struct.pack_into(">I", loca, 4 * 66, 0)
    tables["loca"] = Table(0, 0, tables["loca"].size, tables["loca"].padded, bytes(loca))

    with pytest.raises(CorruptGlyfError):
        glyf_and_loca(tables, {65})


def test_subset_requires_glyf() -> None:
    _, tables = read_tables(build_ttf())
    del tables["glyf"]

    with pytest.raises(UnsupportedFontError):
        glyf_and_loca(tables, {1})


# -- Font cache --------------------------------------------------------------


def test_install_and_load_font(ttf_file: Path, tmp_path: Path) -> None:
    font_dir = tmp_path / "fonts"

    names = install_true_type_font(ttf_file, font_dir)

    assert names == ["PdfcorexTest-Regular"]
    assert installed_fonts(font_dir) == names
    assert (font_dir / "PdfcorexTest-Regular.ttfl").is_file()
    assert load_font("PdfcorexTest-Regular", font_dir) == parse_font_file(ttf_file.read_bytes())[0]


def test_install_collection(tmp_path: Path) -> None:
    path = tmp_path / "family.ttc"
    path.write_bytes(build_ttc([build_ttf(postscript_name="Family-Regular"), build_ttf(postscript_name="Family-Italic")]))

    names = install_true_type_font(path, tmp_path / "fonts")

    assert sorted(names) == installed_fonts(tmp_path / "fonts") == ["Family-Italic", "Family-Regular"]


def test_load_missing_font(tmp_path: Path) -> None:
    assert installed_fonts(tmp_path / "nowhere") == []
    with pytest.raises(FontCacheError):
        load_font("Missing-Regular", tmp_path)


def test_corrupt_cache_file(tmp_path: Path) -> None:
    (tmp_path / "Broken-Regular.ttfl").write_bytes(b"not a pickle")

    with pytest.raises(FontCacheError):
        load_font("Broken-Regular", tmp_path)


def test_subset_installed_font(ttf_file: Path, tmp_path: Path) -> None:
    install_true_type_font(ttf_file, tmp_path)

    result = subset_installed_font("PdfcorexTest-Regular", {0x41, 0x42}, tmp_path)

    _, tables = read_tables(result, strict=True)
    assert _kept(tables) == {0, 0x41, 0x42}
