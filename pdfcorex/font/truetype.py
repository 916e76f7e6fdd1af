"""
TrueType parsing.

This module reads the sfnt table directory of a TrueType font (or of each font
in a TrueType collection) and extracts the metrics a PDF font descriptor needs
into a :class:`TTFLight` record.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field

from ..exceptions import CorruptStructureError, InvalidEncodingError, UnsupportedFontError
from ..utils import round_up_to_4

__all__ = [
    "Table",
    "TTFLight",
    "calc_table_checksum",
    "read_tables",
    "ttc_offsets",
    "parse_true_type",
    "parse_font_file",
    "create_ttf",
    "to_pdf_glyph_space",
]

LOGGER = logging.getLogger("pdfcorex.font")

SFNT_TRUE_TYPE = b"\x00\x01\x00\x00"
SFNT_TRUE_TYPE_APPLE = b"true"
SFNT_CFF = b"OTTO"
TTC_TAG = b"ttcf"
HEAD_MAGIC_NUMBER = 0x5F0F3CF5

# Tables parsed into a TTFLight, in parsing order.
PARSED_TABLES = ("head", "OS/2", "post", "name", "hhea", "maxp", "hmtx", "cmap")

# cmap subtables by preference: (platform, encoding, format).
CMAP_PREFERENCE = (
    (0, 10, 12),
    (0, 4, 12),
    (3, 10, 12),
    (0, 3, 4),
    (3, 1, 4),
)


def to_pdf_glyph_space(units: int, units_per_em: int) -> int:
    """Scale font units to the 1000 unit PDF glyph space, truncating toward zero."""

    scaled = abs(units) * 1000 // units_per_em
    return scaled if units >= 0 else -scaled


def calc_table_checksum(tag: str, data: bytes) -> int:
    """Sum of big-endian uint32 words, skipping ``checkSumAdjustment`` in ``head``."""

    padded = data + b"\x00" * (round_up_to_4(len(data)) - len(data))
    total = 0
    for index, (word,) in enumerate(struct.iter_unpack(">I", padded)):
        if tag == "head" and index == 2:
            continue
        total = (total + word) & 0xFFFFFFFF
    return total


@dataclass(slots=True)
class Table:
    """One entry of the sfnt table directory plus its (padded) body."""

    checksum: int
    offset: int
    size: int
    padded: int
    data: bytes

    def u16(self, offset: int) -> int:
        return struct.unpack_from(">H", self.data, offset)[0]

    def i16(self, offset: int) -> int:
        return struct.unpack_from(">h", self.data, offset)[0]

    def u32(self, offset: int) -> int:
        return struct.unpack_from(">I", self.data, offset)[0]

    def fixed32(self, offset: int) -> float:
        return self.u32(offset) / 65536.0


@dataclass(slots=True)
class TTFLight:
    """
    Font metrics extracted from a TrueType font.

    Attributes:
        postscript_name: NameID 6 of the ``name`` table
        protected: ``OS/2`` fsType forbids embedding
        units_per_em: ``head`` unitsPerEm
        ascent, descent, cap_height: Vertical metrics in glyph space
        first_char, last_char: First and last character code
        unicode_range: The four ``OS/2`` UnicodeRange words
        llx, lly, urx, ury: Font bounding box in glyph space
        italic_angle: ``post`` italicAngle
        fixed_pitch: ``post`` isFixedPitch
        bold: ``OS/2`` fsSelection bold bit
        hor_metrics_count: ``hhea`` numOfLongHorMetrics
        glyph_count: ``maxp`` numGlyphs
        glyph_widths: Advance width per glyph in glyph space
        chars: Code point to glyph index
        to_unicode: Glyph index to code point
        planes: Unicode planes the cmap covers
        font_file: The complete font as a standalone TTF
    """

    postscript_name: str = ""
    protected: bool = False
    units_per_em: int = 0
    ascent: int = 0
    descent: int = 0
    cap_height: int = 0
    first_char: int = 0
    last_char: int = 0
    unicode_range: tuple[int, int, int, int] = (0, 0, 0, 0)
    llx: float = 0.0
    lly: float = 0.0
    urx: float = 0.0
    ury: float = 0.0
    italic_angle: float = 0.0
    fixed_pitch: bool = False
    bold: bool = False
    hor_metrics_count: int = 0
    glyph_count: int = 0
    glyph_widths: list[int] = field(default_factory=list)
    chars: dict[int, int] = field(default_factory=dict)
    to_unicode: dict[int, int] = field(default_factory=dict)
    planes: set[int] = field(default_factory=set)
    font_file: bytes = b""

    def glyph_space(self, units: int) -> int:
        return to_pdf_glyph_space(units, self.units_per_em)

    def glyph_index(self, rune: int | str) -> int:
        """Return the glyph index for a code point, or 0 (``.notdef``)."""

        code = ord(rune) if isinstance(rune, str) else rune
        return self.chars.get(code, 0)

    def width(self, gid: int) -> int:
        if 0 <= gid < len(self.glyph_widths):
            return self.glyph_widths[gid]
        return 0

    def __str__(self) -> str:
        return (
            f"{self.postscript_name}: {self.glyph_count} glyphs, unitsPerEm={self.units_per_em}, "
            f"bbox=({self.llx:.2f}, {self.lly:.2f}, {self.urx:.2f}, {self.ury:.2f}), "
            f"ascent={self.ascent}, descent={self.descent}, capHeight={self.cap_height}"
        )


# -- Table directory ---------------------------------------------------------


def read_tables(data: bytes, base_offset: int = 0, strict: bool = False) -> tuple[bytes, dict[str, Table]]:
    """Read the sfnt header at ``base_offset`` and every table it lists.

    Checksum mismatches raise in strict mode and are fixed up otherwise.
    """

    header = data[base_offset : base_offset + 12]
    if len(header) != 12:
        raise CorruptStructureError("corrupt ttf file: truncated header")
    tag = header[:4]
    if tag == SFNT_CFF:
        raise UnsupportedFontError("OpenType fonts with CFF outlines are not supported")
    if tag not in (SFNT_TRUE_TYPE, SFNT_TRUE_TYPE_APPLE):
        raise UnsupportedFontError(f"unrecognized font format {tag!r}")

    (count,) = struct.unpack_from(">H", header, 4)
    directory = data[base_offset + 12 : base_offset + 12 + 16 * count]
    if len(directory) != 16 * count:
        raise CorruptStructureError("corrupt ttf file: truncated table directory")

    tables: dict[str, Table] = {}
    for raw_tag, checksum, offset, size in struct.iter_unpack(">4sIII", directory):
        name = raw_tag.decode("latin-1")
        padded = round_up_to_4(size)
        body = data[offset : offset + padded]
        if len(body) < size:
            raise CorruptStructureError(f"corrupt table {name!r}")
        body += b"\x00" * (padded - len(body))
        actual = calc_table_checksum(name, body)
        if actual != checksum:
            message = f"table {name!r} checksum mismatch: want {checksum:#010x}, got {actual:#010x}"
            if strict:
                raise CorruptStructureError(message)
            LOGGER.info("repaired: %s", message)
            checksum = actual
        tables[name] = Table(checksum, offset, size, padded, body)
    return header, tables


def ttc_offsets(data: bytes) -> list[int]:
    """Return the sfnt header offsets of a TrueType collection."""

    if len(data) < 12 or data[:4] != TTC_TAG:
        raise CorruptStructureError("corrupt ttc file")
    (count,) = struct.unpack_from(">I", data, 8)
    if len(data) < 12 + 4 * count:
        raise CorruptStructureError("corrupt ttc file: truncated offset table")
    return list(struct.unpack_from(f">{count}I", data, 12))


def create_ttf(header: bytes, tables: dict[str, Table]) -> bytes:
    """Pack ``tables`` behind ``header`` with the directory in tag order.

    ``loca`` and ``glyf`` checksums are recomputed; the others are kept.
    """

    tags = sorted(tables)
    directory = bytearray()
    bodies = bytearray()
    offset = len(header) + 16 * len(tags)
    for tag in tags:
        table = tables[tag]
        if tag in ("loca", "glyf"):
            table.checksum = calc_table_checksum(tag, table.data)
        table.offset = offset
        directory += struct.pack(">4sIII", tag.encode("latin-1"), table.checksum, table.offset, table.size)
        if len(table.data) != table.padded:
            raise CorruptStructureError(f"unable to write table {tag!r}: body is not padded")
        bodies += table.data
        offset += table.padded
    return bytes(header) + bytes(directory) + bytes(bodies)


# -- Table parsers -----------------------------------------------------------


def _parse_head(table: Table, font: TTFLight) -> None:
    if table.u32(12) != HEAD_MAGIC_NUMBER:
        raise CorruptStructureError("head table: wrong magic number")
    font.units_per_em = table.u16(18)
    if font.units_per_em == 0:
        raise CorruptStructureError("head table: unitsPerEm is 0")
    font.llx = float(font.glyph_space(table.i16(36)))
    font.lly = float(font.glyph_space(table.i16(38)))
    font.urx = float(font.glyph_space(table.i16(40)))
    font.ury = float(font.glyph_space(table.i16(42)))


def _parse_os2(table: Table, font: TTFLight) -> None:
    version = table.u16(0)
    font.protected = bool(table.u16(8) & 0x02)
    font.unicode_range = (table.u32(42), table.u32(46), table.u32(50), table.u32(54))
    font.ascent = font.glyph_space(table.i16(68))
    font.descent = font.glyph_space(table.i16(70))
    font.cap_height = font.glyph_space(table.i16(88)) if version >= 2 else 0
    font.bold = bool(table.u16(62) & 0x40)
    font.first_char = table.u16(64)
    font.last_char = table.u16(66)


def _parse_post(table: Table, font: TTFLight) -> None:
    font.italic_angle = table.fixed32(4)
    font.fixed_pitch = table.u32(12) != 0


def _decode_utf16be(data: bytes) -> str:
    if len(data) % 2:
        raise InvalidEncodingError("odd byte count in UTF-16BE font name")
    return data.decode("utf-16-be")


def _parse_name(table: Table, font: TTFLight) -> None:
    count = table.u16(2)
    string_offset = table.u16(4)
    for index in range(count):
        record = 6 + index * 12
        platform, encoding, language, name_id, length, offset = struct.unpack_from(">6H", table.data, record)
        if name_id != 6:
            continue
        start = string_offset + offset
        value = table.data[start : start + length]
        if platform == 3 and encoding == 1 and language == 0x0409:
            font.postscript_name = _decode_utf16be(value)
            return
        if platform == 1 and encoding == 0 and language == 0:
            font.postscript_name = value.decode("ascii")
            return
    raise UnsupportedFontError("unable to identify postscript name")


def _parse_hhea(table: Table, font: TTFLight) -> None:
    if font.ascent == 0:
        font.ascent = font.glyph_space(table.i16(4))
    if font.descent == 0:
        font.descent = font.glyph_space(table.i16(6))
    if font.cap_height == 0:
        font.cap_height = font.glyph_space(table.i16(8))
    font.hor_metrics_count = table.u16(34)


def _parse_maxp(table: Table, font: TTFLight) -> None:
    font.glyph_count = table.u16(4)


def _parse_hmtx(table: Table, font: TTFLight) -> None:
    count = min(font.hor_metrics_count, font.glyph_count)
    widths = [font.glyph_space(table.u16(index * 4)) for index in range(count)]
    if widths:
        widths += [widths[-1]] * (font.glyph_count - count)
    font.glyph_widths = widths


def _parse_cmap_format4(table: Table, font: TTFLight) -> None:
    font.planes.add(0)
    seg_count = table.u16(6) // 2
    end_offset = 14
    start_offset = end_offset + 2 * seg_count + 2
    delta_offset = start_offset + 2 * seg_count
    range_offset = delta_offset + 2 * seg_count
    for segment in range(seg_count):
        start = table.u16(start_offset + segment * 2)
        end = table.u16(end_offset + segment * 2)
        if font.first_char == 0:
            font.first_char = start
        if font.last_char == 0:
            font.last_char = end
        delta = table.u16(delta_offset + segment * 2)
        id_range = table.u16(range_offset + segment * 2)
        for index, code in enumerate(range(start, min(end, 0xFFFE) + 1)):
            if id_range:
                gid = table.u16(range_offset + segment * 2 + id_range + index * 2)
            else:
                gid = (code + delta) & 0xFFFF
            if gid:
                font.chars[code] = gid
                font.to_unicode[gid] = code


def _parse_cmap_format12(table: Table, font: TTFLight) -> None:
    groups = table.u32(12)
    for group in range(groups):
        start, end, start_gid = struct.unpack_from(">III", table.data, 16 + group * 12)
        font.planes.update(range(start >> 16, (end >> 16) + 1))
        for index, code in enumerate(range(start, end + 1)):
            gid = (start_gid + index) & 0xFFFF
            font.chars[code] = gid
            font.to_unicode[gid] = code


def _parse_cmap(table: Table, font: TTFLight) -> None:
    subtables: dict[tuple[int, int, int], Table] = {}
    for index in range(table.u16(2)):
        platform, encoding, offset = struct.unpack_from(">HHI", table.data, 4 + index * 8)
        fmt = table.u16(offset)
        length = table.u32(offset + 4) if fmt >= 8 else table.u16(offset + 2)
        data = table.data[offset : offset + length]
        subtables[(platform, encoding, fmt)] = Table(0, offset, length, length, data)

    for key in CMAP_PREFERENCE:
        subtable = subtables.get(key)
        if subtable is None:
            continue
        LOGGER.debug("using cmap subtable platform=%d encoding=%d format=%d", *key)
        if key[2] == 12:
            _parse_cmap_format12(subtable, font)
        else:
            _parse_cmap_format4(subtable, font)
        return
    raise UnsupportedFontError("unsupported cmap table")


_PARSERS = {
    "head": _parse_head,
    "OS/2": _parse_os2,
    "post": _parse_post,
    "name": _parse_name,
    "hhea": _parse_hhea,
    "maxp": _parse_maxp,
    "hmtx": _parse_hmtx,
    "cmap": _parse_cmap,
}


# -- Entry points ------------------------------------------------------------


def parse_true_type(header: bytes, tables: dict[str, Table]) -> TTFLight:
    """Build a :class:`TTFLight` from a header and its tables."""

    font = TTFLight()
    for tag in PARSED_TABLES:
        table = tables.get(tag)
        if table is None:
            if tag == "OS/2":
                continue
            raise UnsupportedFontError(f"required table {tag!r} is missing")
        _PARSERS[tag](table, font)
    font.font_file = create_ttf(header, tables)
    LOGGER.debug("parsed %s", font)
    return font


def parse_font_file(data: bytes, strict: bool = False) -> list[TTFLight]:
    """Parse a TTF, or every font of a TTC, into :class:`TTFLight` records."""

    offsets = ttc_offsets(data) if data[:4] == TTC_TAG else [0]
    fonts = []
    for offset in offsets:
        header, tables = read_tables(data, offset, strict=strict)
        fonts.append(parse_true_type(header, tables))
    return fonts
