from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Mapping
import struct
import sys

import pytest
from pypdf import PdfWriter
from pypdf.generic import ArrayObject, DictionaryObject, FloatObject, NameObject, TextStringObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfcorex.objects import Array, Dict, IndirectRef, Name  # noqa: E402
from pdfcorex.types import Configuration  # noqa: E402
from pdfcorex.xref import XRefTable  # noqa: E402

CATALOG = 1
PAGES = 2
FIRST_PAGE = 3


# -- In-memory documents -----------------------------------------------------


def make_document(mode: str = "relaxed", pages: int = 1, **config: object) -> XRefTable:
    """Catalog at obj 1, page tree root at obj 2 and ``pages`` pages from obj 3 on."""

    xref = XRefTable(Configuration(validation_mode=mode, **config))
    xref.set_object(CATALOG, Dict(Type=Name("Catalog"), Pages=IndirectRef(PAGES)))
    kids = Array()
    for index in range(pages):
        kids.append(
            xref.set_object(
                FIRST_PAGE + index,
                Dict(
                    Type=Name("Page"),
                    Parent=IndirectRef(PAGES),
                    Resources=Dict(),
                    MediaBox=Array([0, 0, 612, 792]),
                ),
            )
        )
    xref.set_object(PAGES, Dict(Type=Name("Pages"), Kids=kids, Count=pages))
    xref.trailer = Dict(Size=xref.size, Root=IndirectRef(CATALOG))
    return xref


@pytest.fixture()
def document_factory() -> Callable[..., XRefTable]:
    return make_document


# -- PDF files ---------------------------------------------------------------


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    writer = PdfWriter()
    for _ in range(3):
        writer.add_blank_page(width=200, height=200)
    writer.add_metadata({"/Producer": "pdfcorex-tests", "/Title": "Sample"})
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path


@pytest.fixture()
def linked_pdf(tmp_path: Path) -> Path:
    """Two pages; the first carries a link annotation with a URI action."""

    pdf_path = tmp_path / "linked.pdf"
    writer = PdfWriter()
    page = writer.add_blank_page(width=200, height=200)
    writer.add_blank_page(width=200, height=200)
    action = DictionaryObject(
        {
            NameObject("/S"): NameObject("/URI"),
            NameObject("/URI"): TextStringObject("https://example.com/docs"),
        }
    )
    link = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Link"),
            NameObject("/Rect"): ArrayObject([FloatObject(10), FloatObject(10), FloatObject(90), FloatObject(30)]),
            NameObject("/A"): action,
        }
    )
    page[NameObject("/Annots")] = ArrayObject([writer._add_object(link)])
    with pdf_path.open("wb") as stream:
        writer.write(stream)
    return pdf_path


# -- TrueType fonts ----------------------------------------------------------


def _pad(data: bytes) -> bytes:
    return data + b"\x00" * (-len(data) % 4)


def _checksum(data: bytes) -> int:
    return sum(word for (word,) in struct.iter_unpack(">I", _pad(data))) & 0xFFFFFFFF


def _simple_glyph(gid: int) -> bytes:
    # One contour with one on-curve point; xMax carries the glyph id.
    outline = struct.pack(">hhhhh", 1, 0, 0, gid, 700) + struct.pack(">HHB", 0, 0, 1) + struct.pack(">hh", 0, 0)
    return _pad(outline)


def _composite_glyph(components: Iterable[int]) -> bytes:
    components = list(components)
    outline = struct.pack(">hhhhh", -1, 0, 0, 500, 700)
    for index, gid in enumerate(components):
        flags = 0x0001 | (0x0020 if index < len(components) - 1 else 0)
        outline += struct.pack(">HHhh", flags, gid, 0, 0)
    return _pad(outline)


def _cmap_format4(segments: list[tuple[int, int, int, list[int] | None]]) -> bytes:
    """``segments`` are ``(start, end, delta, glyph_ids)`` sorted by end code."""

    segments = segments + [(0xFFFF, 0xFFFF, 1, None)]
    seg_count = len(segments)
    ends = b"".join(struct.pack(">H", seg[1]) for seg in segments)
    starts = b"".join(struct.pack(">H", seg[0]) for seg in segments)
    deltas = b"".join(struct.pack(">H", seg[2] & 0xFFFF) for seg in segments)
    range_offsets = b""
    glyph_array = b""
    for index, (_, _, _, gids) in enumerate(segments):
        if gids is None:
            range_offsets += struct.pack(">H", 0)
            continue
        range_offsets += struct.pack(">H", 2 * (seg_count - index) + len(glyph_array))
        glyph_array += b"".join(struct.pack(">H", gid) for gid in gids)
    body = struct.pack(">HHHH", seg_count * 2, 0, 0, 0) + ends + b"\x00\x00" + starts + deltas + range_offsets + glyph_array
    return struct.pack(">HHH", 4, 6 + len(body), 0) + body


def _cmap_format12(groups: list[tuple[int, int, int]]) -> bytes:
    body = b"".join(struct.pack(">III", *group) for group in groups)
    return struct.pack(">HHIII", 12, 0, 16 + len(body), 0, len(groups)) + body


def _name_table(postscript_name: str) -> bytes:
    value = postscript_name.encode("utf-16-be")
    record = struct.pack(">6H", 3, 1, 0x0409, 6, len(value), 0)
    return struct.pack(">HHH", 0, 1, 6 + len(record)) + record + value


def build_ttf(
    num_glyphs: int = 300,
    index_to_loc_format: int = 1,
    composites: Mapping[int, Iterable[int]] | None = None,
    empty: Iterable[int] = (),
    cmap4: list[tuple[int, int, int, list[int] | None]] | None = None,
    cmap12: list[tuple[int, int, int]] | None = None,
    postscript_name: str = "PdfcorexTest-Regular",
    hor_metrics: int | None = None,
    units_per_em: int = 2048,
    fixed_pitch: bool = False,
) -> bytes:
    """Assemble a small but well-formed TrueType font byte by byte."""

    composites = dict(composites or {})
    empty = set(empty)
    glyf = b""
    offsets = []
    for gid in range(num_glyphs):
        offsets.append(len(glyf))
        if gid in empty:
            continue
        glyf += _composite_glyph(composites[gid]) if gid in composites else _simple_glyph(gid)
    offsets.append(len(glyf))
    if index_to_loc_format == 0:
        loca = b"".join(struct.pack(">H", offset // 2) for offset in offsets)
    else:
        loca = b"".join(struct.pack(">I", offset) for offset in offsets)

    head = struct.pack(
        ">IIIIHHqqhhhhHHhhh",
        0x00010000, 0x00010000, 0, 0x5F0F3CF5, 0, units_per_em, 0, 0,
        -100, -200, 1000, 900, 0, 8, 2, index_to_loc_format, 0,
    )
    hor_metrics = num_glyphs if hor_metrics is None else hor_metrics
    hhea = struct.pack(">Ihhh", 0x00010000, 1800, -400, 100) + b"\x00" * 22 + struct.pack(">hH", 0, hor_metrics)
    maxp = struct.pack(">IH", 0x00005000, num_glyphs)
    hmtx = b"".join(struct.pack(">Hh", 1024 + gid, 0) for gid in range(hor_metrics))
    post = struct.pack(">IIhhIIIII", 0x00030000, 0, -100, 50, int(fixed_pitch), 0, 0, 0, 0)

    if cmap4 is None and cmap12 is None:
        cmap4 = [(0x41, 0x5A, 0, None)]
    subtables = []
    if cmap12 is not None:
        subtables.append((3, 10, _cmap_format12(cmap12)))
    if cmap4 is not None:
        subtables.append((3, 1, _cmap_format4(cmap4)))
    cmap_header = struct.pack(">HH", 0, len(subtables))
    offset = 4 + 8 * len(subtables)
    bodies = b""
    for platform, encoding, body in subtables:
        cmap_header += struct.pack(">HHI", platform, encoding, offset + len(bodies))
        bodies += body
    cmap = cmap_header + bodies

    tables = {
        "cmap": cmap,
        "glyf": glyf,
        "head": head,
        "hhea": hhea,
        "hmtx": hmtx,
        "loca": loca,
        "maxp": maxp,
        "name": _name_table(postscript_name),
        "post": post,
    }
    tags = sorted(tables)
    font = struct.pack(">IHHHH", 0x00010000, len(tags), 0, 0, 0)
    offset = 12 + 16 * len(tags)
    directory = b""
    body = b""
    for tag in tags:
        data = tables[tag]
        directory += struct.pack(">4sIII", tag.encode("latin-1"), _checksum(data), offset + len(body), len(data))
        body += _pad(data)
    return font + directory + body


def build_ttc(fonts: list[bytes]) -> bytes:
    """Wrap standalone fonts into a TrueType collection."""

    header_size = 12 + 4 * len(fonts)
    data = b""
    offsets = []
    for font in fonts:
        offsets.append(header_size + len(data))
        count = struct.unpack_from(">H", font, 4)[0]
        shift = offsets[-1]
        directory = b""
        for index in range(count):
            tag, checksum, offset, size = struct.unpack_from(">4sIII", font, 12 + 16 * index)
            directory += struct.pack(">4sIII", tag, checksum, offset + shift, size)
        data += font[:12] + directory + font[12 + 16 * count :]
    return b"ttcf" + struct.pack(">HHI", 1, 0, len(fonts)) + b"".join(struct.pack(">I", o) for o in offsets) + data


@pytest.fixture()
def ttf_factory() -> Callable[..., bytes]:
    return build_ttf


@pytest.fixture()
def ttf_file(tmp_path: Path) -> Path:
    path = tmp_path / "PdfcorexTest-Regular.ttf"
    path.write_bytes(build_ttf())
    return path
