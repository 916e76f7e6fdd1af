"""
TrueType subsetting.

A subset keeps every table of the font but rewrites ``glyf`` and ``loca`` so
that only the requested glyphs, glyph 0 and the components of any composite
glyph among them keep their outlines.  Every other glyph becomes a zero-length
record, so glyph indices stay valid.
"""

from __future__ import annotations

import logging
import struct
from typing import Iterable

from ..exceptions import CorruptGlyfError, UnsupportedFontError
from ..utils import round_up_to_4
from .truetype import Table, create_ttf, read_tables

__all__ = ["GlyfLocation", "resolve_compound_glyphs", "glyf_and_loca", "subset", "subset_tables"]

LOGGER = logging.getLogger("pdfcorex.font")

# Composite glyph flags.
ARG_1_AND_2_ARE_WORDS = 0x0001
WE_HAVE_A_SCALE = 0x0008
MORE_COMPONENTS = 0x0020
WE_HAVE_AN_X_AND_Y_SCALE = 0x0040
WE_HAVE_A_TWO_BY_TWO = 0x0080


class GlyfLocation:
    """Byte ranges of glyph outlines inside the original ``glyf`` table."""

    def __init__(self, loca: Table, glyf: Table, num_glyphs: int, index_to_loc_format: int) -> None:
        self.loca = loca
        self.glyf = glyf
        self.num_glyphs = num_glyphs
        self.index_to_loc_format = index_to_loc_format

    def offset(self, gid: int) -> int:
        if self.index_to_loc_format == 0:
            return 2 * self.loca.u16(2 * gid)
        return self.loca.u32(4 * gid)

    def range(self, gid: int) -> tuple[int, int]:
        """Return ``(start, end)`` of the outline of ``gid``."""

        if not 0 <= gid < self.num_glyphs:
            raise CorruptGlyfError(f"glyph {gid} out of range (numGlyphs={self.num_glyphs})")
        start = self.offset(gid)
        end = self.offset(gid + 1)
        if end < start:
            raise CorruptGlyfError(f"illegal glyf offsets for glyph {gid}: {start} > {end}")
        return start, end

    def outline(self, gid: int) -> bytes:
        start, end = self.range(gid)
        return self.glyf.data[start:end]


def _is_composite(outline: bytes) -> bool:
    return bool(outline) and struct.unpack_from(">h", outline, 0)[0] < 0


def _components(outline: bytes) -> Iterable[int]:
    """Yield the component glyph ids of a composite glyph."""

    offset = 10
    while True:
        flags, gid = struct.unpack_from(">HH", outline, offset)
        yield gid
        offset += 8 if flags & ARG_1_AND_2_ARE_WORDS else 6
        if flags & WE_HAVE_A_SCALE:
            offset += 2
        elif flags & WE_HAVE_AN_X_AND_Y_SCALE:
            offset += 4
        elif flags & WE_HAVE_A_TWO_BY_TWO:
            offset += 8
        if not flags & MORE_COMPONENTS:
            return


def resolve_compound_glyphs(location: GlyfLocation, gids: Iterable[int]) -> set[int]:
    """Close ``gids`` under composite glyph references.

    A component already in the set is not walked again, which also stops
    reference cycles.
    """

    used = set(gids)
    pending = sorted(used)
    while pending:
        gid = pending.pop()
        outline = location.outline(gid)
        if not _is_composite(outline):
            continue
        for component in _components(outline):
            if component in used:
                continue
            used.add(component)
            start, end = location.range(component)
            if start == end:
                LOGGER.debug("component glyph %d of glyph %d has no outline", component, gid)
                continue
            pending.append(component)
    return used


def _pad(data: bytes) -> bytes:
    return data + b"\x00" * (round_up_to_4(len(data)) - len(data))


def glyf_and_loca(tables: dict[str, Table], gids: Iterable[int]) -> set[int]:
    """Rewrite ``glyf`` and ``loca`` in ``tables`` for the closure of ``gids``.

    Returns the closed, sorted set of glyph ids that was kept.
    """

    for tag in ("head", "maxp", "glyf", "loca"):
        if tag not in tables:
            raise UnsupportedFontError(f'missing "{tag}" table')
    index_to_loc_format = tables["head"].u16(50)
    num_glyphs = tables["maxp"].u16(4)
    location = GlyfLocation(tables["loca"], tables["glyf"], num_glyphs, index_to_loc_format)

    used = resolve_compound_glyphs(location, {0, *gids})
    fmt = ">H" if index_to_loc_format == 0 else ">I"
    scale = 2 if index_to_loc_format == 0 else 1

    glyf = bytearray()
    loca = bytearray()
    for gid in range(num_glyphs):
        loca += struct.pack(fmt, len(glyf) // scale)
        if gid in used:
            glyf += location.outline(gid)
    loca += struct.pack(fmt, len(glyf) // scale)

    tables["loca"] = Table(0, 0, len(loca), round_up_to_4(len(loca)), _pad(bytes(loca)))
    tables["glyf"] = Table(0, 0, len(glyf), round_up_to_4(len(glyf)), _pad(bytes(glyf)))
    return used


def subset_tables(header: bytes, tables: dict[str, Table], gids: Iterable[int]) -> bytes:
    kept = glyf_and_loca(tables, gids)
    LOGGER.debug("subset keeps %d glyphs", len(kept))
    return create_ttf(header, tables)


def subset(font_bytes: bytes, gids: Iterable[int], strict: bool = False) -> bytes:
    """Return a standalone TTF holding only ``gids``, glyph 0 and their components."""

    header, tables = read_tables(font_bytes, 0, strict=strict)
    return subset_tables(header, tables, gids)
