"""pypdf backend: lexer adapter and object writer."""

from __future__ import annotations

import hashlib
import io
import logging
from pathlib import Path
from typing import Any, BinaryIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError as PypdfReadError
from pypdf.generic import IndirectObject

from .. import filters
from ..exceptions import EncryptedDocumentError, PdfReadError
from ..objects import Array, Dict, HexLiteral, IndirectRef, Name, StreamDict
from ..pagetree import INHERITABLE_PAGE_ATTRS, find_page, iter_pages
from ..types import Configuration, Version, parse_version
from ..xref import CompressedEntry, FreeEntry, InUseEntry, XRefTable
from .convert import from_pypdf, to_pypdf

__all__ = ["PypdfLexer", "PypdfWriter", "read_xref_table", "write_xref_table"]

LOGGER = logging.getLogger("pdfcorex.read")
WRITE_LOGGER = logging.getLogger("pdfcorex.write")

# Catalog entries that point into the page tree of the source document.
_PAGE_BOUND_ROOT_ENTRIES = (
    "Outlines",
    "Dests",
    "Names",
    "OpenAction",
    "Threads",
    "StructTreeRoot",
    "PageLabels",
    "AcroForm",
)


# -- Reading -----------------------------------------------------------------


class PypdfLexer:
    """Lexer capability backed by :class:`pypdf.PdfReader`."""

    def __init__(self, source: str | Path | bytes | BinaryIO, config: Configuration | None = None) -> None:
        self.config = config or Configuration()
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_file():
                raise PdfReadError(f"PDF file not found: {source}")
            stream: BinaryIO = io.BytesIO(path.read_bytes())
        elif isinstance(source, (bytes, bytearray)):
            stream = io.BytesIO(bytes(source))
        else:
            stream = source
        try:
            self.reader = PdfReader(stream, strict=self.config.strict)
        except PypdfReadError as exc:
            raise PdfReadError(f"Unable to read PDF: {exc}") from exc
        if self.reader.is_encrypted:
            raise EncryptedDocumentError()

    def _header_version(self) -> Version:
        try:
            return parse_version(self.reader.pdf_header)
        except ValueError:
            LOGGER.warning("unrecognised header %r, assuming 1.7", self.reader.pdf_header)
            return Version.V17

    def read_xref_table(self) -> XRefTable:
        xref = XRefTable(self.config, header_version=self._header_version(), loader=self.read_object_at)
        reader = self.reader
        for generation, entries in reader.xref.items():
            free = reader.xref_free_entry.get(generation, {})
            for obj_nr, offset in entries.items():
                if obj_nr == 0:
                    continue
                if free.get(obj_nr, False):
                    xref.table[obj_nr] = FreeEntry(generation, 0)
                else:
                    xref.table[obj_nr] = InUseEntry(generation, offset=offset, loaded=False)
        for obj_nr, (stream_nr, index) in reader.xref_objStm.items():
            xref.table[obj_nr] = CompressedEntry(stream_nr, index)
        for generation, entries in reader.xref_free_entry.items():
            for obj_nr, is_free in entries.items():
                if is_free and obj_nr not in xref.table:
                    xref.table[obj_nr] = FreeEntry(generation, 0)
        xref.trailer = from_pypdf(reader.trailer)
        LOGGER.debug("read %d xref slots, header %s", len(xref.table), xref.header_version)
        return xref

    def read_object_at(self, obj_nr: int, generation: int) -> Any:
        try:
            value = self.reader.get_object(IndirectObject(obj_nr, generation, self.reader))
        except PypdfReadError as exc:
            raise PdfReadError(f"Unable to read object {obj_nr} {generation}: {exc}", obj_nr=obj_nr) from exc
        return from_pypdf(value)


def read_xref_table(source: str | Path | bytes | BinaryIO, config: Configuration | None = None) -> XRefTable:
    """Read ``source`` into an xref table whose objects load lazily."""

    return PypdfLexer(source, config).read_xref_table()


# -- Writing -----------------------------------------------------------------


class PypdfWriter:
    """Writer capability serializing objects through pypdf generic objects."""

    def write(self, xref: XRefTable, stream: BinaryIO, config: Configuration | None = None) -> int:
        config = config or xref.config
        overrides: dict[int, Any] = {}
        root_ref = xref.trailer.get("Root")
        if not isinstance(root_ref, IndirectRef):
            root_ref = xref.insert_object(xref.trailer.get("Root"))
            xref.trailer["Root"] = root_ref

        if config.extract_page_nr is not None:
            self._extract_page(xref, config.extract_page_nr, root_ref, overrides)
        if config.reduced_feature_set:
            self._drop_annotations(xref, overrides)

        roots = [root_ref]
        info_ref = xref.trailer.get("Info")
        if isinstance(info_ref, IndirectRef) and not xref.is_dangling(info_ref):
            roots.append(info_ref)
        else:
            info_ref = None
        numbers = self._reachable(xref, roots, overrides)

        out = _CountingStream(stream)
        out.write(f"%PDF-{xref.version()}\n".encode("ascii"))
        out.write(b"%\xe2\xe3\xcf\xd3\n")

        offsets: dict[int, tuple[int, int]] = {}
        for obj_nr in numbers:
            value = overrides.get(obj_nr, xref.find_object(obj_nr))
            slot = xref.table.get(obj_nr)
            generation = 0 if slot is None or isinstance(slot, FreeEntry) else slot.generation
            value = self._prepare(xref, value, config)
            offsets[obj_nr] = (out.count, generation)
            out.write(f"{obj_nr} {generation} obj\n".encode("ascii"))
            to_pypdf(value).write_to_stream(out)
            out.write(b"\nendobj\n")

        size = max(offsets, default=0) + 1
        xref_offset = out.count
        out.write(f"xref\n0 {size}\n".encode("ascii"))
        free_numbers = [nr for nr in range(1, size) if nr not in offsets]
        next_free = dict(zip([0, *free_numbers], [*free_numbers, 0]))
        for obj_nr in range(size):
            if obj_nr in offsets:
                offset, generation = offsets[obj_nr]
                out.write(f"{offset:010d} {generation:05d} n\r\n".encode("ascii"))
                continue
            slot = xref.table.get(obj_nr)
            generation = 65535 if obj_nr == 0 else (slot.generation if isinstance(slot, FreeEntry) else 0)
            out.write(f"{next_free[obj_nr]:010d} {generation:05d} f\r\n".encode("ascii"))

        trailer = Dict(Size=size, Root=root_ref)
        if info_ref is not None:
            trailer["Info"] = info_ref
        trailer["ID"] = xref.trailer.get("ID") or self._document_id(xref, size)
        out.write(b"trailer\n")
        to_pypdf(trailer).write_to_stream(out)
        out.write(f"\nstartxref\n{xref_offset}\n%%EOF\n".encode("ascii"))
        WRITE_LOGGER.info("wrote %d objects (%d bytes)", len(offsets), out.count)
        return out.count

    # -- helpers ------------------------------------------------------------

    def _prepare(self, xref: XRefTable, value: Any, config: Configuration) -> Any:
        if not isinstance(value, StreamDict):
            return value
        if value.raw is None:
            value = value.copy()
            filters.encode_stream(value, xref.dereference)
        elif config.compress_streams and "Filter" not in value:
            value = value.copy()
            value["Filter"] = Name("FlateDecode")
            value.content = value.raw
            filters.encode_stream(value, xref.dereference)
        return value

    def _reachable(self, xref: XRefTable, roots: list[IndirectRef], overrides: dict[int, Any]) -> list[int]:
        seen: set[int] = set()
        pending: list[Any] = list(roots)
        while pending:
            item = pending.pop()
            if isinstance(item, IndirectRef):
                if item.obj_nr in seen:
                    continue
                if item.obj_nr in overrides:
                    seen.add(item.obj_nr)
                    pending.append(overrides[item.obj_nr])
                    continue
                if xref.is_dangling(item):
                    continue
                seen.add(item.obj_nr)
                pending.append(xref.find_object(item.obj_nr))
            elif isinstance(item, Dict):
                pending.extend(item.values())
            elif isinstance(item, Array):
                pending.extend(item)
        return sorted(seen)

    def _extract_page(self, xref: XRefTable, page_nr: int, root_ref: IndirectRef, overrides: dict[int, Any]) -> None:
        entry = find_page(xref, page_nr)
        if entry.ref is None:
            page_ref = IndirectRef(xref.size + 1, 0)
        else:
            page_ref = entry.ref
        pages_ref = IndirectRef(max(xref.size, page_ref.obj_nr + 1), 0)

        page = entry.page.copy()
        for key in INHERITABLE_PAGE_ATTRS:
            if key not in page and key in entry.inherited:
                page[key] = entry.inherited[key]
        page["Parent"] = pages_ref
        page.pop("B", None)
        overrides[page_ref.obj_nr] = page
        overrides[pages_ref.obj_nr] = Dict(Type=Name("Pages"), Kids=Array([page_ref]), Count=1)

        root = xref.root_dict().copy()
        for key in _PAGE_BOUND_ROOT_ENTRIES:
            root.pop(key, None)
        root["Pages"] = pages_ref
        overrides[root_ref.obj_nr] = root
        WRITE_LOGGER.debug("extracting page %d as obj#%d", page_nr, page_ref.obj_nr)

    def _drop_annotations(self, xref: XRefTable, overrides: dict[int, Any]) -> None:
        pages: list[tuple[int, Dict]] = []
        for obj_nr, value in overrides.items():
            if isinstance(value, Dict) and value.type() == "Page":
                pages.append((obj_nr, value))
        if not pages:
            pages = [(entry.ref.obj_nr, entry.page.copy()) for entry in iter_pages(xref) if entry.ref is not None]
        for obj_nr, page in pages:
            if "Annots" in page:
                page.pop("Annots")
                overrides[obj_nr] = page

    def _document_id(self, xref: XRefTable, size: int) -> Array:
        digest = hashlib.md5(f"{size}:{xref.version()}:{len(xref.table)}".encode("ascii")).digest()
        return Array([HexLiteral(digest), HexLiteral(digest)])


class _CountingStream:
    """Write-through wrapper that tracks the number of bytes written."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.count = 0

    def write(self, data: bytes) -> int:
        self._stream.write(data)
        self.count += len(data)
        return len(data)


def write_xref_table(xref: XRefTable, target: str | Path | BinaryIO, config: Configuration | None = None) -> int:
    """Write ``xref`` to a path or binary stream and return the byte count."""

    writer = PypdfWriter()
    if isinstance(target, (str, Path)):
        path = Path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            return writer.write(xref, handle, config)
    return writer.write(xref, target, config)
