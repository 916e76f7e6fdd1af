"""Page tree traversal helpers shared by the writer, optimizer and context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from .exceptions import CorruptStructureError, ValueRejectedError
from .objects import Dict, IndirectRef

if TYPE_CHECKING:
    from .xref import XRefTable

__all__ = ["INHERITABLE_PAGE_ATTRS", "PageEntry", "iter_pages", "find_page"]

INHERITABLE_PAGE_ATTRS = ("Resources", "MediaBox", "CropBox", "Rotate")


@dataclass(slots=True)
class PageEntry:
    """A leaf of the page tree together with its inherited attributes."""

    number: int
    ref: IndirectRef | None
    page: Dict
    inherited: Dict = field(default_factory=Dict)

    def effective(self, key: str):
        if key in self.page:
            return self.page[key]
        return self.inherited.get(key)


def iter_pages(xref: "XRefTable") -> Iterator[PageEntry]:
    """Yield the pages of ``xref`` in document order (1-based numbering)."""

    root = xref.root_dict()
    pages_ref = root.get("Pages")
    pages = xref.dereference_dict(pages_ref)
    if pages is None:
        return
    seen: set[int] = set()
    if isinstance(pages_ref, IndirectRef):
        seen.add(pages_ref.obj_nr)
    counter = [0]
    yield from _walk(xref, pages, Dict(), seen, counter)


def _walk(xref: "XRefTable", node: Dict, inherited: Dict, seen: set[int], counter: list[int]) -> Iterator[PageEntry]:
    inherited = Dict(inherited)
    for key in INHERITABLE_PAGE_ATTRS:
        if key in node:
            inherited[key] = node[key]
    kids = xref.dereference_array(node.get("Kids")) or []
    for kid in kids:
        if isinstance(kid, IndirectRef):
            if kid.obj_nr in seen:
                raise CorruptStructureError("page tree contains a cycle", obj_nr=kid.obj_nr)
            seen.add(kid.obj_nr)
        child = xref.dereference_dict(kid)
        if child is None:
            continue
        if child.type() == "Pages" or ("Kids" in child and child.type() != "Page"):
            yield from _walk(xref, child, inherited, seen, counter)
            continue
        counter[0] += 1
        yield PageEntry(
            counter[0],
            kid if isinstance(kid, IndirectRef) else None,
            child,
            inherited,
        )


def find_page(xref: "XRefTable", page_nr: int) -> PageEntry:
    for entry in iter_pages(xref):
        if entry.number == page_nr:
            return entry
    raise ValueRejectedError(f"page {page_nr} not found")
