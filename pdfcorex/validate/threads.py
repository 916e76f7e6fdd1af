"""Article threads and their bead rings."""

from __future__ import annotations

import logging

from ..exceptions import CorruptStructureError, MissingRequiredError, TypeMismatchError
from ..objects import Dict, IndirectRef, type_name
from ..types import Version
from ..xref import XRefTable, is_page_dict
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_indref_entry,
    validate_name_entry,
    validate_rectangle_entry,
)
from .info import validate_document_info_dict

__all__ = ["validate_threads", "validate_thread_dict"]

LOGGER = logging.getLogger("pdfcorex.validate")


def _validate_bead(xref: XRefTable, ref: IndirectRef, thread: IndirectRef, first: bool) -> tuple[IndirectRef, IndirectRef]:
    """Validate one bead and return its ``(V, N)`` links."""

    dict_name = "firstBeadDict" if first else "beadDict"
    bead = xref.dereference_dict(ref)
    if bead is None:
        raise MissingRequiredError(f"missing bead {ref}", obj_nr=ref.obj_nr, dict_name=dict_name)
    validate_name_entry(xref, bead, dict_name, "Type", OPTIONAL, Version.V10, one_of("Bead"))
    back = validate_indref_entry(xref, bead, dict_name, "T", REQUIRED if first else OPTIONAL, Version.V10)
    if back is not None and back != thread:
        raise CorruptStructureError("bead T does not point to its thread", obj_nr=ref.obj_nr, dict_name=dict_name, entry_name="T")
    validate_rectangle_entry(xref, bead, dict_name, "R", REQUIRED, Version.V10)
    page_ref = validate_indref_entry(xref, bead, dict_name, "P", REQUIRED, Version.V10)
    page = xref.dereference(page_ref)
    if page is not None and not is_page_dict(page):
        raise TypeMismatchError(f"bead P must be a page, got {type_name(page)}", obj_nr=ref.obj_nr, dict_name=dict_name, entry_name="P")
    prev = validate_indref_entry(xref, bead, dict_name, "V", REQUIRED, Version.V10)
    nxt = validate_indref_entry(xref, bead, dict_name, "N", REQUIRED, Version.V10)
    return prev, nxt


def _validate_bead_ring(xref: XRefTable, first: IndirectRef, thread: IndirectRef) -> int:
    prev, nxt = _validate_bead(xref, first, thread, True)
    if prev == first and nxt == first:
        return 1
    if prev == first or nxt == first:
        raise CorruptStructureError("corrupt chain of beads", obj_nr=first.obj_nr, dict_name="firstBeadDict")

    seen = {first.obj_nr}
    beads = 1
    current, expected_prev = nxt, first
    while current != first:
        if current.obj_nr in seen:
            raise CorruptStructureError("bead chain does not return to the first bead", obj_nr=current.obj_nr, dict_name="beadDict")
        seen.add(current.obj_nr)
        back, following = _validate_bead(xref, current, thread, False)
        if back != expected_prev:
            raise CorruptStructureError(
                "invalid entry V, corrupt previous bead reference", obj_nr=current.obj_nr, dict_name="beadDict", entry_name="V"
            )
        beads += 1
        expected_prev, current = current, following
    if prev != expected_prev:
        raise CorruptStructureError("first bead V does not point to the last bead", obj_nr=first.obj_nr, dict_name="firstBeadDict")
    return beads


def validate_thread_dict(xref: XRefTable, ref: object) -> int:
    if not isinstance(ref, IndirectRef):
        raise TypeMismatchError(f"thread must be an indirect reference, got {type_name(ref)}", obj_nr=xref.cur_obj)
    d = xref.dereference_dict(ref)
    if d is None:
        return 0
    dict_name = "threadDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("Thread"))
    info = d.get("I")
    if info is not None:
        validate_document_info_dict(xref, info)
    first = d.indirect_ref_entry("F")
    if first is None:
        raise MissingRequiredError('required indirect entry "F" missing', obj_nr=ref.obj_nr, dict_name=dict_name, entry_name="F")
    return _validate_bead_ring(xref, first, ref)


def validate_threads(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    ref = validate_indref_entry(xref, root, "rootDict", "Threads", required, since)
    if ref is None:
        return
    threads = xref.dereference_array(ref)
    if threads is None:
        return
    for item in threads:
        if item is None:
            continue
        beads = validate_thread_dict(xref, item)
        LOGGER.debug("thread %s: %d beads", item, beads)
