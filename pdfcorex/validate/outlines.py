"""Document outline (bookmarks).

The outline is checked and repaired in a single pass over the sibling lists,
visiting items in ``/Next`` order from ``/First`` and recursing into the
``/First`` of every item.  Broken links are fatal in strict mode; a relaxed
walk cuts or relinks them and reports one ``bookmarks`` repair.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import CorruptStructureError, TypeMismatchError, ValueRejectedError
from ..objects import Dict, IndirectRef, type_name
from ..types import Version
from ..xref import XRefTable
from .actions import validate_action_entry
from .destinations import validate_action_destination_entry
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_indref_entry,
    validate_integer_entry,
    validate_name_entry,
    validate_number_array_entry,
    validate_string_entry,
)

__all__ = ["validate_outlines", "validate_outline_item_dict"]

LOGGER = logging.getLogger("pdfcorex.validate")


@dataclass(slots=True)
class _Walk:
    seen: set[int] = field(default_factory=set)
    repaired: bool = False
    items: int = 0


def _corrupt(xref: XRefTable, walk: _Walk, message: str, obj_nr: int) -> None:
    """Raise in strict mode; otherwise remember that the outline was repaired."""

    if xref.strict:
        raise CorruptStructureError(f"corrupt outline: {message}", obj_nr=obj_nr, dict_name="outlineItemDict")
    LOGGER.debug("outline obj#%d: %s", obj_nr, message)
    walk.repaired = True


def validate_outline_item_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "outlineItemDict"
    validate_string_entry(xref, d, dict_name, "Title", REQUIRED, Version.V10)
    validate_indref_entry(xref, d, dict_name, "Parent", REQUIRED if xref.strict else OPTIONAL, Version.V10)
    se = validate_indref_entry(xref, d, dict_name, "SE", OPTIONAL, Version.V13)
    if se is not None:
        xref.dereference_dict(se)
    validate_number_array_entry(xref, d, dict_name, "C", OPTIONAL, Version.V14, lambda a: len(a) == 3)
    validate_integer_entry(xref, d, dict_name, "F", OPTIONAL, Version.V14)
    if "A" in d and "Dest" in d:
        message = "outline item must not have both A and Dest"
        if xref.strict:
            raise ValueRejectedError(message, obj_nr=xref.cur_obj, dict_name=dict_name)
        xref.warn(message)
    validate_action_destination_entry(xref, d, dict_name, "Dest", OPTIONAL, Version.V10)
    validate_action_entry(xref, d, dict_name, "A", OPTIONAL, Version.V11)


def _check_count(xref: XRefTable, walk: _Walk, d: Dict, obj_nr: int, expected: int) -> None:
    count = d.get("Count")
    if count is not None and (isinstance(count, bool) or not isinstance(count, int)):
        raise TypeMismatchError(f"expected integer, got {type_name(count)}", obj_nr=obj_nr, dict_name="outlineItemDict", entry_name="Count")
    if expected == 0:
        if count:
            _corrupt(xref, walk, f"leaf item with Count {count}", obj_nr)
            del d["Count"]
        return
    if count is not None and abs(count) == expected:
        return
    _corrupt(xref, walk, f"Count {count}, expected {expected}", obj_nr)
    d["Count"] = -expected if count is None or count < 0 else expected


def _walk_children(xref: XRefTable, walk: _Walk, parent_ref: Any, parent: Dict) -> int:
    """Validate the children of ``parent`` and return its visible descendant count."""

    parent_nr = parent_ref.obj_nr if isinstance(parent_ref, IndirectRef) else 0
    first = parent.get("First")
    last = parent.get("Last")
    if first is None and last is None:
        return 0
    if first is None or last is None:
        _corrupt(xref, walk, "First and Last must both be present", parent_nr)
        if first is None:
            del parent["Last"]
            return 0

    children = 0
    visible = 0
    prev_ref: IndirectRef | None = None
    prev: Dict | None = None
    ref = first
    while ref is not None:
        if not isinstance(ref, IndirectRef):
            raise TypeMismatchError(
                f"outline link must be an indirect reference, got {type_name(ref)}", obj_nr=parent_nr, dict_name="outlineItemDict"
            )
        item = xref.dereference_dict(ref) if ref.obj_nr not in walk.seen else None
        if item is None:
            reason = "circular outline items" if ref.obj_nr in walk.seen else f"missing outline item {ref}"
            _corrupt(xref, walk, reason, prev_ref.obj_nr if prev_ref else parent_nr)
            if prev is None:
                del parent["First"]
            else:
                del prev["Next"]
            break
        walk.seen.add(ref.obj_nr)
        xref.set_valid(ref)
        walk.items += 1

        if prev_ref is None and "Prev" in item:
            _corrupt(xref, walk, "first item has a Prev link", ref.obj_nr)
            del item["Prev"]
        elif prev_ref is not None and item.get("Prev") != prev_ref:
            _corrupt(xref, walk, f"Prev does not point to {prev_ref}", ref.obj_nr)
            item["Prev"] = prev_ref

        validate_outline_item_dict(xref, item)
        expected = _walk_children(xref, walk, ref, item)
        _check_count(xref, walk, item, ref.obj_nr, expected)

        children += 1
        count = item.get("Count")
        if isinstance(count, int) and count > 0:
            visible += count
        prev_ref, prev = ref, item
        ref = item.get("Next")

    if prev_ref is None:
        parent.pop("Last", None)
        return 0
    if parent.get("Last") != prev_ref:
        _corrupt(xref, walk, f"Last does not point to {prev_ref}", parent_nr)
        parent["Last"] = prev_ref
    return children + visible


def validate_outlines(xref: XRefTable, root: Dict, required: bool, since: Version) -> Dict | None:
    ref = validate_indref_entry(xref, root, "rootDict", "Outlines", required, since)
    if ref is None:
        return None
    d = xref.dereference_dict(ref)
    if d is None:
        return None
    xref.set_valid(ref)
    xref.outlines = d
    validate_name_entry(xref, d, "outlineDict", "Type", OPTIONAL, Version.V10, one_of("Outlines", "Outline"))

    walk = _Walk()
    expected = _walk_children(xref, walk, ref, d)
    count = d.get("Count")
    if count is not None and (isinstance(count, bool) or not isinstance(count, int)):
        raise TypeMismatchError(f"expected integer, got {type_name(count)}", obj_nr=ref.obj_nr, dict_name="outlineDict", entry_name="Count")
    if count is not None and abs(count) != expected:
        _corrupt(xref, walk, f"root Count {count}, expected {expected}", ref.obj_nr)
        d["Count"] = -expected if count < 0 else expected
    elif count is None and walk.repaired and expected:
        d["Count"] = expected
    if walk.repaired:
        xref.repaired("bookmarks")
    LOGGER.debug("outline: %d items, %d visible", walk.items, expected)
    return d
