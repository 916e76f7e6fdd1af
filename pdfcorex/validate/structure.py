"""Logical structure: ``/StructTreeRoot`` and the structure element tree."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import MissingRequiredError, TypeMismatchError
from ..objects import Array, Dict, IndirectRef, is_dict, type_name
from ..types import Version
from ..xref import XRefTable, is_page_dict
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_dict_entry,
    validate_entry,
    validate_integer_entry,
    validate_name_entry,
    validate_string_entry,
)
from .trees import validate_name_tree, validate_number_tree

__all__ = ["validate_struct_tree", "validate_struct_element_dict"]

LOGGER = logging.getLogger("pdfcorex.validate")


def _validate_page_ref(xref: XRefTable, d: Dict, dict_name: str) -> None:
    ref = d.get("Pg")
    if ref is None:
        return
    if not isinstance(ref, IndirectRef):
        raise TypeMismatchError(f"Pg must be an indirect reference, got {type_name(ref)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Pg")
    page = xref.dereference(ref)
    if page is not None and not is_page_dict(page):
        raise TypeMismatchError(f"Pg must point to a page, got {type_name(page)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Pg")


def _validate_marked_content_reference(xref: XRefTable, d: Dict) -> None:
    _validate_page_ref(xref, d, "mcrDict")
    for key in ("Stm", "StmOwn"):
        ref = d.get(key)
        if ref is not None:
            xref.dereference(ref)
    validate_integer_entry(xref, d, "mcrDict", "MCID", REQUIRED, Version.V13)


def _validate_object_reference(xref: XRefTable, d: Dict) -> None:
    _validate_page_ref(xref, d, "objrDict")
    ref = d.get("Obj")
    if not isinstance(ref, IndirectRef):
        raise MissingRequiredError("object reference without Obj", obj_nr=xref.cur_obj, dict_name="objrDict", entry_name="Obj")
    xref.dereference(ref)


def _validate_kid(xref: XRefTable, obj: Any) -> None:
    if isinstance(obj, IndirectRef):
        if xref.is_valid(obj):
            return
        xref.set_valid(obj)
    value = xref.dereference(obj)
    if value is None:
        return
    if isinstance(value, int) and not isinstance(value, bool):
        return
    if not is_dict(value):
        raise TypeMismatchError(f"invalid structure element kid {type_name(value)}", obj_nr=xref.cur_obj, dict_name="structElementDict", entry_name="K")
    kind = value.type()
    if kind == "MCR":
        _validate_marked_content_reference(xref, value)
    elif kind == "OBJR":
        _validate_object_reference(xref, value)
    else:
        validate_struct_element_dict(xref, value)


def _validate_kids(xref: XRefTable, obj: Any) -> None:
    value = xref.dereference(obj)
    if isinstance(value, Array):
        for item in value:
            _validate_kid(xref, item)
        return
    _validate_kid(xref, obj)


def _validate_attributes(xref: XRefTable, d: Dict, dict_name: str) -> None:
    value = validate_entry(xref, d, dict_name, "A", OPTIONAL, Version.V13)
    if value is None:
        return
    items = value if isinstance(value, Array) else [value]
    for item in items:
        item = xref.dereference(item)
        if item is None or isinstance(item, int):
            continue
        if not is_dict(item):
            raise TypeMismatchError(f"invalid attribute object {type_name(item)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="A")
        validate_name_entry(xref, item, "attributeDict", "O", REQUIRED if xref.strict else OPTIONAL, Version.V13)


def _validate_classes(xref: XRefTable, d: Dict, dict_name: str) -> None:
    value = validate_entry(xref, d, dict_name, "C", OPTIONAL, Version.V13)
    if value is None:
        return
    items = value if isinstance(value, Array) else [value]
    for item in items:
        item = xref.dereference(item)
        if item is not None and not isinstance(item, (str, int)):
            raise TypeMismatchError(f"invalid class entry {type_name(item)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="C")


def validate_struct_element_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "structElementDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V13, one_of("StructElem"))
    validate_name_entry(xref, d, dict_name, "S", REQUIRED if xref.strict else OPTIONAL, Version.V13)
    if xref.strict and not isinstance(d.get("P"), IndirectRef):
        raise MissingRequiredError("required entry missing", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="P")
    validate_string_entry(xref, d, dict_name, "ID", OPTIONAL, Version.V13)
    _validate_page_ref(xref, d, dict_name)
    _validate_attributes(xref, d, dict_name)
    _validate_classes(xref, d, dict_name)
    validate_integer_entry(xref, d, dict_name, "R", OPTIONAL, Version.V13, lambda n: n >= 0)
    validate_string_entry(xref, d, dict_name, "T", OPTIONAL, Version.V13)
    validate_string_entry(xref, d, dict_name, "Lang", OPTIONAL, Version.V14 if xref.strict else Version.V13)
    validate_string_entry(xref, d, dict_name, "Alt", OPTIONAL, Version.V13)
    validate_string_entry(xref, d, dict_name, "E", OPTIONAL, Version.V15)
    validate_string_entry(xref, d, dict_name, "ActualText", OPTIONAL, Version.V14)
    kids = d.get("K")
    if kids is not None:
        _validate_kids(xref, kids)


def _id_tree_value(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is None:
        return
    if d.type() not in (None, "StructElem"):
        raise TypeMismatchError(f"ID tree value must be a structure element, got {d.type()}", obj_nr=xref.cur_obj)
    _validate_kid(xref, obj)


def _parent_tree_value(xref: XRefTable, obj: Any) -> None:
    value = xref.dereference(obj)
    if value is None:
        return
    items = value if isinstance(value, Array) else [obj]
    for item in items:
        if item is not None:
            _validate_kid(xref, item)


def validate_struct_tree(xref: XRefTable, root: Dict, required: bool, since: Version) -> Dict | None:
    d = validate_dict_entry(xref, root, "rootDict", "StructTreeRoot", required, since)
    if d is None:
        return None
    dict_name = "structTreeRootDict"
    validate_name_entry(xref, d, dict_name, "Type", REQUIRED, Version.V13, one_of("StructTreeRoot"))
    kids = d.get("K")
    if kids is not None:
        _validate_kids(xref, kids)

    id_tree = validate_dict_entry(xref, d, dict_name, "IDTree", OPTIONAL, Version.V13)
    if id_tree is not None:
        validate_name_tree(xref, "IDTree", id_tree, validate_value=_id_tree_value)
    parent_tree = validate_dict_entry(xref, d, dict_name, "ParentTree", OPTIONAL, Version.V13)
    if parent_tree is not None:
        validate_number_tree(xref, "StructTree", parent_tree, _parent_tree_value)
    validate_integer_entry(xref, d, dict_name, "ParentTreeNextKey", OPTIONAL, Version.V13)
    validate_dict_entry(xref, d, dict_name, "RoleMap", OPTIONAL, Version.V13)
    class_map = validate_dict_entry(xref, d, dict_name, "ClassMap", OPTIONAL, Version.V13)
    for value in (class_map or {}).values():
        value = xref.dereference(value)
        if value is not None and not isinstance(value, (Dict, Array)):
            raise TypeMismatchError(f"invalid class map entry {type_name(value)}", obj_nr=xref.cur_obj, dict_name="classMapDict")
    return d
