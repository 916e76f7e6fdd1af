"""Interactive forms (``/AcroForm``).

Fields are walked recursively.  A non-terminal field carries ``/Kids`` and
passes its field type down to its descendants; a terminal field is also a
Widget annotation.  Pages are validated before the form, so a terminal widget
that no page lists in ``/Annots`` can be reported.
"""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import CorruptStructureError, MissingRequiredError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, IndirectRef, StreamDict, is_string, type_name
from ..types import Version
from ..xref import XRefTable
from .actions import validate_additional_actions
from .annotations import page_annotation_objects, validate_annotation_dict
from .entries import (
    OPTIONAL,
    REQUIRED,
    in_range,
    one_of,
    validate_array_entry,
    validate_boolean_entry,
    validate_dict_entry,
    validate_entry,
    validate_indref_entry,
    validate_integer_entry,
    validate_name_entry,
    validate_string_entry,
    validate_string_or_stream_entry,
)
from .resources import validate_resource_dict

__all__ = ["FIELD_TYPES", "SIG_FLAG_SIGNATURES_EXIST", "SIG_FLAG_APPEND_ONLY", "validate_acro_form"]

LOGGER = logging.getLogger("pdfcorex.validate")

FIELD_TYPES = ("Btn", "Tx", "Ch", "Sig")

SIG_FLAG_SIGNATURES_EXIST = 1
SIG_FLAG_APPEND_ONLY = 2


def _validate_signature_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "signatureDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("Sig", "DocTimeStamp"))
    validate_name_entry(xref, d, dict_name, "Filter", REQUIRED if xref.strict else OPTIONAL, Version.V13)
    validate_name_entry(xref, d, dict_name, "SubFilter", OPTIONAL, Version.V13)
    validate_entry(xref, d, dict_name, "Contents", REQUIRED if xref.strict else OPTIONAL, Version.V13)
    validate_array_entry(xref, d, dict_name, "ByteRange", OPTIONAL, Version.V13, lambda a: len(a) % 2 == 0)
    validate_array_entry(xref, d, dict_name, "Reference", OPTIONAL, Version.V15)
    validate_string_entry(xref, d, dict_name, "Name", OPTIONAL, Version.V13)
    validate_entry(xref, d, dict_name, "M", OPTIONAL, Version.V13)
    validate_string_entry(xref, d, dict_name, "Location", OPTIONAL, Version.V13)
    validate_string_entry(xref, d, dict_name, "Reason", OPTIONAL, Version.V13)
    validate_string_entry(xref, d, dict_name, "ContactInfo", OPTIONAL, Version.V13)


def _validate_field_type_entries(xref: XRefTable, d: Dict, field_type: str | None) -> None:
    dict_name = "acroFieldDict"
    if field_type in ("Tx", "Ch"):
        validate_string_entry(xref, d, dict_name, "DA", OPTIONAL, Version.V10)
        validate_integer_entry(xref, d, dict_name, "Q", OPTIONAL, Version.V10, in_range(0, 2))
        validate_string_entry(xref, d, dict_name, "DS", OPTIONAL, Version.V15)
        validate_string_or_stream_entry(xref, d, dict_name, "RV", OPTIONAL, Version.V15)
    if field_type == "Tx":
        validate_integer_entry(xref, d, dict_name, "MaxLen", OPTIONAL, Version.V10, lambda n: n >= 0)
    elif field_type == "Btn":
        validate_array_entry(xref, d, dict_name, "Opt", OPTIONAL, Version.V14)
    elif field_type == "Ch":
        validate_array_entry(xref, d, dict_name, "Opt", OPTIONAL, Version.V10)
        validate_integer_entry(xref, d, dict_name, "TI", OPTIONAL, Version.V10)
        validate_array_entry(xref, d, dict_name, "I", OPTIONAL, Version.V14)
    elif field_type == "Sig":
        validate_dict_entry(xref, d, dict_name, "Lock", OPTIONAL, Version.V15)
        validate_dict_entry(xref, d, dict_name, "SV", OPTIONAL, Version.V15)
        value = d.get("V")
        if value is not None:
            signature = xref.dereference_dict(value)
            if signature is not None:
                _validate_signature_dict(xref, signature)


def _validate_field_entries(xref: XRefTable, d: Dict, terminal: bool, inherited_type: str | None) -> str | None:
    """Validate the entries common to all fields and return the effective field type."""

    dict_name = "acroFieldDict"
    field_type = validate_name_entry(
        xref, d, dict_name, "FT", terminal and inherited_type is None and xref.strict, Version.V10, one_of(*FIELD_TYPES)
    )
    field_type = field_type or inherited_type
    validate_indref_entry(xref, d, dict_name, "Parent", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "T", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "TU", OPTIONAL, Version.V13)
    validate_string_entry(xref, d, dict_name, "TM", OPTIONAL, Version.V13)
    validate_integer_entry(xref, d, dict_name, "Ff", OPTIONAL, Version.V10)
    validate_entry(xref, d, dict_name, "V", OPTIONAL, Version.V10)
    validate_entry(xref, d, dict_name, "DV", OPTIONAL, Version.V10)
    validate_additional_actions(xref, d, dict_name, "AA", OPTIONAL, Version.V14, "fieldOrAnnot")
    _validate_field_type_entries(xref, d, field_type)
    return field_type


def _validate_field(xref: XRefTable, ref: Any, inherited_type: str | None, seen: set[int], widgets: list[int]) -> None:
    if not isinstance(ref, IndirectRef):
        raise TypeMismatchError(
            f"form field must be an indirect reference, got {type_name(ref)}", obj_nr=xref.cur_obj, dict_name="acroFieldDict"
        )
    if ref.obj_nr in seen:
        return
    seen.add(ref.obj_nr)
    d = xref.dereference_dict(ref)
    if d is None:
        return

    kids = d.get("Kids")
    if kids is not None:
        if d.subtype() == "Widget":
            raise CorruptStructureError(
                "non terminal field can not be a widget annotation", obj_nr=ref.obj_nr, dict_name="acroFieldDict"
            )
        field_type = _validate_field_entries(xref, d, False, inherited_type)
        for kid in xref.dereference_array(kids) or ():
            _validate_field(xref, kid, field_type, seen, widgets)
        return

    subtype = validate_name_entry(
        xref, d, "acroFieldDict", "Subtype", REQUIRED if xref.strict else OPTIONAL, Version.V10, one_of("Widget")
    )
    _validate_field_entries(xref, d, True, inherited_type)
    if subtype is None:
        return
    if not xref.is_valid(ref):
        validate_annotation_dict(xref, d)
        xref.set_valid(ref)
    widgets.append(ref.obj_nr)


def _validate_xfa(xref: XRefTable, d: Dict, since: Version) -> None:
    value = validate_entry(xref, d, "acroFormDict", "XFA", OPTIONAL, since)
    if value is None or isinstance(value, StreamDict):
        return
    if not isinstance(value, Array):
        raise TypeMismatchError(
            f"expected stream or array, got {type_name(value)}", obj_nr=xref.cur_obj, dict_name="acroFormDict", entry_name="XFA"
        )
    if len(value) % 2:
        raise ValueRejectedError("XFA array length must be even", obj_nr=xref.cur_obj, dict_name="acroFormDict", entry_name="XFA")
    for index, item in enumerate(value):
        item = xref.dereference(item)
        ok = is_string(item) if index % 2 == 0 else isinstance(item, StreamDict)
        if not ok:
            raise TypeMismatchError(
                f"invalid XFA packet element {type_name(item)}", obj_nr=xref.cur_obj, dict_name="acroFormDict", entry_name="XFA"
            )


def _validate_calculation_order(xref: XRefTable, d: Dict) -> None:
    order = validate_array_entry(xref, d, "acroFormDict", "CO", OPTIONAL, Version.V13)
    for item in order or ():
        field = xref.dereference_dict(item)
        if field is not None and field.subtype() == "Widget" and not xref.is_valid(item):
            validate_annotation_dict(xref, field)


def validate_acro_form(xref: XRefTable, root: Dict, required: bool, since: Version) -> Dict | None:
    d = validate_dict_entry(xref, root, "rootDict", "AcroForm", required, since)
    if d is None:
        return None
    xref.form = d
    dict_name = "acroFormDict"

    fields = d.get("Fields")
    if fields is None:
        if xref.strict:
            raise MissingRequiredError("required entry missing", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Fields")
        xref.warn("AcroForm without Fields")
        fields = Array()
    widgets: list[int] = []
    seen: set[int] = set()
    for ref in xref.dereference_array(fields) or ():
        _validate_field(xref, ref, None, seen, widgets)

    validate_boolean_entry(xref, d, dict_name, "NeedAppearances", OPTIONAL, Version.V10)
    flags = validate_integer_entry(xref, d, dict_name, "SigFlags", OPTIONAL, Version.V13)
    if flags is not None:
        xref.signature_exist = bool(flags & SIG_FLAG_SIGNATURES_EXIST)
        xref.append_only = bool(flags & SIG_FLAG_APPEND_ONLY)
    _validate_calculation_order(xref, d)
    resources = d.get("DR")
    if resources is not None:
        validate_resource_dict(xref, resources)
    validate_string_entry(xref, d, dict_name, "DA", OPTIONAL, Version.V10)
    validate_integer_entry(xref, d, dict_name, "Q", OPTIONAL, Version.V10, in_range(0, 2))
    _validate_xfa(xref, d, Version.V15)

    on_pages = page_annotation_objects(xref)
    for obj_nr in widgets:
        if obj_nr not in on_pages:
            xref.warn(f"form field obj#{obj_nr}: widget is not referenced by any page")
    LOGGER.debug("form: %d fields, %d widgets", len(seen), len(widgets))
    return d
