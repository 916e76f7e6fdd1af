"""Explicit and named destinations.

An explicit destination is an array ``[page /Fit ...]``; a named destination is a
name or string looked up in the ``Dests`` name tree or the catalog ``/Dests``
dict.  :class:`Destination` is the decoded form of an explicit destination array.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..exceptions import MissingRequiredError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, HexLiteral, IndirectRef, Name, StringLiteral, as_string, is_dict, is_number, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import REQUIRED, validate_array_entry, validate_entry

__all__ = [
    "Destination",
    "FIT_TYPES",
    "encode_destination_array",
    "decode_destination_array",
    "validate_destination_array",
    "validate_destination",
    "validate_action_destination_entry",
    "resolve_named_destination",
]

LOGGER = logging.getLogger("pdfcorex.validate")

FIT_TYPES = ("XYZ", "Fit", "FitH", "FitV", "FitR", "FitB", "FitBH", "FitBV")

# Allowed fit names per array length.
_FITS_BY_LENGTH = {
    2: ("Fit", "FitB"),
    3: ("FitH", "FitV", "FitBH", "FitBV"),
    4: ("XYZ",),
    5: ("XYZ",),
    6: ("FitR",),
}


@dataclass
class Destination:
    """Decoded explicit destination.

    ``page`` is an indirect reference to a page dict, or a page number for
    destinations into remote documents.  Unused coordinates stay ``None``.
    """

    page: IndirectRef | int | None
    fit: str = "Fit"
    left: float | None = None
    bottom: float | None = None
    right: float | None = None
    top: float | None = None
    zoom: float | None = None

    def __post_init__(self) -> None:
        if self.fit not in FIT_TYPES:
            raise ValueRejectedError(f"unknown destination type {self.fit}")


def encode_destination_array(dest: Destination) -> Array:
    """Build the destination array for ``dest``."""

    head = [dest.page, Name(dest.fit)]
    if dest.fit in ("Fit", "FitB"):
        return Array(head)
    if dest.fit in ("FitH", "FitBH"):
        return Array([*head, dest.top])
    if dest.fit in ("FitV", "FitBV"):
        return Array([*head, dest.left])
    if dest.fit == "XYZ":
        return Array([*head, dest.left, dest.top, dest.zoom])
    return Array([*head, dest.left, dest.bottom, dest.right, dest.top])


def _operand(value: Any) -> float | None:
    if value is None:
        return None
    if not is_number(value):
        raise TypeMismatchError(f"destination operand must be a number, got {type_name(value)}")
    return value


def decode_destination_array(array: Array) -> Destination:
    """Decode a destination array.

    A four element ``XYZ`` array is read as one without ``zoom``.
    """

    if len(array) not in _FITS_BY_LENGTH:
        raise ValueRejectedError(f"invalid destination array length {len(array)}")
    fit = array[1]
    if not isinstance(fit, Name):
        raise TypeMismatchError(f"destination type must be a name, got {type_name(fit)}")
    if fit not in _FITS_BY_LENGTH[len(array)]:
        raise ValueRejectedError(f"destination type {fit} invalid for array length {len(array)}")
    page = array[0]
    operands = [_operand(value) for value in array[2:]]
    if fit in ("Fit", "FitB"):
        return Destination(page, str(fit))
    if fit in ("FitH", "FitBH"):
        return Destination(page, str(fit), top=operands[0])
    if fit in ("FitV", "FitBV"):
        return Destination(page, str(fit), left=operands[0])
    if fit == "XYZ":
        operands += [None] * (3 - len(operands))
        return Destination(page, "XYZ", left=operands[0], top=operands[1], zoom=operands[2])
    left, bottom, right, top = operands
    return Destination(page, "FitR", left=left, bottom=bottom, right=right, top=top)


# -- Validation --------------------------------------------------------------


def validate_destination_array(xref: XRefTable, array: Array, remote: bool = False) -> Destination | None:
    """Validate an explicit destination.

    Returns ``None`` when the page reference dangles in relaxed mode; the caller
    drops the destination.  A null page is only accepted for a remote go-to.
    """

    if not array:
        raise ValueRejectedError("empty destination array", obj_nr=xref.cur_obj)
    first = xref.dereference(array[0])
    if first is None:
        if isinstance(array[0], IndirectRef):
            LOGGER.debug("dropping destination to missing page %s", array[0])
            return None
        if not remote:
            raise ValueRejectedError("destination must start with a page reference, got null", obj_nr=xref.cur_obj)
    elif is_dict(first):
        if first.type() not in ("Page", "Pages"):
            raise ValueRejectedError(
                "destination must start with a page reference", obj_nr=xref.cur_obj
            )
    elif isinstance(first, bool) or not isinstance(first, int):
        raise ValueRejectedError(
            f"destination must start with a page reference, got {type_name(first)}", obj_nr=xref.cur_obj
        )

    if len(array) == 4 and xref.strict:
        raise ValueRejectedError("destination array of length 4", obj_nr=xref.cur_obj)
    try:
        dest = decode_destination_array(Array([array[0], *(xref.dereference(v) for v in array[1:])]))
    except (TypeMismatchError, ValueRejectedError) as exc:
        raise type(exc)(exc.message, obj_nr=xref.cur_obj) from exc
    if len(array) == 4:
        LOGGER.debug("accepting XYZ destination without zoom (obj#%d)", xref.cur_obj)
    return dest


def _validate_destination_dict(xref: XRefTable, d: Dict) -> Destination | None:
    array = validate_array_entry(xref, d, "destinationDict", "D", REQUIRED, Version.V10)
    return validate_destination_array(xref, array)


def validate_destination(
    xref: XRefTable, obj: Any, for_action: bool = False, remote: bool = False
) -> Destination | str | None:
    """Validate a destination.

    Returns the name of a named destination, the decoded explicit destination, or
    ``None`` when a relaxed walk dropped it.
    """

    value = xref.dereference(obj)
    if value is None:
        return None
    if isinstance(value, Name):
        return str(value)
    if isinstance(value, (StringLiteral, HexLiteral)):
        return as_string(value)
    if is_dict(value) and not for_action:
        return _validate_destination_dict(xref, value)
    if isinstance(value, Array):
        return validate_destination_array(xref, value, remote)
    raise TypeMismatchError(f"invalid destination {type_name(value)}", obj_nr=xref.cur_obj)


def resolve_named_destination(xref: XRefTable, name: str) -> Any:
    """Look up ``name`` in the ``Dests`` name tree and in the catalog ``/Dests``."""

    tree = xref.names.get("Dests")
    if tree is not None and name in tree:
        return tree[name]
    root = xref.root_dict()
    dests = xref.dereference_dict(root.get("Dests"))
    if dests is not None and name in dests:
        return dests[name]
    return None


def validate_action_destination_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version, remote: bool = False
) -> None:
    """Validate the destination of a go-to action.

    Unresolvable destinations are rejected in strict mode; in relaxed mode the
    entry is removed from the action.
    """

    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is None:
        if entry_name in d and xref.relaxed:
            del d[entry_name]
            xref.repaired(f"{dict_name} {entry_name}")
        return
    result = validate_destination(xref, value, for_action=True, remote=remote)
    if isinstance(result, str):
        if not result:
            raise MissingRequiredError("empty destination name", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=entry_name)
        if remote:
            return
        if resolve_named_destination(xref, result) is not None:
            return
        message = f"unknown named destination {result!r}"
        if xref.strict:
            raise ValueRejectedError(message, obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=entry_name)
        xref.warn(message)
        result = None
    if result is None and xref.relaxed:
        del d[entry_name]
        xref.repaired(f"{dict_name} {entry_name}")
