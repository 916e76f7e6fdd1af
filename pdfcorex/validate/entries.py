"""Leaf validators for dictionary entries.

Every ``validate_*_entry`` helper follows the same sequence: find the entry,
dereference it, treat null like absent, gate on the PDF version, check the object
type and finally apply the optional predicate.  Failures raise the matching
:mod:`pdfcorex.exceptions` error attributed to the current object, dict and entry.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from ..exceptions import (
    MissingRequiredError,
    TypeMismatchError,
    ValueRejectedError,
)
from ..objects import (
    Array,
    Dict,
    HexLiteral,
    IndirectRef,
    Name,
    StreamDict,
    StringLiteral,
    as_string,
    is_dict,
    is_number,
    type_name,
)
from ..types import Version
from ..xref import XRefTable
from .dates import parse_date

Predicate = Callable[[Any], bool]

__all__ = [
    "REQUIRED",
    "OPTIONAL",
    "one_of",
    "in_range",
    "validate_entry",
    "validate_array_entry",
    "validate_array_array_entry",
    "validate_boolean_entry",
    "validate_boolean_array_entry",
    "validate_date",
    "validate_date_entry",
    "validate_dict_entry",
    "validate_function",
    "validate_function_entry",
    "validate_function_or_array_of_functions_entry",
    "validate_indref_entry",
    "validate_indref_array_entry",
    "validate_integer",
    "validate_integer_entry",
    "validate_integer_array_entry",
    "validate_metadata",
    "validate_name",
    "validate_name_entry",
    "validate_name_array",
    "validate_name_array_entry",
    "validate_number",
    "validate_number_entry",
    "validate_number_array",
    "validate_number_array_entry",
    "validate_rectangle_entry",
    "validate_stream_dict",
    "validate_stream_dict_entry",
    "validate_string",
    "validate_string_entry",
    "validate_string_array_entry",
    "validate_string_or_stream_entry",
    "validate_name_or_string_entry",
    "validate_int_or_string_entry",
    "validate_int_or_dict_entry",
    "validate_boolean_or_stream_entry",
    "validate_stream_dict_or_dict_entry",
    "validate_integer_or_array_of_integer_entry",
    "validate_name_or_array_of_name_entry",
    "validate_boolean_or_array_of_boolean_entry",
]

LOGGER = logging.getLogger("pdfcorex.validate")

REQUIRED = True
OPTIONAL = False


# -- Predicates --------------------------------------------------------------


def one_of(*values: Any) -> Callable[[Any], bool]:
    allowed = frozenset(values)
    return lambda value: value in allowed


def in_range(low: float, high: float) -> Callable[[float], bool]:
    return lambda value: low <= value <= high


# -- Errors ------------------------------------------------------------------


def _missing(xref: XRefTable, dict_name: str, entry_name: str) -> MissingRequiredError:
    return MissingRequiredError(
        "required entry missing",
        obj_nr=xref.cur_obj,
        dict_name=dict_name,
        entry_name=entry_name,
    )


def _mismatch(xref: XRefTable, dict_name: str, entry_name: str, expected: str, value: Any) -> TypeMismatchError:
    return TypeMismatchError(
        f"expected {expected}, got {type_name(value)}",
        obj_nr=xref.cur_obj,
        dict_name=dict_name,
        entry_name=entry_name,
    )


def _rejected(xref: XRefTable, dict_name: str, entry_name: str, value: Any) -> ValueRejectedError:
    return ValueRejectedError(
        f"invalid value {value!r}",
        obj_nr=xref.cur_obj,
        dict_name=dict_name,
        entry_name=entry_name,
    )


# -- Generic entry -----------------------------------------------------------


def validate_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
) -> Any:
    """Return the dereferenced value of ``entry_name`` or ``None`` when absent."""

    value, found = d.find(entry_name)
    if found and value is not None:
        value = xref.dereference(value)
    if value is None:
        if required:
            raise _missing(xref, dict_name, entry_name)
        return None
    xref.validate_version(f"dict={dict_name} entry={entry_name}", since)
    return value


def _typed_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    check: Callable[[Any], bool],
    expected: str,
) -> Any:
    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is None:
        return None
    if not check(value):
        raise _mismatch(xref, dict_name, entry_name, expected, value)
    return value


def _check(xref: XRefTable, dict_name: str, entry_name: str, value: Any, predicate: Callable[[Any], bool] | None) -> Any:
    if predicate is not None and not predicate(value):
        raise _rejected(xref, dict_name, entry_name, value)
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_string(value: Any) -> bool:
    return isinstance(value, (StringLiteral, HexLiteral))


# -- Scalars -----------------------------------------------------------------


def validate_boolean_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> bool | None:
    value = _typed_entry(xref, d, dict_name, entry_name, required, since, lambda v: isinstance(v, bool), "boolean")
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_integer(xref: XRefTable, obj: Any, predicate: Callable[[int], bool] | None = None) -> int:
    value = xref.dereference(obj)
    if value is None:
        raise MissingRequiredError("missing integer", obj_nr=xref.cur_obj)
    if not _is_int(value):
        raise TypeMismatchError(f"expected integer, got {type_name(value)}", obj_nr=xref.cur_obj)
    if predicate is not None and not predicate(value):
        raise ValueRejectedError(f"invalid integer {value}", obj_nr=xref.cur_obj)
    return value


def validate_integer_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> int | None:
    value = _typed_entry(xref, d, dict_name, entry_name, required, since, _is_int, "integer")
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_number(xref: XRefTable, obj: Any, predicate: Callable[[float], bool] | None = None) -> float:
    value = xref.dereference(obj)
    if value is None:
        raise MissingRequiredError("missing number", obj_nr=xref.cur_obj)
    if not is_number(value):
        raise TypeMismatchError(f"expected number, got {type_name(value)}", obj_nr=xref.cur_obj)
    if predicate is not None and not predicate(value):
        raise ValueRejectedError(f"invalid number {value}", obj_nr=xref.cur_obj)
    return value


def validate_number_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> float | None:
    value = _typed_entry(xref, d, dict_name, entry_name, required, since, is_number, "number")
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_name(xref: XRefTable, obj: Any, predicate: Callable[[str], bool] | None = None) -> Name:
    value = xref.dereference(obj)
    if value is None:
        raise MissingRequiredError("missing name", obj_nr=xref.cur_obj)
    if not isinstance(value, Name):
        raise TypeMismatchError(f"expected name, got {type_name(value)}", obj_nr=xref.cur_obj)
    if predicate is not None and not predicate(str(value)):
        raise ValueRejectedError(f"invalid name {value!r}", obj_nr=xref.cur_obj)
    return value


def validate_name_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> Name | None:
    value = _typed_entry(xref, d, dict_name, entry_name, required, since, lambda v: isinstance(v, Name), "name")
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_string(xref: XRefTable, obj: Any, predicate: Callable[[str], bool] | None = None) -> str:
    value = xref.dereference(obj)
    if value is None:
        raise MissingRequiredError("missing string", obj_nr=xref.cur_obj)
    if not _is_string(value):
        raise TypeMismatchError(f"expected string, got {type_name(value)}", obj_nr=xref.cur_obj)
    text = as_string(value)
    if predicate is not None and not predicate(text):
        raise ValueRejectedError(f"invalid string {text!r}", obj_nr=xref.cur_obj)
    return text


def validate_string_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> str | None:
    """Validate a text string entry.

    The predicate is skipped for an empty optional string.
    """

    value = _typed_entry(xref, d, dict_name, entry_name, required, since, _is_string, "string")
    if value is None:
        return None
    text = as_string(value)
    if predicate is not None and (required or text) and not predicate(text):
        raise _rejected(xref, dict_name, entry_name, text)
    return text


def validate_date(xref: XRefTable, obj: Any, since: Version = Version.V10) -> datetime | None:
    text = xref.dereference_string_or_hex(obj, since)
    if not text:
        return None
    value = parse_date(text, xref.relaxed)
    if value is None:
        raise ValueRejectedError(f"invalid date {text!r}", obj_nr=xref.cur_obj)
    return value


def validate_date_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> datetime | None:
    text = validate_string_entry(xref, d, dict_name, entry_name, required, since)
    if not text:
        if required:
            raise _missing(xref, dict_name, entry_name)
        return None
    value = parse_date(text, xref.relaxed)
    if value is None:
        raise _rejected(xref, dict_name, entry_name, text)
    return value


def validate_indref_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> IndirectRef | None:
    """Validate an entry that must be an indirect reference; it is not followed."""

    value, found = d.find(entry_name)
    if not found or value is None:
        if required:
            raise _missing(xref, dict_name, entry_name)
        return None
    if not isinstance(value, IndirectRef):
        raise _mismatch(xref, dict_name, entry_name, "indirect reference", value)
    xref.validate_version(f"dict={dict_name} entry={entry_name}", since)
    return value


# -- Containers --------------------------------------------------------------


def validate_array_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> Array | None:
    value = _typed_entry(xref, d, dict_name, entry_name, required, since, lambda v: isinstance(v, Array), "array")
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_dict_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> Dict | None:
    value = _typed_entry(xref, d, dict_name, entry_name, required, since, is_dict, "dict")
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_stream_dict(xref: XRefTable, obj: Any) -> StreamDict:
    value = xref.dereference(obj)
    if value is None:
        raise MissingRequiredError("missing stream", obj_nr=xref.cur_obj)
    if not isinstance(value, StreamDict):
        raise TypeMismatchError(f"expected stream, got {type_name(value)}", obj_nr=xref.cur_obj)
    return value


def validate_stream_dict_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> StreamDict | None:
    value = _typed_entry(
        xref, d, dict_name, entry_name, required, since, lambda v: isinstance(v, StreamDict), "stream"
    )
    if value is None:
        return None
    return _check(xref, dict_name, entry_name, value, predicate)


def validate_rectangle_entry(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    predicate: Predicate | None = None,
) -> Array | None:
    array = validate_number_array_entry(xref, d, dict_name, entry_name, required, since, lambda a: len(a) == 4)
    if array is None:
        return None
    return _check(xref, dict_name, entry_name, array, predicate)


def _typed_array(xref: XRefTable, obj: Any, check: Callable[[Any], bool], expected: str, resolve: bool = True) -> Array | None:
    array = xref.dereference_array(obj)
    if array is None:
        return None
    for item in array:
        value = xref.dereference(item) if resolve else item
        if value is None:
            continue
        if not check(value):
            raise TypeMismatchError(f"expected array of {expected}, got {type_name(value)}", obj_nr=xref.cur_obj)
    return array


def validate_number_array(xref: XRefTable, obj: Any) -> Array | None:
    return _typed_array(xref, obj, is_number, "numbers")


def validate_name_array(xref: XRefTable, obj: Any) -> Array | None:
    return _typed_array(xref, obj, lambda v: isinstance(v, Name), "names")


def _array_entry_of(check: Predicate, expected: str, resolve: bool = True) -> Callable[..., Array | None]:
    def validate(
        xref: XRefTable,
        d: Dict,
        dict_name: str,
        entry_name: str,
        required: bool,
        since: Version,
        predicate: Predicate | None = None,
    ) -> Array | None:
        array = validate_array_entry(xref, d, dict_name, entry_name, required, since)
        if array is None:
            return None
        for item in array:
            value = xref.dereference(item) if resolve else item
            if value is None:
                continue
            if not check(value):
                raise _mismatch(xref, dict_name, entry_name, f"array of {expected}", value)
        return _check(xref, dict_name, entry_name, array, predicate)

    validate.__name__ = f"validate_{expected.replace(' ', '_')}_array_entry"
    validate.__doc__ = f"Validate an array entry whose elements are {expected}."
    return validate


validate_number_array_entry = _array_entry_of(is_number, "numbers")
validate_integer_array_entry = _array_entry_of(_is_int, "integers")
validate_name_array_entry = _array_entry_of(lambda v: isinstance(v, Name), "names")
validate_boolean_array_entry = _array_entry_of(lambda v: isinstance(v, bool), "booleans")
validate_string_array_entry = _array_entry_of(_is_string, "strings")
validate_array_array_entry = _array_entry_of(lambda v: isinstance(v, Array), "arrays")
validate_indref_array_entry = _array_entry_of(lambda v: isinstance(v, IndirectRef), "indirect references", resolve=False)


# -- Functions ---------------------------------------------------------------


def validate_function(xref: XRefTable, obj: Any) -> None:
    """Validate a function dict or stream (types 0, 2, 3 and 4)."""

    value = xref.dereference(obj)
    if value is None:
        raise MissingRequiredError("missing function", obj_nr=xref.cur_obj)
    if not isinstance(value, Dict):
        raise TypeMismatchError(f"expected function, got {type_name(value)}", obj_nr=xref.cur_obj)
    dict_name = "functionDict"
    function_type = validate_integer_entry(xref, value, dict_name, "FunctionType", REQUIRED, Version.V12, one_of(0, 2, 3, 4))
    validate_number_array_entry(xref, value, dict_name, "Domain", REQUIRED, Version.V12, lambda a: len(a) % 2 == 0)
    needs_range = function_type in (0, 4)
    validate_number_array_entry(xref, value, dict_name, "Range", needs_range, Version.V12, lambda a: len(a) % 2 == 0)
    if function_type in (0, 4) and not isinstance(value, StreamDict):
        raise TypeMismatchError(f"function type {function_type} must be a stream", obj_nr=xref.cur_obj)
    if function_type == 0:
        validate_integer_array_entry(xref, value, dict_name, "Size", REQUIRED, Version.V12)
        validate_integer_entry(xref, value, dict_name, "BitsPerSample", REQUIRED, Version.V12, one_of(1, 2, 4, 8, 12, 16, 24, 32))
        validate_integer_entry(xref, value, dict_name, "Order", OPTIONAL, Version.V12, one_of(1, 3))
        validate_number_array_entry(xref, value, dict_name, "Encode", OPTIONAL, Version.V12)
        validate_number_array_entry(xref, value, dict_name, "Decode", OPTIONAL, Version.V12)
    elif function_type == 2:
        validate_number_array_entry(xref, value, dict_name, "C0", OPTIONAL, Version.V13)
        validate_number_array_entry(xref, value, dict_name, "C1", OPTIONAL, Version.V13)
        validate_number_entry(xref, value, dict_name, "N", REQUIRED, Version.V13)
    elif function_type == 3:
        functions = validate_array_entry(xref, value, dict_name, "Functions", REQUIRED, Version.V13)
        for item in functions:
            validate_function(xref, item)
        validate_number_array_entry(xref, value, dict_name, "Bounds", REQUIRED, Version.V13)
        validate_number_array_entry(xref, value, dict_name, "Encode", REQUIRED, Version.V13)


def validate_function_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> None:
    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is not None:
        validate_function(xref, value)


def validate_function_or_array_of_functions_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> None:
    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is None:
        return
    if isinstance(value, Array):
        for item in value:
            validate_function(xref, item)
        return
    validate_function(xref, value)


# -- Unions ------------------------------------------------------------------


def _union_entry(*checks: tuple[Predicate, str]) -> Callable[..., Any]:
    expected = " or ".join(label for _, label in checks)

    def validate(
        xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
    ) -> Any:
        value = validate_entry(xref, d, dict_name, entry_name, required, since)
        if value is None:
            return None
        if not any(check(value) for check, _ in checks):
            raise _mismatch(xref, dict_name, entry_name, expected, value)
        return value

    validate.__doc__ = f"Validate an entry that is a {expected}."
    return validate


_NAME = (lambda v: isinstance(v, Name), "name")
_STRING = (_is_string, "string")
_INT = (_is_int, "integer")
_DICT = (is_dict, "dict")
_STREAM = (lambda v: isinstance(v, StreamDict), "stream")
_BOOL = (lambda v: isinstance(v, bool), "boolean")

validate_string_or_stream_entry = _union_entry(_STRING, _STREAM)
validate_name_or_string_entry = _union_entry(_NAME, _STRING)
validate_int_or_string_entry = _union_entry(_INT, _STRING)
validate_int_or_dict_entry = _union_entry(_INT, _DICT)
validate_boolean_or_stream_entry = _union_entry(_BOOL, _STREAM)
validate_stream_dict_or_dict_entry = _union_entry(_STREAM, _DICT)


def _scalar_or_array_entry(check: Predicate, expected: str) -> Callable[..., Any]:
    def validate(
        xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
    ) -> Any:
        value = validate_entry(xref, d, dict_name, entry_name, required, since)
        if value is None:
            return None
        if check(value):
            return value
        if not isinstance(value, Array):
            raise _mismatch(xref, dict_name, entry_name, f"{expected} or array of {expected}", value)
        for item in value:
            item = xref.dereference(item)
            if item is not None and not check(item):
                raise _mismatch(xref, dict_name, entry_name, f"array of {expected}", item)
        return value

    return validate


validate_integer_or_array_of_integer_entry = _scalar_or_array_entry(_is_int, "integer")
validate_name_or_array_of_name_entry = _scalar_or_array_entry(lambda v: isinstance(v, Name), "name")
validate_boolean_or_array_of_boolean_entry = _scalar_or_array_entry(lambda v: isinstance(v, bool), "boolean")


# -- Metadata ----------------------------------------------------------------


def validate_metadata(xref: XRefTable, d: Dict, required: bool, since: Version) -> StreamDict | None:
    """Validate a ``/Metadata`` XMP stream."""

    if xref.relaxed:
        since = Version.V13
    sd = validate_stream_dict_entry(xref, d, "dict", "Metadata", required, since)
    if sd is None:
        return None
    dict_name = "metaDataDict"
    validate_name_entry(xref, sd, dict_name, "Type", OPTIONAL, Version.V10, one_of("Metadata"))
    validate_name_entry(xref, sd, dict_name, "Subtype", OPTIONAL, Version.V10, one_of("XML"))
    return sd
