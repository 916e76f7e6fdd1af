"""File specifications, embedded file streams and URL specifications."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from ..exceptions import CorruptStructureError, MissingRequiredError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, HexLiteral, StreamDict, StringLiteral, as_string, is_dict, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_boolean_entry,
    validate_date_entry,
    validate_dict_entry,
    validate_entry,
    validate_integer_entry,
    validate_name_entry,
    validate_stream_dict,
    validate_stream_dict_entry,
    validate_string_array_entry,
    validate_string_entry,
)

__all__ = [
    "is_url",
    "validate_embedded_file_stream_dict",
    "validate_file_spec_dict",
    "validate_file_specification",
    "validate_file_spec_entry",
    "validate_url_specification",
    "validate_url_spec_entry",
]

_EF_KEYS = frozenset({"F", "UF", "DOS", "Mac", "Unix", "Subtype"})

_AF_RELATIONSHIPS = (
    "Source",
    "Data",
    "Alternative",
    "Supplement",
    "EncryptedPayload",
    "FormData",
    "Schema",
    "Unspecified",
)


def is_url(value: str) -> bool:
    """Accept absolute URIs and absolute paths."""

    if not value or any(ch.isspace() for ch in value.strip()):
        return False
    parsed = urlparse(value)
    if parsed.scheme:
        return bool(parsed.netloc or parsed.path)
    return value.startswith("/")


# -- Embedded files ----------------------------------------------------------


def _validate_mac_parameters(xref: XRefTable, d: Dict) -> None:
    dict_name = "embeddedFileStreamMacParameterDict"
    validate_integer_entry(xref, d, dict_name, "Subtype", OPTIONAL, Version.V10)
    validate_integer_entry(xref, d, dict_name, "Creator", OPTIONAL, Version.V10)
    validate_stream_dict_entry(xref, d, dict_name, "ResFork", OPTIONAL, Version.V10)


def _validate_parameters(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is None:
        return
    dict_name = "embeddedFileStreamParmDict"
    validate_integer_entry(xref, d, dict_name, "Size", OPTIONAL, Version.V10)
    validate_date_entry(xref, d, dict_name, "CreationDate", OPTIONAL, Version.V10)
    validate_date_entry(xref, d, dict_name, "ModDate", OPTIONAL, Version.V10)
    mac = validate_dict_entry(xref, d, dict_name, "Mac", OPTIONAL, Version.V10)
    if mac is not None:
        _validate_mac_parameters(xref, mac)
    validate_string_entry(xref, d, dict_name, "CheckSum", OPTIONAL, Version.V10)


def validate_embedded_file_stream_dict(xref: XRefTable, sd: StreamDict) -> None:
    dict_name = "embeddedFileStreamDict"
    validate_name_entry(xref, sd, dict_name, "Type", OPTIONAL, Version.V10, one_of("EmbeddedFile"))
    validate_name_entry(xref, sd, dict_name, "Subtype", OPTIONAL, Version.V10)
    params = sd.get("Params")
    if params is not None:
        _validate_parameters(xref, params)


def _validate_ef_dict(xref: XRefTable, ef: Dict) -> None:
    for key, value in ef.items():
        if key not in _EF_KEYS:
            raise ValueRejectedError(f"invalid embedded file key {key}", obj_nr=xref.cur_obj, dict_name="efDict")
        if key in ("F", "UF"):
            sd = xref.dereference(value)
            if sd is None:
                continue
            validate_embedded_file_stream_dict(xref, validate_stream_dict(xref, sd))


def _validate_related_files(xref: XRefTable, files: Array) -> None:
    if len(files) % 2:
        raise CorruptStructureError("related files array has odd length", obj_nr=xref.cur_obj, dict_name="rfDict")
    for index, item in enumerate(files):
        value = xref.dereference(item)
        if value is None:
            raise MissingRequiredError("related files array entry is null", obj_nr=xref.cur_obj, dict_name="rfDict")
        if index % 2 == 0:
            if not isinstance(value, (StringLiteral, HexLiteral)):
                raise TypeMismatchError(
                    f"expected file name, got {type_name(value)}", obj_nr=xref.cur_obj, dict_name="rfDict"
                )
        else:
            validate_embedded_file_stream_dict(xref, validate_stream_dict(xref, value))


def _validate_ef_and_rf(xref: XRefTable, d: Dict, dict_name: str, has_ep: bool) -> None:
    rf = validate_dict_entry(xref, d, dict_name, "RF", OPTIONAL, Version.V13)
    ef = validate_dict_entry(xref, d, dict_name, "EF", rf is not None, Version.V13)

    allowed = ("Filespec", "F") if xref.relaxed else ("Filespec",)
    required = rf is not None or ef is not None or has_ep
    validate_name_entry(xref, d, dict_name, "Type", required, Version.V10, one_of(*allowed))

    if ef is None:
        return
    _validate_ef_dict(xref, ef)
    for key, value in (rf or {}).items():
        if key not in ef:
            raise ValueRejectedError(
                f"related files entry {key} has no embedded file",
                obj_nr=xref.cur_obj,
                dict_name="rfDict",
                entry_name=key,
            )
        files = xref.dereference_array(value)
        if files is not None:
            _validate_related_files(xref, files)


# -- File specifications -----------------------------------------------------


def validate_file_spec_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "fileSpecDict"
    fs = validate_name_entry(xref, d, dict_name, "FS", OPTIONAL, Version.V10)
    uf_since = Version.V13 if xref.relaxed else Version.V17
    uf = validate_string_entry(xref, d, dict_name, "UF", OPTIONAL, uf_since)

    required = uf is None and not any(key in d for key in ("DOS", "Mac", "Unix"))
    predicate = is_url if fs == "URL" else None
    validate_string_entry(xref, d, dict_name, "F", required, Version.V10, predicate)

    validate_string_array_entry(xref, d, dict_name, "ID", OPTIONAL, Version.V11, lambda a: len(a) == 2)
    validate_boolean_entry(xref, d, dict_name, "V", OPTIONAL, Version.V12)
    ep = validate_dict_entry(xref, d, dict_name, "EP", OPTIONAL, Version.V20)
    _validate_ef_and_rf(xref, d, dict_name, bool(ep))

    validate_string_entry(xref, d, dict_name, "Desc", OPTIONAL, Version.V10 if xref.relaxed else Version.V16)
    validate_dict_entry(xref, d, dict_name, "CI", OPTIONAL, Version.V17)
    validate_stream_dict_entry(xref, d, dict_name, "Thumb", OPTIONAL, Version.V17 if xref.relaxed else Version.V20)
    validate_name_entry(
        xref,
        d,
        dict_name,
        "AFRelationship",
        OPTIONAL,
        Version.V14 if xref.relaxed else Version.V20,
        one_of(*_AF_RELATIONSHIPS),
    )


def validate_file_specification(xref: XRefTable, obj: Any) -> Any:
    """Validate a file specification string or dict and return it dereferenced."""

    value = xref.dereference(obj)
    if isinstance(value, (StringLiteral, HexLiteral)):
        as_string(value)
        return value
    if is_dict(value):
        validate_file_spec_dict(xref, value)
        return value
    raise TypeMismatchError(f"expected file specification, got {type_name(value)}", obj_nr=xref.cur_obj)


def validate_url_specification(xref: XRefTable, obj: Any) -> Dict:
    d = xref.dereference_dict(obj)
    if d is None:
        raise MissingRequiredError("missing URL specification", obj_nr=xref.cur_obj)
    dict_name = "urlSpec"
    validate_name_entry(xref, d, dict_name, "FS", REQUIRED, Version.V10, one_of("URL"))
    validate_string_entry(xref, d, dict_name, "F", REQUIRED, Version.V10, is_url)
    return d


def validate_file_spec_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> Any:
    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is None:
        return None
    return validate_file_specification(xref, value)


def validate_url_spec_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> Dict | None:
    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is None:
        return None
    return validate_url_specification(xref, value)
