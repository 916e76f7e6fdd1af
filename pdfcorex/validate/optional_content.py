"""Optional content: groups, membership dicts and the catalog ``/OCProperties``."""

from __future__ import annotations

from ..exceptions import TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, Name, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_array_entry,
    validate_dict_entry,
    validate_entry,
    validate_indref_array_entry,
    validate_name_array_entry,
    validate_name_entry,
    validate_string_entry,
)

__all__ = [
    "validate_optional_content_group_dict",
    "validate_optional_content_membership_dict",
    "validate_optional_content_entry",
    "validate_oc_properties",
]

_INTENTS = ("View", "Design", "All")
_USAGE_KEYS = ("CreatorInfo", "Language", "Export", "Zoom", "Print", "View", "User", "PageElement")


def _validate_intent(xref: XRefTable, d: Dict, dict_name: str, since: Version) -> None:
    value = validate_entry(xref, d, dict_name, "Intent", OPTIONAL, since)
    if value is None:
        return
    names = value if isinstance(value, Array) else [value]
    for name in names:
        name = xref.dereference(name)
        if name is None:
            continue
        if not isinstance(name, Name):
            raise TypeMismatchError(
                f"invalid intent {type_name(name)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Intent"
            )
        if name not in _INTENTS:
            raise ValueRejectedError(
                f"invalid intent {name}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Intent"
            )


def validate_optional_content_group_dict(xref: XRefTable, d: Dict, since: Version = Version.V15) -> None:
    dict_name = "optionalContentGroupDict"
    validate_name_entry(xref, d, dict_name, "Type", REQUIRED, since, one_of("OCG"))
    validate_string_entry(xref, d, dict_name, "Name", REQUIRED, since)
    _validate_intent(xref, d, dict_name, since)
    usage = validate_dict_entry(xref, d, dict_name, "Usage", OPTIONAL, since)
    for key in _USAGE_KEYS if usage is not None else ():
        validate_dict_entry(xref, usage, "OCUsageDict", key, OPTIONAL, since)


def _validate_group_array(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, since: Version) -> None:
    groups = validate_array_entry(xref, d, dict_name, entry_name, OPTIONAL, since)
    for item in groups or ():
        group = xref.dereference_dict(item)
        if group is not None:
            validate_optional_content_group_dict(xref, group, since)


def validate_optional_content_membership_dict(xref: XRefTable, d: Dict, since: Version = Version.V15) -> None:
    dict_name = "OCMDict"
    groups = validate_entry(xref, d, dict_name, "OCGs", OPTIONAL, since)
    if isinstance(groups, Dict):
        validate_optional_content_group_dict(xref, groups, since)
    elif groups is not None:
        _validate_group_array(xref, d, dict_name, "OCGs", since)
    validate_name_entry(xref, d, dict_name, "P", OPTIONAL, since, one_of("AllOn", "AnyOn", "AnyOff", "AllOff"))
    validate_array_entry(xref, d, dict_name, "VE", OPTIONAL, Version.V16)


def validate_optional_content_entry(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version) -> None:
    """Validate an ``/OC`` entry: a group or a membership dict."""

    oc = validate_dict_entry(xref, d, dict_name, entry_name, required, since)
    if oc is None:
        return
    kind = validate_name_entry(xref, oc, "optionalContent", "Type", REQUIRED, since, one_of("OCG", "OCMD"))
    if kind == "OCG":
        validate_optional_content_group_dict(xref, oc, since)
    else:
        validate_optional_content_membership_dict(xref, oc, since)


def _validate_configuration_dict(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "optContentConfigDict"
    validate_string_entry(xref, d, dict_name, "Name", OPTIONAL, since)
    validate_string_entry(xref, d, dict_name, "Creator", OPTIONAL, since)
    base_state = validate_name_entry(xref, d, dict_name, "BaseState", OPTIONAL, since, one_of("ON", "OFF", "Unchanged"))
    if base_state is not None:
        if base_state != "ON":
            _validate_group_array(xref, d, dict_name, "ON", since)
        if base_state != "OFF":
            _validate_group_array(xref, d, dict_name, "OFF", since)
    _validate_intent(xref, d, dict_name, since)
    usage_apps = validate_array_entry(xref, d, dict_name, "AS", OPTIONAL, since)
    for item in usage_apps or ():
        app = xref.dereference_dict(item)
        if app is None:
            continue
        validate_name_entry(xref, app, "usageAppDict", "Event", REQUIRED, since, one_of("View", "Print", "Export"))
        _validate_group_array(xref, app, "usageAppDict", "OCGs", since)
        validate_name_array_entry(xref, app, "usageAppDict", "Category", REQUIRED, since)
    validate_array_entry(xref, d, dict_name, "Order", OPTIONAL, since)
    validate_name_entry(xref, d, dict_name, "ListMode", OPTIONAL, since, one_of("AllPages", "VisiblePages"))
    validate_array_entry(xref, d, dict_name, "RBGroups", OPTIONAL, since)
    _validate_group_array(xref, d, dict_name, "Locked", Version.V16)


def validate_oc_properties(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    if xref.relaxed:
        since = Version.V14
    props = validate_dict_entry(xref, root, "rootDict", "OCProperties", required, since)
    if props is None:
        return
    dict_name = "optContentPropertiesDict"
    validate_indref_array_entry(xref, props, dict_name, "OCGs", REQUIRED, since)
    default = validate_dict_entry(xref, props, dict_name, "D", REQUIRED, since)
    _validate_configuration_dict(xref, default, since)
    for item in validate_array_entry(xref, props, dict_name, "Configs", OPTIONAL, since) or ():
        config = xref.dereference_dict(item)
        if config is not None:
            _validate_configuration_dict(xref, config, since)
