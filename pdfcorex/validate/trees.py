"""Name trees, number trees and page labels.

Name trees found under the catalog ``/Names`` dict are internalized into
``xref.names`` while they are validated, so that named destinations and
embedded files can be looked up without walking the tree again.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..exceptions import CorruptStructureError, MissingRequiredError, TypeMismatchError
from ..objects import Array, Dict, IndirectRef, as_string, is_string, iter_pairs, type_name
from ..types import Version
from ..xref import NAME_TREE_NAMES, XRefTable
from .actions import validate_action_dict
from .destinations import validate_destination
from .entries import (
    OPTIONAL,
    REQUIRED,
    in_range,
    one_of,
    validate_array_entry,
    validate_date_entry,
    validate_dict_entry,
    validate_entry,
    validate_indref_entry,
    validate_integer_entry,
    validate_integer_array_entry,
    validate_name_entry,
    validate_string_array_entry,
    validate_string_entry,
    validate_string_or_stream_entry,
)
from .filespec import validate_file_specification
from .media import validate_rendition_dict
from .resources import validate_xobject_stream_dict

__all__ = [
    "NAME_TREE_VALIDATORS",
    "validate_name_tree",
    "validate_names_dict",
    "validate_number_tree",
    "validate_page_labels",
]

LOGGER = logging.getLogger("pdfcorex.validate")

ValueValidator = Callable[[XRefTable, Any], Any]


# -- Name tree values --------------------------------------------------------


def _dests_value(xref: XRefTable, obj: Any) -> Any:
    return validate_destination(xref, obj)


def _ap_value(xref: XRefTable, obj: Any) -> None:
    sd = xref.dereference_stream_dict(obj)
    if sd is not None:
        validate_xobject_stream_dict(xref, sd)


def _javascript_value(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is not None:
        validate_action_dict(xref, d)


def _typed_dict_value(type_: str, dict_name: str) -> ValueValidator:
    def validate(xref: XRefTable, obj: Any) -> None:
        d = xref.dereference_dict(obj)
        if d is None:
            raise MissingRequiredError(f"{dict_name}: value is null", obj_nr=xref.cur_obj)
        validate_name_entry(xref, d, dict_name, "Type", REQUIRED, Version.V10, one_of(type_))

    return validate


def _validate_url_alias_dict(xref: XRefTable, d: Dict) -> None:
    validate_string_entry(xref, d, "urlAliasDict", "U", REQUIRED, Version.V10)
    validate_string_array_entry(xref, d, "urlAliasDict", "C", OPTIONAL, Version.V10)


def _validate_capture_command_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "captureCommandDict"
    validate_string_entry(xref, d, dict_name, "URL", REQUIRED, Version.V10)
    validate_integer_entry(xref, d, dict_name, "L", OPTIONAL, Version.V10)
    validate_integer_entry(xref, d, dict_name, "F", OPTIONAL, Version.V10)
    validate_string_or_stream_entry(xref, d, dict_name, "P", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "CT", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "H", OPTIONAL, Version.V10)
    settings = validate_dict_entry(xref, d, dict_name, "S", OPTIONAL, Version.V10)
    if settings is not None:
        validate_dict_entry(xref, settings, "cmdSettingsDict", "G", OPTIONAL, Version.V10)
        validate_dict_entry(xref, settings, "cmdSettingsDict", "C", OPTIONAL, Version.V10)


def _validate_source_info_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "sourceInfoDict"
    alias = validate_entry(xref, d, dict_name, "AU", REQUIRED, Version.V10)
    if isinstance(alias, Dict):
        _validate_url_alias_dict(xref, alias)
    elif not is_string(alias):
        raise TypeMismatchError(
            f"expected string or dict, got {type_name(alias)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="AU"
        )
    validate_date_entry(xref, d, dict_name, "E", OPTIONAL, Version.V10)
    validate_integer_entry(xref, d, dict_name, "S", OPTIONAL, Version.V10, in_range(0, 2))
    ref = validate_indref_entry(xref, d, dict_name, "C", OPTIONAL, Version.V10)
    if ref is not None:
        command = xref.dereference_dict(ref)
        if command is not None:
            _validate_capture_command_dict(xref, command)


def validate_web_capture_content_set(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is None:
        return
    dict_name = "webCaptureContentSetDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("SpiderContentSet"))
    kind = validate_name_entry(xref, d, dict_name, "S", REQUIRED, Version.V10, one_of("SPS", "SIS"))
    validate_string_entry(xref, d, dict_name, "ID", REQUIRED, Version.V10)
    validate_array_entry(xref, d, dict_name, "O", REQUIRED, Version.V10)
    info = validate_entry(xref, d, dict_name, "SI", REQUIRED, Version.V10)
    for item in info if isinstance(info, Array) else [info]:
        source = xref.dereference_dict(item)
        if source is not None:
            _validate_source_info_dict(xref, source)
    validate_string_entry(xref, d, dict_name, "CT", OPTIONAL, Version.V10)
    validate_date_entry(xref, d, dict_name, "TS", OPTIONAL, Version.V10)
    if kind == "SPS":
        validate_array_entry(xref, d, dict_name, "T", OPTIONAL, Version.V10)
        validate_array_entry(xref, d, dict_name, "TID", OPTIONAL, Version.V10)
    else:
        validate_integer_array_entry(xref, d, dict_name, "R", REQUIRED, Version.V10)


def _embedded_files_value(xref: XRefTable, obj: Any) -> None:
    if obj is not None:
        validate_file_specification(xref, obj)


def _validate_slide_show(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is None:
        return
    dict_name = "slideShowDict"
    validate_name_entry(xref, d, dict_name, "Type", REQUIRED, Version.V14, one_of("SlideShow"))
    validate_name_entry(xref, d, dict_name, "Subtype", REQUIRED, Version.V14, one_of("Embedded"))
    validate_array_entry(xref, d, dict_name, "Resources", REQUIRED, Version.V14)
    validate_string_entry(xref, d, dict_name, "StartResource", REQUIRED, Version.V14)


def _renditions_value(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is not None:
        validate_rendition_dict(xref, d, Version.V15)


NAME_TREE_VALIDATORS: dict[str, tuple[ValueValidator, Version]] = {
    "Dests": (_dests_value, Version.V12),
    "AP": (_ap_value, Version.V13),
    "JavaScript": (_javascript_value, Version.V13),
    "Pages": (_typed_dict_value("Page", "pageDict"), Version.V13),
    "Templates": (_typed_dict_value("Template", "templateDict"), Version.V13),
    "IDS": (validate_web_capture_content_set, Version.V13),
    "URLS": (validate_web_capture_content_set, Version.V13),
    "EmbeddedFiles": (_embedded_files_value, Version.V14),
    "AlternatePresentations": (_validate_slide_show, Version.V14),
    "Renditions": (_renditions_value, Version.V15),
}


# -- Name trees --------------------------------------------------------------


def _string_key(xref: XRefTable, obj: Any, what: str) -> str:
    value = xref.dereference(obj)
    if not is_string(value):
        raise TypeMismatchError(f"{what}: expected string key, got {type_name(value)}", obj_nr=xref.cur_obj)
    return as_string(value)


def _widen(low: Any, high: Any, key_low: Any, key_high: Any) -> tuple[Any, Any]:
    """Extend the key range ``low..high`` by ``key_low..key_high``."""

    if key_low is None:
        return low, high
    if low is None or key_low < low:
        low = key_low
    if high is None or key_high > high:
        high = key_high
    return low, high


def _check_limits(xref: XRefTable, d: Dict, dict_name: str, low: Any, high: Any, key_of: Callable[[Any], Any]) -> None:
    limits = validate_array_entry(xref, d, dict_name, "Limits", REQUIRED, Version.V10, lambda a: len(a) == 2)
    if low is None:
        return
    first, last = key_of(limits[0]), key_of(limits[1])
    if low < first or high > last:
        message = f"{dict_name}: leaf node corrupted, keys {low!r}..{high!r} outside limits {first!r}..{last!r}"
        if xref.strict or dict_name == "nameTreeDict":
            raise CorruptStructureError(message, obj_nr=xref.cur_obj)
        xref.warn(message)


def _validate_names_array(
    xref: XRefTable, d: Dict, name: str, validate_value: ValueValidator | None
) -> tuple[str | None, str | None]:
    names = xref.dereference_array(d.get("Names"))
    if names is None:
        raise MissingRequiredError('name tree node needs "Kids" or "Names"', obj_nr=xref.cur_obj, entry_name="Names")
    if len(names) % 2:
        raise CorruptStructureError(f"name tree {name}: odd length Names array ({len(names)})", obj_nr=xref.cur_obj)
    tree = xref.name_ref(name)
    low = high = None
    pairs = list(iter_pairs(names))
    for raw_key, value in pairs:
        key = _string_key(xref, raw_key, f"name tree {name}")
        low, high = _widen(low, high, key, key)
        tree.add(key, value, d)
        if validate_value is None:
            continue
        result = validate_value(xref, value)
        if name == "Dests" and result is None:
            # Dangling destination page in a relaxed walk.
            tree.remove(key)
            xref.repaired(f"name tree Dests {key!r}")
    return low, high


def validate_name_tree(
    xref: XRefTable,
    name: str,
    d: Dict,
    root: bool = True,
    validate_value: ValueValidator | None = None,
) -> tuple[str | None, str | None]:
    """Validate the name tree rooted at ``d`` and index it under ``name``.

    Values are checked with the validator registered for ``name`` unless
    ``validate_value`` is given.  Returns the lowest and highest key.
    """

    if validate_value is None and name in NAME_TREE_VALIDATORS:
        validator, since = NAME_TREE_VALIDATORS[name]
        if root:
            xref.validate_version(f"{name} name tree", since)
        validate_value = validator
    if root:
        xref.name_ref(name).root = d

    low = high = None
    if "Kids" in d:
        kids = xref.dereference_array(d["Kids"])
        if kids is None:
            raise MissingRequiredError('missing "Kids" array', obj_nr=xref.cur_obj, dict_name="nameTreeDict", entry_name="Kids")
        for kid in kids:
            node = xref.dereference_dict(kid)
            if node is None:
                continue
            kid_low, kid_high = validate_name_tree(xref, name, node, False, validate_value)
            low, high = _widen(low, high, kid_low, kid_high)
    else:
        low, high = _validate_names_array(xref, d, name, validate_value)
    if not root:
        _check_limits(xref, d, "nameTreeDict", low, high, lambda v: _string_key(xref, v, "Limits"))
    return low, high


def validate_names_dict(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    """Validate the catalog ``/Names`` dict and every name tree it holds."""

    names = validate_dict_entry(xref, root, "rootDict", "Names", required, since)
    if names is None:
        return
    for tree_name, value in names.items():
        if tree_name not in NAME_TREE_NAMES:
            message = f"unknown name tree {tree_name}"
            if xref.strict:
                raise CorruptStructureError(message, obj_nr=xref.cur_obj, dict_name="namesDict", entry_name=tree_name)
            xref.warn(message)
            continue
        if isinstance(value, IndirectRef):
            xref.set_valid(value)
        d = xref.dereference_dict(value)
        if d is None:
            continue
        validate_name_tree(xref, tree_name, d)
        LOGGER.debug("name tree %s: %d entries", tree_name, len(xref.name_ref(tree_name)))


# -- Number trees ------------------------------------------------------------


def _integer_key(xref: XRefTable, obj: Any) -> int:
    value = xref.dereference(obj)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeMismatchError(f"number tree: corrupt key {value!r}", obj_nr=xref.cur_obj)
    return value


def _validate_nums_array(xref: XRefTable, d: Dict, name: str, validate_value: ValueValidator | None) -> tuple[int | None, int | None]:
    nums = xref.dereference_array(d.get("Nums"))
    if nums is None:
        raise MissingRequiredError('number tree node needs "Kids" or "Nums"', obj_nr=xref.cur_obj, entry_name="Nums")
    if len(nums) % 2:
        message = f"number tree {name}: odd length Nums array ({len(nums)})"
        if xref.strict:
            raise CorruptStructureError(message, obj_nr=xref.cur_obj)
        xref.warn(f"{message}, skipped")
        return None, None
    low = high = None
    for index in range(0, len(nums), 2):
        key = _integer_key(xref, nums[index])
        low, high = _widen(low, high, key, key)
        if validate_value is not None:
            validate_value(xref, nums[index + 1])
    return low, high


def validate_number_tree(
    xref: XRefTable,
    name: str,
    d: Dict,
    validate_value: ValueValidator | None = None,
    root: bool = True,
) -> tuple[int | None, int | None]:
    low = high = None
    if "Kids" in d:
        kids = xref.dereference_array(d["Kids"])
        if kids is None:
            raise MissingRequiredError('missing "Kids" array', obj_nr=xref.cur_obj, dict_name="numberTreeDict", entry_name="Kids")
        for kid in kids:
            node = xref.dereference_dict(kid)
            if node is None:
                continue
            kid_low, kid_high = validate_number_tree(xref, name, node, validate_value, False)
            low, high = _widen(low, high, kid_low, kid_high)
    else:
        low, high = _validate_nums_array(xref, d, name, validate_value)
    if not root:
        _check_limits(xref, d, "numberTreeDict", low, high, lambda v: _integer_key(xref, v))
    return low, high


# -- Page labels -------------------------------------------------------------


def _validate_page_label_dict(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is None:
        return
    dict_name = "pageLabelDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("PageLabel"))
    validate_name_entry(xref, d, dict_name, "S", OPTIONAL, Version.V10, one_of("D", "R", "r", "A", "a"))
    validate_string_entry(xref, d, dict_name, "P", OPTIONAL, Version.V10)
    validate_integer_entry(xref, d, dict_name, "St", OPTIONAL, Version.V10, lambda n: n >= 1)


def validate_page_labels(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    if xref.relaxed:
        since = Version.V13
    labels = validate_dict_entry(xref, root, "rootDict", "PageLabels", required, since)
    if labels is not None:
        validate_number_tree(xref, "PageLabel", labels, _validate_page_label_dict)
