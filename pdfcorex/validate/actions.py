"""Action dictionaries and additional-actions dictionaries.

Actions are dispatched on ``/S`` through :data:`ACTION_VALIDATORS`, a table of
``subtype -> (validator, since version)``.  ``/Next`` chains are followed with
the validation marker set guarding against cycles.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..exceptions import MissingRequiredError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, HexLiteral, IndirectRef, StreamDict, StringLiteral, as_string, is_dict, type_name
from ..types import Version
from ..xref import XRefTable
from .destinations import validate_action_destination_entry
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
    validate_int_or_string_entry,
    validate_integer_entry,
    validate_name_entry,
    validate_number_entry,
    validate_string_entry,
)
from .filespec import validate_file_spec_entry, validate_url_spec_entry
from .media import validate_movie_activation_dict, validate_rendition_dict, validate_sound_dict_entry
from .transitions import validate_transition_dict

__all__ = [
    "ACTION_VALIDATORS",
    "ADDITIONAL_ACTION_KEYS",
    "validate_action_dict",
    "validate_action_entry",
    "validate_additional_actions",
    "validate_javascript",
]

LOGGER = logging.getLogger("pdfcorex.validate")

ADDITIONAL_ACTION_KEYS = {
    "root": frozenset({"WC", "WS", "DS", "WP", "DP"}),
    "page": frozenset({"O", "C"}),
    "fieldOrAnnot": frozenset({"K", "F", "V", "C", "E", "X", "D", "U", "Fo", "Bl", "PO", "PC", "PV", "Pl"}),
}

NAMED_ACTIONS = (
    "NextPage",
    "PrevPage",
    "FirstPage",
    "LastPage",
    # common viewer extensions
    "GoToPage",
    "GoBack",
    "GoForward",
    "Find",
    "Print",
    "SaveAs",
    "Quit",
    "FullScreen",
)


# -- Subtypes ----------------------------------------------------------------


def _go_to(xref: XRefTable, d: Dict, dict_name: str) -> None:
    required = REQUIRED if xref.strict else OPTIONAL
    validate_action_destination_entry(xref, d, dict_name, "D", required, Version.V10)


def _go_to_r(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_file_spec_entry(xref, d, dict_name, "F", REQUIRED, Version.V11)
    validate_action_destination_entry(xref, d, dict_name, "D", REQUIRED, Version.V10, remote=True)
    validate_boolean_entry(xref, d, dict_name, "NewWindow", OPTIONAL, Version.V12)


def _validate_target_dict_entry(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool) -> None:
    seen: set[int] = set()
    while True:
        target = validate_dict_entry(xref, d, dict_name, entry_name, required, Version.V10)
        if target is None or id(target) in seen:
            return
        seen.add(id(target))
        dict_name = "targetDict"
        validate_name_entry(xref, target, dict_name, "R", REQUIRED, Version.V10, one_of("P", "C"))
        validate_string_entry(xref, target, dict_name, "N", OPTIONAL, Version.V10)
        validate_int_or_string_entry(xref, target, dict_name, "P", OPTIONAL, Version.V10)
        validate_int_or_string_entry(xref, target, dict_name, "A", OPTIONAL, Version.V10)
        d, entry_name, required = target, "T", OPTIONAL


def _go_to_e(xref: XRefTable, d: Dict, dict_name: str) -> None:
    spec = validate_file_spec_entry(xref, d, dict_name, "F", OPTIONAL, Version.V11)
    validate_action_destination_entry(xref, d, dict_name, "D", REQUIRED, Version.V10, remote=True)
    validate_boolean_entry(xref, d, dict_name, "NewWindow", OPTIONAL, Version.V12)
    _validate_target_dict_entry(xref, d, dict_name, "T", spec is None)


def _launch(xref: XRefTable, d: Dict, dict_name: str) -> None:
    spec = validate_file_spec_entry(xref, d, dict_name, "F", OPTIONAL, Version.V11)
    win = validate_dict_entry(xref, d, dict_name, "Win", OPTIONAL, Version.V10)
    if win is not None:
        validate_string_entry(xref, win, "winDict", "F", REQUIRED, Version.V10)
        for key in ("D", "O", "P"):
            validate_string_entry(xref, win, "winDict", key, OPTIONAL, Version.V10)
    platform = any(key in d for key in ("Win", "Mac", "Unix"))
    if spec is None and not platform and xref.strict:
        raise MissingRequiredError(
            "launch action needs F, Win, Mac or Unix", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="F"
        )
    validate_boolean_entry(xref, d, dict_name, "NewWindow", OPTIONAL, Version.V12)


def _thread(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_file_spec_entry(xref, d, dict_name, "F", OPTIONAL, Version.V11)
    thread = validate_entry(xref, d, dict_name, "D", REQUIRED, Version.V10)
    if not (is_dict(thread) or isinstance(thread, (StringLiteral, HexLiteral)) or _is_int(thread)):
        raise TypeMismatchError(
            f"invalid thread {type_name(thread)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="D"
        )
    bead = validate_entry(xref, d, dict_name, "B", OPTIONAL, Version.V10)
    if bead is not None and not (is_dict(bead) or _is_int(bead)):
        raise TypeMismatchError(
            f"invalid bead {type_name(bead)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="B"
        )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _uri(xref: XRefTable, d: Dict, dict_name: str) -> None:
    uri = validate_string_entry(xref, d, dict_name, "URI", REQUIRED, Version.V10)
    if xref.config.validate_links and uri and uri.startswith("http"):
        if not any(uri in links for links in xref.uris.values()):
            xref.record_uri(uri)
    validate_boolean_entry(xref, d, dict_name, "IsMap", OPTIONAL, Version.V10)


def _sound(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_sound_dict_entry(xref, d, dict_name, "Sound", REQUIRED, Version.V10)
    validate_number_entry(xref, d, dict_name, "Volume", OPTIONAL, Version.V10, in_range(-1.0, 1.0))
    for key in ("Synchronous", "Repeat", "Mix"):
        validate_boolean_entry(xref, d, dict_name, key, OPTIONAL, Version.V10)


def _movie(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_movie_activation_dict(xref, d)
    title = validate_string_entry(xref, d, dict_name, "T", OPTIONAL, Version.V10)
    if title is not None:
        if "Annotation" in d and xref.strict:
            raise ValueRejectedError(
                "movie action must not carry both T and Annotation",
                obj_nr=xref.cur_obj,
                dict_name=dict_name,
                entry_name="Annotation",
            )
        return
    ref = validate_indref_entry(xref, d, dict_name, "Annotation", REQUIRED, Version.V10)
    annot = xref.dereference_dict(ref)
    if annot is None:
        raise MissingRequiredError(
            "movie action needs T or Annotation", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Annotation"
        )
    validate_name_entry(xref, annot, "annotDict", "Subtype", REQUIRED, Version.V10, one_of("Movie"))


def _validate_hide_target(xref: XRefTable, value: Any) -> None:
    if isinstance(value, (StringLiteral, HexLiteral)):
        as_string(value)
    elif is_dict(value):
        validate_name_entry(xref, value, "annotDict", "Subtype", REQUIRED, Version.V10)
    else:
        raise TypeMismatchError(f"invalid hide target {type_name(value)}", obj_nr=xref.cur_obj, entry_name="T")


def _hide(xref: XRefTable, d: Dict, dict_name: str) -> None:
    target = validate_entry(xref, d, dict_name, "T", REQUIRED, Version.V10)
    if isinstance(target, Array):
        for item in target:
            item = xref.dereference(item)
            if item is not None:
                _validate_hide_target(xref, item)
    else:
        _validate_hide_target(xref, target)
    validate_boolean_entry(xref, d, dict_name, "H", OPTIONAL, Version.V10)


def _named(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_name_entry(xref, d, dict_name, "N", REQUIRED, Version.V10, one_of(*NAMED_ACTIONS))


def _validate_fields(xref: XRefTable, d: Dict, dict_name: str) -> None:
    fields = validate_array_entry(xref, d, dict_name, "Fields", OPTIONAL, Version.V10)
    for item in fields or ():
        if not isinstance(item, (StringLiteral, HexLiteral, IndirectRef)):
            raise TypeMismatchError(
                f"invalid field {type_name(item)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Fields"
            )
    validate_integer_entry(xref, d, dict_name, "Flags", OPTIONAL, Version.V10)


def _submit_form(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_url_spec_entry(xref, d, dict_name, "F", REQUIRED, Version.V10)
    _validate_fields(xref, d, dict_name)


def _reset_form(xref: XRefTable, d: Dict, dict_name: str) -> None:
    _validate_fields(xref, d, dict_name)


def _import_data(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_file_spec_entry(xref, d, dict_name, "F", OPTIONAL, Version.V11)


def validate_javascript(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool) -> None:
    value = validate_entry(xref, d, dict_name, entry_name, required, Version.V13)
    if value is None:
        return
    if isinstance(value, (StringLiteral, HexLiteral)):
        as_string(value)
    elif not isinstance(value, StreamDict):
        raise TypeMismatchError(
            f"expected string or stream, got {type_name(value)}",
            obj_nr=xref.cur_obj,
            dict_name=dict_name,
            entry_name=entry_name,
        )


def _javascript(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_javascript(xref, d, dict_name, "JS", REQUIRED)


def _set_ocg_state(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_array_entry(xref, d, dict_name, "State", REQUIRED, Version.V10)
    validate_boolean_entry(xref, d, dict_name, "PreserveRB", OPTIONAL, Version.V10)


def _rendition(xref: XRefTable, d: Dict, dict_name: str) -> None:
    op = validate_integer_entry(xref, d, dict_name, "OP", OPTIONAL, Version.V15, in_range(0, 4))
    validate_javascript(xref, d, dict_name, "JS", op is None)
    rendition = validate_dict_entry(xref, d, dict_name, "R", op in (0, 4), Version.V15)
    if rendition is not None:
        validate_rendition_dict(xref, rendition, Version.V15)
    screen = validate_dict_entry(xref, d, dict_name, "AN", op is not None, Version.V10)
    if screen is not None:
        validate_name_entry(xref, screen, dict_name, "Subtype", REQUIRED, Version.V10, one_of("Screen"))


def _trans(xref: XRefTable, d: Dict, dict_name: str) -> None:
    transition = validate_dict_entry(xref, d, dict_name, "Trans", REQUIRED, Version.V10)
    validate_transition_dict(xref, transition)


def _go_to_3d_view(xref: XRefTable, d: Dict, dict_name: str) -> None:
    annot = validate_dict_entry(xref, d, dict_name, "TA", REQUIRED, Version.V16)
    validate_name_entry(xref, annot, "annotDict", "Subtype", REQUIRED, Version.V16, one_of("3D"))
    validate_entry(xref, d, dict_name, "V", REQUIRED, Version.V16)


ActionValidator = Callable[[XRefTable, Dict, str], None]

ACTION_VALIDATORS: dict[str, tuple[ActionValidator, Version]] = {
    "GoTo": (_go_to, Version.V10),
    "GoToR": (_go_to_r, Version.V11),
    "GoToE": (_go_to_e, Version.V16),
    "Launch": (_launch, Version.V10),
    "Thread": (_thread, Version.V10),
    "URI": (_uri, Version.V10),
    "Sound": (_sound, Version.V12),
    "Movie": (_movie, Version.V12),
    "Hide": (_hide, Version.V12),
    "Named": (_named, Version.V12),
    "SubmitForm": (_submit_form, Version.V10),
    "ResetForm": (_reset_form, Version.V12),
    "ImportData": (_import_data, Version.V12),
    "JavaScript": (_javascript, Version.V13),
    "SetOCGState": (_set_ocg_state, Version.V15),
    "Rendition": (_rendition, Version.V15),
    "Trans": (_trans, Version.V15),
    "GoTo3DView": (_go_to_3d_view, Version.V16),
}


# -- Dispatch ----------------------------------------------------------------


def validate_action_dict(xref: XRefTable, d: Dict) -> None:
    """Validate an action and every action of its ``/Next`` chain."""

    pending: list[Dict] = [d]
    while pending:
        action = pending.pop(0)
        _validate_single_action(xref, action)
        next_value = action.get("Next")
        if next_value is None:
            continue
        items = next_value
        if not isinstance(next_value, Array):
            resolved = xref.dereference(next_value)
            items = resolved if isinstance(resolved, Array) else Array([next_value])
        for item in items:
            if isinstance(item, IndirectRef):
                if xref.is_valid(item):
                    continue
                xref.set_valid(item)
            follower = xref.dereference_dict(item)
            if follower is not None:
                pending.append(follower)


def _validate_single_action(xref: XRefTable, d: Dict) -> None:
    dict_name = "actionDict"
    allowed = ("A", "Action") if xref.relaxed else ("Action",)
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of(*allowed))
    subtype = validate_name_entry(xref, d, dict_name, "S", REQUIRED, Version.V10)
    entry = ACTION_VALIDATORS.get(str(subtype))
    if entry is None:
        raise ValueRejectedError(f"unsupported action type {subtype}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="S")
    validator, since = entry
    xref.validate_version(f"action {subtype}", since)
    validator(xref, d, str(subtype))


def validate_action_entry(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version) -> Dict | None:
    ref = d.get(entry_name)
    if isinstance(ref, IndirectRef) and xref.is_valid(ref):
        return None
    action = validate_dict_entry(xref, d, dict_name, entry_name, required, since)
    if action is None:
        return None
    if isinstance(ref, IndirectRef):
        xref.set_valid(ref)
    validate_action_dict(xref, action)
    return action


def validate_additional_actions(
    xref: XRefTable,
    d: Dict,
    dict_name: str,
    entry_name: str,
    required: bool,
    since: Version,
    source: str,
) -> None:
    """Validate an ``/AA`` dict whose allowed triggers depend on ``source``."""

    actions = validate_dict_entry(xref, d, dict_name, entry_name, required, since)
    if actions is None:
        return
    allowed = ADDITIONAL_ACTION_KEYS[source]
    for key, value in actions.items():
        if key not in allowed:
            raise ValueRejectedError(
                f"additional action {key} not allowed for {source}",
                obj_nr=xref.cur_obj,
                dict_name=dict_name,
                entry_name=entry_name,
            )
        if isinstance(value, IndirectRef):
            if xref.is_valid(value):
                continue
            xref.set_valid(value)
        action = xref.dereference_dict(value)
        if action is not None:
            validate_action_dict(xref, action)
