"""Page transition dictionaries (``/Trans``)."""

from __future__ import annotations

from ..exceptions import TypeMismatchError
from ..objects import Dict, Name, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import (
    OPTIONAL,
    one_of,
    validate_boolean_entry,
    validate_entry,
    validate_name_entry,
    validate_number_entry,
)

__all__ = ["TRANSITION_STYLES", "validate_transition_dict"]

TRANSITION_STYLES = (
    "Split",
    "Blinds",
    "Box",
    "Wipe",
    "Dissolve",
    "Glitter",
    "R",
    "Fly",
    "Push",
    "Cover",
    "Uncover",
    "Fade",
)

# Styles introduced with PDF 1.5.
_STYLES_15 = {"Fly", "Push", "Cover", "Uncover", "Fade"}


def _validate_direction(xref: XRefTable, d: Dict, dict_name: str, style: str) -> None:
    value = validate_entry(xref, d, dict_name, "Di", OPTIONAL, Version.V10)
    if value is None:
        return
    if isinstance(value, Name):
        if value == "None" and style == "Fly":
            return
        raise TypeMismatchError(f"invalid direction {value!r}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Di")
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeMismatchError(
            f"invalid direction {type_name(value)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Di"
        )
    allowed = {0, 270} if style in ("Wipe", "Glitter") else {0, 90, 180, 270, 315}
    if style == "Glitter":
        allowed.add(315)
    if value not in allowed:
        raise TypeMismatchError(f"invalid direction {value}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Di")


def validate_transition_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "transitionDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("Trans"))
    style = validate_name_entry(xref, d, dict_name, "S", OPTIONAL, Version.V10, one_of(*TRANSITION_STYLES))
    style = str(style or "R")
    if style in _STYLES_15:
        xref.validate_version(f"transition style {style}", Version.V15)
    validate_number_entry(xref, d, dict_name, "D", OPTIONAL, Version.V10)
    validate_name_entry(xref, d, dict_name, "Dm", OPTIONAL, Version.V10, one_of("H", "V"))
    validate_name_entry(xref, d, dict_name, "M", OPTIONAL, Version.V10, one_of("I", "O"))
    _validate_direction(xref, d, dict_name, style)
    validate_number_entry(xref, d, dict_name, "SS", OPTIONAL, Version.V15)
    validate_boolean_entry(xref, d, dict_name, "B", OPTIONAL, Version.V15)
