"""Annotation dictionaries and page annotation lists.

Subtypes are dispatched through :data:`ANNOTATION_VALIDATORS`, a table of
``subtype -> (validator, since version, markup)``.  Markup annotations get the
shared markup entries checked before their subtype specific entries.

Every annotation found on a page is recorded in ``xref.page_annots`` so that
form validation and downstream commands can look them up by page.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..exceptions import CorruptStructureError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, IndirectRef, StreamDict, as_string, is_dict, is_number, type_name
from ..types import AnnotationRecord, Version
from ..xref import XRefTable
from .actions import validate_action_dict, validate_additional_actions
from .destinations import validate_destination
from .entries import (
    OPTIONAL,
    REQUIRED,
    in_range,
    one_of,
    validate_array_array_entry,
    validate_array_entry,
    validate_boolean_entry,
    validate_date_entry,
    validate_dict_entry,
    validate_entry,
    validate_indref_entry,
    validate_integer_entry,
    validate_name_array_entry,
    validate_name_entry,
    validate_number_array_entry,
    validate_number_entry,
    validate_rectangle_entry,
    validate_stream_dict_entry,
    validate_stream_dict_or_dict_entry,
    validate_string_entry,
    validate_string_or_stream_entry,
)
from .filespec import validate_file_spec_entry
from .media import validate_movie_activation_dict, validate_movie_dict, validate_sound_dict_entry
from .optional_content import validate_optional_content_entry

__all__ = [
    "ANNOTATION_VALIDATORS",
    "validate_annotation_dict",
    "validate_page_annotations",
    "page_annotation_objects",
    "validate_appearance_dict",
    "validate_border_style_dict_entry",
]

LOGGER = logging.getLogger("pdfcorex.validate")


def _since(xref: XRefTable, strict: Version, relaxed: Version) -> Version:
    return relaxed if xref.relaxed else strict


# -- Shared sub dictionaries -------------------------------------------------


def validate_border_style_dict_entry(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version) -> None:
    style = validate_dict_entry(xref, d, dict_name, entry_name, required, since)
    if style is None:
        return
    dict_name = "borderStyleDict"
    validate_name_entry(xref, style, dict_name, "Type", OPTIONAL, Version.V10, one_of("Border"))
    validate_number_entry(xref, style, dict_name, "W", OPTIONAL, Version.V10)
    validate_name_entry(xref, style, dict_name, "S", OPTIONAL, Version.V10, one_of("S", "D", "B", "I", "U", "A"))
    validate_number_array_entry(xref, style, dict_name, "D", OPTIONAL, Version.V10, lambda a: len(a) <= 2)


def _validate_border_effect_entry(xref: XRefTable, d: Dict, dict_name: str, since: Version) -> None:
    effect = validate_dict_entry(xref, d, dict_name, "BE", OPTIONAL, since)
    if effect is None:
        return
    validate_name_entry(xref, effect, "borderEffectDict", "S", OPTIONAL, Version.V10, one_of("S", "C"))
    validate_number_entry(xref, effect, "borderEffectDict", "I", OPTIONAL, Version.V10, in_range(0, 2))


def _validate_appearance_characteristics(xref: XRefTable, d: Dict, dict_name: str) -> None:
    mk = validate_dict_entry(xref, d, dict_name, "MK", OPTIONAL, Version.V10)
    if mk is None:
        return
    dict_name = "appCharDict"
    validate_integer_entry(xref, mk, dict_name, "R", OPTIONAL, Version.V10, lambda r: r % 90 == 0)
    for key in ("BC", "BG"):
        validate_number_array_entry(xref, mk, dict_name, key, OPTIONAL, Version.V10, lambda a: len(a) in (0, 1, 3, 4))
    for key in ("CA", "RC", "AC"):
        validate_string_entry(xref, mk, dict_name, key, OPTIONAL, Version.V10)
    for key in ("I", "RI", "IX"):
        validate_stream_dict_entry(xref, mk, dict_name, key, OPTIONAL, Version.V10)
    icon_fit = validate_dict_entry(xref, mk, dict_name, "IF", OPTIONAL, Version.V10)
    if icon_fit is not None:
        validate_name_entry(xref, icon_fit, "iconFitDict", "SW", OPTIONAL, Version.V10, one_of("A", "B", "S", "N"))
        validate_name_entry(xref, icon_fit, "iconFitDict", "S", OPTIONAL, Version.V10, one_of("A", "P"))
        validate_number_array_entry(xref, icon_fit, "iconFitDict", "A", OPTIONAL, Version.V10, lambda a: len(a) == 2)
        validate_boolean_entry(xref, icon_fit, "iconFitDict", "FB", OPTIONAL, Version.V15)
    validate_integer_entry(xref, mk, dict_name, "TP", OPTIONAL, Version.V10, in_range(0, 6))


def _validate_appearance_entry(xref: XRefTable, d: Dict, key: str, required: bool) -> None:
    value = validate_entry(xref, d, "appearanceDict", key, required, Version.V12)
    if value is None or isinstance(value, StreamDict):
        return
    if not is_dict(value):
        raise TypeMismatchError(
            f"expected stream or appearance subdict, got {type_name(value)}",
            obj_nr=xref.cur_obj,
            dict_name="appearanceDict",
            entry_name=key,
        )
    for state, stream in value.items():
        stream = xref.dereference(stream)
        if stream is not None and not isinstance(stream, StreamDict):
            raise TypeMismatchError(
                f"appearance state {state} must be a stream, got {type_name(stream)}",
                obj_nr=xref.cur_obj,
                dict_name="appearanceSubDict",
                entry_name=state,
            )


def validate_appearance_dict(xref: XRefTable, d: Dict) -> None:
    _validate_appearance_entry(xref, d, "N", REQUIRED)
    _validate_appearance_entry(xref, d, "R", OPTIONAL)
    _validate_appearance_entry(xref, d, "D", OPTIONAL)


def _validate_appearance_dict_entry(xref: XRefTable, d: Dict, dict_name: str, required: bool, since: Version) -> None:
    ap = validate_dict_entry(xref, d, dict_name, "AP", required, since)
    if ap is not None:
        validate_appearance_dict(xref, ap)


def _validate_measure_entry(xref: XRefTable, d: Dict, dict_name: str, since: Version) -> None:
    measure = validate_dict_entry(xref, d, dict_name, "Measure", OPTIONAL, since)
    if measure is None:
        return
    validate_name_entry(xref, measure, "measureDict", "Type", OPTIONAL, since, one_of("Measure"))
    subtype = validate_name_entry(xref, measure, "measureDict", "Subtype", OPTIONAL, since, one_of("RL", "GEO"))
    if subtype in (None, "RL"):
        validate_string_entry(xref, measure, "measureDict", "R", REQUIRED, since)
        for key in ("X", "D", "A"):
            validate_array_entry(xref, measure, "measureDict", key, REQUIRED, since)


def _validate_interior_color(xref: XRefTable, d: Dict, dict_name: str, since: Version) -> None:
    validate_number_array_entry(xref, d, dict_name, "IC", OPTIONAL, since, lambda a: len(a) in (0, 1, 3, 4))


# -- Subtypes ----------------------------------------------------------------


def _text(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_boolean_entry(xref, d, dict_name, "Open", OPTIONAL, Version.V10)
    validate_name_entry(xref, d, dict_name, "Name", OPTIONAL, Version.V10)
    state = validate_string_entry(
        xref, d, dict_name, "State", OPTIONAL, Version.V15,
        one_of("None", "Unmarked", "Marked", "Accepted", "Rejected", "Cancelled", "Completed"),
    )
    validate_string_entry(xref, d, dict_name, "StateModel", state is not None, Version.V15, one_of("Marked", "Review"))


def _validate_action_or_destination(xref: XRefTable, d: Dict, dict_name: str, since: Version) -> None:
    action = validate_dict_entry(xref, d, dict_name, "A", OPTIONAL, since)
    if action is not None:
        validate_action_dict(xref, action)
        return
    dest = validate_entry(xref, d, dict_name, "Dest", OPTIONAL, since)
    if dest is not None:
        validate_destination(xref, dest)


def _link(xref: XRefTable, d: Dict, dict_name: str) -> None:
    _validate_action_or_destination(xref, d, dict_name, Version.V11)
    validate_name_entry(xref, d, dict_name, "H", OPTIONAL, Version.V12, one_of("N", "I", "O", "P"))
    uri_action = validate_dict_entry(xref, d, dict_name, "PA", OPTIONAL, Version.V13)
    if uri_action is not None:
        validate_name_entry(xref, uri_action, "URIActionDict", "S", REQUIRED, Version.V10, one_of("URI"))
        validate_action_dict(xref, uri_action)
    validate_number_array_entry(xref, d, dict_name, "QuadPoints", OPTIONAL, Version.V16, lambda a: len(a) % 8 == 0)
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, _since(xref, Version.V16, Version.V13))


def _free_text(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_string_entry(xref, d, dict_name, "DA", REQUIRED, Version.V10)
    validate_integer_entry(xref, d, dict_name, "Q", OPTIONAL, _since(xref, Version.V14, Version.V13), in_range(0, 2))
    validate_string_or_stream_entry(xref, d, dict_name, "RC", OPTIONAL, _since(xref, Version.V15, Version.V14))
    validate_string_entry(xref, d, dict_name, "DS", OPTIONAL, Version.V15)
    since = _since(xref, Version.V16, Version.V14)
    validate_number_array_entry(xref, d, dict_name, "CL", OPTIONAL, since, lambda a: len(a) in (4, 6))
    intents = ("FreeText", "FreeTextCallout", "FreeTextTypeWriter", "FreeTextTypewriter")
    validate_name_entry(xref, d, dict_name, "IT", OPTIONAL, since, one_of(*intents))
    _validate_border_effect_entry(xref, d, dict_name, Version.V15)
    validate_rectangle_entry(xref, d, dict_name, "RD", OPTIONAL, since)
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, _since(xref, Version.V16, Version.V13))
    validate_name_entry(xref, d, dict_name, "LE", OPTIONAL, since)


def _line(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_number_array_entry(xref, d, dict_name, "L", REQUIRED, Version.V10, lambda a: len(a) == 4)
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, Version.V10)
    since = _since(xref, Version.V14, Version.V13)
    validate_name_array_entry(xref, d, dict_name, "LE", OPTIONAL, since, lambda a: len(a) == 2)
    _validate_interior_color(xref, d, dict_name, since)
    extension = validate_number_entry(xref, d, dict_name, "LLE", OPTIONAL, Version.V16, lambda f: f >= 0)
    validate_number_entry(xref, d, dict_name, "LL", extension is not None, Version.V16)
    validate_boolean_entry(xref, d, dict_name, "Cap", OPTIONAL, Version.V16)
    validate_name_entry(xref, d, dict_name, "IT", OPTIONAL, Version.V16)
    validate_number_entry(xref, d, dict_name, "LLO", OPTIONAL, Version.V17, lambda f: f >= 0)
    validate_name_entry(xref, d, dict_name, "CP", OPTIONAL, Version.V17, one_of("Inline", "Top"))
    _validate_measure_entry(xref, d, dict_name, Version.V17)
    validate_number_array_entry(xref, d, dict_name, "CO", OPTIONAL, Version.V17, lambda a: len(a) == 2)


def _polyline(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_number_array_entry(xref, d, dict_name, "Vertices", REQUIRED, Version.V10)
    if dict_name == "PolyLine":
        validate_name_array_entry(xref, d, dict_name, "LE", OPTIONAL, Version.V10, lambda a: len(a) == 2)
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, Version.V10)
    _validate_interior_color(xref, d, dict_name, Version.V14)
    if dict_name == "Polygon":
        _validate_border_effect_entry(xref, d, dict_name, Version.V10)
    intents = ("PolygonCloud", "PolyLineDimension", "PolygonDimension")
    validate_name_entry(xref, d, dict_name, "IT", OPTIONAL, Version.V16, one_of(*intents))
    _validate_measure_entry(xref, d, dict_name, Version.V17)


def _text_markup(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_number_array_entry(xref, d, dict_name, "QuadPoints", REQUIRED, Version.V10, lambda a: len(a) % 8 == 0)


def _square_or_circle(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, Version.V10)
    _validate_interior_color(xref, d, dict_name, _since(xref, Version.V14, Version.V13))
    _validate_border_effect_entry(xref, d, dict_name, Version.V15)
    validate_rectangle_entry(xref, d, dict_name, "RD", OPTIONAL, Version.V15)


def _stamp(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_name_entry(xref, d, dict_name, "Name", OPTIONAL, Version.V10)


def _caret(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_rectangle_entry(xref, d, dict_name, "RD", OPTIONAL, Version.V15)
    validate_name_entry(xref, d, dict_name, "Sy", OPTIONAL, Version.V10, one_of("P", "None"))


def _ink(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_array_array_entry(xref, d, dict_name, "InkList", REQUIRED, Version.V10)
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, Version.V10)


def _popup(xref: XRefTable, d: Dict, dict_name: str) -> None:
    ref = validate_indref_entry(xref, d, dict_name, "Parent", OPTIONAL, Version.V10)
    if ref is not None:
        xref.dereference_dict(ref)
    validate_boolean_entry(xref, d, dict_name, "Open", OPTIONAL, Version.V10)


def _file_attachment(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_file_spec_entry(xref, d, dict_name, "FS", REQUIRED, Version.V10)
    validate_name_entry(xref, d, dict_name, "Name", OPTIONAL, Version.V10)


def _sound(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_sound_dict_entry(xref, d, dict_name, "Sound", REQUIRED, Version.V10)
    validate_name_entry(xref, d, dict_name, "Name", OPTIONAL, Version.V10)


def _movie(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_string_entry(xref, d, dict_name, "T", OPTIONAL, Version.V10)
    movie = validate_dict_entry(xref, d, dict_name, "Movie", REQUIRED, Version.V10)
    validate_movie_dict(xref, movie)
    activation = validate_entry(xref, d, dict_name, "A", OPTIONAL, Version.V10)
    if is_dict(activation):
        validate_movie_activation_dict(xref, activation)
    elif activation is not None and not isinstance(activation, bool):
        raise TypeMismatchError(
            f"expected boolean or dict, got {type_name(activation)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="A"
        )


def _widget(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_name_entry(xref, d, dict_name, "H", OPTIONAL, Version.V10, one_of("N", "I", "O", "P", "T", "A"))
    _validate_appearance_characteristics(xref, d, dict_name)
    action = validate_dict_entry(xref, d, dict_name, "A", OPTIONAL, Version.V11)
    if action is not None:
        validate_action_dict(xref, action)
    validate_additional_actions(xref, d, dict_name, "AA", OPTIONAL, Version.V12, "fieldOrAnnot")
    validate_border_style_dict_entry(xref, d, dict_name, "BS", OPTIONAL, Version.V12)
    validate_indref_entry(xref, d, dict_name, "Parent", OPTIONAL, Version.V10)


def _screen(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_string_entry(xref, d, dict_name, "T", OPTIONAL, Version.V10)
    _validate_appearance_characteristics(xref, d, dict_name)
    action = validate_dict_entry(xref, d, dict_name, "A", OPTIONAL, Version.V10)
    if action is not None:
        validate_action_dict(xref, action)
    validate_additional_actions(xref, d, dict_name, "AA", OPTIONAL, Version.V12, "fieldOrAnnot")


def _printer_mark(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_name_entry(xref, d, dict_name, "MN", OPTIONAL, Version.V10)
    validate_integer_entry(xref, d, dict_name, "F", REQUIRED, Version.V11)
    _validate_appearance_dict_entry(xref, d, dict_name, REQUIRED, Version.V12)


def _is_font_dict_array(xref: XRefTable, array: Array) -> bool:
    fonts = [xref.dereference_dict(item) for item in array]
    return all(font is None or font.type() == "Font" for font in fonts)


def _trap_net(xref: XRefTable, d: Dict, dict_name: str) -> None:
    modified = validate_date_entry(xref, d, dict_name, "LastModified", OPTIONAL, Version.V10)
    validate_array_entry(xref, d, dict_name, "Version", modified is None and "AnnotStates" in d, Version.V10)
    validate_name_array_entry(xref, d, dict_name, "AnnotStates", OPTIONAL, Version.V10)
    validate_array_entry(xref, d, dict_name, "FontFauxing", OPTIONAL, Version.V10, lambda a: _is_font_dict_array(xref, a))
    validate_integer_entry(xref, d, dict_name, "F", REQUIRED, Version.V11)


def _watermark(xref: XRefTable, d: Dict, dict_name: str) -> None:
    fixed = validate_dict_entry(xref, d, dict_name, "FixedPrint", OPTIONAL, Version.V10)
    if fixed is None:
        return
    validate_name_entry(xref, fixed, "fixedPrintDict", "Type", REQUIRED, Version.V10, one_of("FixedPrint"))
    validate_number_array_entry(xref, fixed, "fixedPrintDict", "Matrix", OPTIONAL, Version.V10, lambda a: len(a) == 6)
    validate_number_entry(xref, fixed, "fixedPrintDict", "H", OPTIONAL, Version.V10)
    validate_number_entry(xref, fixed, "fixedPrintDict", "V", OPTIONAL, Version.V10)


def _three_d(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_stream_dict_or_dict_entry(xref, d, dict_name, "3DD", REQUIRED, Version.V16)
    validate_entry(xref, d, dict_name, "3DV", OPTIONAL, Version.V16)
    validate_dict_entry(xref, d, dict_name, "3DA", OPTIONAL, Version.V16)
    validate_boolean_entry(xref, d, dict_name, "3DI", OPTIONAL, Version.V16)
    validate_rectangle_entry(xref, d, dict_name, "3DB", OPTIONAL, Version.V16)


def _redact(xref: XRefTable, d: Dict, dict_name: str) -> None:
    validate_number_array_entry(xref, d, dict_name, "QuadPoints", OPTIONAL, Version.V10, lambda a: len(a) % 8 == 0)
    validate_number_array_entry(
        xref, d, dict_name, "IC", OPTIONAL, Version.V10,
        lambda a: len(a) == 3 and all(0 <= xref.dereference(v) <= 1 for v in a),
    )
    validate_stream_dict_entry(xref, d, dict_name, "RO", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "OverlayText", OPTIONAL, Version.V10)
    validate_boolean_entry(xref, d, dict_name, "Repeat", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "DA", "OverlayText" in d, Version.V10)
    validate_integer_entry(xref, d, dict_name, "Q", OPTIONAL, Version.V10, in_range(0, 2))


def _rich_media(xref: XRefTable, d: Dict, dict_name: str) -> None:
    content = validate_dict_entry(xref, d, dict_name, "RichMediaContent", REQUIRED, Version.V17)
    validate_array_entry(xref, content, "richMediaContentDict", "Assets", OPTIONAL, Version.V17)
    validate_array_entry(xref, content, "richMediaContentDict", "Configurations", OPTIONAL, Version.V17)
    validate_array_entry(xref, content, "richMediaContentDict", "Views", OPTIONAL, Version.V17)
    validate_dict_entry(xref, d, dict_name, "RichMediaSettings", OPTIONAL, Version.V17)


AnnotationValidator = Callable[[XRefTable, Dict, str], None]

ANNOTATION_VALIDATORS: dict[str, tuple[AnnotationValidator, Version, bool]] = {
    "Text": (_text, Version.V10, True),
    "Link": (_link, Version.V10, False),
    "FreeText": (_free_text, Version.V13, True),
    "Line": (_line, Version.V13, True),
    "Polygon": (_polyline, Version.V15, True),
    "PolyLine": (_polyline, Version.V15, True),
    "Highlight": (_text_markup, Version.V13, True),
    "Underline": (_text_markup, Version.V13, True),
    "Squiggly": (_text_markup, Version.V14, True),
    "StrikeOut": (_text_markup, Version.V13, True),
    "Square": (_square_or_circle, Version.V13, True),
    "Circle": (_square_or_circle, Version.V13, True),
    "Stamp": (_stamp, Version.V13, True),
    "Caret": (_caret, Version.V15, True),
    "Ink": (_ink, Version.V13, True),
    "Popup": (_popup, Version.V13, False),
    "FileAttachment": (_file_attachment, Version.V13, True),
    "Sound": (_sound, Version.V12, True),
    "Movie": (_movie, Version.V12, False),
    "Widget": (_widget, Version.V12, False),
    "Screen": (_screen, Version.V15, False),
    "PrinterMark": (_printer_mark, Version.V14, False),
    "TrapNet": (_trap_net, Version.V13, False),
    "Watermark": (_watermark, Version.V16, False),
    "3D": (_three_d, Version.V16, False),
    "Redact": (_redact, Version.V17, True),
    "RichMedia": (_rich_media, Version.V17, False),
}


# -- Markup ------------------------------------------------------------------


def _validate_annotation_ref_entry(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, since: Version) -> Dict | None:
    ref = d.get(entry_name)
    if isinstance(ref, IndirectRef) and xref.is_valid(ref):
        return None
    annot = validate_dict_entry(xref, d, dict_name, entry_name, OPTIONAL, since)
    if annot is None:
        return None
    if isinstance(ref, IndirectRef):
        xref.set_valid(ref)
    validate_annotation_dict(xref, annot)
    return annot


def _validate_markup(xref: XRefTable, d: Dict) -> None:
    dict_name = "markupAnnot"
    validate_string_entry(xref, d, dict_name, "T", OPTIONAL, Version.V11)
    popup = d.get("Popup")
    if popup is not None:
        popup_dict = xref.dereference_dict(popup)
        if popup_dict is not None:
            validate_name_entry(xref, popup_dict, dict_name, "Subtype", REQUIRED, Version.V10, one_of("Popup"))
        _validate_annotation_ref_entry(xref, d, dict_name, "Popup", Version.V13)
    validate_number_entry(xref, d, dict_name, "CA", OPTIONAL, Version.V14, in_range(0, 1))
    validate_string_or_stream_entry(xref, d, dict_name, "RC", OPTIONAL, Version.V15)
    validate_date_entry(xref, d, dict_name, "CreationDate", OPTIONAL, Version.V15)
    _validate_annotation_ref_entry(xref, d, dict_name, "IRT", Version.V15)
    validate_string_entry(xref, d, dict_name, "Subj", OPTIONAL, _since(xref, Version.V15, Version.V14))
    validate_name_entry(xref, d, dict_name, "RT", OPTIONAL, Version.V16, one_of("R", "Group"))
    validate_name_entry(xref, d, dict_name, "IT", OPTIONAL, Version.V16)
    ex_data = validate_dict_entry(xref, d, dict_name, "ExData", OPTIONAL, Version.V17)
    if ex_data is not None:
        validate_name_entry(xref, ex_data, "ExData", "Type", OPTIONAL, Version.V10, one_of("ExData"))
        validate_name_entry(xref, ex_data, "ExData", "Subtype", REQUIRED, Version.V10, one_of("Markup3D"))


# -- General entries ---------------------------------------------------------


def _validate_border(xref: XRefTable, d: Dict, dict_name: str) -> None:
    border = validate_array_entry(xref, d, dict_name, "Border", OPTIONAL, Version.V10)
    if border is None:
        return
    if len(border) not in (0, 3, 4):
        raise ValueRejectedError(
            f"invalid border array length {len(border)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Border"
        )
    for value in border[:3]:
        if not is_number(xref.dereference(value)):
            raise TypeMismatchError("border widths must be numbers", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Border")
    if len(border) < 4:
        return
    dashes = xref.dereference_array(border[3])
    if dashes is None or len(dashes) > 3:
        raise ValueRejectedError("invalid border dash array", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Border")
    values = [xref.dereference(v) for v in dashes]
    if not all(is_number(v) and v >= 0 for v in values) or (values and not any(values)):
        raise ValueRejectedError("invalid border dash array", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Border")


def _validate_page_back_ref(xref: XRefTable, d: Dict, dict_name: str) -> None:
    ref = validate_indref_entry(xref, d, dict_name, "P", OPTIONAL, Version.V10)
    if ref is None:
        return
    if xref.relaxed and xref.is_dangling(ref):
        del d["P"]
        xref.repaired(f"{dict_name} P")
        return
    page = xref.dereference_dict(ref)
    if page is None:
        return
    validate_name_entry(xref, page, "pageDict", "Type", REQUIRED, Version.V10, one_of("Page"))


def _validate_general(xref: XRefTable, d: Dict, dict_name: str) -> str:
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("Annot"))
    subtype = validate_name_entry(xref, d, dict_name, "Subtype", REQUIRED, Version.V10)
    validate_rectangle_entry(xref, d, dict_name, "Rect", REQUIRED, Version.V10)
    validate_string_entry(xref, d, dict_name, "Contents", OPTIONAL, Version.V10)
    _validate_page_back_ref(xref, d, dict_name)
    validate_string_entry(xref, d, dict_name, "NM", OPTIONAL, Version.V14)
    # Modification dates come in any format.
    validate_string_entry(xref, d, dict_name, "M", OPTIONAL, Version.V11)
    validate_integer_entry(xref, d, dict_name, "F", OPTIONAL, Version.V11)
    _validate_appearance_dict_entry(xref, d, dict_name, OPTIONAL, Version.V12)
    validate_name_entry(xref, d, dict_name, "AS", OPTIONAL, Version.V11)
    _validate_border(xref, d, dict_name)
    validate_number_array_entry(xref, d, dict_name, "C", OPTIONAL, Version.V11, lambda a: len(a) in (0, 1, 3, 4))
    validate_integer_entry(xref, d, dict_name, "StructParent", OPTIONAL, Version.V13)
    validate_optional_content_entry(xref, d, dict_name, "OC", OPTIONAL, Version.V15)
    return str(subtype)


def validate_annotation_dict(xref: XRefTable, d: Dict) -> str:
    """Validate an annotation and return its subtype."""

    dict_name = "annotDict"
    subtype = _validate_general(xref, d, dict_name)
    entry = ANNOTATION_VALIDATORS.get(subtype)
    if entry is None:
        raise ValueRejectedError(
            f"unsupported annotation subtype {subtype}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Subtype"
        )
    validator, since, markup = entry
    xref.validate_version(f"annotation {subtype}", since)
    if markup:
        _validate_markup(xref, d)
    validator(xref, d, subtype)
    return subtype


# -- Page annotation lists ---------------------------------------------------


def _record(xref: XRefTable, key: int, d: Dict, subtype: str) -> None:
    rect = d.get("Rect")
    rect = xref.dereference(rect)
    coords = None
    if isinstance(rect, Array) and len(rect) == 4:
        values = [xref.dereference(v) for v in rect]
        if all(is_number(v) for v in values):
            coords = tuple(float(v) for v in values)
    contents = d.get("Contents")
    contents = xref.dereference(contents)
    name = xref.dereference(d.get("NM"))
    record = AnnotationRecord(
        subtype=subtype,
        obj_nr=key,
        page=xref.cur_page,
        rect=coords,
        contents=as_string(contents) if isinstance(contents, bytes) else None,
        name=as_string(name) if isinstance(name, bytes) else None,
    )
    xref.page_annots.setdefault(xref.cur_page, {}).setdefault(subtype, {})[key] = record
    xref.stats.count_annotation(subtype)


def validate_page_annotations(xref: XRefTable, page: Dict) -> None:
    """Validate ``/Annots`` of the page at ``xref.cur_page``.

    A ``TrapNet`` annotation has to be the final entry.
    """

    annots = validate_array_entry(xref, page, "pageDict", "Annots", OPTIONAL, Version.V10)
    if not annots:
        return
    trap_net = False
    for index, item in enumerate(annots):
        if trap_net:
            raise CorruptStructureError(
                "corrupt page annotation list, TrapNet has to be the last entry",
                obj_nr=xref.cur_obj,
                dict_name="pageDict",
                entry_name="Annots",
            )
        if isinstance(item, IndirectRef):
            key = item.obj_nr
            annot = xref.dereference_dict(item)
            if annot is None:
                continue
        elif is_dict(item):
            key = -(index + 1)
            annot = item
        else:
            raise TypeMismatchError(
                f"annotation must be a dict, got {type_name(item)}", obj_nr=xref.cur_obj, dict_name="pageDict", entry_name="Annots"
            )
        subtype = validate_annotation_dict(xref, annot)
        _record(xref, key, annot, subtype)
        if isinstance(item, IndirectRef):
            xref.set_valid(item)
        trap_net = subtype == "TrapNet"
    LOGGER.debug("page %d: %d annotations", xref.cur_page, len(annots))


def page_annotation_objects(xref: XRefTable) -> set[int]:
    """Object numbers of every annotation recorded on any page."""

    return {key for subtypes in xref.page_annots.values() for records in subtypes.values() for key in records}
