"""Font dictionaries, font descriptors and embedded font files."""

from __future__ import annotations

import logging

from ..exceptions import MissingRequiredError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, Name, StreamDict, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_array_entry,
    validate_dict_entry,
    validate_entry,
    validate_integer_entry,
    validate_metadata,
    validate_name_entry,
    validate_number_array_entry,
    validate_number_entry,
    validate_rectangle_entry,
    validate_stream_dict_entry,
    validate_string_entry,
)

__all__ = [
    "STANDARD_TYPE1_FONTS",
    "validate_font_dict",
    "validate_font_descriptor",
]

LOGGER = logging.getLogger("pdfcorex.validate")

STANDARD_TYPE1_FONTS = frozenset(
    {
        "Times-Roman",
        "Times-Bold",
        "Times-Italic",
        "Times-BoldItalic",
        "Helvetica",
        "Helvetica-Bold",
        "Helvetica-Oblique",
        "Helvetica-BoldOblique",
        "Courier",
        "Courier-Bold",
        "Courier-Oblique",
        "Courier-BoldOblique",
        "Symbol",
        "ZapfDingbats",
    }
)

_FONT_FILE3_SUBTYPES = {
    "Type1": "Type1C",
    "MMType1": "Type1C",
    "CIDFontType0": "CIDFontType0C",
    "OpenType": "OpenType",
}

_ENCODINGS = ("MacRomanEncoding", "MacExpertEncoding", "WinAnsiEncoding")


# -- Font files --------------------------------------------------------------


def _validate_font_file(xref: XRefTable, d: Dict, entry_name: str, font_type: str, since: Version) -> None:
    sd = validate_stream_dict_entry(xref, d, "fdDict", entry_name, OPTIONAL, since)
    if sd is None:
        return
    compact = entry_name == "FontFile3"
    if compact:
        expected = _FONT_FILE3_SUBTYPES.get(font_type)
        if expected is not None and sd.subtype() != expected and xref.strict:
            raise ValueRejectedError(
                f"FontFile3 of a {font_type} font needs Subtype {expected}",
                obj_nr=xref.cur_obj,
                dict_name="fontFileStreamDict",
                entry_name="Subtype",
            )
    dict_name = "fontFileStreamDict"
    needs_length1 = font_type in ("Type1", "TrueType") and not compact and xref.strict
    validate_integer_entry(xref, sd, dict_name, "Length1", needs_length1, Version.V10)
    needs_length23 = font_type == "Type1" and not compact and xref.strict
    validate_integer_entry(xref, sd, dict_name, "Length2", needs_length23, Version.V10)
    validate_integer_entry(xref, sd, dict_name, "Length3", needs_length23, Version.V10)
    validate_metadata(xref, sd, OPTIONAL, Version.V14)


def _validate_descriptor_font_file(xref: XRefTable, d: Dict, font_type: str) -> None:
    if font_type in ("Type1", "MMType1"):
        _validate_font_file(xref, d, "FontFile", font_type, Version.V10)
        _validate_font_file(xref, d, "FontFile3", font_type, Version.V12)
    elif font_type in ("TrueType", "CIDFontType2"):
        _validate_font_file(xref, d, "FontFile2", font_type, Version.V11)
    elif font_type == "CIDFontType0":
        _validate_font_file(xref, d, "FontFile3", font_type, Version.V13)
    elif font_type == "OpenType":
        _validate_font_file(xref, d, "FontFile3", font_type, Version.V16)


# -- Font descriptors --------------------------------------------------------


def validate_font_descriptor(xref: XRefTable, font: Dict, font_dict_name: str, font_type: str, required: bool, since: Version) -> Dict | None:
    d = validate_dict_entry(xref, font, font_dict_name, "FontDescriptor", required, since)
    if d is None:
        return None
    dict_name = "fdDict"
    kind = d.type()
    if kind is None and xref.strict:
        raise MissingRequiredError("font descriptor without Type", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Type")
    if kind is not None and kind != "FontDescriptor":
        raise ValueRejectedError(f"corrupt font descriptor type {kind}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Type")

    type3 = font_type == "Type3"
    validate_name_entry(xref, d, dict_name, "FontName", REQUIRED, Version.V10)
    since15 = Version.V13 if xref.relaxed else Version.V15
    validate_string_entry(xref, d, dict_name, "FontFamily", OPTIONAL, since15)
    validate_name_entry(xref, d, dict_name, "FontStretch", OPTIONAL, since15)
    validate_number_entry(xref, d, dict_name, "FontWeight", OPTIONAL, since15)
    validate_integer_entry(xref, d, dict_name, "Flags", REQUIRED, Version.V10)
    validate_rectangle_entry(xref, d, dict_name, "FontBBox", not type3, Version.V10)
    validate_number_entry(xref, d, dict_name, "ItalicAngle", REQUIRED, Version.V10)
    validate_number_entry(xref, d, dict_name, "Ascent", not type3, Version.V10)
    validate_number_entry(xref, d, dict_name, "Descent", not type3, Version.V10)
    for key in ("Leading", "CapHeight", "XHeight", "StemH", "AvgWidth", "MaxWidth", "MissingWidth"):
        validate_number_entry(xref, d, dict_name, key, OPTIONAL, Version.V10)
    validate_number_entry(xref, d, dict_name, "StemV", not type3 and xref.strict, Version.V10)
    validate_string_entry(xref, d, dict_name, "CharSet", OPTIONAL, Version.V11)
    if not type3:
        _validate_descriptor_font_file(xref, d, font_type)
    if font_type in ("CIDFontType0", "CIDFontType2"):
        validate_dict_entry(xref, d, dict_name, "Style", OPTIONAL, Version.V10, lambda s: list(s) == ["Panose"])
        validate_name_entry(xref, d, dict_name, "Lang", OPTIONAL, Version.V15)
        validate_dict_entry(xref, d, dict_name, "FD", OPTIONAL, Version.V10)
        validate_stream_dict_entry(xref, d, dict_name, "CIDSet", OPTIONAL, Version.V10)
    return d


# -- Encodings ---------------------------------------------------------------


def _validate_encoding(xref: XRefTable, d: Dict, dict_name: str) -> None:
    value = validate_entry(xref, d, dict_name, "Encoding", OPTIONAL, Version.V10)
    if value is None or isinstance(value, Dict):
        if isinstance(value, Dict):
            validate_array_entry(xref, value, "encodingDict", "Differences", OPTIONAL, Version.V10)
        return
    if not isinstance(value, Name):
        raise TypeMismatchError(
            f"invalid encoding {type_name(value)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Encoding"
        )
    if value not in _ENCODINGS and xref.strict:
        raise ValueRejectedError(f"invalid encoding {value}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Encoding")


def _validate_cmap_encoding(xref: XRefTable, d: Dict, dict_name: str) -> None:
    value = validate_entry(xref, d, dict_name, "Encoding", REQUIRED, Version.V10)
    if isinstance(value, Name):
        return
    if not isinstance(value, StreamDict):
        raise TypeMismatchError(
            f"expected CMap name or stream, got {type_name(value)}",
            obj_nr=xref.cur_obj,
            dict_name=dict_name,
            entry_name="Encoding",
        )
    dict_name = "cmapStreamDict"
    validate_name_entry(xref, value, dict_name, "Type", REQUIRED, Version.V10, one_of("CMap"))
    validate_name_entry(xref, value, dict_name, "CMapName", REQUIRED, Version.V10)
    info = validate_dict_entry(xref, value, dict_name, "CIDSystemInfo", REQUIRED, Version.V10)
    _validate_cid_system_info(xref, info)
    validate_integer_entry(xref, value, dict_name, "WMode", OPTIONAL, Version.V10, one_of(0, 1))
    use_cmap = validate_entry(xref, value, dict_name, "UseCMap", OPTIONAL, Version.V10)
    if use_cmap is not None and not isinstance(use_cmap, (Name, StreamDict)):
        raise TypeMismatchError(
            f"invalid UseCMap {type_name(use_cmap)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="UseCMap"
        )


def _validate_cid_system_info(xref: XRefTable, d: Dict) -> None:
    dict_name = "CIDSystemInfoDict"
    validate_string_entry(xref, d, dict_name, "Registry", REQUIRED, Version.V10)
    validate_string_entry(xref, d, dict_name, "Ordering", REQUIRED, Version.V10)
    validate_integer_entry(xref, d, dict_name, "Supplement", REQUIRED, Version.V10)


# -- Simple fonts ------------------------------------------------------------


def _validate_widths(xref: XRefTable, d: Dict, dict_name: str, required: bool) -> None:
    first = validate_integer_entry(xref, d, dict_name, "FirstChar", required, Version.V10)
    last = validate_integer_entry(xref, d, dict_name, "LastChar", required, Version.V10)
    widths = validate_number_array_entry(xref, d, dict_name, "Widths", required, Version.V10)
    if first is None or last is None or widths is None:
        return
    if len(widths) != last - first + 1 and xref.strict:
        raise ValueRejectedError(
            f"expected {last - first + 1} widths, got {len(widths)}",
            obj_nr=xref.cur_obj,
            dict_name=dict_name,
            entry_name="Widths",
        )


def _type1(xref: XRefTable, d: Dict, dict_name: str, subtype: str) -> None:
    base_font = validate_name_entry(xref, d, dict_name, "BaseFont", REQUIRED, Version.V10)
    standard = base_font in STANDARD_TYPE1_FONTS
    required = not standard and xref.version() >= Version.V15
    _validate_widths(xref, d, dict_name, required and xref.strict)
    validate_font_descriptor(xref, d, dict_name, subtype, required and xref.strict, Version.V10)
    _validate_encoding(xref, d, dict_name)
    validate_stream_dict_entry(xref, d, dict_name, "ToUnicode", OPTIONAL, Version.V12)


def _true_type(xref: XRefTable, d: Dict, dict_name: str, subtype: str) -> None:
    validate_name_entry(xref, d, dict_name, "BaseFont", REQUIRED, Version.V10)
    _validate_widths(xref, d, dict_name, xref.strict)
    validate_font_descriptor(xref, d, dict_name, subtype, xref.strict, Version.V10)
    _validate_encoding(xref, d, dict_name)
    validate_stream_dict_entry(xref, d, dict_name, "ToUnicode", OPTIONAL, Version.V12)


def _type3(xref: XRefTable, d: Dict, dict_name: str, subtype: str) -> None:
    validate_rectangle_entry(xref, d, dict_name, "FontBBox", REQUIRED, Version.V10)
    validate_number_array_entry(xref, d, dict_name, "FontMatrix", REQUIRED, Version.V10, lambda a: len(a) == 6)
    procs = validate_dict_entry(xref, d, dict_name, "CharProcs", REQUIRED, Version.V10)
    for proc in procs.values():
        xref.dereference_stream_dict(proc)
    encoding = validate_dict_entry(xref, d, dict_name, "Encoding", REQUIRED, Version.V10)
    validate_array_entry(xref, encoding, "encodingDict", "Differences", OPTIONAL, Version.V10)
    _validate_widths(xref, d, dict_name, REQUIRED)
    validate_font_descriptor(xref, d, dict_name, subtype, OPTIONAL, Version.V10)
    validate_dict_entry(xref, d, dict_name, "Resources", OPTIONAL, Version.V12)
    validate_stream_dict_entry(xref, d, dict_name, "ToUnicode", OPTIONAL, Version.V12)


# -- Composite fonts ---------------------------------------------------------


def _validate_cid_widths(xref: XRefTable, d: Dict, dict_name: str, entry_name: str) -> None:
    widths = validate_array_entry(xref, d, dict_name, entry_name, OPTIONAL, Version.V10)
    for item in widths or ():
        item = xref.dereference(item)
        if isinstance(item, Array):
            continue
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise TypeMismatchError(
                f"invalid glyph width entry {type_name(item)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=entry_name
            )


def _validate_cid_font(xref: XRefTable, d: Dict) -> str:
    dict_name = "CIDFontDict"
    validate_name_entry(xref, d, dict_name, "Type", REQUIRED, Version.V10, one_of("Font"))
    subtype = validate_name_entry(xref, d, dict_name, "Subtype", REQUIRED, Version.V10, one_of("CIDFontType0", "CIDFontType2"))
    validate_name_entry(xref, d, dict_name, "BaseFont", REQUIRED, Version.V10)
    info = validate_dict_entry(xref, d, dict_name, "CIDSystemInfo", REQUIRED, Version.V10)
    _validate_cid_system_info(xref, info)
    validate_font_descriptor(xref, d, dict_name, str(subtype), REQUIRED, Version.V10)
    validate_integer_entry(xref, d, dict_name, "DW", OPTIONAL, Version.V10)
    _validate_cid_widths(xref, d, dict_name, "W")
    validate_number_array_entry(xref, d, dict_name, "DW2", OPTIONAL, Version.V10, lambda a: len(a) == 2)
    validate_array_entry(xref, d, dict_name, "W2", OPTIONAL, Version.V10)
    if subtype == "CIDFontType2":
        value = validate_entry(xref, d, dict_name, "CIDToGIDMap", OPTIONAL, Version.V10)
        if isinstance(value, Name):
            if value != "Identity":
                raise ValueRejectedError(
                    f"invalid CIDToGIDMap {value}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="CIDToGIDMap"
                )
        elif value is not None and not isinstance(value, StreamDict):
            raise TypeMismatchError(
                f"invalid CIDToGIDMap {type_name(value)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="CIDToGIDMap"
            )
    return str(subtype)


def _type0(xref: XRefTable, d: Dict, dict_name: str, subtype: str) -> None:
    validate_name_entry(xref, d, dict_name, "BaseFont", REQUIRED, Version.V10)
    _validate_cmap_encoding(xref, d, dict_name)
    descendants = validate_array_entry(xref, d, dict_name, "DescendantFonts", REQUIRED, Version.V10, lambda a: len(a) == 1)
    descendant = xref.dereference_dict(descendants[0])
    if descendant is None:
        raise MissingRequiredError("missing descendant font", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="DescendantFonts")
    _validate_cid_font(xref, descendant)
    validate_stream_dict_entry(xref, d, dict_name, "ToUnicode", OPTIONAL, Version.V12)


_FONT_VALIDATORS = {
    "Type1": _type1,
    "MMType1": _type1,
    "TrueType": _true_type,
    "Type3": _type3,
    "Type0": _type0,
}


def validate_font_dict(xref: XRefTable, d: Dict) -> str:
    """Validate a font dict, record its name and return its subtype."""

    dict_name = "fontDict"
    kind = d.type()
    if kind != "Font":
        if kind is not None or xref.strict:
            raise ValueRejectedError(f"corrupt font dict type {kind}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Type")
        LOGGER.debug("font dict without Type (obj#%d)", xref.cur_obj)
    subtype = validate_name_entry(xref, d, dict_name, "Subtype", REQUIRED, Version.V10)
    validator = _FONT_VALIDATORS.get(str(subtype))
    if validator is None:
        raise ValueRejectedError(f"unknown font subtype {subtype}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Subtype")
    validator(xref, d, dict_name, str(subtype))
    base_font = d.name_entry("BaseFont")
    if base_font:
        xref.stats.fonts.add(base_font)
    return str(subtype)
