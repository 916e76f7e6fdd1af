"""Resource dictionaries and the resources they name.

Covers fonts, XObjects (images and forms), graphics states, colour spaces,
patterns, shadings and property lists.  Shared resources are validated once;
the validation marker set remembers indirect objects already seen.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..exceptions import MissingRequiredError, TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, IndirectRef, Name, StreamDict, is_dict, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import (
    OPTIONAL,
    REQUIRED,
    in_range,
    one_of,
    validate_array_entry,
    validate_boolean_array_entry,
    validate_boolean_entry,
    validate_dict_entry,
    validate_entry,
    validate_function,
    validate_function_entry,
    validate_function_or_array_of_functions_entry,
    validate_integer_entry,
    validate_metadata,
    validate_name_array_entry,
    validate_name_entry,
    validate_number_array_entry,
    validate_number_entry,
    validate_rectangle_entry,
    validate_stream_dict_entry,
    validate_string_entry,
)
from .fonts import validate_font_dict
from .optional_content import validate_optional_content_entry

__all__ = [
    "DEVICE_COLOR_SPACES",
    "validate_resource_dict",
    "validate_color_space",
    "validate_image_stream_dict",
    "validate_xobject_stream_dict",
    "validate_ext_gstate_dict",
    "validate_shading",
    "validate_pattern",
]

LOGGER = logging.getLogger("pdfcorex.validate")

DEVICE_COLOR_SPACES = ("DeviceGray", "DeviceRGB", "DeviceCMYK", "Pattern")

_BLEND_MODES = (
    "Normal",
    "Compatible",
    "Multiply",
    "Screen",
    "Overlay",
    "Darken",
    "Lighten",
    "ColorDodge",
    "ColorBurn",
    "HardLight",
    "SoftLight",
    "Difference",
    "Exclusion",
    "Hue",
    "Saturation",
    "Color",
    "Luminosity",
)

_RENDERING_INTENTS = ("AbsoluteColorimetric", "RelativeColorimetric", "Saturation", "Perceptual")


def _seen(xref: XRefTable, obj: Any) -> bool:
    """Return True when ``obj`` is an indirect object validated before; mark it otherwise."""

    if not isinstance(obj, IndirectRef):
        return False
    if xref.is_valid(obj):
        return True
    xref.set_valid(obj)
    return False


# -- Colour spaces -----------------------------------------------------------


def _validate_cie_dict(xref: XRefTable, d: Dict, family: str) -> None:
    dict_name = f"{family}Dict"
    validate_number_array_entry(xref, d, dict_name, "WhitePoint", REQUIRED, Version.V11, lambda a: len(a) == 3)
    validate_number_array_entry(xref, d, dict_name, "BlackPoint", OPTIONAL, Version.V11, lambda a: len(a) == 3)
    if family == "CalGray":
        validate_number_entry(xref, d, dict_name, "Gamma", OPTIONAL, Version.V11)
    elif family == "CalRGB":
        validate_number_array_entry(xref, d, dict_name, "Gamma", OPTIONAL, Version.V11, lambda a: len(a) == 3)
        validate_number_array_entry(xref, d, dict_name, "Matrix", OPTIONAL, Version.V11, lambda a: len(a) == 9)
    else:
        validate_number_array_entry(xref, d, dict_name, "Range", OPTIONAL, Version.V11, lambda a: len(a) == 4)


def _validate_icc_stream(xref: XRefTable, sd: StreamDict) -> None:
    dict_name = "ICCBasedColorSpace"
    validate_integer_entry(xref, sd, dict_name, "N", REQUIRED, Version.V13, one_of(1, 3, 4))
    alternate = sd.get("Alternate")
    if alternate is not None:
        validate_color_space(xref, alternate, exclude_pattern=True)
    validate_number_array_entry(xref, sd, dict_name, "Range", OPTIONAL, Version.V13, lambda a: len(a) % 2 == 0)
    validate_metadata(xref, sd, OPTIONAL, Version.V14)


def _validate_color_space_array(xref: XRefTable, array: Array, exclude_pattern: bool) -> None:
    if not array:
        raise ValueRejectedError("empty colour space array", obj_nr=xref.cur_obj)
    family = xref.dereference_name(array[0])
    operands = [xref.dereference(item) for item in array[1:]]

    def expect(count: int) -> None:
        if len(array) < count:
            raise ValueRejectedError(f"{family} colour space needs {count} elements", obj_nr=xref.cur_obj)

    if family in ("CalGray", "CalRGB", "Lab"):
        expect(2)
        if not is_dict(operands[0]):
            raise TypeMismatchError(f"{family} colour space needs a dict", obj_nr=xref.cur_obj)
        _validate_cie_dict(xref, operands[0], family)
    elif family == "ICCBased":
        expect(2)
        xref.validate_version("ICCBased colour space", Version.V13)
        _validate_icc_stream(xref, xref.dereference_stream_dict(array[1]))
    elif family in ("Indexed", "I"):
        expect(4)
        validate_color_space(xref, array[1], exclude_pattern=True)
        hival = operands[1]
        if isinstance(hival, bool) or not isinstance(hival, int) or not 0 <= hival <= 255:
            raise ValueRejectedError(f"invalid Indexed hival {hival!r}", obj_nr=xref.cur_obj)
        if not isinstance(operands[2], (bytes, StreamDict)):
            raise TypeMismatchError(f"invalid Indexed lookup {type_name(operands[2])}", obj_nr=xref.cur_obj)
    elif family == "Separation":
        expect(4)
        xref.validate_version("Separation colour space", Version.V12)
        if not isinstance(operands[0], Name):
            raise TypeMismatchError("Separation colourant must be a name", obj_nr=xref.cur_obj)
        validate_color_space(xref, array[2], exclude_pattern=True)
        validate_function(xref, array[3])
    elif family == "DeviceN":
        expect(4)
        xref.validate_version("DeviceN colour space", Version.V13)
        if not isinstance(operands[0], Array):
            raise TypeMismatchError("DeviceN colourants must be an array", obj_nr=xref.cur_obj)
        validate_color_space(xref, array[2], exclude_pattern=True)
        validate_function(xref, array[3])
        if len(array) > 4 and operands[3] is not None and not is_dict(operands[3]):
            raise TypeMismatchError("DeviceN attributes must be a dict", obj_nr=xref.cur_obj)
    elif family == "Pattern":
        if exclude_pattern:
            raise ValueRejectedError("Pattern colour space not allowed here", obj_nr=xref.cur_obj)
        if len(array) > 1:
            validate_color_space(xref, array[1], exclude_pattern=True)
    elif family in ("DeviceGray", "DeviceRGB", "DeviceCMYK", "G", "RGB", "CMYK"):
        if len(array) != 1:
            raise ValueRejectedError(f"invalid {family} colour space array", obj_nr=xref.cur_obj)
    else:
        raise ValueRejectedError(f"unknown colour space family {family}", obj_nr=xref.cur_obj)


def validate_color_space(xref: XRefTable, obj: Any, exclude_pattern: bool = False) -> None:
    if _seen(xref, obj):
        return
    value = xref.dereference(obj)
    if value is None:
        return
    if isinstance(value, Name):
        if value in DEVICE_COLOR_SPACES and not (exclude_pattern and value == "Pattern"):
            return
        if value in ("G", "RGB", "CMYK"):
            return
        raise ValueRejectedError(f"invalid colour space name {value}", obj_nr=xref.cur_obj)
    if isinstance(value, Array):
        _validate_color_space_array(xref, value, exclude_pattern)
        return
    raise TypeMismatchError(f"invalid colour space {type_name(value)}", obj_nr=xref.cur_obj)


def _validate_color_space_entry(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version) -> None:
    value = validate_entry(xref, d, dict_name, entry_name, required, since)
    if value is not None:
        validate_color_space(xref, d[entry_name])


# -- Shadings and patterns ---------------------------------------------------


def validate_shading(xref: XRefTable, obj: Any) -> None:
    if _seen(xref, obj):
        return
    d = xref.dereference_dict_or_stream(obj)
    if d is None:
        return
    dict_name = "shadingDict"
    shading_type = validate_integer_entry(xref, d, dict_name, "ShadingType", REQUIRED, Version.V13, in_range(1, 7))
    _validate_color_space_entry(xref, d, dict_name, "ColorSpace", REQUIRED, Version.V13)
    validate_array_entry(xref, d, dict_name, "Background", OPTIONAL, Version.V13)
    validate_rectangle_entry(xref, d, dict_name, "BBox", OPTIONAL, Version.V13)
    validate_boolean_entry(xref, d, dict_name, "AntiAlias", OPTIONAL, Version.V13)
    if shading_type == 1:
        validate_number_array_entry(xref, d, dict_name, "Domain", OPTIONAL, Version.V13, lambda a: len(a) == 4)
        validate_number_array_entry(xref, d, dict_name, "Matrix", OPTIONAL, Version.V13, lambda a: len(a) == 6)
        validate_function_or_array_of_functions_entry(xref, d, dict_name, "Function", REQUIRED, Version.V13)
    elif shading_type in (2, 3):
        coords = 4 if shading_type == 2 else 6
        validate_number_array_entry(xref, d, dict_name, "Coords", REQUIRED, Version.V13, lambda a: len(a) == coords)
        validate_number_array_entry(xref, d, dict_name, "Domain", OPTIONAL, Version.V13, lambda a: len(a) == 2)
        validate_function_or_array_of_functions_entry(xref, d, dict_name, "Function", REQUIRED, Version.V13)
        validate_boolean_array_entry(xref, d, dict_name, "Extend", OPTIONAL, Version.V13, lambda a: len(a) == 2)
    else:
        if not isinstance(d, StreamDict):
            raise TypeMismatchError(f"shading type {shading_type} must be a stream", obj_nr=xref.cur_obj)
        validate_integer_entry(xref, d, dict_name, "BitsPerCoordinate", REQUIRED, Version.V13, one_of(1, 2, 4, 8, 12, 16, 24, 32))
        validate_integer_entry(xref, d, dict_name, "BitsPerComponent", REQUIRED, Version.V13, one_of(1, 2, 4, 8, 12, 16))
        validate_integer_entry(xref, d, dict_name, "BitsPerFlag", shading_type in (4, 6, 7), Version.V13, one_of(2, 4, 8))
        validate_integer_entry(xref, d, dict_name, "VerticesPerRow", shading_type == 5, Version.V13, lambda n: n >= 2)
        validate_number_array_entry(xref, d, dict_name, "Decode", REQUIRED, Version.V13)
        validate_function_or_array_of_functions_entry(xref, d, dict_name, "Function", OPTIONAL, Version.V13)


def validate_pattern(xref: XRefTable, obj: Any) -> None:
    if _seen(xref, obj):
        return
    d = xref.dereference_dict_or_stream(obj)
    if d is None:
        return
    dict_name = "patternDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("Pattern"))
    pattern_type = validate_integer_entry(xref, d, dict_name, "PatternType", REQUIRED, Version.V10, one_of(1, 2))
    validate_number_array_entry(xref, d, dict_name, "Matrix", OPTIONAL, Version.V10, lambda a: len(a) == 6)
    if pattern_type == 1:
        if not isinstance(d, StreamDict):
            raise TypeMismatchError("tiling pattern must be a stream", obj_nr=xref.cur_obj)
        validate_integer_entry(xref, d, dict_name, "PaintType", REQUIRED, Version.V10, one_of(1, 2))
        validate_integer_entry(xref, d, dict_name, "TilingType", REQUIRED, Version.V10, one_of(1, 2, 3))
        validate_rectangle_entry(xref, d, dict_name, "BBox", REQUIRED, Version.V10)
        validate_number_entry(xref, d, dict_name, "XStep", REQUIRED, Version.V10, lambda n: n != 0)
        validate_number_entry(xref, d, dict_name, "YStep", REQUIRED, Version.V10, lambda n: n != 0)
        validate_resource_dict(xref, d.get("Resources"), required=xref.strict)
        return
    xref.validate_version("shading pattern", Version.V13)
    shading = validate_entry(xref, d, dict_name, "Shading", REQUIRED, Version.V13)
    if shading is not None:
        validate_shading(xref, d["Shading"])
    gstate = validate_dict_entry(xref, d, dict_name, "ExtGState", OPTIONAL, Version.V13)
    if gstate is not None:
        validate_ext_gstate_dict(xref, gstate)


# -- Graphics states ---------------------------------------------------------


def _validate_soft_mask(xref: XRefTable, d: Dict, dict_name: str) -> None:
    value = validate_entry(xref, d, dict_name, "SMask", OPTIONAL, Version.V14)
    if value is None or isinstance(value, Name):
        if value is not None and value != "None":
            raise ValueRejectedError(f"invalid soft mask {value}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="SMask")
        return
    if not is_dict(value):
        raise TypeMismatchError(f"invalid soft mask {type_name(value)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="SMask")
    mask_name = "softMaskDict"
    validate_name_entry(xref, value, mask_name, "Type", OPTIONAL, Version.V14, one_of("Mask"))
    validate_name_entry(xref, value, mask_name, "S", REQUIRED, Version.V14, one_of("Alpha", "Luminosity"))
    group = validate_stream_dict_entry(xref, value, mask_name, "G", REQUIRED, Version.V14)
    if group is not None:
        validate_xobject_stream_dict(xref, group)
    validate_number_array_entry(xref, value, mask_name, "BC", OPTIONAL, Version.V14)
    transfer = value.get("TR")
    if transfer is not None and xref.dereference(transfer) != "Identity":
        validate_function(xref, transfer)


def _validate_function_or_name(xref: XRefTable, d: Dict, dict_name: str, entry_name: str, since: Version, names: tuple[str, ...]) -> None:
    value = validate_entry(xref, d, dict_name, entry_name, OPTIONAL, since)
    if value is None:
        return
    if isinstance(value, Name):
        if value not in names:
            raise ValueRejectedError(f"invalid {entry_name} {value}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=entry_name)
        return
    if isinstance(value, Array):
        for item in value:
            if xref.dereference(item) not in names:
                validate_function(xref, item)
        return
    validate_function(xref, d[entry_name])


def validate_ext_gstate_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "extGStateDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("ExtGState"))
    validate_number_entry(xref, d, dict_name, "LW", OPTIONAL, Version.V13)
    validate_integer_entry(xref, d, dict_name, "LC", OPTIONAL, Version.V13, in_range(0, 2))
    validate_integer_entry(xref, d, dict_name, "LJ", OPTIONAL, Version.V13, in_range(0, 2))
    validate_number_entry(xref, d, dict_name, "ML", OPTIONAL, Version.V13)
    validate_array_entry(xref, d, dict_name, "D", OPTIONAL, Version.V13, lambda a: len(a) == 2)
    validate_name_entry(xref, d, dict_name, "RI", OPTIONAL, Version.V13, one_of(*_RENDERING_INTENTS))
    validate_boolean_entry(xref, d, dict_name, "OP", OPTIONAL, Version.V12)
    validate_boolean_entry(xref, d, dict_name, "op", OPTIONAL, Version.V13)
    validate_integer_entry(xref, d, dict_name, "OPM", OPTIONAL, Version.V13, one_of(0, 1))
    validate_array_entry(xref, d, dict_name, "Font", OPTIONAL, Version.V13, lambda a: len(a) == 2)
    validate_function_entry(xref, d, dict_name, "BG", OPTIONAL, Version.V12)
    _validate_function_or_name(xref, d, dict_name, "BG2", Version.V13, ("Default",))
    validate_function_entry(xref, d, dict_name, "UCR", OPTIONAL, Version.V12)
    _validate_function_or_name(xref, d, dict_name, "UCR2", Version.V13, ("Default",))
    _validate_function_or_name(xref, d, dict_name, "TR", Version.V12, ("Identity",))
    _validate_function_or_name(xref, d, dict_name, "TR2", Version.V13, ("Identity", "Default"))
    validate_entry(xref, d, dict_name, "HT", OPTIONAL, Version.V12)
    validate_number_entry(xref, d, dict_name, "FL", OPTIONAL, Version.V13)
    validate_number_entry(xref, d, dict_name, "SM", OPTIONAL, Version.V13)
    validate_boolean_entry(xref, d, dict_name, "SA", OPTIONAL, Version.V10)
    blend = validate_entry(xref, d, dict_name, "BM", OPTIONAL, Version.V14)
    for mode in blend if isinstance(blend, Array) else ([blend] if blend is not None else []):
        if xref.dereference(mode) not in _BLEND_MODES:
            raise ValueRejectedError(f"invalid blend mode {mode}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="BM")
    _validate_soft_mask(xref, d, dict_name)
    validate_number_entry(xref, d, dict_name, "CA", OPTIONAL, Version.V14, in_range(0, 1))
    validate_number_entry(xref, d, dict_name, "ca", OPTIONAL, Version.V14, in_range(0, 1))
    validate_boolean_entry(xref, d, dict_name, "AIS", OPTIONAL, Version.V14)
    validate_boolean_entry(xref, d, dict_name, "TK", OPTIONAL, Version.V13)


# -- XObjects ----------------------------------------------------------------


def validate_image_stream_dict(xref: XRefTable, sd: StreamDict) -> None:
    dict_name = "imageDict"
    validate_integer_entry(xref, sd, dict_name, "Width", REQUIRED, Version.V10, lambda n: n > 0)
    validate_integer_entry(xref, sd, dict_name, "Height", REQUIRED, Version.V10, lambda n: n > 0)
    is_mask = validate_boolean_entry(xref, sd, dict_name, "ImageMask", OPTIONAL, Version.V10)
    jpx = "JPXDecode" in (sd.get("Filter") if isinstance(sd.get("Filter"), Array) else [sd.get("Filter")])
    needs_space = not is_mask and not jpx
    _validate_color_space_entry(xref, sd, dict_name, "ColorSpace", needs_space and xref.strict, Version.V10)
    validate_integer_entry(
        xref, sd, dict_name, "BitsPerComponent", needs_space and xref.strict, Version.V10, one_of(1, 2, 4, 8, 16)
    )
    validate_name_entry(xref, sd, dict_name, "Intent", OPTIONAL, Version.V11)
    mask = validate_entry(xref, sd, dict_name, "Mask", OPTIONAL, Version.V13)
    if mask is not None and not isinstance(mask, (Array, StreamDict)):
        raise TypeMismatchError(f"invalid image mask {type_name(mask)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Mask")
    validate_number_array_entry(xref, sd, dict_name, "Decode", OPTIONAL, Version.V10)
    validate_boolean_entry(xref, sd, dict_name, "Interpolate", OPTIONAL, Version.V10)
    validate_array_entry(xref, sd, dict_name, "Alternates", OPTIONAL, Version.V13)
    smask = validate_stream_dict_entry(xref, sd, dict_name, "SMask", OPTIONAL, Version.V14)
    if smask is not None:
        validate_image_stream_dict(xref, smask)
    validate_integer_entry(xref, sd, dict_name, "SMaskInData", OPTIONAL, Version.V15, in_range(0, 2))
    validate_name_entry(xref, sd, dict_name, "Name", OPTIONAL, Version.V10)
    validate_integer_entry(xref, sd, dict_name, "StructParent", OPTIONAL, Version.V13)
    validate_string_entry(xref, sd, dict_name, "ID", OPTIONAL, Version.V13)
    validate_optional_content_entry(xref, sd, dict_name, "OC", OPTIONAL, Version.V15)
    validate_metadata(xref, sd, OPTIONAL, Version.V14)


def _validate_group_attributes(xref: XRefTable, d: Dict, dict_name: str) -> None:
    group = validate_dict_entry(xref, d, dict_name, "Group", OPTIONAL, Version.V14)
    if group is None:
        return
    group_name = "groupDict"
    validate_name_entry(xref, group, group_name, "Type", OPTIONAL, Version.V14, one_of("Group"))
    subtype = validate_name_entry(xref, group, group_name, "S", REQUIRED, Version.V14, one_of("Transparency"))
    if subtype == "Transparency":
        _validate_color_space_entry(xref, group, group_name, "CS", OPTIONAL, Version.V14)
        validate_boolean_entry(xref, group, group_name, "I", OPTIONAL, Version.V14)
        validate_boolean_entry(xref, group, group_name, "K", OPTIONAL, Version.V14)


def _validate_form(xref: XRefTable, sd: StreamDict) -> None:
    dict_name = "formStreamDict"
    validate_integer_entry(xref, sd, dict_name, "FormType", OPTIONAL, Version.V10, one_of(1))
    validate_rectangle_entry(xref, sd, dict_name, "BBox", REQUIRED, Version.V10)
    validate_number_array_entry(xref, sd, dict_name, "Matrix", OPTIONAL, Version.V10, lambda a: len(a) == 6)
    validate_resource_dict(xref, sd.get("Resources"))
    _validate_group_attributes(xref, sd, dict_name)
    reference = validate_dict_entry(xref, sd, dict_name, "Ref", OPTIONAL, Version.V14)
    if reference is not None:
        validate_entry(xref, reference, "refDict", "F", REQUIRED, Version.V14)
        validate_entry(xref, reference, "refDict", "Page", REQUIRED, Version.V14)
    validate_metadata(xref, sd, OPTIONAL, Version.V14)
    validate_dict_entry(xref, sd, dict_name, "PieceInfo", OPTIONAL, Version.V13)
    validate_integer_entry(xref, sd, dict_name, "StructParent", OPTIONAL, Version.V13)
    validate_integer_entry(xref, sd, dict_name, "StructParents", OPTIONAL, Version.V13)
    validate_optional_content_entry(xref, sd, dict_name, "OC", OPTIONAL, Version.V15)
    validate_name_entry(xref, sd, dict_name, "Name", OPTIONAL, Version.V10)


def validate_xobject_stream_dict(xref: XRefTable, sd: StreamDict) -> None:
    dict_name = "xObjectStreamDict"
    validate_name_entry(xref, sd, dict_name, "Type", OPTIONAL, Version.V10, one_of("XObject"))
    subtype = validate_name_entry(xref, sd, dict_name, "Subtype", REQUIRED, Version.V10)
    if subtype == "Image":
        validate_image_stream_dict(xref, sd)
        xref.stats.images += 1
    elif subtype == "Form":
        _validate_form(xref, sd)
    elif subtype == "PS":
        validate_stream_dict_entry(xref, sd, dict_name, "Level1", OPTIONAL, Version.V10)
    else:
        raise ValueRejectedError(f"unknown XObject subtype {subtype}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Subtype")


# -- Resource dictionaries ---------------------------------------------------


def _validate_font(xref: XRefTable, obj: Any) -> None:
    font = xref.dereference_dict(obj)
    if font is None:
        return
    subtype = validate_font_dict(xref, font)
    if subtype == "Type3":
        validate_resource_dict(xref, font.get("Resources"))


def _validate_xobject(xref: XRefTable, obj: Any) -> None:
    sd = xref.dereference_stream_dict(obj)
    if sd is not None:
        validate_xobject_stream_dict(xref, sd)


def _validate_ext_gstate(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is not None:
        validate_ext_gstate_dict(xref, d)


def _validate_properties(xref: XRefTable, obj: Any) -> None:
    d = xref.dereference_dict(obj)
    if d is None:
        return
    if d.type() in ("OCG", "OCMD"):
        holder = Dict(OC=d)
        validate_optional_content_entry(xref, holder, "propertiesDict", "OC", REQUIRED, Version.V15)


_RESOURCE_VALIDATORS: dict[str, tuple[Callable[[XRefTable, Any], None], Version]] = {
    "ExtGState": (_validate_ext_gstate, Version.V12),
    "ColorSpace": (validate_color_space, Version.V10),
    "Pattern": (validate_pattern, Version.V12),
    "Shading": (validate_shading, Version.V13),
    "XObject": (_validate_xobject, Version.V10),
    "Font": (_validate_font, Version.V10),
    "Properties": (_validate_properties, Version.V12),
}


def validate_resource_dict(xref: XRefTable, obj: Any, required: bool = False) -> Dict | None:
    """Validate a ``/Resources`` dict and everything it names."""

    if _seen(xref, obj):
        return None
    resources = xref.dereference_dict(obj)
    if resources is None:
        if required:
            raise MissingRequiredError("missing resource dict", obj_nr=xref.cur_obj, entry_name="Resources")
        return None
    dict_name = "resourceDict"
    for category, (validator, since) in _RESOURCE_VALIDATORS.items():
        entries = validate_dict_entry(xref, resources, dict_name, category, OPTIONAL, since)
        for value in (entries or {}).values():
            if _seen(xref, value):
                continue
            validator(xref, value)
    validate_name_array_entry(xref, resources, dict_name, "ProcSet", OPTIONAL, Version.V10)
    return resources
