"""Multimedia dictionaries: sounds, movies, renditions and media clips."""

from __future__ import annotations

from typing import Any

from ..exceptions import TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, IndirectRef, StreamDict, StringLiteral, is_dict, type_name
from ..types import Version
from ..xref import XRefTable
from .entries import (
    OPTIONAL,
    REQUIRED,
    in_range,
    one_of,
    validate_array_entry,
    validate_boolean_entry,
    validate_dict_entry,
    validate_entry,
    validate_integer_array_entry,
    validate_integer_entry,
    validate_name_array_entry,
    validate_name_entry,
    validate_number_array_entry,
    validate_number_entry,
    validate_stream_dict_entry,
    validate_string_array_entry,
    validate_string_entry,
)
from .filespec import validate_file_specification

__all__ = [
    "validate_sound_dict",
    "validate_sound_dict_entry",
    "validate_movie_dict",
    "validate_movie_activation_dict",
    "validate_rendition_dict",
    "validate_media_clip_dict",
]


# -- Sound -------------------------------------------------------------------


def validate_sound_dict(xref: XRefTable, sd: StreamDict) -> None:
    dict_name = "soundDict"
    validate_name_entry(xref, sd, dict_name, "Type", OPTIONAL, Version.V10, one_of("Sound"))
    validate_number_entry(xref, sd, dict_name, "R", REQUIRED if xref.strict else OPTIONAL, Version.V10)
    validate_integer_entry(xref, sd, dict_name, "C", OPTIONAL, Version.V10, one_of(1, 2))
    validate_integer_entry(xref, sd, dict_name, "B", OPTIONAL, Version.V10)
    validate_name_entry(xref, sd, dict_name, "E", OPTIONAL, Version.V10, one_of("Raw", "Signed", "muLaw", "ALaw"))
    validate_name_entry(xref, sd, dict_name, "CO", OPTIONAL, Version.V10)


def validate_sound_dict_entry(
    xref: XRefTable, d: Dict, dict_name: str, entry_name: str, required: bool, since: Version
) -> StreamDict | None:
    sd = validate_stream_dict_entry(xref, d, dict_name, entry_name, required, since)
    if sd is not None:
        validate_sound_dict(xref, sd)
    return sd


# -- Movie -------------------------------------------------------------------


def _validate_start_or_duration(xref: XRefTable, d: Dict, dict_name: str, entry_name: str) -> None:
    value = validate_entry(xref, d, dict_name, entry_name, OPTIONAL, Version.V10)
    if value is None:
        return
    if isinstance(value, Array):
        if len(value) != 2:
            raise ValueRejectedError("time value array must have 2 elements", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=entry_name)
    elif isinstance(value, bool) or not isinstance(value, (int, StringLiteral)):
        raise TypeMismatchError(
            f"invalid time value {type_name(value)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=entry_name
        )


def validate_movie_activation_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "movieActivationDict"
    _validate_start_or_duration(xref, d, dict_name, "Start")
    _validate_start_or_duration(xref, d, dict_name, "Duration")
    validate_number_entry(xref, d, dict_name, "Rate", OPTIONAL, Version.V10)
    validate_number_entry(xref, d, dict_name, "Volume", OPTIONAL, Version.V10, in_range(-1.0, 1.0))
    validate_boolean_entry(xref, d, dict_name, "ShowControls", OPTIONAL, Version.V10)
    validate_name_entry(xref, d, dict_name, "Mode", OPTIONAL, Version.V10, one_of("Once", "Open", "Repeat", "Palindrome"))
    validate_boolean_entry(xref, d, dict_name, "Synchronous", OPTIONAL, Version.V10)
    validate_integer_array_entry(xref, d, dict_name, "FWScale", OPTIONAL, Version.V10, lambda a: len(a) == 2)
    validate_number_array_entry(xref, d, dict_name, "FWPosition", OPTIONAL, Version.V10, lambda a: len(a) == 2)


def validate_movie_dict(xref: XRefTable, d: Dict) -> None:
    dict_name = "movieDict"
    value = validate_entry(xref, d, dict_name, "F", REQUIRED, Version.V10)
    validate_file_specification(xref, value)
    validate_integer_array_entry(xref, d, dict_name, "Aspect", OPTIONAL, Version.V10, lambda a: len(a) == 2)
    validate_integer_entry(xref, d, dict_name, "Rotate", OPTIONAL, Version.V10, lambda i: i % 90 == 0)
    poster = validate_entry(xref, d, dict_name, "Poster", OPTIONAL, Version.V10)
    if poster is not None and not isinstance(poster, (bool, StreamDict)):
        raise TypeMismatchError(
            f"invalid poster {type_name(poster)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Poster"
        )


# -- Media clips -------------------------------------------------------------


def _validate_media_permissions(xref: XRefTable, d: Dict, dict_name: str, since: Version) -> None:
    permissions = validate_dict_entry(xref, d, dict_name, "P", OPTIONAL, since)
    if permissions is None:
        return
    validate_name_entry(xref, permissions, "mediaPermissionsDict", "Type", OPTIONAL, since, one_of("MediaPermissions"))
    validate_string_entry(
        xref,
        permissions,
        "mediaPermissionsDict",
        "TF",
        OPTIONAL,
        since,
        one_of("TEMPNEVER", "TEMPEXTRACT", "TEMPACCESS", "TEMPALWAYS"),
    )


def _validate_media_clip_data(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "mediaClipDataDict"
    data = validate_entry(xref, d, dict_name, "D", REQUIRED, since)
    if not isinstance(data, StreamDict):
        validate_file_specification(xref, data)
    validate_string_entry(xref, d, dict_name, "CT", OPTIONAL, since)
    _validate_media_permissions(xref, d, dict_name, since)
    validate_string_array_entry(xref, d, dict_name, "Alt", OPTIONAL, since)
    validate_dict_entry(xref, d, dict_name, "PL", OPTIONAL, since)
    for key in ("MH", "BE"):
        sub = validate_dict_entry(xref, d, dict_name, key, OPTIONAL, since)
        if sub is not None:
            validate_string_entry(xref, sub, f"{dict_name}.{key}", "BU", OPTIONAL, since)


def _validate_media_offset(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "mediaOffsetDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("MediaOffset"))
    kind = validate_name_entry(xref, d, dict_name, "S", REQUIRED, since, one_of("T", "F", "M"))
    if kind == "T":
        timespan = validate_dict_entry(xref, d, dict_name, "T", REQUIRED, since)
        _validate_timespan(xref, timespan, since)
    elif kind == "F":
        validate_integer_entry(xref, d, dict_name, "F", REQUIRED, since, lambda i: i >= 0)
    else:
        validate_string_entry(xref, d, dict_name, "M", REQUIRED, since)


def _validate_timespan(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "timespanDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("Timespan"))
    validate_name_entry(xref, d, dict_name, "S", REQUIRED, since, one_of("S"))
    validate_number_entry(xref, d, dict_name, "V", REQUIRED, since)


def _validate_media_clip_section(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "mediaClipSectionDict"
    clip = validate_dict_entry(xref, d, dict_name, "D", REQUIRED, since)
    validate_media_clip_dict(xref, clip, since)
    validate_string_array_entry(xref, d, dict_name, "Alt", OPTIONAL, since)
    for key in ("MH", "BE"):
        sub = validate_dict_entry(xref, d, dict_name, key, OPTIONAL, since)
        if sub is None:
            continue
        for bound in ("B", "E"):
            offset = validate_dict_entry(xref, sub, f"{dict_name}.{key}", bound, OPTIONAL, since)
            if offset is not None:
                _validate_media_offset(xref, offset, since)


def validate_media_clip_dict(xref: XRefTable, d: Dict, since: Version = Version.V15) -> None:
    dict_name = "mediaClipDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("MediaClip"))
    kind = validate_name_entry(xref, d, dict_name, "S", REQUIRED, since, one_of("MCD", "MCS"))
    validate_string_entry(xref, d, dict_name, "N", OPTIONAL, since)
    if kind == "MCD":
        _validate_media_clip_data(xref, d, since)
    else:
        _validate_media_clip_section(xref, d, since)


# -- Renditions --------------------------------------------------------------


def _validate_media_criteria(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "mediaCriteriaDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("MediaCriteria"))
    for key in ("A", "C", "O", "S"):
        validate_boolean_entry(xref, d, dict_name, key, OPTIONAL, since)
    validate_integer_entry(xref, d, dict_name, "R", OPTIONAL, since)
    bit_depth = validate_dict_entry(xref, d, dict_name, "D", OPTIONAL, since)
    if bit_depth is not None:
        validate_integer_entry(xref, bit_depth, "minBitDepthDict", "V", REQUIRED, since, lambda i: i >= 0)
        validate_integer_entry(xref, bit_depth, "minBitDepthDict", "M", OPTIONAL, since)
    screen = validate_dict_entry(xref, d, dict_name, "Z", OPTIONAL, since)
    if screen is not None:
        validate_integer_array_entry(xref, screen, "minScreenSizeDict", "V", REQUIRED, since, lambda a: len(a) == 2)
        validate_integer_entry(xref, screen, "minScreenSizeDict", "M", OPTIONAL, since)
    validate_array_entry(xref, d, dict_name, "V", OPTIONAL, since)
    validate_name_array_entry(xref, d, dict_name, "P", OPTIONAL, since, lambda a: len(a) in (1, 2))
    validate_string_array_entry(xref, d, dict_name, "L", OPTIONAL, since)


def _validate_play_params(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "mediaPlayParamsDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("MediaPlayParams"))
    validate_dict_entry(xref, d, dict_name, "PL", OPTIONAL, since)
    for key in ("MH", "BE"):
        sub = validate_dict_entry(xref, d, dict_name, key, OPTIONAL, since)
        if sub is None:
            continue
        name = f"{dict_name}.{key}"
        validate_integer_entry(xref, sub, name, "V", OPTIONAL, since, in_range(0, 100))
        validate_boolean_entry(xref, sub, name, "C", OPTIONAL, since)
        validate_integer_entry(xref, sub, name, "F", OPTIONAL, since, in_range(0, 5))
        validate_dict_entry(xref, sub, name, "D", OPTIONAL, since)
        validate_boolean_entry(xref, sub, name, "A", OPTIONAL, since)
        validate_number_entry(xref, sub, name, "RC", OPTIONAL, since)


def _validate_screen_params(xref: XRefTable, d: Dict, since: Version) -> None:
    dict_name = "mediaScreenParamsDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("MediaScreenParams"))
    for key in ("MH", "BE"):
        sub = validate_dict_entry(xref, d, dict_name, key, OPTIONAL, since)
        if sub is None:
            continue
        name = f"{dict_name}.{key}"
        window = validate_integer_entry(xref, sub, name, "W", OPTIONAL, since, one_of(0, 1, 2, 3))
        validate_number_array_entry(xref, sub, name, "B", OPTIONAL, since, lambda a: len(a) == 3)
        validate_number_entry(xref, sub, name, "O", OPTIONAL, since, in_range(0.0, 1.0))
        validate_integer_entry(xref, sub, name, "M", OPTIONAL, since)
        floating = validate_dict_entry(xref, sub, name, "F", window == 0, since)
        if floating is not None:
            fw = "floatingWindowParamsDict"
            validate_integer_array_entry(xref, floating, fw, "D", REQUIRED, since, lambda a: len(a) == 2)
            validate_integer_entry(xref, floating, fw, "RT", OPTIONAL, since, one_of(0, 1, 2, 3))
            validate_integer_entry(xref, floating, fw, "P", OPTIONAL, since, in_range(0, 8))
            validate_integer_entry(xref, floating, fw, "O", OPTIONAL, since, one_of(0, 1, 2))
            validate_boolean_entry(xref, floating, fw, "T", OPTIONAL, since)
            validate_boolean_entry(xref, floating, fw, "UC", OPTIONAL, since)
            validate_integer_entry(xref, floating, fw, "R", OPTIONAL, since, one_of(0, 1, 2))
            validate_string_array_entry(xref, floating, fw, "TT", OPTIONAL, since)


def validate_rendition_dict(xref: XRefTable, d: Dict, since: Version = Version.V15) -> None:
    """Validate a media (``MR``) or selector (``SR``) rendition."""

    dict_name = "renditionDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("Rendition"))
    kind = validate_name_entry(xref, d, dict_name, "S", REQUIRED, since, one_of("MR", "SR"))
    validate_string_entry(xref, d, dict_name, "N", OPTIONAL, since)
    for key in ("MH", "BE"):
        sub = validate_dict_entry(xref, d, dict_name, key, OPTIONAL, since)
        if sub is None:
            continue
        criteria = validate_dict_entry(xref, sub, f"{dict_name}.{key}", "C", OPTIONAL, since)
        if criteria is not None:
            _validate_media_criteria(xref, criteria, since)

    if kind == "MR":
        clip = validate_dict_entry(xref, d, dict_name, "C", OPTIONAL, since)
        if clip is not None:
            validate_media_clip_dict(xref, clip, since)
        params = validate_dict_entry(xref, d, dict_name, "P", OPTIONAL, since)
        if params is not None:
            _validate_play_params(xref, params, since)
        screen = validate_dict_entry(xref, d, dict_name, "SP", OPTIONAL, since)
        if screen is not None:
            _validate_screen_params(xref, screen, since)
        return

    renditions = validate_array_entry(xref, d, dict_name, "R", REQUIRED, since)
    for item in renditions:
        if isinstance(item, IndirectRef):
            if xref.is_valid(item):
                continue
            xref.set_valid(item)
        value = xref.dereference(item)
        if value is None:
            continue
        if not is_dict(value):
            raise TypeMismatchError(
                f"selector rendition entry must be a dict, got {type_name(value)}",
                obj_nr=xref.cur_obj,
                dict_name=dict_name,
                entry_name="R",
            )
        validate_rendition_dict(xref, value, since)
