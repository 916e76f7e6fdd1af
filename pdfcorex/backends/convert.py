"""Conversion between pypdf generic objects and the pdfcorex object model."""

from __future__ import annotations

from typing import Any

from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    ByteStringObject,
    DictionaryObject,
    EncodedStreamObject,
    DecodedStreamObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    PdfObject,
    StreamObject,
    TextStringObject,
    create_string_object,
)

from ..objects import Array, Dict, HexLiteral, IndirectRef, Name, StreamDict, StringLiteral

__all__ = ["from_pypdf", "to_pypdf"]


def _text_bytes(value: TextStringObject) -> bytes:
    try:
        return bytes(value.original_bytes)
    except Exception:  # pypdf raises a bare Exception when it lost the source bytes
        return bytes(value.get_encoded_bytes())


def from_pypdf(value: Any) -> Any:
    """Convert a pypdf object tree into pdfcorex objects.

    Indirect objects become :class:`IndirectRef` and are not followed.
    """

    if value is None or isinstance(value, NullObject):
        return None
    if isinstance(value, IndirectObject):
        return IndirectRef(value.idnum, value.generation)
    if isinstance(value, BooleanObject):
        return bool(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, NameObject):
        return Name(str(value)[1:])
    if isinstance(value, TextStringObject):
        return StringLiteral(_text_bytes(value))
    if isinstance(value, ByteStringObject):
        return HexLiteral(bytes(value))
    if isinstance(value, (NumberObject, int)):
        return int(value)
    if isinstance(value, (FloatObject, float)):
        return float(value)
    if isinstance(value, StreamObject):
        stream = StreamDict(raw=bytes(value._data))
        for key, item in value.items():
            stream[str(key)[1:]] = from_pypdf(item)
        return stream
    if isinstance(value, DictionaryObject):
        result = Dict()
        for key, item in value.items():
            result[str(key)[1:]] = from_pypdf(item)
        return result
    if isinstance(value, ArrayObject):
        return Array(from_pypdf(item) for item in value)
    if isinstance(value, str):
        return StringLiteral(value.encode("latin-1", "replace"))
    if isinstance(value, bytes):
        return HexLiteral(value)
    return value


def to_pypdf(value: Any) -> PdfObject:
    """Convert a pdfcorex object tree into pypdf generic objects."""

    if value is None:
        return NullObject()
    if isinstance(value, IndirectRef):
        return IndirectObject(value.obj_nr, value.gen_nr, None)
    if isinstance(value, bool):
        return BooleanObject(value)
    if isinstance(value, int):
        return NumberObject(value)
    if isinstance(value, float):
        return FloatObject(value)
    if isinstance(value, Name):
        return NameObject("/" + str(value))
    if isinstance(value, StringLiteral):
        return create_string_object(bytes(value), forced_encoding="latin-1")
    if isinstance(value, HexLiteral):
        return ByteStringObject(bytes(value))
    if isinstance(value, StreamDict):
        stream: StreamObject = EncodedStreamObject() if "Filter" in value else DecodedStreamObject()
        for key, item in value.items():
            if key == "Length":
                continue
            stream[NameObject("/" + key)] = to_pypdf(item)
        stream._data = value.raw if value.raw is not None else (value.content or b"")
        return stream
    if isinstance(value, Dict):
        result = DictionaryObject()
        for key, item in value.items():
            result[NameObject("/" + key)] = to_pypdf(item)
        return result
    if isinstance(value, (Array, list, tuple)):
        return ArrayObject(to_pypdf(item) for item in value)
    if isinstance(value, str):
        return create_string_object(value)
    if isinstance(value, bytes):
        return ByteStringObject(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to a PDF object")
