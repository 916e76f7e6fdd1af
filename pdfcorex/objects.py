"""Typed PDF primitives and containers.

Null, booleans and numbers use the Python builtins (``None``, ``bool``, ``int``,
``float``).  Names, strings and containers get thin subclasses of the matching
builtin so that they compare naturally while keeping their PDF identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from pypdf.generic import decode_pdfdocencoding, encode_pdfdocencoding

from .exceptions import InvalidEncodingError

__all__ = [
    "Name",
    "StringLiteral",
    "HexLiteral",
    "Array",
    "Dict",
    "StreamDict",
    "IndirectRef",
    "FilterStage",
    "as_string",
    "encode_string",
    "filter_pipeline",
    "is_dict",
    "is_number",
    "is_string",
    "iter_pairs",
    "type_name",
    "escape_file_spec_string",
    "unescape_file_spec_string",
]

_UTF16_BOM = b"\xfe\xff"


class Name(str):
    """A PDF name, stored without its leading solidus."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"/{str(self)}"


class StringLiteral(bytes):
    """Raw bytes of a ``( )`` string with escape sequences resolved."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"StringLiteral({bytes(self)!r})"


class HexLiteral(bytes):
    """Raw bytes of a ``< >`` string."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"HexLiteral({bytes(self).hex()})"


class Array(list):
    """An ordered sequence of PDF objects."""

    __slots__ = ()


class Dict(dict):
    """Mapping from entry names (without solidus) to PDF objects."""

    def find(self, key: str) -> tuple[Any, bool]:
        if key in self:
            return self[key], True
        return None, False

    def type(self) -> str | None:
        return self.name_entry("Type")

    def subtype(self) -> str | None:
        return self.name_entry("Subtype")

    def name_entry(self, key: str) -> str | None:
        value = self.get(key)
        return str(value) if isinstance(value, Name) else None

    def int_entry(self, key: str) -> int | None:
        value = self.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return None

    def boolean_entry(self, key: str) -> bool | None:
        value = self.get(key)
        return value if isinstance(value, bool) else None

    def indirect_ref_entry(self, key: str) -> "IndirectRef | None":
        value = self.get(key)
        return value if isinstance(value, IndirectRef) else None

    def array_entry(self, key: str) -> Array | None:
        value = self.get(key)
        return value if isinstance(value, Array) else None

    def dict_entry(self, key: str) -> "Dict | None":
        value = self.get(key)
        return value if is_dict(value) else None

    def string_entry(self, key: str) -> str | None:
        value = self.get(key)
        if isinstance(value, (StringLiteral, HexLiteral)):
            return as_string(value)
        return None

    def copy(self) -> "Dict":
        return type(self)(self)


class StreamDict(Dict):
    """A stream dictionary together with its encoded and decoded payload."""

    def __init__(self, *args: Any, raw: bytes | None = None, content: bytes | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.raw = raw
        self.content = content

    def copy(self) -> "StreamDict":
        return StreamDict(self, raw=self.raw, content=self.content)

    @property
    def is_decoded(self) -> bool:
        return self.content is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamDict):
            return False
        return dict.__eq__(self, other) and self.raw == other.raw

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True, slots=True)
class IndirectRef:
    """Pointer ``obj_nr gen_nr R`` into the cross-reference table."""

    obj_nr: int
    gen_nr: int = 0

    def __str__(self) -> str:
        return f"{self.obj_nr} {self.gen_nr} R"


@dataclass(frozen=True, slots=True)
class FilterStage:
    """One ``(filter name, decode parameters)`` step of a stream pipeline."""

    name: str
    parms: Dict | None = None


# -- Helpers -----------------------------------------------------------------


def is_dict(value: Any) -> bool:
    return isinstance(value, Dict) and not isinstance(value, StreamDict)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_string(value: Any) -> bool:
    return isinstance(value, (StringLiteral, HexLiteral))


def type_name(value: Any) -> str:
    """Human readable PDF type name used in error messages."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, StreamDict):
        return "stream"
    for cls, label in (
        (Name, "name"),
        (StringLiteral, "string"),
        (HexLiteral, "hex string"),
        (Array, "array"),
        (Dict, "dict"),
        (IndirectRef, "indirect reference"),
    ):
        if isinstance(value, cls):
            return label
    return type(value).__name__


def as_string(value: bytes) -> str:
    """Decode a string or hex literal into text.

    A payload starting with the UTF-16BE byte order mark is decoded as UTF-16BE,
    anything else as PDFDocEncoding.
    """

    data = bytes(value)
    if data.startswith(_UTF16_BOM):
        if len(data) % 2:
            raise InvalidEncodingError(f"odd length UTF-16BE string: {data!r}")
        try:
            return data[2:].decode("utf-16-be")
        except UnicodeDecodeError as exc:
            raise InvalidEncodingError(f"invalid UTF-16BE string: {data!r}") from exc
    return decode_pdfdocencoding(data)


def encode_string(text: str) -> StringLiteral:
    """Encode text as PDFDocEncoding, falling back to UTF-16BE with BOM."""

    try:
        return StringLiteral(encode_pdfdocencoding(text))
    except UnicodeEncodeError:
        return StringLiteral(_UTF16_BOM + text.encode("utf-16-be"))


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, Array):
        return list(value)
    return [value]


def filter_pipeline(stream_dict: StreamDict, resolve: Any = None) -> list[FilterStage]:
    """Return the ordered ``/Filter`` and ``/DecodeParms`` stages of a stream.

    ``resolve`` dereferences indirect objects and defaults to the identity.
    """

    resolve = resolve or (lambda obj: obj)
    filters = _as_list(resolve(stream_dict.get("Filter")))
    parms = _as_list(resolve(stream_dict.get("DecodeParms")))
    stages = []
    for index, name in enumerate(filters):
        name = resolve(name)
        parm = resolve(parms[index]) if index < len(parms) else None
        stages.append(FilterStage(str(name), parm if is_dict(parm) else None))
    return stages


def iter_pairs(array: Array) -> Iterator[tuple[Any, Any]]:
    """Yield ``(key, value)`` pairs of a flat key/value array."""

    for index in range(0, len(array) - 1, 2):
        yield array[index], array[index + 1]


def escape_file_spec_string(components: list[str]) -> str:
    """Join path components into the simple file specification form.

    Components are separated by ``/``; a solidus inside a component is escaped
    as ``\\/``.
    """

    return "/".join(part.replace("/", "\\/") for part in components)


def unescape_file_spec_string(spec: str) -> list[str]:
    """Split a simple file specification string into its components."""

    components: list[str] = []
    current = []
    index = 0
    while index < len(spec):
        char = spec[index]
        if char == "\\" and index + 1 < len(spec) and spec[index + 1] == "/":
            current.append("/")
            index += 2
            continue
        if char == "/":
            components.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    components.append("".join(current))
    return components
