"""Typed lookups over the cross-reference table.

The helpers resolve indirection, check the object type, gate on the PDF version
and apply an optional predicate.  They are mixed into
:class:`pdfcorex.xref.XRefTable`.
"""

from __future__ import annotations

from typing import Any, Callable

from .exceptions import TypeMismatchError, ValueRejectedError
from .objects import (
    Array,
    Dict,
    HexLiteral,
    Name,
    StreamDict,
    StringLiteral,
    as_string,
    is_dict,
    is_number,
    type_name,
)
from .types import Version

__all__ = ["DereferenceMixin"]


class DereferenceMixin:
    """Typed dereferencing on top of ``dereference`` and ``validate_version``."""

    cur_obj: int

    def dereference(self, obj: Any) -> Any:  # pragma: no cover - provided by XRefTable
        raise NotImplementedError

    def validate_version(self, feature: str, since: Version) -> None:  # pragma: no cover
        raise NotImplementedError

    def _mismatch(self, expected: str, value: Any) -> TypeMismatchError:
        return TypeMismatchError(f"expected {expected}, got {type_name(value)}", obj_nr=self.cur_obj)

    def dereference_dict(self, obj: Any) -> Dict | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if not is_dict(value):
            raise self._mismatch("dict", value)
        return value

    def dereference_stream_dict(self, obj: Any) -> StreamDict | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if not isinstance(value, StreamDict):
            raise self._mismatch("stream", value)
        return value

    def dereference_dict_or_stream(self, obj: Any) -> Dict | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if not isinstance(value, Dict):
            raise self._mismatch("dict or stream", value)
        return value

    def dereference_array(self, obj: Any) -> Array | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if not isinstance(value, Array):
            raise self._mismatch("array", value)
        return value

    def dereference_integer(self, obj: Any) -> int | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._mismatch("integer", value)
        return value

    def dereference_number(self, obj: Any) -> float | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if not is_number(value):
            raise self._mismatch("number", value)
        return float(value)

    def dereference_boolean(self, obj: Any) -> bool | None:
        value = self.dereference(obj)
        if value is None:
            return None
        if not isinstance(value, bool):
            raise self._mismatch("boolean", value)
        return value

    def dereference_name(
        self,
        obj: Any,
        since: Version = Version.V10,
        predicate: Callable[[str], bool] | None = None,
    ) -> Name | None:
        value = self.dereference(obj)
        if value is None:
            return None
        self.validate_version("name", since)
        if not isinstance(value, Name):
            raise self._mismatch("name", value)
        if predicate is not None and not predicate(str(value)):
            raise ValueRejectedError(f"invalid name: {value!r}", obj_nr=self.cur_obj)
        return value

    def dereference_string_or_hex(
        self,
        obj: Any,
        since: Version = Version.V10,
        predicate: Callable[[str], bool] | None = None,
    ) -> str | None:
        value = self.dereference(obj)
        if value is None:
            return None
        self.validate_version("string", since)
        if not isinstance(value, (StringLiteral, HexLiteral)):
            raise self._mismatch("string", value)
        text = as_string(value)
        if predicate is not None and not predicate(text):
            raise ValueRejectedError(f"invalid string: {text!r}", obj_nr=self.cur_obj)
        return text
