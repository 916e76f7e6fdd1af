"""Document information dictionary (trailer ``/Info``)."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..exceptions import InvalidEncodingError, MissingRequiredError, PdfCoreError
from ..types import Version
from ..xref import XRefTable
from .entries import validate_date

__all__ = ["DocumentInfo", "validate_document_info_dict", "validate_document_info"]

LOGGER = logging.getLogger("pdfcorex.validate")

_TEXT_KEYS = {
    "Title": ("title", Version.V11),
    "Author": ("author", Version.V10),
    "Subject": ("subject", Version.V11),
    "Creator": ("creator", Version.V10),
    "Producer": ("producer", Version.V10),
}


@dataclass(slots=True)
class DocumentInfo:
    """Values collected from the info dict."""

    title: str | None = None
    author: str | None = None
    subject: str | None = None
    keywords: list[str] = field(default_factory=list)
    creator: str | None = None
    producer: str | None = None
    creation_date: datetime | None = None
    mod_date: datetime | None = None
    trapped: str | None = None
    properties: dict[str, str] = field(default_factory=dict)


def _validate_trapped(xref: XRefTable, value: Any) -> str:
    allowed = ("True", "False", "Unknown")
    if xref.relaxed:
        value = xref.dereference(value)
        if isinstance(value, bool):
            return str(value)
        name = xref.dereference_name(value, Version.V13)
        if name is not None and name.capitalize() in allowed:
            return name.capitalize()
    return xref.dereference_name(value, Version.V13, lambda s: s in allowed)


def _validate_entry(xref: XRefTable, info: DocumentInfo, key: str, value: Any) -> None:
    if key in _TEXT_KEYS:
        attr, since = _TEXT_KEYS[key]
        setattr(info, attr, xref.dereference_string_or_hex(value, since))
    elif key == "Keywords":
        text = xref.dereference_string_or_hex(value, Version.V11) or ""
        info.keywords = [word.strip() for word in re.split(r"[,;\r]", text) if word.strip()]
    elif key in ("CreationDate", "ModDate"):
        date = validate_date(xref, value, Version.V10)
        if key == "CreationDate":
            info.creation_date = date
        else:
            info.mod_date = date
    elif key == "Trapped":
        info.trapped = _validate_trapped(xref, value)
    else:
        text = xref.dereference_string_or_hex(value, Version.V10)
        if text:
            info.properties[key] = text


def validate_document_info_dict(xref: XRefTable, obj: Any) -> DocumentInfo | None:
    """Validate an info dict.

    A relaxed walk drops entries of the wrong type and reports each as repaired.
    """

    d = xref.dereference_dict(obj)
    if d is None:
        return None
    info = DocumentInfo()
    for key in list(d):
        try:
            _validate_entry(xref, info, key, d[key])
        except InvalidEncodingError:
            LOGGER.debug("info dict %r: undecodable string, skipped", key)
        except PdfCoreError:
            if xref.strict:
                raise
            del d[key]
            xref.repaired(f'info dict "{key}"')
    return info


def validate_document_info(xref: XRefTable) -> DocumentInfo | None:
    """Validate the trailer ``/Info`` dict, if any."""

    ref = xref.trailer.get("Info")
    if ref is None:
        return None
    info = validate_document_info_dict(xref, ref)
    if info is None:
        return None
    root = xref.root_dict()
    if "PieceInfo" in root and info.mod_date is None:
        message = 'info dict with catalog "PieceInfo" but without "ModDate"'
        if xref.strict:
            raise MissingRequiredError(message, dict_name="infoDict", entry_name="ModDate")
        xref.warn(message)
    return info
