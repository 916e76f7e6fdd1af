"""Structural validation of a document's object graph."""

from __future__ import annotations

import logging

from ..xref import XRefTable
from .catalog import validate_root_object
from .destinations import Destination, decode_destination_array, encode_destination_array
from .info import DocumentInfo, validate_document_info

__all__ = [
    "Destination",
    "DocumentInfo",
    "decode_destination_array",
    "encode_destination_array",
    "validate_root_object",
    "validate_xref_table",
]

LOGGER = logging.getLogger("pdfcorex.validate")


def validate_xref_table(xref: XRefTable) -> DocumentInfo | None:
    """Validate the document held by ``xref``.

    The walk starts over from scratch: markers, cursors, statistics, repairs and
    warnings of an earlier run are discarded.  Repairs are applied in place, so a
    second relaxed run over the same table reports none.
    """

    xref.reset_walk_state()
    xref.repairs.clear()
    xref.warnings.clear()
    xref.count_slots()
    LOGGER.info("validating %r", xref)

    validate_root_object(xref)
    info = validate_document_info(xref)

    LOGGER.info(
        "validation finished: %d pages, %d repairs, %d warnings",
        xref.stats.pages,
        len(xref.repairs),
        len(xref.warnings),
    )
    return info
