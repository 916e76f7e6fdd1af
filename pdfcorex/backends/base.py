"""Backend protocols for reading and writing PDF objects."""

from __future__ import annotations

from typing import Any, BinaryIO, Protocol

from ..types import Configuration
from ..xref import XRefTable


class Lexer(Protocol):
    """Capability that turns PDF bytes into an xref table of typed objects."""

    def read_xref_table(self) -> XRefTable:
        """Build the xref table, leaving object values to be loaded lazily."""

    def read_object_at(self, obj_nr: int, generation: int) -> Any:
        """Load and convert the value of a single object."""


class Writer(Protocol):
    """Capability that serializes an xref table back into PDF bytes."""

    def write(self, xref: XRefTable, stream: BinaryIO, config: Configuration | None = None) -> int:
        """Write the document and return the number of bytes written."""
