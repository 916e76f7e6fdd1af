"""Backend abstractions for pdfcorex."""

from .base import Lexer, Writer
from .pypdf_backend import PypdfLexer, PypdfWriter, read_xref_table, write_xref_table

__all__ = [
    "Lexer",
    "Writer",
    "PypdfLexer",
    "PypdfWriter",
    "read_xref_table",
    "write_xref_table",
]
