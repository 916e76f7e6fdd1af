"""
pdfcorex - Core engine for reading, validating and writing PDF documents.

The object graph of a document lives in an :class:`XRefTable`.  A
:class:`Context` reads a document into one, validates it against ISO 32000-1
in strict or relaxed mode, optionally optimises it and writes it back.

Quick Start:
    >>> from pdfcorex import Configuration, validate_file
    >>> ctx = validate_file('input.pdf', Configuration(validation_mode='strict'))
    >>> ctx.statistics.pages

Main Classes:
    - Context: Read, validate, optimise and write one document
    - XRefTable: Object storage and dereferencing
    - Configuration: Validation mode and write options

Fonts:
    - pdfcorex.font: TrueType parsing, subsetting and the font cache

Exceptions:
    - PdfCoreError: Base exception, see :mod:`pdfcorex.exceptions`

For CLI usage, use the 'pdfcorex' command after installation.
"""

# Core classes
from pdfcorex.context import Context, extract_page, optimize_file, validate_file
from pdfcorex.xref import XRefTable

# Data types
from pdfcorex.types import Configuration, Statistics, ValidationMode, Version, parse_version
from pdfcorex.optimize import OptimizationResult

# Exceptions
from pdfcorex.exceptions import (
    PdfCoreError,
    MissingRequiredError,
    TypeMismatchError,
    ValueRejectedError,
    VersionViolationError,
    DanglingRefError,
    CorruptStructureError,
    UnsupportedFilterError,
    CorruptGlyfError,
    InvalidEncodingError,
    UnsupportedFontError,
    FontCacheError,
    EncryptedDocumentError,
    PdfReadError,
)

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "Context",
    "XRefTable",
    # Data types
    "Configuration",
    "Statistics",
    "ValidationMode",
    "Version",
    "OptimizationResult",
    "parse_version",
    # Convenience functions
    "validate_file",
    "optimize_file",
    "extract_page",
    # Exceptions
    "PdfCoreError",
    "MissingRequiredError",
    "TypeMismatchError",
    "ValueRejectedError",
    "VersionViolationError",
    "DanglingRefError",
    "CorruptStructureError",
    "UnsupportedFilterError",
    "CorruptGlyfError",
    "InvalidEncodingError",
    "UnsupportedFontError",
    "FontCacheError",
    "EncryptedDocumentError",
    "PdfReadError",
    # Version info
    "__version__",
]
