"""
Custom exceptions for pdfcorex.

Every error raised while reading, validating, subsetting or writing a document
derives from :class:`PdfCoreError`.  Validation errors carry the object number,
dictionary name and entry name they were raised for.
"""

from __future__ import annotations


class PdfCoreError(Exception):
    """Base exception for all pdfcorex errors."""

    def __init__(
        self,
        message: str = "",
        *,
        obj_nr: int | None = None,
        dict_name: str | None = None,
        entry_name: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.obj_nr = obj_nr
        self.dict_name = dict_name
        self.entry_name = entry_name
        super().__init__(self._format())

    @property
    def default_message(self) -> str:
        return "An unknown PDF error occurred."

    def _format(self) -> str:
        location = []
        if self.obj_nr is not None:
            location.append(f"obj#{self.obj_nr}")
        if self.dict_name:
            location.append(f"dict={self.dict_name}")
        if self.entry_name:
            location.append(f"entry={self.entry_name}")
        if not location:
            return self.message
        return f"{self.message} ({' '.join(location)})"


class MissingRequiredError(PdfCoreError):
    """Raised when a required entry is absent or null."""

    @property
    def default_message(self) -> str:
        return "Required entry is missing."


class TypeMismatchError(PdfCoreError):
    """Raised when a dereferenced value has the wrong object type."""

    @property
    def default_message(self) -> str:
        return "Unexpected object type."


class ValueRejectedError(PdfCoreError):
    """Raised when a value fails a range or membership check."""

    @property
    def default_message(self) -> str:
        return "Invalid value."


class VersionViolationError(PdfCoreError):
    """Raised when a feature is used below the PDF version that introduced it."""

    @property
    def default_message(self) -> str:
        return "Feature not available in this PDF version."


class DanglingRefError(PdfCoreError):
    """Raised when an indirect reference points to a free or unknown object."""

    @property
    def default_message(self) -> str:
        return "Indirect reference points to a free or unknown object."


class CorruptStructureError(PdfCoreError):
    """Raised when the object graph is inconsistent."""

    @property
    def default_message(self) -> str:
        return "Corrupt document structure."


class UnsupportedFilterError(PdfCoreError):
    """Raised when a stream uses a codec that is not available."""

    @property
    def default_message(self) -> str:
        return "Unsupported stream filter."


class CorruptGlyfError(PdfCoreError):
    """Raised when compound glyph resolution yields inverted offsets."""

    @property
    def default_message(self) -> str:
        return "Corrupt glyf table."


class InvalidEncodingError(PdfCoreError):
    """Raised when a string payload cannot be decoded."""

    @property
    def default_message(self) -> str:
        return "Invalid string encoding."


class UnsupportedFontError(PdfCoreError):
    """Raised for font files the subsetter cannot process."""

    @property
    def default_message(self) -> str:
        return "Unsupported font file."


class FontCacheError(PdfCoreError):
    """Raised when a cached font record does not round-trip."""

    @property
    def default_message(self) -> str:
        return "Font cache entry is inconsistent."


class EncryptedDocumentError(PdfCoreError):
    """Raised when the input document is encrypted."""

    @property
    def default_message(self) -> str:
        return "PDF is encrypted and cannot be processed."


class PdfReadError(PdfCoreError):
    """Raised when the underlying reader cannot parse the input."""

    @property
    def default_message(self) -> str:
        return "Unable to read PDF file."


__all__ = [
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
]
