"""
Type definitions and dataclasses for pdfcorex.

This module defines the configuration surface, the PDF version model and the
records collected while a document is validated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Mapping

__all__ = [
    "ValidationMode",
    "Version",
    "parse_version",
    "Configuration",
    "AnnotationRecord",
    "Statistics",
    "DEFAULT_FONT_DIR",
]

DEFAULT_FONT_DIR = Path("~/.pdfcorex/fonts")


class ValidationMode(str, Enum):
    """How permissive the validator is."""

    STRICT = "strict"
    RELAXED = "relaxed"


class Version(IntEnum):
    """PDF versions known to the validator."""

    V10 = 10
    V11 = 11
    V12 = 12
    V13 = 13
    V14 = 14
    V15 = 15
    V16 = 16
    V17 = 17
    V20 = 20

    def __str__(self) -> str:
        return f"{self.value // 10}.{self.value % 10}"

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


def parse_version(value: str) -> Version:
    """Parse ``"1.4"``, ``"%PDF-1.4"`` or a catalog ``/Version`` name."""

    text = str(value).strip()
    if text.startswith("%PDF-"):
        text = text[5:]
    text = text.lstrip("/")
    major, _, minor = text.partition(".")
    if not (major.isdigit() and minor[:1].isdigit()):
        raise ValueError(f"Invalid PDF version: {value!r}")
    try:
        return Version(int(major) * 10 + int(minor[0]))
    except ValueError as exc:
        raise ValueError(f"Unknown PDF version: {value!r}") from exc


@dataclass(slots=True)
class Configuration:
    """Options consumed by the reader, validator, optimizer and writer."""

    validation_mode: ValidationMode = ValidationMode.RELAXED
    validate_links: bool = False
    reduced_feature_set: bool = False
    extract_page_nr: int | None = None
    font_dir: Path = DEFAULT_FONT_DIR
    optimize: bool = True
    compress_streams: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.validation_mode, ValidationMode):
            try:
                self.validation_mode = ValidationMode(str(self.validation_mode).lower())
            except ValueError as exc:
                raise ValueError(f"Unknown validation mode: {self.validation_mode!r}") from exc
        if self.extract_page_nr is not None and self.extract_page_nr < 1:
            raise ValueError("extract_page_nr must be a positive page number")
        self.font_dir = Path(self.font_dir).expanduser()

    @property
    def strict(self) -> bool:
        return self.validation_mode is ValidationMode.STRICT

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Configuration":
        known = {name for name in cls.__dataclass_fields__}
        unknown = set(mapping) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        return cls(**{key: value for key, value in mapping.items() if value is not None})


@dataclass(slots=True)
class AnnotationRecord:
    """Summary of an annotation collected during page validation."""

    subtype: str
    obj_nr: int
    page: int
    rect: tuple[float, float, float, float] | None = None
    contents: str | None = None
    name: str | None = None

    @property
    def is_direct(self) -> bool:
        return self.obj_nr <= 0


@dataclass
class Statistics:
    """
    Aggregated document statistics.

    Attributes:
        objects: Number of in-use objects in the xref table
        free_objects: Number of free slots
        compressed_objects: Number of objects living in object streams
        pages: Number of pages found walking the page tree
        root_entries: Catalog entries present in the document
        page_entries: Page dict entries seen on any page
        annotations: Annotation counts per subtype
        fonts: Font names referenced from page resources
        images: Number of image XObjects
    """

    objects: int = 0
    free_objects: int = 0
    compressed_objects: int = 0
    pages: int = 0
    root_entries: set[str] = field(default_factory=set)
    page_entries: set[str] = field(default_factory=set)
    annotations: dict[str, int] = field(default_factory=dict)
    fonts: set[str] = field(default_factory=set)
    images: int = 0

    def count_annotation(self, subtype: str) -> None:
        self.annotations[subtype] = self.annotations.get(subtype, 0) + 1
