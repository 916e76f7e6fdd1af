"""Context orchestrator driving read, validate, optimise and write."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO

from .backends import read_xref_table, write_xref_table
from .exceptions import ValueRejectedError
from .nametree import NameTree
from .optimize import OptimizationResult, optimize_xref_table
from .types import AnnotationRecord, Configuration, Statistics, Version
from .validate import DocumentInfo, validate_xref_table
from .xref import XRefTable

__all__ = ["Context", "validate_file", "optimize_file", "extract_page"]

LOGGER = logging.getLogger("pdfcorex.context")

PathLike = str | Path


class Context:
    """One document and everything a processing run learns about it.

    A context owns its xref table and configuration.  It is not safe to share
    one context between threads; use one context per document instead.
    """

    def __init__(self, xref: XRefTable, config: Configuration | None = None) -> None:
        self.xref = xref
        self.config = config or xref.config
        self.xref.config = self.config
        self.info: DocumentInfo | None = None
        self.validated = False

    @classmethod
    def read(cls, source: PathLike | bytes | BinaryIO, config: Configuration | None = None) -> "Context":
        config = config or Configuration()
        LOGGER.debug("reading %s", source if isinstance(source, (str, Path)) else type(source).__name__)
        return cls(read_xref_table(source, config), config)

    # -- processing ---------------------------------------------------------

    def validate(self) -> "Context":
        """Validate the document; raises on the first fatal error."""

        self.info = validate_xref_table(self.xref)
        self.validated = True
        return self

    def optimize(self) -> OptimizationResult:
        if not self.validated:
            self.validate()
        return optimize_xref_table(self.xref)

    def write(self, target: PathLike | BinaryIO) -> int:
        if self.config.optimize:
            self.optimize()
        written = write_xref_table(self.xref, target, self.config)
        LOGGER.info("wrote %d bytes", written)
        return written

    # -- results ------------------------------------------------------------

    @property
    def version(self) -> Version:
        return self.xref.version()

    @property
    def statistics(self) -> Statistics:
        return self.xref.stats

    @property
    def page_count(self) -> int:
        return self.xref.page_count

    @property
    def page_annots(self) -> dict[int, dict[str, dict[int, AnnotationRecord]]]:
        return self.xref.page_annots

    @property
    def uris(self) -> dict[int, dict[str, str]]:
        return self.xref.uris

    @property
    def repairs(self) -> list[str]:
        return self.xref.repairs

    @property
    def warnings(self) -> list[str]:
        return self.xref.warnings

    def name_ref(self, name: str) -> NameTree:
        return self.xref.name_ref(name)

    def __repr__(self) -> str:
        return f"Context({self.xref!r}, validated={self.validated})"


# -- Convenience functions ----------------------------------------------------


def _config(config: Configuration | None, **overrides: Any) -> Configuration:
    values = {name: getattr(config or Configuration(), name) for name in Configuration.__dataclass_fields__}
    values.update(overrides)
    return Configuration(**values)


def validate_file(path: PathLike, config: Configuration | None = None) -> Context:
    """Read and validate ``path`` and return the resulting context."""

    return Context.read(path, config).validate()


def optimize_file(source: PathLike, destination: PathLike, config: Configuration | None = None) -> OptimizationResult:
    """Validate and optimise ``source`` and write the result to ``destination``."""

    ctx = Context.read(source, _config(config, optimize=False)).validate()
    result = ctx.optimize()
    ctx.write(destination)
    LOGGER.info("optimised %s into %s", source, destination)
    return result


def extract_page(
    source: PathLike,
    destination: PathLike,
    page_nr: int,
    config: Configuration | None = None,
) -> Path:
    """Write page ``page_nr`` (1-based) of ``source`` as a one-page document."""

    ctx = Context.read(source, _config(config, extract_page_nr=page_nr)).validate()
    if page_nr > ctx.page_count:
        raise ValueRejectedError(f"page {page_nr} out of range (document has {ctx.page_count} pages)")
    ctx.write(destination)
    return Path(destination)
