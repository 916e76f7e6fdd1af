"""
Font installation and the on-disk font cache.

Installing a TrueType font parses it once and stores the resulting
:class:`~pdfcorex.font.truetype.TTFLight` record, which carries the complete font
file, under its PostScript name.  Every cache file is read back and compared
with the record that was written before the install counts as done.
"""

from __future__ import annotations

import logging
import pickle
from pathlib import Path
from typing import Iterable

from ..exceptions import FontCacheError
from ..types import DEFAULT_FONT_DIR
from ..utils import resolve_path
from .subset import subset
from .truetype import TTFLight, parse_font_file

__all__ = [
    "CACHE_SUFFIX",
    "install_true_type_font",
    "installed_fonts",
    "load_font",
    "subset_installed_font",
]

LOGGER = logging.getLogger("pdfcorex.font")

CACHE_SUFFIX = ".ttfl"


def _font_dir(font_dir: str | Path | None) -> Path:
    return resolve_path(font_dir or DEFAULT_FONT_DIR)


def _cache_path(font_dir: Path, name: str) -> Path:
    return font_dir / f"{name}{CACHE_SUFFIX}"


def _write_cache(path: Path, font: TTFLight) -> None:
    with path.open("wb") as handle:
        pickle.dump(font, handle, protocol=pickle.HIGHEST_PROTOCOL)


def _read_cache(path: Path) -> TTFLight:
    try:
        with path.open("rb") as handle:
            font = pickle.load(handle)
    except (pickle.UnpicklingError, EOFError, AttributeError) as exc:
        raise FontCacheError(f"unreadable font cache file {path.name}: {exc}") from exc
    if not isinstance(font, TTFLight):
        raise FontCacheError(f"font cache file {path.name} holds {type(font).__name__}")
    return font


def install_true_type_font(
    font_path: str | Path,
    font_dir: str | Path | None = None,
    strict: bool = False,
) -> list[str]:
    """Install a TTF or every font of a TTC into ``font_dir``.

    Args:
        font_path: The font file to install
        font_dir: Cache directory, created if needed
        strict: Reject table checksum mismatches instead of fixing them

    Returns:
        The PostScript names of the installed fonts.

    Raises:
        FontCacheError: If a cache file does not read back equal to what was written
    """

    source = resolve_path(font_path)
    target = _font_dir(font_dir)
    target.mkdir(parents=True, exist_ok=True)

    names = []
    for font in parse_font_file(source.read_bytes(), strict=strict):
        path = _cache_path(target, font.postscript_name)
        _write_cache(path, font)
        if _read_cache(path) != font:
            path.unlink(missing_ok=True)
            raise FontCacheError(f"{source.name} can't be installed: cache round trip mismatch for {font.postscript_name}")
        LOGGER.info("installed font %s from %s", font.postscript_name, source.name)
        names.append(font.postscript_name)
    return names


def installed_fonts(font_dir: str | Path | None = None) -> list[str]:
    """Return the sorted PostScript names of all cached fonts."""

    directory = _font_dir(font_dir)
    if not directory.is_dir():
        return []
    return sorted(path.stem for path in directory.glob(f"*{CACHE_SUFFIX}"))


def load_font(name: str, font_dir: str | Path | None = None) -> TTFLight:
    path = _cache_path(_font_dir(font_dir), name)
    if not path.is_file():
        raise FontCacheError(f"font {name} is not installed")
    return _read_cache(path)


def subset_installed_font(name: str, gids: Iterable[int], font_dir: str | Path | None = None) -> bytes:
    """Subset a cached font by PostScript name."""

    font = load_font(name, font_dir)
    return subset(font.font_file, gids)
