"""
Object graph optimisation.

Structurally equal font dicts and image XObjects are collapsed onto one object,
references are redirected to the survivor, and every object the trailer can no
longer reach is freed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable

from .objects import Array, Dict, IndirectRef, StreamDict
from .xref import XRefTable

__all__ = ["OptimizationResult", "optimize_xref_table", "reachable_objects"]

LOGGER = logging.getLogger("pdfcorex.optimize")


@dataclass(slots=True)
class OptimizationResult:
    """
    Outcome of an optimisation run.

    Attributes:
        objects_before: In-use objects before optimising
        objects_after: In-use objects after optimising
        duplicate_fonts: Font dicts mapped onto an equal font
        duplicate_images: Image XObjects mapped onto an equal image
        freed_objects: Unreachable objects released
    """

    objects_before: int = 0
    objects_after: int = 0
    duplicate_fonts: int = 0
    duplicate_images: int = 0
    freed_objects: int = 0

    @property
    def removed_objects(self) -> int:
        return self.objects_before - self.objects_after


def _is_font(value: Any) -> bool:
    return isinstance(value, Dict) and not isinstance(value, StreamDict) and value.type() == "Font"


def _is_image(value: Any) -> bool:
    return isinstance(value, StreamDict) and value.subtype() == "Image"


def _font_key(value: Dict) -> Hashable:
    return value.subtype(), value.name_entry("BaseFont")


def _image_key(value: StreamDict) -> Hashable:
    return value.int_entry("Width"), value.int_entry("Height"), len(value.raw or b"")


def _find_duplicates(
    xref: XRefTable,
    matches: Callable[[Any], bool],
    key: Callable[[Any], Hashable],
) -> dict[int, int]:
    """Map each duplicate object number onto the lowest equal object number."""

    buckets: dict[Hashable, list[int]] = {}
    for obj_nr, value in xref.iter_objects():
        if matches(value):
            buckets.setdefault(key(value), []).append(obj_nr)

    mapping: dict[int, int] = {}
    for numbers in buckets.values():
        survivors: list[int] = []
        for obj_nr in numbers:
            for survivor in survivors:
                if xref.equal(IndirectRef(obj_nr, xref.table[obj_nr].generation), IndirectRef(survivor, xref.table[survivor].generation)):
                    mapping[obj_nr] = survivor
                    break
            else:
                survivors.append(obj_nr)
    return mapping


def _redirect(value: Any, refs: dict[int, IndirectRef]) -> Any:
    """Replace references to duplicates in place and return the (new) value."""

    if isinstance(value, IndirectRef):
        return refs.get(value.obj_nr, value)
    if isinstance(value, Dict):
        for key, item in value.items():
            value[key] = _redirect(item, refs)
    elif isinstance(value, Array):
        for index, item in enumerate(value):
            value[index] = _redirect(item, refs)
    return value


def reachable_objects(xref: XRefTable) -> set[int]:
    """Return the numbers of all objects reachable from the trailer."""

    seen: set[int] = set()
    pending: list[Any] = list(xref.trailer.values())
    while pending:
        item = pending.pop()
        if isinstance(item, IndirectRef):
            if item.obj_nr in seen or xref.is_dangling(item):
                continue
            seen.add(item.obj_nr)
            pending.append(xref.find_object(item.obj_nr))
        elif isinstance(item, Dict):
            pending.extend(item.values())
        elif isinstance(item, Array):
            pending.extend(item)
    return seen


def optimize_xref_table(xref: XRefTable) -> OptimizationResult:
    """Deduplicate fonts and images, then free unreachable objects."""

    result = OptimizationResult(objects_before=len(xref.in_use_numbers()))

    fonts = _find_duplicates(xref, _is_font, _font_key)
    images = _find_duplicates(xref, _is_image, _image_key)
    for obj_nr, survivor in fonts.items():
        LOGGER.info("repaired: font %s obj#%d mapped to obj#%d", xref.find_object(obj_nr).name_entry("BaseFont"), obj_nr, survivor)
    for obj_nr, survivor in images.items():
        LOGGER.info("repaired: image obj#%d mapped to obj#%d", obj_nr, survivor)
    result.duplicate_fonts = len(fonts)
    result.duplicate_images = len(images)

    mapping = {**fonts, **images}
    if mapping:
        refs = {obj_nr: IndirectRef(survivor, xref.table[survivor].generation) for obj_nr, survivor in mapping.items()}
        for obj_nr, value in xref.iter_objects():
            if obj_nr not in mapping:
                _redirect(value, refs)
        _redirect(xref.trailer, refs)
        for obj_nr in mapping:
            xref.free_object(obj_nr)

    reachable = reachable_objects(xref)
    for obj_nr in xref.in_use_numbers():
        if obj_nr not in reachable:
            xref.free_object(obj_nr)
            result.freed_objects += 1

    result.objects_after = len(xref.in_use_numbers())
    xref.count_slots()
    LOGGER.info(
        "optimised: %d duplicate fonts, %d duplicate images, %d unreachable objects freed",
        result.duplicate_fonts,
        result.duplicate_images,
        result.freed_objects,
    )
    return result
