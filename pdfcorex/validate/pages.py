"""Page tree and page dictionaries.

The page tree is walked depth first, left to right.  ``xref.cur_page`` holds
the 1-based number of the page being validated so that annotations and links
are recorded against the right page.
"""

from __future__ import annotations

import logging

from ..exceptions import CorruptStructureError, MissingRequiredError, TypeMismatchError
from ..objects import Array, Dict, IndirectRef, StreamDict, type_name
from ..types import Version
from ..xref import XRefTable
from .actions import validate_additional_actions
from .annotations import validate_page_annotations
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_array_entry,
    validate_date_entry,
    validate_dict_entry,
    validate_entry,
    validate_indref_array_entry,
    validate_indref_entry,
    validate_integer_entry,
    validate_metadata,
    validate_name_entry,
    validate_number_entry,
    validate_rectangle_entry,
    validate_stream_dict_entry,
    validate_string_entry,
)
from .resources import validate_image_stream_dict, validate_resource_dict
from .transitions import validate_transition_dict

__all__ = ["validate_pages", "validate_page_dict"]

LOGGER = logging.getLogger("pdfcorex.validate")

_BOXES = ("CropBox", "BleedBox", "TrimBox", "ArtBox")


def _validate_contents(xref: XRefTable, page: Dict) -> None:
    value = validate_entry(xref, page, "pageDict", "Contents", OPTIONAL, Version.V10)
    if value is None or isinstance(value, StreamDict):
        return
    if not isinstance(value, Array):
        raise TypeMismatchError(
            f"expected stream or array, got {type_name(value)}", obj_nr=xref.cur_obj, dict_name="pageDict", entry_name="Contents"
        )
    for item in value:
        xref.dereference_stream_dict(item)


def _validate_box_color_info(xref: XRefTable, page: Dict) -> None:
    info = validate_dict_entry(xref, page, "pageDict", "BoxColorInfo", OPTIONAL, Version.V14)
    if info is None:
        return
    for box in ("CropBox", "BleedBox", "TrimBox", "ArtBox"):
        style = validate_dict_entry(xref, info, "boxColorInfoDict", box, OPTIONAL, Version.V14)
        if style is None:
            continue
        validate_array_entry(xref, style, "boxStyleDict", "C", OPTIONAL, Version.V14, lambda a: len(a) == 3)
        validate_number_entry(xref, style, "boxStyleDict", "W", OPTIONAL, Version.V14)
        validate_name_entry(xref, style, "boxStyleDict", "S", OPTIONAL, Version.V14, one_of("S", "D"))
        validate_array_entry(xref, style, "boxStyleDict", "D", OPTIONAL, Version.V14)


def _validate_group(xref: XRefTable, page: Dict) -> None:
    group = validate_dict_entry(xref, page, "pageDict", "Group", OPTIONAL, Version.V14)
    if group is None:
        return
    validate_name_entry(xref, group, "pageGroupDict", "Type", OPTIONAL, Version.V14, one_of("Group"))
    validate_name_entry(xref, group, "pageGroupDict", "S", REQUIRED, Version.V14, one_of("Transparency"))


def _validate_viewports(xref: XRefTable, page: Dict) -> None:
    viewports = validate_array_entry(xref, page, "pageDict", "VP", OPTIONAL, Version.V16)
    for item in viewports or ():
        viewport = xref.dereference_dict(item)
        if viewport is None:
            continue
        dict_name = "viewportDict"
        validate_name_entry(xref, viewport, dict_name, "Type", OPTIONAL, Version.V16, one_of("Viewport"))
        validate_rectangle_entry(xref, viewport, dict_name, "BBox", REQUIRED, Version.V16)
        validate_string_entry(xref, viewport, dict_name, "Name", OPTIONAL, Version.V16)
        measure = validate_dict_entry(xref, viewport, dict_name, "Measure", OPTIONAL, Version.V16)
        if measure is not None:
            validate_name_entry(xref, measure, "measureDict", "Subtype", OPTIONAL, Version.V16, one_of("RL", "GEO"))


def _validate_separation_info(xref: XRefTable, page: Dict) -> None:
    info = validate_dict_entry(xref, page, "pageDict", "SeparationInfo", OPTIONAL, Version.V13)
    if info is None:
        return
    validate_array_entry(xref, info, "separationInfoDict", "Pages", REQUIRED, Version.V13)
    validate_entry(xref, info, "separationInfoDict", "DeviceColorant", REQUIRED, Version.V13)
    validate_array_entry(xref, info, "separationInfoDict", "ColorSpace", OPTIONAL, Version.V13)


def _validate_thumbnail(xref: XRefTable, page: Dict) -> None:
    thumb = validate_stream_dict_entry(xref, page, "pageDict", "Thumb", OPTIONAL, Version.V10)
    if thumb is None:
        return
    validate_image_stream_dict(xref, thumb)


def validate_page_dict(xref: XRefTable, page: Dict, inherited: Dict) -> None:
    """Validate one page.

    ``inherited`` holds the inheritable attributes collected from the
    ancestors of the page.
    """

    dict_name = "pageDict"
    if xref.strict or "Type" in page:
        validate_name_entry(xref, page, dict_name, "Type", REQUIRED, Version.V10, one_of("Page"))
    validate_indref_entry(xref, page, dict_name, "Parent", REQUIRED, Version.V10)
    validate_date_entry(xref, page, dict_name, "LastModified", OPTIONAL, Version.V13)

    resources = page.get("Resources", inherited.get("Resources"))
    if resources is None:
        message = f"page {xref.cur_page}: missing Resources"
        if xref.strict:
            raise MissingRequiredError(message, obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Resources")
        xref.warn(message)
    else:
        validate_resource_dict(xref, resources)

    if "MediaBox" in page:
        validate_rectangle_entry(xref, page, dict_name, "MediaBox", REQUIRED, Version.V10)
    elif "MediaBox" not in inherited:
        message = f"page {xref.cur_page}: missing MediaBox"
        if xref.strict:
            raise MissingRequiredError(message, obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="MediaBox")
        xref.warn(message)
    for box in _BOXES:
        since = Version.V10 if box == "CropBox" else Version.V13
        validate_rectangle_entry(xref, page, dict_name, box, OPTIONAL, since)
    _validate_box_color_info(xref, page)
    _validate_contents(xref, page)
    validate_integer_entry(xref, page, dict_name, "Rotate", OPTIONAL, Version.V10, lambda n: n % 90 == 0)
    _validate_group(xref, page)
    _validate_thumbnail(xref, page)
    validate_indref_array_entry(xref, page, dict_name, "B", OPTIONAL, Version.V11)
    validate_number_entry(xref, page, dict_name, "Dur", OPTIONAL, Version.V11)

    transition = validate_dict_entry(xref, page, dict_name, "Trans", OPTIONAL, Version.V11)
    if transition is not None:
        validate_transition_dict(xref, transition)

    validate_page_annotations(xref, page)
    validate_additional_actions(xref, page, dict_name, "AA", OPTIONAL, Version.V12, "page")
    validate_metadata(xref, page, OPTIONAL, Version.V14)
    validate_dict_entry(xref, page, dict_name, "PieceInfo", OPTIONAL, Version.V13)
    validate_integer_entry(xref, page, dict_name, "StructParents", OPTIONAL, Version.V13)
    validate_string_entry(xref, page, dict_name, "ID", OPTIONAL, Version.V13)
    validate_number_entry(xref, page, dict_name, "PZ", OPTIONAL, Version.V13)
    _validate_separation_info(xref, page)
    validate_name_entry(xref, page, dict_name, "Tabs", OPTIONAL, Version.V15, one_of("R", "C", "S"))
    validate_name_entry(xref, page, dict_name, "TemplateInstantiated", OPTIONAL, Version.V15)
    validate_dict_entry(xref, page, dict_name, "PresSteps", OPTIONAL, Version.V15)
    validate_number_entry(xref, page, dict_name, "UserUnit", OPTIONAL, Version.V16)
    _validate_viewports(xref, page)

    xref.stats.page_entries.update(page.keys())


def _is_pages_node(node: Dict) -> bool:
    kind = node.type()
    if kind is not None:
        return kind == "Pages"
    return "Kids" in node


def _validate_pages_node(xref: XRefTable, node: Dict, inherited: Dict) -> int:
    """Validate an interior node and return the number of pages below it."""

    dict_name = "pagesDict"
    node_nr = xref.cur_obj
    declared = validate_integer_entry(xref, node, dict_name, "Count", REQUIRED, Version.V10, lambda n: n >= 0)
    kids = validate_array_entry(xref, node, dict_name, "Kids", REQUIRED if declared else OPTIONAL, Version.V10) or Array()
    inherited = Dict(inherited)
    for key in ("Resources", "MediaBox", "CropBox", "Rotate"):
        if key in node:
            inherited[key] = node[key]

    count = 0
    for kid in kids:
        if not isinstance(kid, IndirectRef):
            raise TypeMismatchError(
                f"page tree kid must be an indirect reference, got {type_name(kid)}",
                obj_nr=node_nr,
                dict_name=dict_name,
                entry_name="Kids",
            )
        if xref.is_valid(kid):
            raise CorruptStructureError(f"page tree revisits {kid}", obj_nr=node_nr, dict_name=dict_name, entry_name="Kids")
        xref.set_valid(kid)
        child = xref.dereference_dict(kid)
        if child is None:
            continue
        if _is_pages_node(child):
            count += _validate_pages_node(xref, child, inherited)
            continue
        xref.page_count += 1
        xref.cur_page = xref.page_count
        validate_page_dict(xref, child, inherited)
        count += 1

    if declared != count:
        raise CorruptStructureError(
            f"page tree node claims Count {declared} but holds {count} pages",
            obj_nr=node_nr,
            dict_name=dict_name,
            entry_name="Count",
        )
    return count


def validate_pages(xref: XRefTable, root: Dict) -> int:
    """Validate the page tree referenced by the catalog and return the page count."""

    ref = validate_indref_entry(xref, root, "rootDict", "Pages", REQUIRED, Version.V10)
    xref.set_valid(ref)
    pages = xref.dereference_dict(ref)
    if pages is None:
        raise MissingRequiredError("missing page tree root", obj_nr=ref.obj_nr, dict_name="rootDict", entry_name="Pages")
    if xref.strict or "Type" in pages:
        validate_name_entry(xref, pages, "pagesDict", "Type", REQUIRED, Version.V10, one_of("Pages"))
    xref.page_count = 0
    count = _validate_pages_node(xref, pages, Dict())
    xref.cur_page = 0
    xref.stats.pages = count
    LOGGER.debug("validated %d pages", count)
    return count
