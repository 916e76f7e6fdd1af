"""The document catalog and the entries it owns directly.

:func:`validate_root_object` runs the catalog validators in a fixed order:
name trees first, so that named destinations resolve while pages, outlines
and actions are checked, then the page tree, then everything else.  The
interactive form comes after the pages so that widgets can be cross-checked
against the page annotation lists.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..exceptions import TypeMismatchError, ValueRejectedError
from ..objects import Array, Dict, is_dict, type_name
from ..types import Version, parse_version
from ..xref import XRefTable
from .actions import validate_action_dict, validate_additional_actions
from .destinations import validate_destination, validate_destination_array
from .entries import (
    OPTIONAL,
    REQUIRED,
    one_of,
    validate_array_entry,
    validate_boolean_entry,
    validate_boolean_or_array_of_boolean_entry,
    validate_date_entry,
    validate_dict_entry,
    validate_entry,
    validate_indref_array_entry,
    validate_integer_array_entry,
    validate_integer_entry,
    validate_metadata,
    validate_name_array_entry,
    validate_name_entry,
    validate_name_or_array_of_name_entry,
    validate_number_entry,
    validate_stream_dict_entry,
    validate_string_entry,
)
from .forms import validate_acro_form
from .optional_content import validate_oc_properties
from .outlines import validate_outlines
from .pages import validate_pages
from .structure import validate_struct_tree
from .threads import validate_threads
from .trees import validate_names_dict, validate_page_labels

__all__ = ["CATALOG_VALIDATORS", "validate_root_object", "validate_viewer_preferences"]

LOGGER = logging.getLogger("pdfcorex.validate")

RootValidator = Callable[[XRefTable, Dict, bool, Version], Any]


# -- Version and extensions --------------------------------------------------


def _validate_root_version(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    name = validate_name_entry(xref, root, "rootDict", "Version", required, since)
    if name is None:
        return
    try:
        xref.root_version = parse_version(name)
    except ValueError as exc:
        raise ValueRejectedError(str(exc), obj_nr=xref.cur_obj, dict_name="rootDict", entry_name="Version") from exc


def _validate_extensions(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    extensions = validate_dict_entry(xref, root, "rootDict", "Extensions", required, since)
    for value in (extensions or {}).values():
        ext = xref.dereference_dict(value)
        if ext is None:
            continue
        validate_name_entry(xref, ext, "extensionsDict", "BaseVersion", REQUIRED, Version.V17)
        validate_integer_entry(xref, ext, "extensionsDict", "ExtensionLevel", REQUIRED, Version.V17)


# -- Destinations ------------------------------------------------------------


def _validate_named_destinations(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    dests = validate_dict_entry(xref, root, "rootDict", "Dests", required, since)
    if dests is None:
        return
    for name in list(dests):
        if validate_destination(xref, dests[name]) is None:
            del dests[name]
            xref.repaired(f"destination {name}")


def _validate_open_action(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    value = validate_entry(xref, root, "rootDict", "OpenAction", required, since)
    if value is None:
        return
    if is_dict(value):
        validate_action_dict(xref, value)
    elif isinstance(value, Array):
        if validate_destination_array(xref, value) is None:
            del root["OpenAction"]
            xref.repaired("rootDict OpenAction")
    else:
        raise TypeMismatchError(
            f"expected dict or array, got {type_name(value)}", obj_nr=xref.cur_obj, dict_name="rootDict", entry_name="OpenAction"
        )


def _validate_root_additional_actions(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    validate_additional_actions(xref, root, "rootDict", "AA", required, since, "root")


# -- Viewer preferences ------------------------------------------------------

_BOUNDARIES = ("MediaBox", "CropBox", "BleedBox", "TrimBox", "ArtBox")


def _flex_boolean(xref: XRefTable, d: Dict, dict_name: str, key: str, since: Version) -> None:
    value = validate_entry(xref, d, dict_name, key, OPTIONAL, since)
    if value is None or isinstance(value, bool):
        return
    if xref.relaxed and str(value).lower() in ("true", "false"):
        return
    raise TypeMismatchError(f"expected boolean, got {type_name(value)}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name=key)


def _valid_print_page_range(array: Array) -> bool:
    if len(array) % 2:
        return False
    return all(array[i] < array[i + 1] for i in range(0, len(array), 2))


def validate_viewer_preferences(xref: XRefTable, root: Dict, required: bool, since: Version) -> Dict | None:
    d = validate_dict_entry(xref, root, "rootDict", "ViewerPreferences", required, since)
    if d is None:
        return None
    dict_name = "ViewerPreferences"
    for key in ("HideToolbar", "HideMenubar", "HideWindowUI", "FitWindow", "CenterWindow"):
        _flex_boolean(xref, d, dict_name, key, Version.V10)
    _flex_boolean(xref, d, dict_name, "DisplayDocTitle", Version.V14 if xref.strict else Version.V10)
    validate_name_entry(
        xref, d, dict_name, "NonFullScreenPageMode", OPTIONAL, Version.V10, one_of("UseNone", "UseOutlines", "UseThumbs", "UseOC")
    )
    validate_name_entry(xref, d, dict_name, "Direction", OPTIONAL, Version.V13, one_of("L2R", "R2L"))
    for key in ("ViewArea", "ViewClip", "PrintArea", "PrintClip"):
        validate_name_entry(xref, d, dict_name, key, OPTIONAL, Version.V14, one_of(*_BOUNDARIES))
    scaling = validate_name_entry(
        xref, d, dict_name, "PrintScaling", OPTIONAL, Version.V16 if xref.strict else Version.V13, one_of("None", "AppDefault")
    )
    validate_name_entry(
        xref, d, dict_name, "Duplex", OPTIONAL, Version.V17, one_of("Simplex", "DuplexFlipShortEdge", "DuplexFlipLongEdge")
    )
    _flex_boolean(xref, d, dict_name, "PickTrayByPDFSize", Version.V17)
    validate_integer_entry(xref, d, dict_name, "NumCopies", OPTIONAL, Version.V17, lambda n: n >= 1)
    validate_integer_array_entry(xref, d, dict_name, "PrintPageRange", OPTIONAL, Version.V17, _valid_print_page_range)
    enforce = validate_name_array_entry(
        xref, d, dict_name, "Enforce", OPTIONAL, Version.V20, lambda a: list(a) == ["PrintScaling"]
    )
    if enforce and scaling == "AppDefault":
        raise ValueRejectedError(
            'Enforce [/PrintScaling] needs PrintScaling other than AppDefault', obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Enforce"
        )
    return d


def _layouts(xref: XRefTable) -> tuple[str, ...]:
    layouts = ("SinglePage", "OneColumn", "TwoColumnLeft", "TwoColumnRight")
    if xref.version() >= Version.V15 or xref.relaxed:
        layouts += ("TwoPageLeft", "TwoPageRight")
    if xref.relaxed:
        layouts += ("UseNone",)
    return layouts


def _validate_page_layout(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    validate_name_entry(xref, root, "rootDict", "PageLayout", required, since, one_of(*_layouts(xref)))


def _validate_page_mode(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    modes = ["UseNone", "UseOutlines", "UseThumbs", "FullScreen"]
    if xref.version() >= Version.V15 or xref.relaxed:
        modes.append("UseOC")
    if xref.version() >= Version.V16 or xref.relaxed:
        modes.append("UseAttachments")
    if xref.relaxed:
        modes += ["None", "none"]
    validate_name_entry(xref, root, "rootDict", "PageMode", required, since, one_of(*modes))


# -- Smaller catalog entries -------------------------------------------------


def _validate_uri(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    d = validate_dict_entry(xref, root, "rootDict", "URI", required, since)
    if d is not None:
        validate_string_entry(xref, d, "URIdict", "Base", OPTIONAL, Version.V10)


def _validate_root_metadata(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    validate_metadata(xref, root, required, since)


def _validate_mark_info(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    d = validate_dict_entry(xref, root, "rootDict", "MarkInfo", required, since)
    if d is None:
        return
    dict_name = "markInfoDict"
    marked = validate_boolean_entry(xref, d, dict_name, "Marked", OPTIONAL, Version.V10)
    suspects = validate_boolean_entry(xref, d, dict_name, "Suspects", OPTIONAL, Version.V16 if xref.strict else Version.V14)
    if suspects and not marked and xref.strict:
        raise ValueRejectedError("Suspects requires Marked", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="Suspects")
    validate_boolean_entry(xref, d, dict_name, "UserProperties", OPTIONAL, Version.V16)


def _validate_lang(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    validate_string_entry(xref, root, "rootDict", "Lang", required, since)


def _validate_spider_info(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    d = validate_dict_entry(xref, root, "rootDict", "SpiderInfo", required, since)
    if d is None:
        return
    validate_number_entry(xref, d, "webCaptureInfoDict", "V", REQUIRED, Version.V13)
    validate_indref_array_entry(xref, d, "webCaptureInfoDict", "C", OPTIONAL, Version.V13)


def _validate_output_intent(xref: XRefTable, d: Dict) -> None:
    dict_name = "outputIntentDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, Version.V10, one_of("OutputIntent"))
    subtype = validate_name_entry(xref, d, dict_name, "S", REQUIRED, Version.V10)
    if subtype not in ("GTS_PDFX", "GTS_PDFA1", "ISO_PDFE1") and xref.strict:
        raise ValueRejectedError(f"unknown output intent {subtype}", obj_nr=xref.cur_obj, dict_name=dict_name, entry_name="S")
    validate_string_entry(xref, d, dict_name, "OutputCondition", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "OutputConditionIdentifier", REQUIRED if xref.strict else OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "RegistryName", OPTIONAL, Version.V10)
    validate_string_entry(xref, d, dict_name, "Info", OPTIONAL, Version.V10)
    validate_stream_dict_entry(xref, d, dict_name, "DestOutputProfile", OPTIONAL, Version.V10)


def _validate_output_intents(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    intents = validate_array_entry(xref, root, "rootDict", "OutputIntents", required, since if xref.strict else Version.V13)
    for item in intents or ():
        d = xref.dereference_dict(item)
        if d is not None:
            _validate_output_intent(xref, d)


def validate_piece_info(xref: XRefTable, d: Dict, dict_name: str, required: bool, since: Version) -> bool:
    pieces = validate_dict_entry(xref, d, dict_name, "PieceInfo", required, since)
    for value in (pieces or {}).values():
        piece = xref.dereference_dict(value)
        if piece is None:
            continue
        validate_date_entry(xref, piece, "pageDataDict", "LastModified", REQUIRED if xref.strict else OPTIONAL, Version.V10)
        validate_entry(xref, piece, "pageDataDict", "Private", OPTIONAL, Version.V10)
    return bool(pieces)


def _validate_root_piece_info(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    validate_piece_info(xref, root, "rootDict", required, since)


def _validate_permissions(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    d = validate_dict_entry(xref, root, "rootDict", "Perms", required, since)
    if not d:
        return
    doc_mdp = validate_dict_entry(xref, d, "permDict", "DocMDP", OPTIONAL, since)
    ur3 = validate_dict_entry(xref, d, "permDict", "UR3", OPTIONAL, since)
    if not doc_mdp and not ur3:
        raise ValueRejectedError("unsupported permissions", obj_nr=xref.cur_obj, dict_name="permDict")


def _validate_legal(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    d = validate_dict_entry(xref, root, "rootDict", "Legal", required, since)
    if d:
        LOGGER.debug("legal attestation dict present, %d entries", len(d))


def _validate_requirements(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    requirements = validate_array_entry(xref, root, "rootDict", "Requirements", required, since)
    for item in requirements or ():
        d = xref.dereference_dict(item)
        if d is None:
            continue
        validate_name_entry(xref, d, "requirementDict", "Type", OPTIONAL, since, one_of("Requirement"))
        validate_name_entry(xref, d, "requirementDict", "S", REQUIRED, since, one_of("EnableJavaScripts"))


_COLLECTION_FIELD_SUBTYPES = ("S", "D", "N", "F", "Desc", "ModDate", "CreationDate", "Size")


def _validate_collection_schema(xref: XRefTable, d: Dict) -> None:
    for key, value in d.items():
        if key == "Type":
            xref.dereference_name(value, Version.V10, lambda s: s == "CollectionSchema")
            continue
        field = xref.dereference_dict(value)
        if field is None:
            continue
        dict_name = "colFlddict"
        validate_name_entry(xref, field, dict_name, "Type", OPTIONAL, Version.V10, one_of("CollectionField"))
        validate_name_entry(xref, field, dict_name, "Subtype", REQUIRED, Version.V10, one_of(*_COLLECTION_FIELD_SUBTYPES))
        validate_string_entry(xref, field, dict_name, "N", REQUIRED, Version.V10)
        validate_integer_entry(xref, field, dict_name, "O", OPTIONAL, Version.V10)
        validate_boolean_entry(xref, field, dict_name, "V", OPTIONAL, Version.V10)
        validate_boolean_entry(xref, field, dict_name, "E", OPTIONAL, Version.V10)


def _validate_collection(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    d = validate_dict_entry(xref, root, "rootDict", "Collection", required, since)
    if d is None:
        return
    dict_name = "collectionDict"
    validate_name_entry(xref, d, dict_name, "Type", OPTIONAL, since, one_of("Collection"))
    schema = validate_dict_entry(xref, d, dict_name, "Schema", OPTIONAL, since)
    if schema is not None:
        _validate_collection_schema(xref, schema)
    validate_string_entry(xref, d, dict_name, "D", OPTIONAL, since)
    validate_name_entry(xref, d, dict_name, "View", OPTIONAL, since, one_of("D", "T", "H", "C"))
    sort = validate_dict_entry(xref, d, dict_name, "Sort", OPTIONAL, since)
    if sort is not None:
        validate_name_or_array_of_name_entry(xref, sort, "colSortDict", "S", REQUIRED, since)
        validate_boolean_or_array_of_boolean_entry(xref, sort, "colSortDict", "A", OPTIONAL, since)


def _validate_needs_rendering(xref: XRefTable, root: Dict, required: bool, since: Version) -> None:
    validate_boolean_entry(xref, root, "rootDict", "NeedsRendering", required, since)


# Catalog entries in validation order.
CATALOG_VALIDATORS: tuple[tuple[RootValidator, bool, Version], ...] = (
    (_validate_root_version, OPTIONAL, Version.V14),
    (_validate_extensions, OPTIONAL, Version.V10),
    (validate_names_dict, OPTIONAL, Version.V12),
    (_validate_named_destinations, OPTIONAL, Version.V11),
    (lambda xref, root, required, since: validate_pages(xref, root), REQUIRED, Version.V10),
    (validate_page_labels, OPTIONAL, Version.V13),
    (validate_viewer_preferences, OPTIONAL, Version.V12),
    (_validate_page_layout, OPTIONAL, Version.V10),
    (_validate_page_mode, OPTIONAL, Version.V10),
    (validate_outlines, OPTIONAL, Version.V10),
    (validate_threads, OPTIONAL, Version.V11),
    (_validate_open_action, OPTIONAL, Version.V11),
    (_validate_root_additional_actions, OPTIONAL, Version.V14),
    (_validate_uri, OPTIONAL, Version.V11),
    (validate_acro_form, OPTIONAL, Version.V12),
    (_validate_root_metadata, OPTIONAL, Version.V14),
    (validate_struct_tree, OPTIONAL, Version.V13),
    (_validate_mark_info, OPTIONAL, Version.V14),
    (_validate_lang, OPTIONAL, Version.V10),
    (_validate_spider_info, OPTIONAL, Version.V13),
    (_validate_output_intents, OPTIONAL, Version.V14),
    (_validate_root_piece_info, OPTIONAL, Version.V14),
    (validate_oc_properties, OPTIONAL, Version.V15),
    (_validate_permissions, OPTIONAL, Version.V15),
    (_validate_legal, OPTIONAL, Version.V17),
    (_validate_requirements, OPTIONAL, Version.V17),
    (_validate_collection, OPTIONAL, Version.V17),
    (_validate_needs_rendering, OPTIONAL, Version.V17),
)


def validate_root_object(xref: XRefTable) -> Dict:
    """Validate the catalog and everything reachable from it."""

    root = xref.root_dict()
    root_ref = xref.trailer.get("Root")
    xref.set_valid(root_ref)
    validate_name_entry(xref, root, "rootDict", "Type", REQUIRED if xref.strict else OPTIONAL, Version.V10, one_of("Catalog"))
    xref.stats.root_entries.update(root.keys())
    for validator, required, since in CATALOG_VALIDATORS:
        validator(xref, root, required, since)
    return root
