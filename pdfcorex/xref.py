"""Cross-reference table: object storage, dereferencing and walk state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from .dereference import DereferenceMixin
from .exceptions import DanglingRefError, MissingRequiredError, VersionViolationError
from .nametree import NameTree
from .objects import Array, Dict, IndirectRef, StreamDict, is_dict
from .types import AnnotationRecord, Configuration, Statistics, ValidationMode, Version

__all__ = [
    "FreeEntry",
    "InUseEntry",
    "CompressedEntry",
    "XRefTable",
    "ObjectLoader",
    "NAME_TREE_NAMES",
]

LOGGER = logging.getLogger("pdfcorex.xref")
REPAIR_LOGGER = logging.getLogger("pdfcorex.repair")

NAME_TREE_NAMES = (
    "Dests",
    "AP",
    "JavaScript",
    "Pages",
    "Templates",
    "IDS",
    "URLS",
    "EmbeddedFiles",
    "AlternatePresentations",
    "Renditions",
)

ObjectLoader = Callable[[int, int], Any]


# -- Slots -------------------------------------------------------------------


@dataclass(slots=True)
class FreeEntry:
    generation: int = 0
    next_free: int = 0


@dataclass(slots=True)
class InUseEntry:
    generation: int = 0
    value: Any = None
    offset: int | None = None
    loaded: bool = True


@dataclass(slots=True)
class CompressedEntry:
    """Object stored inside an object stream."""

    stream_obj_nr: int
    index: int
    value: Any = None
    loaded: bool = False

    @property
    def generation(self) -> int:
        return 0


Slot = FreeEntry | InUseEntry | CompressedEntry


# -- Cross-reference table ---------------------------------------------------


class XRefTable(DereferenceMixin):
    """Mapping from object numbers to slots plus the state of a validation walk."""

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        header_version: Version = Version.V17,
        loader: ObjectLoader | None = None,
    ) -> None:
        self.config = config or Configuration()
        self.table: dict[int, Slot] = {0: FreeEntry(65535, 0)}
        self.trailer = Dict()
        self.header_version = header_version
        self.root_version: Version | None = None
        self.cur_page = 0
        self.cur_obj = 0
        self.page_count = 0
        self.names: dict[str, NameTree] = {}
        self.page_annots: dict[int, dict[str, dict[int, AnnotationRecord]]] = {}
        self.uris: dict[int, dict[str, str]] = {}
        self.outlines: Dict | None = None
        self.form: Dict | None = None
        self.signature_exist = False
        self.append_only = False
        self.stats = Statistics()
        self.repairs: list[str] = []
        self.warnings: list[str] = []
        self._valid: set[int] = set()
        self._loader = loader

    # -- configuration ------------------------------------------------------

    @property
    def mode(self) -> ValidationMode:
        return self.config.validation_mode

    @property
    def strict(self) -> bool:
        return self.config.validation_mode is ValidationMode.STRICT

    @property
    def relaxed(self) -> bool:
        return not self.strict

    def version(self) -> Version:
        if self.root_version is not None and self.root_version > self.header_version:
            return self.root_version
        return self.header_version

    # -- slots --------------------------------------------------------------

    def lookup(self, obj_nr: int) -> Slot | None:
        """Return the slot for ``obj_nr``, loading its value on first access."""

        slot = self.table.get(obj_nr)
        if isinstance(slot, (InUseEntry, CompressedEntry)) and not slot.loaded:
            if self._loader is None:
                raise MissingRequiredError(f"no reader available to load object {obj_nr}", obj_nr=obj_nr)
            slot.value = self._loader(obj_nr, slot.generation)
            slot.loaded = True
        return slot

    def find_object(self, obj_nr: int) -> Any:
        slot = self.lookup(obj_nr)
        if isinstance(slot, (InUseEntry, CompressedEntry)):
            return slot.value
        return None

    @property
    def size(self) -> int:
        return max(self.table) + 1

    def insert_object(self, value: Any) -> IndirectRef:
        obj_nr = self.size
        self.table[obj_nr] = InUseEntry(0, value)
        return IndirectRef(obj_nr, 0)

    def set_object(self, obj_nr: int, value: Any, generation: int = 0) -> IndirectRef:
        self.table[obj_nr] = InUseEntry(generation, value)
        return IndirectRef(obj_nr, generation)

    def free_object(self, obj_nr: int) -> None:
        slot = self.table.get(obj_nr)
        if slot is None or isinstance(slot, FreeEntry):
            return
        generation = min(slot.generation + 1, 65535)
        self.table[obj_nr] = FreeEntry(generation, 0)
        self._valid.discard(obj_nr)

    def in_use_numbers(self) -> list[int]:
        return sorted(nr for nr, slot in self.table.items() if not isinstance(slot, FreeEntry))

    def iter_objects(self) -> Iterator[tuple[int, Any]]:
        for obj_nr in self.in_use_numbers():
            yield obj_nr, self.find_object(obj_nr)

    # -- dereferencing ------------------------------------------------------

    def _dangling(self, ref: IndirectRef) -> None:
        message = f"{ref} points to a free or unknown object"
        if self.strict:
            raise DanglingRefError(message, obj_nr=self.cur_obj)
        self.warn(message)
        return None

    def _resolve(self, ref: IndirectRef) -> Any:
        slot = self.lookup(ref.obj_nr)
        if slot is None or isinstance(slot, FreeEntry) or slot.generation != ref.gen_nr:
            return self._dangling(ref)
        value = slot.value
        if isinstance(value, (Dict, Array)):
            self.cur_obj = ref.obj_nr
        return value

    def dereference(self, obj: Any) -> Any:
        """Resolve ``obj`` to its terminal value.

        A reference whose target is itself a reference is followed once more.
        Unresolvable references yield ``None`` in relaxed mode and raise
        :class:`DanglingRefError` in strict mode.
        """

        if not isinstance(obj, IndirectRef):
            return obj
        value = self._resolve(obj)
        if isinstance(value, IndirectRef):
            value = self._resolve(value)
            if isinstance(value, IndirectRef):
                return self._dangling(value)
        return value

    def is_dangling(self, ref: IndirectRef) -> bool:
        slot = self.lookup(ref.obj_nr)
        return slot is None or isinstance(slot, FreeEntry) or slot.generation != ref.gen_nr

    def root_dict(self) -> Dict:
        root_ref = self.trailer.get("Root")
        if root_ref is None:
            raise MissingRequiredError("trailer has no root object", dict_name="trailer", entry_name="Root")
        root = self.dereference_dict(root_ref)
        if root is None:
            raise MissingRequiredError("root object is missing", dict_name="trailer", entry_name="Root")
        return root

    # -- version gate -------------------------------------------------------

    def validate_version(self, feature: str, since: Version) -> None:
        if self.version() >= since:
            return
        message = f"{feature}: unsupported in version {self.version()}, requires {since}"
        if self.strict:
            raise VersionViolationError(message, obj_nr=self.cur_obj)
        self.warn(message)

    # -- walk state ---------------------------------------------------------

    def is_valid(self, ref: IndirectRef | int) -> bool:
        obj_nr = ref.obj_nr if isinstance(ref, IndirectRef) else ref
        return obj_nr in self._valid

    def set_valid(self, ref: IndirectRef | int) -> None:
        obj_nr = ref.obj_nr if isinstance(ref, IndirectRef) else ref
        self._valid.add(obj_nr)

    def reset_walk_state(self) -> None:
        """Clear everything a validation walk collects."""

        self._valid.clear()
        self.cur_page = 0
        self.cur_obj = 0
        self.page_count = 0
        self.names.clear()
        self.page_annots.clear()
        self.uris.clear()
        self.outlines = None
        self.form = None
        self.stats = Statistics()

    def name_ref(self, name: str) -> NameTree:
        tree = self.names.get(name)
        if tree is None:
            tree = NameTree(name)
            self.names[name] = tree
        return tree

    def record_uri(self, uri: str) -> None:
        self.uris.setdefault(self.cur_page, {})[uri] = ""

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        LOGGER.warning(message)

    def repaired(self, what: str) -> None:
        self.repairs.append(what)
        REPAIR_LOGGER.info("repaired: %s", what)

    # -- structural equality ------------------------------------------------

    def equal(self, left: Any, right: Any) -> bool:
        """Structural equality that follows indirect references."""

        return self._equal(left, right, set())

    def _equal(self, left: Any, right: Any, seen: set[tuple[int, int]]) -> bool:
        if isinstance(left, IndirectRef) and isinstance(right, IndirectRef):
            if left == right:
                return True
            key = (left.obj_nr, right.obj_nr)
            if key in seen:
                return True
            seen.add(key)
        left = self.dereference(left)
        right = self.dereference(right)
        if isinstance(left, StreamDict) or isinstance(right, StreamDict):
            if not (isinstance(left, StreamDict) and isinstance(right, StreamDict)):
                return False
            if left.raw != right.raw:
                return False
        if isinstance(left, Dict):
            if not isinstance(right, Dict) or set(left) != set(right):
                return False
            return all(self._equal(left[key], right[key], seen) for key in left)
        if isinstance(left, Array):
            if not isinstance(right, Array) or len(left) != len(right):
                return False
            return all(self._equal(a, b, seen) for a, b in zip(left, right))
        return type(left) is type(right) and left == right

    # -- statistics ---------------------------------------------------------

    def count_slots(self) -> None:
        self.stats.objects = sum(1 for slot in self.table.values() if not isinstance(slot, FreeEntry))
        self.stats.free_objects = sum(1 for slot in self.table.values() if isinstance(slot, FreeEntry))
        self.stats.compressed_objects = sum(
            1 for slot in self.table.values() if isinstance(slot, CompressedEntry)
        )

    def __repr__(self) -> str:
        return f"XRefTable(size={self.size}, version={self.version()}, mode={self.mode.value})"


def is_page_dict(value: Any) -> bool:
    return is_dict(value) and value.type() == "Page"
