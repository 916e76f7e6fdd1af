"""In-memory index over PDF name trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from .objects import Array, Dict, as_string, is_string

__all__ = ["NameTree"]


@dataclass
class NameTree:
    """Flattened view of a name tree keyed by decoded string keys.

    Each key remembers the leaf dict it was read from so that removing a key also
    removes the pair from the leaf's ``/Names`` array.
    """

    name: str
    root: Dict | None = None
    entries: dict[str, Any] = field(default_factory=dict)
    leaves: dict[str, Dict] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.entries[key]

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def get(self, key: str, default: Any = None) -> Any:
        return self.entries.get(key, default)

    def keys(self) -> list[str]:
        return list(self.entries)

    def add(self, key: str, value: Any, leaf: Dict | None = None) -> None:
        self.entries[key] = value
        if leaf is not None:
            self.leaves[key] = leaf

    def remove(self, key: str) -> bool:
        """Drop ``key`` from the index and from its leaf node."""

        if key not in self.entries:
            return False
        del self.entries[key]
        leaf = self.leaves.pop(key, None)
        if leaf is None:
            return True
        names = leaf.get("Names")
        if isinstance(names, Array):
            for index in range(0, len(names) - 1, 2):
                candidate = names[index]
                if is_string(candidate) and as_string(candidate) == key:
                    del names[index : index + 2]
                    break
        return True
