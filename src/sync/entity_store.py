"""Session-local collections of todos and folders.

Items are treated as immutable: every change stores a new dataclass instance,
so records shared with other sessions (realtime events are fanned out
in-process) are never mutated behind their back.

Each field of each item carries a version number taken from one monotonic
counter. Any write that changes a field bumps it; ``restore`` only writes a
field back while its version still equals the token captured when the
optimistic value was applied.
"""

import dataclasses
import itertools
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Generic, TypeVar
from uuid import UUID

from domain.entities.folder import Folder
from domain.entities.todo import Todo

T = TypeVar("T", Todo, Folder)

VersionTokens = dict[str, int]

_clock = itertools.count(1)


class EntityCollection(Generic[T]):
    """Ordered, id-keyed collection; insertion order is display order."""

    def __init__(self) -> None:
        self._items: dict[UUID, T] = {}
        self._versions: dict[tuple[UUID, str], int] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def items(self) -> list[T]:
        return list(self._items.values())

    def ids(self) -> list[UUID]:
        return list(self._items)

    def get(self, item_id: UUID) -> T | None:
        return self._items.get(item_id)

    def replace_all(self, items: Iterable[T]) -> None:
        """Replace the whole collection; duplicate ids keep the first occurrence."""
        fresh: dict[UUID, T] = {}
        for item in items:
            if item.id in fresh:
                continue
            previous = self._items.get(item.id)
            if previous is not None:
                self._bump_changed(previous, item)
            fresh[item.id] = item
        for gone in set(self._items) - set(fresh):
            self._forget(gone)
        self._items = fresh

    def upsert(self, item: T) -> None:
        """Replace an item in place, or append it when the id is new."""
        previous = self._items.get(item.id)
        if previous is not None:
            self._bump_changed(previous, item)
        self._items[item.id] = item

    def remove(self, item_id: UUID) -> T | None:
        self._forget(item_id)
        return self._items.pop(item_id, None)

    def patch(self, item_id: UUID, values: Mapping[str, Any]) -> VersionTokens:
        """Apply field values and return the new version of each field."""
        current = self._items[item_id]
        self._items[item_id] = dataclasses.replace(current, **values)
        return {name: self._bump(item_id, name) for name in values}

    def restore(
        self, item_id: UUID, values: Mapping[str, Any], tokens: Mapping[str, int]
    ) -> list[str]:
        """Write back the fields nothing has touched since ``tokens`` were taken.

        Returns the names of the fields that were restored. An item that has
        been removed meanwhile is left removed.
        """
        current = self._items.get(item_id)
        if current is None:
            return []
        restorable = {
            name: value
            for name, value in values.items()
            if self.version(item_id, name) == tokens.get(name)
        }
        if restorable:
            self._items[item_id] = dataclasses.replace(current, **restorable)
            for name in restorable:
                self._bump(item_id, name)
        return list(restorable)

    def version(self, item_id: UUID, field: str) -> int:
        return self._versions.get((item_id, field), 0)

    def _bump(self, item_id: UUID, field: str) -> int:
        version = next(_clock)
        self._versions[(item_id, field)] = version
        return version

    def _bump_changed(self, previous: T, item: T) -> None:
        for f in dataclasses.fields(item):
            if getattr(previous, f.name) != getattr(item, f.name):
                self._bump(item.id, f.name)

    def _forget(self, item_id: UUID) -> None:
        for key in [k for k in self._versions if k[0] == item_id]:
            del self._versions[key]


@dataclasses.dataclass
class EntityStore:
    """The todos and folders a session currently knows about."""

    todos: EntityCollection[Todo] = dataclasses.field(default_factory=EntityCollection)
    folders: EntityCollection[Folder] = dataclasses.field(default_factory=EntityCollection)
