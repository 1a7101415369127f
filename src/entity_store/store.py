"""
Indexed entity store.

Typed CRUD for any entity kind on top of a flat key-value adapter. Each kind
keeps one index key holding the insertion-ordered list of its live ids; every
mutating operation keeps that index in lockstep with the state records.

Write ordering keeps the index free of dangling ids: state is written before
an id is appended, and an id is removed before its state is deleted.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from .errors import AlreadyExists, EntityNotFound, InvalidCursor
from .kv_adapter import KVAdapter

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

StateT = TypeVar("StateT", bound=BaseModel)


class EntityKind(Generic[StateT]):
    """
    Describes one kind of persisted record.

    Subclasses set `entity_name`, `index_name` and `model`, and override
    `initial_state` and `seed_data` where the kind needs them.
    """

    entity_name: str = ""
    index_name: str = ""
    model: Type[StateT]

    def initial_state(self, entity_id: str) -> StateT:
        """State used when a patch or mutate hits an absent record."""
        return self.model(id=entity_id)

    def seed_data(self) -> Sequence[StateT]:
        return ()

    def key(self, entity_id: str) -> str:
        return f"{self.entity_name}:{entity_id}"

    @property
    def index_key(self) -> str:
        return f"index:{self.index_name}"

    def serialize(self, state: StateT) -> str:
        return state.model_dump_json(by_alias=True, exclude_none=True)

    def deserialize(self, raw: str) -> StateT:
        return self.model.model_validate_json(raw)


@dataclass
class Page(Generic[StateT]):
    """One page of a cursor-paginated listing."""
    items: List[StateT] = field(default_factory=list)
    next_cursor: Optional[str] = None


def _load_index(raw: Optional[str]) -> List[str]:
    return json.loads(raw) if raw else []


class IndexedEntityStore:
    """Generic persistence for entity kinds over a key-value adapter"""

    def __init__(self, adapter: KVAdapter):
        self.adapter = adapter

    # Reads

    def get(self, kind: EntityKind[StateT], entity_id: str) -> Optional[StateT]:
        """Return the state record, or None when it does not exist."""
        raw = self.adapter.get(kind.key(entity_id))
        if raw is None:
            return None
        return kind.deserialize(raw)

    def exists(self, kind: EntityKind, entity_id: str) -> bool:
        return self.adapter.get(kind.key(entity_id)) is not None

    def ids(self, kind: EntityKind) -> List[str]:
        return _load_index(self.adapter.get(kind.index_key))

    def list(
        self,
        kind: EntityKind[StateT],
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Page[StateT]:
        """
        List entities in index (insertion) order.

        The cursor is the offset of the next item, as returned in
        `Page.next_cursor` by the previous call.
        """
        start = self._parse_cursor(cursor)
        if limit is None:
            limit = DEFAULT_PAGE_SIZE
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        limit = min(limit, MAX_PAGE_SIZE)

        ids = self.ids(kind)
        page_ids = ids[start:start + limit]
        items = []
        for entity_id in page_ids:
            state = self.get(kind, entity_id)
            if state is None:
                # A concurrent delete removed the state after we read the index
                logger.warning(f"Indexed {kind.entity_name} {entity_id} has no state record")
                continue
            items.append(state)

        end = start + len(page_ids)
        next_cursor = str(end) if end < len(ids) else None
        return Page(items=items, next_cursor=next_cursor)

    def list_all(self, kind: EntityKind[StateT]) -> List[StateT]:
        """Follow cursors until the index is exhausted."""
        items: List[StateT] = []
        cursor = None
        while True:
            page = self.list(kind, cursor=cursor, limit=MAX_PAGE_SIZE)
            items.extend(page.items)
            if page.next_cursor is None:
                return items
            cursor = page.next_cursor

    # Writes

    def create(self, kind: EntityKind[StateT], state: StateT) -> StateT:
        """Persist a new entity and append it to the kind's index."""
        entity_id = state.id
        if entity_id in self.ids(kind):
            raise AlreadyExists(kind.entity_name, entity_id)
        self.adapter.put(kind.key(entity_id), kind.serialize(state))
        self._index_add(kind, entity_id)
        logger.info(f"Created {kind.entity_name} {entity_id}")
        return state

    def mutate(
        self,
        kind: EntityKind[StateT],
        entity_id: str,
        transform: Callable[[StateT], StateT],
        must_exist: bool = False,
    ) -> StateT:
        """
        Read-modify-write one entity with an arbitrary transform.

        An absent record starts from the kind's initial state, unless
        `must_exist` is set, in which case EntityNotFound is raised.
        """
        result = {}

        def apply(raw: Optional[str]) -> str:
            if raw is None and must_exist:
                raise EntityNotFound(kind.entity_name, entity_id)
            current = kind.deserialize(raw) if raw is not None else kind.initial_state(entity_id)
            updated = transform(current)
            result["state"] = updated
            result["created"] = raw is None
            return kind.serialize(updated)

        self.adapter.update(kind.key(entity_id), apply)
        if result["created"]:
            self._index_add(kind, entity_id)
            logger.info(f"Materialized {kind.entity_name} {entity_id} on first write")
        return result["state"]

    def patch(
        self,
        kind: EntityKind[StateT],
        entity_id: str,
        changes: BaseModel,
        must_exist: bool = False,
    ) -> StateT:
        """
        Shallow-merge a patch model over the current state.

        Only fields explicitly set on `changes` are overwritten, so an
        explicit None clears a field while an omitted one keeps its value.
        """
        updates = changes.model_dump(exclude_unset=True)

        def merge(current: StateT) -> StateT:
            return kind.model.model_validate({**current.model_dump(), **updates})

        state = self.mutate(kind, entity_id, merge, must_exist=must_exist)
        logger.info(f"Patched {kind.entity_name} {entity_id}: {sorted(updates)}")
        return state

    def delete(self, kind: EntityKind, entity_id: str) -> bool:
        """Delete one entity. Returns False when nothing was there."""
        was_indexed = self._index_remove(kind, entity_id)
        had_state = self.adapter.delete(kind.key(entity_id))
        deleted = was_indexed or had_state
        if deleted:
            logger.info(f"Deleted {kind.entity_name} {entity_id}")
        else:
            logger.warning(f"No {kind.entity_name} found to delete with ID: {entity_id}")
        return deleted

    def delete_many(self, kind: EntityKind, entity_ids: Iterable[str]) -> int:
        """Delete each id in turn; no rollback if the backend fails midway."""
        return sum(1 for entity_id in entity_ids if self.delete(kind, entity_id))

    def ensure_seed(self, kind: EntityKind[StateT]) -> int:
        """Populate an empty kind with its demo records. Returns how many were written."""
        if self.ids(kind):
            return 0
        seeded = 0
        for state in kind.seed_data():
            try:
                self.create(kind, state)
                seeded += 1
            except AlreadyExists:
                continue
        if seeded:
            logger.info(f"Seeded {seeded} {kind.entity_name} records")
        return seeded

    # Index bookkeeping

    def _index_add(self, kind: EntityKind, entity_id: str) -> None:
        def add(raw: Optional[str]) -> str:
            ids = _load_index(raw)
            if entity_id not in ids:
                ids.append(entity_id)
            return json.dumps(ids)

        self.adapter.update(kind.index_key, add)

    def _index_remove(self, kind: EntityKind, entity_id: str) -> bool:
        removed = []

        def remove(raw: Optional[str]) -> Optional[str]:
            ids = _load_index(raw)
            if entity_id in ids:
                ids.remove(entity_id)
                removed.append(entity_id)
            return json.dumps(ids) if raw is not None else None

        self.adapter.update(kind.index_key, remove)
        return bool(removed)

    @staticmethod
    def _parse_cursor(cursor: Optional[str]) -> int:
        if cursor is None or cursor == "":
            return 0
        try:
            offset = int(cursor)
        except (TypeError, ValueError):
            raise InvalidCursor(cursor) from None
        if offset < 0:
            raise InvalidCursor(cursor)
        return offset
