"""
In-memory store.

A small, self-contained implementation of the StoreClient primitives.
It backs the CLI (persisted as a JSON library snapshot, see state/io.py)
and the test suite. It knows nothing about content, search or indexing.

Snapshot format:

{
  "databases": [
    {
      "name": "Research",
      "root": {
        "uuid": "...", "id": 1, "name": "Research", "type": "group",
        "children": [
          {"uuid": "...", "id": 2, "name": "Inbox", "type": "group", "children": []},
          {"replicaOf": "<uuid>"}
        ]
      }
    }
  ]
}
"""

import uuid as uuidlib
from typing import Any, Dict, Iterator, List, Optional, Tuple

from shelfwise.schemas import (
    CANONICAL_KIND,
    VIRTUAL_KIND,
    Database,
    Entity,
)
from shelfwise.store.client import StoreClient


def _new_uuid() -> str:
    return str(uuidlib.uuid4()).upper()


class InMemoryStore(StoreClient):

    def __init__(self):
        self._databases: List[Database] = []
        self._by_uuid: Dict[str, Entity] = {}
        self._by_numeric: Dict[int, Entity] = {}
        self._next_id = 1

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def _register(self, entity: Entity) -> Entity:
        self._by_uuid[entity.uuid.upper()] = entity
        self._by_numeric[entity.numeric_id] = entity
        self._next_id = max(self._next_id, entity.numeric_id + 1)
        return entity

    def _make(
            self,
            name: str,
            kind: str,
            database: str,
            parent: Optional[Entity],
            uuid: Optional[str] = None,
            numeric_id: Optional[int] = None,
    ) -> Entity:
        entity = Entity(
            uuid=uuid or _new_uuid(),
            numeric_id=numeric_id if numeric_id is not None else self._next_id,
            name=name,
            kind=kind,
            database=database,
            parent=parent,
        )
        if parent is not None:
            parent.children.append(entity)
        return self._register(entity)

    def add_database(self, name: str, uuid: Optional[str] = None) -> Database:
        root = self._make(name, CANONICAL_KIND, name, None, uuid=uuid)
        database = Database(name=name, uuid=root.uuid, root=root)
        self._databases.append(database)
        return database

    def add_group(self, name: str, parent: Entity) -> Entity:
        return self._make(name, CANONICAL_KIND, parent.database, parent)

    def add_smart_group(self, name: str, parent: Entity, query: str = "") -> Entity:
        entity = self._make(name, VIRTUAL_KIND, parent.database, parent)
        entity.query = query
        return entity

    def add_record(self, name: str, parent: Entity, kind: str = "markdown") -> Entity:
        return self._make(name, kind, parent.database, parent)

    def database_named(self, name: str) -> Optional[Database]:
        for database in self._databases:
            if database.name == name:
                return database
        return None

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_identifier(self, reference: str) -> Optional[Entity]:
        if not reference:
            return None
        return self._by_uuid.get(reference.upper())

    def get_by_numeric_id(self, numeric_id: int) -> Optional[Entity]:
        return self._by_numeric.get(numeric_id)

    def list_databases(self) -> List[Database]:
        return list(self._databases)

    def root(self, database: Database) -> Entity:
        return database.root

    def list_children(self, container: Entity) -> List[Entity]:
        return list(container.children)

    def get_metadata(self, entity: Entity) -> Dict[str, Any]:
        return dict(entity.metadata)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_container(self, name: str, parent: Entity) -> Optional[Entity]:
        if not name or not parent.is_canonical:
            return None
        return self.add_group(name, parent)

    def set_name(self, entity: Entity, name: str) -> bool:
        if not name or entity.is_root:
            return False
        entity.name = name
        return True

    def set_tags(self, entity: Entity, tags: List[str]) -> bool:
        entity.tags = list(tags)
        return True

    def set_comment(self, entity: Entity, comment: str) -> bool:
        entity.comment = comment
        return True

    def set_metadata(self, entity: Entity, metadata: Dict[str, Any]) -> bool:
        entity.metadata = dict(metadata)
        return True

    def move(self, entity: Entity, destination: Entity) -> Optional[Entity]:
        if entity.is_root or not destination.is_canonical:
            return None
        if self._is_within(destination, entity):
            return None

        entity.parent.children.remove(entity)
        if destination in entity.replica_parents:
            entity.replica_parents.remove(destination)
            destination.children.remove(entity)

        entity.parent = destination
        destination.children.append(entity)
        if entity.database != destination.database:
            for node in self._walk(entity):
                node.database = destination.database
        return entity

    def replicate(self, entity: Entity, destination: Entity) -> Optional[Entity]:
        if entity.is_root or not destination.is_canonical:
            return None
        if entity.database != destination.database:
            return None
        if self._is_within(destination, entity):
            return None
        if destination is entity.parent or destination in entity.replica_parents:
            return entity

        entity.replica_parents.append(destination)
        destination.children.append(entity)
        return entity

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_within(node: Entity, ancestor: Entity) -> bool:
        """True if node is ancestor or sits in its primary subtree."""
        current: Optional[Entity] = node
        while current is not None:
            if current is ancestor:
                return True
            current = current.parent
        return False

    @staticmethod
    def _walk(entity: Entity) -> Iterator[Entity]:
        stack = [entity]
        while stack:
            node = stack.pop()
            yield node
            # Replicas appear under several parents; only follow primary edges
            stack.extend(c for c in node.children if c.parent is node)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_snapshot(self) -> Dict[str, Any]:
        def dump(node: Entity) -> Dict[str, Any]:
            out: Dict[str, Any] = {
                "uuid": node.uuid,
                "id": node.numeric_id,
                "name": node.name,
                "type": node.kind,
            }
            if node.tags:
                out["tags"] = list(node.tags)
            if node.comment:
                out["comment"] = node.comment
            if node.metadata:
                out["metadata"] = dict(node.metadata)
            if node.query is not None:
                out["query"] = node.query
            if node.is_container:
                out["children"] = [
                    dump(c) if c.parent is node else {"replicaOf": c.uuid}
                    for c in node.children
                ]
            return out

        return {
            "databases": [
                {"name": db.name, "root": dump(db.root)} for db in self._databases
            ]
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "InMemoryStore":
        store = cls()
        replicas: List[Tuple[Entity, str]] = []

        def load(node: Dict[str, Any], parent: Entity) -> None:
            if "replicaOf" in node:
                replicas.append((parent, node["replicaOf"]))
                return
            entity = store._make(
                node["name"],
                node.get("type", CANONICAL_KIND),
                parent.database,
                parent,
                uuid=node.get("uuid"),
                numeric_id=node.get("id"),
            )
            _apply_fields(entity, node)
            for child in node.get("children", []):
                load(child, entity)

        for db_data in data.get("databases", []):
            root_data = db_data.get("root", {})
            database = store.add_database(
                db_data["name"],
                uuid=root_data.get("uuid"),
            )
            if root_data.get("id") is not None:
                store._reindex(database.root, root_data["id"])
            _apply_fields(database.root, root_data)
            for child in root_data.get("children", []):
                load(child, database.root)

        for parent, ref in replicas:
            entity = store.get_by_identifier(ref)
            if entity is None:
                raise ValueError(f"Snapshot replica points to unknown record: {ref}")
            entity.replica_parents.append(parent)
            parent.children.append(entity)

        return store

    def _reindex(self, entity: Entity, numeric_id: int) -> None:
        self._by_numeric.pop(entity.numeric_id, None)
        entity.numeric_id = numeric_id
        self._register(entity)


def _apply_fields(entity: Entity, node: Dict[str, Any]) -> None:
    entity.tags = list(node.get("tags", []))
    entity.comment = node.get("comment", "")
    entity.metadata = dict(node.get("metadata", {}))
    entity.query = node.get("query")
