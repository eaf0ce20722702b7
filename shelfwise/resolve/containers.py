"""
Exact container resolution.

Walks a separator-delimited path from a database root, matching each
segment byte-for-byte against the children of the current container.
Missing segments are created on request. This resolver never does fuzzy
matching; see fuzzy.py for the auto-filing variant.
"""

from typing import Dict, List, Optional, Tuple

from shelfwise.errors import (
    ContainerNotFound,
    ExternalOperationError,
    NotFoundError,
    TypeMismatchError,
    ValidationError,
)
from shelfwise.resolve.identifiers import classify
from shelfwise.schemas import PATH_SEPARATOR, Database, Entity
from shelfwise.store.client import StoreClient


def split_path(path: Optional[str]) -> List[str]:
    """
    Split a path into segments, dropping empty ones.

    "/A/B/", "A/B" and "/A//B" all give ["A", "B"].
    """
    if not path:
        return []
    return [p for p in path.split(PATH_SEPARATOR) if p]


def join_path(segments: List[str]) -> str:
    return PATH_SEPARATOR + PATH_SEPARATOR.join(segments)


class PathCache:
    """
    Per-run memo of (database, segments, mode) -> container.

    Creates are recorded immediately so a later lookup of the same path
    sees the new container instead of creating a sibling twin.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, Tuple[str, ...], str], Entity] = {}

    def get(self, database: Database, segments: List[str], mode: str) -> Optional[Entity]:
        return self._entries.get((database.uuid, tuple(segments), mode))

    def put(self, database: Database, segments: List[str], mode: str, container: Entity) -> None:
        self._entries[(database.uuid, tuple(segments), mode)] = container

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ContainerResolver:
    MODE = "exact"

    def __init__(self, store: StoreClient, cache: Optional[PathCache] = None):
        self.store = store
        self.cache = cache if cache is not None else PathCache()

    def resolve_database(self, ref: Optional[str]) -> Database:
        """
        Find a database by exact name, or by the identifier of any record in it.
        """
        if not ref:
            raise ValidationError("Missing required field: database")

        databases = self.store.list_databases()
        ident = classify(ref)
        if ident.is_identifier:
            for database in databases:
                if database.uuid.upper() == ident.id.upper():
                    return database
            record = self.store.get_by_identifier(ident.id)
            if record is None:
                raise NotFoundError(f"Database not found with UUID: {ref}")
            for database in databases:
                if database.name == record.database:
                    return database
            raise NotFoundError(f"Database not found with UUID: {ref}")

        for database in databases:
            if database.name == ref:
                return database
        raise NotFoundError(f"Database not found: {ref}")

    def resolve_container(
            self,
            database: Database,
            path: Optional[str],
            create_missing: bool = False,
            created: Optional[List[str]] = None,
    ) -> Entity:
        """
        Walk path from the database root with exact name matching.

        Names of groups created on the way are appended to created, if given.
        """
        segments = split_path(path)
        if not segments:
            return self.store.root(database)

        cached = self.cache.get(database, segments, self.MODE)
        if cached is not None:
            return cached

        current = self.store.root(database)
        for depth, segment in enumerate(segments):
            prefix = segments[:depth + 1]
            found = self.cache.get(database, prefix, self.MODE)
            if found is None:
                found = self._find_exact(current, segment)
                if found is None:
                    if not create_missing:
                        raise ContainerNotFound(
                            join_path(segments), segment, join_path(segments[:depth])
                        )
                    found = self.store.create_container(segment, current)
                    if not found:
                        raise ExternalOperationError("create container", segment)
                    if created is not None:
                        created.append(segment)
                elif not found.is_container:
                    raise TypeMismatchError(
                        f"Path component is not a group: {segment} ({found.kind})"
                    )
                self.cache.put(database, prefix, self.MODE, found)
            current = found

        return current

    def resolve_group(self, ref: Optional[str], database: Optional[Database]) -> Entity:
        """
        Resolve a container by identifier, or by exact path within database.
        """
        ident = classify(ref)
        if ident.is_identifier:
            group = self.store.get_by_identifier(ident.id)
            if group is None:
                raise NotFoundError(f"Group not found with UUID: {ref}")
            if not group.is_container:
                raise TypeMismatchError(f"UUID does not point to a group: {group.kind}")
            return group

        if database is None:
            raise ValidationError(
                "Destination must be UUID, or provide a database for path-based destination"
            )
        return self.resolve_container(database, ref, create_missing=False)

    def _find_exact(self, container: Entity, segment: str) -> Optional[Entity]:
        for child in self.store.list_children(container):
            if child.name == segment:
                return child
        return None
