"""
Entity resolution with fixed strategy precedence.

Strategies are tried in the order id -> numericId -> path -> name. A
strategy is attempted only when its fields are present (path and name
also need a scope container). The first success wins. When everything
fails, the error of the earliest attempted strategy is reported, even if
a later one failed differently.
"""

from collections import deque
from typing import Callable, List, Optional, Tuple

from shelfwise.errors import NotFoundError, ShelfError, TypeMismatchError, ValidationError
from shelfwise.resolve.containers import split_path
from shelfwise.resolve.identifiers import classify
from shelfwise.schemas import Entity, ResolutionRequest, ResolutionResult
from shelfwise.store.client import StoreClient


class EntityResolver:

    def __init__(self, store: StoreClient):
        self.store = store

    def _strategies(self, request: ResolutionRequest) -> List[Tuple[str, Callable[[], Entity]]]:
        """Attempted strategies for request, in precedence order."""
        strategies = []
        if request.id:
            strategies.append(("id", lambda: self._by_id(request.id)))
        if request.numeric_id is not None:
            strategies.append(("numericId", lambda: self._by_numeric_id(request.numeric_id)))
        if request.path and request.scope_container is not None:
            strategies.append(("path", lambda: self._by_path(request.path, request.scope_container)))
        if request.name and request.scope_container is not None:
            strategies.append(("name", lambda: self._by_name(request.name, request.scope_container)))
        return strategies

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        strategies = self._strategies(request)
        if not strategies:
            raise ValidationError("No valid lookup parameters")

        first_error: Optional[ShelfError] = None
        for method, lookup in strategies:
            try:
                return ResolutionResult(entity=lookup(), method=method)
            except ShelfError as e:
                if first_error is None:
                    first_error = e

        return ResolutionResult(error=first_error)

    def resolve_or_raise(self, request: ResolutionRequest) -> Entity:
        result = self.resolve(request)
        if not result.ok:
            raise result.error
        return result.entity

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _by_id(self, reference: str) -> Entity:
        ident = classify(reference)
        if not ident.is_identifier:
            raise ValidationError(f"Not a valid identifier: {reference}")
        entity = self.store.get_by_identifier(ident.id)
        if entity is None:
            raise NotFoundError(f"Record not found: {reference}")
        return entity

    def _by_numeric_id(self, numeric_id) -> Entity:
        try:
            value = int(numeric_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Not a valid numeric id: {numeric_id}")
        entity = self.store.get_by_numeric_id(value)
        if entity is None:
            raise NotFoundError(f"Record not found with id: {value}")
        return entity

    def _by_path(self, path: str, scope: Entity) -> Entity:
        segments = split_path(path)
        if not segments:
            return scope

        current = scope
        for depth, segment in enumerate(segments):
            if not current.is_container:
                raise TypeMismatchError(
                    f"Path component is not a group: {segments[depth - 1]} ({current.kind})"
                )
            found = None
            for child in self.store.list_children(current):
                if child.name == segment:
                    found = child
                    break
            if found is None:
                raise NotFoundError(f"Record not found at path: {path} (missing: {segment})")
            current = found
        return current

    def _by_name(self, name: str, scope: Entity) -> Entity:
        # Breadth-first, so a direct child wins over a deeper namesake
        queue = deque(self.store.list_children(scope))
        seen = set()
        while queue:
            entity = queue.popleft()
            if id(entity) in seen:
                continue
            seen.add(id(entity))
            if entity.name == name:
                return entity
            if entity.is_container:
                queue.extend(self.store.list_children(entity))
        raise NotFoundError(f"Record not found with name: {name}")
