"""
Store client interface.

The document store is an external collaborator. Everything the engine
needs from it goes through these primitives; a failing primitive returns
a falsy value (None / False) instead of raising, and the calling
component decides which error to report.
"""

from typing import Any, Dict, List, Optional

from shelfwise.schemas import Database, Entity


class StoreClient:
    """Base class for hierarchical document stores"""

    # --- lookups -----------------------------------------------------------

    def get_by_identifier(self, reference: str) -> Optional[Entity]:
        raise NotImplementedError

    def get_by_numeric_id(self, numeric_id: int) -> Optional[Entity]:
        raise NotImplementedError

    def list_databases(self) -> List[Database]:
        raise NotImplementedError

    def root(self, database: Database) -> Entity:
        raise NotImplementedError

    def list_children(self, container: Entity) -> List[Entity]:
        raise NotImplementedError

    def get_metadata(self, entity: Entity) -> Dict[str, Any]:
        """Custom metadata of entity (a copy; empty if none)"""
        raise NotImplementedError

    # --- mutations ---------------------------------------------------------

    def create_container(self, name: str, parent: Entity) -> Optional[Entity]:
        """Create a canonical group under parent, or None if refused"""
        raise NotImplementedError

    def set_name(self, entity: Entity, name: str) -> bool:
        raise NotImplementedError

    def set_tags(self, entity: Entity, tags: List[str]) -> bool:
        """Replace the tag set"""
        raise NotImplementedError

    def set_comment(self, entity: Entity, comment: str) -> bool:
        raise NotImplementedError

    def set_metadata(self, entity: Entity, metadata: Dict[str, Any]) -> bool:
        """Replace custom metadata with the given mapping"""
        raise NotImplementedError

    def move(self, entity: Entity, destination: Entity) -> Optional[Entity]:
        raise NotImplementedError

    def replicate(self, entity: Entity, destination: Entity) -> Optional[Entity]:
        """Add destination as an extra parent of entity"""
        raise NotImplementedError
