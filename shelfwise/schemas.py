"""
Shelfwise Data Schemas - Single Source of Truth

All data structures used across layers are defined here.
This prevents duplication and ensures consistency.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Dict, Any

from shelfwise.errors import PartialBatchFailure, ValidationError


# ============================================================================
# CONSTANTS
# ============================================================================

PATH_SEPARATOR = "/"

# Record types that can hold children
CANONICAL_KIND = "group"
VIRTUAL_KIND = "smart group"
CONTAINER_KINDS = {CANONICAL_KIND, VIRTUAL_KIND}

# CSV column order for directive files and batch reports
DIRECTIVE_CSV_FIELDS = [
    "reference",
    "database",
    "destination",
    "create_missing",
    "rename",
    "tags",
    "comment",
    "metadata",
    "replicate",
]

REPORT_CSV_FIELDS = [
    "reference",
    "status",
    "name",
    "location",
    "database",
    "operations",
    "replicate_path",
    "step",
    "error",
]


# ============================================================================
# STORE VALUES
# ============================================================================

@dataclass(eq=False)
class Entity:
    """
    One node of the store: a container (group / smart group) or a leaf record.

    Equality is identity; two entities with the same name are distinct.
    """
    uuid: str
    numeric_id: int
    name: str
    kind: str
    database: str
    parent: Optional["Entity"] = field(default=None, repr=False)
    children: List["Entity"] = field(default_factory=list, repr=False)
    tags: List[str] = field(default_factory=list)
    comment: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    replica_parents: List["Entity"] = field(default_factory=list, repr=False)
    query: Optional[str] = None  # Smart groups only

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    @property
    def is_canonical(self) -> bool:
        """True for containers that can be a real filing destination."""
        return self.kind == CANONICAL_KIND

    @property
    def is_root(self) -> bool:
        return self.parent is None and self.is_container

    @property
    def location(self) -> str:
        """Path of the containing group, "/" for direct children of the root."""
        parts: List[str] = []
        node = self.parent
        while node is not None and node.parent is not None:
            parts.append(node.name)
            node = node.parent
        parts.reverse()
        return PATH_SEPARATOR + PATH_SEPARATOR.join(parts)

    @property
    def path(self) -> str:
        """Full path of this entity from its database root."""
        if self.parent is None:
            return PATH_SEPARATOR
        location = self.location
        if location == PATH_SEPARATOR:
            return PATH_SEPARATOR + self.name
        return location + PATH_SEPARATOR + self.name

    def to_summary(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "id": self.numeric_id,
            "name": self.name,
            "recordType": self.kind,
            "database": self.database,
            "location": self.location,
            "path": self.path,
            "tags": list(self.tags),
            "comment": self.comment,
        }


@dataclass(eq=False)
class Database:
    name: str
    uuid: str
    root: Entity


# ============================================================================
# RESOLUTION
# ============================================================================

@dataclass
class ResolutionRequest:
    """
    Lookup parameters for one entity.

    All fields are optional; path and name lookups additionally need a
    scope container to walk from.
    """
    id: Optional[str] = None
    numeric_id: Optional[int] = None
    path: Optional[str] = None
    name: Optional[str] = None
    scope_container: Optional[Entity] = None

    @classmethod
    def by_id(cls, reference: str) -> "ResolutionRequest":
        return cls(id=reference)

    @classmethod
    def by_numeric_id(cls, numeric_id: int) -> "ResolutionRequest":
        return cls(numeric_id=numeric_id)

    @classmethod
    def by_path(cls, path: str, scope: Entity) -> "ResolutionRequest":
        return cls(path=path, scope_container=scope)

    @classmethod
    def by_name(cls, name: str, scope: Entity) -> "ResolutionRequest":
        return cls(name=name, scope_container=scope)


@dataclass
class ResolutionResult:
    entity: Optional[Entity] = None
    method: Optional[str] = None  # id | numericId | path | name
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.entity is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"success": True, "method": self.method, "record": self.entity.to_summary()}
        return {"success": False, "error": str(self.error)}


@dataclass
class GroupResolution:
    """
    Outcome of a path resolution against a database.

    created_parts lists created segment names, plus "(matched: NAME)"
    markers where a fuzzy match picked a differently named container.
    """
    container: Entity
    path: str
    database: str
    created: bool = False
    created_parts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "success": True,
            "uuid": self.container.uuid,
            "name": self.container.name,
            "path": self.path,
            "database": self.database,
            "created": self.created,
        }
        if self.created_parts:
            out["createdParts"] = list(self.created_parts)
        return out


# ============================================================================
# BATCH CLASSIFICATION
# ============================================================================

# Accepted input keys -> Directive field. camelCase keys follow the JSON
# batch format, snake_case keys the Python names.
_DIRECTIVE_KEYS = {
    "target_reference": ("target_reference", "targetReference", "reference", "uuid"),
    "database": ("database",),
    "destination_path": ("destination_path", "destinationPath", "groupPath", "destination"),
    "create_missing": ("create_missing", "createMissing", "createGroup"),
    "rename": ("rename", "newName"),
    "tags": ("tags",),
    "comment": ("comment",),
    "metadata_patch": ("metadata_patch", "metadataPatch", "customMetadata", "metadata"),
    "replicate_path": ("replicate_path", "replicatePath", "replicateTo", "replicate"),
}


def _first_present(data: Dict[str, Any], keys) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _parse_bool(value: Any, default: bool, field_name: str = "createMissing") -> bool:
    """None gives default; anything not recognizably true or false is rejected."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("false", "0", "no", "n", "off"):
        return False
    if text in ("true", "1", "yes", "y", "on"):
        return True
    raise ValidationError(f"{field_name} must be a boolean: {value!r}")


@dataclass
class Directive:
    """One batch item: where to file a record and what to change on the way."""
    target_reference: Optional[str]
    database: Optional[str]
    destination_path: Optional[str]
    create_missing: bool = True
    rename: Optional[str] = None
    tags: Optional[List[str]] = None
    comment: Optional[str] = None
    metadata_patch: Optional[Dict[str, Any]] = None
    replicate_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], create_missing_default: bool = True) -> "Directive":
        values = {name: _first_present(data, keys) for name, keys in _DIRECTIVE_KEYS.items()}
        values["create_missing"] = _parse_bool(values["create_missing"], create_missing_default)
        return cls(**values)

    @staticmethod
    def reference_in(data: Dict[str, Any]) -> Any:
        """Target reference of a raw directive, whichever key carries it."""
        return _first_present(data, _DIRECTIVE_KEYS["target_reference"])

    @classmethod
    def from_csv_row(cls, row: Dict[str, Any], create_missing_default: bool = True) -> "Directive":
        """
        Create from a directive CSV row.

        tags are semicolon separated; metadata is a JSON object. Empty cells
        mean "not present".
        """
        def cell(name: str) -> Optional[str]:
            value = row.get(name)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        tags_cell = cell("tags")
        tags = [t.strip() for t in tags_cell.split(";") if t.strip()] if tags_cell else None

        metadata_cell = cell("metadata")
        metadata = json.loads(metadata_cell) if metadata_cell else None

        return cls(
            target_reference=cell("reference"),
            database=cell("database"),
            destination_path=cell("destination"),
            create_missing=_parse_bool(cell("create_missing"), create_missing_default, "create_missing"),
            rename=cell("rename"),
            tags=tags,
            comment=cell("comment"),
            metadata_patch=metadata,
            replicate_path=cell("replicate"),
        )


@dataclass
class DirectiveResult:
    reference: str
    name: str
    location: str
    database: str
    operations: List[str]
    replicate_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "status": "success",
            "name": self.name,
            "location": self.location,
            "database": self.database,
            "operations": list(self.operations),
            "replicatePath": self.replicate_path,
        }

    def to_csv_row(self) -> Dict[str, str]:
        return {
            "reference": self.reference,
            "status": "success",
            "name": self.name,
            "location": self.location,
            "database": self.database,
            "operations": "; ".join(self.operations),
            "replicate_path": self.replicate_path or "",
            "step": "",
            "error": "",
        }


@dataclass
class DirectiveError:
    reference: str
    step: str
    error: str
    operations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "status": "error",
            "step": self.step,
            "error": self.error,
        }

    def to_csv_row(self) -> Dict[str, str]:
        return {
            "reference": self.reference,
            "status": "error",
            "name": "",
            "location": "",
            "database": "",
            "operations": "; ".join(self.operations),
            "replicate_path": "",
            "step": self.step,
            "error": self.error,
        }


@dataclass
class BatchReport:
    processed: int = 0
    results: List[DirectiveResult] = field(default_factory=list)
    errors: List[DirectiveError] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def partial_failure(self) -> bool:
        return self.failed > 0

    def raise_for_partial_failure(self) -> None:
        if self.partial_failure:
            raise PartialBatchFailure(self.processed, self.failed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
        }


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class ShelfConfig:
    """
    Configuration for commands.

    Used by: state/io.load_config → commands
    """
    library_path: Path = Path("library.json")
    state_dir: Optional[Path] = None  # Defaults to <library dir>/.shelf
    default_database: Optional[str] = None
    create_missing: bool = True
    journal: bool = True
    pretty: bool = False

    @property
    def resolved_state_dir(self) -> Path:
        if self.state_dir is not None:
            return self.state_dir
        return self.library_path.parent / ".shelf"
