"""
move / replicate commands - file records into groups resolved exactly.
"""

from typing import Any, Dict, List

from shelfwise.errors import ShelfError, ValidationError
from shelfwise.resolve.containers import ContainerResolver
from shelfwise.resolve.entities import EntityResolver
from shelfwise.schemas import ResolutionRequest, ShelfConfig
from .common import commit_store, database_ref, open_store


def run_move(args, config: ShelfConfig) -> Dict[str, Any]:
    if not args.records:
        raise ValidationError("Missing required field: records (array of UUIDs)")

    store = open_store(config)
    containers = ContainerResolver(store)
    entities = EntityResolver(store)

    db_ref = database_ref(args, config)
    database = containers.resolve_database(db_ref) if db_ref else None
    destination = containers.resolve_group(args.to, database)

    moved: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []
    for ref in args.records:
        try:
            record = entities.resolve_or_raise(ResolutionRequest.by_id(ref))
        except ShelfError as e:
            errors.append({"uuid": ref, "error": str(e)})
            continue

        result = store.move(record, destination)
        if not result:
            errors.append({"uuid": ref, "error": "Move returned no result"})
            continue
        moved.append({
            "uuid": result.uuid,
            "name": result.name,
            "newLocation": result.location,
            "database": result.database,
        })

    if moved:
        commit_store(store, config)

    out = {
        "success": len(moved) > 0,
        "destination": {
            "uuid": destination.uuid,
            "name": destination.name,
            "database": destination.database,
        },
        "moved": moved,
    }
    if errors:
        out["errors"] = errors
    return out


def run_replicate(args, config: ShelfConfig) -> Dict[str, Any]:
    """
    Replicate one record into several groups; per-destination errors are collected.
    """
    if not args.destinations:
        raise ValidationError("Missing required field: destinations")

    store = open_store(config)
    containers = ContainerResolver(store)
    record = EntityResolver(store).resolve_or_raise(ResolutionRequest.by_id(args.record))

    db_ref = database_ref(args, config)
    database = containers.resolve_database(db_ref) if db_ref else None

    replicated: List[Dict[str, Any]] = []
    errors: List[Dict[str, Any]] = []
    for dest_ref in args.destinations:
        try:
            group = containers.resolve_group(dest_ref, database)
        except ShelfError as e:
            errors.append({"destination": dest_ref, "error": str(e)})
            continue

        if not store.replicate(record, group):
            errors.append({"destination": dest_ref, "error": f"Cannot replicate into {group.path} ({group.kind})"})
            continue
        replicated.append({
            "destinationUuid": group.uuid,
            "destinationName": group.name,
            "replicantUuid": record.uuid,
        })

    if replicated:
        commit_store(store, config)

    out = {
        "success": len(replicated) > 0,
        "sourceUuid": record.uuid,
        "sourceName": record.name,
        "replicated": replicated,
    }
    if errors:
        out["errors"] = errors
    return out
