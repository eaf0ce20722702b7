from typing import Any, Dict

from shelfwise.resolve.containers import ContainerResolver
from shelfwise.resolve.entities import EntityResolver
from shelfwise.schemas import ResolutionRequest, ShelfConfig
from .common import database_ref, open_store


def run(args, config: ShelfConfig) -> Dict[str, Any]:
    """
    Look up one record by --id, --numeric-id, --path or --name.

    Path and name lookups walk from --scope (a group UUID or path), or from
    the root of the database when only -d is given.
    """
    store = open_store(config)
    containers = ContainerResolver(store)

    database = None
    db_ref = database_ref(args, config)
    if db_ref:
        database = containers.resolve_database(db_ref)

    scope = None
    if args.path or args.name:
        if args.scope:
            scope = containers.resolve_group(args.scope, database)
        elif database is not None:
            scope = store.root(database)

    request = ResolutionRequest(
        id=args.id,
        numeric_id=args.numeric_id,
        path=args.path,
        name=args.name,
        scope_container=scope,
    )
    return EntityResolver(store).resolve(request).to_dict()
