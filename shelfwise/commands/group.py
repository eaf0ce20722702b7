"""
group command - resolve or create a group path.

Fuzzy matching by default (auto-filing semantics); --exact switches to
byte-exact traversal.
"""

import sys
from typing import Any, Dict

from shelfwise.resolve.containers import ContainerResolver, join_path, split_path
from shelfwise.resolve.fuzzy import FuzzyContainerMatcher
from shelfwise.schemas import GroupResolution, ShelfConfig
from .common import commit_store, database_ref, open_store


def run(args, config: ShelfConfig) -> Dict[str, Any]:
    store = open_store(config)
    resolver = ContainerResolver(store)
    database = resolver.resolve_database(database_ref(args, config))
    create_missing = not args.no_create

    if args.exact:
        created = []
        container = resolver.resolve_container(database, args.path, create_missing, created=created)
        resolution = GroupResolution(
            container=container,
            path=join_path(split_path(args.path)),
            database=database.name,
            created=bool(created),
            created_parts=created,
        )
    else:
        matcher = FuzzyContainerMatcher(store, resolver.cache)
        resolution = matcher.resolve(database, args.path, create_missing)

    if resolution.created:
        commit_store(store, config)
        print(f"[shelf] created: {', '.join(p for p in resolution.created_parts if not p.startswith('('))}",
              file=sys.stderr)

    return resolution.to_dict()
