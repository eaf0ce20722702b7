import sys
from typing import Any, Dict

from shelfwise.errors import ValidationError
from shelfwise.schemas import ShelfConfig
from shelfwise.state.io import save_library
from shelfwise.store.memory import InMemoryStore


def run(args, config: ShelfConfig) -> Dict[str, Any]:
    """
    Create an empty library with the named databases.

    Refuses to overwrite an existing library unless --force is given.
    """
    names = args.database or []
    if not names:
        raise ValidationError("Missing required field: database")
    if len(set(names)) != len(names):
        raise ValidationError("Database names must be unique")

    path = config.library_path
    if path.exists() and not args.force:
        raise ValidationError(f"Library already exists: {path} (use --force to replace it)")

    store = InMemoryStore()
    databases = [store.add_database(name) for name in names]
    save_library(store, path)
    print(f"[shelf] initialized library -> {path}", file=sys.stderr)

    return {
        "success": True,
        "library": str(path),
        "databases": [{"name": db.name, "uuid": db.uuid} for db in databases],
    }
