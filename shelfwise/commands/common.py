from typing import Optional

from shelfwise.schemas import ShelfConfig
from shelfwise.state.io import load_library, save_library
from shelfwise.store.memory import InMemoryStore


def open_store(config: ShelfConfig) -> InMemoryStore:
    return load_library(config.library_path)


def commit_store(store: InMemoryStore, config: ShelfConfig) -> None:
    save_library(store, config.library_path)


def database_ref(args, config: ShelfConfig) -> Optional[str]:
    """Database from -d/--database, falling back to the configured default."""
    return getattr(args, "database", None) or config.default_database
