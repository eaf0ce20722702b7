"""Shared fixtures: a small in-memory library."""

import pytest

from shelfwise.store.memory import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def research(store):
    """Database "Research" with an Inbox holding two records and an Authors group."""
    db = store.add_database("Research")
    inbox = store.add_group("Inbox", db.root)
    store.add_record("Paper One", inbox)
    store.add_record("Paper Two", inbox, kind="PDF document")
    store.add_group("Authors", db.root)
    return db


def child(store, container, name):
    """First child of container named name (test helper)."""
    for c in store.list_children(container):
        if c.name == name:
            return c
    raise AssertionError(f"{name!r} not found under {container.name!r}")
