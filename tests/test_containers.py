"""
Tests for exact container resolution.
"""

import pytest

from shelfwise.errors import ContainerNotFound, NotFoundError, TypeMismatchError, ValidationError
from shelfwise.resolve.containers import ContainerResolver, PathCache, split_path

from conftest import child


@pytest.fixture
def tree(store, research):
    a = store.add_group("A", research.root)
    b = store.add_group("B", a)
    return research, a, b


class TestSplitPath:

    @pytest.mark.parametrize("path", ["/A/B/", "A/B", "/A//B"])
    def test_equivalent_forms(self, path):
        assert split_path(path) == ["A", "B"]

    @pytest.mark.parametrize("path", [None, "", "/", "///"])
    def test_empty_forms(self, path):
        assert split_path(path) == []


class TestResolveContainer:

    @pytest.mark.parametrize("path", ["/A/B/", "A/B", "/A//B"])
    def test_path_forms_resolve_to_same_container(self, store, tree, path):
        research, _, b = tree
        container = ContainerResolver(store).resolve_container(research, path)
        assert container.uuid == b.uuid

    @pytest.mark.parametrize("path", [None, "", "/"])
    def test_root_only_path(self, store, tree, path):
        research, _, _ = tree
        assert ContainerResolver(store).resolve_container(research, path) is research.root

    def test_idempotent(self, store, tree):
        research, _, _ = tree
        resolver = ContainerResolver(store)
        first = resolver.resolve_container(research, "/A/B/C", create_missing=True)
        second = resolver.resolve_container(research, "/A/B/C", create_missing=True)
        assert first.uuid == second.uuid
        assert len([c for c in store.list_children(child(store, child(store, research.root, "A"), "B"))
                    if c.name == "C"]) == 1

    def test_missing_segment_reports_consumed_prefix(self, store, tree):
        research, _, _ = tree
        with pytest.raises(ContainerNotFound) as exc_info:
            ContainerResolver(store).resolve_container(research, "/A/X/Y")
        assert exc_info.value.segment == "X"
        assert exc_info.value.consumed == "/A"
        assert "missing: X" in str(exc_info.value)

    def test_creates_missing_canonical_groups(self, store, tree):
        research, _, b = tree
        created = []
        container = ContainerResolver(store).resolve_container(
            research, "/A/B/New One/Deeper", create_missing=True, created=created
        )
        assert container.name == "Deeper"
        assert container.is_canonical
        assert container.parent.name == "New One"
        assert container.parent.parent is b
        assert created == ["New One", "Deeper"]

    def test_matching_is_byte_exact(self, store, tree):
        research, _, _ = tree
        with pytest.raises(ContainerNotFound):
            ContainerResolver(store).resolve_container(research, "/a/b")

    def test_first_of_duplicate_siblings(self, store, tree):
        research, a, _ = tree
        store.add_group("B", a)
        container = ContainerResolver(store).resolve_container(research, "/A/B")
        assert container is a.children[0]

    def test_leaf_segment_is_type_mismatch(self, store, research):
        with pytest.raises(TypeMismatchError):
            ContainerResolver(store).resolve_container(research, "/Inbox/Paper One")

    def test_create_updates_cache_immediately(self, store, tree):
        research, _, _ = tree
        cache = PathCache()
        resolver = ContainerResolver(store, cache)
        created = resolver.resolve_container(research, "/A/Fresh", create_missing=True)
        assert cache.get(research, ["A", "Fresh"], ContainerResolver.MODE) is created


class TestResolveDatabase:

    def test_by_name(self, store, research):
        assert ContainerResolver(store).resolve_database("Research") is research

    def test_by_record_uuid(self, store, research):
        inbox = child(store, research.root, "Inbox")
        assert ContainerResolver(store).resolve_database(inbox.uuid) is research

    def test_by_database_uuid(self, store, research):
        assert ContainerResolver(store).resolve_database(research.uuid) is research

    def test_unknown_name(self, store, research):
        with pytest.raises(NotFoundError, match="Database not found: Archive"):
            ContainerResolver(store).resolve_database("Archive")

    def test_missing_reference(self, store):
        with pytest.raises(ValidationError):
            ContainerResolver(store).resolve_database(None)


class TestResolveGroup:

    def test_by_uuid(self, store, tree):
        _, a, _ = tree
        assert ContainerResolver(store).resolve_group(a.uuid, None) is a

    def test_uuid_of_record_is_rejected(self, store, research):
        paper = child(store, child(store, research.root, "Inbox"), "Paper One")
        with pytest.raises(TypeMismatchError):
            ContainerResolver(store).resolve_group(paper.uuid, research)

    def test_path_needs_database(self, store):
        with pytest.raises(ValidationError):
            ContainerResolver(store).resolve_group("/A/B", None)

    def test_path_never_creates(self, store, tree):
        research, _, _ = tree
        with pytest.raises(ContainerNotFound):
            ContainerResolver(store).resolve_group("/A/Nope", research)
