"""
Tests for the in-memory store primitives.
"""

from conftest import child


class TestMutations:

    def test_move_into_smart_group_fails(self, store, research):
        smart = store.add_smart_group("Unread", research.root)
        paper = child(store, child(store, research.root, "Inbox"), "Paper One")
        assert store.move(paper, smart) is None
        assert paper.location == "/Inbox"

    def test_move_into_own_subtree_fails(self, store, research):
        inbox = child(store, research.root, "Inbox")
        sub = store.add_group("Sub", inbox)
        assert store.move(inbox, sub) is None
        assert store.move(inbox, inbox) is None

    def test_move_across_databases_updates_subtree(self, store, research):
        archive = store.add_database("Archive")
        inbox = child(store, research.root, "Inbox")
        assert store.move(inbox, archive.root) is inbox
        assert all(c.database == "Archive" for c in inbox.children)

    def test_root_cannot_be_renamed_or_moved(self, store, research):
        assert store.set_name(research.root, "Other") is False
        assert store.move(research.root, child(store, research.root, "Authors")) is None

    def test_create_container_under_leaf_fails(self, store, research):
        paper = child(store, child(store, research.root, "Inbox"), "Paper One")
        assert store.create_container("X", paper) is None

    def test_replicate_is_idempotent(self, store, research):
        authors = child(store, research.root, "Authors")
        paper = child(store, child(store, research.root, "Inbox"), "Paper One")
        store.replicate(paper, authors)
        store.replicate(paper, authors)
        assert authors.children.count(paper) == 1
        assert paper.parent.name == "Inbox"

    def test_move_onto_replica_location_drops_replica(self, store, research):
        authors = child(store, research.root, "Authors")
        paper = child(store, child(store, research.root, "Inbox"), "Paper One")
        store.replicate(paper, authors)
        store.move(paper, authors)
        assert authors.children.count(paper) == 1
        assert paper.replica_parents == []
        assert paper.location == "/Authors"

    def test_lookup_is_case_insensitive(self, store, research):
        inbox = child(store, research.root, "Inbox")
        assert store.get_by_identifier(inbox.uuid.lower()) is inbox
