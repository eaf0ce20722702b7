"""
Tests for the fuzzy container matcher.

Tier order: exact > normalized > surname (leaf, author) > first token (leaf).
Within a tier canonical groups beat smart groups.
"""

import pytest

from shelfwise.errors import ContainerNotFound
from shelfwise.resolve.fuzzy import (
    FuzzyContainerMatcher,
    find_matching_container,
    first_token,
    is_author_name,
    normalize,
    surname,
)


@pytest.fixture
def authors(store, research):
    return research.root.children[1]  # "Authors"


def resolve(store, research, path, create_missing=True):
    return FuzzyContainerMatcher(store).resolve(research, path, create_missing)


class TestHelpers:

    def test_normalize(self):
        assert normalize("  smith,   john\t") == "SMITH, JOHN"

    def test_is_author_name(self):
        assert is_author_name("Smith, John")
        assert not is_author_name("Hypnosis")

    def test_surname(self):
        assert surname("Smith, John") == "SMITH"
        assert surname("smith ,Jane") == "SMITH"
        assert surname("Hypnosis  Research") == "HYPNOSIS RESEARCH"

    @pytest.mark.parametrize("text, token", [
        ("Artificial Intelligence", "ARTIFICIAL"),
        ("AI Research", "AI"),
        ("Rock & Roll", "ROCK"),
        ("Self-Hypnosis", "SELF"),
        ("  padded name", "PADDED"),
        ("", ""),
    ])
    def test_first_token(self, text, token):
        assert first_token(text) == token


class TestTierPrecedence:

    def test_exact_tier_picks_canonical(self, store, authors):
        canonical = store.add_group("Smith, J", authors)
        store.add_smart_group("SMITH, J", authors)
        assert find_matching_container(authors.children, "Smith, J", True) is canonical

    def test_earlier_tier_beats_canonical_preference(self, store, authors):
        smart = store.add_smart_group("Smith, J", authors)
        store.add_group("SMITH, J", authors)
        assert find_matching_container(authors.children, "Smith, J", True) is smart

    def test_canonical_preferred_within_tier(self, store, authors):
        store.add_smart_group("Reading", authors)
        canonical = store.add_group("Reading", authors)
        assert find_matching_container(authors.children, "Reading", True) is canonical

    def test_normalized_tier(self, store, authors):
        group = store.add_group("Reading List", authors)
        assert find_matching_container(authors.children, "  reading   list ", False) is group

    def test_leaves_are_never_candidates(self, store, research):
        inbox = research.root.children[0]
        assert find_matching_container(inbox.children, "Paper One", True) is None


class TestLeafTiers:

    def test_surname_tier(self, store, research, authors):
        jane = store.add_group("Smith, Jane", authors)
        resolution = resolve(store, research, "/Authors/Smith, John")
        assert resolution.container is jane
        assert resolution.created is False
        assert resolution.created_parts == ["(matched: Smith, Jane)"]

    def test_surname_tier_only_applies_to_leaf(self, store, research, authors):
        store.add_group("Smith, Jane", authors)
        resolution = resolve(store, research, "/Authors/Smith, John/Notes")
        assert resolution.container.parent.name == "Smith, John"
        assert resolution.created_parts == ["Smith, John", "Notes"]

    def test_first_token_tier(self, store, research, authors):
        hypnosis = store.add_group("Hypnosis", authors)
        resolution = resolve(store, research, "/Authors/Hypnosis Research")
        assert resolution.container is hypnosis

    def test_first_token_mismatch_creates_group(self, store, research, authors):
        store.add_group("AI Research", authors)
        resolution = resolve(store, research, "/Authors/Artificial Intelligence")
        assert resolution.created is True
        assert resolution.container.name == "Artificial Intelligence"
        assert resolution.container.parent is authors
        assert resolution.created_parts == ["Artificial Intelligence"]

    def test_short_token_guard(self, store, research, authors):
        store.add_group("AI Research", authors)
        resolution = resolve(store, research, "/Authors/AI Ethics")
        assert resolution.created is True
        assert resolution.container.name == "AI Ethics"

    def test_author_segment_skips_token_tier(self, store, research, authors):
        store.add_group("Smithson Papers", authors)
        resolution = resolve(store, research, "/Authors/Smithson, Al")
        # Surname "SMITHSON" vs "SMITHSON PAPERS": no match, token tier not used
        assert resolution.created is True


class TestResolve:

    def test_root_path(self, store, research):
        resolution = resolve(store, research, "/")
        assert resolution.container is research.root
        assert resolution.path == "/"

    def test_no_create(self, store, research):
        with pytest.raises(ContainerNotFound) as exc_info:
            resolve(store, research, "/Authors/Nobody, Here", create_missing=False)
        assert exc_info.value.consumed == "/Authors"

    def test_matched_container_is_not_modified(self, store, research, authors):
        jane = store.add_group("Smith, Jane", authors)
        jane.tags = ["kept"]
        resolve(store, research, "/Authors/Smith, John")
        assert jane.name == "Smith, Jane"
        assert jane.tags == ["kept"]

    def test_shared_cache_prevents_duplicate_creation(self, store, research):
        matcher = FuzzyContainerMatcher(store)
        first = matcher.resolve(research, "/Topics/Memory")
        second = matcher.resolve(research, "Topics/Memory/")
        assert first.container is second.container
        assert len([c for c in research.root.children if c.name == "Topics"]) == 1
