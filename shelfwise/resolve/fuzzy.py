"""
Fuzzy container matching for auto-filing.

Each path segment is matched against the current container's children
through a cascade of tiers; the first tier with any candidate wins and,
within a tier, a canonical group beats a smart group. When nothing
matches, a canonical group with the exact segment text is created.

Tiers:
  1. exact name
  2. normalized name (uppercase, trimmed, whitespace collapsed)
  3. leaf segment that looks like an author ("LAST, First"): same surname
  4. leaf segment otherwise: same first token, token longer than 2 chars

The walk never backtracks and never modifies a matched container.
"""

import re
from typing import Callable, List, Optional

from shelfwise.errors import ContainerNotFound, ExternalOperationError
from shelfwise.resolve.containers import PathCache, join_path, split_path
from shelfwise.schemas import Database, Entity, GroupResolution
from shelfwise.store.client import StoreClient

MIN_TOKEN_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"[\s,\-&]+")


# ============================================================================
# NORMALIZATION
# ============================================================================

def normalize(s: str) -> str:
    return _WHITESPACE.sub(" ", s.upper().strip())


def is_author_name(s: str) -> bool:
    return "," in s


def surname(s: str) -> str:
    if is_author_name(s):
        return normalize(s.split(",", 1)[0])
    return normalize(s)


def first_token(s: str) -> str:
    tokens = [t for t in _TOKEN_SPLIT.split(s.strip()) if t]
    return normalize(tokens[0]) if tokens else ""


# ============================================================================
# MATCHING
# ============================================================================

Tier = Callable[[str], bool]


def _tiers(segment: str, is_leaf: bool) -> List[Tier]:
    target_norm = normalize(segment)
    tiers: List[Tier] = [
        lambda name: name == segment,
        lambda name: normalize(name) == target_norm,
    ]
    if not is_leaf:
        return tiers

    if is_author_name(segment):
        target_surname = surname(segment)
        tiers.append(lambda name: surname(name) == target_surname)
    else:
        target_token = first_token(segment)
        tiers.append(
            lambda name: len(target_token) >= MIN_TOKEN_LENGTH and first_token(name) == target_token
        )
    return tiers


def find_matching_container(children: List[Entity], segment: str, is_leaf: bool) -> Optional[Entity]:
    """
    Pick the best container among children for segment, or None.

    Leaves are never candidates.
    """
    containers = [c for c in children if c.is_container]
    for matches in _tiers(segment, is_leaf):
        canonical = None
        virtual = None
        for child in containers:
            if not matches(child.name):
                continue
            if child.is_canonical:
                canonical = child
                break
            if virtual is None:
                virtual = child
        if canonical is not None:
            return canonical
        if virtual is not None:
            return virtual
    return None


class FuzzyContainerMatcher:
    MODE = "fuzzy"

    def __init__(self, store: StoreClient, cache: Optional[PathCache] = None):
        self.store = store
        self.cache = cache if cache is not None else PathCache()

    def resolve(self, database: Database, path: Optional[str], create_missing: bool = True) -> GroupResolution:
        segments = split_path(path)
        full_path = join_path(segments)
        current = self.store.root(database)
        resolution = GroupResolution(container=current, path=full_path, database=database.name)
        if not segments:
            return resolution

        for depth, segment in enumerate(segments):
            prefix = segments[:depth + 1]
            is_leaf = depth == len(segments) - 1
            # Leaf segments use more tiers, so they are cached separately
            mode = f"{self.MODE}:leaf" if is_leaf else self.MODE
            cached = self.cache.get(database, prefix, mode)
            if cached is not None:
                current = cached
                continue

            found = find_matching_container(self.store.list_children(current), segment, is_leaf)

            if found is not None:
                if found.name != segment:
                    resolution.created_parts.append(f"(matched: {found.name})")
            else:
                if not create_missing:
                    raise ContainerNotFound(full_path, segment, join_path(segments[:depth]))
                found = self.store.create_container(segment, current)
                if not found:
                    raise ExternalOperationError("create container", segment)
                resolution.created = True
                resolution.created_parts.append(segment)

            self.cache.put(database, prefix, mode, found)
            current = found

        resolution.container = current
        return resolution
