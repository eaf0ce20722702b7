"""
Shelfwise resolution layer.

- identifiers: reference token classification
- entities: multi-strategy record lookup
- containers: exact path traversal (optionally creating groups)
- fuzzy: tiered matching used by auto-filing
"""

from .identifiers import classify, is_identifier, extract_identifier
from .entities import EntityResolver
from .containers import ContainerResolver, PathCache, split_path
from .fuzzy import (
    FuzzyContainerMatcher,
    find_matching_container,
    normalize,
    is_author_name,
    surname,
    first_token,
)

__all__ = [
    'classify',
    'is_identifier',
    'extract_identifier',
    'EntityResolver',
    'ContainerResolver',
    'PathCache',
    'split_path',
    'FuzzyContainerMatcher',
    'find_matching_container',
    'normalize',
    'is_author_name',
    'surname',
    'first_token',
]
