"""
Reference classification.

Decides whether a token is a store identifier (bare or wrapped in a
scheme://id URL) or a literal name/path segment.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from shelfwise.schemas import PATH_SEPARATOR

BARE_ID = "bareId"
WRAPPED = "wrapped"
LITERAL = "literal"

_WRAPPED_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://([A-Za-z0-9-]+)(?:\?.*)?$", re.DOTALL)
_BARE_RE = re.compile(r"^[A-Za-z0-9-]{8,}$")


@dataclass(frozen=True)
class Classification:
    kind: str  # bareId | wrapped | literal
    id: Optional[str] = None

    @property
    def is_identifier(self) -> bool:
        return self.kind != LITERAL


def classify(token: Any) -> Classification:
    """Classify a reference token. Never raises."""
    if not isinstance(token, str) or not token:
        return Classification(LITERAL)

    match = _WRAPPED_RE.match(token)
    if match:
        return Classification(WRAPPED, match.group(1))

    if PATH_SEPARATOR not in token and "-" in token and _BARE_RE.match(token):
        return Classification(BARE_ID, token)

    return Classification(LITERAL)


def is_identifier(token: Any) -> bool:
    return classify(token).is_identifier


def extract_identifier(token: str) -> str:
    """Return the identifier inside token, or token unchanged if it is literal."""
    result = classify(token)
    return result.id if result.is_identifier else token
