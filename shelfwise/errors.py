"""
Shelfwise error taxonomy.

Every failure the engine reports derives from ShelfError so that the
directive boundary and the commands can catch one type.
"""

from typing import Optional


class ShelfError(Exception):
    """Base class for all reported failures."""
    pass


class ValidationError(ShelfError):
    """Missing or malformed input, raised before any store call."""
    pass


class NotFoundError(ShelfError):
    """Identifier, database, container or entity is absent."""
    pass


class ContainerNotFound(NotFoundError):
    """
    A path segment has no matching container and creation was not requested.

    Carries the missing segment and the prefix consumed before it.
    """

    def __init__(self, path: str, segment: str, consumed: str = "/"):
        self.path = path
        self.segment = segment
        self.consumed = consumed
        super().__init__(
            f"Path not found: {path} (missing: {segment}, resolved: {consumed})"
        )


class TypeMismatchError(ShelfError):
    """Resolved entity is the wrong kind (e.g. a leaf where a container was required)."""
    pass


class ExternalOperationError(ShelfError):
    """A store primitive returned a falsy result."""

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class PartialBatchFailure(ShelfError):
    """Aggregate condition: a batch finished with failed > 0."""

    def __init__(self, processed: int, failed: int):
        self.processed = processed
        self.failed = failed
        super().__init__(f"{failed} of {processed} directives failed")
