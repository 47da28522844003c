"""
Error taxonomy of the deep-dive engine.

- InvalidPerspective / InvalidTierFilter / InvalidParentId: input validation
  failures, raised before any collaborator is called.
- AdapterFailure: a collaborator (warehouse aggregation, team membership,
  monthly history) could not produce data. Fatal for the whole invocation.

An empty population is not an error, and arithmetic edge cases (zero
denominators) are handled as policy in the services and never raise.
"""

from typing import Optional


class DeepDiveError(Exception):
    """Base class for all engine errors."""


class InvalidPerspective(DeepDiveError):
    """Unknown perspective, or a drill-down from a terminal perspective."""

    def __init__(self, value: object, reason: Optional[str] = None) -> None:
        self.value = value
        message = f"Invalid perspective: {value}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidTierFilter(DeepDiveError):
    """Tier filter outside A, B, C, NEW, LOST."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid tier filter: {value}")


class InvalidParentId(DeepDiveError):
    """Drill-down parent id that is not a valid value of the parent's filter key."""

    def __init__(self, perspective: object, value: object, reason: str) -> None:
        self.perspective = perspective
        self.value = value
        super().__init__(f"Invalid parentId for {perspective}: {value} ({reason})")


class AdapterFailure(DeepDiveError):
    """A collaborator failed to produce data (transport or query error)."""

    def __init__(self, adapter: str, message: str) -> None:
        self.adapter = adapter
        super().__init__(f"{adapter} failed: {message}")
