"""Errors that abort a planning run.

Every condition here is fatal: the planner never emits a partial build
matrix, because a matrix missing some dependents would silently skip
rebuilds that are actually needed.
"""

from __future__ import annotations

from collections.abc import Iterable


class PlannerError(RuntimeError):
    """Base class for all planning failures."""


class ConfigError(PlannerError):
    """Invalid or incomplete planner configuration."""


class DiscoveryError(PlannerError):
    """Candidate spec files could not be enumerated."""


class ExtractionError(PlannerError):
    """A spec file could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read spec {path!r}: {reason}")
        self.path = path


class HistoryError(PlannerError):
    """git failed while looking up the history of a spec."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read git history of {path!r}: {reason}")
        self.path = path


class RemoteStoreError(PlannerError):
    """The attribute store was unreachable or refused the request."""

    def __init__(self, item: str, reason: str) -> None:
        super().__init__(f"Error getting package info for {item!r}: {reason}")
        self.item = item


class CycleError(PlannerError):
    """The build dependency graph contains a cycle."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = frozenset(names)
        super().__init__(
            f"Dependency cycle detected involving: {', '.join(sorted(self.names))}"
        )


class DuplicatePackageError(PlannerError):
    """Two spec files resolve to the same package name."""

    def __init__(self, name: str, paths: Iterable[str]) -> None:
        self.name = name
        self.paths = tuple(paths)
        super().__init__(
            f"Duplicate package {name!r} defined by: {', '.join(self.paths)}"
        )
