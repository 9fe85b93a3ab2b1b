"""Data models for lazy-rpms.

These Pydantic models represent the records passed between the planning
stages. Records are created fresh on every run; nothing here is persisted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SpecInfo(BaseModel):
    """A discovered RPM spec and the build dependencies it declares.

    Attributes:
        path: Spec path relative to the workspace root, POSIX separators.
        name: Package name derived from the spec's directory.
        build_deps: Names from BuildRequires lines, unique, in the order
            first seen. Names of packages outside the repository are kept
            here and dropped when the graph is built.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    build_deps: tuple[str, ...] = ()


class FileChange(BaseModel):
    """The most recent commit touching a file."""

    model_config = ConfigDict(frozen=True)

    revision: str
    timestamp: int


class StalenessVerdict(BaseModel):
    """Whether a spec needs to be (re)built, and why."""

    model_config = ConfigDict(frozen=True)

    path: str
    needs_build: bool
    reason: str


class Plan(BaseModel):
    """Result of one planning run.

    Attributes:
        discovered: Every spec path found, in discovery order.
        specs: Specs that need building, in discovery order.
        bundles: Ordered build bundles (empty unless bundling was requested).
    """

    discovered: list[str] = Field(default_factory=list)
    specs: list[SpecInfo] = Field(default_factory=list)
    bundles: list[list[str]] = Field(default_factory=list)
