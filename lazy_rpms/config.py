"""Planner configuration.

Settings come from an optional ``lazy-rpms.toml`` at the workspace root,
overridden by whatever the caller passes explicitly (CLI options or CI
inputs). The workspace root itself is always explicit so the planner
never depends on the process working directory.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Literal

import tomlkit
from pydantic import BaseModel, Field, ValidationError, field_validator
from tomlkit.exceptions import ParseError

from .errors import ConfigError

CONFIG_FILE = "lazy-rpms.toml"


class PlannerConfig(BaseModel):
    """Everything a planning run needs to know.

    Attributes:
        workspace: Repository root; spec paths are reported relative to it.
        paths: Search paths (relative to the workspace) to look for specs in.
        recursive: Search subdirectories of each path too.
        force: Treat every spec as needing a build.
        bundle: Emit build bundles instead of a flat list of specs.
        sdb_domain: SimpleDB domain holding build records.
        repository: "owner/name" of the repository, part of the record key.
        ref: Git ref the records belong to (e.g. "refs/heads/main").
        region: AWS region of the SimpleDB domain.
        scheme: How staleness is decided ("commit" or "timestamp").
        max_workers: Concurrent per-spec lookups.
    """

    workspace: Path
    paths: list[str] = Field(min_length=1)
    recursive: bool = False
    force: bool = False
    bundle: bool = False
    sdb_domain: str | None = None
    repository: str | None = None
    ref: str | None = None
    region: str | None = None
    scheme: Literal["commit", "timestamp"] = "commit"
    max_workers: int = Field(default=8, ge=1)

    @field_validator("paths")
    @classmethod
    def _no_blank_paths(cls, value: list[str]) -> list[str]:
        paths = [p.strip() for p in value if p.strip()]
        if not paths:
            raise ValueError("at least one search path is required")
        return paths

    @field_validator("repository")
    @classmethod
    def _owner_slash_name(cls, value: str | None) -> str | None:
        if value is None:
            return value
        owner, _, name = value.partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"expected 'owner/name', got {value!r}")
        return value

    @property
    def owner(self) -> str:
        return (self.repository or "").split("/")[0]

    @property
    def repo(self) -> str:
        return (self.repository or "").split("/")[-1]

    def missing_store_settings(self) -> list[str]:
        """Names of the settings a staleness check needs but lacks."""
        return [
            name
            for name in ("sdb_domain", "repository", "ref")
            if not getattr(self, name)
        ]


def split_list(values: Iterable[str]) -> list[str]:
    """Flatten comma and newline separated values into a list.

    Example:
        ["a,b", "c\\nd"] → ["a", "b", "c", "d"]
    """
    items: list[str] = []
    for value in values:
        for line in value.splitlines():
            items.extend(part.strip() for part in line.split(",") if part.strip())
    return items


def load_config_file(workspace: Path) -> dict[str, Any]:
    """Read ``lazy-rpms.toml`` from the workspace root, if present.

    Keys may use hyphens or underscores ("sdb-domain" or "sdb_domain").
    """
    path = workspace / CONFIG_FILE
    if not path.exists():
        return {}
    try:
        doc = tomlkit.parse(path.read_text())
    except (OSError, ParseError) as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    return {key.replace("-", "_"): value for key, value in doc.unwrap().items()}


def load_config(workspace: Path, overrides: Mapping[str, Any]) -> PlannerConfig:
    """Merge the config file with explicit overrides and validate.

    Overrides set to None are treated as not given.

    Raises:
        ConfigError: If the merged settings are invalid.
    """
    settings = load_config_file(workspace)
    settings.update({k: v for k, v in overrides.items() if v is not None})
    settings["workspace"] = workspace

    unknown = set(settings) - set(PlannerConfig.model_fields)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    try:
        return PlannerConfig(**settings)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration:\n{exc}") from exc
