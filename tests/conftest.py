"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from lazy_rpms.models import SpecInfo

SpecWriter = Callable[..., str]


def spec_text(name: str, build_requires: list[str]) -> str:
    lines = [
        f"Name:           {name}",
        "Version:        1.0",
        "Release:        1%{?dist}",
        f"Summary:        The {name} package",
        "License:        MIT",
    ]
    lines += [f"BuildRequires:  {req}" for req in build_requires]
    lines += ["", "%description", f"{name} for tests.", "", "%build", "make"]
    return "\n".join(lines) + "\n"


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty repository root."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def write_spec(workspace: Path) -> SpecWriter:
    """Write ``<rel dir>/SPECS/<name>.spec`` and return its relative path."""

    def _write(rel_dir: str, build_requires: list[str] | None = None) -> str:
        name = Path(rel_dir).name
        spec = workspace / rel_dir / "SPECS" / f"{name}.spec"
        spec.parent.mkdir(parents=True, exist_ok=True)
        spec.write_text(spec_text(name, build_requires or []))
        return spec.relative_to(workspace).as_posix()

    return _write


@pytest.fixture
def sample_specs() -> list[SpecInfo]:
    """A small diamond: app needs liba and libb, both need core."""
    return [
        SpecInfo(path="core/SPECS/core.spec", name="core"),
        SpecInfo(path="liba/SPECS/liba.spec", name="liba", build_deps=("core", "gcc")),
        SpecInfo(path="libb/SPECS/libb.spec", name="libb", build_deps=("core",)),
        SpecInfo(
            path="app/SPECS/app.spec", name="app", build_deps=("liba", "libb", "make")
        ),
    ]
