"""Planning pipeline: discover → extract → filter stale → order → bundle.

This module drives one planning run:
1. Discover spec files under the configured search paths
2. Extract the build dependencies of every spec
3. Drop specs whose recorded build is still current (unless forced)
4. Build the dependency graph of the remaining specs
5. Group them into build bundles in dependency order

Per-spec work (reading files, git and SimpleDB lookups) runs on a bounded
thread pool. Everything after that runs once all per-spec work is done,
and any failure aborts the run without producing a plan.
"""

from __future__ import annotations

import glob
import os
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

from .bundles import build_graph, get_build_bundles
from .config import PlannerConfig
from .errors import ConfigError, DiscoveryError
from .models import Plan, SpecInfo
from .shell import GitHistory, debug, step
from .specfile import load_spec
from .staleness import StalenessOracle
from .store import SimpleDBStore

T = TypeVar("T")
R = TypeVar("R")


def map_bounded(
    fn: Callable[[T], R], items: Iterable[T], max_workers: int
) -> list[R]:
    """Apply ``fn`` to every item concurrently, keeping input order.

    The first exception cancels all work that has not started yet and is
    re-raised once running work has finished.
    """
    items = list(items)
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
        futures = [pool.submit(fn, item) for item in items]
        try:
            return [future.result() for future in futures]
        except BaseException:
            for future in futures:
                future.cancel()
            raise


def discover_specs(
    paths: Iterable[str], recursive: bool, workspace: Path
) -> list[str]:
    """Find spec files under the given search paths.

    Args:
        paths: Search paths, relative to the workspace root.
        recursive: Also search every subdirectory.
        workspace: Repository root.

    Returns:
        Spec paths relative to the workspace, sorted within each search
        path, each listed once.

    Raises:
        DiscoveryError: If a search path is not an existing directory.
    """
    step("Finding target specs")

    root = Path(os.path.abspath(workspace))
    found: dict[str, None] = {}
    for search_path in paths:
        base = workspace / search_path
        if not base.is_dir():
            raise DiscoveryError(f"Search path {search_path!r} is not a directory")

        pattern = "**/*.spec" if recursive else "*.spec"
        matches = glob.glob(str(Path(glob.escape(str(base))) / pattern), recursive=True)
        for match in sorted(matches):
            p = Path(match)
            if not p.is_file():
                continue
            try:
                spec = Path(os.path.abspath(p)).relative_to(root).as_posix()
            except ValueError as exc:
                raise DiscoveryError(
                    f"Spec {match!r} is outside the workspace {str(workspace)!r}"
                ) from exc
            if spec not in found:
                debug(f'Found RPM spec "{spec}"')
                found[spec] = None

    print(f"  {len(found)} spec(s) found")
    return list(found)


def load_specs(
    spec_paths: Iterable[str], workspace: Path, max_workers: int
) -> list[SpecInfo]:
    """Read every spec and extract its build dependencies."""
    step("Reading build dependencies")
    specs = map_bounded(lambda p: load_spec(p, workspace), spec_paths, max_workers)

    # Registering all specs catches duplicate package names up front,
    # whether or not the duplicates end up needing a build
    graph = build_graph(specs)
    for name in graph:
        info = graph.get(name)
        deps = graph.dependencies_of(name)
        deps_str = f" → [{', '.join(deps)}]" if deps else ""
        print(f"  {name} ({info.path}){deps_str}")
    return specs


def make_oracle(config: PlannerConfig) -> StalenessOracle:
    """Create the git + SimpleDB backed staleness oracle for a config.

    Raises:
        ConfigError: If settings needed to look up build records are missing.
    """
    missing = config.missing_store_settings()
    if missing:
        raise ConfigError(
            f"Missing setting(s) to check build status: {', '.join(missing)} "
            "(use force to rebuild everything)"
        )
    store = SimpleDBStore(
        config.sdb_domain,
        config.owner,
        config.repo,
        config.ref,
        region=config.region,
    )
    return StalenessOracle(store, GitHistory(config.workspace), config.scheme)


def filter_stale(
    spec_paths: Iterable[str], oracle: StalenessOracle, max_workers: int
) -> list[str]:
    """Keep only the specs that need building, in their original order."""
    step("Checking build status")
    verdicts = map_bounded(oracle.check, spec_paths, max_workers)

    stale: list[str] = []
    for verdict in verdicts:
        if verdict.needs_build:
            print(f"  {verdict.path}: {verdict.reason}")
            stale.append(verdict.path)
        else:
            print(f'  Ignoring spec "{verdict.path}" (repo is up to date)')
    return stale


def plan(config: PlannerConfig, oracle: StalenessOracle | None = None) -> Plan:
    """Execute a full planning run.

    Args:
        config: Planner settings.
        oracle: Staleness oracle to use; built from the config when omitted
            and not forcing.

    Returns:
        The specs to build and, when bundling, their build bundles.
    """
    discovered = discover_specs(config.paths, config.recursive, config.workspace)
    specs = load_specs(discovered, config.workspace, config.max_workers)

    if config.force:
        step("Force rebuild: all specs selected")
        selected = set(discovered)
    else:
        oracle = oracle or make_oracle(config)
        selected = set(filter_stale(discovered, oracle, config.max_workers))

    result = Plan(
        discovered=discovered,
        specs=[info for info in specs if info.path in selected],
    )

    if config.bundle:
        step("Define build grouping and order")
        result.bundles = get_build_bundles(build_graph(result.specs))
    return result
