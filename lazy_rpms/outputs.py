"""CI outputs for a plan.

Two matrix shapes are supported, selected by the ``bundle`` setting:

- bundled: ``{"spec": ["a.spec,b.spec", "b.spec"]}``, one comma-joined
  string per build bundle, in build order
- flat: ``{"include": [{"spec": "a.spec", ...}]}``, one entry per spec
  that needs building, with no grouping
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from .models import Plan, SpecInfo


def spec_list(plan: Plan) -> str:
    """Comma-joined paths of every spec that needs building."""
    return ",".join(info.path for info in plan.specs)


def bundle_matrix(bundles: Iterable[list[str]]) -> dict[str, Any]:
    return {"spec": [",".join(bundle) for bundle in bundles]}


def include_matrix(specs: Iterable[SpecInfo]) -> dict[str, Any]:
    return {
        "include": [
            {"spec": info.path, "name": info.name, "build_deps": list(info.build_deps)}
            for info in specs
        ]
    }


def build_matrix(plan: Plan, bundle: bool) -> dict[str, Any]:
    """Return the CI matrix document for a plan."""
    if bundle:
        return bundle_matrix(plan.bundles)
    return include_matrix(plan.specs)


def write_output(output_path: str, name: str, value: str) -> None:
    """Append a step output to the GitHub Actions output file."""
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


def write_outputs(output_path: str, plan: Plan, bundle: bool) -> None:
    """Write the ``list`` and ``matrix`` step outputs for a plan."""
    write_output(output_path, "list", spec_list(plan))
    write_output(output_path, "matrix", json.dumps(build_matrix(plan, bundle)))
