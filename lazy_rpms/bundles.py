"""Build bundles.

A bundle is what has to be rebuilt when one package changes: the package
itself followed by everything that transitively depends on it. Bundles
are produced in topological order of their triggering package, so the
bundle rebuilding a dependency is never scheduled after one that assumes
the dependency is already fresh.
"""

from __future__ import annotations

from collections.abc import Iterable

from .graph import DependencyGraph
from .models import SpecInfo
from .shell import debug


def build_graph(specs: Iterable[SpecInfo]) -> DependencyGraph:
    """Create the dependency graph for a set of specs.

    All specs are registered first so that edges can be added regardless
    of discovery order. Dependencies on packages outside the set are
    dropped.
    """
    specs = list(specs)
    graph = DependencyGraph()
    for info in specs:
        graph.add_node(info)
    for info in specs:
        for dep in info.build_deps:
            graph.add_edge(info.name, dep)
    return graph


def get_build_bundles(graph: DependencyGraph) -> list[list[str]]:
    """Compute one bundle of spec paths per package in the graph.

    Each bundle starts with the package's own spec path, followed by the
    spec paths of its transitive dependents in topological order. A
    dependent shows up once per bundle but may appear in several bundles.

    Example:
        If B and C depend on A, and C depends on B:
        [[A, B, C], [B, C], [C]]
    """
    order = graph.topological_order()
    position = {name: i for i, name in enumerate(order)}

    bundles: list[list[str]] = []
    for name in order:
        debug(f'Getting build bundle for package "{name}"')
        bundle = [graph.get(name).path]
        for dependant in sorted(graph.dependents_of(name), key=position.__getitem__):
            debug(f'Adding "{dependant}" to the "{name}" build bundle')
            path = graph.get(dependant).path
            if path not in bundle:
                bundle.append(path)
        bundles.append(bundle)
    return bundles
