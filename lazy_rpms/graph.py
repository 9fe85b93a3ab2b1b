"""Build dependency graph.

A small owned DAG over the specs of one planning run. Edges point from a
package to the packages it needs at build time; the reverse relation
answers "what has to be rebuilt when this changes".
"""

from __future__ import annotations

import heapq
from collections.abc import Iterator

from .errors import CycleError, DuplicatePackageError
from .models import SpecInfo


class DependencyGraph:
    """Directed graph of packages keyed by name.

    Nodes keep their registration order, which is used to break ties in
    the topological order so identical input always yields identical
    output.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, SpecInfo] = {}
        self._deps: dict[str, list[str]] = {}
        self._dependants: dict[str, list[str]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def get(self, name: str) -> SpecInfo:
        return self._nodes[name]

    def add_node(self, info: SpecInfo) -> None:
        """Register a package.

        Raises:
            DuplicatePackageError: If another spec already uses the name.
        """
        existing = self._nodes.get(info.name)
        if existing is not None:
            raise DuplicatePackageError(info.name, [existing.path, info.path])
        self._nodes[info.name] = info
        self._deps[info.name] = []
        self._dependants[info.name] = []

    def add_edge(self, name: str, dep: str) -> None:
        """Record that ``name`` needs ``dep`` to build.

        Dependencies that are not registered are external (or already
        built) and are ignored.
        """
        if name not in self._nodes:
            raise KeyError(name)
        if dep not in self._nodes or dep in self._deps[name]:
            return
        self._deps[name].append(dep)
        self._dependants[dep].append(name)

    def dependencies_of(self, name: str) -> list[str]:
        """Direct dependencies of ``name`` within the graph."""
        return list(self._deps[name])

    def dependents_of(self, name: str) -> set[str]:
        """All packages depending on ``name``, directly or transitively.

        ``name`` itself is never included, even if it sits on a cycle.
        """
        seen: set[str] = set()
        stack = list(self._dependants[name])
        while stack:
            node = stack.pop()
            if node in seen or node == name:
                continue
            seen.add(node)
            stack.extend(self._dependants[node])
        return seen

    def topological_order(self) -> list[str]:
        """Return every package name with dependencies before dependents.

        Uses Kahn's algorithm. Among packages that are ready at the same
        time, the one registered first comes first.

        Raises:
            CycleError: Naming the packages that lie on a cycle.
        """
        index = {name: i for i, name in enumerate(self._nodes)}
        in_degree = {name: len(deps) for name, deps in self._deps.items()}

        ready = [index[n] for n, d in in_degree.items() if d == 0]
        heapq.heapify(ready)
        names = list(self._nodes)
        order: list[str] = []

        while ready:
            node = names[heapq.heappop(ready)]
            order.append(node)
            for dependant in self._dependants[node]:
                in_degree[dependant] -= 1
                if in_degree[dependant] == 0:
                    heapq.heappush(ready, index[dependant])

        if len(order) != len(self._nodes):
            remaining = set(self._nodes) - set(order)
            raise CycleError(self._cycle_members(remaining))
        return order

    def _cycle_members(self, remaining: set[str]) -> set[str]:
        """Narrow the nodes Kahn's algorithm could not place to the ones
        that can reach themselves, dropping those merely downstream of a
        cycle."""
        members: set[str] = set()
        for start in remaining:
            seen: set[str] = set()
            stack = [d for d in self._deps[start] if d in remaining]
            while stack:
                node = stack.pop()
                if node == start:
                    members.add(start)
                    break
                if node in seen:
                    continue
                seen.add(node)
                stack.extend(d for d in self._deps[node] if d in remaining)
        return members
