"""Dependency graph utilities.

Provides topological sorting for determining release order in a
workspace. Packages must be processed in dependency order so that when
package A depends on package B, B's bump is decided before A's.
"""

from __future__ import annotations

import heapq
from collections.abc import Mapping

from .errors import CycleError
from .models import Package


def dependency_edges(packages: Mapping[str, Package]) -> list[tuple[str, str]]:
    """Return ``(dependency, dependent)`` edges between workspace packages.

    Dependencies that are not in ``packages`` are ignored.
    """
    return [
        (dep, name)
        for name, pkg in packages.items()
        for dep in pkg.workspace_deps
        if dep in packages
    ]


def topo_sort(packages: Mapping[str, Package]) -> list[str]:
    """Topologically sort packages by their internal dependencies.

    Uses Kahn's algorithm to produce an order where dependencies come
    before dependents. Where the graph does not force an order, packages
    keep their discovery order (the iteration order of ``packages``).

    Args:
        packages: Map of package name → Package, in discovery order.

    Returns:
        List of package names, dependencies first.

    Raises:
        CycleError: If the dependency graph contains a cycle.

    Example:
        If A depends on B, and B depends on C:
        topo_sort({A, B, C}) → [C, B, A]
    """
    index = {name: i for i, name in enumerate(packages)}
    in_degree = {name: 0 for name in packages}
    reverse_deps: dict[str, list[str]] = {name: [] for name in packages}

    for dep, dependent in dependency_edges(packages):
        in_degree[dependent] += 1
        reverse_deps[dep].append(dependent)

    # Min-heap on discovery index keeps the order stable
    ready = [index[n] for n, d in in_degree.items() if d == 0]
    heapq.heapify(ready)
    names = list(packages)
    order: list[str] = []

    while ready:
        node = names[heapq.heappop(ready)]
        order.append(node)
        for dependent in reverse_deps[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, index[dependent])

    if len(order) != len(packages):
        done = set(order)
        remaining = [n for n in packages if n not in done]
        raise CycleError(find_cycle(packages, remaining))

    return order


def find_cycle(packages: Mapping[str, Package], candidates: list[str]) -> list[str]:
    """Return one dependency cycle among ``candidates`` as a closed path.

    ``candidates`` are the packages Kahn's algorithm could not order; every
    one of them either lies on a cycle or depends on one, so walking
    dependencies from any of them must revisit a package.
    """
    remaining = set(candidates)
    path: list[str] = []
    position: dict[str, int] = {}
    node = candidates[0]

    while node not in position:
        position[node] = len(path)
        path.append(node)
        node = next(dep for dep in packages[node].workspace_deps if dep in remaining)

    return [*path[position[node] :], node]
