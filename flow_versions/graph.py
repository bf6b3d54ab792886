"""Reactor graph utilities.

Provides topological sorting for determining the order in which reactor
modules are listed and processed. A module comes after its parent and after
every reactor module it references, the same order a Maven reactor builds in.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import ModuleInfo


def root_module(modules: Sequence[ModuleInfo]) -> ModuleInfo:
    """Return the reactor's root: the first module whose parent is external.

    Raises:
        ValueError: If the reactor is empty.
    """
    if not modules:
        raise ValueError("Reactor has no modules")
    keys = {m.key for m in modules}
    for module in modules:
        if module.parent_key not in keys:
            return module
    return modules[0]


def topo_sort(modules: dict[str, ModuleInfo]) -> list[str]:
    """Topologically sort modules by their internal references.

    Uses Kahn's algorithm to produce an order where parents and dependencies
    come before dependents. Modules that become ready together keep their
    discovery order, so the root module stays first.

    Args:
        modules: Map of module key → ModuleInfo with deps list.

    Returns:
        List of module keys, dependencies first.

    Raises:
        RuntimeError: If a reference cycle is detected.

    Example:
        If A depends on B, and B has parent C:
        topo_sort({A, B, C}) → [C, B, A]
    """
    # Count incoming edges (references) for each module
    in_degree = {k: 0 for k in modules}
    # Track reverse references (who depends on each module)
    reverse_deps: dict[str, list[str]] = {k: [] for k in modules}

    for key, info in modules.items():
        for dep in info.deps:
            # References leaving the reactor are resolved from a repository
            if dep in modules and dep != key:
                in_degree[key] += 1
                reverse_deps[dep].append(key)

    queue = [k for k, d in in_degree.items() if d == 0]
    order: list[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependent in reverse_deps[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(modules):
        remaining = [k for k in modules if k not in order]
        raise RuntimeError(f"Reference cycle detected involving: {remaining}")

    return order
