"""Inverse traversal: which modules cause a given module to be bundled."""

from __future__ import annotations

from collections.abc import Iterator

from modgraph.errors import UnknownModuleError
from modgraph.models import DependencyGraph, ModuleId, OrderedIdSet


def ancestors_of(graph: DependencyGraph, module_id: ModuleId) -> list[ModuleId]:
    """Return ``module_id`` followed by every module that transitively imports it.

    Depth-first, in order of first discovery. An id already collected is
    never visited again, so cycles terminate and each ancestor appears once.
    """
    if module_id not in graph:
        raise UnknownModuleError(module_id)

    found = OrderedIdSet([module_id])
    stack: list[Iterator[ModuleId]] = [iter(graph[module_id].inverse_dependencies)]

    while stack:
        for parent_id in stack[-1]:
            if parent_id in found:
                continue
            found.add(parent_id)
            stack.append(iter(graph[parent_id].inverse_dependencies))
            break
        else:
            stack.pop()

    return found.to_list()


def dependencies_of(graph: DependencyGraph, module_id: ModuleId) -> list[ModuleId]:
    """Direct dependencies of ``module_id`` in insertion order."""
    if module_id not in graph:
        raise UnknownModuleError(module_id)
    return graph[module_id].dependencies.to_list()


def dependents_of(graph: DependencyGraph, module_id: ModuleId) -> list[ModuleId]:
    """Modules that import ``module_id`` directly."""
    if module_id not in graph:
        raise UnknownModuleError(module_id)
    return graph[module_id].inverse_dependencies.to_list()
