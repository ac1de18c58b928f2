"""Graph construction and traversal."""

from modgraph.graph.allocator import ENTRY_MODULE_ID, ModuleIdAllocator
from modgraph.graph.builder import BuildResult, GraphBuilder
from modgraph.graph.traversal import ancestors_of, dependencies_of, dependents_of

__all__ = [
    "ENTRY_MODULE_ID",
    "BuildResult",
    "GraphBuilder",
    "ModuleIdAllocator",
    "ancestors_of",
    "dependencies_of",
    "dependents_of",
]
