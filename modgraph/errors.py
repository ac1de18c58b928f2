"""Exceptions raised by modgraph."""

from __future__ import annotations


class ModGraphError(Exception):
    """Base class for all modgraph errors."""


class MetafileError(ModGraphError):
    """The build metadata could not be read or does not match the expected shape."""


class GraphNotInitializedError(ModGraphError, RuntimeError):
    """A query was made before the dependency graph was built."""

    def __init__(self, operation: str):
        super().__init__(f"{operation}() called before the dependency graph was initialized")
        self.operation = operation


class GraphAlreadyInitializedError(ModGraphError, RuntimeError):
    """The dependency graph was built a second time."""


class UnknownModuleError(ModGraphError, KeyError):
    """A module id is not present in the dependency graph."""

    def __init__(self, module_id: int):
        super().__init__(module_id)
        self.module_id = module_id

    def __str__(self) -> str:
        return f"module id {self.module_id} is not in the dependency graph"
