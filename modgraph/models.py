"""Data models for the module dependency graph."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

ModuleId = int


class ImportKind(enum.Enum):
    IMPORT_STATEMENT = "import-statement"
    DYNAMIC_IMPORT = "dynamic-import"
    REQUIRE_CALL = "require-call"
    REQUIRE_RESOLVE = "require-resolve"
    IMPORT_RULE = "import-rule"
    COMPOSES_FROM = "composes-from"
    URL_TOKEN = "url-token"


# Kinds that pull a module into the bundle graph
GRAPH_IMPORT_KINDS: frozenset[str] = frozenset({
    ImportKind.IMPORT_STATEMENT.value,
    ImportKind.DYNAMIC_IMPORT.value,
    ImportKind.REQUIRE_CALL.value,
})


class OrderedIdSet:
    """Duplicate-free collection of module ids that remembers insertion order."""

    __slots__ = ("_items",)

    def __init__(self, ids: Iterable[ModuleId] = ()):
        self._items: dict[ModuleId, None] = dict.fromkeys(ids)

    def add(self, module_id: ModuleId) -> None:
        self._items.setdefault(module_id, None)

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._items

    def __iter__(self) -> Iterator[ModuleId]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedIdSet):
            return list(self._items) == list(other._items)
        return NotImplemented

    def __repr__(self) -> str:
        return f"OrderedIdSet({list(self._items)!r})"

    def to_list(self) -> list[ModuleId]:
        return list(self._items)


@dataclass
class ImportEdge:
    """One reference from a module to another, as recorded by the bundler."""
    path: str
    kind: str
    external: bool = False
    original: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)  # e.g. import attributes under "with"

    @property
    def is_graph_edge(self) -> bool:
        return self.kind in GRAPH_IMPORT_KINDS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "kind": self.kind}
        if self.external:
            data["external"] = True
        if self.original is not None:
            data["original"] = self.original
        data.update(self.extra)
        return data


@dataclass
class Module:
    """A source file tracked in the build metadata."""
    path: str
    bytes: int
    imports: list[ImportEdge] = field(default_factory=list)
    format: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)  # unrecognized descriptor fields

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "bytes": self.bytes,
            "imports": [edge.to_dict() for edge in self.imports],
        }
        if self.format is not None:
            data["format"] = self.format
        data.update(self.extra)
        data["path"] = self.path
        return data


@dataclass
class Vertex:
    """Forward and inverse adjacency for one module."""
    dependencies: OrderedIdSet = field(default_factory=OrderedIdSet)
    inverse_dependencies: OrderedIdSet = field(default_factory=OrderedIdSet)

    def to_dict(self) -> dict[str, list[ModuleId]]:
        return {
            "dependencies": self.dependencies.to_list(),
            "inverseDependencies": self.inverse_dependencies.to_list(),
        }


DependencyGraph = dict[ModuleId, Vertex]
ModuleTable = dict[ModuleId, Module]


@dataclass
class PipelineConfig:
    """Configuration for the build → export pipeline."""
    metafile_path: Path = field(default_factory=lambda: Path("metafile.json"))
    entry_path: str | None = None  # inferred from the metafile outputs when unset
    output_dir: Path = field(default_factory=lambda: Path("."))
    graph_filename: str = "graph.json"
    modules_filename: str = "modules.json"
    import_kinds: frozenset[str] = GRAPH_IMPORT_KINDS
