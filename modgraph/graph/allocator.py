"""Sequential module id allocation."""

from __future__ import annotations

from modgraph.models import ModuleId

ENTRY_MODULE_ID: ModuleId = 0


class ModuleIdAllocator:
    """Hand out dense integer ids to module paths in first-seen order.

    Id 0 is reserved for the entry path when the allocator is created, so
    every other path gets an id starting at 1. Ids are never reused.
    """

    def __init__(self, entry_path: str):
        self.entry_path = entry_path
        self._ids: dict[str, ModuleId] = {entry_path: ENTRY_MODULE_ID}
        self._paths: list[str] = [entry_path]

    def id_for(self, path: str) -> ModuleId:
        module_id = self._ids.get(path)
        if module_id is None:
            module_id = len(self._paths)
            self._ids[path] = module_id
            self._paths.append(path)
        return module_id

    def lookup(self, path: str) -> ModuleId | None:
        return self._ids.get(path)

    def path_for(self, module_id: ModuleId) -> str | None:
        if 0 <= module_id < len(self._paths):
            return self._paths[module_id]
        return None

    def items(self) -> list[tuple[str, ModuleId]]:
        return list(self._ids.items())

    def __contains__(self, path: object) -> bool:
        return path in self._ids

    def __len__(self) -> int:
        return len(self._paths)
