"""Read-only graph API — summary, full tables, module lookup, ancestors."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from modgraph.exporter import serialize_graph, serialize_modules
from modgraph.session import ModuleGraphSession

router = APIRouter(prefix="/api")


def get_session(request: Request) -> ModuleGraphSession:
    return request.app.state.session


def _module_or_404(session: ModuleGraphSession, module_id: int):
    module = session.get_module_by_id(module_id)
    if module is None:
        raise HTTPException(404, f"Module {module_id} not found")
    return module


@router.get("/summary")
async def summary(session: ModuleGraphSession = Depends(get_session)):
    graph = session.get_dependency_graph()
    return {
        "entry_path": session.entry_path,
        "entry_id": session.get_module_id(session.entry_path),
        "modules": len(graph),
        "edges": sum(len(v.dependencies) for v in graph.values()),
        "roots": [i for i, v in graph.items() if not v.inverse_dependencies],
    }


@router.get("/graph")
async def graph(session: ModuleGraphSession = Depends(get_session)):
    return serialize_graph(session.get_dependency_graph())


@router.get("/modules")
async def modules(session: ModuleGraphSession = Depends(get_session)):
    return serialize_modules(session.get_module_table())


@router.get("/modules/{module_id}")
async def module_detail(module_id: int, session: ModuleGraphSession = Depends(get_session)):
    module = _module_or_404(session, module_id)
    vertex = session.get_dependency_graph()[module_id]
    return {
        "id": module_id,
        "module": module.to_dict(),
        **vertex.to_dict(),
    }


@router.get("/lookup")
async def lookup(path: str, session: ModuleGraphSession = Depends(get_session)):
    module = session.get_module(path)
    if module is None:
        raise HTTPException(404, f"Module not found: {path}")
    return {"id": session.get_module_id(path), "module": module.to_dict()}


@router.get("/modules/{module_id}/ancestors")
async def ancestors(module_id: int, session: ModuleGraphSession = Depends(get_session)):
    _module_or_404(session, module_id)
    ids = session.get_inverse_dependencies(module_id)
    table = session.get_module_table()
    return {
        "id": module_id,
        "ancestors": ids,
        "paths": [table[i].path for i in ids],
    }
