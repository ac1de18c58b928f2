"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from modgraph.errors import GraphNotInitializedError
from modgraph.session import ModuleGraphSession
from modgraph.web.api import router


def create_app(session: ModuleGraphSession) -> FastAPI:
    if not session.is_initialized:
        raise GraphNotInitializedError("create_app")

    app = FastAPI(title="modgraph", version="0.3.0")
    app.state.session = session
    app.include_router(router)
    return app
