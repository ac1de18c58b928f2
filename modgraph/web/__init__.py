"""HTTP view over a built graph."""

from modgraph.web.app import create_app

__all__ = ["create_app"]
