"""Exporter layer."""

from modgraph.exporter.graph_writer import export_graph, serialize_graph, serialize_modules

__all__ = ["export_graph", "serialize_graph", "serialize_modules"]
