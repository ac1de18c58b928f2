"""Schema and loader for esbuild metafiles."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modgraph.errors import MetafileError
from modgraph.models import ImportEdge, Module

logger = logging.getLogger(__name__)


class ImportDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    path: str
    kind: str
    external: bool = False
    original: str | None = None

    def to_edge(self) -> ImportEdge:
        return ImportEdge(
            path=self.path,
            kind=self.kind,
            external=self.external,
            original=self.original,
            extra=dict(self.model_extra or {}),
        )


class InputDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    bytes: int = Field(ge=0)
    imports: list[ImportDescriptor] = Field(default_factory=list)
    format: str | None = None

    def to_module(self, path: str) -> Module:
        """Build a fresh Module record for ``path`` (the descriptor is left untouched)."""
        return Module(
            path=path,
            bytes=self.bytes,
            imports=[imp.to_edge() for imp in self.imports],
            format=self.format,
            extra=dict(self.model_extra or {}),
        )


class OutputDescriptor(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    bytes: int = Field(default=0, ge=0)
    entry_point: str | None = Field(default=None, alias="entryPoint")


class Metafile(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    inputs: dict[str, InputDescriptor]
    outputs: dict[str, OutputDescriptor] = Field(default_factory=dict)

    def entry_points(self) -> list[str]:
        """Entry points named by the outputs, in output order, without duplicates."""
        seen: list[str] = []
        for output in self.outputs.values():
            if output.entry_point and output.entry_point not in seen:
                seen.append(output.entry_point)
        return seen


def parse_metafile(data: Any) -> Metafile:
    """Validate an already-decoded metafile mapping."""
    if isinstance(data, Metafile):
        return data
    try:
        return Metafile.model_validate(data)
    except ValidationError as e:
        raise MetafileError(f"Invalid metafile: {e}") from e


def load_metafile(path: Path) -> Metafile:
    """Read and validate a metafile JSON document from disk."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MetafileError(f"Cannot read metafile {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MetafileError(f"Metafile {path} is not valid JSON: {e}") from e

    metafile = parse_metafile(data)
    logger.debug("Loaded %s: %d inputs, %d outputs", path, len(metafile.inputs), len(metafile.outputs))
    return metafile
