"""Mapping layers: independent sources of names merged into one tree."""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from layered_mappings.artifact_packager import read_packed_mappings
from layered_mappings.tiny_v2_reader import read_tiny_v2

if TYPE_CHECKING:
    from layered_mappings.mapping_context import MappingContext
    from layered_mappings.mapping_tree import MappingTree

logger = logging.getLogger(__name__)


class MappingLayer(Protocol):
    """A single contributor to a layered merge."""

    def identity(self) -> dict[str, Any]:
        """Return a JSON-compatible description used to derive versions."""
        ...

    def load(self, context: MappingContext) -> MappingTree:
        """Load this layer's names as a fresh tree."""
        ...


@dataclass(frozen=True)
class TinyFileLayer:
    """A layer read from a tiny v2 file, either plain or packed in an archive."""

    path: Path

    def identity(self) -> dict[str, Any]:
        """Describe the layer by its configured path."""
        return {"type": "tiny_file", "path": Path(self.path).as_posix()}

    def load(self, context: MappingContext) -> MappingTree:
        """Read and parse the layer file."""
        path = context.resolve_layer_path(self.path)
        logger.debug("Loading layer %s", path)
        if zipfile.is_zipfile(path):
            text = read_packed_mappings(path)
        else:
            text = path.read_text(encoding="utf-8")
        return read_tiny_v2(text)
