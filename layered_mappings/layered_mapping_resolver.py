"""Resolution of a layered mapping spec into one cached mappings archive."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, NamedTuple

from layered_mappings.artifact_packager import pack_mappings
from layered_mappings.cache_store import GROUP, MODULE, CacheStore
from layered_mappings.errors import MappingsResolutionError
from layered_mappings.layered_mappings_processor import merge_layers
from layered_mappings.namespace_transform_pipeline import NamespaceTransformPipeline
from layered_mappings.tiny_v2_writer import write_tiny_v2

if TYPE_CHECKING:
    from pathlib import Path

    from layered_mappings.layered_mapping_spec import LayeredMappingSpec
    from layered_mappings.mapping_context import MappingContext
    from layered_mappings.mapping_tree import MappingTree

logger = logging.getLogger(__name__)

MergeOperation = Callable[["LayeredMappingSpec", "MappingContext"], "MappingTree"]


class ModuleIdentity(NamedTuple):
    """The (group, name, version) coordinates of a resolvable artifact."""

    group: str
    name: str
    version: str


class LayeredMappingResolver:
    """Produces the merged, namespace-normalized mappings for one version.

    Two resolvers are equal when their versions are equal; the layer list and
    context are not compared.
    """

    def __init__(
        self,
        context: MappingContext,
        spec: LayeredMappingSpec,
        version: str,
        *,
        merge: MergeOperation = merge_layers,
        pipeline: NamespaceTransformPipeline | None = None,
        escape_names: bool = False,
    ) -> None:
        """Initialize the resolver. Nothing is read or written until resolve()."""
        self.context = context
        self.spec = spec
        self.version = version
        self.merge = merge
        self.pipeline = pipeline or NamespaceTransformPipeline()
        self.escape_names = escape_names

    @property
    def identity(self) -> ModuleIdentity:
        """Return the fixed group and module plus this resolver's version."""
        return ModuleIdentity(GROUP, MODULE, self.version)

    @property
    def cache_store(self) -> CacheStore:
        """Return the store for the context's layered cache directory."""
        return CacheStore(self.context.layered_dir())

    def resolve(self, *, force_refresh: bool = False) -> frozenset[Path]:
        """Return the single cached mappings file, generating it if needed.

        Raises ``MappingsResolutionError`` chained to the original failure. A
        failed run never leaves a partial artifact behind.
        """
        store = self.cache_store
        path = store.path_for(self.version)
        if store.is_valid(self.version, force_refresh=force_refresh):
            logger.info("Using cached mappings %s", path)
            return frozenset({path})

        logger.info(
            "Generating mappings %s%s", path, " (refresh)" if force_refresh else ""
        )
        stage = "merge"
        try:
            tree = self.merge(self.spec, self.context)
            stage = "transform"
            self.pipeline.apply(tree)
            stage = "serialize"
            text = write_tiny_v2(tree, escape_names=self.escape_names)
            stage = "package"
            data = pack_mappings(text)
            stage = "cache"
            path = store.commit(self.version, data)
        except Exception as e:
            raise MappingsResolutionError(stage, self.version) from e

        return frozenset({path})

    def copy(self) -> LayeredMappingResolver:
        """Return a new resolver with the same inputs."""
        return LayeredMappingResolver(
            self.context,
            self.spec,
            self.version,
            merge=self.merge,
            pipeline=self.pipeline,
            escape_names=self.escape_names,
        )

    def __eq__(self, other: object) -> bool:
        """Compare by version only."""
        if not isinstance(other, LayeredMappingResolver):
            return NotImplemented
        return self.version == other.version

    def __hash__(self) -> int:
        """Hash by version only."""
        return hash(self.version)

    def __repr__(self) -> str:
        """Show the artifact coordinates."""
        return f"LayeredMappingResolver({GROUP}:{MODULE}:{self.version})"
