"""Fixed two-stage namespace normalization applied before serialization."""

from collections.abc import Sequence

from layered_mappings.mapping_tree import MappingTree
from layered_mappings.mappings_namespace import INTERMEDIARY, NAMED
from layered_mappings.reorder_dst_namespaces import reorder_dst_namespaces
from layered_mappings.switch_src_namespace import switch_src_namespace


class NamespaceTransformPipeline:
    """Reorders destination namespaces, then switches the source namespace.

    The order of the two stages is fixed. Switching first would move the old
    source names into the destination list, where the reorder stage then drops
    them, and the output source would no longer be stable across layer setups.
    """

    def __init__(
        self,
        dst_namespaces: Sequence[str] = (NAMED,),
        src_namespace: str = INTERMEDIARY,
        *,
        fallback_to_src: bool = True,
    ) -> None:
        """Initialize with the target destinations and the target source."""
        self.dst_namespaces = tuple(dst_namespaces)
        self.src_namespace = src_namespace
        self.fallback_to_src = fallback_to_src

    def apply(self, tree: MappingTree) -> MappingTree:
        """Normalize ``tree`` in place and return it."""
        reorder_dst_namespaces(tree, self.dst_namespaces)
        switch_src_namespace(
            tree, self.src_namespace, fallback_to_src=self.fallback_to_src
        )
        return tree
