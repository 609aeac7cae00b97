"""Logic for projecting a tree's destination namespaces into a fixed order."""

import logging
from collections.abc import Sequence

from layered_mappings.errors import MappingTransformError
from layered_mappings.mapping_tree import MappingTree

logger = logging.getLogger(__name__)


def reorder_dst_namespaces(tree: MappingTree, namespaces: Sequence[str]) -> MappingTree:
    """Re-project every element's destination names onto ``namespaces``.

    Names for destination namespaces that are not requested are discarded. A
    requested namespace the tree does not carry gets empty names.
    """
    target = list(namespaces)
    if len(set(target)) != len(target):
        msg = f"Duplicate destination namespaces requested: {target}"
        raise MappingTransformError(msg)
    if tree.src_namespace in target:
        msg = f"Source namespace {tree.src_namespace!r} cannot also be a destination"
        raise MappingTransformError(msg)

    old = tree.dst_namespaces
    index_map = [old.index(ns) if ns in old else None for ns in target]
    missing = [ns for ns, idx in zip(target, index_map) if idx is None]
    if missing:
        logger.debug("Tree has no names for namespaces %s", missing)

    for element in tree.elements():
        names = element.dst_names
        element.dst_names = ["" if idx is None else names[idx] for idx in index_map]

    tree.dst_namespaces = target
    return tree
