"""Default merge of mapping layers into a single intermediary-keyed tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from layered_mappings.errors import LayerMergeError, MappingTransformError
from layered_mappings.mapping_tree import MappingTree
from layered_mappings.mappings_namespace import INTERMEDIARY, NAMED
from layered_mappings.switch_src_namespace import switch_src_namespace

if TYPE_CHECKING:
    from layered_mappings.layered_mapping_spec import LayeredMappingSpec
    from layered_mappings.mapping_context import MappingContext
    from layered_mappings.mapping_tree import Element

logger = logging.getLogger(__name__)


class LayeredMappingsProcessor:
    """Merges the layers of a spec in order.

    Every layer is first keyed by its intermediary names. Names from later
    layers replace earlier ones; empty names never replace anything.
    """

    def __init__(self, spec: LayeredMappingSpec) -> None:
        """Initialize the processor for one spec."""
        self.spec = spec

    def get_mappings(self, context: MappingContext) -> MappingTree:
        """Load and merge every layer."""
        if not self.spec.layers:
            msg = "No mapping layers configured"
            raise LayerMergeError(msg)

        merged = MappingTree(INTERMEDIARY, [NAMED])
        for position, layer in enumerate(self.spec.layers):
            tree = layer.load(context)
            try:
                switch_src_namespace(tree, INTERMEDIARY, fallback_to_src=False)
            except MappingTransformError as e:
                msg = f"Layer {position} ({layer.identity()}) is not usable: {e}"
                raise LayerMergeError(msg) from e
            logger.debug(
                "Merging layer %d with %d classes", position, len(tree.classes)
            )
            self._merge_into(merged, tree)
        return merged

    def _merge_into(self, merged: MappingTree, layer: MappingTree) -> None:
        """Copy names from ``layer`` into ``merged``, adding what is new."""
        for ns in layer.dst_namespaces:
            if ns not in merged.dst_namespaces:
                _add_dst_namespace(merged, ns)
        index_map = [merged.dst_namespaces.index(ns) for ns in layer.dst_namespaces]

        def copy_names(target: Element, source: Element) -> None:
            for src_idx, dst_idx in enumerate(index_map):
                if source.dst_names[src_idx]:
                    target.dst_names[dst_idx] = source.dst_names[src_idx]
            if source.comment:
                target.comment = source.comment

        for cls in layer.classes.values():
            m_cls = merged.add_class(cls.src_name)
            copy_names(m_cls, cls)
            for fld in cls.fields.values():
                copy_names(merged.add_field(m_cls, fld.src_name, fld.src_desc), fld)
            for method in cls.methods.values():
                m_method = merged.add_method(m_cls, method.src_name, method.src_desc)
                copy_names(m_method, method)
                for arg in method.args.values():
                    m_arg = merged.add_arg(m_method, arg.lv_index, arg.src_name)
                    copy_names(m_arg, arg)


def _add_dst_namespace(tree: MappingTree, namespace: str) -> None:
    """Append an empty destination namespace to every element of ``tree``."""
    tree.dst_namespaces.append(namespace)
    for element in tree.elements():
        element.dst_names.append("")


def merge_layers(spec: LayeredMappingSpec, context: MappingContext) -> MappingTree:
    """Merge ``spec`` into one tree; the resolver's default merge operation."""
    return LayeredMappingsProcessor(spec).get_mappings(context)
