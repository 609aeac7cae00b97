"""Logic for promoting a destination namespace to be a tree's source namespace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from layered_mappings.errors import MappingTransformError
from layered_mappings.map_descriptor import map_descriptor

if TYPE_CHECKING:
    from layered_mappings.mapping_tree import Element, MappingTree

logger = logging.getLogger(__name__)


def switch_src_namespace(
    tree: MappingTree, namespace: str, *, fallback_to_src: bool = True
) -> MappingTree:
    """Make ``namespace`` the source namespace of ``tree``, in place.

    The previous source names take the slot ``namespace`` held in the
    destination list, and descriptors are rewritten to the new class names.

    With ``fallback_to_src``, an element without a name in ``namespace`` keeps
    its previous source name. Without it, a missing name means the merge stage
    produced an incomplete tree and ``MappingTransformError`` is raised.
    Parameters are keyed by local variable index, so they always fall back.

    Two classes, or two members of one class, that end up with the same key
    raise ``MappingTransformError``.
    """
    if namespace == tree.src_namespace:
        return tree

    idx = tree.namespace_index(namespace)
    if idx is None:
        if fallback_to_src:
            logger.debug(
                "Namespace %s not present, keeping source %s",
                namespace,
                tree.src_namespace,
            )
            return tree
        msg = f"Cannot switch source to missing namespace {namespace!r}"
        raise MappingTransformError(msg)

    def new_name(element: Element, owner: str) -> str:
        name = element.dst_names[idx]
        if name:
            return name
        if fallback_to_src:
            return element.src_name
        msg = f"{owner}{element.src_name} has no name in namespace {namespace!r}"
        raise MappingTransformError(msg)

    class_map = {src: new_name(cls, "class ") for src, cls in tree.classes.items()}

    new_classes = {}
    for cls in tree.classes.values():
        cls_name = class_map[cls.src_name]
        if cls_name in new_classes:
            msg = f"Classes collide on {cls_name!r} in namespace {namespace!r}"
            raise MappingTransformError(msg)

        owner = f"{cls.src_name}."
        fields = {}
        for fld in cls.fields.values():
            fld_name = new_name(fld, owner)
            fld.dst_names[idx] = fld.src_name
            fld.src_name = fld_name
            fld.src_desc = map_descriptor(fld.src_desc, class_map)
            key = (fld.src_name, fld.src_desc)
            if key in fields:
                msg = f"Fields of {cls_name} collide on {key!r} in {namespace!r}"
                raise MappingTransformError(msg)
            fields[key] = fld

        methods = {}
        for method in cls.methods.values():
            method_name = new_name(method, owner)
            for arg in method.args.values():
                arg_name = arg.dst_names[idx] or arg.src_name
                arg.dst_names[idx] = arg.src_name
                arg.src_name = arg_name
            method.dst_names[idx] = method.src_name
            method.src_name = method_name
            method.src_desc = map_descriptor(method.src_desc, class_map)
            key = (method.src_name, method.src_desc)
            if key in methods:
                msg = f"Methods of {cls_name} collide on {key!r} in {namespace!r}"
                raise MappingTransformError(msg)
            methods[key] = method

        cls.fields = fields
        cls.methods = methods
        cls.dst_names[idx] = cls.src_name
        cls.src_name = cls_name
        new_classes[cls_name] = cls

    tree.dst_namespaces[idx] = tree.src_namespace
    tree.src_namespace = namespace
    tree.classes = new_classes
    return tree
