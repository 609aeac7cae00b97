"""In-memory multi-namespace mapping tree.

Every element carries its name in the tree's source namespace plus one name per
destination namespace. ``dst_names`` always has the same length as
``MappingTree.dst_namespaces``; a missing name is stored as ``""``.

Enumeration order is insertion order, so a tree built the same way always
serializes the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


@dataclass
class MethodArgMapping:
    """A method parameter, keyed by its local variable index."""

    lv_index: int
    src_name: str
    dst_names: list[str]
    comment: str = ""


@dataclass
class FieldMapping:
    """A field, keyed by source name and source descriptor."""

    src_name: str
    src_desc: str
    dst_names: list[str]
    comment: str = ""


@dataclass
class MethodMapping:
    """A method, keyed by source name and source descriptor."""

    src_name: str
    src_desc: str
    dst_names: list[str]
    comment: str = ""
    args: dict[int, MethodArgMapping] = field(default_factory=dict)


@dataclass
class ClassMapping:
    """A class and its members."""

    src_name: str
    dst_names: list[str]
    comment: str = ""
    fields: dict[tuple[str, str], FieldMapping] = field(default_factory=dict)
    methods: dict[tuple[str, str], MethodMapping] = field(default_factory=dict)


Element = ClassMapping | FieldMapping | MethodMapping | MethodArgMapping


def _padded(names: Sequence[str] | None, count: int) -> list[str]:
    """Return ``names`` as a list of exactly ``count`` entries."""
    out = [n or "" for n in (names or [])][:count]
    out.extend([""] * (count - len(out)))
    return out


@dataclass
class MappingTree:
    """Classes keyed by source name, with one source and N destination namespaces."""

    src_namespace: str
    dst_namespaces: list[str]
    classes: dict[str, ClassMapping] = field(default_factory=dict)

    def namespace_index(self, namespace: str) -> int | None:
        """Return -1 for the source namespace, the destination index, or None."""
        if namespace == self.src_namespace:
            return -1
        if namespace in self.dst_namespaces:
            return self.dst_namespaces.index(namespace)
        return None

    def add_class(
        self, src_name: str, dst_names: Sequence[str] | None = None
    ) -> ClassMapping:
        """Add a class, or return the existing one with the same source name."""
        existing = self.classes.get(src_name)
        if existing:
            return existing
        cls = ClassMapping(src_name, _padded(dst_names, len(self.dst_namespaces)))
        self.classes[src_name] = cls
        return cls

    def add_field(
        self,
        cls: ClassMapping,
        src_name: str,
        src_desc: str,
        dst_names: Sequence[str] | None = None,
    ) -> FieldMapping:
        """Add a field to ``cls``, or return the existing one."""
        key = (src_name, src_desc)
        if key not in cls.fields:
            cls.fields[key] = FieldMapping(
                src_name, src_desc, _padded(dst_names, len(self.dst_namespaces))
            )
        return cls.fields[key]

    def add_method(
        self,
        cls: ClassMapping,
        src_name: str,
        src_desc: str,
        dst_names: Sequence[str] | None = None,
    ) -> MethodMapping:
        """Add a method to ``cls``, or return the existing one."""
        key = (src_name, src_desc)
        if key not in cls.methods:
            cls.methods[key] = MethodMapping(
                src_name, src_desc, _padded(dst_names, len(self.dst_namespaces))
            )
        return cls.methods[key]

    def add_arg(
        self,
        method: MethodMapping,
        lv_index: int,
        src_name: str,
        dst_names: Sequence[str] | None = None,
    ) -> MethodArgMapping:
        """Add a parameter to ``method``, or return the existing one."""
        if lv_index not in method.args:
            method.args[lv_index] = MethodArgMapping(
                lv_index, src_name, _padded(dst_names, len(self.dst_namespaces))
            )
        return method.args[lv_index]

    def elements(self) -> Iterator[Element]:
        """Yield every class, field, method and parameter in enumeration order."""
        for cls in self.classes.values():
            yield cls
            yield from cls.fields.values()
            for method in cls.methods.values():
                yield method
                yield from method.args.values()

    def name(self, element: Element, namespace: str) -> str:
        """Return the name of ``element`` in ``namespace`` ("" if missing)."""
        idx = self.namespace_index(namespace)
        if idx is None:
            return ""
        if idx < 0:
            return element.src_name
        return element.dst_names[idx]

