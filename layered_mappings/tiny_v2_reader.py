"""Parse tiny v2 text into a mapping tree."""

from __future__ import annotations

import re

from layered_mappings.errors import MappingFormatError
from layered_mappings.mapping_tree import (
    ClassMapping,
    MappingTree,
    MethodArgMapping,
    MethodMapping,
)
from layered_mappings.tiny_v2_writer import ESCAPED_NAMES_PROPERTY, TINY_MAJOR_VERSION

UNESCAPE_RE = re.compile(r"\\(.)")
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}


def unescape(text: str) -> str:
    """Reverse ``tiny_v2_writer.escape``."""
    if "\\" not in text:
        return text
    return UNESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(1)), text)


def read_tiny_v2(text: str) -> MappingTree:
    """Parse a tiny v2 document.

    Local variable records and unknown header properties are skipped.
    """
    lines = text.splitlines()
    if not lines:
        msg = "empty document"
        raise MappingFormatError(msg, 1)

    header = lines[0].split("\t")
    if len(header) < 5 or header[0] != "tiny":
        msg = "missing tiny header"
        raise MappingFormatError(msg, 1)
    if header[1] != str(TINY_MAJOR_VERSION):
        msg = f"unsupported tiny major version {header[1]!r}"
        raise MappingFormatError(msg, 1)

    tree = MappingTree(header[3], header[4:])
    name_count = 1 + len(tree.dst_namespaces)
    escaped = False
    in_header = True

    cls: ClassMapping | None = None
    member = None
    arg: MethodArgMapping | None = None

    def take_names(values: list[str], line_number: int) -> list[str]:
        if len(values) != name_count:
            msg = f"expected {name_count} names, got {len(values)}"
            raise MappingFormatError(msg, line_number)
        return [unescape(v) for v in values] if escaped else values

    for line_number, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        depth = len(line) - len(line.lstrip("\t"))
        parts = line[depth:].split("\t")
        kind = parts[0]

        if in_header and depth == 1:
            if kind == ESCAPED_NAMES_PROPERTY:
                escaped = True
            continue
        in_header = False

        if depth == 0 and kind == "c":
            names = take_names(parts[1:], line_number)
            cls = tree.add_class(names[0], names[1:])
            member = arg = None
        elif depth == 1 and kind in {"f", "m"}:
            if cls is None:
                msg = "member record outside of a class"
                raise MappingFormatError(msg, line_number)
            if len(parts) < 2:
                msg = "member record without descriptor"
                raise MappingFormatError(msg, line_number)
            desc = unescape(parts[1]) if escaped else parts[1]
            names = take_names(parts[2:], line_number)
            add = tree.add_field if kind == "f" else tree.add_method
            member = add(cls, names[0], desc, names[1:])
            arg = None
        elif depth == 2 and kind == "p":
            if not isinstance(member, MethodMapping):
                msg = "parameter record outside of a method"
                raise MappingFormatError(msg, line_number)
            try:
                lv_index = int(parts[1])
            except (IndexError, ValueError):
                msg = "parameter record without a local variable index"
                raise MappingFormatError(msg, line_number) from None
            names = take_names(parts[2:], line_number)
            arg = tree.add_arg(member, lv_index, names[0], names[1:])
        elif kind == "c" and depth in {1, 2, 3}:
            owner = {1: cls, 2: member, 3: arg}[depth]
            if owner is not None:
                owner.comment = unescape("\t".join(parts[1:]))
        else:
            # Local variables and anything newer than this reader understands.
            if depth <= 2:
                arg = None
            if depth <= 1:
                member = None

    return tree
