"""Serialize a mapping tree to the tiny v2 text format.

Layout::

    tiny	2	0	<src ns>	<dst ns>...
    c	<src>	<dst>...
    	c	<class comment>
    	f	<desc>	<src>	<dst>...
    	m	<desc>	<src>	<dst>...
    		p	<lv index>	<src>	<dst>...

Comments are always escaped. Names are escaped only when ``escape_names`` is
set, in which case the ``escaped-names`` header property is written. Without
escaping, a name or descriptor holding a tab or line break is rejected with
``MappingFormatError`` instead of producing a broken record.
"""

from layered_mappings.errors import MappingFormatError
from layered_mappings.mapping_tree import MappingTree

TINY_MAJOR_VERSION = 2
TINY_MINOR_VERSION = 0
ESCAPED_NAMES_PROPERTY = "escaped-names"

_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}

_SEPARATORS = ("\t", "\n", "\r")


def escape(text: str) -> str:
    """Escape characters that would break a tab separated tiny record."""
    return "".join(_ESCAPES.get(ch, ch) for ch in text)


def write_tiny_v2(tree: MappingTree, *, escape_names: bool = False) -> str:
    """Return the tiny v2 serialization of ``tree``.

    Enumeration follows the tree's insertion order, so the same tree always
    yields the same text.
    """

    def cell(text: str) -> str:
        if escape_names:
            return escape(text)
        if any(sep in text for sep in _SEPARATORS):
            msg = f"Cannot write {text!r} without escaped names"
            raise MappingFormatError(msg)
        return text

    def names(src: str, dst: list[str]) -> str:
        return "\t".join(cell(n) for n in [src, *dst])

    def comment(indent: int, text: str) -> list[str]:
        if not text:
            return []
        return ["\t" * indent + "c\t" + escape(text)]

    lines = [
        "\t".join(
            [
                "tiny",
                str(TINY_MAJOR_VERSION),
                str(TINY_MINOR_VERSION),
                tree.src_namespace,
                *tree.dst_namespaces,
            ]
        )
    ]
    if escape_names:
        lines.append("\t" + ESCAPED_NAMES_PROPERTY)

    for cls in tree.classes.values():
        lines.append("c\t" + names(cls.src_name, cls.dst_names))
        lines.extend(comment(1, cls.comment))
        for fld in cls.fields.values():
            desc = cell(fld.src_desc)
            lines.append(f"\tf\t{desc}\t" + names(fld.src_name, fld.dst_names))
            lines.extend(comment(2, fld.comment))
        for method in cls.methods.values():
            desc = cell(method.src_desc)
            lines.append(f"\tm\t{desc}\t" + names(method.src_name, method.dst_names))
            lines.extend(comment(2, method.comment))
            for arg in method.args.values():
                lines.append(
                    f"\t\tp\t{arg.lv_index}\t" + names(arg.src_name, arg.dst_names)
                )
                lines.extend(comment(3, arg.comment))

    return "\n".join(lines) + "\n"
