"""Logic for remapping class names inside JVM type descriptors."""

import re

CLASS_REF_RE = re.compile(r"L([^;]+);")


def map_descriptor(desc: str, class_map: dict[str, str]) -> str:
    """Rewrite every ``Lpkg/Name;`` reference in ``desc`` through ``class_map``.

    Primitive types, arrays and unknown classes are left as they are.
    """
    if not desc or "L" not in desc:
        return desc

    def repl(m: re.Match) -> str:
        name = m.group(1)
        return f"L{class_map.get(name) or name};"

    return CLASS_REF_RE.sub(repl, desc)
