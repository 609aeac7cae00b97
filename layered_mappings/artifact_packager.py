"""Logic for wrapping serialized mappings in a single-entry archive."""

from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

from layered_mappings.errors import MappingFormatError

if TYPE_CHECKING:
    from pathlib import Path

MAPPINGS_ENTRY = "mappings/mappings.tiny"

# Fixed so that equal text always packs to equal bytes.
ENTRY_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


def pack_mappings(text: str, entry_name: str = MAPPINGS_ENTRY) -> bytes:
    """Return a ZIP archive holding ``text`` as its only (UTF-8) entry."""
    info = zipfile.ZipInfo(entry_name, date_time=ENTRY_TIMESTAMP)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16

    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr(info, text.encode("utf-8"))
    return buf.getvalue()


def read_packed_mappings(
    source: Path | bytes, entry_name: str = MAPPINGS_ENTRY
) -> str:
    """Read the mappings text back out of a packed archive.

    Raises ``MappingFormatError`` unless the archive holds exactly one entry at
    ``entry_name``.
    """
    fileobj = io.BytesIO(source) if isinstance(source, bytes) else source
    try:
        with zipfile.ZipFile(fileobj, "r") as zf:
            names = zf.namelist()
            if names != [entry_name]:
                msg = f"expected a single {entry_name} entry, found {names}"
                raise MappingFormatError(msg)
            return zf.read(entry_name).decode("utf-8")
    except zipfile.BadZipFile as e:
        msg = f"not a mappings archive: {e}"
        raise MappingFormatError(msg) from e
