"""Tests for the single-entry mappings archive."""

import io
import zipfile
from pathlib import Path

import pytest

from layered_mappings.artifact_packager import (
    MAPPINGS_ENTRY,
    pack_mappings,
    read_packed_mappings,
)
from layered_mappings.errors import MappingFormatError

TEXT = "tiny\t2\t0\tintermediary\tnamed\nc\tclass_1\tFöö\n"


def test_pack_has_exactly_one_entry() -> None:
    """Verify the archive holds only mappings/mappings.tiny, as UTF-8."""
    data = pack_mappings(TEXT)
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        infos = zf.infolist()
        assert [i.filename for i in infos] == [MAPPINGS_ENTRY]
        assert not infos[0].is_dir()
        assert infos[0].compress_type == zipfile.ZIP_DEFLATED
        assert zf.read(MAPPINGS_ENTRY) == TEXT.encode("utf-8")


def test_pack_is_deterministic() -> None:
    """Verify equal text packs to equal bytes."""
    assert pack_mappings(TEXT) == pack_mappings(TEXT)


def test_read_packed_mappings_from_bytes_and_path(tmp_path: Path) -> None:
    """Verify the text can be read back from bytes and from a file."""
    data = pack_mappings(TEXT)
    archive = tmp_path / "mappings.tiny"
    archive.write_bytes(data)
    assert read_packed_mappings(data) == TEXT
    assert read_packed_mappings(archive) == TEXT


def test_read_rejects_other_shapes() -> None:
    """Verify archives with extra entries or non-archives are rejected."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr(MAPPINGS_ENTRY, TEXT)
        zf.writestr("META-INF/MANIFEST.MF", "")
    with pytest.raises(MappingFormatError, match="single"):
        read_packed_mappings(buf.getvalue())

    with pytest.raises(MappingFormatError, match="not a mappings archive"):
        read_packed_mappings(b"tiny\t2\t0")
