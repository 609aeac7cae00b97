"""On-disk cache of derived mapping artifacts, one file per version."""

import logging
import os
import tempfile
from pathlib import Path

from layered_mappings.errors import CacheVersionError

logger = logging.getLogger(__name__)

GROUP = "loom"
MODULE = "mappings"
EXTENSION = "tiny"

_UNSAFE_VERSION_CHARS = ("/", "\\", "\0")


class CacheStore:
    """Names, validates and atomically replaces cached artifacts.

    The cache root is owned by the caller; this class only decides file names
    inside it.
    """

    def __init__(self, cache_root: Path | str) -> None:
        """Initialize the store over an existing or future cache directory."""
        self.cache_root = Path(cache_root)

    def path_for(self, version: str) -> Path:
        """Return the deterministic artifact path for ``version``.

        Raises ``CacheVersionError`` for a version that could name a file
        outside the cache root.
        """
        if not version or any(c in version for c in _UNSAFE_VERSION_CHARS):
            msg = f"Invalid mappings version {version!r}"
            raise CacheVersionError(msg)
        return self.cache_root / f"{GROUP}.{MODULE}-{version}.{EXTENSION}"

    def is_valid(self, version: str, *, force_refresh: bool = False) -> bool:
        """Check if a cached artifact can be used as-is."""
        if force_refresh:
            return False
        return self.path_for(version).is_file()

    def commit(self, version: str, data: bytes) -> Path:
        """Replace the artifact for ``version`` with ``data``.

        The bytes are written to a temporary file next to the target and then
        renamed over it, so readers only ever see a complete artifact. If the
        write fails, any previous artifact is left in place.
        """
        path = self.path_for(version)
        path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            mode="wb",
            delete=False,
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
        ) as handle:
            temp_path = Path(handle.name)
            try:
                handle.write(data)
            except OSError:
                handle.close()
                temp_path.unlink(missing_ok=True)
                raise

        try:
            os.replace(temp_path, path)
        except OSError:
            logger.warning("Could not move %s into place", temp_path)
            temp_path.unlink(missing_ok=True)
            raise

        logger.info("Cached %s (%d bytes)", path, len(data))
        return path
