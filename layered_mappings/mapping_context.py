"""Project-scoped services handed to mapping layers and the resolver."""

from dataclasses import dataclass
from pathlib import Path

LAYERED_DIR_NAME = "layered"


@dataclass(frozen=True)
class MappingContext:
    """Where derived mappings are cached and where layer files live."""

    project_cache_dir: Path
    layer_dir: Path | None = None

    def layered_dir(self) -> Path:
        """Return the cache directory for layered mapping artifacts."""
        return Path(self.project_cache_dir) / LAYERED_DIR_NAME

    def resolve_layer_path(self, path: Path | str) -> Path:
        """Resolve a layer path relative to ``layer_dir`` when one is set."""
        p = Path(path)
        if p.is_absolute() or self.layer_dir is None:
            return p
        return Path(self.layer_dir) / p
