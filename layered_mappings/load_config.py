"""Logic for loading and merging configuration files."""

import copy
from pathlib import Path
from typing import Any

import yaml

from layered_mappings.deep_merge import deep_merge
from layered_mappings.mappings_namespace import INTERMEDIARY, NAMED

DEFAULT_CONFIG: dict[str, Any] = {
    "cache": {
        "project_cache_dir": ".gradle/loom-cache",
    },
    "namespaces": {
        "target": [NAMED],
        "source": INTERMEDIARY,
        "fallback_to_src": True,
    },
    "output": {
        "escape_names": False,
    },
    "layers": [],
}


def load_config(path: str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file and merge it with defaults."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path:
        p = Path(path)
        if p.exists():
            user_config = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            config = deep_merge(config, user_config)
    return config
