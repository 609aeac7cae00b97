"""Resolve a layered mapping spec into a cached tiny v2 mappings archive.

Layers are merged in order, normalized to ``intermediary -> named`` and cached
under ``<cache dir>/layered/loom.mappings-<version>.tiny``.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any

from layered_mappings.errors import LayeredMappingsError
from layered_mappings.layered_mapping_resolver import LayeredMappingResolver
from layered_mappings.layered_mapping_spec import LayeredMappingSpec
from layered_mappings.layered_mappings_dependency import LayeredMappingsDependency
from layered_mappings.load_config import load_config
from layered_mappings.mapping_context import MappingContext
from layered_mappings.namespace_transform_pipeline import NamespaceTransformPipeline

REFRESH_ENV_VAR = "LOOM_REFRESH_DEPS"


def refresh_requested(args: argparse.Namespace, environ: dict[str, str]) -> bool:
    """Read the process-wide refresh switch once."""
    if args.refresh_dependencies:
        return True
    return environ.get(REFRESH_ENV_VAR, "").strip().lower() in {"1", "true", "yes"}


def build_dependency(
    args: argparse.Namespace, config: dict[str, Any], *, refresh: bool
) -> LayeredMappingsDependency:
    """Assemble the resolver from configuration and command line overrides."""
    layer_paths = args.layers or config.get("layers") or []
    if not layer_paths:
        msg = "No mapping layers given (pass paths or set 'layers' in the config)"
        raise SystemExit(msg)

    cache_dir = args.cache_dir or Path(config["cache"]["project_cache_dir"])
    layer_dir = Path(args.config).parent if args.config and not args.layers else None
    context = MappingContext(Path(cache_dir), layer_dir=layer_dir)
    spec = LayeredMappingSpec.from_paths(layer_paths)

    ns = config["namespaces"]
    pipeline = NamespaceTransformPipeline(
        ns["target"], ns["source"], fallback_to_src=ns["fallback_to_src"]
    )
    resolver = LayeredMappingResolver(
        context,
        spec,
        args.version or spec.version,
        pipeline=pipeline,
        escape_names=config["output"]["escape_names"],
    )
    return LayeredMappingsDependency(resolver, refresh_dependencies=refresh)


def run_resolution(args: argparse.Namespace) -> int:
    """Execute the resolution and print the resulting file."""
    config = load_config(args.config)
    refresh = refresh_requested(args, dict(os.environ))
    dependency = build_dependency(args, config, refresh=refresh)

    print(
        f"Resolving {dependency.group}:{dependency.name}:{dependency.version}"
        f" from {len(dependency.resolver.spec.layers)} layer(s)..."
    )
    try:
        (path,) = dependency.resolve()
    except LayeredMappingsError as e:
        cause = f": {e.__cause__}" if e.__cause__ else ""
        msg = f"{e}{cause}"
        raise SystemExit(msg) from e

    print(path)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the resolution process."""
    ap = argparse.ArgumentParser(
        description="Merge tiny v2 mapping layers into a cached mappings archive.",
    )
    ap.add_argument(
        "layers",
        nargs="*",
        type=Path,
        help="Tiny v2 layer files in merge order (default: 'layers' from config)",
    )
    ap.add_argument(
        "--config",
        help="Path to configuration file",
    )
    ap.add_argument(
        "--version",
        help="Version identifier for the cached artifact (default: derived "
        "from the layers)",
    )
    ap.add_argument(
        "--cache-dir",
        type=Path,
        help="Project cache directory (default: cache.project_cache_dir)",
    )
    ap.add_argument(
        "--refresh-dependencies",
        action="store_true",
        help=f"Ignore cached artifacts and regenerate (also ${REFRESH_ENV_VAR})",
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Log cache and merge decisions",
    )
    args = ap.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return run_resolution(args)


if __name__ == "__main__":
    raise SystemExit(main())
