"""Tests for resolving layered mappings through the cache."""

from pathlib import Path

import pytest

from layered_mappings.artifact_packager import read_packed_mappings
from layered_mappings.errors import MappingsResolutionError
from layered_mappings.layered_mapping_resolver import (
    LayeredMappingResolver,
    ModuleIdentity,
)
from layered_mappings.layered_mapping_spec import LayeredMappingSpec
from layered_mappings.layered_mappings_dependency import LayeredMappingsDependency
from layered_mappings.mapping_context import MappingContext
from layered_mappings.mapping_tree import MappingTree
from layered_mappings.namespace_transform_pipeline import NamespaceTransformPipeline
from layered_mappings.tiny_v2_reader import read_tiny_v2


def build_tree() -> MappingTree:
    """Build a tree shaped like a multi-layer merge result."""
    tree = MappingTree("intermediary", ["a", "named", "official"])
    cls = tree.add_class("class_1", ["A1", "Foo", "x"])
    tree.add_method(cls, "method_1", "()Lclass_1;", ["am", "copy", "y"])
    return tree


class CountingMerge:
    """Merge stand-in that records how often it was asked to merge."""

    def __init__(self, error: Exception | None = None) -> None:
        """Initialize with an optional error to raise instead of merging."""
        self.calls = 0
        self.error = error

    def __call__(
        self, spec: LayeredMappingSpec, context: MappingContext
    ) -> MappingTree:
        """Return a fresh tree or raise the configured error."""
        self.calls += 1
        if self.error:
            raise self.error
        return build_tree()


def make_resolver(
    tmp_path: Path, merge: CountingMerge, version: str = "1.0", **kwargs: object
) -> LayeredMappingResolver:
    """Create a resolver caching under ``tmp_path``."""
    return LayeredMappingResolver(
        MappingContext(tmp_path),
        LayeredMappingSpec(()),
        version,
        merge=merge,
        **kwargs,
    )


def test_resolve_writes_single_deterministic_file(tmp_path: Path) -> None:
    """Verify resolution returns one file at the deterministic path."""
    resolver = make_resolver(tmp_path, CountingMerge())
    files = resolver.resolve()

    assert files == frozenset({tmp_path / "layered" / "loom.mappings-1.0.tiny"})
    (path,) = files
    assert path.name == "loom.mappings-1.0.tiny"
    assert path.is_file()


def test_second_resolution_is_a_cache_hit(tmp_path: Path) -> None:
    """Verify repeated resolution returns identical bytes without re-merging."""
    merge = CountingMerge()
    resolver = make_resolver(tmp_path, merge)

    (first,) = resolver.resolve()
    first_bytes = first.read_bytes()
    (second,) = resolver.resolve()

    assert merge.calls == 1
    assert second == first
    assert second.read_bytes() == first_bytes


def test_forced_refresh_regenerates(tmp_path: Path) -> None:
    """Verify a forced refresh reruns the pipeline and overwrites the artifact."""
    merge = CountingMerge()
    resolver = make_resolver(tmp_path, merge)
    (path,) = resolver.resolve()
    good = path.read_bytes()
    path.write_bytes(b"stale")

    resolver.resolve(force_refresh=True)

    assert merge.calls == 2  # noqa: PLR2004
    assert path.read_bytes() == good


def test_deleted_cache_file_is_regenerated(tmp_path: Path) -> None:
    """Verify a cache miss merges and writes again."""
    merge = CountingMerge()
    resolver = make_resolver(tmp_path, merge, version="7")
    (path,) = resolver.resolve()
    path.unlink()

    files = resolver.resolve()

    assert merge.calls == 2  # noqa: PLR2004
    assert len(files) == 1
    assert path.is_file()
    assert path.name == "loom.mappings-7.tiny"


def test_archive_contains_normalized_tree(tmp_path: Path) -> None:
    """Verify the cached archive holds the intermediary -> named tree."""
    (path,) = make_resolver(tmp_path, CountingMerge()).resolve()
    text = read_packed_mappings(path)

    assert text.splitlines()[0] == "tiny\t2\t0\tintermediary\tnamed"
    tree = read_tiny_v2(text)
    cls = tree.classes["class_1"]
    assert cls.dst_names == ["Foo"]
    assert cls.methods[("method_1", "()Lclass_1;")].dst_names == ["copy"]


def test_merge_failure_is_wrapped_and_leaves_no_artifact(tmp_path: Path) -> None:
    """Verify a merge error is reported with its cause and nothing is cached."""
    cause = OSError("layer download failed")
    resolver = make_resolver(tmp_path, CountingMerge(error=cause))

    with pytest.raises(MappingsResolutionError, match="Failed to resolve") as info:
        resolver.resolve()

    assert info.value.stage == "merge"
    assert info.value.__cause__ is cause
    assert not resolver.cache_store.path_for("1.0").exists()


def test_failed_refresh_keeps_previous_artifact(tmp_path: Path) -> None:
    """Verify a failed forced refresh does not destroy the cached artifact."""
    (path,) = make_resolver(tmp_path, CountingMerge()).resolve()
    good = path.read_bytes()

    failing = make_resolver(tmp_path, CountingMerge(error=ValueError("bad layer")))
    with pytest.raises(MappingsResolutionError):
        failing.resolve(force_refresh=True)

    assert path.read_bytes() == good


def test_transform_failure_reports_stage(tmp_path: Path) -> None:
    """Verify an integrity error in the pipeline is wrapped with its stage."""
    pipeline = NamespaceTransformPipeline(["named"], "missing", fallback_to_src=False)
    resolver = make_resolver(tmp_path, CountingMerge(), pipeline=pipeline)

    with pytest.raises(MappingsResolutionError) as info:
        resolver.resolve()
    assert info.value.stage == "transform"


def test_equality_is_by_version_only(tmp_path: Path) -> None:
    """Verify resolvers compare by version regardless of spec and context."""
    one = make_resolver(tmp_path / "x", CountingMerge(), version="1")
    other_one = LayeredMappingResolver(
        MappingContext(tmp_path / "y"),
        LayeredMappingSpec.from_paths(["other.tiny"]),
        "1",
    )
    two = make_resolver(tmp_path / "x", CountingMerge(), version="2")

    assert one == other_one
    assert hash(one) == hash(other_one)
    assert one != two
    assert one.identity == ModuleIdentity("loom", "mappings", "1")


def test_copy_preserves_identity(tmp_path: Path) -> None:
    """Verify copies are fresh instances with the same coordinates."""
    resolver = make_resolver(tmp_path, CountingMerge(), version="3")
    clone = resolver.copy()
    assert clone is not resolver
    assert clone == resolver
    assert clone.identity == resolver.identity


def test_dependency_adapter(tmp_path: Path) -> None:
    """Verify the host adapter answers with constants and resolves once."""
    merge = CountingMerge()
    dependency = LayeredMappingsDependency(make_resolver(tmp_path, merge))

    assert (dependency.group, dependency.name, dependency.version) == (
        "loom",
        "mappings",
        "1.0",
    )
    assert dependency.module == ("loom", "mappings")
    assert dependency.version_constraint == "1.0"
    assert dependency.build_dependencies == frozenset()
    assert dependency.reason is None
    dependency.because("ignored")
    dependency.update_version_constraint(object())
    assert dependency.set_changing(True) is dependency
    assert not dependency.is_changing()
    assert dependency.set_force(True) is dependency
    assert not dependency.is_force()
    assert dependency.matches_strictly(ModuleIdentity("loom", "mappings", "1.0"))
    assert not dependency.matches_strictly(ModuleIdentity("loom", "mappings", "2"))

    copy = dependency.copy()
    assert copy is not dependency
    assert copy.content_equals(dependency)
    assert not dependency.content_equals(object())

    assert dependency.resolve(transitive=False) == dependency.resolve()
    assert merge.calls == 1


def test_dependency_adapter_refresh(tmp_path: Path) -> None:
    """Verify the host refresh switch is passed through to every resolution."""
    merge = CountingMerge()
    dependency = LayeredMappingsDependency(
        make_resolver(tmp_path, merge), refresh_dependencies=True
    )
    dependency.resolve()
    dependency.resolve()
    assert merge.calls == 2  # noqa: PLR2004
