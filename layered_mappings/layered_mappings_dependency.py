"""Host-facing dependency adapter around a layered mapping resolver.

A build host expects a wide dependency interface. Everything here other than
resolution and identity is a constant or a no-op: this dependency is derived,
so it offers no configuration beyond its constructor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from layered_mappings.cache_store import GROUP, MODULE

if TYPE_CHECKING:
    from pathlib import Path

    from layered_mappings.layered_mapping_resolver import (
        LayeredMappingResolver,
        ModuleIdentity,
    )


class LayeredMappingsDependency:
    """Exposes the resolver as an ordinary group:name:version dependency."""

    def __init__(
        self, resolver: LayeredMappingResolver, *, refresh_dependencies: bool = False
    ) -> None:
        """Wrap ``resolver``; ``refresh_dependencies`` is the host's refresh switch."""
        self.resolver = resolver
        self.refresh_dependencies = refresh_dependencies

    @property
    def group(self) -> str:
        """Return the fixed group."""
        return GROUP

    @property
    def name(self) -> str:
        """Return the fixed module name."""
        return MODULE

    @property
    def version(self) -> str:
        """Return the version this dependency was created with."""
        return self.resolver.version

    @property
    def module(self) -> tuple[str, str]:
        """Return the (group, name) module coordinates."""
        return (GROUP, MODULE)

    @property
    def version_constraint(self) -> str:
        """Return the exact version; ranges are not supported."""
        return self.version

    @property
    def build_dependencies(self) -> frozenset[str]:
        """Return the tasks this dependency needs built first (none)."""
        return frozenset()

    @property
    def reason(self) -> str | None:
        """Return the declared reason (never set)."""
        return None

    def because(self, reason: str) -> None:
        """Ignore a reason."""

    def update_version_constraint(self, action: object) -> None:
        """Ignore a version constraint mutation."""

    def resolve(self, *, transitive: bool = True) -> frozenset[Path]:
        """Resolve to the single mappings file."""
        return self.resolver.resolve(force_refresh=self.refresh_dependencies)

    def is_changing(self) -> bool:
        """Report that the artifact never changes for a given version."""
        return False

    def set_changing(self, changing: bool) -> LayeredMappingsDependency:
        """Ignore the flag."""
        return self

    def is_force(self) -> bool:
        """Report that the version is never forced."""
        return False

    def set_force(self, force: bool) -> LayeredMappingsDependency:
        """Ignore the flag."""
        return self

    def matches_strictly(self, identifier: ModuleIdentity) -> bool:
        """Check if ``identifier`` has exactly these coordinates."""
        return tuple(identifier) == tuple(self.resolver.identity)

    def content_equals(self, other: object) -> bool:
        """Compare with another layered mappings dependency by version."""
        if isinstance(other, LayeredMappingsDependency):
            return self.version == other.version
        return False

    def copy(self) -> LayeredMappingsDependency:
        """Return a fresh dependency with the same coordinates."""
        return LayeredMappingsDependency(
            self.resolver.copy(), refresh_dependencies=self.refresh_dependencies
        )
