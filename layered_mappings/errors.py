"""Exception types raised while producing layered mappings."""


class LayeredMappingsError(Exception):
    """Base class for all layered mapping failures."""


class MappingFormatError(LayeredMappingsError):
    """Raised when a tiny v2 document or mappings archive is malformed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        """Initialize with an optional 1-based line number of the bad input."""
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class MappingTransformError(LayeredMappingsError):
    """Raised when a namespace transform finds an inconsistent tree."""


class LayerMergeError(LayeredMappingsError):
    """Raised when the mapping layers cannot be merged into one tree."""


class MappingsResolutionError(LayeredMappingsError):
    """Wraps any failure of a single resolution call.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, stage: str, version: str) -> None:
        """Initialize with the failed stage and the requested version."""
        super().__init__(f"Failed to resolve mappings {version} ({stage})")
        self.stage = stage
        self.version = version


class CacheVersionError(LayeredMappingsError):
    """Raised when a version cannot be used as part of a cache file name."""
