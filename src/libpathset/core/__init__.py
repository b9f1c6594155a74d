"""Core path set registry, merge algebra, and resolver."""

from libpathset.core.config import (
    PathSetConfig,
    default_config_path,
    load_config,
    validate_config,
)
from libpathset.core.errors import (
    ConfigValidationError,
    InvalidPartError,
    PathSetError,
    UnsupportedPlatformError,
)
from libpathset.core.host import current_os, normalize_os
from libpathset.core.merge import (
    ByPattern,
    ForAllKeys,
    FromRegistry,
    MergePolicy,
    SingleTemplate,
)
from libpathset.core.pathset import PathSet
from libpathset.core.resolver import NAME_PLACEHOLDER, candidates, find, find_async
from libpathset.core.telemetry import (
    ResolutionEvent,
    ResolutionOutcome,
    ResolutionRecorder,
    ResolutionStats,
    TelemetryLevel,
    get_recorder,
    set_recorder,
)

__all__ = [
    # pathset
    "PathSet",
    # merge
    "ByPattern",
    "ForAllKeys",
    "FromRegistry",
    "MergePolicy",
    "SingleTemplate",
    # resolver
    "NAME_PLACEHOLDER",
    "candidates",
    "find",
    "find_async",
    # host
    "current_os",
    "normalize_os",
    # errors
    "ConfigValidationError",
    "InvalidPartError",
    "PathSetError",
    "UnsupportedPlatformError",
    # config
    "PathSetConfig",
    "default_config_path",
    "load_config",
    "validate_config",
    # telemetry
    "ResolutionEvent",
    "ResolutionOutcome",
    "ResolutionRecorder",
    "ResolutionStats",
    "TelemetryLevel",
    "get_recorder",
    "set_recorder",
]
