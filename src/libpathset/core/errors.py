"""Exception types raised by libpathset."""


class PathSetError(Exception):
    """Base class for all libpathset errors."""


class UnsupportedPlatformError(PathSetError, LookupError):
    """Raised when no registered pattern matches the running OS."""
    
    def __init__(self, os_name: str):
        self.os_name = os_name
        super().__init__(
            f"Your OS ({os_name}) is not supported yet.\n"
            "Please report this and help us support more platforms."
        )


class InvalidPartError(PathSetError, ValueError):
    """Raised when a part-scoped merge names something other than paths/files."""


class ConfigValidationError(PathSetError, ValueError):
    """Raised when a path set configuration fails validation."""
