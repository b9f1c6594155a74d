"""Identify the running operating system for pattern matching."""

import logging
import platform
import sys

logger = logging.getLogger(__name__)

# platform.system() values that don't map to their lowercase form
_SYSTEM_ALIASES = {
    "sunos": "solaris",
    "microsoft": "windows",
}


def normalize_os(system: str) -> str:
    """
    Map a raw system name to the identifier path set patterns match against.

    Examples: "Linux" -> "linux", "Darwin" -> "darwin", "Windows" -> "windows",
    "CYGWIN_NT-10.0" -> "cygwin", "MINGW64_NT-10.0" -> "windows",
    "SunOS" -> "solaris".
    """
    system = system.strip().lower()
    if system.startswith(("cygwin", "msys")):
        return "cygwin"
    if system.startswith(("windows", "mingw", "win32")):
        return "windows"
    return _SYSTEM_ALIASES.get(system, system)


def current_os() -> str:
    """Return the identifier of the running operating system, e.g. "linux"."""
    system = platform.system()
    if not system:
        logger.debug("platform.system() is empty, falling back to sys.platform=%s", sys.platform)
        system = sys.platform
    return normalize_os(system)
