"""
Stock search templates for common operating systems.

These cover the usual system library directories on Linux/BSD, macOS and
Windows. Applications typically start from system_pathset() and prepend
their own bundled locations.
"""

from libpathset.core import PathSet, PathSetConfig, load_config

_DEFAULT_PATHSET = PathSet(
    {
        "linux|bsd": ["/usr/local/lib/", "/usr/lib/"],
        "darwin": [
            "/usr/local/lib/",
            "/sw/lib/",
            "/opt/local/lib/",
            "~/Library/Frameworks/",
            "/Library/Frameworks/",
        ],
        "windows": ["C:\\windows\\system32\\", "C:\\windows\\system\\"],
    },
    {
        "linux|bsd": ["lib[NAME].so"],
        "darwin": ["lib[NAME].dylib", "[NAME].framework/[NAME]"],
        "windows": ["[NAME].dll"],
    },
)


def system_pathset(config: PathSetConfig | None = None) -> PathSet:
    """
    Return a fresh copy of the stock templates.

    Args:
        config: Optional config whose templates are merged in under its policy

    Returns:
        A PathSet the caller owns; the stock templates are never modified
    """
    if config is None or config.is_empty():
        return _DEFAULT_PATHSET.clone()
    return config.apply(_DEFAULT_PATHSET)


def configured_pathset(config_path=None) -> PathSet:
    """Stock templates with the YAML config at config_path (or the default location) applied."""
    return system_pathset(load_config(config_path))
