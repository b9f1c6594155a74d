"""
Configuration module for library search templates.

This module loads path set templates from YAML so that deployments can add,
reorder or remove search locations without code changes. A config looks like:

    policy: prepend
    paths:
      "linux|bsd": ["/opt/vendor/lib/"]
    files:
      "linux|bsd": ["lib[NAME].so.2"]
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigValidationError
from .merge import MergePolicy
from .pathset import PathSet

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LIBPATHSET_CONFIG"


@dataclass
class PathSetConfig:
    """Templates loaded from a config file and how to merge them."""

    policy: str = MergePolicy.PREPEND.value
    paths: dict[str, list[str]] = field(default_factory=dict)
    files: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PathSetConfig":
        """Create PathSetConfig from dictionary."""
        return cls(
            policy=data.get("policy", MergePolicy.PREPEND.value),
            paths=data.get("paths") or {},
            files=data.get("files") or {},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert PathSetConfig to dictionary."""
        return {
            "policy": self.policy,
            "paths": {pattern: list(values) for pattern, values in self.paths.items()},
            "files": {pattern: list(values) for pattern, values in self.files.items()},
        }

    def is_empty(self) -> bool:
        return not self.paths and not self.files

    def to_pathset(self) -> PathSet:
        """Build a PathSet holding exactly the configured templates."""
        return PathSet(self.paths, self.files)

    def apply(self, base: PathSet) -> PathSet:
        """
        Merge the configured templates into a copy of base.

        Args:
            base: Path set to start from; it is not modified

        Returns:
            A new PathSet with the templates merged under this config's policy
        """
        return base.clone().merge(MergePolicy(self.policy), self.to_pathset())


def default_config_path() -> Path:
    """Return $LIBPATHSET_CONFIG if set, else the repository's config/pathsets.yml."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(__file__).parents[3] / "config" / "pathsets.yml"


def load_config(config_path: str | Path | None = None) -> PathSetConfig:
    """
    Load path set configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        PathSetConfig with the configured templates

    Raises:
        ConfigValidationError: If the file is invalid YAML or fails validation
    """
    if config_path is None:
        config_path = default_config_path()
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        logger.debug("No path set config at %s, using empty config", config_path)
        return PathSetConfig()

    with open(config_path, "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}") from e

    if not data:
        return PathSetConfig()

    if not isinstance(data, dict):
        raise ConfigValidationError(
            f"Config {config_path} must be a mapping, got {type(data).__name__}"
        )

    config = PathSetConfig.from_dict(data)
    validate_config(config)
    logger.debug(
        "Loaded path set config from %s (%d path pattern(s), %d file pattern(s))",
        config_path, len(config.paths), len(config.files),
    )
    return config


def validate_config(config: PathSetConfig) -> None:
    """
    Validate configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    valid_policies = [policy.value for policy in MergePolicy]
    if config.policy not in valid_policies:
        raise ConfigValidationError(
            f"Unknown policy {config.policy!r} (expected one of {', '.join(valid_policies)})"
        )

    for part, templates in (("paths", config.paths), ("files", config.files)):
        if not isinstance(templates, dict):
            raise ConfigValidationError(f"'{part}' must be a mapping of pattern to templates")

        for pattern, values in templates.items():
            if not isinstance(pattern, str):
                raise ConfigValidationError(f"{part} pattern {pattern!r} must be a string")

            # Validate patterns are valid regex
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigValidationError(
                    f"{part} pattern {pattern!r} is not a valid regex: {e}"
                )

            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise ConfigValidationError(
                    f"{part} templates for {pattern!r} must be a list of strings"
                )
