"""YAML user configuration for pt.

The file lives at ``$XDG_CONFIG_HOME/pt/config.yml``::

    # Assignee logins / team slugs to hide from the reviewer prompt
    ignoreAssignees:
      - "-bot$"
      - "^acme/everyone$"
    # Branch prefix; defaults to the local part of git's user.email
    branchPrefix: alice
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from pt_core.paths import config_file

_log = logging.getLogger("pt.config")

KNOWN_KEYS = {"ignoreAssignees", "branchPrefix"}


class ConfigError(Exception):
    """Raised when the config file cannot be read or is invalid."""


@dataclass
class Config:
    ignore_assignees: list[str] = field(default_factory=list)
    branch_prefix: Optional[str] = None

    def ignore_patterns(self) -> list[re.Pattern]:
        return [re.compile(p) for p in self.ignore_assignees]


def load_config(path: Optional[Path] = None) -> Config:
    """Load and validate the config file.

    A missing file yields the defaults. Unknown keys are logged and ignored.

    Raises:
        ConfigError: If the YAML is malformed or a value has the wrong shape.
    """
    if path is None:
        path = config_file()
    if not path.exists():
        _log.debug("config: %s not found, using defaults", path)
        return Config()

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    for key in sorted(set(data) - KNOWN_KEYS):
        _log.warning("config: ignoring unknown key %r in %s", key, path)

    return Config(
        ignore_assignees=_validate_ignore_assignees(data.get("ignoreAssignees"), path),
        branch_prefix=_validate_branch_prefix(data.get("branchPrefix"), path),
    )


def _validate_ignore_assignees(value, path: Path) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{path}: ignoreAssignees must be a list of regular expressions")
    patterns = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{path}: ignoreAssignees entries must be strings, got {item!r}")
        try:
            re.compile(item)
        except re.error as e:
            raise ConfigError(f"{path}: invalid ignoreAssignees regex {item!r}: {e}") from e
        patterns.append(item)
    return patterns


def _validate_branch_prefix(value, path: Path) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{path}: branchPrefix must be a string")
    return value.strip().strip("/")
