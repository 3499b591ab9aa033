"""
Configuration loader — reads protostub.yml into generator defaults.

The config file is optional. When present it supplies defaults for the
command-line options, so a project can run ``protostub`` with no flags.
Command-line values always win over the file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "protostub.yml"


class ConfigError(Exception):
    """Raised when the generator configuration is invalid or unreadable."""


class GeneratorConfig(BaseModel):
    """Defaults for a generation run.

    Relative paths are resolved against the directory holding the
    config file, not the working directory.
    """

    model_config = ConfigDict(extra="forbid")

    proto: Path | None = None
    out: Path | None = None
    writer: str | None = None
    recursive: bool = False

    def resolve_paths(self, base_dir: Path) -> GeneratorConfig:
        """Copy with relative paths anchored at ``base_dir``."""
        updates = {}
        for key in ("proto", "out"):
            value = getattr(self, key)
            if value is not None and not value.is_absolute():
                updates[key] = base_dir / value
        return self.model_copy(update=updates)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for protostub.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to protostub.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, search: bool = True) -> GeneratorConfig:
    """Load generator defaults.

    Args:
        path: Explicit config path. Must exist when given.
        search: When no path is given, look for protostub.yml upward
            from the working directory.

    Returns:
        The validated config, or an empty config when there is no file.

    Raises:
        ConfigError: If the file is missing (explicit path) or invalid.
    """
    if path is None:
        path = find_config_file() if search else None
        if path is None:
            return GeneratorConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generator config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Settings may sit at the top level or under a "protostub" key
    section = data.get("protostub", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected a mapping under 'protostub' in {path}")

    try:
        config = GeneratorConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(f"Invalid generator configuration in {path}: {e}") from e

    config = config.resolve_paths(path.parent.resolve())
    logger.info("Loaded generator config from %s", path)
    return config
