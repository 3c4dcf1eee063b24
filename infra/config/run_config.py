"""
Run configuration discovery and merging.

A config file is optional. When none is passed explicitly, the first match
walking up from the working directory is used:
- .wpt-gauntletrc (YAML or JSON)
- .wpt-gauntletrc.yaml / .yml / .json
- wpt-gauntlet.config.yaml
- pyproject.toml with a [tool.wpt-gauntlet] table
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from pydantic import ValidationError

from .schemas import ConfigError, RunConfig

logger = logging.getLogger(__name__)

TOOL_NAME = "wpt-gauntlet"

SEARCH_FILENAMES = (
    f".{TOOL_NAME}rc",
    f".{TOOL_NAME}rc.yaml",
    f".{TOOL_NAME}rc.yml",
    f".{TOOL_NAME}rc.json",
    f"{TOOL_NAME}.config.yaml",
    "pyproject.toml",
)


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search from `start` (default: cwd) up to the filesystem root.

    Returns the first config file found, or None.
    """
    directory = Path(start or Path.cwd()).expanduser().resolve()

    for candidate_dir in (directory, *directory.parents):
        for filename in SEARCH_FILENAMES:
            candidate = candidate_dir / filename
            if not candidate.is_file():
                continue
            if filename == "pyproject.toml" and _pyproject_section(candidate) is None:
                continue
            return candidate

    return None


def load_config_file(path: Path) -> Dict[str, Any]:
    """Parse a config file into a dict of raw settings."""
    path = Path(path).expanduser()
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    if path.name == "pyproject.toml":
        return _pyproject_section(path) or {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    return data


def _pyproject_section(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    return data.get("tool", {}).get(TOOL_NAME)


def _normalise_keys(values: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase aliases onto field names; drop unknown keys."""
    by_alias = {
        (field.alias or name): name
        for name, field in RunConfig.model_fields.items()
    }
    normalised = {}
    for key, value in values.items():
        if key in RunConfig.model_fields:
            normalised[key] = value
        elif key in by_alias:
            normalised[by_alias[key]] = value
        else:
            logger.debug(f"Ignoring unknown config key: {key}")
    return normalised


def resolve_config(cli_values: Dict[str, Any], file_values: Optional[Dict[str, Any]] = None) -> RunConfig:
    """
    Merge settings: CLI value if not None, else file value, else default.

    Raises:
        ConfigError: Merged values fail validation
    """
    merged = _normalise_keys(file_values or {})
    for key, value in _normalise_keys(cli_values).items():
        if value is not None:
            merged[key] = value

    try:
        return RunConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration:\n{e}") from e


def load_run_config(
    cli_values: Optional[Dict[str, Any]] = None,
    config_path: Optional[Path] = None,
    search_from: Optional[Path] = None
) -> RunConfig:
    """
    Discover the config file (unless given), merge with CLI values, validate.
    """
    path = Path(config_path) if config_path else find_config_file(search_from)

    file_values = {}
    if path:
        logger.debug(f"Using config file {path}")
        file_values = load_config_file(path)

    return resolve_config(cli_values or {}, file_values)
