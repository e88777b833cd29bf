# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Settings loader: environment first, then an optional YAML file on top.

The loading pipeline is deliberately simple and linear:
  1. Read the YAML file if one was given
  2. Hand its mapping to BuildSettings, which also reads the environment
  3. Return the frozen settings object

Values from the file win over the environment because the file was asked for
explicitly on the command line. Anything that goes wrong fails immediately
with a clear error.
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from relbuild.config.exceptions import ConfigLoadError, ConfigValidationError
from relbuild.config.schema import BuildSettings


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    We explicitly check for file existence before parsing, because
    yaml.safe_load gives cryptic errors on missing files. An empty file is
    treated as an empty mapping.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def load_settings(config_path: Optional[Path] = None) -> BuildSettings:
    """
    Build the settings for this run.

    Args:
        config_path: Optional YAML file whose keys are BuildSettings field names.

    Returns:
        A validated, frozen BuildSettings instance.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Unknown keys or invalid values, from the file or the environment.
    """
    overrides: dict[str, Any] = {}
    if config_path is not None:
        overrides = _read_yaml_file(config_path)

    try:
        return BuildSettings(**overrides)
    except ValidationError as err:
        source = str(config_path) if config_path is not None else "environment"
        raise ConfigValidationError(f"Settings validation failed ({source}):\n{err}") from err
