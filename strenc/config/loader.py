# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Turns a YAML file into a frozen StrEncConfig.

File access goes through strenc.utils.filesystem.safe_read, YAML through
yaml.safe_load, and the result through pydantic. Each layer's failure is
re-raised as one of the two config exceptions, so callers (the CLI in
particular) only ever catch ConfigError.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from strenc.config.exceptions import ConfigLoadError, ConfigValidationError
from strenc.config.schema import StrEncConfig
from strenc.utils.filesystem import safe_read


def _parse_yaml_mapping(config_path: Path) -> dict[str, Any]:
    """
    Raises:
        ConfigLoadError: Missing path, directory, unreadable file, bad YAML,
            or a YAML document that isn't a mapping.
    """
    try:
        document = yaml.safe_load(safe_read(config_path))
    except FileNotFoundError as err:
        raise ConfigLoadError(f"Config file not found: {config_path}") from err
    except IsADirectoryError as err:
        raise ConfigLoadError(f"Config path is not a file: {config_path}") from err
    except (OSError, UnicodeDecodeError) as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if isinstance(document, dict):
        return document
    raise ConfigLoadError(
        f"{config_path} must hold a YAML mapping with a 'global:' section, "
        f"got {type(document).__name__}"
    )


def load_config(config_path: Path) -> StrEncConfig:
    """
    Load and validate a StrEnc config file.

    Raises:
        ConfigLoadError: The file can't be read or parsed.
        ConfigValidationError: The mapping doesn't fit the schema (missing
            `global.config_version`, unknown keys, bad policy names, ...).
    """
    document = _parse_yaml_mapping(config_path)
    try:
        return StrEncConfig.model_validate(document)
    except ValidationError as err:
        raise ConfigValidationError(f"{config_path} is not a valid StrEnc config:\n{err}") from err
