"""Configuration file I/O (YAML/JSON load as dict)."""

import json
import os
from typing import Any, Dict

import yaml

from benchmarker.errors import ConfigError

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def load_yaml_file(filepath: str) -> Dict[str, Any]:
    """Load a YAML file into a dictionary.

    Args:
        filepath: Path to YAML file

    Returns:
        Loaded config as dict; empty dict if the file is empty
    """
    with open(filepath, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if data is not None else {}


def load_json_file(filepath: str) -> Dict[str, Any]:
    """Load a JSON file into a dictionary."""
    with open(filepath, encoding="utf-8") as f:
        data = json.load(f)
    return data if data is not None else {}


def load_config_file(filepath: str) -> Dict[str, Any]:
    """Load a YAML or JSON config file, chosen by extension.

    Args:
        filepath: Path ending in .yaml, .yml or .json

    Returns:
        Loaded mapping

    Raises:
        ConfigError: If the file is missing, unparseable, has an unknown
            extension, or does not contain a mapping
    """
    if not os.path.exists(filepath):
        raise ConfigError(f"Config file not found: {filepath}")

    lowered = filepath.lower()
    try:
        if lowered.endswith(YAML_SUFFIXES):
            data = load_yaml_file(filepath)
        elif lowered.endswith(JSON_SUFFIXES):
            data = load_json_file(filepath)
        else:
            raise ConfigError(f"Unsupported config format: {filepath}")
    except (yaml.YAMLError, json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Could not read config file {filepath}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {filepath} must contain a mapping")
    return data
