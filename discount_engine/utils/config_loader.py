"""Configuration file loader with validation"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any
from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/discounts.yaml"

REQUIRED_KEYS = ['version', 'ingestion', 'database', 'logging']

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "DISCOUNT_INPUT_PATH": ("ingestion", "input_path"),
    "DATABASE_URL": ("database", "url"),
    "LOG_LEVEL": ("logging", "level"),
    "DISCOUNT_LOG_FILE": ("logging", "log_file"),
}


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load YAML configuration file with validation.
    Environment variables listed in ENV_OVERRIDES replace file values.

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary with configuration

    Raises:
        ConfigurationError: If file doesn't exist, is invalid YAML or lacks required keys
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file is not a mapping: {config_path}")

    # Validate required keys
    missing_keys = [key for key in REQUIRED_KEYS if key not in config]

    if missing_keys:
        raise ConfigurationError(f"Missing required configuration keys: {missing_keys}")

    return apply_env_overrides(config)


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay non-empty environment variables onto their config sections"""
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            config.setdefault(section, {})
            if config[section] is None:
                config[section] = {}
            config[section][key] = value
    return config


def get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Get one configuration section

    Args:
        config: Full configuration dictionary
        name: Section name (e.g. "database")

    Returns:
        Section dictionary, empty if absent
    """
    return config.get(name) or {}
