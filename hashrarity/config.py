#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .domain import RarityThresholds
from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("hashrarity")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. HASHRARITY_CONFIG environment variable
    2. ~/.hashrarity/ directory
    """
    if 'HASHRARITY_CONFIG' in os.environ:
        path = Path(os.environ['HASHRARITY_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.hashrarity'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "rarity": {
            "common_bits": 8,     # Fewest leading zero bits for Uncommon
            "uncommon_bits": 16,  # Fewest leading zero bits for Rare
        },
        "scan": {
            "include_alternates": True,
            "keep_going": False,
        },
        "git": {
            "timeout_seconds": 30,
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        },
    }


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            if not isinstance(file_config, dict):
                raise ValueError("top level must be a mapping")
            config = merge_configs(config, file_config)
        except (OSError, ValueError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    return config


def save_config(config, config_path=None):
    """Save configuration to file, picking the format from the suffix."""
    config_path = Path(config_path) if config_path else get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.suffix.lower() in ['.toml']:
        # tomllib is read-only, writing needs the toml package
        import toml
        with open(config_path, 'w') as f:
            toml.dump(config, f)
    elif config_path.suffix.lower() in ['.yaml', '.yml']:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
    else:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _coerce_env_value(value):
    if value.isdigit():
        return int(value)
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    return value


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: HASHRARITY_SECTION_KEY
    For example: HASHRARITY_RARITY_COMMON_BITS=12
    """
    env_prefix = "HASHRARITY_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')
        typed_value = _coerce_env_value(value)

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if not matched_key:
                break

            if i + best_match_len == len(key_parts):
                # Only leaves can be overridden
                if not isinstance(current_level[matched_key], dict):
                    current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                break

    return config


def get_thresholds(config, common_bits=None, uncommon_bits=None) -> RarityThresholds:
    """
    Build RarityThresholds from the `rarity` section.

    Args:
        config: Loaded configuration
        common_bits: Command-line override for rarity.common_bits
        uncommon_bits: Command-line override for rarity.uncommon_bits

    Raises:
        ConfigError: If the thresholds are not valid
    """
    rarity = config.get('rarity', {})
    if common_bits is None:
        common_bits = rarity.get('common_bits', 8)
    if uncommon_bits is None:
        uncommon_bits = rarity.get('uncommon_bits', 16)
    try:
        return RarityThresholds(common_bits=common_bits, uncommon_bits=uncommon_bits)
    except ValueError as e:
        raise ConfigError(f"Invalid rarity thresholds: {e}") from e


def configure_logging(config) -> None:
    """Apply the configured level and format to the hashrarity loggers."""
    log_config = config.get('logging', {})
    level = str(log_config.get('level', 'WARNING')).upper()
    logger.setLevel(getattr(logging, level, logging.WARNING))

    fmt = log_config.get('format')
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))
