"""Utility functions for the bot."""

import copy
import logging
import yaml
from pathlib import Path
from typing import Dict, Any

logger = logging.getLogger(__name__)


def merge_config(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge a loaded config over its defaults.

    Nested dicts are merged key by key; any other value in ``overrides``
    replaces the default outright. Neither input is modified.

    Args:
        defaults: Default configuration dictionary
        overrides: Values loaded from config.yml

    Returns:
        A new merged dictionary
    """
    merged = copy.deepcopy(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_branch_config(config_path: Path, default_config: Dict[str, Any], branch_name: str) -> Dict[str, Any]:
    """
    Load branch configuration from YAML file with fallback to defaults.

    Args:
        config_path: Path to config.yml file
        default_config: Default configuration dictionary
        branch_name: Name of the branch (for logging)

    Returns:
        Loaded configuration merged over the defaults
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
            logger.info(f"Loaded config for {branch_name}")
            return merge_config(default_config, config)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config for {branch_name}: {e}")

    return copy.deepcopy(default_config)


def sanitize_text(text: str, max_length: int = 2000, strip: bool = True) -> str:
    """
    Sanitize user input text.

    Args:
        text: The text to sanitize
        max_length: Maximum allowed length
        strip: Trim surrounding whitespace; pass False to keep the text verbatim

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]
    text = text.replace('\x00', '')

    return text.strip() if strip else text
