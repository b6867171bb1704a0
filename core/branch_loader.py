"""
Branch loader for Birch.

Discovers branches (feature packages under ``branches/``), generates their
config.yml from ``DEFAULT_CONFIG`` on first run, and reports which ones are
enabled.
"""

import yaml
import logging
import importlib
from pathlib import Path
from typing import Optional, Dict, Any

from constants import BRANCH_CONFIG_FILE
from utils import load_branch_config

logger = logging.getLogger(__name__)

GENERIC_DEFAULT_CONFIG = {"enabled": True, "version": "1.0.0", "settings": {}}


class BranchLoader:
    """Finds branch packages and manages their config files."""

    def __init__(self, branches_dir: str = "branches"):
        self.branches_dir = Path(branches_dir)

    def discover_branches(self) -> list[str]:
        """Return the sorted names of all branch packages."""
        if not self.branches_dir.is_dir():
            logger.warning(f"Branches directory {self.branches_dir} does not exist")
            return []

        branch_names = []
        for item in self.branches_dir.iterdir():
            if item.name.startswith(("_", ".")):
                continue
            if item.is_dir() and (item / "__init__.py").exists():
                branch_names.append(item.name)
                logger.debug(f"Discovered branch: {item.name}")

        return sorted(branch_names)

    def get_config_path(self, branch_name: str) -> Path:
        return self.branches_dir / branch_name / BRANCH_CONFIG_FILE

    def get_default_config(self, branch_name: str) -> Dict[str, Any]:
        """Read ``DEFAULT_CONFIG`` from the branch module, or fall back to generic defaults."""
        try:
            module = importlib.import_module(f"{self.branches_dir.name}.{branch_name}.branch")
        except ImportError as e:
            logger.debug(f"Could not import {branch_name} for defaults: {e}")
            return dict(GENERIC_DEFAULT_CONFIG)

        return getattr(module, "DEFAULT_CONFIG", dict(GENERIC_DEFAULT_CONFIG))

    def load_config(self, branch_name: str) -> Dict[str, Any]:
        """Load config for a branch, writing the defaults out if no file exists yet."""
        config_path = self.get_config_path(branch_name)
        default_config = self.get_default_config(branch_name)

        if not config_path.exists():
            self.save_config(branch_name, default_config)
            return default_config

        return load_branch_config(config_path, default_config, branch_name)

    def save_config(self, branch_name: str, config: Dict[str, Any]):
        config_path = self.get_config_path(branch_name)
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
            logger.info(f"✅ Generated default config for {branch_name}")
        except OSError as e:
            logger.error(f"Failed to save config for {branch_name}: {e}")

    def get_load_path(self, branch_name: str) -> str:
        """Extension path for ``Bot.load_extension``."""
        return f"{self.branches_dir.name}.{branch_name}"


_loader: Optional[BranchLoader] = None


def get_branch_loader() -> BranchLoader:
    """Get the global branch loader instance."""
    global _loader
    if _loader is None:
        _loader = BranchLoader()
    return _loader
