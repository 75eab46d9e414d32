"""
Configuration loader
"""
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from debug_contest.models import Settings


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/contest.yaml"


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML file

    Args:
        config_path: Path to config file. Falls back to the CONTEST_CONFIG
                     environment variable, then to config/contest.yaml.

    Returns:
        Settings object (defaults when the file does not exist)
    """
    config_path = config_path or os.environ.get("CONTEST_CONFIG", DEFAULT_CONFIG_PATH)
    path = Path(config_path)

    if not path.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return Settings()

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return Settings(**data)
