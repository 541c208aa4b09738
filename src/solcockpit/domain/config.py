from __future__ import annotations

"""
Configuration Domain Management.

Provides the default cockpit configuration (a flat dictionary with dotted
keys) and read-only loading of user overrides from the JSON file in the
user data directory. Writing settings back belongs to the host editor.
"""

import json
import logging
import os
from typing import Any, Dict

from solcockpit.domain import constants as const
from solcockpit.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")

# Human readable descriptions for the boolean flags listed by the settings view
SETTING_DESCRIPTIONS: Dict[str, str] = {
    "trace.include_modifiers": "Show modifier invocations as call steps in function traces.",
    "methods.mark_payable": "Mark payable functions in the public methods view.",
    "explorer.include_flat_files": "List flattened sources in the workspace explorer.",
}


# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        "workspace_root": os.getcwd(),
        "source_glob": const.SOURCE_GLOB,

        # Function trace
        "trace.scope": "known_files",
        "trace.max_files": const.MAX_TRACE_FILES,
        "trace.include_modifiers": False,

        # Discovery
        "explorer.max_files": const.MAX_EXPLORER_FILES,
        "explorer.include_flat_files": False,
        "flat_files.max_files": const.MAX_FLAT_FILES,
        "find_files.excludes": list(const.DEFAULT_FINDFILES_EXCLUDES),
        "find_files.excludes_allow_flat": list(const.DEFAULT_FINDFILES_EXCLUDES_ALLOWFLAT),

        # Views
        "top_level_contracts.list_style": "tree",
        "methods.mark_payable": True,
    }


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Load the active configuration merged over the defaults.

    A missing, unreadable or malformed file yields the defaults. Nested
    objects in the file are flattened to dotted keys so that both
    {"trace": {"scope": "workspace"}} and {"trace.scope": "workspace"} work.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Using defaults.")
        return config

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{CONFIG_FILE}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    data.pop("version", None)
    config.update(flatten_keys(data))
    return config


def flatten_keys(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested dictionaries into a single level of dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_keys(value, full_key))
        else:
            flat[full_key] = value
    return flat
