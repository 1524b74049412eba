"""
YAML → settings loader.

Loads model settings from settings.yaml (bundled with the package) and
optionally merges user overrides from ~/.lift-rotation/settings.yaml.

Usage:
    from lift_rotation.core.engine.config_loader import load_model_config
    cfg = load_model_config()
    increment = linear_params(cfg)["weight_increment"]

Absent keys fall back to the Python defaults in config.py.  A user
override file with parse errors is reported with a warning and ignored.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    ADVANCED_MIN_SUCCESSFUL_SESSIONS,
    ADVANCED_WEIGHT_INCREMENT,
    DEFAULT_MIN_SUCCESSFUL_SESSIONS,
    DEFAULT_SET_COUNT,
    DEFAULT_WEIGHT_INCREMENT,
    STARTING_WEIGHTS,
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML mapping.

    Raises:
        OSError: If the file cannot be read
        yaml.YAMLError: If the file is not valid YAML
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def load_user_yaml(path: Path) -> dict[str, Any]:
    """Load a user-supplied YAML file, warning instead of failing."""
    try:
        return load_yaml_file(path)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"lift-rotation: ignoring {path} ({exc})", stacklevel=3)
        return {}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_data_dir() -> Path:
    """Return the per-user data directory (~/.lift-rotation)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".lift-rotation"


def get_bundled_path(filename: str) -> Path:
    """Path of a data file shipped inside the package."""
    # config_loader.py lives at src/lift_rotation/core/engine/config_loader.py
    return Path(__file__).parent.parent.parent / filename


def get_user_path(filename: str) -> Path | None:
    """Return ~/.lift-rotation/<filename> if it exists, else None."""
    p = get_data_dir() / filename
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_rotation/settings.yaml
    2. User override at ~/.lift-rotation/settings.yaml

    Returns:
        Merged dict of settings sections.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_path("settings.yaml")
    if bundled.exists():
        config = deep_merge(config, load_yaml_file(bundled))

    user = get_user_path("settings.yaml")
    if user is not None:
        user_cfg = load_user_yaml(user)
        if user_cfg:
            config = deep_merge(config, user_cfg)

    return config


def _progression(cfg: dict[str, Any] | None) -> dict[str, Any]:
    section = (cfg or {}).get("progression", {})
    return section if isinstance(section, dict) else {}


def linear_params(cfg: dict[str, Any] | None, key: str = "linear") -> dict[str, float]:
    """Weight increment and success threshold for a linear plan variant."""
    if key == "advanced_linear":
        defaults = {
            "weight_increment": ADVANCED_WEIGHT_INCREMENT,
            "min_successful_sessions": ADVANCED_MIN_SUCCESSFUL_SESSIONS,
        }
    else:
        defaults = {
            "weight_increment": DEFAULT_WEIGHT_INCREMENT,
            "min_successful_sessions": DEFAULT_MIN_SUCCESSFUL_SESSIONS,
        }
    section = _progression(cfg).get(key, {})
    if not isinstance(section, dict):
        return defaults
    return {
        "weight_increment": float(section.get("weight_increment", defaults["weight_increment"])),
        "min_successful_sessions": int(
            section.get("min_successful_sessions", defaults["min_successful_sessions"])
        ),
    }


def starting_weights(cfg: dict[str, Any] | None) -> dict[str, float]:
    """Starting-weight table with configured entries layered over the defaults."""
    table = dict(STARTING_WEIGHTS)
    configured = _progression(cfg).get("starting_weights", {})
    if isinstance(configured, dict):
        table.update({str(k): float(v) for k, v in configured.items()})
    return table


def default_set_count(cfg: dict[str, Any] | None) -> int:
    return int(_progression(cfg).get("default_sets", DEFAULT_SET_COUNT))
