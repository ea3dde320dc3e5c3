"""
Central configuration for reachability-map generation and joint-limit avoidance.

Singleton config loader that reads from data/planner_config.json.
Tools and factories should use `get_planner_config()` instead of
hardcoding values.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "data"
_CONFIG_FILE = _CONFIG_DIR / "planner_config.json"

_MISSING = object()

# ── Defaults ──────────────────────────────────────────────────────────────

DEFAULTS: dict[str, Any] = {
    "reachability": {
        "voxel_size": 0.05,
        "dimension": 3,
        "sample_count": 100_000,
        "excluded_links": ["env_link"],
        "effector_link": "tool0",
        "seed": None,
    },
    "joint_limits": {
        "activation_x_pos": 0.2,
        "activation_y_mul": 4.0,
        "damping_ratio": 0.7,
        "stiffness_epsilon": 0.001,
        "torque_epsilon": 1e-6,
        "activation_threshold": 0.001,
    },
}


class PlannerConfig:
    """Singleton configuration for planner parameters.

    Only keys present in DEFAULTS can be set; saved files may carry
    extra keys, which are kept but never read.  Thread-safe.  Saves on
    every change.
    """

    _instance: Optional[PlannerConfig] = None
    _lock = threading.Lock()

    def __new__(cls) -> PlannerConfig:
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._data: dict[str, Any] = copy.deepcopy(DEFAULTS)
        self._initialized = True
        self._load()

    def _load(self):
        """Load config from disk, merging over defaults."""
        if _CONFIG_FILE.exists():
            try:
                saved = json.loads(_CONFIG_FILE.read_text())
                self._merge(self._data, saved)
                logger.info("Loaded planner config from %s", _CONFIG_FILE)
            except (OSError, ValueError) as e:
                logger.warning("Failed to load planner config: %s", e)

    def _merge(self, base: dict, overlay: dict):
        for k, v in overlay.items():
            if k in base and isinstance(base[k], dict) and isinstance(v, dict):
                self._merge(base[k], v)
            else:
                base[k] = v

    def _save(self):
        try:
            _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            _CONFIG_FILE.write_text(json.dumps(self._data, indent=2))
        except OSError as e:
            logger.warning("Failed to save planner config: %s", e)

    def get(self, section: str, key: Optional[str] = None) -> Any:
        """Get a config value. If key is None, returns the whole section."""
        with self._lock:
            sec = self._data.get(section, {})
            if key is None:
                return copy.deepcopy(sec)
            return copy.deepcopy(sec.get(key))

    def set(self, section: str, key: str, value: Any):
        """Set a known config value and save.

        Raises KeyError for a section or key that has no default.
        """
        if key not in DEFAULTS.get(section, {}):
            raise KeyError(f"Unknown planner setting {section}.{key}")
        with self._lock:
            self._data[section][key] = value
            self._save()
        logger.info("Planner config %s.%s set to %r", section, key, value)

    def get_all(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._data)

    def reset(self):
        """Reset to defaults and save."""
        with self._lock:
            self._data = copy.deepcopy(DEFAULTS)
            self._save()

    def diff(self) -> dict[str, Any]:
        """Values that differ from DEFAULTS, by section."""
        with self._lock:
            result: dict[str, Any] = {}
            for section, values in self._data.items():
                defaults = DEFAULTS.get(section)
                if not isinstance(values, dict) or not isinstance(defaults, dict):
                    if values != defaults:
                        result[section] = copy.deepcopy(values)
                    continue
                changed = {k: v for k, v in values.items() if defaults.get(k, _MISSING) != v}
                if changed:
                    result[section] = copy.deepcopy(changed)
            return result


def get_planner_config() -> PlannerConfig:
    """Get the singleton PlannerConfig instance."""
    return PlannerConfig()
