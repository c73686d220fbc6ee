from __future__ import annotations

import json
import os
import threading
from pathlib import Path

from mindbot.log import logger

# Local override file, deep-merged over defaults.json
_OVERRIDE_DIR = Path.home() / ".mindbot"
_OVERRIDE_FILE = _OVERRIDE_DIR / "config.json"
_OVERRIDE_ENV = "MINDBOT_CONFIG"
_MAX_CONFIG_BYTES = 1024 * 1024  # 1 MB limit

# In-memory config (loaded once, protected by lock)
_config = None
_config_lock = threading.Lock()


def get_config() -> dict:
    """Get the engine config: shipped defaults plus any local override.

    The result is built once per process. Callers must treat it as
    read-only; Catalog copies what it needs into immutable models.
    """
    global _config

    # Fast path: _config transitions None -> dict exactly once and is never
    # mutated after assignment.
    if _config is not None:
        return _config

    with _config_lock:
        if _config is not None:
            return _config

        result = _load_defaults()

        override = _load_override()
        if override:
            result = _merge(result, override)

        _config = result
        return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() reloads. For tests."""
    global _config
    with _config_lock:
        _config = None


def get_thresholds() -> dict:
    return get_config().get("thresholds", {})


def _load_defaults() -> dict:
    defaults_path = Path(__file__).parent / "defaults.json"
    with open(defaults_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _override_path() -> Path:
    env_path = os.environ.get(_OVERRIDE_ENV, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    return _OVERRIDE_FILE


def _load_override() -> dict | None:
    """Read the local override file. Returns None when absent or unusable."""
    path = _override_path()
    try:
        if not path.is_file():
            return None
        if path.stat().st_size > _MAX_CONFIG_BYTES:
            logger.warning("Config override %s exceeds 1 MB, ignoring", path)
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        logger.warning("Failed to load config override from %s", path, exc_info=True)
        return None
    if not isinstance(data, dict):
        logger.warning("Config override %s is not a JSON object, ignoring", path)
        return None
    logger.debug("Loaded config override from %s", path)
    return data


def _merge(base: dict, override: dict, depth: int = 0) -> dict:
    """Deep merge override into base. Override values win.

    Args:
        base: The base dict to merge into.
        override: The override dict whose values win on conflict.
        depth: Current recursion depth. Stops recursing at 10.

    Lists are replaced wholesale, so an override can shrink a catalog.
    """
    _MAX_MERGE_DEPTH = 10
    result = base.copy()
    for key, value in override.items():
        if key.startswith("_"):
            continue
        if (
            depth < _MAX_MERGE_DEPTH
            and key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _merge(result[key], value, depth=depth + 1)
        else:
            result[key] = value
    return result
