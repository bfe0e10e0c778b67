from __future__ import annotations

import os
from typing import Any, Dict, Optional
import yaml

_CONFIG: Optional[Dict[str, Any]] = None


def _resolve_config_path() -> str:
    env_path = os.getenv("HEADERCHECK_PROPERTIES")
    if env_path:
        return env_path
    here = os.path.dirname(os.path.abspath(__file__))
    # .../src/headercheck -> .../src/properties.yml
    return os.path.normpath(os.path.join(here, "..", "properties.yml"))


def load_config() -> Dict[str, Any]:
    global _CONFIG
    if _CONFIG is not None:
        return _CONFIG
    path = _resolve_config_path()
    if not os.path.exists(path):
        _CONFIG = {}
        return _CONFIG
    with open(path, "r", encoding="utf-8") as f:
        parsed = yaml.safe_load(f)
    # An empty or non-mapping document means built-in defaults.
    _CONFIG = parsed if isinstance(parsed, dict) else {}
    return _CONFIG


def reset_config() -> None:
    """Forget the cached configuration so the next lookup reloads it."""
    global _CONFIG
    _CONFIG = None


def get(path: str, default: Any = None) -> Any:
    """Dotted lookup into the nested mapping, e.g. ``get("upload.temp_prefix")``."""
    cur: Any = load_config()
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur
