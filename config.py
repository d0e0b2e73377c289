from __future__ import annotations

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Mapping, Optional

from core.errors import ConfigError

USER_CONFIG_PATH = Path.home() / ".beadtree_config.yaml"
PROJECT_CONFIG_NAME = Path(".beadtree") / "config.yaml"
ENV_PREFIX = "BEADTREE_"

KEY_AUTO_REFRESH_SECONDS = "auto-refresh-seconds"
KEY_DATABASE_PATH = "database.path"
KEY_THEME = "theme"
KEY_LANG = "lang"
KEY_STRICT_EDGES = "graph.strict-edges"
KEY_COMMENTS_PREFETCH = "comments.prefetch"

DEFAULT_AUTO_REFRESH_SECONDS = 3.0
DEFAULT_THEME = "dark-olive"

DEFAULTS: Dict[str, Any] = {
    KEY_AUTO_REFRESH_SECONDS: DEFAULT_AUTO_REFRESH_SECONDS,
    KEY_DATABASE_PATH: "",
    KEY_THEME: DEFAULT_THEME,
    KEY_LANG: "",
    KEY_STRICT_EDGES: True,
    KEY_COMMENTS_PREFETCH: True,
}


def _load_config() -> Dict[str, Any]:
    if not USER_CONFIG_PATH.exists():
        return {}
    try:
        return yaml.safe_load(USER_CONFIG_PATH.read_text()) or {}
    except Exception:
        return {}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """{"database": {"path": x}} -> {"database.path": x}; dotted keys pass through."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


def find_project_config(start_dir: Optional[Path] = None) -> Optional[Path]:
    current = Path(start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _env_name(key: str) -> str:
    return ENV_PREFIX + key.upper().replace(".", "_").replace("-", "_")


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in ("1", "true", "yes", "on"):
        return True
    if token in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def _as_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{KEY_AUTO_REFRESH_SECONDS}: expected a number of seconds, got {value!r}") from None
    if seconds < 0:
        raise ConfigError(f"{KEY_AUTO_REFRESH_SECONDS}: must not be negative")
    return seconds


@dataclass
class Settings:
    auto_refresh_seconds: float = DEFAULT_AUTO_REFRESH_SECONDS
    db_path: str = ""
    theme: str = DEFAULT_THEME
    lang: str = ""
    strict_edges: bool = True
    comments_prefetch: bool = True

    @property
    def auto_refresh(self) -> bool:
        return self.auto_refresh_seconds > 0


def load_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    start_dir: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """defaults < user config < project config < environment < overrides."""
    env = os.environ if env is None else env
    merged: Dict[str, Any] = dict(DEFAULTS)
    merged.update(_flatten(_load_config()))
    project = find_project_config(start_dir)
    if project is not None:
        merged.update(_flatten(_load_yaml(project)))
    for key in DEFAULTS:
        name = _env_name(key)
        if name in env:
            merged[key] = env[name]
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    return Settings(
        auto_refresh_seconds=_as_seconds(merged[KEY_AUTO_REFRESH_SECONDS]),
        db_path=str(merged[KEY_DATABASE_PATH] or "").strip(),
        theme=str(merged[KEY_THEME] or DEFAULT_THEME).strip(),
        lang=str(merged[KEY_LANG] or "").strip(),
        strict_edges=_as_bool(KEY_STRICT_EDGES, merged[KEY_STRICT_EDGES]),
        comments_prefetch=_as_bool(KEY_COMMENTS_PREFETCH, merged[KEY_COMMENTS_PREFETCH]),
    )


def get_user_lang() -> str:
    return str(_load_config().get("lang", "")).strip()
