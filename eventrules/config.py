"""Global configuration for EventRules."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable

DEFAULTS: dict[str, Any] = {
    "min_lead_minutes": 5,
    "max_duration_days": 30,
    "pair_capacity": 2,
    "group_min_capacity": 2,
    "group_max_capacity": 50,
    "default_group_min": 2,
    "default_group_max": 10,
    "max_join_offset_minutes": 10080,
    "short_join_window_minutes": 60,
    "max_privacy_radius_km": 20.0,
    "app_host": "0.0.0.0",
    "app_port": 8000,
}

TYPE_CASTERS: dict[str, Callable[[Any], Any]] = {
    "min_lead_minutes": int,
    "max_duration_days": int,
    "pair_capacity": int,
    "group_min_capacity": int,
    "group_max_capacity": int,
    "default_group_min": int,
    "default_group_max": int,
    "max_join_offset_minutes": int,
    "short_join_window_minutes": int,
    "max_privacy_radius_km": float,
    "app_host": str,
    "app_port": int,
}


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    min_lead_minutes: int
    max_duration_days: int
    pair_capacity: int
    group_min_capacity: int
    group_max_capacity: int
    default_group_min: int
    default_group_max: int
    max_join_offset_minutes: int
    short_join_window_minutes: int
    max_privacy_radius_km: float
    app_host: str
    app_port: int
    config_path: Path

    @property
    def min_lead(self) -> timedelta:
        return timedelta(minutes=self.min_lead_minutes)

    @property
    def max_duration(self) -> timedelta:
        return timedelta(days=self.max_duration_days)

    @property
    def default_group_capacity(self) -> tuple[int, int]:
        return self.default_group_min, self.default_group_max


def _cast_value(key: str, value: Any) -> Any:
    if key not in TYPE_CASTERS:
        return value
    return TYPE_CASTERS[key](value)


def _load_toml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        return tomllib.load(handle)


def _config_layered_value(key: str, *, toml_config: dict[str, Any]) -> Any:
    env_key = f"EVENTRULES_{key.upper()}"
    if env_key in os.environ:
        return _cast_value(key, os.environ[env_key])
    if key in toml_config:
        return _cast_value(key, toml_config[key])
    return DEFAULTS[key]


def load_settings(config_override: Path | None = None) -> Settings:
    base_dir = Path(os.getenv("EVENTRULES_BASE_DIR", Path.cwd()))
    env_config = os.getenv("EVENTRULES_CONFIG")
    config_path = Path(config_override or env_config or base_dir / "eventrules.toml")
    toml_config = _load_toml_config(config_path)

    values = {
        key: _config_layered_value(key, toml_config=toml_config) for key in DEFAULTS
    }
    return Settings(base_dir=base_dir, config_path=config_path, **values)


def settings_as_dict(settings: Settings) -> dict[str, Any]:
    payload: dict[str, Any] = {"base_dir": str(settings.base_dir)}
    for key in DEFAULTS:
        payload[key] = getattr(settings, key)
    return payload


def _toml_literal(value: Any) -> str:
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_config_file(config: dict[str, Any], *, path: Path) -> None:
    lines = ["# EventRules configuration\n"]
    for key in sorted(config.keys()):
        lines.append(f"{key} = {_toml_literal(config[key])}\n")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(lines), encoding="utf-8")


def update_config_file(updates: dict[str, Any], *, path: Path | None = None) -> Settings:
    current_settings = settings if "settings" in globals() else load_settings()
    target_path = path or current_settings.config_path
    existing = _load_toml_config(target_path)
    merged = {**existing}
    for key, value in updates.items():
        if key not in DEFAULTS:
            continue
        merged[key] = _cast_value(key, value)
    write_config_file(merged, path=target_path)
    new_settings = load_settings(target_path)
    globals()["settings"] = new_settings
    return new_settings


settings = load_settings()
