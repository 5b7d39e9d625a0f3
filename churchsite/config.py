"""Global configuration for the church website."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable

DEFAULTS: dict[str, Any] = {
    "backend_timeout_seconds": 5,
    "admin_user": "Admin",
    "admin_password": "admin123",
    "session_secret": "church-website-secret",
    "session_max_age_hours": 24,
    "max_pdf_bytes": 10 * 1024 * 1024,
    "max_image_bytes": 5 * 1024 * 1024,
    "homepage_message_limit": 3,
    "homepage_event_limit": 6,
    "public_announcement_limit": 3,
    "seed_fallback_messages": True,
    "seed_messages": 6,
    "seed_events": 4,
    "seed_announcements": 3,
    "app_host": "0.0.0.0",
    "app_port": 3000,
}

TYPE_CASTERS: dict[str, Callable[[Any], Any]] = {
    "backend_timeout_seconds": float,
    "admin_user": str,
    "admin_password": str,
    "session_secret": str,
    "session_max_age_hours": int,
    "max_pdf_bytes": int,
    "max_image_bytes": int,
    "homepage_message_limit": int,
    "homepage_event_limit": int,
    "public_announcement_limit": int,
    "seed_fallback_messages": bool,
    "seed_messages": int,
    "seed_events": int,
    "seed_announcements": int,
    "app_host": str,
    "app_port": int,
}


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    data_dir: Path
    public_dir: Path
    database_url: str
    backend_timeout_seconds: float
    admin_user: str
    admin_password: str
    session_secret: str
    session_max_age_hours: int
    max_pdf_bytes: int
    max_image_bytes: int
    homepage_message_limit: int
    homepage_event_limit: int
    public_announcement_limit: int
    seed_fallback_messages: bool
    seed_messages: int
    seed_events: int
    seed_announcements: int
    app_host: str
    app_port: int
    config_path: Path

    @property
    def session_max_age(self) -> timedelta:
        return timedelta(hours=self.session_max_age_hours)

    @property
    def durable_backend_enabled(self) -> bool:
        return bool(self.database_url)


def _boolify(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"Cannot parse boolean value from {value!r}")


def _cast_value(key: str, value: Any) -> Any:
    if key not in TYPE_CASTERS:
        return value
    caster = TYPE_CASTERS[key]
    if caster is bool:
        return _boolify(value)
    return caster(value)


def _load_toml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        return tomllib.load(handle)


def _config_layered_value(key: str, *, toml_config: dict[str, Any]) -> Any:
    env_key = f"CHURCHSITE_{key.upper()}"
    if env_key in os.environ:
        return _cast_value(key, os.environ[env_key])
    if key in toml_config:
        return _cast_value(key, toml_config[key])
    return DEFAULTS[key]


def _resolve_dir(base_dir: Path, raw: str | Path | None, default_name: str) -> Path:
    resolved = Path(raw) if raw else base_dir / default_name
    if not resolved.is_absolute():
        resolved = base_dir / resolved
    return resolved


def _resolve_database_url(raw: str | None, data_dir: Path) -> str:
    # An explicit empty value turns the durable backend off.
    if raw is None:
        return f"sqlite:///{data_dir / 'churchsite.db'}"
    return raw.strip()


def load_settings(config_override: Path | None = None) -> Settings:
    base_dir = Path(os.getenv("CHURCHSITE_BASE_DIR", Path.cwd()))
    env_config = os.getenv("CHURCHSITE_CONFIG")
    config_path = Path(config_override or env_config or base_dir / "churchsite.toml")
    toml_config = _load_toml_config(config_path)

    data_dir = _resolve_dir(
        base_dir,
        os.getenv("CHURCHSITE_DATA_DIR", toml_config.get("data_dir")),
        "data",
    )
    public_dir = _resolve_dir(
        base_dir,
        os.getenv("CHURCHSITE_PUBLIC_DIR", toml_config.get("public_dir")),
        "public",
    )
    database_url = _resolve_database_url(
        os.getenv("CHURCHSITE_DATABASE_URL", toml_config.get("database_url")),
        data_dir,
    )

    values = {key: _config_layered_value(key, toml_config=toml_config) for key in DEFAULTS}
    settings = Settings(
        base_dir=base_dir,
        data_dir=data_dir,
        public_dir=public_dir,
        database_url=database_url,
        config_path=config_path,
        **values,
    )
    if settings.database_url.startswith("sqlite:///"):
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings


def settings_as_dict(settings: Settings) -> dict[str, Any]:
    payload = {
        "base_dir": str(settings.base_dir),
        "data_dir": str(settings.data_dir),
        "public_dir": str(settings.public_dir),
        "database_url": settings.database_url,
    }
    for key in DEFAULTS:
        payload[key] = getattr(settings, key)
    # Never echo credentials back to the terminal.
    payload["admin_password"] = "********"
    payload["session_secret"] = "********"
    return payload


def _toml_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_config_file(config: dict[str, Any], *, path: Path) -> None:
    lines = ["# Church website configuration\n"]
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
        if key == "database_url":
            merged[key] = str(value)
            continue
        if key not in DEFAULTS:
            continue
        merged[key] = _cast_value(key, value)
    write_config_file(merged, path=target_path)
    new_settings = load_settings(target_path)
    globals()["settings"] = new_settings
    return new_settings


settings = load_settings()
