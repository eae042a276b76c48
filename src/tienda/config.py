from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import logging
import os
import sys


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    db_path: Path
    logs_dir: Path


@dataclass(frozen=True)
class Settings:
    backend: str = "sqlite"
    rest_url: str = ""
    rest_key: str = ""
    rest_timeout: float = 10.0
    log_level: int = logging.INFO
    enforce_credit_limit: bool = False
    duplicate_window_seconds: float = 3.0
    store_name: str = "La Tiendita de Doña Mary"


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "TiendaPOS") -> AppPaths:
    override = os.environ.get("TIENDA_HOME", "").strip()
    if override:
        base = Path(override)
    elif sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    db = base / "tienda.db"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, db_path=db, logs_dir=logs)


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on", "si"}


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read runtime settings from ``TIENDA_*`` environment variables."""
    env = os.environ if env is None else env

    backend = env.get("TIENDA_BACKEND", "sqlite").strip().lower() or "sqlite"
    if backend not in {"sqlite", "rest"}:
        raise ValueError(f"Unknown TIENDA_BACKEND: {backend}")

    level = logging.getLevelName(env.get("TIENDA_LOG_LEVEL", "INFO").strip().upper() or "INFO")
    if not isinstance(level, int):
        level = logging.INFO

    return Settings(
        backend=backend,
        rest_url=env.get("TIENDA_REST_URL", "").strip().rstrip("/"),
        rest_key=env.get("TIENDA_REST_KEY", "").strip(),
        rest_timeout=_env_float(env, "TIENDA_REST_TIMEOUT", 10.0),
        log_level=level,
        enforce_credit_limit=_env_bool(env, "TIENDA_ENFORCE_CREDIT_LIMIT", False),
        duplicate_window_seconds=_env_float(env, "TIENDA_DUPLICATE_WINDOW", 3.0),
        store_name=env.get("TIENDA_STORE_NAME", "").strip() or Settings.store_name,
    )
