import os
from dataclasses import dataclass, replace
from pathlib import Path
import json
from typing import Dict, Optional

from dotenv import load_dotenv


@dataclass
class AppConfig:
    database_url: str
    secret_key: str
    log_level: str
    page_size: int
    featured_limit: int
    store_name: str = "Timber Store"


ALLOWED_HOT_KEYS = {"PAGE_SIZE", "FEATURED_LIMIT", "STORE_NAME"}
SENSITIVE_KEYS = {"DATABASE_URL", "SECRET_KEY"}


def validate_positive(value, field: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be an integer") from None
    if v <= 0:
        raise ValueError(f"{field} must be > 0")
    return v


def _load_settings_file(path: Optional[Path] = None) -> dict:
    path = path or Path(os.getenv("SETTINGS_FILE", "data/settings.json"))
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"settings file {path} is not valid JSON") from exc
    return data if isinstance(data, dict) else {}


def load_env(settings_path: Optional[Path] = None, dotenv_path: Optional[Path] = None) -> AppConfig:
    # data/settings.json wins for non-sensitive keys, environment (.env included) for the rest
    load_dotenv(dotenv_path)
    s = _load_settings_file(settings_path)
    return AppConfig(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/app.db"),
        secret_key=os.getenv("SECRET_KEY", "dev_secret"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        page_size=validate_positive(s.get("PAGE_SIZE") or os.getenv("PAGE_SIZE"), "PAGE_SIZE", 20),
        featured_limit=validate_positive(s.get("FEATURED_LIMIT") or os.getenv("FEATURED_LIMIT"), "FEATURED_LIMIT", 8),
        store_name=s.get("STORE_NAME") or os.getenv("STORE_NAME") or "Timber Store",
    )


def refresh_non_sensitive(overrides: Dict[str, str], current: AppConfig) -> AppConfig:
    """Apply hot-reloadable settings; anything else needs a restart and is ignored."""
    updates = {k: v for k, v in (overrides or {}).items() if k in ALLOWED_HOT_KEYS}
    return replace(
        current,
        page_size=validate_positive(updates.get("PAGE_SIZE"), "PAGE_SIZE", current.page_size),
        featured_limit=validate_positive(updates.get("FEATURED_LIMIT"), "FEATURED_LIMIT", current.featured_limit),
        store_name=(updates.get("STORE_NAME") or current.store_name).strip(),
    )


def requires_restart(changed_keys) -> bool:
    if not changed_keys:
        return False
    return any(k in SENSITIVE_KEYS for k in changed_keys)
