"""Configuration helpers for the contact manager."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = PROJECT_ROOT / "contacts_data"
DEFAULT_RATES_URL = "https://api.hgbrasil.com/finance"
STORAGE_BACKENDS = ("file", "firestore")


class ConfigError(RuntimeError):
    """Raised when configuration values are missing or invalid."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration shared by the CLI and the API."""

    data_dir: Path = DEFAULT_DATA_DIR
    storage_key: str = "contacts_db"
    storage_backend: str = "file"
    firestore_collection: str = "contact_manager"
    firestore_project: Optional[str] = None
    page_size: int = 10
    rates_url: str = DEFAULT_RATES_URL
    rates_api_key: str = ""
    rates_timeout_seconds: int = 10
    rates_ttl_minutes: int = 30
    environment: str = "local"


def _positive_int(var: str, default: int) -> int:
    raw = os.getenv(var, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{var} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigError(f"{var} must be positive, got {value}.")
    return value


def load_settings(*, env_file: Optional[Path] = None) -> Settings:
    """Load settings from environment variables.

    Args:
        env_file: Optional .env file to merge into the environment first.
            Variables that are already set win over the file.

    Returns:
        Settings with defaults filled in.

    Raises:
        ConfigError: if a value is present but invalid.
    """

    load_dotenv(env_file)

    backend = os.getenv("CM_STORAGE_BACKEND", "file").strip().lower() or "file"
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"CM_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
            f"got {backend!r}."
        )

    data_dir = os.getenv("CM_CONTACTS_DIR", "").strip()

    return Settings(
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        storage_key=os.getenv("CM_STORAGE_KEY", "").strip() or "contacts_db",
        storage_backend=backend,
        firestore_collection=(
            os.getenv("CM_CONTACTS_COLLECTION", "").strip() or "contact_manager"
        ),
        firestore_project=os.getenv("CM_FIRESTORE_PROJECT", "").strip() or None,
        page_size=_positive_int("CM_PAGE_SIZE", 10),
        rates_url=os.getenv("CM_RATES_URL", "").strip() or DEFAULT_RATES_URL,
        rates_api_key=os.getenv("CM_RATES_API_KEY", "").strip(),
        rates_timeout_seconds=_positive_int("CM_RATES_TIMEOUT", 10),
        rates_ttl_minutes=_positive_int("CM_RATES_TTL_MINUTES", 30),
        environment=os.getenv("CM_ENV", "local"),
    )
