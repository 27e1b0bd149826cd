"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from bankimport.utils.date_parser import DateLocale

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_HOME_DIR = Path.home() / ".bankimport"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Settings shared by the CLI, the HTTP app and the worker."""

    database_url: str
    storage_dir: Optional[str]
    queue_enabled: bool = True
    archive_originals: bool = True
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    date_locale: Optional[DateLocale] = None
    worker_max_attempts: int = 3
    log_level: str = "INFO"


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got '{raw}'")


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def sqlite_url(database_path: str) -> str:
    return f"sqlite:///{database_path}"


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    database_path: Optional[str] = None,
    storage_dir: Optional[str] = None,
) -> Settings:
    """Build settings from environment variables.

    Args:
        env: Mapping to read instead of os.environ (for tests)
        database_path: SQLite path that overrides the environment
        storage_dir: Object storage directory that overrides the environment

    Returns:
        Settings instance

    Raises:
        ValueError: If a variable has an invalid value
    """
    env = os.environ if env is None else env

    if database_path is not None:
        database_url = sqlite_url(database_path)
    elif env.get("BANKIMPORT_DATABASE_URL"):
        database_url = env["BANKIMPORT_DATABASE_URL"]
    elif env.get("BANKIMPORT_DB_PATH"):
        database_url = sqlite_url(env["BANKIMPORT_DB_PATH"])
    else:
        database_url = sqlite_url(str(DEFAULT_HOME_DIR / "bankimport.db"))

    if storage_dir is None:
        storage_dir = env.get("BANKIMPORT_STORAGE_DIR", str(DEFAULT_HOME_DIR / "objects"))
    # An empty value switches object storage off
    resolved_storage = storage_dir or None

    locale_raw = env.get("BANKIMPORT_DATE_LOCALE")
    date_locale = None
    if locale_raw:
        try:
            date_locale = DateLocale(locale_raw.strip().lower())
        except ValueError as e:
            raise ValueError(f"BANKIMPORT_DATE_LOCALE must be 'uk' or 'us', got '{locale_raw}'") from e

    return Settings(
        database_url=database_url,
        storage_dir=resolved_storage,
        queue_enabled=_flag(env, "BANKIMPORT_QUEUE_ENABLED", True),
        archive_originals=_flag(env, "BANKIMPORT_ARCHIVE_ORIGINALS", True),
        max_upload_bytes=_positive_int(env, "BANKIMPORT_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        date_locale=date_locale,
        worker_max_attempts=_positive_int(env, "BANKIMPORT_WORKER_MAX_ATTEMPTS", 3),
        log_level=env.get("BANKIMPORT_LOG_LEVEL", "INFO").upper(),
    )
