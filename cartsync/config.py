"""Runtime settings read from the environment (and an optional .env file)."""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]

DEFAULT_API_URL = "http://localhost:3333"
DEFAULT_STORAGE_KEY = "cartsync:cart"


def _get_env(name: str, default: str = "") -> str:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _get_int(name: str, default: int) -> int:
    value = _get_env(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _get_float(name: str, default: float) -> float:
    value = _get_env(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Settings for the product/stock API, the snapshot store and notifications."""
    api_url: str
    api_timeout: float
    api_retries: int
    storage_key: str
    redis_url: str
    redis_token: str
    telegram_token: str
    notify_chat_id: int | None


def load_env(path: Path | None = None) -> None:
    """Load the .env file into os.environ. Variables already set win."""
    load_dotenv(dotenv_path=path or ROOT_DIR / ".env", override=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process. Tests call ``get_settings.cache_clear()``."""
    load_env()

    chat_id = _get_env("NOTIFY_CHAT_ID")
    retries = _get_int("CART_API_RETRIES", 3)
    if retries < 1:
        raise ValueError("CART_API_RETRIES must be at least 1")

    return Settings(
        api_url=_get_env("CART_API_URL", DEFAULT_API_URL).rstrip("/"),
        api_timeout=_get_float("CART_API_TIMEOUT", 10.0),
        api_retries=retries,
        storage_key=_get_env("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
        redis_url=_get_env("UPSTASH_REDIS_REST_URL"),
        redis_token=_get_env("UPSTASH_REDIS_REST_TOKEN"),
        telegram_token=_get_env("TELEGRAM_TOKEN"),
        notify_chat_id=int(chat_id) if chat_id else None,
    )
