"""
Cart store configuration.

Values come from the environment; a local `.env` file is loaded first
when present.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_STORAGE_KEY = "@GoMarketplace:cart"

BACKEND_REDIS = "redis"
BACKEND_MEMORY = "memory"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name, "").strip()
    if not value:
        return None
    return int(value)


@dataclass(frozen=True)
class CartSettings:
    """Settings for the cart store and its storage backend."""
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_backend: str = BACKEND_MEMORY
    redis_url: str = ""
    redis_token: str = ""
    ttl_seconds: Optional[int] = None
    persist_attempts: int = 3
    persist_backoff_max: float = 10.0
    remove_on_zero: bool = False


def load_settings() -> CartSettings:
    """Build settings from environment variables."""
    redis_url = os.environ.get("UPSTASH_REDIS_REST_URL", "")
    redis_token = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

    # Redis when credentials exist, memory otherwise (local development)
    default_backend = BACKEND_REDIS if redis_url and redis_token else BACKEND_MEMORY
    backend = os.environ.get("CART_STORAGE_BACKEND", default_backend).strip().lower()
    if backend not in (BACKEND_REDIS, BACKEND_MEMORY):
        raise ValueError(f"CART_STORAGE_BACKEND must be '{BACKEND_REDIS}' or '{BACKEND_MEMORY}', got '{backend}'")

    attempts = _env_int("CART_PERSIST_ATTEMPTS")
    if attempts is None:
        attempts = 3
    if attempts < 1:
        raise ValueError("CART_PERSIST_ATTEMPTS must be at least 1")

    return CartSettings(
        storage_key=os.environ.get("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
        storage_backend=backend,
        redis_url=redis_url,
        redis_token=redis_token,
        ttl_seconds=_env_int("CART_TTL_SECONDS"),
        persist_attempts=attempts,
        persist_backoff_max=float(os.environ.get("CART_PERSIST_BACKOFF_MAX", "10")),
        remove_on_zero=_env_bool("CART_REMOVE_ON_ZERO"),
    )
