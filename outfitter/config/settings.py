"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str | None = None) -> None:
    """Fill unset variables from a dotenv file (``OUTFITTER_ENV_FILE`` or ``.env``).

    Accepts ``export KEY=value`` lines and single or double quoted values.
    """

    env_path = Path(path or os.getenv("OUTFITTER_ENV_FILE", ".env"))
    if not env_path.is_file():
        return

    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip().removeprefix("export ").strip()
        if not line or line.startswith("#"):
            continue
        name, sep, value = line.partition("=")
        if not sep:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", "\""}:
            value = value[1:-1]
        os.environ.setdefault(name.strip(), value)


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised project settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"
    gateway_token: str = ""

    database_url: str = "sqlite+aiosqlite:///./data/outfitter.db"

    media_root: str = "data/media"
    media_base_url: str = "http://localhost:8000"
    media_signing_key: str = "change-me"
    media_url_ttl_days: int = 36500
    public_catalog_prefix: str = "Public-Catalog/"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    suggestion_model: str = "gpt-4o-mini"
    analysis_model: str = "gpt-4o-mini"
    ai_request_timeout: float = 60.0

    background_removal_url: str = "https://rembg.stylgpt.com/remove-bg"
    background_removal_timeout: float = 60.0

    unused_item_priority_default: float = 0.6
    reconcile_mode: str = "exact"


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        gateway_token=os.getenv("IDENTITY_GATEWAY_TOKEN", ""),
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/outfitter.db"),
        media_root=os.getenv("MEDIA_ROOT", "data/media"),
        media_base_url=os.getenv("MEDIA_BASE_URL", "http://localhost:8000"),
        media_signing_key=os.getenv("MEDIA_SIGNING_KEY", "change-me"),
        media_url_ttl_days=int(os.getenv("MEDIA_URL_TTL_DAYS", "36500")),
        public_catalog_prefix=os.getenv("PUBLIC_CATALOG_PREFIX", "Public-Catalog/"),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        suggestion_model=os.getenv("SUGGESTION_MODEL", "gpt-4o-mini"),
        analysis_model=os.getenv("ANALYSIS_MODEL", "gpt-4o-mini"),
        ai_request_timeout=float(os.getenv("AI_REQUEST_TIMEOUT", "60")),
        background_removal_url=os.getenv(
            "BACKGROUND_REMOVAL_URL",
            "https://rembg.stylgpt.com/remove-bg",
        ),
        background_removal_timeout=float(os.getenv("BACKGROUND_REMOVAL_TIMEOUT", "60")),
        unused_item_priority_default=float(os.getenv("UNUSED_ITEM_PRIORITY_DEFAULT", "0.6")),
        reconcile_mode=os.getenv("RECONCILE_MODE", "exact"),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
