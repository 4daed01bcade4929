import json
import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_SETTINGS_FILE = Path("data/settings.json")
_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_RUNTIME_KEYS = frozenset({
    "remote_api_base_url",
    "remote_request_timeout",
    "fetch_dedupe_inflight",
})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Storefront Data Layer"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Remote storefront API (collections: /products, /categories, ...)
    remote_api_base_url: str = "http://localhost:3000/api"
    remote_request_timeout: float = 30.0

    # Cache behaviour
    invalidation_graph_file: str = str(_BACKEND_DIR / "data" / "invalidation-graph.yaml")
    fetch_dedupe_inflight: bool = False      # share one request between overlapping misses
    bootstrap_on_startup: bool = False       # run fetch_initial() in the lifespan

    # Per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore, outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_cache: str = "INFO"            # store, coordinator, invalidation graph
    log_level_mutations: str = "INFO"        # add / update / delete hooks

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Merge runtime overrides from data/settings.json."""
        if _SETTINGS_FILE.exists():
            try:
                overrides = json.loads(_SETTINGS_FILE.read_text("utf-8"))
                for key in _RUNTIME_KEYS:
                    if key in overrides and isinstance(overrides[key], type(getattr(self, key))):
                        object.__setattr__(self, key, overrides[key])
            except Exception as exc:
                _config_logger.warning("Could not load settings overrides: %s", exc)


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance: reads .env once."""
    return Settings()
