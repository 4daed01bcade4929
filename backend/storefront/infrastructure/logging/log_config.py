"""Per-category log levels for the data layer.

Cache reads are chatty (one line per fetch, per hit, per invalidation), so
the cache and mutation loggers get their own levels next to the usual
httpx and uvicorn ones.

Usage:
    from storefront.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, in the FastAPI lifespan
"""

import logging
import sys

from storefront.config import Settings, get_settings

_SERVICES = "storefront.application.services"

# Settings field -> logger names it governs. The bare CamelCase names are
# the CacheLogger components.
_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_http": (
        "httpx",
        "httpcore",
        "storefront.infrastructure.http",
    ),
    "log_level_uvicorn": (
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
    ),
    "log_level_cache": (
        "FetchCoordinator",
        f"{_SERVICES}.entity_cache_store",
        f"{_SERVICES}.fetch_coordinator",
        f"{_SERVICES}.invalidation_graph",
        f"{_SERVICES}.cache_event_broadcaster",
        f"{_SERVICES}.paginated_reader",
    ),
    "log_level_mutations": (
        "MutationHooks",
        f"{_SERVICES}.mutation_hooks",
    ),
}

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Apply root and per-category levels; returns ``logger name -> level``."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    # uvicorn installs its own handlers; scripts and tests may have none.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    applied: dict[str, int] = {}
    for field_name, logger_names in _CATEGORY_MAP.items():
        level = _parse_level(getattr(settings, field_name))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
            applied[name] = level

    logging.getLogger(__name__).debug(
        "Log levels: root=%s cache=%s mutations=%s http=%s",
        settings.log_level,
        settings.log_level_cache,
        settings.log_level_mutations,
        settings.log_level_http,
    )
    return applied


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else logging.INFO
