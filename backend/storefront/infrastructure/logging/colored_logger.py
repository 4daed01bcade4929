"""Colored cache logger: ANSI-colored console logging for the data layer.

Gives each kind of cache activity its own color so a fetch, its cache hit,
the invalidation cascade after a write and the refetches it triggers can be
followed in the terminal.

Color scheme:
    🔵 Blue    — Network fetch
    🟢 Green   — Cache hit / completion
    🟡 Yellow  — Invalidation
    🟣 Magenta — Mutation (create / update / delete)
    🟠 Cyan    — Bootstrap batch
    🔴 Red     — Errors
    ⚪ Gray    — Timing / details
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


# ── Cache Stage Definitions ──────────────────────────────────────────

class CacheStage:
    """Predefined cache stages with colors and icons."""

    FETCH = ("FETCH", _Colors.BLUE, "🌐")
    CACHE_HIT = ("CACHE_HIT", _Colors.GREEN, "⚡")
    INVALIDATE = ("INVALIDATE", _Colors.YELLOW, "♻️")
    REFETCH = ("REFETCH", _Colors.BLUE, "🔄")
    MUTATION = ("MUTATION", _Colors.MAGENTA, "✏️")
    BOOTSTRAP = ("BOOTSTRAP", _Colors.CYAN, "🚀")
    ERROR = ("ERROR", _Colors.RED, "❌")


# ── CacheLogger ──────────────────────────────────────────────────────

class CacheLogger:
    """Color-coded logger for cache reads, invalidations and writes.

    Usage:
        log = CacheLogger("FetchCoordinator")
        log.step_start(CacheStage.FETCH, "GET /products")
        log.step_complete(CacheStage.FETCH, "products refreshed", count=42)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)
        self._component = component_name

    def _format(self, color: str, head: str, message: str, kwargs: dict[str, Any]) -> str:
        formatted = f"{head} {color}{message}{_Colors.RESET}"
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            formatted += f" {_Colors.GRAY}({details}){_Colors.RESET}"
        return formatted

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a cache step with its stage color."""
        label, color, icon = stage
        head = f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET}"
        self._logger.info(self._format(color, head, message, kwargs))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a cache step."""
        label, color, icon = stage
        head = f"{color}{icon} [{label}]{_Colors.RESET}"
        self._logger.info(self._format(_Colors.GREEN, head, f"✓ {message}", kwargs))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a failed step in red."""
        label, _, icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail at DEBUG (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            formatted += f" {_Colors.DIM}({details}){_Colors.RESET}"
        self._logger.debug(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(CacheStage.MUTATION, "POST /products"):
                response = await source.post("/products", body)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} ({elapsed:.2f}s)", **kwargs)
