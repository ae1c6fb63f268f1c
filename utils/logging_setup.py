from __future__ import annotations

import logging
import sys
from typing import Any

from config.settings import get_settings


_INITIALIZED: bool = False

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "op=%(op)s status=%(status)s tenant=%(tenant)s "
    "duration_ms=%(duration_ms)s error=%(error)s run_id=%(run_id)s"
)


class SafeExtraFormatter(logging.Formatter):
    """Formatter that tolerates missing extra fields by injecting defaults."""

    DEFAULTS: dict[str, Any] = {
        "op": "-",
        "status": "-",
        "tenant": "-",
        "duration_ms": "-",
        "error": "-",
        "run_id": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def _resolve_level(level: str | None) -> int:
    name = (level or get_settings().log_level).upper()
    return getattr(logging, name, logging.INFO)


def init_logging(level: str | None = None) -> None:
    """Configure the root logger once; later calls only adjust an explicit level."""
    global _INITIALIZED
    root_logger = logging.getLogger()
    if _INITIALIZED:
        if level:
            root_logger.setLevel(_resolve_level(level))
        return

    log_level = _resolve_level(level)
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        # stderr keeps stdout free for the CLI's JSON output
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(SafeExtraFormatter(fmt=LOG_FORMAT))
        root_logger.addHandler(handler)

    _INITIALIZED = True
