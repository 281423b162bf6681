"""Console logging setup shared by the API service and scripts.

Modules log through ``logging.getLogger(__name__)``; this only attaches the
handler and format once at process start.

Log format:
    2026-10-19 10:15:30 [INFO    ] services.api.app.services.orders - Order GG-1001 placed
"""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(value: str | int | None = None) -> int:
    if isinstance(value, int):
        return value

    name = (value or os.getenv("STOREFRONT_LOG_LEVEL", "INFO")).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a single stdout handler to the root logger.

    Safe to call more than once; an existing handler installed by this function
    is replaced rather than duplicated.
    """

    log_level = resolve_log_level(level)

    root = logging.getLogger()
    root.setLevel(log_level)

    for handler in list(root.handlers):
        if getattr(handler, "_storefront", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler._storefront = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    return root
