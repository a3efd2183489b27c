"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; this only wires the root
handler once at startup.
"""

from __future__ import annotations

import logging

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    resolved = (level or config.log_level()).upper()
    root.setLevel(resolved)

    # Called again on reload; keep a single handler.
    if any(getattr(h, "_crud_api", False) for h in root.handlers):
        return None

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._crud_api = True  # type: ignore[attr-defined]
    root.addHandler(handler)
