from __future__ import annotations

import logging
import os
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int | str | None = None, **kwargs: Any) -> None:
    """Configure application-wide logging for the web app and the CLI."""
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        **kwargs,
    )
    # Multipart form parsing logs every field at DEBUG.
    for name in ("multipart", "python_multipart"):
        logging.getLogger(name).setLevel(logging.WARNING)
