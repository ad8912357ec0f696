"""Logging helpers.

The library only ever attaches a ``NullHandler``; applications opt in to
output through :func:`configure_logging` (``connect_to_database`` calls it
with the values from :class:`~doclayer.core.config.CollectionConfig`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "doclayer"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``doclayer`` namespace."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Calling it again replaces the handlers it installed before, so it is safe
    to run once per bootstrap.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper())

    for handler in list(root.handlers):
        if getattr(handler, "_doclayer", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path / "doclayer.log"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._doclayer = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    return root
