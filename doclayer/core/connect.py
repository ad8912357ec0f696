"""Database bootstrap — build a Motor client and return a database handle."""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..utils.logger import configure_logging, get_logger
from .config import ENV_PREFIX, CollectionConfig
from .exceptions import ConfigurationError

logger = get_logger(__name__)

DEFAULT_URI = "mongodb://localhost:27017"


def connect_to_database(
    uri: Optional[str] = None,
    name: Optional[str] = None,
    config: Optional[CollectionConfig] = None,
    **client_options: Any,
) -> AsyncIOMotorDatabase:
    """Create an ``AsyncIOMotorClient`` and return the named database.

    Missing arguments fall back to ``DOCLAYER_MONGO_URI`` and
    ``DOCLAYER_DATABASE`` (``.env`` files are honoured).  The client
    connects lazily on first use.

    Raises:
        ConfigurationError: If no database name can be determined.
    """
    load_dotenv()
    config = config or CollectionConfig()
    configure_logging(config.log_level, config.log_dir)

    uri = uri or os.getenv(ENV_PREFIX + "MONGO_URI", DEFAULT_URI)
    name = name or os.getenv(ENV_PREFIX + "DATABASE")
    if not name:
        raise ConfigurationError(
            f"No database name given; pass name= or set {ENV_PREFIX}DATABASE"
        )

    client = AsyncIOMotorClient(uri, tz_aware=True, **client_options)
    logger.info("Connected client for database '%s'", name)
    return client[name]
