"""
Storage factory - switch storage backend from config
====================================================

Centralizes selection of the storage backend (in-memory vs PostgreSQL) so the
rest of the app stays ignorant of where data lives.

- The PostgreSQL backend is imported only when selected.
- Values are passed in by the caller (usually from `Settings`); nothing is
  read from the environment here.
"""

import logging
from typing import Optional

from url_shortener.storage.base import BaseStorage
from url_shortener.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: str = "memory", dsn: Optional[str] = None) -> BaseStorage:
    """
    Return a storage backend.

    Parameters
    ----------
    backend : str
        "memory" (default) or "postgres".
    dsn : str, optional
        PostgreSQL DSN, required when backend == "postgres".

    Raises
    ------
    ValueError
        Unknown backend, or postgres without a DSN.
    """
    be = (backend or "memory").strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        if not dsn:
            raise ValueError("DATABASE_URL is required for postgres backend")
        # Local import to avoid hard dependency when not using postgres
        from url_shortener.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {be!r}")
