"""
Base storage interface for the URL shortener.

Purpose:
    Define a small, stable contract that storage backends (in-memory,
    PostgreSQL) implement so the allocator and the redirect/stats service
    never depend on where data lives.

Contract highlights:
    - `insert_url` is an atomic insert-if-absent on `code`. A duplicate code
      raises CodeCollisionError; everything else raises StorageError.
    - Reads return None for a missing code rather than raising.

Testing & Coverage:
    Abstract methods are annotated with `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Tuple

from url_shortener.models import Hit, ShortenedUrl


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def insert_url(self, code: str, url: str, short_url: str) -> ShortenedUrl:
        """
        Insert a new ShortenedUrl unless `code` is already taken.

        Returns:
            ShortenedUrl: The stored record, with storage-assigned id and created_at.

        Raises:
            CodeCollisionError: `code` already exists.
            StorageError: Any other failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_url_by_code(self, code: str) -> Optional[ShortenedUrl]:
        """Return the record for `code`, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def record_hit(self, url_id: int) -> Hit:
        """Store one Hit referencing `url_id`."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def hit_stats(self, url_id: int) -> Tuple[int, Optional[datetime]]:
        """
        Aggregate hits for `url_id`.

        Returns:
            (count, latest hit timestamp or None when count is 0)
        """
        raise NotImplementedError

    def init_schema(self) -> None:
        """Create tables if the backend needs them. No-op by default."""

    def close(self) -> None:
        """Release backend resources. No-op by default."""
