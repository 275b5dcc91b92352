"""
Storage module for the URL shortener (in-memory implementation).

Responsibilities:
    - Store ShortenedUrl records keyed by their unique code
    - Store Hit records per shortened URL
    - Aggregate hit counts and the latest hit timestamp

Design:
    - Reference implementation of the BaseStorage contract, used by tests and
      local runs.
    - FastAPI serves sync routes from a thread pool, so inserts take a lock to
      keep insert-if-absent atomic, mirroring the unique index of the
      PostgreSQL backend.
"""

import itertools
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from url_shortener.exceptions import CodeCollisionError
from url_shortener.models import Hit, ShortenedUrl

from .base import BaseStorage


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.urls = {code: ShortenedUrl}
            self.hits = {url_id: [Hit, ...]}
        """
        self.urls: Dict[str, ShortenedUrl] = {}
        self.hits: Dict[int, List[Hit]] = {}
        self._url_ids = itertools.count(1)
        self._hit_ids = itertools.count(1)
        self._lock = threading.Lock()

    def insert_url(self, code: str, url: str, short_url: str) -> ShortenedUrl:
        """
        Insert a record unless the code is taken.

        Raises:
            CodeCollisionError: If `code` is already stored (for any URL).
        """
        with self._lock:
            if code in self.urls:
                raise CodeCollisionError(code)
            record = ShortenedUrl(
                id=next(self._url_ids),
                code=code,
                url=url,
                short_url=short_url,
                created_at=_now(),
            )
            self.urls[code] = record
            return record

    def get_url_by_code(self, code: str) -> Optional[ShortenedUrl]:
        return self.urls.get(code)

    def record_hit(self, url_id: int) -> Hit:
        with self._lock:
            hit = Hit(id=next(self._hit_ids), url_id=url_id, created_at=_now())
            self.hits.setdefault(url_id, []).append(hit)
            return hit

    def hit_stats(self, url_id: int) -> Tuple[int, Optional[datetime]]:
        """Return (count, max created_at) of the hits for `url_id`."""
        with self._lock:
            hits = list(self.hits.get(url_id, ()))
        if not hits:
            return 0, None
        return len(hits), max(hit.created_at for hit in hits)
