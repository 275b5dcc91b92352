"""
Analytics module for the URL shortener: redirects and hit statistics.

Responsibilities:
    - Resolve a code to its ShortenedUrl, recording a Hit on every success
    - Report hit count and latest hit timestamp per code

Notes:
    - Recording the hit is part of resolving. If it fails, the StorageError
      propagates and the caller must not redirect.
    - Stats for a code with no hits report 0 and no last-hit value.

LLM Prompt Example:
    "Show how to keep redirect tracking synchronous so that every redirect
    served has a durable hit record behind it."
"""

import logging

from url_shortener.exceptions import UrlNotFoundError
from url_shortener.models import ShortenedUrl, UrlStats
from url_shortener.storage.base import BaseStorage

log = logging.getLogger(__name__)


class Analytics:
    def __init__(self, storage: BaseStorage):
        self.storage = storage

    def _lookup(self, code: str) -> ShortenedUrl:
        record = self.storage.get_url_by_code(code)
        if record is None:
            raise UrlNotFoundError(code)
        return record

    def resolve(self, code: str) -> ShortenedUrl:
        """
        Look up `code` and record a hit against it.

        Returns:
            ShortenedUrl: The resolved record; redirect to its `url`.

        Raises:
            UrlNotFoundError: Unknown code (no hit recorded).
            StorageError: Lookup or hit recording failed.
        """
        record = self._lookup(code)
        self.storage.record_hit(record.id)
        log.debug("Hit recorded for %s -> %s", code, record.url)
        return record

    def stats(self, code: str) -> UrlStats:
        """
        Aggregate hits for `code`.

        Returns:
            UrlStats: url, short_url, hit count and the latest hit timestamp (None when 0).

        Raises:
            UrlNotFoundError: Unknown code.
        """
        record = self._lookup(code)
        hits, last_hit = self.storage.hit_stats(record.id)
        return UrlStats(url=record.url, short_url=record.short_url, hits=hits, last_hit=last_hit)
