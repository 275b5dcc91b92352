"""
Domain records shared by storage backends, the allocator and the API.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ShortenedUrl:
    """One accepted code -> URL mapping. `code` is unique across all records."""
    id: int
    code: str
    url: str
    short_url: str
    created_at: datetime


@dataclass(frozen=True)
class Hit:
    """One recorded redirect against a ShortenedUrl."""
    id: int
    url_id: int
    created_at: datetime


@dataclass(frozen=True)
class UrlStats:
    url: str
    short_url: str
    hits: int
    last_hit: Optional[datetime] = None
