"""
UrlManager module for the URL shortener.

Responsibilities:
    - Validate submitted URLs (syntactic well-formedness only)
    - Hand valid URLs to the CodeAllocator, which reserves a unique code

Design notes:
    - Validation happens before any code is generated, so a rejected URL
      leaves no trace in storage.
    - URLs are parsed with pydantic's AnyUrl (WHATWG URL rules): a scheme is
      required and forbidden host characters such as "|" are rejected.
    - The submitted string is stored as-is; the parsed form is only used for
      validation.
    - Re-shortening is allowed: every call allocates a fresh record.
"""

from typing import Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from url_shortener.exceptions import InvalidUrlError
from url_shortener.models import ShortenedUrl
from url_shortener.shortener.allocator import CodeAllocator
from url_shortener.shortener.strategies import BaseStrategy
from url_shortener.storage.base import BaseStorage

_URL_ADAPTER = TypeAdapter(AnyUrl)


def is_valid_url(url: str) -> bool:
    """True if `url` parses as an absolute URL."""
    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError:
        return False
    return True


class UrlManager:
    """Coordinates validation and code allocation for the shorten operation."""

    def __init__(
        self,
        storage: BaseStorage,
        strategy: BaseStrategy,
        host: str,
        max_attempts: Optional[int] = None,
    ):
        """
        Args:
            storage (BaseStorage): Backend storage instance.
            strategy (BaseStrategy): Code generation strategy.
            host (str): Public prefix for short URLs.
            max_attempts (Optional[int]): Allocation retry cap, None for unbounded.
        """
        self.storage = storage
        self.allocator = CodeAllocator(storage, strategy, host, max_attempts=max_attempts)

    def _validate_url(self, url: str) -> None:
        """
        Raises:
            InvalidUrlError: If the URL is malformed.
        """
        if not is_valid_url(url):
            raise InvalidUrlError("Invalid URL")

    def shorten(self, url: str) -> ShortenedUrl:
        """
        Create a new shortened URL.

        Args:
            url (str): Long URL to shorten.

        Returns:
            ShortenedUrl: The newly stored record.

        Raises:
            InvalidUrlError: Malformed URL (nothing generated or stored).
            AllocationExhaustedError: Every allowed candidate code was taken.
            StorageError: Storage failed for a reason other than a code collision.
        """
        self._validate_url(url)
        return self.allocator.allocate(url)
