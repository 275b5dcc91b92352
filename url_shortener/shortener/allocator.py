"""
Collision-avoiding code allocation.

Responsibilities:
    - Produce the candidate code sequence for one URL: shorten(url|0), shorten(url|1), ...
    - Persist the first candidate storage accepts, retrying on code collisions

Design notes:
    - Codes are derived from content, so re-shortening a URL walks the same
      candidate sequence; the first candidates are taken and the request lands
      on the next free one.
    - Storage enforces uniqueness atomically (unique index / locked insert).
      The allocator never checks-then-inserts; it inserts and reacts to
      CodeCollisionError.
    - Any other storage failure aborts the allocation unchanged.
    - Retries are capped by `max_attempts` (None = unbounded).

LLM Prompt Example:
    "Explain how an insert-and-retry loop over a deterministic candidate
    sequence stays race-free when the only coordination is a unique index."
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from url_shortener.exceptions import AllocationExhaustedError, CodeCollisionError
from url_shortener.models import ShortenedUrl
from url_shortener.shortener.strategies import BaseStrategy
from url_shortener.storage.base import BaseStorage

log = logging.getLogger(__name__)

# Not a valid URL character, so "url|N" never equals another URL's input.
SEPARATOR = "|"


@dataclass(frozen=True)
class Candidate:
    """Generation state: the augmented input "url|N" and its attempt number N."""
    augmented: str
    attempt: int = 0

    @classmethod
    def first(cls, url: str) -> "Candidate":
        return cls(f"{url}{SEPARATOR}0", 0)

    def advance(self) -> "Candidate":
        """Swap the trailing attempt number for the next one."""
        following = self.attempt + 1
        base = self.augmented[: -len(str(self.attempt))]
        return Candidate(f"{base}{following}", following)


def next_candidate(strategy: BaseStrategy, state: Candidate) -> Tuple[str, Candidate]:
    """Return the code for `state` and the state that follows it."""
    return strategy.shorten(state.augmented), state.advance()


class Shortener:
    """
    Forward-only lazy sequence of candidate codes for one URL.

    Each instance belongs to a single shorten request; do not share it across threads.

    >>> codes = Shortener(SHA256Strategy(length=8), "https://www.google.com")
    >>> next(codes), next(codes), next(codes)
    ('NTQmN-z5', 'YQLGtT3-', 'wJZTvWsB')
    """

    def __init__(self, strategy: BaseStrategy, url: str) -> None:
        self.strategy = strategy
        self._state = Candidate.first(url)

    @property
    def attempt(self) -> int:
        """Attempt number of the next code this sequence will yield."""
        return self._state.attempt

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        code, self._state = next_candidate(self.strategy, self._state)
        return code


class CodeAllocator:
    """Reserves a unique code for a URL by inserting candidates until one sticks."""

    def __init__(
        self,
        storage: BaseStorage,
        strategy: BaseStrategy,
        host: str,
        max_attempts: Optional[int] = None,
    ) -> None:
        """
        Args:
            storage: Backend providing atomic insert-if-absent on `code`.
            strategy: Code generator.
            host: Public prefix for short URLs, e.g. "https://tier.app".
            max_attempts: Cap on inserts per allocation; None means no cap.
        """
        self.storage = storage
        self.strategy = strategy
        self.host = host.rstrip("/")
        self.max_attempts = max_attempts

    def short_url_for(self, code: str) -> str:
        return f"{self.host}/s/{code}"

    def allocate(self, url: str) -> ShortenedUrl:
        """
        Persist `url` under the first free candidate code.

        Returns:
            ShortenedUrl: The stored record.

        Raises:
            AllocationExhaustedError: `max_attempts` candidates all collided.
            StorageError: Any non-collision storage failure (not retried).
        """
        attempts = itertools.count(1) if self.max_attempts is None else range(1, self.max_attempts + 1)
        tried = 0
        for tried, code in zip(attempts, Shortener(self.strategy, url)):
            try:
                record = self.storage.insert_url(code, url, self.short_url_for(code))
            except CodeCollisionError:
                log.info("Code %s already exists, trying again", code)
                continue
            log.info("Allocated code %s for %s after %d attempt(s)", record.code, url, tried)
            return record
        log.warning("Gave up allocating a code for %s after %d attempts", url, tried)
        raise AllocationExhaustedError(url, tried)
