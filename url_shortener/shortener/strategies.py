"""
Strategies for short-code generation.

Provided strategies:
- SHA256Strategy: SHA-256(text) -> URL-safe unpadded Base64 -> truncate to `length`

Every strategy is a small frozen dataclass (algorithm + length). Adding a new
digest means adding a `DigestStrategy` subclass and a registry entry; the
allocator only ever calls `shorten()`.

Configuration (via url_shortener.config.Settings):
- SHORTENER_DIGEST: registry key, "sha256" (default)
- SHORTENER_LENGTH: code length (default 8)

Notes:
- Strategies are pure: the same input always produces the same code. The
  caller supplies the disambiguating attempt suffix (`url|0`, `url|1`, ...).
- An unknown digest name is a configuration error raised by `get_strategy`,
  which the app factory calls at startup.

LLM Prompt Example:
    "Show how a closed registry of frozen strategy dataclasses keeps the digest
    algorithm pluggable without touching the retry loop that consumes it."
"""

import base64
import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Dict, Type

from url_shortener.exceptions import ConfigurationError

DEFAULT_LENGTH = 8


class BaseStrategy(ABC):
    """Abstract base for code generation strategies."""

    @abstractmethod
    def shorten(self, text: str) -> str:  # pragma: no cover
        """Map an (already disambiguated) input string to a short code."""
        raise NotImplementedError


@dataclass(frozen=True)
class DigestStrategy(BaseStrategy):
    """Digest -> URL-safe Base64 (no padding) -> truncate strategy."""

    algorithm: ClassVar[str] = ""
    length: int = DEFAULT_LENGTH

    def __post_init__(self) -> None:
        limit = self.max_length()
        if not 1 <= self.length <= limit:
            raise ConfigurationError(
                f"Code length for {self.algorithm} must be between 1 and {limit}, got {self.length}"
            )

    @classmethod
    def max_length(cls) -> int:
        """Number of Base64 characters the unpadded digest encodes to."""
        bits = hashlib.new(cls.algorithm).digest_size * 8
        return (bits + 5) // 6

    def shorten(self, text: str) -> str:
        digest = hashlib.new(self.algorithm, text.encode("utf-8")).digest()
        encoded = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
        return encoded[: self.length]


@dataclass(frozen=True)
class SHA256Strategy(DigestStrategy):
    algorithm: ClassVar[str] = "sha256"


# Strategy registry and factory
STRATEGY_REGISTRY: Dict[str, Type[DigestStrategy]] = {
    "sha256": SHA256Strategy,
}


def get_strategy(name: str, length: int = DEFAULT_LENGTH) -> BaseStrategy:
    """
    Resolve a strategy by digest name.

    Raises:
        ConfigurationError: If the digest is not registered or the length is unusable.
    """
    key = (name or "").strip().lower()
    cls = STRATEGY_REGISTRY.get(key)
    if cls is None:
        raise ConfigurationError(f"Unknown digest algorithm {name!r}")
    return cls(length=length)
