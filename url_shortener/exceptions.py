"""
Exception hierarchy for the URL shortener.

Every error carries a stable `error_code` so logs and API responses can refer
to a failure without depending on message text.
"""


class UrlShortenerError(Exception):
    """Base class for all URL shortener errors."""

    error_code = "url_shortener:error"


class ConfigurationError(UrlShortenerError):
    """Raised at startup when a setting is missing or unusable."""

    error_code = "config:configuration_error"


class InvalidUrlError(UrlShortenerError, ValueError):
    """Raised when a submitted URL is not syntactically well-formed."""

    error_code = "manager:invalid_url"


class UrlNotFoundError(UrlShortenerError):
    """Raised when no shortened URL exists for a code."""

    error_code = "storage:url_not_found"

    def __init__(self, code: str) -> None:
        super().__init__(f"No shortened URL for code {code!r}")
        self.code = code


class CodeCollisionError(UrlShortenerError):
    """Raised by storage when an insert violates the uniqueness of `code`.

    The allocator absorbs this and retries with the next candidate.
    """

    error_code = "storage:code_collision"

    def __init__(self, code: str) -> None:
        super().__init__(f"Code {code!r} already exists")
        self.code = code


class StorageError(UrlShortenerError):
    """Raised when the data store fails for any reason other than a code collision.

    Examples include connection issues, timeouts, and unrelated constraint violations.
    """

    error_code = "storage:storage_error"


class AllocationExhaustedError(UrlShortenerError):
    """Raised when every allowed candidate code for a URL was already taken."""

    error_code = "allocator:allocation_exhausted"

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"No free code for {url!r} after {attempts} attempts")
        self.url = url
        self.attempts = attempts
