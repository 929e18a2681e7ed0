"""
Exception classes for the storefront SEO toolkit.

All exceptions inherit from StorefrontSeoError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class StorefrontSeoError(Exception):
    """Base exception for all storefront SEO errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(StorefrontSeoError):
    """Raised when configuration values are out of range."""

    pass


class NetworkError(StorefrontSeoError):
    """Raised when a URL cannot be requested (bad scheme, transport failure)."""

    pass


class SitemapError(StorefrontSeoError):
    """Raised when a sitemap cannot be fetched, read or parsed."""

    pass
