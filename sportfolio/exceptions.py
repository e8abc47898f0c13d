"""
Exception types raised by Sportfolio.
"""

from typing import Optional


class SportfolioError(Exception):
    """Base exception for Sportfolio operations."""
    pass


class ConfigurationError(SportfolioError):
    """Raised when required configuration or credentials are missing."""
    pass


class DatabaseNotConfiguredError(SportfolioError, RuntimeError):
    """Raised when a session is requested before configure_database()."""
    pass


class EnrichmentError(SportfolioError):
    """Base exception for AI enrichment failures."""
    pass


class ResponseParseError(EnrichmentError):
    """Raised when a vision model response holds no usable JSON."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class ProviderError(EnrichmentError):
    """Raised when a vision provider call or image fetch fails."""
    pass


class SmugMugAPIError(SportfolioError):
    """Raised on a non-2xx SmugMug API response."""

    def __init__(self, status: int, body: str):
        super().__init__(f"SmugMug API error ({status}): {body}")
        self.status = status
        self.body = body
