"""Custom exceptions for textspots."""

from typing import Optional


class TextSpotsError(Exception):
    """Base exception for textspots errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class LayoutError(TextSpotsError):
    """Exception raised during text layout calculation."""

    pass


class GeometryError(TextSpotsError):
    """Exception raised during geometry calculations."""

    pass


class ConfigurationError(TextSpotsError, ValueError):
    """Exception raised when a caller passes an invalid configuration.

    Also a ``ValueError`` so callers treating bad arguments generically still
    catch it.
    """

    pass


class RestorationError(TextSpotsError):
    """Exception raised while re-attaching saved content to spots."""

    pass


class MediaError(TextSpotsError):
    """Exception raised during image encoding or decoding."""

    pass
