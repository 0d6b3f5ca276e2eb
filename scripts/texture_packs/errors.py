"""
Exception hierarchy for the texture pack filter engine.
"""

from typing import Optional


class TexturePackError(Exception):
    """Base exception for texture pack filter errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(TexturePackError, ValueError):
    """Raised when an operation is called with arguments it cannot accept."""
    pass


class ConfigurationError(TexturePackError):
    """Raised when a filter configuration is invalid."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class FilterError(TexturePackError):
    """Raised when a filter fails to transform an image."""

    def __init__(self, message: str, kind: Optional[str] = None, index: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.index = index
