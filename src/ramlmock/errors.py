"""
raml-mock Errors

Exceptions raised while loading a RAML document or answering a request.
"""

from typing import Iterable, Optional


class MockServiceError(Exception):
    """Base class for all raml-mock errors."""


class DocumentLoadError(MockServiceError):
    """
    The RAML document could not be loaded.

    Raised for missing or unreadable files, invalid YAML, a missing
    ``#%RAML`` header, broken ``!include`` references and declarations the
    route builder cannot compile. Fatal at startup.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class NotAcceptable(MockServiceError):
    """No declared body media type satisfies the request."""

    def __init__(self, available: Iterable[str] = ()):
        self.available = list(available)
        super().__init__(
            f"Not acceptable. Available media types: {', '.join(self.available) or '(none)'}"
        )
