"""Error handling utilities."""

from typing import Optional


class GleisError(Exception):
    """Base exception for the Gleis backend."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class ConfigurationError(GleisError):
    """Required configuration (Notion credentials, database ID) is missing."""
    pass


class NotionError(GleisError):
    """Notion query or mutation failed."""
    pass


class TaskInputError(GleisError):
    """Request is missing a required identifier or has a malformed parameter."""
    pass
