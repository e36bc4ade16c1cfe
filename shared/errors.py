"""
Error taxonomy shared by services and route handlers.
"""

from typing import Any, Optional


class ConfigurationError(Exception):
    """Raised when a required setting is missing. Maps to 500."""
    pass


class NotFoundError(Exception):
    """Raised when an event or token is absent. Maps to 404."""
    pass


class ValidationError(Exception):
    """Raised when a required field is missing or malformed. Maps to 400."""
    pass


class UpstreamError(Exception):
    """
    Raised when Graph, Dataverse or Blob Storage answers with an error.

    The provider status code and payload are kept so they can be relayed
    to the caller unmodified.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def response_status(self) -> int:
        """Status to relay: the provider's own error status, else 502."""
        if self.status_code and self.status_code >= 400:
            return self.status_code
        return 502
