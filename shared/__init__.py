# Shared utilities for the Event Gallery Backend
from .auth import get_user_assertion, get_client_principal, UnauthorizedError
from .errors import ConfigurationError, NotFoundError, ValidationError, UpstreamError
from .responses import success_response, error_response, preflight_response, cors_headers, not_found_response, validation_error_response
from .token_broker import acquire_token_on_behalf_of, acquire_app_token, TokenExchangeError
from .token_store import TokenStore, InMemoryTokenStore, CachedToken, get_token_store

__all__ = [
    "get_user_assertion",
    "get_client_principal",
    "UnauthorizedError",
    "ConfigurationError",
    "NotFoundError",
    "ValidationError",
    "UpstreamError",
    "success_response",
    "error_response",
    "preflight_response",
    "cors_headers",
    "not_found_response",
    "validation_error_response",
    "acquire_token_on_behalf_of",
    "acquire_app_token",
    "TokenExchangeError",
    "TokenStore",
    "InMemoryTokenStore",
    "CachedToken",
    "get_token_store",
]
