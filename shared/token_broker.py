"""
Token exchange with Entra ID through MSAL.

Two flows are supported:
- On-Behalf-Of: the caller's access token is exchanged for a token scoped
  to a downstream resource (Dataverse, Graph) keeping the user identity.
- Client credentials: app-only tokens when there is no user context.

Failures are surfaced unmodified; nothing is retried here.
"""

import logging
from typing import Dict, Any, List, Optional, Tuple

import msal

from .auth import UnauthorizedError
from .config import (
    get_authority, get_client_id, get_client_secret,
    get_app_client_id, get_app_client_secret,
)

logger = logging.getLogger(__name__)

CONSENT_ERROR_CODE = 65001
CONSENT_ERROR_MARKER = "AADSTS65001"

# One confidential client per (client_id, authority) so MSAL can reuse its cache
_confidential_clients: Dict[Tuple[str, str], msal.ConfidentialClientApplication] = {}


class TokenExchangeError(Exception):
    """Raised when Entra ID refuses a token request."""

    def __init__(self, result: Dict[str, Any]):
        self.error = result.get("error")
        self.error_description = result.get("error_description") or ""
        self.error_codes = result.get("error_codes") or []
        self.result = result
        super().__init__(
            f"Failed to acquire token: {self.error}: {self.error_description}"
        )

    @property
    def consent_required(self) -> bool:
        """True when the tenant must grant (admin) consent to the requested scopes."""
        return (
            CONSENT_ERROR_CODE in self.error_codes
            or CONSENT_ERROR_MARKER in self.error_description
            or self.error == "consent_required"
        )

    @property
    def is_grant_failure(self) -> bool:
        """True when the assertion itself was refused (re-login may help)."""
        return self.error in ("invalid_grant", "interaction_required", "consent_required")


def get_confidential_client(client_id: str, client_secret: str) -> msal.ConfidentialClientApplication:
    """
    Get or create the confidential client application for a registration.
    """
    authority = get_authority()
    key = (client_id, authority)
    client = _confidential_clients.get(key)
    if client is None:
        logger.info(f"Initializing MSAL confidential client for authority: {authority}")
        client = msal.ConfidentialClientApplication(
            client_id=client_id,
            client_credential=client_secret,
            authority=authority,
        )
        _confidential_clients[key] = client
    return client


def _check_result(result: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not result or "access_token" not in result:
        raise TokenExchangeError(result or {"error": "no_response"})
    return result


def acquire_token_on_behalf_of(user_assertion: Optional[str], scopes: List[str]) -> Dict[str, Any]:
    """
    Exchange the caller's access token for a downstream-scoped token.

    Args:
        user_assertion: Access token forwarded by Static Web Apps
        scopes: Scopes of the target resource

    Returns:
        MSAL result dict with ``access_token`` and ``expires_in``

    Raises:
        UnauthorizedError: If no assertion was supplied
        TokenExchangeError: If Entra ID refuses the exchange
    """
    if not user_assertion:
        raise UnauthorizedError("User token not available for On-Behalf-Of flow")

    client = get_confidential_client(get_client_id(), get_client_secret())

    logger.info(f"On-Behalf-Of request for scopes: {', '.join(scopes)}")
    result = client.acquire_token_on_behalf_of(user_assertion=user_assertion, scopes=scopes)

    try:
        result = _check_result(result)
    except TokenExchangeError as e:
        logger.error(f"On-Behalf-Of exchange failed: {e}")
        raise

    logger.info(f"On-Behalf-Of token obtained, expires in {result.get('expires_in')}s")
    return result


def acquire_app_token(scopes: List[str]) -> Dict[str, Any]:
    """
    Acquire an app-only token with the client credential flow.

    Raises:
        TokenExchangeError: If Entra ID refuses the request
    """
    client = get_confidential_client(get_app_client_id(), get_app_client_secret())

    result = client.acquire_token_for_client(scopes=scopes)

    try:
        return _check_result(result)
    except TokenExchangeError as e:
        logger.error(f"Client credential token request failed: {e}")
        raise
