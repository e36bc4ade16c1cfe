"""
Business logic for user token handling.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from shared.config import get_dataverse_scope
from shared.token_broker import acquire_token_on_behalf_of
from shared.token_store import CachedToken, TokenStore, get_token_store

logger = logging.getLogger(__name__)


class TokenService:
    """Service class for the auth callback and Dataverse token endpoints."""

    def __init__(self, store: Optional[TokenStore] = None):
        self.store = store or get_token_store()

    async def save_user_token(self, user_id: str, payload: Dict[str, Any]) -> None:
        """
        Save the token posted by the client after login.

        Raises:
            ValidationError: If accessToken or expiresOn is missing/invalid
        """
        self.store.put(user_id, CachedToken.from_payload(payload))

    async def get_user_token(self, user_id: str) -> Optional[str]:
        """Return the saved access token, or None when absent or about to expire."""
        return self.store.get(user_id)

    async def issue_dataverse_token(self, principal: Dict[str, Any], user_assertion: Optional[str]) -> Dict[str, Any]:
        """
        Obtain a Dataverse token for the signed-in user.

        Without a forwarded access token there is nothing to exchange and the
        response only echoes the user.

        Raises:
            TokenExchangeError: If the On-Behalf-Of exchange fails
        """
        user = principal.get("userDetails")
        logger.info(f"Dataverse token requested by: {user}")

        if not user_assertion:
            return {
                "user": user,
                "hasToken": False,
                "message": "No access token forwarded; On-Behalf-Of exchange not possible",
            }

        scope = get_dataverse_scope()
        result = acquire_token_on_behalf_of(user_assertion, [scope])
        expires_on = datetime.now(timezone.utc) + timedelta(seconds=int(result.get("expires_in", 0)))

        user_id = principal.get("userId")
        if user_id:
            self.store.put(user_id, CachedToken(
                access_token=result["access_token"],
                refresh_token=result.get("refresh_token"),
                expires_on=expires_on,
                scopes=[scope],
            ))

        return {
            "user": user,
            "hasToken": True,
            "accessToken": result["access_token"],
            "expiresOn": expires_on,
            "scopes": [scope],
        }
