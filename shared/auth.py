"""
Inbound identity extraction for Static Web Apps authenticated requests.

The hosting platform forwards the signed-in user's AAD access token in
``x-ms-token-aad-access-token`` and a base64 JSON client principal in
``x-ms-client-principal``. Signatures are not verified here: the token is
only ever used as an On-Behalf-Of assertion, which Entra ID validates.
"""

import base64
import binascii
import json
import logging
from typing import Optional, Dict, Any

import jwt
import azure.functions as func

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "x-ms-token-aad-access-token"
CLIENT_PRINCIPAL_HEADER = "x-ms-client-principal"
USER_ID_HEADER = "x-user-id"


class UnauthorizedError(Exception):
    """Raised when authentication fails."""
    pass


def read_unverified_claims(token: str) -> Dict[str, Any]:
    """
    Decode a JWT without verifying it.

    Raises:
        UnauthorizedError: If the token is not a well-formed JWT
    """
    try:
        jwt.get_unverified_header(token)
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.exceptions.DecodeError as e:
        logger.warning(f"Could not read token: {e}")
        raise UnauthorizedError("Invalid token format")


def get_user_assertion(req: func.HttpRequest) -> str:
    """
    Extract the caller's access token to use as an On-Behalf-Of assertion.

    Args:
        req: The HTTP request object

    Returns:
        The raw access token

    Raises:
        UnauthorizedError: If the header is missing or not a JWT
    """
    token = (req.headers.get(ACCESS_TOKEN_HEADER) or "").strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()

    if not token:
        raise UnauthorizedError("No user token on the request. Sign in again to continue.")

    claims = read_unverified_claims(token)
    logger.info(f"Assertion received for user: {claims.get('upn') or claims.get('oid') or 'unknown'}")
    return token


def get_optional_user_assertion(req: func.HttpRequest) -> Optional[str]:
    """Like get_user_assertion, but returns None when the header is absent."""
    if not req.headers.get(ACCESS_TOKEN_HEADER):
        return None
    return get_user_assertion(req)


def get_client_principal(req: func.HttpRequest) -> Dict[str, Any]:
    """
    Decode the platform client principal (base64 encoded JSON).

    Returns:
        dict with at least ``userId`` and ``userDetails`` when present

    Raises:
        UnauthorizedError: If the header is missing or cannot be decoded
    """
    encoded = req.headers.get(CLIENT_PRINCIPAL_HEADER)
    if not encoded:
        raise UnauthorizedError("You must be signed in to request a token")

    try:
        principal = json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Invalid client principal header: {e}")
        raise UnauthorizedError("Invalid client principal")

    if not isinstance(principal, dict):
        raise UnauthorizedError("Invalid client principal")

    return principal


def get_user_id_header(req: func.HttpRequest) -> Optional[str]:
    """Get the caller-supplied user ID used to key cached tokens."""
    user_id = req.headers.get(USER_ID_HEADER)
    return user_id.strip() if user_id else None
