"""
HTTP route handlers for user token endpoints.
"""

import logging
import azure.functions as func
from shared.auth import (
    get_client_principal, get_optional_user_assertion, get_user_id_header, UnauthorizedError
)
from shared.errors import ConfigurationError, ValidationError
from shared.token_broker import TokenExchangeError
from shared.responses import (
    cors_headers, preflight_response, success_response, error_response,
    validation_error_response, not_found_response, configuration_error_response,
    token_exchange_error_response, internal_error_response
)
from .service import TokenService

logger = logging.getLogger(__name__)

CALLBACK_CORS_HEADERS = cors_headers(["GET", "POST"], ["Content-Type", "Authorization", "X-User-ID"])
DATAVERSE_TOKEN_CORS_HEADERS = cors_headers(["GET"])

CONSENT_HINT = "Dataverse permissions must be consented for this application."


async def auth_callback(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET|POST /api/auth-callback
    POST saves the caller's token; GET reports whether a usable one is stored.
    """
    headers = CALLBACK_CORS_HEADERS
    if req.method == "OPTIONS":
        return preflight_response(headers)

    try:
        user_id = get_user_id_header(req)
        if not user_id:
            return validation_error_response("User ID required", "Missing X-User-ID header", headers=headers)

        service = TokenService()

        if req.method == "POST":
            try:
                body = req.get_json()
            except ValueError:
                return validation_error_response("Invalid JSON body", "The request body must be JSON", headers=headers)

            if not isinstance(body, dict) or not body.get("accessToken"):
                return validation_error_response("Missing token", "accessToken required in the body", headers=headers)

            await service.save_user_token(user_id, body)
            return success_response({"success": True, "message": "Token saved"}, headers=headers)

        token = await service.get_user_token(user_id)
        if not token:
            return not_found_response("Token", "Token not available or expired", headers=headers)

        return success_response({"success": True, "hasToken": True}, headers=headers)

    except ValidationError as e:
        return validation_error_response("Invalid token data", str(e), headers=headers)
    except Exception as e:
        logger.error(f"Error handling user token: {str(e)}")
        return internal_error_response("Internal error", str(e), headers=headers)


async def get_dataverse_token(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/get-dataverse-token
    Exchange the signed-in user's token for a Dataverse token.
    """
    headers = DATAVERSE_TOKEN_CORS_HEADERS
    if req.method == "OPTIONS":
        return preflight_response(headers)

    try:
        try:
            principal = get_client_principal(req)
            assertion = get_optional_user_assertion(req)
        except UnauthorizedError as e:
            return error_response("Not authenticated", str(e), status_code=401, headers=headers)

        service = TokenService()
        result = await service.issue_dataverse_token(principal, assertion)

        return success_response(result, headers=headers)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=headers)
    except TokenExchangeError as e:
        hint = CONSENT_HINT if e.consent_required else None
        return token_exchange_error_response("Error retrieving token", e, hint=hint, headers=headers)
    except Exception as e:
        logger.error(f"Error retrieving Dataverse token: {str(e)}")
        return internal_error_response("Error retrieving token", str(e), headers=headers)


def register_auth_token_routes(app: func.FunctionApp):
    """Register the token routes with the function app."""
    app.route(route="auth-callback", methods=["GET", "POST", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(auth_callback)
    app.route(route="get-dataverse-token", methods=["GET", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(get_dataverse_token)
