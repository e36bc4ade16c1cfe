"""
HTTP route handlers for the Dataverse events proxy.
"""

import logging
import azure.functions as func
from shared.auth import get_user_assertion, UnauthorizedError
from shared.errors import ConfigurationError, UpstreamError
from shared.token_broker import TokenExchangeError
from shared.responses import (
    cors_headers, preflight_response, success_response, unauthorized_response,
    configuration_error_response, upstream_error_response,
    token_exchange_error_response, internal_error_response
)
from .service import DataverseEventService

logger = logging.getLogger(__name__)

CORS_HEADERS = cors_headers(["GET"], ["Content-Type", "Authorization"])

CONSENT_HINT = "Dataverse permissions must be consented for this application."
ERROR_TITLE = "Error retrieving events"


async def list_events(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/events
    List active Dataverse events using the signed-in user's identity.
    """
    if req.method == "OPTIONS":
        return preflight_response(CORS_HEADERS)

    try:
        try:
            assertion = get_user_assertion(req)
        except UnauthorizedError as e:
            logger.warning("No user token on the request. User not signed in?")
            return unauthorized_response(str(e), headers=CORS_HEADERS)

        service = DataverseEventService()
        events = await service.list_events(assertion)

        return success_response(events, headers=CORS_HEADERS)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=CORS_HEADERS)
    except TokenExchangeError as e:
        hint = CONSENT_HINT if e.consent_required or e.error == "invalid_grant" else None
        return token_exchange_error_response(ERROR_TITLE, e, hint=hint, headers=CORS_HEADERS)
    except UpstreamError as e:
        return upstream_error_response(ERROR_TITLE, e, headers=CORS_HEADERS)
    except Exception as e:
        logger.error(f"Error retrieving events: {str(e)}")
        return internal_error_response(ERROR_TITLE, str(e), headers=CORS_HEADERS)


def register_dataverse_event_routes(app: func.FunctionApp):
    """Register the Dataverse events route with the function app."""
    app.route(route="events", methods=["GET", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(list_events)
