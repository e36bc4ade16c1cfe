"""
HTTP route handlers for SharePoint image endpoints.
"""

import logging
import azure.functions as func
from shared.auth import get_user_assertion, UnauthorizedError
from shared.errors import ConfigurationError, UpstreamError
from shared.sharepoint_url import SharePointUrlError
from shared.token_broker import TokenExchangeError
from shared.responses import (
    cors_headers, preflight_response, success_response, unauthorized_response,
    validation_error_response, configuration_error_response, upstream_error_response,
    token_exchange_error_response, internal_error_response
)
from .service import SharePointImageService

logger = logging.getLogger(__name__)

SHAREPOINT_CORS_HEADERS = cors_headers(["GET"])
EVENT_IMAGES_CORS_HEADERS = cors_headers(["GET"], ["Content-Type", "Authorization"])

CONSENT_HINT = "Admin approval is required to access the SharePoint APIs (Files.Read.All)."
ERROR_TITLE = "Error retrieving images"


async def sharepoint_images(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/sharepoint-images?url=
    List images of a SharePoint shared folder with the user's delegated token.
    """
    headers = SHAREPOINT_CORS_HEADERS
    if req.method == "OPTIONS":
        return preflight_response(headers)

    try:
        share_url = (req.params.get("url") or "").strip()
        if not share_url:
            return validation_error_response(
                "url parameter required",
                "Provide the SharePoint folder URL in the ?url= parameter",
                headers=headers
            )

        try:
            assertion = get_user_assertion(req)
        except UnauthorizedError as e:
            logger.warning("No user token on the request. User not signed in?")
            return unauthorized_response(str(e), headers=headers)

        logger.info(f"Retrieving images from: {share_url}")
        service = SharePointImageService()
        images = await service.list_shared_folder_images(assertion, share_url)

        return success_response(images, headers=headers)

    except SharePointUrlError as e:
        return validation_error_response("Invalid SharePoint URL", str(e), headers=headers)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=headers)
    except TokenExchangeError as e:
        hint = CONSENT_HINT if e.consent_required else None
        return token_exchange_error_response(ERROR_TITLE, e, hint=hint, headers=headers)
    except UpstreamError as e:
        return upstream_error_response(ERROR_TITLE, e, headers=headers)
    except Exception as e:
        logger.error(f"Error retrieving SharePoint images: {str(e)}")
        return internal_error_response(ERROR_TITLE, str(e), headers=headers)


async def event_images(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/events/{eventId}/images?galleryUrl=
    List images of an event's SharePoint gallery with the application identity.
    """
    headers = EVENT_IMAGES_CORS_HEADERS
    if req.method == "OPTIONS":
        return preflight_response(headers)

    try:
        event_id = req.route_params.get("eventId")
        gallery_url = (req.params.get("galleryUrl") or "").strip()
        if not gallery_url:
            return validation_error_response(
                "galleryUrl missing",
                "The galleryUrl parameter is required",
                headers=headers
            )

        logger.info(f"Retrieving images for event {event_id}")
        service = SharePointImageService()
        images = await service.list_gallery_images(gallery_url)

        return success_response(images, headers=headers)

    except SharePointUrlError as e:
        return validation_error_response("Invalid SharePoint URL", str(e), headers=headers)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=headers)
    except TokenExchangeError as e:
        return token_exchange_error_response(ERROR_TITLE, e, headers=headers)
    except UpstreamError as e:
        return upstream_error_response(ERROR_TITLE, e, headers=headers)
    except Exception as e:
        logger.error(f"Error retrieving event images: {str(e)}")
        return internal_error_response(ERROR_TITLE, str(e), headers=headers)


def register_sharepoint_image_routes(app: func.FunctionApp):
    """Register the SharePoint image routes with the function app."""
    app.route(route="sharepoint-images", methods=["GET", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(sharepoint_images)
    app.route(route="events/{eventId}/images", methods=["GET", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(event_images)
