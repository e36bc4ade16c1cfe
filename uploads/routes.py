"""
HTTP route handlers for event image uploads.
"""

import logging
import azure.functions as func
from shared.errors import ConfigurationError, NotFoundError
from shared.responses import (
    cors_headers, preflight_response, success_response, validation_error_response,
    configuration_error_response, not_found_response, internal_error_response
)
from .service import UploadService

logger = logging.getLogger(__name__)

CORS_HEADERS = cors_headers(["POST"])


async def upload_event_images(req: func.HttpRequest) -> func.HttpResponse:
    """
    POST /api/upload-event-images
    Upload base64 images into an existing event's folder.

    Returns 200 when at least one image was stored, else 500.
    """
    if req.method == "OPTIONS":
        return preflight_response(CORS_HEADERS)

    try:
        service = UploadService()

        try:
            body = req.get_json()
        except ValueError:
            return validation_error_response("Invalid JSON body", "The request body must be JSON", headers=CORS_HEADERS)

        if not isinstance(body, dict):
            body = {}

        event_id = body.get("eventId")
        if not event_id:
            return validation_error_response(
                "eventId parameter required",
                "Provide the event id or folder",
                headers=CORS_HEADERS
            )

        images = body.get("images")
        if not isinstance(images, list) or len(images) == 0:
            return validation_error_response(
                "images parameter required",
                "Provide an array of images to upload",
                headers=CORS_HEADERS
            )

        summary = await service.upload_images(str(event_id), images)
        status_code = 200 if summary["uploaded"] > 0 else 500

        return success_response(summary, status_code=status_code, headers=CORS_HEADERS)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=CORS_HEADERS)
    except NotFoundError as e:
        return not_found_response("Event", str(e), headers=CORS_HEADERS)
    except Exception as e:
        logger.error(f"Error uploading images: {str(e)}")
        return internal_error_response("Error uploading images", str(e), headers=CORS_HEADERS)


def register_upload_routes(app: func.FunctionApp):
    """Register the upload route with the function app."""
    app.route(route="upload-event-images", methods=["POST", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(upload_event_images)
