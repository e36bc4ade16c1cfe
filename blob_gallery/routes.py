"""
HTTP route handlers for the blob-backed gallery endpoints.
"""

import logging
import azure.functions as func
from shared.errors import ConfigurationError, NotFoundError
from shared.responses import (
    cors_headers, preflight_response, success_response,
    validation_error_response, configuration_error_response,
    not_found_response, internal_error_response
)
from .service import BlobGalleryService

logger = logging.getLogger(__name__)

CORS_HEADERS = cors_headers(["GET"])


async def blob_events(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/blob-events
    List events from _index.json with their image counts.
    """
    if req.method == "OPTIONS":
        return preflight_response(CORS_HEADERS)

    logger.info("Listing events from Blob Storage")
    try:
        service = BlobGalleryService()
        events = await service.list_events()

        return success_response(events, headers=CORS_HEADERS)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=CORS_HEADERS)
    except NotFoundError as e:
        return not_found_response("Event index", str(e), headers=CORS_HEADERS)
    except Exception as e:
        logger.error(f"Error listing events: {str(e)}")
        return internal_error_response("Error retrieving events", str(e), headers=CORS_HEADERS)


async def blob_images(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/blob-images?folder=
    List an event folder's images with signed, time-limited read URLs.
    """
    if req.method == "OPTIONS":
        return preflight_response(CORS_HEADERS)

    try:
        folder = (req.params.get("folder") or "").strip().strip("/")
        if not folder:
            return validation_error_response(
                "folder parameter required",
                "Provide the event folder name in the ?folder= parameter",
                headers=CORS_HEADERS
            )

        service = BlobGalleryService()
        logger.info(f"Listing images for event folder: {folder}")
        images = await service.list_images(folder)

        return success_response(images, headers=CORS_HEADERS)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        return configuration_error_response(str(e), headers=CORS_HEADERS)
    except Exception as e:
        logger.error(f"Error listing images: {str(e)}")
        return internal_error_response("Error retrieving images", str(e), headers=CORS_HEADERS)


def register_blob_gallery_routes(app: func.FunctionApp):
    """Register the blob gallery routes with the function app."""
    app.route(route="blob-events", methods=["GET", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(blob_events)
    app.route(route="blob-images", methods=["GET", "OPTIONS"], auth_level=func.AuthLevel.ANONYMOUS)(blob_images)
