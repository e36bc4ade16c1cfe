"""
Event Gallery Backend - Azure Functions Application

Serverless endpoints behind the event photo gallery. Each endpoint proxies a
single external service (Blob Storage, Dataverse, SharePoint via Microsoft
Graph) and reshapes the result for the gallery UI.
"""

import azure.functions as func
import datetime
import json
import logging

from shared.config import get_log_level, get_environment_name

# Configure logging
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

# Create the main Function App instance
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

# Import route registrations
from auth_tokens.routes import register_auth_token_routes
from blob_gallery.routes import register_blob_gallery_routes
from dataverse_events.routes import register_dataverse_event_routes
from sharepoint_images.routes import register_sharepoint_image_routes
from uploads.routes import register_upload_routes

# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.route(route="health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint to verify the Azure Function is running."""
    logger.info("Health check endpoint called.")

    health_status = {
        "status": "healthy",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "service": "Event Gallery Backend",
        "version": "1.0.0",
        "environment": get_environment_name()
    }

    return func.HttpResponse(
        json.dumps(health_status),
        status_code=200,
        mimetype="application/json"
    )

# =============================================================================
# Gallery Endpoints
# =============================================================================

register_auth_token_routes(app)
register_blob_gallery_routes(app)
register_dataverse_event_routes(app)
register_sharepoint_image_routes(app)
register_upload_routes(app)
