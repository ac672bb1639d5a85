"""
TwinFx Uploads Backend - Azure Functions Application

HTTP endpoints for uploading and managing a digital twin's photos and home
documents. Multipart request bodies are decoded by shared.multipart; files
and metadata are kept in Supabase Storage and tables.
"""

import azure.functions as func
import datetime
import logging

from shared.config import get_environment
from shared.responses import success_response
from photos.routes import register_photo_routes
from home_documents.routes import register_home_document_routes

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the main Function App instance
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.route(route="health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint to verify the Azure Function is running."""
    logger.info("Health check endpoint called.")

    return success_response({
        "status": "healthy",
        "timestamp": datetime.datetime.utcnow().isoformat() + "Z",
        "service": "TwinFx Uploads Backend",
        "version": "1.0.0",
        "environment": get_environment()
    })

# =============================================================================
# Resource Endpoints
# =============================================================================

register_photo_routes(app)
register_home_document_routes(app)
