"""
HTTP route handlers for home document endpoints.
"""

import logging
import azure.functions as func
from shared.errors import ValidationError, PayloadTooLargeError
from shared.responses import (
    success_response, created_response, error_response,
    payload_too_large_response, options_response, cors_headers
)
from shared.uploads import (
    read_multipart_form, find_part, is_valid_pdf_file, safe_directory, safe_file_name
)
from .service import HomeDocumentService

logger = logging.getLogger(__name__)

DOCUMENT_FILE_FIELDS = ("document", "file", "pdf")
DEFAULT_INSURANCE_FILE_NAME = "insurance_document.pdf"


async def upload_home_insurance(req: func.HttpRequest) -> func.HttpResponse:
    """
    POST /api/twins/{twin_id}/{home_id}/upload-home-insurance/{*file_path}
    Upload a home insurance PDF (multipart/form-data).
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        home_id = req.route_params.get("home_id")
        file_path = (req.route_params.get("file_path") or "").strip()

        if not twin_id:
            return error_response("Twin ID parameter is required", 400, headers=headers)
        if not home_id:
            return error_response("Home ID parameter is required", 400, headers=headers)
        if not file_path:
            return error_response(
                "File path is required in the URL. Use format: "
                "/twins/{twinId}/{homeId}/upload-home-insurance/{path}",
                400,
                headers=headers
            )

        parts = read_multipart_form(req)
        document_part = find_part(parts, *DOCUMENT_FILE_FIELDS)
        if document_part is None or not document_part.data:
            return error_response(
                "No document file data found in request. "
                "Expected field name: 'document', 'file', or 'pdf'",
                400,
                headers=headers
            )

        file_path = safe_directory(file_path)
        file_name = safe_file_name(document_part.file_name or DEFAULT_INSURANCE_FILE_NAME)
        logger.info(f"Home insurance upload for twin {twin_id}, home {home_id}: "
                    f"{file_path}/{file_name}, {len(document_part.data)} bytes")

        if not is_valid_pdf_file(file_name, document_part.data):
            return error_response(
                "Invalid document format. Only PDF files are supported for insurance documents",
                400,
                headers=headers
            )

        service = HomeDocumentService()
        document = await service.upload_insurance_document(
            twin_id,
            home_id,
            file_path,
            file_name,
            document_part.data
        )

        return created_response(document, headers=headers)

    except ValidationError as e:
        return error_response(str(e), 400, errors=e.as_error_list(), headers=headers)
    except PayloadTooLargeError as e:
        return payload_too_large_response(str(e), headers=headers)
    except Exception as e:
        logger.error(f"Error in home insurance upload: {str(e)}")
        return error_response(f"Upload failed: {str(e)}", 500, headers=headers)


async def list_home_documents(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/twins/{twin_id}/homes/{home_id}/documents
    List the documents uploaded for a home.
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        home_id = req.route_params.get("home_id")
        if not twin_id or not home_id:
            return error_response("Twin ID and Home ID parameters are required", 400, headers=headers)

        service = HomeDocumentService()
        documents = await service.list_documents(twin_id, home_id)

        return success_response(
            {"documents": documents, "total_count": len(documents)},
            headers=headers
        )

    except Exception as e:
        logger.error(f"Error listing home documents: {str(e)}")
        return error_response("Failed to list home documents", 500, headers=headers)


def upload_home_insurance_options(req: func.HttpRequest) -> func.HttpResponse:
    """OPTIONS /api/twins/{twin_id}/{home_id}/upload-home-insurance/{*file_path}"""
    return options_response(req)


def home_documents_options(req: func.HttpRequest) -> func.HttpResponse:
    """OPTIONS /api/twins/{twin_id}/homes/{home_id}/documents"""
    return options_response(req)


def register_home_document_routes(app: func.FunctionApp):
    """Register all home document routes with the function app."""
    anonymous = func.AuthLevel.ANONYMOUS
    upload_route = "twins/{twin_id}/{home_id}/upload-home-insurance/{*file_path}"
    list_route = "twins/{twin_id}/homes/{home_id}/documents"

    app.route(route=upload_route, methods=["OPTIONS"], auth_level=anonymous)(upload_home_insurance_options)
    app.route(route=upload_route, methods=["POST"], auth_level=anonymous)(upload_home_insurance)

    app.route(route=list_route, methods=["OPTIONS"], auth_level=anonymous)(home_documents_options)
    app.route(route=list_route, methods=["GET"], auth_level=anonymous)(list_home_documents)
