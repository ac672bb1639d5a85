"""
Standard HTTP response helpers for consistent API responses.
Every helper accepts extra headers so handlers can attach CORS headers.
"""

import json
from typing import Any, Optional, Dict, List, Union
import azure.functions as func
from .config import get_allowed_origins

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, Accept, Origin, User-Agent"
CORS_MAX_AGE = "3600"


def json_serialize(obj: Any) -> str:
    """
    Serialize object to JSON, handling datetime and UUID types.
    """
    import datetime
    import uuid

    def default_serializer(o):
        if isinstance(o, (datetime.datetime, datetime.date)):
            return o.isoformat()
        if isinstance(o, uuid.UUID):
            return str(o)
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(obj, default=default_serializer)


def cors_headers(req: func.HttpRequest) -> Dict[str, str]:
    """
    Build CORS headers for a request.

    Known origins are echoed back; anything else gets the wildcard.
    """
    origin = req.headers.get("Origin")
    allow_origin = origin if origin and origin in get_allowed_origins() else "*"

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        "Access-Control-Max-Age": CORS_MAX_AGE,
    }


def options_response(req: func.HttpRequest) -> func.HttpResponse:
    """Answer a CORS preflight request."""
    return func.HttpResponse("", status_code=200, headers=cors_headers(req))


def success_response(
    data: Union[Dict, List, Any],
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a successful JSON response.

    Args:
        data: Response data to serialize
        status_code: HTTP status code (default: 200)
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse
    """
    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }

    return func.HttpResponse(
        json_serialize(data),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def created_response(
    data: Union[Dict, List, Any],
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 201 Created response.

    Args:
        data: Created resource data
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse with 201 status
    """
    return success_response(data, status_code=201, headers=headers)


def no_content_response(headers: Optional[Dict[str, str]] = None) -> func.HttpResponse:
    """
    Create a 204 No Content response.

    Returns:
        Azure Functions HttpResponse with 204 status
    """
    return func.HttpResponse(
        status_code=204,
        headers=headers
    )


def error_response(
    message: str,
    status_code: int = 400,
    errors: Optional[List[Dict]] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create an error JSON response.

    Args:
        message: Error message
        status_code: HTTP status code (default: 400)
        errors: Optional list of detailed errors
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse with error details
    """
    error_body = {
        "error": True,
        "message": message,
    }

    if errors:
        error_body["errors"] = errors

    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }

    return func.HttpResponse(
        json_serialize(error_body),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def not_found_response(
    resource: str = "Resource",
    message: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a 404 Not Found response.

    Args:
        resource: Name of the resource that wasn't found
        message: Optional custom message
        headers: Optional additional headers

    Returns:
        Azure Functions HttpResponse with 404 status
    """
    return error_response(
        message or f"{resource} not found",
        status_code=404,
        headers=headers
    )


def payload_too_large_response(
    message: str,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """Create a 413 Payload Too Large response."""
    return error_response(message, status_code=413, headers=headers)
