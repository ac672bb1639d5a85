"""
HTTP route handlers for twin photo endpoints.
"""

import base64
import binascii
import logging
import uuid
import azure.functions as func
from shared.errors import NotFoundError, ValidationError, PayloadTooLargeError
from shared.responses import (
    success_response, created_response, no_content_response, error_response,
    not_found_response, payload_too_large_response, options_response, cors_headers
)
from shared.uploads import (
    read_multipart_form, find_part, form_value, is_valid_image_file,
    detect_image_extension, mime_type_from_extension, safe_file_name
)
from .service import PhotoService

logger = logging.getLogger(__name__)

PHOTO_FILE_FIELDS = ("photo", "file", "image")

# Form field names accepted for each metadata key
PHOTO_FORM_FIELDS = {
    "description": ("description", "Description", "userDescription"),
    "date_taken": ("date_taken", "dateTaken", "DateTaken"),
    "time_taken": ("time_taken", "timeTaken", "TimeTaken"),
    "location": ("location", "Location"),
    "country": ("country", "Country"),
    "place": ("place", "Place"),
    "people_in_photo": ("people_in_photo", "peopleInPhoto", "PeopleInPhoto"),
    "category": ("category", "Category"),
    "tags": ("tags", "Tags"),
    "event_type": ("event_type", "eventType", "EventType"),
}


def _read_multipart_photo(req: func.HttpRequest):
    parts = read_multipart_form(req)

    photo_part = find_part(parts, *PHOTO_FILE_FIELDS)
    if photo_part is None or not photo_part.data:
        raise ValidationError("No photo file data found in request", field="photo")

    file_name = form_value(parts, "fileName", "FileName", "file_name") or photo_part.file_name
    metadata = {}
    for key, names in PHOTO_FORM_FIELDS.items():
        value = form_value(parts, *names)
        if value is not None:
            metadata[key] = value.strip()

    return file_name, photo_part.data, metadata


def _read_json_photo(req: func.HttpRequest):
    try:
        body = req.get_json()
    except ValueError:
        raise ValidationError("Invalid JSON body")

    if not isinstance(body, dict) or not body.get("photo_data"):
        raise ValidationError("photo_data is required", field="photo_data")

    photo_data = body["photo_data"]
    if isinstance(photo_data, str) and photo_data.startswith("data:") and "," in photo_data:
        photo_data = photo_data.split(",", 1)[1]

    try:
        file_data = base64.b64decode(photo_data, validate=True)
    except (binascii.Error, TypeError, ValueError):
        raise ValidationError("photo_data must be valid base64", field="photo_data")

    metadata = body.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object", field="metadata")

    return body.get("file_name"), file_data, metadata


async def upload_photo(req: func.HttpRequest) -> func.HttpResponse:
    """
    POST /api/twins/{twin_id}/photos
    Upload a photo with metadata (multipart/form-data or JSON with base64).
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        if not twin_id:
            return error_response("Twin ID parameter is required", 400, headers=headers)

        content_type = req.headers.get("Content-Type", "").lower()
        if "multipart/form-data" in content_type:
            file_name, file_data, metadata = _read_multipart_photo(req)
        elif "application/json" in content_type:
            file_name, file_data, metadata = _read_json_photo(req)
        else:
            return error_response(
                "Content-Type must be multipart/form-data or application/json",
                400,
                headers=headers
            )

        if not file_name:
            file_name = f"photo_{uuid.uuid4().hex[:8]}.{detect_image_extension(file_data)}"
        file_name = safe_file_name(str(file_name))

        logger.info(f"Photo upload for twin {twin_id}: {file_name}, {len(file_data)} bytes")

        if not is_valid_image_file(file_name, file_data):
            return error_response("Invalid image file format", 400, headers=headers)

        extension = file_name.rsplit(".", 1)[-1]
        service = PhotoService()
        photo = await service.upload_photo(
            twin_id,
            file_name,
            file_data,
            mime_type_from_extension(extension),
            metadata
        )

        return created_response(photo, headers=headers)

    except ValidationError as e:
        return error_response(str(e), 400, errors=e.as_error_list(), headers=headers)
    except PayloadTooLargeError as e:
        return payload_too_large_response(str(e), headers=headers)
    except Exception as e:
        logger.error(f"Error uploading photo: {str(e)}")
        return error_response(f"Failed to upload photo: {str(e)}", 500, headers=headers)


async def list_photos(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/twins/{twin_id}/photos?category=&search=
    List a twin's photos.
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        if not twin_id:
            return error_response("Twin ID parameter is required", 400, headers=headers)

        category = req.params.get("category")
        search = req.params.get("search")
        logger.info(f"Listing photos for twin {twin_id}, category={category}, search={search}")

        service = PhotoService()
        photos = await service.list_photos(twin_id, category, search)

        return success_response(
            {"photos": photos, "total_count": len(photos)},
            headers=headers
        )

    except Exception as e:
        logger.error(f"Error listing photos: {str(e)}")
        return error_response("Failed to list photos", 500, headers=headers)


async def get_photo(req: func.HttpRequest) -> func.HttpResponse:
    """
    GET /api/twins/{twin_id}/photos/{photo_id}
    Get a single photo.
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        photo_id = req.route_params.get("photo_id")
        if not twin_id or not photo_id:
            return error_response("Twin ID and Photo ID parameters are required", 400, headers=headers)

        service = PhotoService()
        photo = await service.get_photo(twin_id, photo_id)

        return success_response(photo, headers=headers)

    except NotFoundError as e:
        return not_found_response("Photo", str(e), headers=headers)
    except Exception as e:
        logger.error(f"Error getting photo: {str(e)}")
        return error_response("Failed to get photo", 500, headers=headers)


async def update_photo(req: func.HttpRequest) -> func.HttpResponse:
    """
    PUT /api/twins/{twin_id}/photos/{photo_id}
    Update a photo's metadata.
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        photo_id = req.route_params.get("photo_id")
        if not twin_id or not photo_id:
            return error_response("Twin ID and Photo ID parameters are required", 400, headers=headers)

        try:
            body = req.get_json()
        except ValueError:
            return error_response("Invalid JSON body", 400, headers=headers)

        if not isinstance(body, dict):
            return error_response("Invalid photo update data format", 400, headers=headers)

        logger.info(f"Updating photo {photo_id} for twin {twin_id}")

        service = PhotoService()
        photo = await service.update_photo(twin_id, photo_id, body)

        return success_response(photo, headers=headers)

    except NotFoundError as e:
        return not_found_response("Photo", str(e), headers=headers)
    except Exception as e:
        logger.error(f"Error updating photo: {str(e)}")
        return error_response("Failed to update photo", 500, headers=headers)


async def delete_photo(req: func.HttpRequest) -> func.HttpResponse:
    """
    DELETE /api/twins/{twin_id}/photos/{photo_id}
    Delete a photo and its stored file.
    """
    headers = cors_headers(req)
    try:
        twin_id = req.route_params.get("twin_id")
        photo_id = req.route_params.get("photo_id")
        if not twin_id or not photo_id:
            return error_response("Twin ID and Photo ID parameters are required", 400, headers=headers)

        service = PhotoService()
        await service.delete_photo(twin_id, photo_id)

        return no_content_response(headers=headers)

    except NotFoundError as e:
        return not_found_response("Photo", str(e), headers=headers)
    except Exception as e:
        logger.error(f"Error deleting photo: {str(e)}")
        return error_response("Failed to delete photo", 500, headers=headers)


def photos_options(req: func.HttpRequest) -> func.HttpResponse:
    """OPTIONS /api/twins/{twin_id}/photos"""
    return options_response(req)


def photo_by_id_options(req: func.HttpRequest) -> func.HttpResponse:
    """OPTIONS /api/twins/{twin_id}/photos/{photo_id}"""
    return options_response(req)


def register_photo_routes(app: func.FunctionApp):
    """Register all photo-related routes with the function app."""
    anonymous = func.AuthLevel.ANONYMOUS

    app.route(route="twins/{twin_id}/photos", methods=["OPTIONS"], auth_level=anonymous)(photos_options)
    app.route(route="twins/{twin_id}/photos", methods=["POST"], auth_level=anonymous)(upload_photo)
    app.route(route="twins/{twin_id}/photos", methods=["GET"], auth_level=anonymous)(list_photos)

    app.route(route="twins/{twin_id}/photos/{photo_id}", methods=["OPTIONS"], auth_level=anonymous)(photo_by_id_options)
    app.route(route="twins/{twin_id}/photos/{photo_id}", methods=["GET"], auth_level=anonymous)(get_photo)
    app.route(route="twins/{twin_id}/photos/{photo_id}", methods=["PUT"], auth_level=anonymous)(update_photo)
    app.route(route="twins/{twin_id}/photos/{photo_id}", methods=["DELETE"], auth_level=anonymous)(delete_photo)
