"""
Helpers shared by the upload endpoints: reading multipart requests, picking
form fields and checking uploaded file signatures.
"""

import logging
import os
import re
from typing import Iterable, List, Optional
import azure.functions as func
from .config import get_max_upload_bytes
from .errors import PayloadTooLargeError, ValidationError
from .multipart import FormPart, parse_multipart

logger = logging.getLogger(__name__)

_BOUNDARY_RE = re.compile(r"boundary=([^;]+)", re.IGNORECASE)

VALID_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}

IMAGE_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",
}


def get_boundary(content_type: Optional[str]) -> str:
    """
    Extract the boundary token from a multipart Content-Type header.

    Returns:
        The token without surrounding quotes, or "" if there is none
    """
    if not content_type:
        return ""

    match = _BOUNDARY_RE.search(content_type)
    return match.group(1).strip(' "') if match else ""


def read_multipart_form(req: func.HttpRequest) -> List[FormPart]:
    """
    Decode the multipart/form-data body of a request.

    Args:
        req: The HTTP request object

    Returns:
        Decoded form parts in request order

    Raises:
        ValidationError: If the request is not multipart or has no boundary
        PayloadTooLargeError: If the body exceeds MAX_UPLOAD_BYTES
    """
    content_type = req.headers.get("Content-Type", "")
    if "multipart/form-data" not in content_type.lower():
        raise ValidationError("Content-Type must be multipart/form-data")

    boundary = get_boundary(content_type)
    if not boundary:
        raise ValidationError("Invalid boundary in multipart/form-data")

    body = req.get_body() or b""
    max_bytes = get_max_upload_bytes()
    if len(body) > max_bytes:
        raise PayloadTooLargeError(f"Request body too large (max {max_bytes} bytes)")

    parts = parse_multipart(body, boundary)
    logger.info(f"Received multipart data: {len(body)} bytes, {len(parts)} part(s)")
    return parts


def find_part(parts: Iterable[FormPart], *names: str) -> Optional[FormPart]:
    """Return the first part whose field name is one of names."""
    for part in parts:
        if part.name in names:
            return part
    return None


def form_value(parts: Iterable[FormPart], *names: str, default: Optional[str] = None) -> Optional[str]:
    """Text value of the first non-empty field matching one of names."""
    for part in parts:
        if part.name in names and part.text_value:
            return part.text_value
    return default


def safe_file_name(file_name: str, field: str = "file_name") -> str:
    """
    Reduce a client-supplied file name to its last path component.

    Both slash styles count as separators, so a name can never reach
    outside the folder it is stored in.

    Raises:
        ValidationError: If nothing usable is left
    """
    name = os.path.basename((file_name or "").replace("\\", "/")).strip()
    if not name or name in (".", ".."):
        raise ValidationError("Invalid file name", field=field)
    return name


def safe_directory(directory: str, field: str = "file_path") -> str:
    """
    Normalize a client-supplied folder path to "a/b/c" form.

    Raises:
        ValidationError: If any segment is "." or ".."
    """
    segments = [s.strip() for s in (directory or "").replace("\\", "/").split("/")]
    segments = [s for s in segments if s]
    if any(s in (".", "..") for s in segments):
        raise ValidationError("Invalid file path", field=field)
    return "/".join(segments)


def detect_image_extension(data: bytes) -> str:
    """Guess an image extension from its leading bytes."""
    if data[:3] == b"\xff\xd8\xff":
        return "jpg"
    if data[:4] == b"\x89PNG":
        return "png"
    if data[:3] == b"GIF":
        return "gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return "jpg"


def mime_type_from_extension(extension: str) -> str:
    return IMAGE_MIME_TYPES.get(extension.lower().lstrip("."), "image/jpeg")


def _has_image_signature(data: bytes) -> bool:
    if data[:3] == b"\xff\xd8\xff":
        return True
    if data[:4] in (b"\x89PNG", b"GIF8"):
        return True
    if data[:2] == b"BM":
        return True
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP"


def is_valid_image_file(file_name: Optional[str], data: Optional[bytes]) -> bool:
    """
    Check an uploaded image by extension and magic number.

    Files whose signature is not one of JPEG, PNG, GIF, BMP or WEBP are
    rejected even when the extension looks right.
    """
    if not file_name or not data or len(data) < 4:
        return False

    extension = os.path.splitext(file_name)[1].lower()
    if extension not in VALID_IMAGE_EXTENSIONS:
        return False

    return _has_image_signature(data)


def is_valid_pdf_file(file_name: Optional[str], data: Optional[bytes]) -> bool:
    """Check an uploaded document has a .pdf extension and starts with %PDF."""
    if not file_name or not data:
        return False

    if os.path.splitext(file_name)[1].lower() != ".pdf":
        return False

    return data[:4] == b"%PDF"
