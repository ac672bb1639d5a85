# Shared utilities for the TwinFx uploads backend
from .errors import NotFoundError, ValidationError, PayloadTooLargeError
from .multipart import FormPart, MultipartError, parse_multipart
from .supabase_client import get_supabase_client, SupabaseService
from .responses import success_response, error_response, created_response, no_content_response, not_found_response, options_response, cors_headers
from .uploads import get_boundary, read_multipart_form, find_part, form_value, safe_file_name, safe_directory

__all__ = [
    "NotFoundError",
    "ValidationError",
    "PayloadTooLargeError",
    "FormPart",
    "MultipartError",
    "parse_multipart",
    "get_supabase_client",
    "SupabaseService",
    "success_response",
    "error_response",
    "created_response",
    "no_content_response",
    "not_found_response",
    "options_response",
    "cors_headers",
    "get_boundary",
    "read_multipart_form",
    "find_part",
    "form_value",
    "safe_file_name",
    "safe_directory",
]
