"""
multipart/form-data decoder for in-memory request bodies.

The whole body must already be materialized; callers are expected to cap its
size before decoding. Malformed or truncated input never raises, it simply
yields fewer parts.
"""

import re
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

CRLF = b"\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"
NOT_FOUND = -1

TEXT_CONTENT_TYPES = ("application/x-www-form-urlencoded", "application/json")

_NAME_RE = re.compile(r'(?<![\w-])name="([^"]+)"', re.IGNORECASE)
_FILENAME_RE = re.compile(r'(?<![\w-])filename="([^"]+)"', re.IGNORECASE)

_DISPOSITION_PREFIX = "content-disposition:"
_CONTENT_TYPE_PREFIX = "content-type:"


class MultipartError(ValueError):
    """Raised when the decoder is called without a usable boundary."""
    pass


class PartHeaders(NamedTuple):
    name: Optional[str]
    file_name: Optional[str]
    content_type: Optional[str]


@dataclass(frozen=True)
class FormPart:
    """One decoded section of a multipart payload."""

    name: str
    data: bytes
    file_name: Optional[str] = None
    content_type: Optional[str] = None
    text_value: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.file_name is not None


def find_bytes(haystack: bytes, start: int, pattern: bytes) -> int:
    """
    Find the first occurrence of pattern in haystack at or after start.

    Args:
        haystack: Buffer to search
        start: Offset to begin at, within [0, len(haystack)]
        pattern: Non-empty byte sequence to look for

    Returns:
        Index of the match, or NOT_FOUND (-1)
    """
    if not pattern:
        raise ValueError("pattern must not be empty")
    if start < 0 or start > len(haystack):
        raise ValueError(f"start {start} out of range for buffer of {len(haystack)} bytes")

    return haystack.find(pattern, start)


def parse_part_headers(header_block: str) -> PartHeaders:
    """
    Parse the header lines of a single part.

    Only Content-Disposition and Content-Type are understood; other headers
    are ignored. When Content-Disposition appears more than once the last
    line wins.
    """
    name = None
    file_name = None
    content_type = None

    for line in header_block.split("\n"):
        line = line.strip()
        lowered = line.lower()

        if lowered.startswith(_DISPOSITION_PREFIX):
            name_match = _NAME_RE.search(line)
            filename_match = _FILENAME_RE.search(line)
            name = name_match.group(1) if name_match else None
            file_name = filename_match.group(1) if filename_match else None
        elif lowered.startswith(_CONTENT_TYPE_PREFIX):
            content_type = line[len(_CONTENT_TYPE_PREFIX):].strip() or None

    return PartHeaders(name, file_name, content_type)


def split_parts(body: bytes, boundary: str) -> List[Tuple[str, bytes]]:
    """
    Walk a multipart body and cut it into (header block, body bytes) pairs.

    Args:
        body: Full request body
        boundary: Boundary token without the leading dashes

    Returns:
        Segments in the order they appear in the body
    """
    delimiter = b"--" + boundary.encode("utf-8")
    segments: List[Tuple[str, bytes]] = []

    position = find_bytes(body, 0, delimiter)
    if position == NOT_FOUND:
        return segments

    position += len(delimiter)
    while position < len(body):
        if body[position:position + 2] == CRLF:
            position += 2

        headers_end = find_bytes(body, position, HEADER_TERMINATOR)
        if headers_end == NOT_FOUND:
            break

        header_block = body[position:headers_end].decode("utf-8", errors="replace")
        position = headers_end + len(HEADER_TERMINATOR)

        next_boundary = find_bytes(body, position, delimiter)
        if next_boundary == NOT_FOUND:
            break

        content_length = next_boundary - position - len(CRLF)
        if content_length > 0:
            segments.append((header_block, body[position:position + content_length]))

        position = next_boundary + len(delimiter)
        if body[position:position + 2] == b"--":
            break

    return segments


def is_text_content(content_type: Optional[str]) -> bool:
    """Whether a part with this content type should get a text value."""
    if not content_type:
        return True

    content_type = content_type.lower()
    if content_type.startswith("text/"):
        return True
    return any(text_type in content_type for text_type in TEXT_CONTENT_TYPES)


def assemble_part(header_block: str, body: bytes) -> Optional[FormPart]:
    """
    Build a FormPart from a raw segment.

    Returns:
        The part, or None when the segment has no field name and must be
        discarded
    """
    headers = parse_part_headers(header_block)
    if not headers.name:
        return None

    text_value = None
    if body and is_text_content(headers.content_type):
        text_value = body.decode("utf-8", errors="replace")

    return FormPart(
        name=headers.name,
        data=body,
        file_name=headers.file_name,
        content_type=headers.content_type,
        text_value=text_value,
    )


def parse_multipart(body: bytes, boundary: str) -> List[FormPart]:
    """
    Decode a multipart/form-data body.

    Args:
        body: Raw bytes of the request body
        boundary: The boundary token from the Content-Type header

    Returns:
        Named parts in input order

    Raises:
        MultipartError: If boundary is empty
    """
    if not boundary:
        raise MultipartError("A multipart boundary token is required")

    parts = []
    for header_block, content in split_parts(body or b"", boundary):
        part = assemble_part(header_block, content)
        if part is not None:
            parts.append(part)
    return parts
