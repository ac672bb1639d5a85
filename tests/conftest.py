"""
Shared fixtures and helpers for the test suite.

FakeSupabaseClient mimics the small part of the supabase-py query builder the
services use (select/insert/update/delete with eq filters) so service logic
can be exercised without a database.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import azure.functions as func
import pytest

BOUNDARY = "----TwinFxTestBoundary7MA4YWxk"
SIGNED_URL = "https://storage.example/signed"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x10" * 28
PDF_BYTES = b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n"


def make_multipart_body(parts, boundary=BOUNDARY):
    """
    Encode parts into a multipart/form-data body.

    Each part is a dict with "name" and "data" and optional "filename",
    "content_type" and "headers" (raw extra header lines). A part with
    "name": None gets no name attribute.
    """
    body = b""
    for part in parts:
        disposition = "Content-Disposition: form-data"
        if part.get("name") is not None:
            disposition += f'; name="{part["name"]}"'
        if part.get("filename") is not None:
            disposition += f'; filename="{part["filename"]}"'

        lines = [disposition]
        if part.get("content_type"):
            lines.append(f"Content-Type: {part['content_type']}")
        lines.extend(part.get("headers", []))

        data = part["data"]
        if isinstance(data, str):
            data = data.encode("utf-8")

        body += f"--{boundary}\r\n".encode()
        body += "\r\n".join(lines).encode("utf-8") + b"\r\n\r\n"
        body += data + b"\r\n"

    body += f"--{boundary}--\r\n".encode()
    return body


def make_request(
    method="GET",
    url="/api/test",
    body=b"",
    headers=None,
    route_params=None,
    params=None,
):
    return func.HttpRequest(
        method=method,
        url=url,
        headers=headers or {},
        params=params or {},
        route_params=route_params or {},
        body=body,
    )


def make_multipart_request(parts, route_params=None, url="/api/test", boundary=BOUNDARY):
    return make_request(
        method="POST",
        url=url,
        body=make_multipart_body(parts, boundary=boundary),
        headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
        route_params=route_params,
    )


class FakeQuery:
    """Chainable stand-in for a supabase-py table query."""

    def __init__(self, table, rows):
        self.table = table
        self.rows = rows
        self.mode = "select"
        self.payload = None
        self.filters = []
        self.calls = []

    def select(self, *columns):
        self.calls.append(("select", columns))
        return self

    def insert(self, payload):
        self.mode = "insert"
        self.payload = payload
        self.calls.append(("insert", payload))
        return self

    def update(self, payload):
        self.mode = "update"
        self.payload = payload
        self.calls.append(("update", payload))
        return self

    def delete(self):
        self.mode = "delete"
        self.calls.append(("delete",))
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        self.calls.append(("eq", column, value))
        return self

    def order(self, column, desc=False):
        self.calls.append(("order", column, desc))
        return self

    def or_(self, expression):
        self.calls.append(("or_", expression))
        return self

    def execute(self):
        if self.mode == "insert":
            return SimpleNamespace(data=[{"id": "generated-id", **self.payload}])

        matched = [
            dict(row) for row in self.rows
            if all(row.get(column) == value for column, value in self.filters)
        ]
        if self.mode == "update":
            matched = [{**row, **self.payload} for row in matched]
        return SimpleNamespace(data=matched)


class FakeSupabaseClient:
    def __init__(self, rows=None):
        self.rows = rows or {}
        self.queries = []
        self.storage = MagicMock()
        self.bucket.create_signed_url.return_value = {"signedURL": SIGNED_URL}

    @property
    def bucket(self):
        return self.storage.from_.return_value

    def table(self, name):
        query = FakeQuery(name, self.rows.get(name, []))
        self.queries.append(query)
        return query

    def queries_for(self, name, mode=None):
        return [q for q in self.queries if q.table == name and (mode is None or q.mode == mode)]


@pytest.fixture
def supabase():
    return FakeSupabaseClient()


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    for key in (
        "MAX_UPLOAD_BYTES",
        "SIGNED_URL_EXPIRY_SECONDS",
        "CORS_ALLOWED_ORIGINS",
        "SUPABASE_STORAGE_BUCKET",
    ):
        monkeypatch.delenv(key, raising=False)
