"""Tests for upload helpers: boundary extraction, form reading, file checks."""
import pytest

from shared.errors import PayloadTooLargeError, ValidationError
from shared.multipart import FormPart
from shared.uploads import (
    detect_image_extension,
    find_part,
    form_value,
    get_boundary,
    is_valid_image_file,
    is_valid_pdf_file,
    mime_type_from_extension,
    read_multipart_form,
    safe_directory,
    safe_file_name,
)
from conftest import (
    BOUNDARY,
    JPEG_BYTES,
    PDF_BYTES,
    PNG_BYTES,
    make_multipart_body,
    make_multipart_request,
    make_request,
)


class TestGetBoundary:
    @pytest.mark.parametrize("content_type, expected", [
        ("multipart/form-data; boundary=abc123", "abc123"),
        ('multipart/form-data; boundary="quoted-token"', "quoted-token"),
        ("multipart/form-data; BOUNDARY=Upper; charset=utf-8", "Upper"),
        ("multipart/form-data;boundary=----WebKitFormBoundary7MA4YWxk", "----WebKitFormBoundary7MA4YWxk"),
    ])
    def test_extracts_token(self, content_type, expected):
        assert get_boundary(content_type) == expected

    @pytest.mark.parametrize("content_type", [None, "", "multipart/form-data", "application/json"])
    def test_missing_token(self, content_type):
        assert get_boundary(content_type) == ""


class TestReadMultipartForm:
    def test_decodes_parts(self):
        req = make_multipart_request([
            {"name": "caption", "data": "Hello"},
            {"name": "photo", "filename": "a.png", "content_type": "image/png", "data": PNG_BYTES},
        ])
        parts = read_multipart_form(req)

        assert [p.name for p in parts] == ["caption", "photo"]
        assert parts[1].data == PNG_BYTES

    def test_rejects_other_content_types(self):
        req = make_request(method="POST", body=b"{}", headers={"Content-Type": "application/json"})
        with pytest.raises(ValidationError):
            read_multipart_form(req)

    def test_rejects_missing_boundary(self):
        req = make_request(
            method="POST",
            body=make_multipart_body([{"name": "a", "data": "1"}]),
            headers={"Content-Type": "multipart/form-data"},
        )
        with pytest.raises(ValidationError, match="boundary"):
            read_multipart_form(req)

    def test_enforces_size_limit(self, monkeypatch):
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "64")
        req = make_multipart_request([{"name": "a", "data": "x" * 200}])
        with pytest.raises(PayloadTooLargeError):
            read_multipart_form(req)

    def test_body_without_parts_is_empty(self):
        req = make_request(
            method="POST",
            body=b"nothing to see",
            headers={"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"},
        )
        assert read_multipart_form(req) == []


class TestFormLookup:
    parts = [
        FormPart(name="Description", data=b"", text_value=None),
        FormPart(name="description", data=b"Beach day", text_value="Beach day"),
        FormPart(name="photo", data=b"\x89PNG", file_name="a.png", content_type="image/png"),
    ]

    def test_find_part_by_any_name(self):
        assert find_part(self.parts, "image", "photo").file_name == "a.png"

    def test_find_part_missing(self):
        assert find_part(self.parts, "document") is None

    def test_form_value_skips_empty_values(self):
        assert form_value(self.parts, "Description", "description") == "Beach day"

    def test_form_value_default(self):
        assert form_value(self.parts, "Tags", default="none") == "none"

    def test_form_value_ignores_binary_parts(self):
        assert form_value(self.parts, "photo") is None


class TestImageValidation:
    @pytest.mark.parametrize("file_name, data", [
        ("a.png", PNG_BYTES),
        ("a.JPG", JPEG_BYTES),
        ("a.jpeg", JPEG_BYTES),
        ("a.gif", b"GIF89a" + b"\x00" * 10),
        ("a.bmp", b"BM" + b"\x00" * 10),
        ("a.webp", b"RIFF\x00\x00\x00\x00WEBPVP8 "),
    ])
    def test_accepts_known_images(self, file_name, data):
        assert is_valid_image_file(file_name, data)

    def test_rejects_wrong_extension(self):
        assert not is_valid_image_file("a.exe", PNG_BYTES)

    def test_rejects_unknown_signature(self):
        assert not is_valid_image_file("a.png", b"MZ\x90\x00" + b"\x00" * 10)

    @pytest.mark.parametrize("file_name, data", [
        (None, PNG_BYTES),
        ("a.png", None),
        ("a.png", b""),
        ("a.png", b"\x89PN"),
    ])
    def test_rejects_missing_or_short_input(self, file_name, data):
        assert not is_valid_image_file(file_name, data)

    @pytest.mark.parametrize("data, expected", [
        (JPEG_BYTES, "jpg"),
        (PNG_BYTES, "png"),
        (b"GIF87a....", "gif"),
        (b"RIFF\x10\x00\x00\x00WEBPVP8L", "webp"),
        (b"unknown", "jpg"),
        (b"", "jpg"),
    ])
    def test_detect_image_extension(self, data, expected):
        assert detect_image_extension(data) == expected

    @pytest.mark.parametrize("extension, expected", [
        ("png", "image/png"),
        (".JPEG", "image/jpeg"),
        ("tif", "image/tiff"),
        ("heic", "image/jpeg"),
    ])
    def test_mime_type_from_extension(self, extension, expected):
        assert mime_type_from_extension(extension) == expected


class TestPdfValidation:
    def test_accepts_pdf(self):
        assert is_valid_pdf_file("policy.PDF", PDF_BYTES)

    def test_rejects_wrong_extension(self):
        assert not is_valid_pdf_file("policy.docx", PDF_BYTES)

    def test_rejects_wrong_magic(self):
        assert not is_valid_pdf_file("policy.pdf", PNG_BYTES)

    def test_rejects_empty(self):
        assert not is_valid_pdf_file("policy.pdf", b"")


class TestSafeNames:
    @pytest.mark.parametrize("file_name, expected", [
        ("beach.png", "beach.png"),
        ("../../twin-2/photos/x.png", "x.png"),
        ("C:\\Users\\me\\scan.jpg", "scan.jpg"),
        ("  spaced.png ", "spaced.png"),
    ])
    def test_file_name_keeps_last_component(self, file_name, expected):
        assert safe_file_name(file_name) == expected

    @pytest.mark.parametrize("file_name", ["", "   ", ".", "..", "a/..", "dir/"])
    def test_unusable_file_name(self, file_name):
        with pytest.raises(ValidationError) as exc:
            safe_file_name(file_name, field="fileName")
        assert exc.value.as_error_list()[0]["field"] == "fileName"

    @pytest.mark.parametrize("directory, expected", [
        ("homes/home-9/insurance", "homes/home-9/insurance"),
        ("/homes//home-9/ ", "homes/home-9"),
        ("homes\\home-9", "homes/home-9"),
        ("", ""),
    ])
    def test_directory_normalized(self, directory, expected):
        assert safe_directory(directory) == expected

    @pytest.mark.parametrize("directory", ["..", "../twin-2", "homes/../../twin-2", "homes\\..\\x", "./homes"])
    def test_directory_rejects_relative_segments(self, directory):
        with pytest.raises(ValidationError):
            safe_directory(directory)
