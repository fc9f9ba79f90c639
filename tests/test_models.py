"""Tests for upload request encoding and response decoding."""

import base64
import json
from urllib.parse import parse_qs

import pytest

from src.models.upload import (
    DeleteResult,
    ErrorData,
    SuccessData,
    UploadRequest,
    UploadResult,
)
from src.uploaders.errors import DecodingError, EncodingError

SUCCESS_DATA = {
    "id": "orunSTu",
    "title": "A cat",
    "description": "Sitting on a keyboard",
    "datetime": 1495556889,
    "type": "image/gif",
    "animated": True,
    "width": 640,
    "height": 480,
    "size": 42213,
    "views": 7,
    "bandwidth": 295491,
    "vote": "up",
    "favorite": False,
    "nsfw": False,
    "section": "cats",
    "deletehash": "x70po4w7BVvSUzZ",
    "link": "https://i.imgur.com/orunSTu.gif",
    "in_gallery": False,
}


class TestUploadRequestEncoding:
    """Form encoding of upload requests"""

    def test_image_only_request_has_only_image_key(self):
        request = UploadRequest(image="aGVsbG8=")

        assert request.to_form() == {"image": "aGVsbG8="}
        assert list(parse_qs(request.encode())) == ["image"]

    def test_full_request_has_all_six_keys(self):
        request = UploadRequest(
            image="aGVsbG8=",
            album="abc123",
            type="base64",
            name="cat.png",
            title="A cat & a dog",
            description="100% fluffy",
        )

        parsed = parse_qs(request.encode())

        assert parsed == {
            "image": ["aGVsbG8="],
            "album": ["abc123"],
            "type": ["base64"],
            "name": ["cat.png"],
            "title": ["A cat & a dog"],
            "description": ["100% fluffy"],
        }

    def test_reserved_characters_are_percent_encoded(self):
        request = UploadRequest(image="a+b/c=", title="x&y")

        body = request.encode()

        assert body == "image=a%2Bb%2Fc%3D&title=x%26y"

    def test_empty_optional_fields_are_omitted(self):
        request = UploadRequest(image="aGVsbG8=", album="", title="Only title")

        assert set(request.to_form()) == {"image", "title"}

    def test_empty_image_raises(self):
        with pytest.raises(EncodingError):
            UploadRequest(image="").encode()

    def test_from_file_base64_encodes_contents(self, tmp_path):
        image_path = tmp_path / "pixel.png"
        image_path.write_bytes(b"\x89PNG\r\n\x1a\n")

        request = UploadRequest.from_file(image_path, title="Pixel")

        assert base64.b64decode(request.image) == b"\x89PNG\r\n\x1a\n"
        assert request.title == "Pixel"

    def test_from_file_missing_file_raises(self, tmp_path):
        with pytest.raises(EncodingError):
            UploadRequest.from_file(tmp_path / "missing.png")


class TestUploadResultDecoding:
    """Status-code-driven decoding of upload responses"""

    def test_status_200_decodes_success_data(self):
        body = json.dumps({"data": SUCCESS_DATA, "success": True, "status": 200}).encode()

        result = UploadResult.from_response(200, body)

        assert result.ok
        assert result.success is True
        assert result.status == 200
        assert result.http_status == 200
        assert result.data == SuccessData(**SUCCESS_DATA)

    def test_status_400_decodes_error_data(self):
        body = (
            b'{"data":{"error":"bad image","request":"/3/image","method":"POST"},'
            b'"success":false,"status":400}'
        )

        result = UploadResult.from_response(400, body)

        assert not result.ok
        assert result.data == ErrorData(error="bad image", request="/3/image", method="POST")
        assert result.success is False
        assert result.status == 400

    def test_tag_comes_from_http_status_not_payload(self):
        # A success-shaped payload under a non-200 status is still read as an error
        body = json.dumps({"data": SUCCESS_DATA, "success": True, "status": 200}).encode()

        result = UploadResult.from_response(500, body)

        assert isinstance(result.data, ErrorData)
        assert result.data.error == ""

    def test_nulls_and_missing_fields_take_zero_values(self):
        body = json.dumps({
            "data": {"id": "abc", "title": None, "vote": None, "nsfw": None, "link": "https://i.imgur.com/abc.png"},
            "success": True,
            "status": 200,
        }).encode()

        data = UploadResult.from_response(200, body).data

        assert isinstance(data, SuccessData)
        assert data.title == ""
        assert data.vote == ""
        assert data.nsfw is False
        assert data.width == 0
        assert data.deletehash is None

    def test_unknown_fields_are_ignored(self):
        payload = {**SUCCESS_DATA, "account_id": 0, "tags": [], "is_ad": False}
        body = json.dumps({"data": payload, "success": True, "status": 200}).encode()

        assert UploadResult.from_response(200, body).data == SuccessData(**SUCCESS_DATA)

    def test_error_object_uses_message(self):
        body = json.dumps({
            "data": {"error": {"code": 1003, "message": "File type invalid"}, "request": "/3/image", "method": "POST"},
            "success": False,
            "status": 400,
        }).encode()

        data = UploadResult.from_response(400, body).data

        assert isinstance(data, ErrorData)
        assert data.error == "File type invalid"

    def test_non_json_body_raises(self):
        with pytest.raises(DecodingError):
            UploadResult.from_response(200, b"<html>Service Unavailable</html>")

    def test_non_object_envelope_raises(self):
        with pytest.raises(DecodingError):
            UploadResult.from_response(200, b"[1, 2, 3]")

    def test_missing_data_object_raises(self):
        with pytest.raises(DecodingError):
            UploadResult.from_response(200, b'{"success": true, "status": 200}')

    def test_wrong_field_type_raises(self):
        payload = {**SUCCESS_DATA, "width": "wide"}
        body = json.dumps({"data": payload, "success": True, "status": 200}).encode()

        with pytest.raises(DecodingError):
            UploadResult.from_response(200, body)

    def test_bool_is_not_accepted_as_int(self):
        payload = {**SUCCESS_DATA, "size": True}
        body = json.dumps({"data": payload, "success": True, "status": 200}).encode()

        with pytest.raises(DecodingError):
            UploadResult.from_response(200, body)


class TestDeleteResultDecoding:
    """Decoding of delete responses"""

    def test_successful_delete(self):
        result = DeleteResult.from_response(200, b'{"data": true, "success": true, "status": 200}')

        assert result.success is True
        assert result.error is None

    def test_failed_delete_carries_error(self):
        body = b'{"data":{"error":"Unable to find an image with the id, abc","request":"/3/image/abc","method":"DELETE"},"success":false,"status":404}'

        result = DeleteResult.from_response(404, body)

        assert result.success is False
        assert result.http_status == 404
        assert result.error is not None
        assert result.error.method == "DELETE"
