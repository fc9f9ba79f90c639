"""Upload request and result data models."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from src.parsers.image_collector import encode_image_base64
from src.uploaders.errors import DecodingError, EncodingError

# Form parameter names accepted by the upload endpoint, in send order
FORM_FIELDS = ("image", "album", "type", "name", "title", "description")


def _typed(payload: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    """Read ``key`` from a JSON object, enforcing its JSON type.

    Missing keys and ``null`` fall back to ``default``.
    """
    value = payload.get(key)
    if value is None:
        return default

    if kind is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, kind)

    if not valid:
        raise DecodingError(
            f"Field '{key}' should be {kind.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class UploadRequest:
    """An image upload, with the image as base64 text."""

    image: str
    album: str = ""
    type: str = ""
    name: str = ""
    title: str = ""
    description: str = ""

    @classmethod
    def from_file(cls, path: Path, **options: str) -> UploadRequest:
        """Build a request from an image file on disk.

        Args:
            path: Path to the image file
            **options: Optional form fields (album, type, name, title, description)

        Returns:
            UploadRequest with the file contents base64-encoded

        Raises:
            EncodingError: If the file cannot be read
        """
        return cls(image=encode_image_base64(path), **options)

    def to_form(self) -> dict[str, str]:
        """Return the form fields to send, leaving out empty optional ones.

        Raises:
            EncodingError: If no image is set
        """
        if not self.image:
            raise EncodingError("Upload request has no image")

        form: dict[str, str] = {}
        for key in FORM_FIELDS:
            value: str = getattr(self, key)
            if value:
                form[key] = value
        return form

    def encode(self) -> str:
        """Return the request as an application/x-www-form-urlencoded body."""
        return urlencode(self.to_form())


@dataclass(frozen=True)
class SuccessData:
    """Image information returned by a successful upload."""

    id: str = ""
    title: str = ""
    description: str = ""
    datetime: int = 0
    type: str = ""
    animated: bool = False
    width: int = 0
    height: int = 0
    size: int = 0
    views: int = 0
    bandwidth: int = 0
    vote: str = ""
    favorite: bool = False
    nsfw: bool = False
    section: str = ""
    deletehash: str | None = None
    link: str = ""
    in_gallery: bool = False

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> SuccessData:
        values: dict[str, Any] = {}
        for field in fields(cls):
            if field.name == "deletehash":
                values[field.name] = _typed(payload, field.name, str, None)
                continue
            kind = type(field.default)
            values[field.name] = _typed(payload, field.name, kind, field.default)
        return cls(**values)


@dataclass(frozen=True)
class ErrorData:
    """Error description returned by a failed request."""

    error: str = ""
    request: str = ""
    method: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> ErrorData:
        error = payload.get("error")
        # Some failures report the error as {"code": ..., "message": ...}
        if isinstance(error, dict):
            error = error.get("message")
            payload = {**payload, "error": error}

        return cls(
            error=_typed(payload, "error", str, ""),
            request=_typed(payload, "request", str, ""),
            method=_typed(payload, "method", str, ""),
        )


def decode_envelope(body: bytes) -> dict[str, Any]:
    """Decode a response body into its JSON envelope object.

    Raises:
        DecodingError: If the body is not a JSON object
    """
    try:
        envelope = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodingError(f"Response is not valid JSON: {e}") from e

    if not isinstance(envelope, dict):
        raise DecodingError(
            f"Response should be a JSON object, got {type(envelope).__name__}"
        )
    return envelope


@dataclass(frozen=True)
class UploadResult:
    """Decoded response of an upload request.

    ``data`` is ``SuccessData`` when the HTTP status was 200 and
    ``ErrorData`` otherwise.
    """

    data: SuccessData | ErrorData
    success: bool
    status: int
    http_status: int

    @property
    def ok(self) -> bool:
        return isinstance(self.data, SuccessData)

    @classmethod
    def from_response(cls, http_status: int, body: bytes) -> UploadResult:
        """Decode an upload response.

        Args:
            http_status: HTTP status code of the response
            body: Raw response body

        Returns:
            UploadResult whose data shape is chosen by ``http_status``

        Raises:
            DecodingError: If the body is not JSON or has the wrong shape
        """
        envelope = decode_envelope(body)

        payload = envelope.get("data")
        if not isinstance(payload, dict):
            raise DecodingError("Response field 'data' should be a JSON object")

        data: SuccessData | ErrorData
        if http_status == 200:
            data = SuccessData.from_dict(payload)
        else:
            data = ErrorData.from_dict(payload)

        return cls(
            data=data,
            success=_typed(envelope, "success", bool, False),
            status=_typed(envelope, "status", int, 0),
            http_status=http_status,
        )


@dataclass(frozen=True)
class DeleteResult:
    """Decoded response of a delete request."""

    success: bool
    status: int
    http_status: int
    error: ErrorData | None = None

    @classmethod
    def from_response(cls, http_status: int, body: bytes) -> DeleteResult:
        envelope = decode_envelope(body)

        error: ErrorData | None = None
        if http_status != 200:
            payload = envelope.get("data")
            if not isinstance(payload, dict):
                raise DecodingError("Response field 'data' should be a JSON object")
            error = ErrorData.from_dict(payload)

        return cls(
            success=_typed(envelope, "success", bool, False),
            status=_typed(envelope, "status", int, 0),
            http_status=http_status,
            error=error,
        )
