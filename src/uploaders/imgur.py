"""Imgur API uploader implementation."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, cast, final
from urllib.parse import urlparse

import requests
from requests.exceptions import RequestException, Timeout
from requests_toolbelt.multipart.encoder import MultipartEncoder, MultipartEncoderMonitor

from src.config.settings import ClientConfig
from src.models.upload import FORM_FIELDS, DeleteResult, UploadRequest, UploadResult
from src.parsers.image_collector import guess_mime_type
from src.uploaders.errors import (
    EncodingError,
    TransportError,
    UploadCancelledError,
    UploadTimeoutError,
)

# Seconds between cancellation checks while a request is in flight
CANCEL_POLL_INTERVAL = 0.05


def host_header(url: str) -> str:
    """Host header value for a URL, without any userinfo."""
    parsed = urlparse(url)
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    try:
        port = parsed.port
    except ValueError:
        port = None
    return f"{host}:{port}" if port is not None else host


@final
class ImgurUploader:
    """Handles Imgur API integration for image uploads."""

    def __init__(self, config: ClientConfig | None = None, timeout: float | None = None) -> None:
        """Initialize the uploader.

        Args:
            config: Endpoints and credentials (defaults to the public Imgur endpoints)
            timeout: Default timeout in seconds for every request, None to wait forever
        """
        self.config: ClientConfig = config or ClientConfig()
        self.timeout: float | None = timeout

    def setup(self, config_file: Path | None = None) -> None:
        """Load credentials and endpoint overrides from a configuration file.

        Args:
            config_file: dotenv-format file (defaults to config/imgur.env)

        Raises:
            ConfigError: If the file is missing, unreadable or has no ClientID
        """
        self.config = ClientConfig.from_file(config_file)

    def _base_headers(self, url: str) -> dict[str, str]:
        return {
            "Authorization": f"Client-ID {self.config.client_id}",
            "Host": host_header(url),
            "Connection": "keep-alive",
            "Cache-Control": "no-cache",
        }

    def _send(
        self,
        method: str,
        url: str,
        data: bytes | MultipartEncoderMonitor | None,
        headers: dict[str, str],
        timeout: float | None,
    ) -> tuple[int, bytes]:
        try:
            with requests.request(
                method,
                url,
                data=data,
                headers=headers,
                timeout=timeout,
            ) as response:
                return response.status_code, response.content
        except Timeout as e:
            raise UploadTimeoutError(f"{method} {url} timed out: {e}") from e
        except RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    def _make_request(
        self,
        method: str,
        url: str,
        data: bytes | MultipartEncoderMonitor | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> tuple[int, bytes]:
        """Make a single API request.

        The response body is read in full and the connection released before
        returning. With a ``cancel_event`` the exchange runs on a worker
        thread and the caller is released as soon as the event is set, while
        the body is being sent or while waiting for the response. The
        abandoned exchange closes its own connection when it finishes.

        Returns:
            Tuple of (HTTP status code, raw body)

        Raises:
            UploadCancelledError: If cancel_event is set before the response arrives
            UploadTimeoutError: If the request times out
            TransportError: If the request fails for any other reason
        """
        request_headers = self._base_headers(url)
        if headers:
            request_headers.update(headers)
        effective_timeout = timeout if timeout is not None else self.timeout

        if cancel_event is None:
            return self._send(method, url, data, request_headers, effective_timeout)

        if cancel_event.is_set():
            raise UploadCancelledError(f"{method} {url} cancelled before sending")

        outcome: dict[str, object] = {}
        finished = threading.Event()

        def exchange() -> None:
            try:
                outcome["response"] = self._send(method, url, data, request_headers, effective_timeout)
            except Exception as e:
                outcome["error"] = e
            finally:
                finished.set()

        worker = threading.Thread(target=exchange, name=f"imgur-{method.lower()}", daemon=True)
        worker.start()

        while not finished.wait(CANCEL_POLL_INTERVAL):
            if cancel_event.is_set():
                raise UploadCancelledError(f"{method} {url} cancelled while in flight")

        if "error" in outcome:
            raise cast(Exception, outcome["error"])
        return cast("tuple[int, bytes]", outcome["response"])

    def upload(
        self,
        req: UploadRequest,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> UploadResult:
        """Upload a base64-encoded image as a form-encoded POST.

        Args:
            req: The image and its optional metadata
            timeout: Timeout for this call, overriding the uploader default
            cancel_event: Aborts the upload when set, up until the response arrives

        Returns:
            UploadResult holding SuccessData on HTTP 200, ErrorData otherwise

        Raises:
            EncodingError: If the request has no image
            UploadCancelledError: If cancel_event is set before the response arrives
            TransportError: If the request cannot be completed
            DecodingError: If the response is not the expected JSON
        """
        body = req.encode().encode("ascii")

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Content-Length": str(len(body)),
        }
        status_code, content = self._make_request(
            "POST", self.config.upload_url, data=body, headers=headers,
            timeout=timeout, cancel_event=cancel_event,
        )
        return UploadResult.from_response(status_code, content)

    def upload_file(
        self,
        path: Path,
        *,
        album: str = "",
        type: str = "",
        name: str = "",
        title: str = "",
        description: str = "",
        progress_callback: Callable[[int, int], None] | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> UploadResult:
        """Stream an image file as a multipart upload.

        Args:
            path: Image file to upload
            album, type, name, title, description: Optional form fields
            progress_callback: Callback(bytes_sent, total_bytes)
            timeout: Timeout for this call, overriding the uploader default
            cancel_event: Aborts the upload when set, mid-stream or while awaiting the response

        Returns:
            UploadResult holding SuccessData on HTTP 200, ErrorData otherwise

        Raises:
            EncodingError: If the file cannot be opened
            UploadCancelledError: If cancel_event is set before the response arrives
            TransportError: If the request cannot be completed
            DecodingError: If the response is not the expected JSON
        """
        options = {"album": album, "type": type, "name": name, "title": title, "description": description}

        if cancel_event is not None and cancel_event.is_set():
            raise UploadCancelledError("Upload cancelled before sending")

        try:
            image_file = path.open("rb")
        except OSError as e:
            raise EncodingError(f"Failed to open image {path}: {e}") from e

        with image_file:
            form_fields: list[tuple[str, object]] = [
                ("image", (path.name, image_file, guess_mime_type(path)))
            ]
            for key in FORM_FIELDS[1:]:
                if options[key]:
                    form_fields.append((key, options[key]))

            encoder = MultipartEncoder(fields=form_fields)
            total_bytes = encoder.len

            def on_read(monitor: MultipartEncoderMonitor) -> None:
                if cancel_event is not None and cancel_event.is_set():
                    raise UploadCancelledError(
                        f"Upload cancelled after {monitor.bytes_read} of {total_bytes} bytes"
                    )
                if progress_callback:
                    progress_callback(monitor.bytes_read, total_bytes)

            monitor = MultipartEncoderMonitor(encoder, on_read)
            headers = {
                "Content-Type": monitor.content_type,
                "Content-Length": str(total_bytes),
            }
            status_code, content = self._make_request(
                "POST", self.config.upload_url, data=monitor, headers=headers,
                timeout=timeout, cancel_event=cancel_event,
            )

        return UploadResult.from_response(status_code, content)

    def delete(
        self,
        delete_hash: str,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> DeleteResult:
        """Delete an anonymously uploaded image by its delete hash.

        Args:
            delete_hash: Token returned as ``deletehash`` by the upload
            timeout: Timeout for this call, overriding the uploader default
            cancel_event: Abandons the request when set before the response arrives

        Returns:
            DeleteResult, carrying ErrorData when the HTTP status is not 200

        Raises:
            EncodingError: If delete_hash is empty
            UploadCancelledError: If cancel_event is set before the response arrives
            TransportError: If the request cannot be completed
            DecodingError: If the response is not the expected JSON
        """
        if not delete_hash:
            raise EncodingError("Delete hash must not be empty")

        status_code, content = self._make_request(
            "DELETE", self.config.delete_url(delete_hash), timeout=timeout, cancel_event=cancel_event
        )
        return DeleteResult.from_response(status_code, content)


def get_default_uploader() -> ImgurUploader:
    """Return an uploader pointed at the public Imgur endpoints, without credentials."""
    return ImgurUploader(ClientConfig())
