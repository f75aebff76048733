"""Streaming multipart reader for image uploads.

The request body is fed chunk by chunk into python-multipart's push parser.
Only the ``image`` file part is buffered, in memory; nothing touches the
filesystem. Checks run while the body streams in:

* the part's declared content type is checked once its headers are parsed,
  before any of its data is kept;
* the running size is checked on every chunk, so an oversized upload is
  rejected as soon as it crosses ``MAX_UPLOAD_BYTES``.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from app.errors import UploadValidationError
from app.models import IMAGE_MIME_PREFIX, MAX_UPLOAD_BYTES, UploadedImage

logger = logging.getLogger(__name__)

IMAGE_FIELD_NAME = "image"

NO_FILE_MESSAGE = "No image file provided"
WRONG_TYPE_MESSAGE = "Only image files are allowed"
TOO_LARGE_MESSAGE = "File too large. Maximum size is 10MB."
UNEXPECTED_FIELD_MESSAGE = "File upload error: Unexpected field"
TRUNCATED_MESSAGE = "File upload error: Unexpected end of form"

_DEFAULT_PART_TYPE = "application/octet-stream"


class _ImagePartCollector:
    """Parser callbacks that keep the single image part and skip the rest."""

    def __init__(self, field_name: str, max_bytes: int) -> None:
        self._field_name = field_name
        self._max_bytes = max_bytes

        self._header_field = bytearray()
        self._header_value = bytearray()
        self._headers: dict[bytes, bytes] = {}
        self._capturing = False

        self._buffer: Optional[bytearray] = None
        self._complete = False
        self._filename = ""
        self._content_type = ""

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
        }

    # ------------------------------------------------------------------
    # Parser callbacks
    # ------------------------------------------------------------------

    def on_part_begin(self) -> None:
        self._headers = {}
        self._capturing = False

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition", b""))
        name = options.get(b"name", b"").decode("latin-1")
        filename = options.get(b"filename")

        if filename is None or name != self._field_name:
            # Plain form field or a file under another name: not ours.
            return
        if self._buffer is not None:
            raise UploadValidationError(UNEXPECTED_FIELD_MESSAGE)

        content_type = self._headers.get(b"content-type", b"").decode("latin-1").strip().lower()
        content_type = content_type or _DEFAULT_PART_TYPE
        if not content_type.startswith(IMAGE_MIME_PREFIX):
            raise UploadValidationError(WRONG_TYPE_MESSAGE)

        self._filename = filename.decode("utf-8", errors="replace")
        self._content_type = content_type
        self._buffer = bytearray()
        self._capturing = True

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if not self._capturing or self._buffer is None:
            return
        if len(self._buffer) + (end - start) > self._max_bytes:
            raise UploadValidationError(TOO_LARGE_MESSAGE)
        self._buffer += data[start:end]

    def on_part_end(self) -> None:
        if self._capturing:
            self._complete = True
        self._capturing = False

    # ------------------------------------------------------------------

    def result(self) -> UploadedImage:
        if self._buffer is None:
            raise UploadValidationError(NO_FILE_MESSAGE)
        if not self._complete:
            raise UploadValidationError(TRUNCATED_MESSAGE)
        return UploadedImage(
            data=bytes(self._buffer),
            filename=self._filename,
            size_bytes=len(self._buffer),
            content_type=self._content_type,
        )


class UploadGateway:  # pylint: disable=too-few-public-methods
    """Reads one image upload from a multipart request body."""

    def __init__(self, *, field_name: str = IMAGE_FIELD_NAME, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
        self._field_name = field_name
        self._max_bytes = max_bytes

    async def receive(self, request: Request) -> UploadedImage:
        """Stream the request body and return the validated image part.

        Raises
        ------
        UploadValidationError
            if the image part is missing, not ``image/*``, larger than the
            ceiling, duplicated, or the body is not parseable multipart.
        """

        content_type, params = parse_options_header(request.headers.get("content-type", ""))
        boundary = params.get(b"boundary")
        if content_type.lower() != b"multipart/form-data" or not boundary:
            # Nothing that could carry a file part.
            raise UploadValidationError(NO_FILE_MESSAGE)

        collector = _ImagePartCollector(self._field_name, self._max_bytes)
        parser = MultipartParser(boundary, collector.callbacks())
        try:
            async for chunk in request.stream():
                if chunk:
                    parser.write(chunk)
            parser.finalize()
        except UploadValidationError as exc:
            logger.info("Upload rejected: %s", exc.message)
            raise
        except MultipartParseError as exc:
            logger.info("Malformed multipart body: %s", exc)
            raise UploadValidationError(f"File upload error: {exc}") from exc

        image = collector.result()
        logger.debug("Received %s (%d bytes, %s)", image.filename, image.size_bytes, image.content_type)
        return image
