"""Tests for the streaming upload reader."""

from __future__ import annotations

import asyncio

import pytest
from starlette.requests import Request

from app.errors import UploadValidationError
from app.services.upload import (
    NO_FILE_MESSAGE,
    TOO_LARGE_MESSAGE,
    TRUNCATED_MESSAGE,
    WRONG_TYPE_MESSAGE,
    UploadGateway,
)

BOUNDARY = "----testboundary7MA4YWxkTrZu0gW"


def build_body(parts) -> bytes:
    """Encode ``(name, filename, content_type, data)`` tuples as multipart."""
    body = b""
    for name, filename, content_type, data in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        body += f"--{BOUNDARY}\r\nContent-Disposition: {disposition}\r\n".encode()
        if content_type is not None:
            body += f"Content-Type: {content_type}\r\n".encode()
        body += b"\r\n" + data + b"\r\n"
    body += f"--{BOUNDARY}--\r\n".encode()
    return body


class ChunkedRequest:
    """Builds a starlette Request whose body arrives in fixed-size chunks."""

    def __init__(self, body: bytes, chunk_size: int = 8, content_type: str | None = None) -> None:
        self.chunks = [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)] or [b""]
        self.received = 0
        content_type = content_type or f"multipart/form-data; boundary={BOUNDARY}"
        scope = {
            "type": "http",
            "method": "POST",
            "path": "/api/analyze",
            "headers": [(b"content-type", content_type.encode())],
        }
        self.request = Request(scope, self._receive)

    async def _receive(self):
        index = self.received
        self.received += 1
        return {
            "type": "http.request",
            "body": self.chunks[index],
            "more_body": index + 1 < len(self.chunks),
        }


def receive(gateway: UploadGateway, chunked: ChunkedRequest):
    return asyncio.run(gateway.receive(chunked.request))


@pytest.fixture
def gateway() -> UploadGateway:
    return UploadGateway()


class TestUploadGateway:
    def test_small_chunks_reassemble_image(self, gateway):
        data = bytes(range(256)) * 3
        body = build_body([("image", "photo.jpg", "image/jpeg", data)])

        image = receive(gateway, ChunkedRequest(body, chunk_size=7))

        assert image.data == data
        assert image.size_bytes == len(data)
        assert image.filename == "photo.jpg"
        assert image.content_type == "image/jpeg"

    def test_data_containing_crlf_and_dashes(self, gateway):
        data = b"line1\r\n--not-the-boundary\r\n\r\nline3"
        body = build_body([("image", "x.png", "image/png", data)])
        assert receive(gateway, ChunkedRequest(body, chunk_size=5)).data == data

    def test_content_type_is_normalised(self, gateway):
        body = build_body([("image", "x.png", "IMAGE/PNG", b"abc")])
        assert receive(gateway, ChunkedRequest(body)).content_type == "image/png"

    def test_skips_other_fields(self, gateway):
        body = build_body(
            [
                ("comment", None, None, b"first"),
                ("attachment", "doc.pdf", "application/pdf", b"%PDF-1.4"),
                ("image", "x.gif", "image/gif", b"GIF89a"),
            ]
        )
        image = receive(gateway, ChunkedRequest(body))
        assert image.data == b"GIF89a"

    def test_missing_image_part(self, gateway):
        body = build_body([("comment", None, None, b"hello")])
        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, ChunkedRequest(body))
        assert exc_info.value.message == NO_FILE_MESSAGE
        assert exc_info.value.status_code == 400

    def test_image_field_without_filename_is_not_a_file(self, gateway):
        body = build_body([("image", None, None, b"just text")])
        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, ChunkedRequest(body))
        assert exc_info.value.message == NO_FILE_MESSAGE

    def test_non_multipart_request(self, gateway):
        chunked = ChunkedRequest(b'{"image": "..."}', content_type="application/json")
        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, chunked)
        assert exc_info.value.message == NO_FILE_MESSAGE
        assert chunked.received == 0

    def test_missing_part_content_type_is_rejected(self, gateway):
        body = build_body([("image", "x.png", None, b"abc")])
        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, ChunkedRequest(body))
        assert exc_info.value.message == WRONG_TYPE_MESSAGE

    def test_wrong_type_rejected_before_reading_data(self, gateway):
        data = b"x" * 4096
        body = build_body([("image", "notes.txt", "text/plain", data)])
        header_end = body.index(b"\r\n\r\n") + 4
        chunked = ChunkedRequest(body, chunk_size=header_end)

        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, chunked)

        assert exc_info.value.message == WRONG_TYPE_MESSAGE
        assert chunked.received == 1
        assert len(chunked.chunks) > 2

    def test_oversized_rejected_while_streaming(self):
        gateway = UploadGateway(max_bytes=64)
        body = build_body([("image", "big.png", "image/png", b"\x01" * 1024)])
        chunked = ChunkedRequest(body, chunk_size=32)

        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, chunked)

        assert exc_info.value.message == TOO_LARGE_MESSAGE
        assert chunked.received < len(chunked.chunks)

    def test_exact_ceiling_accepted(self):
        gateway = UploadGateway(max_bytes=64)
        body = build_body([("image", "ok.png", "image/png", b"\x01" * 64)])
        assert receive(gateway, ChunkedRequest(body)).size_bytes == 64

    def test_truncated_body(self, gateway):
        body = build_body([("image", "x.png", "image/png", b"\x02" * 200)])
        cut = body.index(b"\r\n\r\n") + 4 + 100
        with pytest.raises(UploadValidationError) as exc_info:
            receive(gateway, ChunkedRequest(body[:cut]))
        assert exc_info.value.message == TRUNCATED_MESSAGE

    def test_mixed_case_multipart_header(self, gateway):
        body = build_body([("image", "x.png", "image/png", b"abc")])
        chunked = ChunkedRequest(body, content_type=f"Multipart/Form-Data; boundary={BOUNDARY}")
        assert receive(gateway, chunked).data == b"abc"
