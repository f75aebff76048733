#!/usr/bin/env python
"""Send a local image to a running analyzer server and print the result."""
from __future__ import annotations

import argparse
import mimetypes
import sys
from pathlib import Path

import httpx

DEFAULT_URL = "http://localhost:3000"


class AnalyzeFailed(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


def analyze_file(path: Path, base_url: str = DEFAULT_URL, *, client: httpx.Client | None = None) -> dict:
    """POST *path* to ``/api/analyze`` and return the decoded JSON body.

    Raises ``AnalyzeFailed`` with the server's ``error`` string on any
    non-2xx response.
    """

    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    own_client = client is None
    client = client or httpx.Client(timeout=120.0)
    try:
        with path.open("rb") as fh:
            resp = client.post(
                f"{base_url.rstrip('/')}/api/analyze",
                files={"image": (path.name, fh, content_type)},
            )
    finally:
        if own_client:
            client.close()

    try:
        body = resp.json()
    except ValueError:
        body = {}
    if resp.status_code >= 400:
        raise AnalyzeFailed(resp.status_code, body.get("error") or resp.text)
    return body


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Analyze an image with the image analyzer API")
    parser.add_argument("image", type=Path)
    parser.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    args = parser.parse_args(argv)

    if not args.image.is_file():
        print(f"File not found: {args.image}", file=sys.stderr)
        return 2

    try:
        body = analyze_file(args.image, args.url)
    except AnalyzeFailed as exc:
        print(f"Error ({exc.status}): {exc.message}", file=sys.stderr)
        return 1
    except httpx.HTTPError as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1

    print(body["analysis"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
