"""Test helper functions."""

import json
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional


class MockSocket:
    """Socket stand-in: serves a raw request and collects the raw response."""

    def __init__(self, raw_request: bytes):
        self.raw_request = raw_request
        self.sent = BytesIO()

    def makefile(self, *args, **kwargs):
        return BytesIO(self.raw_request)

    def sendall(self, data):
        self.sent.write(data)

    def close(self):
        pass


@dataclass
class HandlerResponse:
    status: int
    headers: Dict[str, str]
    body: Any


def build_raw_request(
    method: str,
    path: str,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """Serialize a request; dict/list bodies are sent as JSON, str/bytes as-is."""
    if body is None:
        payload = b""
    elif isinstance(body, bytes):
        payload = body
    elif isinstance(body, str):
        payload = body.encode("utf-8")
    else:
        payload = json.dumps(body).encode("utf-8")

    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    all_headers = {"Content-Type": "application/json"}
    all_headers.update(headers or {})
    for name, value in all_headers.items():
        lines.append(f"{name}: {value}")
    lines.append(f"Content-Length: {len(payload)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + payload


def parse_raw_response(raw: bytes) -> HandlerResponse:
    head, _, body = raw.partition(b"\r\n\r\n")
    status_line, *header_lines = head.decode("iso-8859-1").split("\r\n")
    status = int(status_line.split(" ")[1])
    headers = {}
    for line in header_lines:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    parsed = json.loads(body.decode("utf-8")) if body else None
    return HandlerResponse(status=status, headers=headers, body=parsed)


def call_handler(
    handler_cls,
    method: str,
    path: str,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> HandlerResponse:
    """Run one request through a BaseHTTPRequestHandler subclass end to end."""
    sock = MockSocket(build_raw_request(method, path, body, headers))
    handler_cls(sock, ("127.0.0.1", 8000), None)
    return parse_raw_response(sock.sent.getvalue())
