"""Test helper functions."""

import base64
import json
from dataclasses import dataclass, field
from email.message import Message
from io import BytesIO
from typing import Any, Dict, Optional


@dataclass
class HandlerResponse:
    """Parsed HTTP response written by a handler."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def basic_auth_header(user: str, password: str) -> str:
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def parse_raw_response(raw: bytes) -> HandlerResponse:
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return HandlerResponse(status=status, headers=headers, body=body)


def call_handler(
    handler_cls,
    method: str = "GET",
    path: str = "/",
    body: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
) -> HandlerResponse:
    """Run one request through a BaseHTTPRequestHandler subclass without a socket."""
    raw_body = b""
    if body is not None:
        if isinstance(body, bytes):
            raw_body = body
        elif isinstance(body, str):
            raw_body = body.encode("utf-8")
        else:
            raw_body = json.dumps(body).encode("utf-8")

    message = Message()
    message["Content-Type"] = "application/json"
    message["Content-Length"] = str(len(raw_body))
    for name, value in (headers or {}).items():
        del message[name]
        message[name] = value

    h = handler_cls.__new__(handler_cls)
    h.rfile = BytesIO(raw_body)
    h.wfile = BytesIO()
    h.headers = message
    h.path = path
    h.command = method
    h.request_version = "HTTP/1.1"
    h.requestline = f"{method} {path} HTTP/1.1"
    h.client_address = ("127.0.0.1", 8000)
    h.server = None
    h.close_connection = True

    getattr(h, f"do_{method}")()
    return parse_raw_response(h.wfile.getvalue())
