"""Shared request handling for the serverless API handlers and the local server.

Every response is a JSON envelope ``{success, data?, error?, message?, count?}``.
Route functions take a Request and return ``(status, payload)``; exceptions are
mapped to envelopes here, in one place.
"""

import json
import re
import traceback
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from http.server import BaseHTTPRequestHandler
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import ValidationError

from src.utils.errors import InputValidationError, RouteNotFoundError, TerraSaleError
from src.utils.logging import correlation_context, get_structured_logger, log_timing
from src.utils.logging_config import LoggingConfig
from src.utils.settings import get_settings

logger = get_structured_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Correlation-ID",
}

_PARAM = re.compile(r"\{(\w+)(?::(int))?\}")


@dataclass
class Request:
    """Parsed inbound request handed to route functions."""
    method: str
    path: str
    headers: Any
    query: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    raw_body: bytes = b""
    client_ip: Optional[str] = None

    def json(self) -> dict:
        """Request body as a JSON object; 400 when absent or malformed."""
        if not self.raw_body:
            raise InputValidationError("Request body is required")
        try:
            body = json.loads(self.raw_body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise InputValidationError("Request body must be valid JSON")
        if not isinstance(body, dict):
            raise InputValidationError("Request body must be a JSON object")
        return body

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default) if self.headers is not None else default

    def arg(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.query.get(name, default)

    def int_arg(self, name: str, default: int) -> int:
        value = self.query.get(name)
        if value in (None, ""):
            return default
        try:
            return int(value)
        except ValueError:
            raise InputValidationError(f"Query parameter '{name}' must be an integer")


RouteFunc = Callable[[Request], tuple]


@dataclass
class Route:
    method: str
    pattern: str
    func: RouteFunc
    regex: re.Pattern = None
    converters: dict = None

    def __post_init__(self):
        converters = {}

        def _replace(match: re.Match) -> str:
            name, kind = match.group(1), match.group(2)
            if kind == "int":
                converters[name] = int
                return rf"(?P<{name}>\d+)"
            return rf"(?P<{name}>[^/]+)"

        self.regex = re.compile("^" + _PARAM.sub(_replace, self.pattern.rstrip("/")) + "/?$")
        self.converters = converters

    def match(self, path: str) -> Optional[dict]:
        found = self.regex.match(path)
        if not found:
            return None
        return {
            name: self.converters.get(name, str)(value)
            for name, value in found.groupdict().items()
        }


class Router:
    """Ordered route table; first match wins."""

    def __init__(self, routes: Optional[list[Route]] = None):
        self.routes: list[Route] = list(routes or [])

    def add(self, method: str, pattern: str) -> Callable[[RouteFunc], RouteFunc]:
        def decorator(func: RouteFunc) -> RouteFunc:
            self.routes.append(Route(method.upper(), pattern, func))
            return func
        return decorator

    def extend(self, other: "Router") -> "Router":
        self.routes.extend(other.routes)
        return self

    def resolve(self, method: str, path: str) -> tuple[RouteFunc, dict]:
        for candidate in self.routes:
            if candidate.method != method:
                continue
            params = candidate.match(path)
            if params is not None:
                return candidate.func, params
        raise RouteNotFoundError(path)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(payload: Any) -> bytes:
    return json.dumps(payload, default=_json_default, ensure_ascii=False).encode("utf-8")


def ok(data: Any = None, message: Optional[str] = None, count: Optional[int] = None, status: int = 200) -> tuple:
    """Success envelope."""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if count is not None:
        body["count"] = count
    return status, body


def created(data: Any, message: Optional[str] = None) -> tuple:
    return ok(data, message=message, status=201)


def listing(rows: list) -> tuple:
    return ok(rows, count=len(rows))


def fail(status: int, error: str, **extra: Any) -> tuple:
    """Failure envelope."""
    body = {"success": False, "error": error}
    body.update(extra)
    return status, body


def format_validation_error(error: ValidationError) -> str:
    """'field: message; other: message' from a pydantic ValidationError."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "body"
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}")
    return "; ".join(parts)


def error_response(error: Exception) -> tuple:
    """Map any exception raised by a route to a status and envelope."""
    if isinstance(error, ValidationError):
        return fail(400, format_validation_error(error))

    if isinstance(error, TerraSaleError):
        extra = {"path": error.path} if isinstance(error, RouteNotFoundError) else {}
        if error.status_code >= 500:
            logger.error(str(error), error_type=type(error).__name__)
        return fail(error.status_code, str(error), **extra)

    logger.exception("Unhandled error", error_type=type(error).__name__)
    extra: dict[str, Any] = {}
    if not get_settings().is_production:
        extra["message"] = str(error)
        extra["stack"] = traceback.format_exc()
    return fail(500, "Internal server error", **extra)


class ApiHandler(BaseHTTPRequestHandler):
    """
    BaseHTTPRequestHandler that dispatches through a Router.

    Subclasses (one per deployed function) set ``router``.
    """

    router: Router = Router()
    server_version = "TerraSale/1.0"

    def do_GET(self):
        self._dispatch("GET")

    def do_POST(self):
        self._dispatch("POST")

    def do_PUT(self):
        self._dispatch("PUT")

    def do_PATCH(self):
        self._dispatch("PATCH")

    def do_DELETE(self):
        self._dispatch("DELETE")

    def do_OPTIONS(self):
        """CORS preflight."""
        self.send_response(204)
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _read_body(self) -> bytes:
        content_length = int(self.headers.get("Content-Length", 0) or 0)
        return self.rfile.read(content_length) if content_length > 0 else b""

    def handle_api(self, method: str) -> tuple:
        """Resolve and run the route; always returns (status, payload)."""
        parts = urlsplit(self.path)
        path = parts.path.rstrip("/") or "/"
        try:
            func, params = self.router.resolve(method, path)
            request = Request(
                method=method,
                path=path,
                headers=self.headers,
                query={key: values[0] for key, values in parse_qs(parts.query).items()},
                params=params,
                raw_body=self._read_body(),
                client_ip=self.client_address[0] if self.client_address else None,
            )
            return func(request)
        except Exception as e:
            return error_response(e)

    def _dispatch(self, method: str) -> None:
        incoming_id = self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)
        with correlation_context(incoming_id) as correlation_id:
            with log_timing("http_request", logger=logger, method=method, path=urlsplit(self.path).path):
                status, payload = self.handle_api(method)
            self._send_json(status, payload, correlation_id)

    def _send_json(self, status: int, payload: Any, correlation_id: str) -> None:
        body = dumps(payload)
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.send_header(LoggingConfig.LOG_CORRELATION_ID_HEADER, correlation_id)
        for name, value in CORS_HEADERS.items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("HTTP access", detail=format % args)
