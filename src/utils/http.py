"""Shared plumbing for the serverless JSON handlers."""

import asyncio
import json
from http.server import BaseHTTPRequestHandler
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ValidationError

from src.services.basic_auth import CHALLENGE, verify_basic_auth
from src.services.notion_db import close_notion_client
from src.utils.errors import ConfigurationError, NotionError, TaskInputError
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

Response = tuple[int, Any]


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(payload: Any) -> str:
    return json.dumps(payload, default=_encode, ensure_ascii=False)


async def _run_and_close(coro):
    try:
        return await coro
    finally:
        await close_notion_client()


def run_async(coro):
    """Drive a coroutine from a synchronous handler method.

    Each call gets a fresh event loop, so the Notion client opened during it
    is closed before the loop goes away.
    """
    return asyncio.run(_run_and_close(coro))


def validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid value')}"


class JSONRequestHandler(BaseHTTPRequestHandler):
    """Base class for the Vercel serverless handlers.

    Subclasses implement do_GET/do_POST by calling ``self.dispatch(action)``
    where ``action`` returns ``(status, payload)``.
    """

    requires_auth = True

    def send_json(self, status: int, payload: Any, headers: Optional[dict] = None) -> None:
        body = to_json(payload).encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)

    def send_error_json(self, status: int, error: str, detail: Optional[str] = None) -> None:
        payload = {"error": error}
        if detail:
            payload["detail"] = detail
        self.send_json(status, payload)

    def send_unauthorized(self) -> None:
        self.send_response(401)
        self.send_header('Content-Type', 'text/plain; charset=utf-8')
        self.send_header('WWW-Authenticate', CHALLENGE)
        self.end_headers()
        self.wfile.write(b"Authentication required")

    def query_params(self) -> dict[str, str]:
        """Query string as a flat dict; repeated keys keep the last value."""
        parsed = parse_qs(urlparse(self.path).query, keep_blank_values=False)
        return {key: values[-1] for key, values in parsed.items()}

    def read_json(self) -> dict:
        """Request body as a JSON object. Empty body reads as {}."""
        try:
            content_length = int(self.headers.get('Content-Length', 0) or 0)
        except ValueError:
            raise TaskInputError("Invalid Content-Length header")
        try:
            raw_body = self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
        except UnicodeDecodeError:
            raise TaskInputError("Request body must be UTF-8 encoded JSON")
        if not raw_body:
            return {}
        try:
            body = json.loads(raw_body)
        except json.JSONDecodeError:
            raise TaskInputError("Request body must be valid JSON")
        if not isinstance(body, dict):
            raise TaskInputError("Request body must be a JSON object")
        return body

    def check_auth(self) -> bool:
        if not self.requires_auth:
            return True
        if verify_basic_auth(self.headers.get('Authorization')):
            return True
        logger.warning("Basic auth rejected", path=urlparse(self.path).path)
        self.send_unauthorized()
        return False

    def dispatch(self, action: Callable[[], Response]) -> None:
        """Run ``action`` with auth, correlation ID, and error mapping."""
        correlation_id = self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER) if self.headers else None
        with correlation_context(correlation_id):
            if not self.check_auth():
                return
            try:
                status, payload = action()
            except ValidationError as e:
                logger.info("Rejected invalid request", error=validation_message(e))
                self.send_error_json(400, validation_message(e))
                return
            except TaskInputError as e:
                logger.info("Rejected invalid request", error=str(e))
                self.send_error_json(400, str(e), e.detail)
                return
            except ConfigurationError as e:
                logger.error("Configuration error", error=str(e))
                self.send_error_json(500, str(e))
                return
            except NotionError as e:
                logger.error("Notion request failed", error=str(e), detail=e.detail)
                self.send_error_json(500, str(e), e.detail)
                return
            except Exception as e:
                logger.error(f"Unhandled error: {e}", exc_info=True)
                self.send_error_json(500, "internal server error")
                return

            self.send_json(status, payload)
