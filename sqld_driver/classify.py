"""Mapping of raw transport outcomes to the driver error taxonomy.

Every function here is pure: it inspects an exception, a status code or a body and produces the matching
`DriverError`. Nothing is retried, awaited or logged; the transport decides what to do with the result.
"""

from typing import Any, Optional
import asyncio
import json

import aiohttp

from .errors import DecodeError, DriverError, InvalidArgument, ServerError, TransportError

SNIPPET_LEN = 512

def snippet(body: bytes) -> bytes:
    return body[:SNIPPET_LEN]

def classify_exception(exc: BaseException) -> Optional[DriverError]:
    """Classify an exception raised while performing the round-trip.

    Returns None for exceptions that are not transport failures (including task cancellation), which the
    caller should let propagate unchanged.
    """
    if isinstance(exc, DriverError):
        return exc
    # ServerTimeoutError is also an asyncio.TimeoutError, so check timeouts first
    if isinstance(exc, (asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return TransportError("timeout", exc)
    if isinstance(exc, aiohttp.InvalidURL):
        return InvalidArgument(f"Invalid URL: {exc}")
    if isinstance(exc, aiohttp.ClientConnectorError):
        return TransportError("connect", exc)
    if isinstance(exc, (aiohttp.ClientError, OSError)):
        return TransportError("network", exc)
    return None

def classify_status(status: int, body: bytes) -> Optional[ServerError]:
    """Return a `ServerError` for any status outside of 2xx, None otherwise."""
    if 200 <= status < 300:
        return None
    return ServerError(status, error_message(body), snippet(body))

def error_message(body: bytes) -> Optional[str]:
    """Extract a human-readable error message from an error response body."""
    try:
        message = _error_field(json.loads(body))
    except ValueError:
        message = None
    if message is not None:
        return message
    text = body.decode("utf-8", errors="replace").strip()
    return text[:SNIPPET_LEN] or None

def _error_field(body_json: Any) -> Optional[str]:
    if not isinstance(body_json, dict):
        return None
    error = body_json.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if error is None:
        return None
    return str(error)

def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant {name}")

def parse_json(body: bytes) -> Any:
    """Parse a response body, turning malformed payloads into `DecodeError`."""
    if not body.strip():
        raise DecodeError("Response body is empty")
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except ValueError as e:
        raise DecodeError(f"Response body is not valid JSON: {e}", snippet(body))
