"""Request executors: one HTTP exchange per call, settled as an Envelope or
a CouchError."""

import asyncio
import inspect
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from couchlink.config import USER_AGENT
from couchlink.envelope import Envelope, failure
from couchlink.errors import (
    ApplicationError,
    BadRequestError,
    RequestTimeoutError,
    ResponseParseError,
    SinkError,
    TransportError,
)
from couchlink.payload import Payload, encode_payload
from couchlink.query import is_valid_url
from couchlink.status import resolve_status

logger = logging.getLogger(__name__)


@dataclass
class RequestDescriptor:
    """Everything needed for a single exchange. Built fresh for every call."""

    method: str
    url: str
    status_codes: dict[int, str] = field(default_factory=dict)
    payload: Payload | None = None
    headers: dict[str, str] = field(default_factory=dict)


def _seconds(timeout_ms: float) -> float | None:
    # 0 disables the timeout
    return timeout_ms / 1000 if timeout_ms else None


def _elapsed(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _prepare(request: RequestDescriptor, accept_json: bool) -> tuple[dict[str, str], Any]:
    if not is_valid_url(request.url):
        raise BadRequestError(failure("bad_request", "Bad request", 400, "Error: Bad request"))

    headers = {"user-agent": USER_AGENT}
    if accept_json:
        headers["accept"] = "application/json"
    headers.update(request.headers)

    content = None
    if request.payload is not None:
        body = encode_payload(request.payload)
        headers.update(body.headers)
        content = body.content
    return headers, content


def _timeout_error(request: RequestDescriptor) -> RequestTimeoutError:
    logger.warning("Request timed out: %s %s", request.method, request.url)
    return RequestTimeoutError(failure("timeout", "request timed out", 500, "Error: request timed out"))


def _transport_error(request: RequestDescriptor, exc: Exception) -> TransportError:
    reason = str(exc) or type(exc).__name__
    logger.warning("Request failed: %s %s: %s", request.method, request.url, reason)
    return TransportError(failure("transport", reason, 500, str(exc) or "internal error"))


def check_sink(sink: Any) -> None:
    """Reject objects that cannot receive an attachment body."""
    if not callable(getattr(sink, "write", None)):
        raise TypeError(f"sink must provide a write() method, got {type(sink).__name__}")
    writable = getattr(sink, "writable", None)
    if callable(writable) and not writable():
        raise TypeError("sink is not writable")


async def send(http: httpx.AsyncClient, request: RequestDescriptor, timeout_ms: float) -> Envelope:
    """Issue the request, buffer the whole body and parse it as JSON."""
    headers, content = _prepare(request, accept_json=True)
    timeout = _seconds(timeout_ms)
    started = time.perf_counter()
    try:
        response = await asyncio.wait_for(
            http.request(
                request.method,
                request.url,
                headers=headers,
                content=content,
                timeout=httpx.Timeout(timeout),
            ),
            timeout,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        raise _timeout_error(request) from e
    except httpx.HTTPError as e:
        raise _transport_error(request, e) from e
    except Exception as e:
        # raised by the request body source while it was being sent
        raise _transport_error(request, e) from e

    duration = _elapsed(started)
    response_headers = dict(response.headers)
    try:
        data = json.loads(response.text or "{}")
    except ValueError as e:
        logger.warning("Unparseable response from %s %s: %s", request.method, request.url, e)
        raise ResponseParseError(
            Envelope(
                headers=response_headers,
                data={"error": "parse", "reason": str(e)},
                status=500,
                message=str(e) or "internal error",
                duration=duration,
            )
        ) from e

    envelope = Envelope(
        headers=response_headers,
        data=data,
        status=response.status_code,
        message=resolve_status(response.status_code, request.status_codes),
        duration=duration,
    )
    logger.debug("%s %s -> %d (%.1f ms)", request.method, request.url, envelope.status, duration)
    if response.status_code >= 400:
        raise ApplicationError(envelope)
    return envelope


async def _to_sink(request: RequestDescriptor, operation, *args) -> None:
    try:
        result = operation(*args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error("Sink failed while receiving %s: %s", request.url, e)
        raise SinkError(failure("sink", str(e), 500, str(e) or "stream error")) from e


async def _pipe(http: httpx.AsyncClient, request: RequestDescriptor, headers: dict, sink: Any, timeout) -> Envelope:
    started = time.perf_counter()
    async with http.stream(
        request.method, request.url, headers=headers, timeout=httpx.Timeout(timeout)
    ) as response:
        async for chunk in response.aiter_bytes():
            await _to_sink(request, sink.write, chunk)

        flush = getattr(sink, "flush", None)
        if callable(flush):
            await _to_sink(request, flush)

        return Envelope(
            headers=dict(response.headers),
            status=response.status_code,
            message=resolve_status(response.status_code, request.status_codes),
            duration=_elapsed(started),
        )


async def send_stream(
    http: httpx.AsyncClient, request: RequestDescriptor, sink: Any, timeout_ms: float
) -> Envelope:
    """Issue the request and write the response body into ``sink`` as it
    arrives. The envelope carries no data; the body is in the sink."""
    check_sink(sink)
    headers, _ = _prepare(request, accept_json=False)
    timeout = _seconds(timeout_ms)
    try:
        envelope = await asyncio.wait_for(_pipe(http, request, headers, sink, timeout), timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        raise _timeout_error(request) from e
    except httpx.HTTPError as e:
        raise _transport_error(request, e) from e

    logger.debug("%s %s -> %d (%.1f ms)", request.method, request.url, envelope.status, envelope.duration)
    if envelope.status >= 400:
        raise ApplicationError(envelope)
    return envelope
