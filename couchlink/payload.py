"""Request bodies.

The caller states what kind of body it is sending by picking one of the
payload classes below; the transport never guesses from the value's
shape. ``as_payload`` is available for callers that hold a raw value.
"""

import json
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from couchlink.envelope import failure
from couchlink.errors import InvalidPayloadError

INVALID_PAYLOAD = "invalid post data"


def invalid_payload(reason: str) -> InvalidPayloadError:
    return InvalidPayloadError(failure("invalid_payload", reason, 400, INVALID_PAYLOAD))


@dataclass
class EncodedBody:
    headers: dict[str, str]
    content: bytes | AsyncIterator[bytes]


@dataclass
class BytesPayload:
    data: bytes | bytearray | memoryview
    content_type: str = "application/octet-stream"

    def encode(self) -> EncodedBody:
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise invalid_payload(f"expected a bytes-like object, got {type(self.data).__name__}")
        body = bytes(self.data)
        return EncodedBody(
            headers={"content-type": self.content_type, "content-length": str(len(body))},
            content=body,
        )


@dataclass
class StreamPayload:
    """Body read from a file object or (async) iterable of bytes chunks and
    sent with chunked transfer encoding, without buffering."""

    source: Any
    content_type: str = "application/octet-stream"
    chunk_size: int = 64 * 1024

    def encode(self) -> EncodedBody:
        if not (
            isinstance(self.source, (AsyncIterable, Iterable))
            or callable(getattr(self.source, "read", None))
        ) or isinstance(self.source, (str, bytes, bytearray, Mapping)):
            raise invalid_payload(f"not a readable stream: {type(self.source).__name__}")
        return EncodedBody(
            headers={"content-type": self.content_type, "transfer-encoding": "chunked"},
            content=self._chunks(),
        )

    async def _chunks(self) -> AsyncIterator[bytes]:
        if isinstance(self.source, AsyncIterable):
            async for chunk in self.source:
                yield chunk
        elif callable(getattr(self.source, "read", None)):
            while chunk := self.source.read(self.chunk_size):
                yield chunk
        else:
            for chunk in self.source:
                yield chunk


@dataclass
class JsonPayload:
    value: Mapping[str, Any] = field(default_factory=dict)

    def encode(self) -> EncodedBody:
        if not isinstance(self.value, Mapping):
            raise invalid_payload(f"expected a JSON object, got {type(self.value).__name__}")
        try:
            body = json.dumps(self.value, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise invalid_payload(str(e)) from e
        return EncodedBody(
            headers={"content-type": "application/json", "content-length": str(len(body))},
            content=body,
        )


@dataclass
class TextPayload:
    text: str
    content_type: str = "text/plain"

    def encode(self) -> EncodedBody:
        if not isinstance(self.text, str):
            raise invalid_payload(f"expected text, got {type(self.text).__name__}")
        try:
            body = self.text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise invalid_payload(str(e)) from e
        return EncodedBody(
            headers={"content-type": self.content_type, "content-length": str(len(body))},
            content=body,
        )


Payload = BytesPayload | StreamPayload | JsonPayload | TextPayload


def as_payload(value: Any, content_type: str | None = None) -> Payload:
    """Pick a payload class for a raw value: bytes, then readable stream,
    then mapping, then string."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesPayload(value, content_type or "application/octet-stream")
    if isinstance(value, AsyncIterable) or callable(getattr(value, "read", None)):
        return StreamPayload(value, content_type or "application/octet-stream")
    if isinstance(value, Mapping):
        return JsonPayload(value)
    if isinstance(value, str):
        return TextPayload(value, content_type or "text/plain")
    raise invalid_payload(f"unsupported post data: {type(value).__name__}")


def encode_payload(payload: Any) -> EncodedBody:
    if not isinstance(payload, (BytesPayload, StreamPayload, JsonPayload, TextPayload)):
        raise invalid_payload(f"unsupported post data: {type(payload).__name__}")
    return payload.encode()
