import io

import pytest

from couchlink.errors import InvalidPayloadError
from couchlink.payload import (
    BytesPayload,
    JsonPayload,
    StreamPayload,
    TextPayload,
    as_payload,
    encode_payload,
)


async def _drain(content) -> bytes:
    return b"".join([chunk async for chunk in content])


def test_bytes_payload_headers():
    body = encode_payload(BytesPayload(b"\x00\x01\x02", "image/png"))
    assert body.content == b"\x00\x01\x02"
    assert body.headers == {"content-type": "image/png", "content-length": "3"}


def test_json_payload_headers():
    body = encode_payload(JsonPayload({"name": "Mär", "number": 3}))
    assert body.content == '{"name":"Mär","number":3}'.encode()
    assert body.headers["content-type"] == "application/json"
    assert body.headers["content-length"] == str(len(body.content))


def test_text_payload_headers():
    body = encode_payload(TextPayload("hello", "text/plain"))
    assert body.content == b"hello"
    assert body.headers == {"content-type": "text/plain", "content-length": "5"}


@pytest.mark.asyncio
async def test_stream_payload_from_file():
    body = encode_payload(StreamPayload(io.BytesIO(b"abcdef"), "text/plain", chunk_size=4))
    assert body.headers == {"content-type": "text/plain", "transfer-encoding": "chunked"}
    assert "content-length" not in body.headers
    assert await _drain(body.content) == b"abcdef"


@pytest.mark.asyncio
async def test_stream_payload_from_async_iterable():
    async def chunks():
        yield b"ab"
        yield b"cd"

    body = encode_payload(StreamPayload(chunks()))
    assert await _drain(body.content) == b"abcd"


@pytest.mark.asyncio
async def test_stream_payload_from_list_of_chunks():
    body = encode_payload(StreamPayload([b"x", b"y"]))
    assert await _drain(body.content) == b"xy"


@pytest.mark.parametrize("value", [42, 3.5, True, None, ["a"], {"a": 1}])
def test_non_payload_values_are_rejected(value):
    with pytest.raises(InvalidPayloadError) as exc_info:
        encode_payload(value)
    assert exc_info.value.status == 400
    assert exc_info.value.message == "invalid post data"


def test_cyclic_json_is_rejected():
    doc = {}
    doc["self"] = doc
    with pytest.raises(InvalidPayloadError) as exc_info:
        encode_payload(JsonPayload(doc))
    assert exc_info.value.status == 400
    assert exc_info.value.data["error"] == "invalid_payload"


def test_unserializable_json_is_rejected():
    with pytest.raises(InvalidPayloadError):
        encode_payload(JsonPayload({"when": object()}))


def test_json_payload_requires_an_object():
    with pytest.raises(InvalidPayloadError):
        encode_payload(JsonPayload([1, 2, 3]))


def test_stream_payload_rejects_plain_strings():
    with pytest.raises(InvalidPayloadError):
        encode_payload(StreamPayload("not a stream"))


def test_as_payload_precedence():
    assert isinstance(as_payload(b"raw", "image/png"), BytesPayload)
    assert isinstance(as_payload(io.BytesIO(b"raw")), StreamPayload)
    assert isinstance(as_payload({"a": 1}), JsonPayload)
    text = as_payload("hi", "text/html")
    assert isinstance(text, TextPayload)
    assert text.content_type == "text/html"


@pytest.mark.parametrize("value", [7, False, None, 1.5])
def test_as_payload_rejects_other_values(value):
    with pytest.raises(InvalidPayloadError):
        as_payload(value)


def test_unencodable_text_is_rejected():
    with pytest.raises(InvalidPayloadError) as exc_info:
        encode_payload(TextPayload("\ud800", "text/plain"))
    assert exc_info.value.status == 400
    assert "surrogates" in exc_info.value.data["reason"]


@pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_json_numbers_are_rejected(number):
    with pytest.raises(InvalidPayloadError):
        encode_payload(JsonPayload({"x": number}))
