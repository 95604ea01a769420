from couchlink.client import CouchClient
from couchlink.config import VERSION as __version__
from couchlink.config import ClientConfig
from couchlink.envelope import Envelope
from couchlink.errors import (
    ApplicationError,
    BadRequestError,
    ConfigurationError,
    CouchError,
    InvalidPayloadError,
    RequestTimeoutError,
    ResponseParseError,
    SinkError,
    TransportError,
)
from couchlink.payload import BytesPayload, JsonPayload, StreamPayload, TextPayload, as_payload

__all__ = [
    "ApplicationError",
    "BadRequestError",
    "BytesPayload",
    "ClientConfig",
    "ConfigurationError",
    "CouchClient",
    "CouchError",
    "Envelope",
    "InvalidPayloadError",
    "JsonPayload",
    "RequestTimeoutError",
    "ResponseParseError",
    "SinkError",
    "StreamPayload",
    "TextPayload",
    "TransportError",
    "__version__",
    "as_payload",
]
