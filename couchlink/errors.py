"""Exceptions raised by couchlink.

Every failed call raises a ``CouchError`` subclass whose ``envelope``
holds the same ``headers``/``data``/``status``/``message`` shape a
successful call returns. ``ConfigurationError`` is the only exception
raised outside of a call, when a client is constructed with bad options.
"""

from typing import Any

from couchlink.envelope import Envelope


class ConfigurationError(ValueError):
    """Invalid client options (base URL, timeout)."""


class CouchError(Exception):
    def __init__(self, envelope: Envelope) -> None:
        super().__init__(envelope.message)
        self.envelope = envelope

    @property
    def status(self) -> int:
        return self.envelope.status

    @property
    def message(self) -> str:
        return self.envelope.message

    @property
    def data(self) -> Any:
        return self.envelope.data

    @property
    def headers(self) -> dict[str, str]:
        return self.envelope.headers


class BadRequestError(CouchError):
    """The target URL is malformed; nothing was sent."""


class InvalidPayloadError(CouchError):
    """The request body could not be encoded; nothing was sent."""


class RequestTimeoutError(CouchError):
    """No complete response arrived within the request timeout."""


class TransportError(CouchError):
    """Connection level failure (refused, DNS, reset, TLS)."""


class ResponseParseError(CouchError):
    """The server answered with a body that is not JSON."""


class SinkError(CouchError):
    """The caller's sink failed while an attachment was being written to it."""


class ApplicationError(CouchError):
    """The server answered with an error status (4xx/5xx)."""
