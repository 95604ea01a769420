from typing import Any

from pydantic import BaseModel


class Envelope(BaseModel):
    """Uniform result of every call: response headers, parsed body, HTTP
    status and a human readable status message."""

    headers: dict[str, str] = {}
    data: Any = None
    status: int
    message: str
    duration: float | None = None

    @property
    def ok(self) -> bool:
        return self.status < 400


def failure(kind: str, reason: str, status: int, message: str) -> Envelope:
    """Envelope for a call that failed on the client side."""
    return Envelope(data={"error": kind, "reason": reason}, status=status, message=message)
