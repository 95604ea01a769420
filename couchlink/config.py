import os

from pydantic import BaseModel, field_validator

from couchlink.query import is_valid_url

VERSION = "0.1.0"
USER_AGENT = f"couchlink/{VERSION}"

# Document server connection defaults
COUCHLINK_URL = os.environ.get("COUCHLINK_URL", "http://localhost:5984")
COUCHLINK_TIMEOUT_MS = float(os.environ.get("COUCHLINK_TIMEOUT_MS", "10000"))
COUCHLINK_VERIFY_CERTIFICATE = os.environ.get("COUCHLINK_VERIFY_CERTIFICATE", "true").lower() not in (
    "0",
    "false",
    "no",
)


class ClientConfig(BaseModel):
    """Connection options captured once per client."""

    base_url: str
    request_timeout: float = 10000
    verify_certificate: bool = True

    @field_validator("base_url")
    @classmethod
    def check_base_url(cls, value: str) -> str:
        if not is_valid_url(value):
            raise ValueError(f"base_url must be an http(s) URL with a host and numeric port, got {value!r}")
        return value.rstrip("/")

    @field_validator("request_timeout")
    @classmethod
    def check_timeout(cls, value: float) -> float:
        if value < 0:
            raise ValueError("request_timeout must be >= 0")
        return value

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            base_url=COUCHLINK_URL,
            request_timeout=COUCHLINK_TIMEOUT_MS,
            verify_certificate=COUCHLINK_VERIFY_CERTIFICATE,
        )
