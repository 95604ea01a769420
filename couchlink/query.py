"""Request path and query string construction."""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode, urlsplit

from couchlink.envelope import failure
from couchlink.errors import BadRequestError

# View query options whose values travel as JSON, so that "key=1" and
# 'key="1"' select different rows.
JSON_QUERY_KEYS = ("key", "keys", "startkey", "endkey")


def quote_segment(name: str) -> str:
    """Percent-encode a caller supplied name for use as one path segment."""
    return quote(str(name), safe="")


def build_path(*segments: str) -> str:
    return "/" + "/".join(segments)


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return [_query_value(v) for v in value]
    return value


def build_query(params: Mapping[str, Any] | None) -> str:
    if not params:
        return ""
    encoded = {}
    for name, value in params.items():
        if name in JSON_QUERY_KEYS:
            try:
                encoded[name] = json.dumps(value, separators=(",", ":"), allow_nan=False)
            except (TypeError, ValueError) as e:
                raise BadRequestError(failure("bad_request", f"{name}: {e}", 400, "Error: Bad request")) from e
        else:
            encoded[name] = _query_value(value)
    return "?" + urlencode(encoded, doseq=True)


def is_valid_url(url: str) -> bool:
    """http(s) scheme, a host name and, if given, a numeric port."""
    try:
        parts = urlsplit(url)
        parts.port
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)
