"""Async client for the document server's HTTP API.

Every method issues exactly one request and returns an ``Envelope`` for a
successful response. Failures raise a ``CouchError`` subclass whose
``envelope`` has the same shape, e.g.::

    async with CouchClient("http://localhost:5984") as couch:
        await couch.create_database("albums")
        created = await couch.create_document("albums", {"name": "January"})
        try:
            await couch.get_document("albums", "missing")
        except ApplicationError as e:
            print(e.status, e.message)  # 404 Not Found - Document not found
"""

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from couchlink.config import ClientConfig
from couchlink.envelope import Envelope
from couchlink.errors import ConfigurationError
from couchlink.payload import JsonPayload, Payload
from couchlink.query import build_path, build_query, quote_segment
from couchlink.transport import RequestDescriptor, send, send_stream

# Per-endpoint status messages, as documented by the server.
_DOC_WRITE_STATUS = {
    201: "Created – Document created and stored on disk",
    202: "Accepted – Document data accepted, but not yet stored on disk",
    400: "Bad Request – Invalid request body or parameters",
    401: "Unauthorized – Write privileges required",
    404: "Not Found – Specified database or document ID doesn’t exists",
    409: "Conflict – Document with the specified ID already exists or specified revision is not latest for target document",
}
_DOC_READ_STATUS = {
    200: "OK - Request completed successfully",
    304: "Not Modified - Document wasn’t modified since specified revision",
    400: "Bad Request - The format of the request or revision was invalid",
    401: "Unauthorized - Read privilege required",
    404: "Not Found - Document not found",
}
_DOC_DELETE_STATUS = {
    200: "OK - Document successfully removed",
    202: "Accepted - Request was accepted, but changes are not yet stored on disk",
    400: "Bad Request - Invalid request body or parameters",
    401: "Unauthorized - Write privilege required",
    404: "Not Found - Specified database or document ID doesn't exist",
    409: "Conflict - Specified revision is not the latest for target document",
}
_ATTACHMENT_READ_STATUS = {
    200: "OK - Attachment exists",
    304: "Not Modified - Attachment wasn’t modified if ETag equals specified If-None-Match header",
    401: "Unauthorized - Read privilege required",
    404: "Not Found - Specified database, document or attchment was not found",
}


class CouchClient:
    """Bound client: the base URL and connection options are captured once
    and each call builds its own independent request state."""

    def __init__(
        self,
        base_url: str,
        request_timeout: float = 10000,
        verify_certificate: bool = True,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        try:
            config = ClientConfig(
                base_url=base_url,
                request_timeout=request_timeout,
                verify_certificate=verify_certificate,
            )
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

        self.base_url = config.base_url
        self.verify_certificate = config.verify_certificate
        self._request_timeout = config.request_timeout
        self._owns_http = http is None
        self.http = http if http is not None else httpx.AsyncClient(verify=config.verify_certificate)

    @classmethod
    def from_env(cls, http: httpx.AsyncClient | None = None) -> "CouchClient":
        config = ClientConfig.from_env()
        return cls(
            config.base_url,
            request_timeout=config.request_timeout,
            verify_certificate=config.verify_certificate,
            http=http,
        )

    @property
    def request_timeout(self) -> float:
        """Timeout in milliseconds; read when a call starts, 0 disables it."""
        return self._request_timeout

    @request_timeout.setter
    def request_timeout(self, value: float) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigurationError(f"request_timeout must be a number >= 0, got {value!r}")
        self._request_timeout = value

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "CouchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _url(self, *segments: str, query: Mapping[str, Any] | None = None) -> str:
        return f"{self.base_url}{build_path(*segments)}{build_query(query)}"

    async def _request(
        self,
        method: str,
        url: str,
        status_codes: dict[int, str],
        payload: Payload | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        request = RequestDescriptor(
            method=method,
            url=url,
            status_codes=status_codes,
            payload=payload,
            headers=dict(headers or {}),
        )
        return await send(self.http, request, self.request_timeout if timeout is None else timeout)

    # --- server ---

    async def get_info(self, timeout: float | None = None) -> Envelope:
        return await self._request(
            "GET",
            self._url(""),
            {200: "OK - Request completed successfully"},
            timeout=timeout,
        )

    async def list_databases(self, timeout: float | None = None) -> Envelope:
        return await self._request(
            "GET",
            self._url("_all_dbs"),
            {200: "OK - Request completed successfully"},
            timeout=timeout,
        )

    async def get_uuids(self, count: int = 1, timeout: float | None = None) -> Envelope:
        return await self._request(
            "GET",
            self._url("_uuids", query={"count": count or 1}),
            {
                200: "OK - Request completed successfully",
                403: "Forbidden – Requested more UUIDs than is allowed to retrieve",
            },
            timeout=timeout,
        )

    # --- databases ---

    async def create_database(self, db: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "PUT",
            self._url(quote_segment(db)),
            {
                201: "Created - Database created successfully",
                400: "Bad Request - Invalid database name",
                401: "Unauthorized - CouchDB Server Administrator privileges required",
                412: "Precondition Failed - Database already exists",
            },
            timeout=timeout,
        )

    async def get_database(self, db: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "GET",
            self._url(quote_segment(db)),
            {
                200: "OK - Request completed successfully",
                404: "Not Found – Requested database not found",
            },
            timeout=timeout,
        )

    async def get_database_head(self, db: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "HEAD",
            self._url(quote_segment(db)),
            {
                200: "OK - Database exists",
                404: "Not Found – Requested database not found",
            },
            timeout=timeout,
        )

    async def delete_database(self, db: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "DELETE",
            self._url(quote_segment(db)),
            {
                200: "OK - Database removed successfully",
                400: "Bad Request - Invalid database name or forgotten document id by accident",
                401: "Unauthorized - CouchDB Server Administrator privileges required",
                404: "Not Found - Database doesn’t exist",
            },
            timeout=timeout,
        )

    # --- documents ---

    async def get_all_documents(
        self, db: str, query: Mapping[str, Any] | None = None, timeout: float | None = None
    ) -> Envelope:
        return await self._request(
            "GET",
            self._url(quote_segment(db), "_all_docs", query=query),
            {200: "OK - Request completed successfully"},
            timeout=timeout,
        )

    async def get_document_head(
        self,
        db: str,
        doc_id: str,
        query: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        return await self._request(
            "HEAD",
            self._url(quote_segment(db), quote_segment(doc_id), query=query),
            {
                200: "OK - Document exists",
                304: "Not Modified - Document wasn’t modified since specified revision",
                401: "Unauthorized - Read privilege required",
                404: "Not Found - Document not found",
            },
            timeout=timeout,
        )

    async def get_document(
        self,
        db: str,
        doc_id: str,
        query: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        return await self._request(
            "GET",
            self._url(quote_segment(db), quote_segment(doc_id), query=query),
            _DOC_READ_STATUS,
            timeout=timeout,
        )

    async def create_document(
        self,
        db: str,
        doc: Mapping[str, Any],
        doc_id: str | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        """Store a document, or a new revision of one. Without ``doc_id`` the
        server assigns the id."""
        if doc_id:
            return await self._request(
                "PUT",
                self._url(quote_segment(db), quote_segment(doc_id)),
                _DOC_WRITE_STATUS,
                payload=JsonPayload(doc),
                timeout=timeout,
            )
        return await self._request(
            "POST",
            self._url(quote_segment(db)),
            {
                201: "Created – Document created and stored on disk",
                202: "Accepted – Document data accepted, but not yet stored on disk",
                400: "Bad Request – Invalid database name",
                401: "Unauthorized – Write privileges required",
                404: "Not Found – Database doesn’t exists",
                409: "Conflict – A Conflicting Document with same ID already exists",
            },
            payload=JsonPayload(doc),
            timeout=timeout,
        )

    async def delete_document(self, db: str, doc_id: str, rev: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "DELETE",
            self._url(quote_segment(db), quote_segment(doc_id), query={"rev": rev}),
            _DOC_DELETE_STATUS,
            timeout=timeout,
        )

    async def copy_document(
        self,
        db: str,
        doc_id: str,
        destination: str,
        rev: str | None = None,
        destination_rev: str | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        """Copy a document to ``destination``. Overwriting an existing
        destination document requires its ``destination_rev``."""
        target = quote_segment(destination)
        if destination_rev:
            target += build_query({"rev": destination_rev})
        return await self._request(
            "COPY",
            self._url(quote_segment(db), quote_segment(doc_id), query={"rev": rev} if rev else None),
            {
                201: "Created – Document successfully created",
                202: "Accepted – Request was accepted, but changes are not yet stored on disk",
                400: "Bad Request – Invalid request body or parameters",
                401: "Unauthorized – Read or write privileges required",
                404: "Not Found – Specified database, document ID or revision doesn’t exists",
                409: "Conflict – Document with the specified ID already exists or specified revision is not latest for target document",
            },
            headers={"Destination": target},
            timeout=timeout,
        )

    # --- design documents and views ---

    async def get_design_document(
        self,
        db: str,
        doc_id: str,
        query: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        return await self._request(
            "GET",
            self._url(quote_segment(db), "_design", quote_segment(doc_id), query=query),
            _DOC_READ_STATUS,
            timeout=timeout,
        )

    async def get_design_document_info(self, db: str, doc_id: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "GET",
            self._url(quote_segment(db), "_design", quote_segment(doc_id), "_info"),
            {200: "OK - Request completed successfully"},
            timeout=timeout,
        )

    async def create_design_document(
        self, db: str, doc: Mapping[str, Any], doc_id: str, timeout: float | None = None
    ) -> Envelope:
        return await self._request(
            "PUT",
            self._url(quote_segment(db), "_design", quote_segment(doc_id)),
            _DOC_WRITE_STATUS,
            payload=JsonPayload(doc),
            timeout=timeout,
        )

    async def delete_design_document(
        self, db: str, doc_id: str, rev: str, timeout: float | None = None
    ) -> Envelope:
        return await self._request(
            "DELETE",
            self._url(quote_segment(db), "_design", quote_segment(doc_id), query={"rev": rev}),
            _DOC_DELETE_STATUS,
            timeout=timeout,
        )

    async def get_view(
        self,
        db: str,
        doc_id: str,
        view: str,
        query: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        """Query ``view`` of design document ``doc_id``. The ``key``,
        ``keys``, ``startkey`` and ``endkey`` options are sent as JSON."""
        return await self._request(
            "GET",
            self._url(
                quote_segment(db), "_design", quote_segment(doc_id), "_view", quote_segment(view), query=query
            ),
            {200: "OK - Request completed successfully"},
            timeout=timeout,
        )

    # --- bulk ---

    async def create_bulk_documents(
        self,
        db: str,
        docs: Sequence[Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        body = {"docs": list(docs)}
        body.update(options or {})
        return await self._request(
            "POST",
            self._url(quote_segment(db), "_bulk_docs"),
            {
                201: "Created – Document(s) have been created or updated",
                400: "Bad Request – The request provided invalid JSON data",
                417: "Expectation Failed – Occurs when all_or_nothing option set as true and at least one document was rejected by validation function",
                500: "Internal Server Error – Malformed data provided, while it’s still valid JSON",
            },
            payload=JsonPayload(body),
            timeout=timeout,
        )

    bulk_docs = create_bulk_documents
    get_all_docs = get_all_documents

    # --- mango indexes and queries ---

    async def create_index(
        self,
        db: str,
        index: Mapping[str, Any],
        name: str | None = None,
        ddoc: str | None = None,
        type: str = "json",
        partial_filter_selector: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        """Create a query index, e.g. ``index={"fields": ["name"]}``."""
        definition = dict(index)
        if partial_filter_selector is not None:
            definition["partial_filter_selector"] = dict(partial_filter_selector)
        body: dict[str, Any] = {"index": definition, "type": type}
        if name is not None:
            body["name"] = name
        if ddoc is not None:
            body["ddoc"] = ddoc
        return await self._request(
            "POST",
            self._url(quote_segment(db), "_index"),
            {
                200: "OK - Index created successfully or already exists",
                400: "Bad Request - Invalid request",
                401: "Unauthorized - Admin permission required",
                404: "Not Found - Database not found",
                500: "Internal Server Error - Execution error",
            },
            payload=JsonPayload(body),
            timeout=timeout,
        )

    async def get_indexes(self, db: str, timeout: float | None = None) -> Envelope:
        return await self._request(
            "GET",
            self._url(quote_segment(db), "_index"),
            {
                200: "OK - Success",
                400: "Bad Request - Invalid request",
                401: "Unauthorized - Read permission required",
                500: "Internal Server Error - Execution error",
            },
            timeout=timeout,
        )

    async def delete_index(
        self, db: str, ddoc: str, name: str, type: str = "json", timeout: float | None = None
    ) -> Envelope:
        ddoc = ddoc.removeprefix("_design/")
        return await self._request(
            "DELETE",
            self._url(quote_segment(db), "_index", quote_segment(ddoc), quote_segment(type), quote_segment(name)),
            {
                200: "OK - Success",
                400: "Bad Request - Invalid request",
                401: "Unauthorized - Writer permission required",
                404: "Not Found - Index not found",
                500: "Internal Server Error - Execution error",
            },
            timeout=timeout,
        )

    async def find_documents(self, db: str, query: Mapping[str, Any], timeout: float | None = None) -> Envelope:
        """Run a selector query, e.g. ``{"selector": {"number": {"$gt": 6}}}``."""
        return await self._request(
            "POST",
            self._url(quote_segment(db), "_find"),
            {
                200: "OK - Request completed successfully",
                400: "Bad Request - Invalid request",
                401: "Unauthorized - Read permission required",
                404: "Not Found - Requested database not found",
                500: "Internal Server Error - Query execution error",
            },
            payload=JsonPayload(query),
            timeout=timeout,
        )

    # --- attachments ---

    def _attachment_url(self, db: str, doc_id: str, name: str, rev: str | None) -> str:
        return self._url(
            quote_segment(db), quote_segment(doc_id), quote_segment(name), query={"rev": rev} if rev else None
        )

    async def get_attachment_head(
        self, db: str, doc_id: str, name: str, rev: str | None = None, timeout: float | None = None
    ) -> Envelope:
        return await self._request(
            "HEAD",
            self._attachment_url(db, doc_id, name, rev),
            _ATTACHMENT_READ_STATUS,
            timeout=timeout,
        )

    async def get_attachment(
        self,
        db: str,
        doc_id: str,
        name: str,
        sink: Any,
        rev: str | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        """Download an attachment into ``sink``, any object with a
        ``write(bytes)`` method (files, ``io.BytesIO``, async writers)."""
        request = RequestDescriptor(
            method="GET",
            url=self._attachment_url(db, doc_id, name, rev),
            status_codes=_ATTACHMENT_READ_STATUS,
        )
        return await send_stream(self.http, request, sink, self.request_timeout if timeout is None else timeout)

    async def add_attachment(
        self,
        db: str,
        doc_id: str,
        name: str,
        payload: Payload,
        rev: str | None = None,
        timeout: float | None = None,
    ) -> Envelope:
        """Upload an attachment. ``payload`` is a ``BytesPayload``,
        ``TextPayload`` or ``StreamPayload`` carrying the content type."""
        return await self._request(
            "PUT",
            self._attachment_url(db, doc_id, name, rev),
            {
                201: "OK - Created",
                202: "Accepted - Request was but changes are not yet stored on disk",
                401: "Unauthorized - Write privilege required",
                404: "Not Found - Specified database, document or attchment was not found",
                409: "409 Conflict – Document’s revision wasn’t specified or it’s not the latest",
            },
            payload=payload,
            timeout=timeout,
        )

    async def delete_attachment(
        self, db: str, doc_id: str, name: str, rev: str, timeout: float | None = None
    ) -> Envelope:
        return await self._request(
            "DELETE",
            self._attachment_url(db, doc_id, name, rev),
            {
                200: "OK – Attachment successfully removed",
                202: "Accepted - Request was but changes are not yet stored on disk",
                400: "400 Bad Request – Invalid request body or parameters",
                401: "Unauthorized - Write privilege required",
                404: "Not Found - Specified database, document or attchment was not found",
                409: "409 Conflict – Document’s revision wasn’t specified or it’s not the latest",
            },
            timeout=timeout,
        )
