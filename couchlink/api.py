"""Free-function calling style: every ``CouchClient`` method as a module
level coroutine taking the base URL first, e.g.
``await api.get_document("http://localhost:5984", "albums", doc_id)``.

Deprecated in favour of a long lived ``CouchClient``. Each call builds a
short lived client and sends exactly the same request the client would.
"""

import functools
import warnings

from couchlink.client import CouchClient
from couchlink.envelope import failure
from couchlink.errors import BadRequestError, ConfigurationError

__all__ = [
    "add_attachment",
    "bulk_docs",
    "copy_document",
    "create_bulk_documents",
    "create_database",
    "create_design_document",
    "create_document",
    "create_index",
    "delete_attachment",
    "delete_database",
    "delete_design_document",
    "delete_document",
    "delete_index",
    "find_documents",
    "get_all_docs",
    "get_all_documents",
    "get_attachment",
    "get_attachment_head",
    "get_database",
    "get_database_head",
    "get_design_document",
    "get_design_document_info",
    "get_document",
    "get_document_head",
    "get_indexes",
    "get_info",
    "get_uuids",
    "get_view",
    "list_databases",
]


def _bind(name: str):
    method = getattr(CouchClient, name)

    @functools.wraps(method)
    async def call(base_url: str, *args, verify_certificate: bool = True, **kwargs):
        warnings.warn(
            f"couchlink.api.{name}() is deprecated, use CouchClient.{name}()",
            DeprecationWarning,
            stacklevel=2,
        )
        try:
            client = CouchClient(base_url, verify_certificate=verify_certificate)
        except ConfigurationError as e:
            raise BadRequestError(failure("bad_request", str(e), 400, "Error: Bad request")) from e
        async with client:
            return await getattr(client, name)(*args, **kwargs)

    return call


for _name in __all__:
    globals()[_name] = _bind(_name)
del _name
