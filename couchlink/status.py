# Generic meaning of the status codes the document server answers with.
GENERIC_STATUS_CODES: dict[int, str] = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Resource Not Allowed",
    406: "Not Acceptable",
    409: "Conflict",
    412: "Precondition Failed",
    415: "Bad Content Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    500: "Internal Server Error",
}

UNKNOWN_STATUS = "unknown status"


def resolve_status(code: int, overrides: dict[int, str] | None = None) -> str:
    """Endpoint specific message if there is one, else the generic one."""
    if overrides and code in overrides:
        return overrides[code]
    return GENERIC_STATUS_CODES.get(code, UNKNOWN_STATUS)
