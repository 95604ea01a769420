from couchlink.status import GENERIC_STATUS_CODES, UNKNOWN_STATUS, resolve_status


def test_override_wins():
    assert resolve_status(404, {404: "Not Found - Document not found"}) == "Not Found - Document not found"


def test_falls_back_to_generic_table():
    assert resolve_status(409, {404: "Not Found - Document not found"}) == "Conflict"
    assert resolve_status(201) == "Created"


def test_unknown_status():
    assert resolve_status(418) == UNKNOWN_STATUS == "unknown status"
    assert resolve_status(418, {200: "OK"}) == "unknown status"


def test_resolution_is_stable():
    table = {200: "OK - Database exists"}
    for code in (200, 304, 412, 599):
        assert resolve_status(code, table) == resolve_status(code, table)


def test_generic_table_covers_common_codes():
    for code in (200, 201, 202, 304, 400, 401, 403, 404, 405, 406, 409, 412, 415, 416, 417, 500):
        assert code in GENERIC_STATUS_CODES
