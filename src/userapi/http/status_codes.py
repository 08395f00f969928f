"""
=============================================================================
HTTP STATUS CODES (RFC 7231)
=============================================================================

The status codes this service can answer with, plus their reason phrases.

=============================================================================
WHICH CODE FOR WHICH OUTCOME
=============================================================================

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK          - read, list, HEAD, OPTIONS               │
    │        │ 201 Created     - POST, PUT that created a record         │
    │        │ 204 No Content  - PUT that replaced, PATCH, DELETE        │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request          - body missing or undecodable    │
    │        │ 404 Not Found            - unknown user id / route        │
    │        │ 405 Method Not Allowed   - known path, wrong method       │
    │        │ 408 Request Timeout      - client never finished sending  │
    │        │ 413 Payload Too Large    - request over the size limit    │
    │        │ 422 Unprocessable Entity - well-formed but invalid data   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - handler raised                │
    │        │ 503 Service Unavailable   - worker pool saturated         │
    │        │ 505 HTTP Version Not Supported                            │
    └────────┴───────────────────────────────────────────────────────────┘

400 vs 422: a 400 means we could not even read what the client sent. A 422
means we read it fine, but the content breaks a rule (empty login, login with
punctuation, a patch that points at a field that does not exist).

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes as an IntEnum.

    IntEnum members compare equal to plain integers, so tests and callers
    can write either form:

        >>> HTTPStatus.NOT_FOUND == 404
        True
    """

    # 2xx Success
    OK = 200
    CREATED = 201
    NO_CONTENT = 204

    # 4xx Client Errors
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    REQUEST_TIMEOUT = 408
    PAYLOAD_TOO_LARGE = 413
    UNSUPPORTED_MEDIA_TYPE = 415
    UNPROCESSABLE_ENTITY = 422

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505

    @property
    def phrase(self) -> str:
        """
        Reason phrase for the status line.

            HTTP/1.1 422 Unprocessable Entity
                     ─── ────────────────────
                      │            │
                      │            └── phrase
                      └─────────────── code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self < 500

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx."""
        return self >= 400

    @property
    def allows_body(self) -> bool:
        """204 responses must not carry a body (RFC 7230 section 3.3)."""
        return self != HTTPStatus.NO_CONTENT


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.NOT_ACCEPTABLE: "Not Acceptable",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.UNPROCESSABLE_ENTITY: "Unprocessable Entity",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}
