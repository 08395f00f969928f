"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses (RFC 7230) for the users API.

=============================================================================
RESPONSE SHAPES USED BY THE API
=============================================================================

    201 Created                        204 No Content
    Location: http://host/api/users/…  (no body, no Content-Type)
    Content-Type: application/json
    "9f1c…"

    200 OK                             422 Unprocessable Entity
    X-Pagination: {"totalCount": 5…}   Content-Type: application/json
    Content-Type: application/json     {"error": "Unprocessable Entity",
    [{"id": …}, …]                      "errors": {"login": ["…"]}}

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.CREATED)
        .header("Location", url)
        .json(str(user.id))
        .build())

Every method except build() returns the builder, so calls chain.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional, Dict, Any, List, Union
import json

from .status_codes import HTTPStatus
from .media_types import JSON, to_xml, content_type_header


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be serialized.

    Handlers return these; the server turns them into bytes with to_bytes().
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """"HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def json(self) -> Any:
        """Decode a JSON body. Handy in tests; None when the body is empty."""
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def to_bytes(
        self,
        server_name: str = "userapi/1.0",
        include_body: bool = True,
    ) -> bytes:
        """
        Serialize to bytes ready for socket.sendall().

            HTTP/1.1 200 OK\\r\\n
            Content-Type: application/json; charset=utf-8\\r\\n
            Content-Length: 27\\r\\n           ← always the real body size
            Date: Sun, 18 Oct 2026 …\\r\\n       ← added when missing
            Server: userapi/1.0\\r\\n           ← added when missing
            \\r\\n
            {"message": "Hello"}               ← skipped for HEAD and 204

        Args:
            server_name: Value for the Server header.
            include_body: False for HEAD requests. Content-Length still
                          describes the body a GET would have returned.
        """
        response_headers = dict(self.headers)

        if self.status.allows_body:
            response_headers.setdefault("Content-Length", str(len(self.body)))
        response_headers.setdefault("Date", format_http_date(datetime.now(timezone.utc)))
        response_headers.setdefault("Server", server_name)

        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in response_headers.items())
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"

        if include_body and self.status.allows_body:
            return head + self.body
        return head


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        ResponseBuilder().status(HTTPStatus.OK).json(data).build()
        ResponseBuilder().status(HTTPStatus.OK).xml("UserDto", data).build()
        ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    # =========================================================================
    # STATUS AND HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def location(self, url: str) -> "ResponseBuilder":
        """Location header, for 201 Created."""
        return self.header("Location", url)

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = "text/plain; charset=utf-8"
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        JSON body. ensure_ascii=False keeps non-ASCII names readable
        instead of \\u-escaping them.
        """
        self._body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self._headers["Content-Type"] = content_type_header(JSON)
        return self

    def xml(self, root_name: str, data: Dict[str, Any]) -> "ResponseBuilder":
        """XML body for a flat document, see media_types.to_xml()."""
        self._body = to_xml(root_name, data)
        self._headers["Content-Type"] = content_type_header("application/xml")
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


def format_http_date(dt: datetime) -> str:
    """
    HTTP-date (RFC 7231): "Sun, 18 Oct 2026 12:00:00 GMT".

    Always GMT, never local time.
    """
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok(user_dto)
#     return not_found()
#     return unprocessable_entity({"login": ["Login should contain ..."]})
#
# Error bodies are always {"error": <message>} so clients can rely on one
# shape; 422 adds the per-field "errors" map.
#
# =============================================================================

def ok(body: Any = None) -> HTTPResponse:
    """200 OK. A None body means no body at all (HEAD, OPTIONS)."""
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if body is not None:
        builder.json(body)
    return builder.build()


def created(body: Any = None, location: Optional[str] = None) -> HTTPResponse:
    """201 Created, optionally with a Location header."""
    builder = ResponseBuilder().status(HTTPStatus.CREATED)
    if body is not None:
        builder.json(body)
    if location:
        builder.location(location)
    return builder.build()


def no_content() -> HTTPResponse:
    """204 No Content."""
    return ResponseBuilder().status(HTTPStatus.NO_CONTENT).build()


def error_response(status: HTTPStatus, message: Optional[str] = None) -> HTTPResponse:
    """Any error status with the standard {"error": ...} body."""
    return (ResponseBuilder()
        .status(status)
        .json({"error": message or status.phrase})
        .build())


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """400: the body was missing or could not be decoded."""
    return error_response(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "Not Found") -> HTTPResponse:
    """404."""
    return error_response(HTTPStatus.NOT_FOUND, message)


def method_not_allowed(allowed_methods: List[str]) -> HTTPResponse:
    """405 with the Allow header RFC 7231 requires."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .json({"error": "Method Not Allowed", "allowed": allowed_methods})
        .build())


def unprocessable_entity(
    errors: Dict[str, List[str]],
    message: str = "Unprocessable Entity",
) -> HTTPResponse:
    """
    422 with per-field error details.

    Args:
        errors: Field name (as the client spelled it) → list of messages.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.UNPROCESSABLE_ENTITY)
        .json({"error": message, "errors": errors})
        .build())


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    """500. Never leaks exception details to the client."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
