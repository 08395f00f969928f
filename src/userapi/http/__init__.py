"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Turns raw bytes into HTTPRequest objects, routes them to handlers and
turns the HTTPResponse the handler returns back into bytes.

    request.py       bytes → HTTPRequest (query, headers, JSON body)
    response.py      HTTPResponse, ResponseBuilder, ok()/created()/...
    router.py        (method, path) → handler, url_for()/uri_for()
    media_types.py   Accept negotiation, XML serialization
    status_codes.py  HTTPStatus with reason phrases

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                     # 200 OK
    created,                # 201 Created
    no_content,             # 204 No Content
    error_response,         # any status, {"error": ...}
    bad_request,            # 400 Bad Request
    not_found,              # 404 Not Found
    method_not_allowed,     # 405 Method Not Allowed
    unprocessable_entity,   # 422 Unprocessable Entity
    internal_error,         # 500 Internal Server Error
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus
from .media_types import negotiate, parse_accept, to_xml

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "no_content",
    "error_response",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "unprocessable_entity",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",

    # Content negotiation
    "negotiate",
    "parse_accept",
    "to_xml",
]
