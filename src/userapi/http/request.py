"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Parses raw HTTP/1.1 request bytes into structured HTTPRequest objects
(RFC 7230). Handlers of the users API never see bytes: they get an
HTTPRequest with the path parameters already filled in by the router.

=============================================================================
WHAT THE USERS API READS FROM A REQUEST
=============================================================================

    PUT /api/users/9f1c...?x=1 HTTP/1.1\r\n          ← method, path, query
    Host: localhost:5000\r\n                        ← base URL for links
    Accept: application/xml\r\n                     ← representation choice
    Content-Type: application/json\r\n
    Content-Length: 52\r\n                          ← body framing
    \r\n
    {"login": "alice", "firstName": "A", ...}       ← DTO or patch document

=============================================================================
PARSING CHALLENGES
=============================================================================

1. LINE ENDINGS: headers end with \r\n\r\n.
2. CASE: header names are case-insensitive, stored lowercase here.
3. BODY: length comes from Content-Length only (no chunked encoding).
4. SECURITY: size limit (413), ".." in the path is rejected (400).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from urllib.parse import parse_qs, urlparse, unquote
import re
import json


class HTTPParseError(Exception):
    """
    Raised when an HTTP request (or its body) cannot be parsed.

    Carries the status code to answer with:

        400 Bad Request                - malformed syntax or JSON
        405 Method Not Allowed         - unknown method
        413 Payload Too Large          - request exceeds size limit
        505 HTTP Version Not Supported - unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         GET, POST, PUT, PATCH, DELETE, HEAD, OPTIONS
        path:           Request path without the query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header name (lowercase) → value
        query_params:   "?a=1&a=2" → {"a": ["1", "2"]}
        body:           Raw body bytes
        path_params:    Filled by the router: "/users/:userId" → {"userId": ...}
        client_address: (ip, port) of the client, used by the access log
        server_address: (host, port) the server is bound to
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)
    server_address: tuple[str, int] = ("", 0)

    _body_json: Optional[Any] = field(default=None, repr=False)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters ("application/json")."""
        ct = self.headers.get("content-type", "")
        return ct.split(";")[0].strip().lower() or None

    @property
    def content_length(self) -> int:
        try:
            return int(self.headers.get("content-length", 0))
        except ValueError:
            return 0

    @property
    def host(self) -> str:
        return self.headers.get("host", "")

    @property
    def accept(self) -> str:
        """The raw Accept header. Empty when the client sent none."""
        return self.headers.get("accept", "")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @property
    def base_url(self) -> str:
        """
        Scheme and authority the client used to reach us.

        Absolute links (Location, pagination) are built from this so they
        point back at whatever host name the client typed:

            Host: api.example.com:5000  →  "http://api.example.com:5000"

        Falls back to the address the server is bound to when the Host
        header is missing (HTTP/1.0 clients).
        """
        host = self.host
        if not host:
            ip, port = self.server_address
            if ip in ("", "0.0.0.0", "::"):
                ip = "localhost"
            host = f"{ip}:{port}" if port else ip
        return f"http://{host}"

    @property
    def has_body(self) -> bool:
        return bool(self.body.strip())

    @property
    def json(self) -> Any:
        """
        The request body decoded as JSON, or None when there is no body.

        Lazy: decoded on first access and cached.

        Raises:
            HTTPParseError: If the body is not valid UTF-8 JSON.
        """
        if self._body_json is None and self.has_body:
            try:
                self._body_json = json.loads(self.body.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise HTTPParseError(f"Invalid JSON body: {e}")
        return self._body_json

    @property
    def is_keep_alive(self) -> bool:
        """
        HTTP/1.1 keeps the connection open unless "Connection: close".
        HTTP/1.0 closes it unless "Connection: keep-alive".
        """
        connection = self.headers.get("connection", "").lower()
        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value of a query parameter."""
        values = self.query_params.get(name, [])
        return values[0] if values else default

    def get_query_int(self, name: str, default: int) -> int:
        """
        First value of a query parameter as an int.

        A missing or non-numeric value yields the default, the same way a
        framework model binder leaves a parameter at its default when the
        query string does not convert:

            ?pageNumber=3    → 3
            ?pageNumber=abc  → default
        """
        value = self.get_query(name)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError:
            return default


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        1. Size check                → 413
        2. Split at \\r\\n\\r\\n        → "Incomplete request"
        3. Request line              → 400 / 405 / 505
        4. Headers                   → lowercase names, duplicates joined
        5. Body by Content-Length
    """

    VALID_METHODS = {
        "GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS",
    }

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 1024 * 1024):
        """
        Args:
            max_request_size: Largest request accepted, in bytes. User
                              documents are tiny, so 1 MB is generous.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
        server_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length header")
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            query_params=query_params,
            body=body[:content_length],
            client_address=client_address,
            server_address=server_address,
        )

    def _parse_request_line(
        self,
        line: str
    ) -> tuple[str, str, Dict[str, list[str]], str]:
        """
        Parse "METHOD SP REQUEST-URI SP HTTP-VERSION".

        Returns:
            Tuple of (method, path, query_params, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if method not in self.VALID_METHODS:
            raise HTTPParseError(f"Invalid method: {method}", status_code=405)

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        parsed = urlparse(uri)
        path = unquote(parsed.path) or "/"
        query_params = parse_qs(parsed.query, keep_blank_values=True)

        if ".." in path:
            raise HTTPParseError("Invalid path: contains ..")

        return method, path, query_params, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Obsolete line folding (a line starting with whitespace) continues
        the previous header. Repeated headers are joined with ", ".
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: skip malformed header lines

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024,
    server_address: tuple[str, int] = ("", 0)
) -> HTTPRequest:
    """Parse one request with a throwaway RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address, server_address)
