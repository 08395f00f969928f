"""
Unit tests for HTTP request parsing.
"""

import pytest

from userapi.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/api/users"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        request = parse_request(sample_get_request)

        assert request.host == "localhost:5000"
        assert request.user_agent == "pytest"
        assert request.accept == "application/json"
        assert request.is_keep_alive is True

    def test_parse_query_params(self, sample_get_request: bytes):
        request = parse_request(sample_get_request)

        assert request.get_query("pageNumber") == "2"
        assert request.get_query_int("pageSize", 10) == 5
        assert request.get_query("missing") is None
        assert request.get_query("missing", "default") == "default"

    def test_parse_post_with_json_body(self, sample_post_request: bytes):
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.content_type == "application/json"
        assert request.has_body is True
        assert request.json == {"login": "alice", "firstName": "Alice", "lastName": "Liddell"}

    def test_parse_url_encoded_query(self):
        raw = b"GET /api/users?q=hello%20world HTTP/1.1\r\nHost: test\r\n\r\n"
        request = parse_request(raw)

        assert request.path == "/api/users"
        assert request.get_query("q") == "hello world"

    def test_parse_patch_method(self):
        raw = b"PATCH /api/users/1 HTTP/1.1\r\nContent-Length: 2\r\n\r\n[]"
        request = parse_request(raw)

        assert request.method == "PATCH"
        assert request.json == []

    def test_parse_invalid_method(self):
        raw = b"BREW /pot HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 405

    def test_parse_invalid_request_line(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET\r\nHost: test\r\n\r\n")

        assert exc_info.value.status_code == 400

    def test_parse_unsupported_version(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / HTTP/2.0\r\n\r\n")

        assert exc_info.value.status_code == 505

    def test_parse_incomplete_request(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nHost: test\r\n")

    def test_parse_truncated_body(self):
        raw = b"POST /api/users HTTP/1.1\r\nContent-Length: 50\r\n\r\n{}"

        with pytest.raises(HTTPParseError, match="Incomplete body"):
            parse_request(raw)

    def test_parse_invalid_content_length(self):
        raw = b"POST /api/users HTTP/1.1\r\nContent-Length: lots\r\n\r\n{}"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400

    def test_parse_path_traversal_blocked(self):
        raw = b"GET /../../../etc/passwd HTTP/1.1\r\nHost: test\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert "path" in str(exc_info.value).lower()

    def test_parse_request_too_large(self):
        parser = RequestParser(max_request_size=100)
        raw = b"GET / HTTP/1.1\r\n" + b"X-Large: " + b"A" * 200 + b"\r\n\r\n"

        with pytest.raises(HTTPParseError) as exc_info:
            parser.parse(raw)

        assert exc_info.value.status_code == 413

    def test_http_version_keep_alive_defaults(self):
        request_10 = parse_request(b"GET / HTTP/1.0\r\nHost: test\r\n\r\n")
        assert request_10.version == "HTTP/1.0"
        assert request_10.is_keep_alive is False

        request_11 = parse_request(b"GET / HTTP/1.1\r\nHost: test\r\n\r\n")
        assert request_11.version == "HTTP/1.1"
        assert request_11.is_keep_alive is True

    def test_body_limited_to_content_length(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 2\r\n\r\n{}GET / HTTP/1.1"
        request = parse_request(raw)

        assert request.body == b"{}"

    def test_case_insensitive_headers(self):
        raw = b"GET / HTTP/1.1\r\nCONTENT-TYPE: application/json; charset=utf-8\r\n\r\n"
        request = parse_request(raw)

        assert request.content_type == "application/json"
        assert request.get_header("Content-Type") == "application/json; charset=utf-8"

    def test_repeated_headers_are_joined(self):
        raw = b"GET / HTTP/1.1\r\nAccept: application/xml\r\nAccept: application/json\r\n\r\n"
        request = parse_request(raw)

        assert request.accept == "application/xml, application/json"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_default(self):
        request = HTTPRequest(method="GET", path="/")

        assert request.get_header("X-Missing") == ""
        assert request.get_header("X-Missing", "default") == "default"

    def test_get_query_int_falls_back_on_garbage(self):
        request = HTTPRequest(
            method="GET",
            path="/api/users",
            query_params={"pageNumber": ["abc"], "pageSize": [" 7 "]},
        )

        assert request.get_query_int("pageNumber", 1) == 1
        assert request.get_query_int("pageSize", 10) == 7
        assert request.get_query_int("missing", 3) == 3

    def test_json_empty_body_is_none(self):
        request = HTTPRequest(method="POST", path="/api/users", body=b"  ")

        assert request.json is None

    def test_json_invalid_body_raises(self):
        request = HTTPRequest(method="POST", path="/api/users", body=b"{not json")

        with pytest.raises(HTTPParseError) as exc_info:
            request.json

        assert exc_info.value.status_code == 400

    def test_base_url_from_host_header(self):
        request = HTTPRequest(method="GET", path="/", headers={"host": "api.example.com:8000"})

        assert request.base_url == "http://api.example.com:8000"

    def test_base_url_without_host_header_uses_server_address(self):
        request = HTTPRequest(
            method="GET", path="/",
            client_address=("10.1.2.3", 54321),
            server_address=("192.168.0.10", 5000),
        )
        assert request.base_url == "http://192.168.0.10:5000"

    def test_base_url_wildcard_bind_becomes_localhost(self):
        request = HTTPRequest(method="GET", path="/", server_address=("0.0.0.0", 5000))
        assert request.base_url == "http://localhost:5000"

        assert HTTPRequest(method="GET", path="/").base_url == "http://localhost"
