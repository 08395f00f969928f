"""
Unit tests for HTTP response building.
"""

import pytest
import json

from userapi.http.response import (
    HTTPResponse,
    ResponseBuilder,
    HTTPStatus,
    ok,
    created,
    no_content,
    not_found,
    bad_request,
    method_not_allowed,
    unprocessable_entity,
    internal_error,
    format_http_date,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert (HTTPResponse(status=HTTPStatus.UNPROCESSABLE_ENTITY).status_line
                == "HTTP/1.1 422 Unprocessable Entity")

    def test_to_bytes_includes_headers(self):
        response = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"X-Custom": "value"},
            body=b"test",
        )

        result = response.to_bytes()

        assert result.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"X-Custom: value\r\n" in result
        assert b"Content-Length: 4\r\n" in result
        assert b"Server: userapi/1.0\r\n" in result
        assert b"Date: " in result
        assert result.endswith(b"\r\n\r\ntest")

    def test_to_bytes_custom_server_name(self):
        result = HTTPResponse().to_bytes(server_name="test/2.0")
        assert b"Server: test/2.0\r\n" in result

    def test_to_bytes_without_body_keeps_content_length(self):
        response = ok({"login": "alice"})

        result = response.to_bytes(include_body=False)

        assert f"Content-Length: {len(response.body)}\r\n".encode() in result
        assert result.endswith(b"\r\n\r\n")

    def test_no_content_has_no_body_or_length(self):
        response = HTTPResponse(status=HTTPStatus.NO_CONTENT, body=b"ignored")

        result = response.to_bytes()

        assert b"Content-Length" not in result
        assert result.endswith(b"\r\n\r\n")

    def test_set_header_chaining(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers == {"X-One": "1", "X-Two": "2"}

    def test_json_property(self):
        assert ok({"a": 1}).json == {"a": 1}
        assert no_content().json is None


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_status(self):
        response = ResponseBuilder().status(HTTPStatus.CREATED).build()
        assert response.status == HTTPStatus.CREATED

    def test_json_body(self):
        data = {"login": "zoë", "firstName": "Zoë"}
        response = ResponseBuilder().json(data).build()

        assert response.headers["Content-Type"] == "application/json; charset=utf-8"
        assert json.loads(response.body) == data
        assert "zoë".encode("utf-8") in response.body

    def test_xml_body(self):
        response = ResponseBuilder().xml("UserDto", {"login": "alice"}).build()

        assert response.headers["Content-Type"] == "application/xml; charset=utf-8"
        assert b"<UserDto><Login>alice</Login></UserDto>" in response.body

    def test_text_body(self):
        response = ResponseBuilder().text("Hello").build()

        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert response.body == b"Hello"

    def test_location(self):
        response = ResponseBuilder().location("/api/users/1").build()
        assert response.headers["Location"] == "/api/users/1"

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .header("X-Custom", "value")
            .json({"key": "value"})
            .build())

        assert response.status == HTTPStatus.OK
        assert response.headers["X-Custom"] == "value"
        assert b'"key"' in response.body


class TestConvenienceFunctions:
    """Tests for convenience response functions."""

    def test_ok_without_body(self):
        response = ok()

        assert response.status == HTTPStatus.OK
        assert response.body == b""
        assert "Content-Type" not in response.headers

    def test_ok_with_json(self):
        assert ok([{"login": "alice"}]).json == [{"login": "alice"}]

    def test_created(self):
        response = created("9f1c", location="http://localhost:5000/api/users/9f1c")

        assert response.status == HTTPStatus.CREATED
        assert response.headers["Location"] == "http://localhost:5000/api/users/9f1c"
        assert response.json == "9f1c"

    def test_no_content(self):
        response = no_content()

        assert response.status == HTTPStatus.NO_CONTENT
        assert response.body == b""

    def test_error_bodies(self):
        assert not_found("User not found").json == {"error": "User not found"}
        assert bad_request().json == {"error": "Bad Request"}
        assert internal_error().status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_method_not_allowed(self):
        response = method_not_allowed(["GET", "POST"])

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, POST"
        assert response.json["allowed"] == ["GET", "POST"]

    def test_unprocessable_entity(self):
        response = unprocessable_entity({"login": ["Field required"]})

        assert response.status == HTTPStatus.UNPROCESSABLE_ENTITY
        assert response.json == {
            "error": "Unprocessable Entity",
            "errors": {"login": ["Field required"]},
        }


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.UNPROCESSABLE_ENTITY.phrase == "Unprocessable Entity"

    def test_status_categories(self):
        assert HTTPStatus.CREATED.is_success
        assert HTTPStatus.NOT_FOUND.is_client_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
        assert not HTTPStatus.NO_CONTENT.is_error
        assert not HTTPStatus.NO_CONTENT.allows_body

    def test_int_comparison(self):
        assert HTTPStatus.NOT_FOUND == 404


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        from datetime import datetime, timezone

        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"
