"""
Unit tests for the middleware pipeline and the access log.
"""

import json
import logging

import pytest

from userapi.http import HTTPRequest, HTTPResponse, HTTPStatus, ok, not_found
from userapi.middleware import LoggingMiddleware, Middleware, MiddlewarePipeline, RequestLog


class Recorder(Middleware):
    def __init__(self, label, calls):
        self.label = label
        self.calls = calls

    def __call__(self, request, next):
        self.calls.append(f"{self.label}:before")
        response = next(request)
        self.calls.append(f"{self.label}:after")
        return response


class ShortCircuit(Middleware):
    def __call__(self, request, next):
        return not_found("blocked")


def make_request(path="/api/users", **kwargs) -> HTTPRequest:
    return HTTPRequest(method="GET", path=path, client_address=("127.0.0.1", 4000), **kwargs)


class TestMiddlewarePipeline:

    def test_onion_order(self):
        calls = []
        pipeline = MiddlewarePipeline().add(Recorder("outer", calls)).add(Recorder("inner", calls))

        def handler(request):
            calls.append("handler")
            return ok()

        pipeline.wrap(handler)(make_request())

        assert calls == ["outer:before", "inner:before", "handler", "inner:after", "outer:after"]
        assert len(pipeline) == 2

    def test_short_circuit(self):
        handler_called = []
        pipeline = MiddlewarePipeline().add(ShortCircuit())

        response = pipeline.wrap(lambda request: handler_called.append(1) or ok())(make_request())

        assert response.status == HTTPStatus.NOT_FOUND
        assert handler_called == []

    def test_empty_pipeline_returns_handler(self):
        handler = lambda request: ok()
        assert MiddlewarePipeline().wrap(handler) is handler

    def test_name(self):
        assert LoggingMiddleware().name == "LoggingMiddleware"


class TestLoggingMiddleware:

    def test_text_log_line(self, caplog):
        middleware = LoggingMiddleware()
        request = make_request(query_params={"pageNumber": ["2"]}, headers={"user-agent": "pytest"})

        with caplog.at_level(logging.INFO, logger="userapi.access"):
            response = middleware(request, lambda r: ok([]))

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 8
        [record] = caplog.records
        assert '"GET /api/users?pageNumber=2" 200' in record.getMessage()
        assert f"rid={request_id}" in record.getMessage()

    def test_json_log_line(self, caplog):
        middleware = LoggingMiddleware(log_format="json")

        with caplog.at_level(logging.INFO, logger="userapi.access"):
            middleware(make_request(), lambda r: not_found())

        entry = json.loads(caplog.records[0].getMessage())
        assert entry["method"] == "GET"
        assert entry["path"] == "/api/users"
        assert entry["status_code"] == 404
        assert entry["client_ip"] == "127.0.0.1"

    def test_echoes_client_request_id(self):
        request = make_request(headers={"x-request-id": "trace-1"})

        response = LoggingMiddleware()(request, lambda r: ok())

        assert response.headers["X-Request-ID"] == "trace-1"

    def test_request_id_can_be_disabled(self):
        response = LoggingMiddleware(include_request_id=False)(make_request(), lambda r: ok())

        assert "X-Request-ID" not in response.headers

    def test_skip_paths(self, caplog):
        middleware = LoggingMiddleware(skip_paths=["/api/users"])

        with caplog.at_level(logging.INFO, logger="userapi.access"):
            middleware(make_request(), lambda r: ok())

        assert caplog.records == []

    def test_handler_error_logged_and_reraised(self, caplog):
        def boom(request):
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="userapi.access"):
            with pytest.raises(RuntimeError):
                LoggingMiddleware()(make_request(), boom)

        assert "RuntimeError: boom" in caplog.records[0].getMessage()


def test_request_log_to_dict_rounds_duration():
    entry = RequestLog(
        request_id="abc", method="GET", path="/", query="", client_ip="",
        user_agent="-", status_code=200, content_length=0,
        duration_ms=1.23456, timestamp="now",
    )

    assert entry.to_dict()["duration_ms"] == 1.23
    assert entry.to_text().startswith('- - - [now] "GET /" 200')
