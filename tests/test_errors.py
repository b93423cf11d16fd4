"""Tests for mapping gateway errors to HTTP responses."""

import json

from duckproxy.core.errors import error_response, map_exception
from duckproxy.core.exceptions import (
    AuthError,
    BackendRequestError,
    InvalidRequestError,
    ProxyError,
    TokenAcquisitionError,
)


class TestMapException:
    """Tests for status and payload selection."""

    def test_auth_errors_are_401(self):
        assert map_exception(AuthError("authorization error")) == (401, {"error": "authorization error"})
        assert map_exception(AuthError("apikey error")) == (401, {"error": "apikey error"})

    def test_invalid_request_reports_message(self):
        assert map_exception(InvalidRequestError("Field required")) == (400, {"error": "Field required"})

    def test_token_error_has_fixed_message(self):
        status, payload = map_exception(TokenAcquisitionError("ConnectError; url=http://x"))
        assert status == 400
        assert payload == {"error": "x-vqd-4 get error"}

    def test_backend_error_surfaces_backend_text(self):
        exc = BackendRequestError("chat request returned status 418", body="teapot", status_code=418)
        assert map_exception(exc) == (400, {"error": "api request error", "message": "teapot"})

    def test_unexpected_error_is_generic_400(self):
        assert map_exception(ValueError("bad thing")) == (400, {"error": "bad thing"})

    def test_unexpected_error_without_message_uses_class_name(self):
        assert map_exception(RuntimeError()) == (400, {"error": "RuntimeError"})

    def test_base_proxy_error_is_generic(self):
        assert map_exception(ProxyError("oops")) == (400, {"error": "oops"})


class TestErrorResponse:
    """Tests for the rendered response."""

    def test_renders_json(self):
        response = error_response(AuthError("apikey error"))
        assert response.status_code == 401
        assert response.media_type == "application/json"
        assert json.loads(response.body) == {"error": "apikey error"}
