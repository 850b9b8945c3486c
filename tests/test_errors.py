"""Tests for error classification."""

import pytest
import requests
from unittest.mock import Mock

from bmc_vmedia.errors import (
    GENERIC_HINT,
    INVALID_CREDENTIALS_MESSAGE,
    classify_exception,
    classify_http_error,
)


def make_response(status_code, body=None):
    response = Mock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


def test_unauthorized_gives_credentials_message():
    """Test 401 maps to the fixed credentials message."""
    error = classify_http_error(make_response(401, {"error": {}}))

    assert error.kind == "http"
    assert error.status_code == 401
    assert error.message == INVALID_CREDENTIALS_MESSAGE


def test_extended_info_resolution_is_used():
    """Test the Redfish extended error resolution becomes the message."""
    body = {
        "error": {
            "code": "Base.1.0.GeneralError",
            "@Message.ExtendedInfo": [
                {"MessageId": "Base.1.0.ResourceMissingAtURI", "Resolution": "Provide a valid URI."}
            ],
        }
    }
    error = classify_http_error(make_response(404, body))

    assert error.message == "Provide a valid URI."
    assert error.status_code == 404


def test_status_code_when_no_extended_info():
    """Test a plain status code message without a structured body."""
    assert classify_http_error(make_response(500)).message == "HTTP status code 500"
    assert classify_http_error(make_response(503, {"error": {"code": "x"}})).message == "HTTP status code 503"


def test_http_error_exception_uses_response():
    """Test an HTTPError carrying a response is classified as http."""
    exc = requests.HTTPError("401 Client Error", response=make_response(401))

    error = classify_exception(exc)

    assert error.kind == "http"
    assert error.message == INVALID_CREDENTIALS_MESSAGE


def test_transport_error_gets_generic_hint():
    """Test connection failures get the generic hint."""
    error = classify_exception(requests.ConnectionError("Connection refused"))

    assert error.kind == "transport"
    assert error.status_code is None
    assert error.message == f"Connection refused. {GENERIC_HINT}"


def test_missing_link_is_transport_kind():
    """Test a missing root link is reported like any local failure."""
    error = classify_exception(KeyError("Systems"))

    assert error.kind == "transport"
    assert GENERIC_HINT in error.message
