# tests/core/test_exceptions.py

import pytest

from tw_nhi_icc.core.exceptions import NhiIccError, NetworkError, TimeoutError, ResponseError


def test_timeout_error_is_a_network_error():
    error = TimeoutError("request timeout")
    assert isinstance(error, NetworkError)
    assert isinstance(error, NhiIccError)
    assert str(error) == "request timeout"


def test_network_error_renders_original_exception():
    cause = ConnectionRefusedError("refused")
    error = NetworkError("Cannot connect to http://127.0.0.1:1/", original_exception=cause)
    assert error.original_exception is cause
    assert str(error) == "Cannot connect to http://127.0.0.1:1/ Original exception: [ConnectionRefusedError] refused"


def test_network_error_without_cause():
    assert str(NetworkError("boom")) == "boom"


# Failure statuses are deliberately kept out of the NetworkError hierarchy:
# the service was reachable, it just answered with an error.
def test_response_error_is_not_a_network_error():
    error = ResponseError(500, "internal error")
    assert not isinstance(error, NetworkError)
    assert isinstance(error, NhiIccError)
    with pytest.raises(NhiIccError):
        raise error


def test_response_error_message_includes_status_and_body():
    error = ResponseError(404, "not found")
    assert error.status_code == 404
    assert error.body == "not found"
    assert str(error) == "status code = 404, body = 'not found'"


def test_response_error_without_body():
    error = ResponseError(502)
    assert error.body is None
    assert str(error) == "status code = 502, but cannot get the body"


def test_response_error_custom_message():
    assert str(ResponseError(200, message="Malformed card list")) == "Malformed card list"
