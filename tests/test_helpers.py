import pytest

from authy_client.helpers import sanitize_number, system_info, token_is_valid, user_agent
from authy_client.results import AuthyResult, StatusCode, status_from_http


@pytest.mark.parametrize("value, expected", [
    ("123-456", "123456"),
    ("12 34 56", "123456"),
    ("+1 (555) 123-4567", "15551234567"),
    ("../../admin", ""),
    (1234, "1234"),
    (None, ""),
])
def test_sanitize_number(value, expected):
    assert sanitize_number(value) == expected


@pytest.mark.parametrize("token, valid", [
    ("123456", True),
    ("1234567", True),
    ("123 456", True),
    ("1234567890", True),
    ("12345", False),
    ("12345678901", False),
    ("abc", False),
    ("abc123", False),
    (None, False),
])
def test_token_is_valid(token, valid):
    assert token_is_valid(token) is valid


def test_token_is_valid_custom_range():
    assert token_is_valid("1234567", 7, 7)
    assert not token_is_valid("123456", 7, 7)


def test_user_agent_mentions_runtime():
    assert system_info() in user_agent()
    assert user_agent().startswith("AuthyPython/")


@pytest.mark.parametrize("http_status, expected", [
    (401, StatusCode.UNAUTHORIZED),
    (503, StatusCode.SERVICE_UNAVAILABLE),
    (400, StatusCode.BAD_REQUEST),
    (429, StatusCode.BAD_REQUEST),
])
def test_status_from_http(http_status, expected):
    assert status_from_http(http_status) is expected


def test_envelope_from_payload_normalizes_errors():
    result = AuthyResult.from_payload(
        {"success": "false", "message": None, "errors": {"code": 60001}},
        raw_response="raw",
        status=StatusCode.BAD_REQUEST,
    )

    assert result.success is False
    assert result.message == ""
    assert result.errors == {"code": "60001"}
    assert result.raw_response == "raw"


def test_envelope_non_mapping_errors():
    result = AuthyResult.from_payload({"errors": "boom"}, "", StatusCode.BAD_REQUEST)
    assert result.errors == {"message": "boom"}


def test_setup_logging_rejects_unknown_level():
    from authy_client import ConfigurationError
    from authy_client.logging_config import setup_logging

    with pytest.raises(ConfigurationError):
        setup_logging("verbose")
