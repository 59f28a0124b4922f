"""
Authy API Client Module

This module provides functionality to register users, verify one-time tokens
and deliver codes by SMS or phone call through the Authy REST API.
"""

import enum
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import requests

from .exceptions import ConfigurationError, TransportError, ValidationError
from .helpers import (
    DEFAULT_TOKEN_MAX_LENGTH, DEFAULT_TOKEN_MIN_LENGTH,
    sanitize_number, token_is_valid, user_agent,
)
from .logging_config import log_auth_event
from .results import (
    AuthyResult, PhoneCallResult, RegisterUserResult, RemoveUserResult,
    SendSmsResult, StatusCode, VerifyTokenResult, status_from_http,
)

logger = logging.getLogger(__name__)


class AuthyEnvironment(enum.Enum):
    PRODUCTION = "https://api.authy.com"
    SANDBOX = "http://sandbox-api.authy.com"

    @property
    def base_url(self) -> str:
        return self.value


def default_config_path() -> str:
    """Get the default config file path following XDG standards"""
    config_path = os.environ.get("AUTHY_API_CONFIG")
    if config_path:
        return config_path

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return os.path.join(xdg_config_home, "authy_client", "config.json")

    home = os.environ.get("HOME")
    if home:
        return os.path.join(home, ".config", "authy_client", "config.json")

    return os.path.join(os.getcwd(), ".config", "authy_client", "config.json")


_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AuthyAPIConfig:
    """Configuration for Authy API client"""

    api_key: str
    sandbox: bool = False
    base_url: Optional[str] = None
    timeout: Optional[float] = None
    token_min_length: int = DEFAULT_TOKEN_MIN_LENGTH
    token_max_length: int = DEFAULT_TOKEN_MAX_LENGTH
    locale: str = "en"

    def __post_init__(self):
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError("Api key is missing")
        if not isinstance(self.sandbox, bool):
            raise ConfigurationError(f"sandbox must be true or false, got {self.sandbox!r}")
        if self.base_url is not None and not isinstance(self.base_url, str):
            raise ConfigurationError(f"base_url must be a string, got {self.base_url!r}")
        if self.timeout is not None and (isinstance(self.timeout, bool)
                                         or not isinstance(self.timeout, (int, float))):
            raise ConfigurationError(f"timeout must be a number of seconds, got {self.timeout!r}")
        if not isinstance(self.locale, str) or not self.locale:
            raise ConfigurationError(f"locale must be a non-empty string, got {self.locale!r}")
        for name in ("token_min_length", "token_max_length"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if not 0 < self.token_min_length <= self.token_max_length:
            raise ConfigurationError(
                f"Invalid token length range: {self.token_min_length}-{self.token_max_length}")

    @property
    def environment(self) -> AuthyEnvironment:
        return AuthyEnvironment.SANDBOX if self.sandbox else AuthyEnvironment.PRODUCTION

    def resolve_base_url(self) -> str:
        return (self.base_url or self.environment.base_url).rstrip("/")

    @classmethod
    def from_file(cls, config_path: Optional[str] = None) -> "AuthyAPIConfig":
        """Load configuration from a JSON file"""
        if config_path is None:
            config_path = default_config_path()

        if not os.path.exists(config_path):
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, 'r') as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Could not read config file {config_path}: {e}") from e

        if not isinstance(config_data, dict) or 'api_key' not in config_data:
            raise ConfigurationError("Missing required config field: api_key")

        known = set(cls.__dataclass_fields__)
        unknown = set(config_data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config fields in {config_path}: {', '.join(sorted(unknown))}")

        return cls(**{k: v for k, v in config_data.items() if k in known})

    @classmethod
    def from_env(cls) -> "AuthyAPIConfig":
        """Load configuration from AUTHY_* environment variables"""
        timeout = os.environ.get("AUTHY_TIMEOUT")
        try:
            timeout = float(timeout) if timeout else None
        except ValueError as e:
            raise ConfigurationError(f"Invalid AUTHY_TIMEOUT: {timeout}") from e

        return cls(
            api_key=os.environ.get("AUTHY_API_KEY", ""),
            sandbox=os.environ.get("AUTHY_SANDBOX", "false").lower() in _TRUE_VALUES,
            base_url=os.environ.get("AUTHY_BASE_URL") or None,
            timeout=timeout,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "api_key": self.api_key,
            "sandbox": self.sandbox,
            "base_url": self.base_url,
            "timeout": self.timeout,
            "token_min_length": self.token_min_length,
            "token_max_length": self.token_max_length,
            "locale": self.locale,
        }
        # Remove None values
        return {k: v for k, v in data.items() if v is not None}


class AuthyClient:
    """
    Client for the Authy API

    The client only holds its immutable configuration, so a single instance
    can be shared between threads. Every call opens and closes its own HTTP
    session.
    """

    def __init__(self, config: AuthyAPIConfig):
        self.config = config
        self.base_url = config.resolve_base_url()
        self.user_agent = user_agent()

    def _execute(self, method: str, path: str, params: Optional[Dict[str, str]] = None,
                 data: Optional[Dict[str, str]] = None) -> Tuple[Dict[str, Any], str, Optional[StatusCode]]:
        """
        Send one request and decode the JSON body.

        Returns:
            (payload, raw body, error status). The error status is None for a
            2xx response, otherwise it is derived from the HTTP status code.
        """
        query = {"api_key": self.config.api_key}
        if params:
            query.update(params)

        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} params={sorted(k for k in query if k != 'api_key')}")

        try:
            with requests.Session() as session:
                response = session.request(
                    method,
                    url,
                    params=query,
                    data=data,
                    headers={"User-Agent": self.user_agent},
                    timeout=self.config.timeout,
                )
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError(f"Request to {path} failed: {e}") from e

        body = response.text
        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"{method} {path} returned HTTP {response.status_code} with an unparsable body")
            raise TransportError(
                f"Could not parse response from {path} (HTTP {response.status_code})") from e

        if not isinstance(payload, dict):
            raise TransportError(f"Unexpected response from {path} (HTTP {response.status_code}): {body[:200]}")

        if 200 <= response.status_code < 300:
            return payload, body, None

        logger.debug(f"{method} {path} returned HTTP {response.status_code}")
        return payload, body, status_from_http(response.status_code)

    def _sanitized_user_id(self, user_id) -> str:
        sanitized = sanitize_number(user_id)
        if not sanitized:
            raise ValidationError("User id is missing")
        return sanitized

    def register_user(self, email: str, cellphone: str, country_code: int = 1) -> RegisterUserResult:
        """Register a user and return the Authy id assigned to it"""
        form = {
            "user[email]": email,
            "user[cellphone]": cellphone,
            "user[country_code]": str(country_code),
        }

        payload, body, error_status = self._execute("POST", "/protected/json/users/new", data=form)
        result = RegisterUserResult.from_payload(payload, body, error_status or StatusCode.SUCCESS)

        log_auth_event("register_user", result.status, result.success, user_id=result.user_id,
                       error=None if result.ok else result.message)
        return result

    def remove_user(self, user_id: str) -> RemoveUserResult:
        """Remove a user. Removal is always forced."""
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("User id is missing")

        path = f"/protected/json/users/{quote(user_id.strip(), safe='')}/remove"
        payload, body, error_status = self._execute("POST", path, params={"force": "true"}, data={})
        result = RemoveUserResult.from_payload(payload, body, error_status or StatusCode.SUCCESS)

        log_auth_event("remove_user", result.status, result.success, user_id=user_id.strip(),
                       error=None if result.ok else result.message)
        return result

    def verify_token(self, user_id, token, force: bool = False) -> VerifyTokenResult:
        """
        Verify a one-time token for a user.

        A token with the wrong number of digits is rejected locally with a
        BAD_REQUEST result and no request is made.

        Args:
            user_id: The Authy user id
            token: The token to verify
            force: Verify even if the user has not finished registering
                   (otherwise the API accepts any token for such users)
        """
        if not token_is_valid(token, self.config.token_min_length, self.config.token_max_length):
            logger.info("Rejected token with an invalid length before verification")
            result = VerifyTokenResult(AuthyResult(
                status=StatusCode.BAD_REQUEST,
                success=False,
                message="Token is invalid.",
                errors={"token": "is invalid"},
            ))
            log_auth_event("verify_token", result.status, result.success, error=result.message)
            return result

        token = sanitize_number(token)
        user_id = self._sanitized_user_id(user_id)

        params = {"force": "true"} if force else None
        payload, body, error_status = self._execute("GET", f"/protected/json/verify/{token}/{user_id}",
                                                    params=params)

        if error_status is not None:
            result = VerifyTokenResult.from_payload(payload, body, error_status)
        elif payload.get("token") == "is valid":
            result = VerifyTokenResult.from_payload(payload, body, StatusCode.SUCCESS, success=True)
        else:
            result = VerifyTokenResult.from_payload(payload, body, StatusCode.UNAUTHORIZED, success=False)

        log_auth_event("verify_token", result.status, result.success, user_id=user_id,
                       error=None if result.ok else result.message)
        return result

    def send_sms(self, user_id, force: bool = False, locale: Optional[str] = None) -> SendSmsResult:
        """
        Send a token by SMS. Users registered with the mobile app are skipped
        by the API unless force is set (which costs more).
        """
        user_id = self._sanitized_user_id(user_id)

        params = {"force": "true"} if force else {}
        params["locale"] = locale or self.config.locale

        payload, body, error_status = self._execute("GET", f"/protected/json/sms/{user_id}", params=params)
        result = SendSmsResult.from_payload(payload, body, error_status or StatusCode.SUCCESS)

        log_auth_event("send_sms", result.status, result.success, user_id=user_id,
                       error=None if result.ok else result.message)
        return result

    def start_phone_call(self, user_id, force: bool = False) -> PhoneCallResult:
        """Deliver a token by phone call. Same force semantics as send_sms."""
        user_id = self._sanitized_user_id(user_id)

        params = {"force": "true"} if force else None
        payload, body, error_status = self._execute("GET", f"/protected/json/call/{user_id}", params=params)
        result = PhoneCallResult.from_payload(payload, body, error_status or StatusCode.SUCCESS)

        log_auth_event("start_phone_call", result.status, result.success, user_id=user_id,
                       error=None if result.ok else result.message)
        return result


def create_client(api_key: str, sandbox: bool = False, **options) -> AuthyClient:
    """
    Create a client from an API key

    Args:
        api_key: Authy API key
        sandbox: Use the sandbox host instead of production
        **options: Any other AuthyAPIConfig field

    Returns:
        AuthyClient: Client bound to the resulting configuration
    """
    return AuthyClient(AuthyAPIConfig(api_key=api_key, sandbox=sandbox, **options))


def load_config(config_path: Optional[str] = None) -> AuthyAPIConfig:
    """
    Reads a config file to get the API key and environment

    Args:
        config_path: Path to the configuration file (default: auto-detect)

    Returns:
        AuthyAPIConfig: Configuration object
    """
    return AuthyAPIConfig.from_file(config_path)


def verify_token(api_config: AuthyAPIConfig, user_id, token, force: bool = False) -> VerifyTokenResult:
    """
    Verify a one-time token

    Args:
        api_config: Authy API configuration
        user_id: Authy user id
        token: Token entered by the user
        force: Force verification for users who have not finished registering

    Returns:
        VerifyTokenResult: Outcome of the verification
    """
    return AuthyClient(api_config).verify_token(user_id, token, force)


def send_sms(api_config: AuthyAPIConfig, user_id, force: bool = False,
             locale: Optional[str] = None) -> SendSmsResult:
    """
    Send a one-time token by SMS

    Args:
        api_config: Authy API configuration
        user_id: Authy user id
        force: Send even if the user has the mobile app
        locale: Message language (default: config locale)

    Returns:
        SendSmsResult: Outcome of the request
    """
    return AuthyClient(api_config).send_sms(user_id, force, locale)
