"""
Authy Client

A Python client library for the Authy two-factor authentication API.
"""

__version__ = "0.1.0"

from .authy_api_caller import (
    AuthyAPIConfig, AuthyClient, AuthyEnvironment,
    create_client, load_config, send_sms, verify_token,
)
from .exceptions import (
    AuthyError, ConfigurationError, RemoteBadRequest, RemoteError,
    RemoteServiceUnavailable, RemoteUnauthorized, TransportError, ValidationError,
)
from .results import (
    AuthyResult, PhoneCallResult, RegisterUserResult, RemoveUserResult,
    SendSmsResult, StatusCode, VerifyTokenResult,
)

__all__ = [
    'AuthyAPIConfig',
    'AuthyClient',
    'AuthyEnvironment',
    'create_client',
    'load_config',
    'send_sms',
    'verify_token',
    'AuthyError',
    'ConfigurationError',
    'ValidationError',
    'TransportError',
    'RemoteError',
    'RemoteBadRequest',
    'RemoteUnauthorized',
    'RemoteServiceUnavailable',
    'AuthyResult',
    'StatusCode',
    'RegisterUserResult',
    'RemoveUserResult',
    'VerifyTokenResult',
    'SendSmsResult',
    'PhoneCallResult',
]
