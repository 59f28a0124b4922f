"""
Result types returned by AuthyClient

Every operation returns its own record. The fields common to all of them
(status, success, message, raw response, errors) live in an AuthyResult
envelope held by the record; the record adds whatever is specific to the
operation (user id, token state, cellphone).
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .exceptions import RemoteBadRequest, RemoteServiceUnavailable, RemoteUnauthorized


class StatusCode(enum.Enum):
    SUCCESS = "success"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    SERVICE_UNAVAILABLE = "service_unavailable"


_REMOTE_ERRORS = {
    StatusCode.BAD_REQUEST: RemoteBadRequest,
    StatusCode.UNAUTHORIZED: RemoteUnauthorized,
    StatusCode.SERVICE_UNAVAILABLE: RemoteServiceUnavailable,
}


def status_from_http(status_code: int) -> StatusCode:
    """Map an HTTP error status to a StatusCode (400 and anything unknown -> BAD_REQUEST)"""
    if status_code == 503:
        return StatusCode.SERVICE_UNAVAILABLE
    if status_code == 401:
        return StatusCode.UNAUTHORIZED
    return StatusCode.BAD_REQUEST


def _as_bool(value) -> bool:
    # older API versions send "true"/"false" as strings
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass(frozen=True)
class AuthyResult:
    status: StatusCode
    success: bool
    message: str = ""
    raw_response: str = ""
    errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], raw_response: str, status: StatusCode,
                     success: Optional[bool] = None) -> "AuthyResult":
        """
        Build the envelope from a decoded Authy response.

        Args:
            payload: Decoded JSON object
            raw_response: Response body as received
            status: Status already derived by the caller
            success: Overrides the payload's "success" field when given
        """
        errors = payload.get("errors") or {}
        if not isinstance(errors, dict):
            errors = {"message": errors}

        return cls(
            status=status,
            success=_as_bool(payload.get("success", False)) if success is None else success,
            message=str(payload.get("message") or ""),
            raw_response=raw_response,
            errors={str(k): str(v) for k, v in errors.items()},
        )

    @property
    def ok(self) -> bool:
        return self.status is StatusCode.SUCCESS

    def raise_for_status(self):
        """Raise the matching RemoteError subclass unless the status is SUCCESS"""
        if self.ok:
            return
        raise _REMOTE_ERRORS[self.status](self)


class _EnvelopeFields:
    """Read-only access to the envelope fields of a per-operation record"""

    result: AuthyResult

    @property
    def status(self) -> StatusCode:
        return self.result.status

    @property
    def success(self) -> bool:
        return self.result.success

    @property
    def message(self) -> str:
        return self.result.message

    @property
    def raw_response(self) -> str:
        return self.result.raw_response

    @property
    def errors(self) -> Dict[str, str]:
        return self.result.errors

    @property
    def ok(self) -> bool:
        return self.result.ok

    def raise_for_status(self):
        self.result.raise_for_status()


@dataclass(frozen=True)
class RegisterUserResult(_EnvelopeFields):
    result: AuthyResult
    user_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload, raw_response, status):
        user = payload.get("user")
        user_id = None
        if isinstance(user, dict) and user.get("id") is not None:
            user_id = str(user["id"])
        return cls(AuthyResult.from_payload(payload, raw_response, status), user_id=user_id)


@dataclass(frozen=True)
class RemoveUserResult(_EnvelopeFields):
    """The removal message from the API is the envelope message."""

    result: AuthyResult

    @classmethod
    def from_payload(cls, payload, raw_response, status):
        return cls(AuthyResult.from_payload(payload, raw_response, status))


@dataclass(frozen=True)
class VerifyTokenResult(_EnvelopeFields):
    result: AuthyResult
    token: Optional[str] = None

    @classmethod
    def from_payload(cls, payload, raw_response, status, success=None):
        return cls(
            AuthyResult.from_payload(payload, raw_response, status, success=success),
            token=payload.get("token"),
        )


@dataclass(frozen=True)
class SendSmsResult(_EnvelopeFields):
    result: AuthyResult
    cellphone: Optional[str] = None
    ignored: bool = False

    @classmethod
    def from_payload(cls, payload, raw_response, status):
        return cls(
            AuthyResult.from_payload(payload, raw_response, status),
            cellphone=payload.get("cellphone"),
            ignored=_as_bool(payload.get("ignored", False)),
        )


@dataclass(frozen=True)
class PhoneCallResult(_EnvelopeFields):
    result: AuthyResult
    cellphone: Optional[str] = None
    ignored: bool = False

    @classmethod
    def from_payload(cls, payload, raw_response, status):
        return cls(
            AuthyResult.from_payload(payload, raw_response, status),
            cellphone=payload.get("cellphone"),
            ignored=_as_bool(payload.get("ignored", False)),
        )
