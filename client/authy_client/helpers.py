"""Small helpers shared by the client: input sanitizing and user agent."""

import platform
import re

_NON_DIGITS = re.compile(r'[^0-9]')

DEFAULT_TOKEN_MIN_LENGTH = 6
DEFAULT_TOKEN_MAX_LENGTH = 10


def sanitize_number(value) -> str:
    """Strip everything but the digits 0-9 from an id or token"""
    if value is None:
        return ""
    return _NON_DIGITS.sub('', str(value))


def token_is_valid(token, min_length: int = DEFAULT_TOKEN_MIN_LENGTH,
                   max_length: int = DEFAULT_TOKEN_MAX_LENGTH) -> bool:
    """
    Check that a one-time token has a plausible number of digits.

    Non-digit characters (spaces, dashes) are ignored, so "123 456" counts
    as six digits. This is only a length check, the Authy API decides
    whether the code is actually correct.
    """
    digits = sanitize_number(token)
    return min_length <= len(digits) <= max_length


def library_version() -> str:
    from . import __version__
    return __version__


def system_info() -> str:
    return f"Python {platform.python_version()}; {platform.platform()}"


def user_agent() -> str:
    return f"AuthyPython/{library_version()} ({system_info()})"
