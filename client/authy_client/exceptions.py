"""
Exceptions raised by the Authy client.

Local problems (configuration, call-site input) and transport failures are
raised straight away. Remote failures are returned as results; the Remote*
classes below are only raised when a caller asks for it through
``raise_for_status()``.
"""


class AuthyError(Exception):
    """Base class for all Authy client errors"""


class ConfigurationError(AuthyError):
    """Invalid client configuration (missing API key, unreadable config file)"""


class ValidationError(AuthyError):
    """Invalid input at the call site, detected before any request is sent"""


class TransportError(AuthyError):
    """The request failed or the response body could not be read as JSON"""


class RemoteError(AuthyError):
    """The Authy API answered with an error status"""

    def __init__(self, result):
        self.result = result
        super().__init__(f"{result.status.value}: {result.message or 'no message'}")


class RemoteBadRequest(RemoteError):
    pass


class RemoteUnauthorized(RemoteError):
    pass


class RemoteServiceUnavailable(RemoteError):
    pass
