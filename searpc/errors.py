"""
Error classes and error codes for searpc.

Two families of errors exist:
- RegistrationError: raised by Server.register before any call exists.
  These are returned to the registering caller and never serialized.
- CallError: call-time faults carrying an err_code/err_msg pair.
  Server.call converts every CallError into a Result envelope, so these
  never cross the transport boundary as exceptions.

Error code contract:
- The numeric codes below are part of the wire format and must not change
- Callables may raise CallError with their own code; it is passed through
- FUNCTION_CALL (513) covers unexpected faults inside a callable
"""

from enum import IntEnum


class ErrCode(IntEnum):
    """Numeric error codes placed in Result.err_code."""
    FUNCTION_NOT_FOUND = 500
    SERVICE_NOT_FOUND = 501
    PARSE_JSON = 511
    PARAMETER = 512
    FUNCTION_CALL = 513


# Wire names for the stable codes
FunctionNotFoundError = ErrCode.FUNCTION_NOT_FOUND.value
ServiceNotFoundError = ErrCode.SERVICE_NOT_FOUND.value
ParseJSONError = ErrCode.PARSE_JSON.value
ParameterErrorCode = ErrCode.PARAMETER.value


class SearpcError(Exception):
    """Base exception for searpc."""
    pass


# -------------------------------------------------------------------------
# Registration errors
# -------------------------------------------------------------------------

class RegistrationError(SearpcError):
    """Raised when a receiver cannot be registered as a service."""
    pass


class UnnamedTypeError(RegistrationError):
    """The receiver's type has no name to derive a service name from."""
    pass


class NotExportedError(RegistrationError):
    """The receiver's type name does not start with an upper-case letter."""
    pass


class DuplicateServiceError(RegistrationError):
    """A service with the derived name is already registered."""
    pass


class NoSuitableMethodsError(RegistrationError):
    """The receiver exposes no method returning Result."""
    pass


# -------------------------------------------------------------------------
# Call errors
# -------------------------------------------------------------------------

class CallError(SearpcError):
    """
    Call-time error carrying an envelope code and message.

    Callables may raise this to report a failure with their own err_code.
    Clients raise it when a response envelope has a non-zero err_code.
    """

    def __init__(self, err_code: int, err_msg: str):
        super().__init__(err_msg)
        self.err_code = int(err_code)
        self.err_msg = err_msg

    def __repr__(self) -> str:
        return f"{type(self).__name__}(err_code={self.err_code}, err_msg={self.err_msg!r})"


class DecodeError(CallError):
    """The call payload could not be decoded."""

    def __init__(self, err_msg: str):
        super().__init__(ErrCode.PARSE_JSON, err_msg)


class ParameterError(CallError):
    """Decoded arguments do not fit the function being called."""

    def __init__(self, err_msg: str = "Parameters mismatch"):
        super().__init__(ErrCode.PARAMETER, err_msg)
