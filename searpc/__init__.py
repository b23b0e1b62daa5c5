"""
searpc - Transport-agnostic RPC dispatch

Registers service objects by name and dispatches JSON-encoded calls to
their methods, returning a uniform {ret, err_code, err_msg} envelope.
Transports are external: they hand Server.call the received bytes and
send back the bytes it returns.
"""

__version__ = "0.1.0"


__all__ = [
    "Result",
    "Server",
    "SearpcClient",
    "ServerTransport",
    "ErrCode",
    "SearpcError",
    "RegistrationError",
    "CallError",
    "ParameterError",
]

from .result import Result
from .errors import ErrCode, SearpcError, RegistrationError, CallError, ParameterError
from .server import Server
from .client import SearpcClient, ServerTransport
