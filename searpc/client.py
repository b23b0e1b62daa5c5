"""
Client side of searpc.

A client encodes calls, hands the bytes to a transport and unwraps the
returned envelope. The transport is any callable with the signature

    transport(service_name: str, payload: bytes) -> bytes

which is responsible for delivering the payload to a Server.call and
returning its response verbatim.
"""

from typing import Any, Callable

from searpc.codec import decode_result, encode_call
from searpc.errors import CallError
from searpc.result import Result
from searpc.server import Server


Transport = Callable[[str, bytes], bytes]


class ServerTransport:
    """In-process transport that calls a Server directly."""

    def __init__(self, server: Server):
        self._server = server

    def __call__(self, service_name: str, payload: bytes) -> bytes:
        return self._server.call(service_name, payload)


class SearpcClient:
    """
    Client bound to one service.

    Usage:
        client = SearpcClient(ServerTransport(server), "Math")
        client.call("add", 2, 3)  # 5
    """

    def __init__(self, transport: Transport, service_name: str):
        self._transport = transport
        self._service_name = service_name

    @property
    def service_name(self) -> str:
        return self._service_name

    def call_raw(self, func_name: str, *args: Any) -> Result:
        """
        Call a function and return the decoded envelope.

        Raises:
            DecodeError: If the transport returns an invalid envelope
        """
        payload = encode_call(func_name, *args)
        response = self._transport(self._service_name, payload)
        return decode_result(response)

    def call(self, func_name: str, *args: Any) -> Any:
        """
        Call a function and return its ret value.

        Raises:
            CallError: If the envelope has a non-zero err_code
        """
        result = self.call_raw(func_name, *args)
        if not result.ok:
            raise CallError(result.err_code, result.err_msg)
        return result.ret
