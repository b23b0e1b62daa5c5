"""
Server - service registry and call dispatcher.

The server maps service names to receivers and their admitted methods,
and dispatches encoded calls to them:

    server = Server()
    server.register(Math())

    server.call("Math", b'["add", 2, 3]')
    # b'{"ret":5,"err_code":0,"err_msg":""}'

Error handling contract:
- register raises RegistrationError subclasses; the registry is unchanged
- call never raises; every outcome is a serialized Result envelope
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from searpc.admission import MethodSpec, is_exported, suitable_methods
from searpc.codec import decode_call, encode_result
from searpc.errors import (
    CallError,
    DuplicateServiceError,
    ErrCode,
    NoSuitableMethodsError,
    NotExportedError,
    UnnamedTypeError,
)
from searpc.result import Result
from searpc.rwlock import RWLock


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Service:
    """
    A registered receiver and its admitted methods.

    Attributes:
        name: Service name (the receiver type's name)
        receiver: The registered object (or class)
        methods: Read-only mapping of function name to MethodSpec
    """
    name: str
    receiver: Any
    methods: Mapping[str, MethodSpec]


class Server:
    """
    Registry of services and entry point for dispatching calls.

    Registration takes the write lock. Lookups in call take the read lock
    only while reading the registry; the method itself runs unlocked.
    Services are never removed or replaced.
    """

    def __init__(self) -> None:
        self._lock = RWLock()
        self._services: dict[str, Service] = {}

    def register(self, receiver: Any) -> str:
        """
        Register a receiver as a service named after its type.

        Passing a class registers its classmethods and staticmethods;
        passing an instance registers all of its methods.

        Args:
            receiver: Service implementation

        Returns:
            The registered service name

        Raises:
            UnnamedTypeError: If the type has an empty name
            NotExportedError: If the type name is not upper-case initial
            DuplicateServiceError: If the name is already registered
            NoSuitableMethodsError: If no method returns Result
        """
        instance_view = not isinstance(receiver, type)
        typ = type(receiver) if instance_view else receiver

        with self._lock.write_locked():
            name = typ.__name__
            if not name:
                msg = f"searpc.Register: no service name for type {typ!r}"
                logger.error(msg)
                raise UnnamedTypeError(msg)
            if not is_exported(name):
                msg = f"searpc.Register: type {name} is not exported"
                logger.error(msg)
                raise NotExportedError(msg)
            if name in self._services:
                msg = f"searpc: service already defined: {name}"
                logger.error(msg)
                raise DuplicateServiceError(msg)

            methods = suitable_methods(typ, report_errors=True, instance_view=instance_view)
            if not methods:
                # To help the user, see if an instance would have worked
                hint = ""
                if not instance_view and suitable_methods(typ, report_errors=False):
                    hint = " (hint: pass an instance of that type)"
                msg = f"searpc.Register: type {name} has no exported methods of suitable type{hint}"
                logger.error(msg)
                raise NoSuitableMethodsError(msg)

            self._services[name] = Service(
                name=name,
                receiver=receiver,
                methods=MappingProxyType(methods),
            )

        logger.debug(f"Registered service {name}: {sorted(methods)}")
        return name

    def get_service(self, name: str) -> Service | None:
        """Look up a service under the read lock."""
        with self._lock.read_locked():
            return self._services.get(name)

    def list_services(self) -> list[Service]:
        """All registered services, sorted by name."""
        with self._lock.read_locked():
            return [self._services[name] for name in sorted(self._services)]

    def call(self, service_name: str, payload: bytes | bytearray | str) -> bytes:
        """
        Dispatch an encoded call to a registered service.

        Args:
            service_name: Name of a registered service
            payload: JSON call payload, e.g. b'["add", 2, 3]'

        Returns:
            Serialized Result envelope. Never raises.
        """
        result = self.call_result(service_name, payload)
        try:
            return encode_result(result)
        except (TypeError, ValueError, RecursionError) as e:
            # Unserializable types, NaN/Infinity, cycles or nesting too deep
            logger.error(
                f"Cannot serialize result of {service_name}: {e}",
                exc_info=True,
                extra={"service": service_name},
            )
            return encode_result(Result.error(
                ErrCode.FUNCTION_CALL,
                f"Error serializing result: {e}",
            ))

    def call_result(self, service_name: str, payload: bytes | bytearray | str) -> Result:
        """Same as call, but returns the Result before serialization."""
        service = self.get_service(service_name)
        if service is None:
            return Result.error(ErrCode.SERVICE_NOT_FOUND, f"Cannot find service {service_name}")

        try:
            func_name, args = decode_call(payload)
        except CallError as e:
            logger.warning(e.err_msg, extra={"service": service_name})
            return Result.error(e.err_code, e.err_msg)

        method = service.methods.get(func_name)
        if method is None:
            msg = f"Cannot find function {func_name}"
            logger.warning(msg, extra={"service": service_name, "function": func_name})
            return Result.error(ErrCode.FUNCTION_NOT_FOUND, msg)

        if method.num_in != len(args):
            msg = "Parameters mismatch"
            logger.warning(msg, extra={"service": service_name, "function": func_name})
            return Result.error(ErrCode.PARAMETER, msg)

        return self._invoke(service, method, args)

    def _invoke(self, service: Service, method: MethodSpec, args: list[Any]) -> Result:
        """Run the method, converting any raised fault into a Result."""
        log_extra = {"service": service.name, "function": method.name}
        try:
            result = method.invoke(service.receiver, args)
        except CallError as e:
            logger.warning(f"{service.name}.{method.name} failed: [{e.err_code}] {e.err_msg}", extra=log_extra)
            return Result.error(e.err_code, e.err_msg)
        except Exception as e:
            logger.error(f"Error calling {service.name}.{method.name}: {e}", exc_info=True, extra=log_extra)
            return Result.error(
                ErrCode.FUNCTION_CALL,
                f"Error calling function {method.name}: {e}",
            )

        if not isinstance(result, Result):
            msg = f"Error calling function {method.name}: returned {type(result).__name__}, not Result"
            logger.error(msg, extra=log_extra)
            return Result.error(ErrCode.FUNCTION_CALL, msg)
        return result
