"""
Method admission - decides which methods of a receiver are dispatchable.

A method is admitted if and only if:
1. Its name is public (no leading underscore)
2. It declares exactly one return value
3. That return annotation is exactly searpc.Result
4. It has no keyword-only parameter without a default

Apart from rule 4, only the return shape decides admission. Argument
annotations are recorded on the MethodSpec and used to convert decoded JSON values at call time.
"""

import inspect
import logging
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from searpc.errors import ParameterError
from searpc.result import Result


logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)
_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)

# Method kinds as found in a class namespace
INSTANCE = "instance"
CLASS = "class"
STATIC = "static"

Invoker = Callable[[Any, list], Any]


def is_exported(name: str) -> bool:
    """Is this an exported (upper-case initial) name?"""
    return bool(name) and name[0].isupper()


def _type_name(annotation: Any) -> str:
    if annotation is inspect.Signature.empty:
        return "nothing"
    if isinstance(annotation, type) and typing.get_origin(annotation) is None:
        return annotation.__qualname__
    return repr(annotation).replace("typing.", "")


def _count_outs(annotation: Any) -> int:
    """Number of values a return annotation declares."""
    if annotation is inspect.Signature.empty or annotation is None or annotation is _NONE_TYPE:
        return 0
    if typing.get_origin(annotation) is tuple:
        args = typing.get_args(annotation)
        if args and Ellipsis not in args:
            return len(args)
    return 1


def _convert(value: Any, annotation: Any) -> Any:
    """
    Convert a decoded JSON value to the annotated type.

    Raises:
        TypeError: If the value cannot stand in for the annotation
    """
    if annotation is Any or annotation is object or annotation is inspect.Parameter.empty:
        return value

    if annotation is None or annotation is _NONE_TYPE:
        if value is None:
            return None
        raise TypeError

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = typing.get_args(annotation)
        if value is None and _NONE_TYPE in members:
            return None
        for member in members:
            if member is _NONE_TYPE:
                continue
            try:
                return _convert(value, member)
            except TypeError:
                continue
        raise TypeError
    if origin is not None:
        # Parametrised generics are checked against their container only
        annotation = origin

    if annotation is bool:
        if isinstance(value, bool):
            return value
        raise TypeError
    if annotation is int:
        if isinstance(value, bool):
            raise TypeError
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise TypeError
    if annotation is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise TypeError
    if annotation is tuple and isinstance(value, list):
        return tuple(value)
    if isinstance(annotation, type):
        if isinstance(value, annotation):
            return value
        raise TypeError
    return value


@dataclass(frozen=True)
class MethodSpec:
    """
    An admitted, dispatchable method.

    Built once at registration time. The invoker has the fixed signature
    (receiver, args) and binds the receiver the way the method kind needs.

    Attributes:
        name: Function name as seen by callers
        kind: One of "instance", "class", "static"
        param_types: Annotations of the positional parameters, in order
    """
    name: str
    kind: str
    param_types: tuple[Any, ...]
    invoker: Invoker = field(repr=False, compare=False)

    @property
    def num_in(self) -> int:
        """Number of positional arguments a call must supply."""
        return len(self.param_types)

    def convert_args(self, args: list[Any]) -> list[Any]:
        """
        Convert decoded arguments to the declared parameter types.

        Raises:
            ParameterError: On wrong arity or a value of the wrong type
        """
        if len(args) != self.num_in:
            raise ParameterError()
        converted = []
        for index, (value, annotation) in enumerate(zip(args, self.param_types)):
            try:
                converted.append(_convert(value, annotation))
            except TypeError:
                raise ParameterError(
                    f"Parameter {index + 1} of {self.name}: expected "
                    f"{_type_name(annotation)}, got {type(value).__name__}"
                ) from None
        return converted

    def invoke(self, receiver: Any, args: list[Any]) -> Any:
        """Call the method on receiver with converted args."""
        return self.invoker(receiver, self.convert_args(args))

    @classmethod
    def build(cls, name: str, kind: str, func: Callable, hints: dict[str, Any]) -> "MethodSpec":
        params = list(inspect.signature(func).parameters.values())
        if kind != STATIC:
            # Drop self/cls
            params = params[1:]
        param_types = tuple(
            hints.get(p.name, Any) for p in params if p.kind in _POSITIONAL
        )
        return cls(name=name, kind=kind, param_types=param_types, invoker=_make_invoker(kind, func))


def _required_keyword_only(func: Callable) -> list[str]:
    """Names of keyword-only parameters without a default."""
    return [
        p.name for p in inspect.signature(func).parameters.values()
        if p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
    ]


def _make_invoker(kind: str, func: Callable) -> Invoker:
    if kind == STATIC:
        def invoke_static(receiver: Any, args: list) -> Any:
            return func(*args)
        return invoke_static

    if kind == CLASS:
        def invoke_class(receiver: Any, args: list) -> Any:
            owner = receiver if isinstance(receiver, type) else type(receiver)
            return func(owner, *args)
        return invoke_class

    def invoke_instance(receiver: Any, args: list) -> Any:
        return func(receiver, *args)
    return invoke_instance


def _iter_methods(typ: type) -> Iterator[tuple[str, str, Callable]]:
    """Yield (name, kind, function) for the type's method set in MRO order."""
    seen: set[str] = set()
    for klass in typ.__mro__:
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attr, staticmethod):
                yield name, STATIC, attr.__func__
            elif isinstance(attr, classmethod):
                yield name, CLASS, attr.__func__
            elif inspect.isfunction(attr):
                yield name, INSTANCE, attr


def suitable_methods(
    typ: type,
    report_errors: bool,
    instance_view: bool = True,
) -> dict[str, MethodSpec]:
    """
    Return the dispatchable methods of typ.

    Args:
        typ: Receiver type to inspect
        report_errors: Log each rejected public method and the reason
        instance_view: Whether the receiver is an instance. When False
                       (a class was passed), plain instance methods are
                       not callable and are skipped.

    Returns:
        Mapping of method name to MethodSpec
    """
    methods: dict[str, MethodSpec] = {}
    for name, kind, func in _iter_methods(typ):
        # Method must be exported
        if name.startswith("_"):
            continue
        if kind == INSTANCE and not instance_view:
            continue

        try:
            hints = typing.get_type_hints(func)
        except Exception as e:
            if report_errors:
                logger.warning(f"method {name} has unresolvable annotations: {e}")
            continue

        # Method needs one out
        return_type = hints.get("return", inspect.Signature.empty)
        num_out = _count_outs(return_type)
        if num_out != 1:
            if report_errors:
                logger.warning(f"method {name} has wrong number of outs: {num_out}")
            continue

        # The return type must be Result itself
        if return_type is not Result:
            if report_errors:
                logger.warning(f"method {name} returns {_type_name(return_type)} not Result")
            continue

        # Calls carry positional arguments only
        required_kw = _required_keyword_only(func)
        if required_kw:
            if report_errors:
                names = ", ".join(required_kw)
                logger.warning(f"method {name} has required keyword-only parameters: {names}")
            continue

        methods[name] = MethodSpec.build(name, kind, func, hints)
    return methods
