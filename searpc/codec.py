"""
JSON encoding for call payloads and result envelopes.

A call payload is a JSON array whose first element is the function name
and whose remaining elements are the positional arguments:

    ["add", 2, 3]

A response payload is a JSON object with exactly three fields:

    {"ret":5,"err_code":0,"err_msg":""}
"""

import json
from typing import Any

from searpc.errors import DecodeError
from searpc.result import Result


def _load(payload: bytes | bytearray | str) -> Any:
    """Parse payload bytes as UTF-8 JSON."""
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8")
    return json.loads(payload)


def decode_call(payload: bytes | bytearray | str) -> tuple[str, list[Any]]:
    """
    Decode a call payload into a function name and ordered arguments.

    Args:
        payload: UTF-8 JSON bytes (or text) of the form [name, arg1, ...]

    Returns:
        Tuple of (function name, argument list)

    Raises:
        DecodeError: On malformed JSON, a non-array or empty array,
                     or a first element that is not a string
    """
    try:
        data = _load(payload)
    except (ValueError, TypeError, RecursionError) as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors;
        # RecursionError comes from deeply nested arrays or objects
        raise DecodeError(f"Failed to parse call string:{e}") from e

    if not isinstance(data, list) or len(data) == 0:
        raise DecodeError("Invalid call string format")

    func_name = data[0]
    if not isinstance(func_name, str):
        raise DecodeError("Invalid call string format")

    return func_name, data[1:]


def encode_call(func_name: str, *args: Any) -> bytes:
    """
    Encode a function name and arguments as a call payload.

    Raises:
        ValueError: If an argument is a NaN/Infinity float
    """
    return json.dumps([func_name, *args], separators=(",", ":"), allow_nan=False).encode("utf-8")


def encode_result(result: Result) -> bytes:
    """
    Serialize a Result envelope to compact JSON bytes.

    Raises:
        TypeError: If result.ret is not JSON-serializable
        ValueError: If result.ret contains a circular reference or a
                    NaN/Infinity float, which JSON cannot represent
        RecursionError: If result.ret is nested too deeply
    """
    return json.dumps(result.to_dict(), separators=(",", ":"), allow_nan=False).encode("utf-8")


def decode_result(payload: bytes | bytearray | str) -> Result:
    """
    Parse response bytes back into a Result.

    Raises:
        DecodeError: If the payload is not a valid envelope object
    """
    try:
        data = _load(payload)
    except (ValueError, TypeError, RecursionError) as e:
        raise DecodeError(f"Failed to parse result string:{e}") from e

    if not isinstance(data, dict):
        raise DecodeError("Invalid result string format")

    try:
        return Result.from_dict(data)
    except ValueError as e:
        raise DecodeError(f"Invalid result string format: {e}") from e
