"""
Result - The envelope returned by every searpc call.

Every dispatch path, success or failure, produces exactly one Result.
Service methods must be annotated to return this exact class to be
dispatchable (see searpc.admission).

Schema:
{
  "ret": <any>,        // success payload, opaque to searpc
  "err_code": 0,       // 0 means success by convention
  "err_msg": ""        // human-readable, empty on success
}
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class Result:
    """
    Uniform response envelope.

    searpc never inspects a callable's own err_code/err_msg choices;
    a Result returned by a service method is serialized as-is.

    Attributes:
        ret: Success payload (any JSON-serializable value)
        err_code: Error code, 0 on success
        err_msg: Error message, empty on success
    """
    ret: Any = None
    err_code: int = 0
    err_msg: str = ""

    @property
    def ok(self) -> bool:
        """True when err_code is 0."""
        return self.err_code == 0

    @classmethod
    def error(cls, err_code: int, err_msg: str) -> "Result":
        """Build a failure envelope with no payload."""
        return cls(ret=None, err_code=int(err_code), err_msg=err_msg)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict with keys in wire order."""
        return {
            "ret": self.ret,
            "err_code": self.err_code,
            "err_msg": self.err_msg,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Result":
        """
        Create from a decoded response dict.

        Raises:
            ValueError: If err_code or err_msg have the wrong type
        """
        err_code = data.get("err_code", 0)
        err_msg = data.get("err_msg", "")
        if isinstance(err_code, bool) or not isinstance(err_code, int):
            raise ValueError(f"err_code must be an integer, got {err_code!r}")
        if not isinstance(err_msg, str):
            raise ValueError(f"err_msg must be a string, got {err_msg!r}")
        return cls(ret=data.get("ret"), err_code=err_code, err_msg=err_msg)
