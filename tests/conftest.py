import sys

import pytest

from searpc import Result, Server
from searpc.errors import CallError


class Math:
    """Sample service used across the test suite."""

    def add(self, a: int, b: int) -> Result:
        return Result(ret=a + b)

    def divide(self, a: float, b: float) -> Result:
        if b == 0:
            return Result(ret=None, err_code=1, err_msg="division by zero")
        return Result(ret=a / b)

    def echo(self, value) -> Result:
        return Result(ret=value)

    def join(self, items: list[str], sep: str) -> Result:
        return Result(ret=sep.join(items))

    def maybe(self, value: int | None) -> Result:
        return Result(ret=value is None)

    def fail(self, code: int, message: str) -> Result:
        raise CallError(code, message)

    def crash(self) -> Result:
        raise RuntimeError("boom")

    def wrong_type(self) -> Result:
        return {"ret": 1}

    def unserializable(self) -> Result:
        return Result(ret=object())

    def nested(self, depth: int) -> Result:
        value = []
        for _ in range(depth):
            value = [value]
        return Result(ret=value)

    def not_a_number(self) -> Result:
        return Result(ret=float("nan"))

    # Not dispatchable
    def pair(self) -> tuple[Result, int]:
        return Result(), 0

    def plain(self) -> int:
        return 1

    def nothing(self):
        pass

    def _hidden(self) -> Result:
        return Result(ret="hidden")


@pytest.fixture
def math_service():
    return Math()


@pytest.fixture
def server(math_service):
    srv = Server()
    srv.register(math_service)
    return srv


SAMPLE_MODULE = '''
from searpc import Result


class Greeter:
    def hello(self, name: str) -> Result:
        return Result(ret=f"hello {name}")

    def add(self, a: int, b: int) -> Result:
        return Result(ret=a + b)


class Empty:
    def nothing(self) -> int:
        return 0
'''


@pytest.fixture
def sample_module(tmp_path, monkeypatch):
    """Write an importable module with sample receivers; return its name."""
    name = "searpc_sample_services"
    (tmp_path / f"{name}.py").write_text(SAMPLE_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, name, raising=False)
    yield name
    sys.modules.pop(name, None)
