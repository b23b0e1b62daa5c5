"""Tests for call payload decoding and envelope encoding."""

import pytest

from searpc import Result
from searpc.codec import decode_call, decode_result, encode_call, encode_result
from searpc.errors import DecodeError, ErrCode


class TestDecodeCall:

    def test_name_and_args(self):
        assert decode_call(b'["add", 2, 3]') == ("add", [2, 3])

    def test_name_only(self):
        assert decode_call(b'["ping"]') == ("ping", [])

    def test_dynamic_argument_types(self):
        name, args = decode_call(b'["f", 1.5, "s", true, null, [1, 2], {"k": "v"}]')
        assert name == "f"
        assert args == [1.5, "s", True, None, [1, 2], {"k": "v"}]

    def test_text_payload(self):
        assert decode_call('["add", 1]') == ("add", [1])

    def test_bytearray_payload(self):
        assert decode_call(bytearray(b'["add", 1]')) == ("add", [1])

    def test_malformed_json(self):
        with pytest.raises(DecodeError, match="Failed to parse call string:") as exc_info:
            decode_call(b"not-json-array")
        assert exc_info.value.err_code == ErrCode.PARSE_JSON

    def test_invalid_utf8(self):
        with pytest.raises(DecodeError, match="Failed to parse call string:"):
            decode_call(b'["add", "\xff"]')

    def test_nesting_too_deep(self):
        depth = 200_000
        with pytest.raises(DecodeError, match="Failed to parse call string:"):
            decode_call(b"[" * depth + b"]" * depth)

    @pytest.mark.parametrize("payload", [b"[]", b'{"f": 1}', b"42", b'"add"', b"null", b"[1, 2]", b"[null]"])
    def test_invalid_shape(self, payload):
        with pytest.raises(DecodeError, match="Invalid call string format"):
            decode_call(payload)


class TestEncoding:

    def test_encode_call(self):
        assert encode_call("add", 2, 3) == b'["add",2,3]'

    def test_encode_result_field_order(self):
        assert encode_result(Result(ret=5)) == b'{"ret":5,"err_code":0,"err_msg":""}'

    def test_encode_error_result(self):
        assert encode_result(Result.error(500, "Cannot find function add")) == (
            b'{"ret":null,"err_code":500,"err_msg":"Cannot find function add"}'
        )

    def test_encode_unserializable_raises(self):
        with pytest.raises(TypeError):
            encode_result(Result(ret={1, 2}))

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_rejected(self, value):
        """NaN and Infinity have no JSON representation."""
        with pytest.raises(ValueError):
            encode_result(Result(ret=[value]))
        with pytest.raises(ValueError):
            encode_call("echo", value)

    def test_decode_result(self):
        assert decode_result(b'{"ret":[1],"err_code":0,"err_msg":""}') == Result(ret=[1])

    @pytest.mark.parametrize("payload", [
        b"nope",
        b"[1]",
        b'{"ret":1,"err_code":"x","err_msg":""}',
        b'{"ret":1,"err_code":0,"err_msg":3}',
    ])
    def test_decode_result_invalid(self, payload):
        with pytest.raises(DecodeError):
            decode_result(payload)
