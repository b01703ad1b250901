"""
Unit tests for sass_bridge.errors.

These tests validate:
- ErrorCode enum values
- Base SassBridgeError behavior
- Helper raiser functions produce correct built-in exceptions
- Exception chaining preserves SassBridgeError as __cause__
"""

from __future__ import annotations

import re

import pytest

from sass_bridge.errors import (
    ErrorCode,
    SassBridgeError,
    callback_failure,
    raise_channel_out_of_range,
    raise_cyclic_value,
    raise_double_completion,
    raise_duplicate_map_key,
    raise_duplicate_signature,
    raise_index_out_of_range,
    raise_invalid_arguments,
    raise_invalid_result_type,
    raise_invalid_signature,
    raise_invalid_unit_syntax,
    raise_undefined_function,
    raise_unsupported_feature,
)


def test_base_error_carries_code() -> None:
    """Test base error carries code."""
    err = SassBridgeError("test", code=ErrorCode.INVALID_ARGUMENTS)
    assert err.code == ErrorCode.INVALID_ARGUMENTS
    assert "test" in str(err)


def test_error_codes_are_strings() -> None:
    """Error codes compare equal to their string values."""
    assert ErrorCode.DUPLICATE_MAP_KEY == "duplicate_map_key"
    assert ErrorCode("double_completion") is ErrorCode.DOUBLE_COMPLETION


@pytest.mark.parametrize(
    ("raiser", "kwargs", "exc_type", "code", "fragment"),
    [
        (
            raise_invalid_unit_syntax,
            {"unit": "px//s", "detail": "more than one '/'"},
            ValueError,
            ErrorCode.INVALID_UNIT_SYNTAX,
            "Invalid unit expression. 'px//s'",
        ),
        (
            raise_channel_out_of_range,
            {"channel": "red", "expected": "an integer between 0 and 255", "got": 300},
            ValueError,
            ErrorCode.CHANNEL_OUT_OF_RANGE,
            "Color channel red must be an integer between 0 and 255. Got: 300.",
        ),
        (
            raise_index_out_of_range,
            {"index": 3, "length": 3},
            IndexError,
            ErrorCode.INDEX_OUT_OF_RANGE,
            "Invalid index 3: must be between 0 and 2.",
        ),
        (
            raise_duplicate_map_key,
            {"key": "a", "index": 1, "other": 0},
            ValueError,
            ErrorCode.DUPLICATE_MAP_KEY,
            "Duplicate key a at index 1",
        ),
        (
            raise_invalid_result_type,
            {"what": "Result of f()", "got": 3},
            TypeError,
            ErrorCode.INVALID_RESULT_TYPE,
            "Result of f() must be a Sass value. Got: 3.",
        ),
        (
            raise_cyclic_value,
            {"what": "Result of f() element 0"},
            TypeError,
            ErrorCode.INVALID_RESULT_TYPE,
            "Result of f() element 0 contains itself.",
        ),
        (
            raise_double_completion,
            {"name": "sum"},
            RuntimeError,
            ErrorCode.DOUBLE_COMPLETION,
            "Completion handle for sum() was called more than once.",
        ),
        (
            raise_invalid_signature,
            {"signature": "f(", "detail": "bad"},
            ValueError,
            ErrorCode.INVALID_SIGNATURE,
            "Invalid function signature. 'f(': bad",
        ),
        (
            raise_duplicate_signature,
            {"name": "sum"},
            ValueError,
            ErrorCode.DUPLICATE_SIGNATURE,
            "Function sum() is already registered.",
        ),
        (
            raise_invalid_arguments,
            {"detail": "Missing argument $b."},
            TypeError,
            ErrorCode.INVALID_ARGUMENTS,
            "Missing argument $b.",
        ),
        (
            raise_undefined_function,
            {"name": "nope"},
            LookupError,
            ErrorCode.UNDEFINED_FUNCTION,
            "Undefined function nope().",
        ),
    ],
)
def test_raisers_chain_codes(raiser, kwargs, exc_type, code, fragment) -> None:  # noqa: ANN001
    """Each raiser raises its built-in type with a coded SassBridgeError cause."""
    with pytest.raises(exc_type, match=re.escape(fragment)) as exc:
        raiser(**kwargs)

    assert isinstance(exc.value.__cause__, SassBridgeError)
    assert exc.value.__cause__.code == code


def test_index_error_on_empty_container_message() -> None:
    """Empty containers get a dedicated message."""
    with pytest.raises(IndexError, match=re.escape("container is empty")):
        raise_index_out_of_range(index=0, length=0)


def test_raise_unsupported_feature() -> None:
    """Test unsupported feature raises NotImplementedError and chains SassBridgeError."""
    with pytest.raises(
        NotImplementedError,
        match=re.escape("Unsupported sass_bridge feature"),
    ) as exc:
        raise_unsupported_feature(feature="continuation", detail="sync mode")

    e = exc.value
    msg = str(e)
    assert "Feature 'continuation' is not supported" in msg
    assert "sync mode" in msg
    assert isinstance(e.__cause__, SassBridgeError)
    assert e.__cause__.code == ErrorCode.UNSUPPORTED_FEATURE


def test_callback_failure_keeps_message_verbatim() -> None:
    """callback_failure builds (does not raise) a coded RuntimeError."""
    original = ValueError("$arg1: Expected a number")
    err = callback_failure(str(original), original=original)

    assert isinstance(err, RuntimeError)
    assert str(err) == "$arg1: Expected a number"
    assert isinstance(err.__cause__, SassBridgeError)
    assert err.__cause__.code == ErrorCode.CALLBACK_FAILURE
    assert err.__context__ is original
