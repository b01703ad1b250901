"""
Core error types and helpers for sass_bridge.

Design intent:
- Lean on built-in exception classes for ergonomics (ValueError/TypeError/etc.).
- Provide machine-readable error codes via a single lightweight base error that
  can be used as an exception cause for structured handling.

Contract:
- Public raiser helpers raise built-in exceptions and chain a SassBridgeError as
  the cause, carrying an ErrorCode.
- Callers that want structured handling can catch built-ins and inspect
  `exc.__cause__` for a SassBridgeError (and its `code`).
- Every failure reaches the compiler as "this function call failed with message
  M"; `callback_failure` builds that exception without raising it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class ErrorCode(StrEnum):
    """Machine-readable classification for sass_bridge failures."""

    INVALID_UNIT_SYNTAX = "invalid_unit_syntax"
    CHANNEL_OUT_OF_RANGE = "channel_out_of_range"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    DUPLICATE_MAP_KEY = "duplicate_map_key"
    INVALID_RESULT_TYPE = "invalid_result_type"
    DOUBLE_COMPLETION = "double_completion"
    CALLBACK_FAILURE = "callback_failure"
    INVALID_SIGNATURE = "invalid_signature"
    DUPLICATE_SIGNATURE = "duplicate_signature"
    INVALID_ARGUMENTS = "invalid_arguments"
    UNDEFINED_FUNCTION = "undefined_function"
    UNSUPPORTED_FEATURE = "unsupported_feature"


class SassBridgeError(Exception):
    """Lightweight, structured error carrying an ErrorCode.

    This is not raised directly by the public APIs. Instead, helpers raise
    built-in exceptions (ValueError/TypeError/etc.) and set a SassBridgeError
    as the exception cause (`raise X from SassBridgeError(...)`).
    """

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        """
        Initialize SassBridgeError.

        Args:
            message: Human-readable error message.
            code: Optional ErrorCode classifying the error.
        """
        super().__init__(message)
        self.code: ErrorCode | None = code


# -----------------------------------------------------------------------------
# Standardized message prefixes
# -----------------------------------------------------------------------------

_INVALID_UNIT_PREFIX: Final[str] = "Invalid unit expression."
_INVALID_SIGNATURE_PREFIX: Final[str] = "Invalid function signature."
_UNSUPPORTED_PREFIX: Final[str] = "Unsupported sass_bridge feature."


# -----------------------------------------------------------------------------
# Raiser helpers (raise built-ins; chain SassBridgeError with code)
# -----------------------------------------------------------------------------


def raise_invalid_unit_syntax(*, unit: str, detail: str) -> None:
    """Raise a standardized unit syntax error.

    Raises:
        ValueError: Always, chained from SassBridgeError(code=INVALID_UNIT_SYNTAX).
    """
    msg = f"{_INVALID_UNIT_PREFIX} {unit!r}: {detail}"
    raise ValueError(msg) from SassBridgeError(msg, code=ErrorCode.INVALID_UNIT_SYNTAX)


def raise_channel_out_of_range(*, channel: str, expected: str, got: object) -> None:
    """Raise a standardized color channel error.

    Raises:
        ValueError: Always, chained from SassBridgeError(code=CHANNEL_OUT_OF_RANGE).
    """
    msg = f"Color channel {channel} must be {expected}. Got: {got!r}."
    raise ValueError(msg) from SassBridgeError(
        msg, code=ErrorCode.CHANNEL_OUT_OF_RANGE
    )


def raise_index_out_of_range(*, index: int, length: int) -> None:
    """Raise a standardized container index error.

    Raises:
        IndexError: Always, chained from SassBridgeError(code=INDEX_OUT_OF_RANGE).
    """
    msg = f"Invalid index {index}: must be between 0 and {length - 1}."
    if length == 0:
        msg = f"Invalid index {index}: container is empty."
    raise IndexError(msg) from SassBridgeError(msg, code=ErrorCode.INDEX_OUT_OF_RANGE)


def raise_duplicate_map_key(*, key: object, index: int, other: int) -> None:
    """Raise a standardized duplicate map key error.

    Raises:
        ValueError: Always, chained from SassBridgeError(code=DUPLICATE_MAP_KEY).
    """
    msg = f"Duplicate key {key} at index {index} (already set at index {other})."
    raise ValueError(msg) from SassBridgeError(msg, code=ErrorCode.DUPLICATE_MAP_KEY)


def raise_invalid_result_type(*, what: str, got: object) -> None:
    """Raise a standardized boundary value error.

    Raises:
        TypeError: Always, chained from SassBridgeError(code=INVALID_RESULT_TYPE).
    """
    msg = f"{what} must be a Sass value. Got: {got!r}."
    raise TypeError(msg) from SassBridgeError(msg, code=ErrorCode.INVALID_RESULT_TYPE)


def raise_double_completion(*, name: str) -> None:
    """Raise a standardized repeated completion error.

    Raises:
        RuntimeError: Always, chained from SassBridgeError(code=DOUBLE_COMPLETION).
    """
    msg = f"Completion handle for {name}() was called more than once."
    raise RuntimeError(msg) from SassBridgeError(
        msg, code=ErrorCode.DOUBLE_COMPLETION
    )


def callback_failure(
    message: str, *, original: BaseException | None = None
) -> RuntimeError:
    """Build the error reported to the compiler when a function call fails.

    Args:
        message: The message of the underlying error, used verbatim.
        original: The error raised by the host function, kept as `__context__`.

    Returns:
        RuntimeError whose `__cause__` is SassBridgeError(code=CALLBACK_FAILURE).
    """
    err = RuntimeError(message)
    err.__cause__ = SassBridgeError(message, code=ErrorCode.CALLBACK_FAILURE)
    err.__context__ = original
    err.__suppress_context__ = True
    return err


def raise_invalid_signature(*, signature: str, detail: str) -> None:
    """Raise a standardized function signature error.

    Raises:
        ValueError: Always, chained from SassBridgeError(code=INVALID_SIGNATURE).
    """
    msg = f"{_INVALID_SIGNATURE_PREFIX} {signature!r}: {detail}"
    raise ValueError(msg) from SassBridgeError(msg, code=ErrorCode.INVALID_SIGNATURE)


def raise_duplicate_signature(*, name: str) -> None:
    """Raise a standardized duplicate registration error.

    Raises:
        ValueError: Always, chained from SassBridgeError(code=DUPLICATE_SIGNATURE).
    """
    msg = f"{_INVALID_SIGNATURE_PREFIX} Function {name}() is already registered."
    raise ValueError(msg) from SassBridgeError(
        msg, code=ErrorCode.DUPLICATE_SIGNATURE
    )


def raise_invalid_arguments(*, detail: str) -> None:
    """Raise a standardized argument/type error.

    Raises:
        TypeError: Always, chained from SassBridgeError(code=INVALID_ARGUMENTS).
    """
    raise TypeError(detail) from SassBridgeError(
        detail, code=ErrorCode.INVALID_ARGUMENTS
    )


def raise_unsupported_feature(*, feature: str, detail: str | None = None) -> None:
    """Raise a standardized unsupported feature error.

    Raises:
        NotImplementedError: Chained from SassBridgeError(code=UNSUPPORTED_FEATURE).
    """
    msg = f"{_UNSUPPORTED_PREFIX} Feature '{feature}' is not supported."
    if detail:
        msg = f"{msg} Detail: {detail}"
    raise NotImplementedError(msg) from SassBridgeError(
        msg, code=ErrorCode.UNSUPPORTED_FEATURE
    )


def raise_undefined_function(*, name: str) -> None:
    """Raise a standardized lookup error for an unregistered function.

    Raises:
        LookupError: Always, chained from SassBridgeError(code=UNDEFINED_FUNCTION).
    """
    msg = f"Undefined function {name}()."
    raise LookupError(msg) from SassBridgeError(
        msg, code=ErrorCode.UNDEFINED_FUNCTION
    )


def raise_cyclic_value(*, what: str) -> None:
    """Raise a standardized error for a container that contains itself.

    Raises:
        TypeError: Always, chained from SassBridgeError(code=INVALID_RESULT_TYPE).
    """
    msg = f"{what} contains itself."
    raise TypeError(msg) from SassBridgeError(msg, code=ErrorCode.INVALID_RESULT_TYPE)
