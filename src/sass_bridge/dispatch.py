"""
sass_bridge.dispatch.

Run host functions as custom Sass functions.

Contract
--------
- A host function is registered under a signature string together with its
  calling convention, a `LegacyFunction` tagged as either:
    * DIRECT: `fn(*args) -> value`, the result is returned immediately.
    * CONTINUATION: `fn(*args, done) -> None`, the result is delivered later by
      calling `done(value)` exactly once.
  Dispatch branches on the tag; argument counts are never inspected.
- Each call produces an `Invocation` that moves
  PENDING -> RUNNING -> COMPLETED | FAILED.
- Any exception raised by a host function fails the invocation with a
  RuntimeError carrying that exception's message (code CALLBACK_FAILURE).
- The completion handle may be called from any thread; the first call wins.
- A continuation that returns without calling `done` leaves its invocation
  RUNNING forever. There is no timeout and no cancellation; the compiler's
  scheduler owns the wait.
- In `DispatchMode.SYNC` only DIRECT functions may be registered.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from .errors import (
    callback_failure,
    raise_double_completion,
    raise_duplicate_signature,
    raise_invalid_arguments,
    raise_undefined_function,
    raise_unsupported_feature,
)
from .signature import ParsedSignature, normalize_identifier, parse_signature
from .values import LegacyValue, List, ensure_legacy_value

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)


class DispatchMode(StrEnum):
    """Which calling conventions the compiler entry point can drive."""

    SYNC = "sync"
    ASYNC = "async"


class CallbackKind(StrEnum):
    DIRECT = "direct"
    CONTINUATION = "continuation"


class InvocationState(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


_TERMINAL_STATES: frozenset[InvocationState] = frozenset(
    {InvocationState.COMPLETED, InvocationState.FAILED}
)


# -----------------------------------------------------------------------------
# Callbacks
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LegacyFunction:
    """A host function tagged with its calling convention.

    Attributes:
        kind: DIRECT or CONTINUATION.
        fn: The host callable.
        takes_context: If True, the opaque plugin context is passed as the
            first argument.
    """

    kind: CallbackKind
    fn: Callable[..., Any]
    takes_context: bool = False


def direct(fn: Callable[..., Any], *, takes_context: bool = False) -> LegacyFunction:
    """Tag `fn` as a function that returns its result."""
    return LegacyFunction(CallbackKind.DIRECT, fn, takes_context)


def continuation(
    fn: Callable[..., Any], *, takes_context: bool = False
) -> LegacyFunction:
    """Tag `fn` as a function that reports its result through a `done` handle."""
    return LegacyFunction(CallbackKind.CONTINUATION, fn, takes_context)


Callback = LegacyFunction | Callable[..., Any]


def _as_legacy_function(callback: Callback) -> LegacyFunction:
    if isinstance(callback, LegacyFunction):
        return callback
    if not callable(callback):
        raise_invalid_arguments(
            detail=f"callback must be callable or a LegacyFunction. Got: {callback!r}."
        )
    return direct(callback)


# -----------------------------------------------------------------------------
# Argument binding
# -----------------------------------------------------------------------------


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def bind_arguments(
    signature: ParsedSignature,
    positional: Sequence[LegacyValue] = (),
    named: Mapping[str, LegacyValue] | None = None,
) -> tuple[LegacyValue, ...]:
    """
    Match compiler arguments to a signature's parameters.

    Positional arguments fill fixed parameters in order; named arguments
    (`$name` or `name`) fill the remainder. With a rest parameter, extra
    positional arguments are collected into one comma-separated List passed
    last.

    Args:
        signature: Parsed signature of the function being called.
        positional: Positional argument values.
        named: Named argument values.

    Returns:
        Tuple of arguments for the host function.

    Raises:
        TypeError: On missing, surplus, unknown or non-Sass arguments.
    """
    args = list(positional)
    for i, arg in enumerate(args):
        ensure_legacy_value(arg, what=f"Argument {i + 1} to {signature.name}()")

    n_fixed = signature.arity
    if len(args) > n_fixed and not signature.has_rest_parameter:
        verb = "was" if len(args) == 1 else "were"
        raise_invalid_arguments(
            detail=(
                f"Only {_plural(n_fixed, 'argument')} allowed, "
                f"but {len(args)} {verb} passed."
            )
        )

    bound: list[LegacyValue | None] = [None] * n_fixed
    bound[: min(len(args), n_fixed)] = args[:n_fixed]

    slots = {normalize_identifier(p): i for i, p in enumerate(signature.parameters)}
    for raw_name, value in (named or {}).items():
        name = raw_name.removeprefix("$")
        idx = slots.get(normalize_identifier(name))
        if idx is None:
            raise_invalid_arguments(detail=f"No argument named ${name}.")
        if bound[idx] is not None:
            raise_invalid_arguments(
                detail=f"Argument ${name} was passed both by position and by name."
            )
        bound[idx] = ensure_legacy_value(value, what=f"Argument ${name}")

    for param, value in zip(signature.parameters, bound, strict=True):
        if value is None:
            raise_invalid_arguments(detail=f"Missing argument ${param}.")

    if signature.has_rest_parameter:
        bound.append(List.from_values(args[n_fixed:], comma_separated=True))

    return tuple(bound)


# -----------------------------------------------------------------------------
# Invocations
# -----------------------------------------------------------------------------


class Invocation:
    """One call of a host function, from dispatch to completion or failure."""

    def __init__(
        self, signature: ParsedSignature, arguments: tuple[LegacyValue, ...] = ()
    ) -> None:
        self.signature = signature
        self.arguments = arguments
        self._state = InvocationState.PENDING
        self._result: LegacyValue | None = None
        self._error: RuntimeError | None = None
        self._listeners: list[Callable[[Invocation], None]] = []
        self._lock = threading.Lock()

    @property
    def state(self) -> InvocationState:
        return self._state

    @property
    def done(self) -> bool:
        """True once the invocation has completed or failed."""
        return self._state in _TERMINAL_STATES

    @property
    def error(self) -> RuntimeError | None:
        """The failure reported to the compiler, if the invocation failed."""
        return self._error

    def _start(self) -> None:
        with self._lock:
            logger.debug("%s: %s -> running", self.signature.name, self._state)
            self._state = InvocationState.RUNNING

    def _finish(
        self,
        state: InvocationState,
        *,
        result: LegacyValue | None = None,
        error: RuntimeError | None = None,
    ) -> bool:
        """Move to a terminal state once; False if already terminal.

        Listeners run after the lock is released.
        """
        with self._lock:
            if self.done:
                return False
            logger.debug("%s: %s -> %s", self.signature.name, self._state, state)
            self._result = result
            self._error = error
            self._state = state
            listeners, self._listeners = self._listeners, []
        for listener in listeners:
            self._notify(listener)
        return True

    def _notify(self, listener: Callable[[Invocation], None]) -> None:
        try:
            listener(self)
        except Exception:
            logger.exception(
                "Done callback %r for %s() failed.", listener, self.signature.name
            )

    def _fail(self, exc: BaseException) -> bool:
        logger.debug("%s() failed: %s", self.signature.name, exc)
        return self._finish(
            InvocationState.FAILED, error=callback_failure(str(exc), original=exc)
        )

    def _settle(self, value: object) -> Exception | None:
        """Complete with `value`, or fail if it cannot cross the boundary."""
        try:
            result = ensure_legacy_value(value, what=f"Result of {self.signature.name}()")
        except (TypeError, ValueError) as exc:
            finished, outcome = self._fail(exc), exc
        else:
            finished = self._finish(InvocationState.COMPLETED, result=result)
            outcome = None
        if not finished:
            raise_double_completion(name=self.signature.name)
        return outcome

    def complete(self, value: LegacyValue) -> None:
        """Completion handle passed to continuation-style host functions.

        Args:
            value: The function's result.

        Raises:
            RuntimeError: If the invocation has already completed or failed;
                the earlier outcome is kept.
            TypeError: If `value` is not a Sass value, or holds unset slots.
                The invocation fails with the same message.
            ValueError: If `value` is a Map with duplicate keys. The
                invocation fails with the same message.
        """
        if self.done:
            raise_double_completion(name=self.signature.name)
        exc = self._settle(value)
        if exc is not None:
            raise exc

    def result(self) -> LegacyValue:
        """
        Return the completed result.

        Raises:
            RuntimeError: The stored failure if the invocation failed, or a
                plain RuntimeError if it has not finished yet.
        """
        if self._state is InvocationState.COMPLETED:
            return self._result
        if self._state is InvocationState.FAILED:
            raise self._error
        msg = f"{self.signature.name}() has not completed (state: {self._state})."
        raise RuntimeError(msg)

    def add_done_callback(self, fn: Callable[[Invocation], None]) -> None:
        """Call `fn(invocation)` once a terminal state is reached.

        If the invocation is already done, `fn` runs immediately. Exceptions
        raised by `fn` are logged, never propagated.
        """
        with self._lock:
            if not self.done:
                self._listeners.append(fn)
                return
        self._notify(fn)

    async def wait(self) -> LegacyValue:
        """Suspend until the invocation finishes, then return its result.

        The completion handle may be called from any thread. This waits
        without a timeout.
        """
        if not self.done:
            loop = asyncio.get_running_loop()
            future: asyncio.Future[None] = loop.create_future()

            def _wake(_: Invocation) -> None:
                loop.call_soon_threadsafe(
                    lambda: future.done() or future.set_result(None)
                )

            self.add_done_callback(_wake)
            await future
        return self.result()

    def __repr__(self) -> str:
        return f"<Invocation {self.signature} state={self._state}>"


# -----------------------------------------------------------------------------
# Compiled functions
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompiledFunction:
    """A signature bound to a host function.

    Attributes:
        signature: Parsed signature.
        callback: Tagged host function.
    """

    signature: ParsedSignature
    callback: LegacyFunction

    def invoke(
        self,
        positional: Sequence[LegacyValue] = (),
        named: Mapping[str, LegacyValue] | None = None,
        *,
        context: object = None,
    ) -> Invocation:
        """
        Call the host function with compiler-supplied arguments.

        Args:
            positional: Positional argument values.
            named: Named argument values.
            context: Opaque plugin context, passed through when the callback
                was registered with `takes_context=True`.

        Returns:
            Invocation: Already terminal for DIRECT functions; for
            CONTINUATION functions, RUNNING until `done` is called.
        """
        try:
            args = bind_arguments(self.signature, positional, named)
        except (TypeError, ValueError) as exc:
            invocation = Invocation(self.signature)
            invocation._fail(exc)  # noqa: SLF001
            return invocation

        invocation = Invocation(self.signature, args)
        call_args = (context, *args) if self.callback.takes_context else args
        invocation._start()  # noqa: SLF001

        if self.callback.kind is CallbackKind.DIRECT:
            self._run_direct(invocation, call_args)
        else:
            self._run_continuation(invocation, call_args)
        return invocation

    def _run_direct(self, invocation: Invocation, call_args: tuple[Any, ...]) -> None:
        try:
            value = self.callback.fn(*call_args)
        except Exception as exc:  # noqa: BLE001
            invocation._fail(exc)  # noqa: SLF001
            return
        invocation._settle(value)  # noqa: SLF001

    def _run_continuation(
        self, invocation: Invocation, call_args: tuple[Any, ...]
    ) -> None:
        name = self.signature.name
        try:
            returned = self.callback.fn(*call_args, invocation.complete)
        except Exception as exc:  # noqa: BLE001
            if invocation.done:
                logger.warning("%s() raised after it finished: %s", name, exc)
                return
            invocation._fail(exc)  # noqa: SLF001
            return

        if returned is not None:
            logger.warning(
                "%s() reports its result through done(); ignoring returned %r.",
                name,
                returned,
            )
        if not invocation.done:
            logger.debug("%s() is waiting for its completion handle.", name)

    def call(
        self,
        positional: Sequence[LegacyValue] = (),
        named: Mapping[str, LegacyValue] | None = None,
        *,
        context: object = None,
    ) -> LegacyValue:
        """Invoke and return the result; the call must finish synchronously."""
        return self.invoke(positional, named, context=context).result()


# -----------------------------------------------------------------------------
# Registration table
# -----------------------------------------------------------------------------


class FunctionRegistry:
    """Callback registration table, keyed by normalized function name."""

    def __init__(
        self,
        functions: Mapping[str, Callback] | None = None,
        *,
        mode: DispatchMode | str = DispatchMode.ASYNC,
    ) -> None:
        """
        Initialize a FunctionRegistry.

        Args:
            functions: Optional mapping of signature string to callback.
            mode: SYNC allows only DIRECT callbacks; ASYNC allows both.
        """
        self._mode = DispatchMode(mode)
        self._functions: dict[str, CompiledFunction] = {}
        for signature, callback in (functions or {}).items():
            self.register(signature, callback)

    @property
    def mode(self) -> DispatchMode:
        return self._mode

    def register(self, signature: str, callback: Callback) -> CompiledFunction:
        """
        Register a host function.

        Args:
            signature: Signature string such as ``sum($a, $b)``.
            callback: A `LegacyFunction`, or a plain callable (treated as DIRECT).

        Returns:
            CompiledFunction: The registered entry.

        Raises:
            ValueError: If the signature is malformed or already registered.
            NotImplementedError: If a CONTINUATION callback is registered in
                SYNC mode.
        """
        parsed = parse_signature(signature)
        fn = _as_legacy_function(callback)

        if self._mode is DispatchMode.SYNC and fn.kind is CallbackKind.CONTINUATION:
            raise_unsupported_feature(
                feature="continuation callbacks in sync mode",
                detail=f"{parsed.name}() must return its result directly.",
            )
        if parsed.key in self._functions:
            raise_duplicate_signature(name=parsed.name)

        compiled = CompiledFunction(parsed, fn)
        self._functions[parsed.key] = compiled
        logger.debug("Registered %s as a %s function.", parsed, fn.kind)
        return compiled

    def lookup(self, name: str) -> CompiledFunction | None:
        """Return the function registered as `name`, or None."""
        return self._functions.get(normalize_identifier(name))

    def invoke(
        self,
        name: str,
        positional: Sequence[LegacyValue] = (),
        named: Mapping[str, LegacyValue] | None = None,
        *,
        context: object = None,
    ) -> Invocation:
        """
        Dispatch a call by function name.

        Raises:
            LookupError: If no function is registered as `name`.
        """
        compiled = self.lookup(name)
        if compiled is None:
            raise_undefined_function(name=name)
        return compiled.invoke(positional, named, context=context)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_identifier(name) in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[CompiledFunction]:
        return iter(self._functions.values())
