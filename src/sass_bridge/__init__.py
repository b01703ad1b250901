"""sass_bridge.

Sass value marshalling and custom-function dispatch for host callbacks.

Public API (v1)
--------------
Primary user entrypoints:
- `compile_functions`: Build a registry from a mapping of signature -> callback.
- `FunctionRegistry`: Callback registration table with dispatch by name.
- `direct` / `continuation`: Tag a host function with its calling convention.

Core data structures:
- Values: `Null`, `Number`, `String`, `Boolean`, `Color`, `List`, `Map`
- Singletons: `NULL`, `TRUE`, `FALSE`
- `ParsedSignature`, `Invocation`, `CompiledFunction`

Design guarantees:
- No dependency on any particular compiler; the compiler drives `Invocation`.
- Only the seven value types cross the dispatch boundary in either direction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .dispatch import (
    CallbackKind,
    CompiledFunction,
    DispatchMode,
    FunctionRegistry,
    Invocation,
    InvocationState,
    LegacyFunction,
    bind_arguments,
    continuation,
    direct,
)
from .errors import ErrorCode, SassBridgeError
from .signature import ParsedSignature, normalize_identifier, parse_signature
from .units import format_unit, parse_unit
from .values import (
    FALSE,
    NULL,
    TRUE,
    Boolean,
    Color,
    LegacyValue,
    List,
    Map,
    Null,
    Number,
    String,
    ensure_legacy_value,
    is_truthy,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .dispatch import Callback

# -----------------------------------------------------------------------------
# Versioning & capability metadata
# -----------------------------------------------------------------------------

__version__ = "0.1.0"

SUPPORTED_VALUE_TYPES: tuple[str, ...] = (  # noqa: RUF067
    "null",
    "number",
    "string",
    "boolean",
    "color",
    "list",
    "map",
)

SUPPORTED_CALLBACK_KINDS: tuple[str, ...] = tuple(k.value for k in CallbackKind)  # noqa: RUF067

# -----------------------------------------------------------------------------
# High-level public façade
# -----------------------------------------------------------------------------


def compile_functions(  # noqa: RUF067
    functions: Mapping[str, Callback],
    *,
    mode: DispatchMode | str = DispatchMode.ASYNC,
) -> FunctionRegistry:
    """
    Parse every signature and bind its callback in one call.

    This is the recommended entrypoint for compilers receiving a user's
    `functions` option.

    Args:
        functions: Mapping of signature string to callback.
        mode: `"sync"` when the caller needs a single synchronous pass,
            `"async"` when it can suspend for continuation callbacks.

    Returns:
        FunctionRegistry: Registry ready for dispatch.
    """
    return FunctionRegistry(functions, mode=mode)


# -----------------------------------------------------------------------------
# Public export surface
# -----------------------------------------------------------------------------

__all__ = [
    "FALSE",
    "NULL",
    "SUPPORTED_CALLBACK_KINDS",
    "SUPPORTED_VALUE_TYPES",
    "TRUE",
    "Boolean",
    "CallbackKind",
    "Color",
    "CompiledFunction",
    "DispatchMode",
    "ErrorCode",
    "FunctionRegistry",
    "Invocation",
    "InvocationState",
    "LegacyFunction",
    "LegacyValue",
    "List",
    "Map",
    "Null",
    "Number",
    "ParsedSignature",
    "SassBridgeError",
    "String",
    "__version__",
    "bind_arguments",
    "compile_functions",
    "continuation",
    "direct",
    "ensure_legacy_value",
    "format_unit",
    "is_truthy",
    "normalize_identifier",
    "parse_signature",
    "parse_unit",
]
