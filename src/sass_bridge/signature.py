"""sass_bridge.signature.

Function signatures for custom Sass functions.

A signature is the key a host function is registered under::

    sum($arg1, $arg2)
    join-all($separator, $items...)
    now

Parameters are `$identifier` tokens separated by commas. A trailing
`$identifier...` is the rest parameter: every extra positional argument is
collected into one comma-separated list. A bare name with no parentheses takes
no arguments.

Sass treats `-` and `_` in identifiers as the same character, so names are
normalized with `normalize_identifier` before they are compared.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from .errors import raise_invalid_arguments, raise_invalid_signature

_IDENTIFIER: Final[str] = r"-?[^\W\d][\w-]*"
_SIGNATURE_RE: Final[re.Pattern[str]] = re.compile(
    rf"^\s*(?P<name>{_IDENTIFIER})\s*(?:\((?P<params>.*)\))?\s*$", re.DOTALL
)
_PARAM_RE: Final[re.Pattern[str]] = re.compile(
    rf"^\$(?P<name>{_IDENTIFIER})(?P<rest>\.\.\.)?$"
)


def normalize_identifier(name: str) -> str:
    """Return `name` with underscores folded into hyphens."""
    return name.replace("_", "-")


@dataclass(frozen=True, slots=True)
class ParsedSignature:
    """Parsed function signature.

    Attributes:
        name: Function name as written.
        parameters: Fixed parameter names, without the leading `$`.
        rest: Rest parameter name, or None when the function has fixed arity.
    """

    name: str
    parameters: tuple[str, ...]
    rest: str | None = None

    @property
    def has_rest_parameter(self) -> bool:
        return self.rest is not None

    @property
    def key(self) -> str:
        """Normalized function name, used as the dispatch key."""
        return normalize_identifier(self.name)

    @property
    def arity(self) -> int:
        """Number of fixed parameters."""
        return len(self.parameters)

    def __str__(self) -> str:
        params = [f"${p}" for p in self.parameters]
        if self.rest is not None:
            params.append(f"${self.rest}...")
        return f"{self.name}({', '.join(params)})"


def _parse_params(text: str, *, signature: str) -> tuple[tuple[str, ...], str | None]:
    """
    Parse the parenthesized parameter list.

    Args:
        text: Text between the parentheses.
        signature: Full signature, for diagnostics.

    Returns:
        `(parameters, rest)`.
    """
    if not text.strip():
        return (), None

    tokens = [tok.strip() for tok in text.split(",")]
    params: list[str] = []
    rest: str | None = None
    seen: set[str] = set()

    for token in tokens:
        match = _PARAM_RE.match(token)
        if match is None:
            raise_invalid_signature(
                signature=signature, detail=f"invalid parameter {token!r}"
            )
        name = match.group("name")
        if rest is not None:
            raise_invalid_signature(
                signature=signature,
                detail=f"rest parameter ${rest}... must be last",
            )
        key = normalize_identifier(name)
        if key in seen:
            raise_invalid_signature(
                signature=signature, detail=f"duplicate parameter ${name}"
            )
        seen.add(key)
        if match.group("rest"):
            rest = name
        else:
            params.append(name)
    return tuple(params), rest


def parse_signature(signature: str) -> ParsedSignature:
    """
    Parse a function signature string.

    Args:
        signature: Text such as ``sum($arg1, $arg2)`` or ``fmt($args...)``.

    Returns:
        ParsedSignature: Name, fixed parameters, and optional rest parameter.

    Raises:
        ValueError: If the signature is malformed.
        TypeError: If `signature` is not a string.
    """
    if not isinstance(signature, str):
        raise_invalid_arguments(
            detail=f"signature must be a string. Got: {signature!r}."
        )

    match = _SIGNATURE_RE.match(signature)
    if match is None:
        raise_invalid_signature(
            signature=signature, detail="expected name($param, ...)"
        )

    params, rest = _parse_params(match.group("params") or "", signature=signature)
    return ParsedSignature(name=match.group("name"), parameters=params, rest=rest)
