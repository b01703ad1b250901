"""sass_bridge.units.

Complex unit expressions for Sass numbers.

Syntax
------
    <unit>('*'<unit>)* ['/' <unit>('*'<unit>)*]

Numerator units sit left of the `/`, denominator units right of it. A number
with only numerator units omits the `/`; a number with only denominator units
is written with nothing before the `/` (eg ``/s``). The empty string is a
unitless number.

Units are kept in construction order on each side. `format_unit` is the left
inverse of `parse_unit` for strings it produced itself; equivalent spellings
such as ``s*px`` and ``px*s`` are not normalized to one another.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .errors import raise_invalid_arguments, raise_invalid_unit_syntax

if TYPE_CHECKING:
    from collections.abc import Iterable

_PRODUCT: Final[str] = "*"
_QUOTIENT: Final[str] = "/"


def _parse_side(text: str, *, unit: str, side: str) -> tuple[str, ...]:
    """
    Split one side of a unit expression into unit tokens.

    Args:
        text: The numerator or denominator text.
        unit: Full unit expression, for diagnostics.
        side: "numerator" or "denominator", for diagnostics.

    Returns:
        Tuple of unit names in written order.
    """
    tokens = text.split(_PRODUCT)
    for token in tokens:
        if not token:
            raise_invalid_unit_syntax(unit=unit, detail=f"empty {side} unit")
        if any(ch.isspace() for ch in token):
            raise_invalid_unit_syntax(
                unit=unit, detail=f"whitespace in {side} unit {token!r}"
            )
    return tuple(tokens)


def parse_unit(unit: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """
    Parse a unit expression into numerator and denominator units.

    Args:
        unit: Unit expression such as ``px``, ``px*px/s*s`` or ``/s``.

    Returns:
        `(numerators, denominators)`, each a tuple in written order.

    Raises:
        ValueError: If the expression is malformed.
        TypeError: If `unit` is not a string.
    """
    if not isinstance(unit, str):
        raise_invalid_arguments(detail=f"unit must be a string. Got: {unit!r}.")

    if not unit:
        return (), ()

    if unit.count(_QUOTIENT) > 1:
        raise_invalid_unit_syntax(unit=unit, detail="more than one '/'")

    if _QUOTIENT not in unit:
        return _parse_side(unit, unit=unit, side="numerator"), ()

    num_text, den_text = unit.split(_QUOTIENT)
    numerators = (
        _parse_side(num_text, unit=unit, side="numerator") if num_text else ()
    )
    denominators = _parse_side(den_text, unit=unit, side="denominator")
    return numerators, denominators


def format_unit(numerators: Iterable[str], denominators: Iterable[str] = ()) -> str:
    """
    Serialize numerator and denominator units to a unit expression.

    Args:
        numerators: Numerator unit names, in order.
        denominators: Denominator unit names, in order.

    Returns:
        Unit expression accepted by `parse_unit`.
    """
    num = _PRODUCT.join(numerators)
    den = _PRODUCT.join(denominators)
    if not den:
        return num
    return f"{num}{_QUOTIENT}{den}"
