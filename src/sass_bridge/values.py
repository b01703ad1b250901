"""sass_bridge.values.

Sass values as seen by host functions.

Value variants
--------------
- `Null`: the singleton `NULL`.
- `Number`: a float64 magnitude with numerator/denominator units.
- `String`: text content. Quoted and unquoted strings are not distinguished;
  an unquoted string keeps escapes literally (``\\1F46D``) while a quoted one
  holds the resolved characters. `String.set_value` always yields unquoted
  semantics.
- `Boolean`: exactly two instances, `TRUE` and `FALSE`; never constructed.
- `Color`: 8-bit red/green/blue channels plus an alpha in [0, 1].
- `List` and `Map`: fixed-length containers whose slots start unset and must
  be filled before they are read or handed back to the compiler.

Mutation
--------
Numbers, strings and colors are built once through their constructors. The
`set_*` methods on them are deprecated in-place updates: they change a single
field on the shared instance, so every holder of that instance sees the change.

Container indices are 0-based and negative indices are rejected, unlike
indexing from inside Sass. `Map` is an ordered sequence of pairs rather than a
hash table; lookup is a linear scan and duplicate keys are rejected.
"""

from __future__ import annotations

import numbers
import warnings
from typing import TYPE_CHECKING, Final

import numpy as np

from .errors import (
    raise_channel_out_of_range,
    raise_cyclic_value,
    raise_duplicate_map_key,
    raise_index_out_of_range,
    raise_invalid_arguments,
    raise_invalid_result_type,
)
from .units import format_unit, parse_unit

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

# Sass compares numbers up to 10 decimal digits.
_FUZZY_EPSILON: Final[float] = 1e-11
_MAX_ARGB: Final[int] = 0xFFFFFFFF


def _deprecated(name: str, replacement: str) -> None:
    warnings.warn(
        f"{name}() is deprecated. Use {replacement} instead.",
        DeprecationWarning,
        stacklevel=3,
    )


def _fuzzy_equals(a: float, b: float) -> bool:
    return a == b or abs(a - b) <= _FUZZY_EPSILON


def _format_number(value: float) -> str:
    if np.isfinite(value) and float(value).is_integer():
        return str(int(value))
    if not np.isfinite(value):
        return str(float(value))
    return f"{value:.10f}".rstrip("0").rstrip(".")


# -----------------------------------------------------------------------------
# Singletons
# -----------------------------------------------------------------------------


class Null:
    """Sass's singleton `null` value, also available as `Null.NULL`."""

    __slots__ = ()

    NULL: Null
    _instance: Null | None = None

    def __new__(cls) -> Null:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "null"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> Null:
        return self

    def __deepcopy__(self, memo: dict) -> Null:
        return self

    def __reduce__(self) -> str:
        return "NULL"


NULL: Final[Null] = Null()
Null.NULL = NULL


class Boolean:
    """Sass's boolean type.

    Booleans cannot be constructed; the only instances are `Boolean.TRUE` and
    `Boolean.FALSE`, so identity comparison is always safe.
    """

    __slots__ = ("_value",)

    TRUE: Boolean
    FALSE: Boolean

    def __new__(cls, *args: object, **kwargs: object) -> Boolean:
        msg = "Boolean values can't be constructed; use Boolean.TRUE or Boolean.FALSE."
        raise TypeError(msg)

    @classmethod
    def _singleton(cls, value: bool) -> Boolean:
        inst = object.__new__(cls)
        object.__setattr__(inst, "_value", value)
        return inst

    def __setattr__(self, name: str, value: object) -> None:
        msg = "Boolean values are immutable."
        raise AttributeError(msg)

    def get_value(self) -> bool:
        """Return `True` for Sass's `true` and `False` for Sass's `false`."""
        return self._value

    def __bool__(self) -> bool:
        return self._value

    def __repr__(self) -> str:
        return "true" if self._value else "false"

    def __copy__(self) -> Boolean:
        return self

    def __deepcopy__(self, memo: dict) -> Boolean:
        return self

    def __reduce__(self) -> str:
        return "TRUE" if self._value else "FALSE"


TRUE: Final[Boolean] = Boolean._singleton(True)  # noqa: SLF001
FALSE: Final[Boolean] = Boolean._singleton(False)  # noqa: SLF001
Boolean.TRUE = TRUE
Boolean.FALSE = FALSE


def is_truthy(value: LegacyValue) -> bool:
    """Return Sass truthiness: only `FALSE` and `NULL` are falsey.

    Args:
        value: Any Sass value.

    Returns:
        False for `FALSE` and `NULL`; True otherwise, including `Number(0)`,
        empty strings and empty containers.
    """
    return value is not FALSE and value is not NULL


# -----------------------------------------------------------------------------
# Numbers
# -----------------------------------------------------------------------------


def _coerce_number(value: object) -> np.float64:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise_invalid_arguments(detail=f"Number value must be a real number. Got: {value!r}.")
    try:
        return np.float64(value)
    except OverflowError:
        raise_invalid_arguments(
            detail="Number value is too large for a double-precision float."
        )


class Number:
    """Sass's number type.

    Complex units use the `<unit>*<unit>/<unit>*<unit>` form, eg::

        Number(0.5)              # 0.5
        Number(10, "px")         # 10px
        Number(10, "px*px")      # 10px * 1px
        Number(10, "px/s")       # math.div(10px, 1s)
    """

    __slots__ = ("_denominators", "_numerators", "_value")

    def __init__(self, value: float, unit: str | None = None) -> None:
        """
        Initialize a Number.

        Args:
            value: Numeric magnitude.
            unit: Optional unit expression; omitted or empty means unitless.
        """
        magnitude = _coerce_number(value)
        numerators, denominators = parse_unit("" if unit is None else unit)
        self._value = magnitude
        self._numerators = numerators
        self._denominators = denominators

    @property
    def numerator_units(self) -> tuple[str, ...]:
        return self._numerators

    @property
    def denominator_units(self) -> tuple[str, ...]:
        return self._denominators

    def get_value(self) -> float:
        """Return the magnitude, ignoring units.

        `Number(96, "px")` and `Number(1, "in")` return different values even
        though they are the same length.
        """
        return float(self._value)

    def set_value(self, value: float) -> None:
        """Set the magnitude in place, keeping the units."""
        _deprecated("Number.set_value", "Number(value, unit)")
        self._value = _coerce_number(value)

    def get_unit(self) -> str:
        """Return the units in the same format the constructor accepts."""
        return format_unit(self._numerators, self._denominators)

    def set_unit(self, unit: str) -> None:
        """Set the units in place, keeping the magnitude."""
        _deprecated("Number.set_unit", "Number(value, unit)")
        self._numerators, self._denominators = parse_unit(unit)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Number):
            return NotImplemented
        return (
            _fuzzy_equals(float(self._value), float(other._value))
            and sorted(self._numerators) == sorted(other._numerators)
            and sorted(self._denominators) == sorted(other._denominators)
        )

    __hash__ = None

    def __str__(self) -> str:
        return f"{_format_number(float(self._value))}{self.get_unit()}"

    def __repr__(self) -> str:
        return f"Number({float(self._value)!r}, {self.get_unit()!r})"


# -----------------------------------------------------------------------------
# Strings
# -----------------------------------------------------------------------------


def _check_text(content: object) -> str:
    if not isinstance(content, str):
        raise_invalid_arguments(detail=f"String content must be a str. Got: {content!r}.")
    return content


class String:
    """Sass's string type, with no quoted/unquoted distinction."""

    __slots__ = ("_content",)

    def __init__(self, content: str) -> None:
        self._content = _check_text(content)

    def get_value(self) -> str:
        """Return the string contents.

        Escapes are included literally for unquoted strings and resolved for
        quoted ones.
        """
        return self._content

    def set_value(self, content: str) -> None:
        """Set the contents in place. The string becomes unquoted."""
        _deprecated("String.set_value", "String(content)")
        self._content = _check_text(content)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, String):
            return NotImplemented
        return self._content == other._content

    __hash__ = None

    def __str__(self) -> str:
        return self._content

    def __repr__(self) -> str:
        return f"String({self._content!r})"


# -----------------------------------------------------------------------------
# Colors
# -----------------------------------------------------------------------------


def _check_rgb(channel: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise_invalid_arguments(
            detail=f"Color channel {channel} must be a number. Got: {value!r}."
        )
    if not 0 <= value <= 255 or not float(value).is_integer():  # noqa: PLR2004
        raise_channel_out_of_range(
            channel=channel, expected="an integer between 0 and 255", got=value
        )
    return int(value)


def _check_alpha(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise_invalid_arguments(
            detail=f"Color channel alpha must be a number. Got: {value!r}."
        )
    if not 0 <= value <= 1:
        raise_channel_out_of_range(
            channel="alpha", expected="a number between 0 and 1", got=value
        )
    return float(value)


def _unpack_argb(argb: object) -> tuple[int, int, int, float]:
    """
    Split a packed `0xAARRGGBB` integer into channels.

    Args:
        argb: Packed integer, one byte per channel, alpha in the high byte.

    Returns:
        `(r, g, b, a)` with alpha scaled to [0, 1].
    """
    if isinstance(argb, bool) or not isinstance(argb, numbers.Integral):
        raise_invalid_arguments(detail=f"Packed color must be an integer. Got: {argb!r}.")
    if not 0 <= argb <= _MAX_ARGB:
        raise_channel_out_of_range(
            channel="argb", expected="an integer between 0 and 0xFFFFFFFF", got=argb
        )
    alpha, red, green, blue = np.array([argb], dtype=">u4").view(np.uint8)
    return int(red), int(green), int(blue), int(alpha) / 255


class Color:
    """Sass's color type.

    Construct either from channels or from one packed integer::

        Color(107, 113, 127)      # #6b717f
        Color(0, 0, 0, 0)         # rgba(0, 0, 0, 0)
        Color(0xFF6B717F)         # #6b717f
    """

    __slots__ = ("_a", "_b", "_g", "_r")

    def __init__(
        self,
        r: int,
        g: int | None = None,
        b: int | None = None,
        a: float | None = None,
    ) -> None:
        """
        Initialize a Color.

        Args:
            r: Red channel 0-255, or a packed `0xAARRGGBB` integer when it is
                the only argument.
            g: Green channel 0-255.
            b: Blue channel 0-255.
            a: Alpha channel 0-1, defaults to 1.
        """
        if g is None and b is None and a is None:
            self._r, self._g, self._b, self._a = _unpack_argb(r)
            return
        if g is None or b is None:
            raise_invalid_arguments(
                detail="Color() takes either a packed argb integer or r, g, b[, a]."
            )
        channels = (
            _check_rgb("red", r),
            _check_rgb("green", g),
            _check_rgb("blue", b),
            _check_alpha(1.0 if a is None else a),
        )
        self._r, self._g, self._b, self._a = channels

    @classmethod
    def from_argb(cls, argb: int) -> Color:
        """Build a color from a packed `0xAARRGGBB` integer."""
        return cls(argb)

    def get_r(self) -> int:
        return self._r

    def get_g(self) -> int:
        return self._g

    def get_b(self) -> int:
        return self._b

    def get_a(self) -> float:
        return self._a

    def set_r(self, value: int) -> None:
        _deprecated("Color.set_r", "Color(r, g, b, a)")
        self._r = _check_rgb("red", value)

    def set_g(self, value: int) -> None:
        _deprecated("Color.set_g", "Color(r, g, b, a)")
        self._g = _check_rgb("green", value)

    def set_b(self, value: int) -> None:
        _deprecated("Color.set_b", "Color(r, g, b, a)")
        self._b = _check_rgb("blue", value)

    def set_a(self, value: float) -> None:
        _deprecated("Color.set_a", "Color(r, g, b, a)")
        self._a = _check_alpha(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return (self._r, self._g, self._b) == (
            other._r,
            other._g,
            other._b,
        ) and _fuzzy_equals(self._a, other._a)

    __hash__ = None

    def __str__(self) -> str:
        if self._a == 1:
            return f"#{self._r:02x}{self._g:02x}{self._b:02x}"
        return f"rgba({self._r}, {self._g}, {self._b}, {_format_number(self._a)})"

    def __repr__(self) -> str:
        return f"Color({self._r}, {self._g}, {self._b}, {self._a!r})"


# -----------------------------------------------------------------------------
# Deferred containers
# -----------------------------------------------------------------------------


def _check_length(length: object) -> int:
    if isinstance(length, bool) or not isinstance(length, numbers.Integral):
        raise_invalid_arguments(detail=f"length must be an integer. Got: {length!r}.")
    if length < 0:
        raise_invalid_arguments(detail=f"length must not be negative. Got: {length}.")
    return int(length)


def _check_index(index: object, length: int) -> int:
    if isinstance(index, bool) or not isinstance(index, numbers.Integral):
        raise_invalid_arguments(detail=f"index must be an integer. Got: {index!r}.")
    if not 0 <= index < length:
        raise_index_out_of_range(index=int(index), length=length)
    return int(index)


def _check_slot_value(value: object, *, what: str) -> LegacyValue:
    if not isinstance(value, _VALUE_TYPES):
        raise_invalid_result_type(what=what, got=value)
    return value


def _slot_str(value: LegacyValue | None) -> str:
    return "<unset>" if value is None else str(value)


class List:
    """Sass's list type.

    Elements start unset and must be filled with `set_value` before they are
    read or the list is passed back to the compiler::

        lst = List(3)
        lst.set_value(0, Number(10, "px"))
        lst.set_value(1, Number(15, "px"))
        lst.set_value(2, Number(32, "px"))
        str(lst)  # "10px, 15px, 32px"
    """

    __slots__ = ("_comma", "_slots")

    def __init__(self, length: int, comma_separated: bool = True) -> None:
        """
        Initialize a List of unset elements.

        Args:
            length: Number of elements; 0 is an empty list.
            comma_separated: Comma-separated if True, space-separated otherwise.
        """
        self._slots: list[LegacyValue | None] = [None] * _check_length(length)
        self._comma = bool(comma_separated)

    @classmethod
    def from_values(
        cls, values: Iterable[LegacyValue], *, comma_separated: bool = True
    ) -> List:
        """Build a list with every element set."""
        items = list(values)
        out = cls(len(items), comma_separated)
        for i, item in enumerate(items):
            out.set_value(i, item)
        return out

    def get_value(self, index: int) -> LegacyValue | None:
        """Return the element at `index`, or None if it hasn't been set.

        Raises:
            IndexError: If `index` is negative or past the end.
        """
        return self._slots[_check_index(index, len(self._slots))]

    def set_value(self, index: int, value: LegacyValue) -> None:
        """Set the element at `index`.

        Raises:
            IndexError: If `index` is negative or past the end.
            TypeError: If `value` is not a Sass value.
        """
        i = _check_index(index, len(self._slots))
        self._slots[i] = _check_slot_value(value, what=f"List element {i}")

    def get_separator(self) -> bool:
        """Return True if the list is comma-separated."""
        return self._comma

    def set_separator(self, is_comma: bool) -> None:
        self._comma = bool(is_comma)

    def get_length(self) -> int:
        return len(self._slots)

    def is_complete(self) -> bool:
        """Return True once every element has been set."""
        return all(slot is not None for slot in self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[LegacyValue | None]:
        return iter(self._slots)

    def __bool__(self) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, List):
            return NotImplemented
        if len(self._slots) != len(other._slots):
            return False
        if not self._slots:
            return True
        return self._comma == other._comma and all(
            a is not None and b is not None and a == b
            for a, b in zip(self._slots, other._slots, strict=True)
        )

    __hash__ = None

    def __str__(self) -> str:
        sep = ", " if self._comma else " "
        return sep.join(_slot_str(slot) for slot in self._slots)

    def __repr__(self) -> str:
        return f"List([{', '.join(repr(s) for s in self._slots)}], comma={self._comma})"


class Map:
    """Sass's map type, stored as an ordered sequence of key/value pairs.

    Keys and values start unset and must be filled with `set_key` and
    `set_value`. No two set keys may be equal::

        m = Map(2)
        m.set_key(0, String("width"))
        m.set_value(0, Number(300, "px"))
        m.set_key(1, String("height"))
        m.set_value(1, Number(100, "px"))
        str(m)  # "(width: 300px, height: 100px)"
    """

    __slots__ = ("_keys", "_values")

    def __init__(self, length: int) -> None:
        """
        Initialize a Map of unset pairs.

        Args:
            length: Number of key/value pairs; 0 is an empty map.
        """
        n = _check_length(length)
        self._keys: list[LegacyValue | None] = [None] * n
        self._values: list[LegacyValue | None] = [None] * n

    def get_key(self, index: int) -> LegacyValue | None:
        """Return the key of the pair at `index`, or None if unset."""
        return self._keys[_check_index(index, len(self._keys))]

    def set_key(self, index: int, key: LegacyValue) -> None:
        """Set the key of the pair at `index`.

        Raises:
            IndexError: If `index` is negative or past the end.
            TypeError: If `key` is not a Sass value.
            ValueError: If another pair already has an equal key.
        """
        i = _check_index(index, len(self._keys))
        key = _check_slot_value(key, what=f"Map key {i}")
        for j, existing in enumerate(self._keys):
            if j != i and existing is not None and existing == key:
                raise_duplicate_map_key(key=key, index=i, other=j)
        self._keys[i] = key

    def get_value(self, index: int) -> LegacyValue | None:
        """Return the value of the pair at `index`, or None if unset."""
        return self._values[_check_index(index, len(self._values))]

    def set_value(self, index: int, value: LegacyValue) -> None:
        """Set the value of the pair at `index`."""
        i = _check_index(index, len(self._values))
        self._values[i] = _check_slot_value(value, what=f"Map value {i}")

    def get_length(self) -> int:
        return len(self._keys)

    def items(self) -> Iterator[tuple[LegacyValue | None, LegacyValue | None]]:
        """Yield `(key, value)` pairs in order, unset slots as None."""
        return zip(self._keys, self._values, strict=True)

    def lookup(self, key: LegacyValue) -> LegacyValue | None:
        """Return the value paired with `key` by scanning the pairs in order."""
        for k, v in self.items():
            if k is not None and k == key:
                return v
        return None

    def check_unique_keys(self) -> None:
        """Fail if two set keys compare equal.

        Keys can become equal after `set_key` through the deprecated in-place
        setters, so this is re-checked when the map crosses the boundary.

        Raises:
            ValueError: On the first duplicate found.
        """
        for i, key in enumerate(self._keys):
            if key is None:
                continue
            for j in range(i):
                other = self._keys[j]
                if other is not None and other == key:
                    raise_duplicate_map_key(key=key, index=i, other=j)

    def is_complete(self) -> bool:
        """Return True once every key and value has been set."""
        return all(k is not None and v is not None for k, v in self.items())

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Map):
            return NotImplemented
        if len(self) != len(other) or not (self.is_complete() and other.is_complete()):
            return False
        for key, value in self.items():
            found = other.lookup(key)
            if found is None or found != value:
                return False
        return True

    __hash__ = None

    def __str__(self) -> str:
        pairs = ", ".join(f"{_slot_str(k)}: {_slot_str(v)}" for k, v in self.items())
        return f"({pairs})"

    def __repr__(self) -> str:
        return f"Map([{', '.join(f'({k!r}, {v!r})' for k, v in self.items())}])"


# -----------------------------------------------------------------------------
# Boundary
# -----------------------------------------------------------------------------

LegacyValue = Null | Number | String | Boolean | Color | List | Map

_VALUE_TYPES: Final[tuple[type, ...]] = (Null, Number, String, Boolean, Color, List, Map)


def ensure_legacy_value(value: object, *, what: str = "value") -> LegacyValue:
    """
    Validate a value that is about to cross the compiler boundary.

    Containers are checked recursively: every List element and Map key/value
    must be set, and Map keys must be unique.

    Args:
        value: Candidate value.
        what: Description used in error messages.

    Returns:
        The same value, unchanged.

    Raises:
        TypeError: If the value, or anything inside it, is not a Sass value or
            is an unset container slot.
        ValueError: If a Map contains duplicate keys.
    """
    return _ensure(value, what, set())


def _ensure(value: object, what: str, active: set[int]) -> LegacyValue:
    # ids of the containers on the current path; shared siblings are allowed.
    if not isinstance(value, _VALUE_TYPES):
        raise_invalid_result_type(what=what, got=value)
    if not isinstance(value, List | Map):
        return value
    if id(value) in active:
        raise_cyclic_value(what=what)

    active.add(id(value))
    if isinstance(value, List):
        for i, item in enumerate(value):
            _ensure(item, f"{what} element {i}", active)
    else:
        for i, (key, item) in enumerate(value.items()):
            _ensure(key, f"{what} key {i}", active)
            _ensure(item, f"{what} value {i}", active)
        value.check_unique_keys()
    active.discard(id(value))

    return value
