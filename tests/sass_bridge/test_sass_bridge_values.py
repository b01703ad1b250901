"""Unit tests for sass_bridge.values scalar types (pytest).

These tests cover:
- Null and Boolean singleton identity, copy and pickle behavior
- Sass truthiness
- Number units, unit-agnostic values, and deprecated in-place setters
- String contents and deprecated setter
- Color channel validation and packed ARGB construction
"""

from __future__ import annotations

import copy
import pickle
import re

import numpy as np
import pytest

from sass_bridge.errors import ErrorCode
from sass_bridge.units import format_unit, parse_unit
from sass_bridge.values import (
    FALSE,
    NULL,
    TRUE,
    Boolean,
    Color,
    List,
    Map,
    Null,
    Number,
    String,
    is_truthy,
)

# -----------------------------------------------------------------------------
# Singletons
# -----------------------------------------------------------------------------


def test_null_is_a_singleton() -> None:
    """Null() and Null.NULL are the one null value."""
    assert Null() is NULL
    assert Null.NULL is NULL
    assert copy.deepcopy(NULL) is NULL
    assert pickle.loads(pickle.dumps(NULL)) is NULL  # noqa: S301


def test_boolean_singletons() -> None:
    """TRUE and FALSE are stable and report their truth value."""
    assert Boolean.TRUE is TRUE
    assert Boolean.FALSE is FALSE
    assert TRUE.get_value() is True
    assert FALSE.get_value() is False
    assert Boolean.TRUE is Boolean.TRUE


def test_boolean_cannot_be_constructed() -> None:
    """No construction path yields a third Boolean."""
    with pytest.raises(TypeError, match="can't be constructed"):
        Boolean()
    with pytest.raises(TypeError, match="can't be constructed"):
        Boolean(True)  # type: ignore[call-arg]

    assert copy.copy(TRUE) is TRUE
    assert copy.deepcopy(FALSE) is FALSE
    assert pickle.loads(pickle.dumps(TRUE)) is TRUE  # noqa: S301
    assert pickle.loads(pickle.dumps(FALSE)) is FALSE  # noqa: S301


def test_boolean_is_immutable() -> None:
    """Singleton state cannot be overwritten."""
    with pytest.raises(AttributeError):
        TRUE._value = False  # type: ignore[misc]  # noqa: SLF001
    assert TRUE.get_value() is True


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (FALSE, False),
        (NULL, False),
        (TRUE, True),
        (Number(0), True),
        (String(""), True),
        (List(0), True),
        (Map(0), True),
        (Color(0, 0, 0, 0), True),
    ],
)
def test_truthiness(value: object, expected: bool) -> None:
    """Only FALSE and NULL are falsey; bool() agrees with is_truthy."""
    assert is_truthy(value) is expected
    assert bool(value) is expected


# -----------------------------------------------------------------------------
# Numbers
# -----------------------------------------------------------------------------


def test_number_defaults_to_unitless() -> None:
    """A number without a unit is dimensionless."""
    n = Number(0.5)
    assert n.get_value() == 0.5
    assert n.get_unit() == ""
    assert n.numerator_units == ()
    assert n.denominator_units == ()


def test_number_complex_unit_preserved() -> None:
    """Complex units re-serialize exactly as constructed."""
    n = Number(10, "px*px/s*s")
    assert n.get_unit() == "px*px/s*s"
    assert n.numerator_units == ("px", "px")
    assert n.denominator_units == ("s", "s")
    assert Number(10, "/s").get_unit() == "/s"


@pytest.mark.parametrize("unit", ["", "px", "px/s", "/s", "em*px/ms*s"])
def test_number_unit_round_trip(unit: str) -> None:
    """Reparsing a number's unit string reproduces it."""
    n = Number(3, unit)
    assert format_unit(*parse_unit(n.get_unit())) == n.get_unit()


def test_number_value_ignores_units() -> None:
    """get_value returns the magnitude only."""
    assert Number(96, "px").get_value() == 96.0
    assert Number(1, "in").get_value() == 1.0
    assert isinstance(Number(np.float32(2.5)).get_value(), float)


def test_number_rejects_bad_input() -> None:
    """Non-numeric values and malformed units abort construction."""
    with pytest.raises(TypeError, match="real number"):
        Number("10")  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="real number"):
        Number(True)
    with pytest.raises(ValueError, match="Invalid unit expression") as exc:
        Number(1, "px//s")
    assert exc.value.__cause__.code == ErrorCode.INVALID_UNIT_SYNTAX


def test_number_rejects_values_beyond_float_range() -> None:
    """Integers that overflow a double are rejected with a coded TypeError."""
    with pytest.raises(TypeError, match="too large") as exc:
        Number(10**400)
    assert exc.value.__cause__.code == ErrorCode.INVALID_ARGUMENTS


def test_number_equality_is_unit_aware() -> None:
    """Sass equality compares magnitude and unit multisets."""
    assert Number(1, "px") == Number(1, "px")
    assert Number(1, "px*em") == Number(1, "em*px")
    assert Number(1, "px") != Number(1)
    assert Number(1) == Number(1 + 1e-12)
    assert Number(1) != String("1")


def test_number_deprecated_setters_mutate_in_place() -> None:
    """Setters change one field and are visible through every reference."""
    n = Number(10, "px")
    alias = n
    with pytest.warns(DeprecationWarning, match="Number.set_value"):
        n.set_value(20)
    assert alias.get_value() == 20.0
    assert alias.get_unit() == "px"

    with pytest.warns(DeprecationWarning, match="Number.set_unit"):
        n.set_unit("em/s")
    assert alias.get_unit() == "em/s"
    assert alias.get_value() == 20.0


def test_number_failed_set_unit_leaves_state() -> None:
    """An invalid unit does not partially update the number."""
    n = Number(5, "px")
    with pytest.warns(DeprecationWarning), pytest.raises(ValueError):
        n.set_unit("px/")
    assert n.get_unit() == "px"


def test_number_str() -> None:
    """Numbers print with their units."""
    assert str(Number(10, "px")) == "10px"
    assert str(Number(0.5)) == "0.5"


# -----------------------------------------------------------------------------
# Strings
# -----------------------------------------------------------------------------


def test_string_contents() -> None:
    """Strings keep their contents verbatim."""
    s = String("Helvetica Neue")
    assert s.get_value() == "Helvetica Neue"
    assert String("\\1F46D").get_value() == "\\1F46D"
    assert s == String("Helvetica Neue")


def test_string_deprecated_setter() -> None:
    """set_value updates the shared instance."""
    s = String("Arial")
    with pytest.warns(DeprecationWarning, match="String.set_value"):
        s.set_value("Courier")
    assert s.get_value() == "Courier"


def test_string_rejects_non_str() -> None:
    """String contents must be text."""
    with pytest.raises(TypeError, match="must be a str"):
        String(3)  # type: ignore[arg-type]


# -----------------------------------------------------------------------------
# Colors
# -----------------------------------------------------------------------------


def test_color_from_channels() -> None:
    """RGB channels are integers; alpha defaults to 1."""
    c = Color(107, 113, 127)
    assert (c.get_r(), c.get_g(), c.get_b(), c.get_a()) == (107, 113, 127, 1.0)
    assert str(c) == "#6b717f"
    assert str(Color(0, 0, 0, 0)) == "rgba(0, 0, 0, 0)"


def test_color_from_packed_argb() -> None:
    """A packed 0xAARRGGBB integer yields the same state as channels."""
    packed = Color(0xFF6B717F)
    assert (packed.get_r(), packed.get_g(), packed.get_b()) == (107, 113, 127)
    assert packed.get_a() == 1.0
    assert packed == Color(107, 113, 127, 1.0)
    assert Color.from_argb(0xFF6B717F) == packed

    clear = Color(0x00000000)
    assert (clear.get_r(), clear.get_g(), clear.get_b(), clear.get_a()) == (0, 0, 0, 0.0)

    half = Color(0x80FF0000)
    assert half.get_r() == 255
    assert half.get_a() == pytest.approx(128 / 255)


@pytest.mark.parametrize(
    ("args", "channel"),
    [
        ((256, 0, 0), "red"),
        ((0, -1, 0), "green"),
        ((0, 0, 1.5), "blue"),
        ((0, 0, 0, 1.5), "alpha"),
        ((0, 0, 0, -0.1), "alpha"),
        ((0x1_0000_0000,), "argb"),
        ((-1,), "argb"),
    ],
)
def test_color_channel_out_of_range(args: tuple, channel: str) -> None:
    """Out-of-range channels abort construction with a coded ValueError."""
    with pytest.raises(ValueError, match=re.escape(f"Color channel {channel}")) as exc:
        Color(*args)
    assert exc.value.__cause__.code == ErrorCode.CHANNEL_OUT_OF_RANGE


def test_color_channel_beyond_float_range() -> None:
    """Integers too large for a float still report a channel range error."""
    with pytest.raises(ValueError, match=re.escape("Color channel red")) as exc:
        Color(10**400, 0, 0)
    assert exc.value.__cause__.code == ErrorCode.CHANNEL_OUT_OF_RANGE


def test_color_accepts_integral_floats() -> None:
    """Channels like 255.0 are integers in value and are accepted."""
    assert Color(255.0, 0, 0).get_r() == 255


def test_color_requires_all_rgb_channels() -> None:
    """Partial channel lists are rejected."""
    with pytest.raises(TypeError, match="packed argb integer or r, g, b"):
        Color(1, 2)  # type: ignore[call-arg]


def test_color_deprecated_setters() -> None:
    """Setters validate and update one channel in place."""
    c = Color(1, 2, 3)
    with pytest.warns(DeprecationWarning, match="Color.set_r"):
        c.set_r(200)
    with pytest.warns(DeprecationWarning, match="Color.set_a"):
        c.set_a(0.25)
    assert (c.get_r(), c.get_g(), c.get_b(), c.get_a()) == (200, 2, 3, 0.25)

    with pytest.warns(DeprecationWarning), pytest.raises(ValueError):
        c.set_g(999)
    assert c.get_g() == 2
