from __future__ import annotations

from fractions import Fraction

import pytest

from lib_live_config.domain.convert import convert


@pytest.mark.parametrize(
    ("value", "as_type", "expected"),
    [
        (5, None, 5),
        ("x", object, "x"),
        (5, int, 5),
        (True, bool, True),
        ("text", str, "text"),
        (5, float, 5.0),
        (3, Fraction, Fraction(3)),
        ("snow ☃", bytes, "snow ☃".encode("utf-8")),
        ((1, 2), list, [1, 2]),
        ((1, 2), tuple, (1, 2)),
        ((1, 2), list[int], [1, 2]),
        (("a", "b"), tuple[str, ...], ("a", "b")),
        ((1, "x"), tuple[int, str], (1, "x")),
    ],
)
def test_supported_conversions(value, as_type, expected) -> None:
    result = convert(value, as_type)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize(
    ("value", "as_type"),
    [
        (True, int),
        (1, bool),
        ("5", int),
        (5, str),
        (True, float),
        ("x", list),
        ((1, "x"), list[int]),
        ((1, 2, 3), tuple[int, int]),
        (5, dict),
    ],
)
def test_failed_conversions_return_none(value, as_type) -> None:
    assert convert(value, as_type) is None


def test_missing_value_converts_to_none() -> None:
    assert convert(None, int) is None
