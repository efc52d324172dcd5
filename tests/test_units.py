from __future__ import annotations

import pytest

from vital_log.model import GlucoseUnit
from vital_log.units import (
    display_glucose,
    parse_float,
    parse_int,
    to_canonical_glucose,
    to_milligram,
    to_millimolar,
)


@pytest.mark.parametrize(
    ("mg", "expected"),
    [("100", "5.5"), ("180", "10.0"), ("70", "3.9"), (126, "7.0")],
)
def test_to_millimolar_rounds_to_one_decimal(mg: object, expected: str) -> None:
    assert to_millimolar(mg) == expected


@pytest.mark.parametrize(
    ("mmol", "expected"),
    [("5,5", "99"), ("5.5", "99"), ("10", "180"), (" 7.0", "126")],
)
def test_to_milligram_accepts_comma_and_dot(mmol: object, expected: str) -> None:
    assert to_milligram(mmol) == expected


@pytest.mark.parametrize("value", ["", "abc", "   ", ",", None, "mg"])
def test_conversions_return_empty_for_non_numeric(value: object) -> None:
    assert to_millimolar(value) == ""
    assert to_milligram(value) == ""


def test_round_trip_stays_within_one_unit() -> None:
    for mg in range(40, 401):
        back = int(to_milligram(to_millimolar(str(mg))))
        assert abs(back - mg) <= 1, mg


def test_parse_float_reads_numeric_prefix() -> None:
    assert parse_float("120abc") == 120.0
    assert parse_float("  .5") == 0.5
    assert parse_float("6,2") == 6.0
    assert parse_float("6,2", comma_decimal=True) == 6.2
    assert parse_float("x12") is None
    assert parse_float(True) is None


def test_parse_int_truncates_decimals() -> None:
    assert parse_int("82.9") == 82
    assert parse_int(" 140") == 140
    assert parse_int("") is None


def test_display_and_canonical_glucose() -> None:
    assert display_glucose("180", GlucoseUnit.MG_DL) == "180"
    assert display_glucose("180", GlucoseUnit.MMOL_L) == "10.0"
    assert to_canonical_glucose("10", GlucoseUnit.MMOL_L) == "180"
    assert to_canonical_glucose("", GlucoseUnit.MMOL_L) == ""
    assert to_canonical_glucose("95", GlucoseUnit.MG_DL) == "95"


@pytest.mark.parametrize("value", ["1e307", "9" * 400])
def test_to_milligram_overflow_degrades_to_empty(value: str) -> None:
    assert to_milligram(value) == ""


def test_conversions_of_huge_values_degrade_to_empty() -> None:
    assert to_milligram("1e307") == ""
    assert to_millimolar("1e40") == ""
    assert to_canonical_glucose("1e307", GlucoseUnit.MMOL_L) == ""


def test_parse_int_beyond_digit_limit_is_none() -> None:
    assert parse_int("9" * 5000) is None
