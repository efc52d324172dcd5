"""Conversion de glucosa entre mg/dL y mmol/L."""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from vital_log.model import GlucoseUnit

GLUCOSE_FACTOR = 18.0182

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_float(value: object, *, comma_decimal: bool = False) -> float | None:
    """Lee el prefijo numerico de un texto ("120abc" -> 120.0).

    Args:
        value: Texto o numero.
        comma_decimal: Acepta la primera coma como separador decimal.

    Returns:
        El numero, o None si no hay prefijo numerico finito.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    text = value.replace(",", ".", 1) if comma_decimal else value
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def parse_int(value: object) -> int | None:
    """Lee el prefijo entero de un texto ("82.9" -> 82)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    match = _INT_PREFIX.match(value)
    if not match:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        # mas digitos que el limite de conversion de int
        return None


def to_millimolar(mg_value: object) -> str:
    """Convert mg/dL to mmol/L, one decimal place; "" when not numeric."""
    mg = parse_float(mg_value)
    if mg is None:
        return ""
    try:
        quantized = Decimal(mg / GLUCOSE_FACTOR).quantize(
            Decimal("0.1"), rounding=ROUND_HALF_UP
        )
    except InvalidOperation:
        # excede la precision decimal
        return ""
    return str(quantized)


def to_milligram(mmol_value: object) -> str:
    """Convert mmol/L (comma or dot decimals) to whole mg/dL; "" when not numeric."""
    mmol = parse_float(mmol_value, comma_decimal=True)
    if mmol is None:
        return ""
    mg = mmol * GLUCOSE_FACTOR
    if not math.isfinite(mg):
        return ""
    return str(math.floor(mg + 0.5))


def display_glucose(mg_value: str, unit: GlucoseUnit) -> str:
    """Render a canonical mg/dL value in the display unit."""
    if unit is GlucoseUnit.MMOL_L:
        return to_millimolar(mg_value)
    return mg_value


def to_canonical_glucose(value: str, unit: GlucoseUnit) -> str:
    """Normaliza un valor tipeado en la unidad activa a mg/dL."""
    if unit is GlucoseUnit.MMOL_L and value:
        return to_milligram(value)
    return value
