"""Clasificacion de valores fuera del rango normal."""

from __future__ import annotations

from dataclasses import dataclass

from vital_log.model import GlucoseUnit, HealthEntry
from vital_log.units import display_glucose, parse_float, parse_int


@dataclass(frozen=True)
class NormalRange:
    """Inclusive normal range; values exactly at a bound are normal."""

    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


GLUCOSE_RANGES: dict[GlucoseUnit, NormalRange] = {
    GlucoseUnit.MG_DL: NormalRange(70, 140),
    GlucoseUnit.MMOL_L: NormalRange(3.9, 7.8),
}
SYSTOLIC_RANGE = NormalRange(90, 140)
DIASTOLIC_RANGE = NormalRange(60, 90)
PULSE_RANGE = NormalRange(60, 100)


def is_glucose_out_of_range(
    value: str, unit: GlucoseUnit = GlucoseUnit.MG_DL
) -> bool:
    num = parse_float(value, comma_decimal=True)
    if num is None:
        return False
    return not GLUCOSE_RANGES[unit].contains(num)


def is_systolic_out_of_range(value: str) -> bool:
    num = parse_int(value)
    return num is not None and not SYSTOLIC_RANGE.contains(num)


def is_diastolic_out_of_range(value: str) -> bool:
    num = parse_int(value)
    return num is not None and not DIASTOLIC_RANGE.contains(num)


def is_pulse_out_of_range(value: str) -> bool:
    num = parse_int(value)
    return num is not None and not PULSE_RANGE.contains(num)


@dataclass(frozen=True)
class EntryFlags:
    """Estado por metrica para presentacion: "estimated", "out_of_range" o "ok"."""

    glucose: str
    pressure: str
    pulse: str


def entry_flags(entry: HealthEntry, unit: GlucoseUnit) -> EntryFlags:
    """Clasifica una lectura para colorear tablas.

    Los valores estimados se informan como tales y no como fuera de rango.
    """
    if entry.glucose_is_estimated:
        glucose = "estimated"
    else:
        shown = display_glucose(entry.glucose, unit)
        glucose = "out_of_range" if is_glucose_out_of_range(shown, unit) else "ok"

    if entry.pressure_is_estimated:
        pressure = "estimated"
    elif is_systolic_out_of_range(entry.systolic) or is_diastolic_out_of_range(
        entry.diastolic
    ):
        pressure = "out_of_range"
    else:
        pressure = "ok"

    pulse = "out_of_range" if is_pulse_out_of_range(entry.pulse) else "ok"
    return EntryFlags(glucose=glucose, pressure=pressure, pulse=pulse)
