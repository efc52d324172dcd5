"""Estadisticas de glucosa (promedio, eHbA1c), tabla diaria y series del grafico."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from vital_log.dates import unique_dates
from vital_log.model import (
    TIME_SLOTS,
    ChartPoint,
    GlucoseSummary,
    GlucoseUnit,
    HealthEntry,
)
from vital_log.units import display_glucose, parse_float, parse_int

HBA1C_OFFSET = 46.7
HBA1C_DIVISOR = 28.7


def real_glucose_values(entries: Iterable[HealthEntry]) -> list[float]:
    """Glucose values (mg/dL) typed by the user, excluding placeholders."""
    values: list[float] = []
    for entry in entries:
        if not entry.glucose or entry.glucose_is_estimated:
            continue
        value = parse_float(entry.glucose)
        if value is not None:
            values.append(value)
    return values


def estimate_hba1c(average_glucose: float) -> float:
    """Estimated HbA1c (%) from average glucose in mg/dL."""
    return (average_glucose + HBA1C_OFFSET) / HBA1C_DIVISOR


def summarize_glucose(entries: Iterable[HealthEntry]) -> GlucoseSummary | None:
    """Average glucose and estimated HbA1c over real readings.

    Returns:
        None when there is no real glucose reading (statistics unavailable).
    """
    values = real_glucose_values(entries)
    if not values:
        return None
    average = sum(values) / len(values)
    return GlucoseSummary(
        average_glucose=average,
        estimated_hba1c=estimate_hba1c(average),
        readings_count=len(values),
    )


def daily_table(entries: Sequence[HealthEntry], unit: GlucoseUnit) -> pd.DataFrame:
    """Vista "tabla": una fila por dia (mas reciente primero) y celdas por franja.

    Cada franja aporta tres columnas: ``<franja>_glucose``, ``<franja>_pressure``
    (``sys/dia``) y ``<franja>_pulse``. Las franjas sin lectura quedan en "".
    """
    columns = ["date"] + [
        f"{slot.name.lower()}_{metric}"
        for slot in TIME_SLOTS
        for metric in ("glucose", "pressure", "pulse")
    ]
    if not entries:
        return pd.DataFrame(columns=columns)

    by_key = {entry.key: entry for entry in entries}
    rows: list[dict[str, object]] = []
    for day in unique_dates(entries, newest_first=True):
        row: dict[str, object] = {"date": day}
        for slot in TIME_SLOTS:
            prefix = slot.name.lower()
            entry = by_key.get((day, slot))
            if entry is None:
                row[f"{prefix}_glucose"] = ""
                row[f"{prefix}_pressure"] = ""
                row[f"{prefix}_pulse"] = ""
                continue
            row[f"{prefix}_glucose"] = display_glucose(entry.glucose, unit)
            row[f"{prefix}_pressure"] = f"{entry.systolic}/{entry.diastolic}"
            row[f"{prefix}_pulse"] = entry.pulse
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def chart_series(
    entries: Sequence[HealthEntry], unit: GlucoseUnit
) -> list[ChartPoint]:
    """Puntos del grafico: cuatro franjas por cada dia con datos.

    Los valores ``*_full`` incluyen los estimados (linea de tendencia sin
    huecos); los ``*_real`` solo mediciones reales. El pulso no tiene marca
    de estimado y siempre es real.
    """
    by_key = {entry.key: entry for entry in entries}
    points: list[ChartPoint] = []
    for day in unique_dates(entries):
        for slot in TIME_SLOTS:
            entry = by_key.get((day, slot))
            if entry is None:
                points.append(ChartPoint(date=day, time_slot=slot))
                continue
            glucose = _chart_glucose(entry.glucose, unit)
            systolic = parse_int(entry.systolic)
            diastolic = parse_int(entry.diastolic)
            pulse = parse_int(entry.pulse)
            points.append(
                ChartPoint(
                    date=day,
                    time_slot=slot,
                    glucose_full=glucose,
                    systolic_full=systolic,
                    diastolic_full=diastolic,
                    pulse_full=pulse,
                    glucose_real=None if entry.glucose_is_estimated else glucose,
                    systolic_real=None if entry.pressure_is_estimated else systolic,
                    diastolic_real=None if entry.pressure_is_estimated else diastolic,
                    pulse_real=pulse,
                )
            )
    return points


def chart_frame(entries: Sequence[HealthEntry], unit: GlucoseUnit) -> pd.DataFrame:
    """Series del grafico como DataFrame (una fila por punto)."""
    points = chart_series(entries, unit)
    return pd.DataFrame(
        [
            {
                "date": p.date,
                "time_slot": p.time_slot.value,
                "glucose_full": p.glucose_full,
                "glucose_real": p.glucose_real,
                "systolic_full": p.systolic_full,
                "systolic_real": p.systolic_real,
                "diastolic_full": p.diastolic_full,
                "diastolic_real": p.diastolic_real,
                "pulse_full": p.pulse_full,
                "pulse_real": p.pulse_real,
            }
            for p in points
        ]
    )


def _chart_glucose(value: str, unit: GlucoseUnit) -> float | None:
    if not value:
        return None
    if unit is GlucoseUnit.MMOL_L:
        return parse_float(display_glucose(value, unit))
    number = parse_int(value)
    return None if number is None else float(number)
