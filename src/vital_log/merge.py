"""Fusion de las entradas del dia (cuatro franjas) con las lecturas guardadas.

Cada franja se procesa de forma independiente:

- franja sin ningun campo: se ignora (no crea ni toca lecturas);
- franja nueva: los campos vacios se completan con valores por defecto y se
  marcan como estimados;
- franja existente: los campos con valor reemplazan, los vacios conservan el
  valor y la marca anterior.

La marca de presion es compartida por sistolica y diastolica; la de glucosa
es independiente.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Callable, Collection, Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from vital_log.dates import is_valid_date, sort_entries
from vital_log.errors import EmptyInputError, InvalidDateError
from vital_log.logging_config import get_logger
from vital_log.model import (
    DEFAULT_DIASTOLIC,
    DEFAULT_GLUCOSE,
    DEFAULT_PULSE,
    DEFAULT_SYSTOLIC,
    TIME_SLOTS,
    DailyInputs,
    GlucoseUnit,
    HealthEntry,
    SlotInput,
    TimeSlot,
)
from vital_log.units import to_canonical_glucose

logger = get_logger(__name__)

IdFactory = Callable[[int], str]

_ID_ALPHABET = string.digits + string.ascii_lowercase


def empty_inputs() -> DailyInputs:
    """Formulario vacio para las cuatro franjas."""
    return {slot: SlotInput() for slot in TIME_SLOTS}


def has_any_input(inputs: DailyInputs) -> bool:
    """True si alguna franja tiene al menos un campo no vacio."""
    return any(not slot_input.is_empty() for slot_input in inputs.values())


def new_entry_id(created_at: int) -> str:
    """Generate an id like ``E-1710489600000-k3z9``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(4))
    return f"E-{created_at}-{suffix}"


def now_millis() -> int:
    return int(datetime.now().timestamp() * 1000)


def merge_daily_inputs(
    date_text: str,
    inputs: DailyInputs,
    unit: GlucoseUnit,
    entries: Sequence[HealthEntry],
    *,
    now: int | None = None,
    id_factory: IdFactory | None = None,
) -> list[HealthEntry]:
    """Merge one day of slot inputs into the entry collection.

    Args:
        date_text: Day of the readings (DD.MM.YYYY).
        inputs: Raw text fields per time slot; missing slots count as empty.
        unit: Unit in which glucose was typed.
        entries: Current entries (left untouched).
        now: Creation timestamp in epoch milliseconds for new entries.
        id_factory: Builds ids for new entries from the timestamp.

    Returns:
        New sorted list of entries.

    Raises:
        InvalidDateError: If ``date_text`` is not a real DD.MM.YYYY date.
        EmptyInputError: If no slot has any value.
    """
    if not is_valid_date(date_text):
        raise InvalidDateError(date_text)
    if not has_any_input(inputs):
        raise EmptyInputError("No hay valores para guardar.")

    timestamp = now_millis() if now is None else now
    make_id = id_factory or new_entry_id
    used_ids = {entry.id for entry in entries}
    by_key = {entry.key: idx for idx, entry in enumerate(entries)}
    merged = list(entries)

    for slot in TIME_SLOTS:
        slot_input = inputs.get(slot, SlotInput()).trimmed()
        if slot_input.is_empty():
            continue
        slot_input = replace(
            slot_input, glucose=to_canonical_glucose(slot_input.glucose, unit)
        )

        idx = by_key.get((date_text, slot))
        if idx is None:
            entry = _create_entry(
                date_text,
                slot,
                slot_input,
                timestamp,
                _unique_id(make_id, timestamp, used_ids),
            )
            by_key[entry.key] = len(merged)
            merged.append(entry)
            logger.debug("Nueva lectura %s %s", date_text, slot.value)
        else:
            merged[idx] = _update_entry(merged[idx], slot_input)
            logger.debug("Lectura actualizada %s %s", date_text, slot.value)

    return sort_entries(merged)


def _unique_id(make_id: IdFactory, timestamp: int, used_ids: set[str]) -> str:
    entry_id = make_id(timestamp)
    while entry_id in used_ids:
        entry_id = new_entry_id(timestamp)
    used_ids.add(entry_id)
    return entry_id


def _create_entry(
    date_text: str,
    slot: TimeSlot,
    values: SlotInput,
    created_at: int,
    entry_id: str,
) -> HealthEntry:
    return HealthEntry(
        id=entry_id,
        date=date_text,
        time_slot=slot,
        glucose=values.glucose or DEFAULT_GLUCOSE,
        systolic=values.systolic or DEFAULT_SYSTOLIC,
        diastolic=values.diastolic or DEFAULT_DIASTOLIC,
        pulse=values.pulse or DEFAULT_PULSE,
        created_at=created_at,
        glucose_is_estimated=not values.glucose,
        pressure_is_estimated=not values.systolic and not values.diastolic,
    )


def _update_entry(entry: HealthEntry, values: SlotInput) -> HealthEntry:
    return replace(
        entry,
        glucose=values.glucose or entry.glucose or DEFAULT_GLUCOSE,
        systolic=values.systolic or entry.systolic or DEFAULT_SYSTOLIC,
        diastolic=values.diastolic or entry.diastolic or DEFAULT_DIASTOLIC,
        pulse=values.pulse or entry.pulse or DEFAULT_PULSE,
        glucose_is_estimated=False if values.glucose else entry.glucose_is_estimated,
        pressure_is_estimated=(
            False
            if values.systolic or values.diastolic
            else entry.pressure_is_estimated
        ),
    )


def delete_entry(entries: Iterable[HealthEntry], entry_id: str) -> list[HealthEntry]:
    """Quita una lectura por id."""
    return [entry for entry in entries if entry.id != entry_id]


def delete_entries(
    entries: Iterable[HealthEntry], entry_ids: Collection[str]
) -> list[HealthEntry]:
    """Quita varias lecturas por id."""
    ids = set(entry_ids)
    return [entry for entry in entries if entry.id not in ids]


def delete_day(entries: Iterable[HealthEntry], date_text: str) -> list[HealthEntry]:
    """Quita todas las lecturas de un dia."""
    return [entry for entry in entries if entry.date != date_text]


def delete_days(
    entries: Iterable[HealthEntry], dates: Collection[str]
) -> list[HealthEntry]:
    """Quita todas las lecturas de varios dias."""
    day_set = set(dates)
    return [entry for entry in entries if entry.date not in day_set]
