from __future__ import annotations

from collections.abc import Callable
from itertools import count

import pytest

from vital_log.errors import EmptyInputError, InvalidDateError
from vital_log.merge import (
    delete_day,
    delete_days,
    delete_entries,
    delete_entry,
    empty_inputs,
    has_any_input,
    merge_daily_inputs,
    new_entry_id,
)
from vital_log.model import GlucoseUnit, HealthEntry, SlotInput, TimeSlot

MG = GlucoseUnit.MG_DL


def _ids() -> Callable[[int], str]:
    seq = count(1)
    return lambda ts: f"E-{ts}-{next(seq)}"


def _inputs(**slots: SlotInput) -> dict[TimeSlot, SlotInput]:
    inputs = empty_inputs()
    for name, value in slots.items():
        inputs[TimeSlot[name.upper()]] = value
    return inputs


def test_scenario_partial_morning_input() -> None:
    inputs = _inputs(morning=SlotInput(glucose="180", pulse="75"))

    result = merge_daily_inputs("15.03.2024", inputs, MG, [], now=1000)

    assert len(result) == 1
    entry = result[0]
    assert entry.date == "15.03.2024"
    assert entry.time_slot is TimeSlot.MORNING
    assert entry.glucose == "180"
    assert entry.glucose_is_estimated is False
    assert entry.systolic == "120"
    assert entry.diastolic == "80"
    assert entry.pressure_is_estimated is True
    assert entry.pulse == "75"
    assert entry.created_at == 1000


def test_only_glucose_fills_all_other_defaults() -> None:
    result = merge_daily_inputs(
        "15.03.2024", _inputs(noon=SlotInput(glucose="95")), MG, []
    )
    entry = result[0]
    assert (entry.glucose, entry.systolic, entry.diastolic, entry.pulse) == (
        "95",
        "120",
        "80",
        "72",
    )
    assert not entry.glucose_is_estimated
    assert entry.pressure_is_estimated


def test_only_pressure_marks_glucose_estimated() -> None:
    result = merge_daily_inputs(
        "15.03.2024", _inputs(night=SlotInput(diastolic="85")), MG, []
    )
    entry = result[0]
    assert entry.glucose == "100"
    assert entry.glucose_is_estimated
    assert entry.systolic == "120"
    assert entry.diastolic == "85"
    # basta un valor de presion para que la marca compartida sea falsa
    assert not entry.pressure_is_estimated


def test_empty_slots_are_skipped() -> None:
    inputs = _inputs(
        morning=SlotInput(glucose=" 110 "),
        noon=SlotInput(glucose="  ", systolic="", diastolic=" ", pulse=""),
    )
    result = merge_daily_inputs("15.03.2024", inputs, MG, [])
    assert [e.time_slot for e in result] == [TimeSlot.MORNING]
    assert result[0].glucose == "110"


def test_remerge_full_input_updates_single_entry() -> None:
    ids = _ids()
    first = _inputs(morning=SlotInput("110", "130", "85", "70"))
    second = _inputs(morning=SlotInput("150", "135", "88", "77"))

    once = merge_daily_inputs("15.03.2024", first, MG, [], now=1, id_factory=ids)
    twice = merge_daily_inputs("15.03.2024", second, MG, once, now=2, id_factory=ids)

    assert len(twice) == 1
    entry = twice[0]
    assert (entry.glucose, entry.systolic, entry.diastolic, entry.pulse) == (
        "150",
        "135",
        "88",
        "77",
    )
    assert not entry.glucose_is_estimated
    assert not entry.pressure_is_estimated
    assert entry.id == once[0].id
    assert entry.created_at == 1


def test_update_keeps_values_and_flags_for_empty_fields() -> None:
    created = merge_daily_inputs(
        "15.03.2024", _inputs(morning=SlotInput(pulse="66")), MG, [], now=1
    )
    assert created[0].glucose_is_estimated and created[0].pressure_is_estimated

    updated = merge_daily_inputs(
        "15.03.2024", _inputs(morning=SlotInput(systolic="131")), MG, created, now=2
    )

    entry = updated[0]
    assert entry.systolic == "131"
    assert entry.diastolic == "80"
    assert entry.pulse == "66"
    assert entry.glucose == "100"
    assert entry.glucose_is_estimated is True
    assert entry.pressure_is_estimated is False


def test_update_clears_glucose_flag_only() -> None:
    created = merge_daily_inputs(
        "15.03.2024", _inputs(morning=SlotInput(pulse="66")), MG, []
    )
    updated = merge_daily_inputs(
        "15.03.2024", _inputs(morning=SlotInput(glucose="140")), MG, created
    )
    assert updated[0].glucose == "140"
    assert updated[0].glucose_is_estimated is False
    assert updated[0].pressure_is_estimated is True


def test_update_falls_back_to_default_when_stored_value_empty(
    make_entry: Callable[..., HealthEntry],
) -> None:
    stored = make_entry(glucose="", systolic="", diastolic="", pulse="")
    result = merge_daily_inputs(
        stored.date, _inputs(morning=SlotInput(pulse="70")), MG, [stored]
    )
    entry = result[0]
    assert (entry.glucose, entry.systolic, entry.diastolic, entry.pulse) == (
        "100",
        "120",
        "80",
        "70",
    )


def test_mmol_input_is_stored_as_mg() -> None:
    result = merge_daily_inputs(
        "15.03.2024",
        _inputs(evening=SlotInput(glucose="5,5")),
        GlucoseUnit.MMOL_L,
        [],
    )
    assert result[0].glucose == "99"
    assert not result[0].glucose_is_estimated


def test_unparsable_mmol_glucose_becomes_estimated_default() -> None:
    result = merge_daily_inputs(
        "15.03.2024",
        _inputs(evening=SlotInput(glucose="abc", pulse="70")),
        GlucoseUnit.MMOL_L,
        [],
    )
    assert result[0].glucose == "100"
    assert result[0].glucose_is_estimated


def test_invalid_date_rejects_whole_merge(
    make_entry: Callable[..., HealthEntry],
) -> None:
    existing = [make_entry()]
    with pytest.raises(InvalidDateError):
        merge_daily_inputs(
            "31.02.2024", _inputs(morning=SlotInput(glucose="100")), MG, existing
        )
    assert existing == [make_entry()]


def test_no_input_rejected() -> None:
    with pytest.raises(EmptyInputError):
        merge_daily_inputs("15.03.2024", empty_inputs(), MG, [])
    with pytest.raises(EmptyInputError):
        merge_daily_inputs(
            "15.03.2024", _inputs(morning=SlotInput(glucose="   ")), MG, []
        )


def test_input_collection_is_not_mutated(
    make_entry: Callable[..., HealthEntry],
) -> None:
    existing = [make_entry(glucose="110")]
    snapshot = list(existing)
    merge_daily_inputs(
        "15.03.2024", _inputs(morning=SlotInput(glucose="200")), MG, existing
    )
    assert existing == snapshot


def test_sequences_of_merges_keep_date_slot_unique() -> None:
    entries: list[HealthEntry] = []
    days = ["01.01.2024", "02.01.2024", "01.01.2024", "03.01.2024", "02.01.2024"]
    for i, day in enumerate(days):
        inputs = _inputs(
            morning=SlotInput(glucose=str(100 + i)),
            night=SlotInput(pulse=str(60 + i)) if i % 2 else SlotInput(),
        )
        entries = merge_daily_inputs(day, inputs, MG, entries, now=i)

    keys = [e.key for e in entries]
    assert len(keys) == len(set(keys))
    assert len({e.id for e in entries}) == len(entries)
    assert [e.date for e in entries] == sorted(
        (e.date for e in entries), key=lambda d: d[6:] + d[3:5] + d[:2]
    )


def test_result_is_sorted(make_entry: Callable[..., HealthEntry]) -> None:
    existing = [make_entry("02.01.2024", TimeSlot.MORNING)]
    result = merge_daily_inputs(
        "01.01.2024",
        _inputs(night=SlotInput(glucose="90"), morning=SlotInput(glucose="80")),
        MG,
        existing,
    )
    assert [(e.date, e.time_slot) for e in result] == [
        ("01.01.2024", TimeSlot.MORNING),
        ("01.01.2024", TimeSlot.NIGHT),
        ("02.01.2024", TimeSlot.MORNING),
    ]


def test_generated_ids_are_unique_even_on_collision(
    make_entry: Callable[..., HealthEntry],
) -> None:
    existing = [make_entry(id="E-5-dup", date="01.01.2024")]
    result = merge_daily_inputs(
        "02.01.2024",
        _inputs(morning=SlotInput(glucose="90")),
        MG,
        existing,
        now=5,
        id_factory=lambda ts: f"E-{ts}-dup",
    )
    assert len({e.id for e in result}) == 2


def test_new_entry_id_format() -> None:
    entry_id = new_entry_id(1710489600000)
    prefix, ts, suffix = entry_id.split("-")
    assert prefix == "E"
    assert ts == "1710489600000"
    assert len(suffix) == 4


def test_has_any_input() -> None:
    assert not has_any_input(empty_inputs())
    assert has_any_input(_inputs(noon=SlotInput(pulse="1")))


def test_delete_operations(make_entry: Callable[..., HealthEntry]) -> None:
    a = make_entry("01.01.2024", TimeSlot.MORNING)
    b = make_entry("01.01.2024", TimeSlot.NIGHT)
    c = make_entry("02.01.2024", TimeSlot.MORNING)
    d = make_entry("03.01.2024", TimeSlot.MORNING)
    entries = [a, b, c, d]

    assert delete_entry(entries, b.id) == [a, c, d]
    assert delete_entries(entries, [a.id, d.id]) == [b, c]
    assert delete_day(entries, "01.01.2024") == [c, d]
    assert delete_days(entries, ["01.01.2024", "03.01.2024"]) == [c]
    assert entries == [a, b, c, d]


def test_overflowing_mmol_glucose_falls_back_to_estimated_default() -> None:
    result = merge_daily_inputs(
        "15.03.2024",
        _inputs(morning=SlotInput(glucose="1e307")),
        GlucoseUnit.MMOL_L,
        [],
    )
    assert result[0].glucose == "100"
    assert result[0].glucose_is_estimated
