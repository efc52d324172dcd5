from __future__ import annotations

from collections.abc import Callable

import pytest

from vital_log.model import HealthEntry, TimeSlot


@pytest.fixture
def make_entry() -> Callable[..., HealthEntry]:
    """Factory de lecturas con valores reales por defecto."""

    def _make(
        date: str = "15.03.2024",
        slot: TimeSlot = TimeSlot.MORNING,
        **overrides: object,
    ) -> HealthEntry:
        values: dict[str, object] = {
            "id": f"E-{date}-{slot.name}",
            "date": date,
            "time_slot": slot,
            "glucose": "110",
            "systolic": "125",
            "diastolic": "82",
            "pulse": "70",
            "created_at": 1_700_000_000_000,
            "glucose_is_estimated": False,
            "pressure_is_estimated": False,
        }
        values.update(overrides)
        return HealthEntry(**values)  # type: ignore[arg-type]

    return _make
