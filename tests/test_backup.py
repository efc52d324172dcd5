from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest
from dateutil import tz

from vital_log.backup import (
    backup_filename,
    entry_from_dict,
    entry_to_dict,
    parse_backup,
    read_backup,
    write_backup,
)
from vital_log.errors import EmptyInputError, ImportFormatError
from vital_log.model import GlucoseUnit, HealthEntry, TimeSlot, UserProfile

NOW = datetime(2024, 3, 15, 10, 30, tzinfo=tz.tzutc())


def test_entry_dict_uses_backup_field_names(
    make_entry: Callable[..., HealthEntry],
) -> None:
    data = entry_to_dict(make_entry(glucose_is_estimated=True))
    assert data["datum"] == "15.03.2024"
    assert data["zeitpunkt"] == "Morgens"
    assert data["bz"] == "110"
    assert data["rrSys"] == "125"
    assert data["bzAuto"] is True
    assert data["rrAuto"] is False


def test_write_and_read_backup_in_directory(
    tmp_path: Path, make_entry: Callable[..., HealthEntry]
) -> None:
    entries = [
        make_entry("01.01.2024", TimeSlot.MORNING),
        make_entry("01.01.2024", TimeSlot.NIGHT, pressure_is_estimated=True),
    ]
    profile = UserProfile(name="Ana", birthday="01.02.1960")

    out = write_backup(tmp_path, entries, profile, GlucoseUnit.MMOL_L, now=NOW)

    assert out == tmp_path / "VitalLog_Backup_15.03.2024.json"
    data = read_backup(out)
    assert data.entries == entries
    assert data.profile == profile
    assert data.unit is GlucoseUnit.MMOL_L
    assert data.created == NOW


def test_write_backup_rejects_empty(tmp_path: Path) -> None:
    with pytest.raises(EmptyInputError):
        write_backup(tmp_path, [], UserProfile(), GlucoseUnit.MG_DL, now=NOW)


def test_backup_filename() -> None:
    assert backup_filename(NOW) == "VitalLog_Backup_15.03.2024.json"


def test_parse_backup_without_profile_or_unit() -> None:
    text = json.dumps(
        {
            "entries": [
                {
                    "id": "E-1-abcd",
                    "datum": "15.03.2024",
                    "zeitpunkt": "Abends",
                    "bz": "140",
                    "rrSys": "120",
                    "rrDia": "80",
                    "puls": "72",
                    "createdAt": 1,
                }
            ]
        }
    )
    data = parse_backup(text)

    assert data.profile is None
    assert data.unit is None
    assert data.created is None
    entry = data.entries[0]
    assert entry.time_slot is TimeSlot.EVENING
    assert entry.glucose_is_estimated is False
    assert entry.pressure_is_estimated is False


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[]",
        json.dumps({"userProfile": {}}),
        json.dumps({"entries": {"a": 1}}),
        json.dumps({"entries": ["text"]}),
        json.dumps({"entries": [{"id": "x", "datum": "01.01.2024", "zeitpunkt": "?"}]}),
        json.dumps({"entries": [{"datum": "01.01.2024", "zeitpunkt": "Morgens"}]}),
    ],
)
def test_parse_backup_rejects_invalid_documents(text: str) -> None:
    with pytest.raises(ImportFormatError):
        parse_backup(text)


def test_entry_from_dict_rejects_bad_timestamp() -> None:
    with pytest.raises(ImportFormatError):
        entry_from_dict(
            {"id": "x", "datum": "01.01.2024", "zeitpunkt": "Nacht", "createdAt": "?"}
        )


def test_parse_backup_keeps_latest_duplicate_and_unique_ids(
    make_entry: Callable[..., HealthEntry],
) -> None:
    older = make_entry("01.01.2024", TimeSlot.MORNING, id="dup", created_at=1)
    newer = make_entry("01.01.2024", TimeSlot.MORNING, id="dup2", created_at=2)
    other = make_entry("02.01.2024", TimeSlot.MORNING, id="dup2", created_at=3)
    text = json.dumps({"entries": [entry_to_dict(e) for e in (older, newer, other)]})

    data = parse_backup(text)

    assert len(data.entries) == 2
    assert data.entries[0].created_at == 2
    assert len({e.id for e in data.entries}) == 2


def test_read_backup_rejects_binary(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_bytes(b"\xff\xfe\x00")
    with pytest.raises(ImportFormatError):
        read_backup(path)


def test_entry_flags_accept_only_real_booleans() -> None:
    entry = entry_from_dict(
        {
            "id": "E-1-abcd",
            "datum": "15.03.2024",
            "zeitpunkt": "Morgens",
            "bz": "110",
            "createdAt": 1,
            "bzAuto": "false",
            "rrAuto": 1,
        }
    )
    assert entry.glucose_is_estimated is False
    assert entry.pressure_is_estimated is False

    flagged = entry_from_dict(
        {"id": "x", "datum": "15.03.2024", "zeitpunkt": "Nacht", "rrAuto": True}
    )
    assert flagged.pressure_is_estimated is True
