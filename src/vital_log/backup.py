"""Copia de seguridad JSON (exportar / importar lecturas y perfil)."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser
from dateutil import tz

from vital_log.dates import format_date, sort_entries
from vital_log.errors import EmptyInputError, ImportFormatError
from vital_log.logging_config import get_logger
from vital_log.merge import new_entry_id
from vital_log.model import GlucoseUnit, HealthEntry, TimeSlot, UserProfile
from vital_log.storage import profile_from_dict, profile_to_dict

logger = get_logger(__name__)

_LOCAL_TZ = tz.tzlocal()


@dataclass(frozen=True)
class BackupData:
    """Contenido de un backup importado.

    ``profile`` y ``unit`` son None cuando el archivo no los trae.
    """

    entries: list[HealthEntry]
    profile: UserProfile | None = None
    unit: GlucoseUnit | None = None
    created: datetime | None = None


def entry_to_dict(entry: HealthEntry) -> dict[str, Any]:
    """Serializa una lectura con los nombres de campo del backup."""
    return {
        "id": entry.id,
        "datum": entry.date,
        "zeitpunkt": entry.time_slot.value,
        "bz": entry.glucose,
        "rrSys": entry.systolic,
        "rrDia": entry.diastolic,
        "puls": entry.pulse,
        "createdAt": entry.created_at,
        "bzAuto": entry.glucose_is_estimated,
        "rrAuto": entry.pressure_is_estimated,
    }


def entry_from_dict(item: Any) -> HealthEntry:
    """Parse one backup entry.

    Raises:
        ImportFormatError: If the record is not a usable entry.
    """
    if not isinstance(item, dict):
        raise ImportFormatError("Entrada de backup invalida (no es un objeto).")
    try:
        slot = TimeSlot(item["zeitpunkt"])
        created_at = int(item.get("createdAt") or 0)
        return HealthEntry(
            id=str(item["id"]),
            date=str(item["datum"]),
            time_slot=slot,
            glucose=_text(item.get("bz")),
            systolic=_text(item.get("rrSys")),
            diastolic=_text(item.get("rrDia")),
            pulse=_text(item.get("puls")),
            created_at=created_at,
            glucose_is_estimated=item.get("bzAuto") is True,
            pressure_is_estimated=item.get("rrAuto") is True,
        )
    except (KeyError, ValueError, TypeError) as exc:
        raise ImportFormatError(f"Entrada de backup invalida: {exc}") from exc


def build_backup(
    entries: Sequence[HealthEntry],
    profile: UserProfile,
    unit: GlucoseUnit,
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Documento de backup listo para json.dumps."""
    created = now or datetime.now(tz=_LOCAL_TZ)
    return {
        "entries": [entry_to_dict(entry) for entry in entries],
        "userProfile": profile_to_dict(profile),
        "bzUnit": unit.value,
        "date": created.isoformat(),
    }


def backup_filename(now: datetime | None = None) -> str:
    """Nombre por defecto: VitalLog_Backup_DD.MM.AAAA.json."""
    day = (now or datetime.now(tz=_LOCAL_TZ)).date()
    return f"VitalLog_Backup_{format_date(day)}.json"


def write_backup(
    out_path: Path,
    entries: Sequence[HealthEntry],
    profile: UserProfile,
    unit: GlucoseUnit,
    *,
    now: datetime | None = None,
) -> Path:
    """Write a backup file.

    Args:
        out_path: File or directory; a directory gets the default filename.
        entries: Snapshot of the entries to save.
        profile: Current user profile.
        unit: Current display unit.
        now: Backup timestamp.

    Returns:
        Path of the written file.

    Raises:
        EmptyInputError: If there are no entries to back up.
    """
    if not entries:
        raise EmptyInputError("No hay lecturas para respaldar.")
    if out_path.is_dir():
        out_path = out_path / backup_filename(now)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    document = build_backup(entries, profile, unit, now=now)
    out_path.write_text(
        json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8"
    )
    logger.info("Backup escrito: %s (%d lecturas)", out_path, len(entries))
    return out_path


def parse_backup(text: str) -> BackupData:
    """Parse a backup document.

    Raises:
        ImportFormatError: Malformed JSON, missing ``entries`` or bad records.
    """
    try:
        raw: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"Archivo invalido: {exc}") from exc
    if not isinstance(raw, dict) or "entries" not in raw:
        raise ImportFormatError("Archivo invalido: falta 'entries'.")
    items = raw["entries"]
    if not isinstance(items, list):
        raise ImportFormatError("Archivo invalido: 'entries' no es una lista.")

    entries = _dedupe([entry_from_dict(item) for item in items])

    unit = _optional_unit(raw.get("bzUnit"))
    profile = None
    if isinstance(raw.get("userProfile"), dict):
        profile = profile_from_dict(raw["userProfile"], unit or GlucoseUnit.MG_DL)
    return BackupData(
        entries=sort_entries(entries),
        profile=profile,
        unit=unit,
        created=_optional_timestamp(raw.get("date")),
    )


def read_backup(path: Path) -> BackupData:
    """Lee y valida un archivo de backup."""
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ImportFormatError(f"Archivo invalido: {exc}") from exc
    return parse_backup(text)


def _dedupe(entries: list[HealthEntry]) -> list[HealthEntry]:
    """Una lectura por (fecha, franja) -la mas reciente- e ids unicos."""
    by_key: dict[tuple[str, TimeSlot], HealthEntry] = {}
    for entry in entries:
        current = by_key.get(entry.key)
        if current is None or entry.created_at >= current.created_at:
            by_key[entry.key] = entry
    if len(by_key) != len(entries):
        logger.warning(
            "Backup con lecturas duplicadas: %d descartadas",
            len(entries) - len(by_key),
        )

    out: list[HealthEntry] = []
    seen_ids: set[str] = set()
    for entry in by_key.values():
        while entry.id in seen_ids:
            entry = replace(entry, id=new_entry_id(entry.created_at))
        seen_ids.add(entry.id)
        out.append(entry)
    return out


def _optional_unit(raw: object) -> GlucoseUnit | None:
    if raw is None:
        return None
    try:
        return GlucoseUnit(raw)
    except ValueError:
        logger.warning("Unidad desconocida en backup: %r", raw)
        return None


def _optional_timestamp(raw: object) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        return date_parser.isoparse(raw)
    except ValueError:
        return None


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value)
