"""Persistencia SQLite para lecturas, perfil, idioma y configuracion."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vital_log.dates import sort_entries
from vital_log.logging_config import get_logger
from vital_log.model import GlucoseUnit, HealthEntry, Language, TimeSlot, UserProfile

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS entries (
    id TEXT PRIMARY KEY,
    date TEXT NOT NULL,
    time_slot TEXT NOT NULL,
    glucose TEXT NOT NULL,
    systolic TEXT NOT NULL,
    diastolic TEXT NOT NULL,
    pulse TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    glucose_auto INTEGER NOT NULL DEFAULT 0,
    pressure_auto INTEGER NOT NULL DEFAULT 0
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_entries_date_slot
ON entries(date, time_slot);
"""

PROFILE_KEY = "user_profile"
LANGUAGE_KEY = "language"

DEFAULT_DB_PATH = Path.home() / ".vital_log" / "vital_log.sqlite3"


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    export_dir: str = ""
    log_level: str = "WARNING"
    log_file: str = ""


class SQLiteStore:
    """Repositorio SQLite para la app."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def _get_value(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM app_config WHERE key = ?", (key,)
            ).fetchone()
        return None if row is None else str(row["value"])

    def _set_values(self, payload: dict[str, str]) -> None:
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = AppConfig()
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key, value FROM app_config WHERE key IN (?, ?, ?)",
                ("export_dir", "log_level", "log_file"),
            ).fetchall()
        values = {row["key"]: row["value"] for row in rows}
        return AppConfig(
            export_dir=values.get("export_dir", defaults.export_dir),
            log_level=values.get("log_level", defaults.log_level),
            log_file=values.get("log_file", defaults.log_file),
        )

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        self._set_values(
            {
                "export_dir": config.export_dir,
                "log_level": config.log_level,
                "log_file": config.log_file,
            }
        )

    def load_profile(self) -> UserProfile:
        """Perfil guardado; perfil vacio si no existe o esta corrupto."""
        raw = self._get_value(PROFILE_KEY)
        if raw is None:
            return UserProfile()
        return profile_from_dict(_parse_json_dict(raw))

    def save_profile(self, profile: UserProfile) -> None:
        self._set_values({PROFILE_KEY: json.dumps(profile_to_dict(profile))})

    def load_language(self) -> Language:
        raw = self._get_value(LANGUAGE_KEY)
        try:
            return Language(raw) if raw is not None else Language.DE
        except ValueError:
            logger.warning("Idioma guardado desconocido: %r", raw)
            return Language.DE

    def save_language(self, language: Language) -> None:
        self._set_values({LANGUAGE_KEY: language.value})

    def load_entries(self) -> list[HealthEntry]:
        """Carga todas las lecturas en orden cronologico."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT
                    id, date, time_slot, glucose, systolic, diastolic, pulse,
                    created_at, glucose_auto, pressure_auto
                FROM entries
                """
            ).fetchall()
        return sort_entries(_row_to_entry(row) for row in rows)

    def save_entries(self, entries: Iterable[HealthEntry]) -> None:
        """Reemplaza la coleccion completa en una sola transaccion."""
        rows = [_entry_to_row(entry) for entry in entries]
        with self._connect() as conn:
            conn.execute("DELETE FROM entries")
            conn.executemany(
                """
                INSERT INTO entries(
                    id, date, time_slot, glucose, systolic, diastolic, pulse,
                    created_at, glucose_auto, pressure_auto
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            conn.commit()
        logger.debug("Guardadas %d lecturas en %s", len(rows), self._db_path)


def profile_to_dict(profile: UserProfile) -> dict[str, str]:
    """Perfil en el formato JSON de backups."""
    return {
        "name": profile.name,
        "birthday": profile.birthday,
        "preferredBzUnit": profile.preferred_unit.value,
    }


def profile_from_dict(
    data: dict[str, Any], fallback_unit: GlucoseUnit = GlucoseUnit.MG_DL
) -> UserProfile:
    """Construye un perfil tolerando campos faltantes."""
    return UserProfile(
        name=str(data.get("name") or ""),
        birthday=str(data.get("birthday") or ""),
        preferred_unit=_parse_unit(data.get("preferredBzUnit"), fallback_unit),
    )


def _parse_unit(raw: object, fallback: GlucoseUnit) -> GlucoseUnit:
    try:
        return GlucoseUnit(raw)
    except ValueError:
        return fallback


def _parse_json_dict(raw: str) -> dict[str, Any]:
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Perfil guardado ilegible; se usa perfil vacio")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _entry_to_row(entry: HealthEntry) -> tuple[object, ...]:
    return (
        entry.id,
        entry.date,
        entry.time_slot.value,
        entry.glucose,
        entry.systolic,
        entry.diastolic,
        entry.pulse,
        entry.created_at,
        int(entry.glucose_is_estimated),
        int(entry.pressure_is_estimated),
    )


def _row_to_entry(row: sqlite3.Row) -> HealthEntry:
    return HealthEntry(
        id=row["id"],
        date=row["date"],
        time_slot=TimeSlot(row["time_slot"]),
        glucose=row["glucose"],
        systolic=row["systolic"],
        diastolic=row["diastolic"],
        pulse=row["pulse"],
        created_at=int(row["created_at"]),
        glucose_is_estimated=bool(row["glucose_auto"]),
        pressure_is_estimated=bool(row["pressure_auto"]),
    )
