"""Estado de la sesion: lecturas, perfil, unidad e idioma con persistencia inyectada."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Protocol

from vital_log import merge
from vital_log.aggregate import summarize_glucose
from vital_log.backup import BackupData, read_backup, write_backup
from vital_log.dates import format_date
from vital_log.excel_writer import ExcelLayout, report_filename, write_report_xlsx
from vital_log.logging_config import get_logger
from vital_log.model import (
    DailyInputs,
    GlucoseSummary,
    GlucoseUnit,
    HealthEntry,
    Language,
    UserProfile,
)

logger = get_logger(__name__)


class EntryStore(Protocol):
    """Persistencia usada por la sesion (SQLiteStore la implementa)."""

    def load_entries(self) -> list[HealthEntry]: ...

    def save_entries(self, entries: Collection[HealthEntry]) -> None: ...

    def load_profile(self) -> UserProfile: ...

    def save_profile(self, profile: UserProfile) -> None: ...

    def load_language(self) -> Language: ...

    def save_language(self, language: Language) -> None: ...


class LogSession:
    """Explicit application state.

    Every mutating operation computes a new entry list first, swaps it in and
    only then writes it to the store, so failed operations leave both the
    session and the store unchanged.
    """

    def __init__(self, store: EntryStore) -> None:
        self._store = store
        self._entries: tuple[HealthEntry, ...] = tuple(store.load_entries())
        self._profile = store.load_profile()
        self._language = store.load_language()
        self.inputs: DailyInputs = merge.empty_inputs()

    @property
    def entries(self) -> tuple[HealthEntry, ...]:
        """Snapshot inmutable de las lecturas."""
        return self._entries

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def unit(self) -> GlucoseUnit:
        return self._profile.preferred_unit

    @property
    def language(self) -> Language:
        return self._language

    def _commit_entries(self, entries: list[HealthEntry]) -> None:
        self._entries = tuple(entries)
        self._store.save_entries(self._entries)

    def save_day(
        self, date_text: str, inputs: DailyInputs | None = None
    ) -> tuple[HealthEntry, ...]:
        """Merge the day's inputs (default: ``self.inputs``) and persist.

        Raises:
            InvalidDateError: Invalid date; nothing changes.
            EmptyInputError: No values typed; nothing changes.
        """
        pending = self.inputs if inputs is None else inputs
        merged = merge.merge_daily_inputs(date_text, pending, self.unit, self._entries)
        self._commit_entries(merged)
        self.inputs = merge.empty_inputs()
        logger.info("Lecturas guardadas para %s (%d en total)", date_text, len(merged))
        return self._entries

    def delete_entry(self, entry_id: str) -> None:
        self._commit_entries(merge.delete_entry(self._entries, entry_id))

    def delete_entries(self, entry_ids: Collection[str]) -> None:
        self._commit_entries(merge.delete_entries(self._entries, entry_ids))

    def delete_day(self, date_text: str) -> None:
        self._commit_entries(merge.delete_day(self._entries, date_text))

    def delete_days(self, dates: Collection[str]) -> None:
        self._commit_entries(merge.delete_days(self._entries, dates))

    def reset(self) -> None:
        """Borra todas las lecturas y el nombre / fecha de nacimiento."""
        self._commit_entries([])
        self.update_profile(name="", birthday="")
        logger.info("Datos reiniciados")

    def update_profile(
        self,
        *,
        name: str | None = None,
        birthday: str | None = None,
        unit: GlucoseUnit | None = None,
    ) -> UserProfile:
        """Actualiza los campos indicados del perfil y lo persiste."""
        profile = self._profile
        if name is not None:
            profile = replace(profile, name=name)
        if birthday is not None:
            profile = replace(profile, birthday=birthday)
        if unit is not None:
            profile = replace(profile, preferred_unit=unit)
        self._profile = profile
        self._store.save_profile(profile)
        return profile

    def set_language(self, language: Language) -> None:
        self._language = language
        self._store.save_language(language)

    def glucose_summary(self) -> GlucoseSummary | None:
        return summarize_glucose(self._entries)

    def export_backup(self, out_path: Path) -> Path:
        """Escribe un backup JSON con el estado actual."""
        return write_backup(out_path, self._entries, self._profile, self.unit)

    def import_backup(self, path: Path) -> BackupData:
        """Replace entries (and profile/unit when present) from a backup file.

        Raises:
            ImportFormatError: Invalid file; nothing changes.
        """
        data = read_backup(path)
        unit = data.unit or self.unit
        profile = data.profile or self._profile
        self._commit_entries(data.entries)
        self._profile = replace(profile, preferred_unit=unit)
        self._store.save_profile(self._profile)
        logger.info("Backup importado: %s (%d lecturas)", path, len(data.entries))
        return data

    def export_report(
        self, out_dir: Path, *, day: str | None = None, today: date | None = None
    ) -> Path:
        """Exporta el informe Excel a ``out_dir`` con el nombre por defecto."""
        day_text = day or format_date(today or date.today())
        out_path = out_dir / report_filename(self._profile.name, day_text)
        layout = ExcelLayout(language=self._language)
        return write_report_xlsx(self._entries, out_path, layout, exported_on=today)
