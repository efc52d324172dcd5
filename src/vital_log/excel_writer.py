"""Generación de Excel formateado con las lecturas para entrega médica."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

from vital_log.dates import format_date
from vital_log.errors import EmptyInputError
from vital_log.logging_config import get_logger
from vital_log.model import HealthEntry, Language
from vital_log.translations import (
    EXPORT_COLUMNS,
    export_headers,
    status_label,
    time_slot_label,
)

logger = get_logger(__name__)

_COLUMN_WIDTHS: dict[str, int] = {
    "date": 12,
    "time_slot": 12,
    "glucose_mg_dl": 18,
    "systolic": 14,
    "diastolic": 14,
    "pulse": 8,
    "status": 12,
    "exported_on": 14,
}

_NUMERIC_COLUMNS = ("glucose_mg_dl", "systolic", "diastolic", "pulse")


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the report sheet."""

    sheet_name: str = "Vitalwerte"
    language: Language = Language.DE


def export_frame(
    entries: Sequence[HealthEntry],
    language: Language = Language.DE,
    exported_on: date | None = None,
) -> pd.DataFrame:
    """Una fila por lectura con las columnas de EXPORT_COLUMNS.

    Los valores numericos se exportan como numero cuando son legibles; si no,
    se conserva el texto guardado.
    """
    export_date = format_date(exported_on or date.today())
    rows = [
        {
            "date": entry.date,
            "time_slot": time_slot_label(entry.time_slot, language),
            "glucose_mg_dl": _numeric_or_text(entry.glucose),
            "systolic": _numeric_or_text(entry.systolic),
            "diastolic": _numeric_or_text(entry.diastolic),
            "pulse": _numeric_or_text(entry.pulse),
            "status": status_label(entry.is_estimated, language),
            "exported_on": export_date,
        }
        for entry in entries
    ]
    return pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))


def report_filename(patient_name: str, day: str) -> str:
    """VitalReport_<nombre o Patient>_<DD.MM.AAAA>.xlsx"""
    return f"VitalReport_{patient_name or 'Patient'}_{day}.xlsx"


def write_report_xlsx(
    entries: Sequence[HealthEntry],
    out_path: Path,
    layout: ExcelLayout,
    exported_on: date | None = None,
) -> Path:
    """Write a formatted Excel file suitable for printing.

    Args:
        entries: Snapshot of the entries to export.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
        exported_on: Export date written in every row (default: today).

    Returns:
        The output path.

    Raises:
        EmptyInputError: If there is nothing to export.
    """
    if not entries:
        raise EmptyInputError("No hay lecturas para exportar.")
    out_path.parent.mkdir(parents=True, exist_ok=True)

    export_df = export_frame(entries, layout.language, exported_on)
    export_df = export_df.rename(columns=export_headers(layout.language))

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        ws = writer.book[layout.sheet_name]
        _format_sheet(ws, layout.language)
    logger.info("Excel generado: %s (%d filas)", out_path, len(export_df))
    return out_path


def _numeric_or_text(value: str) -> object:
    number = pd.to_numeric(value.replace(",", "."), errors="coerce")
    if pd.isna(number):
        return value
    return int(number) if float(number).is_integer() else float(number)


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación, borde y altura fija a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        ws.row_dimensions[row[0].row].height = 15


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, language: Language) -> None:
    """Establece anchos de columna para evitar ###."""
    col_index = _get_header_col_index(ws)
    for column, header in export_headers(language).items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = _COLUMN_WIDTHS[column]


def _apply_number_formats(ws: Any, language: Language) -> None:
    """Formato entero para las columnas numéricas."""
    col_index = _get_header_col_index(ws)
    headers = export_headers(language)
    indexes = [col_index.get(headers[column]) for column in _NUMERIC_COLUMNS]
    for row in ws.iter_rows(min_row=2):
        for idx in indexes:
            if idx is not None and isinstance(row[idx - 1].value, int):
                row[idx - 1].number_format = "0"


def _format_sheet(ws: Any, language: Language = Language.DE) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
        language: Language of the header row.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    _apply_column_widths(ws, language)
    _apply_number_formats(ws, language)
