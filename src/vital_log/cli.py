"""CLI para registrar glucosa, presión y pulso por franja horaria."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from vital_log.aggregate import chart_frame, daily_table
from vital_log.dates import today_text
from vital_log.errors import VitalLogError
from vital_log.logging_config import LoggingConfig, get_logger, setup_logging
from vital_log.model import (
    TIME_SLOTS,
    DailyInputs,
    GlucoseUnit,
    Language,
    SlotInput,
    TimeSlot,
)
from vital_log.session import LogSession
from vital_log.storage import DEFAULT_DB_PATH, AppConfig, SQLiteStore
from vital_log.translations import status_label, time_slot_label
from vital_log.units import display_glucose, to_millimolar

logger = get_logger(__name__)

_SLOT_OPTIONS: dict[TimeSlot, str] = {
    TimeSlot.MORNING: "morning",
    TimeSlot.NOON: "noon",
    TimeSlot.EVENING: "evening",
    TimeSlot.NIGHT: "night",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="vital-log",
        description="Registro diario de glucosa, presión arterial y pulso.",
    )
    parser.add_argument(
        "--db",
        default=str(DEFAULT_DB_PATH),
        help="Archivo SQLite (default: ~/.vital_log/vital_log.sqlite3).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Nivel de log (DEBUG, INFO, WARNING...). Default: el guardado.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Guardar lecturas de un día.")
    add.add_argument("--date", default=None, help="DD.MM.AAAA (default: hoy).")
    add.add_argument(
        "--unit",
        choices=[u.value for u in GlucoseUnit],
        default=None,
        help="Unidad de la glucosa tipeada; queda guardada en el perfil.",
    )
    for option in _SLOT_OPTIONS.values():
        add.add_argument(
            f"--{option}",
            nargs=4,
            metavar=("GLUCOSE", "SYS", "DIA", "PULSE"),
            default=None,
            help=f"Valores de la franja {option}; '' deja el campo vacío.",
        )

    sub.add_parser("list", help="Listar lecturas.")
    sub.add_parser("table", help="Tabla diaria por franja.")
    sub.add_parser("chart", help="Series del gráfico (valores y estimados).")
    sub.add_parser("stats", help="Glucosa promedio y eHbA1c.")

    export = sub.add_parser("export", help="Exportar informe Excel.")
    export.add_argument("--out-dir", default=None, help="Carpeta de salida.")

    backup = sub.add_parser("backup", help="Guardar backup JSON.")
    backup.add_argument("path", nargs="?", default=".", help="Archivo o carpeta.")

    restore = sub.add_parser("restore", help="Cargar backup JSON.")
    restore.add_argument("path", help="Archivo de backup.")

    delete = sub.add_parser("delete", help="Borrar lecturas por id o por día.")
    delete.add_argument("--id", action="append", default=[], dest="ids")
    delete.add_argument("--day", action="append", default=[], dest="days")

    sub.add_parser("reset", help="Borrar todas las lecturas y el perfil.")

    profile = sub.add_parser("profile", help="Ver o modificar el perfil.")
    profile.add_argument("--name", default=None)
    profile.add_argument("--birthday", default=None)
    profile.add_argument(
        "--unit", choices=[u.value for u in GlucoseUnit], default=None
    )

    language = sub.add_parser("language", help="Idioma de las etiquetas.")
    language.add_argument("code", choices=[lang.value for lang in Language])

    config = sub.add_parser("config", help="Ver o modificar la configuracion.")
    config.add_argument("--export-dir", default=None, help="Carpeta de exportacion.")
    config.add_argument("--log-level", dest="config_log_level", default=None)
    config.add_argument(
        "--log-file", default=None, help="Archivo de log ('' = ninguno)."
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    return build_parser().parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success, 1 on a reported error).
    """
    ns = parse_args(argv)
    store = SQLiteStore(Path(ns.db).expanduser())
    config = store.load_config()
    setup_logging(
        LoggingConfig(
            level=ns.log_level or config.log_level,
            file=config.log_file or None,
        )
    )
    session = LogSession(store)

    try:
        return _dispatch(ns, session, store, config)
    except VitalLogError as exc:
        print(f"Error: {exc}")
        return 1
    except OSError as exc:
        logger.exception("Fallo de archivo")
        print(f"Error de archivo: {exc}")
        return 1


def _dispatch(
    ns: argparse.Namespace,
    session: LogSession,
    store: SQLiteStore,
    config: AppConfig,
) -> int:
    command = ns.command
    if command == "add":
        return _cmd_add(ns, session)
    if command == "list":
        _print_list(session)
        return 0
    if command == "table":
        df = daily_table(session.entries, session.unit)
        print("Sin datos." if df.empty else df.to_string(index=False))
        return 0
    if command == "chart":
        df = chart_frame(session.entries, session.unit)
        print("Sin datos." if df.empty else df.to_string(index=False))
        return 0
    if command == "stats":
        _print_stats(session)
        return 0
    if command == "export":
        out_dir = Path(ns.out_dir or config.export_dir or Path.cwd() / "salidas")
        out_path = session.export_report(out_dir.expanduser())
        print(f"OK: Excel: {out_path}")
        return 0
    if command == "backup":
        out_path = session.export_backup(Path(ns.path).expanduser())
        print(f"OK: Backup: {out_path}")
        return 0
    if command == "restore":
        data = session.import_backup(Path(ns.path).expanduser())
        print(f"OK: {len(data.entries)} lecturas importadas")
        return 0
    if command == "delete":
        if ns.ids:
            session.delete_entries(ns.ids)
        if ns.days:
            session.delete_days(ns.days)
        print(f"OK: {len(session.entries)} lecturas restantes")
        return 0
    if command == "reset":
        session.reset()
        print("OK: datos borrados")
        return 0
    if command == "profile":
        unit = GlucoseUnit(ns.unit) if ns.unit else None
        profile = session.update_profile(
            name=ns.name, birthday=ns.birthday, unit=unit
        )
        if profile.is_blank():
            print(f"Perfil sin datos | {profile.preferred_unit.value}")
        else:
            print(
                f"{profile.name} | {profile.birthday} | "
                f"{profile.preferred_unit.value}"
            )
        return 0
    if command == "language":
        session.set_language(Language(ns.code))
        return 0
    if command == "config":
        _cmd_config(ns, store, config)
        return 0
    raise ValueError(f"Comando desconocido: {command}")


def _cmd_add(ns: argparse.Namespace, session: LogSession) -> int:
    if ns.unit:
        session.update_profile(unit=GlucoseUnit(ns.unit))
    inputs: DailyInputs = {}
    for slot in TIME_SLOTS:
        values = getattr(ns, _SLOT_OPTIONS[slot])
        inputs[slot] = SlotInput(*values) if values else SlotInput()
    date_text = ns.date or today_text()
    entries = session.save_day(date_text, inputs)
    print(f"OK: {date_text} guardado ({len(entries)} lecturas)")
    return 0


def _print_list(session: LogSession) -> None:
    if not session.entries:
        print("Sin datos.")
        return
    unit = session.unit
    for entry in session.entries:
        label = time_slot_label(entry.time_slot, session.language)
        status = status_label(entry.is_estimated, session.language)
        print(
            f"{entry.id}  {entry.date}  {label:<10} "
            f"{display_glucose(entry.glucose, unit):>6} {unit.value:<6} "
            f"{entry.systolic}/{entry.diastolic}  P:{entry.pulse}  {status}"
        )


def _print_stats(session: LogSession) -> None:
    summary = session.glucose_summary()
    if summary is None:
        print("Sin mediciones reales de glucosa.")
        return
    if session.unit is GlucoseUnit.MMOL_L:
        average = to_millimolar(summary.average_glucose)
    else:
        average = summary.average_text
    print(f"Glucosa promedio: {average} {session.unit.value}")
    print(f"eHbA1c (estimado): {summary.hba1c_text} %")
    print(f"Mediciones: {summary.readings_count}")


def _cmd_config(ns: argparse.Namespace, store: SQLiteStore, config: AppConfig) -> None:
    updates = {
        "export_dir": ns.export_dir,
        "log_level": ns.config_log_level,
        "log_file": ns.log_file,
    }
    changes = {key: value for key, value in updates.items() if value is not None}
    if changes:
        if "log_level" in changes:
            changes["log_level"] = changes["log_level"].upper()
        config = replace(config, **changes)
        store.save_config(config)
        logger.info("Configuracion guardada en %s", store.path)
    print(f"export_dir: {config.export_dir or '-'}")
    print(f"log_level: {config.log_level}")
    print(f"log_file: {config.log_file or '-'}")
