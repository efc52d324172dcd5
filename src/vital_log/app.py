"""App Kivy: carga diaria por franjas, vistas tabla/lista y backups."""

from __future__ import annotations

import traceback
from collections.abc import Mapping, Sequence
from pathlib import Path

from vital_log.aggregate import daily_table
from vital_log.dates import today_text
from vital_log.errors import VitalLogError
from vital_log.logging_config import LoggingConfig, get_logger, setup_logging
from vital_log.model import (
    TIME_SLOTS,
    DailyInputs,
    GlucoseSummary,
    GlucoseUnit,
    HealthEntry,
    Language,
    SlotInput,
    TimeSlot,
)
from vital_log.ranges import entry_flags
from vital_log.session import LogSession
from vital_log.storage import DEFAULT_DB_PATH, SQLiteStore
from vital_log.translations import status_label, time_slot_label
from vital_log.units import display_glucose, to_millimolar

logger = get_logger(__name__)

FIELDS = ("glucose", "systolic", "diastolic", "pulse")
_FIELD_HINTS = {
    "glucose": "BZ",
    "systolic": "SYS",
    "diastolic": "DIA",
    "pulse": "PULS",
}


def run_app(db_path: Path = DEFAULT_DB_PATH) -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.core.window import Window
    from kivy.resources import resource_find
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.filechooser import FileChooserListView
    from kivy.uix.gridlayout import GridLayout
    from kivy.uix.label import Label
    from kivy.uix.popup import Popup
    from kivy.uix.textinput import TextInput

    store = SQLiteStore(db_path)
    config = store.load_config()
    setup_logging(
        LoggingConfig(level=config.log_level, file=config.log_file or None)
    )

    class VitalLogApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.session = LogSession(store)
            self.app_config = config
            self.view_mode = "table"
            self.slot_inputs: dict[TimeSlot, dict[str, TextInput]] = {}
            self.date_input: TextInput | None = None
            self.name_input: TextInput | None = None
            self.birthday_input: TextInput | None = None
            self.preview: TextInput | None = None
            self.status: Label | None = None
            self.stats: Label | None = None
            self._preview_font = resource_find("data/fonts/RobotoMono-Regular.ttf")

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down)
            self.title = "MED-LOG"

            root = BoxLayout(orientation="vertical", spacing=6, padding=10)
            root.add_widget(self._build_header())
            root.add_widget(self._build_slots())

            actions = BoxLayout(
                orientation="horizontal",
                spacing=6,
                size_hint_y=None,
                height=40,
            )
            buttons = [
                ("Guardar", self._on_save),
                ("Tabla / Lista", self._on_toggle_view),
                ("mg/dl / mmol/l", self._on_toggle_unit),
                ("Exportar Excel", self._on_export),
                ("Backup", self._on_backup),
                ("Importar", self._on_import),
                ("Borrar todo", self._on_reset),
                ("Salir", lambda *_args: self.stop()),
            ]
            for text, callback in buttons:
                btn = Button(text=text)
                btn.bind(on_press=callback)
                actions.add_widget(btn)
            root.add_widget(actions)

            self.status = Label(text="", size_hint_y=None, height=28)
            root.add_widget(self.status)
            self.stats = Label(text="", size_hint_y=None, height=28)
            root.add_widget(self.stats)

            self.preview = TextInput(
                readonly=True,
                text="",
                multiline=True,
                do_wrap=False,
            )
            if self._preview_font:
                self.preview.font_name = self._preview_font
            root.add_widget(self.preview)

            self._refresh()
            return root

        def _build_header(self) -> BoxLayout:
            header = BoxLayout(orientation="horizontal", size_hint_y=None, height=36)
            profile = self.session.profile
            self.name_input = TextInput(
                text=profile.name, hint_text="Nombre", multiline=False
            )
            self.birthday_input = TextInput(
                text=profile.birthday, hint_text="DD.MM.AAAA", multiline=False
            )
            self.date_input = TextInput(text=today_text(), multiline=False)
            self.name_input.bind(on_text_validate=self._on_profile_change)
            self.birthday_input.bind(on_text_validate=self._on_profile_change)
            for label, widget in (
                ("PAT.", self.name_input),
                ("GEB", self.birthday_input),
                ("AKT", self.date_input),
            ):
                header.add_widget(Label(text=label, size_hint_x=0.12))
                header.add_widget(widget)
            return header

        def _build_slots(self) -> GridLayout:
            grid = GridLayout(cols=5, spacing=4, size_hint_y=None, height=5 * 34)
            grid.add_widget(Label(text=""))
            for field in FIELDS:
                grid.add_widget(Label(text=_FIELD_HINTS[field]))
            for slot in TIME_SLOTS:
                grid.add_widget(
                    Label(text=time_slot_label(slot, self.session.language))
                )
                row: dict[str, TextInput] = {}
                for field in FIELDS:
                    inp = TextInput(multiline=False)
                    row[field] = inp
                    grid.add_widget(inp)
                self.slot_inputs[slot] = row
            return grid

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _on_profile_change(self, *_args: object) -> None:
            if self.name_input is None or self.birthday_input is None:
                return
            self.session.update_profile(
                name=self.name_input.text.strip(),
                birthday=self.birthday_input.text.strip(),
            )

        def _on_save(self, _: object) -> None:
            texts = {
                slot: {field: inp.text for field, inp in row.items()}
                for slot, row in self.slot_inputs.items()
            }
            date_text = self.date_input.text.strip() if self.date_input else ""
            try:
                self._on_profile_change()
                self.session.save_day(date_text, inputs_from_texts(texts))
            except Exception as exc:
                self._show_error("guardar", exc)
                return
            for row in self.slot_inputs.values():
                for inp in row.values():
                    inp.text = ""
            self._set_status("Guardado.")
            self._refresh()

        def _on_toggle_view(self, _: object) -> None:
            self.view_mode = "list" if self.view_mode == "table" else "table"
            self._refresh()

        def _on_toggle_unit(self, _: object) -> None:
            unit = (
                GlucoseUnit.MMOL_L
                if self.session.unit is GlucoseUnit.MG_DL
                else GlucoseUnit.MG_DL
            )
            self.session.update_profile(unit=unit)
            self._set_status(f"Unidad: {unit.value}")
            self._refresh()

        def _export_dir(self) -> Path:
            if self.app_config.export_dir:
                return Path(self.app_config.export_dir).expanduser()
            return Path.cwd() / "salidas"

        def _on_export(self, _: object) -> None:
            try:
                out_path = self.session.export_report(self._export_dir())
            except Exception as exc:
                self._show_error("exportar", exc)
                return
            self._set_status(f"Excel generado: {out_path}")

        def _on_backup(self, _: object) -> None:
            try:
                out_path = self.session.export_backup(self._export_dir())
            except Exception as exc:
                self._show_error("respaldar", exc)
                return
            self._set_status(f"Backup guardado: {out_path}")

        def _on_import(self, _: object) -> None:
            start_dir = self._export_dir()
            chooser = FileChooserListView(
                path=str(start_dir if start_dir.exists() else Path.home()),
                filters=["*.json"],
            )
            buttons = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            cancel_btn = Button(text="Cancelar")
            use_btn = Button(text="Importar")
            buttons.add_widget(cancel_btn)
            buttons.add_widget(use_btn)

            content = BoxLayout(orientation="vertical")
            content.add_widget(chooser)
            content.add_widget(buttons)
            popup = Popup(
                title="Seleccionar backup",
                content=content,
                size_hint=(0.9, 0.9),
            )
            cancel_btn.bind(on_press=lambda *_args: popup.dismiss())

            def apply_selection(*_: object) -> None:
                if not chooser.selection:
                    return
                popup.dismiss()
                try:
                    self.session.import_backup(Path(chooser.selection[0]))
                except Exception as exc:
                    self._show_error("importar", exc)
                    return
                if self.name_input is not None:
                    self.name_input.text = self.session.profile.name
                if self.birthday_input is not None:
                    self.birthday_input.text = self.session.profile.birthday
                self._set_status("Import correcto.")
                self._refresh()

            use_btn.bind(on_press=apply_selection)
            chooser.bind(on_submit=lambda *_args: apply_selection())
            popup.open()

        def _on_reset(self, _: object) -> None:
            content = BoxLayout(orientation="vertical", spacing=8, padding=8)
            content.add_widget(
                Label(
                    text=(
                        "Se borrarán TODAS las lecturas, el nombre y la fecha "
                        "de nacimiento."
                    )
                )
            )
            buttons = BoxLayout(orientation="horizontal", size_hint_y=None, height=40)
            cancel_btn = Button(text="Cancelar")
            confirm_btn = Button(text="Borrar")
            buttons.add_widget(cancel_btn)
            buttons.add_widget(confirm_btn)
            content.add_widget(buttons)
            popup = Popup(title="Borrar todo", content=content, size_hint=(0.6, 0.4))
            cancel_btn.bind(on_press=lambda *_args: popup.dismiss())

            def confirm(*_: object) -> None:
                popup.dismiss()
                self.session.reset()
                if self.name_input is not None:
                    self.name_input.text = ""
                if self.birthday_input is not None:
                    self.birthday_input.text = ""
                self._set_status("Todos los datos fueron borrados.")
                self._refresh()

            confirm_btn.bind(on_press=confirm)
            popup.open()

        def _refresh(self) -> None:
            session = self.session
            if self.preview is not None:
                if self.view_mode == "table":
                    df = daily_table(session.entries, session.unit)
                    self.preview.text = (
                        "" if df.empty else df.to_string(index=False)
                    )
                else:
                    self.preview.text = format_entry_list(
                        session.entries, session.unit, session.language
                    )
            if self.stats is not None:
                self.stats.text = format_summary(
                    session.glucose_summary(), session.unit
                )

        def _set_status(self, text: str) -> None:
            if self.status is not None:
                self.status.text = text

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            logger.error("Error al %s: %s", action, exc)
            self._set_status(f"Error al {action} ({error_type}): {exc}")
            if self.preview is not None and not isinstance(exc, VitalLogError):
                self.preview.text = traceback.format_exc()

    VitalLogApp().run()
    return 0


def inputs_from_texts(texts: Mapping[TimeSlot, Mapping[str, str]]) -> DailyInputs:
    """Convierte los textos del formulario en DailyInputs."""
    return {
        slot: SlotInput(
            **{field: texts.get(slot, {}).get(field, "") for field in FIELDS}
        )
        for slot in TIME_SLOTS
    }


def format_entry_list(
    entries: Sequence[HealthEntry],
    unit: GlucoseUnit,
    language: Language = Language.DE,
) -> str:
    """Vista "lista": una linea por lectura, la mas reciente primero.

    Los valores fuera de rango se marcan con ``!`` y los estimados con ``~``.
    """
    lines: list[str] = []
    for entry in reversed(entries):
        flags = entry_flags(entry, unit)
        glucose = display_glucose(entry.glucose, unit) + _mark(flags.glucose)
        pressure = f"{entry.systolic}/{entry.diastolic}" + _mark(flags.pressure)
        pulse = entry.pulse + _mark(flags.pulse)
        lines.append(
            f"{entry.date}  {time_slot_label(entry.time_slot, language):<10} "
            f"{glucose:>7} {pressure:>9} P:{pulse:<5} "
            f"{status_label(entry.is_estimated, language)}"
        )
    return "\n".join(lines)


def format_summary(summary: GlucoseSummary | None, unit: GlucoseUnit) -> str:
    """Texto de estadisticas; eHbA1c es una estimacion estadistica."""
    if summary is None:
        return "Ø Glucosa: -  |  eHbA1c: -"
    if unit is GlucoseUnit.MMOL_L:
        average = to_millimolar(summary.average_glucose)
    else:
        average = summary.average_text
    return (
        f"Ø Glucosa: {average} {unit.value}  |  "
        f"eHbA1c (estimación): {summary.hba1c_text} %"
    )


def _mark(flag: str) -> str:
    if flag == "estimated":
        return "~"
    if flag == "out_of_range":
        return "!"
    return ""
