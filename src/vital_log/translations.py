"""Etiquetas localizadas (franjas horarias, estado, dias y cabeceras de export)."""

from __future__ import annotations

from vital_log.model import Language, TimeSlot

_TIME_LABELS: dict[Language, dict[TimeSlot, str]] = {
    Language.DE: {
        TimeSlot.MORNING: "Früh",
        TimeSlot.NOON: "Mittag",
        TimeSlot.EVENING: "Abend",
        TimeSlot.NIGHT: "Nacht",
    },
    Language.EN: {
        TimeSlot.MORNING: "Morning",
        TimeSlot.NOON: "Noon",
        TimeSlot.EVENING: "Evening",
        TimeSlot.NIGHT: "Night",
    },
    Language.FR: {
        TimeSlot.MORNING: "Matin",
        TimeSlot.NOON: "Midi",
        TimeSlot.EVENING: "Soir",
        TimeSlot.NIGHT: "Nuit",
    },
    Language.ES: {
        TimeSlot.MORNING: "Mañana",
        TimeSlot.NOON: "Mediodía",
        TimeSlot.EVENING: "Tarde",
        TimeSlot.NIGHT: "Noche",
    },
    Language.TR: {
        TimeSlot.MORNING: "Sabah",
        TimeSlot.NOON: "Öğle",
        TimeSlot.EVENING: "Akşam",
        TimeSlot.NIGHT: "Gece",
    },
    Language.AR: {
        TimeSlot.MORNING: "صباح",
        TimeSlot.NOON: "ظهر",
        TimeSlot.EVENING: "مساء",
        TimeSlot.NIGHT: "ليل",
    },
}

# (estimado, manual)
_STATUS_LABELS: dict[Language, tuple[str, str]] = {
    Language.DE: ("Schätzung", "Manuell"),
    Language.EN: ("Estimated", "Manual"),
    Language.FR: ("Estimation", "Manuel"),
    Language.ES: ("Estimado", "Manual"),
    Language.TR: ("Tahmini", "Manuel"),
    Language.AR: ("تقديري", "يدوي"),
}

# Lunes primero, igual que date.weekday().
_WEEKDAYS: dict[Language, tuple[str, ...]] = {
    Language.DE: (
        "Montag",
        "Dienstag",
        "Mittwoch",
        "Donnerstag",
        "Freitag",
        "Samstag",
        "Sonntag",
    ),
    Language.EN: (
        "Monday",
        "Tuesday",
        "Wednesday",
        "Thursday",
        "Friday",
        "Saturday",
        "Sunday",
    ),
    Language.FR: (
        "lundi",
        "mardi",
        "mercredi",
        "jeudi",
        "vendredi",
        "samedi",
        "dimanche",
    ),
    Language.ES: (
        "lunes",
        "martes",
        "miércoles",
        "jueves",
        "viernes",
        "sábado",
        "domingo",
    ),
    Language.TR: (
        "Pazartesi",
        "Salı",
        "Çarşamba",
        "Perşembe",
        "Cuma",
        "Cumartesi",
        "Pazar",
    ),
    Language.AR: (
        "الاثنين",
        "الثلاثاء",
        "الأربعاء",
        "الخميس",
        "الجمعة",
        "السبت",
        "الأحد",
    ),
}

EXPORT_COLUMNS: tuple[str, ...] = (
    "date",
    "time_slot",
    "glucose_mg_dl",
    "systolic",
    "diastolic",
    "pulse",
    "status",
    "exported_on",
)

_EXPORT_HEADERS: dict[Language, tuple[str, ...]] = {
    Language.DE: (
        "Datum",
        "Zeitpunkt",
        "Blutzucker (mg/dl)",
        "Blutdruck Sys",
        "Blutdruck Dia",
        "Puls",
        "Status",
        "Exportiert am",
    ),
    Language.EN: (
        "Date",
        "Time slot",
        "Glucose (mg/dl)",
        "Systolic",
        "Diastolic",
        "Pulse",
        "Status",
        "Exported on",
    ),
    Language.FR: (
        "Date",
        "Moment",
        "Glycémie (mg/dl)",
        "Systolique",
        "Diastolique",
        "Pouls",
        "Statut",
        "Exporté le",
    ),
    Language.ES: (
        "Fecha",
        "Momento",
        "Glucosa (mg/dl)",
        "Sistólica",
        "Diastólica",
        "Pulso",
        "Estado",
        "Exportado el",
    ),
    Language.TR: (
        "Tarih",
        "Zaman",
        "Kan şekeri (mg/dl)",
        "Sistolik",
        "Diastolik",
        "Nabız",
        "Durum",
        "Dışa aktarma",
    ),
    Language.AR: (
        "التاريخ",
        "الوقت",
        "سكر الدم (mg/dl)",
        "الانقباضي",
        "الانبساطي",
        "النبض",
        "الحالة",
        "تاريخ التصدير",
    ),
}


def time_slot_label(slot: TimeSlot, language: Language = Language.DE) -> str:
    """Localized label for a time slot."""
    return _TIME_LABELS.get(language, _TIME_LABELS[Language.DE])[slot]


def status_label(estimated: bool, language: Language = Language.DE) -> str:
    """Etiqueta "estimado" / "manual" de una fila exportada."""
    estimated_text, manual_text = _STATUS_LABELS.get(
        language, _STATUS_LABELS[Language.DE]
    )
    return estimated_text if estimated else manual_text


def weekday_label(index: int, language: Language = Language.DE) -> str:
    """Nombre del dia para un indice 0-6 (lunes-domingo); "" fuera de rango."""
    names = _WEEKDAYS.get(language, _WEEKDAYS[Language.DE])
    return names[index] if 0 <= index < len(names) else ""


def export_headers(language: Language = Language.DE) -> dict[str, str]:
    """Mapa columna interna -> cabecera localizada."""
    headers = _EXPORT_HEADERS.get(language, _EXPORT_HEADERS[Language.DE])
    return dict(zip(EXPORT_COLUMNS, headers, strict=True))
