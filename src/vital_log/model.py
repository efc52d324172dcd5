"""Modelos tipados para lecturas diarias, perfil de usuario y entradas de formulario."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TimeSlot(str, Enum):
    """Franja horaria de una lectura (valor = nombre usado en backups)."""

    MORNING = "Morgens"
    NOON = "Mittags"
    EVENING = "Abends"
    NIGHT = "Nacht"

    @property
    def rank(self) -> int:
        """Posicion fija dentro del dia (1-4)."""
        return TIME_SLOTS.index(self) + 1


TIME_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot.MORNING,
    TimeSlot.NOON,
    TimeSlot.EVENING,
    TimeSlot.NIGHT,
)


class GlucoseUnit(str, Enum):
    """Unidad de visualizacion de glucosa."""

    MG_DL = "mg/dl"
    MMOL_L = "mmol/l"


class Language(str, Enum):
    """Idiomas soportados por las etiquetas."""

    DE = "de"
    EN = "en"
    FR = "fr"
    ES = "es"
    TR = "tr"
    AR = "ar"


DEFAULT_GLUCOSE = "100"
DEFAULT_SYSTOLIC = "120"
DEFAULT_DIASTOLIC = "80"
DEFAULT_PULSE = "72"


@dataclass(frozen=True)
class HealthEntry:
    """One canonical reading for a (date, time slot) pair.

    Glucose is always stored in mg/dL.
    """

    id: str
    date: str
    time_slot: TimeSlot
    glucose: str
    systolic: str
    diastolic: str
    pulse: str
    created_at: int
    glucose_is_estimated: bool = False
    pressure_is_estimated: bool = False

    @property
    def key(self) -> tuple[str, TimeSlot]:
        """Natural key of the entry."""
        return (self.date, self.time_slot)

    @property
    def is_estimated(self) -> bool:
        return self.glucose_is_estimated or self.pressure_is_estimated


@dataclass(frozen=True)
class SlotInput:
    """Raw text fields typed for one time slot."""

    glucose: str = ""
    systolic: str = ""
    diastolic: str = ""
    pulse: str = ""

    def trimmed(self) -> SlotInput:
        return SlotInput(
            glucose=self.glucose.strip(),
            systolic=self.systolic.strip(),
            diastolic=self.diastolic.strip(),
            pulse=self.pulse.strip(),
        )

    def is_empty(self) -> bool:
        """True si los cuatro campos estan vacios (tras strip)."""
        t = self.trimmed()
        return not (t.glucose or t.systolic or t.diastolic or t.pulse)


DailyInputs = dict[TimeSlot, SlotInput]


@dataclass(frozen=True)
class UserProfile:
    """Perfil del paciente; ciclo de vida independiente de las lecturas."""

    name: str = ""
    birthday: str = ""
    preferred_unit: GlucoseUnit = GlucoseUnit.MG_DL

    def is_blank(self) -> bool:
        return not self.name and not self.birthday


@dataclass(frozen=True)
class GlucoseSummary:
    """Average glucose (mg/dL) and estimated HbA1c over real readings."""

    average_glucose: float
    estimated_hba1c: float
    readings_count: int = 0

    @property
    def average_text(self) -> str:
        return str(round(self.average_glucose))

    @property
    def hba1c_text(self) -> str:
        return f"{self.estimated_hba1c:.1f}"


@dataclass(frozen=True)
class ChartPoint:
    """Un punto del grafico: valores completos y solo-reales por franja."""

    date: str
    time_slot: TimeSlot
    glucose_full: float | None = None
    systolic_full: int | None = None
    diastolic_full: int | None = None
    pulse_full: int | None = None
    glucose_real: float | None = None
    systolic_real: int | None = None
    diastolic_real: int | None = None
    pulse_real: int | None = None
