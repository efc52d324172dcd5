"""Excepciones de dominio de vital_log."""


class VitalLogError(Exception):
    """Base exception for all vital_log errors."""

    pass


class InvalidDateError(VitalLogError):
    """Raised when a date is not a valid DD.MM.YYYY calendar date."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Fecha invalida (DD.MM.AAAA): {value!r}")
        self.value = value


class EmptyInputError(VitalLogError):
    """Raised when there are no values to save or export."""

    pass


class ImportFormatError(VitalLogError):
    """Raised when a backup file cannot be imported."""

    pass
