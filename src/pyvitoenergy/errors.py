"""
Exceptions raised by VitoEnergy.

Parse failures and persistence failures are kept apart so a caller can tell
a bad telemetry export from a database problem.
"""


class VitoEnergyError(Exception):
    """Base class for all VitoEnergy errors."""


class TelemetryParseError(VitoEnergyError):
    """A telemetry field could not be parsed in strict mode."""

    def __init__(self, message: str, line_number: int = 0, field: str = ""):
        super().__init__(message)
        self.line_number = line_number
        self.field = field


class PersistenceError(VitoEnergyError):
    """Reading from or writing to the database failed."""
