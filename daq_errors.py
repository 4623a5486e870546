"""
Exception types for the pressure logger.
Every failure that aborts an acquisition run derives from DAQLoggerError.
"""
from typing import Optional


class DAQLoggerError(Exception):
    """
    Base class for logger failures.

    Args:
        message: Human readable description
        diagnostic: Extended error text reported by the DAQ driver, if any
    """

    def __init__(self, message: str, diagnostic: Optional[str] = None):
        super().__init__(message)
        self.diagnostic = diagnostic

    def __str__(self):
        message = super().__str__()
        if self.diagnostic:
            return f"{message}: {self.diagnostic}"
        return message


class ConfigurationError(DAQLoggerError):
    """Bad channel, clock or window-size parameters. Raised before acquisition starts."""


class StartError(DAQLoggerError):
    """The device refused to begin sampling."""


class ReadError(DAQLoggerError):
    """A read failed, timed out, or returned fewer samples than requested."""


class IncompleteWindowError(DAQLoggerError):
    """Interval mean requested before the window was full."""


class SinkWriteError(DAQLoggerError):
    """The interval log could not accept a record."""


class DeviceError(DAQLoggerError):
    """Raised by hardware backends; translated by AcquisitionSession."""
