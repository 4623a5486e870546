"""
Configuration settings for the pressure transducer logger.
Modify these values to customize system behavior.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from daq_errors import ConfigurationError

# ============================================================================
# Logging Configuration
# ============================================================================
LOG_LEVEL = logging.INFO
LOG_FOLDER = "logs"
LOG_TO_FILE = True

# ============================================================================
# DAQ Backend
# ============================================================================
# "ni"  -> NI-DAQmx devices (USB-6002 and similar), via nidaqmx
# "mcc" -> Measurement Computing boards configured in InstaCal, via mcculw
DAQ_BACKEND = "ni"
MCC_DEFAULT_BOARD_NUM = 0

# ============================================================================
# Channel Configuration
# ============================================================================
# Pressure transducer on Dev1/ai0, differential, 1-5 V output
DEFAULT_DEVICE_NAME = "Dev1"
DEFAULT_CHANNEL = 0
DEFAULT_TERMINAL_CONFIG = "DIFF"  # DIFF, RSE, NRSE, PSEUDO-DIFF
DEFAULT_MIN_VOLTAGE = 1.0
DEFAULT_MAX_VOLTAGE = 5.0
DEFAULT_CLOCK_SOURCE = "OnboardClock"
DEFAULT_ACTIVE_EDGE = "rising"

# ============================================================================
# Scan Configuration
# ============================================================================
# buffer_capacity / sample_rate = seconds per buffer (100 / 100 Hz = 1 s)
# number_of_buffers buffers make one interval (60 x 1 s = 1 minute)
DEFAULT_SAMPLE_RATE = 100.0  # Hz
DEFAULT_BUFFER_CAPACITY = 100  # samples per read
DEFAULT_NUMBER_OF_BUFFERS = 60  # reads per interval
DEFAULT_NUMBER_OF_INTERVALS = 5000  # intervals before the run ends
DEFAULT_READ_TIMEOUT = 10.0  # seconds
DEFAULT_READ_RETRIES = 0  # extra attempts for a failed or short read

# ============================================================================
# Unit Conversion (1-5 V -> 0-15 PSI)
# ============================================================================
CONVERSION_SCALE = 15.0 / 4.0
CONVERSION_OFFSET = 1.0

# ============================================================================
# Data Storage Configuration
# ============================================================================
DATA_FILE_PATH = "dataPressureTransducer.csv"
LOG_HEADER = "Date and Time , Pressure [PSI]"
CSV_DELIMITER = ","
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


TERMINAL_CONFIGS = ("DIFF", "RSE", "NRSE", "PSEUDO-DIFF")
MCC_TERMINAL_CONFIGS = ("DIFF", "RSE", "NRSE")  # UL input modes have no pseudo-differential
DAQ_BACKENDS = ("ni", "mcc")


class ShortReadPolicy(Enum):
    """What to do when a read returns fewer samples than requested."""
    FAIL = "fail"
    AVERAGE_PARTIAL = "average-partial"


@dataclass(frozen=True)
class ChannelSpec:
    """Single analog input channel and its sample clock settings."""
    device: str = DEFAULT_DEVICE_NAME
    channel: int = DEFAULT_CHANNEL
    terminal_config: str = DEFAULT_TERMINAL_CONFIG
    min_val: float = DEFAULT_MIN_VOLTAGE
    max_val: float = DEFAULT_MAX_VOLTAGE
    units: str = "volts"
    clock_source: str = DEFAULT_CLOCK_SOURCE
    active_edge: str = DEFAULT_ACTIVE_EDGE

    @property
    def physical_channel(self) -> str:
        """NI-style physical channel name, e.g. Dev1/ai0."""
        return f"{self.device}/ai{self.channel}"


@dataclass
class LoggerSettings:
    """
    Complete configuration for one logging run.
    Defaults come from the module constants above.
    """
    sample_rate_hz: float = DEFAULT_SAMPLE_RATE
    buffer_capacity: int = DEFAULT_BUFFER_CAPACITY
    number_of_buffers: int = DEFAULT_NUMBER_OF_BUFFERS
    number_of_intervals: int = DEFAULT_NUMBER_OF_INTERVALS
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT
    channel: ChannelSpec = field(default_factory=ChannelSpec)
    conversion_scale: float = CONVERSION_SCALE
    conversion_offset: float = CONVERSION_OFFSET
    backend: str = DAQ_BACKEND
    mcc_board_num: int = MCC_DEFAULT_BOARD_NUM
    output_path: Path = Path(DATA_FILE_PATH)
    read_retries: int = DEFAULT_READ_RETRIES
    short_read_policy: ShortReadPolicy = ShortReadPolicy.FAIL

    @classmethod
    def from_config(cls, **overrides) -> "LoggerSettings":
        """Build settings from the module constants, replacing any given fields."""
        settings = cls()
        overrides = {key: value for key, value in overrides.items() if value is not None}
        return replace(settings, **overrides) if overrides else settings

    @property
    def seconds_per_buffer(self) -> float:
        return self.buffer_capacity / self.sample_rate_hz

    @property
    def seconds_per_interval(self) -> float:
        return self.seconds_per_buffer * self.number_of_buffers

    def validate(self) -> "LoggerSettings":
        """
        Check every parameter before any device is touched.

        Raises:
            ConfigurationError: If a parameter is out of range
        """
        if self.buffer_capacity < 1:
            raise ConfigurationError(f"buffer_capacity must be >= 1, got {self.buffer_capacity}")
        if self.number_of_buffers < 1:
            raise ConfigurationError(f"number_of_buffers must be >= 1, got {self.number_of_buffers}")
        if self.number_of_intervals < 1:
            raise ConfigurationError(f"number_of_intervals must be >= 1, got {self.number_of_intervals}")
        if self.sample_rate_hz <= 0:
            raise ConfigurationError(f"sample_rate_hz must be > 0, got {self.sample_rate_hz}")
        if self.read_timeout_seconds <= 0:
            raise ConfigurationError(f"read_timeout_seconds must be > 0, got {self.read_timeout_seconds}")
        if self.read_retries < 0:
            raise ConfigurationError(f"read_retries must be >= 0, got {self.read_retries}")
        if self.backend not in DAQ_BACKENDS:
            raise ConfigurationError(f"Unknown DAQ backend '{self.backend}' (expected one of {DAQ_BACKENDS})")
        if self.channel.terminal_config not in TERMINAL_CONFIGS:
            raise ConfigurationError(f"Unknown terminal configuration '{self.channel.terminal_config}'")
        if self.backend == "mcc" and self.channel.terminal_config not in MCC_TERMINAL_CONFIGS:
            raise ConfigurationError(
                f"Terminal configuration '{self.channel.terminal_config}' is not supported by the MCC backend "
                f"(expected one of {MCC_TERMINAL_CONFIGS})"
            )
        if self.channel.min_val >= self.channel.max_val:
            raise ConfigurationError(
                f"Voltage range is empty: {self.channel.min_val} V to {self.channel.max_val} V"
            )
        return self
