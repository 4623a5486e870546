"""
Acquisition session for one DAQ task.
Owns the device lifecycle: configure -> start -> read loop -> stop -> release.
"""
from enum import Enum

import numpy as np

from config import ShortReadPolicy
from daq_errors import ConfigurationError, DeviceError, ReadError, StartError
from utils.logging_setup import get_logger

logger = get_logger(__name__)


class SessionState(Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


class AcquisitionSession:
    """
    State machine around a DAQ device.

    The only component that calls into the device. Device failures are
    translated into ConfigurationError, StartError or ReadError depending on
    the stage, and close() releases the device exactly once on every exit path.
    Use as a context manager.
    """

    def __init__(self, device, read_retries: int = 0,
                 short_read_policy: ShortReadPolicy = ShortReadPolicy.FAIL):
        """
        Args:
            device: DAQDevice implementation
            read_retries: Extra attempts for a failed or short read before it is fatal
            short_read_policy: FAIL or AVERAGE_PARTIAL once retries are exhausted
        """
        self.device = device
        self.read_retries = read_retries
        self.short_read_policy = short_read_policy
        self.state = SessionState.UNCONFIGURED
        self.buffer_capacity = None
        self._released = False

    def configure(self, channel_spec, sample_rate_hz: float, buffer_capacity: int):
        """
        Create the input channel and sample clock.

        Raises:
            ConfigurationError: Bad parameters (device untouched) or device refusal
        """
        if self.state is not SessionState.UNCONFIGURED:
            raise ConfigurationError(f"Session already {self.state.value}")
        if buffer_capacity < 1:
            raise ConfigurationError(f"buffer_capacity must be >= 1, got {buffer_capacity}")
        if sample_rate_hz <= 0:
            raise ConfigurationError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")

        try:
            self.device.configure(channel_spec, sample_rate_hz, buffer_capacity)
        except DeviceError as e:
            raise ConfigurationError("Could not configure channel or sample clock",
                                     diagnostic=self._diagnostic(e)) from e

        self.buffer_capacity = buffer_capacity
        self.state = SessionState.CONFIGURED

    def start(self):
        """
        Raises:
            StartError: Device refused to begin sampling (session becomes FAILED)
        """
        if self.state is not SessionState.CONFIGURED:
            raise StartError(f"Cannot start a session that is {self.state.value}")
        try:
            self.device.start()
        except DeviceError as e:
            self.state = SessionState.FAILED
            raise StartError("Device refused to start sampling", diagnostic=self._diagnostic(e)) from e
        self.state = SessionState.RUNNING
        logger.info("Acquisition running")

    def read(self, buffer: np.ndarray, timeout: float) -> int:
        """
        Fill buffer with exactly buffer_capacity samples.

        Returns:
            Samples read. Only less than buffer_capacity under AVERAGE_PARTIAL.

        Raises:
            ValueError: buffer length differs from the configured capacity
            ReadError: Device error, timeout or short read (session becomes FAILED)
        """
        if self.state is not SessionState.RUNNING:
            raise ReadError(f"Cannot read from a session that is {self.state.value}")
        if len(buffer) != self.buffer_capacity:
            raise ValueError(f"Read must request exactly {self.buffer_capacity} samples, got {len(buffer)}")

        attempts = self.read_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                samples_read = self.device.read(buffer, timeout)
            except DeviceError as e:
                if attempt < attempts:
                    logger.warning(f"Read attempt {attempt}/{attempts} failed, retrying: {e}")
                    continue
                self.state = SessionState.FAILED
                raise ReadError("Read failed", diagnostic=self._diagnostic(e)) from e

            if samples_read == self.buffer_capacity:
                return samples_read
            if attempt < attempts:
                logger.warning(f"Short read ({samples_read} of {self.buffer_capacity} samples) "
                               f"on attempt {attempt}/{attempts}, retrying")

        if self.short_read_policy is ShortReadPolicy.AVERAGE_PARTIAL and samples_read > 0:
            logger.warning(f"Averaging partial buffer: {samples_read} of {self.buffer_capacity} samples")
            return samples_read

        self.state = SessionState.FAILED
        raise ReadError(f"Read timed out after {timeout} s with {samples_read} of "
                        f"{self.buffer_capacity} samples",
                        diagnostic=self.device.last_error_diagnostics() or None)

    def stop(self):
        """Stop sampling. Idempotent; failures are logged, never raised."""
        if self.state not in (SessionState.RUNNING, SessionState.FAILED, SessionState.CONFIGURED):
            return
        try:
            self.device.stop()
        except DeviceError as e:
            logger.error(f"Error stopping acquisition: {e}")
        self.state = SessionState.STOPPED

    def close(self):
        """Stop if needed, then release the device exactly once."""
        self.stop()
        if self._released:
            return
        self._released = True
        try:
            self.device.release()
        except DeviceError as e:
            logger.error(f"Error releasing device: {e}")

    def _diagnostic(self, error: DeviceError) -> str:
        return error.diagnostic or self.device.last_error_diagnostics() or str(error)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
