"""
Averaging pipeline for pressure readings.

Architecture:
    1. SampleBuffer: one read's worth of raw voltages, reused every iteration
    2. UnitConverter: linear voltage -> engineering unit transform
    3. WindowAggregator: collects converted buffer means into one interval mean
"""
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from daq_errors import ConfigurationError, IncompleteWindowError


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean of values.

    Raises:
        ValueError: If values is empty
    """
    if len(values) == 0:
        raise ValueError("Cannot average an empty sequence")
    return float(np.sum(values) / len(values))


@dataclass(frozen=True)
class UnitConverter:
    """Affine transform: value = scale * (voltage - offset)."""
    scale: float
    offset: float

    def convert(self, mean_voltage: float) -> float:
        return self.scale * (mean_voltage - self.offset)


class SampleBuffer:
    """
    Fixed-capacity buffer of raw voltage samples.
    Allocated once and overwritten in place by every read.
    """

    def __init__(self, capacity: int):
        """
        Args:
            capacity: Samples requested per read (must be >= 1)
        """
        if capacity < 1:
            raise ConfigurationError(f"buffer_capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.data = np.zeros(capacity, dtype=np.float64)
        self.samples_read = 0

    def fill_from(self, session, timeout: float) -> Tuple[np.ndarray, int]:
        """
        Read one buffer from an acquisition session.

        Args:
            session: Running AcquisitionSession
            timeout: Maximum wait in seconds

        Returns:
            Tuple of (buffer, samples_read)
        """
        self.samples_read = session.read(self.data, timeout)
        return self.data, self.samples_read

    def mean(self) -> float:
        """Mean of the samples populated by the last read."""
        return mean(self.data[:self.samples_read])

    def __len__(self):
        return self.capacity


class WindowAggregator:
    """
    Batches a fixed number of buffer means into one interval mean.
    """

    def __init__(self, number_of_buffers: int):
        if number_of_buffers < 1:
            raise ConfigurationError(f"number_of_buffers must be >= 1, got {number_of_buffers}")
        self.number_of_buffers = number_of_buffers
        self._values = np.zeros(number_of_buffers, dtype=np.float64)
        self._count = 0

    def push(self, window_mean: float):
        """Append one converted buffer mean to the current window."""
        if self.is_full():
            raise ValueError(f"Window already holds {self.number_of_buffers} values; call reset() first")
        self._values[self._count] = window_mean
        self._count += 1

    def is_full(self) -> bool:
        return self._count == self.number_of_buffers

    def interval_mean(self) -> float:
        """
        Mean of the buffered values.

        Raises:
            IncompleteWindowError: If fewer than number_of_buffers values were pushed
        """
        if not self.is_full():
            raise IncompleteWindowError(
                f"Interval mean requested with {self._count} of {self.number_of_buffers} buffers"
            )
        return mean(self._values)

    def reset(self):
        self._count = 0

    def __len__(self):
        return self._count
