"""
Common interface for single-channel analog input DAQ devices.
AcquisitionSession is the only caller of these methods.
"""
import numpy as np


class DAQDevice:
    """
    Base class for a DAQ backend.

    Every method that talks to the driver raises DeviceError on failure;
    the driver's extended error text is kept for last_error_diagnostics().
    """

    name = "daq"

    def configure(self, channel_spec, sample_rate_hz: float, buffer_capacity: int):
        """
        Create the input channel and the continuous sample clock.

        Args:
            channel_spec: ChannelSpec describing channel, terminal mode and range
            sample_rate_hz: Sample clock rate in Hz
            buffer_capacity: Samples requested by every read
        """
        raise NotImplementedError("Subclasses must implement configure()")

    def start(self):
        """Begin continuous sampling into the device buffer."""
        raise NotImplementedError("Subclasses must implement start()")

    def read(self, buffer: np.ndarray, timeout: float) -> int:
        """
        Fill buffer with up to len(buffer) samples.

        Returns:
            Number of samples actually read (less than len(buffer) on timeout)
        """
        raise NotImplementedError("Subclasses must implement read()")

    def stop(self):
        raise NotImplementedError("Subclasses must implement stop()")

    def release(self):
        """Free every driver resource. Must be safe to call in any state."""
        raise NotImplementedError("Subclasses must implement release()")

    def last_error_diagnostics(self) -> str:
        return ""
