"""
NI-DAQmx device implementation.
Provides single-channel continuous analog input for NI USB-600x and similar devices.
"""
from typing import List, Optional, Tuple

import numpy as np
import nidaqmx
from nidaqmx.constants import AcquisitionType, Edge, TerminalConfiguration, VoltageUnits
from nidaqmx.errors import DaqReadError
from nidaqmx.errors import Error as NIDAQmxError
from nidaqmx.stream_readers import AnalogSingleChannelReader
from nidaqmx.system import System

from daq_errors import DeviceError
from hardware.daq_device import DAQDevice
from utils.logging_setup import get_logger

logger = get_logger(__name__)

# DAQmx error code for "samples requested have not yet been acquired"
READ_TIMEOUT_ERROR_CODE = -200284

TERMINAL_MAP = {
    "DIFF": TerminalConfiguration.DIFF,
    "RSE": TerminalConfiguration.RSE,
    "NRSE": TerminalConfiguration.NRSE,
    "PSEUDO-DIFF": TerminalConfiguration.PSEUDO_DIFF,
}

EDGE_MAP = {
    "rising": Edge.RISING,
    "falling": Edge.FALLING,
}


class NIDevice(DAQDevice):
    """
    NI-DAQmx backed acquisition task for one analog input channel.
    """

    name = "ni"

    def __init__(self, task_name: str = ""):
        """
        Args:
            task_name: Optional DAQmx task name (empty lets the driver choose)
        """
        self.task_name = task_name
        self.task: Optional[nidaqmx.Task] = None
        self.reader: Optional[AnalogSingleChannelReader] = None
        self.buffer_capacity = None
        self._diagnostics = ""

    def _fail(self, action: str, error: NIDAQmxError) -> DeviceError:
        self._diagnostics = str(error)
        logger.error(f"DAQmx error while {action} (code {getattr(error, 'error_code', None)})")
        return DeviceError(f"DAQmx error while {action}", diagnostic=self._diagnostics)

    def configure(self, channel_spec, sample_rate_hz: float, buffer_capacity: int):
        physical_channel = channel_spec.physical_channel
        try:
            self.task = nidaqmx.Task(new_task_name=self.task_name)
            self.task.ai_channels.add_ai_voltage_chan(
                physical_channel,
                terminal_config=TERMINAL_MAP[channel_spec.terminal_config],
                min_val=channel_spec.min_val,
                max_val=channel_spec.max_val,
                units=VoltageUnits.VOLTS,
            )
            # Continuous sampling; the driver buffer is sized to one read
            self.task.timing.cfg_samp_clk_timing(
                rate=sample_rate_hz,
                source=channel_spec.clock_source,
                active_edge=EDGE_MAP[channel_spec.active_edge],
                sample_mode=AcquisitionType.CONTINUOUS,
                samps_per_chan=buffer_capacity,
            )
        except NIDAQmxError as e:
            raise self._fail(f"configuring {physical_channel}", e) from e

        self.reader = AnalogSingleChannelReader(self.task.in_stream)
        self.buffer_capacity = buffer_capacity
        logger.info(f"Task configured: {physical_channel} ({channel_spec.terminal_config}), "
                    f"{channel_spec.min_val}-{channel_spec.max_val} V, "
                    f"{sample_rate_hz} Hz, {buffer_capacity} samples per read")

    def start(self):
        try:
            self.task.start()
        except NIDAQmxError as e:
            raise self._fail("starting task", e) from e
        logger.info("DAQmx task started")

    def read(self, buffer: np.ndarray, timeout: float) -> int:
        try:
            return self.reader.read_many_sample(
                buffer,
                number_of_samples_per_channel=len(buffer),
                timeout=timeout,
            )
        except DaqReadError as e:
            # A timeout still reports how many samples made it into the buffer
            if e.error_code == READ_TIMEOUT_ERROR_CODE:
                self._diagnostics = str(e)
                logger.warning(f"Read timed out after {timeout} s with "
                               f"{e.samps_per_chan_read} of {len(buffer)} samples")
                return e.samps_per_chan_read
            raise self._fail("reading samples", e) from e
        except NIDAQmxError as e:
            raise self._fail("reading samples", e) from e

    def stop(self):
        if self.task is None:
            return
        try:
            self.task.stop()
        except NIDAQmxError as e:
            raise self._fail("stopping task", e) from e
        logger.info("DAQmx task stopped")

    def release(self):
        """Clear the DAQmx task. Safe to call when nothing was created."""
        if self.task is None:
            return
        try:
            self.task.close()
        except NIDAQmxError as e:
            raise self._fail("clearing task", e) from e
        finally:
            self.task = None
            self.reader = None
        logger.info("DAQmx task cleared")

    def last_error_diagnostics(self) -> str:
        return self._diagnostics

    def __repr__(self):
        return f"NIDevice(task={self.task_name!r}, configured={self.task is not None})"


def list_devices() -> List[Tuple[str, str]]:
    """
    Discover NI-DAQmx devices on the local system.

    Returns:
        List of tuples: (device_name, product_type)
    """
    try:
        system = System.local()
        return [(device.name, device.product_type) for device in system.devices]
    except NIDAQmxError as e:
        logger.error(f"DAQmx device discovery failed: {e}")
        raise DeviceError("DAQmx device discovery failed", diagnostic=str(e)) from e
