"""
MCC DAQ Device implementation.
Provides continuous single-channel analog input for MCC USB-series DAQ devices.
"""
import time
from ctypes import cast, POINTER, c_double
from typing import List, Optional, Tuple

import numpy as np

from mcculw import ul
from mcculw.enums import AnalogInputMode, FunctionType, ScanOptions, ULRange
from mcculw.device_info import DaqDeviceInfo
from mcculw.ul import ULError

from daq_errors import DeviceError
from hardware.daq_device import DAQDevice
from utils.logging_setup import get_logger

logger = get_logger(__name__)

# Circular scan buffer holds this many seconds of data
CIRCULAR_BUFFER_SECONDS = 10.0
POLL_INTERVAL = 0.001

# Voltage span of each input range, narrowest first within each polarity
RANGE_LIMITS = [
    (ULRange.UNI5VOLTS, 0.0, 5.0),
    (ULRange.UNI10VOLTS, 0.0, 10.0),
    (ULRange.BIP1VOLTS, -1.0, 1.0),
    (ULRange.BIP2VOLTS, -2.0, 2.0),
    (ULRange.BIP5VOLTS, -5.0, 5.0),
    (ULRange.BIP10VOLTS, -10.0, 10.0),
]

INPUT_MODE_MAP = {
    "DIFF": AnalogInputMode.DIFFERENTIAL,
    "RSE": AnalogInputMode.SINGLE_ENDED,
    "NRSE": AnalogInputMode.SINGLE_ENDED,
}


def select_range(supported_ranges, min_val: float, max_val: float) -> ULRange:
    """
    Pick the narrowest supported input range that covers min_val..max_val.

    Raises:
        DeviceError: If no supported range covers the requested span
    """
    candidates = [
        (high - low, ai_range) for ai_range, low, high in RANGE_LIMITS
        if ai_range in supported_ranges and low <= min_val and max_val <= high
    ]
    if not candidates:
        raise DeviceError(f"No supported input range covers {min_val} V to {max_val} V")
    return min(candidates, key=lambda item: item[0])[1]


class MCCDevice(DAQDevice):
    """
    MCC DAQ device running a continuous background scan of one channel.
    Reads drain the scan's circular buffer in order.
    """

    name = "mcc"

    def __init__(self, board_num: int = 0):
        """
        Args:
            board_num: Board number assigned to this device in InstaCal
        """
        self.board_num = board_num
        self.info: Optional[DaqDeviceInfo] = None

        # Scanning state
        self.is_scanning = False
        self.memhandle = None
        self.ctypes_array = None
        self.scan_options = ScanOptions.BACKGROUND | ScanOptions.CONTINUOUS | ScanOptions.SCALEDATA

        # Scan parameters (set during configure)
        self.channel = None
        self.rate = None
        self.ai_range = None
        self.buffer_capacity = None
        self.total_count = None

        # Samples handed out by read() since the scan started
        self.samples_consumed = 0
        self._diagnostics = ""

    def _fail(self, action: str, error: ULError) -> DeviceError:
        self._diagnostics = f"UL error {error.errorcode}: {error.message}"
        logger.error(f"Error while {action} on board {self.board_num}: {self._diagnostics}")
        return DeviceError(f"MCC error while {action}", diagnostic=self._diagnostics)

    def configure(self, channel_spec, sample_rate_hz: float, buffer_capacity: int):
        try:
            if channel_spec.terminal_config not in INPUT_MODE_MAP:
                raise DeviceError(f"Terminal configuration '{channel_spec.terminal_config}' "
                                  f"is not supported on MCC devices")
            board_name = ul.get_board_name(self.board_num)
            if not board_name:
                raise DeviceError(f"No device found on board {self.board_num}")
            self.info = DaqDeviceInfo(self.board_num)
            if not self.info.supports_analog_input:
                raise DeviceError(f"Device {self.info.product_name} does not support analog input")

            ai_info = self.info.get_ai_info()
            if channel_spec.channel >= ai_info.num_chans:
                raise DeviceError(f"Channel {channel_spec.channel} not available "
                                  f"({ai_info.num_chans} channels on {self.info.product_name})")
            self.ai_range = select_range(ai_info.supported_ranges, channel_spec.min_val, channel_spec.max_val)

            ul.a_input_mode(self.board_num, INPUT_MODE_MAP[channel_spec.terminal_config])
        except ULError as e:
            raise self._fail("configuring scan", e) from e
        except DeviceError as e:
            self._diagnostics = str(e)
            raise

        self.channel = channel_spec.channel
        self.rate = int(sample_rate_hz)
        self.buffer_capacity = buffer_capacity
        self.total_count = max(2 * buffer_capacity, int(sample_rate_hz * CIRCULAR_BUFFER_SECONDS))

        logger.info(f"Scan configured: {self.info.product_name} CH{self.channel}, "
                    f"{self.rate} Hz, {buffer_capacity} samples per read, "
                    f"Range: {self.ai_range.name}")

    def start(self):
        """Allocate the scaled circular buffer and start the background scan."""
        if self.is_scanning:
            raise DeviceError("Scan already in progress. Stop current scan first.")

        try:
            self.memhandle = ul.scaled_win_buf_alloc(self.total_count)
            if not self.memhandle:
                raise DeviceError("Failed to allocate memory buffer")
            self.ctypes_array = cast(self.memhandle, POINTER(c_double))

            actual_rate = ul.a_in_scan(
                self.board_num,
                self.channel,
                self.channel,
                self.total_count,
                self.rate,
                self.ai_range,
                self.memhandle,
                self.scan_options
            )
        except ULError as e:
            self._free_buffer()
            raise self._fail("starting scan", e) from e
        except DeviceError as e:
            self._diagnostics = str(e)
            raise

        self.is_scanning = True
        self.samples_consumed = 0
        if actual_rate != self.rate:
            logger.warning(f"Board {self.board_num} running at {actual_rate} Hz (requested {self.rate} Hz)")
        logger.info(f"Background scan started on board {self.board_num}")

    def read(self, buffer: np.ndarray, timeout: float) -> int:
        """
        Copy the next len(buffer) samples out of the circular buffer.
        Waits up to timeout seconds; returns fewer samples if they did not arrive.
        """
        if not self.is_scanning:
            raise DeviceError("No scan in progress")

        requested = len(buffer)
        deadline = time.monotonic() + timeout
        try:
            while True:
                status, curr_count, curr_index = ul.get_status(self.board_num, FunctionType.AIFUNCTION)
                available = curr_count - self.samples_consumed
                if available > self.total_count:
                    self._diagnostics = (f"{available - self.total_count} samples overwritten "
                                         f"before they were read")
                    raise DeviceError("Circular buffer overrun", diagnostic=self._diagnostics)
                if available >= requested or time.monotonic() >= deadline:
                    break
                time.sleep(POLL_INTERVAL)
        except ULError as e:
            raise self._fail("reading scan status", e) from e

        count = min(available, requested)
        if count > 0:
            # Handle circular buffer wraparound
            scan_buffer = np.ctypeslib.as_array(self.ctypes_array, shape=(self.total_count,))
            indices = (self.samples_consumed + np.arange(count)) % self.total_count
            buffer[:count] = scan_buffer[indices]
            self.samples_consumed += count

        if count < requested:
            logger.warning(f"Read timed out after {timeout} s with {count} of {requested} samples")
        return count

    def stop(self):
        """Stop the background scan."""
        if not self.is_scanning:
            return
        try:
            ul.stop_background(self.board_num, FunctionType.AIFUNCTION)
            logger.info(f"Scan stopped on board {self.board_num}")
        except ULError as e:
            raise self._fail("stopping scan", e) from e
        finally:
            self.is_scanning = False

    def _free_buffer(self):
        if self.memhandle:
            ul.win_buf_free(self.memhandle)
            self.memhandle = None
            self.ctypes_array = None

    def release(self):
        """Free the scan buffer and release the DAQ device."""
        try:
            self._free_buffer()
            if self.info is not None:
                ul.release_daq_device(self.board_num)
                self.info = None
                logger.info(f"Released device on board {self.board_num}")
        except ULError as e:
            raise self._fail("releasing device", e) from e

    def last_error_diagnostics(self) -> str:
        return self._diagnostics

    def __repr__(self):
        return (f"MCCDevice(board={self.board_num}, "
                f"channel={self.channel}, "
                f"scanning={self.is_scanning})")


def list_devices(max_boards: int = 10) -> List[Tuple[int, str, str]]:
    """
    Discover MCC devices configured in InstaCal.

    Returns:
        List of tuples: (board_num, product_name, unique_id)
    """
    discovered = []
    for board_num in range(max_boards):
        try:
            if ul.get_board_name(board_num):
                info = DaqDeviceInfo(board_num)
                discovered.append((board_num, info.product_name, info.unique_id))
        except ULError:
            # No device at this board number
            continue
    return discovered
