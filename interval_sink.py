"""
Interval log writer.
Appends one timestamped pressure reading per interval to a CSV file.
"""
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import config
from daq_errors import SinkWriteError
from utils.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IntervalRecord:
    timestamp: str
    value: float

    @classmethod
    def now(cls, value: float, clock=datetime.now) -> "IntervalRecord":
        """Stamp value with the current local wall-clock time."""
        return cls(clock().strftime(config.TIMESTAMP_FORMAT), value)

    def to_line(self) -> str:
        return f"{self.timestamp}{config.CSV_DELIMITER}{self.value:.6g}"


class IntervalSink:
    """
    Durable CSV log of interval records.

    The file is opened once, gets the header if it is new or empty, and every
    append() is flushed and fsynced before returning.
    """

    def __init__(self, path, header: str = config.LOG_HEADER, fsync: bool = True):
        self.path = Path(path)
        self.header = header
        self.fsync = fsync
        self.records_written = 0
        self._file = None
        self._closed = False

    def open(self) -> "IntervalSink":
        """
        Raises:
            SinkWriteError: If the file cannot be opened or the header cannot be written
        """
        if self._file is not None:
            return self
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8", newline="", buffering=1)  # Line buffered
            if self._file.tell() == 0:
                self._write(self.header)
        except OSError as e:
            self._close_file()
            raise SinkWriteError(f"Cannot open interval log {self.path}", diagnostic=str(e)) from e
        logger.info(f"Writing intervals to {self.path}")
        return self

    def append(self, record: IntervalRecord):
        """
        Write one record and push it to disk.

        Raises:
            SinkWriteError: If the sink is not open or storage rejects the write
        """
        if self._file is None:
            raise SinkWriteError(f"Interval log {self.path} is not open")
        try:
            self._write(record.to_line())
        except OSError as e:
            raise SinkWriteError(f"Cannot write to interval log {self.path}", diagnostic=str(e)) from e
        self.records_written += 1

    def _write(self, line: str):
        self._file.write(line + "\n")
        self._file.flush()
        if self.fsync:
            os.fsync(self._file.fileno())

    def _close_file(self):
        handle = self._file
        self._file = None
        if handle is not None:
            handle.close()

    def close(self):
        """Close the log file. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._close_file()
        except OSError as e:
            raise SinkWriteError(f"Cannot close interval log {self.path}", diagnostic=str(e)) from e
        logger.info(f"Interval log closed after {self.records_written} record(s): {self.path}")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
            return
        # Keep the in-flight exception; a close failure is only logged
        try:
            self.close()
        except SinkWriteError as e:
            logger.error(f"{e} (while handling {exc_type.__name__})")
