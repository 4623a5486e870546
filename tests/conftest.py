from __future__ import annotations

from datetime import datetime

import pytest

from daq_errors import DeviceError
from hardware.daq_device import DAQDevice


class FakeDevice(DAQDevice):
    """Scripted DAQ device that records every boundary call.

    ``reads`` holds one entry per read: a sequence of voltages (shorter than the
    buffer means a short read) or a DeviceError to raise. Once the script runs
    out, every read returns a full buffer of ``default``.
    """

    name = "fake"

    def __init__(self, reads=(), default: float = 3.0, fail_at: str | None = None,
                 fail_stop: bool = False) -> None:
        self.reads = list(reads)
        self.default = default
        self.fail_at = fail_at
        self.fail_stop = fail_stop
        self.calls: list[str] = []
        self.configured_with = None

    def _maybe_fail(self, stage: str) -> None:
        if self.fail_at == stage:
            raise DeviceError(f"{stage} failed", diagnostic=f"fake driver refused {stage}")

    def configure(self, channel_spec, sample_rate_hz, buffer_capacity):
        self.calls.append("configure")
        self._maybe_fail("configure")
        self.configured_with = (channel_spec, sample_rate_hz, buffer_capacity)

    def start(self):
        self.calls.append("start")
        self._maybe_fail("start")

    def read(self, buffer, timeout):
        self.calls.append("read")
        item = self.reads.pop(0) if self.reads else None
        if isinstance(item, DeviceError):
            raise item
        if item is None:
            buffer[:] = self.default
            return len(buffer)
        buffer[:len(item)] = item
        return len(item)

    def stop(self):
        self.calls.append("stop")
        if self.fail_stop:
            raise DeviceError("stop failed", diagnostic="fake driver refused stop")

    def release(self):
        self.calls.append("release")

    def last_error_diagnostics(self) -> str:
        return "fake diagnostics"

    def count(self, name: str) -> int:
        return self.calls.count(name)


@pytest.fixture
def fake_device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2021, 3, 5, 14, 30, 0)
