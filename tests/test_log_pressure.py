from __future__ import annotations

import logging
from pathlib import Path

import pytest

import log_pressure
from acquisition_controller import AcquisitionController
from config import ShortReadPolicy
from daq_errors import DeviceError

from conftest import FakeDevice


@pytest.fixture(autouse=True)
def _restore_root_logger(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _use_device(monkeypatch: pytest.MonkeyPatch, device: FakeDevice) -> list:
    built = []

    class _Controller(AcquisitionController):
        def __init__(self, settings, **kwargs):
            super().__init__(settings, device=device, **kwargs)
            built.append(self)

    monkeypatch.setattr(log_pressure, "AcquisitionController", _Controller)
    return built


def test_settings_from_args_maps_flags() -> None:
    args = log_pressure.build_parser().parse_args(
        ["--rate", "50", "--buffer", "25", "--buffers", "4", "--intervals", "2",
         "--partial", "--retries", "1", "--channel", "2", "--terminal", "RSE", "--out", "p.csv"]
    )
    settings = log_pressure.settings_from_args(args)

    assert settings.sample_rate_hz == 50.0
    assert settings.buffer_capacity == 25
    assert settings.number_of_buffers == 4
    assert settings.number_of_intervals == 2
    assert settings.read_retries == 1
    assert settings.short_read_policy is ShortReadPolicy.AVERAGE_PARTIAL
    assert settings.channel.physical_channel == "Dev1/ai2"
    assert settings.channel.terminal_config == "RSE"
    assert settings.output_path == Path("p.csv")


def test_successful_run_exits_zero(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    device = FakeDevice(default=3.0)
    built = _use_device(monkeypatch, device)

    code = log_pressure.main(["--buffer", "4", "--buffers", "2", "--intervals", "3",
                              "--out", "pressure.csv", "--no-log-file"])

    assert code == log_pressure.EXIT_OK
    assert built[0].intervals_written == 3
    lines = (tmp_path / "pressure.csv").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 4
    assert all(line.endswith(",7.5") for line in lines[1:])


def test_device_failure_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    device = FakeDevice(reads=[DeviceError("read failed", diagnostic="device unplugged")])
    _use_device(monkeypatch, device)

    code = log_pressure.main(["--buffer", "4", "--buffers", "2", "--intervals", "1",
                              "--out", "pressure.csv", "--no-log-file"])

    assert code == log_pressure.EXIT_FAILURE
    assert device.count("release") == 1


def test_invalid_window_size_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    device = FakeDevice()
    _use_device(monkeypatch, device)

    assert log_pressure.main(["--buffer", "0", "--no-log-file"]) == log_pressure.EXIT_FAILURE
    assert device.calls == []


def test_keyboard_interrupt_exits_130(monkeypatch: pytest.MonkeyPatch) -> None:
    class _InterruptingDevice(FakeDevice):
        def read(self, buffer, timeout):
            raise KeyboardInterrupt

    device = _InterruptingDevice()
    _use_device(monkeypatch, device)

    code = log_pressure.main(["--buffer", "4", "--out", "pressure.csv", "--no-log-file"])

    assert code == log_pressure.EXIT_INTERRUPTED
    assert device.count("stop") == 1
    assert device.count("release") == 1


def _without_nidaqmx_runtime(monkeypatch: pytest.MonkeyPatch):
    pytest.importorskip("nidaqmx")
    from nidaqmx.errors import DaqNotFoundError
    from hardware import ni_device

    def _no_driver(*args, **kwargs):
        raise DaqNotFoundError("Could not find an installation of NI-DAQmx.")

    monkeypatch.setattr(ni_device.nidaqmx, "Task", _no_driver)
    monkeypatch.setattr(ni_device.System, "local", staticmethod(_no_driver))


def test_missing_ni_runtime_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    _without_nidaqmx_runtime(monkeypatch)

    code = log_pressure.main(["--backend", "ni", "--buffer", "4", "--intervals", "1",
                              "--out", "pressure.csv", "--no-log-file"])

    assert code == log_pressure.EXIT_FAILURE


def test_listing_devices_without_ni_runtime_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    _without_nidaqmx_runtime(monkeypatch)

    assert log_pressure.main(["--backend", "ni", "--list-devices", "--no-log-file"]) == log_pressure.EXIT_FAILURE


def test_failure_is_reported_through_project_logger(monkeypatch: pytest.MonkeyPatch,
                                                    capsys: pytest.CaptureFixture) -> None:
    device = FakeDevice(reads=[DeviceError("read failed", diagnostic="device unplugged")])
    _use_device(monkeypatch, device)

    log_pressure.main(["--buffer", "4", "--intervals", "1", "--out", "pressure.csv", "--no-log-file"])

    err = capsys.readouterr().err
    assert "log_pressure - ERROR - Acquisition failed" in err
    assert "device unplugged" in err
