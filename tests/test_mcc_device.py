from __future__ import annotations

import pytest

# mcculw loads the Universal Library DLL at import, so these run on Windows only
try:
    from mcculw.enums import ULRange

    from hardware import mcc_device
except (ImportError, OSError, AttributeError) as e:
    pytest.skip(f"MCC Universal Library not available: {e}", allow_module_level=True)

from config import ChannelSpec
from daq_errors import DeviceError


def test_pseudo_differential_is_rejected_before_driver_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(mcc_device.ul, "get_board_name", lambda board_num: calls.append(board_num))
    device = mcc_device.MCCDevice(board_num=0)

    with pytest.raises(DeviceError, match="PSEUDO-DIFF"):
        device.configure(ChannelSpec(terminal_config="PSEUDO-DIFF"), 100.0, 100)
    assert calls == []
    assert "not supported" in device.last_error_diagnostics()


def test_select_range_picks_narrowest_covering_range() -> None:
    supported = [ULRange.BIP10VOLTS, ULRange.BIP5VOLTS, ULRange.UNI5VOLTS]
    assert mcc_device.select_range(supported, 1.0, 5.0) is ULRange.UNI5VOLTS
    assert mcc_device.select_range(supported, -3.0, 3.0) is ULRange.BIP5VOLTS


def test_select_range_without_cover_fails() -> None:
    with pytest.raises(DeviceError):
        mcc_device.select_range([ULRange.BIP1VOLTS], 1.0, 5.0)
