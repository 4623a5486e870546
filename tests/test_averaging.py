from __future__ import annotations

import numpy as np
import pytest

from averaging import SampleBuffer, UnitConverter, WindowAggregator, mean
from daq_errors import ConfigurationError, IncompleteWindowError

# -- mean -----------------------------------------------------------------------


def test_mean_is_sum_over_count() -> None:
    assert mean([1.0, 3.0, 1.0, 3.0]) == 2.0
    assert mean([2.5]) == 2.5


def test_mean_is_order_insensitive() -> None:
    rng = np.random.default_rng(1234)
    values = rng.uniform(1.0, 5.0, size=500)
    shuffled = rng.permutation(values)
    assert mean(values) == pytest.approx(mean(shuffled), rel=1e-12)
    assert mean(values) == pytest.approx(sum(values) / len(values), rel=1e-12)


def test_mean_of_empty_sequence_fails() -> None:
    with pytest.raises(ValueError):
        mean([])
    with pytest.raises(ValueError):
        mean(np.array([]))


# -- UnitConverter ----------------------------------------------------------------


@pytest.mark.parametrize(
    ("voltage", "psi"),
    [(1.0, 0.0), (5.0, 15.0), (3.0, 7.5), (2.0, 3.75)],
)
def test_converter_maps_one_to_five_volts_onto_zero_to_fifteen_psi(voltage: float, psi: float) -> None:
    converter = UnitConverter(scale=3.75, offset=1.0)
    assert converter.convert(voltage) == psi


def test_converter_is_affine_not_linear() -> None:
    converter = UnitConverter(scale=3.75, offset=1.0)
    assert converter.convert(2 * 3.0) != 2 * converter.convert(3.0)


# -- WindowAggregator -----------------------------------------------------------


def test_aggregator_interval_mean_after_full_window() -> None:
    aggregator = WindowAggregator(3)
    for value in (1.0, 2.0, 6.0):
        assert not aggregator.is_full()
        aggregator.push(value)
    assert aggregator.is_full()
    assert aggregator.interval_mean() == 3.0


def test_aggregator_interval_mean_before_full_fails() -> None:
    aggregator = WindowAggregator(2)
    with pytest.raises(IncompleteWindowError):
        aggregator.interval_mean()
    aggregator.push(1.0)
    with pytest.raises(IncompleteWindowError):
        aggregator.interval_mean()


def test_aggregator_reset_does_not_leak_between_intervals() -> None:
    aggregator = WindowAggregator(2)
    aggregator.push(100.0)
    aggregator.push(200.0)
    assert aggregator.interval_mean() == 150.0

    aggregator.reset()
    assert len(aggregator) == 0
    aggregator.push(1.0)
    aggregator.push(3.0)
    assert aggregator.interval_mean() == 2.0


def test_aggregator_rejects_push_into_full_window() -> None:
    aggregator = WindowAggregator(1)
    aggregator.push(1.0)
    with pytest.raises(ValueError):
        aggregator.push(2.0)


def test_zero_sized_windows_are_configuration_errors() -> None:
    with pytest.raises(ConfigurationError):
        WindowAggregator(0)
    with pytest.raises(ConfigurationError):
        SampleBuffer(0)


# -- SampleBuffer -----------------------------------------------------------------


class _ScriptedSession:
    def __init__(self, values: list[float]) -> None:
        self.values = values
        self.timeouts: list[float] = []

    def read(self, buffer, timeout):
        self.timeouts.append(timeout)
        buffer[:len(self.values)] = self.values
        return len(self.values)


def test_sample_buffer_fill_and_mean() -> None:
    buffer = SampleBuffer(4)
    session = _ScriptedSession([1.0, 3.0, 1.0, 3.0])

    data, samples_read = buffer.fill_from(session, 10.0)

    assert samples_read == 4
    assert data is buffer.data
    assert session.timeouts == [10.0]
    assert buffer.mean() == 2.0
    assert UnitConverter(3.75, 1.0).convert(buffer.mean()) == 3.75


def test_sample_buffer_is_reused_in_place() -> None:
    buffer = SampleBuffer(2)
    original = buffer.data
    buffer.fill_from(_ScriptedSession([1.0, 1.0]), 1.0)
    buffer.fill_from(_ScriptedSession([5.0, 5.0]), 1.0)
    assert buffer.data is original
    assert buffer.mean() == 5.0


def test_sample_buffer_mean_covers_only_populated_samples() -> None:
    buffer = SampleBuffer(4)
    buffer.fill_from(_ScriptedSession([9.0, 9.0, 9.0, 9.0]), 1.0)
    buffer.fill_from(_ScriptedSession([2.0, 4.0]), 1.0)
    assert buffer.samples_read == 2
    assert buffer.mean() == 3.0
