"""
Acquisition Controller for the pressure logger.
Runs the read loop: buffers -> buffer means -> interval means -> CSV log.
"""
import logging
import threading
from contextlib import ExitStack
from datetime import datetime

from acquisition_session import AcquisitionSession
from averaging import SampleBuffer, UnitConverter, WindowAggregator
from device_manager import create_device
from interval_sink import IntervalRecord, IntervalSink
from utils.logging_setup import get_logger

logger = get_logger(__name__)


class AcquisitionController:
    """
    Orchestrates one logging run.

    Each interval is number_of_buffers reads of buffer_capacity samples; the
    converted mean of every buffer goes into a WindowAggregator and the
    window's mean is appended to the interval log. Teardown of the device and
    the log always runs, whichever way the loop ends.
    """

    def __init__(self, settings, device=None, sink=None, clock=datetime.now):
        """
        Initialize the acquisition controller.

        Args:
            settings: LoggerSettings for this run
            device: DAQ device to use (default: built from settings.backend)
            sink: IntervalSink to write to (default: settings.output_path)
            clock: Callable returning the current local datetime
        """
        self.settings = settings
        self.device = device
        self.sink = sink
        self.clock = clock
        self.converter = UnitConverter(settings.conversion_scale, settings.conversion_offset)
        self.intervals_written = 0
        self._stop_event = threading.Event()

    def request_stop(self):
        """Ask the loop to end before the next read. No partial interval is written."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> int:
        """
        Configure the device, log number_of_intervals intervals and tear down.

        Returns:
            Number of interval records written

        Raises:
            DAQLoggerError subclass on any failure, after cleanup has run
        """
        settings = self.settings.validate()
        buffer = SampleBuffer(settings.buffer_capacity)
        aggregator = WindowAggregator(settings.number_of_buffers)

        logger.info(f"Logging {settings.number_of_intervals} interval(s) of "
                    f"{settings.seconds_per_interval:g} s "
                    f"({settings.number_of_buffers} x {settings.buffer_capacity} samples "
                    f"at {settings.sample_rate_hz:g} Hz)")

        device = self.device if self.device is not None else create_device(settings)
        with ExitStack() as stack:
            session = stack.enter_context(AcquisitionSession(
                device,
                read_retries=settings.read_retries,
                short_read_policy=settings.short_read_policy,
            ))
            sink = self.sink if self.sink is not None else IntervalSink(settings.output_path)
            stack.enter_context(sink)

            session.configure(settings.channel, settings.sample_rate_hz, settings.buffer_capacity)
            session.start()
            logger.info("Start")

            for interval_index in range(settings.number_of_intervals):
                if self.stop_requested:
                    break
                if not self._collect_window(session, buffer, aggregator):
                    break

                record = IntervalRecord.now(aggregator.interval_mean(), clock=self.clock)
                sink.append(record)
                aggregator.reset()
                self.intervals_written += 1
                logger.info(f"Interval {interval_index + 1}/{settings.number_of_intervals}: "
                            f"mean value [PSI] {record.value:.6g} at {record.timestamp}")

        if self.stop_requested:
            logger.info(f"Acquisition stopped on request after {self.intervals_written} interval(s)")
        else:
            logger.info(f"Acquisition complete: {self.intervals_written} interval(s) written")
        return self.intervals_written

    def _collect_window(self, session, buffer: SampleBuffer, aggregator: WindowAggregator) -> bool:
        """
        Fill the aggregator with one interval's worth of converted buffer means.

        Returns:
            False if a stop was requested before the window filled
        """
        timeout = self.settings.read_timeout_seconds
        for _ in range(aggregator.number_of_buffers):
            if self.stop_requested:
                return False
            _, samples_read = buffer.fill_from(session, timeout)
            window_mean = self.converter.convert(buffer.mean())
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"mean value [PSI] so far: {window_mean:.6g} with {samples_read} samples")
            aggregator.push(window_mean)
        return True
