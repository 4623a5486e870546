"""
Pressure transducer logger.
Reads a 1-5 V transducer on one DAQ channel and logs one averaged PSI value per interval.
"""
import argparse
import logging
import sys
from pathlib import Path

import config
from acquisition_controller import AcquisitionController
from config import ChannelSpec, LoggerSettings, ShortReadPolicy
from daq_errors import DAQLoggerError
from device_manager import discover_devices
from utils.logging_setup import get_logger, restore_console_logging, setup_logging, suppress_console_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument("--backend", choices=config.DAQ_BACKENDS, default=None,
                    help=f"DAQ driver (default: {config.DAQ_BACKEND})")
    ap.add_argument("--device", default=config.DEFAULT_DEVICE_NAME, help="NI device name, e.g. Dev1")
    ap.add_argument("--board", type=int, default=None, help="MCC board number")
    ap.add_argument("--channel", type=int, default=config.DEFAULT_CHANNEL, help="Analog input channel")
    ap.add_argument("--terminal", choices=config.TERMINAL_CONFIGS, default=config.DEFAULT_TERMINAL_CONFIG,
                    help="Input terminal configuration")
    ap.add_argument("--min-voltage", type=float, default=config.DEFAULT_MIN_VOLTAGE)
    ap.add_argument("--max-voltage", type=float, default=config.DEFAULT_MAX_VOLTAGE)
    ap.add_argument("--rate", type=float, default=None, help="Sample rate in Hz")
    ap.add_argument("--buffer", type=int, default=None, help="Samples per read")
    ap.add_argument("--buffers", type=int, default=None, help="Reads averaged into one interval")
    ap.add_argument("--intervals", type=int, default=None, help="Intervals to log before exiting")
    ap.add_argument("--timeout", type=float, default=None, help="Read timeout in seconds")
    ap.add_argument("--retries", type=int, default=None, help="Extra attempts for a failed or short read")
    ap.add_argument("--partial", action="store_true",
                    help="Average short reads with a warning instead of failing")
    ap.add_argument("--scale", type=float, default=None, help="Conversion scale (PSI per volt)")
    ap.add_argument("--offset", type=float, default=None, help="Conversion offset in volts")
    ap.add_argument("--out", type=Path, default=None, help="Interval log CSV path")
    ap.add_argument("--no-log-file", action="store_true", help="Log to the console only")
    ap.add_argument("--quiet", action="store_true", help="Only warnings and errors on the console")
    ap.add_argument("--verbose", action="store_true", help="Log every buffer mean")
    ap.add_argument("--list-devices", action="store_true", help="List attached DAQ devices and exit")
    return ap


def settings_from_args(args) -> LoggerSettings:
    channel = ChannelSpec(
        device=args.device,
        channel=args.channel,
        terminal_config=args.terminal,
        min_val=args.min_voltage,
        max_val=args.max_voltage,
    )
    return LoggerSettings.from_config(
        backend=args.backend,
        mcc_board_num=args.board,
        channel=channel,
        sample_rate_hz=args.rate,
        buffer_capacity=args.buffer,
        number_of_buffers=args.buffers,
        number_of_intervals=args.intervals,
        read_timeout_seconds=args.timeout,
        read_retries=args.retries,
        short_read_policy=ShortReadPolicy.AVERAGE_PARTIAL if args.partial else None,
        conversion_scale=args.scale,
        conversion_offset=args.offset,
        output_path=args.out,
    )


def main(argv=None):
    """Main entry point for a logging run. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    log_level = logging.DEBUG if args.verbose else config.LOG_LEVEL
    setup_logging(log_level=log_level, log_to_file=config.LOG_TO_FILE and not args.no_log_file,
                  log_folder=config.LOG_FOLDER)

    try:
        settings = settings_from_args(args)
        if args.list_devices:
            discover_devices(settings.backend)
            return EXIT_OK

        controller = AcquisitionController(settings)
        if args.quiet:
            suppress_console_logging()
        try:
            controller.run()
        finally:
            restore_console_logging(log_level)
    except KeyboardInterrupt:
        logger.info("Acquisition interrupted by user")
        return EXIT_INTERRUPTED
    except DAQLoggerError as e:
        logger.error(f"Acquisition failed: {e}")
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
