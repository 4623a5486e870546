"""
Device Manager for DAQ devices.
Handles backend selection, construction and discovery of DAQ hardware.
"""
from typing import List, Tuple

from daq_errors import ConfigurationError
from utils.logging_setup import get_logger

logger = get_logger(__name__)


def _load_backend(backend: str):
    """
    Import the hardware module for a backend.
    Driver libraries are only imported when that backend is actually used.
    """
    try:
        if backend == "ni":
            from hardware import ni_device
            return ni_device
        if backend == "mcc":
            from utils.setup_mcc_path import setup_mcc_path
            setup_mcc_path()  # Add MCC DLL path before importing mcculw
            from hardware import mcc_device
            return mcc_device
    except (ImportError, OSError) as e:
        logger.error(f"Failed to load '{backend}' DAQ driver: {e}")
        raise ConfigurationError(f"DAQ driver for backend '{backend}' is not available",
                                 diagnostic=str(e)) from e
    raise ConfigurationError(f"Unknown DAQ backend '{backend}'")


def create_device(settings):
    """
    Construct the DAQ device object for the configured backend.

    Args:
        settings: LoggerSettings

    Returns:
        Device object (NIDevice or MCCDevice instance), not yet configured
    """
    module = _load_backend(settings.backend)
    if settings.backend == "mcc":
        device = module.MCCDevice(board_num=settings.mcc_board_num)
    else:
        device = module.NIDevice()
    logger.info(f"Using {settings.backend.upper()} backend: {device!r}")
    return device


def discover_devices(backend: str) -> List[Tuple]:
    """
    Discover available DAQ devices for a backend.

    Returns:
        List of tuples describing each device (name or board number first)
    """
    module = _load_backend(backend)
    discovered = module.list_devices()
    for device in discovered:
        logger.info(f"Discovered: {' / '.join(str(field) for field in device)}")
    logger.info(f"Discovery complete. Found {len(discovered)} device(s)")
    return discovered
