"""
Make the MCC Universal Library DLL findable before mcculw is imported.
Only relevant on Windows, where InstaCal installs cbw64.dll.
"""
import os
import sys

from utils.logging_setup import get_logger

logger = get_logger(__name__)

# Common InstaCal installation paths
MCC_DLL_DIRS = [
    r"C:\Program Files (x86)\Measurement Computing\DAQ",
    r"C:\Program Files\Measurement Computing\DAQ",
]
MCC_DLL_NAME = "cbw64.dll"


def setup_mcc_path(search_dirs=MCC_DLL_DIRS) -> bool:
    """
    Add the MCC DAQ DLL directory to PATH.

    Returns:
        True if a directory containing the DLL was found (or nothing is needed)
    """
    if sys.platform != "win32":
        return True

    for path in search_dirs:
        if os.path.exists(os.path.join(path, MCC_DLL_NAME)):
            if path not in os.environ["PATH"]:
                os.environ["PATH"] = path + os.pathsep + os.environ["PATH"]
                logger.info(f"Added to PATH: {path}")
            if hasattr(os, "add_dll_directory"):
                os.add_dll_directory(path)
            return True

    logger.warning(f"Could not find MCC DAQ installation directory (expected one of: {', '.join(search_dirs)})")
    return False


if __name__ == '__main__':
    setup_mcc_path()
