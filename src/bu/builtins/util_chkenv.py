# Description: Utilities for checking environment variables (PATH, LD_LIBRARY_PATH)
# -----------------------------------------------------------------------------
import logging
import os

logger = logging.getLogger("bu.util.chkenv")


def _check_pathlist(var_name, pattern=None):
    entries = os.environ.get(var_name, "").split(os.pathsep)
    if pattern:
        logger.info(f'Searching for "{pattern}" in {var_name}:')
        for index, entry in enumerate(entries, 1):
            marker = "*" if pattern in entry else " "
            print(f"{marker}{index:2d} : {entry}")
        return 0

    logger.info(f"All {var_name} entries:")
    for index, entry in enumerate(entries, 1):
        print(f"{index:2d} : {entry}")

    positions = {}
    for index, entry in enumerate(entries, 1):
        positions.setdefault(entry, []).append(index)
    duplicates = {entry: idx for entry, idx in positions.items() if len(idx) > 1}
    if not duplicates:
        logger.info(f"No duplicates found in {var_name}")
        return 0

    logger.error("Found duplicates:")
    for entry, idx in duplicates.items():
        print(f"  {entry}: [{', '.join(str(i) for i in idx)}]")
    return 1


def check_path(*args):  # Display PATH entries and check for duplicates
    return _check_pathlist("PATH", args[0] if args else None)


def check_ld_library_path(*args):  # Display LD_LIBRARY_PATH entries and check for duplicates
    return _check_pathlist("LD_LIBRARY_PATH", args[0] if args else None)


def checkenvvar(*args):  # Check if an environment variable is set and non-empty
    if not args:
        logger.error("Usage: checkenvvar VAR_NAME")
        return 1
    return 0 if os.environ.get(args[0]) else 1
