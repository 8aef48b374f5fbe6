import logging
import time

"""
Console Level Options
0 = Only print errors and critical messages to console.
1 = Print all info, errors, and critical messages to console.
2 = Print all debug, info, errors, and critical messages to console.
"""

_CONSOLE_LEVELS = {0: logging.ERROR, 1: logging.INFO, 2: logging.DEBUG}


def initialize_logger(console_level=1):
    """Send photosaver's log records to the console with UTC timestamps.

    Calling this again once a handler is installed changes nothing.
    """
    if console_level not in _CONSOLE_LEVELS:
        raise ValueError("Console level must be an int between 0-2.")
    logger = logging.getLogger("photosaver")
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        console = logging.StreamHandler()
        console.setLevel(_CONSOLE_LEVELS[console_level])
        dtfmt = "%Y-%m-%dT%H:%M:%S"
        strfmt = "%(asctime)s.%(msecs)03dZ | %(levelname)-8s | %(name)s | %(message)s"
        console_fmt = logging.Formatter(strfmt, datefmt=dtfmt)
        console_fmt.converter = time.gmtime
        console.setFormatter(console_fmt)
        logger.addHandler(console)
    return logger
