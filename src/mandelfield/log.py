# -*- coding: utf-8 -*-
import os
import datetime
import logging
import sys
import enum

import mandelfield.settings as mfsettings
import mandelfield.utils as mfutils


verbosity_list = (
    "warn @ console",
    "warn + info @ console",
    "debug @ console + log",
    "debug2 @ console + log",
)

verbosity_enum = enum.Enum(
    "verbosity_enum",
    verbosity_list,
    module=__name__
)

# logger level, by verbosity index
LOGGER_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG, logging.DEBUG)

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s\n  %(message)s"
FILE_FORMAT = (
    "%(asctime)s - %(levelname)s - %(name)s: %(funcName)s\n  %(message)s"
)


def verbosity_index(verbosity):
    """ Return the index in `verbosity_list` of verbosity (enum member, name
    or int as in `mandelfield.settings.verbosity`) """
    if isinstance(verbosity, verbosity_enum):
        return verbosity.value - 1
    if isinstance(verbosity, str) and verbosity in verbosity_list:
        return verbosity_list.index(verbosity)
    if (
        isinstance(verbosity, int) and not isinstance(verbosity, bool)
        and verbosity in range(len(verbosity_list))
    ):
        return verbosity
    raise ValueError(f"Unknown verbosity: {verbosity!r}")


def console_handler(index):
    if index == 0:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.WARNING)
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def file_handler(index, log_directory):
    """ A handler to a new timestamped file in log_directory, and its path """
    stamp = datetime.datetime.now().strftime("%Y-%m-%d_%Hh%M_%S")
    mfutils.mkdir_p(log_directory)
    path = os.path.join(log_directory, f"{stamp}_mandelfield.log")

    handler = logging.FileHandler(path)
    handler.setLevel(logging.NOTSET if index == 3 else logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler, path


def set_log_handlers(verbosity=None):
    """
    Configures the "mandelfield" logger, replacing any handler previously
    installed.

    Parameters
    ----------
    verbosity: verbosity_enum member, str or int
        One of `verbosity_list` (or its index). Defaults to
        `mandelfield.settings.verbosity`.

        - "warn @ console": warnings to stderr
        - "warn + info @ console": info and above to stdout
        - "debug @ console + log": same console output, debug and above to a
          new file in `mandelfield.settings.log_directory`
        - "debug2 @ console + log": same, all records to the file

    Returns
    -------
    log_path: str or None
        The path of the log file, if one was started
    """
    if verbosity is None:
        verbosity = mfsettings.verbosity
    index = verbosity_index(verbosity)

    logger = logging.getLogger("mandelfield")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(LOGGER_LEVELS[index])
    logger.addHandler(console_handler(index))

    log_path = None
    if index >= 2:
        if mfsettings.log_directory is None:
            logger.warning(
                "No file logger: mandelfield.settings.log_directory not set"
            )
        else:
            handler, log_path = file_handler(index, mfsettings.log_directory)
            logger.addHandler(handler)
            logger.info(f"Started file logger: {log_path}")

    logger.debug(f"Logger verbosity: {verbosity_list[index]}")
    return log_path
