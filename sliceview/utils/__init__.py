"""
Utility functions for sliceview.
"""

import os
import sys
import math
import types
import logging
import inspect
import contextlib

from .color import Color  # noqa: F401
from . import enums  # noqa: F401

logger = logging.getLogger("sliceview")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("SLICEVIEW_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid sliceview log level: {level}")


_set_log_level()


@contextlib.contextmanager
def log_exception(kind):
    """Context manager to log any exceptions, but only log a one-liner
    for subsequent occurrences of the same error to avoid spamming by
    repeating errors in e.g. a render loop or event handler.
    """
    try:
        yield
    except Exception as err:
        # Store exc info for postmortem debugging
        exc_info = list(sys.exc_info())
        exc_info[2] = exc_info[2].tb_next  # skip *this* function
        sys.last_type, sys.last_value, sys.last_traceback = exc_info
        # Show traceback, or a one-line summary
        msg = str(err)
        msgh = hash(msg)
        if msgh not in _err_hashes:
            # Provide the exception, so the default logger prints a stacktrace.
            # IDE's can get the exception from the root logger for PM debugging.
            _err_hashes[msgh] = 1
            logger.error(kind, exc_info=err)
        else:
            # We've seen this message before, return a one-liner instead.
            _err_hashes[msgh] = count = _err_hashes[msgh] + 1
            msg = kind + ": " + msg.split("\n")[0].strip()
            msg = msg if len(msg) <= 70 else msg[:69] + "…"
            logger.error(msg + f" ({count})")


_err_hashes = {}


def assert_type(name, value, *classes):
    allow_none = False
    if classes[0] is None:
        if value is None:
            return
        allow_none = True
        classes = classes[1:]

    if not isinstance(value, classes):
        # Get traceback object to point of the frame of interest
        f = inspect.currentframe()
        f = f.f_back
        if name:
            # Step back to calling code
            f = f.f_back
            # If this is a constructor that has name as a (kw) argument, take another step back
            if f.f_code.co_name == "__init__" and name in f.f_code.co_varnames:
                f = f.f_back
        tb = types.TracebackType(None, f, f.f_lasti, f.f_lineno)

        # Build error message
        msg = "Expected"
        if name:
            msg += f" '{name}' to be"
        class_strings = [cls.__name__ for cls in classes]
        msg += f" an instance of {' | '.join(class_strings)}"
        if allow_none:
            msg += " or None"
        valuestr = value.__class__.__name__
        msg += f", but got {valuestr} object."

        # Raise message with alt traceback
        raise TypeError(msg).with_traceback(tb) from None


def round_half_up(value):
    """Round to the nearest integer, with halves going up (towards +inf)."""
    return math.floor(float(value) + 0.5)
