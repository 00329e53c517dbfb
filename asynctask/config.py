import os
import logging


logger = logging.getLogger(__name__)


def getflag(name, default=False):
    default = "true" if default else "false"
    return os.environ.get(name, default).lower() in ("true", "1")


def getint(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}, expected an integer")
        return default


# Sleep between two pump() calls in the host loops, in milliseconds.
POLL_INTERVAL_MS = getint("ASYNCTASK_POLL_INTERVAL_MS", 100)

# Enables debug logging in the console demo.
TRACE = getflag("ASYNCTASK_TRACE")
