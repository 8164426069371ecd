# --------------------------------------------------
# log_settings.py
# --------------------------------------------------
# Fixed names shared by the log formatter and the
# logging call-site helpers.
#
#   ✔ LOG_PROPERTY_NAMES: ordered output fields
#   ✔ Level / Time metadata keys
#   ✔ SOURCE_CONTEXT: tag carried by our own log events
#   ✔ APP_LOGGER_NAME: the application logger
#   ✔ Level names used on the wire and in configuration
#
# The order of LOG_PROPERTY_NAMES is the order of the
# keys in every formatted record. Reordering it changes
# the output of every sink.
# --------------------------------------------------

import logging


LOG_PROPERTY_NAMES = (
    "TraceId",
    "SourcePath",
    "SourceLine",
    "HttpUrl",
    "HttpMethod",
    "StatusCode",
    "User",
    "Message",
    "RequestBody",
    "SourceContext",
)

LOG_TIME_KEY = "Time"
LOG_LEVEL_KEY = "Level"
SOURCE_CONTEXT = "DemoAPI"

# Name of the application logger. It must not contain SOURCE_CONTEXT:
# plain calls on it (logger.info, logger.exception) are folded into
# Message like any other untagged record.
APP_LOGGER_NAME = "apilog"


# --------------------------------------------------
# Severity levels
# --------------------------------------------------

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Disables a message entirely; never emitted
NONE = logging.CRITICAL + 10

LEVEL_NAMES = (
    (logging.CRITICAL, "Fatal"),
    (logging.ERROR, "Error"),
    (logging.WARNING, "Warning"),
    (logging.INFO, "Information"),
    (logging.DEBUG, "Debug"),
    (TRACE, "Verbose"),
)

_LEVELS_BY_NAME = {name: levelno for levelno, name in LEVEL_NAMES}


def level_name(levelno: int) -> str:
    """Wire name of the highest known level at or below levelno."""
    for value, name in LEVEL_NAMES:
        if levelno >= value:
            return name
    return "Verbose"


def to_log_level(name: str) -> int:
    """
    Convert a configured level name into a logging level.

    Unknown names are a configuration error: a wrong level
    would silently drop diagnostics, so this raises instead
    of falling back to a default.
    """
    try:
        return _LEVELS_BY_NAME[name]
    except KeyError:
        raise ValueError(f"Not exist level: {name}") from None
