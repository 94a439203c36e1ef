import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class ConsoleHandler(logging.StreamHandler):
    """Marker subclass so repeated setup calls replace rather than stack handlers."""


def setup_console_logging(level=logging.INFO, stream=None):
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        if isinstance(handler, ConsoleHandler):
            logger.removeHandler(handler)
    handler = ConsoleHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return handler
