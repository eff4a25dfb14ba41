import logging
import sys


logger = logging.getLogger("flutterdeploy")

_handler = logging.StreamHandler(sys.stdout)
_handler.setFormatter(logging.Formatter("%(message)s"))


def configure_logging(debug: bool):
    """
    Send the package log to the current stdout at INFO, or DEBUG when *debug* is set.

    Safe to call once per command: the handler is installed once and
    re-pointed at whatever ``sys.stdout`` is at call time.
    """
    # The previous stdout may already be closed, so it is not flushed
    _handler.stream = sys.stdout
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if _handler not in logger.handlers:
        logger.addHandler(_handler)
