import logging
import sys
from typing import Optional

from mwa_survey.core import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: str = config.LOG_LEVEL) -> logging.Handler:
    """Install one stream handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    global _handler

    root = logging.getLogger()
    root.setLevel(level)

    if _handler is None or _handler not in root.handlers:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_handler)

    return _handler
