# config/logging_config.py
import logging
import sys
import warnings

from config.settings import settings
from scoring.errors import UnknownCategoryWarning

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = None) -> logging.Logger:
    """
    Install a single stdout handler on the root logger and route
    warnings.warn() through it (logger "py.warnings").
    Safe to call more than once (handlers are replaced, not stacked).
    """
    level = (level or settings.LOG_LEVEL).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    logging.captureWarnings(True)
    # every unknown category is logged, not just the first per call site
    warnings.simplefilter("always", UnknownCategoryWarning)
    return root
