# jobboard/core/logging.py
import logging
from typing import Optional

from jobboard.core.config import settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    level = (level or settings.LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_FORMAT)
    root.setLevel(level)
    # motor/pymongo are chatty at DEBUG
    logging.getLogger("pymongo").setLevel(max(logging.getLevelName(level), logging.INFO))
