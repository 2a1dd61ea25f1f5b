"""Process-wide logging setup."""

from __future__ import annotations

import logging
import sys

from chatline.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(config: Settings) -> None:
    """Attach a stdout handler to the root logger unless one is already set up."""

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logging.basicConfig(level=level, handlers=[handler])
    logging.getLogger("chatline").setLevel(level)
