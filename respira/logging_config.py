"""Central logging configuration helper."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once.

    *level* wins over ``RESPIRA_LOG_LEVEL``; unknown names fall back to
    INFO.
    """
    lvl = (level or os.environ.get("RESPIRA_LOG_LEVEL", "INFO")).upper()
    level_no = logging.getLevelName(lvl)
    if not isinstance(level_no, int):
        level_no = logging.INFO
    logging.basicConfig(level=level_no, format=LOG_FORMAT)
