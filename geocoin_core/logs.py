from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(lineno)d | %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configures the root logger for the app and the CLI.
    Level comes from the argument, then GEOCOIN_LOG_LEVEL, then INFO.
    """
    name = (level or os.getenv("GEOCOIN_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # keep werkzeug request lines out of game logs unless debugging
    logging.getLogger("werkzeug").setLevel(logging.WARNING if name != "DEBUG" else logging.DEBUG)
