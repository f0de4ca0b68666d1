"""Root logger configuration for the CLI and servers."""

from __future__ import annotations

import logging
import sys
from typing import Union


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Attach a single stderr handler to the root logger.

    Third-party loggers stay at WARNING; ``poke_battle`` follows ``level``.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S")
        )
        root.addHandler(handler)
    root.setLevel(logging.WARNING)
    for name in ("__main__", "poke_battle"):
        logging.getLogger(name).setLevel(level)
