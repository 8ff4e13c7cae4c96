import logging
import os
from typing import Optional


_ROOT = "crossarb"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a ``crossarb.<name>`` logger with a single stream handler.

    The level comes from ``LOG_LEVEL`` (default INFO) and is re-read on each
    call, so changing the variable between runs takes effect.
    """
    level_str = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_str, logging.INFO)

    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(level)

    return root.getChild(name) if name else root
