from __future__ import annotations

import logging
import sys
from typing import Optional

def get_logger(name: str = "site_builder", verbose: Optional[bool] = None) -> logging.Logger:
    """
    Package logger with a single stdout handler. `verbose` switches between
    DEBUG and INFO; None leaves the current level alone.
    """
    log = logging.getLogger(name)
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        log.addHandler(h)
        log.setLevel(logging.INFO)
    if verbose is not None:
        log.setLevel(logging.DEBUG if verbose else logging.INFO)
    return log
