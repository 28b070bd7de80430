"""
Logging
Diagnostics for the page CLI as 'page: <message>' lines on stderr.
INFO by default; DEBUG with -v or PAGE_DEBUG=1.
"""

import logging
import os
import sys


class StderrHandler(logging.StreamHandler):
    """StreamHandler that always writes to the current sys.stderr."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def get_logger(name="page", verbose=False):
    """Logger for the page CLI: 'page: <message>' lines on stderr."""
    logger = logging.getLogger(name)
    debug = verbose or os.environ.get("PAGE_DEBUG") == "1"
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.handlers:
        handler = StderrHandler()
        handler.setFormatter(logging.Formatter("page: %(message)s"))
        logger.addHandler(handler)

    return logger
