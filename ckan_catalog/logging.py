"""Logging setup for the CKAN client and the tool server.

The client logs every request URL at debug level under
``ckan_catalog.transport`` and each update merge decision at info level under
``ckan_catalog.reconcile``. The tool server writes one audit line per tool
call under the ``server`` logger.
"""

from __future__ import annotations

import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Send every logger to stdout with a timestamped ``LEVEL [name]`` prefix."""
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s", datefmt="%Y-%m-%dT%H:%M:%SZ"
    )
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers[:] = [handler]
