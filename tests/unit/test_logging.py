import logging
import sys

from ckan_catalog.logging import configure_logging


def test_configure_logging_replaces_root_handlers():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        configure_logging(logging.DEBUG)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stdout
    finally:
        root.handlers[:], level = saved
        root.setLevel(level)
