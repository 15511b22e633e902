"""Typed client for CKAN open data catalogs."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("ckan-catalog-client")
except PackageNotFoundError:
    __version__ = "0.0.0"
