"""Byte-exact resource server.

Serves files from a read-only store over HTTP without ever decoding or
re-encoding their content.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("byte-exact-resource-server")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
