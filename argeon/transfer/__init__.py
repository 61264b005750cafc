"""
Transfer Layer.

This package is responsible for moving bytes from the backend to the disk and
checking that what arrived is usable.
"""

from .downloader import Downloader, close_connection_pool
from .integrity import FileIntegrityChecker

__all__ = ["Downloader", "FileIntegrityChecker", "close_connection_pool"]
