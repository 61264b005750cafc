"""
Storage Layer.

This package handles all local persistence: the application's configuration
file and the async filesystem capability used while installing.
"""

from .config_manager import ConfigManager
from .filesystem import LocalFilesystem

__all__ = ["ConfigManager", "LocalFilesystem"]
