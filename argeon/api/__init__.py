"""
API Layer.

This package handles all communication with the instance backend and the
mod-loader metadata service.
"""

from .client import ArgeonAPIClient

__all__ = ["ArgeonAPIClient"]
