"""
Launcher Layer.

One adapter per supported launcher, each writing that launcher's persisted
configuration for an instance, plus the process launcher for PrismLauncher.
"""

from .launch import PrismLauncherStarter
from .prism import ThirdPartyLauncherAdapter
from .vanilla import GenericLauncherAdapter

__all__ = [
    "GenericLauncherAdapter",
    "PrismLauncherStarter",
    "ThirdPartyLauncherAdapter",
]
