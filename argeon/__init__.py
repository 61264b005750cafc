"""Argeon: installs Communivents game instances into a local Minecraft launcher."""

__version__ = "1.2.0"
