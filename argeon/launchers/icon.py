"""
Access to the application icon bundled as package data.
"""

import base64
from functools import lru_cache
from importlib import resources


@lru_cache(maxsize=1)
def load_icon() -> bytes:
    """Raw PNG bytes of the bundled icon."""
    return (resources.files("argeon") / "assets" / "icon.png").read_bytes()


def icon_data_url() -> str:
    """The icon as a ``data:`` URL, the form the vanilla launcher embeds in profiles."""
    return "data:image/png;base64," + base64.b64encode(load_icon()).decode("ascii")
