"""optscope, scoped option access for editor windows and buffers."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .api import handle_request
from .editor import Buffer, Editor, Window
from .options import (
    get_all_options_info,
    get_option_info,
    get_option_value,
    set_option_value,
)
from .registry import Registry

__all__ = (
    "Buffer",
    "Editor",
    "Registry",
    "Window",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
    "get_all_options_info",
    "get_option_info",
    "get_option_value",
    "handle_request",
    "set_option_value",
)
