from .client import LayoutDescriptionClient
from .server_app import LayoutDescriptionApp
from .server_manager import LayoutDescriptionServer
from .store import LayoutDescriptionStore

__all__ = [
    "LayoutDescriptionApp",
    "LayoutDescriptionClient",
    "LayoutDescriptionServer",
    "LayoutDescriptionStore",
]
