from .debug import DebugCommands
from .server import ServerCommands

__all__ = [
    "DebugCommands",
    "ServerCommands",
]
