"""2D drafting core: geometry kernel, corner and offset constructors, drafting tools."""

__all__ = [
    "Units",
    "to_internal",
    "from_internal",
    "DraftSettings",
    "MemoryEntityStore",
    "EntityStore",
    "setup_logging",
    "OpResult",
    "ErrorKind",
    "DraftingError",
    "GeometryDegenerate",
    "ToolManager",
]

from .units import Units, to_internal, from_internal
from .errors import OpResult, ErrorKind, DraftingError, GeometryDegenerate
from .settings import DraftSettings
from .store import EntityStore, MemoryEntityStore
from .logging_config import setup_logging
from .tools.manager import ToolManager

__version__ = "0.1.0"
