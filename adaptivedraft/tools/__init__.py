from .state import Phase, ToolState
from .base import (
    ToolSpec, PointerEvent, KeyEvent, ToolContext,
    PreviewSurface, RecordingSurface, ToolProtocol,
)
from .line import LineTool
from .arc import ArcTool
from .circle import CircleTool
from .rectangle import RectangleTool
from .polyline import PolylineTool
from .dimension import DimensionTool
from .fillet import FilletTool, FilletStep
from .measure import MeasureKind, Measurement, MeasurementProbe
from .manager import DEFAULT_TOOLS, DraftingTool, ToolManager

__all__ = [
    'Phase','ToolState',
    'ToolSpec','PointerEvent','KeyEvent','ToolContext',
    'PreviewSurface','RecordingSurface','ToolProtocol',
    'LineTool','ArcTool','CircleTool','RectangleTool','PolylineTool','DimensionTool','FilletTool','FilletStep',
    'MeasureKind','Measurement','MeasurementProbe',
    'DEFAULT_TOOLS','DraftingTool','ToolManager',
]
