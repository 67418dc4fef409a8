"""Overlay 模块

将可见占位 token 同步为定位渲染元素：
- OverlaySynchronizer: mark-and-sweep 同步
- OverlaySurface / RecordingSurface: 定位渲染目标
- place_block / place_inline: 布局规则
"""

from .layout import content_pixel_width, place_block, place_inline
from .surface import OverlayElement, OverlaySurface, RecordingSurface
from .synchronizer import OverlaySynchronizer
from .types import OverlayPlacement, OverlayRecord, Rect, ThemeColors

__all__ = [
    "OverlaySynchronizer",
    # Surface
    "OverlaySurface",
    "RecordingSurface",
    "OverlayElement",
    # Layout
    "place_block",
    "place_inline",
    "content_pixel_width",
    # Types
    "Rect",
    "ThemeColors",
    "OverlayPlacement",
    "OverlayRecord",
]
