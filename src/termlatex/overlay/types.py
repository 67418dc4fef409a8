"""Overlay 数据类型"""

from dataclasses import dataclass
from typing import Any

from termlatex import config


@dataclass(frozen=True)
class Rect:
    """像素矩形（相对 grid 左上角）"""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class ThemeColors:
    """宿主主题颜色"""

    background: str = config.DEFAULT_BACKGROUND
    foreground: str = config.DEFAULT_FOREGROUND


@dataclass(frozen=True)
class OverlayPlacement:
    """一次布局计算的结果

    Attributes:
        rect: 元素矩形
        display: 是否块级
        align: "center" 或 "left"
        font_size: 字号（像素）
        line_height: 行高（像素），块级为 None
        min_width: 最小宽度（像素）
        max_width: 最大宽度（像素），块级为 None
        colors: 主题颜色
    """

    rect: Rect
    display: bool
    align: str
    font_size: float
    line_height: float | None
    min_width: float
    max_width: float | None
    colors: ThemeColors


@dataclass
class OverlayRecord:
    """Synchronizer 跟踪的单个 overlay

    Attributes:
        hash_code: 表达式 hash
        element: render target 创建的元素句柄
        row: 最后一次扫描到的可见行
        col: 最后一次扫描到的列
        placement: 最后一次布局
        fresh: 本轮扫描是否再次出现
    """

    hash_code: str
    element: Any
    row: int = 0
    col: int = 0
    placement: OverlayPlacement | None = None
    fresh: bool = True
