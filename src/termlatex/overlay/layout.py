"""Overlay 布局规则

纯函数：(行, 列, 条目, cell 尺寸, 视口列数) → OverlayPlacement。

- 块级：占满整行宽度，顶部对齐行首，高度 = cell 高度 × 测得行数，内容居中
- 行内：左边缘对齐列；宽度 = max(内容宽度, 最小宽度)，被最小宽度钳制时居中，
  否则左对齐；宽度不超过 grid 右边缘
"""

from termlatex.render.types import CellMetrics, LatexEntry

from .types import OverlayPlacement, Rect, ThemeColors


def content_pixel_width(entry: LatexEntry, cell: CellMetrics) -> float:
    """按当前字号缩放后的内容宽度"""
    if entry.metrics.height <= 0 or entry.metrics == cell:
        return entry.pixel_width
    return entry.pixel_width * cell.height / entry.metrics.height


def place_block(
    row: int,
    entry: LatexEntry,
    cell: CellMetrics,
    cols: int,
    colors: ThemeColors,
) -> OverlayPlacement:
    """块级公式布局"""
    rect = Rect(
        x=0.0,
        y=row * cell.height,
        width=cols * cell.width,
        height=cell.height * max(1, entry.height_cells),
    )
    return OverlayPlacement(
        rect=rect,
        display=True,
        align="center",
        font_size=cell.font_size,
        line_height=None,
        min_width=0.0,
        max_width=None,
        colors=colors,
    )


def place_inline(
    row: int,
    col: int,
    entry: LatexEntry,
    cell: CellMetrics,
    cols: int,
    min_cells: int,
    colors: ThemeColors,
) -> OverlayPlacement:
    """行内公式布局"""
    min_width = min_cells * cell.width
    content_width = content_pixel_width(entry, cell)
    width = max(content_width, min_width)
    align = "center" if width == min_width else "left"

    max_width = max(0.0, (cols - col) * cell.width)
    width = min(width, max_width)

    rect = Rect(x=col * cell.width, y=row * cell.height, width=width, height=cell.height)
    return OverlayPlacement(
        rect=rect,
        display=False,
        align=align,
        font_size=cell.font_size,
        line_height=cell.height,
        min_width=min_width,
        max_width=max_width,
        colors=colors,
    )
