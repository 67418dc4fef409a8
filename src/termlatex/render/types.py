"""Render 数据类型

Store、Processor、Overlay 之间共享的数据类型。
"""

from dataclasses import dataclass

from termlatex import config


@dataclass(frozen=True)
class CellMetrics:
    """单个 grid cell 的像素尺寸"""

    width: float
    height: float

    @property
    def font_size(self) -> float:
        """与 cell 高度匹配的公式字号"""
        return self.height * config.FONT_SCALE

    @classmethod
    def default(cls) -> "CellMetrics":
        return cls(config.DEFAULT_CELL_WIDTH, config.DEFAULT_CELL_HEIGHT)

    @classmethod
    def or_default(cls, metrics: "CellMetrics | None") -> "CellMetrics":
        """宿主未提供或提供了零尺寸时退回默认值"""
        if metrics is None or metrics.width <= 0 or metrics.height <= 0:
            return cls.default()
        return metrics


@dataclass(frozen=True)
class RenderResult:
    """渲染委托的返回值

    markup 与 error 互斥；pixel_* 为按请求字号测得的内容尺寸。
    """

    markup: str | None = None
    error: str | None = None
    pixel_width: float = 0.0
    pixel_height: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None and self.markup is not None

    @classmethod
    def failure(cls, reason: str) -> "RenderResult":
        return cls(error=reason or "Unknown error")


@dataclass
class LatexEntry:
    """Store 中的表达式条目

    创建后只允许一次惰性填充渲染结果（markup 或 error）。

    Attributes:
        source: 规范化后的表达式
        display: 块级公式为 True
        pixel_width, pixel_height: 测得的内容像素尺寸
        width_cells, height_cells: 换算后的 cell 尺寸
        metrics: 测量时的 cell 尺寸（用于发现字号/缩放变化）
        markup: 渲染结果
        error: 渲染失败原因
    """

    source: str
    display: bool
    pixel_width: float
    pixel_height: float
    width_cells: int
    height_cells: int
    metrics: CellMetrics
    markup: str | None = None
    error: str | None = None

    @property
    def has_result(self) -> bool:
        return self.markup is not None or self.error is not None

    def resolve(self, result: RenderResult) -> bool:
        """惰性填充渲染结果，已有结果时不覆盖

        Returns:
            是否发生了填充
        """
        if self.has_result:
            return False
        if result.ok:
            self.markup = result.markup
        else:
            self.error = result.error or "Unknown error"
        return True

    def is_stale(self, metrics: CellMetrics) -> bool:
        """测量时的 cell 尺寸是否与当前不同"""
        return self.metrics != metrics

    def matches(self, source: str, display: bool) -> bool:
        return self.source == source and self.display == display
