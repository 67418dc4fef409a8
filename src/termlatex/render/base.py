"""渲染委托抽象接口

渲染委托是纯函数语义：(expression, display) → markup | 失败原因。
测量结果随 RenderResult 一起返回。
"""

from abc import ABC, abstractmethod

from termlatex.telemetry import get_logger, shorten_expr

from .types import RenderResult

logger = get_logger(__name__)

# 渲染失败时显示的惰性标记
ERROR_MARKUP = '<span class="latex-error">[LaTeX Error]</span>'


class LatexRenderer(ABC):
    """渲染委托基类

    使用示例:
        renderer = MathtextRenderer()
        result = renderer.render(r"\\frac{1}{2}", display=False, font_size=11.2)
        if result.ok:
            print(result.markup, result.pixel_width)
    """

    @abstractmethod
    def render(self, expression: str, display: bool, font_size: float) -> RenderResult:
        """渲染并测量表达式

        Args:
            expression: 规范化后的表达式
            display: 是否块级
            font_size: 字号（像素）

        Returns:
            RenderResult，失败时 error 非空
        """
        pass


def safe_render(
    renderer: LatexRenderer,
    expression: str,
    display: bool,
    font_size: float,
) -> RenderResult:
    """调用渲染委托，异常转换为失败结果"""
    try:
        return renderer.render(expression, display, font_size)
    except Exception as e:
        logger.debug(f"[Render] Delegate raised for {shorten_expr(expression)!r}: {e}")
        return RenderResult.failure(str(e) or type(e).__name__)
