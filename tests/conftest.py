"""Pytest 配置"""

import pytest

from termlatex.render.base import LatexRenderer
from termlatex.render.types import RenderResult
from termlatex.telemetry import metrics


class FakeRenderer(LatexRenderer):
    """确定性的渲染委托

    - 宽度 = 字符数 * char_px（块级再乘 2），高度 = font_size / 0.7
    - 包含 "\\bad"、花括号不配对或为空时失败
    - 记录所有调用
    """

    def __init__(self, char_px: float = 10.0, block_height_px: float = 48.0):
        self.char_px = char_px
        self.block_height_px = block_height_px
        self.calls: list[tuple[str, bool, float]] = []
        self.raise_on: str | None = None

    def render(self, expression: str, display: bool, font_size: float) -> RenderResult:
        self.calls.append((expression, display, font_size))
        if self.raise_on is not None and self.raise_on in expression:
            raise RuntimeError("delegate exploded")
        if not expression.strip():
            return RenderResult.failure("Empty expression")
        if "\\bad" in expression or expression.count("{") != expression.count("}"):
            return RenderResult.failure(f"Cannot parse {expression}")

        width = len(expression) * self.char_px * (2 if display else 1)
        height = self.block_height_px if display else font_size / 0.7
        return RenderResult(
            markup=f"<svg data-display='{int(display)}'>{expression}</svg>",
            pixel_width=width,
            pixel_height=height,
        )

    def calls_for(self, expression: str) -> int:
        return sum(1 for call in self.calls if call[0] == expression)


@pytest.fixture
def anyio_backend():
    """指定 anyio 只使用 asyncio backend"""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def fake_renderer():
    """确定性渲染委托"""
    return FakeRenderer()
