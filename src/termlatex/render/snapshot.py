"""Grid snapshot to SVG renderer using Rich library.

Paints each tracked overlay's expression source over the cells of its
placeholder token, so a snapshot shows what the user sees instead of the
raw sentinel/filler characters.
"""

import io
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from termlatex import config
from termlatex.adapters.base import GridHost
from termlatex.core.placeholder import TOKEN_PATTERN
from termlatex.telemetry import get_logger

from .store import ExpressionStore
from .types import CellMetrics

if TYPE_CHECKING:
    from termlatex.overlay.surface import OverlayElement

logger = get_logger(__name__)

# XML 1.0 允许的字符范围
# #x9 | #xA | #xD | [#x20-#xD7FF] | [#xE000-#xFFFD] | [#x10000-#x10FFFF]
_INVALID_XML_CHARS_RE = re.compile(
    r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ud800-\udfff\ufffe\uffff]"
)

_TOKEN_SPAN_RE = re.compile(TOKEN_PATTERN.pattern + re.escape(config.PLACEHOLDER_FILLER) + "*")

ERROR_LABEL = "[LaTeX Error]"


def _sanitize_for_xml(text: str) -> str:
    """移除 XML 中不允许的字符。"""
    return _INVALID_XML_CHARS_RE.sub("", text)


def _fit(label: str, width: int) -> str:
    """将标签裁剪/填充到固定宽度。"""
    if width <= 0:
        return ""
    if len(label) > width:
        return label[: width - 1] + "…"
    return label.ljust(width)


class SnapshotRenderer:
    """虚拟终端快照渲染器，将可见行和 overlay 转换为 SVG。"""

    def __init__(
        self,
        formula_style: str = "bold cyan",
        error_style: str = "bold red",
        title: str = "",
    ):
        """
        初始化渲染器。

        Args:
            formula_style: 公式文本的 Rich 样式
            error_style: 渲染失败标记的 Rich 样式
            title: SVG 窗口标题
        """
        self.formula_style = formula_style
        self.error_style = error_style
        self.title = title

    def render(
        self,
        host: GridHost,
        store: ExpressionStore,
        elements: Iterable["OverlayElement"],
    ) -> str:
        """
        渲染宿主当前视口为 SVG。

        Args:
            host: 网格宿主
            store: 表达式缓存（用于取得表达式源码）
            elements: 存活的 overlay 元素

        Returns:
            SVG 字符串
        """
        rich_text = self.build_text(host, store, elements)
        return self._render_to_svg(rich_text, width=host.cols, height=host.rows)

    def build_text(
        self,
        host: GridHost,
        store: ExpressionStore,
        elements: Iterable["OverlayElement"],
    ) -> Text:
        """构建带 overlay 的 Rich Text。"""
        cell = CellMetrics.or_default(host.cell_metrics())
        labels = self._collect_labels(store, elements, cell)

        rich_text = Text()
        for row in range(host.rows):
            line = host.get_line(host.viewport_y + row) or ""
            rich_text.append_text(self._paint_row(line, row, host.cols, labels))
            rich_text.append("\n")
        return rich_text

    def _collect_labels(
        self,
        store: ExpressionStore,
        elements: Iterable["OverlayElement"],
        cell: CellMetrics,
    ) -> dict[tuple[int, int], tuple[str, str, bool]]:
        """(row, col) → (label, style, display)"""
        labels: dict[tuple[int, int], tuple[str, str, bool]] = {}
        for element in elements:
            if element.removed or element.placement is None:
                continue
            entry = store.get(element.hash_code)
            if entry is None:
                logger.debug(f"[Snapshot] No entry for overlay {element.hash_code}")
                continue

            rect = element.placement.rect
            row = round(rect.y / cell.height)
            if element.display:
                key = (row, -1)
            else:
                key = (row, round(rect.x / cell.width))

            if entry.error:
                labels[key] = (ERROR_LABEL, self.error_style, element.display)
            else:
                labels[key] = (entry.source, self.formula_style, element.display)
        return labels

    def _paint_row(
        self,
        line: str,
        row: int,
        cols: int,
        labels: dict[tuple[int, int], tuple[str, str, bool]],
    ) -> Text:
        """将一行文本中的 token 替换为公式标签。"""
        block = labels.get((row, -1))
        if block is not None and config.PLACEHOLDER_SENTINEL in line:
            label, style, _ = block
            return Text(_sanitize_for_xml(label).center(cols)[:cols], style=style)

        text = Text()
        pos = 0
        for match in _TOKEN_SPAN_RE.finditer(line):
            text.append(_sanitize_for_xml(line[pos:match.start()]))
            width = match.end() - match.start()
            inline = labels.get((row, match.start()))
            if inline is None:
                # 未解析的 token 显示为空白
                text.append(" " * width)
            else:
                label, style, _ = inline
                text.append(_fit(_sanitize_for_xml(label), width), style=style)
            pos = match.end()
        text.append(_sanitize_for_xml(line[pos:]))
        return text

    def _render_to_svg(self, rich_text: Text, width: int = 80, height: int | None = None) -> str:
        """将 Rich Text 渲染为 SVG。

        Args:
            rich_text: Rich Text 对象
            width: 终端宽度（字符数）
            height: 终端高度（行数），用于确保 SVG 比例正确
        """
        console = Console(
            record=True,
            width=width,
            height=height,
            file=io.StringIO(),
            force_terminal=True,
            color_system="truecolor",
        )
        console.print(rich_text, end="")

        return console.export_svg(title=self.title)
