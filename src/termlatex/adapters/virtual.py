"""VirtualTerminal - 内存虚拟终端

参考宿主实现，同时提供 GridHost 与 TextSink 能力：
- 行缓冲 + 按列数自动折行 + scrollback
- 处理 \\n / \\r / \\b / \\t，剥离 ANSI 控制序列
- 视口默认跟随底部；用户滚动后停止跟随，直到滚回底部
- write 后发出 render 通知，scroll_to / resize 分别发出 scroll / resize 通知
"""

import re

from termlatex.overlay.types import ThemeColors
from termlatex.render.types import CellMetrics
from termlatex.telemetry import get_logger

from .base import CompletionCallback, EventEmitter, GridHost, TextSink, WriteData

logger = get_logger(__name__)

# CSI / OSC / 其余两字节 ESC 序列
_ANSI_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)

TAB_WIDTH = 8


class VirtualTerminal(GridHost, TextSink):
    """内存虚拟终端

    使用示例:
        term = VirtualTerminal(cols=40, rows=10)
        term.write("hello\\r\\nworld")
        term.get_line(1)  # "world"
    """

    def __init__(
        self,
        cols: int = 80,
        rows: int = 24,
        cell_metrics: CellMetrics | None = None,
        theme: ThemeColors | None = None,
        scrollback: int = 1000,
    ):
        """初始化

        Args:
            cols: 列数
            rows: 视口行数
            cell_metrics: cell 像素尺寸，None 时使用默认值
            theme: 主题颜色，None 表示未设置
            scrollback: 视口之外保留的最大行数
        """
        if cols <= 0 or rows <= 0:
            raise ValueError(f"Invalid terminal size {cols}x{rows}")

        self._cols = cols
        self._rows = rows
        self._cell_metrics = cell_metrics or CellMetrics.default()
        self._theme = theme
        self._scrollback = scrollback

        self._lines: list[str] = [""]
        self._cursor_col = 0
        self._viewport_y = 0
        self._follow = True

        self._on_render = EventEmitter("render")
        self._on_scroll = EventEmitter("scroll")
        self._on_resize = EventEmitter("resize")

    # === GridHost ===

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def viewport_y(self) -> int:
        return self._viewport_y

    def get_line(self, index: int) -> str | None:
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    @property
    def on_render(self) -> EventEmitter:
        return self._on_render

    @property
    def on_scroll(self) -> EventEmitter:
        return self._on_scroll

    @property
    def on_resize(self) -> EventEmitter:
        return self._on_resize

    def cell_metrics(self) -> CellMetrics | None:
        return self._cell_metrics

    def theme(self) -> ThemeColors | None:
        return self._theme

    # === TextSink ===

    def write(self, data: WriteData, on_complete: CompletionCallback | None = None) -> None:
        """写入数据并通知 render"""
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")

        self._feed(data)
        self._trim_scrollback()
        if self._follow:
            self._viewport_y = self._max_viewport_y()

        self._on_render.emit()
        if on_complete is not None:
            on_complete()

    # === 宿主操作 ===

    def scroll_to(self, y: int) -> None:
        """滚动视口到逻辑行 y（会被钳制到有效范围）"""
        bottom = self._max_viewport_y()
        self._viewport_y = max(0, min(y, bottom))
        self._follow = self._viewport_y == bottom
        self._on_scroll.emit()

    def scroll_lines(self, amount: int) -> None:
        """相对滚动，负数向上"""
        self.scroll_to(self._viewport_y + amount)

    def resize(self, cols: int, rows: int) -> None:
        """改变视口尺寸（已写入的行不重新折行）"""
        if cols <= 0 or rows <= 0:
            raise ValueError(f"Invalid terminal size {cols}x{rows}")
        self._cols = cols
        self._rows = rows
        self._cursor_col = min(self._cursor_col, cols)
        bottom = self._max_viewport_y()
        self._viewport_y = bottom if self._follow else min(self._viewport_y, bottom)
        logger.debug(f"[VirtualTerminal] Resized to {cols}x{rows}")
        self._on_resize.emit()

    def set_cell_metrics(self, cell_metrics: CellMetrics | None) -> None:
        """模拟字号/缩放变化"""
        self._cell_metrics = cell_metrics

    def set_theme(self, theme: ThemeColors | None) -> None:
        self._theme = theme

    # === 状态查询 ===

    @property
    def lines(self) -> list[str]:
        """全部逻辑行（含 scrollback）"""
        return list(self._lines)

    @property
    def is_following(self) -> bool:
        """视口是否跟随底部"""
        return self._follow

    def visible_lines(self) -> list[str]:
        """当前视口内的行"""
        return self._lines[self._viewport_y:self._viewport_y + self._rows]

    # === 内部实现 ===

    def _max_viewport_y(self) -> int:
        return max(0, len(self._lines) - self._rows)

    def _feed(self, text: str) -> None:
        text = _ANSI_RE.sub("", text)
        for char in text:
            if char == "\n":
                self._lines.append("")
                self._cursor_col = 0
            elif char == "\r":
                self._cursor_col = 0
            elif char == "\b":
                self._cursor_col = max(0, self._cursor_col - 1)
            elif char == "\t":
                spaces = TAB_WIDTH - self._cursor_col % TAB_WIDTH
                for _ in range(spaces):
                    self._put(" ")
            elif char < " " or char == "\x7f":
                continue
            else:
                self._put(char)

    def _put(self, char: str) -> None:
        """在光标处写一个字符，到达行尾时折行"""
        if self._cursor_col >= self._cols:
            self._lines.append("")
            self._cursor_col = 0

        line = self._lines[-1]
        col = self._cursor_col
        if col >= len(line):
            line = line.ljust(col) + char
        else:
            line = line[:col] + char + line[col + 1:]
        self._lines[-1] = line
        self._cursor_col += 1

    def _trim_scrollback(self) -> None:
        excess = len(self._lines) - (self._scrollback + self._rows)
        if excess <= 0:
            return
        del self._lines[:excess]
        if not self._follow:
            self._viewport_y = max(0, self._viewport_y - excess)
