"""宿主能力抽象接口

定义核心所依赖的宿主能力（由宿主实现）：
- TextSink: write(data, on_complete?)
- GridHost: 行数/列数、视口偏移、逐行纯文本、cell 尺寸、主题、通知事件
- EventEmitter: 零到多个订阅者的广播事件

设计原则：
1. 最小接口：只定义核心需要的操作
2. 通知无负载：仅表示"现在重新计算"
3. 订阅者异常隔离
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from termlatex.telemetry import get_logger

if TYPE_CHECKING:
    from termlatex.overlay.types import ThemeColors
    from termlatex.render.types import CellMetrics

logger = get_logger(__name__)

WriteData = str | bytes
CompletionCallback = Callable[[], Any]
Listener = Callable[[], Any]


class TextSink(ABC):
    """文本写入能力"""

    @abstractmethod
    def write(self, data: WriteData, on_complete: CompletionCallback | None = None) -> None:
        """写入数据

        Args:
            data: 文本或二进制数据
            on_complete: 写入完成回调
        """
        pass


class EventEmitter:
    """广播事件

    使用示例:
        on_scroll = EventEmitter("scroll")
        unsubscribe = on_scroll.subscribe(lambda: print("scrolled"))
        on_scroll.emit()
        unsubscribe()
    """

    def __init__(self, name: str):
        self.name = name
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """订阅事件

        Returns:
            取消订阅函数（重复调用安全）
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self) -> None:
        """通知所有订阅者"""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"[Event:{self.name}] Listener error: {e}")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class GridHost(ABC):
    """字符网格宿主抽象接口

    使用示例:
        host = VirtualTerminal(cols=80, rows=24)
        for row in range(host.rows):
            text = host.get_line(host.viewport_y + row)
    """

    @property
    @abstractmethod
    def rows(self) -> int:
        """视口行数"""
        pass

    @property
    @abstractmethod
    def cols(self) -> int:
        """视口列数"""
        pass

    @property
    @abstractmethod
    def viewport_y(self) -> int:
        """视口首行在逻辑 buffer 中的偏移"""
        pass

    @abstractmethod
    def get_line(self, index: int) -> str | None:
        """获取逻辑 buffer 中某行的纯文本，越界返回 None"""
        pass

    @property
    @abstractmethod
    def on_render(self) -> EventEmitter:
        """内容渲染通知"""
        pass

    @property
    @abstractmethod
    def on_scroll(self) -> EventEmitter:
        """滚动通知"""
        pass

    @property
    @abstractmethod
    def on_resize(self) -> EventEmitter:
        """尺寸变化通知"""
        pass

    # 可选方法（有默认实现）

    def cell_metrics(self) -> "CellMetrics | None":
        """当前 cell 像素尺寸，未知时返回 None"""
        return None

    def theme(self) -> "ThemeColors | None":
        """当前主题颜色，未设置时返回 None"""
        return None
