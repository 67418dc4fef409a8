"""定位渲染目标抽象接口

Synchronizer 只通过此接口创建/更新/移除元素，不依赖具体 UI 层。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from termlatex.telemetry import get_logger

from .types import OverlayPlacement

logger = get_logger(__name__)


class OverlaySurface(ABC):
    """定位渲染目标

    设计原则：
    1. 元素句柄由实现方定义，Synchronizer 只透传
    2. update 同时携带内容和位置
    3. remove 对同一句柄只会调用一次
    """

    @abstractmethod
    def create(self, hash_code: str, display: bool) -> Any:
        """创建元素

        Args:
            hash_code: 表达式 hash
            display: 是否块级

        Returns:
            元素句柄
        """
        pass

    @abstractmethod
    def update(self, element: Any, markup: str, placement: OverlayPlacement) -> None:
        """更新元素内容和位置"""
        pass

    @abstractmethod
    def remove(self, element: Any) -> None:
        """移除元素"""
        pass


@dataclass
class OverlayElement:
    """RecordingSurface 的元素"""

    hash_code: str
    display: bool
    markup: str = ""
    placement: OverlayPlacement | None = None
    update_count: int = 0
    removed: bool = False


class RecordingSurface(OverlaySurface):
    """内存渲染目标

    记录所有元素及其最后一次布局，用于测试、快照和无界面宿主。
    """

    def __init__(self):
        self._elements: dict[int, OverlayElement] = {}

    def create(self, hash_code: str, display: bool) -> OverlayElement:
        element = OverlayElement(hash_code=hash_code, display=display)
        self._elements[id(element)] = element
        return element

    def update(self, element: OverlayElement, markup: str, placement: OverlayPlacement) -> None:
        element.markup = markup
        element.placement = placement
        element.update_count += 1

    def remove(self, element: OverlayElement) -> None:
        if self._elements.pop(id(element), None) is None:
            logger.debug(f"[Surface] Removing unknown element {element.hash_code}")
        element.removed = True

    @property
    def elements(self) -> list[OverlayElement]:
        """当前存活的元素"""
        return list(self._elements.values())

    def find(self, hash_code: str) -> OverlayElement | None:
        """按 hash 查找存活元素"""
        for element in self._elements.values():
            if element.hash_code == hash_code:
                return element
        return None
