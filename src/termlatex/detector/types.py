"""Detector 模块数据类型定义

包含：
- DetectorPhase: 缓冲状态枚举
- DetectorState: 单个 Detector 实例的可变状态
- TailSplit: 末尾未闭合候选的切分结果
"""

from dataclasses import dataclass
from enum import Enum


class DetectorPhase(Enum):
    """缓冲状态枚举

    - IDLE: 无缓冲
    - BUFFERING_INLINE: 缓冲了 $ 开头的未闭合候选
    - BUFFERING_BLOCK: 缓冲了 $$ 开头的未闭合候选
    """
    IDLE = "idle"
    BUFFERING_INLINE = "buffering_inline"
    BUFFERING_BLOCK = "buffering_block"

    @property
    def is_buffering(self) -> bool:
        return self != DetectorPhase.IDLE


@dataclass
class DetectorState:
    """Detector 状态

    生命周期与 LatexProcessor 实例绑定。

    Attributes:
        buffer: 疑似未闭合的末尾文本
        phase: 当前缓冲状态
        enabled: 是否启用识别
        alternate_screen: 是否处于备用屏幕（全屏程序）
    """
    buffer: str = ""
    phase: DetectorPhase = DetectorPhase.IDLE
    enabled: bool = True
    alternate_screen: bool = False

    def take_buffer(self) -> str:
        """取出并清空缓冲"""
        buffered = self.buffer
        self.buffer = ""
        self.phase = DetectorPhase.IDLE
        return buffered


@dataclass(frozen=True)
class TailSplit:
    """末尾切分结果

    emitted + buffered 恒等于切分前的文本。
    """
    phase: DetectorPhase
    emitted: str
    buffered: str = ""
