"""Host Adapters 模块

提供宿主能力接口和参考实现：
- TextSink: 文本写入能力
- GridHost: 字符网格宿主
- EventEmitter: 通知事件
- VirtualTerminal: 内存虚拟终端（参考宿主）
"""

from .base import CompletionCallback, EventEmitter, GridHost, TextSink, WriteData
from .virtual import VirtualTerminal

__all__ = [
    # Protocol
    "TextSink",
    "GridHost",
    "EventEmitter",
    "WriteData",
    "CompletionCallback",
    # Reference host
    "VirtualTerminal",
]
