"""Detector 模块 - 流式公式识别与替换

核心组件：
- LatexProcessor: 流式识别/替换，持有缓冲状态
- LatexWriteMiddleware: TextSink 装饰器
- DetectorPhase / DetectorState / TailSplit: 状态类型
- split_trailing_candidate / apply_overflow_valve / scan_alternate_screen: 纯流转函数
"""

from .middleware import LatexWriteMiddleware
from .predicates import accept_inline_candidate, is_shell_prompt_shape, looks_like_math
from .processor import LatexProcessor
from .transitions import apply_overflow_valve, scan_alternate_screen, split_trailing_candidate
from .types import DetectorPhase, DetectorState, TailSplit

__all__ = [
    "LatexProcessor",
    "LatexWriteMiddleware",
    "DetectorPhase",
    "DetectorState",
    "TailSplit",
    "split_trailing_candidate",
    "apply_overflow_valve",
    "scan_alternate_screen",
    "accept_inline_candidate",
    "looks_like_math",
    "is_shell_prompt_shape",
]
