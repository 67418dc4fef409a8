"""缓冲状态流转

每个 chunk 处理后根据末尾文本决定下一个状态，全部为纯函数。

规则表：
| # | 末尾形状 | 条件 | to_phase | 动作 |
|---|----------|------|----------|------|
| B1 | ...$$<tail> | 候选 < BLOCK_BUFFER_MAX | BUFFERING_BLOCK | 缓冲 $$<tail> |
| I1 | ...$<tail> | tail 含控制序列片段 且 候选 < INLINE_BUFFER_MAX | BUFFERING_INLINE | 缓冲 $<tail> |
| P1 | ...$ 或 ...$<空白>... | 单标记 | IDLE | 原样输出（shell 提示符） |
| N1 | 最后一个 $ 在最后一个换行之前 | - | IDLE | 原样输出 |
| O1 | 缓冲 > BUFFER_HARD_CAP | - | IDLE | 缓冲原样追加到输出 |
"""

from termlatex import config

from .predicates import is_shell_prompt_shape, looks_like_math
from .types import DetectorPhase, TailSplit


def split_trailing_candidate(
    text: str,
    block_max: int | None = None,
    inline_max: int | None = None,
) -> TailSplit:
    """切出末尾疑似未闭合的表达式

    Args:
        text: 两轮替换之后的文本
        block_max: $$ 候选缓冲上限（严格小于）
        inline_max: $ 候选缓冲上限（严格小于）

    Returns:
        TailSplit(phase, emitted, buffered)
    """
    block_max = block_max or config.BLOCK_BUFFER_MAX
    inline_max = inline_max or config.INLINE_BUFFER_MAX

    last = text.rfind(config.INLINE_DELIMITER)
    if last == -1 or last < text.rfind("\n"):
        return TailSplit(DetectorPhase.IDLE, text)

    # 紧挨着的两个 $ 视为块级开标记
    is_block = last > 0 and text[last - 1] == config.INLINE_DELIMITER
    start = last - 1 if is_block else last
    after = text[last + 1:]

    if is_shell_prompt_shape(after, is_block):
        return TailSplit(DetectorPhase.IDLE, text)
    if not is_block and not looks_like_math(after):
        return TailSplit(DetectorPhase.IDLE, text)

    candidate = text[start:]
    limit = block_max if is_block else inline_max
    if len(candidate) >= limit:
        return TailSplit(DetectorPhase.IDLE, text)

    phase = DetectorPhase.BUFFERING_BLOCK if is_block else DetectorPhase.BUFFERING_INLINE
    return TailSplit(phase, text[:start], candidate)


def apply_overflow_valve(split: TailSplit, hard_cap: int | None = None) -> tuple[TailSplit, bool]:
    """缓冲超过绝对上限时原样输出

    Args:
        split: 末尾切分结果
        hard_cap: 缓冲绝对上限

    Returns:
        (新的切分结果, 是否触发了溢出)
    """
    hard_cap = hard_cap or config.BUFFER_HARD_CAP
    if len(split.buffered) <= hard_cap:
        return split, False
    return TailSplit(DetectorPhase.IDLE, split.emitted + split.buffered), True


def scan_alternate_screen(data: str) -> bool | None:
    """检测 chunk 中的备用屏幕切换序列

    同一 chunk 内同时出现进入与退出时，以最后出现的为准。

    Args:
        data: 原始 chunk

    Returns:
        切换后的状态；chunk 不含切换序列时返回 None
    """
    last_enter = max((data.rfind(seq) for seq in config.ALT_SCREEN_ENTER), default=-1)
    last_exit = max((data.rfind(seq) for seq in config.ALT_SCREEN_EXIT), default=-1)
    if last_enter == -1 and last_exit == -1:
        return None
    return last_enter > last_exit
