"""识别谓词库

提供 Detector 使用的启发式判断，全部为纯函数。

可用谓词：
- accept_inline_candidate(text): 行内候选是否像公式
- looks_like_math(text): 末尾文本是否含数学控制序列（含被截断的控制序列）
- is_shell_prompt_shape(after, is_block): 是否为 shell 提示符形状的误报
"""

import re

from termlatex import config

# 末尾被 chunk 截断的控制序列，如 "\fr"
_TRAILING_COMMAND = re.compile(r"\\[A-Za-z]*$")


def accept_inline_candidate(text: str) -> bool:
    """行内候选接受规则

    条件 (OR):
    - 长度 < 7
    - 长度 < 150 且包含数学符号

    Args:
        text: 展开宏、去掉换行和首尾空白后的候选

    Returns:
        是否作为公式继续校验
    """
    if len(text) < config.INLINE_SMALL_MAX_LEN:
        return True
    return len(text) < config.INLINE_MATH_MAX_LEN and any(
        c in config.INLINE_MATH_INDICATORS for c in text
    )


def looks_like_math(text: str) -> bool:
    """末尾文本是否像未写完的公式

    命中任一 LATEX_BUFFER_PATTERNS，或以某个控制序列模式的前缀结尾
    （chunk 恰好切在控制序列中间）。
    """
    if any(pattern in text for pattern in config.LATEX_BUFFER_PATTERNS):
        return True

    match = _TRAILING_COMMAND.search(text)
    if match is None:
        return False
    fragment = match.group(0)
    return any(
        pattern.startswith(fragment)
        for pattern in config.LATEX_BUFFER_PATTERNS
        if pattern.startswith("\\")
    )


def is_shell_prompt_shape(after: str, is_block: bool) -> bool:
    """单个 $ 后紧跟空白或直接结束：视为 shell 提示符，不缓冲"""
    if is_block:
        return False
    return after == "" or after[0].isspace()
