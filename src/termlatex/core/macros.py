"""宏预处理器

字面量替换：trigger → replacement，不理解数学分隔符。
按映射的迭代顺序依次替换，重叠 trigger 不做特殊处理（后替换者生效）。
"""

from collections.abc import Mapping


def expand_macros(text: str, macros: Mapping[str, str]) -> str:
    """展开宏（纯函数）

    Args:
        text: 原始文本
        macros: trigger → replacement 映射

    Returns:
        替换后的文本
    """
    for trigger, replacement in macros.items():
        if trigger:
            text = text.replace(trigger, replacement)
    return text


class MacroPreprocessor:
    """宏预处理器

    持有一份宏映射的快照，构造后不再变化。
    """

    def __init__(self, macros: Mapping[str, str] | None = None):
        self._macros: dict[str, str] = dict(macros or {})

    @property
    def macros(self) -> dict[str, str]:
        return dict(self._macros)

    def apply(self, text: str) -> str:
        """对单段文本应用所有宏"""
        if not self._macros:
            return text
        return expand_macros(text, self._macros)
