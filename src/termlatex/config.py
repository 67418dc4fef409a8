"""termlatex 配置

配置分为以下几类：
- 分隔符配置：数学表达式的开闭标记
- 识别配置：行内公式的接受阈值
- 缓冲配置：跨 chunk 未闭合表达式的缓冲上限
- 占位符配置：占位 token 的线格式
- 测量配置：cell 尺寸兜底值、字体缩放
- Overlay 配置：防抖/重建延迟、主题兜底色
"""

import os

# === 分隔符配置 ===
INLINE_DELIMITER = "$"  # 行内公式标记
BLOCK_DELIMITER = "$$"  # 块级公式标记（双标记）

# === 行内公式识别配置 ===
INLINE_SMALL_MAX_LEN = 7  # 短于此长度直接视为公式候选
INLINE_MATH_MAX_LEN = 150  # 含数学符号时的最大长度
INLINE_MATH_INDICATORS = frozenset("+=><^\\")  # 数学符号集合

# === 缓冲配置 ===
BLOCK_BUFFER_MAX = 100  # $$ 候选的最大缓冲长度（严格小于）
INLINE_BUFFER_MAX = 50  # $ 候选的最大缓冲长度（严格小于）
BUFFER_HARD_CAP = 100  # 缓冲绝对上限，超过则原样输出

# 末尾出现这些片段时才缓冲单标记候选
LATEX_BUFFER_PATTERNS = (
    "\\frac", "\\sqrt", "\\sum", "\\int", "\\nabla", "\\partial",
    "\\alpha", "\\beta", "\\gamma", "\\theta", "\\phi", "\\psi",
    "\\begin", "\\end", "\\left", "\\right",
    "^{", "_{", "\\cdot", "\\times", "\\div", "\\mathbf", "\\text",
)

# === 备用屏幕配置 ===
# vim/less 等全屏程序期间暂停识别
ALT_SCREEN_ENTER = ("\x1b[?1049h", "\x1b[?1047h", "\x1b[?47h")
ALT_SCREEN_EXIT = ("\x1b[?1049l", "\x1b[?1047l", "\x1b[?47l")

# === 占位符配置 ===
PLACEHOLDER_SENTINEL = "\uE000"  # 私有区标记字符
PLACEHOLDER_HASH_LENGTH = 3  # hash 字符数（线格式固定）
PLACEHOLDER_FILLER = "\u00a0"  # 填充字符（不可折行空格，宿主不会裁掉）
PLACEHOLDER_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
MIN_PLACEHOLDER_WIDTH = 4  # 占位符最小宽度（cell）
INLINE_WIDTH_SHRINK = 2  # 行内占位符比内容窄的 cell 数

# === 测量配置 ===
DEFAULT_CELL_WIDTH = 8.0  # 宿主未提供 cell 尺寸时的兜底（像素）
DEFAULT_CELL_HEIGHT = 16.0
FONT_SCALE = 0.7  # 公式字号 = cell 高度 * FONT_SCALE

# 渲染失败时的占位尺寸
ERROR_WIDTH_CELLS = 12
ERROR_PIXEL_WIDTH = 120.0
ERROR_HEIGHT_CELLS = 1
ERROR_PIXEL_HEIGHT = 16.0

# === Overlay 配置 ===
SCROLL_DEBOUNCE_SECONDS = 0.05  # 滚动防抖间隔（秒）
RESIZE_REBUILD_DELAY_SECONDS = 0.1  # resize 后重建延迟（秒）
DEFAULT_BACKGROUND = "#000000"  # 主题兜底背景色
DEFAULT_FOREGROUND = "#ffffff"  # 主题兜底前景色

# === 缓存配置 ===
CACHE_SIZE = 5000  # 声明容量（当前不做淘汰）

# === 宏配置 ===
DEFAULT_MACROS: dict[str, str] = {
    "@nl": "\\\\",  # PTY 安全的换行写法
}

# === 日志配置 ===
LOG_LEVEL = os.environ.get("TERMLATEX_LOG_LEVEL", "INFO")  # 日志级别
LOG_MAX_EXPR_LEN = 40  # 日志中表达式截断长度

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
