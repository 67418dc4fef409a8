"""LatexProcessor - 流式公式识别与替换

职责：
- 拼接上次缓冲 + 新 chunk
- 块级 ($$...$$) 替换：无条件替换，渲染失败也写入 Store
- 行内 ($...$) 替换：启发式接受 + 试渲染校验，失败保留原文
- 末尾未闭合候选的缓冲与溢出保护
- 备用屏幕期间暂停识别

数据流:
    chunk → 拼接缓冲 → 块级替换 → 行内替换 → 末尾切分 → 输出
"""

import dataclasses
import math
import re
from collections.abc import Callable, Mapping

from termlatex import config
from termlatex.core.macros import MacroPreprocessor
from termlatex.core.placeholder import encode_placeholder, placeholder_hash
from termlatex.render.base import LatexRenderer, safe_render
from termlatex.render.store import ExpressionStore
from termlatex.render.types import CellMetrics, LatexEntry, RenderResult
from termlatex.telemetry import format_hash_log, get_logger, metrics, shorten_expr

from .predicates import accept_inline_candidate
from .transitions import apply_overflow_valve, scan_alternate_screen, split_trailing_candidate
from .types import DetectorPhase, DetectorState

logger = get_logger(__name__)

_BLOCK_PATTERN = re.compile(r"\$\$([^$]+?)\$\$")
_INLINE_PATTERN = re.compile(r"\$([^$]+?)\$")
_LINE_BREAK = re.compile(r"\n\s*")

MetricsProvider = Callable[[], CellMetrics | None]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class LatexProcessor:
    """流式公式识别器

    每个实例持有独立的 DetectorState 和 ExpressionStore。

    使用示例:
        processor = LatexProcessor(MathtextRenderer())
        out = processor.process("result: $\\fr")       # "result: "
        out += processor.process("ac{1}{2}$ done")     # token + " done"
    """

    def __init__(
        self,
        renderer: LatexRenderer,
        store: ExpressionStore | None = None,
        macros: Mapping[str, str] | None = None,
        metrics_provider: MetricsProvider | None = None,
        enabled: bool = True,
        min_placeholder_width: int | None = None,
        block_buffer_max: int | None = None,
        inline_buffer_max: int | None = None,
        buffer_hard_cap: int | None = None,
    ):
        """初始化

        Args:
            renderer: 渲染委托
            store: 表达式缓存（可选，默认创建新的）
            macros: 宏映射，None 时使用 config.DEFAULT_MACROS
            metrics_provider: 返回当前 cell 尺寸的函数
            enabled: 初始是否启用
            min_placeholder_width: 占位符最小宽度
            block_buffer_max: $$ 候选缓冲上限
            inline_buffer_max: $ 候选缓冲上限
            buffer_hard_cap: 缓冲绝对上限
        """
        self._renderer = renderer
        self._store = store if store is not None else ExpressionStore()
        self._macros = MacroPreprocessor(config.DEFAULT_MACROS if macros is None else macros)
        self._metrics_provider = metrics_provider
        self._min_width = min_placeholder_width or config.MIN_PLACEHOLDER_WIDTH
        self._block_buffer_max = block_buffer_max or config.BLOCK_BUFFER_MAX
        self._inline_buffer_max = inline_buffer_max or config.INLINE_BUFFER_MAX
        self._buffer_hard_cap = buffer_hard_cap or config.BUFFER_HARD_CAP

        self._state = DetectorState(enabled=enabled)
        self._process_count = 0
        self._disposed = False

    # === 属性 ===

    @property
    def store(self) -> ExpressionStore:
        return self._store

    @property
    def state(self) -> DetectorState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def pending(self) -> str:
        """当前缓冲的未闭合文本"""
        return self._state.buffer

    # === 核心方法 ===

    def process(self, data: str) -> str:
        """处理一个文本 chunk

        Args:
            data: 原始 chunk

        Returns:
            替换后的输出文本（可能少于输入：末尾候选被缓冲）
        """
        if self._disposed or not self._state.enabled:
            metrics.inc("processor.passthrough", {"reason": "disabled"})
            # 停用前残留的缓冲先于本 chunk 原样输出
            return self._state.take_buffer() + data

        toggled = scan_alternate_screen(data)
        if toggled is not None:
            if toggled != self._state.alternate_screen:
                logger.debug(
                    f"[Processor] {'Entering' if toggled else 'Exiting'} alternate screen"
                )
            self._state.alternate_screen = toggled
            metrics.inc("processor.passthrough", {"reason": "alt_screen_toggle"})
            return data

        if self._state.alternate_screen:
            metrics.inc("processor.passthrough", {"reason": "alt_screen"})
            return data

        return self._process_chunk(data)

    def flush(self) -> str:
        """取出缓冲中的未闭合文本（原样）"""
        return self._state.take_buffer()

    def set_enabled(self, enabled: bool) -> None:
        """启用或停用识别"""
        self._state.enabled = enabled
        logger.debug(f"[Processor] {'Enabled' if enabled else 'Disabled'}")

    def dispose(self) -> None:
        """释放：清空 Store，之后 process 原样透传"""
        if self._disposed:
            return
        self._disposed = True
        self._store.clear()
        logger.debug("[Processor] Disposed")

    # === 内部实现 ===

    def _process_chunk(self, data: str) -> str:
        combined = self._state.take_buffer() + data

        try:
            cell_metrics = self._current_metrics()
            result = _BLOCK_PATTERN.sub(lambda m: self._replace_block(m, cell_metrics), combined)
            result = _INLINE_PATTERN.sub(lambda m: self._replace_inline(m, cell_metrics), result)
        except Exception as e:
            logger.error(f"[Processor] Substitution failed, passing chunk through: {e}")
            metrics.inc("processor.errors")
            return combined

        split = split_trailing_candidate(result, self._block_buffer_max, self._inline_buffer_max)
        split, overflowed = apply_overflow_valve(split, self._buffer_hard_cap)
        if overflowed:
            logger.debug("[Processor] Buffer overflow, flushing candidate as literal text")
            metrics.inc("processor.overflow_flush")

        self._state.buffer = split.buffered
        self._state.phase = split.phase
        if split.phase.is_buffering:
            mode = "block" if split.phase == DetectorPhase.BUFFERING_BLOCK else "inline"
            logger.debug(f"[Processor] Buffering {mode} candidate {shorten_expr(split.buffered)!r}")
            metrics.inc("processor.buffered", {"mode": mode})

        if result != combined:
            self._process_count += 1
            logger.debug(f"[Processor] Process #{self._process_count}: replacement occurred")

        return split.emitted

    def _current_metrics(self) -> CellMetrics:
        provided = self._metrics_provider() if self._metrics_provider else None
        return CellMetrics.or_default(provided)

    def _replace_block(self, match: re.Match, cell_metrics: CellMetrics) -> str:
        """块级替换：渲染失败同样替换（error 条目）"""
        latex = self._macros.apply(match.group(1))
        latex = _LINE_BREAK.sub(" ", latex)

        hash_code = placeholder_hash(latex, display=True)
        entry = self._store.get(hash_code)
        if entry is None or not entry.matches(latex, display=True):
            result = safe_render(self._renderer, latex, True, cell_metrics.font_size)
            entry = self._measure(latex, True, result, cell_metrics)
            self._store.put(hash_code, entry)
            if entry.error:
                logger.debug(format_hash_log("Processor", hash_code, f"Block render failed: {entry.error}"))
        elif entry.is_stale(cell_metrics):
            entry = self._remeasure(entry, cell_metrics)
            self._store.put(hash_code, entry)

        metrics.inc("processor.substituted", {"mode": "block"})
        token = encode_placeholder(hash_code, max(entry.width_cells, self._min_width))
        padding = "\n" * max(1, math.ceil(entry.height_cells / 2))
        return f"{padding}{token}{padding}"

    def _replace_inline(self, match: re.Match, cell_metrics: CellMetrics) -> str:
        """行内替换：启发式 + 试渲染，失败保留原文"""
        literal = match.group(0)
        try:
            latex = self._macros.apply(match.group(1))
            latex = _LINE_BREAK.sub("", latex).strip()

            if not accept_inline_candidate(latex):
                metrics.inc("processor.false_positive", {"reason": "heuristic"})
                return literal

            hash_code = placeholder_hash(latex, display=False)
            entry = self._store.get(hash_code)
            if entry is None or not entry.matches(latex, display=False) or entry.markup is None:
                result = safe_render(self._renderer, latex, False, cell_metrics.font_size)
                if not result.ok:
                    metrics.inc("processor.false_positive", {"reason": "render"})
                    return literal
                entry = self._measure(latex, False, result, cell_metrics)
                self._store.put(hash_code, entry)
            elif entry.is_stale(cell_metrics):
                entry = self._remeasure(entry, cell_metrics)
                self._store.put(hash_code, entry)

            content_cells = math.floor(entry.pixel_width / cell_metrics.width)
            width = max(content_cells - config.INLINE_WIDTH_SHRINK, self._min_width)
            metrics.inc("processor.substituted", {"mode": "inline"})
            return encode_placeholder(hash_code, width)
        except Exception as e:
            logger.debug(f"[Processor] Inline candidate {shorten_expr(literal)!r} rejected: {e}")
            metrics.inc("processor.false_positive", {"reason": "error"})
            return literal

    def _measure(
        self,
        latex: str,
        display: bool,
        result: RenderResult,
        cell_metrics: CellMetrics,
    ) -> LatexEntry:
        """根据渲染结果构造条目，尺寸换算为 cell"""
        if not result.ok:
            return LatexEntry(
                source=latex,
                display=display,
                pixel_width=config.ERROR_PIXEL_WIDTH,
                pixel_height=config.ERROR_PIXEL_HEIGHT,
                width_cells=config.ERROR_WIDTH_CELLS,
                height_cells=config.ERROR_HEIGHT_CELLS,
                metrics=cell_metrics,
                error=result.error or "Unknown error",
            )

        return LatexEntry(
            source=latex,
            display=display,
            pixel_width=result.pixel_width,
            pixel_height=result.pixel_height,
            width_cells=max(_round_half_up(result.pixel_width / cell_metrics.width), self._min_width),
            height_cells=max(_round_half_up(result.pixel_height / cell_metrics.height), 1),
            metrics=cell_metrics,
            markup=result.markup,
        )

    def _remeasure(self, entry: LatexEntry, cell_metrics: CellMetrics) -> LatexEntry:
        """cell 尺寸变化后按字号比例缩放已有测量，不重新渲染"""
        if entry.error:
            return dataclasses.replace(entry, metrics=cell_metrics)

        scale = cell_metrics.height / entry.metrics.height
        pixel_width = entry.pixel_width * scale
        pixel_height = entry.pixel_height * scale
        return dataclasses.replace(
            entry,
            pixel_width=pixel_width,
            pixel_height=pixel_height,
            width_cells=max(_round_half_up(pixel_width / cell_metrics.width), self._min_width),
            height_cells=max(_round_half_up(pixel_height / cell_metrics.height), 1),
            metrics=cell_metrics,
        )
