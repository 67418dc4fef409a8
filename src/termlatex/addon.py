"""LatexAddon - 组件装配与生命周期

职责：
- 校验配置（LatexAddonConfig）
- 创建 Store、Processor、WriteMiddleware、OverlaySynchronizer 并绑定到宿主
- 启用/停用、配置更新（整体重建）
- 释放（逆序拆除）

不负责：
- 宿主本身的生命周期
- 具体 UI 层（由 OverlaySurface 实现方负责）
"""

import logging
from collections.abc import Callable

from pydantic import BaseModel, Field, field_validator

from . import config
from .adapters.base import CompletionCallback, GridHost, TextSink, WriteData
from .detector.middleware import LatexWriteMiddleware
from .detector.processor import LatexProcessor
from .overlay.surface import OverlaySurface, RecordingSurface
from .overlay.synchronizer import OverlaySynchronizer
from .render.base import LatexRenderer
from .render.mathtext import MathtextRenderer
from .render.store import ExpressionStore
from .telemetry import PACKAGE_LOGGER, CallbackHandler, configure_logging, get_logger
from .timer import Timer

logger = get_logger(__name__)


class LatexAddonConfig(BaseModel):
    """Addon 配置

    macros 会合并在默认宏之上（同名 trigger 以用户为准）。
    on_log 非空时，包级日志会格式化后转发给该回调。
    """

    enabled: bool = True
    debug_logging: bool = False
    on_log: Callable[[str], None] | None = None
    macros: dict[str, str] = Field(default_factory=dict)
    cache_size: int = Field(default=config.CACHE_SIZE, gt=0)
    min_placeholder_width: int = Field(
        default=config.MIN_PLACEHOLDER_WIDTH, ge=config.MIN_PLACEHOLDER_WIDTH
    )

    @field_validator("macros")
    @classmethod
    def merge_default_macros(cls, value: dict[str, str]) -> dict[str, str]:
        return {**config.DEFAULT_MACROS, **value}


class LatexAddon:
    """公式渲染插件

    使用示例:
        term = VirtualTerminal(cols=80, rows=24)
        addon = LatexAddon(LatexAddonConfig(macros={"@R": "\\\\mathbb{R}"}))
        addon.activate(term)
        addon.write("The equation $E = mc^2$ is famous.\\r\\n")
        addon.dispose()
    """

    def __init__(
        self,
        config: LatexAddonConfig | None = None,
        renderer: LatexRenderer | None = None,
        surface: OverlaySurface | None = None,
    ):
        """初始化

        Args:
            config: 配置，None 时使用默认配置
            renderer: 渲染委托，None 时使用 MathtextRenderer
            surface: 定位渲染目标，None 时使用 RecordingSurface
        """
        self._config = config or LatexAddonConfig()
        self._renderer = renderer or MathtextRenderer()
        self._surface = surface or RecordingSurface()

        self._host: GridHost | None = None
        self._sink: TextSink | None = None
        self._store: ExpressionStore | None = None
        self._processor: LatexProcessor | None = None
        self._middleware: LatexWriteMiddleware | None = None
        self._synchronizer: OverlaySynchronizer | None = None
        self._log_handler: CallbackHandler | None = None
        self._disposed = False

    # === 属性 ===

    @property
    def is_active(self) -> bool:
        return self._middleware is not None and not self._disposed

    @property
    def store(self) -> ExpressionStore | None:
        return self._store

    @property
    def processor(self) -> LatexProcessor | None:
        return self._processor

    @property
    def middleware(self) -> LatexWriteMiddleware | None:
        return self._middleware

    @property
    def synchronizer(self) -> OverlaySynchronizer | None:
        return self._synchronizer

    @property
    def surface(self) -> OverlaySurface:
        return self._surface

    # === 生命周期 ===

    def activate(self, host: GridHost, sink: TextSink | None = None) -> None:
        """绑定宿主

        Args:
            host: 网格宿主
            sink: 被包装的写入目标，None 时宿主本身必须实现 TextSink

        Raises:
            RuntimeError: 已释放或重复激活
            TypeError: 没有可用的 TextSink
        """
        if self._disposed:
            raise RuntimeError("LatexAddon has been disposed")
        if self._host is not None:
            raise RuntimeError("LatexAddon is already activated")

        if sink is None:
            if not isinstance(host, TextSink):
                raise TypeError("Host does not provide write(); pass a TextSink explicitly")
            sink = host

        self._host = host
        self._sink = sink
        self._apply_logging()
        self._build(host, sink)
        logger.info(f"[Addon] Activated ({host.cols}x{host.rows})")

    def dispose(self) -> None:
        """释放：逆序拆除所有组件，之后 write 直接透传"""
        if self._disposed:
            return
        self._teardown()
        self._disposed = True
        logger.info("[Addon] Disposed")
        self._remove_log_handler()

    # === 写入 ===

    def write(self, data: WriteData, on_complete: CompletionCallback | None = None) -> None:
        """经过公式替换的写入入口

        Raises:
            RuntimeError: 尚未激活
        """
        if self._middleware is not None:
            self._middleware.write(data, on_complete)
        elif self._sink is not None:
            self._sink.write(data, on_complete)
        else:
            raise RuntimeError("LatexAddon is not activated")

    # === 配置 ===

    def set_enabled(self, enabled: bool) -> None:
        """启用或停用识别与 overlay

        停用时缓冲中尚未闭合的文本会先原样写出，保持输出顺序。
        """
        self._config = self._config.model_copy(update={"enabled": enabled})
        if not enabled and self._middleware is not None:
            self._middleware.flush_pending()
        if self._processor is not None:
            self._processor.set_enabled(enabled)
        if self._synchronizer is not None:
            self._synchronizer.set_enabled(enabled)
        logger.info(f"[Addon] {'Enabled' if enabled else 'Disabled'}")

    def get_config(self) -> LatexAddonConfig:
        """获取配置副本"""
        return self._config.model_copy(deep=True)

    def update_config(self, **changes) -> LatexAddonConfig:
        """更新配置并重建组件

        Store 会被清空（与释放时一致）。

        Raises:
            pydantic.ValidationError: 配置非法（原配置保持不变）
        """
        merged = {**self._config.model_dump(), **changes}
        new_config = LatexAddonConfig.model_validate(merged)
        self._config = new_config

        if self.is_active:
            self._teardown()
            self._apply_logging()
            self._build(self._host, self._sink)
            logger.info(f"[Addon] Rebuilt with updated config: {sorted(changes)}")
        return self.get_config()

    # === 内部实现 ===

    def _apply_logging(self) -> None:
        if self._config.debug_logging:
            configure_logging(debug=True)

        self._remove_log_handler()
        if self._config.on_log is not None:
            self._log_handler = CallbackHandler(self._config.on_log)
            logging.getLogger(PACKAGE_LOGGER).addHandler(self._log_handler)

    def _remove_log_handler(self) -> None:
        if self._log_handler is not None:
            logging.getLogger(PACKAGE_LOGGER).removeHandler(self._log_handler)
            self._log_handler = None

    def _build(self, host: GridHost, sink: TextSink) -> None:
        cfg = self._config

        self._store = ExpressionStore(cfg.cache_size)
        self._processor = LatexProcessor(
            self._renderer,
            store=self._store,
            macros=cfg.macros,
            metrics_provider=host.cell_metrics,
            enabled=cfg.enabled,
            min_placeholder_width=cfg.min_placeholder_width,
        )
        self._middleware = LatexWriteMiddleware(sink, self._processor)
        self._synchronizer = OverlaySynchronizer(
            host,
            self._store,
            self._surface,
            renderer=self._renderer,
            timer=Timer(),
            min_placeholder_width=cfg.min_placeholder_width,
        )
        if not cfg.enabled:
            self._synchronizer.set_enabled(False)
        self._synchronizer.attach()

    def _teardown(self) -> None:
        # 逆序：overlay → 写入拦截 → 识别器/Store
        if self._synchronizer is not None:
            self._synchronizer.dispose()
        if self._middleware is not None:
            self._middleware.detach()
        if self._processor is not None:
            self._processor.dispose()
        self._synchronizer = None
        self._middleware = None
        self._processor = None
