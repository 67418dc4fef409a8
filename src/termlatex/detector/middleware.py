"""写入拦截中间件

以装饰器方式包装宿主的 TextSink：每次 write 恰好调用一次下层 sink，
传入原始或替换后的数据以及同一个完成回调。多层中间件通过显式嵌套组合。
"""

from termlatex.adapters.base import CompletionCallback, TextSink, WriteData
from termlatex.telemetry import get_logger, metrics

from .processor import LatexProcessor

logger = get_logger(__name__)


class LatexWriteMiddleware(TextSink):
    """公式替换中间件

    使用示例:
        sink = LatexWriteMiddleware(terminal, processor)
        sink.write("The equation $E = mc^2$ is famous.")
    """

    def __init__(self, sink: TextSink, processor: LatexProcessor):
        self._sink = sink
        self._processor = processor
        self._detached = False

    @property
    def inner(self) -> TextSink:
        """被包装的下层 sink"""
        return self._sink

    @property
    def processor(self) -> LatexProcessor:
        return self._processor

    def write(self, data: WriteData, on_complete: CompletionCallback | None = None) -> None:
        """拦截写入

        二进制数据、停用或释放后原样透传。
        """
        if self._detached or not isinstance(data, str):
            if not isinstance(data, str):
                metrics.inc("processor.passthrough", {"reason": "binary"})
            self._sink.write(data, on_complete)
            return

        processed = self._processor.process(data)
        self._sink.write(processed, on_complete)

    def flush_pending(self) -> str:
        """将缓冲中尚未闭合的文本原样写出

        Returns:
            写出的文本（无缓冲时为空串）
        """
        pending = self._processor.flush()
        if pending:
            logger.debug(f"[Middleware] Flushing {len(pending)} buffered chars")
            self._sink.write(pending)
        return pending

    def detach(self) -> None:
        """停止拦截

        缓冲中尚未闭合的文本原样写出，之后所有 write 直接透传。
        """
        if self._detached:
            return
        self._detached = True
        self.flush_pending()
