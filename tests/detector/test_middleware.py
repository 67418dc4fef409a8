"""LatexWriteMiddleware 测试"""

from unittest.mock import Mock

import pytest

from termlatex.adapters.base import TextSink
from termlatex.core.placeholder import placeholder_hash
from termlatex.detector.middleware import LatexWriteMiddleware
from termlatex.detector.processor import LatexProcessor
from termlatex.telemetry import metrics


class RecordingSink(TextSink):
    """记录所有写入的 sink"""

    def __init__(self):
        self.writes: list[tuple[object, object]] = []

    def write(self, data, on_complete=None):
        self.writes.append((data, on_complete))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def middleware(sink, fake_renderer):
    return LatexWriteMiddleware(sink, LatexProcessor(fake_renderer))


class TestLatexWriteMiddleware:
    """写入拦截"""

    def test_forward_processed_once(self, middleware, sink):
        callback = Mock()
        middleware.write("x = $a^2$ ok", callback)

        assert len(sink.writes) == 1
        data, on_complete = sink.writes[0]
        assert "$" not in data
        assert on_complete is callback
        assert placeholder_hash("a^2", False) in middleware.processor.store

    def test_plain_text_unchanged(self, middleware, sink):
        middleware.write("hello world")
        assert sink.writes == [("hello world", None)]

    def test_binary_passthrough(self, middleware, sink):
        """二进制数据原样透传"""
        middleware.write(b"$x^2$")
        assert sink.writes == [(b"$x^2$", None)]
        assert metrics.get_counter("processor.passthrough", {"reason": "binary"}) == 1

    def test_buffered_write_still_forwards(self, middleware, sink):
        """整个 chunk 被缓冲时仍恰好调用一次下层 sink"""
        callback = Mock()
        middleware.write("$\\fr", callback)
        assert sink.writes == [("", callback)]

    def test_detach_flushes_pending(self, middleware, sink):
        middleware.write("result: $\\fr")
        middleware.detach()

        assert sink.writes[-1] == ("$\\fr", None)
        assert middleware.processor.pending == ""

        middleware.write("$x^2$")
        assert sink.writes[-1] == ("$x^2$", None)

    def test_flush_pending_writes_buffer_once(self, middleware, sink):
        middleware.write("a $\\alpha")
        assert middleware.flush_pending() == "$\\alpha"
        assert sink.writes[-1] == ("$\\alpha", None)

        count = len(sink.writes)
        assert middleware.flush_pending() == ""
        assert len(sink.writes) == count

    def test_detach_idempotent(self, middleware, sink):
        middleware.detach()
        middleware.detach()
        assert sink.writes == []

    def test_composable(self, sink, fake_renderer):
        """多层中间件显式嵌套"""
        inner = LatexWriteMiddleware(sink, LatexProcessor(fake_renderer))
        outer = LatexWriteMiddleware(inner, LatexProcessor(fake_renderer))
        outer.write("$x^2$")

        assert outer.inner is inner
        assert len(sink.writes) == 1
