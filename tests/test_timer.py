"""Timer 模块测试"""

import asyncio
from unittest.mock import Mock

import pytest

from termlatex.telemetry import metrics
from termlatex.timer import Timer


@pytest.fixture
def timer():
    """创建测试用 Timer"""
    timer = Timer()
    yield timer
    timer.stop()


class TestTimerDelay:
    """延迟任务测试"""

    @pytest.mark.asyncio
    async def test_register_delay_sync_callback(self, timer):
        """测试同步回调的延迟任务"""
        callback = Mock()
        timer.register_delay("test", 0.05, callback)
        assert timer.has_delay("test")

        await asyncio.sleep(0.1)
        callback.assert_called_once()
        assert not timer.has_delay("test")

    @pytest.mark.asyncio
    async def test_register_delay_async_callback(self, timer):
        """测试异步回调的延迟任务"""
        counter = {"value": 0}

        async def async_callback():
            counter["value"] += 1

        timer.register_delay("test", 0.05, async_callback)
        await asyncio.sleep(0.15)
        assert counter["value"] == 1

    @pytest.mark.asyncio
    async def test_overwrite_delay(self, timer):
        """同名任务覆盖旧任务（防抖）"""
        first = Mock()
        second = Mock()
        timer.register_delay("debounce", 0.05, first)
        await asyncio.sleep(0.02)
        timer.register_delay("debounce", 0.05, second)
        assert timer.delay_task_count == 1

        await asyncio.sleep(0.1)
        first.assert_not_called()
        second.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancel_delay(self, timer):
        """测试取消延迟任务"""
        callback = Mock()
        timer.register_delay("test", 0.05, callback)

        assert timer.cancel_delay("test") is True
        assert timer.cancel_delay("test") is False
        assert timer.cancel_delay("nonexistent") is False

        await asyncio.sleep(0.1)
        callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        timer = Timer(loop=asyncio.get_running_loop())
        callback = Mock()
        timer.register_delay("test", 0.01, callback)
        await asyncio.sleep(0.05)
        callback.assert_called_once()

    def test_register_without_loop_raises(self, timer):
        """没有运行中的 loop 时注册失败"""
        with pytest.raises(RuntimeError):
            timer.register_delay("test", 0.01, Mock())
        assert timer.delay_task_count == 0


class TestTimerStop:
    """停止测试"""

    @pytest.mark.asyncio
    async def test_stop_cancels_all(self, timer):
        callbacks = [Mock(), Mock()]
        timer.register_delay("a", 0.05, callbacks[0])
        timer.register_delay("b", 0.05, callbacks[1])
        assert sorted(timer.get_delay_tasks()) == ["a", "b"]

        timer.stop()
        assert timer.is_stopped
        assert timer.delay_task_count == 0

        await asyncio.sleep(0.1)
        for callback in callbacks:
            callback.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_after_stop_ignored(self, timer):
        timer.stop()
        callback = Mock()
        timer.register_delay("late", 0.01, callback)

        await asyncio.sleep(0.05)
        assert timer.delay_task_count == 0
        callback.assert_not_called()

    def test_stop_idempotent(self, timer):
        timer.stop()
        timer.stop()
        assert timer.is_stopped


class TestTimerErrorIsolation:
    """异常隔离测试"""

    @pytest.mark.asyncio
    async def test_sync_exception_isolated(self, timer):
        """测试单个回调异常不影响其他任务"""
        good = Mock()

        def bad_callback():
            raise ValueError("Test error")

        timer.register_delay("bad", 0.02, bad_callback)
        timer.register_delay("good", 0.04, good)

        await asyncio.sleep(0.1)
        good.assert_called_once()
        assert metrics.get_counter("timer.errors", {"task": "bad"}) == 1

    @pytest.mark.asyncio
    async def test_async_exception_isolated(self, timer):
        async def bad_callback():
            raise ValueError("Async error")

        timer.register_delay("bad_async", 0.02, bad_callback)
        await asyncio.sleep(0.1)
        assert metrics.get_counter("timer.errors", {"task": "bad_async"}) == 1
