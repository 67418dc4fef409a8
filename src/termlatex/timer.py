"""Timer - 统一定时器服务

提供具名 delay（延迟）任务，挂在 asyncio event loop 上。
支持同步/异步回调，异常隔离，stop() 同步取消所有未触发任务。

使用示例:
    timer = Timer()

    # 滚动防抖：同名任务重复注册会覆盖旧任务
    timer.register_delay("scroll", 0.05, synchronizer.reconcile)

    # 取消延迟任务
    timer.cancel_delay("scroll")

    # 释放
    timer.stop()
"""

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Coroutine

from .telemetry import get_logger, metrics

logger = get_logger(__name__)

TimerCallback = Callable[[], Any | Coroutine[Any, Any, Any]]


@dataclass
class DelayTask:
    """延迟任务"""
    name: str
    delay: float  # 秒
    callback: TimerCallback
    handle: asyncio.TimerHandle | None = None
    scheduled_at: float = 0.0  # 调度时间（event loop time）
    trigger_at: float = 0.0  # 触发时间
    cancelled: bool = False


class Timer:
    """统一定时器服务

    设计原则:
    1. 单个 Timer 实例负责一个组件的所有延迟任务
    2. 支持同步/异步回调（异步回调内部 create_task 包裹）
    3. 异常隔离：单个回调失败不影响其他任务
    4. stop() 之后注册任务不再生效
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        """初始化 Timer

        Args:
            loop: 使用的 event loop，None 时在注册时取当前运行的 loop
        """
        self._loop = loop
        self._delay_tasks: dict[str, DelayTask] = {}
        self._stopped = False

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def register_delay(self, name: str, delay: float, callback: TimerCallback) -> None:
        """注册延迟任务

        如果已存在同名任务，会被覆盖（取消旧任务）。

        Args:
            name: 任务名（用于日志和取消）
            delay: 延迟时间（秒）
            callback: 回调函数（同步或异步）
        """
        if self._stopped:
            logger.debug(f"[Timer] Stopped, ignoring delay task: {name}")
            return

        loop = self._get_loop()
        now = loop.time()

        # 覆盖旧任务
        if name in self._delay_tasks:
            logger.debug(f"[Timer] Overwriting delay task: {name}")
            self.cancel_delay(name)

        task = DelayTask(
            name=name,
            delay=delay,
            callback=callback,
            scheduled_at=now,
            trigger_at=now + delay,
        )
        task.handle = loop.call_later(delay, self._fire, task)
        self._delay_tasks[name] = task
        logger.debug(f"[Timer] Registered delay task: {name} ({delay}s)")

    def cancel_delay(self, name: str) -> bool:
        """取消延迟任务

        Args:
            name: 任务名

        Returns:
            是否成功取消
        """
        task = self._delay_tasks.pop(name, None)
        if task is None:
            return False
        task.cancelled = True
        if task.handle is not None:
            task.handle.cancel()
        logger.debug(f"[Timer] Cancelled delay task: {name}")
        return True

    def has_delay(self, name: str) -> bool:
        """检查是否存在未触发的延迟任务"""
        return name in self._delay_tasks

    def stop(self) -> None:
        """停止 Timer

        同步取消所有未触发的延迟任务。
        """
        if self._stopped:
            return
        self._stopped = True

        for name in list(self._delay_tasks.keys()):
            self.cancel_delay(name)
        logger.debug("[Timer] Stopped")

    def _fire(self, task: DelayTask) -> None:
        """到期回调（由 event loop 调用）"""
        if task.cancelled or self._delay_tasks.get(task.name) is not task:
            return
        del self._delay_tasks[task.name]

        try:
            result = task.callback()
            # 如果是协程，交给 loop 调度
            if inspect.iscoroutine(result):
                self._get_loop().create_task(self._await_callback(task.name, result))
        except Exception as e:
            logger.error(f"[Timer] Task '{task.name}' failed: {e}")
            metrics.inc("timer.errors", {"task": task.name})

    async def _await_callback(self, name: str, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            await coro
        except Exception as e:
            logger.error(f"[Timer] Task '{name}' failed: {e}")
            metrics.inc("timer.errors", {"task": name})

    # === 状态查询（用于测试）===

    @property
    def is_stopped(self) -> bool:
        """是否已停止"""
        return self._stopped

    @property
    def delay_task_count(self) -> int:
        """延迟任务数量"""
        return len(self._delay_tasks)

    def get_delay_tasks(self) -> list[str]:
        """获取所有延迟任务名"""
        return list(self._delay_tasks.keys())
