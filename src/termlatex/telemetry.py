"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade，便于观测性追踪。

日志格式: [module:hash] msg
指标示例: processor.substituted, processor.buffered, overlay.removed, timer.errors
"""

import logging
from collections.abc import Callable
from typing import Any

from . import config

# 全局日志配置
_LOG_FORMAT = "[%(name)s] %(message)s"

# 包级 logger 名称
PACKAGE_LOGGER = "termlatex"


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）

    Returns:
        配置好的 Logger 实例
    """
    logger = logging.getLogger(name)
    return logger


def configure_logging(debug: bool = False) -> None:
    """配置包级日志

    Args:
        debug: True 时包级 logger 使用 DEBUG，否则使用 config.LOG_LEVEL
    """
    logging.basicConfig(format=_LOG_FORMAT, level=config.LOG_LEVEL)
    level = logging.DEBUG if debug else config.LOG_LEVEL
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


class CallbackHandler(logging.Handler):
    """将日志记录格式化后转发给调用方提供的回调

    使用示例:
        handler = CallbackHandler(messages.append)
        logging.getLogger(PACKAGE_LOGGER).addHandler(handler)
    """

    def __init__(self, callback: Callable[[str], Any], level: int = logging.NOTSET):
        super().__init__(level)
        self.callback = callback
        self.setFormatter(logging.Formatter(_LOG_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.callback(self.format(record))
        except Exception:
            self.handleError(record)


def shorten_expr(expr: str, length: int | None = None) -> str:
    """截断表达式用于日志"""
    limit = length or config.LOG_MAX_EXPR_LEN
    if len(expr) <= limit:
        return expr
    return expr[:limit] + "…"


def format_hash_log(module: str, hash_code: str, msg: str) -> str:
    """格式化带 hash 的日志消息

    Args:
        module: 模块名
        hash_code: 表达式 hash
        msg: 日志消息

    Returns:
        格式化的消息: [module:hash] msg
    """
    return f"[{module}:{hash_code or '???'}] {msg}"


class Metrics:
    """指标收集 facade

    提供简单的计数器和 gauge 接口，内存存储。
    """

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "processor.buffered"）
            labels: 可选标签（如 {"mode": "block"}）
            value: 递增值，默认 1
        """
        if not config.METRICS_ENABLED:
            return
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """设置 gauge 值"""
        if not config.METRICS_ENABLED:
            return
        key = self._make_key(name, labels)
        self._gauges[key] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """获取计数器值（用于测试）"""
        key = self._make_key(name, labels)
        return self._counters.get(key, 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """获取 gauge 值（用于测试）"""
        key = self._make_key(name, labels)
        return self._gauges.get(key, 0.0)

    def reset(self) -> None:
        """重置所有指标（用于测试）"""
        self._counters.clear()
        self._gauges.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def get_all_counters(self) -> dict[str, int]:
        """获取所有计数器（用于调试）"""
        return dict(self._counters)

    def get_all_gauges(self) -> dict[str, float]:
        """获取所有 gauge（用于调试）"""
        return dict(self._gauges)


# 全局指标实例
metrics = Metrics()
