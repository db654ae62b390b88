"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade，便于观测性追踪。

日志格式: [module:HxW] msg
指标示例: dump.write, dump.read, dump.error, screen.restore
"""

import logging
from typing import TYPE_CHECKING

from .config import LOG_LEVEL

if TYPE_CHECKING:
    from .window.types import Window

# 全局日志配置
_LOG_FORMAT = "[%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）

    Returns:
        配置好的 Logger 实例
    """
    logger = logging.getLogger(name)
    return logger


def configure_logging(level: str | None = None) -> None:
    """为 termsnap logger 安装默认 handler（应用入口调用，库代码不调用）"""
    root = logging.getLogger("termsnap")
    root.setLevel(level or LOG_LEVEL)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)


def format_window_log(module: str, window: "Window | None", msg: str) -> str:
    """格式化带窗口尺寸的日志消息

    Args:
        module: 模块名
        window: 窗口（可为 None）
        msg: 日志消息

    Returns:
        格式化的消息: [module:HxW] msg
    """
    shape = f"{window.height}x{window.width}" if window is not None else "none"
    return f"[{module}:{shape}] {msg}"


class Metrics:
    """指标收集 facade

    提供简单的计数器接口。
    当前实现为内存存储，可扩展为 Prometheus/StatsD 等。
    """

    def __init__(self):
        self._counters: dict[str, int] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "dump.error"）
            labels: 可选标签（如 {"op": "read"}）
            value: 递增值，默认 1
        """
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """获取计数器值（用于测试）"""
        key = self._make_key(name, labels)
        return self._counters.get(key, 0)

    def reset(self) -> None:
        """重置所有指标（用于测试）"""
        self._counters.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        """生成指标 key"""
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


# 全局指标实例
metrics = Metrics()
