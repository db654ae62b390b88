"""Pytest 配置"""

import pytest

from termsnap.telemetry import metrics
from termsnap.window.engine import MemoryEngine


@pytest.fixture
def engine():
    """独立的内存引擎，便于检查泄漏"""
    return MemoryEngine()


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()
